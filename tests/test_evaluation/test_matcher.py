"""
Tests for greedy one-to-one matching.
"""

from hypothesis import given, settings, strategies as st

from gt_audit.core.types import Box, MatchedPair
from gt_audit.evaluation.matcher import filter_by_confidence, match


def gt(cx, cy, w=0.2, h=0.2, cls="cat"):
    return Box(class_id=cls, cx=cx, cy=cy, w=w, h=h)


def det(cx, cy, w=0.2, h=0.2, cls="cat", conf=0.9):
    return Box(class_id=cls, cx=cx, cy=cy, w=w, h=h, confidence=conf)


class TestFilterByConfidence:
    """Test the confidence floor."""

    def test_split(self):
        """Test detections are split at the threshold (inclusive)."""
        detections = [det(0.5, 0.5, conf=0.1), det(0.5, 0.5, conf=0.25), det(0.5, 0.5, conf=0.9)]
        kept, discarded = filter_by_confidence(detections, 0.25)
        assert kept == [1, 2]
        assert discarded == [0]

    def test_missing_confidence_is_kept(self):
        """Test boxes without confidence pass the floor."""
        kept, discarded = filter_by_confidence([gt(0.5, 0.5)], 0.9)
        assert kept == [0]
        assert discarded == []


class TestMatch:
    """Test match()."""

    def test_empty_inputs(self):
        """Test empty images give an empty correspondence."""
        result = match([], [])
        assert result.is_empty
        assert result.matches == ()

    def test_no_detections(self):
        """Test every GT is unmatched when there are no detections."""
        result = match([gt(0.5, 0.5), gt(0.2, 0.2)], [])
        assert result.unmatched_gt == (0, 1)
        assert result.unmatched_det == ()

    def test_perfect_match(self):
        """Test identical boxes match with IoU 1."""
        result = match([gt(0.5, 0.5)], [det(0.5, 0.5)])
        assert result.matches == (MatchedPair(gt_index=0, det_index=0, iou=1.0),)
        assert result.unmatched_gt == ()
        assert result.unmatched_det == ()

    def test_matching_ignores_class(self):
        """Test matching is purely geometric."""
        result = match([gt(0.5, 0.5, cls="cat")], [det(0.5, 0.5, cls="dog")])
        assert len(result.matches) == 1

    def test_below_iou_threshold(self):
        """Test pairs under the IoU threshold stay unmatched."""
        result = match([gt(0.5, 0.5)], [det(0.6, 0.5)], iou_threshold=0.5)
        assert result.matches == ()
        assert result.unmatched_gt == (0,)
        assert result.unmatched_det == (0,)

    def test_iou_threshold_is_inclusive(self):
        """Test a pair exactly at the threshold matches."""
        result = match([gt(0.5, 0.5)], [det(0.5, 0.5)], iou_threshold=1.0)
        assert len(result.matches) == 1

    def test_disjoint_never_match(self):
        """Test zero-overlap pairs do not match even at threshold 0."""
        result = match([gt(0.1, 0.1)], [det(0.9, 0.9)], iou_threshold=0.0)
        assert result.matches == ()

    def test_discarded_detections(self):
        """Test low confidence detections are listed only as discarded."""
        result = match([gt(0.5, 0.5)], [det(0.5, 0.5, conf=0.1)], confidence_threshold=0.25)
        assert result.matches == ()
        assert result.discarded_det == (0,)
        assert result.unmatched_det == ()
        assert result.unmatched_gt == (0,)

    def test_highest_iou_wins(self):
        """Test the best overlapping detection claims the GT."""
        ground_truth = [gt(0.5, 0.5)]
        detections = [det(0.53, 0.5), det(0.5, 0.5)]
        result = match(ground_truth, detections, iou_threshold=0.3)
        assert result.matches[0].det_index == 1
        assert result.unmatched_det == (0,)

    def test_one_to_one(self):
        """Test a detection cannot match two GT boxes."""
        ground_truth = [gt(0.5, 0.5), gt(0.5, 0.5)]
        result = match(ground_truth, [det(0.5, 0.5)])
        assert len(result.matches) == 1
        assert result.matches[0].gt_index == 0
        assert result.unmatched_gt == (1,)

    def test_tie_break_by_index(self):
        """Test equal IoU ties go to the lowest GT index, then detection index."""
        ground_truth = [gt(0.5, 0.5), gt(0.5, 0.5)]
        detections = [det(0.5, 0.5), det(0.5, 0.5)]
        result = match(ground_truth, detections)
        assert [(m.gt_index, m.det_index) for m in result.matches] == [(0, 0), (1, 1)]

    def test_greedy_not_optimal(self):
        """Test greedy commits the globally best pair even when that leaves fewer matches."""
        # GT0 takes D0; the only other candidates involve GT0 or D0
        ground_truth = [gt(0.5, 0.5, w=0.4, h=0.4), gt(0.75, 0.5, w=0.2, h=0.4)]
        detections = [det(0.55, 0.5, w=0.4, h=0.4), det(0.3, 0.5, w=0.2, h=0.4)]
        result = match(ground_truth, detections, iou_threshold=0.15)
        assert [(m.gt_index, m.det_index) for m in result.matches] == [(0, 0)]
        assert result.unmatched_gt == (1,)
        assert result.unmatched_det == (1,)

    def test_matches_in_commit_order(self):
        """Test matches are listed in descending IoU."""
        ground_truth = [gt(0.2, 0.2), gt(0.7, 0.7)]
        detections = [det(0.22, 0.2), det(0.7, 0.7)]
        result = match(ground_truth, detections)
        assert [m.gt_index for m in result.matches] == [1, 0]
        assert result.matches[0].iou >= result.matches[1].iou


coords = st.floats(min_value=0.0, max_value=1.0, allow_nan=False)
sizes = st.floats(min_value=0.01, max_value=0.5, allow_nan=False)
confs = st.floats(min_value=0.0, max_value=1.0, allow_nan=False)
gt_boxes = st.lists(st.builds(Box, class_id=st.just("a"), cx=coords, cy=coords, w=sizes, h=sizes),
                    max_size=8)
det_boxes = st.lists(st.builds(Box, class_id=st.just("a"), cx=coords, cy=coords, w=sizes, h=sizes,
                               confidence=confs), max_size=8)
thresholds = st.floats(min_value=0.0, max_value=1.0, allow_nan=False)


class TestMatchProperties:
    """Property tests for matcher invariants."""

    @settings(max_examples=200)
    @given(gt_boxes, det_boxes, thresholds, thresholds)
    def test_partition(self, ground_truth, detections, conf_thr, iou_thr):
        """Test every index lands in exactly one bucket and matches are unique."""
        result = match(ground_truth, detections, conf_thr, iou_thr)

        matched_gt = [m.gt_index for m in result.matches]
        matched_det = [m.det_index for m in result.matches]
        assert len(set(matched_gt)) == len(matched_gt)
        assert len(set(matched_det)) == len(matched_det)

        assert sorted(matched_gt + list(result.unmatched_gt)) == list(range(len(ground_truth)))
        all_det = matched_det + list(result.unmatched_det) + list(result.discarded_det)
        assert sorted(all_det) == list(range(len(detections)))

        for m in result.matches:
            assert m.iou >= iou_thr
            assert m.iou > 0.0
            assert detections[m.det_index].confidence >= conf_thr
        for i in result.discarded_det:
            assert detections[i].confidence < conf_thr

    @given(gt_boxes, det_boxes)
    def test_deterministic(self, ground_truth, detections):
        """Test repeated calls give identical output."""
        assert match(ground_truth, detections) == match(ground_truth, detections)
