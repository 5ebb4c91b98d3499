"""
Tests for issue classification.
"""

from gt_audit.core.types import Box, Correspondence, IssueType, MatchedPair, Severity
from gt_audit.evaluation.classifier import classify
from gt_audit.evaluation.equivalence import ClassEquivalenceResolver
from gt_audit.evaluation.matcher import match


def gt(cls, cx=0.5, cy=0.5, w=0.2, h=0.2, line_num=None):
    return Box(class_id=cls, cx=cx, cy=cy, w=w, h=h, line_num=line_num)


def det(cls, cx=0.5, cy=0.5, w=0.2, h=0.2, conf=0.9, explanation=None):
    return Box(class_id=cls, cx=cx, cy=cy, w=w, h=h, confidence=conf, explanation=explanation)


def run(ground_truth, detections, **kwargs):
    correspondence = match(ground_truth, detections)
    return classify("img.jpg", ground_truth, detections, correspondence, **kwargs)


class TestClassify:
    """Test classify()."""

    def test_clean_image(self):
        """Test agreeing boxes produce no issues."""
        assert run([gt("cat")], [det("cat")]) == []

    def test_empty_image(self):
        """Test an image with nothing in it produces no issues."""
        assert run([], []) == []

    def test_class_mismatch(self):
        """Test a matched pair with different classes."""
        issues = run([gt("cat", line_num=3)], [det("dog", conf=0.87)])
        assert len(issues) == 1
        issue = issues[0]
        assert issue.type == IssueType.CLASS_MISMATCH
        assert issue.severity == Severity.HIGH
        assert issue.gt_class == "cat"
        assert issue.detected_class == "dog"
        assert issue.iou == 1.0
        assert issue.confidence == 0.87
        assert issue.line_num == 3
        assert issue.description == "Region labeled 'cat' detected as 'dog' (confidence: 87.0%)"

    def test_missing_label(self):
        """Test an unmatched detection."""
        issues = run([], [det("dog", explanation="dog-like shape")])
        assert len(issues) == 1
        assert issues[0].type == IssueType.MISSING_LABEL
        assert issues[0].severity == Severity.MEDIUM
        assert issues[0].gt_class is None
        assert issues[0].detected_class == "dog"
        assert issues[0].explanation == "dog-like shape"

    def test_spurious_label(self):
        """Test an unmatched ground truth box."""
        issues = run([gt("cat", line_num=1)], [])
        assert len(issues) == 1
        assert issues[0].type == IssueType.SPURIOUS_LABEL
        assert issues[0].severity == Severity.LOW
        assert issues[0].detected_class is None
        assert issues[0].line_num == 1
        assert issues[0].description == "Label 'cat' has no supporting detection"

    def test_discarded_detection_produces_nothing(self):
        """Test detections under the confidence floor are never reported."""
        ground_truth = []
        detections = [det("dog", conf=0.1)]
        correspondence = match(ground_truth, detections, confidence_threshold=0.25)
        assert classify("img.jpg", ground_truth, detections, correspondence) == []

    def test_equivalent_classes(self):
        """Test grouped classes do not mismatch."""
        resolver = ClassEquivalenceResolver([["car", "automobile"]])
        assert run([gt("car")], [det("automobile")], same_class=resolver.same_class) == []
        issues = run([gt("car")], [det("truck")], same_class=resolver.same_class)
        assert [i.type for i in issues] == [IssueType.CLASS_MISMATCH]

    def test_localization(self):
        """Test same-class matches under the localization bar."""
        ground_truth = [gt("cat")]
        detections = [det("cat", cx=0.53)]
        issues = run(ground_truth, detections, localization_iou_threshold=0.9)
        assert len(issues) == 1
        assert issues[0].type == IssueType.LOCALIZATION
        assert issues[0].severity == Severity.LOW
        assert issues[0].iou < 0.9

    def test_localization_disabled_by_default(self):
        """Test loose boxes are not flagged without a threshold."""
        assert run([gt("cat")], [det("cat", cx=0.53)]) == []

    def test_mismatch_excludes_localization(self):
        """Test a pair is never both a mismatch and a localization issue."""
        issues = run([gt("cat")], [det("dog", cx=0.53)], localization_iou_threshold=0.9)
        assert [i.type for i in issues] == [IssueType.CLASS_MISMATCH]

    def test_severity_overrides(self):
        """Test configured severities replace the defaults."""
        issues = run([gt("cat")], [det("dog")], severities={IssueType.CLASS_MISMATCH: Severity.LOW})
        assert issues[0].severity == Severity.LOW

    def test_issue_order(self):
        """Test matched pairs first, then missing, then spurious."""
        ground_truth = [gt("cat", cx=0.2, cy=0.2), gt("bird", cx=0.8, cy=0.8)]
        detections = [det("dog", cx=0.5, cy=0.9), det("dog", cx=0.2, cy=0.2), det("fox", cx=0.5, cy=0.1)]
        issues = run(ground_truth, detections)
        assert [i.type for i in issues] == [
            IssueType.CLASS_MISMATCH,
            IssueType.MISSING_LABEL,
            IssueType.MISSING_LABEL,
            IssueType.SPURIOUS_LABEL,
        ]
        assert [i.detected_class for i in issues[1:3]] == ["dog", "fox"]
        assert issues[3].gt_class == "bird"

    def test_explicit_correspondence(self):
        """Test classification works from a hand-built correspondence."""
        ground_truth = [gt("cat")]
        detections = [det("dog")]
        correspondence = Correspondence(matches=(MatchedPair(0, 0, 0.75),))
        issues = classify("x.jpg", ground_truth, detections, correspondence)
        assert issues[0].image_id == "x.jpg"
        assert issues[0].iou == 0.75
