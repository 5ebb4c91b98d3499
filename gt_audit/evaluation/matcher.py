"""
One-to-one matching of ground truth boxes to detections.
"""

from typing import List, Sequence, Set, Tuple

from ..core.types import Box, Correspondence, MatchedPair
from .metrics import iou_matrix


def filter_by_confidence(detections: Sequence[Box],
                         confidence_threshold: float) -> Tuple[List[int], List[int]]:
    """
    Split detection indices by the confidence floor.

    Args:
        detections: Detected boxes
        confidence_threshold: Minimum confidence to keep a detection

    Returns:
        Tuple of (kept indices, discarded indices). Detections without a
        confidence are kept.
    """
    kept, discarded = [], []
    for idx, det in enumerate(detections):
        if det.confidence is not None and det.confidence < confidence_threshold:
            discarded.append(idx)
        else:
            kept.append(idx)
    return kept, discarded


def match(gt_boxes: Sequence[Box],
          detections: Sequence[Box],
          confidence_threshold: float = 0.25,
          iou_threshold: float = 0.5) -> Correspondence:
    """
    Greedy IoU-ranked matching of ground truth boxes to detections.

    Matching is purely geometric; class agreement is judged afterwards by
    the classifier. Eligible pairs (IoU >= iou_threshold) are ranked by IoU
    descending, ties broken by GT index then detection index, and committed
    in one pass whenever neither side is already taken.

    Args:
        gt_boxes: Ground truth boxes
        detections: Detected boxes (indices refer to this sequence)
        confidence_threshold: Detections below this are discarded
        iou_threshold: Minimum IoU for a valid match

    Returns:
        Correspondence with matched pairs in commit order
    """
    kept, discarded = filter_by_confidence(detections, confidence_threshold)

    candidates: List[Tuple[float, int, int]] = []
    if gt_boxes and kept:
        ious = iou_matrix(gt_boxes, [detections[i] for i in kept])
        for gi in range(len(gt_boxes)):
            for col, di in enumerate(kept):
                value = float(ious[gi, col])
                if value >= iou_threshold and value > 0.0:
                    candidates.append((value, gi, di))

    candidates.sort(key=lambda c: (-c[0], c[1], c[2]))

    used_gt: Set[int] = set()
    used_det: Set[int] = set()
    matches: List[MatchedPair] = []
    for value, gi, di in candidates:
        if gi in used_gt or di in used_det:
            continue
        used_gt.add(gi)
        used_det.add(di)
        matches.append(MatchedPair(gt_index=gi, det_index=di, iou=value))

    return Correspondence(
        matches=tuple(matches),
        unmatched_gt=tuple(i for i in range(len(gt_boxes)) if i not in used_gt),
        unmatched_det=tuple(i for i in kept if i not in used_det),
        discarded_det=tuple(discarded),
    )
