"""
Turn a per-image correspondence into typed, severity-tagged issues.
"""

from typing import Callable, Dict, List, Optional, Sequence

from ..core.types import Box, Correspondence, DEFAULT_SEVERITY, Issue, IssueType, Severity

SameClassFn = Callable[[str, str], bool]


def _exact_same_class(a: str, b: str) -> bool:
    return a == b


def classify(image_id: str,
             gt_boxes: Sequence[Box],
             detections: Sequence[Box],
             correspondence: Correspondence,
             same_class: Optional[SameClassFn] = None,
             localization_iou_threshold: Optional[float] = None,
             severities: Optional[Dict[IssueType, Severity]] = None) -> List[Issue]:
    """
    Classify the correspondence of one image into issues.

    A matched pair yields at most one issue: ``class_mismatch`` when the
    classes are not equivalent, otherwise ``localization`` when its IoU is
    under ``localization_iou_threshold``. Unmatched detections become
    ``missing_label`` issues and unmatched ground truth boxes become
    ``spurious_label`` issues.

    Args:
        image_id: Image the boxes belong to
        gt_boxes: Ground truth boxes
        detections: Detected boxes
        correspondence: Matcher output for these boxes
        same_class: Class equivalence predicate (exact equality if None)
        localization_iou_threshold: Optional stricter IoU bar for same-class matches
        severities: Severity per issue type (defaults if None)

    Returns:
        Issues in order: matched pairs, missing labels, spurious labels
    """
    same_class = same_class or _exact_same_class
    severity_of = dict(DEFAULT_SEVERITY)
    if severities:
        severity_of.update(severities)

    issues: List[Issue] = []

    for pair in correspondence.matches:
        gt = gt_boxes[pair.gt_index]
        det = detections[pair.det_index]
        if not same_class(gt.class_id, det.class_id):
            issues.append(Issue(
                image_id=image_id,
                type=IssueType.CLASS_MISMATCH,
                severity=severity_of[IssueType.CLASS_MISMATCH],
                gt_class=gt.class_id,
                detected_class=det.class_id,
                iou=pair.iou,
                confidence=det.confidence,
                description=_describe_mismatch(gt, det),
                explanation=det.explanation,
                line_num=gt.line_num,
            ))
        elif localization_iou_threshold is not None and pair.iou < localization_iou_threshold:
            issues.append(Issue(
                image_id=image_id,
                type=IssueType.LOCALIZATION,
                severity=severity_of[IssueType.LOCALIZATION],
                gt_class=gt.class_id,
                detected_class=det.class_id,
                iou=pair.iou,
                confidence=det.confidence,
                description=(
                    f"Box for '{gt.class_id}' is loosely placed "
                    f"(IoU {pair.iou:.2f} < {localization_iou_threshold:.2f})"
                ),
                explanation=det.explanation,
                line_num=gt.line_num,
            ))

    for det_index in correspondence.unmatched_det:
        det = detections[det_index]
        issues.append(Issue(
            image_id=image_id,
            type=IssueType.MISSING_LABEL,
            severity=severity_of[IssueType.MISSING_LABEL],
            detected_class=det.class_id,
            confidence=det.confidence,
            description=_describe_missing(det),
            explanation=det.explanation,
        ))

    for gt_index in correspondence.unmatched_gt:
        gt = gt_boxes[gt_index]
        issues.append(Issue(
            image_id=image_id,
            type=IssueType.SPURIOUS_LABEL,
            severity=severity_of[IssueType.SPURIOUS_LABEL],
            gt_class=gt.class_id,
            description=f"Label '{gt.class_id}' has no supporting detection",
            line_num=gt.line_num,
        ))

    return issues


def _describe_mismatch(gt: Box, det: Box) -> str:
    text = f"Region labeled '{gt.class_id}' detected as '{det.class_id}'"
    if det.confidence is not None:
        text += f" (confidence: {det.confidence * 100:.1f}%)"
    return text


def _describe_missing(det: Box) -> str:
    text = f"Unlabeled '{det.class_id}' object detected"
    if det.confidence is not None:
        text += f" (confidence: {det.confidence * 100:.1f}%)"
    return text
