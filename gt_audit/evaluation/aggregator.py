"""
Fold per-image issues into a dataset summary and evaluate the CI gate.

Folding is purely additive, so partial summaries built by different
workers can be merged in any grouping and order. ``finalize`` sorts the
flagged image list, which makes the finalized summary independent of the
order images were folded in.
"""

import logging
from typing import Iterable, Optional, Sequence

from ..core.types import (
    AuditSummary,
    FlaggedImage,
    GateResult,
    Issue,
    IssueType,
    Severity,
    SkippedImage,
)

logger = logging.getLogger(__name__)


def _check_open(summary: AuditSummary) -> None:
    if summary.finalized:
        raise RuntimeError("AuditSummary is finalized and can no longer be updated")


def fold(summary: AuditSummary,
         image_id: str,
         issues: Sequence[Issue],
         gt_count: int = 0,
         detection_count: int = 0) -> AuditSummary:
    """
    Add one audited image to the summary in place.

    Args:
        summary: Summary being built
        image_id: Audited image
        issues: Issues found in the image (may be empty)
        gt_count: Number of ground truth boxes in the image
        detection_count: Number of detections kept for matching

    Returns:
        The same summary, for chaining
    """
    _check_open(summary)
    summary.images_audited += 1
    summary.total_issues += len(issues)
    for issue in issues:
        summary.by_severity[issue.severity] = summary.by_severity.get(issue.severity, 0) + 1
        summary.by_type[issue.type] = summary.by_type.get(issue.type, 0) + 1
    if issues:
        summary.images_with_issues += 1
        summary.flagged_images.append(FlaggedImage(
            image_id=image_id,
            issues=list(issues),
            gt_count=gt_count,
            detection_count=detection_count,
        ))
    return summary


def record_skip(summary: AuditSummary, image_id: str, reason: str) -> AuditSummary:
    """Record an image that could not be audited."""
    _check_open(summary)
    summary.skipped_images.append(SkippedImage(image_id=image_id, reason=reason))
    return summary


def merge(a: AuditSummary, b: AuditSummary) -> AuditSummary:
    """Combine two partial summaries into a new one."""
    merged = AuditSummary(
        total_images=max(a.total_images, b.total_images),
        images_audited=a.images_audited + b.images_audited,
        images_with_issues=a.images_with_issues + b.images_with_issues,
        total_issues=a.total_issues + b.total_issues,
    )
    for severity in Severity:
        merged.by_severity[severity] = a.by_severity.get(severity, 0) + b.by_severity.get(severity, 0)
    for issue_type in IssueType:
        merged.by_type[issue_type] = a.by_type.get(issue_type, 0) + b.by_type.get(issue_type, 0)
    merged.flagged_images = list(a.flagged_images) + list(b.flagged_images)
    merged.skipped_images = list(a.skipped_images) + list(b.skipped_images)
    return merged


def merge_all(summaries: Iterable[AuditSummary], total_images: int = 0) -> AuditSummary:
    result = AuditSummary(total_images=total_images)
    for partial in summaries:
        result = merge(result, partial)
    return result


def evaluate_gate(summary: AuditSummary,
                  fail_on_high: Optional[int] = None,
                  fail_on_medium: Optional[int] = None) -> GateResult:
    """
    Compare severity counts against CI thresholds.

    Unconfigured thresholds never fail the run.
    """
    violations = []
    if fail_on_high is not None and summary.high_count > fail_on_high:
        violations.append(
            f"High severity issues ({summary.high_count}) exceed threshold ({fail_on_high})"
        )
    if fail_on_medium is not None and summary.medium_count > fail_on_medium:
        violations.append(
            f"Medium severity issues ({summary.medium_count}) exceed threshold ({fail_on_medium})"
        )
    return GateResult(
        passed=not violations,
        violations=tuple(violations),
        checked=fail_on_high is not None or fail_on_medium is not None,
    )


def finalize(summary: AuditSummary,
             fail_on_high: Optional[int] = None,
             fail_on_medium: Optional[int] = None) -> GateResult:
    """
    Freeze the summary and return the CI verdict.

    Flagged images are ordered by issue count (descending) then image id.
    """
    if not summary.finalized:
        summary.flagged_images.sort(key=lambda img: (-len(img.issues), img.image_id))
        summary.skipped_images.sort(key=lambda img: img.image_id)
        summary.finalized = True

    gate = evaluate_gate(summary, fail_on_high, fail_on_medium)
    for violation in gate.violations:
        logger.warning("CI gate: %s", violation)
    return gate


class AuditAggregator:
    """Single owner of the running summary during an audit run."""

    def __init__(self, total_images: int = 0):
        self.summary = AuditSummary(total_images=total_images)

    def add(self, image_id: str, issues: Sequence[Issue],
            gt_count: int = 0, detection_count: int = 0) -> None:
        fold(self.summary, image_id, issues, gt_count, detection_count)

    def skip(self, image_id: str, reason: str) -> None:
        record_skip(self.summary, image_id, reason)

    def absorb(self, partial: AuditSummary) -> None:
        """Merge a worker's partial summary into the running one."""
        _check_open(self.summary)
        self.summary = merge(self.summary, partial)

    def finalize(self, fail_on_high: Optional[int] = None,
                 fail_on_medium: Optional[int] = None) -> GateResult:
        return finalize(self.summary, fail_on_high, fail_on_medium)
