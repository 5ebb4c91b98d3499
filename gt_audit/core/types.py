"""
Core data types for the ground truth audit engine.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from .errors import ConfigError, InputError


class Severity(str, Enum):
    """Ordinal urgency of an issue (high > medium > low)."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {Severity.HIGH: 2, Severity.MEDIUM: 1, Severity.LOW: 0}


class IssueType(str, Enum):
    """Kinds of disagreement between ground truth and detections."""
    CLASS_MISMATCH = "class_mismatch"
    MISSING_LABEL = "missing_label"
    SPURIOUS_LABEL = "spurious_label"
    LOCALIZATION = "localization"

    def __str__(self) -> str:
        return self.value


# Fixed default severity per issue type
DEFAULT_SEVERITY: Dict[IssueType, Severity] = {
    IssueType.CLASS_MISMATCH: Severity.HIGH,
    IssueType.MISSING_LABEL: Severity.MEDIUM,
    IssueType.SPURIOUS_LABEL: Severity.LOW,
    IssueType.LOCALIZATION: Severity.LOW,
}


@dataclass(frozen=True)
class Box:
    """Axis-aligned box in normalized center form."""
    class_id: str                            # class name / identifier
    cx: float                                # x center, normalized
    cy: float                                # y center, normalized
    w: float                                 # width, normalized
    h: float                                 # height, normalized
    confidence: Optional[float] = None       # set on detections, None on ground truth
    line_num: Optional[int] = None           # 1-based line in the source label file
    explanation: Optional[str] = None        # opaque text attached by the detector

    def __post_init__(self):
        """Validate box geometry."""
        coords = (self.cx, self.cy, self.w, self.h)
        if not all(math.isfinite(c) for c in coords):
            raise InputError(f"Box coordinates must be finite, got {coords}")
        if self.w <= 0 or self.h <= 0:
            raise InputError(
                f"Box width and height must be positive, got w={self.w}, h={self.h}"
            )
        if self.confidence is not None and not (0.0 <= self.confidence <= 1.0):
            raise InputError(f"Confidence must be between 0 and 1, got {self.confidence}")

    @property
    def is_detection(self) -> bool:
        return self.confidence is not None

    def to_dict(self) -> Dict:
        data = {
            "class_id": self.class_id,
            "cx": self.cx,
            "cy": self.cy,
            "w": self.w,
            "h": self.h,
        }
        if self.confidence is not None:
            data["confidence"] = self.confidence
        return data


@dataclass
class ImageRecord:
    """Ground truth and detections for one audited image."""
    image_id: str
    gt_boxes: Sequence[Box] = field(default_factory=list)
    detections: Sequence[Box] = field(default_factory=list)
    image_path: Optional[str] = None


@dataclass(frozen=True)
class MatchedPair:
    """One committed GT/detection pairing."""
    gt_index: int
    det_index: int
    iou: float


@dataclass(frozen=True)
class Correspondence:
    """Matcher output for a single image.

    Every GT index and every detection index appears in at most one matched
    pair. Detections below the confidence floor are listed in
    ``discarded_det`` and nowhere else.
    """
    matches: Tuple[MatchedPair, ...] = ()
    unmatched_gt: Tuple[int, ...] = ()
    unmatched_det: Tuple[int, ...] = ()
    discarded_det: Tuple[int, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (self.matches or self.unmatched_gt or self.unmatched_det)


@dataclass(frozen=True)
class Issue:
    """A single discrepancy found in one image."""
    image_id: str
    type: IssueType
    severity: Severity
    gt_class: Optional[str] = None
    detected_class: Optional[str] = None
    iou: Optional[float] = None
    confidence: Optional[float] = None
    description: str = ""
    explanation: Optional[str] = None
    line_num: Optional[int] = None

    def to_dict(self) -> Dict:
        """Serialize, leaving out unset optional fields."""
        data = {
            "image_id": self.image_id,
            "type": self.type.value,
            "severity": self.severity.value,
            "description": self.description,
        }
        optional = {
            "gt_class": self.gt_class,
            "detected_class": self.detected_class,
            "iou": None if self.iou is None else round(self.iou, 4),
            "confidence": None if self.confidence is None else round(self.confidence, 4),
            "explanation": self.explanation,
            "line_num": self.line_num,
        }
        data.update({k: v for k, v in optional.items() if v is not None})
        return data


@dataclass
class FlaggedImage:
    """An image that produced at least one issue."""
    image_id: str
    issues: List[Issue]
    gt_count: int = 0
    detection_count: int = 0

    def count(self, severity: Severity) -> int:
        return sum(1 for issue in self.issues if issue.severity == severity)

    @property
    def worst_severity(self) -> Severity:
        return max((issue.severity for issue in self.issues), key=lambda s: s.rank)

    def to_dict(self) -> Dict:
        return {
            "image_id": self.image_id,
            "gt_count": self.gt_count,
            "detection_count": self.detection_count,
            "issues": [issue.to_dict() for issue in self.issues],
        }


@dataclass
class SkippedImage:
    """An image rejected before matching."""
    image_id: str
    reason: str

    def to_dict(self) -> Dict:
        return {"image_id": self.image_id, "reason": self.reason}


@dataclass
class AuditSummary:
    """Dataset-wide issue counts. Built by folding per-image results."""
    total_images: int = 0
    images_audited: int = 0
    images_with_issues: int = 0
    total_issues: int = 0
    by_severity: Dict[Severity, int] = field(
        default_factory=lambda: {s: 0 for s in Severity}
    )
    by_type: Dict[IssueType, int] = field(
        default_factory=lambda: {t: 0 for t in IssueType}
    )
    flagged_images: List[FlaggedImage] = field(default_factory=list)
    skipped_images: List[SkippedImage] = field(default_factory=list)
    finalized: bool = False

    @property
    def high_count(self) -> int:
        return self.by_severity.get(Severity.HIGH, 0)

    @property
    def medium_count(self) -> int:
        return self.by_severity.get(Severity.MEDIUM, 0)

    @property
    def low_count(self) -> int:
        return self.by_severity.get(Severity.LOW, 0)

    def issues_by_type(self) -> List[Tuple[str, int]]:
        """Issue type counts, most frequent first."""
        items = [(t.value, n) for t, n in self.by_type.items()]
        return sorted(items, key=lambda item: (-item[1], item[0]))

    def counts_dict(self) -> Dict:
        """Scalar and map fields only."""
        return {
            "total_images": self.total_images,
            "images_audited": self.images_audited,
            "images_with_issues": self.images_with_issues,
            "total_issues": self.total_issues,
            "by_severity": {s.value: self.by_severity.get(s, 0) for s in Severity},
            "by_type": {t.value: self.by_type.get(t, 0) for t in IssueType},
        }

    def to_dict(self) -> Dict:
        data = self.counts_dict()
        data["flagged_images"] = [img.to_dict() for img in self.flagged_images]
        data["skipped_images"] = [img.to_dict() for img in self.skipped_images]
        return data


@dataclass(frozen=True)
class GateResult:
    """CI gate verdict."""
    passed: bool
    violations: Tuple[str, ...] = ()
    checked: bool = False                    # any threshold configured

    @property
    def status(self) -> str:
        return "pass" if self.passed else "fail"

    @property
    def exit_code(self) -> int:
        return 0 if self.passed else 1


@dataclass(frozen=True)
class AuditConfig:
    """Audit run configuration. Loaded once, never mutated."""
    confidence_threshold: float = 0.25       # detections below are discarded
    iou_threshold: float = 0.5               # minimum IoU for a valid match
    localization_iou_threshold: Optional[float] = None  # same-class matches below are flagged
    class_groups: Tuple[Tuple[str, ...], ...] = ()      # equivalence groups
    sample_size: int = 0                     # 0 = audit every image
    sample_seed: int = 42                    # seed for sampling
    fail_on_high: Optional[int] = None       # max tolerated high severity issues
    fail_on_medium: Optional[int] = None     # max tolerated medium severity issues
    severity_overrides: Dict[IssueType, Severity] = field(default_factory=dict)
    ignore_case: bool = False                # case-fold class ids before grouping
    workers: int = 1                         # parallel per-image workers

    def __post_init__(self):
        """Validate configuration."""
        for name in ("confidence_threshold", "iou_threshold"):
            value = getattr(self, name)
            if not (0.0 <= value <= 1.0):
                raise ConfigError(f"{name} must be between 0 and 1, got {value}")
        if self.localization_iou_threshold is not None:
            if not (0.0 <= self.localization_iou_threshold <= 1.0):
                raise ConfigError(
                    "localization_iou_threshold must be between 0 and 1, "
                    f"got {self.localization_iou_threshold}"
                )
            if self.localization_iou_threshold < self.iou_threshold:
                raise ConfigError(
                    f"localization_iou_threshold ({self.localization_iou_threshold}) "
                    f"must be >= iou_threshold ({self.iou_threshold})"
                )
        if self.sample_size < 0:
            raise ConfigError(f"sample_size must be non-negative, got {self.sample_size}")
        for name in ("fail_on_high", "fail_on_medium"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise ConfigError(f"{name} must be non-negative, got {value}")
        if self.workers <= 0:
            raise ConfigError(f"workers must be positive, got {self.workers}")

        groups = self.class_groups or ()
        if isinstance(groups, (str, bytes)) or not isinstance(groups, (list, tuple)):
            raise ConfigError(f"class_groups must be a list of lists, got {groups!r}")
        normalized_groups = []
        for group in groups:
            if isinstance(group, (str, bytes)) or not isinstance(group, (list, tuple)):
                raise ConfigError(f"Each class group must be a list of class names, got {group!r}")
            normalized_groups.append(tuple(group))
        object.__setattr__(self, "class_groups", tuple(normalized_groups))

        overrides = {}
        for issue_type, severity in (self.severity_overrides or {}).items():
            try:
                overrides[IssueType(issue_type)] = Severity(severity)
            except ValueError:
                raise ConfigError(
                    f"Invalid severity override {issue_type!r}: {severity!r}"
                ) from None
        object.__setattr__(self, "severity_overrides", overrides)

    def severity_for(self, issue_type: IssueType) -> Severity:
        return self.severity_overrides.get(issue_type, DEFAULT_SEVERITY[issue_type])


@dataclass
class AuditResult:
    """Everything one audit run produces."""
    summary: AuditSummary
    gate: GateResult
    config: AuditConfig
    dataset_path: str = ""
    method: str = ""
    generated_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    elapsed_seconds: float = 0.0
