"""Matching, classification and aggregation of audit issues."""

from .metrics import iou, iou_matrix
from .equivalence import ClassEquivalenceResolver
from .matcher import filter_by_confidence, match
from .classifier import classify
from .sampler import sample
from .aggregator import AuditAggregator, evaluate_gate, finalize, fold, merge, merge_all, record_skip
from .auditor import Auditor, ImageAudit
from .report_generator import ReportGenerator

__all__ = [
    "iou",
    "iou_matrix",
    "ClassEquivalenceResolver",
    "filter_by_confidence",
    "match",
    "classify",
    "sample",
    "AuditAggregator",
    "evaluate_gate",
    "finalize",
    "fold",
    "merge",
    "merge_all",
    "record_skip",
    "Auditor",
    "ImageAudit",
    "ReportGenerator",
]
