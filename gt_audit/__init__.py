"""
Ground Truth Audit

Finds likely annotation errors in object detection datasets by comparing
ground truth labels against model detections. Reports class mismatches,
missing labels, spurious labels and loose boxes, with a CI gate on
severity counts.
"""

__version__ = "0.1.0"
__author__ = "GT Audit Team"

from .core.types import AuditConfig, AuditResult, AuditSummary, Box, Issue, IssueType, Severity
from .data.dataset import YoloDataset
from .evaluation.auditor import Auditor
from .evaluation.report_generator import ReportGenerator

__all__ = [
    "AuditConfig",
    "AuditResult",
    "AuditSummary",
    "Box",
    "Issue",
    "IssueType",
    "Severity",
    "YoloDataset",
    "Auditor",
    "ReportGenerator",
]
