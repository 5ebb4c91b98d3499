"""Core module containing data types, errors and interfaces."""

from .errors import GTAuditError, ConfigError, InputError
from .types import (
    AuditConfig,
    AuditResult,
    AuditSummary,
    Box,
    Correspondence,
    FlaggedImage,
    GateResult,
    ImageRecord,
    Issue,
    IssueType,
    MatchedPair,
    Severity,
    SkippedImage,
    DEFAULT_SEVERITY,
)
from .interfaces import DatasetInterface, DetectorInterface, ReporterInterface

__all__ = [
    "GTAuditError",
    "ConfigError",
    "InputError",
    "AuditConfig",
    "AuditResult",
    "AuditSummary",
    "Box",
    "Correspondence",
    "FlaggedImage",
    "GateResult",
    "ImageRecord",
    "Issue",
    "IssueType",
    "MatchedPair",
    "Severity",
    "SkippedImage",
    "DEFAULT_SEVERITY",
    "DatasetInterface",
    "DetectorInterface",
    "ReporterInterface",
]
