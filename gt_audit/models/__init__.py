"""Detection sources for the audit engine."""

from .detector import PredictionLabelDetector, UltralyticsDetector

__all__ = [
    "PredictionLabelDetector",
    "UltralyticsDetector",
]
