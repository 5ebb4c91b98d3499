"""
Error types for the audit engine.
"""


class GTAuditError(Exception):
    """Base class for all gt-audit errors."""


class ConfigError(GTAuditError, ValueError):
    """Invalid or ambiguous configuration. Fatal before any image is processed."""


class InputError(GTAuditError, ValueError):
    """An image's boxes or label files are unusable. The offending image is skipped."""

    def __init__(self, message: str, image_id: str = None):
        super().__init__(message)
        self.image_id = image_id
