"""Utility functions for the audit engine."""

from .file_utils import FileUtils
from .config_utils import ConfigUtils
from .logging_utils import setup_logging

__all__ = [
    "FileUtils",
    "ConfigUtils",
    "setup_logging",
]
