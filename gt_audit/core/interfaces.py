"""
Core interfaces defining the collaborator boundaries of the audit engine.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List

from .types import AuditResult, Box


class DatasetInterface(ABC):
    """Abstract interface for ground truth datasets."""

    @abstractmethod
    def get_image_ids(self) -> List[str]:
        """Return every image id in a stable order."""
        pass

    @abstractmethod
    def get_image_path(self, image_id: str) -> Path:
        """Return the image file for an image id."""
        pass

    @abstractmethod
    def load_annotations(self, image_id: str) -> List[Box]:
        """Load ground truth boxes for one image."""
        pass

    @abstractmethod
    def get_class_names(self) -> Dict[int, str]:
        """Return the class id to class name mapping."""
        pass


class DetectorInterface(ABC):
    """Abstract interface for detection sources."""

    name: str = "detector"

    @abstractmethod
    def detect(self, image_path: Path) -> List[Box]:
        """Return detections for a single image."""
        pass


class ReporterInterface(ABC):
    """Abstract interface for report writers."""

    @abstractmethod
    def generate(self, result: AuditResult, output_path: str) -> None:
        """Render an audit result to a file."""
        pass
