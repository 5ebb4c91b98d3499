"""Dataset loading for YOLO format ground truth."""

from .dataset import YoloDataset

__all__ = [
    "YoloDataset",
]
