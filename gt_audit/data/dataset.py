"""
YOLO format dataset loading.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from ..core.errors import InputError
from ..core.interfaces import DatasetInterface
from ..core.types import Box
from ..utils.file_utils import FileUtils

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = ("jpg", "jpeg", "png", "webp", "bmp")
SPLITS = ("val", "train", "test", "")
CLASS_FILES = ("dataset.yaml", "data/dataset.yaml", "data.yaml")


class YoloDataset(DatasetInterface):
    """Ground truth dataset laid out in the YOLO images/labels convention."""

    def __init__(self, data_path: str, split: Optional[str] = None):
        """
        Initialize dataset.

        Args:
            data_path: Dataset root directory
            split: Force a split subdirectory (otherwise detected)
        """
        self.data_path = Path(data_path)
        if not self.data_path.is_dir():
            raise FileNotFoundError(f"Dataset directory not found: {self.data_path}")

        self.images_dir, self.labels_dir = self._detect_structure(split)
        self.class_names = self._load_class_names()
        self._images: Optional[Dict[str, Path]] = None

    def _detect_structure(self, split: Optional[str]) -> Tuple[Path, Path]:
        """Locate the image and label directories."""
        splits = (split,) if split is not None else SPLITS
        for name in splits:
            img_dir = self.data_path / "images" / name if name else self.data_path / "images"
            lbl_dir = self.data_path / "labels" / name if name else self.data_path / "labels"
            lbl_dir_alt = (
                self.data_path / "data" / name / "labels" if name else self.data_path / "data" / "labels"
            )

            if img_dir.is_dir():
                if lbl_dir.is_dir():
                    return img_dir, lbl_dir
                if lbl_dir_alt.is_dir():
                    return img_dir, lbl_dir_alt

        raise FileNotFoundError(
            f"Could not detect dataset structure in {self.data_path}. "
            "Expected images/ and labels/ directories."
        )

    def _load_class_names(self) -> Dict[int, str]:
        """Load class names from a dataset YAML file or classes.txt."""
        for rel_path in CLASS_FILES:
            yaml_path = self.data_path / rel_path
            if not yaml_path.exists():
                continue
            data = FileUtils.load_yaml(str(yaml_path)) or {}

            names = data.get("names") if isinstance(data, dict) else None
            class_names: Dict[int, str] = {}
            if isinstance(names, list):
                class_names = {i: str(name) for i, name in enumerate(names)}
            elif isinstance(names, dict):
                class_names = {int(k): str(v) for k, v in names.items()}

            if class_names:
                logger.debug(f"Loaded {len(class_names)} class names from {yaml_path}")
                return class_names

        txt_path = self.data_path / "classes.txt"
        if txt_path.exists():
            class_names = {}
            with open(txt_path, "r", encoding="utf-8") as f:
                for i, line in enumerate(f):
                    name = line.strip()
                    if name:
                        class_names[i] = name
            if class_names:
                return class_names

        logger.warning("No class names found, using class IDs")
        return {}

    def _index_images(self) -> Dict[str, Path]:
        if self._images is None:
            images = sorted(
                p for p in self.images_dir.iterdir()
                if p.is_file() and p.suffix.lower().lstrip(".") in IMAGE_EXTENSIONS
            )
            self._images = {p.name: p for p in images}
        return self._images

    def __len__(self) -> int:
        return len(self._index_images())

    def image_count(self) -> int:
        return len(self)

    def get_image_ids(self) -> List[str]:
        return list(self._index_images().keys())

    def get_image_path(self, image_id: str) -> Path:
        try:
            return self._index_images()[image_id]
        except KeyError:
            raise KeyError(f"Unknown image: {image_id}") from None

    def get_label_path(self, image_id: str) -> Path:
        return self.labels_dir / f"{Path(image_id).stem}.txt"

    def get_class_names(self) -> Dict[int, str]:
        return dict(self.class_names)

    def get_class_name(self, class_id: int) -> str:
        return self.class_names.get(class_id, f"class_{class_id}")

    def load_annotations(self, image_id: str) -> List[Box]:
        """
        Load ground truth boxes for one image.

        Args:
            image_id: Image file name

        Returns:
            Boxes in file order; empty when the label file is missing

        Raises:
            InputError: The label file is not UTF-8 text, or a line describes
                a box with non-positive size
        """
        label_path = self.get_label_path(image_id)
        if not label_path.exists():
            return []

        boxes = []
        try:
            with open(label_path, "r", encoding="utf-8") as f:
                for line_num, line in enumerate(f, start=1):
                    parts = line.split()
                    if not parts:
                        continue
                    if len(parts) < 5:
                        logger.warning(f"{label_path}:{line_num}: expected 5 fields, got {len(parts)}")
                        continue
                    try:
                        class_id = int(parts[0])
                        cx, cy, w, h = (float(v) for v in parts[1:5])
                    except ValueError:
                        logger.warning(f"{label_path}:{line_num}: could not parse '{line.strip()}'")
                        continue

                    try:
                        boxes.append(Box(
                            class_id=self.get_class_name(class_id),
                            cx=cx, cy=cy, w=w, h=h,
                            line_num=line_num,
                        ))
                    except InputError as e:
                        raise InputError(f"{label_path.name}:{line_num}: {e}", image_id=image_id) from e
        except UnicodeDecodeError as e:
            raise InputError(f"{label_path.name}: not valid UTF-8 ({e.reason})", image_id=image_id) from e

        return boxes

    def info(self) -> Dict:
        """Dataset overview for the info command."""
        return {
            "path": str(self.data_path),
            "images_dir": str(self.images_dir),
            "labels_dir": str(self.labels_dir),
            "images": self.image_count(),
            "classes": self.get_class_names(),
        }
