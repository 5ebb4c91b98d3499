"""
Pytest configuration and fixtures.
"""

import os
import tempfile

import pytest
import yaml

from gt_audit.core.types import AuditConfig, Box


@pytest.fixture
def sample_gt_box():
    """Sample ground truth box for testing."""
    return Box(class_id="cat", cx=0.5, cy=0.5, w=0.2, h=0.2, line_num=1)


@pytest.fixture
def sample_detection():
    """Sample detection for testing."""
    return Box(class_id="cat", cx=0.5, cy=0.5, w=0.2, h=0.2, confidence=0.9)


@pytest.fixture
def sample_config():
    """Sample audit configuration for testing."""
    return AuditConfig(
        confidence_threshold=0.25,
        iou_threshold=0.5,
        class_groups=[["car", "automobile"]],
        sample_seed=7,
    )


@pytest.fixture
def temp_dir():
    """Temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


# Image name -> (label lines, prediction lines). None means no file.
DATASET_FIXTURE = {
    "img1.jpg": (["0 0.5 0.5 0.2 0.2"], ["1 0.5 0.5 0.2 0.2 0.9"]),
    "img2.jpg": (None, ["0 0.3 0.3 0.1 0.1 0.8"]),
    "img3.jpg": (["2 0.7 0.7 0.1 0.1"], None),
    "img4.jpg": (["0 0.5 0.5 0.2 0.2"], ["0 0.5 0.5 0.2 0.2 0.95"]),
}


def write_yolo_dataset(root, images=None, class_names=("cat", "dog", "bird"), split="val"):
    """
    Write a small YOLO dataset plus a predictions directory.

    Args:
        root: Directory to write into
        images: Mapping of image name to (label lines, prediction lines)
        class_names: Names written to dataset.yaml (None to skip the file)
        split: Split subdirectory ("" for flat layout)

    Returns:
        Tuple of (dataset dir, predictions dir)
    """
    images = DATASET_FIXTURE if images is None else images
    dataset_dir = os.path.join(root, "dataset")
    image_dir = os.path.join(dataset_dir, "images", split)
    label_dir = os.path.join(dataset_dir, "labels", split)
    pred_dir = os.path.join(root, "predictions")
    for path in (image_dir, label_dir, pred_dir):
        os.makedirs(path, exist_ok=True)

    if class_names is not None:
        with open(os.path.join(dataset_dir, "dataset.yaml"), "w") as f:
            yaml.safe_dump({"names": list(class_names)}, f)

    for name, (labels, preds) in images.items():
        stem = os.path.splitext(name)[0]
        with open(os.path.join(image_dir, name), "wb") as f:
            f.write(b"")
        if labels is not None:
            with open(os.path.join(label_dir, f"{stem}.txt"), "w") as f:
                f.write("\n".join(labels) + "\n")
        if preds is not None:
            with open(os.path.join(pred_dir, f"{stem}.txt"), "w") as f:
                f.write("\n".join(preds) + "\n")

    return dataset_dir, pred_dir


@pytest.fixture
def yolo_dataset(temp_dir):
    """Four image dataset: one mismatch, one missing, one spurious, one clean."""
    return write_yolo_dataset(temp_dir)


@pytest.fixture
def dataset_factory(temp_dir):
    """Factory writing custom datasets into the temporary directory."""
    def factory(images, **kwargs):
        return write_yolo_dataset(temp_dir, images, **kwargs)
    return factory
