"""
Box geometry and IoU utilities.
"""

from typing import Sequence, Tuple

import numpy as np

from ..core.types import Box


def to_xyxy(box: Box) -> Tuple[float, float, float, float]:
    """
    Convert a normalized center box to corner form.

    Args:
        box: Box in (cx, cy, w, h) form

    Returns:
        Tuple of (x1, y1, x2, y2)
    """
    x1 = box.cx - box.w / 2.0
    y1 = box.cy - box.h / 2.0
    x2 = box.cx + box.w / 2.0
    y2 = box.cy + box.h / 2.0
    return x1, y1, x2, y2


def box_area(box: Box) -> float:
    """Area computed from corner form so it agrees with ``intersection_area``."""
    x1, y1, x2, y2 = to_xyxy(box)
    return (x2 - x1) * (y2 - y1)


def intersection_area(a: Box, b: Box) -> float:
    """
    Calculate the overlapping area of two boxes.

    Args:
        a: First box
        b: Second box

    Returns:
        Intersection area, 0.0 when the boxes are disjoint
    """
    ax1, ay1, ax2, ay2 = to_xyxy(a)
    bx1, by1, bx2, by2 = to_xyxy(b)

    inter_w = max(min(ax2, bx2) - max(ax1, bx1), 0.0)
    inter_h = max(min(ay2, by2) - max(ay1, by1), 0.0)
    return inter_w * inter_h


def iou(a: Box, b: Box) -> float:
    """
    Calculate IoU between two boxes.

    Args:
        a: First box (normalized center form)
        b: Second box (normalized center form)

    Returns:
        IoU value between 0 and 1
    """
    inter = intersection_area(a, b)
    union = box_area(a) + box_area(b) - inter
    if union <= 0.0:
        return 0.0
    return min(inter / union, 1.0)


def overlaps(a: Box, b: Box) -> bool:
    """True when the boxes share a region of positive area."""
    return intersection_area(a, b) > 0.0


def contains(outer: Box, inner: Box) -> bool:
    """True when ``inner`` lies entirely inside ``outer`` (edges may touch)."""
    ox1, oy1, ox2, oy2 = to_xyxy(outer)
    ix1, iy1, ix2, iy2 = to_xyxy(inner)
    return ox1 <= ix1 and oy1 <= iy1 and ix2 <= ox2 and iy2 <= oy2


def _xyxy_array(boxes: Sequence[Box]) -> np.ndarray:
    arr = np.array([(b.cx, b.cy, b.w, b.h) for b in boxes], dtype=np.float64).reshape(-1, 4)
    half_w = arr[:, 2] / 2.0
    half_h = arr[:, 3] / 2.0
    return np.stack(
        [arr[:, 0] - half_w, arr[:, 1] - half_h, arr[:, 0] + half_w, arr[:, 1] + half_h],
        axis=1,
    )


def iou_matrix(gt_boxes: Sequence[Box], detections: Sequence[Box]) -> np.ndarray:
    """
    Pairwise IoU between ground truth boxes (rows) and detections (columns).

    Uses the same arithmetic as :func:`iou`, so each cell equals the scalar
    result for that pair.

    Args:
        gt_boxes: Ground truth boxes
        detections: Detected boxes

    Returns:
        Array of shape (len(gt_boxes), len(detections))
    """
    n, m = len(gt_boxes), len(detections)
    if n == 0 or m == 0:
        return np.zeros((n, m), dtype=np.float64)

    g = _xyxy_array(gt_boxes)[:, None, :]
    d = _xyxy_array(detections)[None, :, :]

    inter_w = np.maximum(np.minimum(g[..., 2], d[..., 2]) - np.maximum(g[..., 0], d[..., 0]), 0.0)
    inter_h = np.maximum(np.minimum(g[..., 3], d[..., 3]) - np.maximum(g[..., 1], d[..., 1]), 0.0)
    inter = inter_w * inter_h

    area_g = (g[..., 2] - g[..., 0]) * (g[..., 3] - g[..., 1])
    area_d = (d[..., 2] - d[..., 0]) * (d[..., 3] - d[..., 1])
    union = area_g + area_d - inter

    with np.errstate(divide="ignore", invalid="ignore"):
        result = np.where(union > 0.0, inter / union, 0.0)
    return np.minimum(result, 1.0)
