"""
Box overlap helpers.

Boxes are xyxy corners in pixels. Intersections are clamped at zero on each
axis, so disjoint boxes overlap by exactly 0 instead of a negative area, and an
IoU whose union is not positive (two degenerate boxes) is reported as 0.
"""

from typing import Sequence, Tuple, Union

import numpy as np

from .types import Detection


BoxLike = Union[Detection, Sequence[float], Tuple[float, float, float, float]]


def _xyxy(box: BoxLike) -> Tuple[float, float, float, float]:
    if isinstance(box, Detection):
        return box.as_xyxy()
    x1, y1, x2, y2 = box[:4]
    return float(x1), float(y1), float(x2), float(y2)


def box_area(box: BoxLike) -> float:
    x1, y1, x2, y2 = _xyxy(box)
    return max(0.0, x2 - x1) * max(0.0, y2 - y1)


def intersect_area(a: BoxLike, b: BoxLike) -> float:
    ax1, ay1, ax2, ay2 = _xyxy(a)
    bx1, by1, bx2, by2 = _xyxy(b)
    ix1 = max(ax1, bx1)
    iy1 = max(ay1, by1)
    ix2 = min(ax2, bx2)
    iy2 = min(ay2, by2)
    return max(0.0, ix2 - ix1) * max(0.0, iy2 - iy1)


def union_area(a: BoxLike, b: BoxLike) -> float:
    return box_area(a) + box_area(b) - intersect_area(a, b)


def iou(a: BoxLike, b: BoxLike) -> float:
    """Intersection over union of two boxes, 0.0 when the union is empty."""
    union = union_area(a, b)
    if union <= 0.0:
        return 0.0
    return intersect_area(a, b) / union


def iou_one_to_many(box: np.ndarray, boxes: np.ndarray) -> np.ndarray:
    """
    Vectorized `iou` of one xyxy box against an (M, 4) array of boxes.

    Same clamping and empty-union rule as the scalar helpers.
    """

    boxes = np.asarray(boxes, dtype=np.float64).reshape(-1, 4)
    if boxes.shape[0] == 0:
        return np.empty((0,), dtype=np.float64)
    x1, y1, x2, y2 = (float(v) for v in np.asarray(box, dtype=np.float64)[:4])

    xx1 = np.maximum(x1, boxes[:, 0])
    yy1 = np.maximum(y1, boxes[:, 1])
    xx2 = np.minimum(x2, boxes[:, 2])
    yy2 = np.minimum(y2, boxes[:, 3])

    inter = np.maximum(0.0, xx2 - xx1) * np.maximum(0.0, yy2 - yy1)
    area = max(0.0, x2 - x1) * max(0.0, y2 - y1)
    areas = np.maximum(0.0, boxes[:, 2] - boxes[:, 0]) * np.maximum(0.0, boxes[:, 3] - boxes[:, 1])
    union = area + areas - inter

    out = np.zeros_like(inter)
    valid = union > 0.0
    out[valid] = inter[valid] / union[valid]
    return out
