from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import numpy as np

from .geometry import iou_one_to_many
from .types import Detection


@dataclass(frozen=True)
class NMSConfig:
    """
    iou_threshold: a candidate whose IoU with an already kept box is >= this is dropped.
    max_detections: stop after keeping this many boxes; None keeps all survivors.
    class_agnostic: boxes of different labels suppress each other (default).
        When False, each label is suppressed on its own and the survivors are
        merged back by confidence.
    """

    iou_threshold: float = 0.7
    max_detections: Optional[int] = None
    class_agnostic: bool = True

    def __post_init__(self) -> None:
        if not 0.0 < self.iou_threshold <= 1.0:
            raise ValueError("iou_threshold must be within (0, 1]")
        if self.max_detections is not None and self.max_detections < 1:
            raise ValueError("max_detections must be >= 1 or None")


def nms(boxes: np.ndarray, scores: np.ndarray, cfg: NMSConfig = NMSConfig()) -> np.ndarray:
    """
    Greedy NumPy NMS. Expects boxes shape (N,4) in xyxy and scores shape (N,).
    Returns indices of kept boxes, highest score first.

    Scores are sorted with a stable sort, so equal scores keep their input
    order. Instead of rebuilding the candidate list every round, suppressed
    entries are marked in place and skipped.
    """

    boxes = np.asarray(boxes, dtype=np.float64).reshape(-1, 4)
    scores = np.asarray(scores, dtype=np.float64).reshape(-1)
    if boxes.shape[0] != scores.shape[0]:
        raise ValueError(f"boxes and scores disagree: {boxes.shape[0]} vs {scores.shape[0]}")
    if boxes.shape[0] == 0:
        return np.empty((0,), dtype=np.int64)

    order = np.argsort(-scores, kind="stable")
    suppressed = np.zeros(order.size, dtype=bool)
    keep: List[int] = []

    for pos in range(order.size):
        if suppressed[pos]:
            continue
        i = order[pos]
        keep.append(int(i))
        if cfg.max_detections is not None and len(keep) >= cfg.max_detections:
            break

        rest = order[pos + 1 :]
        if rest.size == 0:
            break
        overlaps = iou_one_to_many(boxes[i], boxes[rest])
        suppressed[pos + 1 :] |= overlaps >= cfg.iou_threshold

    return np.array(keep, dtype=np.int64)


def _suppress_all(candidates: Sequence[Detection], cfg: NMSConfig) -> List[Detection]:
    boxes = np.array([d.as_xyxy() for d in candidates], dtype=np.float64).reshape(-1, 4)
    scores = np.array([d.confidence for d in candidates], dtype=np.float64)
    return [candidates[i] for i in nms(boxes, scores, cfg)]


def suppress(
    candidates: Sequence[Detection],
    iou_threshold: float = 0.7,
    max_detections: Optional[int] = None,
    class_agnostic: bool = True,
) -> List[Detection]:
    """
    Remove redundant overlapping detections.

    The result is a subset of `candidates`, sorted by confidence (descending),
    with no two boxes overlapping at IoU >= `iou_threshold` (within a label
    when `class_agnostic` is False). Running it again on its own output
    changes nothing.
    """

    cfg = NMSConfig(iou_threshold=iou_threshold, max_detections=max_detections, class_agnostic=class_agnostic)
    return suppress_with_config(candidates, cfg)


def suppress_with_config(candidates: Sequence[Detection], cfg: NMSConfig) -> List[Detection]:
    candidates = list(candidates)
    if not candidates:
        return []

    if cfg.class_agnostic:
        return _suppress_all(candidates, cfg)

    by_label: Dict[str, List[int]] = {}
    for idx, det in enumerate(candidates):
        by_label.setdefault(det.label, []).append(idx)

    kept: List[int] = []
    for idxs in by_label.values():
        group = [candidates[i] for i in idxs]
        boxes = np.array([d.as_xyxy() for d in group], dtype=np.float64).reshape(-1, 4)
        scores = np.array([d.confidence for d in group], dtype=np.float64)
        kept.extend(idxs[j] for j in nms(boxes, scores, cfg))

    # Merge by confidence; equal confidences fall back to input order.
    kept.sort(key=lambda i: (-candidates[i].confidence, i))
    if cfg.max_detections is not None:
        kept = kept[: cfg.max_detections]
    return [candidates[i] for i in kept]
