from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from .labels import ClassLabelTable
from .types import Detection


@dataclass(frozen=True)
class YoloPostConfig:
    """
    Decoding options for YOLOv8-style heads.

    model_input_size: side of the square tensor the model was fed; box
        parameters are expressed in that pixel space.
    conf_threshold: rows whose best class score is below this are dropped.
    """

    model_input_size: int = 640
    conf_threshold: float = 0.5

    def __post_init__(self) -> None:
        if self.model_input_size <= 0:
            raise ValueError("model_input_size must be > 0")
        if not 0.0 <= self.conf_threshold <= 1.0:
            raise ValueError("conf_threshold must be within [0, 1]")


class YoloDecoder:
    """
    Turns the raw head output into candidate detections.

    Supported layouts (single image, K = number of labels):
    - (1, 4 + K, N): as emitted by YOLOv8 exports, e.g. 1 x 84 x 8400
    - (4 + K, N): same with the batch axis already removed
    - (N, 4 + K): row-major, one candidate per row

    Each row is [cx, cy, w, h, class_scores...] with the box in model input
    pixels. Boxes come back as xyxy in original image pixels, in row order.
    """

    def __init__(self, labels: Optional[ClassLabelTable] = None, cfg: YoloPostConfig = YoloPostConfig()):
        self.labels = labels if labels is not None else ClassLabelTable()
        self.cfg = cfg

    @property
    def num_channels(self) -> int:
        return 4 + len(self.labels)

    def decode(self, raw: np.ndarray, img_width: int, img_height: int) -> List[Detection]:
        if img_width <= 0 or img_height <= 0:
            raise ValueError(f"Image size must be positive, got {img_width}x{img_height}")

        rows = self._as_rows(raw)
        if rows.shape[0] == 0:
            return []

        class_scores = rows[:, 4:]
        class_ids = np.argmax(class_scores, axis=1)  # first maximum wins on ties
        probs = class_scores[np.arange(class_scores.shape[0]), class_ids]

        keep = probs >= self.cfg.conf_threshold
        if not np.any(keep):
            return []
        boxes = rows[keep, :4].astype(np.float64)
        probs = probs[keep]
        class_ids = class_ids[keep]

        boxes_xyxy = self._scale_boxes(self._cxcywh_to_xyxy(boxes), img_width, img_height)

        return [
            Detection(
                x1=float(x1),
                y1=float(y1),
                x2=float(x2),
                y2=float(y2),
                label=self.labels[int(cls_id)],
                confidence=float(prob),
                class_id=int(cls_id),
            )
            for (x1, y1, x2, y2), prob, cls_id in zip(boxes_xyxy, probs, class_ids)
        ]

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #
    def _as_rows(self, raw: np.ndarray) -> np.ndarray:
        """
        Resolve the head layout into an (N, 4 + K) view.
        """

        p = np.asarray(raw)
        if p.ndim == 3:
            if p.shape[0] != 1:
                raise ValueError(f"Batch > 1 is not supported (got shape {p.shape}). Pass one image at a time.")
            p = p[0]
        if p.ndim != 2:
            raise ValueError(f"Unsupported YOLO output shape: {np.shape(raw)}")

        c = self.num_channels
        # Channel-first is what the model emits, so it wins when the array is square.
        if p.shape[0] == c:
            return p.T
        if p.shape[1] == c:
            return p
        raise ValueError(
            f"YOLO output shape {np.shape(raw)} does not match {len(self.labels)} classes "
            f"(expected {c} channels)."
        )

    @staticmethod
    def _cxcywh_to_xyxy(boxes: np.ndarray) -> np.ndarray:
        cx, cy, w_box, h_box = boxes.T
        x1 = cx - w_box / 2
        y1 = cy - h_box / 2
        x2 = cx + w_box / 2
        y2 = cy + h_box / 2
        # Order corners so x1 <= x2 and y1 <= y2 even for negative sizes.
        return np.stack(
            [np.minimum(x1, x2), np.minimum(y1, y2), np.maximum(x1, x2), np.maximum(y1, y2)],
            axis=1,
        )

    def _scale_boxes(self, boxes: np.ndarray, img_width: int, img_height: int) -> np.ndarray:
        """
        Map boxes from the square model input back to the original image.

        x and y are rescaled independently since the input was stretched, not
        letterboxed.
        """

        size = float(self.cfg.model_input_size)
        boxes[:, [0, 2]] = boxes[:, [0, 2]] / size * img_width
        boxes[:, [1, 3]] = boxes[:, [1, 3]] / size * img_height
        return boxes


def decode(
    raw: np.ndarray,
    img_width: int,
    img_height: int,
    model_input_size: int = 640,
    conf_threshold: float = 0.5,
    *,
    labels: Optional[ClassLabelTable] = None,
) -> List[Detection]:
    """Functional shortcut for `YoloDecoder(labels, cfg).decode(...)`."""
    cfg = YoloPostConfig(model_input_size=model_input_size, conf_threshold=conf_threshold)
    return YoloDecoder(labels, cfg).decode(raw, img_width, img_height)

