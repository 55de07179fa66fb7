from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

import numpy as np

from .errors import InferenceError
from .labels import ClassLabelTable
from .nms import NMSConfig, suppress_with_config
from .postprocess import YoloDecoder, YoloPostConfig
from .preprocess import PreprocessResult, prepare_input
from .types import Detection


PathLike = Union[str, Path]

logger = logging.getLogger(__name__)


class DetectionPipeline:
    """
    Plug-and-play pipeline: preprocess -> inference -> decode -> suppress.

    Takes encoded image bytes and returns detections in original image
    coordinates, highest confidence first. Holds no per-request state, so one
    instance can serve concurrent requests as long as `infer_fn` is safe to
    call concurrently.
    """

    def __init__(
        self,
        infer_fn: Callable[[np.ndarray], np.ndarray],
        *,
        labels: Optional[ClassLabelTable] = None,
        backend: Optional[object] = None,
        post_cfg: YoloPostConfig = YoloPostConfig(),
        nms_cfg: NMSConfig = NMSConfig(),
    ):
        self._infer_fn = infer_fn
        self.backend = backend
        self.labels = labels if labels is not None else ClassLabelTable()
        self.post_cfg = post_cfg
        self.nms_cfg = nms_cfg
        self.decoder = YoloDecoder(self.labels, post_cfg)

    def preprocess(self, data: bytes) -> PreprocessResult:
        return prepare_input(data, self.post_cfg.model_input_size)

    def infer(self, blob: np.ndarray) -> np.ndarray:
        try:
            return self._infer_fn(blob)
        except InferenceError:
            raise
        except Exception as e:
            raise InferenceError(f"Model execution failed: {e}") from e

    def postprocess(self, raw: np.ndarray, orig_size) -> List[Detection]:
        img_width, img_height = orig_size
        try:
            candidates = self.decoder.decode(raw, img_width, img_height)
        except ValueError as e:
            raise InferenceError(f"Unexpected model output: {e}") from e
        return suppress_with_config(candidates, self.nms_cfg)

    def __call__(self, data: bytes) -> List[Detection]:
        t0 = time.perf_counter()
        prep = self.preprocess(data)
        t1 = time.perf_counter()
        raw = self.infer(prep.blob)
        t2 = time.perf_counter()
        detections = self.postprocess(raw, prep.orig_size)
        t3 = time.perf_counter()
        logger.debug(
            "Detected %d objects in %dx%d image (preprocess=%.1fms inference=%.1fms postprocess=%.1fms)",
            len(detections),
            prep.orig_size[0],
            prep.orig_size[1],
            (t1 - t0) * 1000.0,
            (t2 - t1) * 1000.0,
            (t3 - t2) * 1000.0,
        )
        return detections

    def detect_rows(self, data: bytes) -> List[list]:
        """Detections as `[x1, y1, x2, y2, label, confidence]` rows."""
        return [det.as_row() for det in self(data)]


def load_pipeline(
    model_path: PathLike,
    *,
    labels: Optional[ClassLabelTable] = None,
    post_cfg: YoloPostConfig = YoloPostConfig(),
    nms_cfg: NMSConfig = NMSConfig(),
    onnx_providers: Optional[Sequence[str]] = None,
    onnx_input_name: Optional[str] = None,
    onnx_output_name: Optional[str] = None,
) -> DetectionPipeline:
    """
    Create a pipeline for an ONNX model on disk.

        pipe = load_pipeline("yolov8m.onnx")  # relative paths resolve against the working directory

    Any failure to load the model is raised as `InferenceError`.
    """

    from .backends.onnxruntime_backend import OnnxRuntimeBackend, OnnxRuntimeBackendConfig

    resolved = Path(model_path).resolve()
    if resolved.suffix.lower() != ".onnx":
        raise InferenceError(f"Only ONNX models are supported, got '{resolved.name}'")

    try:
        ort_backend = OnnxRuntimeBackend(
            resolved,
            OnnxRuntimeBackendConfig(
                providers=onnx_providers,
                input_name=onnx_input_name,
                output_name=onnx_output_name,
            ),
        )
    except ImportError:
        raise
    except FileNotFoundError as e:
        raise InferenceError(f"Model file not found: {resolved}") from e
    except Exception as e:
        raise InferenceError(f"Could not load model {resolved}: {e}") from e

    return DetectionPipeline(
        ort_backend.infer,
        labels=labels,
        backend=ort_backend,
        post_cfg=post_cfg,
        nms_cfg=nms_cfg,
    )
