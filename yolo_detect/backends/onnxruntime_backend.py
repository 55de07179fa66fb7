from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Union

import numpy as np


PathLike = Union[str, Path]

logger = logging.getLogger(__name__)

DEFAULT_INPUT_NAME = "images"
DEFAULT_OUTPUT_NAME = "output0"


@dataclass(frozen=True)
class OnnxRuntimeBackendConfig:
    """
    Configuration for ONNX Runtime inference.

    - providers: ORT execution providers (e.g., ["CPUExecutionProvider"])
    - input_name/output_name: override the I/O names. By default the YOLOv8
      export names ("images" / "output0") are used when the model has them,
      otherwise the first input/output.
    """

    providers: Optional[Sequence[str]] = None
    input_name: Optional[str] = None
    output_name: Optional[str] = None


def _pick_name(requested: Optional[str], available: Sequence[str], default: str, kind: str) -> str:
    if requested is not None:
        if requested not in available:
            raise ValueError(f"Model has no {kind} named {requested!r}; available: {list(available)}")
        return requested
    if default in available:
        return default
    return available[0]


class OnnxRuntimeBackend:
    """
    ONNX Runtime backend, loaded once and shared across requests.

    Expects an NCHW float32 blob shaped (1, 3, H, W) and returns the selected
    output as a NumPy array. Session runs are serialized with a lock.
    """

    def __init__(self, model_path: PathLike, cfg: OnnxRuntimeBackendConfig = OnnxRuntimeBackendConfig()):
        try:
            import onnxruntime as ort  # type: ignore
        except Exception as e:  # pragma: no cover
            raise ImportError(
                "onnxruntime is required for the ONNX backend. Install it with `pip install onnxruntime`."
            ) from e

        self.model_path = Path(model_path)
        if not self.model_path.exists():
            raise FileNotFoundError(str(self.model_path))

        sess_opts = ort.SessionOptions()
        providers = list(cfg.providers) if cfg.providers is not None else None
        self.session = ort.InferenceSession(str(self.model_path), sess_options=sess_opts, providers=providers)

        input_names = [i.name for i in self.session.get_inputs()]
        output_names = [o.name for o in self.session.get_outputs()]
        self.input_name = _pick_name(cfg.input_name, input_names, DEFAULT_INPUT_NAME, "input")
        self.output_name = _pick_name(cfg.output_name, output_names, DEFAULT_OUTPUT_NAME, "output")
        self._lock = threading.Lock()

        logger.info(
            "Loaded ONNX model %s (input=%s, output=%s, providers=%s)",
            self.model_path,
            self.input_name,
            self.output_name,
            ",".join(self.providers_in_use),
        )

    @property
    def providers_in_use(self) -> Sequence[str]:
        # ORT returns providers in priority order for this session.
        return tuple(self.session.get_providers())

    def infer(self, blob: np.ndarray) -> np.ndarray:
        inputs: Dict[str, Any] = {self.input_name: blob}
        with self._lock:
            outputs = self.session.run([self.output_name], inputs)
        return outputs[0]
