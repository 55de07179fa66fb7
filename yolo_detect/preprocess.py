from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from .errors import ImageDecodeError, UploadError


@dataclass(frozen=True)
class PreprocessResult:
    blob: np.ndarray
    orig_size: Tuple[int, int]


def _cv2():
    try:
        import cv2  # type: ignore
    except Exception as e:  # pragma: no cover
        raise ImportError(
            "OpenCV is required for image preprocessing. Install with `pip install opencv-python-headless`."
        ) from e
    return cv2


def decode_image(data: bytes) -> np.ndarray:
    """
    Decode encoded image bytes (JPEG, PNG, ...) into a BGR array (H, W, 3).
    """

    if not data:
        raise UploadError("Uploaded image is empty.")

    cv2 = _cv2()
    buf = np.frombuffer(data, dtype=np.uint8)
    try:
        image = cv2.imdecode(buf, cv2.IMREAD_COLOR)
    except cv2.error as e:
        raise ImageDecodeError(f"Could not decode image: {e}") from e
    if image is None or image.ndim != 3 or image.shape[2] != 3:
        raise ImageDecodeError("Uploaded bytes are not a supported image.")
    return image


def image_to_blob(image_bgr: np.ndarray, input_size: int = 640) -> np.ndarray:
    """
    Stretch an image to (input_size, input_size) and lay it out as the model expects.

    No letterboxing: aspect ratio is not preserved, which is why decoded boxes
    are rescaled independently in x and y.
    """

    if image_bgr is None or not hasattr(image_bgr, "shape"):
        raise TypeError("image_bgr must be a NumPy array (BGR).")
    if image_bgr.ndim != 3 or image_bgr.shape[2] != 3:
        raise ValueError(f"Expected image shape (H, W, 3), got {getattr(image_bgr, 'shape', None)}")
    if input_size <= 0:
        raise ValueError("input_size must be > 0")

    cv2 = _cv2()
    h, w = image_bgr.shape[:2]
    img = image_bgr
    if (w, h) != (input_size, input_size):
        img = cv2.resize(img, (input_size, input_size), interpolation=cv2.INTER_LINEAR)

    # BGR -> RGB, normalize, HWC -> CHW, add batch
    blob = img[:, :, ::-1].astype(np.float32) / 255.0
    blob = np.ascontiguousarray(np.transpose(blob, (2, 0, 1))[None, ...])
    return blob


def prepare_input(data: bytes, input_size: int = 640) -> PreprocessResult:
    """
    Encoded bytes -> (1, 3, input_size, input_size) float32 RGB blob plus (width, height) of the original.
    """

    image = decode_image(data)
    orig_h, orig_w = image.shape[:2]
    return PreprocessResult(blob=image_to_blob(image, input_size), orig_size=(int(orig_w), int(orig_h)))
