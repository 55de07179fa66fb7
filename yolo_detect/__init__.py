"""
Single-image YOLO object detection: preprocessing, ONNX inference and the
post-processing that turns raw head output into labeled, de-duplicated boxes.

Post-processing (decode, NMS, IoU) needs only NumPy. OpenCV is needed for
preprocessing and onnxruntime for the inference backend.
"""

from .types import Detection
from .errors import DetectionError, ImageDecodeError, InferenceError, UploadError
from .geometry import box_area, intersect_area, iou, union_area
from .labels import COCO_CLASSES, ClassLabelTable, load_class_names
from .nms import NMSConfig, nms, suppress
from .postprocess import YoloDecoder, YoloPostConfig, decode
from .preprocess import PreprocessResult, prepare_input
from .runtime import DetectionPipeline, load_pipeline

__all__ = [
    "Detection",
    "DetectionError",
    "ImageDecodeError",
    "InferenceError",
    "UploadError",
    "box_area",
    "intersect_area",
    "iou",
    "union_area",
    "COCO_CLASSES",
    "ClassLabelTable",
    "load_class_names",
    "NMSConfig",
    "nms",
    "suppress",
    "YoloDecoder",
    "YoloPostConfig",
    "decode",
    "PreprocessResult",
    "prepare_input",
    "DetectionPipeline",
    "load_pipeline",
]
