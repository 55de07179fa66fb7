"""
Error types raised by the detection pipeline.

An empty detection list is a valid result and never raised as an error.
"""


class DetectionError(Exception):
    """Base class for failures local to a single detection request."""


class UploadError(DetectionError):
    """The uploaded image field is missing, empty or unreadable."""


class ImageDecodeError(DetectionError):
    """The uploaded bytes are not an image OpenCV can decode."""


class InferenceError(DetectionError):
    """The model could not be loaded or executed, or produced an unexpected output."""
