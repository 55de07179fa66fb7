"""
Inference backends for yolo_detect.

Backends live in a separate module so pre/post-processing can be used and
tested without an inference runtime installed.
"""

from __future__ import annotations

__all__ = []
