#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Pixel buffer ingest and frame sources.

A PixelBuffer is the only input the analyzers accept. The size invariant
(len(data) == width * height * 4) is enforced here, once, so analyzers never
read past the logical image bounds.

Frame sources:
- ImageFileSource: decodes an uploaded image onto the analysis canvas
- ArrayFrameSource: wraps an in-memory frame (e.g. an OpenCV capture)
- NullFrameSource: the explicit "no frame available" source
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple, Union

import cv2
import numpy as np
from PIL import Image
from loguru import logger

from .errors import MalformedBuffer
from .utils import now_ms

CHANNELS = 4

# cv2 conversion codes to RGBA, keyed by input channel order
_TO_RGBA = {
    "RGB": cv2.COLOR_RGB2RGBA,
    "BGR": cv2.COLOR_BGR2RGBA,
    "BGRA": cv2.COLOR_BGRA2RGBA,
    "GRAY": cv2.COLOR_GRAY2RGBA,
}


@dataclass(frozen=True)
class PixelBuffer:
    """
    Raw RGBA8 frame data.

    Attributes:
        width: Frame width in pixels
        height: Frame height in pixels
        data: Row-major RGBA bytes
        source: Where the frame came from ("capture", "upload", ...)
        timestamp: Capture time in milliseconds (optional)
    """
    width: int
    height: int
    data: bytes
    source: str = "capture"
    timestamp: Optional[int] = None

    def __post_init__(self):
        data = self.data
        if isinstance(data, np.ndarray):
            data = np.ascontiguousarray(data, dtype=np.uint8).tobytes()
        elif not isinstance(data, bytes):
            data = bytes(data)
        object.__setattr__(self, "data", data)
        self.validate()

    def validate(self) -> None:
        """Check the size invariant, raising MalformedBuffer on violation."""
        width, height = self.width, self.height
        if not isinstance(width, (int, np.integer)) or not isinstance(height, (int, np.integer)):
            raise MalformedBuffer(
                f"Frame dimensions must be integers, got {width!r}x{height!r}",
                width=width, height=height, length=len(self.data)
            )
        if width <= 0 or height <= 0:
            raise MalformedBuffer(
                f"Frame dimensions must be positive, got {width}x{height}",
                width=width, height=height, length=len(self.data)
            )
        expected = int(width) * int(height) * CHANNELS
        if len(self.data) != expected:
            raise MalformedBuffer(
                f"Buffer length {len(self.data)} does not match {width}x{height}x{CHANNELS} = {expected}",
                width=width, height=height, length=len(self.data)
            )

    @property
    def pixel_count(self) -> int:
        return int(self.width) * int(self.height)

    def pixels(self) -> np.ndarray:
        """Read-only (height, width, 4) uint8 view of the data."""
        return np.frombuffer(self.data, dtype=np.uint8).reshape(int(self.height), int(self.width), CHANNELS)

    def describe(self) -> dict:
        """Frame metadata without pixel bytes."""
        return {
            "width": int(self.width),
            "height": int(self.height),
            "source": self.source,
            "timestamp": self.timestamp,
            "bytes": len(self.data),
        }


def luminance(pixels: np.ndarray) -> np.ndarray:
    """Per-pixel brightness (r + g + b) / 3 on the 0-255 scale."""
    return pixels[..., :3].astype(np.float64).sum(axis=2) / 3.0


def buffer_from_array(
    frame: np.ndarray,
    color_order: str = "RGBA",
    source: str = "capture",
    timestamp: Optional[int] = None
) -> PixelBuffer:
    """
    Build a PixelBuffer from an image array.

    Args:
        frame: (H, W), (H, W, 3) or (H, W, 4) uint8 array
        color_order: Channel order of the input ("RGBA", "RGB", "BGR", "BGRA", "GRAY")
        source: Source tag
        timestamp: Capture time in milliseconds

    Returns:
        PixelBuffer in RGBA order
    """
    if frame is None or frame.size == 0:
        raise MalformedBuffer("Empty frame array")

    color_order = color_order.upper()
    frame = np.ascontiguousarray(frame, dtype=np.uint8)

    if color_order != "RGBA":
        if color_order not in _TO_RGBA:
            raise ValueError(f"Unsupported color order: {color_order}. Valid options: RGBA, {', '.join(_TO_RGBA)}")
        frame = cv2.cvtColor(frame, _TO_RGBA[color_order])

    if frame.ndim != 3 or frame.shape[2] != CHANNELS:
        raise MalformedBuffer(f"Expected an (H, W, 4) frame, got shape {frame.shape}")

    height, width = frame.shape[:2]
    return PixelBuffer(width=width, height=height, data=frame, source=source, timestamp=timestamp)


# ============================================================================
# Frame sources
# ============================================================================

class FrameSource(ABC):
    """Supplies frames to the engine. capture() returns None when no frame is available."""

    @property
    def available(self) -> bool:
        return True

    @abstractmethod
    def capture(self) -> Optional[PixelBuffer]:
        pass


class NullFrameSource(FrameSource):
    """Absent frame source (no host connection)."""

    @property
    def available(self) -> bool:
        return False

    def capture(self) -> Optional[PixelBuffer]:
        return None


class ArrayFrameSource(FrameSource):
    """Frame source over an in-memory array, e.g. a frame read with cv2.VideoCapture."""

    def __init__(self, frame: np.ndarray, color_order: str = "BGR", source: str = "capture"):
        self.frame = frame
        self.color_order = color_order
        self.source = source

    def capture(self) -> Optional[PixelBuffer]:
        return buffer_from_array(self.frame, self.color_order, source=self.source, timestamp=now_ms())


class ImageFileSource(FrameSource):
    """
    Decodes a user-supplied image into an RGBA buffer.

    The image is stretched onto a fixed analysis canvas (1920x1080 by default)
    so uploads and host captures are analyzed at the same scale. Pass
    canvas_size=None to keep the native resolution.
    """

    def __init__(
        self,
        path: Union[str, Path],
        canvas_size: Optional[Tuple[int, int]] = (1920, 1080)
    ):
        self.path = Path(path)
        self.canvas_size = canvas_size

    def capture(self) -> Optional[PixelBuffer]:
        if not self.path.exists():
            logger.error(f"Image file not found: {self.path}")
            raise FileNotFoundError(f"Image file not found: {self.path}")

        with Image.open(self.path) as image:
            rgba = np.asarray(image.convert("RGBA"), dtype=np.uint8)

        if self.canvas_size is not None:
            canvas_w, canvas_h = self.canvas_size
            if (rgba.shape[1], rgba.shape[0]) != (canvas_w, canvas_h):
                rgba = cv2.resize(rgba, (canvas_w, canvas_h), interpolation=cv2.INTER_AREA)

        logger.debug(f"Decoded {self.path.name} -> {rgba.shape[1]}x{rgba.shape[0]}")
        return buffer_from_array(rgba, "RGBA", source="upload", timestamp=now_ms())
