"""
Frame and Rect value types.

This module defines the two plain-data types the motion core consumes:
a Frame (an immutable raster snapshot) and a Rect (an axis-aligned
region in frame pixel coordinates).

Non-goals:
    - No capture, decoding, or color conversion (see input_handler).
    - No motion logic.

Hard-coded:
    - Pixel data is uint8 with interleaved channels, shape (H, W, C).
    - Only the first three channels are compared; a fourth (alpha)
      channel is carried but ignored.
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Union

import numpy as np


@dataclass(frozen=True, slots=True)
class Rect:
    """Axis-aligned rectangle in frame pixel coordinates.

    Attributes:
        x: Left edge (inclusive).
        y: Top edge (inclusive).
        width: Width in pixels, strictly positive.
        height: Height in pixels, strictly positive.
    """

    x: int
    y: int
    width: int
    height: int

    def __post_init__(self) -> None:
        if self.x < 0 or self.y < 0:
            raise ValueError(
                f"Rect origin must be non-negative, got ({self.x}, {self.y})."
            )
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Rect size must be positive, got {self.width}x{self.height}."
            )

    @property
    def right(self) -> int:
        """Exclusive right edge."""
        return self.x + self.width

    @property
    def bottom(self) -> int:
        """Exclusive bottom edge."""
        return self.y + self.height

    @property
    def area(self) -> int:
        return self.width * self.height

    def clip(self, frame_width: int, frame_height: int) -> Optional["Rect"]:
        """Return the part of this rect that lies inside the frame.

        Returns:
            A new Rect, or None when the rect lies completely outside.
        """
        x2 = min(self.right, frame_width)
        y2 = min(self.bottom, frame_height)
        if x2 <= self.x or y2 <= self.y:
            return None
        if x2 == self.right and y2 == self.bottom:
            return self
        return Rect(self.x, self.y, x2 - self.x, y2 - self.y)

    def contains_point(self, x: float, y: float) -> bool:
        """Point-in-rect test, inclusive on every edge."""
        return self.x <= x <= self.right and self.y <= y <= self.bottom

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}

    @classmethod
    def from_dict(cls, raw: dict) -> "Rect":
        """Build a Rect from a plain mapping with x, y, width, height keys."""
        try:
            return cls(
                x=int(raw["x"]),
                y=int(raw["y"]),
                width=int(raw["width"]),
                height=int(raw["height"]),
            )
        except KeyError as e:
            raise ValueError(f"Rect is missing required key {e}: {raw}") from e


@dataclass(frozen=True, slots=True, eq=False)
class Frame:
    """An immutable raster snapshot of the video source.

    Attributes:
        width: Frame width in pixels.
        height: Frame height in pixels.
        data: Read-only uint8 array of shape (height, width, channels)
              holding interleaved color channels (R,G,B[,A] or B,G,R).
              The frame owns this array; it never aliases caller memory.

    Use Frame.from_array() or Frame.from_buffer() rather than the
    constructor; both copy the pixels and enforce the shape invariant.
    """

    width: int
    height: int
    data: np.ndarray

    @classmethod
    def from_array(cls, array: np.ndarray) -> "Frame":
        """Snapshot an (H, W, C) uint8 array.

        The pixels are copied into a read-only array owned by the frame,
        so a capture loop may refill its buffer after this returns.

        Raises:
            ValueError: If the array is not 3-dimensional with at least
                        three channels, or is not uint8.
        """
        if array.ndim != 3 or array.shape[2] < 3:
            raise ValueError(
                f"Expected an (H, W, C) array with at least 3 channels, "
                f"got shape {array.shape}."
            )
        if array.dtype != np.uint8:
            raise ValueError(f"Expected dtype uint8, got {array.dtype}.")
        if array.shape[0] == 0 or array.shape[1] == 0:
            raise ValueError(f"Frame is empty (shape {array.shape}).")

        snapshot = np.array(array, dtype=np.uint8, copy=True)
        snapshot.flags.writeable = False
        return cls(width=array.shape[1], height=array.shape[0], data=snapshot)

    @classmethod
    def from_buffer(
        cls,
        width: int,
        height: int,
        buffer: Union[bytes, bytearray, memoryview, np.ndarray],
        channels: int = 4,
    ) -> "Frame":
        """Build a frame from a flat interleaved byte buffer (copied).

        Raises:
            ValueError: If the buffer length does not match
                        width * height * channels.
        """
        if isinstance(buffer, np.ndarray):
            flat = buffer.ravel()
        else:
            flat = np.frombuffer(buffer, dtype=np.uint8)
        expected = width * height * channels
        if flat.size != expected:
            raise ValueError(
                f"Buffer holds {flat.size} bytes, expected {expected} "
                f"for a {width}x{height}x{channels} frame."
            )
        return cls.from_array(flat.reshape(height, width, channels))

    @property
    def channels(self) -> int:
        return self.data.shape[2]

    @property
    def size(self) -> Tuple[int, int]:
        """Return (width, height)."""
        return (self.width, self.height)

    @property
    def bounds(self) -> Rect:
        """A rect covering the whole frame."""
        return Rect(0, 0, self.width, self.height)

    def same_layout(self, other: "Frame") -> bool:
        """True if both frames share width, height and channel count."""
        return self.data.shape == other.data.shape
