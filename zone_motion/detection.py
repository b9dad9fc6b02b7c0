"""
Motion detection result objects.

This module defines MotionArea and DetectionResult, the output types
returned by every detector in this package. Both are frozen,
serializable containers with no behavior beyond data access.

Non-goals:
    - No rendering logic.
    - No file I/O.
"""

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True, slots=True)
class MotionArea:
    """Bounding box of detected motion.

    Attributes:
        x: Left edge in frame pixels.
        y: Top edge in frame pixels.
        width: Box width in pixels.
        height: Box height in pixels.
        zone: Id of the zone that produced this area, or None for
              whole-frame and grid detections.
    """

    x: int
    y: int
    width: int
    height: int
    zone: Optional[str] = None

    def to_dict(self) -> dict:
        """Return a plain dict suitable for JSON serialization."""
        return {
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "zone": self.zone,
        }

    @property
    def area(self) -> int:
        """Box area in pixels."""
        return self.width * self.height


@dataclass(frozen=True, slots=True)
class DetectionResult:
    """Outcome of one evaluation cycle.

    Attributes:
        detected: True if any area was reported (zone engine) or the
                  whole frame crossed the threshold (grid engine).
        areas: Reported motion areas, in zone order.
        triggered_zone_ids: Ids of zones that crossed their threshold,
                            in zone order. Empty for zoneless detection.
    """

    detected: bool
    areas: Tuple[MotionArea, ...] = ()
    triggered_zone_ids: Tuple[str, ...] = ()

    @classmethod
    def empty(cls) -> "DetectionResult":
        return cls(detected=False)

    def to_dict(self) -> dict:
        """Return a plain dict suitable for JSON serialization."""
        return {
            "detected": self.detected,
            "areas": [a.to_dict() for a in self.areas],
            "triggered_zone_ids": list(self.triggered_zone_ids),
        }
