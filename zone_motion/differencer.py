"""
Frame differencing for the motion pipeline.

Responsibility:
    Decide, for one rectangular region shared by two frames, whether
    enough pixels changed to call it motion.

Algorithm:
    pixel_threshold    = 25 + (100 - sensitivity) * 0.5
    min_changed_pixels = base_area / (sensitivity / 50)

    A pixel is "changed" when the mean absolute R,G,B delta between
    the two frames exceeds pixel_threshold (alpha is ignored). The
    region is "changed" when the changed-pixel count exceeds
    min_changed_pixels.

Preconditions (not checked, this is the hot path):
    - current and previous have identical shape.
    - region is non-empty and already clipped to the frame.

Non-goals:
    - No state. Frame caching lives in the evaluator.
"""

from dataclasses import dataclass

import numpy as np

from zone_motion.frame import Frame, Rect

# Whole-frame and per-zone detection use different base areas; zones
# are smaller so a smaller absolute count still counts as motion.
FRAME_BASE_AREA = 500
ZONE_BASE_AREA = 200

_BASE_PIXEL_THRESHOLD = 25
_THRESHOLD_SLOPE = 0.5
_REFERENCE_SENSITIVITY = 50


def pixel_threshold(sensitivity: int) -> float:
    """Per-pixel mean channel delta a pixel must exceed to count as changed."""
    return _BASE_PIXEL_THRESHOLD + (100 - sensitivity) * _THRESHOLD_SLOPE


def min_changed_pixels(sensitivity: int, base_area: float) -> float:
    """Changed-pixel count a region must exceed to count as motion."""
    return base_area / (sensitivity / _REFERENCE_SENSITIVITY)


@dataclass(frozen=True, slots=True)
class RegionDiff:
    """Result of differencing one region.

    Attributes:
        changed: True if changed_pixel_count exceeded the minimum.
        changed_pixel_count: Number of pixels above the per-pixel threshold.
    """

    changed: bool
    changed_pixel_count: int


NO_CHANGE = RegionDiff(changed=False, changed_pixel_count=0)


def change_mask(
    current: Frame,
    previous: Frame,
    region: Rect,
    sensitivity: int,
) -> np.ndarray:
    """Boolean mask of changed pixels inside region.

    Returns:
        A (region.height, region.width) bool array.
    """
    rows = slice(region.y, region.bottom)
    cols = slice(region.x, region.right)

    # int16 holds the sum of three 8-bit deltas (max 765) without overflow.
    cur = current.data[rows, cols, :3].astype(np.int16)
    prev = previous.data[rows, cols, :3].astype(np.int16)
    mean_delta = np.abs(cur - prev).sum(axis=2) / 3.0

    return mean_delta > pixel_threshold(sensitivity)


class FrameDifferencer:
    """Region-bounded frame differencer with a fixed base area.

    Usage:
        differencer = FrameDifferencer(base_area=ZONE_BASE_AREA)
        diff = differencer.diff_region(current, previous, zone.rect, 50)
        if diff.changed:
            ...

    Instances are stateless beyond base_area and safe to share.
    """

    def __init__(self, base_area: float = FRAME_BASE_AREA) -> None:
        if base_area <= 0:
            raise ValueError(f"base_area must be positive, got {base_area}.")
        self._base_area = base_area

    @property
    def base_area(self) -> float:
        return self._base_area

    def diff_region(
        self,
        current: Frame,
        previous: Frame,
        region: Rect,
        sensitivity: int,
    ) -> RegionDiff:
        """Count changed pixels inside region and apply the motion threshold.

        Args:
            current: Newest frame.
            previous: Frame to compare against (same shape as current).
            region: Clipped, non-empty region to scan.
            sensitivity: Dial in [1, 100].

        Returns:
            RegionDiff with the changed flag and the raw count.
        """
        count = int(np.count_nonzero(change_mask(current, previous, region, sensitivity)))
        changed = count > min_changed_pixels(sensitivity, self._base_area)
        return RegionDiff(changed=changed, changed_pixel_count=count)
