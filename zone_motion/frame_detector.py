"""
Whole-frame motion detection with grid-based motion areas.

Responsibility:
    Zoneless detector with its own adjustable sensitivity. The whole
    frame decides whether motion happened; a coarse grid then locates
    where it happened.

Algorithm:
    1. Difference the whole frame (base area FRAME_BASE_AREA).
    2. If motion, split the frame into grid_size x grid_size cells
       (edge cells truncated) and report every cell whose changed
       pixel count exceeds grid_size * grid_size * grid_fill_ratio.

    detected reflects step 1 only, so it can be True with no areas
    when motion is spread thinly over many cells.

Non-goals:
    - No zones (see evaluator.ZoneMotionEvaluator).
    - No contour extraction or blob merging.
"""

import logging
from typing import List, Optional

import numpy as np

from zone_motion.detection import DetectionResult, MotionArea
from zone_motion.differencer import FRAME_BASE_AREA, change_mask, min_changed_pixels
from zone_motion.frame import Frame
from zone_motion.zone import DEFAULT_SENSITIVITY, clamp_sensitivity

logger = logging.getLogger(__name__)

DEFAULT_GRID_SIZE = 50
DEFAULT_GRID_FILL_RATIO = 0.2


class FrameMotionDetector:
    """Whole-frame detector that reports grid cells with motion."""

    def __init__(
        self,
        sensitivity: int = DEFAULT_SENSITIVITY,
        grid_size: int = DEFAULT_GRID_SIZE,
        grid_fill_ratio: float = DEFAULT_GRID_FILL_RATIO,
        base_area: float = FRAME_BASE_AREA,
    ) -> None:
        if grid_size <= 0:
            raise ValueError(f"grid_size must be positive, got {grid_size}.")
        if not (0.0 <= grid_fill_ratio <= 1.0):
            raise ValueError(f"grid_fill_ratio must be in [0.0, 1.0], got {grid_fill_ratio}.")

        self._sensitivity = clamp_sensitivity(sensitivity)
        self._grid_size = grid_size
        self._grid_fill_ratio = grid_fill_ratio
        self._base_area = base_area
        self._previous: Optional[Frame] = None

    @property
    def sensitivity(self) -> int:
        return self._sensitivity

    def set_sensitivity(self, value: int) -> None:
        """Set the sensitivity, clamped into [1, 100]."""
        self._sensitivity = clamp_sensitivity(value)

    def reset(self) -> None:
        self._previous = None

    def detect(self, current: Frame) -> DetectionResult:
        """Compare current against the previous frame."""
        previous = self._previous
        self._previous = current

        if previous is None:
            return DetectionResult.empty()

        if not current.same_layout(previous):
            logger.info(
                "Frame layout changed %s -> %s; re-baselining.",
                previous.data.shape, current.data.shape,
            )
            return DetectionResult.empty()

        mask = change_mask(current, previous, current.bounds, self._sensitivity)
        detected = int(np.count_nonzero(mask)) > min_changed_pixels(
            self._sensitivity, self._base_area
        )

        areas = self._grid_areas(mask) if detected else []
        return DetectionResult(detected=detected, areas=tuple(areas))

    def _grid_areas(self, mask: np.ndarray) -> List[MotionArea]:
        """Cells of the change mask that are sufficiently filled."""
        size = self._grid_size
        height, width = mask.shape
        min_fill = size * size * self._grid_fill_ratio

        areas: List[MotionArea] = []
        for y in range(0, height, size):
            for x in range(0, width, size):
                cell = mask[y:y + size, x:x + size]
                if np.count_nonzero(cell) > min_fill:
                    areas.append(MotionArea(x, y, cell.shape[1], cell.shape[0]))
        return areas
