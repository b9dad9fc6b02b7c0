"""
Zone-aware motion evaluation.

Responsibility:
    Turn one new frame into a DetectionResult given the current zone
    configuration. Holds the previous frame between calls.

State machine:
    UNINITIALIZED --evaluate--> ARMED --evaluate--> ARMED
    any state     --reset-----> UNINITIALIZED

    The first evaluate() after construction, reset(), or a change of
    frame dimensions only stores the baseline and reports no motion.

Constraints:
    - Never raises from evaluate(); at worst it reports no motion.
    - Not reentrant. Callers drive it from a single loop.
    - set_zones() takes effect on the next evaluate() and does not
      drop the baseline.

Non-goals:
    - No capture, scheduling, recording, or notification logic.
"""

import enum
import logging
from typing import Iterable, List, Optional, Tuple

from zone_motion.detection import DetectionResult, MotionArea
from zone_motion.differencer import (
    FRAME_BASE_AREA,
    NO_CHANGE,
    ZONE_BASE_AREA,
    FrameDifferencer,
)
from zone_motion.frame import Frame
from zone_motion.zone import DEFAULT_SENSITIVITY, Zone, clamp_sensitivity

logger = logging.getLogger(__name__)


class EvaluatorState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    ARMED = "armed"


class ZoneMotionEvaluator:
    """Per-zone frame-differencing motion detector.

    Usage:
        evaluator = ZoneMotionEvaluator(zones)
        for frame in frames:
            result = evaluator.evaluate(frame)
            if result.detected:
                notify(result.triggered_zone_ids)

    With no enabled zones the whole frame is evaluated at
    default_sensitivity and a single full-frame area is reported.
    """

    def __init__(
        self,
        zones: Iterable[Zone] = (),
        default_sensitivity: int = DEFAULT_SENSITIVITY,
        frame_base_area: float = FRAME_BASE_AREA,
        zone_base_area: float = ZONE_BASE_AREA,
    ) -> None:
        self._default_sensitivity = clamp_sensitivity(default_sensitivity)
        self._frame_differencer = FrameDifferencer(frame_base_area)
        self._zone_differencer = FrameDifferencer(zone_base_area)
        self._previous: Optional[Frame] = None
        self._zones: Tuple[Zone, ...] = ()
        self.set_zones(zones)

    @property
    def state(self) -> EvaluatorState:
        if self._previous is None:
            return EvaluatorState.UNINITIALIZED
        return EvaluatorState.ARMED

    @property
    def zones(self) -> Tuple[Zone, ...]:
        return self._zones

    @property
    def default_sensitivity(self) -> int:
        return self._default_sensitivity

    def set_default_sensitivity(self, value: int) -> None:
        """Set the zoneless sensitivity, clamped into [1, 100]."""
        self._default_sensitivity = clamp_sensitivity(value)

    def set_zones(self, zones: Iterable[Zone]) -> None:
        """Replace the active zone set.

        Raises:
            ValueError: If two zones share an id.
        """
        snapshot = tuple(zones)
        seen = set()
        for zone in snapshot:
            if zone.id in seen:
                raise ValueError(f"Duplicate zone id: '{zone.id}'.")
            seen.add(zone.id)

        self._zones = snapshot
        logger.debug(
            "Zones updated: %d total, %d enabled",
            len(snapshot), sum(1 for z in snapshot if z.enabled),
        )

    def reset(self) -> None:
        """Drop the previous frame; the next evaluate() re-baselines."""
        if self._previous is not None:
            logger.debug("Evaluator reset; baseline dropped.")
        self._previous = None

    def evaluate(self, current: Frame) -> DetectionResult:
        """Compare current against the previous frame, zone by zone.

        Args:
            current: Newest frame from the source.

        Returns:
            A DetectionResult. Always empty on the baseline cycle.
        """
        previous = self._previous

        if previous is None:
            self._previous = current
            logger.debug("Baseline frame stored (%dx%d).", current.width, current.height)
            return DetectionResult.empty()

        if not current.same_layout(previous):
            logger.info(
                "Frame layout changed %s -> %s; re-baselining.",
                previous.data.shape, current.data.shape,
            )
            self._previous = current
            return DetectionResult.empty()

        # The zone snapshot is read exactly once per call.
        active = [z for z in self._zones if z.enabled]

        areas: List[MotionArea] = []
        triggered: List[str] = []

        if not active:
            diff = self._frame_differencer.diff_region(
                current, previous, current.bounds, self._default_sensitivity,
            )
            if diff.changed:
                areas.append(MotionArea(0, 0, current.width, current.height))
        else:
            for zone in active:
                region = zone.rect.clip(current.width, current.height)
                if region is None:
                    diff = NO_CHANGE
                else:
                    diff = self._zone_differencer.diff_region(
                        current, previous, region, zone.sensitivity,
                    )

                if diff.changed:
                    triggered.append(zone.id)
                    rect = zone.rect
                    areas.append(MotionArea(rect.x, rect.y, rect.width, rect.height, zone=zone.id))

        self._previous = current

        return DetectionResult(
            detected=len(areas) > 0,
            areas=tuple(areas),
            triggered_zone_ids=tuple(triggered),
        )
