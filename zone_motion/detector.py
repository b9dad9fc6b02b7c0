"""
MotionDetector — the single public API for motion detection.

This module is the intended programmatic entry point for consumers
that hold raw numpy frames (e.g. from OpenCV). Library users that
already produce Frame objects can drive ZoneMotionEvaluator directly.

Public contract:
    MotionDetector.detect(frame: np.ndarray) -> DetectionResult

Constraints:
    - Input must be a uint8 numpy array of shape (H, W, C), C >= 3.
    - The detector is stateful (it keeps the previous frame).
    - Thread-safety is not guaranteed (single-threaded design).

Non-goals:
    - No file reading, camera access, or I/O of any kind.
    - No visualization or output writing.
"""

import logging
from typing import Iterable, Optional, Tuple, Union

import numpy as np

from zone_motion.config import AppConfig, load_config
from zone_motion.detection import DetectionResult
from zone_motion.evaluator import ZoneMotionEvaluator
from zone_motion.frame import Frame
from zone_motion.frame_detector import FrameMotionDetector
from zone_motion.zone import Zone

logger = logging.getLogger(__name__)


class MotionDetector:
    """Motion detector driven one frame at a time.

    Wires the configured engine together:
        - 'zones': ZoneMotionEvaluator seeded with config.zones.
        - 'grid':  FrameMotionDetector at config.detection.sensitivity.

    Usage:
        detector = MotionDetector()                   # Uses safe defaults
        detector = MotionDetector(config=my_config)   # Custom config
        result = detector.detect(frame)               # uint8 numpy array
    """

    def __init__(self, config: Optional[AppConfig] = None) -> None:
        """Initialize the detector.

        Args:
            config: Application configuration. If None, safe defaults
                    are used (no config file required).

        Raises:
            ValueError: If configuration values are invalid.
        """
        if config is None:
            config = load_config()

        self._config = config
        detection = config.detection

        self._engine: Union[ZoneMotionEvaluator, FrameMotionDetector]
        if detection.engine == "grid":
            self._engine = FrameMotionDetector(
                sensitivity=detection.sensitivity,
                grid_size=detection.grid_size,
                grid_fill_ratio=detection.grid_fill_ratio,
                base_area=detection.frame_base_area,
            )
        else:
            self._engine = ZoneMotionEvaluator(
                zones=config.zones,
                default_sensitivity=detection.sensitivity,
                frame_base_area=detection.frame_base_area,
                zone_base_area=detection.zone_base_area,
            )

        logger.info(
            "MotionDetector initialized (engine=%s, sensitivity=%d, zones=%d)",
            detection.engine,
            detection.sensitivity,
            len(config.zones),
        )

    def detect(self, frame: Union[np.ndarray, Frame]) -> DetectionResult:
        """Detect motion between frame and the previous call's frame.

        Args:
            frame: A uint8 numpy array with shape (H, W, C), C >= 3,
                   as returned by cv2.imread() / VideoCapture.read(),
                   or an already wrapped Frame.

        Returns:
            A DetectionResult. The first call after construction or
            reset() always reports no motion.

        Raises:
            TypeError: If frame is neither a numpy ndarray nor a Frame.
            ValueError: If frame has incorrect shape, dtype, or is empty.
        """
        if not isinstance(frame, Frame):
            self._validate_frame(frame)
            frame = Frame.from_array(frame)

        if isinstance(self._engine, ZoneMotionEvaluator):
            return self._engine.evaluate(frame)
        return self._engine.detect(frame)

    def set_zones(self, zones: Iterable[Zone]) -> None:
        """Replace the active zones. Ignored by the grid engine."""
        if isinstance(self._engine, ZoneMotionEvaluator):
            self._engine.set_zones(zones)
        else:
            logger.warning("set_zones() has no effect with the grid engine.")

    def set_sensitivity(self, value: int) -> None:
        """Set the zoneless sensitivity, clamped into [1, 100]."""
        if isinstance(self._engine, FrameMotionDetector):
            self._engine.set_sensitivity(value)
        else:
            self._engine.set_default_sensitivity(value)

    def reset(self) -> None:
        """Drop the baseline; call after pausing detection or a source change."""
        self._engine.reset()

    @property
    def config(self) -> AppConfig:
        """Return the active configuration (read-only)."""
        return self._config

    @property
    def zones(self) -> Tuple[Zone, ...]:
        """Zones currently evaluated; empty for the grid engine."""
        if isinstance(self._engine, ZoneMotionEvaluator):
            return self._engine.zones
        return ()

    @property
    def engine(self) -> Union[ZoneMotionEvaluator, FrameMotionDetector]:
        return self._engine

    @staticmethod
    def _validate_frame(frame: np.ndarray) -> None:
        """Validate that the input frame meets the API contract.

        Raises:
            TypeError: If frame is not a numpy ndarray.
            ValueError: If frame is empty or has wrong dimensions.
        """
        if not isinstance(frame, np.ndarray):
            raise TypeError(
                f"Expected frame to be a numpy ndarray, "
                f"got {type(frame).__name__}. "
                f"Use cv2.imread() or VideoCapture.read() to obtain frames."
            )

        if frame.size == 0:
            raise ValueError(
                "Frame is empty (zero size). "
                "Ensure the input source is providing valid frames."
            )

        if frame.ndim != 3:
            raise ValueError(
                f"Expected a 3-dimensional frame (H, W, C), "
                f"got {frame.ndim} dimensions with shape {frame.shape}. "
                f"Grayscale images must be converted to BGR first."
            )

        if frame.shape[2] < 3:
            raise ValueError(
                f"Expected at least 3 channels, got {frame.shape[2]} channels."
            )

        if frame.dtype != np.uint8:
            raise ValueError(f"Expected dtype uint8, got {frame.dtype}.")
