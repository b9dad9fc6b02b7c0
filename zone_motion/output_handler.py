"""
Output handling for the motion pipeline.

Responsibility:
    Route detection results to configured output sinks: a preview
    window, annotated thumbnails of motion frames, and a JSON or CSV
    event log. Multiple sinks can be active at once.

Non-goals:
    - No detection logic.
    - No input acquisition.
    - No video recording.
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Set

import cv2
import numpy as np

from zone_motion.config import AppConfig, get_project_root
from zone_motion.detection import DetectionResult
from zone_motion.serializer import MotionEventRecord, save_csv, save_json
from zone_motion.visualizer import draw_result, show_frame
from zone_motion.zone import Zone

logger = logging.getLogger(__name__)

_QUIT_KEYS = {ord("q"), 27}  # 'q' or ESC


class OutputHandler:
    """Routes detection results to configured output sinks.

    Supported modes (comma-separated in config.output.mode):
        - 'display': Show annotated frames in an OpenCV window.
        - 'save_image': Write an annotated thumbnail for each frame with motion.
        - 'save_json': Accumulate motion events, write JSON on finalize.
        - 'save_csv': Accumulate motion events, write CSV on finalize.

    Usage:
        handler = OutputHandler(config)
        handler.process_frame(frame_id, timestamp, frame, result, zones)
        ...
        handler.finalize()  # Flush the event log
    """

    def __init__(self, config: AppConfig) -> None:
        self._config = config
        self._modes: Set[str] = set(config.output.modes)
        self._events: List[MotionEventRecord] = []

        save_path = Path(config.output.save_path)
        if not save_path.is_absolute():
            save_path = get_project_root() / save_path
        self._save_path = save_path

        if self._modes & {'save_image', 'save_json', 'save_csv'}:
            self._save_path.mkdir(parents=True, exist_ok=True)

        logger.info("OutputHandler initialized: modes=%s, save_path=%s",
                    self._modes, self._save_path)

    @property
    def events(self) -> Sequence[MotionEventRecord]:
        return tuple(self._events)

    def process_frame(
        self,
        frame_id: int,
        timestamp: float,
        frame: np.ndarray,
        result: DetectionResult,
        zones: Sequence[Zone] = (),
    ) -> bool:
        """Send one frame's result through the output sinks.

        Returns:
            True to continue processing, False if the user asked to
            stop (quit key in display mode).
        """
        should_continue = True

        if 'display' in self._modes:
            key = show_frame(frame, result, zones, self._config.visualization)
            if key in _QUIT_KEYS:
                logger.info("Quit signal received (key press).")
                should_continue = False

        if not result.detected:
            return should_continue

        thumbnail: Optional[str] = None
        if 'save_image' in self._modes:
            thumbnail = self._save_thumbnail(frame_id, frame, result, zones)

        if 'save_json' in self._modes or 'save_csv' in self._modes:
            self._events.append(
                MotionEventRecord.from_result(frame_id, timestamp, result, thumbnail)
            )

        logger.info(
            "Motion at frame %d (zones=%s, areas=%d)",
            frame_id, list(result.triggered_zone_ids) or "-", len(result.areas),
        )
        return should_continue

    def _save_thumbnail(
        self,
        frame_id: int,
        frame: np.ndarray,
        result: DetectionResult,
        zones: Sequence[Zone],
    ) -> Optional[str]:
        """Write the annotated frame and return its file name, or None on failure."""
        annotated = draw_result(frame, result, zones, self._config.visualization)
        name = f"motion_{frame_id:06d}.jpg"
        output_file = self._save_path / name
        if not cv2.imwrite(str(output_file), annotated):
            logger.warning("Failed to write thumbnail: %s", output_file)
            return None
        logger.debug("Saved thumbnail for frame %d to %s", frame_id, output_file)
        return name

    def finalize(self) -> None:
        """Write the event log and close any preview window.

        Must be called after all frames have been processed.
        """
        if 'save_json' in self._modes:
            save_json(self._events, str(self._save_path / "events.json"))

        if 'save_csv' in self._modes:
            save_csv(self._events, str(self._save_path / "events.csv"))

        if 'display' in self._modes:
            cv2.destroyAllWindows()

        self._events.clear()
        logger.info("OutputHandler finalized.")
