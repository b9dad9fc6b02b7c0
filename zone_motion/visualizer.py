"""
Overlay rendering for the motion pipeline.

Responsibility:
    Draw zone outlines and motion areas onto a copy of a frame. This
    is a pure rendering module and performs no I/O beyond the optional
    preview window in show_frame().

Non-goals:
    - No file writing.
    - No detection logic.
"""

from typing import Iterable

import cv2
import numpy as np

from zone_motion.config import VisualizationConfig
from zone_motion.detection import DetectionResult
from zone_motion.zone import Zone, hex_to_bgr

# Cosmetic internals, not user-facing
_FONT = cv2.FONT_HERSHEY_SIMPLEX
_FONT_SCALE = 0.5
_FONT_THICKNESS = 1
_LABEL_PADDING = 4
_WINDOW_NAME = "Zone Motion"


def draw_zones(
    frame: np.ndarray,
    zones: Iterable[Zone],
    triggered_ids: Iterable[str],
    config: VisualizationConfig,
) -> np.ndarray:
    """Outline zones in their own color; triggered zones get a thicker edge.

    Disabled zones are drawn with a 1px line. The frame is drawn on
    in place and returned.
    """
    triggered = set(triggered_ids)

    for zone in zones:
        rect = zone.rect
        color = hex_to_bgr(zone.color)
        if not zone.enabled:
            thickness = 1
        elif zone.id in triggered:
            thickness = config.thickness * 2
        else:
            thickness = config.thickness

        cv2.rectangle(frame, (rect.x, rect.y), (rect.right - 1, rect.bottom - 1), color, thickness)

        if config.show_labels:
            label_y = max(rect.y - _LABEL_PADDING, _LABEL_PADDING * 3)
            cv2.putText(
                frame,
                zone.name,
                (rect.x + _LABEL_PADDING, label_y),
                _FONT,
                _FONT_SCALE,
                color,
                _FONT_THICKNESS,
                cv2.LINE_AA,
            )

    return frame


def draw_result(
    frame: np.ndarray,
    result: DetectionResult,
    zones: Iterable[Zone],
    config: VisualizationConfig,
) -> np.ndarray:
    """Draw zones (if enabled) and motion areas onto a copy of frame.

    Args:
        frame: Input BGR image (not modified; a copy is returned).
        result: Detection result for this frame.
        zones: Zones to outline when config.show_zones is set.
        config: Overlay parameters.

    Returns:
        A new BGR numpy array with the overlay drawn.
    """
    annotated = frame.copy()

    if config.show_zones:
        draw_zones(annotated, zones, result.triggered_zone_ids, config)

    for area in result.areas:
        # Zone areas coincide with their outline; only zoneless areas need a box.
        if area.zone is not None and config.show_zones:
            continue
        cv2.rectangle(
            annotated,
            (area.x, area.y),
            (area.x + area.width - 1, area.y + area.height - 1),
            color=config.area_color,
            thickness=config.thickness,
        )

    if result.detected:
        cv2.putText(
            annotated,
            "MOTION",
            (_LABEL_PADDING * 2, _LABEL_PADDING * 5),
            _FONT,
            _FONT_SCALE * 1.5,
            config.area_color,
            _FONT_THICKNESS + 1,
            cv2.LINE_AA,
        )

    return annotated


def show_frame(
    frame: np.ndarray,
    result: DetectionResult,
    zones: Iterable[Zone],
    config: VisualizationConfig,
) -> int:
    """Show the annotated frame in a window and return the key pressed.

    Returns:
        The low byte of the key code from waitKey (255 if no key).
    """
    cv2.imshow(_WINDOW_NAME, draw_result(frame, result, zones, config))
    return cv2.waitKey(1) & 0xFF
