"""
Tests for the whole-frame grid detector.
"""

import numpy as np
import pytest

from zone_motion.detection import MotionArea
from zone_motion.frame import Frame
from zone_motion.frame_detector import FrameMotionDetector


def _frame(height, width, value=0):
    return Frame.from_array(np.full((height, width, 4), value, dtype=np.uint8))


def test_baseline_then_detection():
    """First call is a baseline; a changed quadrant is reported as one cell."""
    detector = FrameMotionDetector()
    assert not detector.detect(_frame(100, 100)).detected

    data = np.zeros((100, 100, 4), dtype=np.uint8)
    data[:50, :50, :3] = 255
    result = detector.detect(Frame.from_array(data))

    assert result.detected
    assert result.areas == (MotionArea(0, 0, 50, 50),)
    assert result.triggered_zone_ids == ()


def test_edge_cells_are_truncated():
    """Cells at the right and bottom edges are clipped to the frame."""
    detector = FrameMotionDetector()
    detector.detect(_frame(60, 120))

    result = detector.detect(_frame(60, 120, value=255))

    # Bottom row cells are 10px tall: 50*10 = 500 is not above the 500 fill minimum
    assert result.areas == (
        MotionArea(0, 0, 50, 50),
        MotionArea(50, 0, 50, 50),
        MotionArea(100, 0, 20, 50),
    )


def test_diffuse_motion_detected_without_areas():
    """Sparse motion can cross the frame threshold without filling any cell."""
    detector = FrameMotionDetector()
    detector.detect(_frame(100, 100))

    data = np.zeros((100, 100, 4), dtype=np.uint8)
    data[::3, ::3, :3] = 255
    result = detector.detect(Frame.from_array(data))

    assert result.detected
    assert result.areas == ()


def test_no_motion_no_areas():
    """Identical frames report nothing."""
    detector = FrameMotionDetector(sensitivity=100)
    detector.detect(_frame(100, 100, value=7))

    result = detector.detect(_frame(100, 100, value=7))

    assert not result.detected
    assert result.areas == ()


def test_set_sensitivity_clamps():
    """Sensitivity is clamped into [1, 100]."""
    detector = FrameMotionDetector()
    detector.set_sensitivity(0)
    assert detector.sensitivity == 1
    detector.set_sensitivity(150)
    assert detector.sensitivity == 100


def test_reset_and_dimension_change():
    """reset() and a resolution change both re-baseline."""
    detector = FrameMotionDetector()
    detector.detect(_frame(100, 100))
    detector.reset()
    assert not detector.detect(_frame(100, 100, value=255)).detected

    assert not detector.detect(_frame(80, 80)).detected
    assert detector.detect(_frame(80, 80, value=255)).detected


def test_invalid_grid_parameters():
    """Grid size and fill ratio are validated at construction."""
    with pytest.raises(ValueError, match="grid_size"):
        FrameMotionDetector(grid_size=0)
    with pytest.raises(ValueError, match="grid_fill_ratio"):
        FrameMotionDetector(grid_fill_ratio=1.5)
