"""
Tests for the frame differencing module.
"""

import numpy as np
import pytest

from zone_motion.differencer import (
    FRAME_BASE_AREA,
    ZONE_BASE_AREA,
    FrameDifferencer,
    change_mask,
    min_changed_pixels,
    pixel_threshold,
)
from zone_motion.frame import Frame, Rect


def _frame(height, width, value=0, channels=4):
    return Frame.from_array(np.full((height, width, channels), value, dtype=np.uint8))


def test_pixel_threshold_range():
    """Threshold maps the [1, 100] dial linearly onto [74.5, 25.0]."""
    assert pixel_threshold(50) == pytest.approx(50.0)
    assert pixel_threshold(100) == pytest.approx(25.0)
    assert pixel_threshold(1) == pytest.approx(74.5)


def test_min_changed_pixels_scaling():
    """Minimum count equals the base area at sensitivity 50."""
    assert min_changed_pixels(50, FRAME_BASE_AREA) == pytest.approx(500)
    assert min_changed_pixels(50, ZONE_BASE_AREA) == pytest.approx(200)
    assert min_changed_pixels(100, ZONE_BASE_AREA) == pytest.approx(100)
    assert min_changed_pixels(1, FRAME_BASE_AREA) == pytest.approx(25000)


def test_identical_frames_have_no_changed_pixels():
    """Two identical frames never produce a changed pixel."""
    frame = _frame(20, 30, value=128)
    diff = FrameDifferencer().diff_region(frame, frame, frame.bounds, 100)
    assert diff.changed_pixel_count == 0
    assert not diff.changed


def test_delta_must_exceed_threshold():
    """A mean delta exactly at the threshold does not count."""
    previous = _frame(10, 10, value=0)
    at_threshold = _frame(10, 10, value=25)
    above = _frame(10, 10, value=26)
    differencer = FrameDifferencer(base_area=1)

    assert differencer.diff_region(at_threshold, previous, previous.bounds, 100).changed_pixel_count == 0
    assert differencer.diff_region(above, previous, previous.bounds, 100).changed_pixel_count == 100


def test_mean_of_three_channels():
    """Only the mean of R, G, B matters; one saturated channel may not be enough."""
    previous = _frame(4, 4, value=0)
    data = np.zeros((4, 4, 4), dtype=np.uint8)
    data[:, :, 0] = 255  # mean delta 85
    current = Frame.from_array(data)

    # 85 > 74.5 (sensitivity 1), so every pixel counts
    count = FrameDifferencer().diff_region(current, previous, current.bounds, 1).changed_pixel_count
    assert count == 16

    data = np.zeros((4, 4, 4), dtype=np.uint8)
    data[:, :, 0] = 150  # mean delta 50
    current = Frame.from_array(data)
    count = FrameDifferencer().diff_region(current, previous, current.bounds, 1).changed_pixel_count
    assert count == 0


def test_alpha_channel_is_ignored():
    """Changes confined to the alpha channel are not motion."""
    previous = _frame(8, 8, value=0)
    data = np.zeros((8, 8, 4), dtype=np.uint8)
    data[:, :, 3] = 255
    current = Frame.from_array(data)

    mask = change_mask(current, previous, current.bounds, 100)
    assert not mask.any()


def test_scan_is_bounded_to_region():
    """Changes outside the region are not counted."""
    previous = _frame(40, 40, value=0)
    data = np.zeros((40, 40, 4), dtype=np.uint8)
    data[:20, :20] = 255
    current = Frame.from_array(data)

    differencer = FrameDifferencer()
    inside = differencer.diff_region(current, previous, Rect(0, 0, 20, 20), 50)
    outside = differencer.diff_region(current, previous, Rect(20, 20, 20, 20), 50)
    straddling = differencer.diff_region(current, previous, Rect(10, 10, 20, 20), 50)

    assert inside.changed_pixel_count == 400
    assert outside.changed_pixel_count == 0
    assert straddling.changed_pixel_count == 100


def test_changed_requires_count_above_minimum():
    """changed is a strict comparison against min_changed_pixels."""
    previous = _frame(10, 20, value=0)
    current = _frame(10, 20, value=255)

    # 200 changed pixels, minimum 200 at sensitivity 50 -> not changed
    assert not FrameDifferencer(ZONE_BASE_AREA).diff_region(current, previous, current.bounds, 50).changed
    # Minimum drops to ~196 at sensitivity 51 -> changed
    assert FrameDifferencer(ZONE_BASE_AREA).diff_region(current, previous, current.bounds, 51).changed


def test_monotonic_in_sensitivity():
    """Once a region triggers, every higher sensitivity also triggers."""
    previous = _frame(100, 100, value=0)
    ramp = np.tile(np.linspace(0, 255, 100).astype(np.uint8), (100, 1))
    current = Frame.from_array(np.repeat(ramp[:, :, None], 4, axis=2))

    differencer = FrameDifferencer(FRAME_BASE_AREA)
    outcomes = [
        differencer.diff_region(current, previous, current.bounds, s)
        for s in range(1, 101)
    ]
    counts = [d.changed_pixel_count for d in outcomes]
    changed = [d.changed for d in outcomes]

    assert counts == sorted(counts)
    first = changed.index(True)
    assert all(changed[first:])
    assert not any(changed[:first])


def test_inputs_are_not_mutated():
    """Differencing leaves both frames untouched."""
    previous = _frame(10, 10, value=0)
    current = _frame(10, 10, value=200)
    before = current.data.copy()

    FrameDifferencer().diff_region(current, previous, current.bounds, 50)

    assert np.array_equal(current.data, before)
    assert not previous.data.any()


def test_base_area_must_be_positive():
    """A non-positive base area is a configuration error."""
    with pytest.raises(ValueError, match="base_area"):
        FrameDifferencer(base_area=0)
