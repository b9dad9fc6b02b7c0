"""
Tests for the frame, rect and zone value types.
"""

import random

import numpy as np
import pytest

from zone_motion.frame import Frame, Rect
from zone_motion.zone import (
    ZONE_COLORS,
    Zone,
    generate_zone_color,
    hex_to_bgr,
    is_point_in_zone,
    parse_bool,
)


def test_rect_validation():
    """Negative origins and empty sizes are rejected."""
    with pytest.raises(ValueError, match="non-negative"):
        Rect(-1, 0, 10, 10)
    with pytest.raises(ValueError, match="positive"):
        Rect(0, 0, 0, 10)


def test_rect_clip():
    """Clipping trims to the frame and returns None when fully outside."""
    assert Rect(0, 0, 10, 10).clip(100, 100) == Rect(0, 0, 10, 10)
    assert Rect(90, 95, 20, 20).clip(100, 100) == Rect(90, 95, 10, 5)
    assert Rect(100, 0, 10, 10).clip(100, 100) is None
    assert Rect(0, 120, 10, 10).clip(100, 100) is None


def test_point_in_zone_includes_edges():
    """Points on the border are inside."""
    zone = Zone(id="z", name="z", rect=Rect(10, 10, 20, 20))
    assert is_point_in_zone(10, 10, zone)
    assert is_point_in_zone(30, 30, zone)
    assert is_point_in_zone(20, 15, zone)
    assert not is_point_in_zone(31, 20, zone)
    assert not is_point_in_zone(9, 20, zone)


def test_frame_from_buffer():
    """A flat RGBA buffer is reshaped to (H, W, 4)."""
    frame = Frame.from_buffer(3, 2, bytes(range(24)))
    assert frame.size == (3, 2)
    assert frame.channels == 4
    assert frame.data[1, 2].tolist() == [20, 21, 22, 23]


def test_frame_from_buffer_length_mismatch():
    """A buffer of the wrong length is rejected."""
    with pytest.raises(ValueError, match="expected 24"):
        Frame.from_buffer(3, 2, bytes(20))


def test_frame_is_read_only_copy():
    """The frame cannot be written through and ignores later caller writes."""
    array = np.zeros((4, 4, 3), dtype=np.uint8)
    frame = Frame.from_array(array)

    assert not frame.data.flags.writeable
    with pytest.raises(ValueError):
        frame.data[0, 0, 0] = 1
    array[0, 0, 0] = 1
    assert frame.data[0, 0, 0] == 0
    assert array.flags.writeable


def test_frame_from_buffer_copies():
    """Refilling a bytearray does not change a frame built from it."""
    buffer = bytearray(2 * 2 * 4)
    frame = Frame.from_buffer(2, 2, buffer)
    buffer[:] = b"\xff" * len(buffer)
    assert int(frame.data.max()) == 0


def test_frame_rejects_bad_shapes():
    """Grayscale, two-channel, non-uint8 and empty arrays are rejected."""
    with pytest.raises(ValueError):
        Frame.from_array(np.zeros((4, 4), dtype=np.uint8))
    with pytest.raises(ValueError):
        Frame.from_array(np.zeros((4, 4, 2), dtype=np.uint8))
    with pytest.raises(ValueError, match="uint8"):
        Frame.from_array(np.zeros((4, 4, 3), dtype=np.float32))
    with pytest.raises(ValueError, match="empty"):
        Frame.from_array(np.zeros((0, 4, 3), dtype=np.uint8))


def test_zone_validation():
    """Sensitivity and alert level are range-checked."""
    with pytest.raises(ValueError, match="sensitivity"):
        Zone(id="z", name="z", rect=Rect(0, 0, 1, 1), sensitivity=0)
    with pytest.raises(ValueError, match="alert_level"):
        Zone(id="z", name="z", rect=Rect(0, 0, 1, 1), alert_level="urgent")
    with pytest.raises(ValueError, match="id"):
        Zone(id="", name="z", rect=Rect(0, 0, 1, 1))


def test_zone_updates_return_copies():
    """with_sensitivity clamps; neither update mutates the original."""
    zone = Zone(id="z", name="z", rect=Rect(0, 0, 1, 1))

    louder = zone.with_sensitivity(500)
    off = zone.with_enabled(False)

    assert louder.sensitivity == 100
    assert not off.enabled
    assert zone.sensitivity == 50
    assert zone.enabled


def test_zone_create_assigns_id_and_palette_color():
    """New zones get a unique id and a palette color."""
    rng = random.Random(7)
    first = Zone.create("Door", Rect(0, 0, 10, 10), rng=rng)
    second = Zone.create("Door", Rect(0, 0, 10, 10), rng=rng)

    assert first.id != second.id
    assert first.color in ZONE_COLORS
    assert first.enabled


def test_zone_dict_round_trip():
    """from_dict fills defaults and reads back what to_dict wrote."""
    zone = Zone.from_dict({"id": "gate", "rect": {"x": 1, "y": 2, "width": 3, "height": 4}})
    assert zone.name == "gate"
    assert zone.sensitivity == 50
    assert zone.alert_level == "medium"
    assert zone.color in ZONE_COLORS

    assert Zone.from_dict(zone.to_dict()) == zone


def test_zone_from_dict_enabled_strings():
    """String flags from env or hand-written files are parsed, not truthy."""
    rect = {"x": 0, "y": 0, "width": 1, "height": 1}
    assert not Zone.from_dict({"id": "a", "rect": rect, "enabled": "false"}).enabled
    assert not Zone.from_dict({"id": "a", "rect": rect, "enabled": "no"}).enabled
    assert not Zone.from_dict({"id": "a", "rect": rect, "enabled": False}).enabled
    assert Zone.from_dict({"id": "a", "rect": rect, "enabled": "Yes"}).enabled
    assert Zone.from_dict({"id": "a", "rect": rect}).enabled


def test_zone_from_dict_keeps_falsy_ids():
    """A numeric id of 0 is kept; only a missing or empty id is generated."""
    rect = {"x": 0, "y": 0, "width": 1, "height": 1}
    assert Zone.from_dict({"id": 0, "rect": rect}).id == "0"
    generated = Zone.from_dict({"id": "", "rect": rect}).id
    assert len(generated) == 32


def test_parse_bool():
    assert parse_bool(" ON ")
    assert parse_bool(1)
    assert not parse_bool("off")
    assert not parse_bool("0")
    assert not parse_bool(0)


def test_zone_from_dict_requires_rect():
    """A zone without a rect cannot be built."""
    with pytest.raises(ValueError, match="rect"):
        Zone.from_dict({"id": "gate"})
    with pytest.raises(ValueError, match="height"):
        Zone.from_dict({"id": "gate", "rect": {"x": 0, "y": 0, "width": 1}})


def test_colors():
    """Palette helpers produce valid OpenCV colors."""
    assert hex_to_bgr("#3b82f6") == (0xf6, 0x82, 0x3b)
    assert generate_zone_color(random.Random(1)) in ZONE_COLORS
    with pytest.raises(ValueError):
        hex_to_bgr("#fff")
