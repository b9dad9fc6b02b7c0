"""
Motion zones and zone utilities.

A Zone is a user-defined rectangular region of interest with its own
sensitivity and enabled flag. Zones are plain configuration data: they
are created by the caller (config file, UI), handed to the evaluator
via set_zones(), and never mutated in place.

Non-goals:
    - No motion logic.
    - No persistence (see config for YAML loading).
"""

import random
import uuid
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from zone_motion.frame import Rect

MIN_SENSITIVITY = 1
MAX_SENSITIVITY = 100
DEFAULT_SENSITIVITY = 50

ALERT_LEVELS = ("low", "medium", "high")

# Overlay palette: blue, green, amber, red, purple, pink, teal.
ZONE_COLORS: Tuple[str, ...] = (
    "#3b82f6",
    "#10b981",
    "#f59e0b",
    "#ef4444",
    "#8b5cf6",
    "#ec4899",
    "#14b8a6",
)


def clamp_sensitivity(value: float) -> int:
    """Clamp a sensitivity value into [1, 100]."""
    return int(max(MIN_SENSITIVITY, min(MAX_SENSITIVITY, value)))


def generate_zone_color(rng: Optional[random.Random] = None) -> str:
    """Pick a random overlay color from the zone palette."""
    return (rng or random).choice(ZONE_COLORS)


def parse_bool(value) -> bool:
    """Interpret YAML booleans and env-var strings alike."""
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def new_zone_id() -> str:
    return uuid.uuid4().hex


def hex_to_bgr(color: str) -> Tuple[int, int, int]:
    """Convert '#rrggbb' to an OpenCV BGR tuple.

    Raises:
        ValueError: If the string is not a 6-digit hex color.
    """
    value = color.lstrip("#")
    if len(value) != 6:
        raise ValueError(f"Expected a '#rrggbb' color, got '{color}'.")
    r, g, b = (int(value[i:i + 2], 16) for i in (0, 2, 4))
    return (b, g, r)


@dataclass(frozen=True, slots=True)
class Zone:
    """A named region of interest.

    Attributes:
        id: Unique identifier, reported in DetectionResult.triggered_zone_ids.
        name: Human-readable label.
        rect: Region in frame pixel coordinates.
        sensitivity: Integer dial in [1, 100]; higher means more sensitive.
        enabled: Disabled zones are never evaluated.
        color: Overlay color as '#rrggbb'.
        alert_level: One of 'low', 'medium', 'high'. Carried for
                     downstream consumers; detection ignores it.
    """

    id: str
    name: str
    rect: Rect
    sensitivity: int = DEFAULT_SENSITIVITY
    enabled: bool = True
    color: str = ZONE_COLORS[0]
    alert_level: str = "medium"

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Zone id must be a non-empty string.")
        if not (MIN_SENSITIVITY <= self.sensitivity <= MAX_SENSITIVITY):
            raise ValueError(
                f"Zone '{self.id}' sensitivity must be in "
                f"[{MIN_SENSITIVITY}, {MAX_SENSITIVITY}], got {self.sensitivity}."
            )
        if self.alert_level not in ALERT_LEVELS:
            raise ValueError(
                f"Zone '{self.id}' alert_level must be one of {ALERT_LEVELS}, "
                f"got '{self.alert_level}'."
            )

    @classmethod
    def create(
        cls,
        name: str,
        rect: Rect,
        sensitivity: int = DEFAULT_SENSITIVITY,
        alert_level: str = "medium",
        rng: Optional[random.Random] = None,
    ) -> "Zone":
        """Create a new enabled zone with a fresh id and a palette color."""
        return cls(
            id=new_zone_id(),
            name=name,
            rect=rect,
            sensitivity=sensitivity,
            enabled=True,
            color=generate_zone_color(rng),
            alert_level=alert_level,
        )

    def with_sensitivity(self, sensitivity: int) -> "Zone":
        """Return a copy with the sensitivity clamped into [1, 100]."""
        return replace(self, sensitivity=clamp_sensitivity(sensitivity))

    def with_enabled(self, enabled: bool) -> "Zone":
        return replace(self, enabled=enabled)

    def contains_point(self, x: float, y: float) -> bool:
        return self.rect.contains_point(x, y)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "rect": self.rect.to_dict(),
            "sensitivity": self.sensitivity,
            "enabled": self.enabled,
            "color": self.color,
            "alert_level": self.alert_level,
        }

    @classmethod
    def from_dict(cls, raw: dict) -> "Zone":
        """Build a Zone from plain configuration data (e.g. parsed YAML).

        Missing id/name/color are filled in; rect is required.

        Raises:
            ValueError: If rect is missing or any value is out of range.
        """
        if "rect" not in raw:
            raise ValueError(f"Zone is missing required key 'rect': {raw}")

        raw_id = raw.get("id")
        zone_id = new_zone_id() if raw_id is None or raw_id == "" else str(raw_id)
        return cls(
            id=zone_id,
            name=str(raw.get("name", zone_id)),
            rect=Rect.from_dict(raw["rect"]),
            sensitivity=int(raw.get("sensitivity", DEFAULT_SENSITIVITY)),
            enabled=parse_bool(raw.get("enabled", True)),
            color=str(raw.get("color") or generate_zone_color()),
            alert_level=str(raw.get("alert_level", "medium")).lower(),
        )


def is_point_in_zone(x: float, y: float, zone: Zone) -> bool:
    """Check whether a point lies inside a zone's rect (edges included)."""
    return zone.contains_point(x, y)
