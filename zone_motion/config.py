"""
Configuration for the zone motion detector.

Values are layered, later layers winning:

    defaults < YAML file < ZONE_MOTION_* environment variables < CLI flags

The CLI layer lives in main.py. Everything else is resolved here into one
frozen AppConfig, checked once by _validate(). With no file and no
environment the detector runs on the defaults below.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

import yaml

from zone_motion.differencer import FRAME_BASE_AREA, ZONE_BASE_AREA
from zone_motion.frame_detector import DEFAULT_GRID_FILL_RATIO, DEFAULT_GRID_SIZE
from zone_motion.zone import (
    DEFAULT_SENSITIVITY,
    MAX_SENSITIVITY,
    MIN_SENSITIVITY,
    Zone,
    parse_bool,
)

logger = logging.getLogger(__name__)

_PROJECT_ROOT = Path(__file__).resolve().parent.parent

ENV_PREFIX = "ZONE_MOTION_"
ENGINES = frozenset({"zones", "grid"})
OUTPUT_MODES = frozenset({"display", "save_image", "save_json", "save_csv"})


def get_project_root() -> Path:
    """Directory that relative config and output paths are anchored to."""
    return _PROJECT_ROOT


@dataclass(frozen=True)
class DetectionConfig:
    """Motion detection parameters.

    Attributes:
        engine: 'zones' (per-zone evaluator, whole frame when no zone is
                enabled) or 'grid' (whole-frame detector with grid areas).
        sensitivity: Default sensitivity in [1, 100] for zoneless detection.
        frame_base_area: Base changed-pixel count for whole-frame detection.
        zone_base_area: Base changed-pixel count for per-zone detection.
        grid_size: Cell edge in pixels for the grid engine.
        grid_fill_ratio: Fraction of a cell that must change for it to be
                         reported by the grid engine.
    """

    engine: str = "zones"
    sensitivity: int = DEFAULT_SENSITIVITY
    frame_base_area: float = FRAME_BASE_AREA
    zone_base_area: float = ZONE_BASE_AREA
    grid_size: int = DEFAULT_GRID_SIZE
    grid_fill_ratio: float = DEFAULT_GRID_FILL_RATIO


@dataclass(frozen=True)
class InputConfig:
    """Where frames come from.

    Attributes:
        source: Camera index ("0"), image, video or directory path.
        resize_width: Frames wider than this are scaled down before
                      detection. None keeps the capture size.
    """

    source: str = "0"
    resize_width: Optional[int] = None


@dataclass(frozen=True)
class OutputConfig:
    """Where results go.

    Attributes:
        mode: Comma-separated sinks out of 'display', 'save_image',
              'save_json' and 'save_csv', e.g. "display,save_json".
        save_path: Directory for thumbnails and event logs.
    """

    mode: str = "display"
    save_path: str = "output/"

    @property
    def modes(self) -> frozenset:
        return frozenset(m.strip() for m in self.mode.split(",") if m.strip())


@dataclass(frozen=True)
class VisualizationConfig:
    """Overlay rendering parameters.

    Attributes:
        area_color: BGR color for motion areas.
        thickness: Outline width in pixels; triggered zones are drawn thicker.
        show_zones: Whether to outline configured zones.
        show_labels: Whether to render zone names.
    """

    area_color: Tuple[int, int, int] = (0, 0, 255)
    thickness: int = 2
    show_zones: bool = True
    show_labels: bool = True


@dataclass(frozen=True)
class AppConfig:
    """Everything the CLI needs: the four sections plus the zone list."""

    detection: DetectionConfig = field(default_factory=DetectionConfig)
    input: InputConfig = field(default_factory=InputConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    visualization: VisualizationConfig = field(default_factory=VisualizationConfig)
    zones: Tuple[Zone, ...] = ()


def _validate(config: AppConfig) -> None:
    """Raise ValueError naming the first setting that is out of range."""
    detection = config.detection

    if detection.engine not in ENGINES:
        raise ValueError(
            f"detection.engine '{detection.engine}' is unknown; "
            f"choose one of {sorted(ENGINES)}."
        )
    if not (MIN_SENSITIVITY <= detection.sensitivity <= MAX_SENSITIVITY):
        raise ValueError(
            f"detection.sensitivity must be in [{MIN_SENSITIVITY}, {MAX_SENSITIVITY}], "
            f"got {detection.sensitivity}."
        )
    if detection.frame_base_area <= 0 or detection.zone_base_area <= 0:
        raise ValueError(
            f"detection.frame_base_area and detection.zone_base_area must be positive, "
            f"got {detection.frame_base_area} and {detection.zone_base_area}."
        )
    if detection.grid_size <= 0:
        raise ValueError(f"detection.grid_size must be positive, got {detection.grid_size}.")
    if not (0.0 <= detection.grid_fill_ratio <= 1.0):
        raise ValueError(
            f"detection.grid_fill_ratio must be in [0.0, 1.0], "
            f"got {detection.grid_fill_ratio}."
        )

    if config.input.resize_width is not None and config.input.resize_width <= 0:
        raise ValueError(
            f"input.resize_width must be a positive width or null, "
            f"got {config.input.resize_width}."
        )

    unknown_modes = config.output.modes - OUTPUT_MODES
    if unknown_modes or not config.output.modes:
        raise ValueError(
            f"output.mode '{config.output.mode}' has unknown sink(s) "
            f"{sorted(unknown_modes)}; pick from {sorted(OUTPUT_MODES)}, comma-separated."
        )

    ids = [z.id for z in config.zones]
    duplicates = {i for i in ids if ids.count(i) > 1}
    if duplicates:
        raise ValueError(f"Duplicate zone id(s): {sorted(duplicates)}.")


def _lower(value: Any) -> str:
    return str(value).strip().lower()


def _optional_int(value: Any) -> Optional[int]:
    return None if value is None else int(value)


def _bgr(value: Any) -> Tuple[int, int, int]:
    if not isinstance(value, (list, tuple)) or len(value) != 3:
        raise ValueError(f"expected three BGR values, got {value!r}")
    return tuple(int(v) for v in value)


# Section name -> (dataclass, {key: cast}). Keys not listed are ignored.
_SECTIONS: Dict[str, Tuple[type, Dict[str, Callable[[Any], Any]]]] = {
    "detection": (DetectionConfig, {
        "engine": _lower,
        "sensitivity": int,
        "frame_base_area": float,
        "zone_base_area": float,
        "grid_size": int,
        "grid_fill_ratio": float,
    }),
    "input": (InputConfig, {
        "source": str,
        "resize_width": _optional_int,
    }),
    "output": (OutputConfig, {
        "mode": _lower,
        "save_path": str,
    }),
    "visualization": (VisualizationConfig, {
        "area_color": _bgr,
        "thickness": int,
        "show_zones": parse_bool,
        "show_labels": parse_bool,
    }),
}

# Settings that cannot be written as a single env string.
_NO_ENV = {("visualization", "area_color")}


def _build_section(name: str, raw: Any):
    """Cast one YAML/env section into its config dataclass."""
    cls, casts = _SECTIONS[name]
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ValueError(f"'{name}' must be a mapping, got {type(raw).__name__}.")

    unknown = sorted(set(raw) - set(casts))
    if unknown:
        logger.warning("Ignoring unknown %s setting(s): %s", name, ", ".join(unknown))

    kwargs = {}
    for key, cast in casts.items():
        if key not in raw:
            continue
        try:
            kwargs[key] = cast(raw[key])
        except (TypeError, ValueError) as e:
            raise ValueError(f"{name}.{key}: cannot use {raw[key]!r} ({e}).") from e
    return cls(**kwargs)


def _build_zones(raw) -> Tuple[Zone, ...]:
    """Build the zone tuple from a YAML list of zone mappings."""
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise ValueError(f"'zones' must be a list of mappings, got {type(raw).__name__}.")
    return tuple(Zone.from_dict(item) for item in raw)


def _env_name(section: str, key: str) -> str:
    return f"{ENV_PREFIX}{section}_{key}".upper()


def _apply_env_overrides(raw: dict) -> dict:
    """Overlay ZONE_MOTION_<SECTION>_<KEY> variables onto the raw dict.

    Every scalar setting has a variable, e.g. ZONE_MOTION_DETECTION_ENGINE
    or ZONE_MOTION_INPUT_RESIZE_WIDTH. Values stay strings here and are
    cast with the rest of the section.
    """
    for section, (_, casts) in _SECTIONS.items():
        for key in casts:
            if (section, key) in _NO_ENV:
                continue
            env_var = _env_name(section, key)
            value = os.environ.get(env_var)
            if value is None:
                continue
            target = raw.get(section)
            if not isinstance(target, dict):
                target = raw[section] = {}
            target[key] = value
            logger.debug("Config override from env: %s=%s", env_var, value)
    return raw


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """Resolve the defaults, an optional YAML file and the environment.

    Args:
        config_path: YAML file; relative paths are taken from the project
                     root. None means defaults plus environment only.

    Returns:
        A validated AppConfig.

    Raises:
        FileNotFoundError: If config_path does not point at a file.
        ValueError: If a value cannot be cast or is out of range.
        yaml.YAMLError: If the file is not valid YAML.
    """
    raw: dict = {}

    if config_path is not None:
        path = Path(config_path)
        if not path.is_absolute():
            path = _PROJECT_ROOT / path
        if not path.is_file():
            raise FileNotFoundError(
                f"Config file {path} does not exist; pass another --config "
                f"or leave it out to run on defaults."
            )
        logger.info("Loading config from: %s", path)
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
        if not isinstance(raw, dict):
            raise ValueError(f"Top level of {path} must be a mapping.")

    raw = _apply_env_overrides(raw)

    config = AppConfig(
        detection=_build_section("detection", raw.get("detection")),
        input=_build_section("input", raw.get("input")),
        output=_build_section("output", raw.get("output")),
        visualization=_build_section("visualization", raw.get("visualization")),
        zones=_build_zones(raw.get("zones")),
    )
    _validate(config)

    logger.debug("Configuration loaded: %s", config)
    return config
