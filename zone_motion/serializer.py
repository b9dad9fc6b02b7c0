"""
Motion event log export.

Responsibility:
    Build event records from detection results and export them to
    structured file formats (JSON, CSV) for downstream consumption.
    Records are assembled here, outside the detection core.

Non-goals:
    - No rendering, display, or detection logic.
    - No database schema; files are written once on finalize.
"""

import csv
import json
import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from zone_motion.detection import DetectionResult, MotionArea

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MotionEventRecord:
    """One logged motion event.

    Attributes:
        id: Unique event id.
        frame_id: Index of the frame that triggered the event.
        timestamp: Capture time in seconds (wall clock or stream position).
        zones: Ids of the zones that triggered, empty for zoneless motion.
        areas: Reported motion areas.
        thumbnail: Path of the saved annotated frame, if one was written.
    """

    id: str
    frame_id: int
    timestamp: float
    zones: Tuple[str, ...]
    areas: Tuple[MotionArea, ...]
    thumbnail: Optional[str] = None

    @classmethod
    def from_result(
        cls,
        frame_id: int,
        timestamp: float,
        result: DetectionResult,
        thumbnail: Optional[str] = None,
    ) -> "MotionEventRecord":
        return cls(
            id=uuid.uuid4().hex,
            frame_id=frame_id,
            timestamp=timestamp,
            zones=result.triggered_zone_ids,
            areas=result.areas,
            thumbnail=thumbnail,
        )

    def to_dict(self) -> dict:
        """Return a plain dict suitable for JSON serialization."""
        return {
            "id": self.id,
            "frame_id": self.frame_id,
            "timestamp": round(self.timestamp, 3),
            "zones": list(self.zones),
            "areas": [a.to_dict() for a in self.areas],
            "thumbnail": self.thumbnail,
        }


def save_json(events: Sequence[MotionEventRecord], output_path: str) -> None:
    """Export motion events to a JSON file.

    Output schema:
        {
            "events": [
                {
                    "id": "...",
                    "frame_id": 12,
                    "timestamp": 1700000000.123,
                    "zones": ["door"],
                    "areas": [{"x": ..., "y": ..., "width": ..., "height": ..., "zone": "door"}],
                    "thumbnail": "motion_000012.jpg"
                }
            ],
            "total_events": N
        }

    Raises:
        OSError: If the output path is not writable.
    """
    _ensure_parent_dir(output_path)

    payload = {
        "events": [e.to_dict() for e in events],
        "total_events": len(events),
    }

    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)

    logger.info("JSON event log saved: %s (%d events)", output_path, len(events))


def save_csv(events: Sequence[MotionEventRecord], output_path: str) -> None:
    """Export motion events to a CSV file, one row per motion area.

    Columns: event_id, frame_id, timestamp, zone, x, y, width, height, thumbnail

    Events without areas (grid engine, diffuse motion) produce a single
    row with empty area columns.

    Raises:
        OSError: If the output path is not writable.
    """
    _ensure_parent_dir(output_path)

    fieldnames = [
        "event_id", "frame_id", "timestamp", "zone",
        "x", "y", "width", "height", "thumbnail",
    ]

    rows: List[dict] = []
    for event in events:
        base = {
            "event_id": event.id,
            "frame_id": event.frame_id,
            "timestamp": round(event.timestamp, 3),
            "thumbnail": event.thumbnail or "",
        }
        if not event.areas:
            rows.append({**base, "zone": "", "x": "", "y": "", "width": "", "height": ""})
            continue
        for area in event.areas:
            rows.append({
                **base,
                "zone": area.zone or "",
                "x": area.x,
                "y": area.y,
                "width": area.width,
                "height": area.height,
            })

    with open(output_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        writer.writerows(rows)

    logger.info("CSV event log saved: %s (%d rows)", output_path, len(rows))


def _ensure_parent_dir(path: str) -> None:
    """Create parent directories if they don't exist."""
    Path(path).parent.mkdir(parents=True, exist_ok=True)
