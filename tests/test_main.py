"""
Tests for the CLI entry point.
"""

import json

import cv2
import numpy as np

import main


def test_cli_overrides_are_validated():
    """CLI values replace config values and are validated."""
    args = main.parse_args(["--sensitivity", "75", "--engine", "grid", "--output-mode", "save_csv"])
    config = main.apply_cli_overrides(main.load_config(None), args)

    assert config.detection.sensitivity == 75
    assert config.detection.engine == "grid"
    assert config.output.mode == "save_csv"


def test_invalid_cli_sensitivity_fails(tmp_path):
    """An out-of-range sensitivity exits with status 1."""
    assert main.main(["--source", str(tmp_path), "--sensitivity", "0"]) == 1


def test_run_over_image_directory(tmp_path):
    """A full run over three images logs the one frame with motion."""
    frames_dir = tmp_path / "frames"
    frames_dir.mkdir()
    cv2.imwrite(str(frames_dir / "0.png"), np.zeros((100, 100, 3), dtype=np.uint8))
    cv2.imwrite(str(frames_dir / "1.png"), np.zeros((100, 100, 3), dtype=np.uint8))
    cv2.imwrite(str(frames_dir / "2.png"), np.full((100, 100, 3), 255, dtype=np.uint8))
    out_dir = tmp_path / "out"

    status = main.main([
        "--source", str(frames_dir),
        "--output-mode", "save_json",
        "--output-path", str(out_dir),
    ])

    assert status == 0
    payload = json.loads((out_dir / "events.json").read_text(encoding="utf-8"))
    assert payload["total_events"] == 1
    assert payload["events"][0]["frame_id"] == 2
    assert payload["events"][0]["zones"] == []
