"""
Zone Motion CLI Entrypoint.

Responsibility:
    Parse command-line arguments, configure the application, wire together
    the detector and I/O handlers, and run the main processing loop.

Usage:
    python main.py --source 0                          # Webcam
    python main.py --source clip.mp4 --output-mode save_json,save_image
    python main.py --config zones.yaml --sensitivity 70
    python main.py --engine grid --source frames/

This module is the executable entry point. It should not be imported
by other modules.
"""

import argparse
import logging
import sys
import time
from dataclasses import replace

# Configure logging before importing local modules
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("main")

from zone_motion.config import AppConfig, _validate, load_config
from zone_motion.detector import MotionDetector
from zone_motion.input_handler import InputHandler
from zone_motion.output_handler import OutputHandler


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Zone Motion — zone-aware motion detection CLI",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--source",
        type=str,
        help="Input source: '0' for webcam, path to image/video file, or directory.",
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Path to YAML configuration file (detection settings and zones).",
    )
    parser.add_argument(
        "--sensitivity",
        type=int,
        help="Default motion sensitivity (1 - 100). Overrides config.",
    )
    parser.add_argument(
        "--engine",
        type=str,
        choices=["zones", "grid"],
        help="Detection engine. Overrides config.",
    )
    parser.add_argument(
        "--output-mode",
        type=str,
        help="Output mode(s), comma-separated: display, save_image, save_json, "
             "save_csv. Example: 'display,save_json'. Overrides config.",
    )
    parser.add_argument(
        "--output-path",
        type=str,
        help="Directory for thumbnails and event logs. Overrides config.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )

    return parser.parse_args(argv)


def apply_cli_overrides(config: AppConfig, args: argparse.Namespace) -> AppConfig:
    """Return a copy of config with CLI arguments applied and re-validated."""
    detection = config.detection
    if args.sensitivity is not None:
        detection = replace(detection, sensitivity=args.sensitivity)
    if args.engine is not None:
        detection = replace(detection, engine=args.engine)

    input_config = config.input
    if args.source is not None:
        input_config = replace(input_config, source=args.source)

    output = config.output
    if args.output_mode is not None:
        output = replace(output, mode=args.output_mode)
    if args.output_path is not None:
        output = replace(output, save_path=args.output_path)

    config = replace(config, detection=detection, input=input_config, output=output)
    _validate(config)
    return config


def main(argv=None) -> int:
    """Main execution loop."""
    args = parse_args(argv)
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    # 1. Load Configuration (CLI args > ENV > YAML > Defaults)
    try:
        config = apply_cli_overrides(load_config(args.config), args)
        logger.info("Configuration active for this run.")
    except Exception as e:
        logger.error("Configuration error: %s", e)
        return 1

    # 2. Initialize Components
    try:
        detector = MotionDetector(config)
        input_handler = InputHandler(
            source=config.input.source,
            resize_width=config.input.resize_width,
        )
        output_handler = OutputHandler(config)

    except (FileNotFoundError, ValueError, RuntimeError) as e:
        logger.error("Initialization failed: %s", e)
        return 1
    except Exception as e:
        logger.exception("Unexpected initialization error: %s", e)
        return 1

    # 3. Processing Loop
    logger.info("Starting processing loop. Press 'q' or ESC to quit in display mode.")

    frame_count = 0
    motion_count = 0
    start_time = time.perf_counter()

    try:
        for frame_id, timestamp, frame in input_handler:
            frame_count += 1

            result = detector.detect(frame)
            if result.detected:
                motion_count += 1

            if frame_count % 100 == 0:
                logger.info("Processed %d frames (%d with motion)...", frame_count, motion_count)

            if not output_handler.process_frame(
                frame_id, timestamp, frame, result, detector.zones
            ):
                logger.info("Stopping loop per user request.")
                break

    except KeyboardInterrupt:
        logger.info("Interrupted by user.")
    except Exception as e:
        logger.exception("Runtime error during processing: %s", e)
        return 1
    finally:
        # 4. Cleanup
        elapsed = time.perf_counter() - start_time
        fps = frame_count / elapsed if elapsed > 0 else 0.0

        input_handler.release()
        output_handler.finalize()

        logger.info(
            "Processing finished. Frames: %d, with motion: %d. Avg FPS: %.2f.",
            frame_count, motion_count, fps,
        )

    return 0


if __name__ == "__main__":
    sys.exit(main())
