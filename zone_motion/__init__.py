"""
Zone Motion — zone-aware frame-differencing motion detection.

Public API:
    - MotionDetector: Config-driven entry point accepting numpy frames.
    - ZoneMotionEvaluator: Per-zone detector driven with Frame objects.
    - FrameMotionDetector: Whole-frame detector with grid motion areas.
    - Frame, Rect, Zone: Input value types.
    - DetectionResult, MotionArea: Output value types.

Adapter modules (input_handler, output_handler, visualizer,
serializer) are used by the CLI and are not part of the core.

Usage:
    from zone_motion import MotionDetector

    detector = MotionDetector()
    result = detector.detect(frame)
"""

from zone_motion.detection import DetectionResult, MotionArea
from zone_motion.detector import MotionDetector
from zone_motion.evaluator import EvaluatorState, ZoneMotionEvaluator
from zone_motion.frame import Frame, Rect
from zone_motion.frame_detector import FrameMotionDetector
from zone_motion.zone import Zone

__all__ = [
    "MotionDetector",
    "ZoneMotionEvaluator",
    "EvaluatorState",
    "FrameMotionDetector",
    "Frame",
    "Rect",
    "Zone",
    "DetectionResult",
    "MotionArea",
]
