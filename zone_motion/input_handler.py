"""
Frame source for the motion pipeline.

Yields (frame_id, timestamp, frame) from a webcam, a video file, a single
image, or a directory of images. The frames go straight to
MotionDetector.detect(); this module knows nothing about motion.

Unreadable images are logged and skipped. A webcam is given up on after
a run of failed reads. Sources never fall back to one another.
"""

import logging
import time
from pathlib import Path
from typing import Iterator, List, Optional, Tuple, Union

import cv2
import numpy as np

logger = logging.getLogger(__name__)

IMAGE_SUFFIXES = frozenset({".jpg", ".jpeg", ".png", ".bmp", ".tif", ".tiff", ".webp"})
VIDEO_SUFFIXES = frozenset({".mp4", ".avi", ".mov", ".mkv", ".wmv", ".flv"})

# Consecutive failed webcam reads tolerated before giving up.
_MAX_CONSECUTIVE_FAILURES = 30

CapturedFrame = Tuple[int, float, np.ndarray]


def _classify(source: str) -> str:
    """Map a source string to 'webcam', 'image', 'video' or 'directory'."""
    if source.isdigit():
        return "webcam"

    path = Path(source)
    if path.is_dir():
        return "directory"
    if not path.is_file():
        raise FileNotFoundError(
            f"No camera, file or directory matches source '{source}'."
        )

    suffix = path.suffix.lower()
    if suffix in IMAGE_SUFFIXES:
        return "image"
    if suffix in VIDEO_SUFFIXES:
        return "video"
    raise ValueError(
        f"Cannot read '{source}': extension '{suffix}' is neither an image "
        f"({sorted(IMAGE_SUFFIXES)}) nor a video ({sorted(VIDEO_SUFFIXES)})."
    )


class InputHandler:
    """Iterate over the frames of one capture source.

    Timestamps are the stream position in seconds for video files and
    wall-clock seconds for everything else.

    Usage:
        source = InputHandler("0")
        try:
            for frame_id, timestamp, frame in source:
                result = detector.detect(frame)
        finally:
            source.release()
    """

    def __init__(
        self,
        source: Union[str, int],
        resize_width: Optional[int] = None,
    ) -> None:
        """
        Args:
            source: Device index (int or digit string), image, video or
                    directory path.
            resize_width: Frames wider than this are scaled down to it,
                          keeping the aspect ratio.

        Raises:
            FileNotFoundError: If the path does not exist.
            ValueError: If the file type is unsupported or a directory
                        holds no images.
            RuntimeError: If OpenCV cannot open the camera or video.
        """
        self._resize_width = resize_width
        self._capture: Optional[cv2.VideoCapture] = None
        self._paths: List[str] = []

        name = str(source).strip()
        self._mode = _classify(name)

        if self._mode == "webcam":
            self._open(int(name))
        elif self._mode == "video":
            self._open(name)
        elif self._mode == "image":
            self._paths = [name]
        else:
            self._paths = sorted(
                str(p) for p in Path(name).iterdir()
                if p.suffix.lower() in IMAGE_SUFFIXES
            )
            if not self._paths:
                raise ValueError(f"Directory '{name}' contains no readable image files.")
            logger.info("Directory %s holds %d images", name, len(self._paths))

        logger.info("Opened %s source: %s", self._mode, name)

    @property
    def mode(self) -> str:
        return self._mode

    def _open(self, target: Union[str, int]) -> None:
        self._capture = cv2.VideoCapture(target)
        if not self._capture.isOpened():
            what = f"camera {target}" if isinstance(target, int) else f"video '{target}'"
            raise RuntimeError(f"OpenCV could not open {what}.")

    def __iter__(self) -> Iterator[CapturedFrame]:
        if self._capture is None:
            return self._read_images()
        return self._read_stream()

    def _read_images(self) -> Iterator[CapturedFrame]:
        for frame_id, path in enumerate(self._paths):
            image = cv2.imread(path)
            if image is None:
                logger.warning("Cannot decode %s, skipping frame %d", path, frame_id)
                continue
            yield frame_id, time.time(), self._scaled(image)

    def _read_stream(self) -> Iterator[CapturedFrame]:
        is_video = self._mode == "video"
        frame_id = 0
        misses = 0

        while True:
            ok, image = self._capture.read()
            if ok and image is not None:
                misses = 0
                if is_video:
                    timestamp = self._capture.get(cv2.CAP_PROP_POS_MSEC) / 1000.0
                else:
                    timestamp = time.time()
                yield frame_id, timestamp, self._scaled(image)
            elif is_video:
                logger.info("Video ended after %d frames", frame_id)
                return
            else:
                misses += 1
                if misses >= _MAX_CONSECUTIVE_FAILURES:
                    logger.error("Camera failed %d reads in a row, stopping", misses)
                    return
                logger.warning("Camera read failed at frame %d", frame_id)
            frame_id += 1

    def _scaled(self, image: np.ndarray) -> np.ndarray:
        width = image.shape[1]
        if self._resize_width is None or width <= self._resize_width:
            return image
        height = int(image.shape[0] * self._resize_width / width)
        return cv2.resize(image, (self._resize_width, height), interpolation=cv2.INTER_AREA)

    def release(self) -> None:
        """Close the camera or video, if one is open."""
        if self._capture is not None:
            self._capture.release()
            self._capture = None
            logger.debug("Capture released")

    def __del__(self) -> None:
        self.release()
