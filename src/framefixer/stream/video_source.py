"""
Video Source
============

OpenCV-backed frame source.

Reads a video container frame by frame and derives the comparison image
for each frame: grayscale, reduced by comparison_scale in each dimension
with nearest-neighbour sampling.

Design Rules:
    - This is the ONLY place in the codebase that decodes video
    - A failed read mid-stream is treated as end of stream
    - Container properties are exposed so the sink can copy them
"""

import logging
from typing import Iterator, Tuple

import cv2
import numpy as np

from framefixer.stream.frame import SourceFrame


logger = logging.getLogger(__name__)


class SourceOpenError(Exception):
    """Raised when the input video cannot be opened."""
    pass


def comparison_size(width: int, height: int, comparison_scale: int) -> Tuple[int, int]:
    """
    Comparison image size for a frame size.

    Returns:
        Tuple of (width, height), never smaller than 1x1
    """
    return max(1, width // comparison_scale), max(1, height // comparison_scale)


def to_comparison_image(image: np.ndarray, comparison_scale: int) -> np.ndarray:
    """
    Build the comparison image for a frame.

    Args:
        image: BGR (H, W, 3) or grayscale (H, W) frame, uint8
        comparison_scale: Reduction factor per dimension (1 keeps size)

    Returns:
        Grayscale (H // scale, W // scale) image, uint8
    """
    if image.ndim == 3:
        gray = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
    else:
        gray = image

    height, width = gray.shape[:2]
    size = comparison_size(width, height, comparison_scale)
    if size == (width, height):
        return gray.copy()
    return cv2.resize(gray, size, interpolation=cv2.INTER_NEAREST)


def decode_fourcc(code: float) -> str:
    """Decode CAP_PROP_FOURCC into its four character string."""
    value = int(code)
    return "".join(chr((value >> shift) & 0xFF) for shift in (0, 8, 16, 24))


class VideoFrameSource:
    """
    Iterable frame source over a video file.

    Attributes:
        path: Input video path
        comparison_scale: Reduction factor for comparison images

    Example:
        with VideoFrameSource("in.mp4", comparison_scale=4) as source:
            for frame in source:
                ...
    """

    def __init__(self, path: str, comparison_scale: int = 4) -> None:
        """
        Open the input video.

        Args:
            path: Input video path
            comparison_scale: Reduction factor for comparison images

        Raises:
            SourceOpenError: If OpenCV cannot open the container
        """
        self.path = path
        self.comparison_scale = comparison_scale
        self._capture = cv2.VideoCapture(path)
        if not self._capture.isOpened():
            self._capture.release()
            raise SourceOpenError(f"Error opening video stream: {path}")

        self.width = int(self._capture.get(cv2.CAP_PROP_FRAME_WIDTH))
        self.height = int(self._capture.get(cv2.CAP_PROP_FRAME_HEIGHT))
        self.fps = float(self._capture.get(cv2.CAP_PROP_FPS))
        self.frame_count = int(self._capture.get(cv2.CAP_PROP_FRAME_COUNT))
        self.fourcc = decode_fourcc(self._capture.get(cv2.CAP_PROP_FOURCC))
        self._read_index = -1

        logger.info(
            f"VideoFrameSource opened: {path} "
            f"({self.width}x{self.height}, {self.fps:.2f}fps, "
            f"{self.frame_count} frames, codec={self.fourcc!r})"
        )

    @property
    def duration_seconds(self) -> float:
        if self.fps <= 0:
            return 0.0
        return self.frame_count / self.fps

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    def __iter__(self) -> Iterator[SourceFrame]:
        while True:
            ok, image = self._capture.read()
            if not ok or image is None:
                logger.debug(f"End of stream after {self._read_index + 1} frames")
                return
            self._read_index += 1
            yield SourceFrame(
                image=image,
                comparison=to_comparison_image(image, self.comparison_scale),
                index=self._read_index,
            )

    def release(self) -> None:
        self._capture.release()

    def __enter__(self) -> "VideoFrameSource":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
