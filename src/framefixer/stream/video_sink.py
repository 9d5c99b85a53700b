"""
Video Sink
==========

OpenCV-backed frame sink.

Writes each evicted record's image repeat_count times, using the codec,
frame rate and dimensions copied from the source so that the output
matches the input exactly apart from the adjusted frames.
"""

import logging
from typing import Tuple

import cv2
import numpy as np


logger = logging.getLogger(__name__)


class SinkWriteError(Exception):
    """Raised when the output video cannot be opened or written."""
    pass


class VideoFrameSink:
    """
    FrameSink writing to a video file.

    Attributes:
        path: Output video path
        frames_written: Total frames written so far
    """

    def __init__(self, path: str, fourcc: str, fps: float, size: Tuple[int, int]) -> None:
        """
        Open the output video.

        Args:
            path: Output video path
            fourcc: Four character codec code (copied from the source)
            fps: Output frame rate (copied from the source)
            size: (width, height) of output frames

        Raises:
            SinkWriteError: If OpenCV cannot open a writer for the path
        """
        if len(fourcc) != 4:
            raise SinkWriteError(f"Invalid fourcc code {fourcc!r} for {path}")

        self.path = path
        self.fourcc = fourcc
        self.fps = fps
        self.size = size
        self.frames_written = 0

        self._writer = cv2.VideoWriter(path, cv2.VideoWriter_fourcc(*fourcc), fps, size)
        if not self._writer.isOpened():
            self._writer.release()
            raise SinkWriteError(
                f"Failed to open video writer for {path} "
                f"(codec={fourcc!r}, fps={fps}, size={size[0]}x{size[1]})"
            )

        logger.info(
            f"VideoFrameSink opened: {path} "
            f"({size[0]}x{size[1]}, {fps:.2f}fps, codec={fourcc!r})"
        )

    def write(self, image: np.ndarray, count: int) -> None:
        """
        Write image count times.

        Raises:
            SinkWriteError: If the frame does not match the output size
                or OpenCV fails to encode it
        """
        height, width = image.shape[:2]
        if (width, height) != tuple(self.size):
            raise SinkWriteError(
                f"Frame size {width}x{height} does not match output "
                f"{self.size[0]}x{self.size[1]} after {self.frames_written} frames"
            )

        for _ in range(count):
            try:
                self._writer.write(image)
            except cv2.error as e:
                raise SinkWriteError(
                    f"Failed writing frame {self.frames_written} to {self.path}: {e}"
                )
            self.frames_written += 1

    def release(self) -> None:
        self._writer.release()

    def __enter__(self) -> "VideoFrameSink":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
