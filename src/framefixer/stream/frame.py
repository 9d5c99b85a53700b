"""
Frame Data Model
=================

Frame representation passed from a frame source to the scheduler.

This module defines the typed SourceFrame class and the FrameSink
protocol that together form the scheduler's I/O boundary.

Design Rules:
    - Sources produce SourceFrame in read order with 0-based indices
    - The comparison image is derived once, at read time
    - Sinks receive (image, count) pairs in emission order
"""

from dataclasses import dataclass
from typing import Protocol

import numpy as np


@dataclass(frozen=True, slots=True)
class SourceFrame:
    """
    One frame read from the source.

    Attributes:
        image: Original-resolution pixels (BGR or grayscale)
        comparison: Grayscale downscale of image used for differencing
        index: Position of the frame in the source stream
    """

    image: np.ndarray
    comparison: np.ndarray
    index: int

    def __repr__(self) -> str:
        """Compact repr that doesn't dump the full image."""
        return (
            f"SourceFrame(index={self.index}, "
            f"shape={self.image.shape}, "
            f"comparison_shape={self.comparison.shape})"
        )


class FrameSink(Protocol):
    """
    Protocol for frame sinks.

    Implementations write image exactly count times, preserving the
    source's dimensions, frame rate and codec.
    """

    def write(self, image: np.ndarray, count: int) -> None:
        """
        Emit a frame.

        Args:
            image: Original-resolution pixels
            count: Number of copies to write (>= 1)
        """
        ...
