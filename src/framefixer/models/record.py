"""
Frame Record Model
==================

One detected distinct frame awaiting its final repeat count.

A record owns both images for as long as it sits in the sliding window.
Records are plain values held directly by the window's deque; eviction
drops the last reference, so no explicit lifetime tracking is needed.
"""

from dataclasses import dataclass

import numpy as np


@dataclass(slots=True)
class FrameRecord:
    """
    Distinct frame plus its scheduling state.

    Attributes:
        image: Original-resolution pixels written to the sink
        comparison: Downscaled grayscale derivative used for differencing
        repeat_count: Times this frame will be emitted (always >= 1)
        priority: Dissimilarity to its predecessor when it was created
        original_index: Source position of the frame, for drift measurement
    """

    image: np.ndarray
    comparison: np.ndarray
    repeat_count: int = 1
    priority: float = 0.0
    original_index: int = 0

    def __repr__(self) -> str:
        """Compact repr that doesn't dump the pixel data."""
        return (
            f"FrameRecord(index={self.original_index}, "
            f"count={self.repeat_count}, "
            f"priority={self.priority:.3f})"
        )
