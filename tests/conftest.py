"""
Test Configuration
==================

Pytest fixtures and test configuration for framefixer.

Distinct frames are seeded random textures: two different seeds give a
large standard deviation of the absolute difference, identical seeds give
exactly zero. Flat images are avoided on purpose, since a uniform
brightness change has zero deviation and would count as a match.
"""

from typing import Dict, List, Sequence

import numpy as np
import pytest

from framefixer.models.record import FrameRecord
from framefixer.stream.frame import SourceFrame


HEIGHT = 12
WIDTH = 16


def textured_image(seed: int, shape=(HEIGHT, WIDTH)) -> np.ndarray:
    """Deterministic grayscale texture for a seed."""
    rng = np.random.default_rng(seed)
    return rng.integers(0, 256, size=shape, dtype=np.uint8)


class RecordingSink:
    """FrameSink that keeps every (image, count) emission."""

    def __init__(self) -> None:
        self.emissions: List[tuple] = []

    def write(self, image: np.ndarray, count: int) -> None:
        self.emissions.append((image, count))

    @property
    def counts(self) -> List[int]:
        return [count for _, count in self.emissions]

    @property
    def total_frames(self) -> int:
        return sum(self.counts)


@pytest.fixture
def recording_sink() -> RecordingSink:
    """Provide an empty recording sink."""
    return RecordingSink()


@pytest.fixture
def make_frames():
    """
    Build SourceFrames from a pattern string.

    Each letter is one source frame; equal letters share identical images.
    Returns the frames and the letter -> image mapping.
    """

    def _make(pattern: Sequence[str]):
        images: Dict[str, np.ndarray] = {}
        frames = []
        for index, letter in enumerate(pattern):
            if letter not in images:
                images[letter] = textured_image(ord(letter))
            image = images[letter]
            frames.append(SourceFrame(image=image, comparison=image, index=index))
        return frames, images

    return _make


@pytest.fixture
def make_record():
    """Build a FrameRecord with a small placeholder image."""

    def _make(count: int = 1, priority: float = 0.0, index: int = 0) -> FrameRecord:
        image = textured_image(index)
        return FrameRecord(
            image=image,
            comparison=image,
            repeat_count=count,
            priority=priority,
            original_index=index,
        )

    return _make


@pytest.fixture
def make_window(make_record):
    """Build a SlidingWindow from (count, priority) pairs, head first."""
    from framefixer.schedule.window import SlidingWindow

    def _make(specs, capacity=None, start_index: int = 0):
        window = SlidingWindow(capacity=capacity or len(specs))
        index = start_index
        for count, priority in specs:
            window.admit(make_record(count=count, priority=priority, index=index))
            index += count
        return window

    return _make
