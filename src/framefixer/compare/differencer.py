"""
Frame Differencer
=================

Scalar dissimilarity between two comparison-resolution frames.

The score is the standard deviation of the per-pixel absolute difference.
A uniform brightness shift therefore scores near zero, while localized
changes (a moving sprite, a new line of text) score high. This makes the
standard deviation a good measure of the intensity of differences between
frames that share encoder noise.

Key Design Decisions:
    - Scoring is a pure function of the two images
    - Matching compares the score against the ACTIVE hysteretic cutoff
    - Inputs are comparison images only, never full-resolution frames
"""

import logging
from typing import Tuple

import cv2
import numpy as np

from framefixer.models.threshold import ThresholdState


logger = logging.getLogger(__name__)


class ImageShapeError(ValueError):
    """Raised when two comparison images cannot be differenced."""
    pass


def compute_dissimilarity(a: np.ndarray, b: np.ndarray) -> float:
    """
    Score how different two comparison images are.

    Args:
        a: Grayscale comparison image (H, W)
        b: Grayscale comparison image (H, W)

    Returns:
        Standard deviation of |a - b| over the whole frame, >= 0

    Raises:
        ImageShapeError: If images are not 2D or their shapes differ
    """
    if a.ndim != 2 or b.ndim != 2:
        raise ImageShapeError(
            f"Comparison images must be 2D grayscale. Got shapes: "
            f"{a.shape}, {b.shape}"
        )

    if a.shape != b.shape:
        raise ImageShapeError(
            f"Comparison image shapes must match. Got: "
            f"{a.shape} vs {b.shape}"
        )

    diff = cv2.absdiff(a, b)
    _, stddev = cv2.meanStdDev(diff)
    return float(stddev[0][0])


class FrameDifferencer:
    """
    Match/no-match decisions under a hysteretic threshold.

    Holds the ThresholdState so the scheduler can switch between strict
    and relaxed cutoffs as duplicate runs grow and end.

    Attributes:
        threshold: Strict/relaxed cutoffs and the active mode

    Example:
        differencer = FrameDifferencer(ThresholdState(strict=0.5, relaxed=0.25))
        matched, score = differencer.match(open_record.comparison, comparison)
    """

    def __init__(self, threshold: ThresholdState) -> None:
        self.threshold = threshold
        logger.info(
            f"FrameDifferencer initialized: "
            f"strict={threshold.strict}, relaxed={threshold.relaxed}"
        )

    def match(self, reference: np.ndarray, candidate: np.ndarray) -> Tuple[bool, float]:
        """
        Decide whether candidate duplicates reference.

        Args:
            reference: Comparison image of the open record
            candidate: Comparison image of the newly read frame

        Returns:
            Tuple of (matched, dissimilarity). The score is returned either
            way so a non-match can record it as the new frame's priority.
        """
        score = compute_dissimilarity(reference, candidate)
        return score < self.threshold.active, score
