"""
Compare Module
==============

Frame differencing for duplicate detection.

Components:
    - compute_dissimilarity: Pure std-dev-of-absdiff score
    - FrameDifferencer: Match decisions under a hysteretic threshold
"""

from framefixer.compare.differencer import (
    FrameDifferencer,
    ImageShapeError,
    compute_dissimilarity,
)


__all__ = [
    "FrameDifferencer",
    "ImageShapeError",
    "compute_dissimilarity",
]
