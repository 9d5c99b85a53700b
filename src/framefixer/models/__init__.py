"""
Data Models
===========

Scheduling data models for framefixer.

This module re-exports all data models for convenient access.

Models:
    Records:
        - FrameRecord: Distinct frame with repeat count and priority

    Thresholds:
        - ThresholdMode: STRICT or RELAXED
        - ThresholdState: Hysteretic match cutoffs

    Corrections:
        - CorrectionKind: REALLOCATE, TRIM or PAD
        - ReallocationResult: Slot reallocation outcome
        - CorrectionResult: Correcting phase outcome
"""

from framefixer.models.record import FrameRecord
from framefixer.models.threshold import ThresholdMode, ThresholdState
from framefixer.models.correction import CorrectionKind, CorrectionResult, ReallocationResult

__all__ = [
    # Records
    "FrameRecord",
    # Thresholds
    "ThresholdMode",
    "ThresholdState",
    # Corrections
    "CorrectionKind",
    "ReallocationResult",
    "CorrectionResult",
]
