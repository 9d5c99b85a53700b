"""
Match Threshold State
=====================

Hysteretic dissimilarity cutoffs for duplicate detection.

"strict" requires a large change before a frame counts as new, "relaxed"
lets a smaller change split off a new frame. Matching starts strict so the
main changes are captured first; once the open frame has reached its
duplicate target the cutoff relaxes so that any remaining changes can take
the spare slots.

Transitions:
    STRICT -> RELAXED: open record's repeat count reaches duplicate_count
    RELAXED -> STRICT: a non-matching frame opens a new record
"""

from dataclasses import dataclass, field
from enum import Enum


class ThresholdMode(str, Enum):
    """Active cutoff selector."""

    STRICT = "STRICT"
    RELAXED = "RELAXED"


@dataclass
class ThresholdState:
    """
    Strict and relaxed cutoffs plus the active mode.

    Attributes:
        strict: Cutoff used until the open record reaches its target
        relaxed: Cutoff used after the open record reached its target
        mode: Which cutoff is currently active
    """

    strict: float = 0.5
    relaxed: float = 0.25
    mode: ThresholdMode = field(default=ThresholdMode.STRICT)

    @property
    def active(self) -> float:
        """Currently applied cutoff."""
        if self.mode == ThresholdMode.RELAXED:
            return self.relaxed
        return self.strict

    def make_strict(self) -> None:
        self.mode = ThresholdMode.STRICT

    def make_relaxed(self) -> None:
        self.mode = ThresholdMode.RELAXED
