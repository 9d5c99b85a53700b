"""
Correction Results
==================

Machine-readable outcomes of the per-cycle correction phase.

Each Correcting phase runs exactly ONE of three branches, named by
CorrectionKind, and reports what it changed so the orchestration loop can
keep its metrics without inspecting the window itself.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class CorrectionKind(str, Enum):
    """
    Branch taken by the drift controller.

    Attributes:
        REALLOCATE: Drift within bound, slots rebalanced around one record
        TRIM: Output ahead of input, surplus repeats removed
        PAD: Output behind input, at-risk records given extra repeats
    """

    REALLOCATE = "REALLOCATE"
    TRIM = "TRIM"
    PAD = "PAD"


@dataclass(frozen=True, slots=True)
class ReallocationResult:
    """
    Outcome of one slot reallocation pass.

    Attributes:
        target_position: Window position of the record being repaired
        safe_moves: Units borrowed from records above the target count
        priority_moves: Units taken from lower-priority records
        satisfied: Whether the target reached duplicate_count
    """

    target_position: int
    safe_moves: int
    priority_moves: int
    satisfied: bool

    @property
    def moves(self) -> int:
        return self.safe_moves + self.priority_moves


@dataclass(frozen=True, slots=True)
class CorrectionResult:
    """
    Outcome of one Correcting phase.

    Attributes:
        kind: Branch that ran
        drift_before: Drift value the decision was based on
        drift_after: Drift after bulk correction (unchanged for REALLOCATE)
        measured: Whether drift was re-measured this cycle
        adjusted: Repeat units removed (TRIM) or added (PAD)
        reallocation: Reallocation outcome for REALLOCATE cycles
        window_exhausted: Bulk correction ran out of records before the bound
    """

    kind: CorrectionKind
    drift_before: int
    drift_after: int
    measured: bool
    adjusted: int = 0
    reallocation: Optional[ReallocationResult] = None
    window_exhausted: bool = False
