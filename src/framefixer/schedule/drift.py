"""
Drift Controller
================

Bounds the positional error between the output and the source timeline.

Drift is the signed offset between the current write position and the
source index of the oldest buffered record:

    drift = write_position - original_index(head)

Positive drift means the output has accumulated extra frames, negative
drift means it is behind. Drift is re-measured once per full window cycle
(every buffer_size Correcting phases); between measurements it only
changes through bulk corrections made here.

Correction Rules:
    |drift| <  bound:  defer to the SlotReallocator for this cycle
    drift   >= bound:  scan head to tail, trim repeats above duplicate_count
    drift   <= -bound: scan head to tail, pad repeats below duplicate_count
Bulk corrections stop as soon as |drift| is back under the bound.
"""

import logging

from framefixer.models.correction import CorrectionKind, CorrectionResult
from framefixer.schedule.reallocator import SlotReallocator
from framefixer.schedule.window import SlidingWindow


logger = logging.getLogger(__name__)


class DriftController:
    """
    Periodic drift measurement plus bulk correction.

    Attributes:
        buffer_size: Correcting phases between drift measurements
        adjustment_bound: Drift magnitude that triggers bulk correction
        duplicate_count: Repeat target used when trimming or padding
        drift: Last measured drift, adjusted by bulk corrections

    Example:
        controller = DriftController(7, 5, 2, SlotReallocator(2, 7))
        result = controller.correct(window, write_position=sink_frames)
    """

    def __init__(
        self,
        buffer_size: int,
        adjustment_bound: int,
        duplicate_count: int,
        reallocator: SlotReallocator,
    ) -> None:
        """
        Initialize the drift controller.

        Args:
            buffer_size: Cycles between drift measurements
            adjustment_bound: Tolerated |drift| (exclusive)
            duplicate_count: Repeat target per distinct frame
            reallocator: Used for in-bound cycles
        """
        if buffer_size < 1:
            raise ValueError("buffer_size must be >= 1")
        if adjustment_bound < 1:
            raise ValueError("adjustment_bound must be >= 1")

        self.buffer_size = buffer_size
        self.adjustment_bound = adjustment_bound
        self.duplicate_count = duplicate_count
        self.reallocator = reallocator

        self.drift: int = 0
        self._cycles_until_measure: int = 0

        logger.info(
            f"DriftController initialized: "
            f"adjustment_bound={adjustment_bound}, measure_every={buffer_size}"
        )

    def reset(self) -> None:
        """Forget drift and measure again on the next cycle."""
        self.drift = 0
        self._cycles_until_measure = 0

    def measure(self, window: SlidingWindow, write_position: int) -> int:
        """Recompute drift against the window head and reset the cadence."""
        self.drift = write_position - window.head().original_index
        self._cycles_until_measure = self.buffer_size
        return self.drift

    def correct(self, window: SlidingWindow, write_position: int) -> CorrectionResult:
        """
        Run one Correcting phase on the window.

        Args:
            window: Non-empty window, corrected in place
            write_position: Frames written to the sink so far

        Returns:
            CorrectionResult naming the branch taken and its effect
        """
        self._cycles_until_measure -= 1
        measured = self._cycles_until_measure <= 0
        if measured:
            self.measure(window, write_position)

        drift_before = self.drift

        if abs(self.drift) < self.adjustment_bound:
            reallocation = self.reallocator.rebalance(window)
            return CorrectionResult(
                kind=CorrectionKind.REALLOCATE,
                drift_before=drift_before,
                drift_after=self.drift,
                measured=measured,
                reallocation=reallocation,
            )

        if self.drift >= self.adjustment_bound:
            adjusted = self._trim(window)
            kind = CorrectionKind.TRIM
        else:
            adjusted = self._pad(window)
            kind = CorrectionKind.PAD

        exhausted = abs(self.drift) >= self.adjustment_bound
        log = logger.warning if exhausted and measured else logger.debug
        log(
            f"Drift {kind.value.lower()}: {drift_before} -> {self.drift} "
            f"({adjusted} repeats adjusted, bound={self.adjustment_bound})"
        )

        return CorrectionResult(
            kind=kind,
            drift_before=drift_before,
            drift_after=self.drift,
            measured=measured,
            adjusted=adjusted,
            window_exhausted=exhausted,
        )

    def _trim(self, window: SlidingWindow) -> int:
        """Shave copies off records above target until drift is in bound."""
        removed = 0
        for record in window:
            while (
                self.drift >= self.adjustment_bound
                and record.repeat_count > self.duplicate_count
            ):
                record.repeat_count -= 1
                self.drift -= 1
                removed += 1
            if self.drift < self.adjustment_bound:
                break
        return removed

    def _pad(self, window: SlidingWindow) -> int:
        """Add copies to at-risk records until drift is in bound."""
        added = 0
        for record in window:
            while (
                abs(self.drift) >= self.adjustment_bound
                and record.repeat_count < self.duplicate_count
            ):
                record.repeat_count += 1
                self.drift += 1
                added += 1
            if abs(self.drift) < self.adjustment_bound:
                break
        return added
