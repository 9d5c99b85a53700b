"""
Frame Scheduler
===============

Online orchestration of duplicate detection, correction and eviction.

The scheduler consumes source frames in order and drives a sink. It makes
irrevocable decisions with only buffer_size distinct frames of lookahead.

Phases:
    FILLING     Read frames. Matches grow the open (tail) record, a
                non-match opens a new record. Ends when a non-match arrives
                while the window is full (the frame is held as pending),
                or when the source is exhausted.
    CORRECTING  Drift controller runs, deferring to the slot reallocator
                unless drift is out of bound.
    EVICTING    Head record is written repeat_count times, the pending
                frame is admitted as the new open record.
    FLUSHING    Every remaining record is written at its current count
                with no further correction.

Cancellation is cooperative: the token is checked before each read and at
the start of CORRECTING, and always leads to FLUSHING so that buffered
records are still written.

All mutable run state lives on the scheduler instance. Telemetry reads it
only through the read-only properties (frames_read, frames_written,
total_frames, elapsed_seconds).
"""

import logging
import time
from enum import Enum
from typing import Callable, Iterable, Iterator, Optional

from framefixer.cancellation import CancellationToken
from framefixer.compare.differencer import FrameDifferencer
from framefixer.config import SchedulerConfig
from framefixer.models.correction import CorrectionKind, CorrectionResult
from framefixer.models.record import FrameRecord
from framefixer.models.threshold import ThresholdState
from framefixer.schedule.drift import DriftController
from framefixer.schedule.reallocator import SlotReallocator
from framefixer.schedule.window import SlidingWindow
from framefixer.stream.frame import FrameSink, SourceFrame


logger = logging.getLogger(__name__)


class SchedulerPhase(str, Enum):
    """Orchestration state machine phases."""

    FILLING = "FILLING"
    CORRECTING = "CORRECTING"
    EVICTING = "EVICTING"
    FLUSHING = "FLUSHING"
    DONE = "DONE"


class SchedulerMetrics:
    """Metrics for FrameScheduler observability."""

    __slots__ = (
        "frames_read",
        "frames_written",
        "records_admitted",
        "records_evicted",
        "cycles",
        "reallocation_moves",
        "reallocation_failures",
        "drift_measurements",
        "drift_trimmed",
        "drift_padded",
        "last_drift",
        "cancelled",
    )

    def __init__(self) -> None:
        self.frames_read: int = 0
        self.frames_written: int = 0
        self.records_admitted: int = 0
        self.records_evicted: int = 0
        self.cycles: int = 0
        self.reallocation_moves: int = 0
        self.reallocation_failures: int = 0
        self.drift_measurements: int = 0
        self.drift_trimmed: int = 0
        self.drift_padded: int = 0
        self.last_drift: int = 0
        self.cancelled: bool = False

    def to_dict(self) -> dict:
        """Export metrics as dict."""
        return {name: getattr(self, name) for name in self.__slots__}


class FrameScheduler:
    """
    Converts a frame stream into (image, repeat_count) emissions.

    Attributes:
        duplicate_count: Repeats each distinct frame should reach
        window: Sliding window of pending records
        threshold: Hysteretic match cutoffs
        metrics: Run counters

    Example:
        scheduler = FrameScheduler(buffer_size=7, duplicate_count=2)
        scheduler.run(source_frames, sink, cancel=token)
        print(scheduler.metrics.to_dict())
    """

    def __init__(
        self,
        buffer_size: int = 7,
        adjustment_bound: int = 5,
        duplicate_count: int = 2,
        threshold_strict: float = 0.5,
        threshold_relaxed: Optional[float] = None,
        total_frames: int = 0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize the scheduler.

        Args:
            buffer_size: Window capacity in distinct frames
            adjustment_bound: Tolerated |drift| before bulk correction
            duplicate_count: Required repeats per distinct frame
            threshold_strict: Match cutoff below target
            threshold_relaxed: Match cutoff at target (default strict / 2)
            total_frames: Expected source length, for progress only
            clock: Monotonic time source, for elapsed_seconds
        """
        if threshold_relaxed is None:
            threshold_relaxed = 0.5 * threshold_strict

        self.duplicate_count = duplicate_count
        self.window = SlidingWindow(capacity=buffer_size)
        self.threshold = ThresholdState(strict=threshold_strict, relaxed=threshold_relaxed)
        self.metrics = SchedulerMetrics()

        self._differencer = FrameDifferencer(self.threshold)
        self._reallocator = SlotReallocator(
            duplicate_count=duplicate_count,
            buffer_size=buffer_size,
        )
        self._drift = DriftController(
            buffer_size=buffer_size,
            adjustment_bound=adjustment_bound,
            duplicate_count=duplicate_count,
            reallocator=self._reallocator,
        )

        self._total_frames = total_frames
        self._clock = clock
        self._started_at: Optional[float] = None
        self._finished_at: Optional[float] = None
        self._phase = SchedulerPhase.FILLING
        self._pending: Optional[FrameRecord] = None
        self._exhausted = False

        logger.info(
            f"FrameScheduler initialized: buffer_size={buffer_size}, "
            f"adjustment_bound={adjustment_bound}, duplicate_count={duplicate_count}, "
            f"threshold_strict={threshold_strict}, threshold_relaxed={threshold_relaxed}"
        )

    @classmethod
    def from_config(cls, config: SchedulerConfig, total_frames: int = 0) -> "FrameScheduler":
        """Build a scheduler from validated configuration."""
        return cls(
            buffer_size=config.buffer_size,
            adjustment_bound=config.adjustment_bound,
            duplicate_count=config.duplicate_count,
            threshold_strict=config.threshold_strict,
            threshold_relaxed=config.relaxed_threshold,
            total_frames=total_frames,
        )

    # =========================================================================
    # Read-only accessors (safe to poll from the progress thread)
    # =========================================================================

    @property
    def phase(self) -> SchedulerPhase:
        return self._phase

    @property
    def drift(self) -> int:
        """Last measured drift, including bulk corrections since."""
        return self._drift.drift

    @property
    def frames_read(self) -> int:
        return self.metrics.frames_read

    @property
    def frames_written(self) -> int:
        return self.metrics.frames_written

    @property
    def total_frames(self) -> int:
        return self._total_frames

    @property
    def elapsed_seconds(self) -> float:
        if self._started_at is None:
            return 0.0
        end = self._finished_at if self._finished_at is not None else self._clock()
        return end - self._started_at

    # =========================================================================
    # Orchestration
    # =========================================================================

    def run(
        self,
        source: Iterable[SourceFrame],
        sink: FrameSink,
        cancel: Optional[CancellationToken] = None,
    ) -> SchedulerMetrics:
        """
        Schedule every frame of source into sink.

        Args:
            source: Frames in read order
            sink: Receives (image, repeat_count) per distinct frame
            cancel: Optional cooperative cancellation token

        Returns:
            Final metrics

        Raises:
            SinkWriteError: Propagated from the sink; records written
                before the failure stay written
        """
        frames = iter(source)
        self._reset()
        self._started_at = self._clock()

        try:
            while self._phase != SchedulerPhase.DONE:
                if self._phase == SchedulerPhase.FILLING:
                    self._phase = self._fill(frames, cancel)
                elif self._phase == SchedulerPhase.CORRECTING:
                    if self._cancel_requested(cancel):
                        self._phase = SchedulerPhase.FLUSHING
                        continue
                    self._correct()
                    if self._exhausted:
                        self._phase = SchedulerPhase.FLUSHING
                    else:
                        self._phase = SchedulerPhase.EVICTING
                elif self._phase == SchedulerPhase.EVICTING:
                    self._evict(sink)
                    self._phase = SchedulerPhase.FILLING
                elif self._phase == SchedulerPhase.FLUSHING:
                    self._flush(sink)
                    self._phase = SchedulerPhase.DONE
        finally:
            self._finished_at = self._clock()

        logger.info(
            f"Finished writing {self.metrics.frames_written} frames "
            f"from {self.metrics.frames_read} read "
            f"({self.metrics.records_evicted} distinct)"
        )
        return self.metrics

    def _reset(self) -> None:
        """Clear state left by a previous run so the scheduler can be reused."""
        self.window = SlidingWindow(capacity=self.window.capacity)
        self.threshold.make_strict()
        self.metrics = SchedulerMetrics()
        self._drift.reset()
        self._finished_at = None
        self._phase = SchedulerPhase.FILLING
        self._pending = None
        self._exhausted = False

    def _cancel_requested(self, cancel: Optional[CancellationToken]) -> bool:
        if cancel is None or not cancel.cancelled:
            return False
        if not self.metrics.cancelled:
            logger.info(
                f"Cancellation requested after {self.metrics.frames_read} frames, "
                f"flushing {len(self.window)} buffered records"
            )
        self.metrics.cancelled = True
        return True

    def _fill(
        self,
        frames: Iterator[SourceFrame],
        cancel: Optional[CancellationToken],
    ) -> SchedulerPhase:
        """Read until a non-match arrives with the window full, or the end."""
        while True:
            if self._cancel_requested(cancel):
                return SchedulerPhase.FLUSHING

            try:
                frame = next(frames)
            except StopIteration:
                self._exhausted = True
                if len(self.window) == 0:
                    return SchedulerPhase.FLUSHING
                return SchedulerPhase.CORRECTING

            self.metrics.frames_read += 1
            open_record = self.window.tail()
            if open_record is None:
                # First frame opens the first record
                self._admit(self._new_record(frame, 0.0))
                continue

            matched, score = self._differencer.match(open_record.comparison, frame.comparison)
            if matched:
                open_record.repeat_count += 1
                if open_record.repeat_count == self.duplicate_count:
                    self.threshold.make_relaxed()
                continue

            self.threshold.make_strict()
            record = self._new_record(frame, score)
            if self.window.is_full:
                self._pending = record
                return SchedulerPhase.CORRECTING
            self._admit(record)

    def _correct(self) -> CorrectionResult:
        result = self._drift.correct(self.window, self.metrics.frames_written)

        self.metrics.cycles += 1
        self.metrics.last_drift = result.drift_after
        if result.measured:
            self.metrics.drift_measurements += 1

        if result.kind == CorrectionKind.REALLOCATE and result.reallocation is not None:
            self.metrics.reallocation_moves += result.reallocation.moves
            if not result.reallocation.satisfied:
                self.metrics.reallocation_failures += 1
        elif result.kind == CorrectionKind.TRIM:
            self.metrics.drift_trimmed += result.adjusted
        elif result.kind == CorrectionKind.PAD:
            self.metrics.drift_padded += result.adjusted

        return result

    def _evict(self, sink: FrameSink) -> None:
        """Write the head record, then admit the pending frame."""
        self._write(sink, self.window.evict())
        if self._pending is not None:
            self._admit(self._pending)
            self._pending = None

    def _flush(self, sink: FrameSink) -> None:
        """Write every buffered record at its current count."""
        while len(self.window) > 0:
            self._write(sink, self.window.evict())

        # Only reachable on cancellation: the frame was read but never admitted
        if self._pending is not None:
            self._write(sink, self._pending)
            self._pending = None

    def _write(self, sink: FrameSink, record: FrameRecord) -> None:
        sink.write(record.image, record.repeat_count)
        self.metrics.frames_written += record.repeat_count
        self.metrics.records_evicted += 1

    def _admit(self, record: FrameRecord) -> None:
        self.window.admit(record)
        self.metrics.records_admitted += 1

    @staticmethod
    def _new_record(frame: SourceFrame, priority: float) -> FrameRecord:
        return FrameRecord(
            image=frame.image,
            comparison=frame.comparison,
            repeat_count=1,
            priority=priority,
            original_index=frame.index,
        )
