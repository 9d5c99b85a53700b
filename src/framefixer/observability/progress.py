"""
Progress Reporting
==================

Periodic progress lines for a running scheduler.

This module computes progress for observability ONLY. It reads the
scheduler's scalar counters from a background thread and never writes
scheduler state. A slightly stale read is fine; no locking is used.

Line format (one per interval):
    frame= 1200  fps= 410.52  time= 20.00s  speed= 6.84x  total= 33.33%  runtime= 3.01s

fps and speed are not true moving averages: each new instantaneous value
is averaged with the previously reported one to keep the output stable.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional, Protocol


logger = logging.getLogger(__name__)


class ProgressSource(Protocol):
    """Read-only view of scheduler progress."""

    @property
    def frames_read(self) -> int: ...

    @property
    def frames_written(self) -> int: ...

    @property
    def total_frames(self) -> int: ...

    @property
    def elapsed_seconds(self) -> float: ...


@dataclass(frozen=True, slots=True)
class ProgressSnapshot:
    """
    One progress line.

    Attributes:
        frame: Frames read so far
        fps: Smoothed processing rate (frames per wall second)
        media_time: Position in the source, seconds
        speed: Smoothed processing rate relative to real time
        percent: Share of total_frames read (0 when unknown)
        runtime: Wall seconds the source has been running
    """

    frame: int
    fps: float
    media_time: float
    speed: float
    percent: float
    runtime: float

    def format(self) -> str:
        return (
            f"frame= {self.frame}  "
            f"fps= {self.fps:.2f}  "
            f"time= {self.media_time:.2f}s  "
            f"speed= {self.speed:.2f}x  "
            f"total= {self.percent:.2f}%  "
            f"runtime= {self.runtime:.2f}s"
        )


class ProgressReporter:
    """
    Background progress logger.

    Attributes:
        source: Scheduler (or anything exposing the ProgressSource fields)
        fps: Source frame rate, for media time and speed
        interval_seconds: Wall time between lines

    Example:
        reporter = ProgressReporter(scheduler, fps=source.fps)
        reporter.start()
        scheduler.run(source, sink)
        reporter.stop()
    """

    def __init__(
        self,
        source: ProgressSource,
        fps: float,
        interval_seconds: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")

        self.source = source
        self.fps = fps
        self.interval_seconds = interval_seconds
        self._clock = clock

        self._last_time: Optional[float] = None
        self._last_index: int = 0
        self._last_fps: float = 0.0
        self._last_speed: float = 0.0

        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def report(self, now: Optional[float] = None) -> ProgressSnapshot:
        """
        Compute and log one progress line.

        Args:
            now: Current clock value (defaults to the reporter's clock)

        Returns:
            The snapshot that was logged
        """
        if now is None:
            now = self._clock()
        if self._last_time is None:
            self._last_time = now

        current_index = self.source.frames_read
        frames = current_index - self._last_index
        interval = now - self._last_time

        if interval > 0:
            instant_fps = frames / interval
        else:
            instant_fps = self._last_fps
        new_fps = (instant_fps + self._last_fps) / 2

        if interval > 0 and self.fps > 0:
            instant_speed = frames / (interval * self.fps)
        else:
            instant_speed = self._last_speed
        new_speed = (instant_speed + self._last_speed) / 2

        total = self.source.total_frames
        snapshot = ProgressSnapshot(
            frame=current_index,
            fps=new_fps,
            media_time=current_index / self.fps if self.fps > 0 else 0.0,
            speed=new_speed,
            percent=100.0 * current_index / total if total > 0 else 0.0,
            runtime=self.source.elapsed_seconds,
        )
        logger.info(snapshot.format())

        self._last_fps = new_fps
        self._last_speed = new_speed
        self._last_index = current_index
        self._last_time = now
        return snapshot

    def start(self) -> None:
        """Start the reporting thread."""
        self._last_time = self._clock()
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run,
            name="progress_reporter",
            daemon=True,
        )
        self._thread.start()

    def stop(self) -> None:
        """Stop the reporting thread and log the run summary."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=self.interval_seconds * 2)
            self._thread = None

        logger.info(
            f"{self.source.frames_read} frames processed in "
            f"{self.source.elapsed_seconds:.2f} seconds"
        )

    def _run(self) -> None:
        while not self._stop_event.wait(self.interval_seconds):
            self.report()
