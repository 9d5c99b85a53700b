"""
Progress Reporting Tests
========================

Snapshot arithmetic and reporter lifecycle.
"""

import logging

import pytest


class FakeProgress:
    """Minimal ProgressSource."""

    def __init__(self, total_frames=600):
        self.frames_read = 0
        self.frames_written = 0
        self.total_frames = total_frames
        self.elapsed_seconds = 0.0


class TestProgressReporter:
    """Tests for ProgressReporter.report."""

    def test_first_report_averages_with_zero(self):
        from framefixer.observability import ProgressReporter

        source = FakeProgress(total_frames=600)
        reporter = ProgressReporter(source, fps=60.0)
        reporter.report(now=100.0)

        source.frames_read = 120
        source.elapsed_seconds = 1.0
        snapshot = reporter.report(now=101.0)

        assert snapshot.frame == 120
        assert snapshot.fps == pytest.approx(60.0)       # (120 + 0) / 2
        assert snapshot.speed == pytest.approx(1.0)      # (2x + 0) / 2
        assert snapshot.media_time == pytest.approx(2.0)
        assert snapshot.percent == pytest.approx(20.0)
        assert snapshot.runtime == pytest.approx(1.0)

    def test_smoothing_uses_last_value(self):
        from framefixer.observability import ProgressReporter

        source = FakeProgress()
        reporter = ProgressReporter(source, fps=30.0)
        reporter.report(now=0.0)
        source.frames_read = 60
        reporter.report(now=1.0)             # fps = 30
        source.frames_read = 120
        snapshot = reporter.report(now=2.0)  # (60 + 30) / 2

        assert snapshot.fps == pytest.approx(45.0)

    def test_unknown_total(self):
        from framefixer.observability import ProgressReporter

        source = FakeProgress(total_frames=0)
        reporter = ProgressReporter(source, fps=0.0)
        source.frames_read = 10
        snapshot = reporter.report(now=5.0)

        assert snapshot.percent == 0.0
        assert snapshot.media_time == 0.0

    def test_format(self):
        from framefixer.observability import ProgressSnapshot

        line = ProgressSnapshot(
            frame=10, fps=5.0, media_time=0.5, speed=0.25, percent=1.0, runtime=2.0
        ).format()
        assert line == (
            "frame= 10  fps= 5.00  time= 0.50s  speed= 0.25x  total= 1.00%  runtime= 2.00s"
        )

    def test_rejects_bad_interval(self):
        from framefixer.observability import ProgressReporter

        with pytest.raises(ValueError):
            ProgressReporter(FakeProgress(), fps=30.0, interval_seconds=0)

    def test_start_stop_logs_summary(self, caplog):
        from framefixer.observability import ProgressReporter

        source = FakeProgress()
        source.frames_read = 42
        source.elapsed_seconds = 3.5
        reporter = ProgressReporter(source, fps=30.0, interval_seconds=0.01)

        with caplog.at_level(logging.INFO, logger="framefixer.observability.progress"):
            reporter.start()
            reporter.stop()

        assert "42 frames processed in 3.50 seconds" in caplog.text

    def test_reads_scheduler_accessors(self, make_frames, recording_sink):
        """The scheduler satisfies the read-only progress protocol."""
        from framefixer.observability import ProgressReporter
        from framefixer.schedule import FrameScheduler

        frames, _ = make_frames("AABBC")
        scheduler = FrameScheduler(total_frames=5)
        scheduler.run(frames, recording_sink)

        reporter = ProgressReporter(scheduler, fps=5.0)
        snapshot = reporter.report(now=1.0)
        assert snapshot.frame == 5
        assert snapshot.percent == pytest.approx(100.0)
        assert snapshot.runtime == pytest.approx(scheduler.elapsed_seconds)

    def test_runtime_follows_source_clock(self):
        """Runtime is the source's elapsed time, not the reporter's own clock."""
        from framefixer.observability import ProgressReporter

        source = FakeProgress()
        reporter = ProgressReporter(source, fps=30.0)
        source.elapsed_seconds = 7.25
        snapshot = reporter.report(now=500.0)

        assert snapshot.runtime == pytest.approx(7.25)
