"""
framefixer
==========

Prepares high fps video for downsampling without losing distinct frames.

Low frame rate content recorded into a higher frame rate container (a game
running at 30fps captured at 60fps, for example) shows up as runs of
near-duplicate frames. A later downsample keeps every Nth frame, so any
distinct frame that is not repeated at least N times can be dropped.
framefixer detects the duplicate runs and reschedules their repeat counts
online, inside a small sliding window, so each distinct frame survives the
downsample while the output stays aligned with the original timeline.

Components:
    - compare: Frame differencing with hysteretic match thresholds
    - schedule: Sliding window, slot reallocation, drift control, orchestration
    - stream: OpenCV video source and sink adapters
    - observability: Progress reporting
    - cancellation: Cooperative cancellation via signal-driven flag

Example:
    from framefixer.config import load_config
    from framefixer.schedule import FrameScheduler

    settings = load_config()
    scheduler = FrameScheduler.from_config(settings.scheduler)
    scheduler.run(source, sink)
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
]
