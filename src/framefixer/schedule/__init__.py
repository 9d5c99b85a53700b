"""
Schedule Module
===============

Frame-slot scheduling core.

This module provides:
    - SlidingWindow: Bounded buffer of pending distinct-frame records
    - SlotReallocator: Per-cycle repeat-count rebalancing
    - DriftController: Periodic drift measurement and bulk correction
    - FrameScheduler: Orchestration state machine (fill, correct, evict, flush)

DESIGN RULES:
    - Strictly online, fixed lookahead of buffer_size records
    - Single-threaded; telemetry only reads scalar counters
    - Every record is written exactly once, at its final repeat count
"""

from framefixer.schedule.window import CapacityExceededError, SlidingWindow
from framefixer.schedule.reallocator import SlotReallocator
from framefixer.schedule.drift import DriftController
from framefixer.schedule.scheduler import FrameScheduler, SchedulerMetrics, SchedulerPhase


__all__ = [
    "CapacityExceededError",
    "SlidingWindow",
    "SlotReallocator",
    "DriftController",
    "FrameScheduler",
    "SchedulerMetrics",
    "SchedulerPhase",
]
