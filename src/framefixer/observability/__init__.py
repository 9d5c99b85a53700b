"""
Observability Module
====================

Progress reporting for framefixer runs.

This module provides:
    - ProgressReporter: Background thread logging periodic progress lines
    - ProgressSnapshot: One computed progress line
    - ProgressSource: Read-only protocol the scheduler satisfies

DESIGN RULES:
    - Does NOT write scheduler state
    - Does NOT influence scheduling decisions
"""

from framefixer.observability.progress import (
    ProgressReporter,
    ProgressSnapshot,
    ProgressSource,
)


__all__ = [
    "ProgressReporter",
    "ProgressSnapshot",
    "ProgressSource",
]
