"""
Sliding Window
==============

Bounded ordered buffer of pending distinct-frame records.

This module provides the SlidingWindow class, which holds the records
whose repeat counts may still change. New records enter at the tail,
finished records leave from the head.

Design Rules:
    - Fixed capacity (admit fails when full, never drops silently)
    - The tail record is the "open" record that absorbs matching frames
    - Records are owned by the window until evicted
"""

import logging
from collections import deque
from typing import Deque, Iterator, List, Optional

from framefixer.models.record import FrameRecord


logger = logging.getLogger(__name__)


class CapacityExceededError(Exception):
    """Raised when admitting a record into a full window."""
    pass


class SlidingWindow:
    """
    Bounded FIFO of FrameRecords.

    Attributes:
        capacity: Maximum number of records held (buffer_size)

    Example:
        window = SlidingWindow(capacity=7)
        window.admit(record)
        oldest = window.evict()
    """

    def __init__(self, capacity: int = 7) -> None:
        """
        Initialize the window.

        Args:
            capacity: Maximum records to hold. Must be >= 1.
        """
        if capacity < 1:
            raise ValueError("capacity must be >= 1")

        self._capacity = capacity
        self._records: Deque[FrameRecord] = deque()
        self._total_admitted: int = 0
        self._total_evicted: int = 0

    @property
    def capacity(self) -> int:
        """Maximum window size."""
        return self._capacity

    @property
    def is_full(self) -> bool:
        return len(self._records) >= self._capacity

    @property
    def total_admitted(self) -> int:
        """Total records ever admitted."""
        return self._total_admitted

    @property
    def total_evicted(self) -> int:
        """Total records ever evicted."""
        return self._total_evicted

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[FrameRecord]:
        """Iterate head (oldest) to tail (newest)."""
        return iter(self._records)

    def __reversed__(self) -> Iterator[FrameRecord]:
        """Iterate tail (newest) to head (oldest)."""
        return reversed(self._records)

    def __getitem__(self, position: int) -> FrameRecord:
        return self._records[position]

    def admit(self, record: FrameRecord) -> None:
        """
        Append a record at the tail.

        Args:
            record: Newly detected distinct frame

        Raises:
            CapacityExceededError: If the window is already full
        """
        if self.is_full:
            raise CapacityExceededError(
                f"Window full ({self._capacity} records), "
                f"cannot admit frame {record.original_index}"
            )
        self._records.append(record)
        self._total_admitted += 1

    def head(self) -> FrameRecord:
        """
        Oldest record, without removing it.

        Raises:
            IndexError: If the window is empty
        """
        if not self._records:
            raise IndexError("head() on empty window")
        return self._records[0]

    def tail(self) -> Optional[FrameRecord]:
        """Open (most recently admitted) record, or None when empty."""
        if not self._records:
            return None
        return self._records[-1]

    def evict(self) -> FrameRecord:
        """
        Remove and return the head record.

        Raises:
            IndexError: If the window is empty
        """
        if not self._records:
            raise IndexError("evict() on empty window")
        self._total_evicted += 1
        return self._records.popleft()

    def repeat_counts(self) -> List[int]:
        """Repeat counts head to tail."""
        return [record.repeat_count for record in self._records]

    def total_repeats(self) -> int:
        """Sum of all pending repeat counts."""
        return sum(record.repeat_count for record in self._records)

    def metrics(self) -> dict:
        """
        Get window metrics for observability.

        Returns:
            Dict with size, capacity, total_admitted, total_evicted
        """
        return {
            "size": len(self._records),
            "capacity": self._capacity,
            "total_admitted": self._total_admitted,
            "total_evicted": self._total_evicted,
        }
