"""
Sliding Window Tests
====================

Capacity, ordering and ownership of buffered records.
"""

import pytest


class TestSlidingWindow:
    """Tests for SlidingWindow admit/head/evict."""

    def test_rejects_zero_capacity(self):
        from framefixer.schedule import SlidingWindow

        with pytest.raises(ValueError):
            SlidingWindow(capacity=0)

    def test_fifo_order(self, make_record):
        """Head is the oldest record, tail the newest."""
        from framefixer.schedule import SlidingWindow

        window = SlidingWindow(capacity=3)
        for index in range(3):
            window.admit(make_record(index=index))

        assert window.head().original_index == 0
        assert window.tail().original_index == 2
        assert [r.original_index for r in window] == [0, 1, 2]
        assert [r.original_index for r in reversed(window)] == [2, 1, 0]

    def test_admit_when_full_raises(self, make_record):
        """Admitting into a full window fails instead of dropping."""
        from framefixer.schedule import CapacityExceededError, SlidingWindow

        window = SlidingWindow(capacity=2)
        window.admit(make_record(index=0))
        window.admit(make_record(index=1))
        assert window.is_full

        with pytest.raises(CapacityExceededError):
            window.admit(make_record(index=2))
        assert len(window) == 2

    def test_evict_removes_head(self, make_record):
        """Evict returns the head and frees a slot."""
        from framefixer.schedule import SlidingWindow

        window = SlidingWindow(capacity=2)
        window.admit(make_record(index=0))
        window.admit(make_record(index=1))

        evicted = window.evict()
        assert evicted.original_index == 0
        assert len(window) == 1
        assert not window.is_full
        assert window.head().original_index == 1

    def test_head_does_not_remove(self, make_record):
        from framefixer.schedule import SlidingWindow

        window = SlidingWindow(capacity=2)
        window.admit(make_record(index=4))
        window.head()
        assert len(window) == 1

    def test_empty_window(self):
        """Empty window has no tail and cannot evict."""
        from framefixer.schedule import SlidingWindow

        window = SlidingWindow(capacity=2)
        assert window.tail() is None
        with pytest.raises(IndexError):
            window.head()
        with pytest.raises(IndexError):
            window.evict()

    def test_counts_and_metrics(self, make_window):
        window = make_window([(2, 0.0), (1, 0.0), (3, 0.0)], capacity=4)
        assert window.repeat_counts() == [2, 1, 3]
        assert window.total_repeats() == 6

        window.evict()
        assert window.metrics() == {
            "size": 2,
            "capacity": 4,
            "total_admitted": 3,
            "total_evicted": 1,
        }
