"""
Slot Reallocator
================

Rebalances repeat counts among buffered records before the head is written.

Once per cycle one record, the one at the middle of the window, is
brought up to duplicate_count by borrowing units from other records:

    1. Safe donors: any record holding MORE than duplicate_count can give
       a unit away without putting itself at risk.
    2. Priority donors: if no safe donor exists, a record with strictly
       lower priority and more than one repeat gives a unit, so visually
       significant frames outbid less significant ones for a scarce slot.

Both passes scan tail to head. Records nearer the tail were admitted more
recently and have more cycles left to win a unit back before they are
written.

Key Design Decisions:
    - Total repeat count in the window is conserved
    - No record is ever taken below one repeat
    - A target that cannot be satisfied is written under-count (accepted loss)
"""

import logging
from typing import Optional

from framefixer.models.correction import ReallocationResult
from framefixer.models.record import FrameRecord
from framefixer.schedule.window import SlidingWindow


logger = logging.getLogger(__name__)


class SlotReallocator:
    """
    Repairs the at-risk record at a fixed window position.

    Attributes:
        duplicate_count: Repeat count each distinct frame should reach
        target_position: Window position repaired each cycle

    Example:
        reallocator = SlotReallocator(duplicate_count=2, buffer_size=7)
        result = reallocator.rebalance(window)
        if not result.satisfied:
            ...  # target will be written under-count
    """

    def __init__(self, duplicate_count: int = 2, buffer_size: int = 7) -> None:
        """
        Initialize the reallocator.

        Args:
            duplicate_count: Required repeats per distinct frame
            buffer_size: Window capacity; the target is its midpoint
        """
        if duplicate_count < 1:
            raise ValueError("duplicate_count must be >= 1")
        if buffer_size < 1:
            raise ValueError("buffer_size must be >= 1")

        self.duplicate_count = duplicate_count
        self.target_position = buffer_size // 2

        logger.info(
            f"SlotReallocator initialized: "
            f"duplicate_count={duplicate_count}, target_position={self.target_position}"
        )

    def rebalance(self, window: SlidingWindow) -> ReallocationResult:
        """
        Bring the middle record up to duplicate_count if possible.

        The position is clamped to the last record when the window holds
        fewer records than its capacity (end of stream).

        Args:
            window: Window to rebalance in place

        Returns:
            ReallocationResult describing the moves made
        """
        if len(window) == 0:
            return ReallocationResult(
                target_position=-1, safe_moves=0, priority_moves=0, satisfied=True
            )

        position = min(self.target_position, len(window) - 1)
        target = window[position]
        safe_moves = 0
        priority_moves = 0

        while target.repeat_count < self.duplicate_count:
            donor = self._find_safe_donor(window)
            if donor is not None:
                safe_moves += 1
            else:
                donor = self._find_priority_donor(window, target)
                if donor is None:
                    break
                priority_moves += 1
            donor.repeat_count -= 1
            target.repeat_count += 1

        satisfied = target.repeat_count >= self.duplicate_count
        if safe_moves or priority_moves:
            logger.debug(
                f"Reallocated {safe_moves} safe + {priority_moves} priority units "
                f"to frame {target.original_index} (count={target.repeat_count})"
            )
        if not satisfied:
            logger.debug(
                f"Frame {target.original_index} stays at {target.repeat_count}/"
                f"{self.duplicate_count} repeats, no donor available"
            )

        return ReallocationResult(
            target_position=position,
            safe_moves=safe_moves,
            priority_moves=priority_moves,
            satisfied=satisfied,
        )

    def _find_safe_donor(self, window: SlidingWindow) -> Optional[FrameRecord]:
        """Newest record holding more than duplicate_count repeats."""
        # The target is below duplicate_count here, so it never qualifies
        for record in reversed(window):
            if record.repeat_count > self.duplicate_count:
                return record
        return None

    def _find_priority_donor(
        self,
        window: SlidingWindow,
        target: FrameRecord,
    ) -> Optional[FrameRecord]:
        """Newest lower-priority record that can spare a repeat."""
        for record in reversed(window):
            if record.priority < target.priority and record.repeat_count > 1:
                return record
        return None
