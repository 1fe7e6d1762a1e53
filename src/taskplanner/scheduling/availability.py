"""Availability planning.

Turns a date range, recurring weekly windows, and pre-existing commitments
into concrete time slots with the already-consumed portions marked as used.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Optional, Union

from taskplanner.domain.models import AvailabilityWindow, CalendarBlock, TimeSlot
from taskplanner.domain.policies import BlockPolicy, DefaultBlockPolicy

logger = logging.getLogger(__name__)


class AvailabilityPlanner:
    """Builds time slots for a scheduling horizon.

    For each date in the horizon, every window matching that weekday becomes
    one slot. Weekdays with no configured window fall back to the block
    policy's default windows (09:00-17:00 on weekdays, none on weekends).

    Example:
        >>> planner = AvailabilityPlanner()
        >>> slots = planner.build_slots(
        ...     datetime(2024, 1, 15), datetime(2024, 1, 19), windows=[],
        ...     existing_blocks=[], now=datetime(2024, 1, 14, 8, 0),
        ... )
        >>> len(slots)
        5
    """

    def __init__(self, block_policy: Optional[BlockPolicy] = None):
        self.block_policy = block_policy or DefaultBlockPolicy()

    def build_slots(
        self,
        schedule_start: Union[date, datetime],
        schedule_end: Union[date, datetime],
        windows: list[AvailabilityWindow],
        existing_blocks: list[CalendarBlock],
        min_block_minutes: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> list[TimeSlot]:
        """Build chronological slots for every date in the horizon.

        Args:
            schedule_start: First date of the horizon (inclusive).
            schedule_end: Last date of the horizon (inclusive).
            windows: Recurring weekly availability windows.
            existing_blocks: Commitments whose time is already taken.
            min_block_minutes: Slots with fewer free minutes are dropped.
                Defaults to the block policy minimum.
            now: Reference time; slots ending before it are skipped and
                slots already under way start at it.

        Returns:
            Slots ordered by date, then by window start time.
        """
        if min_block_minutes is None:
            min_block_minutes = self.block_policy.min_block_minutes()
        if now is None:
            now = datetime.now()

        slots = []
        for current in self._iter_dates(schedule_start, schedule_end):
            for window in self._windows_for(current, windows):
                slot = self._build_slot(current, window, existing_blocks, now)
                if slot is None:
                    continue
                if slot.remaining_minutes < min_block_minutes:
                    logger.debug(
                        "Dropping %r: %d free minutes < %d",
                        slot, slot.remaining_minutes, min_block_minutes,
                    )
                    continue
                slots.append(slot)

        logger.debug(
            "Built %d slots with %d free minutes",
            len(slots), sum(s.remaining_minutes for s in slots),
        )
        return slots

    def _build_slot(
        self,
        on_date: date,
        window: AvailabilityWindow,
        existing_blocks: list[CalendarBlock],
        now: datetime,
    ) -> Optional[TimeSlot]:
        """Build the slot for one window occurrence, or None if it has passed."""
        slot_start, slot_end = window.occurrence(on_date)

        if slot_start < now:
            slot_start = self._next_whole_minute(now)
        if slot_end <= slot_start:
            return None

        slot = TimeSlot(start=slot_start, end=slot_end)
        for block in existing_blocks:
            if block.start_time < slot_end and block.end_time > slot_start:
                overlap_start = max(block.start_time, slot_start)
                overlap_end = min(block.end_time, slot_end)
                slot.mark_used(overlap_start, overlap_end)

        return slot

    def _windows_for(
        self,
        on_date: date,
        windows: list[AvailabilityWindow],
    ) -> list[AvailabilityWindow]:
        day_of_week = on_date.weekday()
        matching = [w for w in windows if w.day_of_week == day_of_week]
        if not matching:
            matching = self.block_policy.default_windows(day_of_week)
        return sorted(matching, key=lambda w: w.start_time)

    @staticmethod
    def _next_whole_minute(moment: datetime) -> datetime:
        """Round up to a minute boundary so blocks start on whole minutes."""
        if moment.second == 0 and moment.microsecond == 0:
            return moment
        return (moment + timedelta(minutes=1)).replace(second=0, microsecond=0)

    @staticmethod
    def _iter_dates(start: Union[date, datetime], end: Union[date, datetime]):
        current = start.date() if isinstance(start, datetime) else start
        last = end.date() if isinstance(end, datetime) else end
        while current <= last:
            yield current
            current += timedelta(days=1)
