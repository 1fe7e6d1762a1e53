"""Greedy block allocation.

This module implements a greedy approach to packing tasks into time slots:
1. Take tasks most urgent first
2. Walk slots chronologically and fill their free sub-ranges
3. Split a task across several blocks when one range is not enough
4. Report whatever could not be placed as unschedulable
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Optional

from taskplanner.domain.models import (
    BlockStatus,
    CalendarBlock,
    Task,
    TimeSlot,
    UnschedulableTask,
    minutes_between,
)
from taskplanner.domain.policies import BlockPolicy, DefaultBlockPolicy

logger = logging.getLogger(__name__)

INSUFFICIENT_TIME_REASON = "Insufficient time slots available"


@dataclass
class AllocationOutcome:
    """Result of one allocation pass.

    Attributes:
        blocks: Blocks emitted, grouped by task in priority order.
        unschedulable: Tasks that could not be fully placed.
        processed: Number of tasks the allocator reached.
        cancelled: True when the pass stopped early.
    """

    blocks: list[CalendarBlock] = field(default_factory=list)
    unschedulable: list[UnschedulableTask] = field(default_factory=list)
    processed: int = 0
    cancelled: bool = False


class GreedyBlockAllocator:
    """Greedy allocator that carves calendar blocks out of time slots.

    Each task consumes free time in the earliest slots first. Blocks are
    capped at the maximum block size, and ranges too small for a useful
    block are skipped. Slots are updated as blocks are placed so later
    tasks see the reduced availability.
    """

    def __init__(self, block_policy: Optional[BlockPolicy] = None):
        self.block_policy = block_policy or DefaultBlockPolicy()

    def allocate(
        self,
        tasks: list[Task],
        slots: list[TimeSlot],
        min_block_minutes: Optional[int] = None,
        max_block_minutes: Optional[int] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> AllocationOutcome:
        """Allocate blocks for tasks in the given order.

        Args:
            tasks: Tasks sorted by priority, most urgent first.
            slots: Chronological slots. Mutated as time gets used.
            min_block_minutes: Smallest block worth emitting.
            max_block_minutes: Largest block; longer tasks are split.
            cancel_event: Checked before each task; when set, the pass stops
                and the remaining tasks are left out of the outcome.

        Returns:
            AllocationOutcome with blocks and unschedulable tasks.
        """
        if min_block_minutes is None:
            min_block_minutes = self.block_policy.min_block_minutes()
        if max_block_minutes is None:
            max_block_minutes = self.block_policy.max_block_minutes()

        outcome = AllocationOutcome()

        for task in tasks:
            if cancel_event is not None and cancel_event.is_set():
                logger.info(
                    "Allocation cancelled after %d of %d tasks",
                    outcome.processed, len(tasks),
                )
                outcome.cancelled = True
                break

            available_minutes = sum(s.remaining_minutes for s in slots)
            blocks = self._allocate_task(task, slots, min_block_minutes, max_block_minutes)
            outcome.blocks.extend(blocks)
            outcome.processed += 1

            scheduled = sum(b.duration_minutes for b in blocks)
            if scheduled < task.estimated_minutes:
                outcome.unschedulable.append(
                    UnschedulableTask(
                        task_id=task.id,
                        required_minutes=task.estimated_minutes,
                        available_minutes=available_minutes,
                        reason=INSUFFICIENT_TIME_REASON,
                        scheduled_minutes=scheduled,
                    )
                )
                logger.debug(
                    "Task %s short by %d minutes (%d available)",
                    task.id, task.estimated_minutes - scheduled, available_minutes,
                )
            else:
                logger.debug("Task %s placed in %d block(s)", task.id, len(blocks))

        return outcome

    def _allocate_task(
        self,
        task: Task,
        slots: list[TimeSlot],
        min_block_minutes: int,
        max_block_minutes: int,
    ) -> list[CalendarBlock]:
        """Place one task, returning the blocks emitted for it."""
        remaining = task.estimated_minutes
        blocks: list[CalendarBlock] = []

        for slot in slots:
            if remaining <= 0:
                break
            if slot.remaining_minutes < min_block_minutes:
                continue

            for range_start, range_end in slot.free_ranges():
                if remaining <= 0:
                    break

                cursor = range_start
                while remaining > 0:
                    range_available = minutes_between(cursor, range_end)
                    if range_available < min_block_minutes:
                        break

                    block_minutes = min(remaining, range_available, max_block_minutes)
                    if block_minutes < min_block_minutes and remaining >= min_block_minutes:
                        # Too small to be useful
                        break

                    block_end = cursor + timedelta(minutes=block_minutes)
                    blocks.append(
                        CalendarBlock(
                            title=task.title,
                            start_time=cursor,
                            end_time=block_end,
                            task_id=task.id,
                            status=BlockStatus.PROPOSED,
                        )
                    )
                    slot.mark_used(cursor, block_end, allocated=True)

                    cursor = block_end
                    remaining -= block_minutes

        if len(blocks) > 1:
            for part, block in enumerate(blocks, start=1):
                block.title = f"{task.title} (Part {part})"

        return blocks
