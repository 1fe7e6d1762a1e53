"""Tests for greedy block allocation."""

import threading
from datetime import date, datetime, time

import pytest

from taskplanner.domain.models import BlockStatus, Task, TimeSlot
from taskplanner.scheduling.allocator import INSUFFICIENT_TIME_REASON, GreedyBlockAllocator

MONDAY = date(2024, 1, 15)
TUESDAY = date(2024, 1, 16)


def at(hour: int, minute: int = 0, day: date = MONDAY) -> datetime:
    return datetime.combine(day, time(hour, minute))


class CancelAfter:
    """Cancellation signal that trips after a number of checks."""

    def __init__(self, checks: int):
        self.checks = checks

    def is_set(self) -> bool:
        self.checks -= 1
        return self.checks < 0


class TestGreedyBlockAllocator:
    """Tests for GreedyBlockAllocator."""

    @pytest.fixture
    def allocator(self):
        return GreedyBlockAllocator()

    def test_single_block(self, allocator):
        """A 90-minute task fits one 120-minute slot as one block."""
        task = Task("Write proposal", id="t1", estimated_minutes=90)
        slot = TimeSlot(at(9), at(11))

        outcome = allocator.allocate([task], [slot])

        assert len(outcome.blocks) == 1
        block = outcome.blocks[0]
        assert block.title == "Write proposal"
        assert block.task_id == "t1"
        assert block.status == BlockStatus.PROPOSED
        assert (block.start_time, block.end_time) == (at(9), at(10, 30))
        assert outcome.unschedulable == []
        assert slot.allocated_minutes == 90
        assert slot.remaining_minutes == 30

    def test_split_across_slots(self, allocator):
        """240 minutes over 90- and 150-minute slots gives two parts."""
        task = Task("Research", estimated_minutes=240)
        slots = [TimeSlot(at(9), at(10, 30)), TimeSlot(at(13), at(15, 30))]

        outcome = allocator.allocate([task], slots)

        assert [b.duration_minutes for b in outcome.blocks] == [90, 150]
        assert [b.title for b in outcome.blocks] == ["Research (Part 1)", "Research (Part 2)"]
        assert outcome.unschedulable == []

    def test_long_task_split_at_max_block(self, allocator):
        task = Task("Migration", estimated_minutes=400)
        slot = TimeSlot(at(9), at(17))

        outcome = allocator.allocate([task], [slot])

        assert [b.duration_minutes for b in outcome.blocks] == [180, 180, 40]
        assert outcome.blocks[1].start_time == outcome.blocks[0].end_time
        assert outcome.blocks[2].title == "Migration (Part 3)"

    def test_short_tail_is_still_placed(self, allocator):
        """A remainder smaller than the minimum block is not dropped."""
        task = Task("Cleanup", estimated_minutes=200)
        outcome = allocator.allocate([task], [TimeSlot(at(9), at(17))])
        assert [b.duration_minutes for b in outcome.blocks] == [180, 20]
        assert outcome.unschedulable == []

    def test_tiny_task(self, allocator):
        task = Task("Reply to email", estimated_minutes=10)
        outcome = allocator.allocate([task], [TimeSlot(at(9), at(10))])
        assert [b.duration_minutes for b in outcome.blocks] == [10]

    def test_skips_ranges_below_minimum(self, allocator):
        """A 20-minute gap is skipped in favor of a later free range."""
        slot = TimeSlot(at(9), at(12))
        slot.mark_used(at(9, 20), at(11))
        task = Task("Review", estimated_minutes=60)

        outcome = allocator.allocate([task], [slot])

        assert len(outcome.blocks) == 1
        assert outcome.blocks[0].start_time == at(11)

    def test_custom_block_bounds(self, allocator):
        task = Task("Study", estimated_minutes=120)
        outcome = allocator.allocate(
            [task], [TimeSlot(at(9), at(17))], min_block_minutes=15, max_block_minutes=45
        )
        assert [b.duration_minutes for b in outcome.blocks] == [45, 45, 30]

    def test_unschedulable_keeps_partial_blocks(self, allocator):
        task = Task("Huge", id="huge", estimated_minutes=600)
        slot = TimeSlot(at(9), at(17))

        outcome = allocator.allocate([task], [slot])

        assert sum(b.duration_minutes for b in outcome.blocks) == 480
        assert len(outcome.unschedulable) == 1
        entry = outcome.unschedulable[0]
        assert entry.task_id == "huge"
        assert entry.required_minutes == 600
        assert entry.available_minutes == 480
        assert entry.scheduled_minutes == 480
        assert entry.shortfall_minutes == 120
        assert entry.reason == INSUFFICIENT_TIME_REASON

    def test_later_tasks_see_reduced_availability(self, allocator):
        first = Task("First", id="first", estimated_minutes=300)
        second = Task("Second", id="second", estimated_minutes=300)
        slot = TimeSlot(at(9), at(17))

        outcome = allocator.allocate([first, second], [slot])

        assert sum(b.duration_minutes for b in outcome.blocks if b.task_id == "first") == 300
        assert [e.task_id for e in outcome.unschedulable] == ["second"]
        assert outcome.unschedulable[0].available_minutes == 180
        assert outcome.unschedulable[0].scheduled_minutes == 180

    def test_no_slots(self, allocator):
        task = Task("Anything", estimated_minutes=30)
        outcome = allocator.allocate([task], [])
        assert outcome.blocks == []
        assert outcome.unschedulable[0].available_minutes == 0
        assert outcome.processed == 1

    def test_priority_order_is_respected(self, allocator):
        """The first task in the list gets the earliest time."""
        urgent = Task("Urgent", id="urgent", estimated_minutes=60)
        later = Task("Later", id="later", estimated_minutes=60)
        outcome = allocator.allocate([urgent, later], [TimeSlot(at(9), at(11))])
        assert outcome.blocks[0].task_id == "urgent"
        assert outcome.blocks[0].start_time == at(9)
        assert outcome.blocks[1].start_time == at(10)

    def test_blocks_never_overlap(self, allocator):
        tasks = [Task(f"Task {i}", estimated_minutes=m) for i, m in enumerate([45, 200, 90, 30, 150])]
        slots = [
            TimeSlot(at(9), at(12)),
            TimeSlot(at(13), at(17)),
            TimeSlot(at(9, day=TUESDAY), at(17, day=TUESDAY)),
        ]
        slots[1].mark_used(at(14), at(15))

        outcome = allocator.allocate(tasks, slots)

        ordered = sorted(outcome.blocks, key=lambda b: b.start_time)
        for current, following in zip(ordered, ordered[1:]):
            assert current.end_time <= following.start_time
        for block in outcome.blocks:
            assert block.duration_minutes <= 180
            assert not (at(14) < block.end_time and block.start_time < at(15))
        for slot in slots:
            assert slot.used_minutes <= slot.total_minutes
        assert outcome.unschedulable == []

    def test_cancel_before_start(self, allocator):
        cancel = threading.Event()
        cancel.set()
        tasks = [Task("a"), Task("b")]

        outcome = allocator.allocate(tasks, [TimeSlot(at(9), at(17))], cancel_event=cancel)

        assert outcome.cancelled is True
        assert outcome.processed == 0
        assert outcome.blocks == []
        assert outcome.unschedulable == []

    def test_cancel_mid_pass_keeps_processed_work(self, allocator):
        tasks = [Task("a", id="a"), Task("b", id="b"), Task("c", id="c")]

        outcome = allocator.allocate(
            tasks, [TimeSlot(at(9), at(17))], cancel_event=CancelAfter(1)
        )

        assert outcome.cancelled is True
        assert outcome.processed == 1
        assert [b.task_id for b in outcome.blocks] == ["a"]

    def test_unset_event_does_not_cancel(self, allocator):
        outcome = allocator.allocate(
            [Task("a")], [TimeSlot(at(9), at(17))], cancel_event=threading.Event()
        )
        assert outcome.cancelled is False
        assert outcome.processed == 1
