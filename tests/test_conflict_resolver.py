"""Tests for overlap detection and repair."""

from datetime import date, datetime, time

import pytest

from taskplanner.domain.models import CalendarBlock
from taskplanner.scheduling.conflict_resolver import SHIFT_RESOLUTION, ConflictResolver

MONDAY = date(2024, 1, 15)


def at(hour: int, minute: int = 0) -> datetime:
    return datetime.combine(MONDAY, time(hour, minute))


def spans(blocks):
    return [(b.start_time, b.end_time) for b in blocks]


class TestConflictResolver:
    """Tests for ConflictResolver."""

    @pytest.fixture
    def resolver(self):
        return ConflictResolver()

    def test_shifts_later_block(self, resolver):
        """[10:00, 11:00) and [10:30, 11:30) overlap by 30 minutes."""
        first = CalendarBlock("A", at(10), at(11))
        second = CalendarBlock("B", at(10, 30), at(11, 30))

        conflicts = resolver.resolve([first, second])

        assert len(conflicts) == 1
        conflict = conflicts[0]
        assert conflict.block1_id == first.id
        assert conflict.block2_id == second.id
        assert (conflict.overlap_start, conflict.overlap_end) == (at(10, 30), at(11))
        assert conflict.overlap_minutes == 30
        assert conflict.resolution == SHIFT_RESOLUTION
        assert spans([first, second]) == [(at(10), at(11)), (at(11), at(12))]

    def test_second_pass_finds_nothing(self, resolver):
        blocks = [
            CalendarBlock("A", at(10), at(11)),
            CalendarBlock("B", at(10, 30), at(11, 30)),
        ]
        resolver.resolve(blocks)
        repaired = spans(blocks)

        assert resolver.resolve(blocks) == []
        assert spans(blocks) == repaired

    def test_touching_blocks_do_not_conflict(self, resolver):
        blocks = [CalendarBlock("A", at(9), at(10)), CalendarBlock("B", at(10), at(11))]
        assert resolver.resolve(blocks) == []
        assert spans(blocks) == [(at(9), at(10)), (at(10), at(11))]

    def test_chain_cascades(self, resolver):
        """Each shift is measured against the already-moved block."""
        blocks = [
            CalendarBlock("A", at(10), at(11)),
            CalendarBlock("B", at(10, 30), at(11, 30)),
            CalendarBlock("C", at(11, 15), at(12)),
        ]

        conflicts = resolver.resolve(blocks)

        assert len(conflicts) == 2
        assert spans(blocks) == [
            (at(10), at(11)),
            (at(11), at(12)),
            (at(12), at(12, 45)),
        ]
        assert resolver.find_conflicts(blocks) == []

    def test_contained_block_moves_past_container(self, resolver):
        outer = CalendarBlock("Outer", at(10), at(12))
        inner = CalendarBlock("Inner", at(10, 30), at(11))

        conflicts = resolver.resolve([outer, inner])

        assert conflicts[0].overlap_minutes == 90
        assert spans([inner]) == [(at(12), at(12, 30))]
        assert inner.duration_minutes == 30

    def test_input_order_is_kept(self, resolver):
        """Blocks are compared in start order but the list is not reordered."""
        late = CalendarBlock("Late", at(10, 30), at(11, 30))
        early = CalendarBlock("Early", at(10), at(11))
        blocks = [late, early]

        resolver.resolve(blocks)

        assert blocks == [late, early]
        assert late.start_time == at(11)

    def test_shift_may_leave_working_hours(self, resolver):
        """Repairs are not checked against availability windows."""
        blocks = [
            CalendarBlock("Wrap-up", at(16), at(17)),
            CalendarBlock("Review", at(16, 30), at(17)),
        ]
        resolver.resolve(blocks)
        assert spans(blocks[1:]) == [(at(17), at(17, 30))]

    def test_empty_and_single(self, resolver):
        assert resolver.resolve([]) == []
        assert resolver.resolve([CalendarBlock("A", at(9), at(10))]) == []

    def test_find_conflicts_does_not_mutate(self, resolver):
        blocks = [
            CalendarBlock("A", at(10), at(11)),
            CalendarBlock("B", at(10, 30), at(11, 30)),
        ]
        before = spans(blocks)

        conflicts = resolver.find_conflicts(blocks)

        assert len(conflicts) == 1
        assert conflicts[0].resolution == "Unresolved"
        assert spans(blocks) == before
