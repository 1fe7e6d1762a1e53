"""Overlap detection and repair for calendar blocks."""

import logging

from taskplanner.domain.models import CalendarBlock, ScheduleConflict

logger = logging.getLogger(__name__)

SHIFT_RESOLUTION = "Shifted later block"


class ConflictResolver:
    """Finds overlapping blocks and repairs them by shifting.

    Blocks are walked in start-time order. Whenever a block ends after the
    next one starts, the later block is moved forward by exactly the overlap,
    keeping its duration. Each comparison uses the already-shifted previous
    block, so a chain of overlaps cascades forward in a single pass. Shifted
    blocks are not checked against availability windows and may land outside
    them.

    Example:
        >>> resolver = ConflictResolver()
        >>> conflicts = resolver.resolve(blocks)  # Mutates blocks
        >>> resolver.resolve(blocks)
        []
    """

    def resolve(self, blocks: list[CalendarBlock]) -> list[ScheduleConflict]:
        """Repair overlaps in place.

        Args:
            blocks: Blocks to check. Block objects are mutated; the list
                order is left untouched.

        Returns:
            One ScheduleConflict per repaired overlap.
        """
        conflicts = []
        ordered = sorted(blocks, key=lambda b: b.start_time)

        for current, following in zip(ordered, ordered[1:]):
            if current.end_time <= following.start_time:
                continue

            conflict = ScheduleConflict(
                block1_id=current.id,
                block2_id=following.id,
                overlap_start=following.start_time,
                overlap_end=current.end_time,
                resolution=SHIFT_RESOLUTION,
            )
            conflicts.append(conflict)

            following.shift(current.end_time - following.start_time)
            logger.debug(
                "Shifted block %s by %d minutes to %s",
                following.id, conflict.overlap_minutes, following.start_time,
            )

        if conflicts:
            logger.info("Resolved %d block conflict(s)", len(conflicts))
        return conflicts

    def find_conflicts(self, blocks: list[CalendarBlock]) -> list[ScheduleConflict]:
        """Report overlaps between adjacent blocks without changing anything."""
        conflicts = []
        ordered = sorted(blocks, key=lambda b: b.start_time)
        for current, following in zip(ordered, ordered[1:]):
            if current.end_time > following.start_time:
                conflicts.append(
                    ScheduleConflict(
                        block1_id=current.id,
                        block2_id=following.id,
                        overlap_start=following.start_time,
                        overlap_end=current.end_time,
                        resolution="Unresolved",
                    )
                )
        return conflicts
