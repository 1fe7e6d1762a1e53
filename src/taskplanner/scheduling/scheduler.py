"""Main scheduler interface.

This module provides the high-level Scheduler class that orchestrates
priority ranking, availability planning, block allocation, and conflict
repair.
"""

import logging
import threading
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional

from taskplanner.domain.models import (
    BlockStatus,
    CalendarBlock,
    ScheduleConflict,
    ScheduleRequest,
    SchedulingResult,
    Task,
    TaskQuery,
    TaskStatus,
    WeekSchedule,
)
from taskplanner.domain.policies import (
    BlockPolicy,
    DefaultBlockPolicy,
    DefaultScoringPolicy,
    ScoringPolicy,
)
from taskplanner.scheduling.allocator import GreedyBlockAllocator
from taskplanner.scheduling.availability import AvailabilityPlanner
from taskplanner.scheduling.conflict_resolver import ConflictResolver
from taskplanner.scheduling.priority_scorer import PriorityScorer
from taskplanner.storage.base import BlockNotFoundError, BlockStore, TaskStore
from taskplanner.storage.memory import InMemoryBlockStore

logger = logging.getLogger(__name__)


@dataclass
class SchedulerConfig:
    """Configuration for the scheduler and its priority scorer.

    Attributes:
        advisory_timeout_seconds: Upper bound on waiting for advisory scores.
        advisory_weight: Share of the final score given to advisory scores.
        rescore_interval: How long a stored priority stays fresh.
        horizon_days: Days ahead covered by auto_schedule.
        conflict_horizon_days: Days ahead scanned by resolve_conflicts when
            no blocks are given.
    """

    advisory_timeout_seconds: float = 5.0
    advisory_weight: float = 0.3
    rescore_interval: timedelta = timedelta(minutes=15)
    horizon_days: int = 7
    conflict_horizon_days: int = 30


class Scheduler:
    """High-level scheduler for turning tasks into calendar blocks.

    The Scheduler ranks tasks, builds availability slots, allocates blocks
    greedily, and repairs any overlaps before handing the blocks to the
    block store.

    Example:
        >>> scheduler = Scheduler(task_store, block_store)
        >>> request = ScheduleRequest(
        ...     task_ids=["t1", "t2"],
        ...     schedule_start=datetime(2024, 1, 15),
        ...     schedule_end=datetime(2024, 1, 21),
        ... )
        >>> result = scheduler.build_schedule(request)
    """

    def __init__(
        self,
        task_store: TaskStore,
        block_store: Optional[BlockStore] = None,
        scoring_policy: Optional[ScoringPolicy] = None,
        block_policy: Optional[BlockPolicy] = None,
        config: Optional[SchedulerConfig] = None,
        scorer: Optional[PriorityScorer] = None,
    ):
        """Initialize scheduler with stores and policies.

        Args:
            task_store: Source of tasks.
            block_store: Destination for produced blocks. Defaults to an
                in-memory store.
            scoring_policy: Policy for priority scoring.
            block_policy: Policy for block sizes and default availability.
            config: Scheduler configuration.
            scorer: Priority scorer to share with a TaskService. Built from
                the policy and config when omitted.
        """
        self.task_store = task_store
        self.block_store = block_store if block_store is not None else InMemoryBlockStore()
        self.scoring_policy = scoring_policy or DefaultScoringPolicy()
        self.block_policy = block_policy or DefaultBlockPolicy()
        self.config = config or SchedulerConfig()

        self.scorer = scorer or PriorityScorer(
            scoring_policy=self.scoring_policy,
            advisory_weight=self.config.advisory_weight,
            advisory_timeout_seconds=self.config.advisory_timeout_seconds,
            rescore_interval=self.config.rescore_interval,
        )
        self.planner = AvailabilityPlanner(block_policy=self.block_policy)
        self.allocator = GreedyBlockAllocator(block_policy=self.block_policy)
        self.resolver = ConflictResolver()

    def build_schedule(
        self,
        request: ScheduleRequest,
        now: Optional[datetime] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> SchedulingResult:
        """Build a schedule for the requested tasks.

        Args:
            request: Tasks, horizon, availability and existing commitments.
            now: Reference time for scoring and slot clamping.
            cancel_event: Checked once per task; when set, the pass stops
                early and returns what it has.

        Returns:
            SchedulingResult with blocks, unschedulable tasks and conflicts.
        """
        if now is None:
            now = datetime.now()

        tasks = self._load_tasks(request.task_ids)
        if not tasks:
            logger.info("No tasks found to schedule")
            return SchedulingResult(success=True, message="No tasks found to schedule")

        ranked = self.scorer.rank(tasks, now)

        slots = self.planner.build_slots(
            request.schedule_start,
            request.schedule_end,
            request.availability_windows,
            request.existing_blocks,
            min_block_minutes=request.min_block_minutes,
            now=now,
        )

        outcome = self.allocator.allocate(
            ranked,
            slots,
            min_block_minutes=request.min_block_minutes,
            max_block_minutes=request.max_block_minutes,
            cancel_event=cancel_event,
        )

        result = SchedulingResult(
            blocks=outcome.blocks,
            unschedulable=outcome.unschedulable,
            success=not outcome.unschedulable,
            cancelled=outcome.cancelled,
            tasks_considered=len(ranked),
            tasks_processed=outcome.processed,
        )

        result.conflicts = self.resolver.resolve(result.blocks)

        for block in result.blocks:
            self.block_store.save_block(block)

        result.message = self._build_message(result)
        logger.info("%s", result.message)
        return result

    def auto_schedule(
        self,
        project_id: Optional[str] = None,
        now: Optional[datetime] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> SchedulingResult:
        """Schedule every not-started task, optionally within one project.

        Existing blocks in the horizon are read from the block store and
        default availability windows are used.
        """
        if now is None:
            now = datetime.now()

        query = TaskQuery(project_id=project_id, status=TaskStatus.NOT_STARTED)
        tasks = self.task_store.list_tasks(query)

        start = datetime.combine(now.date(), time.min)
        end = start + timedelta(days=self.config.horizon_days)
        request = ScheduleRequest(
            task_ids=[t.id for t in tasks],
            schedule_start=start,
            schedule_end=end,
            existing_blocks=self.block_store.get_blocks_in_range(start, end + timedelta(days=1)),
            min_block_minutes=self.block_policy.min_block_minutes(),
            max_block_minutes=self.block_policy.max_block_minutes(),
        )
        return self.build_schedule(request, now=now, cancel_event=cancel_event)

    def resolve_conflicts(
        self,
        blocks: Optional[list[CalendarBlock]] = None,
        now: Optional[datetime] = None,
    ) -> list[ScheduleConflict]:
        """Repair overlapping blocks.

        Args:
            blocks: Blocks to repair in place. When omitted, blocks for the
                next conflict_horizon_days are loaded from the block store
                and shifted blocks are saved back.
            now: Reference time for the stored-block horizon.

        Returns:
            Conflicts found and repaired.
        """
        if blocks is not None:
            return self.resolver.resolve(blocks)

        if now is None:
            now = datetime.now()
        start = datetime.combine(now.date(), time.min)
        end = start + timedelta(days=self.config.conflict_horizon_days)
        stored = self.block_store.get_blocks_in_range(start, end)

        conflicts = self.resolver.resolve(stored)
        shifted_ids = {c.block2_id for c in conflicts}
        for block in stored:
            if block.id in shifted_ids:
                self.block_store.save_block(block)
        return conflicts

    def get_schedule(self, week_start: date) -> WeekSchedule:
        """Get stored blocks for the seven days starting at week_start."""
        start = datetime.combine(week_start, time.min)
        end = start + timedelta(days=7)
        return WeekSchedule(
            week_start=week_start,
            blocks=self.block_store.get_blocks_in_range(start, end),
        )

    def update_block_status(self, block_id: str, status: BlockStatus) -> CalendarBlock:
        """Change a stored block's status.

        Raises:
            BlockNotFoundError: If the block does not exist.
        """
        block = self.block_store.get_block(block_id)
        if block is None:
            raise BlockNotFoundError(f"Block {block_id} not found")
        block.status = status
        self.block_store.save_block(block)
        logger.info("Updated block %s status to %s", block_id, status.value)
        return block

    def _load_tasks(self, task_ids: list[str]) -> list[Task]:
        tasks = []
        for task_id in task_ids:
            task = self.task_store.get_task(task_id)
            if task is None:
                logger.debug("Skipping unknown task %s", task_id)
                continue
            tasks.append(task)
        return tasks

    @staticmethod
    def _build_message(result: SchedulingResult) -> str:
        if result.blocks:
            placed_tasks = result.tasks_processed - len(result.unschedulable)
            message = f"Scheduled {len(result.blocks)} blocks for {placed_tasks} tasks"
        else:
            message = "No tasks could be scheduled"

        if result.unschedulable:
            message += f"; {len(result.unschedulable)} task(s) could not be fully scheduled"
        if result.cancelled:
            message += (
                f" (cancelled after {result.tasks_processed} of "
                f"{result.tasks_considered} tasks)"
            )
        return message
