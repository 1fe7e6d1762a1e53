"""Domain models for the planning system.

This module contains all core data structures used throughout the planner,
including tasks, availability windows, time slots, calendar blocks, and
scheduling outputs.
"""

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Optional


class Importance(Enum):
    """How much a task matters.

    The integer values are part of the scoring arithmetic and must not change.
    """

    LOW = 1
    MEDIUM = 2
    HIGH = 3
    CRITICAL = 4


class Difficulty(Enum):
    """How hard a task is expected to be.

    The integer values are part of the scoring arithmetic and must not change.
    """

    TRIVIAL = 1
    EASY = 2
    MEDIUM = 3
    HARD = 4
    COMPLEX = 5


class TaskStatus(Enum):
    """Lifecycle state of a task."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    BLOCKED = "blocked"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class BlockStatus(Enum):
    """Lifecycle state of a calendar block."""

    PROPOSED = "proposed"  # Produced by the allocator, not yet confirmed
    SCHEDULED = "scheduled"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    COMPLETED = "completed"
    MISSED = "missed"


def _new_id() -> str:
    return str(uuid.uuid4())


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes from start to end (negative if end precedes start)."""
    return int((end - start).total_seconds() // 60)


@dataclass
class Task:
    """A unit of work to be prioritized and scheduled.

    The engine only reads tasks, except for the derived priority fields
    (priority_score, priority_rationale, priority_computed_at and
    priority_inputs), which are rewritten whenever the scoring inputs change.

    Attributes:
        id: Unique identifier for the task.
        title: Display title, reused for calendar block titles.
        estimated_minutes: Expected effort in minutes (must be positive).
        difficulty: Ordinal difficulty (1..5).
        importance: Ordinal importance (1..4).
        due_date: Optional deadline.
        dependencies: IDs of tasks this task depends on.
        status: Current lifecycle state.
        priority_score: Last computed priority in [0, 1].
        priority_rationale: Human-readable reasons for the priority.
        priority_computed_at: When the priority was last computed.
        priority_inputs: Snapshot of scoring_inputs() at last computation.
    """

    title: str
    estimated_minutes: int = 60
    difficulty: Difficulty = Difficulty.MEDIUM
    importance: Importance = Importance.MEDIUM
    due_date: Optional[datetime] = None
    dependencies: list[str] = field(default_factory=list)
    status: TaskStatus = TaskStatus.NOT_STARTED
    id: str = field(default_factory=_new_id)
    description: str = ""
    project_id: Optional[str] = None
    priority_score: float = 0.0
    priority_rationale: Optional[str] = None
    priority_computed_at: Optional[datetime] = None
    priority_inputs: Optional[tuple] = None
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None

    def __post_init__(self):
        if self.estimated_minutes <= 0:
            raise ValueError(
                f"estimated_minutes must be positive, got {self.estimated_minutes}"
            )

    def scoring_inputs(self) -> tuple:
        """Fields that feed the priority score."""
        return (
            self.importance,
            self.due_date,
            self.difficulty,
            self.estimated_minutes,
            len(self.dependencies),
            self.status,
        )

    @property
    def has_dependencies(self) -> bool:
        return len(self.dependencies) > 0

    @property
    def is_open(self) -> bool:
        """True while the task still needs work."""
        return self.status not in (TaskStatus.COMPLETED, TaskStatus.CANCELLED)


@dataclass
class AvailabilityWindow:
    """A recurring weekly window of availability.

    Attributes:
        day_of_week: Weekday index, 0 = Monday .. 6 = Sunday.
        start_time: Time of day the window opens.
        end_time: Time of day the window closes (same day).
    """

    day_of_week: int
    start_time: time
    end_time: time

    def __post_init__(self):
        if not 0 <= self.day_of_week <= 6:
            raise ValueError(f"day_of_week must be 0-6, got {self.day_of_week}")
        if self.end_time <= self.start_time:
            raise ValueError(
                f"Window end {self.end_time} must be after start {self.start_time}"
            )

    @classmethod
    def weekdays(cls, start_time: time, end_time: time) -> list["AvailabilityWindow"]:
        """Create the same window for Monday through Friday."""
        return [cls(day, start_time, end_time) for day in range(5)]

    def occurrence(self, on_date: date) -> tuple[datetime, datetime]:
        """Concrete (start, end) of this window on a given date."""
        return (
            datetime.combine(on_date, self.start_time),
            datetime.combine(on_date, self.end_time),
        )


@dataclass
class TimeSlot:
    """A concrete, dated interval of potential availability.

    Used ranges cover both pre-existing commitments and blocks allocated
    during the current scheduling pass. allocated_minutes tracks only the
    latter.

    Attributes:
        start: Slot start instant.
        end: Slot end instant.
        used_ranges: (start, end) sub-ranges that are no longer free.
        allocated_minutes: Minutes consumed by newly allocated blocks.
    """

    start: datetime
    end: datetime
    used_ranges: list[tuple[datetime, datetime]] = field(default_factory=list)
    allocated_minutes: int = 0

    @property
    def total_minutes(self) -> int:
        """Length of the slot in minutes."""
        return minutes_between(self.start, self.end)

    @property
    def used_minutes(self) -> int:
        """Minutes covered by the union of used ranges within the slot."""
        used = 0
        for range_start, range_end in self._merged_used_ranges():
            used += minutes_between(range_start, range_end)
        return min(used, self.total_minutes)

    @property
    def remaining_minutes(self) -> int:
        """Free minutes left in the slot."""
        return self.total_minutes - self.used_minutes

    def mark_used(self, start: datetime, end: datetime, allocated: bool = False) -> None:
        """Record a used sub-range, clipped to the slot bounds."""
        clipped_start = max(start, self.start)
        clipped_end = min(end, self.end)
        if clipped_end <= clipped_start:
            return
        self.used_ranges.append((clipped_start, clipped_end))
        if allocated:
            self.allocated_minutes += minutes_between(clipped_start, clipped_end)

    def free_ranges(self) -> list[tuple[datetime, datetime]]:
        """Complement of the sorted used ranges within [start, end]."""
        ranges = []
        cursor = self.start
        for used_start, used_end in sorted(self.used_ranges):
            if cursor < used_start:
                ranges.append((cursor, used_start))
            cursor = max(cursor, used_end)
        if cursor < self.end:
            ranges.append((cursor, self.end))
        return ranges

    def _merged_used_ranges(self) -> list[tuple[datetime, datetime]]:
        merged: list[tuple[datetime, datetime]] = []
        for used_start, used_end in sorted(self.used_ranges):
            if merged and used_start <= merged[-1][1]:
                merged[-1] = (merged[-1][0], max(merged[-1][1], used_end))
            else:
                merged.append((used_start, used_end))
        return merged

    def __repr__(self) -> str:
        return (
            f"TimeSlot({self.start.strftime('%a %Y-%m-%d %H:%M')}-"
            f"{self.end.strftime('%H:%M')}, free={self.remaining_minutes}m)"
        )


@dataclass
class CalendarBlock:
    """A scheduled (or proposed) interval of work.

    Attributes:
        title: Display title.
        start_time: Block start instant.
        end_time: Block end instant (strictly after start).
        task_id: The task this block works on, if any.
        status: Lifecycle state.
        is_external: True for commitments imported from another calendar.
    """

    title: str
    start_time: datetime
    end_time: datetime
    task_id: Optional[str] = None
    status: BlockStatus = BlockStatus.PROPOSED
    is_external: bool = False
    id: str = field(default_factory=_new_id)

    def __post_init__(self):
        if self.end_time <= self.start_time:
            raise ValueError(
                f"Block end {self.end_time} must be after start {self.start_time}"
            )

    @property
    def duration_minutes(self) -> int:
        return minutes_between(self.start_time, self.end_time)

    def overlaps(self, other: "CalendarBlock") -> bool:
        """Check if this block overlaps with another."""
        return self.start_time < other.end_time and other.start_time < self.end_time

    def shift(self, delta: timedelta) -> None:
        """Move the block by delta, preserving its duration."""
        self.start_time += delta
        self.end_time += delta

    def __repr__(self) -> str:
        return (
            f"CalendarBlock({self.title!r}, {self.start_time.strftime('%Y-%m-%d %H:%M')}-"
            f"{self.end_time.strftime('%H:%M')})"
        )


@dataclass
class UnschedulableTask:
    """A task whose estimate could not be fully placed.

    Attributes:
        task_id: ID of the task.
        required_minutes: Original estimate.
        available_minutes: Free minutes across all slots before placement began.
        reason: Human-readable explanation.
        scheduled_minutes: Minutes that were placed anyway.
    """

    task_id: str
    required_minutes: int
    available_minutes: int
    reason: str
    scheduled_minutes: int = 0

    @property
    def shortfall_minutes(self) -> int:
        return self.required_minutes - self.scheduled_minutes


@dataclass
class ScheduleConflict:
    """An overlap between two blocks and how it was resolved."""

    block1_id: str
    block2_id: str
    overlap_start: datetime
    overlap_end: datetime
    resolution: str = "Shifted later block"

    @property
    def overlap_minutes(self) -> int:
        return minutes_between(self.overlap_start, self.overlap_end)


@dataclass
class SchedulingResult:
    """Output of one scheduling invocation.

    Attributes:
        blocks: Calendar blocks produced by the allocator.
        unschedulable: Tasks that could not be fully placed.
        conflicts: Overlaps found (and repaired) in the produced blocks.
        success: False when any processed task could not be fully placed.
        message: Human-readable summary.
        cancelled: True when the pass stopped early on request.
        tasks_considered: Number of tasks loaded for the pass.
        tasks_processed: Number of tasks the allocator reached.
    """

    blocks: list[CalendarBlock] = field(default_factory=list)
    unschedulable: list[UnschedulableTask] = field(default_factory=list)
    conflicts: list[ScheduleConflict] = field(default_factory=list)
    success: bool = True
    message: str = ""
    cancelled: bool = False
    tasks_considered: int = 0
    tasks_processed: int = 0

    def blocks_for_task(self, task_id: str) -> list[CalendarBlock]:
        """Blocks assigned to a task, in start-time order."""
        return sorted(
            (b for b in self.blocks if b.task_id == task_id),
            key=lambda b: b.start_time,
        )

    def scheduled_minutes(self, task_id: str) -> int:
        """Total minutes placed for a task."""
        return sum(b.duration_minutes for b in self.blocks if b.task_id == task_id)

    def get_summary(self) -> dict:
        """Summary statistics for display."""
        return {
            "success": self.success,
            "cancelled": self.cancelled,
            "total_blocks": len(self.blocks),
            "scheduled_minutes": sum(b.duration_minutes for b in self.blocks),
            "unschedulable_tasks": len(self.unschedulable),
            "conflicts": len(self.conflicts),
            "tasks_considered": self.tasks_considered,
            "tasks_processed": self.tasks_processed,
            "message": self.message,
        }


@dataclass
class AdvisoryScore:
    """A priority suggestion from an advisory source."""

    score: float
    rationale: Optional[str] = None


@dataclass
class PriorityResult:
    """Scoring outcome for one task."""

    task_id: str
    heuristic_score: float
    final_score: float
    rationale: str
    advisory_score: Optional[float] = None


@dataclass
class ScheduleRequest:
    """Request parameters for building a schedule.

    Attributes:
        task_ids: Tasks to schedule.
        schedule_start: First instant of the horizon.
        schedule_end: Last instant of the horizon (its date is included).
        availability_windows: Recurring weekly windows. Empty means defaults.
        existing_blocks: Commitments that already occupy time.
        min_block_minutes: Smallest useful block.
        max_block_minutes: Largest block before a task is split.
    """

    task_ids: list[str]
    schedule_start: datetime
    schedule_end: datetime
    availability_windows: list[AvailabilityWindow] = field(default_factory=list)
    existing_blocks: list[CalendarBlock] = field(default_factory=list)
    min_block_minutes: int = 30
    max_block_minutes: int = 180

    def __post_init__(self):
        if self.min_block_minutes <= 0:
            raise ValueError("min_block_minutes must be positive")
        if self.max_block_minutes < self.min_block_minutes:
            raise ValueError("max_block_minutes must be >= min_block_minutes")


@dataclass
class TaskQuery:
    """Filter for listing tasks. Unset fields match everything."""

    project_id: Optional[str] = None
    status: Optional[TaskStatus] = None
    min_importance: Optional[Importance] = None
    due_before: Optional[datetime] = None
    due_after: Optional[datetime] = None
    limit: Optional[int] = None

    def matches(self, task: Task) -> bool:
        if self.project_id is not None and task.project_id != self.project_id:
            return False
        if self.status is not None and task.status != self.status:
            return False
        if (
            self.min_importance is not None
            and task.importance.value < self.min_importance.value
        ):
            return False
        if self.due_before is not None:
            if task.due_date is None or task.due_date >= self.due_before:
                return False
        if self.due_after is not None:
            if task.due_date is None or task.due_date <= self.due_after:
                return False
        return True


@dataclass
class WeekSchedule:
    """Blocks stored for a seven-day window."""

    week_start: date
    blocks: list[CalendarBlock] = field(default_factory=list)

    @property
    def dates(self) -> list[date]:
        return [self.week_start + timedelta(days=i) for i in range(7)]

    def blocks_on(self, on_date: date) -> list[CalendarBlock]:
        """Blocks starting on a given date, in start order."""
        return sorted(
            (b for b in self.blocks if b.start_time.date() == on_date),
            key=lambda b: b.start_time,
        )
