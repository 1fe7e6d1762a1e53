"""Domain models and business rules for planning."""

from taskplanner.domain.models import (
    AdvisoryScore,
    AvailabilityWindow,
    BlockStatus,
    CalendarBlock,
    Difficulty,
    Importance,
    PriorityResult,
    ScheduleConflict,
    ScheduleRequest,
    SchedulingResult,
    Task,
    TaskQuery,
    TaskStatus,
    TimeSlot,
    UnschedulableTask,
    WeekSchedule,
)
from taskplanner.domain.policies import (
    BlockPolicy,
    DefaultBlockPolicy,
    DefaultScoringPolicy,
    ScoringPolicy,
)

__all__ = [
    # Models
    "AdvisoryScore",
    "AvailabilityWindow",
    "BlockStatus",
    "CalendarBlock",
    "Difficulty",
    "Importance",
    "PriorityResult",
    "ScheduleConflict",
    "ScheduleRequest",
    "SchedulingResult",
    "Task",
    "TaskQuery",
    "TaskStatus",
    "TimeSlot",
    "UnschedulableTask",
    "WeekSchedule",
    # Policies
    "BlockPolicy",
    "DefaultBlockPolicy",
    "DefaultScoringPolicy",
    "ScoringPolicy",
]
