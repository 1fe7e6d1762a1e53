"""Scheduling engine for prioritizing tasks and placing them on a calendar."""

from taskplanner.scheduling.advisory import (
    AdvisoryScorer,
    CompletionAdvisoryScorer,
    NullAdvisoryScorer,
    StaticAdvisoryScorer,
)
from taskplanner.scheduling.allocator import AllocationOutcome, GreedyBlockAllocator
from taskplanner.scheduling.availability import AvailabilityPlanner
from taskplanner.scheduling.conflict_resolver import ConflictResolver
from taskplanner.scheduling.priority_scorer import PriorityScorer
from taskplanner.scheduling.scheduler import Scheduler, SchedulerConfig
from taskplanner.scheduling.task_service import TaskService

__all__ = [
    # Core services
    "Scheduler",
    "SchedulerConfig",
    "TaskService",
    # Engine components
    "AvailabilityPlanner",
    "GreedyBlockAllocator",
    "AllocationOutcome",
    "ConflictResolver",
    "PriorityScorer",
    # Advisory sources
    "AdvisoryScorer",
    "CompletionAdvisoryScorer",
    "NullAdvisoryScorer",
    "StaticAdvisoryScorer",
]
