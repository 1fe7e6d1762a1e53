"""Task management with priority scoring.

The TaskService owns the task lifecycle operations that touch priority:
every mutation that changes a scoring input recomputes the task's derived
priority fields before it is saved.
"""

import logging
from datetime import datetime
from typing import Optional

from taskplanner.domain.models import (
    Difficulty,
    Importance,
    PriorityResult,
    Task,
    TaskQuery,
    TaskStatus,
)
from taskplanner.scheduling.advisory import AdvisoryScorer
from taskplanner.scheduling.priority_scorer import PriorityScorer
from taskplanner.storage.base import TaskNotFoundError, TaskStore

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = {
    "title",
    "description",
    "estimated_minutes",
    "difficulty",
    "importance",
    "due_date",
    "status",
    "project_id",
}

ENUM_FIELDS = {
    "difficulty": Difficulty,
    "importance": Importance,
    "status": TaskStatus,
}


class TaskService:
    """Task CRUD plus batch priority scoring.

    Example:
        >>> service = TaskService(InMemoryTaskStore())
        >>> task = service.create_task("Write report", importance=Importance.HIGH)
        >>> results = service.score_priorities([task.id])
    """

    def __init__(
        self,
        task_store: TaskStore,
        scorer: Optional[PriorityScorer] = None,
        advisory: Optional[AdvisoryScorer] = None,
    ):
        """Initialize the service.

        Args:
            task_store: Where tasks are read from and saved to.
            scorer: Priority scorer. A default scorer is built when omitted.
            advisory: Advisory source for score_priorities. Overrides the
                scorer's own advisory source when given.
        """
        self.task_store = task_store
        self.scorer = scorer or PriorityScorer()
        if advisory is not None:
            self.scorer.advisory = advisory

    def create_task(self, title: str, now: Optional[datetime] = None, **fields) -> Task:
        """Create, score, and save a new task.

        Args:
            title: Task title.
            now: Reference time for scoring and timestamps.
            **fields: Any other Task field (estimated_minutes, importance, ...).
        """
        if now is None:
            now = datetime.now()
        task = Task(title=title, created_at=now, updated_at=now, **fields)
        self.scorer.refresh(task, now)
        self.task_store.save_task(task)
        logger.info("Created task %s: %s", task.id, task.title)
        return task

    def update_task(self, task_id: str, now: Optional[datetime] = None, **changes) -> Task:
        """Apply field changes to a task and recompute its priority.

        Raises:
            TaskNotFoundError: If the task does not exist.
            ValueError: If a change names a field that cannot be updated or
                carries a value its enum does not define. Plain values such
                as importance=3 or status="completed" are converted.
        """
        if now is None:
            now = datetime.now()
        task = self._require_task(task_id)

        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update task fields: {', '.join(sorted(unknown))}")
        if "estimated_minutes" in changes and changes["estimated_minutes"] <= 0:
            raise ValueError("estimated_minutes must be positive")
        for name, enum_cls in ENUM_FIELDS.items():
            if name in changes and not isinstance(changes[name], enum_cls):
                # Raises ValueError for values outside the enum
                changes[name] = enum_cls(changes[name])

        for name, value in changes.items():
            setattr(task, name, value)

        if task.status == TaskStatus.COMPLETED and task.completed_at is None:
            task.completed_at = now

        task.updated_at = now
        self.scorer.refresh(task, now)
        self.task_store.save_task(task)
        logger.info("Updated task %s", task.id)
        return task

    def delete_task(self, task_id: str) -> bool:
        deleted = self.task_store.delete_task(task_id)
        if deleted:
            logger.info("Deleted task %s", task_id)
        return deleted

    def get_task(self, task_id: str) -> Optional[Task]:
        return self.task_store.get_task(task_id)

    def list_tasks(self, query: Optional[TaskQuery] = None) -> list[Task]:
        return self.task_store.list_tasks(query)

    def add_dependency(
        self, task_id: str, depends_on_id: str, now: Optional[datetime] = None
    ) -> Task:
        """Record that a task depends on another one."""
        if now is None:
            now = datetime.now()
        task = self._require_task(task_id)
        if depends_on_id not in task.dependencies:
            task.dependencies.append(depends_on_id)
            task.updated_at = now
            self.scorer.refresh(task, now)
            self.task_store.save_task(task)
            logger.info("Added dependency %s to task %s", depends_on_id, task_id)
        return task

    def remove_dependency(
        self, task_id: str, depends_on_id: str, now: Optional[datetime] = None
    ) -> Task:
        """Drop a dependency from a task, if present."""
        if now is None:
            now = datetime.now()
        task = self._require_task(task_id)
        if depends_on_id in task.dependencies:
            task.dependencies.remove(depends_on_id)
            task.updated_at = now
            self.scorer.refresh(task, now)
            self.task_store.save_task(task)
            logger.info("Removed dependency %s from task %s", depends_on_id, task_id)
        return task

    def score_priorities(
        self,
        task_ids: list[str],
        now: Optional[datetime] = None,
    ) -> list[PriorityResult]:
        """Score tasks, store the results on them, and rank them.

        Unknown IDs are skipped.

        Returns:
            PriorityResults sorted by final score, highest first.
        """
        if now is None:
            now = datetime.now()

        tasks = []
        for task_id in task_ids:
            task = self.task_store.get_task(task_id)
            if task is not None:
                tasks.append(task)

        results = self.scorer.score_batch(tasks, now)
        for task in tasks:
            self.task_store.save_task(task)

        logger.info("Scored %d task(s)", len(results))
        return results

    def _require_task(self, task_id: str) -> Task:
        task = self.task_store.get_task(task_id)
        if task is None:
            raise TaskNotFoundError(f"Task {task_id} not found")
        return task
