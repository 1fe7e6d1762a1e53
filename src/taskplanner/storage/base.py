"""Storage interfaces consumed by the planner.

The planner never owns persistence. It reads tasks and existing blocks
through these interfaces and hands produced blocks back to them.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from taskplanner.domain.models import CalendarBlock, Task, TaskQuery


class TaskNotFoundError(LookupError):
    """Raised when a task ID does not exist in the store."""


class BlockNotFoundError(LookupError):
    """Raised when a block ID does not exist in the store."""


class TaskStore(ABC):
    """Abstract base class for task persistence."""

    @abstractmethod
    def get_task(self, task_id: str) -> Optional[Task]:
        """Get a task by ID, or None if it does not exist."""
        pass

    @abstractmethod
    def list_tasks(self, query: Optional[TaskQuery] = None) -> list[Task]:
        """List tasks matching a query (all tasks when query is None)."""
        pass

    @abstractmethod
    def save_task(self, task: Task) -> Task:
        """Insert or replace a task."""
        pass

    @abstractmethod
    def delete_task(self, task_id: str) -> bool:
        """Delete a task. Returns False if it did not exist."""
        pass


class BlockStore(ABC):
    """Abstract base class for calendar block persistence."""

    @abstractmethod
    def get_blocks_in_range(self, start: datetime, end: datetime) -> list[CalendarBlock]:
        """Blocks overlapping [start, end), in start-time order."""
        pass

    @abstractmethod
    def get_block(self, block_id: str) -> Optional[CalendarBlock]:
        """Get a block by ID, or None if it does not exist."""
        pass

    @abstractmethod
    def save_block(self, block: CalendarBlock) -> CalendarBlock:
        """Insert or replace a block."""
        pass
