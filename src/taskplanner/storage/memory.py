"""In-memory store implementations.

Useful for tests, demos, and callers that keep their own persistence and
only need the planner for a single pass.
"""

from datetime import datetime
from typing import Optional

from taskplanner.domain.models import CalendarBlock, Task, TaskQuery
from taskplanner.storage.base import BlockStore, TaskStore


class InMemoryTaskStore(TaskStore):
    """Dict-backed task store. Tasks are stored by reference."""

    def __init__(self, tasks: Optional[list[Task]] = None):
        self._tasks: dict[str, Task] = {}
        for task in tasks or []:
            self.save_task(task)

    def get_task(self, task_id: str) -> Optional[Task]:
        return self._tasks.get(task_id)

    def list_tasks(self, query: Optional[TaskQuery] = None) -> list[Task]:
        tasks = list(self._tasks.values())
        if query is None:
            return tasks

        tasks = [t for t in tasks if query.matches(t)]
        # Highest priority first, like a sorted table query
        tasks.sort(key=lambda t: t.priority_score, reverse=True)
        if query.limit is not None:
            tasks = tasks[: query.limit]
        return tasks

    def save_task(self, task: Task) -> Task:
        self._tasks[task.id] = task
        return task

    def delete_task(self, task_id: str) -> bool:
        return self._tasks.pop(task_id, None) is not None

    def __len__(self) -> int:
        return len(self._tasks)


class InMemoryBlockStore(BlockStore):
    """Dict-backed calendar block store. Blocks are stored by reference."""

    def __init__(self, blocks: Optional[list[CalendarBlock]] = None):
        self._blocks: dict[str, CalendarBlock] = {}
        for block in blocks or []:
            self.save_block(block)

    def get_blocks_in_range(self, start: datetime, end: datetime) -> list[CalendarBlock]:
        matching = [
            b for b in self._blocks.values()
            if b.start_time < end and b.end_time > start
        ]
        return sorted(matching, key=lambda b: b.start_time)

    def get_block(self, block_id: str) -> Optional[CalendarBlock]:
        return self._blocks.get(block_id)

    def save_block(self, block: CalendarBlock) -> CalendarBlock:
        self._blocks[block.id] = block
        return block

    def all_blocks(self) -> list[CalendarBlock]:
        """Every stored block, in start-time order."""
        return sorted(self._blocks.values(), key=lambda b: b.start_time)

    def __len__(self) -> int:
        return len(self._blocks)
