"""Task and calendar block storage interfaces."""

from taskplanner.storage.base import (
    BlockNotFoundError,
    BlockStore,
    TaskNotFoundError,
    TaskStore,
)
from taskplanner.storage.memory import InMemoryBlockStore, InMemoryTaskStore

__all__ = [
    "BlockNotFoundError",
    "BlockStore",
    "InMemoryBlockStore",
    "InMemoryTaskStore",
    "TaskNotFoundError",
    "TaskStore",
]
