"""
In-memory task store with a persistence bridge.

The store is the single owner of Task objects during a session. It is
loaded once at startup and written back in full after every mutation;
the in-memory state stays authoritative if a write fails.
"""

import logging
from collections.abc import Iterator
from typing import Optional

from taskflow.db.interface import TASKS_COLLECTION, StorageBackend
from taskflow.errors import PersistenceError
from taskflow.models.task import Task

logger = logging.getLogger(__name__)


class TaskStore:
    """Ordered collection of tasks keyed by id."""

    def __init__(self, backend: StorageBackend, collection: str = TASKS_COLLECTION):
        self.backend = backend
        self.collection = collection
        self._tasks: dict[str, Task] = {}

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._tasks

    def __iter__(self) -> Iterator[Task]:
        return iter(list(self._tasks.values()))

    async def load(self) -> list[Task]:
        """
        Replace the in-memory collection with the stored one.

        Unreadable storage yields an empty collection; records that cannot
        be parsed are skipped.
        """
        try:
            records = await self.backend.load_records(self.collection)
        except PersistenceError as e:
            logger.warning(f"Starting with no tasks, could not load '{self.collection}': {e}")
            records = []
        except Exception:
            logger.exception(f"Unexpected error loading '{self.collection}', starting with no tasks")
            records = []

        tasks: dict[str, Task] = {}
        for record in records:
            try:
                task = Task.from_dict(record)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping task record {record.get('id', 'unknown')}: {e}")
                continue
            tasks[task.id] = task

        self._tasks = tasks
        logger.info(f"Loaded {len(tasks)} tasks from {self.backend.name} storage")
        return self.all()

    async def save(self) -> bool:
        """
        Persist the full collection.

        Returns:
            True if the backend accepted the write
        """
        records = [task.to_dict() for task in self._tasks.values()]
        try:
            await self.backend.save_records(self.collection, records)
        except PersistenceError as e:
            logger.error(f"Failed to save {len(records)} tasks: {e}")
            return False
        except Exception:
            logger.exception(f"Unexpected error saving {len(records)} tasks")
            return False
        return True

    def get(self, task_id: str) -> Optional[Task]:
        return self._tasks.get(task_id)

    def all(self) -> list[Task]:
        return list(self._tasks.values())

    def get_by_assignee(self, user_id: str) -> list[Task]:
        """Tasks assigned to a user, in store order."""
        return [task for task in self._tasks.values() if task.assigned_to == user_id]

    def insert(self, task: Task) -> None:
        if task.id in self._tasks:
            raise ValueError(f"Task {task.id} already exists")
        self._tasks[task.id] = task

    def replace(self, task_id: str, task: Task) -> bool:
        """Swap in a new Task object, keeping its position. False if absent."""
        if task_id not in self._tasks:
            return False
        if task.id != task_id:
            raise ValueError("Task id cannot change")
        self._tasks[task_id] = task
        return True

    def remove(self, task_id: str) -> Optional[Task]:
        return self._tasks.pop(task_id, None)
