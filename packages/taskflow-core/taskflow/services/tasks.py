"""
Task Service for Taskflow.

Task CRUD plus the timer-driven lifecycle:

    pending     --start_timer-->   in-progress
    in-progress --stop_timer-->    paused
    paused      --start_timer-->   in-progress
    any other   --complete_task--> completed (terminal)
"""

import dataclasses
import logging
from datetime import datetime
from typing import Optional, Union

from taskflow.clock import Clock, SystemClock
from taskflow.config import DEFAULT_TICK_SECONDS
from taskflow.models.task import (
    COMPLETED,
    IN_PROGRESS,
    PAUSED,
    TASK_PRIORITIES,
    TASK_STATUSES,
    Task,
)
from taskflow.services.timers import TimerEngine
from taskflow.store import TaskStore

logger = logging.getLogger(__name__)

# Fields update_task may change; the rest are owned by the lifecycle
UPDATABLE_FIELDS = ("title", "description", "deadline", "priority", "assigned_to", "time_spent")


class TaskService:
    """
    Service for managing tasks and their timers.

    Every mutation is applied to the store first and then persisted.
    Missing tasks and disallowed transitions are reported through the
    return value and a log line, never raised.
    """

    def __init__(
        self,
        store: TaskStore,
        clock: Optional[Clock] = None,
        tick_seconds: float = DEFAULT_TICK_SECONDS,
    ):
        """
        Initialize task service.

        Args:
            store: TaskStore holding the tasks
            clock: Time source. Defaults to the system clock.
            tick_seconds: How often running timers credit time
        """
        self.store = store
        self.clock = clock or SystemClock()
        self.timers = TimerEngine(clock=self.clock, on_accrue=self._accrue, tick_seconds=tick_seconds)

    async def load(self) -> list[Task]:
        """
        Load tasks from storage.

        Tasks a previous process left in-progress cannot have a timer
        running any more, so they are marked paused.
        """
        tasks = await self.store.load()

        interrupted = [
            task for task in tasks
            if task.is_running_state and not self.timers.is_running(task.id)
        ]
        for task in interrupted:
            task.status = PAUSED
        if interrupted:
            logger.info(f"Paused {len(interrupted)} task(s) interrupted by a previous shutdown")
            await self.store.save()

        return self.store.all()

    async def add_task(
        self,
        title: str,
        deadline: Union[datetime, str, None],
        assigned_to: Optional[str],
        description: str = "",
        priority: str = "medium",
        assigned_by: Optional[str] = None,
        assigned_by_name: Optional[str] = None,
    ) -> Task:
        """
        Create a new pending task.

        Args:
            title: Task title
            deadline: Due date (datetime or ISO string; empty means none)
            assigned_to: ID of the user doing the work
            description: Task description
            priority: Priority (low, medium, high)
            assigned_by: ID of the assigning user
            assigned_by_name: Display name of the assigning user

        Returns:
            Created Task object
        """
        if priority not in TASK_PRIORITIES:
            raise ValueError(f"Invalid priority. Must be one of: {', '.join(TASK_PRIORITIES)}")

        task = Task(
            title=title or "",
            description=description or "",
            deadline=deadline,
            priority=priority,
            assigned_to=assigned_to,
            assigned_by=assigned_by,
            assigned_by_name=assigned_by_name,
            created_at=self.clock.now(),
        )

        self.store.insert(task)
        await self.store.save()

        logger.info(f"Created task: {task.id} - {task.title}")
        return task

    async def update_task(self, task_id: str, **fields) -> Optional[Task]:
        """
        Shallow-merge fields into a task.

        Fields not passed keep their values. Passing time_spent overrides
        the accrued total.

        Only UPDATABLE_FIELDS may be passed. status, id, assignment
        provenance and the lifecycle timestamps belong to start_timer,
        stop_timer and complete_task, so passing them raises ValueError.

        Returns:
            Updated Task or None if not found

        Raises:
            ValueError: For a field outside UPDATABLE_FIELDS, an invalid
                        priority, or a negative time_spent
        """
        disallowed = sorted(set(fields) - set(UPDATABLE_FIELDS))
        if disallowed:
            raise ValueError(f"Cannot update field(s): {', '.join(disallowed)}")
        if "priority" in fields and fields["priority"] not in TASK_PRIORITIES:
            raise ValueError(f"Invalid priority. Must be one of: {', '.join(TASK_PRIORITIES)}")
        if "time_spent" in fields and (fields["time_spent"] is None or int(fields["time_spent"]) < 0):
            raise ValueError("time_spent must be a non-negative number of seconds")

        task = self.store.get(task_id)
        if task is None:
            logger.warning(f"Cannot update task {task_id}: not found")
            return None

        updated = dataclasses.replace(task, **fields)
        self.store.replace(task_id, updated)
        await self.store.save()

        logger.info(f"Updated task: {task_id} ({', '.join(sorted(fields)) or 'no changes'})")
        return updated

    async def delete_task(self, task_id: str) -> bool:
        """Delete a task, releasing its timer first. False if not found."""
        if task_id not in self.store:
            logger.warning(f"Cannot delete task {task_id}: not found")
            return False

        await self.timers.stop(task_id)
        self.store.remove(task_id)
        await self.store.save()

        logger.info(f"Deleted task: {task_id}")
        return True

    async def start_timer(self, task_id: str) -> bool:
        """
        Start (or resume) work on a task.

        Returns:
            True if a timer was started; False if the task is missing,
            completed, or already timing
        """
        task = self.store.get(task_id)
        if task is None:
            logger.warning(f"Cannot start timer for task {task_id}: not found")
            return False
        if task.is_completed:
            logger.warning(f"Ignoring timer start for completed task {task_id}")
            return False
        if self.timers.is_running(task_id):
            return False

        task.status = IN_PROGRESS
        if task.started_at is None:
            task.started_at = self.clock.now()
        self.timers.start(task_id)
        await self.store.save()

        logger.info(f"Timer started: {task_id}")
        return True

    async def stop_timer(self, task_id: str) -> Optional[int]:
        """
        Pause work on a task, folding the run's time into time_spent.

        Returns:
            Seconds added by this stop, or None if no timer was running
        """
        task = self.store.get(task_id)
        if task is None:
            logger.warning(f"Cannot stop timer for task {task_id}: not found")
            return None
        if task.is_completed:
            logger.warning(f"Ignoring timer stop for completed task {task_id}")
            return None

        seconds = await self._halt(task)
        if seconds is None:
            return None
        await self.store.save()

        logger.info(f"Timer stopped: {task_id} (+{seconds}s, total {task.time_spent}s)")
        return seconds

    async def complete_task(self, task_id: str) -> Optional[Task]:
        """
        Mark a task completed, stopping its timer first.

        Completing an already completed task changes nothing.

        Returns:
            The Task or None if not found
        """
        task = self.store.get(task_id)
        if task is None:
            logger.warning(f"Cannot complete task {task_id}: not found")
            return None
        if task.is_completed:
            return task

        await self._halt(task)
        task.status = COMPLETED
        task.completed_at = self.clock.now()
        await self.store.save()

        logger.info(f"Completed task: {task_id} ({task.time_spent}s spent)")
        return task

    def get_task(self, task_id: str) -> Optional[Task]:
        """Get a task by ID."""
        return self.store.get(task_id)

    def get_by_assignee(self, user_id: str) -> list[Task]:
        """All tasks assigned to a user, in store order."""
        return self.store.get_by_assignee(user_id)

    def list_tasks(
        self,
        assigned_to: Optional[str] = None,
        status: Optional[str] = None,
        query: Optional[str] = None,
    ) -> list[Task]:
        """
        List tasks with optional filters.

        Args:
            assigned_to: Only tasks assigned to this user
            status: Only tasks with this status
            query: Case-insensitive match on title or description

        Returns:
            List of Task objects in store order
        """
        if status and status not in TASK_STATUSES:
            raise ValueError(f"Invalid status. Must be one of: {', '.join(TASK_STATUSES)}")

        tasks = self.store.get_by_assignee(assigned_to) if assigned_to else self.store.all()
        if status:
            tasks = [t for t in tasks if t.status == status]
        if query:
            needle = query.strip().lower()
            tasks = [
                t for t in tasks
                if needle in t.title.lower() or needle in (t.description or "").lower()
            ]
        return tasks

    def recent_tasks(self, user_id: str, limit: int = 5) -> list[Task]:
        """The most recently added tasks of a user, newest first."""
        if limit <= 0:
            return []
        return list(reversed(self.store.get_by_assignee(user_id)[-limit:]))

    def live_time_spent(self, task_id: str) -> Optional[int]:
        """time_spent including seconds of a running timer not yet credited."""
        task = self.store.get(task_id)
        if task is None:
            return None
        return task.time_spent + self.timers.pending_seconds(task_id)

    async def shutdown(self) -> None:
        """Stop every running timer, keeping the time worked so far."""
        running = self.timers.running_task_ids()
        if not running:
            return

        for task_id in running:
            task = self.store.get(task_id)
            if task is None:
                await self.timers.stop(task_id)
                continue
            await self._halt(task)
        await self.store.save()

        logger.info(f"Paused {len(running)} running timer(s) on shutdown")

    async def _halt(self, task: Task) -> Optional[int]:
        """Stop a task's timer and fold the remainder in. None if not running."""
        seconds = await self.timers.stop(task.id)
        if seconds is None:
            return None
        task.time_spent += seconds
        task.status = PAUSED
        return seconds

    async def _accrue(self, task_id: str, seconds: int) -> None:
        """Timer tick callback: credit seconds and persist."""
        task = self.store.get(task_id)
        if task is None:
            return
        task.time_spent += seconds
        await self.store.save()
