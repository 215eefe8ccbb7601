"""
Statistics and deadline projections for Taskflow.

Everything here is derived on demand from the task store and never
mutates it.
"""

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Optional, Union

from taskflow.clock import Clock, SystemClock
from taskflow.models.task import COMPLETED, IN_PROGRESS, PAUSED, PENDING, parse_timestamp
from taskflow.store import TaskStore

SECONDS_PER_DAY = 86400
SECONDS_PER_HOUR = 3600


@dataclass(frozen=True)
class TaskStats:
    """Task counts for one user. The four status counts sum to total."""

    total: int = 0
    pending: int = 0
    in_progress: int = 0
    paused: int = 0
    completed: int = 0
    overdue: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class TimeRemaining:
    """Time left until a deadline, broken into whole units."""

    overdue: bool
    days: int = 0
    hours: int = 0
    minutes: int = 0

    def describe(self) -> str:
        if self.overdue:
            return "Overdue"
        if self.days > 0:
            return f"{self.days}d {self.hours}h remaining"
        if self.hours > 0:
            return f"{self.hours}h {self.minutes}m remaining"
        return f"{self.minutes}m remaining"

    def __str__(self) -> str:
        return self.describe()


def time_remaining(deadline: datetime, now: datetime) -> TimeRemaining:
    """Split the time between now and deadline into days, hours, minutes."""
    diff = (deadline - now).total_seconds()
    if diff <= 0:
        return TimeRemaining(overdue=True)

    seconds = int(diff)
    return TimeRemaining(
        overdue=False,
        days=seconds // SECONDS_PER_DAY,
        hours=(seconds % SECONDS_PER_DAY) // SECONDS_PER_HOUR,
        minutes=(seconds % SECONDS_PER_HOUR) // 60,
    )


class StatsService:
    """Read-only aggregates over a TaskStore."""

    def __init__(self, store: TaskStore, clock: Optional[Clock] = None):
        self.store = store
        self.clock = clock or SystemClock()

    def get_task_stats(self, user_id: str) -> TaskStats:
        """Count a user's tasks by status, plus how many are overdue."""
        tasks = self.store.get_by_assignee(user_id)
        now = self.clock.now()

        counts = {PENDING: 0, IN_PROGRESS: 0, PAUSED: 0, COMPLETED: 0}
        overdue = 0
        for task in tasks:
            counts[task.status] += 1
            if task.is_overdue(now):
                overdue += 1

        return TaskStats(
            total=len(tasks),
            pending=counts[PENDING],
            in_progress=counts[IN_PROGRESS],
            paused=counts[PAUSED],
            completed=counts[COMPLETED],
            overdue=overdue,
        )

    def time_remaining(self, deadline: Union[datetime, str, None]) -> Optional[TimeRemaining]:
        """Structured time left until deadline, or None if there is no deadline."""
        deadline = parse_timestamp(deadline)
        if deadline is None:
            return None
        return time_remaining(deadline, self.clock.now())

    def get_time_remaining(self, deadline: Union[datetime, str, None]) -> str:
        """
        Human-readable time left until deadline.

        Examples: "Overdue", "2d 4h remaining", "1h 30m remaining",
        "12m remaining", "No deadline".
        """
        remaining = self.time_remaining(deadline)
        if remaining is None:
            return "No deadline"
        return remaining.describe()
