"""
Task model for Taskflow.

Tasks are units of assigned work with a deadline, a priority and the
seconds of work accrued by their timer.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Union
from uuid import uuid4

from taskflow.clock import ensure_utc

# Status values
PENDING = "pending"
IN_PROGRESS = "in-progress"
PAUSED = "paused"
COMPLETED = "completed"

TASK_STATUSES = (PENDING, IN_PROGRESS, PAUSED, COMPLETED)

# Valid priority values
TASK_PRIORITIES = ("low", "medium", "high")

_TIMESTAMP_FIELDS = ("deadline", "created_at", "started_at", "completed_at")


def parse_timestamp(value: Union[str, datetime, None]) -> Optional[datetime]:
    """
    Coerce a stored or user-supplied timestamp to an aware UTC datetime.

    Empty strings and None map to None.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, str):
        return ensure_utc(datetime.fromisoformat(value.strip().replace("Z", "+00:00")))
    raise TypeError(f"Cannot parse timestamp from {type(value).__name__}")


@dataclass
class Task:
    """
    A task assigned to a user.

    Attributes:
        id: Unique identifier (UUID), never changes
        title: Task title
        description: Longer description
        deadline: When the task is due (None if not supplied)
        priority: low, medium or high
        assigned_to: ID of the user doing the work
        assigned_by: ID of the user who created the assignment
        assigned_by_name: Display name of the assigner
        status: pending, in-progress, paused or completed
        time_spent: Accrued working time in whole seconds
        created_at: When the task was created
        started_at: When the timer first ran for this task
        completed_at: When the task was completed
    """

    title: str
    id: str = field(default_factory=lambda: str(uuid4()))
    description: str = ""
    deadline: Optional[datetime] = None
    priority: str = "medium"
    assigned_to: Optional[str] = None
    assigned_by: Optional[str] = None
    assigned_by_name: Optional[str] = None
    status: str = PENDING
    time_spent: int = 0
    created_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    def __post_init__(self):
        for field_name in _TIMESTAMP_FIELDS:
            setattr(self, field_name, parse_timestamp(getattr(self, field_name)))
        self.time_spent = max(0, int(self.time_spent or 0))

    @property
    def is_completed(self) -> bool:
        """Check if task is completed (terminal)."""
        return self.status == COMPLETED

    @property
    def is_running_state(self) -> bool:
        """Check if task is marked as being worked on."""
        return self.status == IN_PROGRESS

    def is_overdue(self, now: datetime) -> bool:
        """A task is overdue when its deadline has passed and it is not completed."""
        if self.is_completed or self.deadline is None:
            return False
        return self.deadline < ensure_utc(now)

    def to_dict(self) -> dict:
        """Convert to dictionary for storage/serialization."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "deadline": self.deadline.isoformat() if self.deadline else None,
            "priority": self.priority,
            "assigned_to": self.assigned_to,
            "assigned_by": self.assigned_by,
            "assigned_by_name": self.assigned_by_name,
            "status": self.status,
            "time_spent": self.time_spent,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Task":
        """
        Create Task from a stored record.

        Raises:
            KeyError: If id is missing
            ValueError: If status, priority or a timestamp is invalid
        """
        status = data.get("status") or PENDING
        if status not in TASK_STATUSES:
            raise ValueError(f"Invalid status '{status}'")
        priority = data.get("priority") or "medium"
        if priority not in TASK_PRIORITIES:
            raise ValueError(f"Invalid priority '{priority}'")

        return cls(
            id=data["id"],
            title=data.get("title") or "",
            description=data.get("description") or "",
            deadline=data.get("deadline"),
            priority=priority,
            assigned_to=data.get("assigned_to"),
            assigned_by=data.get("assigned_by"),
            assigned_by_name=data.get("assigned_by_name"),
            status=status,
            time_spent=data.get("time_spent", 0),
            created_at=data.get("created_at"),
            started_at=data.get("started_at"),
            completed_at=data.get("completed_at"),
        )
