"""
Employee roster service for Taskflow.

Admins add and remove employees, assign them tasks and get an overview
of everyone's work. Users are stored in the "users" collection owned by
the authentication collaborator; only role == employee users appear on
the roster.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from taskflow.clock import Clock, SystemClock
from taskflow.db.interface import USERS_COLLECTION, StorageBackend
from taskflow.errors import DuplicateUserError, PermissionDeniedError, PersistenceError
from taskflow.models.task import COMPLETED, Task
from taskflow.models.user import EMPLOYEE, User
from taskflow.services.tasks import TaskService

logger = logging.getLogger(__name__)

UNKNOWN_EMPLOYEE = "Unknown"


@dataclass(frozen=True)
class EmployeeSummary:
    """Task counts shown on an employee's card."""

    employee_id: str
    total: int
    active: int
    completed: int


@dataclass(frozen=True)
class TaskAssignment:
    """A task paired with the name of the employee working on it."""

    task: Task
    employee_name: str


def require_admin(actor: User) -> None:
    """Raise PermissionDeniedError unless actor is an admin."""
    if actor is None or not actor.is_admin:
        raise PermissionDeniedError("Only admins can manage employees")


class EmployeeService:
    """
    Service for the admin employee roster.

    Args:
        backend: Storage backend holding the users collection
        tasks: TaskService used to assign and count tasks
        clock: Time source. Defaults to the system clock.
    """

    def __init__(self, backend: StorageBackend, tasks: TaskService, clock: Optional[Clock] = None):
        self.backend = backend
        self.tasks = tasks
        self.clock = clock or SystemClock()
        self._users: list[User] = []

    async def load(self) -> list[User]:
        """Load all users. Unreadable storage yields an empty roster."""
        try:
            records = await self.backend.load_records(USERS_COLLECTION)
        except PersistenceError as e:
            logger.warning(f"Starting with no users, could not load roster: {e}")
            records = []
        except Exception:
            logger.exception("Unexpected error loading roster, starting with no users")
            records = []

        users = []
        for record in records:
            try:
                users.append(User.from_dict(record))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping user record {record.get('id', 'unknown')}: {e}")
        self._users = users

        logger.info(f"Loaded {len(users)} users ({len(self.list_employees())} employees)")
        return list(users)

    async def _save(self) -> bool:
        records = [user.to_dict() for user in self._users]
        try:
            await self.backend.save_records(USERS_COLLECTION, records)
        except PersistenceError as e:
            logger.error(f"Failed to save roster: {e}")
            return False
        except Exception:
            logger.exception(f"Unexpected error saving {len(records)} users")
            return False
        return True

    def get_user(self, user_id: str) -> Optional[User]:
        for user in self._users:
            if user.id == user_id:
                return user
        return None

    def find_by_email(self, email: str) -> Optional[User]:
        """Case-insensitive email lookup across all users."""
        wanted = (email or "").strip().lower()
        for user in self._users:
            if user.email.strip().lower() == wanted:
                return user
        return None

    def list_employees(self, query: Optional[str] = None) -> list[User]:
        """
        Employees on the roster, optionally filtered.

        Args:
            query: Case-insensitive match on name, email or department
        """
        employees = [user for user in self._users if user.role == EMPLOYEE]
        if query:
            employees = [user for user in employees if user.matches(query)]
        return employees

    async def add_employee(
        self,
        actor: User,
        name: str,
        email: str,
        password: str,
        department: str = "",
        position: str = "",
    ) -> User:
        """
        Add an employee to the roster.

        Raises:
            PermissionDeniedError: If actor is not an admin
            DuplicateUserError: If a user with this email exists
        """
        require_admin(actor)
        if self.find_by_email(email) is not None:
            raise DuplicateUserError(f"Employee with email {email} already exists")

        employee = User(
            name=name,
            email=email.strip(),
            password=password,
            role=EMPLOYEE,
            department=department or "",
            position=position or "",
            created_at=self.clock.now(),
            created_by=actor.id,
        )
        self._users.append(employee)
        await self._save()

        logger.info(f"Added employee: {employee.id} - {employee.name}")
        return employee

    async def delete_employee(self, actor: User, employee_id: str) -> bool:
        """
        Remove an employee from the roster.

        Tasks assigned to the employee are kept.

        Returns:
            False if no employee has that ID
        """
        require_admin(actor)
        employee = self.get_user(employee_id)
        if employee is None or employee.role != EMPLOYEE:
            logger.warning(f"Cannot delete employee {employee_id}: not found")
            return False

        self._users.remove(employee)
        await self._save()

        logger.info(f"Deleted employee: {employee_id}")
        return True

    async def assign_task(
        self,
        actor: User,
        employee_id: str,
        title: str,
        deadline: Union[datetime, str, None],
        description: str = "",
        priority: str = "medium",
    ) -> Task:
        """Create a task for an employee, recording the admin as assigner."""
        require_admin(actor)
        return await self.tasks.add_task(
            title=title,
            deadline=deadline,
            assigned_to=employee_id,
            description=description,
            priority=priority,
            assigned_by=actor.id,
            assigned_by_name=actor.name,
        )

    def employee_summary(self, employee_id: str) -> EmployeeSummary:
        """Total, in-progress and completed task counts for an employee."""
        tasks = self.tasks.get_by_assignee(employee_id)
        return EmployeeSummary(
            employee_id=employee_id,
            total=len(tasks),
            active=sum(1 for t in tasks if t.is_running_state),
            completed=sum(1 for t in tasks if t.status == COMPLETED),
        )

    def task_overview(self) -> list[TaskAssignment]:
        """Every task with its assignee's name, "Unknown" for users no longer on file."""
        names = {user.id: user.name for user in self._users}
        return [
            TaskAssignment(task=task, employee_name=names.get(task.assigned_to) or UNKNOWN_EMPLOYEE)
            for task in self.tasks.list_tasks()
        ]
