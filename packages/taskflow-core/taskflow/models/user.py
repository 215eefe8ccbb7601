"""
User model for Taskflow.

Users belong to the authentication collaborator; the core reads them to
build the employee roster and to check roles.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from uuid import uuid4

from taskflow.models.task import parse_timestamp

ADMIN = "admin"
EMPLOYEE = "employee"

# Valid role values
USER_ROLES = (ADMIN, EMPLOYEE)


@dataclass
class User:
    """
    A user known to the roster.

    Attributes:
        id: Unique identifier
        name: Display name
        email: Login email, unique across the roster
        password: Opaque credential owned by the auth collaborator
        role: admin or employee
        department: Department name
        position: Job title
        created_at: When the user was added
        created_by: ID of the admin who added the user
    """

    name: str
    email: str
    id: str = field(default_factory=lambda: str(uuid4()))
    password: Optional[str] = None
    role: str = EMPLOYEE
    department: str = ""
    position: str = ""
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None

    def __post_init__(self):
        self.created_at = parse_timestamp(self.created_at)

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN

    def matches(self, query: str) -> bool:
        """Case-insensitive match against name, email and department."""
        needle = (query or "").strip().lower()
        if not needle:
            return True
        return any(
            needle in (value or "").lower()
            for value in (self.name, self.email, self.department)
        )

    def to_dict(self, include_password: bool = True) -> dict:
        """Convert to dictionary for storage/serialization."""
        result = {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "department": self.department,
            "position": self.position,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "created_by": self.created_by,
        }
        if include_password:
            result["password"] = self.password
        return result

    @classmethod
    def from_dict(cls, data: dict) -> "User":
        """Create User from a stored record."""
        role = data.get("role") or EMPLOYEE
        if role not in USER_ROLES:
            raise ValueError(f"Invalid role '{role}'")

        return cls(
            id=str(data["id"]),
            name=data.get("name") or "",
            email=data.get("email") or "",
            password=data.get("password"),
            role=role,
            department=data.get("department") or "",
            position=data.get("position") or "",
            created_at=data.get("created_at"),
            created_by=data.get("created_by"),
        )
