"""
Core data models for Taskflow.
"""

from taskflow.models.task import Task
from taskflow.models.user import User

__all__ = [
    "Task",
    "User",
]
