"""
Storage backends for Taskflow collections.
"""

from taskflow.db.factory import create_backend
from taskflow.db.interface import TASKS_COLLECTION, USERS_COLLECTION, StorageBackend

__all__ = [
    "StorageBackend",
    "create_backend",
    "TASKS_COLLECTION",
    "USERS_COLLECTION",
]
