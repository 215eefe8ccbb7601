"""
Abstract storage backend interface.

Backends hold flat collections of self-describing records (dicts with an
"id" key). The core always reads and writes a whole collection at once.
"""

from abc import ABC, abstractmethod

TASKS_COLLECTION = "tasks"
USERS_COLLECTION = "users"


class StorageBackend(ABC):
    """
    Abstract base class for storage backends.

    Implementations must:
    - Return an empty list for a collection that was never written
    - Preserve record order between save_records and load_records
    - Raise PersistenceError when stored data is unreadable or a write fails
    """

    @abstractmethod
    async def connect(self) -> None:
        """Open files/connections."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release files/connections."""
        pass

    @abstractmethod
    async def load_records(self, collection: str) -> list[dict]:
        """
        Load every record of a collection.

        Args:
            collection: Collection name (e.g. "tasks")

        Returns:
            List of record dicts in saved order

        Raises:
            PersistenceError: If the stored data is malformed
        """
        pass

    @abstractmethod
    async def save_records(self, collection: str, records: list[dict]) -> None:
        """
        Replace a collection with the given records.

        Args:
            collection: Collection name
            records: Record dicts, each with an "id" key

        Raises:
            PersistenceError: If the write fails
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Short backend name for logging ("json", "sqlite", "memory")."""
        pass
