"""
In-process storage backend.

Records are kept as JSON text so callers never share mutable state with
the backend, and unserializable records fail the same way they would on
disk.
"""

import json

from taskflow.db.interface import StorageBackend
from taskflow.errors import PersistenceError


class MemoryBackend(StorageBackend):
    """Backend for tests and throwaway sessions."""

    def __init__(self, initial: dict[str, list[dict]] | None = None):
        self._collections: dict[str, str] = {}
        for collection, records in (initial or {}).items():
            self._collections[collection] = json.dumps(records)

    @property
    def name(self) -> str:
        return "memory"

    async def connect(self) -> None:
        pass

    async def close(self) -> None:
        pass

    async def load_records(self, collection: str) -> list[dict]:
        raw = self._collections.get(collection)
        if raw is None:
            return []
        data = json.loads(raw)
        if not isinstance(data, list):
            raise PersistenceError(f"Collection '{collection}' is not a list")
        return [record for record in data if isinstance(record, dict)]

    async def save_records(self, collection: str, records: list[dict]) -> None:
        try:
            self._collections[collection] = json.dumps(records)
        except (TypeError, ValueError) as e:
            raise PersistenceError(f"Could not serialize '{collection}': {e}") from e
