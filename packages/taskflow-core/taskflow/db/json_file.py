"""
JSON file storage backend.

Each collection lives in <data_dir>/<collection>.json as a JSON list.
Writes go to a temp file in the same directory and are renamed into place.
"""

import json
import logging
import os
import tempfile
from pathlib import Path

from taskflow.db.interface import StorageBackend
from taskflow.errors import PersistenceError

logger = logging.getLogger(__name__)


class JSONFileBackend(StorageBackend):
    """File-per-collection backend for single-user installs."""

    def __init__(self, data_dir: str = "~/.taskflow/data"):
        self.data_dir = Path(data_dir).expanduser()

    @property
    def name(self) -> str:
        return "json"

    def path_for(self, collection: str) -> Path:
        return self.data_dir / f"{collection}.json"

    async def connect(self) -> None:
        """Create the data directory if it doesn't exist."""
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PersistenceError(f"Could not create data directory {self.data_dir}: {e}") from e
        logger.info(f"JSON storage ready: {self.data_dir}")

    async def close(self) -> None:
        pass

    async def load_records(self, collection: str) -> list[dict]:
        path = self.path_for(collection)
        if not path.exists():
            return []

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise PersistenceError(f"Failed to load {path}: {e}") from e

        if not isinstance(data, list):
            raise PersistenceError(f"{path} is not a list")
        return [record for record in data if isinstance(record, dict)]

    async def save_records(self, collection: str, records: list[dict]) -> None:
        path = self.path_for(collection)
        self.data_dir.mkdir(parents=True, exist_ok=True)

        # Atomic write: write to temp file, then rename
        fd, temp_path = tempfile.mkstemp(
            dir=self.data_dir,
            prefix=f".{collection}_",
            suffix=".json.tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(records, f, indent=2)
            os.replace(temp_path, path)
        except (OSError, TypeError, ValueError) as e:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise PersistenceError(f"Failed to save {path}: {e}") from e
