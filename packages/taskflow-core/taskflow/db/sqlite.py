"""
SQLite storage backend using aiosqlite.

All collections share one table; each row holds a record serialized as
JSON along with its position in the collection.
"""

import json
import logging
from pathlib import Path
from typing import Optional

import aiosqlite

from taskflow.db.interface import StorageBackend
from taskflow.errors import PersistenceError

logger = logging.getLogger(__name__)

SCHEMA = """
    CREATE TABLE IF NOT EXISTS records (
        collection TEXT NOT NULL,
        id TEXT NOT NULL,
        position INTEGER NOT NULL,
        data TEXT NOT NULL,
        PRIMARY KEY (collection, id)
    )
"""


class SQLiteBackend(StorageBackend):
    """
    SQLite backend.

    Uses aiosqlite for async database operations.
    Automatically creates the database file and parent directories.
    """

    def __init__(self, db_path: str = "~/.taskflow/taskflow.db"):
        """
        Initialize SQLite backend.

        Args:
            db_path: Path to SQLite database file.
                    Supports ~ expansion for home directory.
        """
        self.db_path = Path(db_path).expanduser()
        self._conn: Optional[aiosqlite.Connection] = None

    @property
    def name(self) -> str:
        return "sqlite"

    async def connect(self) -> None:
        """Initialize database connection and create file if needed."""
        if self._conn is not None:
            return

        conn = None
        try:
            # Ensure parent directory exists
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

            # Connect (creates file if doesn't exist)
            conn = await aiosqlite.connect(str(self.db_path))

            # Use WAL mode for better concurrent access
            await conn.execute("PRAGMA journal_mode = WAL")

            # Row factory to return dicts
            conn.row_factory = aiosqlite.Row

            await conn.execute(SCHEMA)
            await conn.commit()
        except (aiosqlite.Error, OSError) as e:
            # A half-open connection keeps its worker thread alive
            if conn is not None:
                await conn.close()
            raise PersistenceError(f"Could not open SQLite database {self.db_path}: {e}") from e

        self._conn = conn

        logger.info(f"SQLite database connected: {self.db_path}")

    async def close(self) -> None:
        """Close database connection."""
        if self._conn is not None:
            await self._conn.close()
            self._conn = None
            logger.info("SQLite connection closed")

    async def _get_conn(self) -> aiosqlite.Connection:
        """Get or create connection."""
        if self._conn is None:
            await self.connect()
        return self._conn

    async def load_records(self, collection: str) -> list[dict]:
        """Load a collection ordered by position."""
        conn = await self._get_conn()
        try:
            cursor = await conn.execute(
                "SELECT id, data FROM records WHERE collection = ? ORDER BY position",
                (collection,),
            )
            rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise PersistenceError(f"Could not read '{collection}' from {self.db_path}: {e}") from e

        records = []
        for row in rows:
            try:
                record = json.loads(row["data"])
            except json.JSONDecodeError as e:
                raise PersistenceError(f"Malformed record {row['id']} in '{collection}': {e}") from e
            if not isinstance(record, dict):
                raise PersistenceError(f"Record {row['id']} in '{collection}' is not an object")
            records.append(record)
        return records

    async def save_records(self, collection: str, records: list[dict]) -> None:
        """Replace a collection in a single transaction."""
        conn = await self._get_conn()
        rows = [
            (collection, str(record["id"]), position, json.dumps(record))
            for position, record in enumerate(records)
        ]
        try:
            await conn.execute("DELETE FROM records WHERE collection = ?", (collection,))
            await conn.executemany(
                "INSERT INTO records (collection, id, position, data) VALUES (?, ?, ?, ?)",
                rows,
            )
            await conn.commit()
        except aiosqlite.Error as e:
            await conn.rollback()
            raise PersistenceError(f"Could not write '{collection}' to {self.db_path}: {e}") from e

        logger.debug(f"Saved {len(rows)} {collection} records to SQLite")
