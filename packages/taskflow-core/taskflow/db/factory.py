"""
Storage backend factory.

Creates the appropriate backend based on configuration.
"""

import logging

from taskflow.db.interface import StorageBackend

logger = logging.getLogger(__name__)

STORAGE_TYPES = ("json", "sqlite", "memory")


def create_backend(config=None) -> StorageBackend:
    """
    Create a storage backend based on configuration.

    Each call returns a new, unconnected backend; the application owns it.

    Args:
        config: Optional TaskflowConfig. If not provided, loads from default location.

    Returns:
        StorageBackend instance

    Raises:
        ValueError: If storage configuration is invalid
    """
    # Load config if not provided
    if config is None:
        from taskflow.config import load_config
        config = load_config()

    storage_type = config.storage.type.lower()

    if storage_type == "json":
        from taskflow.db.json_file import JSONFileBackend

        path = config.storage.json_path
        logger.info(f"Using JSON file backend: {path}")
        return JSONFileBackend(path)

    if storage_type == "sqlite":
        from taskflow.db.sqlite import SQLiteBackend

        path = config.storage.sqlite_path
        logger.info(f"Using SQLite backend: {path}")
        return SQLiteBackend(path)

    if storage_type == "memory":
        from taskflow.db.memory import MemoryBackend

        logger.info("Using in-memory backend (nothing is written to disk)")
        return MemoryBackend()

    raise ValueError(
        f"Unknown storage type: {storage_type}. "
        f"Use one of: {', '.join(STORAGE_TYPES)}."
    )
