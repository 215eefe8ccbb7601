"""
Application wiring for Taskflow.

Builds one backend, one task store and the services on top of it. The
resulting TaskflowApp is the context object an application creates at
startup and passes to whatever drives it.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from taskflow.clock import Clock, SystemClock
from taskflow.config import TaskflowConfig, load_config
from taskflow.db import StorageBackend, create_backend
from taskflow.errors import PersistenceError
from taskflow.logging_setup import setup_logging
from taskflow.services import EmployeeService, StatsService, TaskService
from taskflow.store import TaskStore

logger = logging.getLogger(__name__)


@dataclass
class TaskflowApp:
    """Everything a running Taskflow session needs."""

    config: TaskflowConfig
    backend: StorageBackend
    store: TaskStore
    tasks: TaskService
    stats: StatsService
    employees: EmployeeService

    async def close(self) -> None:
        """Pause running timers, persist, and release the backend."""
        await self.tasks.shutdown()
        await self.backend.close()
        logger.info("Taskflow closed")


async def create_app(
    config: Optional[TaskflowConfig] = None,
    *,
    backend: Optional[StorageBackend] = None,
    clock: Optional[Clock] = None,
    configure_logging: bool = False,
) -> TaskflowApp:
    """
    Create, connect and load a Taskflow session.

    Args:
        config: Configuration. Loaded from ~/.taskflow/config.yaml if omitted.
        backend: Storage backend to use instead of the configured one
        clock: Time source shared by every service
        configure_logging: Install handlers from config.logging

    Returns:
        Loaded TaskflowApp
    """
    config = config or load_config()
    if configure_logging:
        setup_logging(config.logging.level, config.logging.file)

    clock = clock or SystemClock()
    backend = backend or create_backend(config)
    try:
        await backend.connect()
    except PersistenceError as e:
        # Loads below degrade to empty collections and saves report failure
        logger.warning(f"Starting without {backend.name} storage: {e}")

    store = TaskStore(backend)
    tasks = TaskService(store, clock=clock, tick_seconds=config.timer.tick_seconds)
    stats = StatsService(store, clock=clock)
    employees = EmployeeService(backend, tasks, clock=clock)

    await tasks.load()
    await employees.load()

    logger.info(f"Taskflow initialized ({backend.name} storage, {len(store)} tasks)")
    return TaskflowApp(
        config=config,
        backend=backend,
        store=store,
        tasks=tasks,
        stats=stats,
        employees=employees,
    )
