"""
Pytest configuration and fixtures for taskflow tests.
"""

import pytest
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Add packages to path for testing
packages_dir = Path(__file__).parent.parent / "packages"
sys.path.insert(0, str(packages_dir / "taskflow-core"))

# Tick interval short enough for tests to see several ticks
FAST_TICK = 0.01


@pytest.fixture
def temp_config_dir(tmp_path):
    """Create a temporary config directory."""
    config_dir = tmp_path / ".taskflow"
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def clock():
    """A manual clock starting at 2024-01-01 09:00 UTC."""
    from taskflow.clock import ManualClock

    return ManualClock(datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def memory_backend():
    from taskflow.db.memory import MemoryBackend

    return MemoryBackend()


@pytest.fixture
async def task_service(memory_backend, clock):
    """A TaskService over an in-memory backend with a fast tick."""
    from taskflow.services.tasks import TaskService
    from taskflow.store import TaskStore

    service = TaskService(TaskStore(memory_backend), clock=clock, tick_seconds=FAST_TICK)
    await service.load()
    yield service
    await service.timers.stop_all()


@pytest.fixture
def sample_task_data(clock):
    """Sample task data for testing."""
    return {
        "title": "Write report",
        "description": "Quarterly numbers",
        "deadline": clock.now() + timedelta(hours=1),
        "assigned_to": "u1",
        "priority": "medium",
    }


@pytest.fixture
def admin():
    from taskflow.models.user import User

    return User(id="admin-1", name="Ada Admin", email="ada@example.com", role="admin")


class FailingBackend:
    """Backend whose writes always fail."""

    name = "failing"

    def __init__(self, records=None):
        self.records = records or []
        self.save_attempts = 0

    async def connect(self):
        pass

    async def close(self):
        pass

    async def load_records(self, collection):
        return list(self.records)

    async def save_records(self, collection, records):
        from taskflow.errors import PersistenceError

        self.save_attempts += 1
        raise PersistenceError("disk full")
