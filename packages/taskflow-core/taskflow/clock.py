"""
Clock abstraction for Taskflow.

Every timestamp the core produces comes from an injected clock so elapsed
time can be controlled in tests.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Protocol


def ensure_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime (naive values are taken as UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class Clock(Protocol):
    """Source of the current time."""

    def now(self) -> datetime:
        ...


class SystemClock:
    """Clock backed by the system wall clock."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class ManualClock:
    """
    Clock that only moves when told to.

    Attributes:
        current: The time returned by now()
    """

    def __init__(self, start: Optional[datetime] = None):
        self.current = ensure_utc(start) if start else datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> datetime:
        """Move the clock forward and return the new time."""
        self.current = self.current + timedelta(seconds=seconds)
        return self.current

    def set(self, when: datetime) -> None:
        self.current = ensure_utc(when)
