"""
Tests for StatsService.
"""

import pytest
from datetime import timedelta


@pytest.fixture
def stats(task_service, clock):
    from taskflow.services.stats import StatsService

    return StatsService(task_service.store, clock=clock)


class TestTaskStats:
    """Tests for get_task_stats()."""

    @pytest.mark.asyncio
    async def test_empty(self, stats):
        """Test a user without tasks has all-zero stats."""
        result = stats.get_task_stats("nobody")

        assert result.total == 0
        assert result.to_dict() == {
            "total": 0, "pending": 0, "in_progress": 0,
            "paused": 0, "completed": 0, "overdue": 0,
        }

    @pytest.mark.asyncio
    async def test_counts_partition_total(self, task_service, stats, clock):
        """Test every task is counted under exactly one status."""
        soon = clock.now() + timedelta(days=1)
        pending = await task_service.add_task(title="p", deadline=soon, assigned_to="u1")
        running = await task_service.add_task(title="r", deadline=soon, assigned_to="u1")
        paused = await task_service.add_task(title="s", deadline=soon, assigned_to="u1")
        done = await task_service.add_task(title="d", deadline=soon, assigned_to="u1")
        await task_service.add_task(title="other user", deadline=soon, assigned_to="u2")

        await task_service.start_timer(running.id)
        await task_service.start_timer(paused.id)
        await task_service.stop_timer(paused.id)
        await task_service.complete_task(done.id)

        result = stats.get_task_stats("u1")

        assert result.total == 4
        assert (result.pending, result.in_progress, result.paused, result.completed) == (1, 1, 1, 1)
        assert result.pending + result.in_progress + result.paused + result.completed == result.total
        assert pending.status == "pending"

    @pytest.mark.asyncio
    async def test_overdue(self, task_service, stats, clock):
        """Test overdue counts only unfinished tasks past their deadline."""
        past = clock.now() - timedelta(minutes=1)
        future = clock.now() + timedelta(hours=2)

        await task_service.add_task(title="late", deadline=past, assigned_to="u1")
        finished_late = await task_service.add_task(title="late but done", deadline=past, assigned_to="u1")
        await task_service.add_task(title="on time", deadline=future, assigned_to="u1")
        await task_service.add_task(title="no deadline", deadline="", assigned_to="u1")
        await task_service.complete_task(finished_late.id)

        assert stats.get_task_stats("u1").overdue == 1

    @pytest.mark.asyncio
    async def test_overdue_follows_clock(self, task_service, stats, clock):
        """Test a task becomes overdue once the clock passes its deadline."""
        await task_service.add_task(title="t", deadline=clock.now() + timedelta(hours=1), assigned_to="u1")
        assert stats.get_task_stats("u1").overdue == 0

        clock.advance(3601)

        assert stats.get_task_stats("u1").overdue == 1


class TestTimeRemaining:
    """Tests for time_remaining() / get_time_remaining()."""

    @pytest.mark.asyncio
    async def test_hours_and_minutes(self, stats, clock):
        assert stats.get_time_remaining(clock.now() + timedelta(minutes=90)) == "1h 30m remaining"

    @pytest.mark.asyncio
    async def test_days_and_hours(self, stats, clock):
        deadline = clock.now() + timedelta(days=2, hours=4, minutes=59)

        assert stats.get_time_remaining(deadline) == "2d 4h remaining"

    @pytest.mark.asyncio
    async def test_minutes_only(self, stats, clock):
        assert stats.get_time_remaining(clock.now() + timedelta(minutes=12, seconds=30)) == "12m remaining"

    @pytest.mark.asyncio
    async def test_overdue(self, stats, clock):
        """Test a deadline at or before now is overdue."""
        assert stats.get_time_remaining(clock.now()) == "Overdue"
        assert stats.get_time_remaining(clock.now() - timedelta(days=3)) == "Overdue"

    @pytest.mark.asyncio
    async def test_no_deadline(self, stats):
        assert stats.get_time_remaining(None) == "No deadline"
        assert stats.time_remaining("") is None

    @pytest.mark.asyncio
    async def test_iso_string_deadline(self, stats):
        """Test ISO strings are accepted, including a trailing Z."""
        remaining = stats.time_remaining("2024-01-01T10:15:00Z")

        assert remaining.overdue is False
        assert (remaining.days, remaining.hours, remaining.minutes) == (0, 1, 15)
        assert str(remaining) == "1h 15m remaining"

    def test_module_function(self):
        """Test the pure helper splits the difference into units."""
        from datetime import datetime, timezone
        from taskflow.services.stats import time_remaining

        now = datetime(2024, 1, 1, tzinfo=timezone.utc)
        remaining = time_remaining(now + timedelta(days=1, minutes=5), now)

        assert (remaining.days, remaining.hours, remaining.minutes) == (1, 0, 5)
        assert remaining.describe() == "1d 0h remaining"
