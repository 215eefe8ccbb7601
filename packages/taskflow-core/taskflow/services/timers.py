"""
Timer Engine for Taskflow.

Tracks which tasks have a running timer and credits elapsed wall-clock
seconds to them on a fixed tick.

Each run keeps the number of seconds its ticks have already credited.
Stopping cancels the tick task and then credits only the remainder, so
ticks plus the final flush always add up to the run's duration.
"""

import asyncio
import contextlib
import logging
import math
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from taskflow.clock import Clock, SystemClock

logger = logging.getLogger(__name__)

AccrueCallback = Callable[[str, int], Awaitable[None]]


@dataclass
class TimerHandle:
    """
    A timer run in flight for one task.

    Attributes:
        task_id: Task being timed
        started_at: Wall-clock start of this run
        accrued_seconds: Seconds of this run already credited by ticks
        runner: Asyncio task driving the periodic ticks
    """

    task_id: str
    started_at: datetime
    accrued_seconds: int = 0
    runner: Optional[asyncio.Task] = None

    def elapsed_seconds(self, now: datetime) -> int:
        """Whole seconds since the run started (never negative)."""
        return max(0, math.floor((now - self.started_at).total_seconds()))


class TimerEngine:
    """
    Owns the task-id -> TimerHandle map and the periodic accrual tasks.

    The engine never changes task status; the caller decides what a start
    or stop means for the task.
    """

    def __init__(
        self,
        clock: Optional[Clock] = None,
        on_accrue: Optional[AccrueCallback] = None,
        tick_seconds: float = 30.0,
    ):
        """
        Initialize timer engine.

        Args:
            clock: Time source. Defaults to the system clock.
            on_accrue: Awaited with (task_id, seconds) on every tick that
                       has new seconds to credit
            tick_seconds: Interval between ticks
        """
        if tick_seconds <= 0:
            raise ValueError("tick_seconds must be positive")
        self.clock = clock or SystemClock()
        self.on_accrue = on_accrue
        self.tick_seconds = tick_seconds
        self._handles: dict[str, TimerHandle] = {}

    def is_running(self, task_id: str) -> bool:
        return task_id in self._handles

    def running_task_ids(self) -> list[str]:
        return list(self._handles)

    def handle(self, task_id: str) -> Optional[TimerHandle]:
        return self._handles.get(task_id)

    def pending_seconds(self, task_id: str) -> int:
        """Seconds of the current run not yet credited (0 if not running)."""
        handle = self._handles.get(task_id)
        if handle is None:
            return 0
        return max(0, handle.elapsed_seconds(self.clock.now()) - handle.accrued_seconds)

    def start(self, task_id: str) -> Optional[TimerHandle]:
        """
        Start a timer run for a task.

        Must be called from a running event loop.

        Returns:
            The new TimerHandle, or None if a timer already runs for task_id
        """
        if task_id in self._handles:
            return None

        handle = TimerHandle(task_id=task_id, started_at=self.clock.now())
        handle.runner = asyncio.get_running_loop().create_task(
            self._run(handle), name=f"taskflow-timer-{task_id}"
        )
        self._handles[task_id] = handle
        logger.debug(f"Timer started for task {task_id}")
        return handle

    async def stop(self, task_id: str) -> Optional[int]:
        """
        Stop the timer run for a task.

        The tick task is cancelled before the remainder is computed, and
        nothing is awaited in between, so no tick can credit the same
        seconds again.

        Returns:
            Seconds of the run not yet credited by ticks, or None if no
            timer was running
        """
        handle = self._handles.pop(task_id, None)
        if handle is None:
            return None

        runner = handle.runner
        if runner is not None:
            runner.cancel()

        remainder = max(0, handle.elapsed_seconds(self.clock.now()) - handle.accrued_seconds)
        handle.accrued_seconds += remainder

        if runner is not None and runner is not asyncio.current_task():
            with contextlib.suppress(asyncio.CancelledError):
                await runner

        logger.debug(f"Timer stopped for task {task_id} (+{remainder}s)")
        return remainder

    async def stop_all(self) -> dict[str, int]:
        """Stop every running timer. Returns task_id -> uncredited seconds."""
        results = {}
        for task_id in self.running_task_ids():
            seconds = await self.stop(task_id)
            if seconds is not None:
                results[task_id] = seconds
        return results

    def _collect(self, handle: TimerHandle) -> int:
        """Advance a handle's credited total to now and return the delta."""
        elapsed = handle.elapsed_seconds(self.clock.now())
        delta = elapsed - handle.accrued_seconds
        if delta <= 0:
            return 0
        handle.accrued_seconds = elapsed
        return delta

    async def _run(self, handle: TimerHandle) -> None:
        """Tick loop for one run. Ends only by cancellation."""
        while True:
            await asyncio.sleep(self.tick_seconds)
            if self.on_accrue is None:
                continue

            delta = self._collect(handle)
            if not delta:
                continue

            try:
                await self.on_accrue(handle.task_id, delta)
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception(f"Timer accrual failed for task {handle.task_id}")
