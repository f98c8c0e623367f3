"""
Repeating background tasks owned by a store's lifecycle.

A PeriodicTask runs one coroutine on a fixed interval inside the running
event loop. Ticks never overlap: if the previous pass is still running
when the next one is due, the tick is skipped.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable

import structlog

logger = structlog.stdlib.get_logger()

TaskCallback = Callable[[], Awaitable[Any]]


class PeriodicTask:
    """
    Explicitly started/stopped repeating task.

    Usage:
        task = PeriodicTask("cache.snapshot", 900, persistence.snapshot)
        task.start()
        ...
        await task.run_once()   # deterministic trigger, e.g. from tests
        ...
        await task.stop()
    """

    def __init__(self, name: str, interval_seconds: float, callback: TaskCallback) -> None:
        self.name = name
        self.interval_seconds = interval_seconds
        self._callback = callback
        self._task: asyncio.Task[None] | None = None
        self._busy = False
        self.runs = 0
        self.skipped = 0
        self.last_result: Any = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def busy(self) -> bool:
        return self._busy

    def start(self) -> None:
        """Schedule the loop. Calling start() twice is a no-op."""
        if self.running:
            return
        if self.interval_seconds <= 0:
            logger.info("task.disabled", task=self.name)
            return
        self._task = asyncio.create_task(self._loop(), name=f"frugal:{self.name}")
        logger.info("task.started", task=self.name, interval_seconds=self.interval_seconds)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        await logger.ainfo("task.stopped", task=self.name, runs=self.runs)

    async def run_once(self) -> bool:
        """
        Run the callback now unless a pass is already in flight.

        Returns True if the callback ran; its return value is kept in
        last_result (None if it raised). Errors are logged, not raised,
        so one failed pass never stops the schedule.
        """
        if self._busy:
            self.skipped += 1
            await logger.adebug("task.skipped_busy", task=self.name)
            return False

        self._busy = True
        self.last_result = None
        try:
            self.last_result = await self._callback()
        except Exception as e:
            await logger.aexception("task.failed", task=self.name, error=str(e))
        finally:
            self._busy = False
            self.runs += 1
        return True

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            # Manual run_once() calls may still be in flight here
            await self.run_once()
