"""Periodic quota reset: zero every usage counter of a service each rotation period."""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from frugal.common.tasks import PeriodicTask
from frugal.storage.base import StorageResult

ResetCallback = Callable[[str], Awaitable[StorageResult]]


class QuotaResetScheduler:
    """
    One timer per service. The reset itself (zero + persist) lives in
    CredentialManager.reset_usage so the timer and the admin endpoint
    share one code path.
    """

    def __init__(self, service: str, rotation_period_seconds: float, reset: ResetCallback) -> None:
        self.service = service
        self._reset = reset
        self._task = PeriodicTask(
            f"credentials.reset.{service}", rotation_period_seconds, self._tick
        )

    @property
    def task(self) -> PeriodicTask:
        return self._task

    async def _tick(self) -> StorageResult:
        return await self._reset(self.service)

    async def trigger(self) -> bool:
        """Run a reset now. False if a reset for this service is already running."""
        return await self._task.run_once()

    def start(self) -> None:
        self._task.start()

    async def stop(self) -> None:
        await self._task.stop()
