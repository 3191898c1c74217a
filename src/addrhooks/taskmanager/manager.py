"""Periodic background jobs.

A ``CronJob`` runs every ``period`` seconds, the first time one period after
``TaskManager.start()``. A failing run is logged and the schedule carries on.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from addrhooks.metrics.collector import EngineMetrics

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CronJob:
    """A named handler and its period in seconds."""

    name: str
    handler: Callable[[], Awaitable[object]]
    period: float

    def __post_init__(self) -> None:
        if self.period <= 0:
            msg = f"Cron job {self.name!r} needs a positive period"
            raise ValueError(msg)


class TaskManager:
    """Schedules registered cron jobs on asyncio tasks.

    Jobs are registered before ``start()``; ``stop()`` cancels them.
    """

    def __init__(self, *, metrics: EngineMetrics | None = None) -> None:
        self._metrics = metrics
        self._jobs: dict[str, CronJob] = {}
        self._tasks: list[asyncio.Task[None]] = []

    @property
    def is_running(self) -> bool:
        return bool(self._tasks)

    @property
    def jobs(self) -> dict[str, CronJob]:
        """Registered jobs by name."""
        return dict(self._jobs)

    def register(self, job: CronJob) -> None:
        if self.is_running:
            msg = "register cron jobs before start()"
            raise RuntimeError(msg)
        if job.name in self._jobs:
            msg = f"Cron job {job.name!r} is already registered"
            raise ValueError(msg)
        self._jobs[job.name] = job

    async def run_once(self, name: str) -> None:
        """Run the job registered as *name* now, outside its schedule.

        Raises:
            KeyError: If no such job is registered.
        """
        job = self._jobs[name]
        if self._metrics is None:
            await job.handler()
            return
        with self._metrics.track_cron(name):
            await job.handler()

    async def start(self) -> None:
        if self.is_running or not self._jobs:
            return
        self._tasks = [
            asyncio.create_task(self._schedule(job), name=f"cron-{job.name}")
            for job in self._jobs.values()
        ]
        logger.info("Scheduled %d cron jobs", len(self._tasks))

    async def stop(self) -> None:
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        if tasks:
            logger.info("Cron jobs stopped")

    async def _schedule(self, job: CronJob) -> None:
        while True:
            await asyncio.sleep(job.period)
            try:
                await self.run_once(job.name)
            except Exception:
                logger.exception("Cron job %r failed", job.name)
