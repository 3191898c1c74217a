"""Tests for the TaskManager cron scheduling."""

from __future__ import annotations

import asyncio
from unittest.mock import MagicMock

import pytest

from addrhooks.taskmanager.manager import CronJob, TaskManager


async def _noop() -> None:
    pass


class TestCronJob:
    def test_fields(self) -> None:
        job = CronJob(name="reaper", handler=_noop, period=5.0)
        assert job.name == "reaper"
        assert job.period == 5.0

    @pytest.mark.parametrize("period", [0, -1.0])
    def test_rejects_non_positive_period(self, period: float) -> None:
        with pytest.raises(ValueError, match="positive period"):
            CronJob(name="bad", handler=_noop, period=period)


class TestTaskManager:
    async def test_start_stop(self) -> None:
        tm = TaskManager()
        tm.register(CronJob(name="tick", handler=_noop, period=3600))
        assert not tm.is_running
        await tm.start()
        assert tm.is_running
        await tm.stop()
        assert not tm.is_running

    async def test_start_without_jobs_is_noop(self) -> None:
        tm = TaskManager()
        await tm.start()
        assert not tm.is_running
        await tm.stop()

    async def test_register_lists_job(self) -> None:
        tm = TaskManager()
        job = CronJob(name="reaper", handler=_noop, period=10.0)
        tm.register(job)
        assert tm.jobs == {"reaper": job}

    async def test_register_duplicate_name(self) -> None:
        tm = TaskManager()
        tm.register(CronJob(name="reaper", handler=_noop, period=10.0))
        with pytest.raises(ValueError, match="already registered"):
            tm.register(CronJob(name="reaper", handler=_noop, period=20.0))

    async def test_register_after_start(self) -> None:
        tm = TaskManager()
        tm.register(CronJob(name="a", handler=_noop, period=3600))
        await tm.start()
        with pytest.raises(RuntimeError, match="before start"):
            tm.register(CronJob(name="b", handler=_noop, period=3600))
        await tm.stop()

    async def test_job_runs_periodically(self) -> None:
        counter = {"value": 0}

        async def _handler() -> None:
            counter["value"] += 1

        tm = TaskManager()
        tm.register(CronJob(name="tick", handler=_handler, period=0.01))
        await tm.start()
        await asyncio.sleep(0.1)
        await tm.stop()
        assert counter["value"] >= 2

    async def test_failing_job_keeps_running(self) -> None:
        calls = {"value": 0}

        async def _handler() -> None:
            calls["value"] += 1
            raise RuntimeError("boom")

        tm = TaskManager()
        tm.register(CronJob(name="flaky", handler=_handler, period=0.01))
        await tm.start()
        await asyncio.sleep(0.1)
        await tm.stop()
        assert calls["value"] >= 2

    async def test_run_once_tracks_metrics(self) -> None:
        metrics = MagicMock()
        tm = TaskManager(metrics=metrics)
        tm.register(CronJob(name="reaper", handler=_noop, period=3600))
        await tm.run_once("reaper")
        metrics.track_cron.assert_called_once_with("reaper")

    async def test_run_once_unknown_job(self) -> None:
        with pytest.raises(KeyError):
            await TaskManager().run_once("missing")
