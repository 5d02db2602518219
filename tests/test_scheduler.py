from __future__ import annotations

import asyncio
import time
from datetime import datetime, timezone

import pytest

from config.constants import MonitorStatus
from monitoring.scheduler import Scheduler
from utils.helpers import TimeHelper


def _counting_job(runs: list):
    async def job() -> None:
        runs.append(1)

    return job


@pytest.mark.asyncio
async def test_gate_registers_one_builtin_job(gate, settings) -> None:
    scheduler = Scheduler(gate, settings)
    tasks = scheduler.launch_due_jobs()
    await asyncio.gather(*tasks)
    assert len(tasks) == 1


@pytest.mark.asyncio
async def test_due_jobs_run_and_reschedule(settings) -> None:
    runs: list = []
    scheduler = Scheduler(settings=settings)
    scheduler.register_job("tick", 60, _counting_job(runs))

    base = time.time()
    await asyncio.gather(*scheduler.launch_due_jobs(now=base))
    assert runs == [1]

    assert scheduler.launch_due_jobs(now=base + 30) == []
    await asyncio.gather(*scheduler.launch_due_jobs(now=base + 60))
    assert runs == [1, 1]


@pytest.mark.asyncio
async def test_late_tick_does_not_shift_later_runs(settings) -> None:
    runs: list = []
    scheduler = Scheduler(settings=settings)
    scheduler.register_job("tick", 60, _counting_job(runs))
    base = time.time()

    await asyncio.gather(*scheduler.launch_due_jobs(now=base + 1.5))
    await asyncio.gather(*scheduler.launch_due_jobs(now=base + 60))
    assert runs == [1, 1]


@pytest.mark.asyncio
async def test_stalled_loop_runs_once_then_keeps_phase(settings) -> None:
    runs: list = []
    scheduler = Scheduler(settings=settings)
    scheduler.register_job("tick", 60, _counting_job(runs))
    base = time.time()

    await asyncio.gather(*scheduler.launch_due_jobs(now=base))
    await asyncio.gather(*scheduler.launch_due_jobs(now=base + 1000))
    assert runs == [1, 1]

    assert scheduler.launch_due_jobs(now=base + 1001) == []
    await asyncio.gather(*scheduler.launch_due_jobs(now=base + 1020))
    assert runs == [1, 1, 1]


@pytest.mark.asyncio
async def test_failing_job_is_logged_and_rescheduled(settings) -> None:
    calls: list = []

    async def broken() -> None:
        calls.append(1)
        raise RuntimeError("nope")

    scheduler = Scheduler(settings=settings)
    scheduler.register_job("broken", 10, broken)
    base = time.time()

    results = await asyncio.gather(*scheduler.launch_due_jobs(now=base))
    assert results == [None]

    await asyncio.gather(*scheduler.launch_due_jobs(now=base + 10))
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_cert_cache_job_clears_at_midnight(gate, settings, monkeypatch: pytest.MonkeyPatch) -> None:
    await gate.maybe_notify("m1", "Shop", 2, MonitorStatus.UP, now=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc))
    assert len(gate.cache) == 1

    midnight = datetime(2024, 5, 2, 0, 0, 30, tzinfo=timezone.utc)
    monkeypatch.setattr(TimeHelper, "now_in", staticmethod(lambda tz_name: midnight))

    scheduler = Scheduler(gate, settings)
    await asyncio.gather(*scheduler.launch_due_jobs())

    assert len(gate.cache) == 0


@pytest.mark.asyncio
async def test_start_stop(settings) -> None:
    runs: list = []
    scheduler = Scheduler(settings=settings, tick_interval=0.01)
    scheduler.register_job("tick", 60, _counting_job(runs))

    await scheduler.start()
    assert scheduler.is_running
    await asyncio.sleep(0.03)
    await scheduler.stop()

    assert not scheduler.is_running
    assert runs == [1]
