import asyncio

import pytest

from src.app.services.scheduler import ScheduledJob, SecurityScheduler
from src.domain.errors import NotFound


@pytest.mark.asyncio
async def test_run_job_runs_immediately():
    calls = []

    async def snapshot():
        calls.append("snapshot")
        return {"ok": True}

    scheduler = SecurityScheduler([ScheduledJob("snapshot", 3600, snapshot)])

    result = await scheduler.run_job("snapshot")

    assert result.is_ok()
    assert result.value == {"ok": True}
    assert calls == ["snapshot"]


@pytest.mark.asyncio
async def test_unknown_job_is_not_found():
    scheduler = SecurityScheduler([])

    result = await scheduler.run_job("missing")

    assert result.is_err()
    assert isinstance(result.error, NotFound)
    assert result.error.code == "JOB_NOT_FOUND"


@pytest.mark.asyncio
async def test_job_failure_propagates_from_manual_run():
    async def broken():
        raise RuntimeError("boom")

    scheduler = SecurityScheduler([ScheduledJob("broken", 3600, broken)])

    with pytest.raises(RuntimeError):
        await scheduler.run_job("broken")


@pytest.mark.asyncio
async def test_failing_runs_do_not_stop_the_schedule():
    runs = []

    async def flaky():
        runs.append(len(runs))
        if len(runs) == 1:
            raise RuntimeError("first run fails")

    scheduler = SecurityScheduler([ScheduledJob("flaky", 0.01, flaky)])
    scheduler.start()
    for _ in range(100):
        if len(runs) >= 3:
            break
        await asyncio.sleep(0.01)
    await scheduler.stop()

    assert len(runs) >= 3
    assert not scheduler.is_running


@pytest.mark.asyncio
async def test_stop_cancels_sleeping_jobs():
    async def never_due():
        raise AssertionError("should not run")

    scheduler = SecurityScheduler([ScheduledJob("weekly", 3600, never_due)])
    scheduler.start()
    await asyncio.sleep(0)

    await scheduler.stop()

    assert not scheduler.is_running
