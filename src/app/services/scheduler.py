"""
Security Scheduler

Runs periodic security jobs as asyncio background tasks.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Sequence

from src.domain.errors import NotFound
from src.domain.result import Result, Return

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScheduledJob:
    name: str
    interval_seconds: float
    run: Callable[[], Awaitable[Any]]


class SecurityScheduler:
    """
    Fixed-interval job runner.

    Business Rules:
    - Each job waits one interval before its first run
    - A failing run is logged and the job keeps its schedule
    - Jobs must be idempotent; nothing stops another instance running them too
    """

    def __init__(self, jobs: Sequence[ScheduledJob]):
        self.jobs: Dict[str, ScheduledJob] = {job.name: job for job in jobs}
        self._tasks: List[asyncio.Task] = []
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._tasks = [
            asyncio.create_task(self._worker(job), name=f"security-job-{job.name}")
            for job in self.jobs.values()
        ]
        logger.info(f"Security scheduler started with jobs: {', '.join(self.jobs)}")

    async def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        logger.info("Security scheduler stopped")

    async def run_job(self, name: str) -> Result[Any]:
        """
        Run one job immediately.

        Returns:
            Result with the job output, or NotFound when no job has that name.
            Exceptions raised by the job itself propagate.
        """
        job = self.jobs.get(name)
        if job is None:
            return Return.err(NotFound(f"Unknown scheduled job {name!r}", code="JOB_NOT_FOUND"))
        return Return.ok(await job.run())

    async def _worker(self, job: ScheduledJob) -> None:
        while self._running:
            await asyncio.sleep(job.interval_seconds)
            try:
                result = await job.run()
                logger.info(f"Scheduled job {job.name} completed: {result}")
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.error(f"Scheduled job {job.name} failed", exc_info=True)
