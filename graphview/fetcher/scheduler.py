"""Single owner for the repeating poll tasks of a view."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, List, Optional

LOGGER = logging.getLogger(__name__)

PollCallback = Callable[[], Awaitable[object]]


@dataclass
class PollJob:
    """A named callback repeated on a fixed interval."""

    name: str
    interval_seconds: float
    callback: PollCallback
    task: Optional["asyncio.Task[None]"] = field(default=None, repr=False)
    runs: int = 0

    @property
    def active(self) -> bool:
        return self.task is not None and not self.task.done()


class PollScheduler:
    """Run independent repeating jobs and cancel them all with one call."""

    def __init__(self) -> None:
        self._jobs: Dict[str, PollJob] = {}

    @property
    def jobs(self) -> List[PollJob]:
        return list(self._jobs.values())

    @property
    def running(self) -> bool:
        return any(job.active for job in self._jobs.values())

    def add(self, name: str, interval_seconds: float, callback: PollCallback) -> PollJob:
        """Register a job; it starts on the next :meth:`start` call."""

        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        if name in self._jobs:
            raise ValueError(f"Poll job '{name}' already registered")
        job = PollJob(name=name, interval_seconds=interval_seconds, callback=callback)
        self._jobs[name] = job
        return job

    def start(self, *, run_immediately: bool = True) -> None:
        """Start every registered job on the running event loop."""

        for job in self._jobs.values():
            if job.active:
                continue
            job.task = asyncio.create_task(self._run(job, run_immediately), name=f"poll:{job.name}")
            LOGGER.info("Started poll job %s every %.1fs", job.name, job.interval_seconds)

    async def stop(self) -> None:
        """Cancel all jobs and wait for them to finish."""

        tasks = [job.task for job in self._jobs.values() if job.task is not None]
        for task in tasks:
            if not task.done():
                task.cancel()
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        for job in self._jobs.values():
            job.task = None
        if tasks:
            LOGGER.info("Stopped %d poll jobs", len(tasks))

    async def _run(self, job: PollJob, run_immediately: bool) -> None:
        if not run_immediately:
            await asyncio.sleep(job.interval_seconds)
        while True:
            try:
                await job.callback()
            except Exception:
                LOGGER.exception("Poll job %s raised; retrying on the next interval", job.name)
            job.runs += 1
            await asyncio.sleep(job.interval_seconds)


__all__ = ["PollJob", "PollScheduler"]
