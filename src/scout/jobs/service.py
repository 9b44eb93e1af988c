"""Job service: the entry point the HTTP layer and CLI talk to."""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator

from scout.jobs.manager import JobRegistry
from scout.jobs.runner import PipelineRunner
from scout.schemas.config import validate_submission
from scout.schemas.job import Job, JobConfig, JobEvent

logger = logging.getLogger(__name__)


class JobService:
    """Validates submissions, schedules pipeline runs, and streams progress."""

    def __init__(self, registry: JobRegistry, runner: PipelineRunner) -> None:
        self.registry = registry
        self.runner = runner
        self._tasks: set[asyncio.Task[None]] = set()

    def submit(
        self,
        urls: list[str],
        category: str,
        goal: str,
        api_key: str | None = None,
    ) -> str:
        """Create a job and start its pipeline in the background.

        Raises ``InputValidationError`` before any job is created. Must be
        called from inside a running event loop.
        """
        urls, category, goal = validate_submission(urls, category, goal)
        job = self.registry.create(JobConfig(urls=urls, category=category, goal=goal))

        task = asyncio.get_running_loop().create_task(self.runner.run(job.id, api_key))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return job.id

    def status(self, job_id: str) -> Job:
        """Current snapshot; raises ``JobNotFoundError`` for unknown ids."""
        return self.registry.get(job_id)

    async def stream(self, job_id: str) -> AsyncIterator[JobEvent]:
        """Yield the current state, then one event per update.

        The iterator ends after yielding a terminal status. Raises
        ``JobNotFoundError`` on first iteration for unknown ids.
        """
        job = self.registry.get(job_id)
        if job.status.is_terminal:
            yield job.event()
            return

        # Subscribe before the first yield so no update can slip in between
        queue: asyncio.Queue[JobEvent] = asyncio.Queue()
        queue.put_nowait(job.event())
        unsubscribe = self.registry.subscribe(job_id, lambda j: queue.put_nowait(j.event()))
        try:
            while True:
                event = await queue.get()
                yield event
                if event.status.is_terminal:
                    return
        finally:
            unsubscribe()

    async def wait(self) -> None:
        """Wait for every pipeline started by this service to finish."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
