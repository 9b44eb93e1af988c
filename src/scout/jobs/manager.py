"""In-memory job registry for scout pipeline runs.

The registry is the only mutable state shared between a running pipeline
and the clients watching it. Every change goes through ``update()`` so
that subscribers see each change exactly once.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

from scout.errors import InvalidTransitionError, JobNotFoundError
from scout.schemas.job import Job, JobConfig, JobProgress, JobStatus

logger = logging.getLogger(__name__)

RETENTION = timedelta(hours=1)
SWEEP_INTERVAL_S = 5 * 60

Listener = Callable[[Job], None]

# Success path is strictly linear; ERROR is reachable from any non-terminal state
_NEXT_STATUS: dict[JobStatus, JobStatus] = {
    JobStatus.PENDING: JobStatus.CRAWLING,
    JobStatus.CRAWLING: JobStatus.ANALYZING,
    JobStatus.ANALYZING: JobStatus.GENERATING,
    JobStatus.GENERATING: JobStatus.COMPLETE,
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def check_transition(current: JobStatus, new: JobStatus) -> None:
    """Raise ``InvalidTransitionError`` unless ``current -> new`` is allowed.

    Staying in the same non-terminal status is allowed (progress updates).
    """
    if current.is_terminal:
        raise InvalidTransitionError(f"Job already finished with status {current.value}")
    if new in (current, JobStatus.ERROR) or _NEXT_STATUS.get(current) == new:
        return
    raise InvalidTransitionError(f"Cannot move job from {current.value} to {new.value}")


class JobRegistry:
    """Owns every live ``Job`` and its subscribers.

    ``clock`` and ``sweep_interval`` are injectable so retention can be
    tested without waiting.
    """

    def __init__(
        self,
        clock: Callable[[], datetime] = _utcnow,
        retention: timedelta = RETENTION,
        sweep_interval: float = SWEEP_INTERVAL_S,
    ) -> None:
        self._clock = clock
        self.retention = retention
        self.sweep_interval = sweep_interval
        self._jobs: dict[str, Job] = {}
        self._listeners: dict[str, list[Listener]] = {}
        self._sweeper: asyncio.Task[None] | None = None

    def __len__(self) -> int:
        return len(self._jobs)

    def __contains__(self, job_id: object) -> bool:
        return job_id in self._jobs

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def create(self, config: JobConfig) -> Job:
        job = Job(
            id=str(uuid.uuid4()),
            config=config,
            progress=JobProgress(sites_total=len(config.urls)),
            created_at=self._clock(),
        )
        self._jobs[job.id] = job
        logger.info("Created job %s for %d URL(s)", job.id, len(config.urls))
        return job

    def get(self, job_id: str) -> Job:
        try:
            return self._jobs[job_id]
        except KeyError:
            raise JobNotFoundError(f"Job not found: {job_id}") from None

    def update(self, job_id: str, **changes: Any) -> Job:
        """Apply ``changes`` to a job, then notify its subscribers in order.

        ``progress`` may be a ``JobProgress`` or a dict of progress fields to
        merge into the current snapshot. Setting ``status`` to COMPLETE
        requires a ``result``; ERROR requires an ``error`` message.
        """
        job = self.get(job_id)
        if job.status.is_terminal:
            raise InvalidTransitionError(
                f"Job {job_id} already finished with status {job.status.value}"
            )

        progress = changes.get("progress")
        if isinstance(progress, dict):
            changes["progress"] = job.progress.model_copy(update=progress)

        if "status" in changes:
            status = JobStatus(changes["status"])
            check_transition(job.status, status)
            changes["status"] = status
            if status == JobStatus.COMPLETE and changes.get("result") is None:
                raise InvalidTransitionError("A completed job needs a result")
            if status == JobStatus.ERROR and not changes.get("error"):
                raise InvalidTransitionError("A failed job needs an error message")

        status = changes.get("status", job.status)
        if changes.get("result") is not None and status != JobStatus.COMPLETE:
            raise InvalidTransitionError("Only a completed job can carry a result")
        if changes.get("error") and status != JobStatus.ERROR:
            raise InvalidTransitionError("Only a failed job can carry an error")

        updated = job.model_copy(update=changes)
        self._jobs[job_id] = updated
        self._notify(updated)
        return updated

    def _notify(self, job: Job) -> None:
        # Copy so a listener may unsubscribe itself while being notified
        for listener in list(self._listeners.get(job.id, ())):
            try:
                listener(job)
            except Exception:
                logger.exception("Job listener failed for %s", job.id)

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, job_id: str, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` for every update of ``job_id``.

        Returns an idempotent unsubscribe function. Removing the last
        listener drops the job's listener list.
        """
        self._listeners.setdefault(job_id, []).append(listener)

        def unsubscribe() -> None:
            listeners = self._listeners.get(job_id)
            if listeners is None:
                return
            if listener in listeners:
                listeners.remove(listener)
            if not listeners:
                del self._listeners[job_id]

        return unsubscribe

    def subscriber_count(self, job_id: str) -> int:
        return len(self._listeners.get(job_id, ()))

    # ------------------------------------------------------------------
    # Retention
    # ------------------------------------------------------------------

    def sweep(self) -> int:
        """Delete jobs older than the retention window, whatever their status."""
        cutoff = self._clock() - self.retention
        expired = [jid for jid, job in self._jobs.items() if job.created_at < cutoff]
        for job_id in expired:
            del self._jobs[job_id]
            self._listeners.pop(job_id, None)
        if expired:
            logger.info("Swept %d expired job(s)", len(expired))
        return len(expired)

    async def _sweep_forever(self) -> None:
        while True:
            await asyncio.sleep(self.sweep_interval)
            self.sweep()

    def start_sweeper(self) -> None:
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.get_running_loop().create_task(self._sweep_forever())

    async def stop_sweeper(self) -> None:
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        try:
            await self._sweeper
        except asyncio.CancelledError:
            pass
        self._sweeper = None
