"""Job state for one pipeline run."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from scout.schemas.analysis import UIAnalysis
from scout.schemas.base import ScoutModel
from scout.schemas.brief import DesignBrief


class JobStatus(str, Enum):
    PENDING = "pending"
    CRAWLING = "crawling"
    ANALYZING = "analyzing"
    GENERATING = "generating"
    COMPLETE = "complete"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETE, JobStatus.ERROR)


class JobConfig(ScoutModel):
    urls: list[str]
    category: str
    goal: str


class JobProgress(ScoutModel):
    current_step: str = "Starting..."
    sites_total: int = 0
    sites_crawled: int = 0
    sites_analyzed: int = 0
    brief_generated: bool = False


class Job(ScoutModel):
    """A pipeline run. Only ``JobRegistry.update`` may change it."""

    id: str
    status: JobStatus = JobStatus.PENDING
    config: JobConfig
    progress: JobProgress = JobProgress()
    analyses: list[UIAnalysis] = []
    result: DesignBrief | None = None
    error: str | None = None
    created_at: datetime

    def event(self) -> JobEvent:
        return JobEvent(status=self.status, progress=self.progress, error=self.error)


class JobEvent(ScoutModel):
    """The (status, progress, error) triple pushed to stream subscribers."""

    status: JobStatus
    progress: JobProgress
    error: str | None = None
