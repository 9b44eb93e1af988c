"""Tests for JobService: submission, background runs and progress streams."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from scout.agents.analyzer.agent import AnalyzerAgent
from scout.agents.brief_generator.agent import BriefGeneratorAgent
from scout.errors import InputValidationError, JobNotFoundError
from scout.jobs.manager import JobRegistry
from scout.jobs.runner import NO_CRAWLS_ERROR, PipelineRunner
from scout.jobs.service import JobService
from scout.schemas.brief import DesignBrief
from scout.schemas.job import JobConfig, JobStatus
from scout.shared.llm_client import DryRunClient
from scout.shared.storage import LocalStorage

from conftest import FakeCrawler

URLS = ["https://linear.app", "https://stripe.com"]


def make_service(tmp_path: Path, crawler: FakeCrawler | None = None) -> JobService:
    client = DryRunClient()
    runner = PipelineRunner(
        JobRegistry(),
        crawler or FakeCrawler(),
        AnalyzerAgent(client),
        BriefGeneratorAgent(client),
        LocalStorage(tmp_path / "library"),
        batch_delay_s=0,
    )
    return JobService(runner.registry, runner)


class TestSubmit:
    @pytest.mark.asyncio
    async def test_submit_runs_in_background(self, tmp_path: Path) -> None:
        service = make_service(tmp_path)
        job_id = service.submit(URLS, "saas-landing", "Landing page")

        assert service.status(job_id).status == JobStatus.PENDING
        await service.wait()

        job = service.status(job_id)
        assert job.status == JobStatus.COMPLETE
        assert job.config.urls == URLS
        assert job.result is not None

    @pytest.mark.asyncio
    async def test_invalid_submission_creates_nothing(self, tmp_path: Path) -> None:
        service = make_service(tmp_path)
        with pytest.raises(InputValidationError, match="Invalid category"):
            service.submit(URLS, "blog", "Landing page")
        with pytest.raises(InputValidationError, match="Goal is required"):
            service.submit(URLS, "saas-landing", "")
        assert len(service.registry) == 0

    @pytest.mark.asyncio
    async def test_failed_pipeline_is_a_job_state(self, tmp_path: Path) -> None:
        service = make_service(tmp_path, crawler=FakeCrawler(failing=set(URLS)))
        job_id = service.submit(URLS, "saas-landing", "Landing page")
        await service.wait()

        job = service.status(job_id)
        assert job.status == JobStatus.ERROR
        assert job.error == NO_CRAWLS_ERROR

    def test_unknown_status(self, tmp_path: Path) -> None:
        with pytest.raises(JobNotFoundError):
            make_service(tmp_path).status("missing")


class TestStream:
    @pytest.mark.asyncio
    async def test_streams_until_terminal(self, tmp_path: Path) -> None:
        service = make_service(tmp_path)
        job_id = service.submit(URLS, "saas-landing", "Landing page")

        events = [event async for event in service.stream(job_id)]

        assert events[0].status == JobStatus.PENDING
        assert events[-1].status == JobStatus.COMPLETE
        assert events[-1].progress.current_step == "Complete!"
        statuses = {e.status for e in events}
        assert {JobStatus.CRAWLING, JobStatus.ANALYZING, JobStatus.GENERATING} <= statuses
        assert service.registry.subscriber_count(job_id) == 0

    @pytest.mark.asyncio
    async def test_terminal_job_yields_once(self, tmp_path: Path) -> None:
        service = make_service(tmp_path)
        job_id = service.submit(URLS, "saas-landing", "Landing page")
        await service.wait()

        events = [event async for event in service.stream(job_id)]

        assert len(events) == 1
        assert events[0].status == JobStatus.COMPLETE
        assert service.registry.subscriber_count(job_id) == 0

    @pytest.mark.asyncio
    async def test_error_event_carries_message(self, tmp_path: Path) -> None:
        service = make_service(tmp_path, crawler=FakeCrawler(failing=set(URLS)))
        job_id = service.submit(URLS, "saas-landing", "Landing page")

        events = [event async for event in service.stream(job_id)]

        assert events[-1].status == JobStatus.ERROR
        assert events[-1].error == NO_CRAWLS_ERROR

    @pytest.mark.asyncio
    async def test_closing_early_unsubscribes(self, tmp_path: Path) -> None:
        service = make_service(tmp_path)
        job_id = service.submit(URLS, "saas-landing", "Landing page")

        stream = service.stream(job_id)
        await stream.__anext__()
        await stream.__anext__()
        assert service.registry.subscriber_count(job_id) == 1
        await stream.aclose()
        assert service.registry.subscriber_count(job_id) == 0
        await service.wait()

    @pytest.mark.asyncio
    async def test_unknown_job(self, tmp_path: Path) -> None:
        with pytest.raises(JobNotFoundError):
            await make_service(tmp_path).stream("missing").__anext__()

    @pytest.mark.asyncio
    async def test_update_right_after_first_event_is_delivered(self, tmp_path: Path) -> None:
        service = make_service(tmp_path)
        registry = service.registry
        job = registry.create(JobConfig(urls=URLS, category="saas-landing", goal="Landing page"))
        for status in (JobStatus.CRAWLING, JobStatus.ANALYZING, JobStatus.GENERATING):
            registry.update(job.id, status=status)

        stream = service.stream(job.id)
        first = await stream.__anext__()
        assert first.status == JobStatus.GENERATING
        assert registry.subscriber_count(job.id) == 1

        registry.update(job.id, status=JobStatus.COMPLETE, result=DesignBrief())

        last = await asyncio.wait_for(stream.__anext__(), 1.0)
        assert last.status == JobStatus.COMPLETE
        with pytest.raises(StopAsyncIteration):
            await asyncio.wait_for(stream.__anext__(), 1.0)
        assert registry.subscriber_count(job.id) == 0
