"""HTTP surface: job submission, status, SSE progress stream, helpers."""

from __future__ import annotations

import json
import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Any, AsyncIterator, Sequence

from fastapi import FastAPI, Header, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel

from scout.agents.suggester.agent import SuggesterAgent
from scout.categories import list_categories
from scout.errors import InputValidationError, JobNotFoundError
from scout.jobs.service import JobService
from scout.schemas.job import Job

logger = logging.getLogger(__name__)

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


class ScoutRequest(BaseModel):
    urls: list[str] = []
    category: str = ""
    goal: str = ""


class SuggestRequest(BaseModel):
    prompt: str = ""


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


def job_snapshot(job: Job) -> dict[str, Any]:
    """Job as JSON with each analysis reduced to its headline fields."""
    data = job.to_json_dict()
    data["analyses"] = [
        {
            "url": a.url,
            "overallScore": a.overall_score,
            "strengths": a.strengths,
            "weaknesses": a.weaknesses,
        }
        for a in job.analyses
    ]
    return data


def sse_frame(payload: dict[str, Any]) -> str:
    return f"data: {json.dumps(payload)}\n\n"


def create_app(
    service: JobService,
    suggester: SuggesterAgent | None = None,
    resources: Sequence[Any] = (),
) -> FastAPI:
    """Build the app around an existing ``JobService``.

    ``resources`` are async context managers (e.g. a ``SiteCrawler``)
    entered for the lifetime of the app, alongside the job sweeper.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        async with AsyncExitStack() as stack:
            for resource in resources:
                await stack.enter_async_context(resource)
            service.registry.start_sweeper()
            try:
                yield
            finally:
                await service.registry.stop_sweeper()

    app = FastAPI(title="Design Scout", lifespan=lifespan)

    @app.exception_handler(RequestValidationError)
    async def bad_request(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error(400, "Invalid request body")

    @app.post("/api/scout", status_code=201)
    async def submit_job(
        body: ScoutRequest,
        x_openrouter_key: str | None = Header(default=None),
    ) -> Any:
        try:
            job_id = service.submit(
                body.urls, body.category, body.goal, api_key=x_openrouter_key or None,
            )
        except InputValidationError as exc:
            return _error(400, str(exc))
        return {"jobId": job_id}

    @app.get("/api/scout/{job_id}")
    async def get_job(job_id: str) -> Any:
        try:
            return job_snapshot(service.status(job_id))
        except JobNotFoundError:
            return _error(404, "Job not found")

    @app.get("/api/scout/{job_id}/stream")
    async def stream_job(job_id: str) -> Any:
        try:
            service.status(job_id)
        except JobNotFoundError:
            return _error(404, "Job not found")

        async def events() -> AsyncIterator[str]:
            try:
                async for event in service.stream(job_id):
                    yield sse_frame(event.to_json_dict())
            except JobNotFoundError:
                yield sse_frame({"status": "error", "error": "Job not found"})

        return StreamingResponse(events(), media_type="text/event-stream", headers=SSE_HEADERS)

    @app.get("/api/categories")
    async def categories() -> Any:
        return list_categories()

    @app.post("/api/suggest")
    async def suggest(
        body: SuggestRequest,
        x_openrouter_key: str | None = Header(default=None),
    ) -> Any:
        if suggester is None:
            return _error(503, "Suggestions are not available")
        try:
            return await suggester.suggest(body.prompt, api_key=x_openrouter_key or None)
        except InputValidationError as exc:
            return _error(400, str(exc))
        except Exception as exc:
            logger.exception("Suggestion failed")
            return _error(500, str(exc) or "Failed to generate suggestions")

    return app
