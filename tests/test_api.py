"""Tests for the HTTP surface, driven through FastAPI's TestClient."""

from __future__ import annotations

import json
import time
from pathlib import Path
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from scout.agents.suggester.agent import SuggesterAgent
from scout.api.app import create_app, sse_frame
from scout.shared.llm_client import DryRunClient

from test_service import URLS, make_service

BODY = {"urls": URLS, "category": "saas-landing", "goal": "Landing page"}


class Resource:
    def __init__(self) -> None:
        self.entered = False
        self.exited = False

    async def __aenter__(self) -> "Resource":
        self.entered = True
        return self

    async def __aexit__(self, *exc) -> None:
        self.exited = True


@pytest.fixture
def service(tmp_path: Path):
    return make_service(tmp_path)


@pytest.fixture
def client(service):
    with TestClient(create_app(service, SuggesterAgent(DryRunClient()))) as test_client:
        yield test_client


def _wait_for_terminal(client: TestClient, job_id: str) -> dict:
    for _ in range(200):
        data = client.get(f"/api/scout/{job_id}").json()
        if data["status"] in ("complete", "error"):
            return data
        time.sleep(0.01)
    raise AssertionError(f"job {job_id} did not finish")


def _frames(text: str) -> list[dict]:
    return [
        json.loads(chunk[len("data: "):])
        for chunk in text.split("\n\n")
        if chunk.startswith("data: ")
    ]


class TestSubmitAndStatus:
    def test_submit_returns_job_id(self, client: TestClient) -> None:
        response = client.post("/api/scout", json=BODY)
        assert response.status_code == 201
        job_id = response.json()["jobId"]

        data = _wait_for_terminal(client, job_id)
        assert data["status"] == "complete"
        assert data["result"]["category"] == "saas-landing"
        assert data["progress"]["sitesCrawled"] == 2
        assert set(data["analyses"][0]) == {"url", "overallScore", "strengths", "weaknesses"}

    @pytest.mark.parametrize("body, message", [
        ({**BODY, "urls": []}, "At least one URL is required"),
        ({**BODY, "urls": ["not-a-url"]}, "Invalid URL: not-a-url"),
        ({**BODY, "category": "blog"}, "Invalid category"),
        ({**BODY, "goal": "  "}, "Goal is required"),
        ({**BODY, "urls": [f"https://s{i}.com" for i in range(11)]}, "Maximum 10 URLs allowed"),
    ])
    def test_validation_errors(self, client: TestClient, body: dict, message: str) -> None:
        response = client.post("/api/scout", json=body)
        assert response.status_code == 400
        assert message in response.json()["error"]

    def test_malformed_body(self, client: TestClient) -> None:
        response = client.post("/api/scout", json={"urls": "https://a.com"})
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid request body"}

    def test_unknown_job(self, client: TestClient) -> None:
        response = client.get("/api/scout/missing")
        assert response.status_code == 404
        assert response.json() == {"error": "Job not found"}

    def test_api_key_header_reaches_pipeline(self, service) -> None:
        service.runner.run = AsyncMock()
        with TestClient(create_app(service)) as client:
            response = client.post("/api/scout", json=BODY, headers={"X-OpenRouter-Key": "sk-user"})
        assert response.status_code == 201
        service.runner.run.assert_called_once_with(response.json()["jobId"], "sk-user")


class TestStream:
    def test_stream_of_finished_job(self, client: TestClient) -> None:
        job_id = client.post("/api/scout", json=BODY).json()["jobId"]
        _wait_for_terminal(client, job_id)

        response = client.get(f"/api/scout/{job_id}/stream")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        assert response.headers["cache-control"] == "no-cache"

        frames = _frames(response.text)
        assert len(frames) == 1
        assert frames[0]["status"] == "complete"
        assert frames[0]["progress"]["currentStep"] == "Complete!"

    def test_stream_until_terminal(self, client: TestClient) -> None:
        job_id = client.post("/api/scout", json=BODY).json()["jobId"]
        with client.stream("GET", f"/api/scout/{job_id}/stream") as response:
            frames = _frames("".join(response.iter_text()))

        assert frames[-1]["status"] == "complete"
        assert all("progress" in f for f in frames)

    def test_stream_unknown_job(self, client: TestClient) -> None:
        response = client.get("/api/scout/missing/stream")
        assert response.status_code == 404

    def test_sse_frame(self) -> None:
        assert sse_frame({"status": "crawling"}) == 'data: {"status": "crawling"}\n\n'


class TestHelpers:
    def test_categories(self, client: TestClient) -> None:
        categories = client.get("/api/categories").json()
        assert categories[0] == {
            "id": "saas-landing",
            "label": "Saas Landing",
            "description": "Value prop, pricing, free trial CTA, social proof",
        }
        assert len(categories) == 6

    def test_suggest(self, client: TestClient) -> None:
        response = client.post("/api/suggest", json={"prompt": "A landing page like Linear"})
        assert response.status_code == 200
        assert response.json() == {
            "urls": ["https://linear.app", "https://stripe.com"],
            "category": "saas-landing",
            "goal": "Dry run suggestion",
        }

    def test_suggest_requires_prompt(self, client: TestClient) -> None:
        response = client.post("/api/suggest", json={"prompt": " "})
        assert response.status_code == 400
        assert response.json() == {"error": "Prompt is required."}

    def test_suggest_passes_header_key(self, service, fake_client: AsyncMock) -> None:
        fake_client.complete.return_value = '{"urls": ["https://vercel.com"], "category": "startup"}'
        with TestClient(create_app(service, SuggesterAgent(fake_client))) as client:
            response = client.post(
                "/api/suggest", json={"prompt": "dev tools"}, headers={"X-OpenRouter-Key": "sk-user"},
            )
        assert response.json()["category"] == "startup"
        assert response.json()["goal"] == "dev tools"
        assert fake_client.complete.await_args.kwargs["api_key"] == "sk-user"

    def test_suggest_model_failure(self, service, fake_client: AsyncMock) -> None:
        fake_client.complete.return_value = "no json here"
        with TestClient(create_app(service, SuggesterAgent(fake_client))) as client:
            response = client.post("/api/suggest", json={"prompt": "dev tools"})
        assert response.status_code == 500
        assert "error" in response.json()

    def test_suggest_unavailable(self, service) -> None:
        with TestClient(create_app(service)) as client:
            response = client.post("/api/suggest", json={"prompt": "dev tools"})
        assert response.status_code == 503


class TestLifespan:
    def test_resources_and_sweeper(self, service) -> None:
        resource = Resource()
        with TestClient(create_app(service, resources=[resource])):
            assert resource.entered
            assert service.registry._sweeper is not None
        assert resource.exited
        assert service.registry._sweeper is None
