"""Shared test fixtures."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from scout.config import Settings
from scout.schemas.analysis import (
    CoreScores,
    DesignPattern,
    JustifiedScore,
    PrincipleScores,
    UIAnalysis,
)
from scout.schemas.brief import DesignBrief
from scout.schemas.crawl import CrawlResult, Screenshot
from scout.shared.llm_client import LLMClient

GOOD_JUSTIFICATION = "Primary CTA uses a saturated blue fill against white space"


def make_scores(score: int = 7, justification: str = GOOD_JUSTIFICATION) -> dict:
    """Keyword arguments giving every dimension the same score."""
    return {
        "scores": CoreScores(**{
            name: JustifiedScore(score=score, justification=justification)
            for name in CoreScores.model_fields
        }),
        "principle_scores": PrincipleScores(**{
            name: JustifiedScore(score=score, justification=justification)
            for name in PrincipleScores.model_fields
        }),
    }


def make_analysis(
    url: str = "https://example.com",
    score: int = 7,
    overall: float = 7.0,
    patterns: list[str] | None = None,
) -> UIAnalysis:
    return UIAnalysis(
        url=url,
        overall_score=overall,
        strengths=["Clear hero", "Strong logo strip", "Short forms", "Fast"],
        weaknesses=["Low contrast footer"],
        patterns=[
            DesignPattern(name=p, description=f"{p} on {url}", effectiveness="high")
            for p in (patterns or [])
        ],
        **make_scores(score),
    )


def make_crawl(url: str = "https://example.com", shots: int = 2) -> CrawlResult:
    sections = ["full", "above-fold", "mobile", "hero", "footer", "tablet", "extra"]
    return CrawlResult(
        url=url,
        page_title="Example",
        screenshots=[
            Screenshot(
                filepath=f"/tmp/{i}.png",
                base64="aGVsbG8=",
                viewport="desktop-1440x900",
                section=sections[i % len(sections)],
                scroll_depth=0,
            )
            for i in range(shots)
        ],
    )


def make_completion(text: str | None):
    """Mock OpenAI chat completion response."""
    message = SimpleNamespace(content=text)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


@pytest.fixture
def settings() -> Settings:
    return Settings(api_key="test-key")


@pytest.fixture
def mock_llm_client(settings: Settings) -> LLMClient:
    """An LLMClient with a mocked OpenAI SDK underneath."""
    client = LLMClient.__new__(LLMClient)
    client.settings = settings
    client._client = AsyncMock()
    client._key_clients = {}
    return client


@pytest.fixture
def fake_client() -> AsyncMock:
    """Stand-in for any ``CompletionClient``; set ``complete.return_value``."""
    client = AsyncMock()
    client.complete = AsyncMock(return_value="{}")
    return client


@pytest.fixture
def brief() -> DesignBrief:
    return DesignBrief(category="saas-landing", goal="Build a landing page")


class FakeClock:
    """Manually advanced clock for registry and cache tests."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def tmp_config(tmp_path: Path) -> Path:
    """Write a minimal valid scout.yml and return its path."""
    cfg = tmp_path / "scout.yml"
    cfg.write_text(
        """\
urls:
  - "https://linear.app"
  - "https://stripe.com"
category: saas-landing
goal: "Landing page for a developer tool"
output_directory: "{out}"
""".format(out=str(tmp_path / "output"))
    )
    return cfg


class FakeCrawler:
    """Returns canned crawls; URLs in ``failing`` raise like a DNS error."""

    def __init__(self, failing: set[str] | None = None) -> None:
        self.failing = failing or set()
        self.crawled: list[str] = []

    async def crawl(self, url: str) -> CrawlResult:
        self.crawled.append(url)
        if url in self.failing:
            raise RuntimeError(f"net::ERR_NAME_NOT_RESOLVED at {url}")
        return make_crawl(url)
