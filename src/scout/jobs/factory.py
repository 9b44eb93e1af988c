"""Wiring of the default pipeline, shared by the CLI and the HTTP server."""

from __future__ import annotations

from pathlib import Path

from scout.agents.analyzer.agent import AnalyzerAgent
from scout.agents.base import CompletionClient
from scout.agents.brief_generator.agent import BriefGeneratorAgent
from scout.config import Settings
from scout.jobs.manager import JobRegistry
from scout.jobs.runner import Crawler, PipelineRunner
from scout.jobs.service import JobService
from scout.schemas.config import DEPTH_SECTIONS
from scout.shared.browser import SiteCrawler
from scout.shared.crawl_cache import CrawlCache
from scout.shared.llm_client import DryRunClient, LLMClient
from scout.shared.storage import LocalStorage


def build_client(
    settings: Settings, *, dry_run: bool = False, require_key: bool = True,
) -> CompletionClient:
    if dry_run:
        return DryRunClient()
    return LLMClient(settings, require_key=require_key)


def build_crawler(settings: Settings, depth: str = "standard") -> SiteCrawler:
    """Un-entered crawler; callers own its ``async with`` lifetime."""
    out = Path(settings.output_dir)
    return SiteCrawler(
        output_dir=out / "screenshots",
        cache=CrawlCache(out / ".crawl-cache"),
        cache_ttl_ms=settings.cache_ttl_ms,
        sections=DEPTH_SECTIONS.get(depth, DEPTH_SECTIONS["standard"]),
    )


def build_service(
    settings: Settings,
    client: CompletionClient,
    crawler: Crawler,
    registry: JobRegistry | None = None,
) -> JobService:
    runner = PipelineRunner(
        registry or JobRegistry(),
        crawler,
        AnalyzerAgent(client),
        BriefGeneratorAgent(client),
        LocalStorage(Path(settings.output_dir) / "library"),
    )
    return JobService(runner.registry, runner)
