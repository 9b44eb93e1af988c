"""Pipeline runner: drives one job through crawl, analyze and brief."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Protocol
from urllib.parse import urlparse

from scout.agents.analyzer.validation import RepromptBudget
from scout.jobs.manager import JobRegistry
from scout.schemas.analysis import UIAnalysis
from scout.schemas.brief import DesignBrief
from scout.schemas.crawl import CrawlResult
from scout.schemas.job import JobStatus

logger = logging.getLogger(__name__)

ANALYSIS_CONCURRENCY = 3
BATCH_DELAY_S = 1.0

NO_CRAWLS_ERROR = "None of the URLs could be crawled. Please check the URLs and try again."
NO_ANALYSES_ERROR = (
    "Analysis failed for all sites. This may be a temporary API issue — please try again."
)


class Crawler(Protocol):
    async def crawl(self, url: str) -> CrawlResult: ...


class Analyzer(Protocol):
    async def analyze_site(
        self,
        crawl: CrawlResult,
        category: str | None = None,
        api_key: str | None = None,
        budget: RepromptBudget | None = None,
    ) -> UIAnalysis: ...


class BriefGenerator(Protocol):
    async def generate_brief(
        self,
        analyses: list[UIAnalysis],
        category: str,
        goal: str,
        api_key: str | None = None,
    ) -> DesignBrief: ...


class Storage(Protocol):
    async def save_analysis(
        self, analysis: UIAnalysis, category: str, tags: list[str] | None = None,
    ) -> str: ...

    async def save_brief(self, brief: DesignBrief) -> str: ...


def hostname(url: str) -> str:
    return urlparse(url).hostname or url


class PipelineRunner:
    """Runs jobs held in a ``JobRegistry``.

    Pipeline flow:
        crawl (sequential) → analyze (batches of ``concurrency``) → brief
        → persist

    A site that fails to crawl or analyze is logged and dropped. The job
    only fails when a whole phase produces nothing, or on an unexpected
    error; in every case ``run()`` returns normally.
    """

    def __init__(
        self,
        registry: JobRegistry,
        crawler: Crawler,
        analyzer: Analyzer,
        brief_generator: BriefGenerator,
        storage: Storage | None = None,
        *,
        concurrency: int = ANALYSIS_CONCURRENCY,
        batch_delay_s: float = BATCH_DELAY_S,
        budget_factory: Callable[[], RepromptBudget] = RepromptBudget,
    ) -> None:
        self.registry = registry
        self.crawler = crawler
        self.analyzer = analyzer
        self.brief_generator = brief_generator
        self.storage = storage
        self.concurrency = max(1, concurrency)
        self.batch_delay_s = batch_delay_s
        self.budget_factory = budget_factory

    async def run(self, job_id: str, api_key: str | None = None) -> None:
        try:
            await self._run(job_id, api_key)
        except Exception as exc:
            logger.exception("Pipeline error for job %s", job_id)
            self._fail(job_id, str(exc) or "An unexpected error occurred.")

    def _fail(self, job_id: str, message: str) -> None:
        try:
            if not self.registry.get(job_id).status.is_terminal:
                self.registry.update(job_id, status=JobStatus.ERROR, error=message)
        except Exception:
            logger.exception("Could not mark job %s as failed", job_id)

    async def _run(self, job_id: str, api_key: str | None) -> None:
        config = self.registry.get(job_id).config

        crawls = await self._crawl_phase(job_id, config.urls)
        if not crawls:
            self.registry.update(job_id, status=JobStatus.ERROR, error=NO_CRAWLS_ERROR)
            return

        analyses = await self._analyze_phase(job_id, crawls, config.category, api_key)
        if not analyses:
            self.registry.update(job_id, status=JobStatus.ERROR, error=NO_ANALYSES_ERROR)
            return

        self.registry.update(
            job_id,
            status=JobStatus.GENERATING,
            analyses=analyses,
            progress={"current_step": "Generating design brief..."},
        )
        brief = await self.brief_generator.generate_brief(
            analyses, config.category, config.goal, api_key,
        )
        await self._persist(analyses, brief, config.category)

        self.registry.update(
            job_id,
            status=JobStatus.COMPLETE,
            result=brief,
            progress={"brief_generated": True, "current_step": "Complete!"},
        )
        logger.info("Job %s complete: brief %s", job_id, brief.id)

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    async def _crawl_phase(self, job_id: str, urls: list[str]) -> list[CrawlResult]:
        self.registry.update(
            job_id,
            status=JobStatus.CRAWLING,
            progress={"current_step": f"Crawling {hostname(urls[0])}..."},
        )

        results: list[CrawlResult] = []
        for i, url in enumerate(urls, 1):
            self.registry.update(
                job_id,
                progress={"current_step": f"Crawling {hostname(url)} ({i}/{len(urls)})..."},
            )
            try:
                results.append(await self.crawler.crawl(url))
            except Exception:
                logger.exception("Failed to crawl %s", url)
                continue
            self.registry.update(job_id, progress={"sites_crawled": len(results)})
        return results

    async def _analyze_phase(
        self,
        job_id: str,
        crawls: list[CrawlResult],
        category: str,
        api_key: str | None,
    ) -> list[UIAnalysis]:
        self.registry.update(
            job_id,
            status=JobStatus.ANALYZING,
            progress={
                "sites_crawled": len(crawls),
                "current_step": f"Analyzing {hostname(crawls[0].url)}...",
            },
        )

        budget = self.budget_factory()
        analyses: list[UIAnalysis] = []
        total = len(crawls)
        for start in range(0, total, self.concurrency):
            if start and self.batch_delay_s:
                await asyncio.sleep(self.batch_delay_s)

            batch = crawls[start:start + self.concurrency]
            hosts = ", ".join(hostname(c.url) for c in batch)
            span = f"{start + 1}" if len(batch) == 1 else f"{start + 1}-{start + len(batch)}"
            self.registry.update(
                job_id, progress={"current_step": f"Analyzing {hosts} ({span}/{total})..."},
            )

            # gather() keeps input order, so results line up with ``batch``
            outcomes = await asyncio.gather(
                *(self.analyzer.analyze_site(c, category, api_key, budget) for c in batch),
                return_exceptions=True,
            )
            for crawl, outcome in zip(batch, outcomes):
                if isinstance(outcome, BaseException):
                    if not isinstance(outcome, Exception):
                        raise outcome
                    logger.error(
                        "Failed to analyze %s", crawl.url,
                        exc_info=(type(outcome), outcome, outcome.__traceback__),
                    )
                else:
                    analyses.append(outcome)

            self.registry.update(job_id, progress={"sites_analyzed": len(analyses)})

        stats = budget.stats
        if stats["total_reprompts"]:
            logger.info(
                "Reprompted %d time(s) across %d site(s)",
                stats["total_reprompts"], stats["sites_reprompted"],
            )
        return analyses

    async def _persist(
        self, analyses: list[UIAnalysis], brief: DesignBrief, category: str,
    ) -> None:
        """Save results; storage failures never affect the job."""
        if self.storage is None:
            return
        try:
            for analysis in analyses:
                await self.storage.save_analysis(analysis, category)
            await self.storage.save_brief(brief)
        except Exception:
            logger.exception("Failed to save results for brief %s", brief.id)
