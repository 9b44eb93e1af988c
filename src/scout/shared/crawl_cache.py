"""File-based crawl cache.

Stores ``CrawlResult`` metadata (never the base64 payloads) as
``<cache_dir>/<sha256(url)>.json``. On a hit the screenshot files are
re-read from their original paths.
"""

from __future__ import annotations

import asyncio
import base64
import hashlib
import json
import logging
import os
import time
import uuid
from pathlib import Path
from typing import Callable

from pydantic import ValidationError

from scout.schemas.crawl import CachedCrawl, CachedScreenshot, CrawlResult, Screenshot

logger = logging.getLogger(__name__)

DEFAULT_CACHE_DIR = "./output/.crawl-cache"
DEFAULT_TTL_MS = 60 * 60 * 1000  # 1 hour

Clock = Callable[[], int]
"""Returns the current time in epoch milliseconds."""


def _now_ms() -> int:
    return int(time.time() * 1000)


def cache_key(url: str) -> str:
    return hashlib.sha256(url.encode("utf-8")).hexdigest()


class CrawlCache:
    """TTL cache of crawl metadata, keyed by a hash of the URL.

    Reads and writes never raise: a broken cache only costs a re-crawl.
    """

    def __init__(
        self,
        cache_dir: str | Path = DEFAULT_CACHE_DIR,
        clock: Clock = _now_ms,
    ) -> None:
        self.cache_dir = Path(cache_dir)
        self._clock = clock

    def path_for(self, url: str) -> Path:
        return self.cache_dir / f"{cache_key(url)}.json"

    def _expired(self, cached_at: int, ttl_ms: int) -> bool:
        return ttl_ms <= 0 or self._clock() - cached_at > ttl_ms

    # ------------------------------------------------------------------
    # Public async API (file I/O runs in a worker thread)
    # ------------------------------------------------------------------

    async def get(self, url: str, ttl_ms: int = DEFAULT_TTL_MS) -> CrawlResult | None:
        return await asyncio.to_thread(self._get_sync, url, ttl_ms)

    async def set(self, url: str, result: CrawlResult) -> None:
        await asyncio.to_thread(self._set_sync, url, result)

    async def clean_expired(self, ttl_ms: int = DEFAULT_TTL_MS) -> int:
        return await asyncio.to_thread(self._clean_sync, ttl_ms)

    # ------------------------------------------------------------------
    # Sync implementations
    # ------------------------------------------------------------------

    def _get_sync(self, url: str, ttl_ms: int) -> CrawlResult | None:
        path = self.path_for(url)
        try:
            cached = CachedCrawl.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValueError, ValidationError):
            return None

        if self._expired(cached.cached_at, ttl_ms):
            path.unlink(missing_ok=True)
            logger.debug("Crawl cache expired for %s", url)
            return None

        screenshots: list[Screenshot] = []
        for shot in cached.screenshots:
            try:
                payload = Path(shot.filepath).read_bytes()
            except OSError:
                logger.debug("Cached screenshot missing: %s", shot.filepath)
                continue
            screenshots.append(Screenshot(
                **shot.model_dump(),
                base64=base64.b64encode(payload).decode(),
            ))

        if not screenshots:
            path.unlink(missing_ok=True)
            return None

        logger.info(
            "Crawl cache hit for %s (%d/%d screenshots)",
            url, len(screenshots), len(cached.screenshots),
        )
        return CrawlResult(
            url=cached.url,
            page_title=cached.page_title,
            meta_description=cached.meta_description,
            screenshots=screenshots,
            fonts=cached.fonts,
            colors=cached.colors,
            tech_stack=cached.tech_stack,
            crawled_at=cached.crawled_at,
        )

    def _set_sync(self, url: str, result: CrawlResult) -> None:
        record = CachedCrawl(
            url=result.url,
            page_title=result.page_title,
            meta_description=result.meta_description,
            fonts=result.fonts,
            colors=result.colors,
            tech_stack=result.tech_stack,
            crawled_at=result.crawled_at,
            cached_at=self._clock(),
            screenshots=[
                CachedScreenshot(**s.model_dump(exclude={"base64"}))
                for s in result.screenshots
            ],
        )
        path = self.path_for(url)
        tmp = path.with_suffix(f".{uuid.uuid4().hex}.tmp")
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(record.to_json_dict()), encoding="utf-8")
            os.replace(tmp, path)
        except OSError as exc:
            logger.debug("Crawl cache write failed for %s: %s", url, exc)
            tmp.unlink(missing_ok=True)

    def _clean_sync(self, ttl_ms: int) -> int:
        if not self.cache_dir.is_dir():
            return 0

        removed = 0
        for path in self.cache_dir.glob("*.json"):
            try:
                cached = CachedCrawl.model_validate_json(path.read_text(encoding="utf-8"))
                expired = self._expired(cached.cached_at, ttl_ms)
            except (OSError, ValueError, ValidationError):
                expired = True  # corrupt record
            if expired:
                path.unlink(missing_ok=True)
                removed += 1
        return removed
