"""Crawl results and their on-disk cache record."""

from datetime import datetime, timezone

from pydantic import Field

from scout.schemas.base import ScoutModel


class Screenshot(ScoutModel):
    """One captured section of a page.

    ``base64`` holds the PNG payload in memory only. It is never written
    to the crawl cache; on a cache hit it is re-read from ``filepath``.
    """

    filepath: str
    base64: str = ""
    viewport: str = ""
    section: str = ""
    scroll_depth: int | None = None
    label: str | None = None


class CrawlResult(ScoutModel):
    url: str
    page_title: str = ""
    meta_description: str | None = None
    screenshots: list[Screenshot] = []
    fonts: list[str] = []
    colors: list[str] = []
    tech_stack: list[str] = []
    crawled_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )


class CachedScreenshot(ScoutModel):
    """Screenshot metadata as stored in the cache (no payload field)."""

    filepath: str
    viewport: str = ""
    section: str = ""
    scroll_depth: int | None = None
    label: str | None = None


class CachedCrawl(ScoutModel):
    """Cache record: all crawl metadata plus the write time in epoch ms."""

    url: str
    page_title: str = ""
    meta_description: str | None = None
    fonts: list[str] = []
    colors: list[str] = []
    tech_stack: list[str] = []
    crawled_at: str = ""
    cached_at: int
    screenshots: list[CachedScreenshot] = []
