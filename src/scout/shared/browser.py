"""Playwright crawler: screenshots and lightweight design metadata per site."""

from __future__ import annotations

import asyncio
import base64
import logging
import re
import time
from pathlib import Path
from types import TracebackType
from typing import Iterable
from urllib.parse import urlparse

from playwright.async_api import Browser, Page, Playwright, async_playwright

from scout.schemas.crawl import CrawlResult, Screenshot
from scout.shared.crawl_cache import DEFAULT_TTL_MS, CrawlCache
from scout.shared.tokens import clean_font_family, deduplicate_colors

logger = logging.getLogger(__name__)

DEFAULT_WIDTH = 1440
DEFAULT_HEIGHT = 900
DEFAULT_SECTIONS = ("full", "above-fold", "mobile", "tablet")

MOBILE_VIEWPORT = (390, 844)
TABLET_VIEWPORT = (768, 1024)

SCROLL_DEPTHS = {
    "above-fold": 0,
    "hero": 5,
    "full": 50,
    "footer": 95,
    "tablet": 0,
    "mobile": 0,
}

_HERO_SELECTORS = (
    "header + section",
    "header + div",
    '[class*="hero"]',
    '[class*="Hero"]',
    '[id*="hero"]',
    "main > section:first-child",
    "main > div:first-child",
)

_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36"
)

_TAILWIND_RE = re.compile(r"\b(flex|grid|gap-|p-|m-|text-|bg-|rounded-)")


def viewport_label(section: str, width: int, height: int) -> str:
    if section == "mobile":
        return "mobile-{}x{}".format(*MOBILE_VIEWPORT)
    if section == "tablet":
        return "tablet-{}x{}".format(*TABLET_VIEWPORT)
    return f"desktop-{width}x{height}"


def detect_tech_stack(
    html: str,
    *,
    gatsby: bool = False,
    tailwind_class: bool = False,
    framer_component: bool = False,
) -> list[str]:
    """Guess frameworks and site builders from page markup."""
    stack: list[str] = []
    if "__next" in html or "_next" in html:
        stack.append("Next.js")
    if "__nuxt" in html:
        stack.append("Nuxt")
    if gatsby:
        stack.append("Gatsby")
    if "wp-content" in html:
        stack.append("WordPress")
    if "Shopify" in html:
        stack.append("Shopify")
    if "webflow" in html:
        stack.append("Webflow")
    if "framer" in html:
        stack.append("Framer")
    if "wix.com" in html:
        stack.append("Wix")
    if "squarespace" in html:
        stack.append("Squarespace")
    if tailwind_class or _TAILWIND_RE.search(html):
        stack.append("Tailwind (likely)")
    if framer_component:
        stack.append("Framer Motion")
    return stack


def _site_slug(url: str) -> str:
    return (urlparse(url).hostname or "site").replace(".", "-")


# Collects raw colour/font strings: :root custom properties first, then
# computed styles of the first 200 elements if those yield too little.
_EXTRACT_TOKENS_JS = r"""() => {
    const fonts = [];
    const colors = [];
    for (const sheet of Array.from(document.styleSheets)) {
        let rules;
        try { rules = Array.from(sheet.cssRules); } catch (e) { continue; }
        for (const rule of rules) {
            if (!(rule instanceof CSSStyleRule) || rule.selectorText !== ':root') continue;
            for (let i = 0; i < rule.style.length; i++) {
                const name = rule.style[i];
                const value = rule.style.getPropertyValue(name).trim();
                if (!value) continue;
                if (/--[\w-]*(colou?r|clr)/i.test(name)) colors.push(value);
                if (/--[\w-]*font/i.test(name)) fonts.push(value);
            }
        }
    }
    if (new Set(colors).size < 3 || new Set(fonts).size < 2) {
        for (const el of Array.from(document.querySelectorAll('*')).slice(0, 200)) {
            const style = window.getComputedStyle(el);
            if (style.fontFamily) fonts.push(style.fontFamily);
            if (style.color) colors.push(style.color);
            if (style.backgroundColor && style.backgroundColor !== 'rgba(0, 0, 0, 0)') {
                colors.push(style.backgroundColor);
            }
        }
    }
    return {fonts, colors};
}"""

_TECH_SIGNALS_JS = r"""() => ({
    html: document.documentElement.outerHTML,
    gatsby: Boolean(window.__GATSBY),
    tailwindClass: Boolean(document.querySelector('[class*="tailwind"], [class*="tw-"]')),
    framerComponent: Boolean(document.querySelector('[data-framer-component-type]')),
})"""


class SiteCrawler:
    """Crawls sites with a shared headless Chromium instance.

    Usage::

        async with SiteCrawler(output_dir="./output/screenshots") as crawler:
            result = await crawler.crawl("https://example.com")

    Results are looked up in and written to the crawl cache when one is
    given.
    """

    def __init__(
        self,
        *,
        output_dir: str | Path = "./output/screenshots",
        cache: CrawlCache | None = None,
        cache_ttl_ms: int = DEFAULT_TTL_MS,
        width: int = DEFAULT_WIDTH,
        height: int = DEFAULT_HEIGHT,
        sections: Iterable[str] = DEFAULT_SECTIONS,
    ) -> None:
        self.output_dir = Path(output_dir)
        self.cache = cache
        self.cache_ttl_ms = cache_ttl_ms
        self.width = width
        self.height = height
        self.sections = tuple(sections)
        self._pw: Playwright | None = None
        self._browser: Browser | None = None

    async def __aenter__(self) -> "SiteCrawler":
        self._pw = await async_playwright().start()
        self._browser = await self._pw.chromium.launch(headless=True)
        logger.info("Browser launched")
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._browser:
            await self._browser.close()
        if self._pw:
            await self._pw.stop()
        logger.info("Browser closed")

    async def crawl(self, url: str) -> CrawlResult:
        """Crawl one URL. Navigation failures propagate to the caller."""
        if self.cache is not None:
            cached = await self.cache.get(url, self.cache_ttl_ms)
            if cached is not None:
                return cached

        assert self._browser is not None, "SiteCrawler not entered"
        self.output_dir.mkdir(parents=True, exist_ok=True)

        logger.info("Crawling %s", url)
        context = await self._browser.new_context(
            viewport={"width": self.width, "height": self.height},
            user_agent=_USER_AGENT,
        )
        try:
            page = await context.new_page()
            await page.goto(url, wait_until="networkidle", timeout=30_000)
            # lazy-loaded content and entrance animations
            await page.wait_for_timeout(2000)

            page_title = await page.title()
            meta = page.locator('meta[name="description"]').first
            meta_description = (
                await meta.get_attribute("content") if await meta.count() else None
            )

            fonts, colors = await self._extract_tokens(page)
            tech_stack = await self._detect_tech(page)

            slug = _site_slug(url)
            screenshots: list[Screenshot] = []
            for section in self.sections:
                shot = await self._capture_section(page, section, slug)
                if shot is not None:
                    screenshots.append(shot)
        finally:
            await context.close()

        logger.info("Captured %d screenshots from %s", len(screenshots), url)
        result = CrawlResult(
            url=url,
            page_title=page_title,
            meta_description=meta_description,
            screenshots=screenshots,
            fonts=fonts,
            colors=colors,
            tech_stack=tech_stack,
        )
        if self.cache is not None:
            await self.cache.set(url, result)
        return result

    async def _extract_tokens(self, page: Page) -> tuple[list[str], list[str]]:
        try:
            raw = await page.evaluate(_EXTRACT_TOKENS_JS)
        except Exception as exc:
            logger.debug("Token extraction failed: %s", exc)
            return [], []
        fonts: dict[str, None] = {}
        for stack in raw.get("fonts", []):
            name = clean_font_family(stack)
            if name:
                fonts.setdefault(name, None)
        return list(fonts)[:4], deduplicate_colors(raw.get("colors", []))

    async def _detect_tech(self, page: Page) -> list[str]:
        try:
            signals = await page.evaluate(_TECH_SIGNALS_JS)
        except Exception as exc:
            logger.debug("Tech-stack detection failed: %s", exc)
            return []
        return detect_tech_stack(
            signals.get("html", ""),
            gatsby=signals.get("gatsby", False),
            tailwind_class=signals.get("tailwindClass", False),
            framer_component=signals.get("framerComponent", False),
        )

    async def _capture_section(
        self, page: Page, section: str, slug: str,
    ) -> Screenshot | None:
        """Capture one section; returns None when it can't be captured."""
        filepath = self.output_dir / f"{slug}-{section}-{int(time.time() * 1000)}.png"
        try:
            if section == "full":
                await page.screenshot(path=str(filepath), full_page=True)
            elif section == "above-fold":
                await page.screenshot(
                    path=str(filepath),
                    clip={"x": 0, "y": 0, "width": self.width, "height": self.height},
                )
            elif section == "hero":
                for selector in _HERO_SELECTORS:
                    el = page.locator(selector).first
                    if await el.count():
                        await el.screenshot(path=str(filepath))
                        break
            elif section == "footer":
                footer = page.locator("footer").first
                if await footer.count():
                    await footer.screenshot(path=str(filepath))
            elif section in ("mobile", "tablet"):
                w, h = MOBILE_VIEWPORT if section == "mobile" else TABLET_VIEWPORT
                await page.set_viewport_size({"width": w, "height": h})
                await page.wait_for_timeout(1000)
                await page.screenshot(path=str(filepath))
                await page.set_viewport_size({"width": self.width, "height": self.height})
                await page.wait_for_timeout(500)
            else:
                logger.warning("Unknown screenshot section %r", section)
                return None
        except Exception as exc:
            logger.warning("Could not capture %s for %s: %s", section, slug, exc)
            return None

        if not filepath.exists():
            return None

        payload = await asyncio.to_thread(filepath.read_bytes)
        return Screenshot(
            filepath=str(filepath),
            base64=base64.b64encode(payload).decode(),
            viewport=viewport_label(section, self.width, self.height),
            section=section,
            scroll_depth=SCROLL_DEPTHS.get(section, 0),
        )
