"""Tests for the JSON-file library storage."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from scout.schemas.brief import DesignBrief
from scout.shared.storage import LocalStorage

from conftest import make_analysis


@pytest.fixture
def storage(tmp_path: Path) -> LocalStorage:
    return LocalStorage(tmp_path / "library")


class TestAnalyses:
    @pytest.mark.asyncio
    async def test_save_and_load(self, storage: LocalStorage) -> None:
        entry_id = await storage.save_analysis(make_analysis("https://a.com"), "saas-landing", tags=["hero"])

        assert (storage.root / "analyses" / f"{entry_id}.json").exists()
        entries = await storage.get_by_category("saas-landing")
        assert len(entries) == 1
        assert entries[0].id == entry_id
        assert entries[0].url == "https://a.com"
        assert entries[0].tags == ["hero"]
        assert entries[0].analysis.scores.typography.score == 7

    @pytest.mark.asyncio
    async def test_category_filter(self, storage: LocalStorage) -> None:
        await storage.save_analysis(make_analysis("https://a.com"), "saas-landing")
        await storage.save_analysis(make_analysis("https://b.com"), "healthcare")

        assert [e.url for e in await storage.get_by_category("healthcare")] == ["https://b.com"]
        assert len(await storage.get_by_category("all")) == 2
        assert len(await storage.get_by_category()) == 2

    @pytest.mark.asyncio
    async def test_empty_library(self, storage: LocalStorage) -> None:
        assert await storage.get_by_category() == []
        assert await storage.get_briefs() == []


class TestBriefs:
    @pytest.mark.asyncio
    async def test_newest_first(self, storage: LocalStorage) -> None:
        now = datetime.now(timezone.utc)
        old = DesignBrief(category="saas-landing", goal="old", created_at=(now - timedelta(days=1)).isoformat())
        new = DesignBrief(category="saas-landing", goal="new", created_at=now.isoformat())
        await storage.save_brief(old)
        await storage.save_brief(new)

        assert [b.goal for b in await storage.get_briefs("saas-landing")] == ["new", "old"]

    @pytest.mark.asyncio
    async def test_unreadable_files_are_skipped(self, storage: LocalStorage, brief: DesignBrief) -> None:
        await storage.save_brief(brief)
        (storage.root / "briefs" / "broken.json").write_text("{not json", encoding="utf-8")

        briefs = await storage.get_briefs("all")
        assert [b.id for b in briefs] == [brief.id]
