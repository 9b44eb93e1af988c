"""Local JSON storage for analyses and briefs.

Layout::

    <root>/analyses/<entry id>.json   LibraryEntry
    <root>/briefs/<brief id>.json     DesignBrief
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Callable, TypeVar

from pydantic import ValidationError

from scout.schemas.analysis import UIAnalysis
from scout.schemas.base import ScoutModel
from scout.schemas.brief import DesignBrief
from scout.schemas.library import LibraryEntry

logger = logging.getLogger(__name__)

DEFAULT_LIBRARY_DIR = "./output/library"

M = TypeVar("M", bound=ScoutModel)


class LocalStorage:
    """Read/write contract used by the pipeline, backed by JSON files."""

    def __init__(self, root: str | Path = DEFAULT_LIBRARY_DIR) -> None:
        self.root = Path(root)

    async def save_analysis(
        self, analysis: UIAnalysis, category: str, tags: list[str] | None = None,
    ) -> str:
        entry = LibraryEntry(
            category=category, url=analysis.url, analysis=analysis, tags=tags or [],
        )
        return await asyncio.to_thread(self._save, "analyses", entry.id, entry)

    async def save_brief(self, brief: DesignBrief) -> str:
        return await asyncio.to_thread(self._save, "briefs", brief.id, brief)

    async def get_by_category(self, category: str | None = None) -> list[LibraryEntry]:
        """Stored analyses, newest first. ``None`` or ``"all"`` returns everything."""
        def keep(entry: LibraryEntry) -> bool:
            return category in (None, "all") or entry.category == category

        return await asyncio.to_thread(self._load, "analyses", LibraryEntry, keep)

    async def get_briefs(self, category: str | None = None) -> list[DesignBrief]:
        def keep(brief: DesignBrief) -> bool:
            return category in (None, "all") or brief.category == category

        return await asyncio.to_thread(self._load, "briefs", DesignBrief, keep)

    # ------------------------------------------------------------------

    def _save(self, collection: str, item_id: str, item: ScoutModel) -> str:
        directory = self.root / collection
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / f"{item_id}.json"
        path.write_text(json.dumps(item.to_json_dict(), indent=2), encoding="utf-8")
        logger.info("Saved %s", path)
        return item_id

    def _load(
        self, collection: str, model: type[M], keep: Callable[[M], bool],
    ) -> list[M]:
        directory = self.root / collection
        if not directory.is_dir():
            return []

        items: list[M] = []
        for path in directory.glob("*.json"):
            try:
                item = model.model_validate_json(path.read_text(encoding="utf-8"))
            except (OSError, ValidationError) as exc:
                logger.warning("Skipping unreadable library file %s: %s", path, exc)
                continue
            if keep(item):
                items.append(item)

        items.sort(key=lambda i: i.created_at, reverse=True)
        return items
