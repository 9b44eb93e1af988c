"""Input suggester: free-text request -> urls, category and goal."""

from __future__ import annotations

import logging

from scout.agents.base import BaseAgent
from scout.agents.suggester.prompts import SYSTEM_PROMPT
from scout.categories import CATEGORIES, DEFAULT_CATEGORY
from scout.errors import InputValidationError
from scout.schemas.config import is_valid_url
from scout.shared.parsing import coerce_str, coerce_str_list, extract_json

logger = logging.getLogger(__name__)

MAX_SUGGESTED_URLS = 5
SUGGEST_MAX_TOKENS = 1024


def parse_suggestion(raw: str, prompt: str) -> dict[str, object]:
    """Keep only valid URLs, fall back on the default category and the prompt.

    Raises ``ValueError`` when the response holds no JSON object.
    """
    data = extract_json(raw)
    urls = [u.strip() for u in coerce_str_list(data.get("urls")) if is_valid_url(u.strip())]
    category = coerce_str(data.get("category"))
    return {
        "urls": urls[:MAX_SUGGESTED_URLS],
        "category": category if category in CATEGORIES else DEFAULT_CATEGORY,
        "goal": coerce_str(data.get("goal")).strip() or prompt,
    }


class SuggesterAgent(BaseAgent):
    @property
    def name(self) -> str:
        return "Suggester"

    def get_system_prompt(self) -> str:
        return SYSTEM_PROMPT

    async def suggest(self, prompt: str, api_key: str | None = None) -> dict[str, object]:
        prompt = (prompt or "").strip()
        if not prompt:
            raise InputValidationError("Prompt is required.")

        raw = await self.complete(
            [{"role": "user", "content": prompt}],
            max_tokens=SUGGEST_MAX_TOKENS,
            api_key=api_key,
        )
        suggestion = parse_suggestion(raw, prompt)
        logger.info(
            "Suggested %d URL(s) in %s", len(suggestion["urls"]), suggestion["category"],
        )
        return suggestion
