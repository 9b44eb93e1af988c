"""Tests for the free-text input suggester."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock

import pytest

from scout.agents.suggester.agent import SuggesterAgent, parse_suggestion
from scout.errors import InputValidationError
from scout.shared.llm_client import DryRunClient


class TestParseSuggestion:
    def test_filters_invalid_urls_and_caps_at_five(self) -> None:
        raw = json.dumps({
            "urls": ["https://a.com", "not a url", "ftp://files.test"]
            + [f"https://site{i}.com" for i in range(6)],
            "category": "healthcare",
            "goal": "Clinic booking site",
        })
        result = parse_suggestion(raw, "clinic")
        assert result["urls"] == ["https://a.com"] + [f"https://site{i}.com" for i in range(4)]
        assert result["category"] == "healthcare"
        assert result["goal"] == "Clinic booking site"

    def test_fallbacks(self) -> None:
        result = parse_suggestion('{"category": "blog"}', "a blog about tea")
        assert result == {"urls": [], "category": "saas-landing", "goal": "a blog about tea"}

    def test_no_json_raises(self) -> None:
        with pytest.raises(ValueError):
            parse_suggestion("no idea", "x")


class TestSuggesterAgent:
    @pytest.mark.asyncio
    async def test_suggest(self) -> None:
        client = AsyncMock()
        client.complete = AsyncMock(return_value='{"urls": ["https://linear.app"], "category": "startup"}')

        result = await SuggesterAgent(client).suggest("  landing page like Linear  ", api_key="k")

        assert result["urls"] == ["https://linear.app"]
        assert result["goal"] == "landing page like Linear"
        kwargs = client.complete.await_args.kwargs
        assert kwargs["messages"] == [{"role": "user", "content": "landing page like Linear"}]
        assert kwargs["max_tokens"] == 1024
        assert kwargs["api_key"] == "k"

    @pytest.mark.asyncio
    async def test_empty_prompt_rejected(self) -> None:
        client = AsyncMock()
        with pytest.raises(InputValidationError, match="Prompt is required"):
            await SuggesterAgent(client).suggest("   ")
        client.complete.assert_not_called()

    @pytest.mark.asyncio
    async def test_dry_run_routing(self) -> None:
        result = await SuggesterAgent(DryRunClient()).suggest("dev tool landing page")
        assert result["urls"] == ["https://linear.app", "https://stripe.com"]
