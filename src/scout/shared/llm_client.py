"""Async OpenAI-SDK client pointed at OpenRouter.

Every model call in the pipeline goes through ``LLMClient.complete``. Any
vision-capable model can be used by changing ``SCOUT_MODEL``.
"""

from __future__ import annotations

import asyncio
import json
import logging
import random
import re
from typing import Any

from openai import (
    APIConnectionError,
    APITimeoutError,
    AsyncOpenAI,
    BadRequestError,
    RateLimitError,
)

from scout.config import Settings
from scout.errors import LLMResponseError

logger = logging.getLogger(__name__)

# Retry settings for rate-limit (429) errors
_RATE_LIMIT_MAX_RETRIES = 6
_RATE_LIMIT_BASE_DELAY = 2  # seconds, floor for exponential backoff

_DEFAULT_HEADERS = {
    "HTTP-Referer": "https://github.com/design-scout/design-scout",
    "X-Title": "Design Scout",
}

JSON_INSTRUCTION = (
    "\n\nCRITICAL: You MUST respond with valid JSON only. "
    "No markdown code fences. No preamble text. No explanation outside the JSON structure. "
    "Begin your response with an opening brace `{` and end with a closing brace `}`."
)


def _parse_retry_after(exc: RateLimitError) -> float | None:
    """Extract the suggested retry delay from a rate limit error.

    Checks the ``Retry-After`` header first, then falls back to parsing
    the "try again in Xs / Xms" substring from the error message.
    """
    try:
        headers = exc.response.headers  # type: ignore[union-attr]
        if retry_after := headers.get("retry-after"):
            return float(retry_after)
    except (AttributeError, TypeError, ValueError):
        pass

    m = re.search(r"try again in (\d+(?:\.\d+)?)\s*(ms|s)\b", str(exc), re.IGNORECASE)
    if m:
        value = float(m.group(1))
        return value / 1000 if m.group(2).lower() == "ms" else value

    return None


def _is_response_format_rejection(exc: BadRequestError) -> bool:
    msg = str(exc).lower()
    return "response_format" in msg or "json_object" in msg


def image_part(b64: str, media_type: str = "image/png") -> dict[str, Any]:
    """OpenAI vision content part for a base64-encoded image."""
    return {
        "type": "image_url",
        "image_url": {"url": f"data:{media_type};base64,{b64}"},
    }


class LLMClient:
    """Thin async wrapper around the OpenAI SDK.

    ``complete`` sends one chat request and returns the text content. In
    JSON mode it appends a JSON-only instruction to the system prompt and
    requests ``response_format=json_object``; if the provider rejects that
    parameter the request is retried once without it.
    """

    def __init__(self, settings: Settings | None = None, *, require_key: bool = True) -> None:
        self.settings = settings or Settings.from_env()
        self._client: AsyncOpenAI | None = None
        if require_key or self.settings.api_key:
            self._client = self._build(self.settings.require_api_key())
        self._key_clients: dict[str, AsyncOpenAI] = {}

    def _build(self, api_key: str) -> AsyncOpenAI:
        return AsyncOpenAI(
            api_key=api_key,
            base_url=self.settings.base_url,
            default_headers=_DEFAULT_HEADERS,
        )

    def _client_for(self, api_key: str | None) -> AsyncOpenAI:
        """Per-request keys (e.g. from the ``X-OpenRouter-Key`` header) get their own client.

        With ``require_key=False`` and no server key, every call must bring
        its own key or ``ConfigError`` is raised.
        """
        if not api_key or api_key == self.settings.api_key:
            if self._client is None:
                self._client = self._build(self.settings.require_api_key())
            return self._client
        if api_key not in self._key_clients:
            self._key_clients[api_key] = self._build(api_key)
        return self._key_clients[api_key]

    async def _call_with_retry(self, client: AsyncOpenAI, **kwargs: Any) -> Any:
        """Call chat.completions.create with exponential backoff on 429 errors.

        Waits at least as long as the provider's suggested retry-after time,
        uses exponential backoff as a floor, and adds ±25% jitter so parallel
        analyses don't retry in lockstep.
        """
        for attempt in range(_RATE_LIMIT_MAX_RETRIES):
            try:
                return await client.chat.completions.create(**kwargs)
            except RateLimitError as exc:
                msg = str(exc).lower()
                if "request too large" in msg or "context_length_exceeded" in msg:
                    logger.error("Request exceeds token limit (not retryable): %s", exc)
                    raise
                if attempt == _RATE_LIMIT_MAX_RETRIES - 1:
                    raise

                backoff = _RATE_LIMIT_BASE_DELAY * (2 ** attempt)
                suggested = _parse_retry_after(exc)
                base_delay = max(suggested or 0.0, backoff)
                jitter = random.uniform(-0.25 * base_delay, 0.25 * base_delay)
                delay = max(1.0, base_delay + jitter)

                logger.warning(
                    "Rate limited (429), retrying in %.1fs (attempt %d/%d, "
                    "suggested=%.1fs, backoff=%ds): %s",
                    delay, attempt + 1, _RATE_LIMIT_MAX_RETRIES,
                    suggested or 0.0, backoff, exc,
                )
                await asyncio.sleep(delay)
            except (APIConnectionError, APITimeoutError) as exc:
                if attempt == _RATE_LIMIT_MAX_RETRIES - 1:
                    raise
                backoff = _RATE_LIMIT_BASE_DELAY * (2 ** min(attempt, 3))
                jitter = random.uniform(-0.25 * backoff, 0.25 * backoff)
                delay = max(1.0, backoff + jitter)
                logger.warning(
                    "Connection error, retrying in %.1fs (attempt %d/%d): %s",
                    delay, attempt + 1, _RATE_LIMIT_MAX_RETRIES, exc,
                )
                await asyncio.sleep(delay)

    async def complete(
        self,
        *,
        system: str,
        messages: list[dict[str, Any]],
        json_mode: bool = True,
        max_tokens: int | None = None,
        model: str | None = None,
        api_key: str | None = None,
    ) -> str:
        """Single chat request; returns the assistant text.

        Raises ``LLMResponseError`` when the response has no content.
        Transport errors propagate after retries.
        """
        client = self._client_for(api_key)
        model = model or self.settings.model

        system_content = system + JSON_INSTRUCTION if json_mode else system
        kwargs: dict[str, Any] = {
            "model": model,
            "max_tokens": max_tokens or self.settings.max_tokens,
            "messages": [{"role": "system", "content": system_content}, *messages],
        }

        # Attempt 1 requests json_object; attempt 2 relies on the prompt alone.
        use_response_format = json_mode
        while True:
            if use_response_format:
                kwargs["response_format"] = {"type": "json_object"}
            else:
                kwargs.pop("response_format", None)
            try:
                response = await self._call_with_retry(client, **kwargs)
                break
            except BadRequestError as exc:
                if not use_response_format or not _is_response_format_rejection(exc):
                    raise
                logger.warning(
                    "Model %s may not support response_format, retrying without it",
                    model,
                )
                use_response_format = False

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise LLMResponseError("No content in LLM response")
        return content


# ======================================================================
# Dry-run mock client (zero API calls)
# ======================================================================

def _dry_score(score: int, note: str) -> dict[str, Any]:
    return {"score": score, "justification": note}


_DRY_RUN_ANALYSIS = json.dumps({
    "scores": {
        "visualHierarchy": _dry_score(8, "Headline uses size, weight and colour together above the fold"),
        "colorUsage": _dry_score(7, "Palette keeps to neutrals with one saturated accent on CTAs"),
        "typography": _dry_score(7, "Two-level type scale with tight heading line-height"),
        "spacing": _dry_score(6, "Section gaps around 64px but card padding varies by section"),
        "ctaClarity": _dry_score(8, "Single solid primary button per viewport with specific verb copy"),
        "navigation": _dry_score(7, "Six top-level items with logo linking home at top-left"),
        "mobileReadiness": _dry_score(6, "Touch targets near 44px though footer links sit too close"),
        "consistency": _dry_score(7, "Buttons and cards share radius and shadow across sections"),
        "accessibility": _dry_score(5, "Muted grey body text on white looks below 4.5:1 contrast"),
        "engagement": _dry_score(6, "Testimonial carousel forms the peak moment, ending is a plain footer"),
    },
    "principleScores": {
        "cognitiveLoad": _dry_score(7, "Features are chunked in groups of three with icons"),
        "trustSignals": _dry_score(6, "Customer logo strip at fold but no named testimonials with photos"),
        "affordanceClarity": _dry_score(7, "Buttons are raised with shadow while links are underlined"),
        "feedbackCompleteness": _dry_score(5, "No visible hover or loading state on the signup form"),
        "conventionAdherence": _dry_score(8, "Header layout follows the usual SaaS pattern with login top-right"),
        "gestaltCompliance": _dry_score(7, "Common-region cards group pricing tiers clearly"),
        "copyQuality": _dry_score(6, "Hero headline is scannable but the intro paragraph is happy talk"),
        "conversionPsychology": _dry_score(6, "Pricing anchors on the enterprise tier, no loss-aversion framing"),
    },
    "overallScore": 0,
    "patterns": [
        {"name": "Logo strip", "description": "Customer logos directly under the hero",
         "location": "above-fold", "effectiveness": "high", "principle": "Social proof"},
    ],
    "antiPatterns": [
        {"name": "Low-contrast body text", "description": "Light grey paragraphs on white",
         "severity": "moderate", "category": "accessibility",
         "recommendation": "Darken body text to at least #4B5563"},
    ],
    "designTokens": {"primaryColors": ["#4F46E5"], "fontFamilies": ["Inter"]},
    "strengths": ["Clear single primary CTA (Hick's Law)"],
    "weaknesses": ["Body text contrast under WCAG AA"],
    "stealWorthy": ["Logo strip placement directly below the hero"],
})

_DRY_RUN_BRIEF = json.dumps({
    "executiveSummary": "Dry run brief. No model was called.",
    "targetAudience": "Placeholder audience",
    "recommendedApproach": {"layout": "Z-pattern landing page"},
    "psychologyStrategy": {"trustBuilding": "Logo strip at fold, testimonials mid-page"},
    "designSystem": {"suggestedPalette": ["#4F46E5", "#111827"], "suggestedFonts": ["Inter"]},
    "buildPrompts": {"overall": "Build a responsive landing page with Tailwind CSS."},
})

_DRY_RUN_SUGGESTION = json.dumps({
    "urls": ["https://linear.app", "https://stripe.com"],
    "category": "saas-landing",
    "goal": "Dry run suggestion",
})


class DryRunClient:
    """Drop-in replacement for ``LLMClient`` that makes zero API calls."""

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []

    async def complete(
        self,
        *,
        system: str,
        messages: list[dict[str, Any]],
        json_mode: bool = True,
        max_tokens: int | None = None,
        model: str | None = None,
        api_key: str | None = None,
    ) -> str:
        self.calls.append({"system": system, "messages": messages, "max_tokens": max_tokens})
        key = self._detect_call(system)
        logger.info("[dry-run] %s call", key)
        return {
            "analysis": _DRY_RUN_ANALYSIS,
            "brief": _DRY_RUN_BRIEF,
            "suggest": _DRY_RUN_SUGGESTION,
        }[key]

    @staticmethod
    def _detect_call(system: str) -> str:
        """Guess which agent is calling from its system prompt."""
        if "design brief" in system.lower():
            return "brief"
        if "suggest" in system.lower():
            return "suggest"
        return "analysis"
