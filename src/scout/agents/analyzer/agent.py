"""Site analyzer: scores one crawled site on 18 UX dimensions from screenshots."""

from __future__ import annotations

import asyncio
import json
import logging
import math
from typing import Any

from pydantic.alias_generators import to_camel

from scout.agents.analyzer.prompts import (
    ANALYZE_SCREENSHOT_PROMPT,
    CATEGORY_OVERLAYS,
    SYSTEM_PROMPT,
)
from scout.agents.analyzer.validation import (
    RepromptBudget,
    ScoreFailure,
    build_rescore_prompt,
    validate_analysis_scores,
)
from scout.agents.base import BaseAgent
from scout.errors import NoScreenshotsError
from scout.schemas.analysis import (
    AntiPattern,
    CoreScores,
    DesignPattern,
    DesignTokens,
    JustifiedScore,
    PrincipleNotes,
    PrincipleScores,
    UIAnalysis,
)
from scout.schemas.crawl import CrawlResult, Screenshot
from scout.shared.llm_client import image_part
from scout.shared.parsing import (
    coerce_dict,
    coerce_dict_list,
    coerce_float,
    coerce_justified_score,
    coerce_str,
    coerce_str_list,
    extract_json,
)

logger = logging.getLogger(__name__)

SECTION_PRIORITY = ("above-fold", "hero", "full", "footer", "tablet", "mobile")
MAX_SCREENSHOTS = 6

# Rough prompt cost of one screenshot, used only to size the output budget
IMAGE_TOKEN_ESTIMATE = 1000
MIN_OUTPUT_TOKENS = 8192
MAX_OUTPUT_TOKENS = 16384

ANALYSIS_DELAY_S = 1.0


# ----------------------------------------------------------------------
# Prompt assembly
# ----------------------------------------------------------------------

def select_screenshots(screenshots: list[Screenshot]) -> list[Screenshot]:
    """Screenshots with payloads, in section priority order, capped at 6."""
    def rank(shot: Screenshot) -> int:
        try:
            return SECTION_PRIORITY.index(shot.section)
        except ValueError:
            return len(SECTION_PRIORITY)

    usable = [s for s in screenshots if s.base64]
    return sorted(usable, key=rank)[:MAX_SCREENSHOTS]


def screenshot_label(index: int, total: int, shot: Screenshot) -> str:
    parts = [shot.section or "unknown", shot.viewport or "unknown viewport"]
    if shot.scroll_depth is not None:
        parts.append(f"scroll depth {shot.scroll_depth}%")
    if shot.label:
        parts.append(shot.label)
    return f"[Screenshot {index}/{total}: {', '.join(parts)}]"


def build_context(crawl: CrawlResult) -> str:
    lines = [f"Website: {crawl.url}", f"Title: {crawl.page_title}"]
    if crawl.meta_description:
        lines.append(f"Description: {crawl.meta_description}")
    lines.append(f"Detected Fonts: {', '.join(crawl.fonts) or 'N/A'}")
    lines.append(f"Detected Tech: {', '.join(crawl.tech_stack) or 'N/A'}")
    lines.append(
        "Screenshots: "
        + ", ".join(f"{s.section} ({s.viewport})" for s in crawl.screenshots)
    )
    return "\n".join(lines)


def output_token_ceiling(image_count: int, text_length: int) -> int:
    """Output budget proportional to input size, within [8192, 16384]."""
    estimated_input = image_count * IMAGE_TOKEN_ESTIMATE + text_length // 4
    return max(MIN_OUTPUT_TOKENS, min(MAX_OUTPUT_TOKENS, estimated_input * 2))


# ----------------------------------------------------------------------
# Response parsing
# ----------------------------------------------------------------------

def _parse_scores(model: type[CoreScores] | type[PrincipleScores], raw: Any) -> Any:
    data = coerce_dict(raw)
    return model(**{
        name: JustifiedScore(**coerce_justified_score(data.get(to_camel(name))))
        for name in model.model_fields
    })


def _parse_fields(model: type, raw: Any) -> Any:
    """Build a flat model of str / list[str] fields from camelCase JSON."""
    data = coerce_dict(raw)
    values: dict[str, Any] = {}
    for name, field in model.model_fields.items():
        key = to_camel(name)
        if key not in data:
            continue
        if field.annotation == list[str]:
            values[name] = coerce_str_list(data[key])
        else:
            values[name] = coerce_str(data[key]) or field.default
    return model(**values)


def parse_analysis_response(raw: str, url: str) -> UIAnalysis:
    """Decode model output into a ``UIAnalysis``; never raises.

    Each field is decoded independently. Unparseable JSON yields a fully
    zeroed analysis that keeps the raw text.
    """
    try:
        p = extract_json(raw)
    except ValueError:
        logger.warning("Could not parse JSON from analysis of %s, keeping raw text", url)
        return UIAnalysis(url=url, raw_analysis=raw)

    return UIAnalysis(
        url=url,
        overall_score=coerce_float(p.get("overallScore")),
        scores=_parse_scores(CoreScores, p.get("scores")),
        principle_scores=_parse_scores(PrincipleScores, p.get("principleScores")),
        strengths=coerce_str_list(p.get("strengths")),
        weaknesses=coerce_str_list(p.get("weaknesses")),
        patterns=[_parse_fields(DesignPattern, d) for d in coerce_dict_list(p.get("patterns"))],
        anti_patterns=[
            _parse_fields(AntiPattern, d) for d in coerce_dict_list(p.get("antiPatterns"))
        ],
        design_tokens=_parse_fields(DesignTokens, p.get("designTokens")),
        principle_notes=_parse_fields(PrincipleNotes, p.get("principleNotes")),
        steal_worthy=coerce_str_list(p.get("stealWorthy")),
        raw_analysis=raw,
    )


def merge_rescore(analysis: UIAnalysis, correction: dict[str, Any]) -> UIAnalysis:
    """Overlay corrected dimensions; dimensions not in ``correction`` are kept."""
    update: dict[str, Any] = {}
    for attr, model in (("scores", CoreScores), ("principle_scores", PrincipleScores)):
        corrected = coerce_dict(correction.get(to_camel(attr)))
        changes = {
            name: JustifiedScore(**coerce_justified_score(corrected[to_camel(name)]))
            for name in model.model_fields
            if to_camel(name) in corrected
        }
        if changes:
            update[attr] = getattr(analysis, attr).model_copy(update=changes)
    return analysis.model_copy(update=update)


def compute_overall_score(analysis: UIAnalysis) -> float:
    """Weighted mean: 60% core dimensions, 40% principle dimensions, 1 decimal."""
    core = [js.score for _, js in analysis.core_dimensions()]
    principle = [js.score for _, js in analysis.principle_dimensions()]
    weighted = (sum(core) / len(core)) * 0.6 + (sum(principle) / len(principle)) * 0.4
    return math.floor(weighted * 10 + 0.5) / 10


# ----------------------------------------------------------------------
# Agent
# ----------------------------------------------------------------------

class AnalyzerAgent(BaseAgent):
    """Scores one site per call with a single vision request.

    When too many scores fail validation and the run's ``RepromptBudget``
    allows it, one corrective round-trip is made and only the corrected
    dimensions are merged back.
    """

    @property
    def name(self) -> str:
        return "Analyzer"

    def get_system_prompt(self) -> str:
        return SYSTEM_PROMPT

    def build_messages(
        self, crawl: CrawlResult, category: str | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        """User message with labelled images, plus the output token ceiling."""
        shots = select_screenshots(crawl.screenshots)
        if not shots:
            raise NoScreenshotsError(f"No screenshots available for {crawl.url}")

        prompt = ANALYZE_SCREENSHOT_PROMPT
        if category and category in CATEGORY_OVERLAYS:
            prompt += "\n\n" + CATEGORY_OVERLAYS[category]

        content: list[dict[str, Any]] = []
        for i, shot in enumerate(shots, 1):
            content.append({"type": "text", "text": screenshot_label(i, len(shots), shot)})
            content.append(image_part(shot.base64))
        text = f"{build_context(crawl)}\n\n{prompt}"
        content.append({"type": "text", "text": text})

        max_tokens = output_token_ceiling(
            len(shots), len(text) + len(self.get_system_prompt()),
        )
        return [{"role": "user", "content": content}], max_tokens

    async def analyze_site(
        self,
        crawl: CrawlResult,
        category: str | None = None,
        api_key: str | None = None,
        budget: RepromptBudget | None = None,
    ) -> UIAnalysis:
        """Analyze one crawled site. LLM transport errors propagate."""
        logger.info("Analyzing %s", crawl.url)
        messages, max_tokens = self.build_messages(crawl, category)

        raw = await self.complete(messages, max_tokens=max_tokens, api_key=api_key)
        analysis = parse_analysis_response(raw, crawl.url)

        validation = validate_analysis_scores(analysis)
        if not validation.passed:
            logger.warning(
                "%s: %d/18 scores failed validation (%.0f%%)",
                crawl.url, len(validation.failures), validation.failure_rate * 100,
            )
            if budget is not None and budget.can_reprompt(crawl.url):
                budget.record_reprompt(crawl.url)
                analysis = await self._rescore(
                    analysis, messages, raw, validation.failures,
                    max_tokens=max_tokens, api_key=api_key,
                )
            else:
                logger.info("Reprompt budget exhausted, keeping scores for %s", crawl.url)

        if analysis.overall_score == 0:
            analysis = analysis.model_copy(
                update={"overall_score": compute_overall_score(analysis)}
            )

        logger.info(
            "Analysis complete for %s: %.1f/10 overall, %d anti-pattern(s)",
            crawl.url, analysis.overall_score, len(analysis.anti_patterns),
        )
        return analysis

    async def _rescore(
        self,
        analysis: UIAnalysis,
        messages: list[dict[str, Any]],
        raw: str,
        failures: list[ScoreFailure],
        *,
        max_tokens: int,
        api_key: str | None,
    ) -> UIAnalysis:
        logger.info("Re-prompting %s for %d dimension(s)", analysis.url, len(failures))
        conversation = [
            *messages,
            {"role": "assistant", "content": raw},
            {"role": "user", "content": build_rescore_prompt(failures)},
        ]
        correction_raw = await self.complete(
            conversation, max_tokens=max_tokens, api_key=api_key,
        )
        try:
            correction = extract_json(correction_raw)
        except (ValueError, json.JSONDecodeError) as exc:
            logger.warning("Re-score for %s was not valid JSON: %s", analysis.url, exc)
            return analysis

        merged = merge_rescore(analysis, correction)
        after = validate_analysis_scores(merged)
        logger.info(
            "Re-score for %s: %d -> %d failing dimension(s)",
            analysis.url, len(failures), len(after.failures),
        )
        return merged

    async def analyze_multiple(
        self,
        crawls: list[CrawlResult],
        category: str | None = None,
        api_key: str | None = None,
        budget: RepromptBudget | None = None,
        *,
        delay_s: float = ANALYSIS_DELAY_S,
    ) -> list[UIAnalysis]:
        """Analyze sites one at a time; failed sites are logged and skipped."""
        analyses: list[UIAnalysis] = []
        for i, crawl in enumerate(crawls):
            if i and delay_s:
                await asyncio.sleep(delay_s)
            try:
                analyses.append(
                    await self.analyze_site(crawl, category, api_key, budget)
                )
            except Exception:
                logger.exception("Skipping analysis for %s", crawl.url)
        return analyses
