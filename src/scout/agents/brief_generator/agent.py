"""Brief generator: merges site analyses into one design brief."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from pydantic.alias_generators import to_camel

from scout.agents.base import BaseAgent
from scout.agents.brief_generator.compression import (
    compress_for_brief,
    estimate_tokens,
    format_compressed_analysis,
)
from scout.agents.brief_generator.prompts import SYSTEM_PROMPT, render_brief_prompt
from scout.schemas.analysis import UIAnalysis
from scout.schemas.brief import (
    AnalyzedSite,
    BuildPrompts,
    DesignBrief,
    DesignSystem,
    PsychologyStrategy,
    RecommendedApproach,
    ScoreHighlight,
)
from scout.shared.parsing import (
    coerce_dict,
    coerce_dict_list,
    coerce_float,
    coerce_score,
    coerce_str,
    coerce_str_list,
    extract_json,
    sanitize_json_text,
)

logger = logging.getLogger(__name__)

BRIEF_CONTEXT_TOKEN_BUDGET = 4000
MIN_OUTPUT_TOKENS = 12000
MAX_OUTPUT_TOKENS = 32000
HIGHLIGHT_COUNT = 5

_RECOVERABLE_FIELDS = ("executiveSummary", "targetAudience", "overall")


# ----------------------------------------------------------------------
# Prompt inputs
# ----------------------------------------------------------------------

def aggregate_scores(analyses: list[UIAnalysis]) -> dict[str, float]:
    """Mean score per dimension across sites, ignoring unscored (0) values."""
    if not analyses:
        return {}
    values: dict[str, list[int]] = {}
    for analysis in analyses:
        for name, js in analysis.all_dimensions():
            bucket = values.setdefault(name, [])
            if js.score > 0:
                bucket.append(js.score)
    return {name: (sum(v) / len(v) if v else 0.0) for name, v in values.items()}


def best_patterns(analyses: list[UIAnalysis]) -> str:
    return "\n".join(
        f"• {p.name}: {p.description}" + (f" ({p.principle})" if p.principle else "")
        for a in analyses
        for p in a.patterns
        if p.effectiveness == "high"
    )


def worst_anti_patterns(analyses: list[UIAnalysis]) -> str:
    return "\n".join(
        f"• {ap.name}: {ap.description} → {ap.recommendation}"
        for a in analyses
        for ap in a.anti_patterns
        if ap.severity in ("critical", "moderate")
    )


def output_token_ceiling(prompt_length: int) -> int:
    """Briefs are long-form: 3x the prompt estimate, within [12000, 32000]."""
    return max(MIN_OUTPUT_TOKENS, min(MAX_OUTPUT_TOKENS, (prompt_length // 4) * 3))


# ----------------------------------------------------------------------
# Response building
# ----------------------------------------------------------------------

def score_highlights(analysis: UIAnalysis, count: int = HIGHLIGHT_COUNT) -> list[ScoreHighlight]:
    """The scored dimensions furthest from the neutral midpoint 5."""
    scored = [(name, js) for name, js in analysis.all_dimensions() if js.score > 0]
    scored.sort(key=lambda item: abs(item[1].score - 5), reverse=True)
    return [
        ScoreHighlight(dimension=name, score=js.score, justification=js.justification)
        for name, js in scored[:count]
    ]


def default_site_summaries(analyses: list[UIAnalysis]) -> list[AnalyzedSite]:
    return [
        AnalyzedSite(
            url=a.url,
            score=a.overall_score,
            key_takeaway=a.strengths[0] if a.strengths else "Analysis completed",
            strengths=a.strengths[:3],
            weaknesses=a.weaknesses[:3],
            score_highlights=score_highlights(a),
        )
        for a in analyses
    ]


def _string_fields(model: type, raw: Any) -> Any:
    data = coerce_dict(raw)
    values: dict[str, Any] = {}
    for name, field in model.model_fields.items():
        value = data.get(to_camel(name))
        if field.annotation == list[str]:
            values[name] = coerce_str_list(value)
        else:
            values[name] = coerce_str(value)
    return model(**values)


def _parse_site(raw: dict[str, Any]) -> AnalyzedSite:
    return AnalyzedSite(
        url=coerce_str(raw.get("url")),
        score=coerce_float(raw.get("score")),
        key_takeaway=coerce_str(raw.get("keyTakeaway")),
        strengths=coerce_str_list(raw.get("strengths")),
        weaknesses=coerce_str_list(raw.get("weaknesses")),
        score_highlights=[
            ScoreHighlight(
                dimension=coerce_str(h.get("dimension")),
                score=coerce_score(h.get("score")),
                justification=coerce_str(h.get("justification")),
            )
            for h in coerce_dict_list(raw.get("scoreHighlights"))
        ],
        comparison_notes=coerce_str(raw.get("comparisonNotes")),
    )


def build_brief(
    data: dict[str, Any], category: str, goal: str, analyses: list[UIAnalysis],
) -> DesignBrief:
    """Fixed-shape brief from parsed JSON; every field decoded on its own."""
    sites = [_parse_site(s) for s in coerce_dict_list(data.get("analyzedSites"))]
    return DesignBrief(
        category=category,
        goal=goal,
        executive_summary=coerce_str(data.get("executiveSummary")),
        target_audience=coerce_str(data.get("targetAudience")),
        recommended_approach=_string_fields(RecommendedApproach, data.get("recommendedApproach")),
        psychology_strategy=_string_fields(PsychologyStrategy, data.get("psychologyStrategy")),
        design_system=_string_fields(DesignSystem, data.get("designSystem")),
        build_prompts=_string_fields(BuildPrompts, data.get("buildPrompts")),
        analyzed_sites=sites or default_site_summaries(analyses),
    )


def _recover_fields(text: str) -> dict[str, str]:
    """Pull individual string fields out of JSON too broken to load."""
    found: dict[str, str] = {}
    for key in _RECOVERABLE_FIELDS:
        m = re.search(rf'"{key}"\s*:\s*("(?:[^"\\]|\\.)*")', text, re.DOTALL)
        if not m:
            continue
        try:
            found[key] = json.loads(m.group(1), strict=False)
        except json.JSONDecodeError:
            continue
    return found


def failure_brief(
    raw: str, category: str, goal: str, analyses: list[UIAnalysis],
) -> DesignBrief:
    """Brief that carries the raw model output when nothing could be parsed."""
    return DesignBrief(
        category=category,
        goal=goal,
        executive_summary=(
            "The brief could not be parsed from the model response. The full "
            "response is preserved in buildPrompts.overall. Excerpt: " + raw[:500]
        ),
        build_prompts=BuildPrompts(overall=raw),
        analyzed_sites=default_site_summaries(analyses),
    )


def parse_brief_response(
    raw: str, category: str, goal: str, analyses: list[UIAnalysis],
) -> DesignBrief:
    """Normal parse, then sanitized parse, then a failure brief. Never raises."""
    try:
        return build_brief(extract_json(raw), category, goal, analyses)
    except ValueError as exc:
        logger.warning("Brief JSON did not parse (%s), retrying sanitized", exc)

    cleaned = sanitize_json_text(raw)
    try:
        return build_brief(extract_json(cleaned, strict=False), category, goal, analyses)
    except ValueError:
        pass

    recovered = _recover_fields(cleaned)
    if recovered:
        logger.warning("Recovered %s from malformed brief JSON", ", ".join(recovered))
        return DesignBrief(
            category=category,
            goal=goal,
            executive_summary=recovered.get("executiveSummary", ""),
            target_audience=recovered.get("targetAudience", ""),
            build_prompts=BuildPrompts(overall=recovered.get("overall") or raw),
            analyzed_sites=default_site_summaries(analyses),
        )

    logger.warning("Could not parse brief JSON, wrapping raw response")
    return failure_brief(raw, category, goal, analyses)


# ----------------------------------------------------------------------
# Agent
# ----------------------------------------------------------------------

class BriefGeneratorAgent(BaseAgent):
    """One LLM call over compressed analyses of every surviving site."""

    @property
    def name(self) -> str:
        return "Brief Generator"

    def get_system_prompt(self) -> str:
        return SYSTEM_PROMPT

    def build_user_message(
        self, analyses: list[UIAnalysis], category: str, goal: str,
    ) -> str:
        compressed = compress_for_brief(analyses)
        analysis_text = format_compressed_analysis(compressed, BRIEF_CONTEXT_TOKEN_BUDGET)
        averages = ", ".join(f"{k}: {v:.1f}" for k, v in aggregate_scores(analyses).items())

        return "\n\n".join([
            render_brief_prompt(category, goal, len(analyses)),
            "## Analysis Data",
            f"### Aggregate Scores Across {len(analyses)} Sites\n{averages}",
            f"### Baseline Sites (compressed analyses)\n{analysis_text}",
            "### Best Patterns Found (high effectiveness)\n"
            + (best_patterns(analyses) or "No high-effectiveness patterns identified"),
            "### Anti-Patterns to Avoid\n"
            + (worst_anti_patterns(analyses) or "No critical anti-patterns detected"),
            "Use the baseline sites above as the comparison framework and cite "
            "them by name. Now generate the design brief as JSON.",
        ])

    async def generate_brief(
        self,
        analyses: list[UIAnalysis],
        category: str,
        goal: str,
        api_key: str | None = None,
    ) -> DesignBrief:
        """Generate the brief. LLM transport errors propagate; bad output does not."""
        logger.info("Generating design brief from %d analyses", len(analyses))
        message = self.build_user_message(analyses, category, goal)
        max_tokens = output_token_ceiling(len(message) + len(self.get_system_prompt()))
        logger.debug(
            "Brief prompt ~%d tokens, max_tokens=%d", estimate_tokens(message), max_tokens,
        )

        raw = await self.complete(
            [{"role": "user", "content": message}],
            max_tokens=max_tokens,
            api_key=api_key,
        )
        brief = parse_brief_response(raw, category, goal, analyses)
        logger.info("Design brief %s generated", brief.id)
        return brief
