"""Context compression for brief generation.

Keeps outlier scores with their full justifications, reduces mid-range
scores to bare numbers, and folds design patterns from all sites into one
frequency table, so that ten analyses still fit in the brief prompt.
"""

from __future__ import annotations

import json
import math
import re
from urllib.parse import urlparse

from scout.schemas.analysis import UIAnalysis
from scout.schemas.compression import (
    CompressedSiteAnalysis,
    CompressionResult,
    MidRangeScore,
    PatternFrequency,
    ScoredDimension,
)

OUTLIER_SD_MULTIPLIER = 1.5
EXTREMES_PER_END = 3
CHARS_PER_TOKEN = 4
MAX_PATTERN_ROWS = 10

_MID_RANGE_LINE_RE = re.compile(r"MID-RANGE:.*\n")


def estimate_tokens(text: str) -> int:
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def _mean_and_std(values: list[int]) -> tuple[float, float]:
    if not values:
        return 0.0, 0.0
    mean = sum(values) / len(values)
    variance = sum((v - mean) ** 2 for v in values) / len(values)
    return mean, math.sqrt(variance)


def flatten_scores(analysis: UIAnalysis) -> list[ScoredDimension]:
    return [
        ScoredDimension(dimension=name, score=js.score, justification=js.justification)
        for name, js in analysis.all_dimensions()
    ]


def classify_scores(
    dimensions: list[ScoredDimension],
) -> tuple[list[ScoredDimension], list[ScoredDimension]]:
    """Split into ``(outliers, mid_range)``, both in input order.

    Outliers are the top 3 and bottom 3 by score (stable sort, descending)
    plus anything more than 1.5 standard deviations from the mean. The
    deviation rule is skipped when every score is identical.
    """
    mean, std = _mean_and_std([d.score for d in dimensions])

    by_score = sorted(dimensions, key=lambda d: d.score, reverse=True)
    outlier_names = {d.dimension for d in by_score[:EXTREMES_PER_END]}
    outlier_names.update(d.dimension for d in by_score[-EXTREMES_PER_END:])

    if std > 0:
        outlier_names.update(
            d.dimension for d in dimensions
            if abs(d.score - mean) > OUTLIER_SD_MULTIPLIER * std
        )

    outliers = [d for d in dimensions if d.dimension in outlier_names]
    mid_range = [d for d in dimensions if d.dimension not in outlier_names]
    return outliers, mid_range


def _hostname(url: str) -> str:
    return urlparse(url).hostname or url


def compress_for_brief(analyses: list[UIAnalysis]) -> CompressionResult:
    if not analyses:
        return CompressionResult()

    patterns: dict[str, PatternFrequency] = {}
    for analysis in analyses:
        host = _hostname(analysis.url)
        for pattern in analysis.patterns:
            key = pattern.name.lower()
            entry = patterns.setdefault(key, PatternFrequency(name=key))
            entry.count += 1
            entry.sites.append(host)
    # sorted() is stable, so equal counts keep first-seen order
    table = sorted(patterns.values(), key=lambda p: p.count, reverse=True)

    sites = []
    for analysis in analyses:
        outliers, mid_range = classify_scores(flatten_scores(analysis))
        sites.append(CompressedSiteAnalysis(
            url=analysis.url,
            overall_score=analysis.overall_score,
            outlier_scores=outliers,
            mid_range_scores=[
                MidRangeScore(dimension=d.dimension, score=d.score) for d in mid_range
            ],
            strengths=analysis.strengths[:3],
            weaknesses=analysis.weaknesses[:3],
        ))

    result = CompressionResult(sites=sites, global_pattern_table=table)
    payload = result.model_dump(
        mode="json", by_alias=True, exclude={"estimated_tokens"},
    )
    result.estimated_tokens = estimate_tokens(
        json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
    )
    return result


def _number(value: float) -> str:
    """``8.0`` -> ``"8"``, ``7.5`` -> ``"7.5"``."""
    return f"{value:g}"


def format_compressed_analysis(
    result: CompressionResult, token_budget: int | None = None,
) -> str:
    """Render the compressed analyses as prompt text.

    When the text is over ``token_budget``, every ``MID-RANGE:`` line is
    dropped. No other trimming is done.
    """
    parts: list[str] = []

    for site in result.sites:
        lines = [
            f"--- {site.url} (Score: {_number(site.overall_score)}/10) ---",
            "NOTABLE SCORES (outliers):",
        ]
        lines.extend(
            f"  {s.dimension}: {s.score}/10 — {s.justification}"
            for s in site.outlier_scores
        )
        if site.mid_range_scores:
            mid = ", ".join(f"{s.dimension}:{s.score}" for s in site.mid_range_scores)
            lines.append(f"MID-RANGE: {mid}")
        lines.append(f"Strengths: {'; '.join(site.strengths)}")
        lines.append(f"Weaknesses: {'; '.join(site.weaknesses)}")
        parts.append("\n".join(lines))

    if result.global_pattern_table:
        parts.append("CROSS-SITE PATTERNS:")
        parts.extend(
            f"  {p.name}: found in {p.count} site(s) ({', '.join(p.sites)})"
            for p in result.global_pattern_table[:MAX_PATTERN_ROWS]
        )

    output = "\n\n".join(parts)
    if token_budget and estimate_tokens(output) > token_budget:
        output = _MID_RANGE_LINE_RE.sub("", output)
    return output
