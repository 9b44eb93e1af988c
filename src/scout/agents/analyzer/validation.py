"""Score validation and the bounded self-correction budget.

Vision-model scores are noisy. A handful of weak justifications is
tolerated; bulk degenerate output triggers one corrective re-prompt, as
long as the run's ``RepromptBudget`` allows it.
"""

from __future__ import annotations

import re
from collections import Counter
from typing import Iterable

from pydantic import BaseModel

from scout.schemas.analysis import JustifiedScore, TOTAL_DIMENSIONS, UIAnalysis

MAX_FAILURE_RATE = 0.30
MIN_JUSTIFICATION_LENGTH = 20

VAGUE_WORDS = (
    "good", "nice", "bad", "decent", "okay",
    "fine", "great", "poor", "solid", "adequate",
)
_VAGUE_RE = re.compile(r"\b(" + "|".join(VAGUE_WORDS) + r")\b", re.IGNORECASE)


class ScoreFailure(BaseModel):
    dimension: str
    score: int
    justification: str
    reasons: list[str]


class ValidationResult(BaseModel):
    passed: bool
    failures: list[ScoreFailure] = []
    failure_rate: float = 0.0


def validate_score(dimension: str, js: JustifiedScore) -> list[str]:
    """Return the reasons ``js`` is unacceptable; empty means valid.

    Checks are independent, so one score can fail several at once.
    """
    reasons: list[str] = []

    if js.score < 1 or js.score > 10:
        reasons.append(f"Score {js.score} is out of range [1-10]")

    text = (js.justification or "").strip()
    if not text:
        reasons.append("Justification is empty")
    elif len(text) < MIN_JUSTIFICATION_LENGTH:
        reasons.append(
            f"Justification too short ({len(text)} chars, minimum {MIN_JUSTIFICATION_LENGTH})"
        )

    m = _VAGUE_RE.search(js.justification or "")
    if m:
        reasons.append(f'Justification contains vague word: "{m.group(1)}"')

    return reasons


def validate_analysis_scores(analysis: UIAnalysis) -> ValidationResult:
    """Validate all 18 dimensions; passes when at most 30% fail."""
    failures = []
    for dimension, js in analysis.all_dimensions():
        reasons = validate_score(dimension, js)
        if reasons:
            failures.append(ScoreFailure(
                dimension=dimension,
                score=js.score,
                justification=js.justification,
                reasons=reasons,
            ))

    failure_rate = len(failures) / TOTAL_DIMENSIONS
    return ValidationResult(
        passed=failure_rate <= MAX_FAILURE_RATE,
        failures=failures,
        failure_rate=failure_rate,
    )


def build_rescore_prompt(failures: Iterable[ScoreFailure]) -> str:
    lines = [
        f"- {f.dimension} (score: {f.score}): {'; '.join(f.reasons)}"
        for f in failures
    ]
    return (
        "The following scores failed validation. Each score must be 1-10, and "
        "each justification must be at least 20 characters with specific "
        "observations (no vague words like \"good\", \"nice\", \"decent\").\n\n"
        "Failed scores:\n"
        + "\n".join(lines)
        + "\n\nRe-score ONLY these dimensions. Return a JSON object with the same "
        "structure as the original response, but you only need to include the "
        "re-scored dimensions under \"scores\" and/or \"principleScores\". Keep all "
        "other fields from your original response."
    )


class RepromptBudget:
    """Caps corrective re-prompts per site and per pipeline run.

    Create one per run; never share between jobs.
    """

    def __init__(self, max_per_site: int = 1, max_per_pipeline: int = 3) -> None:
        self.max_per_site = max_per_site
        self.max_per_pipeline = max_per_pipeline
        self._per_site: Counter[str] = Counter()
        self._total = 0

    def can_reprompt(self, site: str) -> bool:
        return (
            self._per_site[site] < self.max_per_site
            and self._total < self.max_per_pipeline
        )

    def record_reprompt(self, site: str) -> None:
        """Call once per re-prompt actually sent."""
        self._per_site[site] += 1
        self._total += 1

    @property
    def stats(self) -> dict[str, int]:
        return {
            "total_reprompts": self._total,
            "sites_reprompted": sum(1 for n in self._per_site.values() if n > 0),
        }
