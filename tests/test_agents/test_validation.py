"""Tests for score validation and the reprompt budget."""

from __future__ import annotations

from scout.agents.analyzer.validation import (
    RepromptBudget,
    build_rescore_prompt,
    validate_analysis_scores,
    validate_score,
)
from scout.schemas.analysis import JustifiedScore, UIAnalysis

from conftest import GOOD_JUSTIFICATION, make_analysis


def _with_failures(count: int) -> UIAnalysis:
    analysis = make_analysis()
    bad = JustifiedScore(score=0, justification="")
    names = list(analysis.scores.model_fields)[:count]
    return analysis.model_copy(update={
        "scores": analysis.scores.model_copy(update={n: bad for n in names}),
    })


class TestValidateScore:
    def test_valid_score(self) -> None:
        assert validate_score("typography", JustifiedScore(score=7, justification=GOOD_JUSTIFICATION)) == []

    def test_out_of_range(self) -> None:
        for score in (0, 11, -1):
            reasons = validate_score("x", JustifiedScore(score=score, justification=GOOD_JUSTIFICATION))
            assert reasons == [f"Score {score} is out of range [1-10]"]

    def test_empty_justification(self) -> None:
        assert validate_score("x", JustifiedScore(score=5, justification="   ")) == [
            "Justification is empty"
        ]

    def test_short_justification(self) -> None:
        reasons = validate_score("x", JustifiedScore(score=5, justification="Blue buttons"))
        assert reasons == ["Justification too short (12 chars, minimum 20)"]

    def test_vague_word_is_case_insensitive(self) -> None:
        js = JustifiedScore(score=5, justification="The layout feels GOOD across all breakpoints")
        assert validate_score("x", js) == ['Justification contains vague word: "GOOD"']

    def test_vague_word_needs_word_boundary(self) -> None:
        js = JustifiedScore(score=5, justification="Goodness of the grid alignment is visible")
        assert validate_score("x", js) == []

    def test_independent_checks_accumulate(self) -> None:
        reasons = validate_score("x", JustifiedScore(score=12, justification="nice"))
        assert len(reasons) == 3


class TestValidateAnalysisScores:
    def test_all_valid(self) -> None:
        result = validate_analysis_scores(make_analysis())
        assert result.passed
        assert result.failures == []
        assert result.failure_rate == 0

    def test_five_of_eighteen_passes(self) -> None:
        result = validate_analysis_scores(_with_failures(5))
        assert result.passed
        assert len(result.failures) == 5

    def test_six_of_eighteen_fails(self) -> None:
        result = validate_analysis_scores(_with_failures(6))
        assert not result.passed
        assert round(result.failure_rate, 3) == round(6 / 18, 3)

    def test_failures_use_wire_names(self) -> None:
        result = validate_analysis_scores(_with_failures(1))
        assert result.failures[0].dimension == "visualHierarchy"

    def test_unscored_analysis_fails(self) -> None:
        result = validate_analysis_scores(UIAnalysis(url="https://x.com"))
        assert len(result.failures) == 18
        assert not result.passed


class TestRescorePrompt:
    def test_lists_each_failure(self) -> None:
        failures = validate_analysis_scores(_with_failures(2)).failures
        prompt = build_rescore_prompt(failures)
        assert "- visualHierarchy (score: 0): Score 0 is out of range [1-10]; Justification is empty" in prompt
        assert "- colorUsage (score: 0)" in prompt
        assert "Re-score ONLY these dimensions" in prompt


class TestRepromptBudget:
    def test_one_per_site(self) -> None:
        budget = RepromptBudget()
        assert budget.can_reprompt("a")
        budget.record_reprompt("a")
        assert not budget.can_reprompt("a")
        assert budget.can_reprompt("b")

    def test_three_per_pipeline(self) -> None:
        budget = RepromptBudget()
        for site in ("a", "b", "c"):
            assert budget.can_reprompt(site)
            budget.record_reprompt(site)
        assert not budget.can_reprompt("d")
        assert budget.stats == {"total_reprompts": 3, "sites_reprompted": 3}

    def test_custom_limits(self) -> None:
        budget = RepromptBudget(max_per_site=2, max_per_pipeline=2)
        budget.record_reprompt("a")
        assert budget.can_reprompt("a")
        budget.record_reprompt("a")
        assert not budget.can_reprompt("b")
        assert budget.stats == {"total_reprompts": 2, "sites_reprompted": 1}
