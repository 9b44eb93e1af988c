"""Pydantic models for a single site's UX analysis."""

from __future__ import annotations

from pydantic.alias_generators import to_camel

from scout.schemas.base import ScoutModel


class JustifiedScore(ScoutModel):
    """A 1-10 rating paired with the model's rationale.

    ``score`` is deliberately unconstrained: 0 means "not scored" and the
    model may hand back out-of-range values. The score validator decides
    what is acceptable.
    """

    score: int = 0
    justification: str = ""


class CoreScores(ScoutModel):
    """The 10 core visual dimensions."""

    visual_hierarchy: JustifiedScore = JustifiedScore()
    color_usage: JustifiedScore = JustifiedScore()
    typography: JustifiedScore = JustifiedScore()
    spacing: JustifiedScore = JustifiedScore()
    cta_clarity: JustifiedScore = JustifiedScore()
    navigation: JustifiedScore = JustifiedScore()
    mobile_readiness: JustifiedScore = JustifiedScore()
    consistency: JustifiedScore = JustifiedScore()
    accessibility: JustifiedScore = JustifiedScore()
    engagement: JustifiedScore = JustifiedScore()


class PrincipleScores(ScoutModel):
    """The 8 psychology / UX-principle dimensions."""

    cognitive_load: JustifiedScore = JustifiedScore()
    trust_signals: JustifiedScore = JustifiedScore()
    affordance_clarity: JustifiedScore = JustifiedScore()
    feedback_completeness: JustifiedScore = JustifiedScore()
    convention_adherence: JustifiedScore = JustifiedScore()
    gestalt_compliance: JustifiedScore = JustifiedScore()
    copy_quality: JustifiedScore = JustifiedScore()
    conversion_psychology: JustifiedScore = JustifiedScore()


# Wire names (camelCase), in prompt order. These are the names the model
# sees and the names used in validation failures and compressed output.
CORE_DIMENSIONS: tuple[str, ...] = tuple(
    to_camel(name) for name in CoreScores.model_fields
)
PRINCIPLE_DIMENSIONS: tuple[str, ...] = tuple(
    to_camel(name) for name in PrincipleScores.model_fields
)
TOTAL_DIMENSIONS = len(CORE_DIMENSIONS) + len(PRINCIPLE_DIMENSIONS)


class DesignPattern(ScoutModel):
    """A design pattern observed on the page."""

    name: str = ""
    description: str = ""
    location: str = ""
    effectiveness: str = "medium"  # "high", "medium", "low"
    principle: str = ""


class AntiPattern(ScoutModel):
    """A UX violation or dark pattern observed on the page."""

    name: str = ""
    description: str = ""
    severity: str = "moderate"  # "critical", "moderate", "minor"
    category: str = "ux-violation"  # "dark-pattern", "ux-violation", "accessibility"
    recommendation: str = ""


class DesignTokens(ScoutModel):
    primary_colors: list[str] = []
    accent_colors: list[str] = []
    neutral_colors: list[str] = []
    font_families: list[str] = []
    heading_style: str = ""
    body_style: str = ""
    button_style: str = ""
    spacing_system: str = ""
    border_radius: str = ""
    shadow_style: str = ""


class PrincipleNotes(ScoutModel):
    norman_doors: list[str] = []
    hicks_violations: list[str] = []
    fitts_issues: list[str] = []
    trunk_test: list[str] = []
    von_restorff: str = ""
    serial_position: str = ""
    peak_end: str = ""
    hook_model: str = ""


class UIAnalysis(ScoutModel):
    """Full analysis of one site, as produced by the analyzer."""

    url: str
    overall_score: float = 0.0
    scores: CoreScores = CoreScores()
    principle_scores: PrincipleScores = PrincipleScores()
    strengths: list[str] = []
    weaknesses: list[str] = []
    patterns: list[DesignPattern] = []
    anti_patterns: list[AntiPattern] = []
    design_tokens: DesignTokens = DesignTokens()
    principle_notes: PrincipleNotes = PrincipleNotes()
    steal_worthy: list[str] = []
    raw_analysis: str = ""

    def core_dimensions(self) -> list[tuple[str, JustifiedScore]]:
        return [
            (to_camel(name), getattr(self.scores, name))
            for name in CoreScores.model_fields
        ]

    def principle_dimensions(self) -> list[tuple[str, JustifiedScore]]:
        return [
            (to_camel(name), getattr(self.principle_scores, name))
            for name in PrincipleScores.model_fields
        ]

    def all_dimensions(self) -> list[tuple[str, JustifiedScore]]:
        """All 18 (wire name, score) pairs, core first."""
        return self.core_dimensions() + self.principle_dimensions()
