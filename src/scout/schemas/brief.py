"""Pydantic models for the design brief, the pipeline's final artifact.

Every field has an empty default so consumers only ever need to check for
emptiness, never for presence.
"""

import uuid
from datetime import datetime, timezone

from pydantic import Field

from scout.schemas.base import ScoutModel


class RecommendedApproach(ScoutModel):
    layout: str = ""
    color_strategy: str = ""
    typography_strategy: str = ""
    cta_strategy: str = ""
    content_structure: str = ""
    interaction_patterns: str = ""


class PsychologyStrategy(ScoutModel):
    hook_model: str = ""
    trust_building: str = ""
    friction_reduction: str = ""
    conversion_tactics: str = ""
    emotional_design: str = ""


class DesignSystem(ScoutModel):
    suggested_palette: list[str] = []
    suggested_fonts: list[str] = []
    spacing_notes: str = ""
    component_list: list[str] = []


class BuildPrompts(ScoutModel):
    """Copy-paste build prompts: ten page sections plus one for the whole page."""

    hero_section: str = ""
    navigation: str = ""
    social_proof: str = ""
    features: str = ""
    pricing: str = ""
    testimonials: str = ""
    how_it_works: str = ""
    faq: str = ""
    cta: str = ""
    footer: str = ""
    overall: str = ""


class ScoreHighlight(ScoutModel):
    dimension: str = ""
    score: int = 0
    justification: str = ""


class AnalyzedSite(ScoutModel):
    """Per-site summary shown alongside the brief."""

    url: str = ""
    score: float = 0.0
    key_takeaway: str = ""
    strengths: list[str] = []
    weaknesses: list[str] = []
    score_highlights: list[ScoreHighlight] = []
    comparison_notes: str = ""


class DesignBrief(ScoutModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    created_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    category: str = ""
    goal: str = ""

    executive_summary: str = ""
    target_audience: str = ""
    recommended_approach: RecommendedApproach = RecommendedApproach()
    psychology_strategy: PsychologyStrategy = PsychologyStrategy()
    design_system: DesignSystem = DesignSystem()
    build_prompts: BuildPrompts = BuildPrompts()
    analyzed_sites: list[AnalyzedSite] = []
