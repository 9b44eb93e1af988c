"""Compressed, prompt-sized views of one or more site analyses."""

from scout.schemas.base import ScoutModel


class ScoredDimension(ScoutModel):
    dimension: str
    score: int
    justification: str = ""


class MidRangeScore(ScoutModel):
    """A mid-range dimension. The justification is dropped."""

    dimension: str
    score: int


class CompressedSiteAnalysis(ScoutModel):
    url: str
    overall_score: float = 0.0
    outlier_scores: list[ScoredDimension] = []
    mid_range_scores: list[MidRangeScore] = []
    strengths: list[str] = []
    weaknesses: list[str] = []


class PatternFrequency(ScoutModel):
    """A design pattern seen across sites, keyed by lowercased name."""

    name: str
    count: int = 0
    sites: list[str] = []


class CompressionResult(ScoutModel):
    sites: list[CompressedSiteAnalysis] = []
    global_pattern_table: list[PatternFrequency] = []
    estimated_tokens: int = 0
