"""Configuration schema: validates scout.yml and job submissions."""

from urllib.parse import urlparse

from pydantic import BaseModel, model_validator

from scout.categories import CATEGORIES
from scout.errors import InputValidationError

MAX_URLS = 10

# Screenshot sections captured per crawl depth
DEPTH_SECTIONS: dict[str, tuple[str, ...]] = {
    "quick": ("above-fold",),
    "standard": ("full", "above-fold", "mobile"),
    "deep": ("full", "above-fold", "hero", "footer", "mobile"),
}


def is_valid_url(url: str) -> bool:
    """True for absolute http(s) URLs with a host."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def validate_submission(
    urls: list[str], category: str, goal: str,
) -> tuple[list[str], str, str]:
    """Check a (urls, category, goal) triple and return it normalised.

    Raises ``InputValidationError`` with a user-facing message on the first
    problem found. Shared by the YAML config and the job service so both
    entry points reject the same inputs.
    """
    if not urls:
        raise InputValidationError("At least one URL is required")
    if len(urls) > MAX_URLS:
        raise InputValidationError(f"Maximum {MAX_URLS} URLs allowed")

    cleaned = [u.strip() for u in urls]
    for url in cleaned:
        if not is_valid_url(url):
            raise InputValidationError(f"Invalid URL: {url}")

    if category not in CATEGORIES:
        raise InputValidationError(
            f"Invalid category. Must be one of: {', '.join(CATEGORIES)}"
        )

    goal = (goal or "").strip()
    if not goal:
        raise InputValidationError("Goal is required")

    return cleaned, category, goal


class ScoutConfig(BaseModel):
    """Top-level configuration loaded from scout.yml."""

    urls: list[str]
    category: str
    goal: str

    # quick, standard or deep
    depth: str = "standard"

    output_directory: str = "./output"

    @model_validator(mode="after")
    def check_submission(self) -> "ScoutConfig":
        self.urls, self.category, self.goal = validate_submission(
            self.urls, self.category, self.goal,
        )
        return self

    @model_validator(mode="after")
    def check_depth(self) -> "ScoutConfig":
        if self.depth not in DEPTH_SECTIONS:
            raise ValueError(f"depth must be one of: {', '.join(DEPTH_SECTIONS)}")
        return self

    @property
    def sections(self) -> tuple[str, ...]:
        return DEPTH_SECTIONS[self.depth]
