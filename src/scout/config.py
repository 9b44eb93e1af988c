"""Runtime settings from the environment and the YAML run-file loader."""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import BaseModel

from scout.errors import ConfigError
from scout.schemas.config import ScoutConfig

DEFAULT_MODEL = "google/gemini-2.0-flash-001"
DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_MAX_TOKENS = 8192


class Settings(BaseModel):
    """LLM and storage settings, normally read from ``.env`` / the environment."""

    api_key: str = ""
    model: str = DEFAULT_MODEL
    base_url: str = DEFAULT_BASE_URL
    max_tokens: int = DEFAULT_MAX_TOKENS
    output_dir: str = "./output"
    cache_ttl_minutes: int = 60

    @classmethod
    def from_env(cls) -> Settings:
        """Build settings from environment variables.

        ``python-dotenv`` is loaded by the CLI entry point, so values from a
        ``.env`` file are already in ``os.environ`` here. Empty or
        unparseable numbers fall back to the defaults.
        """
        return cls(
            api_key=os.environ.get("OPENROUTER_API_KEY", ""),
            model=os.environ.get("SCOUT_MODEL") or DEFAULT_MODEL,
            base_url=os.environ.get("OPENROUTER_BASE_URL") or DEFAULT_BASE_URL,
            max_tokens=_int_env("SCOUT_MAX_TOKENS", DEFAULT_MAX_TOKENS),
            output_dir=os.environ.get("SCOUT_OUTPUT_DIR") or "./output",
            cache_ttl_minutes=_int_env("SCOUT_CACHE_TTL_MINUTES", 60),
        )

    def require_api_key(self, override: str | None = None) -> str:
        key = override or self.api_key
        if not key:
            raise ConfigError(
                "OPENROUTER_API_KEY is not set. Get a key at "
                "https://openrouter.ai/keys and add it to your .env file."
            )
        return key

    @property
    def cache_ttl_ms(self) -> int:
        return self.cache_ttl_minutes * 60 * 1000


def _int_env(name: str, default: int) -> int:
    try:
        value = int(os.environ.get(name, ""))
    except ValueError:
        return default
    return value if value > 0 else default


def load_config(path: str | Path) -> ScoutConfig:
    """Load and validate a scout run file.

    Raises ``FileNotFoundError`` if the path doesn't exist and
    ``pydantic.ValidationError`` if the YAML content is invalid.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    raw = yaml.safe_load(path.read_text())
    if not isinstance(raw, dict):
        raise ValueError(f"Config file must be a YAML mapping, got {type(raw).__name__}")

    # A list whose items are all commented out loads as None.
    if raw.get("urls") is None:
        raw["urls"] = []
    elif isinstance(raw["urls"], list):
        raw["urls"] = [item for item in raw["urls"] if item]

    return ScoutConfig(**raw)
