"""Tests for the typer CLI commands that make no model calls."""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from scout.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def output_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    out = tmp_path / "out"
    monkeypatch.setenv("SCOUT_OUTPUT_DIR", str(out))
    return out


def test_validate(tmp_config: Path) -> None:
    result = runner.invoke(app, ["validate", "-c", str(tmp_config)])
    assert result.exit_code == 0
    assert "Config is valid!" in result.output
    assert "https://stripe.com" in result.output


def test_validate_rejects_bad_config(tmp_path: Path) -> None:
    cfg = tmp_path / "bad.yml"
    cfg.write_text("urls: []\ncategory: saas-landing\ngoal: x\n")
    result = runner.invoke(app, ["validate", "-c", str(cfg)])
    assert result.exit_code == 1
    assert "Config validation failed" in result.output


def test_categories() -> None:
    result = runner.invoke(app, ["categories"])
    assert result.exit_code == 0
    assert "healthcare" in result.output


def test_empty_library() -> None:
    result = runner.invoke(app, ["library", "--briefs"])
    assert result.exit_code == 0
    assert "Design briefs (0)" in result.output


def test_cache_clean_without_cache() -> None:
    result = runner.invoke(app, ["cache-clean"])
    assert result.exit_code == 0
    assert "Removed 0 cache entries" in result.output
