"""Tests for tolerant model-output decoding."""

from __future__ import annotations

import pytest

from scout.shared.parsing import (
    coerce_float,
    coerce_justified_score,
    coerce_score,
    coerce_str,
    coerce_str_list,
    extract_json,
    sanitize_json_text,
)


class TestExtractJson:
    def test_plain_object(self) -> None:
        assert extract_json('{"a": 1}') == {"a": 1}

    def test_fenced_block(self) -> None:
        text = 'Here you go:\n```json\n{"a": [1, 2]}\n```\nThanks'
        assert extract_json(text) == {"a": [1, 2]}

    def test_preamble_and_trailer(self) -> None:
        assert extract_json('Sure! {"ok": true} hope that helps') == {"ok": True}

    def test_no_object_raises(self) -> None:
        with pytest.raises(ValueError, match="Could not extract JSON"):
            extract_json("no json here")

    def test_array_is_rejected(self) -> None:
        with pytest.raises(ValueError, match="Could not extract JSON"):
            extract_json("[1, 2, 3]")

    def test_literal_newlines_need_non_strict(self) -> None:
        text = '{"summary": "line one\nline two"}'
        with pytest.raises(ValueError):
            extract_json(text)
        assert extract_json(text, strict=False) == {"summary": "line one\nline two"}


class TestSanitize:
    def test_strips_trailing_commas_and_control_chars(self) -> None:
        text = '{"a": [1, 2,], "b": "x\x07y",}'
        assert extract_json(sanitize_json_text(text)) == {"a": [1, 2], "b": "xy"}


class TestCoercion:
    @pytest.mark.parametrize("value, expected", [
        (7, 7), (7.6, 8), ("6", 6), (" 9 ", 9), (15, 10), (-3, 0),
        (None, 0), ("n/a", 0), (True, 0), (float("inf"), 10), (float("nan"), 0),
    ])
    def test_coerce_score(self, value, expected) -> None:
        assert coerce_score(value) == expected

    def test_coerce_float_bounds(self) -> None:
        assert coerce_float(7.25) == 7.25
        assert coerce_float(50, hi=10) == 10
        assert coerce_float("x", lo=1) == 1

    def test_justified_score_from_object(self) -> None:
        assert coerce_justified_score({"score": "8", "justification": "Clear hero copy"}) == {
            "score": 8, "justification": "Clear hero copy",
        }

    def test_justified_score_from_bare_number(self) -> None:
        assert coerce_justified_score(6) == {"score": 6, "justification": ""}

    def test_coerce_str_flattens_objects(self) -> None:
        assert coerce_str({"layout": "Z-pattern", "grid": 12, "empty": ""}) == "layout: Z-pattern\ngrid: 12"
        assert coerce_str(["a", None, "b"]) == "a\nb"
        assert coerce_str(None) == ""
        assert coerce_str(False) == "false"

    def test_coerce_str_list(self) -> None:
        assert coerce_str_list(["a", "", None, 3]) == ["a", "3"]
        assert coerce_str_list("single") == ["single"]
        assert coerce_str_list(None) == []
        assert coerce_str_list("") == []
