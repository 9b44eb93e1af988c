"""Tolerant decoding of model output.

Model responses are untrusted: fields may be missing, mistyped, or nested
differently than asked. The ``coerce_*`` helpers each decode one field to
a fixed type and never raise, so builders can be composed from them.
"""

from __future__ import annotations

import json
import re
from typing import Any

_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?```", re.DOTALL)
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")


def extract_json(text: str, *, strict: bool = True) -> dict[str, Any]:
    """Extract a JSON object from text that may contain fences or preamble.

    Raises ``ValueError`` (``json.JSONDecodeError`` is a subclass) when no
    object can be recovered.
    """
    text = text.strip()

    # 1. Clean JSON response
    if text.startswith("{"):
        try:
            return _as_object(json.loads(text, strict=strict))
        except json.JSONDecodeError:
            pass

    # 2. ```json ... ``` or ``` ... ``` fenced block
    match = _FENCE_RE.search(text)
    if match:
        text = match.group(1).strip()

    # 3. Everything from the first { to the last }
    start, end = text.find("{"), text.rfind("}")
    if start != -1 and end > start:
        return _as_object(json.loads(text[start:end + 1], strict=strict))

    raise ValueError(
        f"Could not extract JSON from model response (length={len(text)}). "
        f"First 300 chars: {text[:300]!r}"
    )


def sanitize_json_text(text: str) -> str:
    """Strip control characters and trailing commas that break ``json.loads``."""
    text = _CONTROL_CHARS_RE.sub("", text)
    return _TRAILING_COMMA_RE.sub(r"\1", text)


def _as_object(value: Any) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise ValueError(f"Expected a JSON object, got {type(value).__name__}")
    return value


# ----------------------------------------------------------------------
# Per-field coercion
# ----------------------------------------------------------------------

def coerce_score(value: Any) -> int:
    """Integer in [0, 10]; 0 for anything that isn't a number."""
    return int(round(coerce_float(value)))


def coerce_justified_score(value: Any) -> dict[str, Any]:
    """``{"score", "justification"}`` from either that object or a bare number."""
    if isinstance(value, dict):
        return {
            "score": coerce_score(value.get("score")),
            "justification": coerce_str(value.get("justification")),
        }
    return {"score": coerce_score(value), "justification": ""}


def coerce_str(value: Any) -> str:
    """Readable text for any JSON value.

    Models sometimes answer a string field with an object or list; those are
    flattened to ``key: value`` lines instead of being dropped.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, list):
        return "\n".join(s for s in (coerce_str(v) for v in value) if s)
    if isinstance(value, dict):
        lines = []
        for key, item in value.items():
            text = coerce_str(item)
            if text:
                lines.append(f"{key}: {text}")
        return "\n".join(lines)
    return str(value)


def coerce_str_list(value: Any) -> list[str]:
    """List of non-empty strings; a lone string becomes a one-item list."""
    if value is None:
        return []
    if isinstance(value, list):
        return [s for s in (coerce_str(v) for v in value) if s]
    text = coerce_str(value)
    return [text] if text else []


def coerce_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def coerce_dict_list(value: Any) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, dict)]


def coerce_float(value: Any, *, lo: float = 0.0, hi: float = 10.0) -> float:
    """Float clamped to [lo, hi]; ``lo`` for anything that isn't a number."""
    if isinstance(value, bool):
        return lo
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return lo
    if not isinstance(value, (int, float)) or value != value:  # NaN
        return lo
    return max(lo, min(hi, float(value)))
