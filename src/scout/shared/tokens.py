"""Post-processing for colours and fonts scraped from computed styles."""

import re

_RGB_RE = re.compile(r"rgba?\((\d+),\s*(\d+),\s*(\d+)")


def round_rgb(color: str) -> str:
    """Round each channel of an ``rgb()``/``rgba()`` string to the nearest 5.

    Anything else is returned unchanged.
    """
    m = _RGB_RE.search(color)
    if not m:
        return color
    r, g, b = (int(5 * round(int(c) / 5)) for c in m.groups())
    return f"rgb({r}, {g}, {b})"


def deduplicate_colors(colors: list[str], limit: int = 8) -> list[str]:
    """Round, dedupe (first occurrence wins) and cap a colour list."""
    seen: dict[str, None] = {}
    for color in colors:
        seen.setdefault(round_rgb(color), None)
    return list(seen)[:limit]


def clean_font_family(font_stack: str) -> str:
    """Primary font of a CSS ``font-family`` stack, without quotes."""
    return font_stack.split(",")[0].strip().replace('"', "").replace("'", "")
