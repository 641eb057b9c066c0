"""Plain-text helpers for scraped markup and display strings."""

from __future__ import annotations

import html
import math
import re
from decimal import ROUND_HALF_UP, Decimal

_SCRIPT_STYLE_RE = re.compile(
    r"<(script|style)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL
)
_TAG_RE = re.compile(r"<[^>]+>")
_WS_RE = re.compile(r"\s+")

# nbsp to space, en/em dash to hyphen
_PUNCTUATION = str.maketrans({"\xa0": " ", "\u2013": "-", "\u2014": "-"})


def collapse_whitespace(value: str | None) -> str:
    """Collapse runs of whitespace to one space and trim."""
    if not value:
        return ""
    return _WS_RE.sub(" ", value).strip()


def normalize_text(raw: str | None) -> str:
    """Decode entities, drop script/style blocks and tags, collapse whitespace.

    Never raises; ``None`` or empty input yields "".
    """
    if not raw:
        return ""
    text = html.unescape(raw).translate(_PUNCTUATION)
    text = _SCRIPT_STYLE_RE.sub(" ", text)
    text = _TAG_RE.sub(" ", text)
    return collapse_whitespace(text)


def title_case(value: str | None) -> str:
    """Lower-case everything, then capitalise the first letter of each word."""
    words = (value or "").lower().split()
    return " ".join(w[:1].upper() + w[1:] for w in words)


def round_half_up(value: object, digits: int = 1) -> float | None:
    """Round a loosely-typed numeric value, or return None if it is not a number.

    Halves round away from zero (21.5 -> 22), unlike the built-in round().
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(repr(number)).quantize(quantum, rounding=ROUND_HALF_UP))


def round_to_int(value: object) -> int | None:
    """Round to the nearest integer (halves away from zero), or None."""
    rounded = round_half_up(value, digits=0)
    return None if rounded is None else int(rounded)


def parse_number(cell: str | None) -> float | None:
    """Parse a table cell as a float; blanks and garbage yield None."""
    text = collapse_whitespace(cell)
    if not text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None
