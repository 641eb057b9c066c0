"""Date/time parsing for scraped feed cells with mixed day/month ordering."""

from __future__ import annotations

import re
from datetime import datetime, tzinfo

from ecowatch.text import normalize_text

_DMY_RE = re.compile(r"\b(\d{2})-(\d{2})-(\d{4})\b")

# Tried after ISO parsing fails, against the already reordered string.
_FALLBACK_FORMATS = (
    "%Y-%m-%d %I:%M %p",
    "%Y-%m-%d %I:%M:%S %p",
    "%d-%b-%Y %H:%M:%S",
    "%d-%b-%Y %H:%M",
    "%d %b %Y %H:%M:%S",
    "%d %b %Y %H:%M",
)


def canonicalize_datetime_text(date_cell: str | None, time_cell: str | None) -> str:
    """Join the two cells as "date time", using '-' separators and Y-M-D order."""
    candidate = f"{normalize_text(date_cell)} {normalize_text(time_cell)}".strip()
    candidate = candidate.replace("/", "-")
    return _DMY_RE.sub(r"\3-\2-\1", candidate)


def _parse(text: str) -> datetime | None:
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass
    for fmt in _FALLBACK_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def parse_event_timestamp(
    date_cell: str | None,
    time_cell: str | None,
    tz: tzinfo | None = None,
) -> datetime | None:
    """Parse a feed's date and time cells into an aware datetime.

    "15/03/2024" + "10:30" -> 2024-03-15 10:30. Naive values are taken to be
    in ``tz`` (the local zone when None). Returns None if unparsable.
    """
    text = canonicalize_datetime_text(date_cell, time_cell)
    if not text:
        return None
    parsed = _parse(text)
    if parsed is None:
        return None
    if parsed.tzinfo is not None:
        return parsed
    if tz is not None:
        return parsed.replace(tzinfo=tz)
    try:
        return parsed.astimezone()
    except (OverflowError, OSError, ValueError):
        return None
