"""RISEQ recent-earthquake table scraper."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, tzinfo

from requests import Session

from ecowatch import http
from ecowatch.config import SEISMIC_FEED_URL
from ecowatch.http import create_session
from ecowatch.models import SeismicEvent
from ecowatch.tables import extract_table_rows
from ecowatch.text import parse_number, round_half_up
from ecowatch.timeparse import parse_event_timestamp

logger = logging.getLogger(__name__)

DEFAULT_REGION = "Uttarakhand"
MIN_FEED_CELLS = 6

# Magnitude cell indexes in order of preference.
_MAGNITUDE_CELLS = (4, 3)


def extract_magnitude(cells: list[str]) -> float | None:
    """First non-zero numeric magnitude cell, rounded to one decimal."""
    for idx in _MAGNITUDE_CELLS:
        if idx >= len(cells):
            continue
        value = parse_number(cells[idx])
        if value:
            return round_half_up(value, digits=1)
    return None


def parse_event_row(
    cells: list[str], region: str, tz: tzinfo | None = None,
) -> SeismicEvent | None:
    """Build a SeismicEvent from one feed row, or None if it is outside ``region``."""
    if len(cells) < MIN_FEED_CELLS:
        return None
    location = cells[-1]
    if region.lower() not in location.lower():
        return None
    return SeismicEvent(
        location=location,
        magnitude=extract_magnitude(cells),
        timestamp=parse_event_timestamp(cells[0], cells[1], tz=tz),
    )


def _sort_key(event: SeismicEvent) -> float:
    return event.timestamp.timestamp() if event.timestamp is not None else float("-inf")


def select_recent(
    events: list[SeismicEvent],
    now: datetime,
    window: timedelta = timedelta(hours=24),
) -> list[SeismicEvent]:
    """Events within ``window`` before ``now``, most recent first.

    Events without a timestamp cannot be shown to be recent and are dropped.
    ``now`` must be timezone-aware.
    """
    cutoff = now - window
    ordered = sorted(events, key=_sort_key, reverse=True)
    return [e for e in ordered if e.timestamp is not None and e.timestamp >= cutoff]


def parse_seismic_feed(
    document: str,
    region: str = DEFAULT_REGION,
    now: datetime | None = None,
    window: timedelta = timedelta(hours=24),
    tz: tzinfo | None = None,
) -> list[SeismicEvent]:
    """Extract, region-filter and recency-window the events in a feed page."""
    if now is None:
        now = datetime.now().astimezone()
    events = []
    for cells in extract_table_rows(document):
        event = parse_event_row(cells, region, tz=tz)
        if event is not None:
            events.append(event)
    recent = select_recent(events, now, window)
    logger.debug(
        "%d %s event(s) in feed, %d within %s", len(events), region, len(recent), window,
    )
    return recent


def fetch_seismic_events(
    region: str = DEFAULT_REGION,
    *,
    now: datetime | None = None,
    window: timedelta = timedelta(hours=24),
    timeout: float = 15,
    url: str = SEISMIC_FEED_URL,
    user_agent: str = http.DEFAULT_USER_AGENT,
    session: Session | None = None,
) -> list[SeismicEvent]:
    """Fetch the recent-earthquake feed and return ``region`` events in the window."""
    if session is None:
        session = create_session(user_agent=user_agent)

    resp = http.get(
        session,
        url,
        label="Earthquake feed",
        headers={"User-Agent": user_agent},
        timeout=timeout,
    )
    return parse_seismic_feed(resp.text, region, now=now, window=window)
