"""IMD sub-division warnings bulletin scraper."""

from __future__ import annotations

import logging
import re

from requests import Session

from ecowatch import http
from ecowatch.config import BULLETIN_URL
from ecowatch.http import create_session
from ecowatch.models import AlertBulletin
from ecowatch.tables import extract_table_rows
from ecowatch.text import collapse_whitespace

logger = logging.getLogger(__name__)

DEFAULT_REGION = "Uttarakhand"

# Matched anywhere in the cell, so "Nil" and "No warning issued" both drop.
_EMPTY_NOTICE_RE = re.compile(r"n/a|nil|no warning", re.IGNORECASE)


def find_region_row(rows: list[list[str]], region: str) -> list[str] | None:
    """First row with any cell containing ``region`` (case-insensitive)."""
    needle = region.lower()
    for row in rows:
        if any(needle in cell.lower() for cell in row):
            return row
    return None


def extract_notices(row: list[str]) -> list[str]:
    """Distinct notice cells of a bulletin row, skipping the leading label cell."""
    notices: list[str] = []
    for cell in row[1:]:
        notice = collapse_whitespace(cell)
        if not notice or _EMPTY_NOTICE_RE.search(notice):
            continue
        if notice in notices:
            continue
        notices.append(notice)
    return notices


def parse_bulletin(document: str, region: str = DEFAULT_REGION) -> AlertBulletin:
    """Build the region's AlertBulletin from the bulletin page markup."""
    row = find_region_row(extract_table_rows(document), region)
    if row is None:
        return AlertBulletin.no_warnings()

    notices = extract_notices(row)
    if not notices:
        return AlertBulletin.no_warnings()
    return AlertBulletin(summary_line=notices[0], notices=notices)


def fetch_alerts(
    region: str = DEFAULT_REGION,
    *,
    timeout: float = 15,
    url: str = BULLETIN_URL,
    user_agent: str = http.DEFAULT_USER_AGENT,
    session: Session | None = None,
) -> AlertBulletin:
    """Fetch the warnings bulletin and summarise the row for ``region``.

    A page without a matching row is not an error: it yields the
    "No major warnings today." bulletin.
    """
    if session is None:
        session = create_session(user_agent=user_agent)

    resp = http.get(
        session,
        url,
        label="IMD alert",
        headers={"User-Agent": user_agent},
        timeout=timeout,
    )
    bulletin = parse_bulletin(resp.text, region)
    logger.debug("%s bulletin: %d notice(s)", region, len(bulletin.notices))
    return bulletin
