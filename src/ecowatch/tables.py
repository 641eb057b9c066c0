"""Best-effort extraction of HTML table rows as ordered cell texts."""

from __future__ import annotations

import logging

from bs4 import BeautifulSoup, Comment, Tag
from bs4.builder import ParserRejectedMarkup

from ecowatch.text import normalize_text

logger = logging.getLogger(__name__)

_CELL_TAGS = ["td", "th"]
_SKIP_PARENTS = {"script", "style"}


def _cell_text(cell: Tag) -> str:
    """Text directly owned by ``cell``, excluding cells nested inside it."""
    parts: list[str] = []
    for string in cell.find_all(string=True):
        parent = string.parent
        if isinstance(string, Comment) or parent is None:
            continue
        if parent.name in _SKIP_PARENTS:
            continue
        if string.find_parent(_CELL_TAGS) is not cell:
            continue
        parts.append(str(string))
    return normalize_text(" ".join(parts))


def extract_table_rows(document: str | None) -> list[list[str]]:
    """Return every <tr> in document order as a list of normalized cell texts.

    Rows without any <td>/<th> are omitted. Malformed or partial markup is
    tolerated; anything the parser refuses yields an empty list.
    """
    if not document:
        return []
    try:
        soup = BeautifulSoup(document, "html.parser")
    except ParserRejectedMarkup:
        logger.warning("Parser rejected table markup (%d chars)", len(document))
        return []

    rows: list[list[str]] = []
    for row in soup.find_all("tr"):
        cells = [
            _cell_text(cell)
            for cell in row.find_all(_CELL_TAGS)
            if cell.find_parent("tr") is row
        ]
        if cells:
            rows.append(cells)
    return rows
