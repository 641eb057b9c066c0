"""Shared HTTP session and single-attempt GET helper."""

from __future__ import annotations

import logging
from typing import Any

import requests
from requests import Response, Session
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ecowatch.errors import DataShapeError, SourceTimeoutError, UpstreamError

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "EcoWatch-Dashboard/1.0"


def create_session(
    user_agent: str = DEFAULT_USER_AGENT,
    retries: int = 0,
    backoff_factor: float = 0.5,
    status_forcelist: tuple[int, ...] = (429, 500, 502, 503, 504),
) -> Session:
    """Create a requests Session carrying the identifying User-Agent.

    Sources make a single attempt per aggregation, so retries default to 0.
    When enabled they apply only to GET requests and the listed status codes.
    """
    retry = Retry(
        total=retries,
        backoff_factor=backoff_factor,
        status_forcelist=status_forcelist,
        allowed_methods=["GET"],
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    session = Session()
    session.headers["User-Agent"] = user_agent
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


def get(
    session: Session,
    url: str,
    *,
    label: str,
    timeout: float,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> Response:
    """GET ``url`` once and translate transport failures into source errors.

    ``label`` names the upstream in error messages, e.g. "Weather API".
    Raises SourceTimeoutError, or UpstreamError for connection failures and
    non-success statuses.
    """
    try:
        resp = session.get(url, params=params, headers=headers, timeout=timeout)
    except requests.Timeout as exc:
        raise SourceTimeoutError(
            f"{label} request timed out after {timeout:g}s"
        ) from exc
    except requests.RequestException as exc:
        raise UpstreamError(f"{label} request failed: {exc}") from exc

    if not resp.ok:
        logger.debug("%s returned %d for %s", label, resp.status_code, url)
        raise UpstreamError(
            f"{label} request failed with status {resp.status_code}",
            status_code=resp.status_code,
        )
    return resp


def read_json(resp: Response, label: str) -> Any:
    """Decode a JSON body, raising DataShapeError when it is not JSON."""
    try:
        return resp.json()
    except ValueError as exc:
        raise DataShapeError(f"{label} returned a non-JSON body") from exc
