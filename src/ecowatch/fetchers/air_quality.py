"""OpenWeatherMap air-pollution fetcher."""

from __future__ import annotations

import logging
from typing import Any

from requests import Session

from ecowatch import http
from ecowatch.config import AIR_QUALITY_ENDPOINT
from ecowatch.errors import ConfigurationError, DataShapeError
from ecowatch.http import create_session
from ecowatch.models import AirQualityRecord, Coordinate, aqi_category

logger = logging.getLogger(__name__)


def _coerce_index(value: Any) -> int | None:
    """Numeric AQI or None; zero and non-numeric values count as missing."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not number or not number.is_integer():
        return None
    return int(number)


def parse_air_quality(
    payload: Any, source: str = AIR_QUALITY_ENDPOINT,
) -> AirQualityRecord:
    """Map the first reading of an air-pollution payload to an AirQualityRecord.

    Raises DataShapeError when the payload has no readings.
    """
    readings = payload.get("list") if isinstance(payload, dict) else None
    if not isinstance(readings, list) or not readings or not isinstance(readings[0], dict):
        raise DataShapeError("Air quality data is missing in API response")

    reading = readings[0]
    main = reading.get("main") if isinstance(reading.get("main"), dict) else {}
    index = _coerce_index(main.get("aqi"))
    components = reading.get("components")
    return AirQualityRecord(
        index=index,
        category=aqi_category(index),
        components=dict(components) if isinstance(components, dict) else {},
        source=source,
    )


def fetch_air_quality(
    coordinate: Coordinate,
    api_key: str | None,
    *,
    timeout: float = 15,
    url: str = AIR_QUALITY_ENDPOINT,
    session: Session | None = None,
) -> AirQualityRecord:
    """Fetch the current air-quality reading for a coordinate.

    Raises:
        ConfigurationError: no API key configured.
        UpstreamError: non-success status or unreachable endpoint.
        SourceTimeoutError: no answer within ``timeout`` seconds.
        DataShapeError: the response carried no readings.
    """
    if not api_key:
        raise ConfigurationError("OPENWEATHER_API_KEY is not configured")
    if session is None:
        session = create_session()

    params = {
        "lat": str(coordinate.latitude),
        "lon": str(coordinate.longitude),
        "appid": api_key,
    }
    resp = http.get(
        session, url, label="Air quality API", params=params, timeout=timeout,
    )
    record = parse_air_quality(http.read_json(resp, "Air quality API"), source=url)
    logger.debug("AQI at %s: %s (%s)", coordinate, record.index, record.category)
    return record
