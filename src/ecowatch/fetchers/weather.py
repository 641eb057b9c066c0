"""OpenWeatherMap current-weather fetcher."""

from __future__ import annotations

import logging
import math
from typing import Any

from requests import Session

from ecowatch import http
from ecowatch.config import WEATHER_ENDPOINT
from ecowatch.errors import ConfigurationError, DataShapeError
from ecowatch.http import create_session
from ecowatch.models import DEFAULT_COORDINATE, Coordinate, WeatherRecord
from ecowatch.text import round_half_up, round_to_int, title_case

logger = logging.getLogger(__name__)

DEFAULT_CITY = "Dehradun"
DEFAULT_COUNTRY = "IN"


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def resolve_location_name(location: str | None, default: str = DEFAULT_CITY) -> str:
    """Trim ``location``, fall back to ``default`` and title-case the result."""
    return title_case((location or "").strip() or default)


def extract_rainfall(rain: dict[str, Any] | None) -> float:
    """Rainfall in mm: the 1h figure, else the 3h figure, else 0.

    Rounded to one decimal; never None and never negative.
    """
    if not isinstance(rain, dict):
        return 0.0
    for key in ("1h", "3h"):
        if rain.get(key) is not None:
            value = round_half_up(rain[key], digits=1)
            return max(value, 0.0) if value is not None else 0.0
    return 0.0


def _axis(value: Any, default: float) -> float:
    """A finite float from ``value``, else ``default``."""
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


def extract_coordinate(
    payload: dict[str, Any], fallback: Coordinate = DEFAULT_COORDINATE,
) -> Coordinate:
    """Read the ``coord`` block; missing or non-numeric axes come from ``fallback``."""
    coord = _as_dict(payload.get("coord"))
    return Coordinate(
        latitude=_axis(coord.get("lat"), fallback.latitude),
        longitude=_axis(coord.get("lon"), fallback.longitude),
    )


def parse_weather(
    payload: dict[str, Any],
    location_name: str,
    fallback: Coordinate = DEFAULT_COORDINATE,
    default_country: str = DEFAULT_COUNTRY,
    source: str = WEATHER_ENDPOINT,
) -> WeatherRecord:
    """Map an OpenWeatherMap current-weather payload to a WeatherRecord."""
    if not isinstance(payload, dict):
        raise DataShapeError("Weather API response is not a JSON object")

    conditions = payload.get("weather")
    description = ""
    if isinstance(conditions, list) and conditions and isinstance(conditions[0], dict):
        description = conditions[0].get("description") or ""

    main = _as_dict(payload.get("main"))
    return WeatherRecord(
        location_name=location_name,
        country_code=_as_dict(payload.get("sys")).get("country") or default_country,
        coordinate=extract_coordinate(payload, fallback),
        temperature_celsius=round_to_int(main.get("temp")),
        condition=title_case(description or "Unavailable"),
        humidity_percent=round_to_int(main.get("humidity")),
        rainfall_mm=extract_rainfall(payload.get("rain")),
        source=source,
    )


def fetch_weather(
    location: str | None,
    api_key: str | None,
    *,
    default_city: str = DEFAULT_CITY,
    default_country: str = DEFAULT_COUNTRY,
    fallback: Coordinate = DEFAULT_COORDINATE,
    timeout: float = 15,
    url: str = WEATHER_ENDPOINT,
    session: Session | None = None,
) -> WeatherRecord:
    """Fetch current weather for a city name in metric units.

    Raises:
        ConfigurationError: no API key configured.
        UpstreamError: non-success status or unreachable endpoint.
        SourceTimeoutError: no answer within ``timeout`` seconds.
        DataShapeError: the body is not a JSON object.
    """
    if not api_key:
        raise ConfigurationError("OPENWEATHER_API_KEY is not configured")
    if session is None:
        session = create_session()

    location_name = resolve_location_name(location, default_city)
    params = {"q": location_name, "units": "metric", "appid": api_key}
    resp = http.get(session, url, label="Weather API", params=params, timeout=timeout)
    payload = http.read_json(resp, "Weather API")

    record = parse_weather(
        payload,
        location_name,
        fallback=fallback,
        default_country=default_country,
        source=url,
    )
    logger.debug(
        "Weather for %s: %s°C, %s",
        record.location_name,
        record.temperature_celsius,
        record.condition,
    )
    return record
