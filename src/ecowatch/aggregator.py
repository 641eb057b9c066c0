"""Aggregator: weather -> (air quality | alerts | earthquakes) -> summary."""

from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta
from functools import partial
from typing import Any

from requests import Session

from ecowatch.config import EcoWatchConfig, load_config
from ecowatch.errors import ConfigurationError, SourceError
from ecowatch.fetchers.air_quality import fetch_air_quality
from ecowatch.fetchers.bulletin import fetch_alerts
from ecowatch.fetchers.seismic import fetch_seismic_events
from ecowatch.fetchers.weather import fetch_weather, resolve_location_name
from ecowatch.http import create_session
from ecowatch.models import (
    AirQualityRecord,
    AlertBulletin,
    EnvironmentalSummary,
    SeismicEvent,
    SourceOutcome,
    WeatherRecord,
)

logger = logging.getLogger(__name__)

WEATHER = "Weather"
AIR_QUALITY = "Air Quality"
ALERTS = "Alerts"
EARTHQUAKES = "Earthquakes"


def run_source(source: str, call: Callable[[], Any]) -> SourceOutcome[Any]:
    """Invoke one source and capture its value or error; never raises."""
    try:
        value = call()
    except SourceError as exc:
        logger.warning("%s source failed: %s", source, exc.message)
        return SourceOutcome(source=source, error=exc)
    except Exception as exc:
        logger.warning("%s source failed unexpectedly", source, exc_info=True)
        message = str(exc) or type(exc).__name__
        return SourceOutcome(source=source, error=SourceError(message))
    return SourceOutcome(source=source, value=value)


def build_summary(
    location_name: str,
    generated_at: datetime,
    weather: SourceOutcome[WeatherRecord],
    air_quality: SourceOutcome[AirQualityRecord],
    alerts: SourceOutcome[AlertBulletin],
    earthquakes: SourceOutcome[list[SeismicEvent]],
) -> EnvironmentalSummary:
    """Fold four source outcomes into one summary plus its error list.

    A failed alerts source is replaced by the "unavailable" bulletin; the
    other failed sources leave their field empty.
    """
    outcomes = (weather, air_quality, alerts, earthquakes)
    return EnvironmentalSummary(
        target_location_name=location_name,
        generated_at=generated_at,
        weather=weather.value if weather.ok else None,
        air_quality=air_quality.value if air_quality.ok else None,
        alerts=alerts.value if alerts.ok else AlertBulletin.unavailable(),
        seismic_events=list(earthquakes.value or []) if earthquakes.ok else [],
        source_errors=[o.describe_error() for o in outcomes if not o.ok],
    )


def collect_summary(
    location: str | None = None,
    config: EcoWatchConfig | None = None,
    *,
    session: Session | None = None,
    now: datetime | None = None,
    config_error: ConfigurationError | None = None,
) -> EnvironmentalSummary:
    """Collect weather, air quality, alerts and recent earthquakes for a location.

    Steps:
    1. Fetch weather; its coordinate feeds the air-quality lookup
    2. Fetch air quality, the warnings bulletin and the earthquake feed
       (concurrently unless ``config.concurrent`` is off)
    3. Fold every outcome into the summary; failures become ``source_errors``

    Never raises. ``now`` is the aggregation instant for the recency window.
    A session created here is closed before returning. ``config_error`` is a
    load_config failure; when set (or when loading here fails) the weather and
    air-quality sources report it instead of running.
    """
    if config is None:
        config, config_error = load_config()
    if now is None:
        now = datetime.now().astimezone()
    elif now.tzinfo is None:
        now = now.astimezone()
    if session is not None:
        return _collect(location, config, config_error, session, now)
    with create_session(user_agent=config.user_agent) as owned:
        return _collect(location, config, config_error, owned, now)


def _failing(error: SourceError) -> Callable[[], Any]:
    def call() -> Any:
        raise error

    return call


def _collect(
    location: str | None,
    config: EcoWatchConfig,
    config_error: ConfigurationError | None,
    session: Session,
    now: datetime,
) -> EnvironmentalSummary:
    """Run the three steps of collect_summary on an open session.

    With ``config_error`` set, the credentialed sources fail with it and the
    scraped sources run on defaults.
    """
    location_name = resolve_location_name(location, config.default_city)
    api_key = config.openweather_api_key
    timeout = config.request_timeout

    # Step 1: weather, the soft precondition for the air-quality coordinate
    logger.info("Collecting environmental summary for %s...", location_name)
    weather = run_source(
        WEATHER,
        _failing(config_error) if config_error else partial(
            fetch_weather,
            location_name,
            api_key,
            default_city=config.default_city,
            default_country=config.default_country,
            fallback=config.fallback_coordinate,
            timeout=timeout,
            url=config.weather_url,
            session=session,
        ),
    )
    if weather.ok:
        coordinate = weather.value.coordinate
    else:
        coordinate = config.fallback_coordinate
        logger.info("Using fallback coordinate %s for air quality", coordinate)

    # Step 2: the three independent sources
    calls: dict[str, Callable[[], Any]] = {
        AIR_QUALITY: _failing(config_error) if config_error else partial(
            fetch_air_quality,
            coordinate,
            api_key,
            timeout=timeout,
            url=config.air_quality_url,
            session=session,
        ),
        ALERTS: partial(
            fetch_alerts,
            config.region,
            timeout=timeout,
            url=config.bulletin_url,
            user_agent=config.user_agent,
            session=session,
        ),
        EARTHQUAKES: partial(
            fetch_seismic_events,
            config.region,
            now=now,
            window=timedelta(hours=config.recency_hours),
            timeout=timeout,
            url=config.seismic_url,
            user_agent=config.user_agent,
            session=session,
        ),
    }
    if config.concurrent:
        with ThreadPoolExecutor(max_workers=len(calls)) as executor:
            futures = {
                source: executor.submit(run_source, source, call)
                for source, call in calls.items()
            }
            outcomes = {source: f.result() for source, f in futures.items()}
    else:
        outcomes = {source: run_source(source, call) for source, call in calls.items()}

    # Step 3: fold
    summary = build_summary(
        location_name,
        now,
        weather,
        outcomes[AIR_QUALITY],
        outcomes[ALERTS],
        outcomes[EARTHQUAKES],
    )
    logger.info(
        "Summary for %s ready: %d earthquake(s), %d source error(s)",
        location_name,
        len(summary.seismic_events),
        len(summary.source_errors),
    )
    return summary
