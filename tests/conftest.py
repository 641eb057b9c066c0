"""Shared fixtures for ecowatch tests."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path

import pytest

from ecowatch.config import AIR_QUALITY_ENDPOINT, WEATHER_ENDPOINT, EcoWatchConfig
from ecowatch.models import (
    AirQualityRecord,
    AlertBulletin,
    Coordinate,
    EnvironmentalSummary,
    SeismicEvent,
    WeatherRecord,
)

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer credentials and overrides out of the tests."""
    monkeypatch.delenv("OPENWEATHER_API_KEY", raising=False)
    monkeypatch.delenv("ECOWATCH_OPENWEATHER_API_KEY", raising=False)
    monkeypatch.delenv("ECOWATCH_REGION", raising=False)


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def bulletin_html() -> str:
    return (FIXTURES_DIR / "imd_bulletin.html").read_text(encoding="utf-8")


@pytest.fixture
def seismic_html() -> str:
    return (FIXTURES_DIR / "riseq_feed.html").read_text(encoding="utf-8")


@pytest.fixture
def sample_weather_response() -> dict:
    return json.loads((FIXTURES_DIR / "weather_sample.json").read_text())


@pytest.fixture
def sample_air_quality_response() -> dict:
    return json.loads((FIXTURES_DIR / "air_quality_sample.json").read_text())


@pytest.fixture
def fixed_now() -> datetime:
    """Aggregation instant matching the dates in riseq_feed.html (local time)."""
    return datetime(2024, 3, 15, 12, 0).astimezone()


@pytest.fixture
def config() -> EcoWatchConfig:
    return EcoWatchConfig(openweather_api_key="test-key", concurrent=False)


@pytest.fixture
def sample_summary(fixed_now: datetime) -> EnvironmentalSummary:
    """A fully-populated summary for exporter and API tests."""
    return EnvironmentalSummary(
        target_location_name="Dehradun",
        generated_at=fixed_now,
        weather=WeatherRecord(
            location_name="Dehradun",
            country_code="IN",
            coordinate=Coordinate(30.3165, 78.0322),
            temperature_celsius=22,
            condition="Scattered Clouds",
            humidity_percent=54,
            rainfall_mm=1.2,
            source=WEATHER_ENDPOINT,
        ),
        air_quality=AirQualityRecord(
            index=3,
            category="Moderate",
            components={"pm2_5": 31.7, "pm10": 48.21},
            source=AIR_QUALITY_ENDPOINT,
        ),
        alerts=AlertBulletin(
            summary_line="Heavy Rain at isolated places",
            notices=["Heavy Rain at isolated places", "Thunderstorm & Lightning"],
        ),
        seismic_events=[
            SeismicEvent(
                location="23km SW of Uttarkashi, UTTARAKHAND, India",
                magnitude=2.9,
                timestamp=datetime(2024, 3, 15, 11, 5, 12).astimezone(),
            ),
        ],
    )
