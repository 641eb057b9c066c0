"""Data models for the environmental signal aggregator."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Generic, TypeVar

from ecowatch.errors import SourceError

T = TypeVar("T")

AQI_CATEGORIES: dict[int, str] = {
    1: "Good",
    2: "Fair",
    3: "Moderate",
    4: "Poor",
    5: "Very Poor",
}
AQI_UNAVAILABLE = "Unavailable"

NO_WARNINGS_SUMMARY = "No major warnings today."
ALERTS_UNAVAILABLE_SUMMARY = "Alerts service unavailable."


def aqi_category(index: int | float | None) -> str:
    """Map an OpenWeatherMap AQI ordinal to its label; anything else is Unavailable."""
    if index is None or isinstance(index, bool):
        return AQI_UNAVAILABLE
    if isinstance(index, float):
        if not index.is_integer():
            return AQI_UNAVAILABLE
        index = int(index)
    return AQI_CATEGORIES.get(index, AQI_UNAVAILABLE)


@dataclass(frozen=True)
class Coordinate:
    """A latitude/longitude pair in decimal degrees."""

    latitude: float
    longitude: float


DEFAULT_COORDINATE = Coordinate(latitude=30.3165, longitude=78.0322)


@dataclass(frozen=True)
class WeatherRecord:
    """Current conditions for a named location."""

    location_name: str
    country_code: str
    coordinate: Coordinate
    temperature_celsius: int | None
    condition: str
    humidity_percent: int | None
    rainfall_mm: float = 0.0
    source: str = ""


@dataclass(frozen=True)
class AirQualityRecord:
    """Air-quality index and pollutant concentrations (μg/m³)."""

    index: int | None
    category: str
    components: dict[str, float] = field(default_factory=dict)
    source: str = ""


@dataclass(frozen=True)
class AlertBulletin:
    """Severe-weather notices for the target region."""

    summary_line: str
    notices: list[str] = field(default_factory=list)

    @classmethod
    def no_warnings(cls) -> AlertBulletin:
        return cls(summary_line=NO_WARNINGS_SUMMARY)

    @classmethod
    def unavailable(cls) -> AlertBulletin:
        return cls(summary_line=ALERTS_UNAVAILABLE_SUMMARY)


@dataclass(frozen=True)
class SeismicEvent:
    """One row of the recent-earthquake feed."""

    location: str
    magnitude: float | None
    timestamp: datetime | None


@dataclass
class EnvironmentalSummary:
    """Composite result of one aggregation call.

    A source that failed leaves its field empty (or, for alerts, the
    "unavailable" bulletin) and contributes one line to ``source_errors``.
    """

    target_location_name: str
    generated_at: datetime
    weather: WeatherRecord | None = None
    air_quality: AirQualityRecord | None = None
    alerts: AlertBulletin | None = None
    seismic_events: list[SeismicEvent] = field(default_factory=list)
    source_errors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class SourceOutcome(Generic[T]):
    """Tagged result of one source call: a value or the error that stopped it."""

    source: str
    value: T | None = None
    error: SourceError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def describe_error(self) -> str:
        """Return the "Source: message" line recorded in the summary."""
        if self.error is None:
            return ""
        return f"{self.source}: {self.error.message}"
