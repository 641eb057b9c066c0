"""Configuration model for the environmental signal aggregator."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Literal

from pydantic import AliasChoices, Field, ValidationError
from pydantic_settings import BaseSettings

from ecowatch.errors import ConfigurationError
from ecowatch.models import Coordinate

logger = logging.getLogger(__name__)

OutputFormat = Literal["json", "markdown"]

WEATHER_ENDPOINT = "https://api.openweathermap.org/data/2.5/weather"
AIR_QUALITY_ENDPOINT = "https://api.openweathermap.org/data/2.5/air_pollution"
BULLETIN_URL = (
    "https://mausam.imd.gov.in/imd_latest/contents/subdivisionwise-warning.php"
)
SEISMIC_FEED_URL = "https://riseq.seismo.gov.in/riseq/earthquake/recent_earthquake"


class EcoWatchConfig(BaseSettings):
    """All configurable parameters for one aggregation run.

    Values can be set via constructor arguments, environment variables
    prefixed with ECOWATCH_, or defaults. The OpenWeatherMap key is also
    picked up from a bare OPENWEATHER_API_KEY variable.
    """

    model_config = {"env_prefix": "ECOWATCH_", "populate_by_name": True}

    openweather_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "openweather_api_key",
            "ECOWATCH_OPENWEATHER_API_KEY",
            "OPENWEATHER_API_KEY",
        ),
        description="OpenWeatherMap credential for weather and air quality.",
    )
    default_city: str = Field(
        default="Dehradun", description="City used when no location is given."
    )
    default_country: str = Field(
        default="IN", description="Country code used when weather omits one."
    )
    fallback_latitude: float = Field(
        default=30.3165, ge=-90.0, le=90.0, description="Fallback latitude."
    )
    fallback_longitude: float = Field(
        default=78.0322, ge=-180.0, le=180.0, description="Fallback longitude."
    )
    region: str = Field(
        default="Uttarakhand",
        description="Region name matched in bulletin and seismic rows.",
    )
    request_timeout: int = Field(
        default=15, ge=1, le=120, description="HTTP request timeout in seconds."
    )
    recency_hours: int = Field(
        default=24, ge=1, le=168, description="Seismic recency window in hours."
    )
    user_agent: str = Field(
        default="EcoWatch-Dashboard/1.0",
        description="User-Agent sent to the scraped HTML sources.",
    )
    weather_url: str = Field(default=WEATHER_ENDPOINT)
    air_quality_url: str = Field(default=AIR_QUALITY_ENDPOINT)
    bulletin_url: str = Field(default=BULLETIN_URL)
    seismic_url: str = Field(default=SEISMIC_FEED_URL)
    concurrent: bool = Field(
        default=True,
        description="Fetch air quality, alerts and earthquakes in parallel.",
    )
    output_file: Path = Field(
        default=Path("ecowatch_summary.json"), description="Output file path."
    )
    output_format: OutputFormat = Field(
        default="json", description="Output format: json or markdown."
    )

    @property
    def fallback_coordinate(self) -> Coordinate:
        return Coordinate(self.fallback_latitude, self.fallback_longitude)


def load_config(**overrides: Any) -> tuple[EcoWatchConfig, ConfigurationError | None]:
    """Build the config from the environment without raising.

    When a value fails validation the defaults are returned (environment
    ignored) together with a ConfigurationError naming the bad settings.
    """
    try:
        return EcoWatchConfig(**overrides), None
    except ValidationError as exc:
        fields = sorted({str(err["loc"][0]) if err["loc"] else "?" for err in exc.errors()})
        logger.warning("Invalid configuration, using defaults: %s", exc)
        error = ConfigurationError(f"Invalid configuration: {', '.join(fields)}")
        valid = {k: v for k, v in overrides.items() if k not in fields}
        return EcoWatchConfig.model_construct(**valid), error
