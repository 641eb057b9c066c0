"""Markdown digest exporter for environmental summaries."""

from __future__ import annotations

from pathlib import Path

from ecowatch.models import (
    ALERTS_UNAVAILABLE_SUMMARY,
    NO_WARNINGS_SUMMARY,
    AirQualityRecord,
    AlertBulletin,
    EnvironmentalSummary,
    SeismicEvent,
)

DATA_UNAVAILABLE = "Data unavailable"


def format_temperature(value: int | None) -> str:
    return DATA_UNAVAILABLE if value is None else f"{value}°C"


def format_humidity(value: int | None) -> str:
    return DATA_UNAVAILABLE if value is None else f"{value}%"


def format_rainfall(value: float | None) -> str:
    if not value:
        return "No rainfall expected"
    return f"{value:g} mm"


def format_air_quality(air_quality: AirQualityRecord | None) -> str:
    if air_quality is None or not air_quality.index:
        return "Air quality data unavailable."
    return f"Air Quality Index: {air_quality.index} / 5 ({air_quality.category})."


def format_alerts(alerts: AlertBulletin | None) -> list[str]:
    """One line per notice, or the bulletin's summary line when there are none."""
    if alerts is None:
        return [ALERTS_UNAVAILABLE_SUMMARY]
    if alerts.notices:
        return list(alerts.notices)
    return [alerts.summary_line or NO_WARNINGS_SUMMARY]


def format_latest_earthquake(
    events: list[SeismicEvent], region: str, window_hours: int = 24,
) -> str:
    """Describe the most recent event, or say the region has been quiet."""
    if not events:
        unit = "hour" if window_hours == 1 else f"{window_hours} hours"
        return (
            f"No significant seismic activity recorded in {region} "
            f"in the last {unit}."
        )
    latest = events[0]
    magnitude = (
        f"Magnitude {latest.magnitude:.1f}"
        if latest.magnitude
        else "Magnitude not reported"
    )
    location = latest.location or region
    when = latest.timestamp.strftime("%d %b, %H:%M") if latest.timestamp else "Recent"
    return f"{magnitude} near {location} ({when})."


def render_digest(
    summary: EnvironmentalSummary,
    region: str = "Uttarakhand",
    window_hours: int = 24,
) -> str:
    """Render the daily environmental digest as Markdown."""
    weather = summary.weather
    temperature = weather.temperature_celsius if weather else None
    humidity = weather.humidity_percent if weather else None
    rainfall = weather.rainfall_mm if weather else None
    condition = weather.condition if weather else DATA_UNAVAILABLE
    stamp = summary.generated_at.strftime("%d %b %Y, %H:%M")
    lines: list[str] = [
        f"# Daily Environmental Update for {summary.target_location_name}",
        f"Generated: {stamp}",
        "",
        "## Conditions",
        "",
        f"- **Temperature:** {format_temperature(temperature)}",
        f"- **Condition:** {condition}",
        f"- **Humidity:** {format_humidity(humidity)}",
        f"- **Rainfall Expected:** {format_rainfall(rainfall)}",
        f"- **{format_air_quality(summary.air_quality)}**",
        "",
        "## Alerts",
        "",
    ]
    lines.extend(f"- {line}" for line in format_alerts(summary.alerts))
    lines.extend([
        "",
        "## Earthquake Updates",
        "",
        format_latest_earthquake(summary.seismic_events, region, window_hours),
    ])

    if summary.source_errors:
        lines.extend(["", "## Source Issues", ""])
        lines.extend(f"- {err}" for err in summary.source_errors)

    lines.append("")
    return "\n".join(lines)


def export_markdown(
    summary: EnvironmentalSummary,
    output_path: Path,
    *,
    region: str = "Uttarakhand",
    window_hours: int = 24,
) -> Path:
    """Export a summary as a Markdown digest."""
    output_path.write_text(
        render_digest(summary, region, window_hours), encoding="utf-8",
    )
    return output_path
