"""CLI interface using Typer."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from ecowatch import __version__
from ecowatch.aggregator import collect_summary
from ecowatch.config import EcoWatchConfig, OutputFormat, load_config
from ecowatch.exporters import export_json, export_markdown
from ecowatch.exporters.markdown_export import (
    format_air_quality,
    format_humidity,
    format_latest_earthquake,
    format_rainfall,
    format_temperature,
)
from ecowatch.models import EnvironmentalSummary

Exporter = Callable[[EnvironmentalSummary, Path, EcoWatchConfig], Path]

EXPORTERS: dict[str, Exporter] = {
    "json": lambda s, path, cfg: export_json(s, path),
    "markdown": lambda s, path, cfg: export_markdown(
        s, path, region=cfg.region, window_hours=cfg.recency_hours,
    ),
}

app = typer.Typer(
    name="ecowatch",
    help="Regional weather, air-quality, warning and seismic summaries.",
    add_completion=False,
)
console = Console()


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"ecowatch {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=_version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """EcoWatch — environmental signals for a city and its region."""


def _summary_table(summary: EnvironmentalSummary, config: EcoWatchConfig) -> Table:
    weather = summary.weather
    table = Table(title=f"Environmental Summary: {summary.target_location_name}")
    table.add_column("Signal", style="bold")
    table.add_column("Value")

    table.add_row(
        "Temperature",
        format_temperature(weather.temperature_celsius if weather else None),
    )
    table.add_row("Condition", weather.condition if weather else "-")
    table.add_row(
        "Humidity", format_humidity(weather.humidity_percent if weather else None),
    )
    table.add_row(
        "Rainfall", format_rainfall(weather.rainfall_mm if weather else None),
    )
    table.add_row("Air quality", format_air_quality(summary.air_quality))
    if summary.alerts is not None:
        table.add_row("Alerts", summary.alerts.summary_line)
    table.add_row(
        "Earthquakes",
        format_latest_earthquake(
            summary.seismic_events, config.region, config.recency_hours,
        ),
    )
    return table


@app.command()
def summary(
    location: Annotated[
        str | None,
        typer.Argument(help="City name (defaults to the configured city)."),
    ] = None,
    region: Annotated[
        str | None,
        typer.Option("--region", "-r", help="Region matched in alerts and quakes."),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Output file path."),
    ] = None,
    output_format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format: json or markdown."),
    ] = "json",
    timeout: Annotated[
        int | None,
        typer.Option("--timeout", help="Per-request timeout in seconds."),
    ] = None,
    sequential: Annotated[
        bool,
        typer.Option("--sequential", help="Query sources one at a time."),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging."),
    ] = False,
) -> None:
    """Collect and export an environmental summary."""
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[logging.StreamHandler()],
    )

    overrides: dict[str, object] = {
        "output_format": output_format,
        "concurrent": not sequential,
    }
    if region is not None:
        overrides["region"] = region
    if output is not None:
        overrides["output_file"] = output
    elif output_format == "markdown":
        overrides["output_file"] = Path("ecowatch_summary.md")
    if timeout is not None:
        overrides["request_timeout"] = timeout
    config, config_error = load_config(**overrides)

    result = collect_summary(location, config, config_error=config_error)

    exporter = EXPORTERS[config.output_format]
    exporter(result, config.output_file, config)

    console.print()
    console.print(_summary_table(result, config))
    if result.alerts is not None and len(result.alerts.notices) > 1:
        for notice in result.alerts.notices[1:]:
            console.print(f"  [yellow]•[/yellow] {notice}")
    if result.source_errors:
        console.print("\n[dim]Some sources were unavailable:[/dim]")
        for err in result.source_errors:
            console.print(f"  [dim]- {err}[/dim]")
    console.print(
        f"\n{config.output_format.upper()} written to [bold]{config.output_file}[/bold]"
    )
