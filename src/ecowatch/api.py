"""FastAPI wrapper for the environmental signal aggregator."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Annotated, Any

from fastapi import FastAPI, Query
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from ecowatch import __version__
from ecowatch.aggregator import collect_summary
from ecowatch.config import OutputFormat, load_config
from ecowatch.exporters import render_digest, summary_to_dict

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncGenerator[None, None]:
    """Store startup state for the /health endpoint."""
    application.state.start_time = datetime.now(tz=timezone.utc)
    application.state.last_run = None
    application.state.run_count = 0
    yield


app = FastAPI(
    title="EcoWatch API",
    description="Regional weather, air-quality, warning and seismic summaries.",
    version=__version__,
    lifespan=lifespan,
)


@app.get("/health")
def health() -> dict[str, Any]:
    """Server health check with uptime, version, and run count."""
    now = datetime.now(tz=timezone.utc)
    return {
        "status": "ok",
        "version": __version__,
        "uptime_seconds": round((now - app.state.start_time).total_seconds(), 1),
        "last_run": app.state.last_run.isoformat() if app.state.last_run else None,
        "run_count": app.state.run_count,
    }


@app.get("/summary")
def get_summary(
    location: Annotated[
        str | None, Query(description="City name; defaults to the configured city."),
    ] = None,
    format: Annotated[
        OutputFormat, Query(description="Output format."),
    ] = "json",
    region: Annotated[
        str | None, Query(description="Region matched in alerts and earthquakes."),
    ] = None,
) -> Response:
    """Collect an environmental summary.

    Always answers 200: failed sources are listed in ``source_errors``
    rather than failing the request.
    """
    config, config_error = load_config(**({"region": region} if region else {}))
    summary = collect_summary(location, config, config_error=config_error)

    app.state.last_run = datetime.now(tz=timezone.utc)
    app.state.run_count += 1

    if format == "markdown":
        return PlainTextResponse(
            render_digest(summary, config.region, config.recency_hours),
            media_type="text/markdown; charset=utf-8",
        )
    return JSONResponse(content=summary_to_dict(summary))
