"""JSON exporter for environmental summaries."""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Any

from ecowatch.models import EnvironmentalSummary


def _isoformat_datetimes(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _isoformat_datetimes(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_isoformat_datetimes(v) for v in value]
    return value


def summary_to_dict(summary: EnvironmentalSummary) -> dict[str, Any]:
    """Plain-dict form of a summary with timestamps as ISO-8601 strings."""
    return _isoformat_datetimes(asdict(summary))  # type: ignore[no-any-return]


def export_json(
    summary: EnvironmentalSummary,
    output_path: Path,
    indent: int = 2,
) -> Path:
    """Export a summary to a JSON file."""
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(summary_to_dict(summary), f, indent=indent, ensure_ascii=False)
    return output_path
