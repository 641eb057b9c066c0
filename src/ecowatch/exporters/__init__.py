"""Exporters for environmental summaries."""

from ecowatch.exporters.json_export import export_json, summary_to_dict
from ecowatch.exporters.markdown_export import export_markdown, render_digest

__all__ = ["export_json", "export_markdown", "render_digest", "summary_to_dict"]
