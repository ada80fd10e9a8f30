"""Output format helpers."""

from tfdc.infrastructure.formats.output import (
    OUTPUT_FORMATS,
    FormatError,
    render_detail,
    render_export_summaries,
    render_search,
    to_pretty_json,
)

__all__ = [
    "OUTPUT_FORMATS",
    "FormatError",
    "render_detail",
    "render_export_summaries",
    "render_search",
    "to_pretty_json",
]
