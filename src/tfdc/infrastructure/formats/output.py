"""Rendering of command results as text, markdown or JSON."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from typing import Any

from tfdc.domain.errors import TfdcError
from tfdc.domain.models import ExportSummary

OUTPUT_FORMATS = ("text", "json", "markdown")


class FormatError(TfdcError):
    """Unsupported output format."""

    def __init__(self, fmt: str) -> None:
        super().__init__(f"unsupported format: {fmt}")
        self.format = fmt


def to_pretty_json(data: Any, *, sort_keys: bool = False) -> str:
    """Return two-space indented JSON with a trailing newline."""
    return json.dumps(data, indent=2, ensure_ascii=False, sort_keys=sort_keys) + "\n"


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _table(items: Sequence[Mapping[str, Any]], columns: Sequence[str]) -> str:
    rows = [list(columns)] + [[_cell(item.get(col)) for col in columns] for item in items]
    widths = [max(len(row[i]) for row in rows) for i in range(len(columns))]
    lines = []
    for row in rows:
        padded = [value.ljust(widths[i]) for i, value in enumerate(row[:-1])]
        lines.append("  ".join([*padded, row[-1]]))
    return "\n".join(lines) + "\n"


def _markdown_table(items: Sequence[Mapping[str, Any]], columns: Sequence[str]) -> str:
    lines = [
        f"| {' | '.join(columns)} |",
        f"| {' | '.join('---' for _ in columns)} |",
    ]
    for item in items:
        lines.append(f"| {' | '.join(_cell(item.get(col)) for col in columns)} |")
    return "\n".join(lines) + "\n"


def render_search(
    fmt: str,
    items: Sequence[Mapping[str, Any]],
    total: int,
    columns: Sequence[str],
) -> str:
    """Render search results; ``columns`` picks and orders table fields."""
    if fmt == "json":
        return to_pretty_json({"items": [dict(item) for item in items], "total": total})
    if fmt == "text":
        return _table(items, columns)
    if fmt == "markdown":
        return _markdown_table(items, columns)
    raise FormatError(fmt)


def render_detail(fmt: str, doc_id: str, content: str, content_type: str) -> str:
    """Render a single fetched document."""
    if fmt == "json":
        return to_pretty_json({"id": doc_id, "content": content, "content_type": content_type})
    if fmt in ("text", "markdown"):
        return content
    raise FormatError(fmt)


def _summary_text(summary: ExportSummary) -> str:
    return (
        f"exported {summary.written} docs for {summary.provider}@{summary.version}\n"
        f"manifest: {summary.manifest}\n"
    )


def _summary_markdown(summary: ExportSummary) -> str:
    return (
        f"- provider: `{summary.provider}`\n"
        f"- version: `{summary.version}`\n"
        f"- written: `{summary.written}`\n"
        f"- manifest: `{summary.manifest}`\n"
    )


def render_export_summaries(fmt: str, summaries: Sequence[ExportSummary]) -> str:
    """Render one export summary, or a batch from a lock file.

    A single summary renders as a JSON object, a batch as a JSON list.
    """
    if fmt == "json":
        if len(summaries) == 1:
            return to_pretty_json(summaries[0].to_dict())
        return to_pretty_json([summary.to_dict() for summary in summaries])
    if fmt == "text":
        return "".join(_summary_text(summary) for summary in summaries)
    if fmt == "markdown":
        return "\n".join(_summary_markdown(summary) for summary in summaries)
    raise FormatError(fmt)


__all__ = [
    "OUTPUT_FORMATS",
    "FormatError",
    "render_detail",
    "render_export_summaries",
    "render_search",
    "to_pretty_json",
]
