"""Provider documentation commands."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import click

from tfdc.application.provider.export import export_docs, preflight_export_options
from tfdc.application.provider.search import SEARCH_COLUMNS, SearchOptions, get_doc, search_docs
from tfdc.cli.progress import Spinner
from tfdc.cli.utils import (
    build_client,
    emit,
    get_global_options,
    handle_errors,
    validate_cache_options,
)
from tfdc.domain.errors import ValidationError
from tfdc.domain.models import ExportOptions, ExportSummary
from tfdc.domain.types import DEFAULT_NAMESPACE, DEFAULT_PATH_TEMPLATE
from tfdc.infrastructure.formats.output import (
    render_detail,
    render_export_summaries,
    render_search,
)
from tfdc.infrastructure.lockfile.parser import parse_lockfile


@click.group(name="provider")
def provider() -> None:
    """Search, read and export Terraform provider docs."""


@provider.command(name="search")
@click.option("--name", default="", help="Provider name (e.g. aws).")
@click.option("--namespace", default=DEFAULT_NAMESPACE, show_default=True, help="Provider namespace.")
@click.option("--service", default="", help="Slug substring to match (e.g. s3).")
@click.option("--type", "doc_type", default="", help="Doc category (resources, guides, ...).")
@click.option("--version", default="latest", show_default=True, help="Provider version or latest.")
@click.option("--limit", type=int, default=20, show_default=True, help="Maximum results.")
@click.pass_context
@handle_errors
def search(
    ctx: click.Context,
    name: str,
    namespace: str,
    service: str,
    doc_type: str,
    version: str,
    limit: int,
) -> None:
    """Find provider docs by service slug."""
    options = validate_cache_options(get_global_options(ctx))
    client = build_client(options)
    results = search_docs(
        client,
        SearchOptions(
            name=name,
            namespace=namespace,
            service=service,
            type=doc_type,
            version=version,
            limit=limit,
        ),
    )
    items = [result.to_dict() for result in results]
    emit(options, render_search(options.output, items, len(items), SEARCH_COLUMNS))


@provider.command(name="get")
@click.option("--doc-id", default="", help="Numeric provider doc ID.")
@click.pass_context
@handle_errors
def get(ctx: click.Context, doc_id: str) -> None:
    """Print one provider doc."""
    options = validate_cache_options(get_global_options(ctx))
    client = build_client(options)
    doc = get_doc(client, doc_id)
    emit(options, render_detail(options.output, doc.id, doc.content, doc.content_type))


def _export_targets(base: ExportOptions, lockfile: Path | None) -> list[ExportOptions]:
    if lockfile is None:
        return [base]
    locks = parse_lockfile(lockfile)
    if not locks:
        raise ValidationError(f"no providers found in lockfile {lockfile}")
    return [
        replace(base, namespace=lock.namespace, name=lock.name, version=lock.version)
        for lock in locks
    ]


@provider.command(name="export")
@click.option("--namespace", default=DEFAULT_NAMESPACE, show_default=True, help="Provider namespace.")
@click.option("--name", default="", help="Provider name.")
@click.option("--version", default="", help="Exact provider version.")
@click.option(
    "--format",
    "export_format",
    default="markdown",
    show_default=True,
    help="Persisted format: markdown or json.",
)
@click.option("--out-dir", default="", help="Output directory.")
@click.option(
    "--categories",
    default="all",
    show_default=True,
    help="Comma-separated categories, or all.",
)
@click.option(
    "--path-template",
    default=DEFAULT_PATH_TEMPLATE,
    show_default=True,
    help="Output path template.",
)
@click.option("--clean", is_flag=True, help="Remove the previous export subtree first.")
@click.option(
    "--lockfile",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Export every provider pinned in a .terraform.lock.hcl file.",
)
@click.pass_context
@handle_errors
def export(
    ctx: click.Context,
    namespace: str,
    name: str,
    version: str,
    export_format: str,
    out_dir: str,
    categories: str,
    path_template: str,
    clean: bool,
    lockfile: Path | None,
) -> None:
    """Export provider docs to a directory tree with a manifest."""
    options = get_global_options(ctx)
    base = ExportOptions(
        name=name,
        version=version,
        namespace=namespace,
        format=export_format,
        out_dir=out_dir,
        categories=[categories],
        path_template=path_template,
        clean=clean,
    )
    targets = _export_targets(base, lockfile)
    for target in targets:
        preflight_export_options(target)

    options = validate_cache_options(options)
    client = build_client(options)

    summaries: list[ExportSummary] = []
    with Spinner(enabled=not options.quiet) as spinner:
        spinner.start(f"Exporting {len(targets)} provider(s)")
        for target in targets:
            summaries.append(export_docs(client, target, on_progress=spinner.update))

    emit(options, render_export_summaries(options.output, summaries))
