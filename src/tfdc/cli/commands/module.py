"""Terraform module commands."""

from __future__ import annotations

import click

from tfdc.application.module import SEARCH_COLUMNS, get_module, search_modules
from tfdc.cli.utils import (
    build_client,
    emit,
    get_global_options,
    handle_errors,
    validate_cache_options,
)
from tfdc.infrastructure.formats.output import render_detail, render_search


@click.group(name="module")
def module() -> None:
    """Search Terraform modules and read their READMEs."""


@module.command(name="search")
@click.option("--query", default="", help="Search text.")
@click.option("--offset", type=int, default=0, show_default=True, help="Result offset.")
@click.option("--limit", type=int, default=20, show_default=True, help="Maximum results.")
@click.pass_context
@handle_errors
def search(ctx: click.Context, query: str, offset: int, limit: int) -> None:
    """Search the public module registry."""
    options = validate_cache_options(get_global_options(ctx))
    results = search_modules(build_client(options), query, offset=offset, limit=limit)
    items = [result.to_dict() for result in results]
    emit(options, render_search(options.output, items, len(items), SEARCH_COLUMNS))


@module.command(name="get")
@click.option("--id", "module_id", default="", help="namespace/name/provider/version")
@click.pass_context
@handle_errors
def get(ctx: click.Context, module_id: str) -> None:
    """Print a module version's README."""
    options = validate_cache_options(get_global_options(ctx))
    doc = get_module(build_client(options), module_id)
    emit(options, render_detail(options.output, doc.id, doc.content, doc.content_type))
