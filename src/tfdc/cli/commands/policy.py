"""Policy library commands."""

from __future__ import annotations

import click

from tfdc.application.policy import SEARCH_COLUMNS, get_policy, search_policies
from tfdc.cli.utils import (
    build_client,
    emit,
    get_global_options,
    handle_errors,
    validate_cache_options,
)
from tfdc.infrastructure.formats.output import render_detail, render_search


@click.group(name="policy")
def policy() -> None:
    """Search policy libraries and read their READMEs."""


@policy.command(name="search")
@click.option("--query", default="", help="Name or title substring.")
@click.pass_context
@handle_errors
def search(ctx: click.Context, query: str) -> None:
    """Search published policy libraries."""
    options = validate_cache_options(get_global_options(ctx))
    results = search_policies(build_client(options), query)
    items = [result.to_dict() for result in results]
    emit(options, render_search(options.output, items, len(items), SEARCH_COLUMNS))


@policy.command(name="get")
@click.option("--id", "policy_id", default="", help="policies/<namespace>/<name>/<version>")
@click.pass_context
@handle_errors
def get(ctx: click.Context, policy_id: str) -> None:
    """Print a policy library README."""
    options = validate_cache_options(get_global_options(ctx))
    doc = get_policy(build_client(options), policy_id)
    emit(options, render_detail(options.output, doc.id, doc.content, doc.content_type))
