"""Terraform language guide commands."""

from __future__ import annotations

import click

from tfdc.application.guide import (
    MODULE_DEV_SECTIONS,
    STYLE_GUIDE_URL,
    fetch_module_dev_guide,
    fetch_style_guide,
)
from tfdc.cli.utils import (
    build_client,
    emit,
    get_global_options,
    handle_errors,
    validate_cache_options,
)
from tfdc.infrastructure.formats.output import render_detail


@click.group(name="guide")
def guide() -> None:
    """Read Terraform style and module development guides."""


@guide.command(name="style")
@click.pass_context
@handle_errors
def style(ctx: click.Context) -> None:
    """Print the Terraform style guide."""
    options = validate_cache_options(get_global_options(ctx))
    content = fetch_style_guide(build_client(options))
    emit(options, render_detail(options.output, STYLE_GUIDE_URL, content, "text/markdown"))


@guide.command(name="module-dev")
@click.option(
    "--section",
    default="all",
    show_default=True,
    help=f"One of: all, {', '.join(MODULE_DEV_SECTIONS)}.",
)
@click.pass_context
@handle_errors
def module_dev(ctx: click.Context, section: str) -> None:
    """Print the module development guide."""
    options = validate_cache_options(get_global_options(ctx))
    content = fetch_module_dev_guide(build_client(options), section)
    emit(options, render_detail(options.output, f"module-dev/{section}", content, "text/markdown"))
