"""Main CLI entry point for tfdc."""

import logging
import sys
from datetime import timedelta
from typing import TYPE_CHECKING

import click
from pydantic import ValidationError as SettingsValidationError

from tfdc import __version__
from tfdc.cli.utils import DURATION, EXIT_INVALID, GlobalOptions
from tfdc.infrastructure.config.settings import get_settings
from tfdc.infrastructure.formats.output import OUTPUT_FORMATS
from tfdc.infrastructure.logging.setup import set_level, setup_logging

if TYPE_CHECKING:
    from click import Context
else:
    from typing import Any

    Context = Any  # type: ignore[assignment,misc]

logger = logging.getLogger(__name__)


def _pick(value, fallback):
    return fallback if value is None else value


@click.group()
@click.version_option(version=__version__, prog_name="tfdc")
@click.option(
    "--output",
    "-o",
    type=click.Choice(list(OUTPUT_FORMATS), case_sensitive=False),
    default="text",
    show_default=True,
    help="Output format.",
)
@click.option("--write", "write_path", default=None, help="Write output to this file instead of stdout.")
@click.option("--timeout", type=DURATION, default=None, help="HTTP timeout (e.g. 10s).")
@click.option("--retry", type=click.IntRange(min=0), default=None, help="Retries for 429/5xx and network errors.")
@click.option("--registry-url", default=None, help="Registry base URL.")
@click.option("--insecure", is_flag=True, help="Skip TLS certificate verification.")
@click.option("--user-agent", default=None, help="Custom User-Agent header.")
@click.option("--cache-dir", default=None, help="Response cache directory.")
@click.option("--cache-ttl", type=DURATION, default=None, help="Response cache TTL (e.g. 24h).")
@click.option("--no-cache", is_flag=True, help="Disable the response cache.")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output (INFO level logging)")
@click.option("--debug", is_flag=True, help="Enable debug logging.")
@click.option("--quiet", "-q", is_flag=True, help="Hide progress messages.")
@click.pass_context
def cli(
    ctx: "Context",
    output: str,
    write_path: str | None,
    timeout: timedelta | None,
    retry: int | None,
    registry_url: str | None,
    insecure: bool,
    user_agent: str | None,
    cache_dir: str | None,
    cache_ttl: timedelta | None,
    no_cache: bool,
    verbose: bool,
    debug: bool,
    quiet: bool,
) -> None:
    """tfdc - Terraform Registry documentation from the command line.

    Search and read provider, module and policy docs, and export whole
    provider versions to a directory tree.
    """
    try:
        settings = get_settings()
    except SettingsValidationError as exc:
        click.echo(f"✗ invalid configuration: {exc}", err=True)
        ctx.exit(EXIT_INVALID)

    setup_logging(level=settings.log_level, log_file=settings.log_file)
    if debug:
        set_level(logging.DEBUG)
    elif verbose:
        set_level(logging.INFO)
        logger.info("Verbose mode enabled")

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["options"] = GlobalOptions(
        output=output.lower(),
        write=write_path,
        timeout=_pick(timeout, settings.timeout),
        retry=_pick(retry, settings.retry),
        backoff_factor=settings.backoff_factor,
        registry_url=_pick(registry_url, settings.registry_url),
        insecure=insecure or settings.insecure,
        user_agent=_pick(user_agent, settings.user_agent),
        cache_dir=_pick(cache_dir, settings.cache_dir),
        cache_ttl=_pick(cache_ttl, settings.cache_ttl),
        no_cache=no_cache or settings.no_cache,
        quiet=quiet,
    )


# Import commands after the CLI group is defined
from tfdc.cli.commands import guide, module, policy, provider  # noqa: E402

cli.add_command(provider.provider)
cli.add_command(module.module)
cli.add_command(policy.policy)
cli.add_command(guide.guide)


def main() -> None:
    """Main entry point with custom error handling."""
    try:
        cli()
    except click.exceptions.ClickException as e:
        e.show()
        sys.exit(e.exit_code)
    except SystemExit:
        raise
    except Exception as e:
        click.echo(f"Unexpected error: {e}", err=True)
        if logger.isEnabledFor(logging.INFO):
            import traceback

            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
