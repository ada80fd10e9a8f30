"""Shared helpers for tfdc commands."""

from __future__ import annotations

import functools
import logging
import os
from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Any, TypeVar

import click
from requests.exceptions import RequestException

from tfdc.domain.errors import NotFoundError, TfdcError, ValidationError, WriteError
from tfdc.infrastructure.cache.store import CacheInitError, CacheStore
from tfdc.infrastructure.clients.registry.client import (
    APIError,
    ClientConfig,
    ConfigError,
    DecodeError,
    RegistryClient,
)
from tfdc.infrastructure.config.settings import parse_duration
from tfdc.infrastructure.formats.output import FormatError
from tfdc.infrastructure.lockfile.parser import LockfileParseError

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_NOT_FOUND = 2
EXIT_UPSTREAM = 3
EXIT_WRITE = 4
EXIT_INTERRUPTED = 130


@dataclass(slots=True)
class GlobalOptions:
    """Global flags merged over :class:`~tfdc.infrastructure.config.settings.Settings`."""

    output: str
    write: str | None
    timeout: timedelta
    retry: int
    backoff_factor: float
    registry_url: str
    insecure: bool
    user_agent: str
    cache_dir: str
    cache_ttl: timedelta
    no_cache: bool
    quiet: bool = False


class DurationParamType(click.ParamType):
    """Click parameter accepting ``90s``, ``10m``, ``24h`` or plain seconds."""

    name = "duration"

    def convert(self, value: Any, param: click.Parameter | None, ctx: click.Context | None) -> timedelta:
        if isinstance(value, timedelta):
            return value
        try:
            return parse_duration(value)
        except ValueError as exc:
            self.fail(str(exc), param, ctx)


DURATION = DurationParamType()


def exit_code_for(exc: BaseException) -> int:
    """Map an error to the process exit code."""
    if isinstance(exc, (ValidationError, ConfigError, LockfileParseError, FormatError)):
        return EXIT_INVALID
    if isinstance(exc, NotFoundError):
        return EXIT_NOT_FOUND
    if isinstance(exc, APIError):
        return EXIT_NOT_FOUND if exc.status_code == 404 else EXIT_UPSTREAM
    if isinstance(exc, (WriteError, CacheInitError)):
        return EXIT_WRITE
    if isinstance(exc, (DecodeError, RequestException)):
        return EXIT_UPSTREAM
    return EXIT_UPSTREAM


def handle_errors(func: F) -> F:
    """Report tfdc and transport errors on stderr and exit with the mapped code."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except (TfdcError, RequestException) as exc:
            logger.debug("Command failed", exc_info=True)
            click.echo(f"✗ {exc}", err=True)
            raise SystemExit(exit_code_for(exc)) from exc
        except KeyboardInterrupt:
            click.echo("\n✗ Interrupted.", err=True)
            raise SystemExit(EXIT_INTERRUPTED) from None

    return wrapper  # type: ignore[return-value]


def get_global_options(ctx: click.Context) -> GlobalOptions:
    return ctx.find_root().obj["options"]


def validate_cache_options(options: GlobalOptions) -> GlobalOptions:
    """Check cache flags unless the cache is disabled; expands ``~`` in the directory."""
    if options.no_cache:
        return options
    if not options.cache_dir.strip():
        raise ConfigError("--cache-dir must not be empty")
    if options.cache_ttl <= timedelta(0):
        raise ConfigError("--cache-ttl must be positive")
    options.cache_dir = os.path.expanduser(options.cache_dir.strip())
    return options


def build_client(options: GlobalOptions) -> RegistryClient:
    """Create the cache store and registry client for one command run."""
    if options.timeout <= timedelta(0):
        raise ConfigError("--timeout must be positive")
    cache = CacheStore(
        options.cache_dir,
        options.cache_ttl,
        enabled=not options.no_cache,
    )
    config = ClientConfig(
        base_url=options.registry_url,
        timeout=options.timeout.total_seconds(),
        retry=options.retry,
        backoff_factor=options.backoff_factor,
        insecure=options.insecure,
        user_agent=options.user_agent,
    )
    return RegistryClient(config, cache=cache)


def emit(options: GlobalOptions, text: str) -> None:
    """Print rendered output, or write it to ``--write`` creating parent directories."""
    if options.write and options.write.strip():
        target = Path(options.write).expanduser()
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(text, encoding="utf-8")
        except OSError as exc:
            raise WriteError(str(target), exc) from exc
        logger.info("Output written to %s", target)
        return
    click.echo(text, nl=False)
