"""Application settings loaded from environment variables."""

from __future__ import annotations

import os
import re
from datetime import timedelta
from pathlib import Path
from typing import Any

import structlog
from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tfdc import __version__
from tfdc.infrastructure.clients.registry.client import DEFAULT_REGISTRY_URL

logger = structlog.get_logger(__name__)

ENV_FILE_ENV_VAR = "TFDC_ENV_FILE"
DEFAULT_HOME_ENV_FILE = Path.home() / ".tfdc" / ".env"
DEFAULT_CACHE_DIR = "~/.cache/tfdc"
_env_files_loaded = [False]

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m|h)")
_PLAIN_SECONDS = re.compile(r"-?\d+(?:\.\d+)?")
_DURATION_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


def parse_duration(value: str | int | float | timedelta) -> timedelta:
    """Parse ``90s``, ``10m``, ``1h30m`` or a plain number of seconds.

    Raises:
        ValueError: If the value is not a recognisable duration.
    """
    if isinstance(value, timedelta):
        return value
    if isinstance(value, (int, float)):
        return timedelta(seconds=value)

    text = value.strip().lower()
    if not text:
        raise ValueError("empty duration")
    if _PLAIN_SECONDS.fullmatch(text):
        return timedelta(seconds=float(text))

    sign = 1.0
    if text[0] in "+-":
        sign = -1.0 if text[0] == "-" else 1.0
        text = text[1:]

    pos = 0
    seconds = 0.0
    for match in _DURATION_PART.finditer(text):
        if match.start() != pos:
            break
        seconds += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()
    if pos == 0 or pos != len(text):
        raise ValueError(f"invalid duration: {value!r}")
    return timedelta(seconds=sign * seconds)


def _load_env_files() -> None:
    """Load ``$TFDC_ENV_FILE``, ``~/.tfdc/.env`` and ``./.env`` once per process.

    Earlier files win over later ones and the process environment wins over all.
    """
    if _env_files_loaded[0]:
        return
    _env_files_loaded[0] = True

    candidates = [os.environ.get(ENV_FILE_ENV_VAR), DEFAULT_HOME_ENV_FILE, Path.cwd() / ".env"]
    for candidate in candidates:
        if not candidate:
            continue
        env_path = Path(candidate).expanduser()
        if not env_path.is_file():
            continue
        try:
            load_dotenv(dotenv_path=env_path, override=False)
        except OSError as exc:
            logger.warning("Failed to load environment file", operation="load_env", path=str(env_path), error=str(exc))
        else:
            logger.debug("Environment file loaded", operation="load_env", path=str(env_path))


class Settings(BaseSettings):
    """tfdc configuration loaded from ``TFDC_*`` environment variables.

    Attributes:
        registry_url: Base URL of the Terraform Registry.
        timeout: Per-request HTTP timeout.
        retry: Extra attempts for retryable failures.
        backoff_factor: Multiplier for the exponential retry delay.
        insecure: Disable TLS certificate verification.
        user_agent: ``User-Agent`` header sent with every request.
        cache_dir: Root directory of the response cache.
        cache_ttl: How long cached responses stay valid.
        no_cache: Disable the response cache entirely.
        log_level: Root log level name.
        log_file: Optional path of a rotating log file.

    Example:
        >>> Settings().registry_url
        'https://registry.terraform.io'
    """

    model_config = SettingsConfigDict(
        env_prefix="TFDC_",
        case_sensitive=False,
        extra="ignore",
    )

    registry_url: str = DEFAULT_REGISTRY_URL
    timeout: timedelta = timedelta(seconds=10)
    retry: int = Field(default=3, ge=0)
    backoff_factor: float = Field(default=0.5, ge=0)
    insecure: bool = False
    user_agent: str = f"tfdc/{__version__}"
    cache_dir: str = DEFAULT_CACHE_DIR
    cache_ttl: timedelta = timedelta(hours=24)
    no_cache: bool = False
    log_level: str = "WARNING"
    log_file: str | None = None

    @field_validator("timeout", "cache_ttl", mode="before")
    @classmethod
    def _parse_duration(cls, value: Any) -> Any:
        if isinstance(value, (str, int, float)):
            return parse_duration(value)
        return value

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.strip().upper() or "WARNING"


def get_settings(**overrides: Any) -> Settings:
    """Load ``.env`` files (once) and build a fresh :class:`Settings`."""
    _load_env_files()
    return Settings(**overrides)


__all__ = ["DEFAULT_CACHE_DIR", "Settings", "get_settings", "parse_duration"]
