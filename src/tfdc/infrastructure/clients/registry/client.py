"""Terraform Registry HTTP client.

This module provides the synchronous registry transport shared by every
command: URL resolution against a configurable base, retry with exponential
backoff, and an optional on-disk response cache.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import urljoin, urlsplit

import backoff
import requests
from requests.exceptions import RequestException

from tfdc.domain.errors import TfdcError
from tfdc.infrastructure.cache.store import CacheStore

logger = logging.getLogger(__name__)

DEFAULT_REGISTRY_URL = "https://registry.terraform.io"
DEFAULT_USER_AGENT = "tfdc/dev"


class APIError(TfdcError):
    """Non-200 response from the registry after retries."""

    def __init__(self, status_code: int, url: str, body: str = "") -> None:
        super().__init__(f"registry API error: status={status_code} url={url}")
        self.status_code = status_code
        self.url = url
        self.body = body

    @property
    def retryable(self) -> bool:
        return self.status_code == 429 or self.status_code >= 500


class ConfigError(TfdcError):
    """Invalid client configuration."""


class DecodeError(TfdcError):
    """A fresh response body could not be decoded as JSON."""


@dataclass(slots=True)
class ClientConfig:
    """Transport settings for :class:`RegistryClient`."""

    base_url: str = DEFAULT_REGISTRY_URL
    timeout: float = 10.0
    retry: int = 3
    backoff_factor: float = 0.5
    insecure: bool = False
    user_agent: str = DEFAULT_USER_AGENT


def _validate_base_url(base_url: str) -> str:
    try:
        parts = urlsplit(base_url)
    except ValueError as exc:
        raise ConfigError(f"invalid base url: {exc}") from exc
    scheme = parts.scheme.strip().lower()
    if not scheme or not parts.netloc.strip():
        raise ConfigError(
            f"invalid base url: scheme and host are required ({base_url})",
        )
    if scheme not in ("http", "https"):
        raise ConfigError(
            f"invalid base url: scheme must be http or https ({base_url})",
        )
    return base_url


class RegistryClient:
    """Small JSON/bytes client for the registry REST API."""

    def __init__(
        self,
        config: ClientConfig | None = None,
        cache: CacheStore | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.config = config or ClientConfig()
        if not self.config.base_url:
            self.config.base_url = DEFAULT_REGISTRY_URL
        if self.config.retry < 0:
            raise ConfigError("retry must be >= 0")
        self.base_url = _validate_base_url(self.config.base_url)
        self.cache = cache

        self.session = session or requests.Session()
        self.session.headers["User-Agent"] = self.config.user_agent or DEFAULT_USER_AGENT
        self.session.verify = not self.config.insecure

        self._fetch_with_retry = backoff.on_exception(
            backoff.expo,
            (RequestException, APIError),
            max_tries=self.config.retry + 1,
            giveup=lambda exc: isinstance(exc, APIError) and not exc.retryable,
            factor=self.config.backoff_factor,
            max_value=10,
            logger=logger,
        )(self._fetch_once)

    def resolve(self, path: str) -> str:
        """Return the absolute URL for an API path or pass a full URL through."""
        if path.startswith(("http://", "https://")):
            return path

        base = urlsplit(self.base_url)
        base_path = base.path.strip().strip("/")
        if path.startswith("/") and base_path:
            path = f"/{base_path}/{path.lstrip('/')}"
        return urljoin(f"{base.scheme}://{base.netloc}/", path)

    def get(self, path: str, *, use_cache: bool = True) -> bytes:
        """Return the raw response body for ``path``."""
        body, _ = self._get(path, use_cache=use_cache)
        return body

    def get_json(self, path: str, *, use_cache: bool = True) -> Any:
        """Return the decoded JSON body for ``path``.

        A cached body that no longer decodes is treated as a miss and refetched.
        """
        body, from_cache = self._get(path, use_cache=use_cache)
        try:
            return json.loads(body)
        except ValueError as exc:
            if not from_cache:
                raise DecodeError(f"failed to decode json response: {exc}") from exc

        logger.debug("Cached payload for %s is undecodable, refetching", path)
        fresh, _ = self._get(path, use_cache=False)
        try:
            return json.loads(fresh)
        except ValueError as exc:
            raise DecodeError(f"failed to decode json response: {exc}") from exc

    def _get(self, path: str, *, use_cache: bool) -> tuple[bytes, bool]:
        url = self.resolve(path)

        if use_cache and self.cache is not None:
            cached = self.cache.get("GET", url)
            if cached is not None:
                logger.debug("cache hit: %s", url)
                return cached, True

        response = self._fetch_with_retry(url)
        if self.cache is not None:
            try:
                self.cache.set(
                    "GET",
                    url,
                    response.status_code,
                    response.headers.get("Content-Type", ""),
                    response.content,
                )
            except OSError as exc:
                logger.warning("Failed to write cache entry for %s: %s", url, exc)
        return response.content, False

    def _fetch_once(self, url: str) -> requests.Response:
        logger.debug("http get url=%s", url)
        response = self.session.get(url, timeout=self.config.timeout)
        if response.status_code != 200:
            raise APIError(response.status_code, url, response.text)
        return response


__all__ = [
    "DEFAULT_REGISTRY_URL",
    "APIError",
    "ClientConfig",
    "ConfigError",
    "DecodeError",
    "RegistryClient",
]
