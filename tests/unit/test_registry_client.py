"""Tests for the registry HTTP client."""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import requests
from requests import Response
from requests.exceptions import ConnectionError as RequestsConnectionError

from tfdc.infrastructure.cache.store import CacheStore
from tfdc.infrastructure.clients.registry import (
    APIError,
    ClientConfig,
    ConfigError,
    DecodeError,
    RegistryClient,
)


def _build_response(status_code: int = 200, body: bytes = b'{"ok": true}') -> Response:
    """Create a mock response with the attributes the client reads."""
    response = MagicMock(spec=Response)
    response.status_code = status_code
    response.content = body
    response.text = body.decode("utf-8", errors="replace")
    response.headers = {"Content-Type": "application/json"}
    return response


def _session(*responses: Response | Exception) -> MagicMock:
    session = MagicMock(spec=requests.Session)
    session.headers = {}
    session.get.side_effect = list(responses)
    return session


def _client(session: MagicMock, cache: CacheStore | None = None, **config: object) -> RegistryClient:
    settings: dict[str, object] = {"base_url": "https://registry.example.com", "backoff_factor": 0}
    settings.update(config)
    return RegistryClient(ClientConfig(**settings), cache=cache, session=session)


@pytest.mark.unit
class TestClientConfig:
    """Base URL validation and session setup."""

    @pytest.mark.parametrize(
        ("base_url", "message"),
        [
            ("registry.terraform.io", "scheme and host are required"),
            ("https:///v2", "scheme and host are required"),
            ("ftp://registry.terraform.io", "scheme must be http or https"),
        ],
    )
    def test_invalid_base_url(self, base_url: str, message: str) -> None:
        with pytest.raises(ConfigError, match=message):
            RegistryClient(ClientConfig(base_url=base_url), session=_session())

    def test_negative_retry_is_rejected(self) -> None:
        with pytest.raises(ConfigError, match="retry must be >= 0"):
            _client(_session(), retry=-1)

    def test_session_headers_and_tls(self) -> None:
        session = _session()
        _client(session, user_agent="tfdc/test", insecure=True)

        assert session.headers["User-Agent"] == "tfdc/test"
        assert session.verify is False

    def test_empty_base_url_uses_default(self) -> None:
        client = RegistryClient(ClientConfig(base_url=""), session=_session())
        assert client.resolve("/v1/x") == "https://registry.terraform.io/v1/x"


@pytest.mark.unit
class TestResolve:
    """URL resolution against the configured base."""

    def test_preserves_base_path_prefix(self) -> None:
        client = _client(_session(), base_url="https://example.com/registry")
        assert (
            client.resolve("/v2/providers/hashicorp/aws?include=provider-versions")
            == "https://example.com/registry/v2/providers/hashicorp/aws?include=provider-versions"
        )

    def test_root_base_path(self) -> None:
        client = _client(_session(), base_url="https://registry.terraform.io")
        assert client.resolve("/v2/providers/hashicorp/aws") == "https://registry.terraform.io/v2/providers/hashicorp/aws"

    def test_absolute_url_passes_through(self) -> None:
        client = _client(_session())
        assert client.resolve("https://other.example.com/doc.md") == "https://other.example.com/doc.md"


@pytest.mark.unit
class TestRetry:
    """Retry behaviour for transient and permanent failures."""

    def test_retries_server_errors_then_succeeds(self) -> None:
        session = _session(_build_response(503, b"busy"), _build_response(429, b"slow"), _build_response())
        client = _client(session, retry=3)

        assert client.get_json("/v1/x") == {"ok": True}
        assert session.get.call_count == 3

    def test_retries_network_errors(self) -> None:
        session = _session(RequestsConnectionError("reset"), _build_response())
        client = _client(session, retry=1)

        assert client.get("/v1/x") == b'{"ok": true}'
        assert session.get.call_count == 2

    def test_gives_up_after_last_retry(self) -> None:
        session = _session(*[_build_response(500, b"boom") for _ in range(3)])
        client = _client(session, retry=2)

        with pytest.raises(APIError) as excinfo:
            client.get("/v1/x")

        assert excinfo.value.status_code == 500
        assert excinfo.value.body == "boom"
        assert session.get.call_count == 3

    def test_client_errors_are_not_retried(self) -> None:
        session = _session(_build_response(404, b"missing"))
        client = _client(session, retry=3)

        with pytest.raises(APIError, match="status=404 url=https://registry.example.com/v1/x"):
            client.get("/v1/x")
        assert session.get.call_count == 1

    def test_zero_retry_makes_one_attempt(self) -> None:
        session = _session(_build_response(502, b""))
        client = _client(session, retry=0)

        with pytest.raises(APIError):
            client.get("/v1/x")
        assert session.get.call_count == 1

    def test_timeout_is_passed_to_session(self) -> None:
        session = _session(_build_response())
        _client(session, timeout=2.5).get("/v1/x")

        session.get.assert_called_once_with("https://registry.example.com/v1/x", timeout=2.5)


@pytest.mark.unit
class TestCaching:
    """Interaction between the client and the response cache."""

    def test_second_call_is_served_from_cache(self, tmp_path: Path) -> None:
        session = _session(_build_response())
        client = _client(session, cache=CacheStore(tmp_path, timedelta(hours=1)))

        assert client.get_json("/v1/x") == {"ok": True}
        assert client.get_json("/v1/x") == {"ok": True}
        assert session.get.call_count == 1

    def test_use_cache_false_bypasses_cache(self, tmp_path: Path) -> None:
        session = _session(_build_response(), _build_response(body=b'{"ok": false}'))
        client = _client(session, cache=CacheStore(tmp_path, timedelta(hours=1)))

        client.get("/v1/x")
        assert client.get_json("/v1/x", use_cache=False) == {"ok": False}
        assert client.get_json("/v1/x") == {"ok": False}
        assert session.get.call_count == 2

    def test_refetches_when_cached_payload_is_invalid_json(self, tmp_path: Path) -> None:
        store = CacheStore(tmp_path, timedelta(hours=1))
        session = _session(_build_response())
        client = _client(session, cache=store)
        store.set("GET", client.resolve("/v2/provider-docs/1"), 200, "application/json", b"not-json")

        assert client.get_json("/v2/provider-docs/1") == {"ok": True}
        assert client.get_json("/v2/provider-docs/1") == {"ok": True}
        assert session.get.call_count == 1

    def test_fresh_invalid_json_is_a_decode_error(self) -> None:
        client = _client(_session(_build_response(body=b"<html>")))

        with pytest.raises(DecodeError, match="failed to decode json response"):
            client.get_json("/v1/x")

    def test_failed_responses_are_not_cached(self, tmp_path: Path) -> None:
        session = _session(_build_response(404, b"missing"), _build_response())
        client = _client(session, cache=CacheStore(tmp_path, timedelta(hours=1)))

        with pytest.raises(APIError):
            client.get("/v1/x")
        assert client.get("/v1/x") == b'{"ok": true}'

    def test_cache_write_failure_is_ignored(self) -> None:
        cache = MagicMock(spec=CacheStore)
        cache.get.return_value = None
        cache.set.side_effect = OSError("disk full")
        client = _client(_session(_build_response()), cache=cache)

        assert client.get("/v1/x") == b'{"ok": true}'
        cache.set.assert_called_once()
