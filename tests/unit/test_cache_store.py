"""Tests for the on-disk response cache."""

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from tfdc.infrastructure.cache.store import CacheInitError, CacheStore

URL = "https://example.com/v2/provider-docs/1"


class Clock:
    """Mutable clock injected into the store."""

    def __init__(self) -> None:
        self.current = datetime(2026, 2, 12, 10, 0, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.current


@pytest.mark.unit
class TestCacheStore:
    """Hit, miss, expiry and disabled behaviour."""

    def test_creates_directory_structure(self, tmp_path: Path) -> None:
        CacheStore(tmp_path, timedelta(hours=1))

        assert (tmp_path / "v1" / "entries").is_dir()
        assert (tmp_path / "v1" / "tmp").is_dir()
        meta = json.loads((tmp_path / "v1" / "meta.json").read_text(encoding="utf-8"))
        assert meta == {"schema_version": "v1"}

    def test_hit_then_expiry(self, tmp_path: Path) -> None:
        clock = Clock()
        store = CacheStore(tmp_path, timedelta(hours=1), now=clock)
        store.set("GET", URL, 200, "application/json", b'{"ok":true}')

        assert store.get("GET", URL) == b'{"ok":true}'
        assert store.get("get", URL) == b'{"ok":true}'

        clock.current += timedelta(hours=2)
        assert store.get("GET", URL) is None
        assert list((tmp_path / "v1" / "entries").rglob("*.json")) == []

    def test_miss_for_unknown_key(self, tmp_path: Path) -> None:
        store = CacheStore(tmp_path, timedelta(hours=1))
        assert store.get("GET", "https://example.com/missing") is None

    def test_set_overwrites_previous_entry(self, tmp_path: Path) -> None:
        store = CacheStore(tmp_path, timedelta(hours=1))
        store.set("GET", URL, 200, "text/plain", b"first")
        store.set("GET", URL, 200, "text/plain", b"second")

        assert store.get("GET", URL) == b"second"
        assert list((tmp_path / "v1" / "tmp").iterdir()) == []

    def test_entry_layout(self, tmp_path: Path) -> None:
        store = CacheStore(tmp_path, timedelta(hours=1), now=Clock())
        store.set("GET", URL, 200, "application/json", b"{}")

        (entry_path,) = list((tmp_path / "v1" / "entries").rglob("*.json"))
        entry = json.loads(entry_path.read_text(encoding="utf-8"))
        assert entry_path.parent.name == entry["key_hash"][:2]
        assert entry["schema"] == "v1"
        assert entry["method"] == "GET"
        assert entry["url"] == URL
        assert entry["status"] == 200
        assert entry["content_type"] == "application/json"
        assert entry["expires_at"] == "2026-02-12T11:00:00+00:00"

    @pytest.mark.parametrize(
        "payload",
        [
            b"not json",
            b"\xff\xfe garbage",
            json.dumps({"schema": "v0"}).encode(),
            json.dumps({"schema": "v1", "key_hash": "0" * 64}).encode(),
        ],
    )
    def test_corrupt_entry_is_discarded(self, tmp_path: Path, payload: bytes) -> None:
        store = CacheStore(tmp_path, timedelta(hours=1))
        store.set("GET", URL, 200, "text/plain", b"x")
        (entry_path,) = list((tmp_path / "v1" / "entries").rglob("*.json"))
        entry_path.write_bytes(payload)

        assert store.get("GET", URL) is None
        assert not entry_path.exists()

    def test_expiry_without_utc_offset_is_discarded(self, tmp_path: Path) -> None:
        store = CacheStore(tmp_path, timedelta(hours=1))
        store.set("GET", URL, 200, "text/plain", b"x")
        (entry_path,) = list((tmp_path / "v1" / "entries").rglob("*.json"))
        entry = json.loads(entry_path.read_text(encoding="utf-8"))
        entry["expires_at"] = "2099-01-01T00:00:00"
        entry_path.write_text(json.dumps(entry), encoding="utf-8")

        assert store.get("GET", URL) is None
        assert not entry_path.exists()

    def test_disabled_store_never_hits(self, tmp_path: Path) -> None:
        cache_dir = tmp_path / "cache"
        store = CacheStore(cache_dir, timedelta(hours=1), enabled=False)
        store.set("GET", "https://example.com/a", 200, "text/plain", b"x")

        assert store.get("GET", "https://example.com/a") is None
        assert not cache_dir.exists()

    def test_non_positive_ttl_is_rejected(self, tmp_path: Path) -> None:
        with pytest.raises(CacheInitError, match="cache ttl must be positive"):
            CacheStore(tmp_path, timedelta(0))

    def test_unwritable_directory_is_an_init_error(self, tmp_path: Path) -> None:
        blocker = tmp_path / "file"
        blocker.write_text("not a directory", encoding="utf-8")

        with pytest.raises(CacheInitError, match="failed to initialize cache"):
            CacheStore(blocker / "cache", timedelta(hours=1))
