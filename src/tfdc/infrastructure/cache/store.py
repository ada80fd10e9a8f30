"""On-disk response cache for registry requests.

Entries live under ``<dir>/v1/entries/<prefix>/<sha256>.json`` and are written
through ``<dir>/v1/tmp`` so a reader never sees a half-written entry.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import json
import logging
import os
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path

from tfdc.domain.errors import TfdcError

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "v1"


class CacheInitError(TfdcError):
    """The cache directory could not be prepared."""

    def __init__(self, directory: str, cause: BaseException | str) -> None:
        super().__init__(f"failed to initialize cache at {directory}: {cause}")
        self.directory = directory
        self.cause = cause


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


class CacheStore:
    """Keyed, TTL-bounded store for raw response bodies."""

    def __init__(
        self,
        directory: str | Path,
        ttl: timedelta,
        enabled: bool = True,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.directory = Path(directory)
        self.ttl = ttl
        self.enabled = enabled
        self._now = now
        if not enabled:
            return

        if ttl <= timedelta(0):
            raise CacheInitError(str(directory), "cache ttl must be positive")

        root = self.directory / SCHEMA_VERSION
        try:
            (root / "entries").mkdir(parents=True, exist_ok=True)
            (root / "tmp").mkdir(parents=True, exist_ok=True)
            (root / "meta.json").write_text(
                json.dumps({"schema_version": SCHEMA_VERSION}, indent=2),
                encoding="utf-8",
            )
        except OSError as exc:
            raise CacheInitError(str(directory), exc) from exc

    def _entry_path(self, method: str, url: str) -> tuple[Path, str]:
        key_hash = hashlib.sha256(f"{method.upper()} {url}".encode()).hexdigest()
        path = self.directory / SCHEMA_VERSION / "entries" / key_hash[:2] / f"{key_hash}.json"
        return path, key_hash

    def _discard(self, path: Path) -> None:
        try:
            path.unlink()
        except OSError:
            logger.debug("Could not remove stale cache entry %s", path)

    def get(self, method: str, url: str) -> bytes | None:
        """Return the cached body, or ``None`` on a miss.

        Corrupt, foreign and expired entries are removed and reported as misses.
        """
        if not self.enabled:
            return None

        path, key_hash = self._entry_path(method, url)
        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            return None

        try:
            entry = json.loads(raw.decode("utf-8"))
            if entry.get("schema") != SCHEMA_VERSION or entry.get("key_hash") != key_hash:
                self._discard(path)
                return None
            expires_at = datetime.fromisoformat(entry["expires_at"])
            if expires_at.tzinfo is None:
                raise ValueError("expires_at has no UTC offset")
            body = base64.b64decode(entry.get("body") or "", validate=True)
        except (ValueError, KeyError, TypeError, AttributeError, binascii.Error):
            self._discard(path)
            return None

        if self._now() > expires_at:
            self._discard(path)
            return None
        return body

    def set(
        self,
        method: str,
        url: str,
        status: int,
        content_type: str,
        body: bytes,
    ) -> None:
        """Store a response body, replacing any previous entry atomically."""
        if not self.enabled:
            return

        path, key_hash = self._entry_path(method, url)
        path.parent.mkdir(parents=True, exist_ok=True)

        now = self._now().astimezone(UTC)
        entry = {
            "schema": SCHEMA_VERSION,
            "key_hash": key_hash,
            "method": method.upper(),
            "url": url,
            "created_at": now.isoformat(),
            "expires_at": (now + self.ttl).isoformat(),
            "status": status,
            "content_type": content_type,
            "body": base64.b64encode(body).decode("ascii"),
        }

        tmp_path = self.directory / SCHEMA_VERSION / "tmp" / f"{key_hash}.tmp"
        tmp_path.write_text(json.dumps(entry), encoding="utf-8")
        os.replace(tmp_path, path)


__all__ = ["SCHEMA_VERSION", "CacheInitError", "CacheStore"]
