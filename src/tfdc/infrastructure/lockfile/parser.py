"""Read provider pins from ``.terraform.lock.hcl``."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import hcl2

from tfdc.domain.errors import TfdcError

logger = logging.getLogger(__name__)


class LockfileParseError(TfdcError):
    """The lock file could not be read or does not have the expected shape."""

    def __init__(self, path: str, cause: BaseException | str) -> None:
        super().__init__(f"failed to parse lockfile {path}: {cause}")
        self.path = path
        self.cause = cause


@dataclass(slots=True, frozen=True)
class ProviderLock:
    """One ``provider "<address>"`` block of a lock file."""

    address: str
    namespace: str
    name: str
    version: str


def _unquote(value: Any) -> str:
    # python-hcl2 keeps the surrounding quotes on labels and strings in newer releases.
    return str(value).strip().strip('"')


def parse_provider_address(address: str) -> tuple[str, str]:
    """Split ``hostname/namespace/name`` into ``(namespace, name)``."""
    parts = address.split("/")
    if len(parts) < 3:
        raise ValueError(
            f"invalid provider address: expected hostname/namespace/name, got {address!r}"
        )
    namespace, name = parts[-2], parts[-1]
    if not namespace or not name:
        raise ValueError(f"invalid provider address: empty namespace or name in {address!r}")
    return namespace, name


def _iter_provider_blocks(document: dict[str, Any]):
    for block in document.get("provider", []):
        if not isinstance(block, dict):
            continue
        for label, body in block.items():
            if label.startswith("__"):
                continue
            yield _unquote(label), body if isinstance(body, dict) else {}


def parse_lockfile(path: str | Path) -> list[ProviderLock]:
    """Return the provider locks declared in a lock file, in file order.

    Raises:
        LockfileParseError: If the file is unreadable, is not valid HCL, or a
            provider block has a bad address or no ``version``.
    """
    display = str(path)
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise LockfileParseError(display, exc) from exc

    if not text.strip():
        return []

    try:
        document = hcl2.loads(text)
    except Exception as exc:
        raise LockfileParseError(display, exc) from exc

    locks: list[ProviderLock] = []
    for address, body in _iter_provider_blocks(document):
        try:
            namespace, name = parse_provider_address(address)
        except ValueError as exc:
            raise LockfileParseError(display, f"provider {address!r}: {exc}") from exc

        version = body.get("version")
        if version is None or not _unquote(version):
            raise LockfileParseError(display, f"provider {address!r}: missing version attribute")

        locks.append(
            ProviderLock(
                address=address,
                namespace=namespace,
                name=name,
                version=_unquote(version),
            )
        )

    logger.debug("Parsed %d provider locks from %s", len(locks), display)
    return locks


__all__ = ["LockfileParseError", "ProviderLock", "parse_lockfile", "parse_provider_address"]
