"""Export manifest written next to the exported provider docs."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from datetime import UTC, datetime

import structlog

from tfdc.application.provider.paths import ensure_no_symlink_traversal, sanitize_segment
from tfdc.domain.errors import ValidationError, WriteError
from tfdc.domain.models import ExportOptions, ManifestEntry

logger = structlog.get_logger(__name__)

MANIFEST_FILENAME = "_manifest.json"


def _timestamp() -> str:
    return datetime.now(tz=UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


def manifest_root(options: ExportOptions) -> str:
    """Directory holding the manifest; scoped by namespace, provider and version."""
    return os.path.join(
        options.out_dir,
        "terraform",
        sanitize_segment(options.namespace),
        sanitize_segment(options.name),
        sanitize_segment(options.version),
        "docs",
    )


def manifest_path(options: ExportOptions) -> str:
    return os.path.join(manifest_root(options), MANIFEST_FILENAME)


@dataclass(slots=True)
class ExportManifest:
    """Index of the files written by one export run."""

    provider: str
    namespace: str
    version: str
    format: str
    docs: list[ManifestEntry] = field(default_factory=list)
    generated_at: str = field(default_factory=_timestamp)

    @classmethod
    def for_options(cls, options: ExportOptions, docs: list[ManifestEntry]) -> ExportManifest:
        return cls(
            provider=sanitize_segment(options.name),
            namespace=sanitize_segment(options.namespace),
            version=options.version,
            format=options.format,
            docs=list(docs),
        )

    def to_dict(self) -> dict:
        return {
            "provider": self.provider,
            "namespace": self.namespace,
            "version": self.version,
            "format": self.format,
            "generated_at": self.generated_at,
            "total": len(self.docs),
            "docs": [entry.to_dict() for entry in self.docs],
        }


def write_manifest(options: ExportOptions, docs: list[ManifestEntry]) -> str:
    """Write the manifest for a normalized export and return its absolute path.

    Raises:
        ValidationError: If the manifest path crosses a symlink.
        WriteError: If the directory or file cannot be written.
    """
    path = manifest_path(options)
    try:
        ensure_no_symlink_traversal(options.out_dir, path)
    except ValidationError as exc:
        raise ValidationError(f"unsafe manifest path {path}: {exc.message}") from exc

    root = os.path.dirname(path)
    try:
        os.makedirs(root, exist_ok=True)
    except OSError as exc:
        raise WriteError(root, exc) from exc

    manifest = ExportManifest.for_options(options, docs)
    body = json.dumps(manifest.to_dict(), indent=2, ensure_ascii=False) + "\n"
    try:
        with open(path, "w", encoding="utf-8") as handle:
            handle.write(body)
    except OSError as exc:
        raise WriteError(path, exc) from exc

    logger.debug("Manifest written", operation="write_manifest", status="success", path=path)
    return path


__all__ = [
    "MANIFEST_FILENAME",
    "ExportManifest",
    "manifest_path",
    "manifest_root",
    "write_manifest",
]
