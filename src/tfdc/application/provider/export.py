"""Bulk export of provider docs to a templated file tree."""

from __future__ import annotations

import json
import os
import shutil
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace

import structlog

from tfdc.application.provider.docs import (
    RegistryAPI,
    get_provider_doc_detail,
    iter_provider_docs,
    resolve_provider_version_id,
)
from tfdc.application.provider.manifest import manifest_path, manifest_root, write_manifest
from tfdc.application.provider.paths import (
    build_output_path,
    ensure_no_symlink_traversal,
    is_path_within_dir,
    resolve_within,
    sanitize_segment,
    substitute_until_unknown_placeholder,
)
from tfdc.domain.errors import ValidationError, WriteError
from tfdc.domain.models import (
    DocumentDetail,
    ExportOptions,
    ExportSummary,
    ManifestEntry,
    PlannedFile,
)
from tfdc.domain.types import (
    DEFAULT_NAMESPACE,
    DEFAULT_PATH_TEMPLATE,
    PROVIDER_DOC_CATEGORIES,
    extension_for_format,
)

logger = structlog.get_logger(__name__)

ProgressCallback = Callable[[str], None]

RESERVED_MANIFEST_OWNER = "_manifest"
TEMPLATE_PROBE_VALUE = "validation"


@dataclass(slots=True, frozen=True)
class PreparedExport:
    """Normalized options plus everything derivable from them without I/O."""

    options: ExportOptions
    extension: str
    clean_targets: tuple[str, ...] = ()


def normalize_categories(values: Iterable[str]) -> list[str]:
    """Expand comma lists, apply the allow-list and sort.

    No input, or ``all`` anywhere, selects every known category.
    """
    selected: set[str] = set()
    for raw in values:
        for token in raw.split(","):
            category = token.strip().lower()
            if not category:
                continue
            if category == "all":
                return sorted(PROVIDER_DOC_CATEGORIES)
            if category not in PROVIDER_DOC_CATEGORIES:
                raise ValidationError(f"unsupported category: {category}")
            selected.add(category)
    if not selected:
        return sorted(PROVIDER_DOC_CATEGORIES)
    return sorted(selected)


def normalize_export_options(options: ExportOptions) -> ExportOptions:
    """Return a trimmed, defaulted and validated copy of ``options``."""
    namespace = options.namespace.strip().lower() or DEFAULT_NAMESPACE
    name = options.name.strip().lower()
    version = options.version.strip()
    fmt = options.format.strip().lower() or "markdown"
    out_dir = options.out_dir.strip()
    template = options.path_template.strip() or DEFAULT_PATH_TEMPLATE

    if not name:
        raise ValidationError("--name is required")
    if not version:
        raise ValidationError("--version is required")
    if not out_dir:
        raise ValidationError("--out-dir is required")

    categories = normalize_categories(options.categories)
    try:
        extension_for_format(fmt)
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc

    return replace(
        options,
        namespace=namespace,
        name=name,
        version=version,
        format=fmt,
        out_dir=os.path.abspath(out_dir),
        categories=categories,
        path_template=template,
    )


def _base_variables(options: ExportOptions, ext: str) -> dict[str, str]:
    return {
        "out": options.out_dir,
        "namespace": sanitize_segment(options.namespace),
        "provider": sanitize_segment(options.name),
        "version": sanitize_segment(options.version),
        "ext": ext,
    }


def _manifest_collision(path: str) -> ValidationError:
    return ValidationError(
        f"path collision detected in --path-template: {path} conflicts with reserved manifest path"
    )


def validate_path_template(options: ExportOptions, ext: str) -> None:
    """Render the template once with probe values to catch errors before any fetch."""
    variables = _base_variables(options, ext)
    variables.update(
        category=TEMPLATE_PROBE_VALUE,
        slug=TEMPLATE_PROBE_VALUE,
        doc_id=TEMPLATE_PROBE_VALUE,
    )
    path = build_output_path(options.path_template, variables, options.out_dir)
    if path == manifest_path(options):
        raise _manifest_collision(path)


def derive_template_root(options: ExportOptions, ext: str) -> str:
    """Return the directory the template's static prefix points at."""
    out_abs = options.out_dir
    prefix, has_unknown = substitute_until_unknown_placeholder(
        options.path_template, _base_variables(options, ext)
    )
    if not has_unknown or not prefix.endswith(("/", os.sep)):
        prefix = os.path.dirname(prefix)
    if not prefix.strip() or prefix == ".":
        prefix = out_abs

    root = resolve_within(prefix, out_abs)
    if not is_path_within_dir(out_abs, root):
        raise ValidationError("derived clean root is outside --out-dir")
    return root


def derive_clean_targets(options: ExportOptions, ext: str) -> list[str]:
    """Return the subtrees ``--clean`` removes, deepest first.

    Raises:
        ValidationError: If a target is the output root itself.
    """
    targets = {derive_template_root(options, ext), manifest_root(options)}
    if options.out_dir in targets:
        raise ValidationError("--clean template resolves to --out-dir root, which is too broad")
    return sorted(targets, key=len, reverse=True)


def preflight_export_options(options: ExportOptions) -> PreparedExport:
    """Validate an export without touching the network or the filesystem.

    Returns:
        The normalized options, file extension and (with ``clean``) the
        derived clean targets. The caller's ``options`` is left unchanged.
    """
    normalized = normalize_export_options(options)
    ext = extension_for_format(normalized.format)
    validate_path_template(normalized, ext)
    targets: tuple[str, ...] = ()
    if normalized.clean:
        targets = tuple(derive_clean_targets(normalized, ext))
    return PreparedExport(options=normalized, extension=ext, clean_targets=targets)


def render_content(fmt: str, detail: DocumentDetail) -> bytes:
    """Return the bytes written for one document.

    JSON output re-indents the raw registry payload so unmodeled fields survive.
    """
    if fmt == "markdown":
        return detail.content.encode("utf-8")
    if fmt == "json":
        try:
            document = json.loads(detail.raw)
        except ValueError:
            if not detail.raw:
                raise WriteError("", "empty provider doc response") from None
            return detail.raw
        text = json.dumps(document, indent=2, ensure_ascii=False, sort_keys=True)
        return (text + "\n").encode("utf-8")
    raise ValidationError(f"unsupported format: {fmt}")


def _relative(path: str, root: str) -> str:
    return os.path.relpath(path, root).replace(os.sep, "/")


def _plan_files(
    client: RegistryAPI,
    prepared: PreparedExport,
    provider_version_id: str,
    progress: ProgressCallback,
) -> list[PlannedFile]:
    options = prepared.options
    owners: dict[str, str] = {manifest_path(options): RESERVED_MANIFEST_OWNER}
    seen: set[str] = set()
    planned: list[PlannedFile] = []

    for category in options.categories:
        progress(f"Listing {category}")
        for summary in iter_provider_docs(client, provider_version_id, category):
            if summary.id in seen:
                continue
            seen.add(summary.id)

            progress(f"Fetching {category}/{summary.slug or summary.id}")
            detail = get_provider_doc_detail(client, summary.id)
            slug = detail.slug or summary.slug or detail.id

            variables = _base_variables(options, prepared.extension)
            variables.update(
                category=sanitize_segment(detail.category),
                slug=sanitize_segment(slug),
                doc_id=sanitize_segment(detail.id),
            )
            if variables["category"] == "unknown":
                variables["category"] = sanitize_segment(category)

            path = build_output_path(options.path_template, variables, options.out_dir)
            owner = owners.get(path)
            if owner == RESERVED_MANIFEST_OWNER:
                raise _manifest_collision(path)
            if owner is not None:
                raise ValidationError(
                    f"path collision detected in --path-template: {path} "
                    f"(doc_id={owner} conflicts with doc_id={detail.id})"
                )
            owners[path] = detail.id

            planned.append(
                PlannedFile(
                    path=path,
                    content=render_content(options.format, detail),
                    entry=ManifestEntry(
                        doc_id=detail.id,
                        category=detail.category,
                        slug=slug,
                        title=detail.title,
                        path=_relative(path, options.out_dir),
                    ),
                )
            )

    planned.sort(key=lambda item: item.entry.path)
    return planned


def _clean(prepared: PreparedExport) -> None:
    out_dir = prepared.options.out_dir
    for target in prepared.clean_targets:
        try:
            ensure_no_symlink_traversal(out_dir, target)
        except ValidationError as exc:
            raise ValidationError(f"unsafe --clean target {target}: {exc.message}") from exc
        try:
            if os.path.isdir(target):
                shutil.rmtree(target)
            elif os.path.lexists(target):
                os.remove(target)
        except OSError as exc:
            raise WriteError(target, exc) from exc
        logger.info("Removed clean target", operation="clean", status="success", path=target)


def _write_files(out_dir: str, planned: list[PlannedFile], progress: ProgressCallback) -> None:
    for index, item in enumerate(planned, start=1):
        try:
            ensure_no_symlink_traversal(out_dir, item.path)
        except ValidationError as exc:
            raise ValidationError(f"unsafe output path {item.path}: {exc.message}") from exc

        progress(f"Writing {index}/{len(planned)} {item.entry.path}")
        try:
            os.makedirs(os.path.dirname(item.path), exist_ok=True)
            with open(item.path, "wb") as handle:
                handle.write(item.content)
        except OSError as exc:
            raise WriteError(item.path, exc) from exc


def export_docs(
    client: RegistryAPI,
    options: ExportOptions,
    on_progress: ProgressCallback | None = None,
) -> ExportSummary:
    """Export every doc of one provider version and write its manifest.

    Validation runs before any request. Nothing is deleted or written until
    the full plan is built; a failure while writing leaves earlier files in place.

    Raises:
        ValidationError: Bad options, template, collision or unsafe path.
        NotFoundError: The version is not published.
        WriteError: A local filesystem failure.
    """
    progress = on_progress or (lambda _message: None)
    prepared = preflight_export_options(options)
    opts = prepared.options
    target = f"{opts.namespace}/{opts.name}@{opts.version}"

    logger.info("Export started", operation="export", status="start", provider=target)
    progress(f"Resolving {target}")
    provider_version_id = resolve_provider_version_id(client, opts.namespace, opts.name, opts.version)

    planned = _plan_files(client, prepared, provider_version_id, progress)

    if opts.clean:
        progress("Cleaning previous export")
        _clean(prepared)

    _write_files(opts.out_dir, planned, progress)

    progress("Writing manifest")
    written_manifest = write_manifest(opts, [item.entry for item in planned])

    logger.info(
        "Export finished",
        operation="export",
        status="success",
        provider=target,
        written=len(planned),
    )
    return ExportSummary(
        provider=sanitize_segment(opts.name),
        version=opts.version,
        out_dir=opts.out_dir,
        written=len(planned),
        manifest=written_manifest.replace(os.sep, "/"),
    )


__all__ = [
    "PreparedExport",
    "derive_clean_targets",
    "derive_template_root",
    "export_docs",
    "normalize_categories",
    "normalize_export_options",
    "preflight_export_options",
    "render_content",
    "validate_path_template",
]
