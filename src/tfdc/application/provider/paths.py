"""Output path rendering and confinement checks for provider exports."""

from __future__ import annotations

import os
import re
import stat
from collections.abc import Mapping

from tfdc.domain.errors import ValidationError

PLACEHOLDER_PATTERN = re.compile(r"\{[^{}]+\}")
INVALID_SEGMENT_PATTERN = re.compile(r"[^a-zA-Z0-9._-]+")


def sanitize_segment(value: str) -> str:
    """Reduce an arbitrary label to a single safe path segment.

    Lower-cases, replaces runs of unsupported characters with ``-`` and trims
    leading/trailing ``-`` and ``.``; an empty result becomes ``unknown``.
    """
    normalized = INVALID_SEGMENT_PATTERN.sub("-", value.lower().strip())
    normalized = normalized.strip("-.")
    return normalized or "unknown"


def _check_literal(text: str, template: str) -> None:
    if "{" in text or "}" in text:
        raise ValidationError(f"malformed path template: {template}")


def render_path_template(template: str, variables: Mapping[str, str]) -> str:
    """Substitute ``{name}`` tokens in a single left-to-right pass.

    Replacement values are inserted verbatim and never re-scanned.

    Raises:
        ValidationError: For an unknown placeholder or a stray brace.
    """
    parts: list[str] = []
    cursor = 0
    for match in PLACEHOLDER_PATTERN.finditer(template):
        literal = template[cursor : match.start()]
        _check_literal(literal, template)
        parts.append(literal)

        token = match.group(0)
        key = token[1:-1]
        if key not in variables:
            raise ValidationError(f"unresolved placeholder in path template: {token}")
        parts.append(variables[key])
        cursor = match.end()

    tail = template[cursor:]
    _check_literal(tail, template)
    parts.append(tail)
    return "".join(parts)


def substitute_until_unknown_placeholder(
    template: str,
    known: Mapping[str, str],
) -> tuple[str, bool]:
    """Substitute known tokens up to the first unknown one.

    Returns the substituted prefix and whether an unknown token stopped the scan.
    """
    parts: list[str] = []
    cursor = 0
    for match in PLACEHOLDER_PATTERN.finditer(template):
        parts.append(template[cursor : match.start()])
        key = match.group(0)[1:-1]
        if key not in known:
            return "".join(parts), True
        parts.append(known[key])
        cursor = match.end()
    parts.append(template[cursor:])
    return "".join(parts), False


def resolve_within(path: str, base_abs: str) -> str:
    """Return ``path`` as a normalized absolute path, relative ones joined to ``base_abs``."""
    if not os.path.isabs(path):
        path = os.path.join(base_abs, path)
    return os.path.normpath(path)


def is_path_within_dir(base_abs: str, target_abs: str) -> bool:
    """Lexical containment check; ``target_abs == base_abs`` counts as inside."""
    try:
        rel = os.path.relpath(target_abs, base_abs)
    except ValueError:
        return False
    return rel == "." or (rel != ".." and not rel.startswith(".." + os.sep))


def _reject_symlink_if_exists(path: str) -> None:
    try:
        info = os.lstat(path)
    except FileNotFoundError:
        return
    except OSError as exc:
        raise ValidationError(str(exc)) from exc
    if stat.S_ISLNK(info.st_mode):
        raise ValidationError(f"symlink component detected: {path}")


def reject_symlink_in_ancestors(path: str) -> None:
    """Reject a symlink anywhere on the chain from the filesystem root to ``path``.

    The root and its immediate children are skipped so platform links such as
    ``/var -> /private/var`` do not trip the check.
    """
    current = os.path.normpath(path)
    prefixes = []
    while True:
        prefixes.append(current)
        parent = os.path.dirname(current)
        if parent == current:
            break
        current = parent

    for depth_from_root, prefix in enumerate(reversed(prefixes)):
        if depth_from_root <= 1:
            continue
        _reject_symlink_if_exists(prefix)


def ensure_no_symlink_traversal(base_abs: str, target_abs: str) -> None:
    """Fail if ``target_abs`` escapes ``base_abs`` lexically or through a symlink.

    Missing components are fine; only existing symlinks are rejected.

    Raises:
        ValidationError: Naming the offending component.
    """
    if not is_path_within_dir(base_abs, target_abs):
        raise ValidationError(f"target is outside base dir: {target_abs}")
    reject_symlink_in_ancestors(base_abs)

    rel = os.path.relpath(target_abs, base_abs)
    if rel == ".":
        return

    current = base_abs
    for segment in rel.split(os.sep):
        if segment in ("", "."):
            continue
        current = os.path.join(current, segment)
        _reject_symlink_if_exists(current)


def build_output_path(template: str, variables: Mapping[str, str], out_dir: str) -> str:
    """Render ``template`` and confine the result to ``out_dir``.

    Raises:
        ValidationError: If rendering fails, the path leaves ``out_dir`` or it
            crosses a symlink.
    """
    rendered = render_path_template(template, variables)
    out_abs = os.path.abspath(out_dir)
    path_abs = resolve_within(rendered, out_abs)

    if not is_path_within_dir(out_abs, path_abs):
        raise ValidationError(f"output path is outside --out-dir: {path_abs}")
    try:
        ensure_no_symlink_traversal(out_abs, path_abs)
    except ValidationError as exc:
        raise ValidationError(
            f"output path crosses symlink outside --out-dir: {exc.message}"
        ) from exc
    return path_abs


__all__ = [
    "build_output_path",
    "ensure_no_symlink_traversal",
    "is_path_within_dir",
    "reject_symlink_in_ancestors",
    "render_path_template",
    "resolve_within",
    "sanitize_segment",
    "substitute_until_unknown_placeholder",
]
