"""Type aliases and constants for the domain layer."""

from typing import Literal

# Persisted export formats
ExportFormat = Literal["markdown", "json"]

# Rendered command output formats
OutputFormat = Literal["text", "json", "markdown"]

DEFAULT_NAMESPACE = "hashicorp"

DEFAULT_PATH_TEMPLATE = (
    "{out}/terraform/{namespace}/{provider}/{version}/docs/{category}/{slug}.{ext}"
)

# Provider doc categories accepted by the registry, in registry order.
PROVIDER_DOC_CATEGORIES: tuple[str, ...] = (
    "resources",
    "data-sources",
    "ephemeral-resources",
    "functions",
    "guides",
    "overview",
    "actions",
    "list-resources",
)

# Categories served by the v1 provider docs endpoint.
V1_DOC_CATEGORIES = frozenset({"resources", "data-sources"})

_EXTENSIONS: dict[str, str] = {"markdown": "md", "json": "json"}


def extension_for_format(fmt: str) -> str:
    """Return the file extension written for an export format.

    Raises:
        ValueError: If the format is not supported.
    """
    try:
        return _EXTENSIONS[fmt]
    except KeyError:
        raise ValueError(f"unsupported format: {fmt}") from None


def is_known_category(category: str) -> bool:
    return category in PROVIDER_DOC_CATEGORIES
