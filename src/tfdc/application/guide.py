"""Terraform language guides fetched from the upstream docs repository."""

from __future__ import annotations

from typing import Protocol

from tfdc.domain.errors import ValidationError

DOCS_BASE = (
    "https://raw.githubusercontent.com/hashicorp/web-unified-docs/main/"
    "content/terraform/v1.12.x/docs/language"
)
STYLE_GUIDE_URL = f"{DOCS_BASE}/style.mdx"
MODULE_DEV_BASE = f"{DOCS_BASE}/modules/develop"

MODULE_DEV_SECTIONS = ("index", "composition", "structure", "providers", "publish", "refactoring")
SECTION_SEPARATOR = "\n\n---\n\n"


class RawFetcher(Protocol):
    def get(self, path: str, *, use_cache: bool = True) -> bytes: ...


def _fetch_text(client: RawFetcher, url: str) -> str:
    return client.get(url).decode("utf-8", errors="replace")


def fetch_style_guide(client: RawFetcher) -> str:
    return _fetch_text(client, STYLE_GUIDE_URL)


def fetch_module_dev_guide(client: RawFetcher, section: str = "all") -> str:
    """Return one module development section, or all of them joined."""
    section = section.strip().lower()
    if section in ("", "all"):
        return SECTION_SEPARATOR.join(
            _fetch_text(client, f"{MODULE_DEV_BASE}/{name}.mdx") for name in MODULE_DEV_SECTIONS
        )
    if section not in MODULE_DEV_SECTIONS:
        raise ValidationError(
            f"invalid --section: {section} (valid: all, {', '.join(MODULE_DEV_SECTIONS)})"
        )
    return _fetch_text(client, f"{MODULE_DEV_BASE}/{section}.mdx")


__all__ = [
    "MODULE_DEV_SECTIONS",
    "STYLE_GUIDE_URL",
    "fetch_module_dev_guide",
    "fetch_style_guide",
]
