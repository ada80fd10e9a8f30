"""Terraform module search and README lookup."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import quote, urlencode

from pydantic import ValidationError as PayloadValidationError

from tfdc.application.provider.docs import RegistryAPI, parse_payload
from tfdc.domain.errors import ValidationError
from tfdc.domain.models import DocContent, ModuleDetailResponse, ModuleSearchResponse
from tfdc.infrastructure.clients.registry.client import DecodeError

DEFAULT_LIMIT = 20
SEARCH_COLUMNS = ("module_id", "name", "downloads", "verified", "description")


@dataclass(slots=True)
class ModuleResult:
    module_id: str
    name: str
    description: str
    downloads: int
    verified: bool
    published_at: str

    def to_dict(self) -> dict[str, str | int | bool]:
        return {
            "module_id": self.module_id,
            "name": self.name,
            "description": self.description,
            "downloads": self.downloads,
            "verified": self.verified,
            "published_at": self.published_at,
        }


def search_modules(
    client: RegistryAPI,
    query: str,
    offset: int = 0,
    limit: int = DEFAULT_LIMIT,
) -> list[ModuleResult]:
    """Run a registry module search; a non-positive limit falls back to the default."""
    if not query.strip():
        raise ValidationError("--query is required")
    params = urlencode(
        {
            "limit": str(limit if limit > 0 else DEFAULT_LIMIT),
            "offset": str(max(offset, 0)),
            "q": query,
        }
    )
    response = parse_payload(
        ModuleSearchResponse, client.get_json(f"/v1/modules/search?{params}"), "module search"
    )
    return [
        ModuleResult(
            module_id=module.id,
            name=module.name,
            description=module.description,
            downloads=module.downloads,
            verified=module.verified,
            published_at=module.published_at,
        )
        for module in response.modules
    ]


def get_module(client: RegistryAPI, module_id: str) -> DocContent:
    """Fetch a module version's README by ``namespace/name/provider/version``."""
    module_id = module_id.strip()
    if not module_id:
        raise ValidationError("--id is required")
    parts = module_id.split("/")
    if len(parts) != 4:
        raise ValidationError(
            f"--id must have 4 segments (namespace/name/provider/version), got {len(parts)}"
        )

    raw = client.get("/v1/modules/" + "/".join(quote(part, safe="") for part in parts))
    try:
        parsed = ModuleDetailResponse.model_validate_json(raw)
    except PayloadValidationError as exc:
        raise DecodeError(f"failed to parse module response: {exc}") from exc
    return DocContent(id=module_id, content=parsed.root.readme, raw=raw)


__all__ = ["SEARCH_COLUMNS", "ModuleResult", "get_module", "search_modules"]
