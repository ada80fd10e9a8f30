"""Registry reads used by provider export and search."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any, Protocol, TypeVar
from urllib.parse import quote, urlencode

from pydantic import BaseModel
from pydantic import ValidationError as PayloadValidationError

from tfdc.domain.errors import NotFoundError
from tfdc.domain.models import (
    DocumentDetail,
    DocumentSummary,
    ProviderDocDetailResponse,
    ProviderDocsPage,
    ProviderVersionsResponse,
)
from tfdc.infrastructure.clients.registry.client import DecodeError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class RegistryAPI(Protocol):
    """The two read operations provider docs need from a registry client."""

    def get_json(self, path: str, *, use_cache: bool = True) -> Any: ...

    def get(self, path: str, *, use_cache: bool = True) -> bytes: ...


def parse_payload(model: type[ModelT], payload: Any, what: str) -> ModelT:
    """Validate a decoded payload, reporting shape mismatches as decode errors."""
    try:
        return model.model_validate(payload)
    except PayloadValidationError as exc:
        raise DecodeError(f"unexpected {what} payload: {exc}") from exc


def resolve_provider_version_id(
    client: RegistryAPI,
    namespace: str,
    name: str,
    version: str,
) -> str:
    """Return the registry's opaque ID for ``namespace/name@version``.

    Raises:
        NotFoundError: If the registry does not list that exact version.
    """
    path = (
        f"/v2/providers/{quote(namespace, safe='')}/{quote(name, safe='')}"
        "?include=provider-versions"
    )
    response = parse_payload(
        ProviderVersionsResponse, client.get_json(path), "provider versions"
    )
    for included in response.included:
        if included.type == "provider-versions" and included.attributes.version == version:
            return included.id

    raise NotFoundError(f"provider version not found: {namespace}/{name}@{version}")


def list_provider_docs(
    client: RegistryAPI,
    provider_version_id: str,
    category: str,
    page: int,
) -> list[DocumentSummary]:
    """Return one page of the category-filtered doc listing."""
    query = urlencode(
        {
            "filter[category]": category,
            "filter[language]": "hcl",
            "filter[provider-version]": provider_version_id,
            "page[number]": str(page),
        }
    )
    response = parse_payload(
        ProviderDocsPage, client.get_json(f"/v2/provider-docs?{query}"), "provider docs"
    )
    return response.data


def iter_provider_docs(
    client: RegistryAPI,
    provider_version_id: str,
    category: str,
) -> Iterator[DocumentSummary]:
    """Yield listing entries page by page until the registry returns an empty page."""
    page = 1
    while True:
        docs = list_provider_docs(client, provider_version_id, category, page)
        if not docs:
            return
        yield from docs
        page += 1


def get_provider_doc_detail(client: RegistryAPI, doc_id: str) -> DocumentDetail:
    """Fetch one provider doc together with its raw response bytes.

    If the body does not parse (typically a corrupt cache entry) one
    cache-bypassing ``get_json`` is made and the raw bytes are read again so
    they match the refreshed payload. Errors from that refetch propagate.
    """
    path = f"/v2/provider-docs/{quote(doc_id, safe='')}"
    raw = client.get(path)
    try:
        detail = ProviderDocDetailResponse.model_validate_json(raw)
    except PayloadValidationError:
        logger.debug("Provider doc %s did not parse, refetching without cache", doc_id)
        payload = client.get_json(path, use_cache=False)
        detail = parse_payload(ProviderDocDetailResponse, payload, "provider doc")
        raw = client.get(path)
    return DocumentDetail.from_response(detail, raw)


__all__ = [
    "RegistryAPI",
    "get_provider_doc_detail",
    "iter_provider_docs",
    "list_provider_docs",
    "parse_payload",
    "resolve_provider_version_id",
]
