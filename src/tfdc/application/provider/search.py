"""Provider doc search and single-doc lookup."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import quote

import structlog

from tfdc.application.provider.docs import (
    RegistryAPI,
    get_provider_doc_detail,
    iter_provider_docs,
    parse_payload,
    resolve_provider_version_id,
)
from tfdc.domain.errors import NotFoundError, ValidationError
from tfdc.domain.models import DocContent, V1ProviderDocs, V1ProviderLatest
from tfdc.domain.types import DEFAULT_NAMESPACE, V1_DOC_CATEGORIES, is_known_category

logger = structlog.get_logger(__name__)

DEFAULT_SEARCH_LIMIT = 20


@dataclass(slots=True)
class SearchOptions:
    name: str = ""
    namespace: str = DEFAULT_NAMESPACE
    service: str = ""
    type: str = ""
    version: str = "latest"
    limit: int = DEFAULT_SEARCH_LIMIT


@dataclass(slots=True)
class SearchResult:
    """One provider doc matching a search."""

    provider_doc_id: str
    title: str
    category: str
    slug: str
    provider: str
    namespace: str
    version: str

    def to_dict(self) -> dict[str, str]:
        return {
            "provider_doc_id": self.provider_doc_id,
            "title": self.title,
            "category": self.category,
            "slug": self.slug,
            "provider": self.provider,
            "namespace": self.namespace,
            "version": self.version,
        }


SEARCH_COLUMNS = ("provider_doc_id", "title", "category", "slug")


def _validate(options: SearchOptions) -> SearchOptions:
    name = options.name.strip().lower()
    namespace = options.namespace.strip().lower() or DEFAULT_NAMESPACE
    service = options.service.strip().lower()
    doc_type = options.type.strip().lower()

    if not name:
        raise ValidationError("--name is required")
    if not service:
        raise ValidationError("--service is required")
    if not doc_type:
        raise ValidationError("--type is required")
    if not is_known_category(doc_type):
        raise ValidationError(f"unsupported --type: {doc_type}")

    return SearchOptions(
        name=name,
        namespace=namespace,
        service=service,
        type=doc_type,
        version=options.version.strip() or "latest",
        limit=options.limit if options.limit > 0 else DEFAULT_SEARCH_LIMIT,
    )


def resolve_latest_version(client: RegistryAPI, namespace: str, name: str) -> str:
    """Return the newest published version of ``namespace/name``."""
    path = f"/v1/providers/{quote(namespace, safe='')}/{quote(name, safe='')}"
    latest = parse_payload(V1ProviderLatest, client.get_json(path), "provider")
    if not latest.version:
        raise NotFoundError(f"no version found for {namespace}/{name}")
    return latest.version


def _contains_slug(slug: str, service: str) -> bool:
    return service.lower() in slug.lower()


def _search_v1(client: RegistryAPI, options: SearchOptions, version: str) -> list[SearchResult]:
    path = "/v1/providers/{}/{}/{}".format(
        quote(options.namespace, safe=""),
        quote(options.name, safe=""),
        quote(version, safe=""),
    )
    response = parse_payload(V1ProviderDocs, client.get_json(path), "provider docs")

    results: list[SearchResult] = []
    for doc in response.docs:
        if doc.language and doc.language.lower() != "hcl":
            continue
        if doc.category.lower() != options.type:
            continue
        if not _contains_slug(doc.slug, options.service):
            continue
        results.append(
            SearchResult(
                provider_doc_id=doc.id,
                title=doc.title,
                category=doc.category,
                slug=doc.slug,
                provider=options.name,
                namespace=options.namespace,
                version=version,
            )
        )
        if len(results) >= options.limit:
            break
    return results


def _search_v2(client: RegistryAPI, options: SearchOptions, version: str) -> list[SearchResult]:
    version_id = resolve_provider_version_id(client, options.namespace, options.name, version)

    results: list[SearchResult] = []
    for doc in iter_provider_docs(client, version_id, options.type):
        if not _contains_slug(doc.slug, options.service):
            continue
        results.append(
            SearchResult(
                provider_doc_id=doc.id,
                title=doc.title,
                category=doc.category,
                slug=doc.slug,
                provider=options.name,
                namespace=options.namespace,
                version=version,
            )
        )
        if len(results) >= options.limit:
            break
    return results


def search_docs(client: RegistryAPI, options: SearchOptions) -> list[SearchResult]:
    """Find provider docs whose slug contains ``options.service``.

    ``resources`` and ``data-sources`` are served by the v1 docs listing, other
    categories page through the v2 listing.
    """
    opts = _validate(options)
    version = opts.version
    if version.lower() == "latest":
        version = resolve_latest_version(client, opts.namespace, opts.name)

    logger.debug(
        "Searching provider docs",
        operation="provider_search",
        provider=f"{opts.namespace}/{opts.name}@{version}",
        category=opts.type,
    )
    if opts.type in V1_DOC_CATEGORIES:
        return _search_v1(client, opts, version)
    return _search_v2(client, opts, version)


def get_doc(client: RegistryAPI, doc_id: str) -> DocContent:
    """Fetch one provider doc by its numeric registry ID."""
    doc_id = doc_id.strip()
    if not doc_id:
        raise ValidationError("--doc-id is required")
    if not doc_id.isdigit():
        raise ValidationError(f"--doc-id must be numeric: {doc_id}")

    detail = get_provider_doc_detail(client, doc_id)
    return DocContent(id=detail.id, content=detail.content, raw=detail.raw)


__all__ = [
    "DEFAULT_SEARCH_LIMIT",
    "SEARCH_COLUMNS",
    "DocContent",
    "SearchOptions",
    "SearchResult",
    "get_doc",
    "resolve_latest_version",
    "search_docs",
]
