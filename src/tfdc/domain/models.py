"""Data models for tfdc.

Pydantic models describe the registry payloads we read; the dataclasses
describe the values that flow through one export run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tfdc.domain.types import DEFAULT_NAMESPACE, DEFAULT_PATH_TEMPLATE


def _null_as_empty(value: Any) -> Any:
    # The registry sends null for unset string attributes.
    return "" if value is None else value


class DocAttributes(BaseModel):
    """Attributes shared by provider doc listing entries."""

    category: str = ""
    slug: str = ""
    title: str = ""

    @field_validator("category", "slug", "title", mode="before")
    @classmethod
    def _empty_for_null(cls, value: Any) -> Any:
        return _null_as_empty(value)


class DocumentSummary(BaseModel):
    """One entry from a category listing page."""

    id: str
    type: str = ""
    attributes: DocAttributes = Field(default_factory=DocAttributes)

    @property
    def category(self) -> str:
        return self.attributes.category

    @property
    def slug(self) -> str:
        return self.attributes.slug

    @property
    def title(self) -> str:
        return self.attributes.title


class ProviderDocsPage(BaseModel):
    """Response of ``GET /v2/provider-docs``."""

    data: list[DocumentSummary] = Field(default_factory=list)


class DocDetailAttributes(DocAttributes):
    path: str = ""
    content: str = ""

    @field_validator("path", "content", mode="before")
    @classmethod
    def _empty_body_for_null(cls, value: Any) -> Any:
        return _null_as_empty(value)


class DocDetailData(BaseModel):
    id: str = ""
    type: str = ""
    attributes: DocDetailAttributes = Field(default_factory=DocDetailAttributes)


class ProviderDocDetailResponse(BaseModel):
    """Response of ``GET /v2/provider-docs/{id}``."""

    data: DocDetailData = Field(default_factory=DocDetailData)


class VersionAttributes(BaseModel):
    version: str = ""


class IncludedVersion(BaseModel):
    type: str = ""
    id: str = ""
    attributes: VersionAttributes = Field(default_factory=VersionAttributes)


class ProviderVersionsResponse(BaseModel):
    """Response of ``GET /v2/providers/{ns}/{name}?include=provider-versions``."""

    included: list[IncludedVersion] = Field(default_factory=list)


class V1ProviderLatest(BaseModel):
    """Response of ``GET /v1/providers/{ns}/{name}``."""

    version: str = ""


class V1ProviderDoc(BaseModel):
    # The v1 endpoint serves numeric IDs.
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    title: str = ""
    category: str = ""
    slug: str = ""
    language: str = ""

    @field_validator("title", "category", "slug", "language", mode="before")
    @classmethod
    def _empty_for_null(cls, value: Any) -> Any:
        return _null_as_empty(value)


class V1ProviderDocs(BaseModel):
    """Response of ``GET /v1/providers/{ns}/{name}/{version}``."""

    docs: list[V1ProviderDoc] = Field(default_factory=list)


class ModuleSummary(BaseModel):
    id: str
    name: str = ""
    description: str = ""
    downloads: int = 0
    verified: bool = False
    published_at: str = ""


class ModuleSearchResponse(BaseModel):
    """Response of ``GET /v1/modules/search``."""

    modules: list[ModuleSummary] = Field(default_factory=list)


class ModuleRoot(BaseModel):
    readme: str = ""


class ModuleDetailResponse(BaseModel):
    """Response of ``GET /v1/modules/{ns}/{name}/{provider}/{version}``."""

    root: ModuleRoot = Field(default_factory=ModuleRoot)


class PolicyAttributes(BaseModel):
    name: str = ""
    title: str = ""
    downloads: int = 0


class RelatedLinks(BaseModel):
    related: str = ""


class LatestVersionRelationship(BaseModel):
    links: RelatedLinks = Field(default_factory=RelatedLinks)


class PolicyRelationships(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    latest_version: LatestVersionRelationship = Field(
        default_factory=LatestVersionRelationship,
        alias="latest-version",
    )


class PolicyData(BaseModel):
    id: str
    attributes: PolicyAttributes = Field(default_factory=PolicyAttributes)
    relationships: PolicyRelationships = Field(default_factory=PolicyRelationships)


class PoliciesPage(BaseModel):
    """Response of ``GET /v2/policies``."""

    data: list[PolicyData] = Field(default_factory=list)


class PolicyDetailAttributes(BaseModel):
    readme: str = ""


class PolicyDetailData(BaseModel):
    id: str = ""
    attributes: PolicyDetailAttributes = Field(default_factory=PolicyDetailAttributes)


class PolicyDetailResponse(BaseModel):
    """Response of ``GET /v2/policies/...``."""

    data: PolicyDetailData = Field(default_factory=PolicyDetailData)


@dataclass(slots=True)
class DocumentDetail:
    """A fetched provider doc plus the untouched response bytes."""

    id: str
    category: str
    slug: str
    title: str
    content: str
    raw: bytes = b""

    @classmethod
    def from_response(cls, response: ProviderDocDetailResponse, raw: bytes) -> DocumentDetail:
        attrs = response.data.attributes
        return cls(
            id=response.data.id,
            category=attrs.category,
            slug=attrs.slug,
            title=attrs.title,
            content=attrs.content,
            raw=raw,
        )


@dataclass(slots=True)
class ExportOptions:
    """Input configuration for one provider export run."""

    name: str = ""
    version: str = ""
    namespace: str = DEFAULT_NAMESPACE
    format: str = "markdown"
    out_dir: str = ""
    categories: list[str] = field(default_factory=list)
    path_template: str = DEFAULT_PATH_TEMPLATE
    clean: bool = False


@dataclass(slots=True)
class ManifestEntry:
    """Per-document record written into the export manifest."""

    doc_id: str
    category: str
    slug: str
    title: str
    path: str

    def to_dict(self) -> dict[str, str]:
        return {
            "doc_id": self.doc_id,
            "category": self.category,
            "slug": self.slug,
            "title": self.title,
            "path": self.path,
        }


@dataclass(slots=True)
class PlannedFile:
    """A file the export will write once planning succeeds."""

    path: str
    content: bytes
    entry: ManifestEntry


@dataclass(slots=True)
class ExportSummary:
    """Result of one export run."""

    provider: str
    version: str
    out_dir: str
    written: int
    manifest: str

    def to_dict(self) -> dict[str, str | int]:
        return {
            "provider": self.provider,
            "version": self.version,
            "out_dir": self.out_dir,
            "written": self.written,
            "manifest": self.manifest,
        }


@dataclass(slots=True)
class DocContent:
    """A fetched document body ready for output."""

    id: str
    content: str
    content_type: str = "text/markdown"
    raw: bytes = field(default=b"", repr=False)
