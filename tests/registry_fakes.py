"""In-memory registry doubles shared by the unit and integration tests."""

from __future__ import annotations

import json
from typing import Any
from urllib.parse import parse_qs, urlsplit

from tfdc.infrastructure.clients.registry.client import APIError

VERSION_DIR = ("terraform", "hashicorp", "aws", "6.31.0", "docs")

DEFAULT_LISTINGS: dict[str, list[dict[str, Any]]] = {
    "guides": [
        {
            "id": "1",
            "attributes": {
                "category": "guides",
                "slug": "tag-policy-compliance",
                "title": "Tag Policy Compliance",
            },
        }
    ],
    "resources": [
        {
            "id": "2",
            "attributes": {"category": "resources", "slug": "aws_s3_bucket", "title": "aws_s3_bucket"},
        }
    ],
}


def make_detail(doc_id: str, category: str, slug: str, title: str, content: str) -> bytes:
    return json.dumps(
        {
            "data": {
                "id": doc_id,
                "attributes": {
                    "category": category,
                    "slug": slug,
                    "title": title,
                    "content": content,
                },
            }
        }
    ).encode("utf-8")


DEFAULT_DETAILS: dict[str, bytes] = {
    "1": make_detail("1", "guides", "tag-policy-compliance", "Tag Policy Compliance", "# guide content"),
    "2": make_detail("2", "resources", "aws_s3_bucket", "aws_s3_bucket", "# resource content"),
}


class FakeRegistry:
    """In-memory registry where every provider publishes the same versions and docs."""

    def __init__(
        self,
        versions: tuple[str, ...] = ("6.31.0",),
        listings: dict[str, list[dict[str, Any]]] | None = None,
        details: dict[str, bytes] | None = None,
    ) -> None:
        self.versions = versions
        self.listings = DEFAULT_LISTINGS if listings is None else listings
        self.details = DEFAULT_DETAILS if details is None else details
        self.json_calls: list[tuple[str, bool]] = []
        self.get_calls: list[tuple[str, bool]] = []

    def get_json(self, path: str, *, use_cache: bool = True) -> Any:
        self.json_calls.append((path, use_cache))
        if path.startswith("/v2/providers/"):
            return {
                "included": [
                    {"type": "provider-versions", "id": f"708{idx}", "attributes": {"version": version}}
                    for idx, version in enumerate(self.versions)
                ]
            }
        if path.startswith("/v2/provider-docs?"):
            query = parse_qs(urlsplit(path).query)
            category = query["filter[category]"][0]
            page = query["page[number]"][0]
            assert query["filter[language]"] == ["hcl"]
            data = self.listings.get(category, []) if page == "1" else []
            return {"data": data}
        raise AssertionError(f"unexpected get_json path: {path}")

    def get(self, path: str, *, use_cache: bool = True) -> bytes:
        self.get_calls.append((path, use_cache))
        prefix = "/v2/provider-docs/"
        if path.startswith(prefix) and path[len(prefix) :] in self.details:
            return self.details[path[len(prefix) :]]
        raise APIError(404, path)


class RecoveringRegistry(FakeRegistry):
    """Serves a corrupt detail body first and a full payload afterwards."""

    RECOVERED = (
        '{"data":{"id":"1","type":"provider-docs",'
        '"links":{"self":"https://registry.terraform.io/v2/provider-docs/1"},'
        '"attributes":{"category":"guides","subcategory":"policy","language":"hcl",'
        '"truncated":false,"slug":"tag-policy-compliance","title":"Tag Policy Compliance",'
        '"content":"# guide content"}}}'
    )

    def __init__(self) -> None:
        super().__init__(listings={"guides": DEFAULT_LISTINGS["guides"]})
        self.detail_reads = 0

    def get_json(self, path: str, *, use_cache: bool = True) -> Any:
        if path.startswith("/v2/provider-docs/1"):
            self.json_calls.append((path, use_cache))
            return json.loads(self.RECOVERED)
        return super().get_json(path, use_cache=use_cache)

    def get(self, path: str, *, use_cache: bool = True) -> bytes:
        if path.startswith("/v2/provider-docs/1"):
            self.detail_reads += 1
            return b"not-json" if self.detail_reads == 1 else self.RECOVERED.encode("utf-8")
        return super().get(path, use_cache=use_cache)

