"""Sentinel/OPA policy library search and README lookup."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlsplit

from pydantic import ValidationError as PayloadValidationError

from tfdc.application.provider.docs import RegistryAPI, parse_payload
from tfdc.domain.errors import ValidationError
from tfdc.domain.models import DocContent, PoliciesPage, PolicyDetailResponse
from tfdc.infrastructure.clients.registry.client import DecodeError

POLICY_PREFIX = "policies/"
PAGE_SIZE = 100
SEARCH_COLUMNS = ("terraform_policy_id", "name", "title", "downloads")


@dataclass(slots=True)
class PolicyResult:
    terraform_policy_id: str
    name: str
    title: str
    downloads: int

    def to_dict(self) -> dict[str, str | int]:
        return {
            "terraform_policy_id": self.terraform_policy_id,
            "name": self.name,
            "title": self.title,
            "downloads": self.downloads,
        }


def extract_policy_id(link: str) -> str:
    """Turn a ``latest-version`` related link into a ``policies/...`` ID."""
    link = link.strip()
    if link.startswith(("http://", "https://")):
        try:
            link = urlsplit(link).path
        except ValueError:
            return link
    if link.startswith("/v2/"):
        return link.removeprefix("/v2/")
    return link


def search_policies(client: RegistryAPI, query: str) -> list[PolicyResult]:
    """Return every policy whose name or title contains ``query``, any case."""
    query = query.strip()
    if not query:
        raise ValidationError("--query is required")
    needle = query.lower()

    results: list[PolicyResult] = []
    page = 1
    while True:
        path = f"/v2/policies?page[size]={PAGE_SIZE}&page[number]={page}&include=latest-version"
        response = parse_payload(PoliciesPage, client.get_json(path), "policies")
        if not response.data:
            break

        for policy in response.data:
            attrs = policy.attributes
            if needle not in attrs.name.lower() and needle not in attrs.title.lower():
                continue

            policy_id = extract_policy_id(policy.relationships.latest_version.links.related)
            if not policy_id:
                policy_id = policy.id
                if not policy_id.startswith(POLICY_PREFIX):
                    policy_id = POLICY_PREFIX + policy_id

            results.append(
                PolicyResult(
                    terraform_policy_id=policy_id,
                    name=attrs.name,
                    title=attrs.title,
                    downloads=attrs.downloads,
                )
            )
        page += 1
    return results


def get_policy(client: RegistryAPI, policy_id: str) -> DocContent:
    """Fetch a policy library README by ``policies/...`` ID."""
    policy_id = policy_id.strip()
    if not policy_id:
        raise ValidationError("--id is required")
    if not policy_id.startswith(POLICY_PREFIX):
        raise ValidationError(f'--id must start with "{POLICY_PREFIX}": {policy_id}')

    raw = client.get(f"/v2/{policy_id}?include=policies,policy-modules,policy-library")
    try:
        parsed = PolicyDetailResponse.model_validate_json(raw)
    except PayloadValidationError as exc:
        raise DecodeError(f"failed to parse policy response: {exc}") from exc
    return DocContent(id=policy_id, content=parsed.data.attributes.readme, raw=raw)


__all__ = ["SEARCH_COLUMNS", "PolicyResult", "extract_policy_id", "get_policy", "search_policies"]
