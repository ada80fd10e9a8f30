"""Terraform lock file support."""

from tfdc.infrastructure.lockfile.parser import (
    LockfileParseError,
    ProviderLock,
    parse_lockfile,
    parse_provider_address,
)

__all__ = ["LockfileParseError", "ProviderLock", "parse_lockfile", "parse_provider_address"]
