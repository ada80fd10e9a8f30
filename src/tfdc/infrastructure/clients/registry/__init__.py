"""Terraform Registry client."""

from tfdc.infrastructure.clients.registry.client import (
    DEFAULT_REGISTRY_URL,
    APIError,
    ClientConfig,
    ConfigError,
    DecodeError,
    RegistryClient,
)

__all__ = [
    "DEFAULT_REGISTRY_URL",
    "APIError",
    "ClientConfig",
    "ConfigError",
    "DecodeError",
    "RegistryClient",
]
