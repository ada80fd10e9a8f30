"""Fallback version used when the package metadata is unavailable."""

__version__ = "0.1.0"
