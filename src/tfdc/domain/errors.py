"""Error types shared across the application.

Every error raised on purpose by tfdc derives from :class:`TfdcError` so the
CLI layer can map error kinds to exit codes without matching on messages.
"""

from __future__ import annotations


class TfdcError(Exception):
    """Base class for all tfdc errors."""


class ValidationError(TfdcError):
    """Invalid input detected before any network or filesystem side effect."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(TfdcError):
    """A requested registry object does not exist."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class WriteError(TfdcError):
    """Local filesystem failure while persisting export output."""

    def __init__(self, path: str, cause: BaseException | str) -> None:
        super().__init__(f"failed to write file {path}: {cause}")
        self.path = path
        self.cause = cause


__all__ = ["NotFoundError", "TfdcError", "ValidationError", "WriteError"]
