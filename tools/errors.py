"""Error types raised by Clovet collaborators."""

from __future__ import annotations


class ClovetError(Exception):
    """Base class for recoverable application errors."""


class ValidationError(ClovetError, ValueError):
    """Raised for bad user input such as an empty query or a non-image upload."""


class RemoteRequestError(ClovetError):
    """Raised when a remote collaborator answers with a non-success status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TransportError(ClovetError):
    """Raised when a remote collaborator cannot be reached or times out."""


class ParseError(ClovetError):
    """Raised when a response body cannot be decoded."""


class ConfigurationError(ClovetError):
    """Raised when a collaborator is called without its required credentials."""


__all__ = [
    "ClovetError",
    "ValidationError",
    "RemoteRequestError",
    "TransportError",
    "ParseError",
    "ConfigurationError",
]
