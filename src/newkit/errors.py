"""Exception hierarchy shared by the newkit pipeline."""

from __future__ import annotations


class NewkitError(RuntimeError):
    """Base class for failures that abort the current invocation."""


class ConfigError(NewkitError):
    """Raised when the configuration file is missing, unreadable or invalid."""


class InvalidNameError(NewkitError):
    """Raised when a project name is illegal or already taken on disk."""


class ResolutionError(NewkitError):
    """Raised when a template reference cannot be turned into an archive URL."""


class TemplateNotFoundError(ResolutionError):
    """Raised when no configured source lists the requested template."""


class TransportError(NewkitError):
    """Raised on HTTP failures and malformed response bodies."""

    def __init__(self, message: str, *, url: str | None = None, payload: str | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.payload = payload


class CacheError(NewkitError):
    """Raised when the download cache cannot be written or cleared."""


class MaterializeError(NewkitError):
    """Raised when an archive cannot be extracted into a project folder."""


__all__ = [
    "CacheError",
    "ConfigError",
    "InvalidNameError",
    "MaterializeError",
    "NewkitError",
    "ResolutionError",
    "TemplateNotFoundError",
    "TransportError",
]
