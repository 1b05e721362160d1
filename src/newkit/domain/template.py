"""Domain model for template sources, repositories and releases."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

PLACEHOLDER = "MyApp"
PLACEHOLDER_KEBAB = "my-app"

# Contents of files with these extensions are never rewritten.
IGNORED_EXTENSIONS = frozenset(
    "jpg|jpeg|png|gif|ico|eot|otf|webp|svg|ttf|woff|woff2|mp4|webm|wav|mp3|m4a|aac|oga|ogg"
    "|dll|exe|pdb|so|zip|key|snk|p12|swf|xap|class|doc|xls|ppt|sqlite|db".split("|")
)


@dataclass(frozen=True)
class TemplateSource:
    name: str
    url: str


@dataclass(frozen=True)
class RepositoryDescriptor:
    name: str
    description: str
    releases_url: str

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "RepositoryDescriptor":
        return cls(
            name=str(payload.get("name") or ""),
            description=str(payload.get("description") or ""),
            releases_url=str(payload.get("releases_url") or ""),
        )


@dataclass(frozen=True)
class ReleaseDescriptor:
    name: str
    archive_url: str | None
    is_prerelease: bool = False

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ReleaseDescriptor":
        archive_url = payload.get("zipball_url")
        return cls(
            name=str(payload.get("name") or ""),
            archive_url=str(archive_url) if archive_url else None,
            is_prerelease=bool(payload.get("prerelease", False)),
        )


@dataclass(frozen=True)
class ResolvedTemplate:
    """Outcome of locating a template reference."""

    archive_url: str | None
    template_name: str | None = None
    version: str | None = None
    local_path: Path | None = None


@dataclass(frozen=True)
class PostInstallRule:
    test: str
    exec: str | None = None


__all__ = [
    "IGNORED_EXTENSIONS",
    "PLACEHOLDER",
    "PLACEHOLDER_KEBAB",
    "PostInstallRule",
    "ReleaseDescriptor",
    "RepositoryDescriptor",
    "ResolvedTemplate",
    "TemplateSource",
]
