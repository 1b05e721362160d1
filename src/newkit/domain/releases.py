"""Release selection and GitHub URL helpers."""

from __future__ import annotations

from typing import Iterable
from urllib.parse import urlsplit

from newkit.domain.template import ReleaseDescriptor

GITHUB_HOSTS = frozenset({"github.com", "www.github.com"})


def select_release(
    releases: Iterable[ReleaseDescriptor], wanted_version: str | None = None
) -> ReleaseDescriptor | None:
    """Pick the release to install.

    Releases are scanned in the order the source returned them and the scan
    stops at the first hit. Prereleases never match. Without
    ``wanted_version`` the first stable release is taken, so "latest" means
    whatever the source lists first, not the highest version number.
    """

    for release in releases:
        if release.is_prerelease:
            continue
        if wanted_version is not None and release.name != wanted_version:
            continue
        return release
    return None


def releases_url_for_repo(owner: str, repo: str, host: str = "github.com") -> str:
    bare_host = host[4:] if host.startswith("www.") else host
    return f"https://api.{bare_host}/repos/{owner}/{repo}/releases"


def master_archive_url(releases_url: str) -> str | None:
    """Return the default-branch archive for a ``api.<host>/repos/o/r/releases`` URL."""

    parts = urlsplit(releases_url)
    if not parts.netloc.startswith("api."):
        return None
    segments = parts.path.strip("/").split("/")
    if len(segments) != 4 or segments[0] != "repos" or segments[3] != "releases":
        return None
    owner, repo = segments[1], segments[2]
    if not owner or not repo:
        return None
    host = parts.netloc[len("api."):]
    return f"https://{host}/{owner}/{repo}/archive/master.zip"


def strip_url_template(url: str) -> str:
    """Drop a trailing RFC 6570 expression, e.g. ``.../releases{/id}``."""

    head, sep, _ = url.rpartition("{")
    return head if sep else url


__all__ = [
    "GITHUB_HOSTS",
    "master_archive_url",
    "releases_url_for_repo",
    "select_release",
    "strip_url_template",
]
