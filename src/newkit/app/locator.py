"""Resolve template references to archive URLs."""

from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Iterator
from urllib.parse import urlsplit

from newkit.config import ToolConfig
from newkit.domain.releases import (
    GITHUB_HOSTS,
    master_archive_url,
    releases_url_for_repo,
    select_release,
    strip_url_template,
)
from newkit.domain.template import ReleaseDescriptor, RepositoryDescriptor, ResolvedTemplate, TemplateSource
from newkit.errors import ResolutionError, TemplateNotFoundError
from newkit.ports.http import HttpClient
from newkit.settings import RuntimeSettings
from newkit.utils import log
from newkit.utils.telemetry import ping_usage

LIST_HINT = "Run 'newkit' to view list of templates available."
INVALID_URL_MESSAGE = (
    "Invalid URL '{reference}': only .zip URLs, GitHub repo URLs or release HTTP API URLs are supported. " + LIST_HINT
)


class ReferenceKind(str, Enum):
    ZIP_URL = "zip_url"
    ZIP_FILE = "zip_file"
    RELEASES_URL = "releases_url"
    GITHUB_REPO = "github_repo"
    TEMPLATE_NAME = "template_name"


@dataclass(frozen=True)
class TemplateReference:
    kind: ReferenceKind
    value: str
    version: str | None = None


@dataclass(frozen=True)
class SourceMatch:
    """Result of searching one template source for a repository name."""

    source: TemplateSource
    repository: RepositoryDescriptor | None = None

    @property
    def found(self) -> bool:
        return self.repository is not None


def _is_url(reference: str) -> bool:
    return "://" in reference


def _github_releases_url(url: str) -> str | None:
    parts = urlsplit(url)
    host = parts.netloc.lower()
    if host not in GITHUB_HOSTS:
        return None
    segments = parts.path.lstrip("/").split("/")
    if len(segments) != 2 or not all(segments):
        return None
    owner, repo = segments
    return releases_url_for_repo(owner, repo, host)


def classify_reference(reference: str) -> TemplateReference:
    """Classify ``reference`` and normalise it to the URL or name to resolve."""

    reference = reference.strip()
    if not reference:
        raise ResolutionError("Please specify a template name.")

    if not _is_url(reference) and reference.count("/") == 1 and not reference.endswith(".zip"):
        reference = f"https://github.com/{reference}"

    if reference.endswith(".zip"):
        kind = ReferenceKind.ZIP_URL if _is_url(reference) else ReferenceKind.ZIP_FILE
        return TemplateReference(kind, reference)

    if _is_url(reference):
        if reference.endswith("/releases"):
            return TemplateReference(ReferenceKind.RELEASES_URL, reference)
        releases_url = _github_releases_url(reference)
        if releases_url is None:
            raise ResolutionError(INVALID_URL_MESSAGE.format(reference=reference))
        return TemplateReference(ReferenceKind.GITHUB_REPO, releases_url)

    name, sep, version = reference.rpartition("@")
    if sep and name:
        return TemplateReference(ReferenceKind.TEMPLATE_NAME, name, version or None)
    return TemplateReference(ReferenceKind.TEMPLATE_NAME, reference)


def usage_name(parsed: TemplateReference) -> str:
    """Name reported by the usage ping.

    Only bare template names are sent as typed; URLs and paths may carry
    credentials or local user names, so those report their kind instead.
    """

    if parsed.kind is ReferenceKind.TEMPLATE_NAME:
        return parsed.value
    return parsed.kind.value


class TemplateLocator:
    def __init__(
        self,
        config: ToolConfig,
        http: HttpClient,
        settings: RuntimeSettings,
        *,
        pinger: Callable[[str, RuntimeSettings], object] = ping_usage,
    ) -> None:
        self._config = config
        self._http = http
        self._settings = settings
        self._pinger = pinger

    def locate(self, reference: str) -> ResolvedTemplate:
        parsed = classify_reference(reference)
        self._pinger(usage_name(parsed), self._settings)

        if parsed.kind is ReferenceKind.ZIP_URL:
            return ResolvedTemplate(archive_url=parsed.value)
        if parsed.kind is ReferenceKind.ZIP_FILE:
            return ResolvedTemplate(archive_url=None, local_path=Path(parsed.value).expanduser())
        if parsed.kind in (ReferenceKind.RELEASES_URL, ReferenceKind.GITHUB_REPO):
            return self.resolve_releases(parsed.value)

        match = self.find_repository(parsed.value)
        releases_url = strip_url_template(match.repository.releases_url)
        if not releases_url:
            raise ResolutionError(f"Template '{parsed.value}' does not publish a releases URL")
        resolved = self.resolve_releases(releases_url, parsed.version)
        return ResolvedTemplate(
            archive_url=resolved.archive_url,
            template_name=parsed.value,
            version=parsed.version,
        )

    def resolve_releases(self, releases_url: str, version: str | None = None) -> ResolvedTemplate:
        log.debug(f"Creating project from: {releases_url}")
        releases = self._iter_releases(releases_url)
        release = select_release(releases, version)
        if release is not None:
            if not release.archive_url:
                raise ResolutionError(f"Release {release.name} does not have zipball_url")
            return ResolvedTemplate(archive_url=release.archive_url, version=release.name)

        log.info("Could not find any Releases for this project.")
        fallback = master_archive_url(releases_url)
        if fallback is None:
            raise ResolutionError(f"Could not find any Releases at '{releases_url}'. {LIST_HINT}")
        log.info(f"Fallback to using master archive from: {fallback}")
        return ResolvedTemplate(archive_url=fallback)

    def find_repository(self, name: str) -> SourceMatch:
        """Search all sources at once; the first completed search with a hit wins."""

        sources = self._config.require_sources()
        stop = threading.Event()
        executor = ThreadPoolExecutor(max_workers=len(sources), thread_name_prefix="newkit-source")
        try:
            futures: Dict[Future[SourceMatch], TemplateSource] = {
                executor.submit(self._search_source, source, name, stop): source for source in sources
            }
            for future in as_completed(futures):
                match = future.result()
                if match.found:
                    log.debug(f"Found '{name}' in source '{match.source.name}'")
                    return match
        finally:
            stop.set()
            executor.shutdown(wait=False, cancel_futures=True)
        raise TemplateNotFoundError(f"Could not find template '{name}'. {LIST_HINT}")

    def _search_source(self, source: TemplateSource, name: str, stop: threading.Event) -> SourceMatch:
        """Scan one listing; stops paging as soon as ``stop`` is set."""

        if stop.is_set():
            return SourceMatch(source=source)
        for item in self._http.iter_json_items(source.url):
            if stop.is_set():
                break
            if not isinstance(item, dict):
                continue
            repository = RepositoryDescriptor.from_payload(item)
            if repository.name == name:
                return SourceMatch(source=source, repository=repository)
        return SourceMatch(source=source)

    def _iter_releases(self, releases_url: str) -> Iterator[ReleaseDescriptor]:
        for item in self._http.iter_json_items(releases_url):
            if isinstance(item, dict):
                yield ReleaseDescriptor.from_payload(item)


__all__ = [
    "INVALID_URL_MESSAGE",
    "LIST_HINT",
    "ReferenceKind",
    "SourceMatch",
    "TemplateLocator",
    "TemplateReference",
    "classify_reference",
    "usage_name",
]
