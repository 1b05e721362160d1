"""List the templates published by the configured sources."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Sequence

from newkit.config import ToolConfig
from newkit.domain.template import RepositoryDescriptor, TemplateSource
from newkit.ports.http import HttpClient


@dataclass(frozen=True)
class CatalogSection:
    source: TemplateSource
    repositories: Sequence[RepositoryDescriptor]


class TemplateCatalog:
    def __init__(self, config: ToolConfig, http: HttpClient) -> None:
        self._config = config
        self._http = http

    def list_sources(self) -> List[CatalogSection]:
        """Fetch every source listing concurrently; sections keep config order."""

        sources = self._config.require_sources()
        with ThreadPoolExecutor(max_workers=len(sources), thread_name_prefix="newkit-catalog") as executor:
            listings = list(executor.map(self._fetch, sources))
        return [CatalogSection(source=source, repositories=repos) for source, repos in zip(sources, listings)]

    def _fetch(self, source: TemplateSource) -> List[RepositoryDescriptor]:
        return [
            RepositoryDescriptor.from_payload(item)
            for item in self._http.iter_json_items(source.url)
            if isinstance(item, dict)
        ]


def format_section(section: CatalogSection) -> List[str]:
    lines = [section.source.name]
    if not section.repositories:
        lines.append("  (no templates)")
        return lines
    width = max(len(repo.name) for repo in section.repositories)
    for index, repo in enumerate(section.repositories, start=1):
        description = f"  {repo.description}" if repo.description else ""
        lines.append(f"{index:>3}  {repo.name.ljust(width)}{description}".rstrip())
    return lines


__all__ = ["CatalogSection", "TemplateCatalog", "format_section"]
