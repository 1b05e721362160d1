from __future__ import annotations

import pytest

from newkit.app.catalog import CatalogSection, TemplateCatalog, format_section
from newkit.config import ToolConfig
from newkit.domain.template import RepositoryDescriptor, TemplateSource
from newkit.errors import ConfigError

CORE = TemplateSource(name="ServiceStack .NET Core C# Templates", url="https://api.github.com/orgs/NetCoreTemplates/repos")
EMPTY = TemplateSource(name="Empty Org", url="https://api.github.com/orgs/Empty/repos")


def test_sections_keep_config_order(fake_http) -> None:
    http = fake_http(
        {
            CORE.url: [
                {"name": "web", "description": ".NET Core Web App"},
                {"name": "vue-spa", "description": "Vue SPA"},
                "not-a-repo",
            ],
            EMPTY.url: [],
        }
    )

    sections = TemplateCatalog(ToolConfig(sources=(EMPTY, CORE)), http).list_sources()

    assert [section.source for section in sections] == [EMPTY, CORE]
    assert [repo.name for repo in sections[1].repositories] == ["web", "vue-spa"]


def test_listing_requires_sources(fake_http) -> None:
    with pytest.raises(ConfigError):
        TemplateCatalog(ToolConfig(sources=()), fake_http()).list_sources()


def test_format_section_aligns_names() -> None:
    section = CatalogSection(
        source=CORE,
        repositories=[
            RepositoryDescriptor(name="web", description=".NET Core Web App", releases_url=""),
            RepositoryDescriptor(name="vue-spa", description="", releases_url=""),
        ],
    )

    assert format_section(section) == [
        "ServiceStack .NET Core C# Templates",
        "  1  web      .NET Core Web App",
        "  2  vue-spa",
    ]


def test_format_empty_section() -> None:
    assert format_section(CatalogSection(source=EMPTY, repositories=[])) == ["Empty Org", "  (no templates)"]
