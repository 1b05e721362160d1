"""Application service that turns a template reference into a project folder."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List

from newkit.adapters.download_cache import DownloadCache
from newkit.app.locator import TemplateLocator
from newkit.app.materializer import ArchiveMaterializer, MaterializeResult
from newkit.app.renamer import TemplateRenamer
from newkit.config import ToolConfig
from newkit.domain.project import camel_to_kebab, validate_project_name
from newkit.domain.template import PLACEHOLDER, PLACEHOLDER_KEBAB, PostInstallRule, ResolvedTemplate
from newkit.errors import MaterializeError
from newkit.ports.http import HttpClient
from newkit.settings import RuntimeSettings
from newkit.utils import log


@dataclass(frozen=True)
class PostInstallOutcome:
    test: str
    command: str | None
    returncode: int | None


@dataclass(frozen=True)
class ScaffoldResult:
    resolved: ResolvedTemplate
    archive: Path
    materialized: MaterializeResult
    postinstall: List[PostInstallOutcome] = field(default_factory=list)


def _substitute(text: str, project_name: str, kebab_name: str) -> str:
    return text.replace(PLACEHOLDER, project_name).replace(PLACEHOLDER_KEBAB, kebab_name)


def _run_shell(command: str, cwd: Path) -> int:
    return subprocess.run(command, shell=True, cwd=cwd).returncode


class ScaffoldService:
    def __init__(
        self,
        settings: RuntimeSettings,
        config: ToolConfig,
        http: HttpClient,
        *,
        locator: TemplateLocator | None = None,
        cache: DownloadCache | None = None,
        renamer: TemplateRenamer | None = None,
        runner: Callable[[str, Path], int] = _run_shell,
    ) -> None:
        self._config = config
        self._locator = locator or TemplateLocator(config, http, settings)
        self._cache = cache or DownloadCache(settings.cache_dir, http)
        self._renamer = renamer or TemplateRenamer()
        self._runner = runner

    def create(
        self,
        reference: str,
        project_name: str | None = None,
        destination: Path | None = None,
        *,
        postinstall: bool = True,
    ) -> ScaffoldResult:
        destination = destination or Path.cwd()
        validate_project_name(project_name, destination)

        resolved = self._locator.locate(reference)
        archive = self._obtain_archive(resolved)
        materializer = ArchiveMaterializer(destination, self._renamer)
        materialized = materializer.extract(archive, project_name)

        outcomes: List[PostInstallOutcome] = []
        if postinstall and project_name:
            project_dir = destination / project_name
            if project_dir.is_dir():
                outcomes = self.run_postinstall(project_dir, project_name)
            else:
                log.debug(f"{project_name} does not exist")
        return ScaffoldResult(resolved=resolved, archive=archive, materialized=materialized, postinstall=outcomes)

    def run_postinstall(self, project_dir: Path, project_name: str) -> List[PostInstallOutcome]:
        kebab_name = camel_to_kebab(project_name)
        outcomes: List[PostInstallOutcome] = []
        for rule in self._config.postinstall:
            outcome = self._apply_rule(rule, project_dir, project_name, kebab_name)
            if outcome is not None:
                outcomes.append(outcome)
        return outcomes

    def _apply_rule(
        self, rule: PostInstallRule, project_dir: Path, project_name: str, kebab_name: str
    ) -> PostInstallOutcome | None:
        test_path = project_dir / _substitute(rule.test, project_name, kebab_name)
        if not test_path.exists():
            log.debug(f"path does not exist: '{test_path}'")
            return None
        if not rule.exec:
            return PostInstallOutcome(test=rule.test, command=None, returncode=None)
        command = _substitute(rule.exec, project_name, kebab_name)
        log.debug(f"Matched: '{rule.test}', executing '{command}'...")
        try:
            returncode = self._runner(command, project_dir)
        except OSError as exc:
            log.error(f"ERROR: '{command}' failed: {exc}")
            return PostInstallOutcome(test=rule.test, command=command, returncode=None)
        if returncode != 0:
            log.error(f"ERROR: '{command}' exited with code {returncode}")
        return PostInstallOutcome(test=rule.test, command=command, returncode=returncode)

    def _obtain_archive(self, resolved: ResolvedTemplate) -> Path:
        if resolved.local_path is not None:
            if not resolved.local_path.is_file():
                raise MaterializeError(f"File does not exist: {resolved.local_path}")
            return resolved.local_path
        if not resolved.archive_url:
            raise MaterializeError("Resolved template has no archive URL")
        return self._cache.fetch(resolved.archive_url)


__all__ = ["PostInstallOutcome", "ScaffoldResult", "ScaffoldService"]
