"""Extract template archives into a single, correctly named project folder."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List
from zipfile import BadZipFile, ZipFile

from newkit.app.renamer import RenameReport, TemplateRenamer, managed_retry
from newkit.domain.project import validate_project_name
from newkit.domain.template import PLACEHOLDER
from newkit.errors import MaterializeError
from newkit.utils import log


@dataclass(frozen=True)
class MaterializeResult:
    project_root: Path
    root_entries: List[str] = field(default_factory=list)
    rename_report: RenameReport = field(default_factory=RenameReport)


def is_root_dir_entry(name: str) -> bool:
    """True for an archive entry that is a top-level folder, e.g. ``app-1.0/``."""
    return bool(name) and name.find("/") == len(name) - 1


class ArchiveMaterializer:
    def __init__(
        self,
        destination: Path | None = None,
        renamer: TemplateRenamer | None = None,
        *,
        retry: Callable[[Callable[[], None]], bool] = managed_retry,
    ) -> None:
        self._destination = destination
        self._renamer = renamer or TemplateRenamer()
        self._retry = retry

    @property
    def destination(self) -> Path:
        return self._destination if self._destination is not None else Path.cwd()

    def extract(self, archive: Path, project_name: str | None = None) -> MaterializeResult:
        destination = self.destination
        validate_project_name(project_name, destination)
        if not archive.exists():
            raise MaterializeError(f"File does not exist: {archive}")
        name = project_name or PLACEHOLDER

        root_entries = self._extract_all(archive, destination)
        log.debug(f"Project extracted, rootDirs: {root_entries}")

        if len(root_entries) == 1:
            root_dir = destination / root_entries[0].rstrip("/")
            if root_dir.is_dir() and not root_dir.is_symlink():
                project_root = destination / name
                if root_dir.name != name:
                    log.debug(f"Renaming single root dir '{root_dir.name}' to '{name}'")
                    if not self._retry(lambda: os.rename(root_dir, project_root)):
                        raise MaterializeError(f"Could not rename '{root_dir}' to '{name}'")
                report = self._renamer.rename(project_root, name)
                return MaterializeResult(project_root=project_root, root_entries=root_entries, rename_report=report)

        log.debug(f"No root folder found, renaming folders and files in: {destination}")
        report = self._renamer.rename(destination, name)
        return MaterializeResult(project_root=destination, root_entries=root_entries, rename_report=report)

    @staticmethod
    def _extract_all(archive: Path, destination: Path) -> List[str]:
        destination.mkdir(parents=True, exist_ok=True)
        root_entries: List[str] = []
        try:
            with ZipFile(archive) as zip_file:
                for info in zip_file.infolist():
                    if is_root_dir_entry(info.filename):
                        root_entries.append(info.filename)
                    zip_file.extract(info, destination)
        except (BadZipFile, OSError, NotImplementedError, RuntimeError) as exc:
            # RuntimeError: encrypted entries; NotImplementedError: unsupported compression
            raise MaterializeError(f"Could not extract '{archive}': {exc}") from exc
        return root_entries


__all__ = ["ArchiveMaterializer", "MaterializeResult", "is_root_dir_entry"]
