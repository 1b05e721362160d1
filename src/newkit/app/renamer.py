"""Replace the template placeholder in names and contents of an extracted tree."""

from __future__ import annotations

import os
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List

from newkit.domain.project import camel_to_kebab
from newkit.domain.template import IGNORED_EXTENSIONS, PLACEHOLDER, PLACEHOLDER_KEBAB
from newkit.utils import log

RETRY_TIMEOUT = 10.0
RETRY_INTERVAL = 0.1


def managed_retry(
    action: Callable[[], None],
    *,
    timeout: float = RETRY_TIMEOUT,
    interval: float = RETRY_INTERVAL,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> bool:
    """Run ``action`` until it stops raising ``OSError`` or ``timeout`` elapses.

    Virus scanners and file indexers can hold a just-extracted file open for a
    moment, which makes renames fail transiently on some platforms.
    """

    started = clock()
    while True:
        try:
            action()
            return True
        except OSError as exc:
            if clock() - started >= timeout:
                log.debug(f"{exc}, giving up after {timeout:g}s")
                return False
            log.debug(f"{exc}, retrying after {int(interval * 1000)}ms...")
            sleep(interval)


def file_extension(name: str) -> str | None:
    _, sep, ext = name.rpartition(".")
    return ext if sep else None


@dataclass
class RenameReport:
    renamed: List[Path] = field(default_factory=list)
    rewritten: List[Path] = field(default_factory=list)
    failures: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


class TemplateRenamer:
    def __init__(
        self,
        *,
        placeholder: str = PLACEHOLDER,
        placeholder_kebab: str = PLACEHOLDER_KEBAB,
        retry: Callable[[Callable[[], None]], bool] = managed_retry,
    ) -> None:
        self._placeholder = placeholder
        self._placeholder_kebab = placeholder_kebab
        self._retry = retry

    def rename(self, directory: Path, project_name: str) -> RenameReport:
        log.debug(f"Renaming files and folders in: {directory}")
        report = RenameReport()
        kebab_name = camel_to_kebab(project_name)
        pending: List[Path] = [directory]
        while pending:
            current = pending.pop()
            try:
                names = sorted(os.listdir(current))
            except OSError as exc:
                self._fail(report, f"ERROR listing '{current}': {exc}")
                continue
            subdirs: List[Path] = []
            for name in names:
                target = self._rename_entry(current, name, project_name, report)
                if target is None:
                    continue
                if target.is_symlink():
                    continue
                if target.is_file():
                    self._rewrite_file(target, project_name, kebab_name, report)
                elif target.is_dir():
                    subdirs.append(target)
            # reversed so the stack pops directories in listing order
            pending.extend(reversed(subdirs))
        return report

    def _rename_entry(self, parent: Path, name: str, project_name: str, report: RenameReport) -> Path | None:
        old_path = parent / name
        new_name = name.replace(self._placeholder, project_name)
        new_path = parent / new_name
        if new_name == name:
            return old_path
        if self._retry(lambda: os.rename(old_path, new_path)):
            report.renamed.append(new_path)
            return new_path
        self._fail(report, f"ERROR: could not rename '{old_path}' to '{new_name}'")
        return None

    def _rewrite_file(self, path: Path, project_name: str, kebab_name: str, report: RenameReport) -> None:
        if file_extension(path.name) in IGNORED_EXTENSIONS:
            return
        try:
            data = path.read_bytes().decode("utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            self._fail(report, f"ERROR readFile '{path.name}': {exc}")
            return
        result = data.replace(self._placeholder, project_name).replace(self._placeholder_kebab, kebab_name)
        if result == data:
            return
        try:
            path.write_bytes(result.encode("utf-8"))
        except OSError as exc:
            self._fail(report, f"ERROR: {exc}")
            return
        report.rewritten.append(path)

    @staticmethod
    def _fail(report: RenameReport, message: str) -> None:
        report.failures.append(message)
        log.error(message)


__all__ = ["RETRY_INTERVAL", "RETRY_TIMEOUT", "RenameReport", "TemplateRenamer", "file_extension", "managed_retry"]
