"""On-disk cache of downloaded template archives."""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path

from newkit.domain.filenames import filenamify_url
from newkit.errors import CacheError
from newkit.ports.http import HttpClient
from newkit.utils import log


class DownloadCache:
    """Map archive URLs to files under ``cache_dir``.

    Entries are keyed by the sanitised URL and never expire; ``clean`` is the
    only way to drop them.
    """

    def __init__(self, cache_dir: Path, http: HttpClient) -> None:
        self._cache_dir = cache_dir
        self._http = http

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir

    def path_for(self, url: str) -> Path:
        return self._cache_dir / filenamify_url(url)

    def fetch(self, url: str) -> Path:
        target = self.path_for(url)
        if target.exists():
            log.debug(f"Using cached archive: {target}")
            return target

        body = self._http.get_bytes(url)
        log.debug(f"Writing zip file to: {target}")
        try:
            self._write(target, body)
        except OSError as exc:
            raise CacheError(f"Could not write cache entry '{target}': {exc}") from exc
        return target

    def _write(self, target: Path, body: bytes) -> None:
        self._cache_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self._cache_dir, prefix=".download-", suffix=".part")
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(body)
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def clean(self) -> bool:
        if not self._cache_dir.exists():
            return False
        try:
            shutil.rmtree(self._cache_dir)
        except OSError as exc:
            raise CacheError(f"Could not clear cache '{self._cache_dir}': {exc}") from exc
        return True


__all__ = ["DownloadCache"]
