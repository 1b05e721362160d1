from __future__ import annotations

import io
import os
import sys
import zipfile
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Mapping

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
SANDBOX_HOME = ROOT / ".test_place" / "newkit-home"
os.environ.setdefault("NEWKIT_HOME", str(SANDBOX_HOME))
os.environ["NEWKIT_TELEMETRY_OPTOUT"] = "1"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from newkit import __version__  # noqa: E402
from newkit.errors import TransportError  # noqa: E402
from newkit.ports.http import HttpClient  # noqa: E402
from newkit.settings import RuntimeSettings  # noqa: E402
from newkit.utils import log  # noqa: E402


class FakeHttpClient(HttpClient):
    """In-memory HttpClient; JSON routes map a URL to its listing items."""

    def __init__(
        self,
        json_routes: Mapping[str, Any] | None = None,
        byte_routes: Mapping[str, bytes] | None = None,
    ) -> None:
        self.json_routes: Dict[str, Any] = dict(json_routes or {})
        self.byte_routes: Dict[str, bytes] = dict(byte_routes or {})
        self.calls: List[str] = []

    def iter_json_items(self, url: str) -> Iterator[Any]:
        self.calls.append(url)
        if url not in self.json_routes:
            raise TransportError(f"Request failed '{url}': 404 Not Found", url=url)
        value = self.json_routes[url]
        if isinstance(value, Exception):
            raise value
        yield from value

    def get_bytes(self, url: str) -> bytes:
        self.calls.append(url)
        if url not in self.byte_routes:
            raise TransportError(f"Request failed '{url}': 404 Not Found", url=url)
        return self.byte_routes[url]


def build_zip(entries: Mapping[str, bytes | str | None]) -> bytes:
    """Build an in-memory zip; a ``None`` value adds a directory entry."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, content in entries.items():
            if content is None:
                archive.writestr(zipfile.ZipInfo(name), b"")
            elif isinstance(content, str):
                archive.writestr(name, content.encode("utf-8"))
            else:
                archive.writestr(name, content)
    return buffer.getvalue()


@pytest.fixture(autouse=True)
def _reset_debug_output() -> Iterator[None]:
    log.configure(False)
    yield
    log.configure(False)


@pytest.fixture()
def runtime_settings(tmp_path: Path) -> RuntimeSettings:
    home = tmp_path / "runtime" / "home"
    home.mkdir(parents=True, exist_ok=True)
    return RuntimeSettings(
        home_dir=home,
        cache_dir=home / "cache",
        http_timeout=5.0,
        telemetry_url="",
        cli_version=__version__,
    )


@pytest.fixture()
def fake_http() -> Callable[..., FakeHttpClient]:
    return FakeHttpClient


@pytest.fixture()
def zip_bytes() -> Callable[[Mapping[str, bytes | str | None]], bytes]:
    return build_zip
