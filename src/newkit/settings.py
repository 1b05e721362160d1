"""Runtime settings for the newkit CLI."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from newkit import __version__

HOME_ENV = "NEWKIT_HOME"
DEBUG_ENV = "NEWKIT_DEBUG"
HTTP_TIMEOUT_ENV = "NEWKIT_HTTP_TIMEOUT"
TELEMETRY_URL_ENV = "NEWKIT_TELEMETRY_URL"

DEFAULT_HTTP_TIMEOUT = 60.0
DEFAULT_TELEMETRY_URL = "https://servicestack.net/stats/dotnet-new/record"


@dataclass(frozen=True)
class RuntimeSettings:
    home_dir: Path
    cache_dir: Path
    debug: bool = False
    http_timeout: float | None = DEFAULT_HTTP_TIMEOUT
    telemetry_url: str = DEFAULT_TELEMETRY_URL
    cli_version: str = __version__


def _truthy(value: str | None) -> bool:
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _default_home_dir() -> Path:
    override = os.environ.get(HOME_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".newkit"


def _http_timeout() -> float | None:
    raw = os.environ.get(HTTP_TIMEOUT_ENV)
    if raw is None or not raw.strip():
        return DEFAULT_HTTP_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        return DEFAULT_HTTP_TIMEOUT
    # 0 disables the per-request timeout
    return value if value > 0 else None


def load_settings() -> RuntimeSettings:
    base = _default_home_dir()
    return RuntimeSettings(
        home_dir=base,
        cache_dir=base / "cache",
        debug=_truthy(os.environ.get(DEBUG_ENV)),
        http_timeout=_http_timeout(),
        telemetry_url=os.environ.get(TELEMETRY_URL_ENV) or DEFAULT_TELEMETRY_URL,
    )


SETTINGS = load_settings()
