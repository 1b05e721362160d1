"""Anonymous usage pings (opt-out)."""

from __future__ import annotations

import os
import threading

import requests

from newkit.settings import RuntimeSettings
from newkit.utils import log

OPTOUT_ENV = "NEWKIT_TELEMETRY_OPTOUT"
PING_TIMEOUT = 5

_OPTOUT_VALUES = {"1", "true", "yes", "on"}


def telemetry_enabled() -> bool:
    value = os.getenv(OPTOUT_ENV, "").strip().lower()
    return value not in _OPTOUT_VALUES


def _send(url: str, params: dict[str, str]) -> None:
    try:
        requests.get(url, params=params, timeout=PING_TIMEOUT)
    except requests.RequestException as exc:
        log.debug(f"usage ping failed: {exc}")


def ping_usage(name: str, settings: RuntimeSettings) -> threading.Thread | None:
    """Record one anonymous usage event without blocking the caller.

    The request runs on a daemon thread so a slow or unreachable stats
    endpoint never delays the command, and every network error is dropped.
    Returns the started thread, or ``None`` when telemetry is disabled.
    """

    if not telemetry_enabled() or not settings.telemetry_url:
        return None
    params = {"name": name, "source": "cli", "version": settings.cli_version}
    worker = threading.Thread(target=_send, args=(settings.telemetry_url, params), daemon=True)
    try:
        worker.start()
    except RuntimeError as exc:  # pragma: no cover - interpreter shutting down
        log.debug(f"usage ping skipped: {exc}")
        return None
    return worker


__all__ = ["OPTOUT_ENV", "ping_usage", "telemetry_enabled"]
