"""Diagnostic output on stderr."""

from __future__ import annotations

import sys

_DEBUG = False


def configure(debug: bool) -> None:
    global _DEBUG
    _DEBUG = bool(debug)


def debug(message: str) -> None:
    if _DEBUG:
        print(message, file=sys.stderr)


def info(message: str) -> None:
    print(message, file=sys.stderr)


def error(message: str) -> None:
    print(message, file=sys.stderr)


__all__ = ["configure", "debug", "error", "info"]
