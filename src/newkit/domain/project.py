"""Project name rules."""

from __future__ import annotations

import re
from pathlib import Path

from newkit.errors import InvalidNameError

VALID_NAME_RE = re.compile(r"^[a-zA-Z_$][0-9a-zA-Z_$.]*$")
RESERVED_NAMES = frozenset({"CON", "AUX", "PRN", "COM1", "LP2", ".", ".."})

_CAMEL_BOUNDARY_RE = re.compile(r"([a-z])([A-Z])")


def validate_project_name(name: str | None, base_dir: Path | None = None) -> None:
    """Raise :class:`InvalidNameError` unless ``name`` can be used for a new project.

    An empty name is accepted; the placeholder name is used downstream.
    """

    if not name:
        return
    if not VALID_NAME_RE.fullmatch(name):
        raise InvalidNameError(f"Illegal char in project name: {name}")
    if name in RESERVED_NAMES:
        raise InvalidNameError(f"Illegal project name: {name}")
    target = (base_dir if base_dir is not None else Path.cwd()) / name
    if target.exists() or target.is_symlink():
        raise InvalidNameError(f"Project folder already exists: {name}")


def camel_to_kebab(name: str | None) -> str:
    return _CAMEL_BOUNDARY_RE.sub(r"\1-\2", name or "").lower()


__all__ = ["RESERVED_NAMES", "VALID_NAME_RE", "camel_to_kebab", "validate_project_name"]
