"""Packaged resources for newkit."""

from __future__ import annotations

import json
from functools import lru_cache
from importlib import resources
from typing import Any, Dict

import yaml

__all__ = ["load_config_schema", "load_default_config"]


@lru_cache(maxsize=1)
def load_config_schema() -> Dict[str, Any]:
    resource = resources.files(__name__) / "config.schema.json"
    with resource.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def load_default_config() -> Dict[str, Any]:
    """Return the configuration used when no config file is present."""

    raw = (resources.files(__name__) / "default_config.yaml").read_text("utf-8")
    return yaml.safe_load(raw) or {}
