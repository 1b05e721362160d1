"""Loading and validation of the newkit configuration file."""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Iterator, List, Tuple

import yaml
from jsonschema import Draft202012Validator

from newkit.domain.template import PostInstallRule, TemplateSource
from newkit.errors import ConfigError
from newkit.resources import load_config_schema, load_default_config

DEFAULT_CONFIG_FILE = "newkit.config"


@dataclass(frozen=True)
class ToolConfig:
    sources: Tuple[TemplateSource, ...]
    postinstall: Tuple[PostInstallRule, ...] = field(default_factory=tuple)
    origin: str = "default"

    def require_sources(self) -> Tuple[TemplateSource, ...]:
        if not self.sources:
            raise ConfigError("No sources defined")
        return self.sources


@lru_cache(maxsize=1)
def _validator() -> Draft202012Validator:
    return Draft202012Validator(load_config_schema())


def iter_config_errors(payload: Any) -> Iterator[Tuple[str, str]]:
    """Yield (path, message) pairs for schema issues in a config payload."""
    for error in _validator().iter_errors(payload):
        path = ".".join(str(item) for item in error.absolute_path)
        yield path, error.message


def config_from_payload(payload: Any, *, origin: str) -> ToolConfig:
    errors = sorted(iter_config_errors(payload))
    if errors:
        details = "; ".join(f"{path or '<root>'}: {message}" for path, message in errors)
        raise ConfigError(f"Invalid config {origin}: {details}")
    sources = tuple(TemplateSource(name=item["name"], url=item["url"]) for item in payload["sources"])
    rules: List[PostInstallRule] = [
        PostInstallRule(test=item["test"], exec=item.get("exec")) for item in payload.get("postinstall") or []
    ]
    return ToolConfig(sources=sources, postinstall=tuple(rules), origin=origin)


def load_config(path: Path | None = None, *, base_dir: Path | None = None) -> ToolConfig:
    """Load the config at ``path``, or ``newkit.config`` in ``base_dir``.

    JSON configs are read through the YAML parser. When no explicit path is
    given and the default file is absent, the packaged defaults apply.
    """

    if path is None:
        candidate = (base_dir or Path.cwd()) / DEFAULT_CONFIG_FILE
        if not candidate.exists():
            return config_from_payload(load_default_config(), origin="default")
        path = candidate
    elif not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    try:
        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Could not read config {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Config {path} is not valid JSON/YAML: {exc}") from exc
    return config_from_payload(payload, origin=str(path))


__all__ = ["DEFAULT_CONFIG_FILE", "ToolConfig", "config_from_payload", "iter_config_errors", "load_config"]
