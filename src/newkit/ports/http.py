"""Port definitions for HTTP access."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Iterator


class HttpClient(ABC):
    @abstractmethod
    def iter_json_items(self, url: str) -> Iterator[Any]:
        """Yield the items of a JSON array endpoint, following pagination lazily."""

    @abstractmethod
    def get_bytes(self, url: str) -> bytes:
        """Return the raw body of ``url``."""
