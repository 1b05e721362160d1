"""requests-backed HTTP client for listing endpoints and archive downloads."""

from __future__ import annotations

import json
import os
import threading
from typing import Any, Iterator

import requests

from newkit.errors import TransportError
from newkit.ports.http import HttpClient

USER_AGENT = "newkit-cli"
TOKEN_ENVS = ("GITHUB_OAUTH_TOKEN", "GITHUB_TOKEN")


def _resolve_token(token: str | None) -> str | None:
    if token:
        return token.strip() or None
    for env in TOKEN_ENVS:
        value = os.environ.get(env, "").strip()
        if value:
            return value
    return None


class RequestsHttpClient(HttpClient):
    def __init__(
        self,
        session: requests.Session | None = None,
        *,
        timeout: float | None = 60.0,
        token: str | None = None,
    ) -> None:
        self._shared_session = session
        self._local = threading.local()
        self._timeout = timeout
        self._headers = {"User-Agent": USER_AGENT}
        resolved = _resolve_token(token)
        if resolved:
            self._headers["Authorization"] = f"Bearer {resolved}"

    @property
    def headers(self) -> dict[str, str]:
        return dict(self._headers)

    def iter_json_items(self, url: str) -> Iterator[Any]:
        next_url: str | None = url
        while next_url:
            response = self._get(next_url)
            payload = _decode_json(next_url, response)
            if not isinstance(payload, list):
                raise TransportError(
                    f"ERROR: Expected a JSON array from: {next_url}",
                    url=next_url,
                    payload=response.text,
                )
            yield from payload
            next_url = _next_link(response.headers.get("Link"))

    def get_bytes(self, url: str) -> bytes:
        return self._get(url).content

    def _session(self) -> requests.Session:
        # requests.Session is not thread-safe; source searches run on worker threads
        if self._shared_session is not None:
            return self._shared_session
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            self._local.session = session
        return session

    def _get(self, url: str) -> requests.Response:
        try:
            response = self._session().get(url, headers=self._headers, timeout=self._timeout)
        except requests.RequestException as exc:
            raise TransportError(f"Request failed '{url}': {exc}", url=url) from exc
        if response.status_code >= 400:
            raise TransportError(
                f"Request failed '{url}': {response.status_code} {response.reason or ''}".rstrip(),
                url=url,
            )
        return response


def _decode_json(url: str, response: requests.Response) -> Any:
    try:
        return response.json()
    except (json.JSONDecodeError, ValueError) as exc:
        raise TransportError(
            f"ERROR: Could not parse JSON response from: {url}",
            url=url,
            payload=response.text,
        ) from exc


def _next_link(link_header: str | None) -> str | None:
    if not link_header:
        return None
    parts = [part.strip() for part in link_header.split(",")]
    for part in parts:
        if "rel=\"next\"" in part:
            url_part, _ = part.split(";", 1)
            return url_part.strip(" <>")
    return None


__all__ = ["RequestsHttpClient", "TOKEN_ENVS", "USER_AGENT"]
