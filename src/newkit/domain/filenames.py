"""Turn arbitrary URLs into safe, bounded cache file names."""

from __future__ import annotations

import re

DEFAULT_REPLACEMENT = "!"
MAX_FILENAME_LENGTH = 100

_RESERVED_RE = re.compile(r'[<>:"/\\|?*\x00-\x1f]')
_CONTROL_RE = re.compile(r"[\x00-\x1f\x80-\x9f]")
_LEADING_DOTS_RE = re.compile(r"^\.+")
_WINDOWS_NAMES_RE = re.compile(r"^(con|prn|aux|nul|com[0-9]|lpt[0-9])$", re.IGNORECASE)
_URL_AUTH_RE = re.compile(r"^((?:\w+:)?//)(?:[^@/]+@)")
_URL_SCHEME_RE = re.compile(r"^(?:https?:)?//")


def _trim_repeated(text: str, target: str) -> str:
    return re.sub(f"(?:{re.escape(target)}){{2,}}", target, text)


def _strip_outer(text: str, sub: str) -> str:
    escaped = re.escape(sub)
    return re.sub(f"^{escaped}|{escaped}$", "", text)


def filenamify(text: str, replacement: str = DEFAULT_REPLACEMENT) -> str:
    """Return ``text`` as a portable file name.

    Reserved and control characters become ``replacement``, leading dots are
    neutralised, repeated replacements collapse, Windows device names get a
    suffix and the result is capped at ``MAX_FILENAME_LENGTH`` characters.
    """

    if _RESERVED_RE.search(replacement) or _CONTROL_RE.search(replacement):
        raise ValueError("Replacement string cannot contain reserved filename characters")

    result = _RESERVED_RE.sub(replacement, text)
    result = _CONTROL_RE.sub(replacement, result)
    result = _LEADING_DOTS_RE.sub(replacement, result)

    if replacement:
        result = _trim_repeated(result, replacement)
        if len(result) > 1:
            result = _strip_outer(result, replacement)

    if _WINDOWS_NAMES_RE.match(result):
        result += replacement
    return result[:MAX_FILENAME_LENGTH]


def humanize_url(url: str) -> str:
    """Lowercase ``url`` and drop its credentials and http(s) scheme."""

    without_auth = _URL_AUTH_RE.sub(r"\1", url)
    return _URL_SCHEME_RE.sub("", without_auth.lower())


def filenamify_url(url: str, replacement: str = DEFAULT_REPLACEMENT) -> str:
    return filenamify(humanize_url(url), replacement)


__all__ = ["DEFAULT_REPLACEMENT", "MAX_FILENAME_LENGTH", "filenamify", "filenamify_url", "humanize_url"]
