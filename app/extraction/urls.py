"""
URL normalization and content-addressed URL hashing.
"""

from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass
from urllib.parse import quote, urlsplit, urlunsplit

from app.errors import InvalidURLError

DEFAULT_PORTS = {"http": 80, "https": 443}

# Characters left untouched when re-quoting; "%" keeps existing escapes stable.
_PATH_SAFE = "/%:@!$&'()*+,;=-._~"
_QUERY_SAFE = "/?%:@!$&'()*+,;=-._~"

_ESCAPE_RE = re.compile(r"%([0-9A-Fa-f]{2})")
_UNRESERVED = frozenset(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-._~"
)


def normalize_url(raw: str) -> str:
    """
    Return the canonical form of an http(s) URL.

    Scheme and host are lower-cased and a trailing dot on the host is
    removed. Userinfo, default ports and the fragment are dropped. Escapes of
    unreserved characters are decoded and the remaining escapes upper-cased,
    dot segments are resolved, an empty path becomes "/" and unsafe
    characters are percent-encoded. Query parameter order is preserved.
    """

    candidate = (raw or "").strip()
    try:
        parts = urlsplit(candidate)
        port = parts.port
    except ValueError as exc:
        raise InvalidURLError(f"Invalid URL: {raw}") from exc

    scheme = parts.scheme.lower()
    host = (parts.hostname or "").rstrip(".")
    if scheme not in DEFAULT_PORTS or not host or any(char.isspace() for char in host):
        raise InvalidURLError(f"Invalid URL: {raw}")

    netloc = f"[{host}]" if ":" in host else host
    if port is not None and port != DEFAULT_PORTS[scheme]:
        netloc = f"{netloc}:{port}"

    path = _normalize_escapes(parts.path or "/")
    path = quote(_remove_dot_segments(path), safe=_PATH_SAFE)
    query = quote(_normalize_escapes(parts.query), safe=_QUERY_SAFE)
    return urlunsplit((scheme, netloc, path, query, ""))


def hash_url(normalized_url: str) -> str:
    """
    SHA-256 hex digest of an already-normalized URL.
    """

    return hashlib.sha256(normalized_url.encode("utf-8")).hexdigest()


def url_host(url: str) -> str:
    """
    Lower-cased host of `url`, or an empty string when there is none.
    """

    try:
        return (urlsplit(url.strip()).hostname or "").lower().rstrip(".")
    except ValueError:
        return ""


def _normalize_escapes(value: str) -> str:
    def _replace(match: re.Match[str]) -> str:
        char = chr(int(match.group(1), 16))
        return char if char in _UNRESERVED else f"%{match.group(1).upper()}"

    return _ESCAPE_RE.sub(_replace, value)


def _remove_dot_segments(path: str) -> str:
    output: list[str] = []
    for segment in path.split("/"):
        if segment == "..":
            if len(output) > 1:
                output.pop()
        elif segment != ".":
            output.append(segment)
    if path.endswith(("/.", "/..")):
        output.append("")
    joined = "/".join(output)
    return joined if joined.startswith("/") else f"/{joined}"


@dataclass(frozen=True)
class SourceURL:
    """
    A submitted URL with its canonical form and cache key hash.
    """

    raw: str
    normalized: str
    url_hash: str

    @classmethod
    def parse(cls, raw: str) -> "SourceURL":
        normalized = normalize_url(raw)
        return cls(raw=raw, normalized=normalized, url_hash=hash_url(normalized))

    @property
    def host(self) -> str:
        return url_host(self.normalized)
