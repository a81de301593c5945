"""Derive stable storage keys from page URLs.

A note is addressed by a key computed from the page URL at one of three
granularities:

- ``exact``: the whole normalized URL, query and fragment included.
- ``path``: scheme, host and path (always ending in ``/``).
- ``origin``: scheme, host and any non-default port, followed by ``/``.

Example:
    derive_key("https://Example.com/A?x=1#h", "path").key
    -> "https://example.com/A/"
"""

import string
from typing import NamedTuple
from urllib.parse import SplitResult, quote, urlsplit

from .models import normalize_scope

DEFAULT_PORTS = {
    "http": 80,
    "https": 443,
    "ws": 80,
    "wss": 443,
    "ftp": 21,
}

# Characters percent-encoded by browsers in each URL component, besides
# controls, space and non-ASCII.
_PATH_ENCODE = "\"#<>?`{}"
_QUERY_ENCODE = "\"#<>'"
_FRAGMENT_ENCODE = "\"<>`"


class DerivedKey(NamedTuple):
    """Storage key plus a literal URL kept for display."""

    key: str
    sample: str


def _host(parts: SplitResult) -> str:
    hostname = parts.hostname or ""
    # urlsplit drops the brackets around IPv6 literals
    if ":" in hostname:
        return f"[{hostname}]"
    return hostname


def _encode(text: str, unsafe: str) -> str:
    safe = "".join(c for c in string.punctuation if c not in unsafe)
    return quote(text, safe=safe)


def _remove_dot_segments(path: str) -> str:
    """Resolve `.` and `..` segments; `/a/b/..` becomes `/a/`."""
    segments = path.split("/")[1:]
    out: list[str] = []
    for i, seg in enumerate(segments):
        last = i == len(segments) - 1
        if seg in (".", ".."):
            if seg == ".." and out:
                out.pop()
            if last:
                out.append("")
        else:
            out.append(seg)
    return "/" + "/".join(out)


def _normalize_path(path: str) -> str:
    if not path.startswith("/"):
        path = "/" + path
    return _encode(_remove_dot_segments(path), _PATH_ENCODE)


def _port_suffix(parts: SplitResult, port) -> str:
    if port is None or port == DEFAULT_PORTS.get(parts.scheme):
        return ""
    return f":{port}"


def derive_key(url: str, scope: str) -> DerivedKey:
    """Map a URL and scope to a storage key.

    Never raises. URLs without a scheme and host (``about:blank``,
    ``chrome://`` internals, plain garbage) map to themselves.
    """
    scope = normalize_scope(scope)
    try:
        parts = urlsplit(url)
        port = parts.port
    except (ValueError, TypeError, AttributeError):
        return DerivedKey(url, url)

    if not parts.scheme or not parts.hostname:
        return DerivedKey(url, url)

    base = f"{parts.scheme}://{_host(parts)}"

    if scope == "path":
        path = _normalize_path(parts.path)
        if not path.endswith("/"):
            path += "/"
        return DerivedKey(base + path, url)

    if scope == "origin":
        return DerivedKey(f"{base}{_port_suffix(parts, port)}/", url)

    userinfo, _, _ = parts.netloc.rpartition("@")
    key = f"{parts.scheme}://"
    if userinfo:
        key += f"{userinfo}@"
    key += _host(parts) + _port_suffix(parts, port) + _normalize_path(parts.path)
    if parts.query:
        key += "?" + _encode(parts.query, _QUERY_ENCODE)
    if parts.fragment:
        key += "#" + _encode(parts.fragment, _FRAGMENT_ENCODE)
    return DerivedKey(key, url)
