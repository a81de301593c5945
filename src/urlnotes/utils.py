"""Utility functions for urlnotes."""

import time
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import urlsplit


def now_ms() -> int:
    """Current time as integer epoch milliseconds."""
    return int(time.time() * 1000)


def host_from_url(url: str) -> str:
    """Return host[:port] of a URL, or the input when it has none."""
    try:
        netloc = urlsplit(url).netloc
    except ValueError:
        return url
    return netloc.rsplit("@", 1)[-1] or url


def format_timestamp(ts: int) -> str:
    """Format an epoch-ms timestamp in local time."""
    try:
        return datetime.fromtimestamp(ts / 1000).strftime("%Y-%m-%d %H:%M:%S")
    except (OverflowError, OSError, ValueError):
        return str(ts)


def backup_filename(when: Optional[datetime] = None) -> str:
    """Default file name for an export, e.g. url-notes-backup-20240131T081500.json."""
    when = when or datetime.now(timezone.utc)
    return f"url-notes-backup-{when.strftime('%Y%m%dT%H%M%S')}.json"


def first_line(text: str) -> str:
    """First line of a note body."""
    return text.split("\n", 1)[0]
