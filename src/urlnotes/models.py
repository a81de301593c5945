"""Data models for urlnotes."""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal, Mapping, Optional

Scope = Literal["exact", "path", "origin"]

SCOPES: tuple[str, ...] = ("exact", "path", "origin")
DEFAULT_SCOPE: Scope = "path"
BUNDLE_VERSION = 1


def is_scope(value: Any) -> bool:
    return isinstance(value, str) and value in SCOPES


def normalize_scope(value: Any) -> Scope:
    """Return value when it is a valid scope, else the default scope."""
    return value if is_scope(value) else DEFAULT_SCOPE


def is_number(value: Any) -> bool:
    """True for int and finite float, but not bool."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def is_blank(text: Optional[str]) -> bool:
    return not text or not text.strip()


@dataclass
class Note:
    """One note attached to a (scope, key) pair."""

    key: str
    url_sample: str
    scope: str
    content: str
    updated_at: int
    title: Optional[str] = None

    @property
    def identity(self) -> tuple[str, str]:
        return (self.scope, self.key)

    def to_dict(self) -> dict:
        """Serialize with the wire field names and order."""
        data: dict[str, Any] = {
            "key": self.key,
            "urlSample": self.url_sample,
            "scope": self.scope,
        }
        if self.title is not None:
            data["title"] = self.title
        data["content"] = self.content
        data["updatedAt"] = self.updated_at
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Note":
        """Build a Note from a wire mapping that already passed validation."""
        title = data.get("title")
        url_sample = data.get("urlSample")
        updated_at = data["updatedAt"]
        return cls(
            key=data["key"],
            url_sample=url_sample if isinstance(url_sample, str) else data["key"],
            scope=data["scope"],
            title=title if isinstance(title, str) else None,
            content=data["content"],
            updated_at=int(updated_at),
        )


@dataclass
class ExportBundle:
    """Snapshot of all notes at export time."""

    exported_at: int
    notes: list[Note] = field(default_factory=list)
    version: int = BUNDLE_VERSION

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "exportedAt": self.exported_at,
            "notes": [n.to_dict() for n in self.notes],
        }


class Status(str, Enum):
    """Generic operation result."""

    OK = "ok"
    FAILED = "failed"
    UNSUPPORTED = "unsupported"


class SaveStatus(str, Enum):
    """Result of one autosave attempt."""

    SAVED = "saved"
    CLEARED = "cleared"
    EMPTY = "empty"
    FAILED = "failed"


@dataclass
class SaveOutcome:
    status: SaveStatus
    note: Optional[Note] = None
    error: str = ""


@dataclass
class ImportResult:
    """Result of importing a bundle."""

    status: Status
    count: int = 0
    skipped: int = 0
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.status is Status.OK
