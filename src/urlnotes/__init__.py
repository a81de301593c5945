"""Notes attached to web pages by exact URL, path, or origin."""

from .models import ExportBundle, ImportResult, Note, SaveOutcome, SaveStatus, Status
from .session import NoteSession
from .store import NoteStore
from .urlkey import DerivedKey, derive_key

__version__ = "0.1.0"

__all__ = [
    "DerivedKey",
    "ExportBundle",
    "ImportResult",
    "Note",
    "NoteSession",
    "NoteStore",
    "SaveOutcome",
    "SaveStatus",
    "Status",
    "derive_key",
]
