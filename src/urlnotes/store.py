"""Note persistence over a key-value backend.

Every note lives under ``notes:<scope>:<key>``. The default scope setting uses
the disjoint ``settings:`` prefix, so it can never collide with a note.
"""

import logging
from typing import Any, Optional

from .backends.base import KeyValueBackend
from .exceptions import StoreError
from .models import Note, Scope, is_number, normalize_scope

logger = logging.getLogger(__name__)

PREFIX = "notes"
SETTINGS_DEFAULT_SCOPE = "settings:defaultScope"


def storage_key_for(scope: str, key: str) -> str:
    return f"{PREFIX}:{scope}:{key}"


def _split_storage_key(storage_key: str) -> tuple[str, str]:
    _, scope, key = storage_key.split(":", 2)
    return scope, key


def _is_valid_entry(value: Any) -> bool:
    return (
        isinstance(value, dict)
        and isinstance(value.get("content"), str)
        and is_number(value.get("updatedAt"))
    )


class NoteStore:
    """CRUD and enumeration of notes.

    The store persists whatever it is given; keeping empty notes out is the
    job of the autosave controller.
    """

    def __init__(self, backend: KeyValueBackend):
        self._backend = backend

    @property
    def backend(self) -> KeyValueBackend:
        return self._backend

    async def _call(self, action: str, coro):
        try:
            return await coro
        except StoreError:
            raise
        except Exception as e:
            raise StoreError(f"Failed to {action}: {e}") from e

    async def get(self, scope: str, key: str) -> Optional[Note]:
        """Return the note at (scope, key), or None when absent."""
        k = storage_key_for(scope, key)
        obj = await self._call(f"read {k}", self._backend.get([k]))
        value = obj.get(k)
        if not _is_valid_entry(value):
            return None
        return Note.from_dict({**value, "key": key, "scope": scope})

    async def set(self, note: Note) -> None:
        """Upsert a note. Always overwrites."""
        k = storage_key_for(note.scope, note.key)
        await self._call(f"write {k}", self._backend.set({k: note.to_dict()}))
        logger.info("Saved note %s (%d chars)", k, len(note.content))

    async def delete(self, scope: str, key: str) -> None:
        """Remove the note at (scope, key). Missing notes are ignored."""
        k = storage_key_for(scope, key)
        await self._call(f"delete {k}", self._backend.remove([k]))
        logger.info("Deleted note %s", k)

    async def list_all(self) -> list[Note]:
        """Scan the whole namespace and return every well-formed note."""
        obj = await self._call("list notes", self._backend.get(None))
        notes: list[Note] = []
        skipped = 0
        for k, v in obj.items():
            if not k.startswith(PREFIX + ":"):
                continue
            if not _is_valid_entry(v):
                skipped += 1
                continue
            scope, key = _split_storage_key(k)
            notes.append(Note.from_dict({**v, "key": key, "scope": scope}))
        if skipped:
            logger.warning("Skipped %d malformed note entries", skipped)
        logger.debug("Listed %d notes", len(notes))
        return notes

    async def get_default_scope(self) -> Scope:
        obj = await self._call(
            "read default scope", self._backend.get([SETTINGS_DEFAULT_SCOPE])
        )
        return normalize_scope(obj.get(SETTINGS_DEFAULT_SCOPE))

    async def set_default_scope(self, scope: str) -> Scope:
        """Persist the default scope. Invalid values are stored as ``path``."""
        scope = normalize_scope(scope)
        await self._call(
            "write default scope",
            self._backend.set({SETTINGS_DEFAULT_SCOPE: scope}),
        )
        return scope
