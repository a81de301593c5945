"""Session-owned in-memory mirror of the persisted note set."""

import logging
from typing import Optional

from .models import Note, is_blank
from .store import NoteStore

logger = logging.getLogger(__name__)

LIST_LIMIT = 200


def matches(note: Note, query: str) -> bool:
    """Case-insensitive substring match on title, content, URL sample and key."""
    if not query:
        return True
    q = query.lower()
    return (
        q in (note.title or "").lower()
        or q in note.content.lower()
        or q in note.url_sample.lower()
        or q in note.key.lower()
    )


class ListCache:
    """Mirror of the store used to serve list views cheaply.

    Local saves and deletes patch the cache directly. After a bulk import or
    export the owner calls ``reload()`` (or ``invalidate()``) because the set
    of touched keys is not tracked.
    """

    def __init__(self, store: NoteStore, limit: int = LIST_LIMIT):
        self._store = store
        self._limit = limit
        self._notes: dict[tuple[str, str], Note] = {}
        self._loaded = False

    @property
    def loaded(self) -> bool:
        return self._loaded

    def __len__(self) -> int:
        return len(self._notes)

    def invalidate(self) -> None:
        """Drop the cached set; the next refresh reloads from the store."""
        self._notes = {}
        self._loaded = False

    async def reload(self) -> None:
        notes = await self._store.list_all()
        self._notes = {n.identity: n for n in notes}
        self._loaded = True
        logger.debug("Cache reloaded with %d notes", len(self._notes))

    async def refresh(self, query: str = "") -> list[Note]:
        """Return notes matching query, newest first, at most ``limit`` of them."""
        if not self._loaded:
            await self.reload()
        query = query.strip()
        found = [
            n for n in self._notes.values()
            if not is_blank(n.content) and matches(n, query)
        ]
        found.sort(key=lambda n: n.updated_at, reverse=True)
        return found[: self._limit]

    def apply_set(self, note: Note) -> None:
        # dict keeps the original position when a key is replaced
        self._notes[note.identity] = note

    def apply_delete(self, scope: str, key: str) -> None:
        self._notes.pop((scope, key), None)

    def find(self, scope: str, key: str) -> Optional[Note]:
        return self._notes.get((scope, key))
