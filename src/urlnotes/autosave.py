"""Debounced autosave of the active editor buffer."""

import asyncio
import logging
from enum import Enum
from typing import Callable, Optional

from .cache import ListCache
from .debounce import Debouncer
from .exceptions import StoreError
from .models import (
    DEFAULT_SCOPE,
    Note,
    SaveOutcome,
    SaveStatus,
    is_blank,
    normalize_scope,
)
from .store import NoteStore
from .urlkey import derive_key
from .utils import now_ms

logger = logging.getLogger(__name__)

AUTOSAVE_DELAY_MS = 500


class AutosaveState(str, Enum):
    IDLE = "idle"
    PENDING_SAVE = "pending_save"
    SAVING = "saving"


class AutosaveController:
    """Editing session for one page at a time.

    Edits restart a debounce window; when it expires the buffer is written,
    or the note is deleted if the buffer is blank. Switching page or scope
    flushes the pending save before the new target is loaded.
    """

    def __init__(
        self,
        store: NoteStore,
        cache: ListCache,
        delay_ms: int = AUTOSAVE_DELAY_MS,
        on_status: Optional[Callable[[SaveOutcome], None]] = None,
    ):
        self._store = store
        self._cache = cache
        self._debouncer = Debouncer(delay_ms)
        self._lock = asyncio.Lock()
        self._on_status = on_status
        self._loading = True
        self._last_stamp = 0

        self.state = AutosaveState.IDLE
        self.scope: str = DEFAULT_SCOPE
        self.key = ""
        self.url = ""
        self.url_sample = ""
        self.title: Optional[str] = None
        self.buffer = ""
        self.last_outcome: Optional[SaveOutcome] = None

    @property
    def loaded(self) -> bool:
        return not self._loading and bool(self.key)

    async def open(
        self, url: str, title: Optional[str] = None, scope: Optional[str] = None
    ) -> Optional[Note]:
        """Flush the current session and load the note for url."""
        async with self._lock:
            await self._flush()
            return await self._load(url, title, normalize_scope(scope or self.scope))

    async def open_note(self, note: Note) -> None:
        """Flush the current session and edit a note picked from the list."""
        async with self._lock:
            await self._flush()
            self.scope = note.scope
            self.key = note.key
            self.url = note.url_sample
            self.url_sample = note.url_sample
            self.title = note.title
            self.buffer = note.content
            self._loading = False

    async def change_scope(self, scope: str) -> Optional[Note]:
        """Flush, then re-derive the key for the same URL under scope."""
        async with self._lock:
            await self._flush()
            scope = normalize_scope(scope)
            if not self.url:
                self.scope = scope
                return None
            return await self._load(self.url, self.title, scope)

    async def _load(self, url: str, title: Optional[str], scope: str) -> Optional[Note]:
        self._loading = True
        derived = derive_key(url, scope)
        self.scope = scope
        self.key = derived.key
        self.url = url
        self.url_sample = derived.sample
        self.title = title
        self.buffer = ""
        existing = await self._store.get(scope, derived.key)
        if existing is not None:
            self.buffer = existing.content
        self._loading = False
        logger.debug("Loaded %s:%s (%s)", scope, derived.key,
                     "existing" if existing else "new")
        return existing

    def edit(self, content: str) -> bool:
        """Replace the buffer and restart the debounce window.

        Returns False when no target is loaded and the edit was ignored.
        """
        if not self.loaded:
            return False
        self.buffer = content
        self.state = AutosaveState.PENDING_SAVE
        self._debouncer.schedule(self._save)
        return True

    async def flush(self) -> Optional[SaveOutcome]:
        """Run any pending save immediately and wait for it."""
        async with self._lock:
            return await self._flush()

    async def _flush(self) -> Optional[SaveOutcome]:
        return await self._debouncer.flush()

    def _stamp(self) -> int:
        stamp = max(now_ms(), self._last_stamp + 1)
        self._last_stamp = stamp
        return stamp

    async def _save(self) -> Optional[SaveOutcome]:
        """Persist the buffer as it is when the debounce window expires."""
        self._debouncer.cancel()
        if not self.key:
            self.state = AutosaveState.IDLE
            return None

        self.state = AutosaveState.SAVING
        scope, key, text = self.scope, self.key, self.buffer
        try:
            if is_blank(text):
                existing = await self._store.get(scope, key)
                if existing is not None:
                    await self._store.delete(scope, key)
                    self._cache.apply_delete(scope, key)
                    outcome = SaveOutcome(SaveStatus.CLEARED)
                else:
                    outcome = SaveOutcome(SaveStatus.EMPTY)
            else:
                note = Note(
                    key=key,
                    url_sample=self.url_sample,
                    scope=scope,
                    title=self.title,
                    content=text,
                    updated_at=self._stamp(),
                )
                await self._store.set(note)
                self._cache.apply_set(note)
                outcome = SaveOutcome(SaveStatus.SAVED, note=note)
        except StoreError as e:
            logger.warning("Autosave of %s:%s failed: %s", scope, key, e)
            outcome = SaveOutcome(SaveStatus.FAILED, error=str(e))
        finally:
            self.state = (
                AutosaveState.PENDING_SAVE if self._debouncer.pending
                else AutosaveState.IDLE
            )

        self.last_outcome = outcome
        if self._on_status is not None:
            self._on_status(outcome)
        return outcome
