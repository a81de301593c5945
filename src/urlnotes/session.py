"""Caller-facing facade for one UI session.

A ``NoteSession`` owns the list cache and the autosave controller for one
surface (a CLI invocation, a side panel). Sessions never share a cache.
"""

import logging
from typing import Callable, Optional

from .autosave import AUTOSAVE_DELAY_MS, AutosaveController
from .backends import get_backend
from .bundle import RawBundle, export_bundle, import_bundle
from .cache import LIST_LIMIT, ListCache
from .config import Config
from .models import ExportBundle, ImportResult, Note, SaveOutcome, Scope, Status
from .store import NoteStore
from .urlkey import DerivedKey, derive_key

logger = logging.getLogger(__name__)


class NoteSession:
    def __init__(
        self,
        store: NoteStore,
        delay_ms: int = AUTOSAVE_DELAY_MS,
        list_limit: int = LIST_LIMIT,
        on_status: Optional[Callable[[SaveOutcome], None]] = None,
    ):
        self.store = store
        self.cache = ListCache(store, limit=list_limit)
        self.autosave = AutosaveController(
            store, self.cache, delay_ms=delay_ms, on_status=on_status
        )

    @classmethod
    def from_config(
        cls,
        config: Config,
        on_status: Optional[Callable[[SaveOutcome], None]] = None,
    ) -> "NoteSession":
        return cls(
            NoteStore(get_backend(config)),
            delay_ms=config.autosave_delay_ms,
            list_limit=config.list_limit,
            on_status=on_status,
        )

    # ---- addressing and CRUD ----

    @staticmethod
    def derive_key(url: str, scope: str) -> DerivedKey:
        return derive_key(url, scope)

    async def get_note(self, scope: str, key: str) -> Optional[Note]:
        return await self.store.get(scope, key)

    async def set_note(self, note: Note) -> None:
        await self.store.set(note)
        self.cache.apply_set(note)

    async def delete_note(self, scope: str, key: str) -> None:
        await self.store.delete(scope, key)
        self.cache.apply_delete(scope, key)

    async def list_all_notes(self) -> list[Note]:
        return await self.store.list_all()

    async def get_default_scope(self) -> Scope:
        return await self.store.get_default_scope()

    async def set_default_scope(self, scope: str) -> Scope:
        return await self.store.set_default_scope(scope)

    async def refresh_list(self, query: str = "") -> list[Note]:
        return await self.cache.refresh(query)

    # ---- bundles ----

    async def export_bundle(self) -> ExportBundle:
        bundle = await export_bundle(self.store)
        await self.cache.reload()
        return bundle

    async def import_bundle(self, raw: RawBundle) -> ImportResult:
        result = await import_bundle(self.store, raw)
        self.cache.invalidate()
        if result.status is Status.OK:
            await self.cache.reload()
        return result

    # ---- editing ----

    async def start(self, url: str, title: Optional[str] = None) -> Optional[Note]:
        """Open url under the persisted default scope."""
        scope = await self.get_default_scope()
        return await self.autosave.open(url, title, scope)

    async def open_page(self, url: str, title: Optional[str] = None) -> Optional[Note]:
        return await self.autosave.open(url, title)

    async def open_note(self, note: Note) -> None:
        await self.autosave.open_note(note)

    def edit(self, content: str) -> bool:
        return self.autosave.edit(content)

    async def flush(self) -> Optional[SaveOutcome]:
        return await self.autosave.flush()

    async def change_scope(self, scope: str) -> Optional[Note]:
        """Remember scope as the default and reload the current page under it."""
        scope = await self.set_default_scope(scope)
        return await self.autosave.change_scope(scope)

    async def close(self) -> Optional[SaveOutcome]:
        return await self.flush()
