"""In-memory backend, used for tests and throwaway sessions."""

import copy
from typing import Any, Iterable, Mapping, Optional

from .base import KeyValueBackend


class MemoryBackend(KeyValueBackend):
    def __init__(self, initial: Optional[Mapping[str, Any]] = None):
        self._data: dict[str, Any] = copy.deepcopy(dict(initial or {}))

    async def get(self, keys: Optional[Iterable[str]] = None) -> dict[str, Any]:
        if keys is None:
            return copy.deepcopy(self._data)
        return {k: copy.deepcopy(self._data[k]) for k in keys if k in self._data}

    async def set(self, items: Mapping[str, Any]) -> None:
        for k, v in items.items():
            self._data[k] = copy.deepcopy(v)

    async def remove(self, keys: Iterable[str]) -> None:
        for k in keys:
            self._data.pop(k, None)

    def __len__(self) -> int:
        return len(self._data)
