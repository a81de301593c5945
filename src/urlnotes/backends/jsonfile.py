"""JSON file backend.

The whole namespace lives in one UTF-8 JSON object on disk. Every operation
re-reads the file so several sessions on the same profile see each other's
writes. Operations on one backend run one at a time; each write goes to its
own temporary file that then replaces the original.
"""

import asyncio
import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

from .base import KeyValueBackend

logger = logging.getLogger(__name__)


class JsonFileBackend(KeyValueBackend):
    def __init__(self, path: Path):
        self._path = Path(path)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        text = self._path.read_text(encoding="utf-8")
        if not text.strip():
            return {}
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError(f"{self._path} does not contain a JSON object")
        return data

    def _write(self, data: Mapping[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=self._path.parent,
            prefix=self._path.name + ".",
            suffix=".tmp",
            delete=False,
        ) as tmp:
            json.dump(data, tmp, ensure_ascii=False)
        try:
            os.replace(tmp.name, self._path)
        except OSError:
            os.unlink(tmp.name)
            raise

    def _locked_read(self) -> dict[str, Any]:
        with self._lock:
            return self._read()

    def _update(self, items: Mapping[str, Any]) -> None:
        with self._lock:
            data = self._read()
            data.update(items)
            self._write(data)

    def _delete(self, keys: list[str]) -> None:
        with self._lock:
            data = self._read()
            removed = [k for k in keys if k in data]
            for k in removed:
                del data[k]
            if removed:
                self._write(data)

    async def get(self, keys: Optional[Iterable[str]] = None) -> dict[str, Any]:
        data = await asyncio.to_thread(self._locked_read)
        if keys is None:
            return data
        return {k: data[k] for k in keys if k in data}

    async def set(self, items: Mapping[str, Any]) -> None:
        logger.debug("Writing %d key(s) to %s", len(items), self._path)
        await asyncio.to_thread(self._update, dict(items))

    async def remove(self, keys: Iterable[str]) -> None:
        await asyncio.to_thread(self._delete, list(keys))
