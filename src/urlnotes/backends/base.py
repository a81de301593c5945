"""Abstract base class for key-value persistence backends."""

from abc import ABC, abstractmethod
from typing import Any, Iterable, Mapping, Optional


class KeyValueBackend(ABC):
    """Asynchronous key-value interface the note store persists through.

    Last write wins per key. A full scan (``get(None)``) is the only way to
    enumerate keys.
    """

    @abstractmethod
    async def get(self, keys: Optional[Iterable[str]] = None) -> dict[str, Any]:
        """Return the stored values for keys.

        Args:
            keys: Keys to read. ``None`` returns the entire namespace.

        Missing keys are absent from the returned mapping.
        """

    @abstractmethod
    async def set(self, items: Mapping[str, Any]) -> None:
        """Write every key/value pair in items, overwriting existing values."""

    @abstractmethod
    async def remove(self, keys: Iterable[str]) -> None:
        """Remove keys. Removing a missing key is a no-op."""
