"""Persistence backend factory."""

from ..config import Config
from .base import KeyValueBackend
from .jsonfile import JsonFileBackend
from .memory import MemoryBackend


def get_backend(config: Config) -> KeyValueBackend:
    """Create and return the configured backend."""
    if config.backend == "memory":
        return MemoryBackend()
    return JsonFileBackend(config.store_path)


__all__ = ["KeyValueBackend", "JsonFileBackend", "MemoryBackend", "get_backend"]
