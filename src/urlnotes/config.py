"""Configuration loading and validation."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .exceptions import ConfigError

BACKENDS = ("file", "memory")


@dataclass
class Config:
    """Application configuration."""

    backend: str = "file"
    store_path: Path = field(default_factory=lambda: Path.cwd() / "urlnotes.json")
    autosave_delay_ms: int = 500
    list_limit: int = 200
    verbose: bool = False

    def validate(self) -> None:
        """Validate configuration values."""
        if self.backend not in BACKENDS:
            raise ConfigError(
                f"Unknown backend: {self.backend}. Use 'file' or 'memory'."
            )
        if self.backend == "file" and self.store_path.is_dir():
            raise ConfigError(
                f"URLNOTES_STORE_PATH points to a directory: {self.store_path}"
            )
        if self.autosave_delay_ms < 0:
            raise ConfigError("autosave_delay_ms cannot be negative.")
        if self.list_limit < 1:
            raise ConfigError("list_limit must be at least 1.")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}.") from None


def load_config(
    store_path: Optional[str] = None,
    backend: Optional[str] = None,
    autosave_delay_ms: Optional[int] = None,
    list_limit: Optional[int] = None,
    verbose: bool = False,
) -> Config:
    """Load config from .env and apply CLI overrides."""
    load_dotenv()

    config = Config(
        backend=backend or os.getenv("URLNOTES_BACKEND", "file"),
        store_path=Path(store_path) if store_path else Path(
            os.getenv("URLNOTES_STORE_PATH", str(Path.cwd() / "urlnotes.json"))
        ),
        autosave_delay_ms=(
            autosave_delay_ms if autosave_delay_ms is not None
            else _env_int("URLNOTES_AUTOSAVE_DELAY_MS", 500)
        ),
        list_limit=(
            list_limit if list_limit is not None
            else _env_int("URLNOTES_LIST_LIMIT", 200)
        ),
        verbose=verbose,
    )

    config.validate()
    return config
