"""Write export bundles to, and read them from, the filesystem."""

from pathlib import Path

from .bundle import dumps_bundle
from .models import ExportBundle
from .utils import backup_filename


def write_export(bundle: ExportBundle, output: Path) -> Path:
    """Write a bundle as JSON.

    ``output`` may be a file path or an existing directory, in which case a
    timestamped backup file name is used inside it.

    Returns the path of the written file.
    """
    output = Path(output)
    if output.is_dir():
        output = output / backup_filename()
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(dumps_bundle(bundle) + "\n", encoding="utf-8")
    return output


def read_bundle_file(path: Path) -> bytes:
    """Read raw bundle bytes; decoding and validation happen on import."""
    return Path(path).read_bytes()
