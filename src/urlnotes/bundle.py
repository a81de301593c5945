"""Export and import of portable note bundles.

File format (UTF-8 JSON)::

    {"version": 1, "exportedAt": <epoch ms>, "notes": [<note>, ...]}

Import is last-write-wins: every valid entry overwrites whatever is stored at
its (scope, key). Malformed entries are skipped, never repaired.
"""

import json
import logging
from typing import Any, Mapping, Optional, Union

from .exceptions import BundleError, StoreError
from .models import (
    BUNDLE_VERSION,
    ExportBundle,
    ImportResult,
    Note,
    Status,
    is_blank,
    is_number,
)
from .store import NoteStore
from .utils import now_ms

logger = logging.getLogger(__name__)

RawBundle = Union[str, bytes, bytearray, Mapping[str, Any], ExportBundle]


async def export_bundle(store: NoteStore) -> ExportBundle:
    """Snapshot every note currently in the store."""
    notes = await store.list_all()
    logger.info("Exporting %d notes", len(notes))
    return ExportBundle(exported_at=now_ms(), notes=notes)


def dumps_bundle(bundle: ExportBundle) -> str:
    return json.dumps(bundle.to_dict(), indent=2, ensure_ascii=False)


def parse_bundle(raw: RawBundle) -> Mapping[str, Any]:
    """Decode raw bundle input and check its top-level shape.

    Raises:
        BundleError: If the input is not JSON, not an object, or has no
            ``notes`` list.
    """
    if isinstance(raw, ExportBundle):
        return raw.to_dict()
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise BundleError(f"Bundle is not valid UTF-8: {e}") from e
    if isinstance(raw, str):
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise BundleError(f"Failed to parse bundle JSON: {e}") from e
    else:
        data = raw

    if not isinstance(data, Mapping):
        raise BundleError("Bundle must be a JSON object.")
    if not isinstance(data.get("notes"), (list, tuple)):
        raise BundleError("Invalid bundle: 'notes' list not found.")
    return data


def entry_to_note(entry: Any) -> Optional[Note]:
    """Validate one bundle entry. Returns None for malformed entries."""
    if not isinstance(entry, Mapping):
        return None
    if not isinstance(entry.get("key"), str) or not isinstance(entry.get("scope"), str):
        return None
    if not isinstance(entry.get("content"), str) or not is_number(entry.get("updatedAt")):
        return None
    # a blank note would be treated as absent everywhere else
    if is_blank(entry["content"]):
        return None
    return Note.from_dict(entry)


async def import_bundle(store: NoteStore, raw: RawBundle) -> ImportResult:
    """Upsert every valid entry of a bundle into the store.

    Never raises for malformed input; a persistence failure stops the import
    and is reported with the number of notes written so far.
    """
    try:
        data = parse_bundle(raw)
    except BundleError as e:
        logger.warning("Rejected bundle: %s", e)
        return ImportResult(Status.FAILED, error=str(e))

    version = data.get("version")
    if is_number(version) and version > BUNDLE_VERSION:
        msg = f"Bundle version {version} is newer than supported version {BUNDLE_VERSION}."
        logger.warning(msg)
        return ImportResult(Status.UNSUPPORTED, error=msg)

    count = 0
    skipped = 0
    for entry in data["notes"]:
        note = entry_to_note(entry)
        if note is None:
            skipped += 1
            continue
        try:
            await store.set(note)
        except StoreError as e:
            logger.warning("Import stopped after %d notes: %s", count, e)
            return ImportResult(Status.FAILED, count=count, skipped=skipped, error=str(e))
        count += 1

    if skipped:
        logger.warning("Skipped %d malformed bundle entries", skipped)
    logger.info("Imported %d notes", count)
    return ImportResult(Status.OK, count=count, skipped=skipped)
