from __future__ import annotations

import json
import unittest

from urlnotes.backends import MemoryBackend
from urlnotes.bundle import dumps_bundle, entry_to_note, export_bundle, import_bundle, parse_bundle
from urlnotes.exceptions import BundleError
from urlnotes.models import ExportBundle, Note, Status
from urlnotes.session import NoteSession
from urlnotes.store import NoteStore


def make_note(key: str, content: str = "text", updated_at: int = 1, **kw) -> Note:
    kw.setdefault("url_sample", key)
    kw.setdefault("scope", "path")
    return Note(key=key, content=content, updated_at=updated_at, **kw)


def by_identity(notes):
    return sorted(notes, key=lambda n: (n.scope, n.key))


class TestBundleFormat(unittest.TestCase):
    def test_dumps_uses_wire_names_and_order(self) -> None:
        bundle = ExportBundle(
            exported_at=1_700_000_000_000,
            notes=[
                make_note("https://a.example/", title="A", content="ü first"),
                make_note("https://b.example/", scope="origin"),
            ],
        )
        text = dumps_bundle(bundle)
        self.assertIn("ü first", text)
        data = json.loads(text)
        self.assertEqual(list(data.keys()), ["version", "exportedAt", "notes"])
        self.assertEqual(data["version"], 1)
        self.assertEqual(data["exportedAt"], 1_700_000_000_000)
        self.assertEqual(
            list(data["notes"][0].keys()),
            ["key", "urlSample", "scope", "title", "content", "updatedAt"],
        )
        self.assertNotIn("title", data["notes"][1])

    def test_parse_rejects_bad_json_and_shapes(self) -> None:
        for raw in ["{not json", "[]", '{"notes": {}}', '{"version": 1}', b"\xff\xfe"]:
            with self.assertRaises(BundleError):
                parse_bundle(raw)

    def test_parse_accepts_bytes_and_mappings(self) -> None:
        self.assertEqual(parse_bundle(b'{"notes": []}')["notes"], [])
        self.assertEqual(parse_bundle({"notes": []})["notes"], [])

    def test_entry_validation(self) -> None:
        good = {"key": "k", "scope": "path", "content": "c", "updatedAt": 3}
        self.assertIsNotNone(entry_to_note(good))
        for bad in [
            None,
            "string",
            {**good, "key": 1},
            {**good, "scope": None},
            {**good, "content": 42},
            {**good, "updatedAt": "3"},
            {**good, "updatedAt": False},
            {**good, "content": "   "},
        ]:
            self.assertIsNone(entry_to_note(bad), bad)

    def test_entry_drops_non_string_title_and_defaults_sample(self) -> None:
        note = entry_to_note({"key": "k", "scope": "path", "content": "c", "updatedAt": 3, "title": 9})
        self.assertIsNone(note.title)
        self.assertEqual(note.url_sample, "k")


class TestImportExport(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.store = NoteStore(MemoryBackend())

    async def test_export_reflects_store(self) -> None:
        await self.store.set(make_note("https://a.example/"))
        bundle = await export_bundle(self.store)
        self.assertEqual(bundle.version, 1)
        self.assertGreater(bundle.exported_at, 0)
        self.assertEqual([n.key for n in bundle.notes], ["https://a.example/"])

    async def test_round_trip_leaves_note_set_unchanged(self) -> None:
        await self.store.set(make_note("https://a.example/", title="A", updated_at=10))
        await self.store.set(make_note("https://b.example/", scope="exact", updated_at=20))
        await self.store.set(make_note("https://c.example/", scope="origin", content="multi\nline"))
        before = by_identity(await self.store.list_all())

        text = dumps_bundle(await export_bundle(self.store))
        result = await import_bundle(self.store, text)

        self.assertEqual(result.status, Status.OK)
        self.assertEqual(result.count, 3)
        self.assertEqual(by_identity(await self.store.list_all()), before)

        fresh = NoteStore(MemoryBackend())
        await import_bundle(fresh, text)
        self.assertEqual(by_identity(await fresh.list_all()), before)

    async def test_colliding_key_is_overwritten(self) -> None:
        await self.store.set(make_note("https://a.example/", content="mine", updated_at=500))
        raw = json.dumps({
            "version": 1,
            "exportedAt": 1,
            "notes": [{
                "key": "https://a.example/",
                "urlSample": "https://a.example/",
                "scope": "path",
                "content": "theirs",
                "updatedAt": 100,
            }],
        })
        result = await import_bundle(self.store, raw)
        self.assertEqual(result.count, 1)
        got = await self.store.get("path", "https://a.example/")
        self.assertEqual(got.content, "theirs")
        self.assertEqual(got.updated_at, 100)

    async def test_malformed_entries_are_skipped(self) -> None:
        raw = {
            "notes": [
                {"key": "https://ok.example/", "scope": "path", "content": "fine", "updatedAt": 1},
                {"key": "https://bad.example/", "scope": "path", "content": "fine"},
                42,
            ]
        }
        result = await import_bundle(self.store, raw)
        self.assertEqual(result.status, Status.OK)
        self.assertEqual(result.count, 1)
        self.assertEqual(result.skipped, 2)
        self.assertEqual([n.key for n in await self.store.list_all()], ["https://ok.example/"])

    async def test_invalid_json_fails_without_raising(self) -> None:
        result = await import_bundle(self.store, "{{{")
        self.assertEqual(result.status, Status.FAILED)
        self.assertEqual(result.count, 0)
        self.assertTrue(result.error)

    async def test_newer_version_is_unsupported(self) -> None:
        raw = {"version": 2, "notes": [{"key": "k", "scope": "path", "content": "c", "updatedAt": 1}]}
        result = await import_bundle(self.store, raw)
        self.assertEqual(result.status, Status.UNSUPPORTED)
        self.assertEqual(await self.store.list_all(), [])


class TestSessionBundles(unittest.IsolatedAsyncioTestCase):
    async def test_import_reloads_session_cache(self) -> None:
        session = NoteSession(NoteStore(MemoryBackend()))
        self.assertEqual(await session.refresh_list(), [])
        result = await session.import_bundle({
            "version": 1,
            "exportedAt": 1,
            "notes": [{"key": "https://a.example/", "urlSample": "https://a.example/",
                       "scope": "path", "content": "imported", "updatedAt": 7}],
        })
        self.assertTrue(result.ok)
        notes = await session.refresh_list("imported")
        self.assertEqual([n.key for n in notes], ["https://a.example/"])

    async def test_export_reads_store_not_cache(self) -> None:
        store = NoteStore(MemoryBackend())
        session = NoteSession(store)
        await session.refresh_list()
        await store.set(make_note("https://behind-the-cache.example/"))
        bundle = await session.export_bundle()
        self.assertEqual(len(bundle.notes), 1)
        self.assertEqual(len(await session.refresh_list()), 1)

    async def test_import_accepts_export_bundle_object(self) -> None:
        source = NoteSession(NoteStore(MemoryBackend()))
        await source.set_note(make_note("https://a.example/"))
        target = NoteSession(NoteStore(MemoryBackend()))
        result = await target.import_bundle(await source.export_bundle())
        self.assertEqual(result.count, 1)


if __name__ == "__main__":
    unittest.main()
