from __future__ import annotations

import unittest

from urlnotes.backends import MemoryBackend
from urlnotes.cache import ListCache, matches
from urlnotes.models import Note
from urlnotes.store import NoteStore


def make_note(key: str, updated_at: int, content: str = "note", **kw) -> Note:
    kw.setdefault("url_sample", key)
    kw.setdefault("scope", "path")
    return Note(key=key, content=content, updated_at=updated_at, **kw)


class CountingBackend(MemoryBackend):
    def __init__(self) -> None:
        super().__init__()
        self.full_scans = 0

    async def get(self, keys=None):
        if keys is None:
            self.full_scans += 1
        return await super().get(keys)


class TestListCache(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.backend = CountingBackend()
        self.store = NoteStore(self.backend)
        self.cache = ListCache(self.store)

    async def test_query_matches_title_content_sample_and_key(self) -> None:
        await self.store.set(make_note("https://a.example/", 1, title="All about FOO"))
        await self.store.set(make_note("https://b.example/", 2, content="some foobar text"))
        await self.store.set(make_note("https://c.example/", 3, url_sample="https://c.example/?q=Foo"))
        await self.store.set(make_note("https://foo.example/", 4))
        await self.store.set(make_note("https://e.example/", 5, title="unrelated", content="bar"))

        got = await self.cache.refresh("foo")
        self.assertEqual(
            [n.key for n in got],
            ["https://foo.example/", "https://c.example/", "https://b.example/", "https://a.example/"],
        )

    async def test_refresh_caps_results_and_sorts_newest_first(self) -> None:
        for i in range(250):
            await self.store.set(make_note(f"https://example.com/{i}/", updated_at=i))
        got = await self.cache.refresh("")
        self.assertEqual(len(got), 200)
        self.assertEqual(got[0].updated_at, 249)
        self.assertEqual(got[-1].updated_at, 50)

    async def test_custom_limit(self) -> None:
        for i in range(5):
            await self.store.set(make_note(f"https://example.com/{i}/", updated_at=i))
        got = await ListCache(self.store, limit=2).refresh()
        self.assertEqual([n.updated_at for n in got], [4, 3])

    async def test_blank_notes_are_filtered(self) -> None:
        await self.store.set(make_note("https://a.example/", 1, content="  \n "))
        await self.store.set(make_note("https://b.example/", 2, content="kept"))
        got = await self.cache.refresh()
        self.assertEqual([n.key for n in got], ["https://b.example/"])

    async def test_loads_lazily_once(self) -> None:
        await self.store.set(make_note("https://a.example/", 1))
        self.assertFalse(self.cache.loaded)
        await self.cache.refresh()
        await self.cache.refresh("a")
        self.assertTrue(self.cache.loaded)
        self.assertEqual(self.backend.full_scans, 1)

    async def test_external_writes_need_reload(self) -> None:
        await self.cache.refresh()
        await self.store.set(make_note("https://a.example/", 1))
        self.assertEqual(await self.cache.refresh(), [])
        self.cache.invalidate()
        self.assertEqual(len(await self.cache.refresh()), 1)

    async def test_apply_set_replaces_in_place_or_appends(self) -> None:
        await self.cache.refresh()
        self.cache.apply_set(make_note("https://a.example/", 1, content="first"))
        self.cache.apply_set(make_note("https://b.example/", 2))
        self.cache.apply_set(make_note("https://a.example/", 3, content="second"))
        self.assertEqual(len(self.cache), 2)
        self.assertEqual(self.cache.find("path", "https://a.example/").content, "second")

    async def test_same_key_in_other_scope_is_separate(self) -> None:
        await self.cache.refresh()
        self.cache.apply_set(make_note("https://a.example/", 1))
        self.cache.apply_set(make_note("https://a.example/", 2, scope="origin"))
        self.assertEqual(len(self.cache), 2)

    async def test_apply_delete(self) -> None:
        await self.store.set(make_note("https://a.example/", 1))
        await self.cache.refresh()
        self.cache.apply_delete("path", "https://a.example/")
        self.cache.apply_delete("path", "https://missing.example/")
        self.assertEqual(await self.cache.refresh(), [])


class TestMatches(unittest.TestCase):
    def test_empty_query_matches_everything(self) -> None:
        self.assertTrue(matches(make_note("k", 1), ""))

    def test_missing_title_is_not_an_error(self) -> None:
        self.assertFalse(matches(make_note("k", 1, content="x"), "zzz"))


if __name__ == "__main__":
    unittest.main()
