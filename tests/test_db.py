"""Tests for shopfloor/db.py — shared TinyDB stores."""

import threading

from tinydb import TinyDB

from shopfloor.db import close_all, get_store


class TestGetStore:
    def test_returns_tinydb_and_lock(self, tmp_path):
        """A Store carries a TinyDB handle and a lock."""
        store = get_store(tmp_path / "test.json")
        assert isinstance(store.db, TinyDB)
        assert hasattr(store.lock, "acquire") and hasattr(store.lock, "release")

    def test_same_path_same_instance(self, tmp_path):
        """Same path (even spelled differently) returns the same Store."""
        a = get_store(tmp_path / "test.json")
        b = get_store(tmp_path / "sub" / ".." / "test.json")
        assert a is b

    def test_different_paths(self, tmp_path):
        assert get_store(tmp_path / "a.json") is not get_store(tmp_path / "b.json")

    def test_creates_parent_dirs(self, tmp_path):
        store = get_store(tmp_path / "deep" / "nested" / "test.json")
        assert store.path.parent.exists()

    def test_close_all_resets_registry(self, tmp_path):
        """After close_all a fresh Store is built for the same path."""
        first = get_store(tmp_path / "test.json")
        first.table("t").insert({"x": 1})
        close_all()
        second = get_store(tmp_path / "test.json")
        assert second is not first
        assert second.table("t").all() == [{"x": 1}]

    def test_concurrent_writes(self, tmp_path):
        """Writers holding the store lock don't lose inserts."""
        store = get_store(tmp_path / "test.json")
        table = store.table("items")

        def writer(n):
            for i in range(20):
                with store.lock:
                    table.insert({"writer": n, "i": i})

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(table) == 80
