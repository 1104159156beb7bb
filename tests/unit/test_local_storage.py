# =============================================================================
# tests/unit/test_local_storage.py
# Unit Tests for LocalStorage and LocalCache
# =============================================================================

from datetime import datetime

import pytest

from inventory_core.domain.records import Record
from inventory_core.errors import StorageError
from inventory_core.offline.local_cache import LocalCache
from inventory_core.offline.local_storage import LocalStorage


class TestLocalStorage:
    """SQLite-backed key/text store"""

    def test_values_survive_reopen(self, tmp_path):
        path = tmp_path / "inventory.db"
        storage = LocalStorage(path)
        storage.set("ns:cache:stocks", "[1, 2]")
        storage.close()

        reopened = LocalStorage(path)
        assert reopened.get("ns:cache:stocks") == "[1, 2]"
        assert reopened.is_durable

    def test_set_replaces_value(self, tmp_path):
        storage = LocalStorage(tmp_path / "inventory.db")
        storage.set("k", "old")
        storage.set("k", "new")
        assert storage.get("k") == "new"

    def test_delete_and_missing(self, tmp_path):
        storage = LocalStorage(tmp_path / "inventory.db")
        storage.set("k", "v")
        storage.delete("k")
        assert storage.get("k") is None

    def test_keys_by_prefix_escapes_wildcards(self, tmp_path):
        storage = LocalStorage(tmp_path / "inventory.db")
        storage.set("ns:pending:raw_materials", "[]")
        storage.set("ns:pending:rawXmaterials", "[]")
        storage.set("other:pending:stocks", "[]")
        assert storage.keys("ns:pending:raw_") == ["ns:pending:raw_materials"]

    def test_memory_storage(self):
        storage = LocalStorage(None)
        storage.set("k", "v")
        assert storage.get("k") == "v"
        assert not storage.is_durable
        assert storage.pop_warning() is None

    def test_unopenable_database_degrades_to_memory(self, tmp_path):
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("file in the way")
        storage = LocalStorage(blocker / "inventory.db")

        storage.set("k", "v")

        assert storage.get("k") == "v"
        assert not storage.is_durable
        warning = storage.pop_warning()
        assert isinstance(warning, StorageError)
        assert storage.pop_warning() is None

    def test_write_failure_switches_to_memory(self, tmp_path):
        storage = LocalStorage(tmp_path / "inventory.db")
        storage.set("kept", "1")
        storage._connection.execute("DROP TABLE kv_store")

        storage.set("new", "2")

        assert storage.get("new") == "2"
        assert not storage.is_durable
        assert storage.pop_warning() is not None


class TestLocalCache:
    """Per-resource snapshot of the last good read"""

    def test_never_populated(self, cache):
        assert cache.get("stocks") == []
        assert cache.get_entry("stocks") is None

    def test_put_and_get(self, cache):
        when = datetime(2025, 7, 29, 10, 30)
        cache.put("stocks", [Record(fields={"name": "Salt"}, id="1")], fetched_at=when)

        entry = cache.get_entry("stocks")
        assert entry.fetched_at == when
        assert entry.records == [Record(fields={"name": "Salt"}, id="1")]

    def test_put_replaces_whole_snapshot(self, cache):
        cache.put("stocks", [Record(fields={"n": 1}, id="1"), Record(fields={"n": 2}, id="2")])
        cache.put("stocks", [Record(fields={"n": 3}, id="3")])
        assert [r.id for r in cache.get("stocks")] == ["3"]

    def test_pending_flags_are_not_cached(self, cache):
        cache.put("stocks", [Record(fields={"n": 1}, id="1", pending=True)])
        assert cache.get("stocks")[0].pending is False

    def test_unreadable_snapshot_is_discarded(self, cache, storage):
        storage.set("test:cache:stocks", "{not json")
        assert cache.get_entry("stocks") is None
        assert storage.get("test:cache:stocks") is None

    def test_namespaces_are_separate(self, storage):
        LocalCache(storage, namespace="a").put("stocks", [Record(fields={}, id="1")])
        assert LocalCache(storage, namespace="b").get("stocks") == []
        assert LocalCache(storage, namespace="a").cached_resources() == ["stocks"]
