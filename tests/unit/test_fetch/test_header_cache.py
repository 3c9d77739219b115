"""Unit tests for the response header cache."""

import threading
from pathlib import Path

import pytest

from src.fetch.cache import CacheManager, InMemoryHeaderCache, SqliteHeaderCache


class TestInMemoryHeaderCache:
    """Tests for InMemoryHeaderCache."""

    def test_get_missing(self) -> None:
        """Unknown keys return None."""
        assert InMemoryHeaderCache().get("nope") is None

    def test_set_lowercases_names(self) -> None:
        """Stored header names are lower-cased."""
        cache = InMemoryHeaderCache()

        cache.set("k", {"ETag": '"v1"', "Last-Modified": "yesterday"})

        assert cache.get("k") == {"etag": '"v1"', "last-modified": "yesterday"}

    def test_returns_copies(self) -> None:
        """Mutating a returned entry does not change the cache."""
        cache = InMemoryHeaderCache()
        cache.set("k", {"etag": '"v1"'})

        entry = cache.get("k")
        assert entry is not None
        entry["etag"] = '"tampered"'

        assert cache.get("k") == {"etag": '"v1"'}

    def test_delete(self) -> None:
        """Deleted entries are gone; deleting twice is harmless."""
        cache = InMemoryHeaderCache()
        cache.set("k", {"etag": '"v1"'})

        cache.delete("k")
        cache.delete("k")

        assert cache.get("k") is None
        assert len(cache) == 0


class TestSqliteHeaderCache:
    """Tests for SqliteHeaderCache."""

    def test_requires_connection(self, tmp_path: Path) -> None:
        """Operations before connect() raise."""
        cache = SqliteHeaderCache(tmp_path / "cache.sqlite")

        with pytest.raises(RuntimeError, match="not connected"):
            cache.get("k")

    def test_set_and_get(self, tmp_path: Path) -> None:
        """Entries round-trip with lower-cased names."""
        with SqliteHeaderCache(tmp_path / "cache.sqlite") as cache:
            cache.set("k", {"ETag": '"v1"'})

            assert cache.get("k") == {"etag": '"v1"'}
            assert cache.get("other") is None

    def test_set_replaces_entry(self, tmp_path: Path) -> None:
        """A second write replaces the whole entry."""
        with SqliteHeaderCache(tmp_path / "cache.sqlite") as cache:
            cache.set("k", {"etag": '"v1"', "x-old": "1"})
            cache.set("k", {"etag": '"v2"'})

            assert cache.get("k") == {"etag": '"v2"'}
            assert cache.keys() == ["k"]

    def test_persists_across_connections(self, tmp_path: Path) -> None:
        """Entries survive reopening the database."""
        db_path = tmp_path / "state" / "cache.sqlite"
        with SqliteHeaderCache(db_path) as cache:
            cache.set("k", {"etag": '"v1"'})

        with SqliteHeaderCache(db_path) as cache:
            assert cache.get("k") == {"etag": '"v1"'}

    def test_delete(self, tmp_path: Path) -> None:
        """Deleted entries are gone."""
        with SqliteHeaderCache(tmp_path / "cache.sqlite") as cache:
            cache.set("a", {"etag": '"1"'})
            cache.set("b", {"etag": '"2"'})
            cache.delete("a")

            assert cache.keys() == ["b"]

    def test_close_disconnects(self, tmp_path: Path) -> None:
        """Leaving the context closes the connection."""
        cache = SqliteHeaderCache(tmp_path / "cache.sqlite")
        with cache:
            assert cache.is_connected
        assert not cache.is_connected

    def test_concurrent_writes_to_distinct_keys(self, tmp_path: Path) -> None:
        """Writers on separate threads do not interfere."""
        with SqliteHeaderCache(tmp_path / "cache.sqlite") as cache:

            def write(index: int) -> None:
                for round_ in range(20):
                    cache.set(f"feed-{index}", {"etag": f'"{index}-{round_}"'})

            threads = [threading.Thread(target=write, args=(i,)) for i in range(4)]
            for thread in threads:
                thread.start()
            for thread in threads:
                thread.join()

            for index in range(4):
                assert cache.get(f"feed-{index}") == {"etag": f'"{index}-19"'}


class TestCacheManager:
    """Tests for CacheManager."""

    def test_conditional_headers_from_etag_and_last_modified(self) -> None:
        """Both validators are turned into request headers."""
        store = InMemoryHeaderCache()
        store.set("k", {"etag": '"v1"', "last-modified": "Mon, 01 Jan 2024"})
        manager = CacheManager(store)

        assert manager.get_conditional_headers("k") == {
            "If-None-Match": '"v1"',
            "If-Modified-Since": "Mon, 01 Jan 2024",
        }

    def test_conditional_headers_empty_without_entry(self) -> None:
        """No entry means no conditional headers."""
        manager = CacheManager(InMemoryHeaderCache())

        assert manager.get_conditional_headers("k") == {}

    def test_conditional_headers_skip_empty_values(self) -> None:
        """Blank cached values are not sent."""
        store = InMemoryHeaderCache()
        store.set("k", {"etag": "", "content-type": "text/xml"})

        assert CacheManager(store).get_conditional_headers("k") == {}

    def test_update_replaces_entry(self) -> None:
        """Updates overwrite the entry with lower-cased names."""
        store = InMemoryHeaderCache()
        store.set("k", {"etag": '"v1"', "x-old": "1"})
        manager = CacheManager(store)

        manager.update_from_headers("k", {"ETag": '"v2"', "Content-Type": "text/xml"})

        assert store.get("k") == {"etag": '"v2"', "content-type": "text/xml"}

    def test_clear(self) -> None:
        """Clearing drops the entry."""
        store = InMemoryHeaderCache()
        store.set("k", {"etag": '"v1"'})
        manager = CacheManager(store)

        manager.clear("k")

        assert manager.store.get("k") is None
