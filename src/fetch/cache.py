"""Response header cache for conditional requests (ETag/Last-Modified).

A cache entry maps lower-cased header names to values and is keyed by an
opaque cache key, one per feed. Entries are replaced whole on every write;
a reader sees either the previous entry or the new one, never a mix.
"""

import json
import sqlite3
import threading
from collections.abc import Mapping
from datetime import UTC, datetime
from pathlib import Path
from typing import Protocol

import structlog

from src.config.constants import COMPONENT_CACHE
from src.fetch.constants import CONDITIONAL_HEADER_SOURCES


logger = structlog.get_logger()


class HeaderCacheStore(Protocol):
    """Storage for cached response headers.

    Abstracts the storage layer to enable testing and alternative implementations.
    """

    def get(self, key: str) -> dict[str, str] | None:
        """Return the cached headers for ``key``, or None."""
        ...

    def set(self, key: str, headers: Mapping[str, str]) -> None:
        """Replace the cached headers for ``key``."""
        ...

    def delete(self, key: str) -> None:
        """Drop the cached headers for ``key`` if present."""
        ...


class InMemoryHeaderCache:
    """Process-local header cache.

    Values are copied on the way in and out so callers never share a dict.
    """

    def __init__(self) -> None:
        self._entries: dict[str, dict[str, str]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> dict[str, str] | None:
        with self._lock:
            entry = self._entries.get(key)
            return dict(entry) if entry is not None else None

    def set(self, key: str, headers: Mapping[str, str]) -> None:
        entry = {name.lower(): value for name, value in headers.items()}
        with self._lock:
            self._entries[key] = entry

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class SqliteHeaderCache:
    """SQLite-backed header cache that survives between runs.

    One connection is shared by all threads; statements are serialized with
    a lock and each write is its own transaction.
    """

    def __init__(self, db_path: Path | str) -> None:
        """Initialize the cache.

        Args:
            db_path: Path to the SQLite database file.
        """
        self._db_path = Path(db_path)
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.Lock()
        self._log = logger.bind(component=COMPONENT_CACHE, db_path=str(self._db_path))

    @property
    def is_connected(self) -> bool:
        """Check if connected to database."""
        return self._conn is not None

    def connect(self) -> None:
        """Open the database and create the table if needed."""
        if self._conn is not None:
            return

        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA synchronous=NORMAL")
        self._conn.execute(
            """
            CREATE TABLE IF NOT EXISTS header_cache (
                cache_key TEXT PRIMARY KEY,
                headers_json TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
            """
        )
        self._conn.commit()
        self._log.info("header_cache_connected")

    def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            self._log.info("header_cache_closed")

    def __enter__(self) -> "SqliteHeaderCache":
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(
        self,
        exc_type: type | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Context manager exit."""
        self.close()

    def _ensure_connected(self) -> sqlite3.Connection:
        if self._conn is None:
            msg = "Header cache not connected. Call connect() first."
            raise RuntimeError(msg)
        return self._conn

    def get(self, key: str) -> dict[str, str] | None:
        conn = self._ensure_connected()
        with self._lock:
            row = conn.execute(
                "SELECT headers_json FROM header_cache WHERE cache_key = ?",
                (key,),
            ).fetchone()
        if row is None:
            return None
        headers: dict[str, str] = json.loads(row[0])
        return headers

    def set(self, key: str, headers: Mapping[str, str]) -> None:
        entry = {name.lower(): value for name, value in headers.items()}
        conn = self._ensure_connected()
        with self._lock, conn:
            conn.execute(
                """
                INSERT INTO header_cache (cache_key, headers_json, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(cache_key) DO UPDATE SET
                    headers_json = excluded.headers_json,
                    updated_at = excluded.updated_at
                """,
                (key, json.dumps(entry, sort_keys=True), datetime.now(UTC).isoformat()),
            )

    def delete(self, key: str) -> None:
        conn = self._ensure_connected()
        with self._lock, conn:
            conn.execute("DELETE FROM header_cache WHERE cache_key = ?", (key,))

    def keys(self) -> list[str]:
        """List all cache keys."""
        conn = self._ensure_connected()
        with self._lock:
            rows = conn.execute(
                "SELECT cache_key FROM header_cache ORDER BY cache_key"
            ).fetchall()
        return [row[0] for row in rows]


class CacheManager:
    """Builds conditional request headers and records response headers."""

    def __init__(self, store: HeaderCacheStore) -> None:
        """Initialize the cache manager.

        Args:
            store: Storage backend for cache entries.
        """
        self._store = store
        self._log = logger.bind(component=COMPONENT_CACHE)

    @property
    def store(self) -> HeaderCacheStore:
        """Underlying cache store."""
        return self._store

    def get_conditional_headers(self, cache_key: str) -> dict[str, str]:
        """Get If-None-Match / If-Modified-Since headers from the cache.

        Args:
            cache_key: Cache key of the feed.

        Returns:
            Conditional headers for the values present in the cached entry.
        """
        cached = self._store.get(cache_key)
        headers: dict[str, str] = {}
        if not cached:
            return headers

        for request_header, cached_name in CONDITIONAL_HEADER_SOURCES.items():
            value = cached.get(cached_name)
            if value:
                headers[request_header] = value

        self._log.debug(
            "cache_lookup",
            cache_key=cache_key,
            has_etag="etag" in cached,
            has_last_modified="last-modified" in cached,
        )
        return headers

    def update_from_headers(self, cache_key: str, headers: Mapping[str, str]) -> None:
        """Overwrite the cache entry with a response's full header set.

        Args:
            cache_key: Cache key of the feed.
            headers: Response headers; names are lower-cased.
        """
        entry = {name.lower(): value for name, value in headers.items()}
        self._store.set(cache_key, entry)
        self._log.debug(
            "cache_update",
            cache_key=cache_key,
            etag="etag" in entry,
            last_modified="last-modified" in entry,
        )

    def clear(self, cache_key: str) -> None:
        """Drop the cache entry of a feed."""
        self._store.delete(cache_key)
        self._log.info("cache_cleared", cache_key=cache_key)
