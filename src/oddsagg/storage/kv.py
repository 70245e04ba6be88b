"""Key-value store used by provider adapters for their private response cache."""

from __future__ import annotations

import json
import time
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Protocol

from oddsagg.storage.db import get_connection, init_schema

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection


def _now_ms() -> int:
    return int(time.time() * 1000)


class KeyValueStore(Protocol):
    """get(key) -> value | None; put(key, value, ttl_sec). Values must be JSON-serializable."""

    def get(self, key: str) -> Any | None: ...
    def put(self, key: str, value: Any, ttl_sec: float | None = None) -> None: ...


class MemoryKeyValueStore:
    """In-process dict store with per-key expiry."""

    def __init__(self, clock: Callable[[], int] = _now_ms) -> None:
        self._clock = clock
        self._data: dict[str, tuple[Any, int | None]] = {}

    def get(self, key: str) -> Any | None:
        item = self._data.get(key)
        if item is None:
            return None
        value, expires_at = item
        if expires_at is not None and self._clock() >= expires_at:
            del self._data[key]
            return None
        return value

    def put(self, key: str, value: Any, ttl_sec: float | None = None) -> None:
        expires_at = self._clock() + int(ttl_sec * 1000) if ttl_sec is not None else None
        self._data[key] = (value, expires_at)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class DuckDBKeyValueStore:
    """kv_cache table in DuckDB. Values are stored as JSON text."""

    def __init__(self, db_path: str | Path, clock: Callable[[], int] = _now_ms) -> None:
        self._clock = clock
        self._conn: DuckDBPyConnection = get_connection(db_path)
        init_schema(self._conn)

    def get(self, key: str) -> Any | None:
        row = self._conn.execute(
            "SELECT value, expires_at FROM kv_cache WHERE key = ?",
            [key],
        ).fetchone()
        if not row:
            return None
        value, expires_at = row
        if expires_at is not None and self._clock() >= expires_at:
            self._conn.execute("DELETE FROM kv_cache WHERE key = ?", [key])
            return None
        return json.loads(value) if isinstance(value, str) else value

    def put(self, key: str, value: Any, ttl_sec: float | None = None) -> None:
        now = self._clock()
        expires_at = now + int(ttl_sec * 1000) if ttl_sec is not None else None
        self._conn.execute(
            """
            INSERT INTO kv_cache (key, value, expires_at, updated_at) VALUES (?, ?, ?, ?)
            ON CONFLICT (key) DO UPDATE SET
                value = excluded.value,
                expires_at = excluded.expires_at,
                updated_at = excluded.updated_at
            """,
            [key, json.dumps(value), expires_at, now],
        )

    def purge_expired(self) -> int:
        """Delete expired rows. Returns number of rows removed."""
        now = self._clock()
        count = self._conn.execute(
            "SELECT COUNT(*) FROM kv_cache WHERE expires_at IS NOT NULL AND expires_at <= ?", [now]
        ).fetchone()[0]
        self._conn.execute("DELETE FROM kv_cache WHERE expires_at IS NOT NULL AND expires_at <= ?", [now])
        return count

    def close(self) -> None:
        self._conn.close()
