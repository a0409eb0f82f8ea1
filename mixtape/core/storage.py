"""
Durable key-value storage for Mixtape.

A *slot* is a single named entry holding a text value. The playlist store
keeps its whole collection in one slot (`savedPlaylists`) as JSON.

Two implementations share the `KeyValueStorage` protocol:
- `SqliteKeyValueStorage`: aiosqlite-backed, used by the server
- `MemoryKeyValueStorage`: dict-backed, handy for tests and ephemeral runs
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

import aiosqlite

from mixtape.core.db import queries_slots
from mixtape.core.db.schema import ensure_schema as ensure_schema_sql

logger = logging.getLogger(__name__)


class KeyValueStorage(Protocol):
    """Minimal async interface for named text slots."""

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> None: ...

    async def delete(self, key: str) -> bool: ...


class SqliteKeyValueStorage:
    """
    Async SQLite access layer for storage slots.

    Usage:
        storage = SqliteKeyValueStorage("mixtape.sqlite3")
        await storage.open()
        await storage.ensure_schema()
        ... get/set ...
        await storage.close()

    Notes:
    - This class is designed to be injected into other components.
    - Connections are not pooled; we keep a single connection.
    - Each `set` is a single UPSERT + commit, so a slot is never half-written.
    """

    def __init__(self, db_path: str | Path) -> None:
        self._db_path = str(db_path)
        self._conn: aiosqlite.Connection | None = None

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    @property
    def db_path(self) -> str:
        return self._db_path

    async def open(self) -> None:
        if self._conn is not None:
            return
        self._conn = await aiosqlite.connect(self._db_path)
        self._conn.row_factory = aiosqlite.Row

        await self._conn.execute("PRAGMA journal_mode = WAL;")
        await self._conn.execute("PRAGMA synchronous = NORMAL;")
        logger.debug("Opened storage at %s", self._db_path)

    async def close(self) -> None:
        if self._conn is None:
            return
        await self._conn.close()
        self._conn = None

    def _require_conn(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise RuntimeError("SqliteKeyValueStorage is not open. Call await storage.open() first.")
        return self._conn

    async def ensure_schema(self) -> None:
        """Create or migrate schema to current version."""
        conn = self._require_conn()
        await ensure_schema_sql(conn)

    async def get(self, key: str) -> str | None:
        conn = self._require_conn()
        return await queries_slots.get_slot(conn, key)

    async def set(self, key: str, value: str) -> None:
        conn = self._require_conn()
        await queries_slots.set_slot(conn, key, value)

    async def delete(self, key: str) -> bool:
        conn = self._require_conn()
        return await queries_slots.delete_slot(conn, key)

    async def keys(self) -> list[str]:
        conn = self._require_conn()
        return await queries_slots.list_slot_keys(conn)


class MemoryKeyValueStorage:
    """In-memory slot storage. Contents are lost when the object goes away."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._slots: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self._slots.get(key)

    async def set(self, key: str, value: str) -> None:
        self._slots[key] = value

    async def delete(self, key: str) -> bool:
        return self._slots.pop(key, None) is not None

    async def keys(self) -> list[str]:
        return sorted(self._slots)
