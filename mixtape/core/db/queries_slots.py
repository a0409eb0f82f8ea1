"""
Slot queries for the key-value storage.

Design:
- Functions are *pure DB helpers*: they take an open `aiosqlite.Connection`
  and return plain values.
- These functions assume `conn.row_factory = aiosqlite.Row`.

Important:
- Do NOT interpolate user input into SQL.
"""

from __future__ import annotations

import aiosqlite


async def get_slot(conn: aiosqlite.Connection, key: str) -> str | None:
    cursor = await conn.execute("SELECT value FROM slots WHERE key = ?;", (key,))
    row = await cursor.fetchone()
    if row is None:
        return None
    return str(row["value"])


async def set_slot(conn: aiosqlite.Connection, key: str, value: str) -> None:
    """Insert or fully overwrite a slot and commit in one step."""
    await conn.execute(
        """
        INSERT INTO slots(key, value, updated_at)
        VALUES (?, ?, strftime('%s', 'now'))
        ON CONFLICT(key) DO UPDATE SET
            value      = excluded.value,
            updated_at = excluded.updated_at
        """,
        (key, value),
    )
    await conn.commit()


async def delete_slot(conn: aiosqlite.Connection, key: str) -> bool:
    cursor = await conn.execute("DELETE FROM slots WHERE key = ?;", (key,))
    await conn.commit()
    return cursor.rowcount > 0


async def list_slot_keys(conn: aiosqlite.Connection) -> list[str]:
    cursor = await conn.execute("SELECT key FROM slots ORDER BY key;")
    rows = await cursor.fetchall()
    return [str(r["key"]) for r in rows]
