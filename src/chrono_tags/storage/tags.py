"""
SQLite tag-assignment store.

Each write is one statement plus commit, held under the connection lock:
``INSERT OR IGNORE`` for an add and a plain ``DELETE`` for a remove. The
statement's row count tells the reconciler whether anything changed, which
is what makes re-applying a transition a no-op.

Tags:
    storage, sqlite, tag-store, idempotent, chrono-tags
"""

from __future__ import annotations

import asyncio
import sqlite3
from dataclasses import dataclass
from datetime import datetime

from chrono_tags.core.errors import PersistenceFailure
from chrono_tags.core.timestamps import from_iso8601, to_iso8601, utc_now
from chrono_tags.storage.connection import SqliteConnection


@dataclass(frozen=True)
class AssignmentRow:
    """A persisted ``user_tags`` row."""

    user_id: str
    tag_id: str
    assigned_at: datetime


class SqliteTagStore:
    """:class:`~chrono_tags.core.protocols.TagStore` over ``user_tags``."""

    def __init__(self, conn: SqliteConnection):
        self.conn = conn

    # -- sync implementations ------------------------------------------------

    def _list(self, user_id: str) -> list[AssignmentRow]:
        with self.conn.lock:
            self.conn.execute(
                "SELECT user_id, tag_id, assigned_at FROM user_tags "
                "WHERE user_id = ? ORDER BY assigned_at, tag_id",
                (user_id,),
            )
            rows = self.conn.fetchall()
        return [
            AssignmentRow(row["user_id"], row["tag_id"], from_iso8601(row["assigned_at"]))
            for row in rows
        ]

    def _write(self, sql: str, params: tuple) -> bool:
        with self.conn.transaction():
            return self.conn.execute(sql, params).rowcount > 0

    # -- TagStore protocol ---------------------------------------------------

    async def list_assignments(self, user_id: str) -> set[str]:
        rows = await self.list_assignment_rows(user_id)
        return {row.tag_id for row in rows}

    async def list_assignment_rows(self, user_id: str) -> list[AssignmentRow]:
        try:
            return await asyncio.to_thread(self._list, user_id)
        except sqlite3.Error as exc:
            raise PersistenceFailure(
                f"Could not read tags: {exc}", cause=exc
            ).with_context(user_id=user_id) from exc

    async def insert_assignment(self, user_id: str, tag_id: str) -> bool:
        try:
            return await asyncio.to_thread(
                self._write,
                "INSERT OR IGNORE INTO user_tags (user_id, tag_id, assigned_at) VALUES (?, ?, ?)",
                (user_id, tag_id, to_iso8601(utc_now())),
            )
        except sqlite3.Error as exc:
            raise PersistenceFailure(
                f"Could not insert tag: {exc}", cause=exc
            ).with_context(user_id=user_id, tag_id=tag_id) from exc

    async def delete_assignment(self, user_id: str, tag_id: str) -> bool:
        try:
            return await asyncio.to_thread(
                self._write,
                "DELETE FROM user_tags WHERE user_id = ? AND tag_id = ?",
                (user_id, tag_id),
            )
        except sqlite3.Error as exc:
            raise PersistenceFailure(
                f"Could not delete tag: {exc}", cause=exc
            ).with_context(user_id=user_id, tag_id=tag_id) from exc


__all__ = ["AssignmentRow", "SqliteTagStore"]
