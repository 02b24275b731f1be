"""Shared sqlite connection for the storage collaborators.

All stores hold the same :class:`SqliteConnection` and run their queries
on worker threads through ``asyncio.to_thread``. Statements go through a
single cursor guarded by a re-entrant lock; hold ``lock`` (or use
:meth:`SqliteConnection.transaction`) across execute, fetch and commit so
another worker cannot interleave.

Usage::

    conn = SqliteConnection("data/chrono.db")
    with conn.transaction():
        conn.execute("DELETE FROM user_tags WHERE user_id = ?", ("u1",))
"""

from __future__ import annotations

import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

MEMORY = ":memory:"


class SqliteConnection:
    """``sqlite3`` behind the :class:`~chrono_tags.core.protocols.Connection` protocol."""

    def __init__(self, path: str | Path = MEMORY, *, row_factory: Any = sqlite3.Row) -> None:
        self.path = str(path)
        if self.path != MEMORY:
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        self.lock = threading.RLock()
        self._db = sqlite3.connect(self.path, check_same_thread=False)
        self._db.row_factory = row_factory
        self._db.execute("PRAGMA foreign_keys = ON")
        self._cur = self._db.cursor()

    def execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        with self.lock:
            return self._cur.execute(sql, params)

    def executemany(self, sql: str, params: list[tuple]) -> sqlite3.Cursor:
        with self.lock:
            return self._cur.executemany(sql, params)

    def fetchone(self) -> Any:
        with self.lock:
            return self._cur.fetchone()

    def fetchall(self) -> list[Any]:
        with self.lock:
            return self._cur.fetchall()

    def commit(self) -> None:
        with self.lock:
            self._db.commit()

    def rollback(self) -> None:
        with self.lock:
            self._db.rollback()

    @contextmanager
    def transaction(self) -> Iterator[SqliteConnection]:
        """Hold the lock, commit on success, roll back on ``sqlite3.Error``."""
        with self.lock:
            try:
                yield self
            except sqlite3.Error:
                self._db.rollback()
                raise
            self._db.commit()

    def close(self) -> None:
        with self.lock:
            self._db.close()

    def __repr__(self) -> str:
        return f"<SqliteConnection {self.path}>"


__all__ = ["SqliteConnection"]
