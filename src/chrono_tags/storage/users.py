"""Active-user population query over ``users`` and ``posts``."""

from __future__ import annotations

import asyncio
import sqlite3
from collections.abc import Callable
from datetime import datetime, timedelta

from chrono_tags.core.errors import SourceUnavailable
from chrono_tags.core.timestamps import to_iso8601, utc_now
from chrono_tags.storage.connection import SqliteConnection

# julianday() reads naive, "T"-separated and offset timestamps alike, in UTC
ACTIVE_USERS_SQL = """
SELECT u.id
FROM users u
WHERE julianday(u.created_at) >= julianday(?)
   OR EXISTS (
       SELECT 1 FROM posts p
       WHERE p.user_id = u.id AND julianday(p.created_at) >= julianday(?)
   )
ORDER BY u.id
"""


class SqliteActiveUserSource:
    """Users who were created, or who posted, within the last ``since_days``."""

    def __init__(self, conn: SqliteConnection, clock: Callable[[], datetime] = utc_now):
        self.conn = conn
        self.clock = clock

    def _query(self, since_days: int) -> list[str]:
        cutoff = to_iso8601(self.clock() - timedelta(days=since_days))
        with self.conn.lock:
            self.conn.execute(ACTIVE_USERS_SQL, (cutoff, cutoff))
            return [row["id"] for row in self.conn.fetchall()]

    async def list_active_user_ids(self, since_days: int) -> list[str]:
        """Raises :class:`SourceUnavailable` if the query cannot run."""
        try:
            return await asyncio.to_thread(self._query, since_days)
        except sqlite3.Error as exc:
            raise SourceUnavailable(
                f"Active-user query failed: {exc}", cause=exc
            ).with_context(since_days=since_days) from exc


__all__ = ["ACTIVE_USERS_SQL", "SqliteActiveUserSource"]
