"""
Metrics provider over the materialized ``user_metrics`` table.

Guardrails:
    ❌ DON'T: ``COALESCE(reactions_received, 0)``
    ✅ DO: Raise MetricsUnavailable; a zero would remove earned tags

Only ``last_warning_at`` and ``silenced_until`` are nullable by meaning
(no warning yet, not silenced). Every other column must be present.
"""

from __future__ import annotations

import asyncio
import json
import sqlite3
from collections.abc import Callable
from datetime import datetime

from chrono_tags.core.errors import MetricsUnavailable
from chrono_tags.core.timestamps import from_iso8601, utc_now
from chrono_tags.metrics.snapshot import UserMetricsSnapshot
from chrono_tags.storage.connection import SqliteConnection

SNAPSHOT_SQL = """
SELECT u.id, u.created_at,
       m.reactions_received, m.official_warnings, m.last_warning_at,
       m.silenced_until, m.is_verified, m.total_posts, m.spam_posts,
       m.likes_given, m.followers, m.overrides
FROM users u
JOIN user_metrics m ON m.user_id = u.id
WHERE u.id = ?
"""

REQUIRED_COLUMNS = (
    "created_at",
    "reactions_received",
    "official_warnings",
    "is_verified",
    "total_posts",
    "spam_posts",
    "likes_given",
    "followers",
    "overrides",
)


class SqliteMetricsProvider:
    """:class:`~chrono_tags.core.protocols.MetricsProvider` for sqlite."""

    def __init__(self, conn: SqliteConnection, clock: Callable[[], datetime] = utc_now):
        self.conn = conn
        self.clock = clock

    def _fetch(self, user_id: str) -> sqlite3.Row | None:
        with self.conn.lock:
            self.conn.execute(SNAPSHOT_SQL, (user_id,))
            return self.conn.fetchone()

    async def get_snapshot(self, user_id: str) -> UserMetricsSnapshot:
        try:
            row = await asyncio.to_thread(self._fetch, user_id)
        except sqlite3.Error as exc:
            raise MetricsUnavailable(
                f"Metrics storage unreachable: {exc}", cause=exc
            ).with_context(user_id=user_id) from exc

        if row is None:
            raise MetricsUnavailable("No user or metrics row").with_context(user_id=user_id)

        missing = [column for column in REQUIRED_COLUMNS if row[column] is None]
        if missing:
            raise MetricsUnavailable(
                f"Missing metric fields: {', '.join(missing)}"
            ).with_context(user_id=user_id, missing=missing)

        try:
            overrides = json.loads(row["overrides"])
            return UserMetricsSnapshot(
                user_id=row["id"],
                as_of=self.clock(),
                created_at=from_iso8601(row["created_at"]),
                reactions_received=int(row["reactions_received"]),
                official_warnings=int(row["official_warnings"]),
                is_verified=bool(row["is_verified"]),
                total_posts=int(row["total_posts"]),
                spam_posts=int(row["spam_posts"]),
                likes_given=int(row["likes_given"]),
                followers=int(row["followers"]),
                last_warning_at=from_iso8601(row["last_warning_at"]),
                silenced_until=from_iso8601(row["silenced_until"]),
                overrides=frozenset(str(flag) for flag in overrides),
            )
        except (ValueError, TypeError) as exc:
            raise MetricsUnavailable(
                f"Malformed metrics row: {exc}", cause=exc
            ).with_context(user_id=user_id) from exc


__all__ = ["REQUIRED_COLUMNS", "SNAPSHOT_SQL", "SqliteMetricsProvider"]
