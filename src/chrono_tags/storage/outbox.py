"""Notification outbox: the hand-off point to the live-delivery transport.

The engine writes one ``tag_notifications`` row per notification and
returns. Whatever pushes events to clients (web socket gateway, push
service) polls :meth:`OutboxNotifier.pending` and acknowledges with
:meth:`OutboxNotifier.mark_delivered`.
"""

from __future__ import annotations

import asyncio
import sqlite3
from dataclasses import dataclass
from datetime import datetime

from chrono_tags.core.enums import TransitionKind
from chrono_tags.core.errors import NotificationError
from chrono_tags.core.timestamps import from_iso8601, to_iso8601, utc_now
from chrono_tags.storage.connection import SqliteConnection


@dataclass(frozen=True)
class OutboxEntry:
    id: int
    user_id: str
    tag_id: str
    kind: TransitionKind
    created_at: datetime


class OutboxNotifier:
    """:class:`~chrono_tags.core.protocols.Notifier` writing to ``tag_notifications``."""

    def __init__(self, conn: SqliteConnection):
        self.conn = conn

    def _insert(self, user_id: str, tag_id: str, kind: TransitionKind) -> None:
        with self.conn.transaction():
            self.conn.execute(
                "INSERT INTO tag_notifications (user_id, tag_id, kind, created_at) VALUES (?, ?, ?, ?)",
                (user_id, tag_id, kind.value, to_iso8601(utc_now())),
            )

    async def notify(self, user_id: str, tag_id: str, kind: TransitionKind) -> None:
        try:
            await asyncio.to_thread(self._insert, user_id, tag_id, kind)
        except sqlite3.Error as exc:
            raise NotificationError(
                f"Could not enqueue notification: {exc}", cause=exc
            ).with_context(user_id=user_id, tag_id=tag_id) from exc

    def pending(self, limit: int = 100) -> list[OutboxEntry]:
        """Undelivered notifications, oldest first."""
        with self.conn.lock:
            self.conn.execute(
                "SELECT id, user_id, tag_id, kind, created_at FROM tag_notifications "
                "WHERE delivered_at IS NULL ORDER BY id LIMIT ?",
                (limit,),
            )
            rows = self.conn.fetchall()
        return [
            OutboxEntry(
                id=row["id"],
                user_id=row["user_id"],
                tag_id=row["tag_id"],
                kind=TransitionKind(row["kind"]),
                created_at=from_iso8601(row["created_at"]),
            )
            for row in rows
        ]

    def mark_delivered(self, entry_ids: list[int]) -> None:
        if not entry_ids:
            return
        delivered_at = to_iso8601(utc_now())
        with self.conn.transaction():
            self.conn.executemany(
                "UPDATE tag_notifications SET delivered_at = ? WHERE id = ?",
                [(delivered_at, entry_id) for entry_id in entry_ids],
            )


__all__ = ["OutboxEntry", "OutboxNotifier"]
