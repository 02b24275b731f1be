"""
Tables read and written by the reference sqlite collaborators.

``users``, ``posts`` and ``user_metrics`` belong to the surrounding
application; the engine only reads them. ``user_tags`` holds assignments
(at most one row per user and tag) and ``tag_notifications`` is the outbox
handed to the live-delivery transport.

Timestamps are ISO-8601 strings in UTC.
"""

from __future__ import annotations

from chrono_tags.core.logging import get_logger
from chrono_tags.core.protocols import Connection

logger = get_logger(__name__)

TABLES = ("users", "posts", "user_metrics", "user_tags", "tag_notifications")

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS users (
    id          TEXT PRIMARY KEY,
    username    TEXT NOT NULL UNIQUE,
    created_at  TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS posts (
    id          TEXT PRIMARY KEY,
    user_id     TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    created_at  TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_posts_user_created ON posts (user_id, created_at);

CREATE TABLE IF NOT EXISTS user_metrics (
    user_id             TEXT PRIMARY KEY REFERENCES users(id) ON DELETE CASCADE,
    reactions_received  INTEGER,
    official_warnings   INTEGER,
    last_warning_at     TEXT,
    silenced_until      TEXT,
    is_verified         INTEGER,
    total_posts         INTEGER,
    spam_posts          INTEGER,
    likes_given         INTEGER,
    followers           INTEGER,
    overrides           TEXT NOT NULL DEFAULT '[]',
    updated_at          TEXT
);

CREATE TABLE IF NOT EXISTS user_tags (
    user_id      TEXT NOT NULL,
    tag_id       TEXT NOT NULL,
    assigned_at  TEXT NOT NULL,
    PRIMARY KEY (user_id, tag_id)
);

CREATE TABLE IF NOT EXISTS tag_notifications (
    id            INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id       TEXT NOT NULL,
    tag_id        TEXT NOT NULL,
    kind          TEXT NOT NULL CHECK (kind IN ('add', 'remove')),
    created_at    TEXT NOT NULL,
    delivered_at  TEXT
);
CREATE INDEX IF NOT EXISTS idx_tag_notifications_pending
    ON tag_notifications (delivered_at, id);
"""


def apply_schema(conn: Connection) -> None:
    """Create every table and index. Safe to run repeatedly."""
    statements = [s.strip() for s in SCHEMA_SQL.split(";") if s.strip()]
    for statement in statements:
        conn.execute(statement)
    conn.commit()
    logger.debug("schema.applied", tables=list(TABLES))


__all__ = ["SCHEMA_SQL", "TABLES", "apply_schema"]
