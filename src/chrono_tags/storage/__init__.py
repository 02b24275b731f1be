"""Reference sqlite collaborators: tag store, user source, metrics, outbox."""

from chrono_tags.storage.connection import SqliteConnection
from chrono_tags.storage.metrics import SqliteMetricsProvider
from chrono_tags.storage.outbox import OutboxEntry, OutboxNotifier
from chrono_tags.storage.schema import apply_schema
from chrono_tags.storage.tags import AssignmentRow, SqliteTagStore
from chrono_tags.storage.users import SqliteActiveUserSource

__all__ = [
    "AssignmentRow",
    "OutboxEntry",
    "OutboxNotifier",
    "SqliteActiveUserSource",
    "SqliteConnection",
    "SqliteMetricsProvider",
    "SqliteTagStore",
    "apply_schema",
]
