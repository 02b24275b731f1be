"""
Canonical protocol definitions for the tag engine's collaborators.

The engine owns evaluation and reconciliation; everything that touches the
outside world is reached through one of these structural contracts. Any
object with the right shape works, which is how the tests swap in fakes
and fault injectors.

Architecture:
    ::

        protocols.py
        ├── Connection           sync DB protocol (sqlite3 adapter)
        ├── MetricsProvider      get_snapshot(user_id)
        ├── TagStore             list / insert / delete assignments
        ├── ActiveUserSource     list_active_user_ids(since_days)
        └── Notifier             notify(user_id, tag_id, kind)

    Suspension points are exactly the async methods below: fetching a
    snapshot, listing users, and persisting a transition.

Guardrails:
    ❌ DON'T: Default a missing metric to zero inside a MetricsProvider
    ✅ DO: Raise MetricsUnavailable

    ❌ DON'T: Let a Notifier block the caller until delivery completes
    ✅ DO: Hand off and return; the dispatcher runs it as a background task

Tags:
    protocol, connection, collaborators, contracts, chrono-tags
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from chrono_tags.core.enums import TransitionKind
    from chrono_tags.metrics.snapshot import UserMetricsSnapshot


@runtime_checkable
class Connection(Protocol):
    """Minimal SYNCHRONOUS connection interface for database operations."""

    def execute(self, sql: str, params: tuple = ()) -> Any:
        """Execute SQL statement with optional parameters."""
        ...

    def executemany(self, sql: str, params: list[tuple]) -> Any:
        """Execute SQL statement for each parameter set."""
        ...

    def fetchone(self) -> Any:
        """Fetch one row from the last query."""
        ...

    def fetchall(self) -> list[Any]:
        """Fetch all rows from the last query."""
        ...

    def commit(self) -> None:
        """Commit the current transaction."""
        ...

    def rollback(self) -> None:
        """Rollback the current transaction."""
        ...


@runtime_checkable
class MetricsProvider(Protocol):
    """Source of per-user metrics snapshots.

    Must raise :class:`~chrono_tags.core.errors.MetricsUnavailable` if the
    user no longer exists, storage is unreachable, or any field is missing.
    """

    async def get_snapshot(self, user_id: str) -> UserMetricsSnapshot: ...


@runtime_checkable
class TagStore(Protocol):
    """Persisted user → tag assignments.

    ``insert_assignment`` and ``delete_assignment`` are each atomic and
    idempotent; their boolean result reports whether a row changed.
    """

    async def list_assignments(self, user_id: str) -> set[str]: ...

    async def insert_assignment(self, user_id: str, tag_id: str) -> bool: ...

    async def delete_assignment(self, user_id: str, tag_id: str) -> bool: ...


@runtime_checkable
class ActiveUserSource(Protocol):
    """Population query for a reconciliation run.

    Must raise :class:`~chrono_tags.core.errors.SourceUnavailable` if the
    underlying query cannot run.
    """

    async def list_active_user_ids(self, since_days: int) -> Sequence[str]: ...


@runtime_checkable
class Notifier(Protocol):
    """Best-effort delivery of committed transitions."""

    async def notify(self, user_id: str, tag_id: str, kind: TransitionKind) -> None: ...


__all__ = [
    "Connection",
    "MetricsProvider",
    "TagStore",
    "ActiveUserSource",
    "Notifier",
]
