"""
In-memory collaborators for engine tests.

Each fake satisfies the corresponding protocol in
``chrono_tags.core.protocols`` and records enough to assert on.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

from chrono_tags.core.enums import TransitionKind
from chrono_tags.core.errors import MetricsUnavailable, SourceUnavailable
from chrono_tags.metrics.snapshot import UserMetricsSnapshot


class FakeMetricsProvider:
    """Snapshots by user id; unknown users raise MetricsUnavailable."""

    def __init__(self, snapshots: dict[str, UserMetricsSnapshot] | None = None, delay: float = 0.0):
        self.snapshots = dict(snapshots or {})
        self.delay = delay
        self.calls: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    def put(self, snapshot: UserMetricsSnapshot) -> None:
        self.snapshots[snapshot.user_id] = snapshot

    async def get_snapshot(self, user_id: str) -> UserMetricsSnapshot:
        self.calls.append(user_id)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            else:
                await asyncio.sleep(0)
            try:
                return self.snapshots[user_id]
            except KeyError:
                raise MetricsUnavailable("user not found").with_context(user_id=user_id) from None
        finally:
            self.in_flight -= 1


class InMemoryTagStore:
    """Dict-of-sets tag store with insert-or-ignore / delete-if-exists semantics."""

    def __init__(self, assignments: dict[str, set[str]] | None = None):
        self.assignments: dict[str, set[str]] = {
            user_id: set(tags) for user_id, tags in (assignments or {}).items()
        }
        self.writes: list[tuple[str, str, str]] = []

    async def list_assignments(self, user_id: str) -> set[str]:
        await asyncio.sleep(0)
        return set(self.assignments.get(user_id, set()))

    async def insert_assignment(self, user_id: str, tag_id: str) -> bool:
        await asyncio.sleep(0)
        held = self.assignments.setdefault(user_id, set())
        if tag_id in held:
            return False
        held.add(tag_id)
        self.writes.append(("insert", user_id, tag_id))
        return True

    async def delete_assignment(self, user_id: str, tag_id: str) -> bool:
        await asyncio.sleep(0)
        held = self.assignments.get(user_id, set())
        if tag_id not in held:
            return False
        held.discard(tag_id)
        self.writes.append(("delete", user_id, tag_id))
        return True

    def tags_of(self, user_id: str) -> set[str]:
        return set(self.assignments.get(user_id, set()))


class FakeUserSource:
    """Fixed population; ``fail=True`` makes the query unavailable."""

    def __init__(self, user_ids: Sequence[str] = (), fail: bool = False):
        self.user_ids = list(user_ids)
        self.fail = fail
        self.calls: list[int] = []

    async def list_active_user_ids(self, since_days: int) -> list[str]:
        self.calls.append(since_days)
        if self.fail:
            raise SourceUnavailable("users query timed out")
        return list(self.user_ids)


@dataclass
class RecordingNotifier:
    """Records every notification; optionally fails for selected tags."""

    fail_for: set[str] = field(default_factory=set)
    sent: list[tuple[str, str, TransitionKind]] = field(default_factory=list)
    attempts: int = 0

    async def notify(self, user_id: str, tag_id: str, kind: TransitionKind) -> None:
        self.attempts += 1
        await asyncio.sleep(0)
        if tag_id in self.fail_for:
            raise ConnectionError("socket gateway down")
        self.sent.append((user_id, tag_id, kind))


NOW = datetime(2026, 10, 17, 3, 0, tzinfo=UTC)


def build_snapshot(user_id: str = "u1", *, age_days: int = 100, **overrides: Any) -> UserMetricsSnapshot:
    """Snapshot at NOW for an account created ``age_days`` ago."""
    values: dict[str, Any] = {
        "user_id": user_id,
        "as_of": NOW,
        "created_at": NOW - timedelta(days=age_days),
        "reactions_received": 0,
        "official_warnings": 0,
        "is_verified": False,
        "total_posts": 0,
        "spam_posts": 0,
        "likes_given": 0,
        "followers": 0,
    }
    values.update(overrides)
    return UserMetricsSnapshot(**values)
