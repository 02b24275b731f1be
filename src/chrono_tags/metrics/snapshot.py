"""
Per-user metrics snapshot consumed by the evaluator.

A snapshot is built fresh for every evaluation and never persisted by the
engine. It carries its own ``as_of`` instant so that every time-relative
condition ("account younger than 7 days", "silence still active") is
evaluated against one fixed clock, keeping evaluation pure.

Metric registry:
    ::

        NUMERIC_METRICS    account_age_days, reactions_received,
                           official_warnings, total_posts, spam_posts,
                           likes_given, followers
        TIMESTAMP_METRICS  created_at, last_warning_at, silenced_until
        FLAG_METRICS       is_verified, overrides.<name>

Tags:
    metrics, snapshot, value-object, chrono-tags
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

NUMERIC_METRICS = frozenset(
    {
        "account_age_days",
        "reactions_received",
        "official_warnings",
        "total_posts",
        "spam_posts",
        "likes_given",
        "followers",
    }
)
TIMESTAMP_METRICS = frozenset({"created_at", "last_warning_at", "silenced_until"})
FLAG_METRICS = frozenset({"is_verified"})
OVERRIDE_PREFIX = "overrides."


def metric_kind(metric: str) -> str | None:
    """Return ``numeric``, ``timestamp`` or ``flag`` for a metric name, or ``None`` if unknown."""
    if metric in NUMERIC_METRICS:
        return "numeric"
    if metric in TIMESTAMP_METRICS:
        return "timestamp"
    if metric in FLAG_METRICS:
        return "flag"
    if metric.startswith(OVERRIDE_PREFIX) and len(metric) > len(OVERRIDE_PREFIX):
        return "flag"
    return None


@dataclass(frozen=True)
class UserMetricsSnapshot:
    """Read-only measurable facts about one user at ``as_of``.

    ``overrides`` holds manual-override flags set by moderators
    (e.g. ``banned``, ``founder``); a flag absent from the set is off.
    """

    user_id: str
    as_of: datetime
    created_at: datetime
    reactions_received: int
    official_warnings: int
    is_verified: bool
    total_posts: int
    spam_posts: int
    likes_given: int
    followers: int
    last_warning_at: datetime | None = None
    silenced_until: datetime | None = None
    overrides: frozenset[str] = field(default_factory=frozenset)

    @property
    def account_age_days(self) -> int:
        """Whole days between account creation and ``as_of``."""
        return (self.as_of - self.created_at).days

    def value_of(self, metric: str) -> int | bool | datetime | None:
        """Resolve a metric name from the registry.

        Raises:
            KeyError: If the metric is not part of the registry.
        """
        kind = metric_kind(metric)
        if kind is None:
            raise KeyError(metric)
        if metric.startswith(OVERRIDE_PREFIX):
            return metric[len(OVERRIDE_PREFIX):] in self.overrides
        return getattr(self, metric)
