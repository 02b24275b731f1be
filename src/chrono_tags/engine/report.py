"""
Run report: aggregate outcome of one scheduler pass.

Workers never touch the report. Each per-user task returns a
:class:`UserOutcome`; the single coroutine that drives the batches folds
outcomes in with :meth:`RunReport.record`, so no lock is needed.

Tags:
    report, aggregation, run-summary, chrono-tags
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from chrono_tags.core.enums import RunState, TransitionKind
from chrono_tags.core.errors import categorize_error
from chrono_tags.engine.transitions import TransitionRecord


@dataclass(frozen=True)
class UserFailure:
    """Why one user could not be reconciled."""

    user_id: str
    error_type: str
    category: str
    message: str

    @classmethod
    def from_exception(cls, user_id: str, error: BaseException) -> UserFailure:
        return cls(
            user_id=user_id,
            error_type=type(error).__name__,
            category=categorize_error(error).value,
            message=str(error),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "error_type": self.error_type,
            "category": self.category,
            "message": self.message,
        }


@dataclass
class UserOutcome:
    """Result of reconciling one user.

    ``committed`` is populated even on failure when a persistence error
    happened after some transitions were already applied.
    """

    user_id: str
    committed: list[TransitionRecord] = field(default_factory=list)
    notifications: int = 0
    failure: UserFailure | None = None

    @property
    def succeeded(self) -> bool:
        return self.failure is None


@dataclass
class RunReport:
    """Aggregate of one reconciliation run."""

    run_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    completed_at: datetime | None = None
    state: RunState = RunState.IDLE
    users_considered: int = 0
    users_succeeded: int = 0
    failed: list[UserFailure] = field(default_factory=list)
    additions: int = 0
    removals: int = 0
    notifications: int = 0
    complete: bool = True

    def record(self, outcome: UserOutcome) -> None:
        for transition in outcome.committed:
            if transition.kind is TransitionKind.ADD:
                self.additions += 1
            else:
                self.removals += 1
        self.notifications += outcome.notifications
        if outcome.failure is None:
            self.users_succeeded += 1
        else:
            self.failed.append(outcome.failure)

    def finish(self, state: RunState) -> None:
        self.state = state
        self.completed_at = datetime.now(UTC)

    @property
    def users_failed(self) -> int:
        return len(self.failed)

    @property
    def failed_user_ids(self) -> list[str]:
        return [failure.user_id for failure in self.failed]

    @property
    def duration_seconds(self) -> float | None:
        if self.completed_at is None:
            return None
        return (self.completed_at - self.started_at).total_seconds()

    def summary(self) -> dict[str, Any]:
        """Flat counters, suitable as log fields."""
        return {
            "state": self.state.value,
            "users_considered": self.users_considered,
            "users_succeeded": self.users_succeeded,
            "users_failed": self.users_failed,
            "additions": self.additions,
            "removals": self.removals,
            "notifications": self.notifications,
            "complete": self.complete,
            "duration_seconds": self.duration_seconds,
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            **self.summary(),
            "failed": [failure.to_dict() for failure in self.failed],
        }


__all__ = ["RunReport", "UserFailure", "UserOutcome"]
