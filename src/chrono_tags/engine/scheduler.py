"""
Batch scheduler: one reconciliation pass over the active-user population.

┌──────────────────────────────────────────────────────────────────────────────┐
│  RUN LIFECYCLE                                                                │
│                                                                               │
│   IDLE ──► FETCHING ──► PROCESSING ──► COMPLETED                              │
│               │                                                               │
│               └── SourceUnavailable ──► FAILED (error re-raised)              │
│                                                                               │
│  PROCESSING:                                                                  │
│                                                                               │
│   user ids ──► [batch 1] ──► [batch 2] ──► ... ──► drain notifications        │
│                   │                                                           │
│                   ▼  asyncio.gather (≤ batch_size in flight)                  │
│          reconcile_user(u) = get_snapshot → list_assignments → evaluate       │
│                              → apply → dispatch                               │
│                   │                                                           │
│                   ▼                                                           │
│          UserOutcome ──► RunReport.record()  (single aggregator)              │
│                                                                               │
│  Per-user failures are caught inside reconcile_user and recorded; they never │
│  stop the batch. cancel() is honoured between batches: the in-flight batch   │
│  finishes and the report is marked complete=False.                           │
│                                                                               │
│  Overlap: a non-blocking threading.Lock guards run_once. A second call while │
│  a run is active raises RunInProgressError. The lock is a threading lock     │
│  because each timer tick runs in its own event loop.                         │
└──────────────────────────────────────────────────────────────────────────────┘

Tags:
    scheduler, batch, bounded-concurrency, asyncio, chrono-tags
"""

from __future__ import annotations

import asyncio
import threading
from typing import TYPE_CHECKING

from chrono_tags.catalog.catalog import RuleCatalog
from chrono_tags.core.enums import RunState
from chrono_tags.core.errors import (
    ConfigError,
    PersistenceFailure,
    RunInProgressError,
    SourceUnavailable,
)
from chrono_tags.core.logging import LogContext, get_logger
from chrono_tags.core.protocols import ActiveUserSource, MetricsProvider, TagStore
from chrono_tags.engine.evaluator import evaluate
from chrono_tags.engine.notifications import NotificationDispatcher
from chrono_tags.engine.reconciler import Reconciler
from chrono_tags.engine.report import RunReport, UserFailure, UserOutcome

if TYPE_CHECKING:
    from chrono_tags.scheduling.protocol import TriggerBackend
    from chrono_tags.scheduling.trigger import DailyTrigger

logger = get_logger(__name__)

DEFAULT_BATCH_SIZE = 10
DEFAULT_ACTIVE_WINDOW_DAYS = 30


class BatchScheduler:
    """Drive the evaluator and reconciler over every active user."""

    def __init__(
        self,
        catalog: RuleCatalog,
        metrics: MetricsProvider,
        store: TagStore,
        users: ActiveUserSource,
        dispatcher: NotificationDispatcher,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
        active_window_days: int = DEFAULT_ACTIVE_WINDOW_DAYS,
        drain_timeout: float = 30.0,
    ):
        if batch_size < 1:
            raise ConfigError("batch_size", batch_size, "batch_size must be >= 1")
        if active_window_days < 1:
            raise ConfigError("active_window_days", active_window_days, "active_window_days must be >= 1")

        self.catalog = catalog
        self.metrics = metrics
        self.store = store
        self.users = users
        self.dispatcher = dispatcher
        self.reconciler = Reconciler(store)
        self.batch_size = batch_size
        self.active_window_days = active_window_days
        self.drain_timeout = drain_timeout

        self._run_lock = threading.Lock()
        self._cancel_requested = threading.Event()
        self._state = RunState.IDLE
        self.last_report: RunReport | None = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._run_lock.locked()

    def cancel(self) -> None:
        """Ask the active run to stop after its in-flight batch."""
        if not self.is_running:
            return
        self._cancel_requested.set()
        logger.info("run.cancel_requested")

    # ------------------------------------------------------------------
    # Per-user work
    # ------------------------------------------------------------------

    async def reconcile_user(self, user_id: str, catalog: RuleCatalog | None = None) -> UserOutcome:
        """Fetch, evaluate, apply and dispatch for one user.

        Never raises for a per-user failure; the failure is returned on the
        outcome instead.
        """
        if catalog is None:
            catalog = self.catalog
        with LogContext(user_id=user_id):
            try:
                snapshot = await self.metrics.get_snapshot(user_id)
                current = await self.store.list_assignments(user_id)
                transitions = evaluate(current, snapshot, catalog)
                committed = await self.reconciler.apply(user_id, transitions)
            except PersistenceFailure as exc:
                notifications = self.dispatcher.dispatch(exc.committed, catalog)
                logger.warning(
                    "reconcile.user_failed",
                    error_type=type(exc).__name__,
                    error=str(exc),
                    partially_committed=len(exc.committed),
                )
                return UserOutcome(
                    user_id,
                    committed=list(exc.committed),
                    notifications=notifications,
                    failure=UserFailure.from_exception(user_id, exc),
                )
            except Exception as exc:
                logger.warning(
                    "reconcile.user_failed",
                    error_type=type(exc).__name__,
                    error=str(exc),
                )
                return UserOutcome(user_id, failure=UserFailure.from_exception(user_id, exc))

            notifications = self.dispatcher.dispatch(committed, catalog)
            if committed:
                logger.debug(
                    "reconcile.user_committed",
                    transitions=[t.to_dict() for t in committed],
                )
            return UserOutcome(user_id, committed=committed, notifications=notifications)

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    async def run_once(self) -> RunReport:
        """Execute one full reconciliation pass.

        Raises:
            RunInProgressError: If another run is active.
            SourceUnavailable: If the active-user list cannot be fetched.
        """
        if not self._run_lock.acquire(blocking=False):
            logger.warning("run.skipped", reason="run already in progress")
            raise RunInProgressError("A reconciliation run is already in progress")

        self._cancel_requested.clear()
        report = RunReport()
        try:
            with LogContext(run_id=report.run_id):
                await self._run(report)
            return report
        finally:
            self.last_report = report
            self._run_lock.release()

    async def _run(self, report: RunReport) -> None:
        self._set_state(report, RunState.FETCHING)
        logger.info(
            "run.started",
            batch_size=self.batch_size,
            active_window_days=self.active_window_days,
            tags=len(self.catalog),
        )

        try:
            user_ids = await self._fetch_user_ids()
        except SourceUnavailable as exc:
            self._set_state(report, RunState.FAILED)
            report.finish(RunState.FAILED)
            logger.error("run.failed", error_type=type(exc).__name__, error=str(exc))
            raise

        report.users_considered = len(user_ids)
        self._set_state(report, RunState.PROCESSING)
        catalog = RuleCatalog(self.catalog.list_definitions())

        for start in range(0, len(user_ids), self.batch_size):
            if self._cancel_requested.is_set():
                report.complete = False
                logger.warning(
                    "run.cancelled",
                    processed=start,
                    remaining=len(user_ids) - start,
                )
                break

            batch = user_ids[start:start + self.batch_size]
            outcomes = await asyncio.gather(
                *(self.reconcile_user(user_id, catalog) for user_id in batch)
            )
            for outcome in outcomes:
                report.record(outcome)
            logger.debug(
                "batch.completed",
                batch=start // self.batch_size + 1,
                size=len(batch),
                failed=sum(1 for outcome in outcomes if not outcome.succeeded),
            )

        await self.dispatcher.drain(self.drain_timeout)
        self._set_state(report, RunState.COMPLETED)
        report.finish(RunState.COMPLETED)
        logger.info("run.finished", **report.summary())

    async def _fetch_user_ids(self) -> list[str]:
        try:
            user_ids = await self.users.list_active_user_ids(self.active_window_days)
        except SourceUnavailable:
            raise
        except Exception as exc:
            raise SourceUnavailable(
                f"Active-user query failed: {exc}", cause=exc
            ) from exc
        # Duplicates would put two workers on the same user's rows
        return list(dict.fromkeys(user_ids))

    def _set_state(self, report: RunReport, state: RunState) -> None:
        self._state = state
        report.state = state

    # ------------------------------------------------------------------
    # Recurring trigger
    # ------------------------------------------------------------------

    def schedule_daily(
        self,
        at_hour: int,
        backend: TriggerBackend | None = None,
        timezone: str = "UTC",
    ) -> DailyTrigger:
        """Start a trigger that calls :meth:`run_once` every day at ``at_hour``."""
        from chrono_tags.scheduling.trigger import DailyTrigger

        trigger = DailyTrigger(self, at_hour, backend=backend, timezone=timezone)
        trigger.start()
        return trigger


__all__ = ["DEFAULT_ACTIVE_WINDOW_DAYS", "DEFAULT_BATCH_SIZE", "BatchScheduler"]
