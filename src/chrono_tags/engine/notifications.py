"""
Notification dispatch for committed transitions.

Tag state and notification delivery are decoupled: the dispatcher is
handed transitions that are already committed, schedules one background
task per transition whose definition asks for a notification, and returns
immediately. A delivery failure is logged and dropped; it never touches
the assignment and is never retried here.

Architecture:
    ::

        committed ──► dispatch() ──► filter by notify_on_acquire / _remove
                                        │
                                        ▼
                           asyncio.create_task(_deliver(...)) × N
                                        │
                                        ▼
                           notifier.notify(user_id, tag_id, kind)
                              └── exception → log "notify.failed", drop

        drain(timeout) awaits outstanding tasks before the event loop ends.

Tags:
    notifications, fire-and-forget, asyncio, chrono-tags
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

from chrono_tags.catalog.catalog import RuleCatalog
from chrono_tags.core.enums import TransitionKind
from chrono_tags.core.errors import UnknownTagError
from chrono_tags.core.logging import get_logger
from chrono_tags.core.protocols import Notifier
from chrono_tags.engine.transitions import TransitionRecord

logger = get_logger(__name__)


class LoggingNotifier:
    """Notifier that only logs. Used when no transport is wired."""

    async def notify(self, user_id: str, tag_id: str, kind: TransitionKind) -> None:
        logger.info("notify.sent", user_id=user_id, tag_id=tag_id, kind=kind.value)


class NotificationDispatcher:
    """Fan committed transitions out to a :class:`Notifier`."""

    def __init__(self, catalog: RuleCatalog, notifier: Notifier):
        self.catalog = catalog
        self.notifier = notifier
        self._pending: set[asyncio.Task[None]] = set()
        self.delivered = 0
        self.dropped = 0

    def wants_notification(self, transition: TransitionRecord, catalog: RuleCatalog | None = None) -> bool:
        catalog = self.catalog if catalog is None else catalog
        try:
            definition = catalog.get(transition.tag_id)
        except UnknownTagError:
            return False
        if transition.kind is TransitionKind.ADD:
            return definition.notify_on_acquire
        return definition.notify_on_remove

    def dispatch(self, committed: Sequence[TransitionRecord], catalog: RuleCatalog | None = None) -> int:
        """Schedule delivery for every flagged transition.

        Flags are read from ``catalog`` when given (a run passes the copy it
        evaluated with), else from the live catalog. Must be called from a
        running event loop. Returns the number of notifications scheduled.
        """
        scheduled = 0
        for transition in committed:
            if not self.wants_notification(transition, catalog):
                continue
            task = asyncio.create_task(self._deliver(transition))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)
            scheduled += 1
        return scheduled

    async def _deliver(self, transition: TransitionRecord) -> None:
        try:
            await self.notifier.notify(transition.user_id, transition.tag_id, transition.kind)
        except Exception as exc:
            self.dropped += 1
            logger.warning(
                "notify.failed",
                user_id=transition.user_id,
                tag_id=transition.tag_id,
                kind=transition.kind.value,
                error_type=type(exc).__name__,
                error=str(exc),
            )
        else:
            self.delivered += 1

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def drain(self, timeout: float | None = None) -> None:
        """Wait for outstanding deliveries, up to ``timeout`` seconds.

        Deliveries still running after the timeout are cancelled and logged.
        """
        if not self._pending:
            return
        tasks = list(self._pending)
        _, not_done = await asyncio.wait(tasks, timeout=timeout)
        if not_done:
            logger.warning("notify.drain_timeout", abandoned=len(not_done), timeout=timeout)
            for task in not_done:
                task.cancel()
            await asyncio.gather(*not_done, return_exceptions=True)
            self.dropped += len(not_done)


__all__ = ["LoggingNotifier", "NotificationDispatcher"]
