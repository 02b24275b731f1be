"""Default trigger backend: one daemon thread plus croniter.

Between fire times the worker sleeps on an Event, so ``stop()`` wakes it
immediately instead of waiting out a day-long sleep. Each fire runs the
tick coroutine with ``asyncio.run``, i.e. in an event loop owned by this
thread and discarded afterwards.

    start() ──► worker thread
                  ┌─► fire_at = next_fire_time(cron, now(tz))
                  │   wakeup.wait(fire_at - now) ── set by stop() ──► exit
                  │   asyncio.run(tick())          (errors logged, loop continues)
                  └───────────────┘
"""

from __future__ import annotations

import asyncio
import logging
import threading
from datetime import datetime
from typing import Any
from zoneinfo import ZoneInfo

from croniter import croniter

from .protocol import BackendHealth, TickCallback

logger = logging.getLogger(__name__)

THREAD_NAME = "chrono-tags-trigger"


def next_fire_time(cron_expression: str, after: datetime) -> datetime:
    """Next time ``cron_expression`` fires strictly after ``after``."""
    return croniter(cron_expression, after).get_next(datetime)


class ThreadTriggerBackend:
    """Cron-driven trigger on a daemon thread.

    Example:
        >>> backend = ThreadTriggerBackend()
        >>> backend.start(trigger.tick, "0 3 * * *", timezone="America/Sao_Paulo")
        >>> backend.stop()
    """

    name = "thread"

    def __init__(self, join_timeout: float = 5.0) -> None:
        self.join_timeout = join_timeout
        self._wakeup = threading.Event()
        self._worker: threading.Thread | None = None
        self._state_lock = threading.Lock()
        self._cron: str | None = None
        self._ticks = 0
        self._last_tick: datetime | None = None
        self._next_fire: datetime | None = None

    def start(self, tick_callback: TickCallback, cron_expression: str, timezone: str = "UTC") -> None:
        if self._worker is not None:
            logger.warning("thread trigger already running; start() ignored")
            return
        if not croniter.is_valid(cron_expression):
            raise ValueError(f"Invalid cron expression: {cron_expression!r}")

        self._cron = cron_expression
        self._wakeup.clear()
        self._worker = threading.Thread(
            target=self._run,
            args=(tick_callback, cron_expression, ZoneInfo(timezone)),
            name=THREAD_NAME,
            daemon=True,
        )
        self._worker.start()
        logger.info("thread trigger started cron=%r tz=%s", cron_expression, timezone)

    def _run(self, tick_callback: TickCallback, cron_expression: str, tz: ZoneInfo) -> None:
        while True:
            now = datetime.now(tz)
            fire_at = next_fire_time(cron_expression, now)
            with self._state_lock:
                self._next_fire = fire_at
            if self._wakeup.wait(max((fire_at - now).total_seconds(), 0.0)):
                return

            with self._state_lock:
                self._ticks += 1
                self._last_tick = datetime.now(tz)
            try:
                asyncio.run(tick_callback())
            except Exception:
                logger.exception("scheduled tick raised; waiting for the next fire time")

    def stop(self) -> None:
        worker = self._worker
        if worker is None:
            return
        self._wakeup.set()
        worker.join(timeout=self.join_timeout)
        if worker.is_alive():
            logger.warning("trigger thread still busy after %.1fs; left to finish", self.join_timeout)
        self._worker = None
        with self._state_lock:
            self._next_fire = None
        logger.info("thread trigger stopped")

    @property
    def is_running(self) -> bool:
        return self._worker is not None and self._worker.is_alive()

    @property
    def tick_count(self) -> int:
        return self._ticks

    @property
    def next_fire(self) -> datetime | None:
        return self._next_fire

    def get_health(self) -> BackendHealth:
        with self._state_lock:
            return BackendHealth(
                healthy=self.is_running,
                backend=self.name,
                tick_count=self._ticks,
                last_tick=self._last_tick,
                next_fire=self._next_fire,
                extra={"cron": self._cron},
            )

    def health(self) -> dict[str, Any]:
        return self.get_health().to_dict()


__all__ = ["THREAD_NAME", "ThreadTriggerBackend", "next_fire_time"]
