"""APScheduler trigger backend.

Registers one cron job on an APScheduler 3.x ``BackgroundScheduler``.
``max_instances=1`` and ``coalesce=True`` mean a late or overlapping fire
collapses into a single tick; the scheduler's own run lock still refuses
any overlap that gets through.

Needs the optional extra::

    pip install chrono-tags[apscheduler]
"""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime
from typing import Any

from .protocol import BackendHealth, TickCallback

logger = logging.getLogger(__name__)

JOB_ID = "chrono_tags_daily_run"


def _load_apscheduler() -> tuple[Any, Any]:
    try:
        from apscheduler.schedulers.background import BackgroundScheduler
        from apscheduler.triggers.cron import CronTrigger
    except ImportError:
        raise ImportError(
            "APSchedulerTriggerBackend needs APScheduler 3.x: pip install chrono-tags[apscheduler]"
        ) from None
    return BackgroundScheduler, CronTrigger


class APSchedulerTriggerBackend:
    """Cron job on a background APScheduler instance."""

    name = "apscheduler"

    def __init__(self) -> None:
        scheduler_cls, self._trigger_cls = _load_apscheduler()
        self.scheduler = scheduler_cls()
        self._ticks = 0
        self._last_tick: datetime | None = None

    def _fire(self, tick_callback: TickCallback) -> None:
        self._ticks += 1
        self._last_tick = datetime.now(UTC)
        try:
            asyncio.run(tick_callback())
        except Exception:
            logger.exception("scheduled tick raised; job stays registered")

    def start(self, tick_callback: TickCallback, cron_expression: str, timezone: str = "UTC") -> None:
        self.scheduler.add_job(
            self._fire,
            self._trigger_cls.from_crontab(cron_expression, timezone=timezone),
            args=(tick_callback,),
            id=JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self.scheduler.start()
        logger.info("apscheduler trigger started cron=%r tz=%s", cron_expression, timezone)

    def stop(self) -> None:
        if not self.scheduler.running:
            return
        self.scheduler.shutdown(wait=True)
        logger.info("apscheduler trigger stopped")

    def get_health(self) -> BackendHealth:
        running = bool(self.scheduler.running)
        job = self.scheduler.get_job(JOB_ID) if running else None
        return BackendHealth(
            healthy=running,
            backend=self.name,
            tick_count=self._ticks,
            last_tick=self._last_tick,
            next_fire=job.next_run_time if job is not None else None,
        )

    def health(self) -> dict[str, Any]:
        return self.get_health().to_dict()


__all__ = ["JOB_ID", "APSchedulerTriggerBackend"]
