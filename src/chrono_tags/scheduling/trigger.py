"""
Daily trigger: invoke ``BatchScheduler.run_once`` once per day at a fixed hour.

The trigger is the only thing a timing backend calls. Each tick runs one
pass; an overlapping tick is logged and skipped, and a failed active-user
fetch is logged without stopping the backend, so the next day still runs.

Tags:
    scheduling, cron, daily, trigger, chrono-tags
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from chrono_tags.core.errors import ConfigError, RunInProgressError, SourceUnavailable
from chrono_tags.core.logging import get_logger
from chrono_tags.scheduling.protocol import TriggerBackend

if TYPE_CHECKING:
    from chrono_tags.engine.report import RunReport
    from chrono_tags.engine.scheduler import BatchScheduler

logger = get_logger(__name__)


def daily_cron(at_hour: int) -> str:
    """Cron expression firing once a day at ``at_hour``:00.

    Raises:
        ConfigError: If ``at_hour`` is outside 0-23.
    """
    if not isinstance(at_hour, int) or isinstance(at_hour, bool) or not 0 <= at_hour <= 23:
        raise ConfigError("daily_hour", at_hour, f"Hour must be between 0 and 23, got {at_hour!r}")
    return f"0 {at_hour} * * *"


def create_backend(name: str) -> TriggerBackend:
    """Instantiate a backend by its settings name."""
    if name == "thread":
        from chrono_tags.scheduling.thread_backend import ThreadTriggerBackend

        return ThreadTriggerBackend()
    if name == "apscheduler":
        from chrono_tags.scheduling.apscheduler_backend import APSchedulerTriggerBackend

        return APSchedulerTriggerBackend()
    raise ConfigError("scheduler_backend", name, f"Unknown scheduler backend: {name!r}")


class DailyTrigger:
    """Bind a :class:`BatchScheduler` to a timing backend."""

    def __init__(
        self,
        scheduler: BatchScheduler,
        at_hour: int,
        backend: TriggerBackend | None = None,
        timezone: str = "UTC",
    ):
        self.scheduler = scheduler
        self.at_hour = at_hour
        self.cron_expression = daily_cron(at_hour)
        self.timezone = timezone
        self.backend = backend or create_backend("thread")
        self.last_report: RunReport | None = None
        self.skipped = 0

    def start(self) -> None:
        self.backend.start(self.tick, self.cron_expression, timezone=self.timezone)
        logger.info(
            "trigger.started",
            backend=self.backend.name,
            cron=self.cron_expression,
            timezone=self.timezone,
        )

    def stop(self) -> None:
        self.backend.stop()
        logger.info("trigger.stopped", backend=self.backend.name)

    def health(self) -> dict[str, Any]:
        result = dict(self.backend.health())
        result["cron"] = self.cron_expression
        result["run_in_progress"] = self.scheduler.is_running
        result["skipped"] = self.skipped
        return result

    async def tick(self) -> None:
        """Run one pass. Never raises for an overlap or an unavailable source."""
        try:
            self.last_report = await self.scheduler.run_once()
        except RunInProgressError:
            self.skipped += 1
            logger.warning("trigger.tick_skipped", reason="run already in progress")
        except SourceUnavailable as exc:
            self.last_report = self.scheduler.last_report
            logger.error("trigger.run_failed", error_type=type(exc).__name__, error=str(exc))


__all__ = ["DailyTrigger", "create_backend", "daily_cron"]
