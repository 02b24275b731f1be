"""Contract between the daily trigger and its timing backends.

A backend decides *when* to tick; :class:`~chrono_tags.scheduling.trigger.DailyTrigger`
decides *what* a tick does (one ``BatchScheduler.run_once``). Ticks arrive
on the backend's own thread, each in a fresh event loop.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol, runtime_checkable

TickCallback = Callable[[], Awaitable[None]]


def _iso(value: datetime | None) -> str | None:
    return None if value is None else value.isoformat()


@runtime_checkable
class TriggerBackend(Protocol):
    """What DailyTrigger needs from a timing backend.

    Shipped: ``ThreadTriggerBackend`` (default) and
    ``APSchedulerTriggerBackend`` (``[apscheduler]`` extra).
    """

    name: str

    def start(self, tick_callback: TickCallback, cron_expression: str, timezone: str = "UTC") -> None:
        ...

    def stop(self) -> None:
        """Stop ticking; a tick already running is allowed to finish."""
        ...

    def health(self) -> dict[str, Any]:
        """Must carry ``healthy``, ``backend``, ``tick_count`` and ``last_tick``."""
        ...


@dataclass
class BackendHealth:
    healthy: bool
    backend: str
    tick_count: int = 0
    last_tick: datetime | None = None
    next_fire: datetime | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"healthy": self.healthy, "backend": self.backend}
        data["tick_count"] = self.tick_count
        data["last_tick"] = _iso(self.last_tick)
        data["next_fire"] = _iso(self.next_fire)
        data.update(self.extra)
        return data


__all__ = ["BackendHealth", "TickCallback", "TriggerBackend"]
