"""Timing backends and the daily trigger for reconciliation runs.

The APScheduler backend is imported lazily through
:func:`~chrono_tags.scheduling.trigger.create_backend` so the package
works without the ``[apscheduler]`` extra.
"""

from chrono_tags.scheduling.protocol import BackendHealth, TickCallback, TriggerBackend
from chrono_tags.scheduling.thread_backend import ThreadTriggerBackend, next_fire_time
from chrono_tags.scheduling.trigger import DailyTrigger, create_backend, daily_cron

__all__ = [
    "BackendHealth",
    "DailyTrigger",
    "ThreadTriggerBackend",
    "TickCallback",
    "TriggerBackend",
    "create_backend",
    "daily_cron",
    "next_fire_time",
]
