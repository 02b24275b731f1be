"""Evaluation, reconciliation, notification dispatch and batch scheduling."""

from chrono_tags.engine.admin import TagAdministration
from chrono_tags.engine.evaluator import evaluate
from chrono_tags.engine.notifications import LoggingNotifier, NotificationDispatcher
from chrono_tags.engine.reconciler import Reconciler
from chrono_tags.engine.report import RunReport, UserFailure, UserOutcome
from chrono_tags.engine.scheduler import BatchScheduler
from chrono_tags.engine.transitions import TransitionRecord
from chrono_tags.engine.wiring import TagEngine, build_engine, load_catalog

__all__ = [
    "BatchScheduler",
    "LoggingNotifier",
    "NotificationDispatcher",
    "Reconciler",
    "RunReport",
    "TagAdministration",
    "TagEngine",
    "TransitionRecord",
    "UserFailure",
    "UserOutcome",
    "build_engine",
    "evaluate",
    "load_catalog",
]
