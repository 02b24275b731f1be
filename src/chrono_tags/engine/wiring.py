"""
Engine assembly from settings.

``build_engine`` is the composition root: it opens the sqlite connection,
applies the schema, loads the catalog and wires every collaborator into a
:class:`TagEngine`. Tests and embedding applications can pass their own
connection or notifier instead.

Examples:
    >>> import asyncio
    >>> from chrono_tags.core.settings import get_settings
    >>> engine = build_engine(get_settings(database_path=":memory:"))
    >>> report = asyncio.run(engine.run_once())

Tags:
    wiring, composition-root, factory, chrono-tags
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from chrono_tags.catalog.catalog import RuleCatalog
from chrono_tags.core.logging import get_logger
from chrono_tags.core.protocols import Notifier
from chrono_tags.core.settings import TagEngineSettings
from chrono_tags.core.timestamps import utc_now
from chrono_tags.engine.admin import TagAdministration
from chrono_tags.engine.notifications import NotificationDispatcher
from chrono_tags.engine.report import RunReport
from chrono_tags.engine.scheduler import BatchScheduler
from chrono_tags.engine.transitions import TransitionRecord
from chrono_tags.scheduling.trigger import DailyTrigger, create_backend
from chrono_tags.storage.connection import SqliteConnection
from chrono_tags.storage.metrics import SqliteMetricsProvider
from chrono_tags.storage.outbox import OutboxNotifier
from chrono_tags.storage.schema import apply_schema
from chrono_tags.storage.tags import SqliteTagStore
from chrono_tags.storage.users import SqliteActiveUserSource

logger = get_logger(__name__)


@dataclass
class TagEngine:
    """All engine components sharing one connection and catalog."""

    settings: TagEngineSettings
    conn: SqliteConnection
    catalog: RuleCatalog
    store: SqliteTagStore
    dispatcher: NotificationDispatcher
    scheduler: BatchScheduler
    admin: TagAdministration

    async def run_once(self) -> RunReport:
        return await self.scheduler.run_once()

    async def grant(self, user_id: str, tag_id: str) -> list[TransitionRecord]:
        committed = await self.admin.grant(user_id, tag_id)
        await self.dispatcher.drain(self.settings.notification_drain_timeout_seconds)
        return committed

    async def revoke(self, user_id: str, tag_id: str) -> list[TransitionRecord]:
        committed = await self.admin.revoke(user_id, tag_id)
        await self.dispatcher.drain(self.settings.notification_drain_timeout_seconds)
        return committed

    def schedule_daily(self, at_hour: int | None = None) -> DailyTrigger:
        """Start the daily trigger with the configured backend and timezone."""
        return self.scheduler.schedule_daily(
            self.settings.daily_hour if at_hour is None else at_hour,
            backend=create_backend(self.settings.scheduler_backend),
            timezone=self.settings.timezone,
        )

    def close(self) -> None:
        self.conn.close()


def load_catalog(settings: TagEngineSettings) -> RuleCatalog:
    if settings.catalog_path is None:
        return RuleCatalog.default()
    return RuleCatalog.from_yaml(settings.catalog_path)


def build_engine(
    settings: TagEngineSettings,
    conn: SqliteConnection | None = None,
    *,
    notifier: Notifier | None = None,
    clock: Callable[[], datetime] = utc_now,
) -> TagEngine:
    """Wire a :class:`TagEngine` from settings.

    ``clock`` feeds the metrics snapshots and the active-user window.

    Raises:
        CatalogError: If the configured catalog file is invalid.
    """
    catalog = load_catalog(settings)
    conn = conn or SqliteConnection(settings.database_path)
    apply_schema(conn)

    store = SqliteTagStore(conn)
    dispatcher = NotificationDispatcher(catalog, notifier or OutboxNotifier(conn))
    scheduler = BatchScheduler(
        catalog,
        SqliteMetricsProvider(conn, clock),
        store,
        SqliteActiveUserSource(conn, clock),
        dispatcher,
        batch_size=settings.batch_size,
        active_window_days=settings.active_window_days,
        drain_timeout=settings.notification_drain_timeout_seconds,
    )
    admin = TagAdministration(catalog, scheduler.reconciler, dispatcher)
    logger.debug("engine.built", database=str(conn.path), tags=len(catalog))
    return TagEngine(
        settings=settings,
        conn=conn,
        catalog=catalog,
        store=store,
        dispatcher=dispatcher,
        scheduler=scheduler,
        admin=admin,
    )


__all__ = ["TagEngine", "build_engine", "load_catalog"]
