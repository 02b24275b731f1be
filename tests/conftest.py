"""
Shared pytest fixtures for chrono-tags tests.

This module provides:
- A fixed clock and a snapshot factory
- In-memory collaborators wired into a BatchScheduler
- An in-memory sqlite connection with the schema applied
- Logging/settings isolation between tests
"""

from __future__ import annotations

from collections.abc import Callable, Generator
from datetime import datetime

import pytest
import structlog

from chrono_tags.catalog import RuleCatalog
from chrono_tags.core import settings as settings_module
from chrono_tags.engine.notifications import NotificationDispatcher
from chrono_tags.engine.scheduler import BatchScheduler
from chrono_tags.metrics.snapshot import UserMetricsSnapshot
from chrono_tags.storage.connection import SqliteConnection
from chrono_tags.storage.schema import apply_schema
from tests._support.fakes import (
    NOW,
    FakeMetricsProvider,
    FakeUserSource,
    InMemoryTagStore,
    RecordingNotifier,
    build_snapshot,
)


# =============================================================================
# Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def _reset_logging_and_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Keep structlog config and the settings cache from leaking across tests."""
    monkeypatch.setenv("CHRONO_TAGS_LOG_LEVEL", "WARNING")
    settings_module._settings_cache.clear()
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
    settings_module._settings_cache.clear()


# =============================================================================
# Snapshots
# =============================================================================


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def make_snapshot() -> Callable[..., UserMetricsSnapshot]:
    return build_snapshot


# =============================================================================
# Engine with in-memory collaborators
# =============================================================================


@pytest.fixture
def catalog() -> RuleCatalog:
    return RuleCatalog.default()


@pytest.fixture
def metrics() -> FakeMetricsProvider:
    return FakeMetricsProvider()


@pytest.fixture
def store() -> InMemoryTagStore:
    return InMemoryTagStore()


@pytest.fixture
def users() -> FakeUserSource:
    return FakeUserSource()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def dispatcher(catalog: RuleCatalog, notifier: RecordingNotifier) -> NotificationDispatcher:
    return NotificationDispatcher(catalog, notifier)


@pytest.fixture
def scheduler(
    catalog: RuleCatalog,
    metrics: FakeMetricsProvider,
    store: InMemoryTagStore,
    users: FakeUserSource,
    dispatcher: NotificationDispatcher,
) -> BatchScheduler:
    return BatchScheduler(catalog, metrics, store, users, dispatcher, batch_size=10, drain_timeout=5.0)


# =============================================================================
# SQLite
# =============================================================================


@pytest.fixture
def conn() -> Generator[SqliteConnection, None, None]:
    connection = SqliteConnection(":memory:")
    apply_schema(connection)
    yield connection
    connection.close()
