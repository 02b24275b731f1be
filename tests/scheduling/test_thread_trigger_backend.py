"""Tests for chrono_tags.scheduling.thread_backend."""

from __future__ import annotations

import threading
import time
from datetime import UTC, datetime, timedelta

import pytest

from chrono_tags.scheduling import thread_backend
from chrono_tags.scheduling.thread_backend import ThreadTriggerBackend, next_fire_time


def _wait_until(predicate, timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return False


class TestNextFireTime:
    def test_later_same_day(self):
        after = datetime(2026, 10, 17, 1, 30, tzinfo=UTC)
        assert next_fire_time("0 3 * * *", after) == datetime(2026, 10, 17, 3, 0, tzinfo=UTC)

    def test_rolls_to_next_day(self):
        after = datetime(2026, 10, 17, 3, 0, tzinfo=UTC)
        assert next_fire_time("0 3 * * *", after) == datetime(2026, 10, 18, 3, 0, tzinfo=UTC)


class TestLifecycle:
    def test_invalid_cron_rejected(self):
        backend = ThreadTriggerBackend()
        with pytest.raises(ValueError, match="Invalid cron"):
            backend.start(lambda: None, "not a cron")
        assert not backend.is_running

    def test_start_and_stop(self):
        async def tick():
            return None

        backend = ThreadTriggerBackend(join_timeout=1.0)
        backend.start(tick, "0 3 * * *", timezone="UTC")
        try:
            assert backend.is_running
            assert _wait_until(lambda: backend.next_fire is not None)
            health = backend.health()
            assert health["healthy"] is True
            assert health["backend"] == "thread"
            assert health["cron"] == "0 3 * * *"
            assert backend.next_fire.hour == 3
        finally:
            backend.stop()

        assert not backend.is_running
        assert backend.health()["healthy"] is False

    def test_stop_without_start_is_noop(self):
        ThreadTriggerBackend().stop()


class TestTicks:
    def test_tick_runs_in_its_own_event_loop(self, monkeypatch):
        monkeypatch.setattr(
            thread_backend,
            "next_fire_time",
            lambda expr, after: after + timedelta(milliseconds=20),
        )
        fired = threading.Event()
        threads: list[str] = []

        async def tick():
            threads.append(threading.current_thread().name)
            fired.set()

        backend = ThreadTriggerBackend(join_timeout=1.0)
        backend.start(tick, "0 3 * * *")
        try:
            assert fired.wait(2.0)
        finally:
            backend.stop()

        assert backend.tick_count >= 1
        assert threads[0] == "chrono-tags-trigger"

    def test_failing_tick_keeps_thread_alive(self, monkeypatch):
        monkeypatch.setattr(
            thread_backend,
            "next_fire_time",
            lambda expr, after: after + timedelta(milliseconds=20),
        )
        calls: list[int] = []

        async def tick():
            calls.append(1)
            raise RuntimeError("boom")

        backend = ThreadTriggerBackend(join_timeout=1.0)
        backend.start(tick, "0 3 * * *")
        try:
            assert _wait_until(lambda: len(calls) >= 2)
            assert backend.is_running
        finally:
            backend.stop()
