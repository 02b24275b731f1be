"""Tests for chrono_tags.core.timestamps."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

from chrono_tags.core.timestamps import ensure_utc, from_iso8601, to_iso8601, utc_now


def test_utc_now_is_aware():
    assert utc_now().tzinfo is UTC


def test_naive_strings_read_as_utc():
    assert from_iso8601("2026-10-17T03:00:00") == datetime(2026, 10, 17, 3, tzinfo=UTC)


def test_offsets_converted_to_utc():
    local = datetime(2026, 10, 17, 0, 0, tzinfo=timezone(timedelta(hours=-3)))
    assert ensure_utc(local) == datetime(2026, 10, 17, 3, tzinfo=UTC)
    assert to_iso8601(local) == "2026-10-17T03:00:00+00:00"


def test_none_passthrough():
    assert to_iso8601(None) is None
    assert from_iso8601(None) is None
