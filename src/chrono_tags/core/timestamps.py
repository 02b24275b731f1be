"""
Timestamp helpers.

The engine only ever handles aware UTC datetimes. sqlite rows written by
other tools can hold naive ISO strings; those are taken to be UTC, never
local time.
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    return datetime.now(UTC)


def ensure_utc(dt: datetime) -> datetime:
    """Attach UTC to a naive datetime, convert an aware one."""
    return dt.replace(tzinfo=UTC) if dt.tzinfo is None else dt.astimezone(UTC)


def to_iso8601(dt: datetime | None) -> str | None:
    return None if dt is None else ensure_utc(dt).isoformat()


def from_iso8601(s: str | None) -> datetime | None:
    return None if s is None else ensure_utc(datetime.fromisoformat(s))


__all__ = ["ensure_utc", "from_iso8601", "to_iso8601", "utc_now"]
