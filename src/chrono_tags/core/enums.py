"""
Shared enums for the tag engine.

STDLIB ONLY - NO PYDANTIC.
"""

from enum import Enum


class TagCategory(str, Enum):
    """Catalog grouping of a tag definition."""

    POSITIVE = "positive"
    TIME = "time"
    MODERATION = "moderation"
    STYLE = "style"


class Visibility(str, Enum):
    """Who may see a tag once assigned."""

    PUBLIC = "public"
    INTERNAL = "internal"


class TransitionKind(str, Enum):
    """Direction of a tag transition."""

    ADD = "add"
    REMOVE = "remove"


class RunState(str, Enum):
    """
    Lifecycle of one reconciliation run.

    Idle → Fetching → Processing → Completed, or Failed when the
    active-user fetch itself fails. Per-user failures never move a run
    to Failed.
    """

    IDLE = "idle"
    FETCHING = "fetching"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_active(self) -> bool:
        return self in (RunState.FETCHING, RunState.PROCESSING)
