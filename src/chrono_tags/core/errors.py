"""
Error types of the tag reconciliation engine.

The batch scheduler decides how far a failure may travel from its type
alone, so each failure domain has its own class:

    TagEngineError (category, retryable, context, cause)
    ├── MetricsUnavailable    one user skipped, run continues
    ├── PersistenceFailure    one transition failed; ``committed`` stays applied
    ├── SourceUnavailable     active users unknown; the run fails
    ├── CatalogError
    │   └── UnknownTagError
    ├── ConfigError
    ├── RunInProgressError    a second run was refused
    └── NotificationError     logged and dropped by the dispatcher

Examples:
    >>> error = MetricsUnavailable("user row missing").with_context(user_id="u1")
    >>> error.context.user_id
    'u1'
    >>> error.to_dict()["category"]
    'METRICS'

A snapshot with a missing field is a ``MetricsUnavailable``, never a
snapshot of zeros. Driver exceptions are passed on as ``cause=``.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from chrono_tags.engine.transitions import TransitionRecord


class ErrorCategory(str, Enum):
    """Where a failure happened; reported per failed user in the RunReport."""

    METRICS = "METRICS"
    PERSISTENCE = "PERSISTENCE"
    SOURCE = "SOURCE"
    CATALOG = "CATALOG"
    CONFIG = "CONFIG"
    ORCHESTRATION = "ORCHESTRATION"
    NOTIFICATION = "NOTIFICATION"
    INTERNAL = "INTERNAL"  # bugs
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """Identifiers attached to an error; anything else lands in ``metadata``."""

    user_id: str | None = None
    tag_id: str | None = None
    run_id: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        known = {k: v for k, v in asdict(self).items() if k != "metadata" and v is not None}
        return {**known, **self.metadata}


class TagEngineError(Exception):
    """Base of every engine error.

    Subclasses pick ``default_category`` and ``default_retryable``; the
    constructor keywords override them per instance.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = self.default_category if category is None else category
        self.retryable = self.default_retryable if retryable is None else retryable
        self.context = ErrorContext() if context is None else context
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **fields: Any) -> TagEngineError:
        """Attach identifiers and return ``self``, so it reads inline with ``raise``."""
        for name, value in fields.items():
            if name in ("user_id", "tag_id", "run_id"):
                setattr(self.context, name, value)
            else:
                self.context.metadata[name] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = dict(
            error_type=type(self).__name__,
            message=self.message,
            category=self.category.value,
            retryable=self.retryable,
        )
        if context := self.context.to_dict():
            data["context"] = context
        if self.cause is not None:
            data["cause"] = str(self.cause)
        return data

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.category.value}: {self.message}>"


class MetricsUnavailable(TagEngineError):
    """No usable snapshot for one user: row missing, storage down, or a field is NULL."""

    default_category = ErrorCategory.METRICS
    default_retryable = True


class PersistenceFailure(TagEngineError):
    """A tag assignment write failed.

    Each transition commits on its own, so ``committed`` lists those that
    were applied before this one and remain in effect.
    """

    default_category = ErrorCategory.PERSISTENCE
    default_retryable = True

    def __init__(self, message: str, *, committed: list[TransitionRecord] | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.committed: list[TransitionRecord] = list(committed or [])

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "committed": len(self.committed)}


class SourceUnavailable(TagEngineError):
    """The active-user population could not be fetched."""

    default_category = ErrorCategory.SOURCE
    default_retryable = True


class CatalogError(TagEngineError):
    default_category = ErrorCategory.CATALOG


class UnknownTagError(CatalogError):
    def __init__(self, tag_id: str):
        self.tag_id = tag_id
        super().__init__(f"Unknown tag: {tag_id}", context=ErrorContext(tag_id=tag_id))


class ConfigError(TagEngineError):
    """A setting has an unusable value."""

    default_category = ErrorCategory.CONFIG

    def __init__(self, key: str, value: Any, message: str | None = None):
        self.key = key
        self.value = value
        super().__init__(message or f"Invalid value for {key}: {value!r}")


class RunInProgressError(TagEngineError):
    default_category = ErrorCategory.ORCHESTRATION


class NotificationError(TagEngineError):
    """Delivery failed. The engine never retries a notification."""

    default_category = ErrorCategory.NOTIFICATION


def categorize_error(error: BaseException) -> ErrorCategory:
    if isinstance(error, TagEngineError):
        return error.category
    # Environmental failures from outside the engine; anything else is a bug
    if isinstance(error, OSError):
        return ErrorCategory.UNKNOWN
    return ErrorCategory.INTERNAL


__all__ = [
    "CatalogError",
    "ConfigError",
    "ErrorCategory",
    "ErrorContext",
    "MetricsUnavailable",
    "NotificationError",
    "PersistenceFailure",
    "RunInProgressError",
    "SourceUnavailable",
    "TagEngineError",
    "UnknownTagError",
    "categorize_error",
]
