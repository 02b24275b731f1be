"""Core primitives: errors, enums, logging, settings and collaborator protocols."""

from chrono_tags.core.enums import RunState, TagCategory, TransitionKind, Visibility
from chrono_tags.core.errors import (
    CatalogError,
    ConfigError,
    ErrorCategory,
    ErrorContext,
    MetricsUnavailable,
    NotificationError,
    PersistenceFailure,
    RunInProgressError,
    SourceUnavailable,
    TagEngineError,
    UnknownTagError,
    categorize_error,
)

__all__ = [
    "RunState",
    "TagCategory",
    "TransitionKind",
    "Visibility",
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
