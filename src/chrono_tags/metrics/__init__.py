"""Metrics snapshot value object, metric registry and provider contract."""

from chrono_tags.core.protocols import MetricsProvider
from chrono_tags.metrics.snapshot import (
    FLAG_METRICS,
    NUMERIC_METRICS,
    OVERRIDE_PREFIX,
    TIMESTAMP_METRICS,
    UserMetricsSnapshot,
    metric_kind,
)

__all__ = [
    "FLAG_METRICS",
    "NUMERIC_METRICS",
    "OVERRIDE_PREFIX",
    "TIMESTAMP_METRICS",
    "MetricsProvider",
    "UserMetricsSnapshot",
    "metric_kind",
]
