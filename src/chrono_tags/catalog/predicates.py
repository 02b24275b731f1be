"""
Structured predicates over a :class:`UserMetricsSnapshot`.

A predicate is data, not code: the catalog can be loaded from YAML,
compared, printed and validated before a single user is evaluated.

Condition kinds:
    ::

        Comparison(metric, op, value)   numeric metric  <op> value
        Elapsed(metric, op, days)       whole days since timestamp <op> days
        Flag(metric, expected)          boolean metric == expected
        Deadline(metric, pending)       (timestamp set and > as_of) == pending

    A :class:`Predicate` is the logical AND of its conditions. OR is not
    supported; none of the catalog's tags need it.

Guardrails:
    ❌ DON'T: Parse free-form strings such as ``"<= 7 dias"``
    ✅ DO: Author ``Elapsed("created_at", "<=", 7)``

    ❌ DON'T: Read the wall clock inside a condition
    ✅ DO: Compare against ``snapshot.as_of``

Tags:
    catalog, predicate, condition, rules, chrono-tags
"""

from __future__ import annotations

import operator
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Union

from chrono_tags.core.errors import CatalogError
from chrono_tags.metrics.snapshot import metric_kind

if TYPE_CHECKING:
    from chrono_tags.catalog.definitions import TagDefinition
    from chrono_tags.metrics.snapshot import UserMetricsSnapshot

OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
    ">=": operator.ge,
    ">": operator.gt,
    "<=": operator.le,
    "<": operator.lt,
}


def _check_op(op: str) -> None:
    if op not in OPERATORS:
        raise CatalogError(f"Unsupported operator {op!r}; expected one of {sorted(OPERATORS)}")


@dataclass(frozen=True)
class Comparison:
    """Numeric metric compared against a constant."""

    metric: str
    op: str
    value: int | float

    kind = "comparison"

    def __post_init__(self) -> None:
        _check_op(self.op)

    def is_satisfied(self, snapshot: UserMetricsSnapshot) -> bool:
        return OPERATORS[self.op](snapshot.value_of(self.metric), self.value)

    def describe(self) -> str:
        return f"{self.metric} {self.op} {self.value}"


@dataclass(frozen=True)
class Elapsed:
    """Whole days between a timestamp metric and ``as_of``. False when unset."""

    metric: str
    op: str
    days: int

    kind = "elapsed"

    def __post_init__(self) -> None:
        _check_op(self.op)
        if self.days < 0:
            raise CatalogError(f"Elapsed days must be >= 0, got {self.days}")

    def is_satisfied(self, snapshot: UserMetricsSnapshot) -> bool:
        moment = snapshot.value_of(self.metric)
        if moment is None:
            return False
        return OPERATORS[self.op]((snapshot.as_of - moment).days, self.days)

    def describe(self) -> str:
        return f"days since {self.metric} {self.op} {self.days}"


@dataclass(frozen=True)
class Flag:
    """Boolean metric, including ``overrides.<name>`` flags."""

    metric: str
    expected: bool = True

    kind = "flag"

    def is_satisfied(self, snapshot: UserMetricsSnapshot) -> bool:
        return bool(snapshot.value_of(self.metric)) is self.expected

    def describe(self) -> str:
        return self.metric if self.expected else f"not {self.metric}"


@dataclass(frozen=True)
class Deadline:
    """Whether a timestamp metric is set and still ahead of ``as_of``."""

    metric: str
    pending: bool = True

    kind = "deadline"

    def is_satisfied(self, snapshot: UserMetricsSnapshot) -> bool:
        moment = snapshot.value_of(self.metric)
        is_pending = moment is not None and moment > snapshot.as_of
        return is_pending is self.pending

    def describe(self) -> str:
        state = "pending" if self.pending else "not pending"
        return f"{self.metric} {state}"


Condition = Union[Comparison, Elapsed, Flag, Deadline]


@dataclass(frozen=True)
class Predicate:
    """Conjunction of conditions, or a manual-only marker.

    A manual predicate is never satisfied automatically; it is only
    fulfilled by an administrative grant or revoke.
    """

    conditions: tuple[Condition, ...] = field(default_factory=tuple)
    manual: bool = False

    def __post_init__(self) -> None:
        if not self.manual and not self.conditions:
            raise CatalogError("A non-manual predicate needs at least one condition")

    @classmethod
    def all_of(cls, *conditions: Condition) -> Predicate:
        return cls(conditions=tuple(conditions))

    @classmethod
    def manual_only(cls) -> Predicate:
        return cls(manual=True)

    def is_satisfied(self, snapshot: UserMetricsSnapshot) -> bool:
        if self.manual:
            return False
        return all(condition.is_satisfied(snapshot) for condition in self.conditions)

    def metrics(self) -> list[str]:
        return [condition.metric for condition in self.conditions]

    def describe(self) -> str:
        if self.manual:
            return "manual"
        return " and ".join(condition.describe() for condition in self.conditions)


# Metric type each condition kind accepts
_ACCEPTS = {
    "comparison": "numeric",
    "elapsed": "timestamp",
    "flag": "flag",
    "deadline": "timestamp",
}


def check_metrics(definition: TagDefinition) -> None:
    """Validate every condition of a definition against the metric registry.

    Raises:
        CatalogError: On an unknown metric or a condition kind that does not
            fit the metric's type (e.g. ``Elapsed`` over a counter).
    """
    predicates = [definition.acquisition]
    if definition.removal is not None:
        predicates.append(definition.removal)
    for predicate in predicates:
        for condition in predicate.conditions:
            actual = metric_kind(condition.metric)
            if actual is None:
                raise CatalogError(
                    f"Unknown metric {condition.metric!r} in tag {definition.name!r}"
                ).with_context(tag_id=definition.id)
            expected = _ACCEPTS[condition.kind]
            if actual != expected:
                raise CatalogError(
                    f"{condition.kind} condition needs a {expected} metric, "
                    f"{condition.metric!r} is {actual}"
                ).with_context(tag_id=definition.id)


__all__ = [
    "OPERATORS",
    "check_metrics",
    "Comparison",
    "Condition",
    "Deadline",
    "Elapsed",
    "Flag",
    "Predicate",
]
