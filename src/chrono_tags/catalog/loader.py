"""Pydantic models for catalog documents (YAML or plain mappings).

Usage::

    from chrono_tags.catalog.loader import load_yaml

    definitions = load_yaml("catalog.yaml")

Example YAML::

    tags:
      - id: 00000000-0000-0000-0000-000000000002
        name: Recém-chegado
        category: time
        visibility: public
        acquisition:
          conditions:
            - {kind: elapsed, metric: created_at, op: "<=", days: 7}
        removal:
          conditions:
            - {kind: elapsed, metric: created_at, op: ">", days: 7}
      - id: 00000000-0000-0000-0000-000000000001
        name: Verificado
        category: positive
        visibility: public
        acquisition: {manual: true}
        removal: {manual: true}
        notify_on_acquire: true

Documents are validated here and converted into the frozen dataclasses
of :mod:`chrono_tags.catalog.predicates`; the evaluator never sees a
pydantic model.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Annotated, Any, Literal, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from chrono_tags.catalog.definitions import TagDefinition
from chrono_tags.catalog.predicates import (
    Comparison,
    Condition,
    Deadline,
    Elapsed,
    Flag,
    Predicate,
)
from chrono_tags.core.enums import TagCategory, Visibility
from chrono_tags.core.errors import CatalogError

Operator = Literal[">=", ">", "<=", "<"]


class ComparisonSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal["comparison"]
    metric: str
    op: Operator
    value: int | float

    def build(self) -> Condition:
        return Comparison(self.metric, self.op, self.value)


class ElapsedSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal["elapsed"]
    metric: str
    op: Operator
    days: int = Field(..., ge=0)

    def build(self) -> Condition:
        return Elapsed(self.metric, self.op, self.days)


class FlagSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal["flag"]
    metric: str
    expected: bool = True

    def build(self) -> Condition:
        return Flag(self.metric, self.expected)


class DeadlineSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal["deadline"]
    metric: str
    pending: bool = True

    def build(self) -> Condition:
        return Deadline(self.metric, self.pending)


ConditionSpec = Annotated[
    Union[ComparisonSpec, ElapsedSpec, FlagSpec, DeadlineSpec],
    Field(discriminator="kind"),
]


class PredicateSpec(BaseModel):
    """AND of conditions. ``manual: true`` marks an admin-only predicate."""

    model_config = ConfigDict(extra="forbid")

    manual: bool = False
    conditions: list[ConditionSpec] = Field(default_factory=list)

    def build(self) -> Predicate:
        return Predicate(
            conditions=tuple(spec.build() for spec in self.conditions),
            manual=self.manual,
        )


class TagSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    category: TagCategory
    visibility: Visibility = Visibility.PUBLIC
    acquisition: PredicateSpec
    removal: PredicateSpec | None = None
    notify_on_acquire: bool = False
    notify_on_remove: bool = False
    description: str = ""
    display_priority: int = 0

    def build(self) -> TagDefinition:
        return TagDefinition(
            id=self.id,
            name=self.name,
            category=self.category,
            visibility=self.visibility,
            acquisition=self.acquisition.build(),
            removal=self.removal.build() if self.removal else None,
            notify_on_acquire=self.notify_on_acquire,
            notify_on_remove=self.notify_on_remove,
            description=self.description,
            display_priority=self.display_priority,
        )


class CatalogSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    tags: list[TagSpec]


def load_definitions(data: Mapping[str, Any]) -> list[TagDefinition]:
    """Validate a catalog document and build its definitions, in order.

    Raises:
        CatalogError: If the document fails validation.
    """
    try:
        spec = CatalogSpec.model_validate(data)
    except ValidationError as exc:
        raise CatalogError(f"Invalid catalog document: {exc}") from exc
    return [tag.build() for tag in spec.tags]


def load_yaml(path: str | Path) -> list[TagDefinition]:
    """Read and validate a YAML catalog file.

    Raises:
        CatalogError: If the file cannot be read or is not a valid catalog.
    """
    path = Path(path)
    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        raise CatalogError(f"Cannot read catalog {path}: {exc}", cause=exc) from exc
    if not isinstance(data, Mapping):
        raise CatalogError(f"Catalog {path} must be a mapping with a 'tags' list")
    return load_definitions(data)


__all__ = [
    "CatalogSpec",
    "PredicateSpec",
    "TagSpec",
    "load_definitions",
    "load_yaml",
]
