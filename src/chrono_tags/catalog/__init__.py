"""Rule catalog: structured predicates, tag definitions and the built-in seed."""

from chrono_tags.catalog.catalog import RuleCatalog
from chrono_tags.catalog.definitions import TagDefinition
from chrono_tags.catalog.predicates import (
    Comparison,
    Condition,
    Deadline,
    Elapsed,
    Flag,
    Predicate,
)
from chrono_tags.catalog.seed import DEFAULT_TAGS, TagIds

__all__ = [
    "DEFAULT_TAGS",
    "Comparison",
    "Condition",
    "Deadline",
    "Elapsed",
    "Flag",
    "Predicate",
    "RuleCatalog",
    "TagDefinition",
    "TagIds",
]
