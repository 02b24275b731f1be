"""
Rule catalog: the ordered set of tag definitions a run evaluates.

The catalog is static for the duration of a run and reloadable between
runs. Readers always see one complete tuple; ``reload`` validates the new
definitions first and swaps the reference under a lock, so a concurrent
``list_definitions`` never observes a half-applied edit.

Examples:
    >>> from chrono_tags.catalog import RuleCatalog, TagIds
    >>> catalog = RuleCatalog.default()
    >>> catalog.get(TagIds.POPULAR).name
    'Popular'
    >>> [d.name for d in catalog.list_definitions()][:2]
    ['Verificado', 'Popular']

Tags:
    catalog, registry, rules, chrono-tags
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from typing import Any

from chrono_tags.catalog.definitions import TagDefinition
from chrono_tags.catalog.predicates import check_metrics
from chrono_tags.core.errors import CatalogError, UnknownTagError
from chrono_tags.core.logging import get_logger

logger = get_logger(__name__)


def _validated(definitions: Iterable[TagDefinition]) -> tuple[TagDefinition, ...]:
    result = tuple(definitions)
    seen: set[str] = set()
    for definition in result:
        check_metrics(definition)
        if definition.id in seen:
            raise CatalogError(f"Duplicate tag id: {definition.id}").with_context(tag_id=definition.id)
        seen.add(definition.id)
    return result


class RuleCatalog:
    """Thread-safe, ordered registry of :class:`TagDefinition`."""

    def __init__(self, definitions: Iterable[TagDefinition] = ()):
        self._lock = threading.Lock()
        self._definitions = _validated(definitions)
        self._index = {d.id: d for d in self._definitions}

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> RuleCatalog:
        """Build a catalog from a parsed document (``{"tags": [...]}``)."""
        from chrono_tags.catalog.loader import load_definitions

        return cls(load_definitions(data))

    @classmethod
    def from_yaml(cls, path: str | Path) -> RuleCatalog:
        from chrono_tags.catalog.loader import load_yaml

        catalog = cls(load_yaml(path))
        logger.info("catalog.loaded", path=str(path), tags=len(catalog))
        return catalog

    @classmethod
    def default(cls) -> RuleCatalog:
        """The built-in seed."""
        from chrono_tags.catalog.seed import DEFAULT_TAGS

        return cls(DEFAULT_TAGS)

    def list_definitions(self) -> tuple[TagDefinition, ...]:
        return self._definitions

    def get(self, tag_id: str) -> TagDefinition:
        """Look up a definition.

        Raises:
            UnknownTagError: If ``tag_id`` is not in the catalog.
        """
        try:
            return self._index[tag_id]
        except KeyError:
            raise UnknownTagError(tag_id) from None

    def reload(self, definitions: Iterable[TagDefinition]) -> None:
        """Replace every definition at once.

        Raises:
            CatalogError: If the new definitions are invalid; the current
                definitions stay in place.
        """
        new_definitions = _validated(definitions)
        new_index = {d.id: d for d in new_definitions}
        with self._lock:
            self._definitions = new_definitions
            self._index = new_index
        logger.info("catalog.reloaded", tags=len(new_definitions))

    def __contains__(self, tag_id: object) -> bool:
        return tag_id in self._index

    def __len__(self) -> int:
        return len(self._definitions)

    def __iter__(self) -> Iterator[TagDefinition]:
        return iter(self._definitions)

    def __repr__(self) -> str:
        return f"RuleCatalog(tags={len(self)})"


__all__ = ["RuleCatalog"]
