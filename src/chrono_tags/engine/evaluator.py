"""
Rule evaluator: (held tags, snapshot, catalog) → transitions.

Pure and deterministic. No I/O, no clock reads (time-relative conditions
use ``snapshot.as_of``), and transitions come out in catalog order so the
same inputs always give the same list.

Decision table for one definition:
    ::

        held?  acquire?  remove rule fires?  manual acq?  manual rem?  →
        ─────  ────────  ──────────────────  ───────────  ───────────  ──────
        no     yes       no                  no           -            Add
        no     yes       yes                 no           -            none (warn)
        yes    -         yes                 -            -            Remove
        yes    yes       yes                 -            -            Remove (warn)
        yes    no        -                   no           no           Remove (lapsed)
        yes    no        -                   yes or       yes          keep

    Tags that are held but missing from the catalog are left alone.

Tags:
    evaluator, rules, pure-function, chrono-tags
"""

from __future__ import annotations

from collections.abc import Set

from chrono_tags.catalog.catalog import RuleCatalog
from chrono_tags.catalog.definitions import TagDefinition
from chrono_tags.core.logging import get_logger
from chrono_tags.engine.transitions import TransitionRecord
from chrono_tags.metrics.snapshot import UserMetricsSnapshot

logger = get_logger(__name__)


def _should_remove(definition: TagDefinition, snapshot: UserMetricsSnapshot, acquires: bool) -> bool:
    if definition.removal is not None and definition.removal.is_satisfied(snapshot):
        if acquires:
            logger.warning(
                "catalog.inconsistent",
                tag_id=definition.id,
                tag=definition.name,
                user_id=snapshot.user_id,
                detail="acquisition and removal both satisfied; removal wins",
            )
        return True
    if definition.manual_acquisition or definition.manual_removal:
        return False
    return not acquires


def evaluate(
    current_tags: Set[str],
    snapshot: UserMetricsSnapshot,
    catalog: RuleCatalog,
) -> list[TransitionRecord]:
    """Compute the transitions that bring ``current_tags`` to the catalog's verdict."""
    transitions: list[TransitionRecord] = []
    user_id = snapshot.user_id

    for definition in catalog.list_definitions():
        acquires = definition.acquisition.is_satisfied(snapshot)

        if definition.id in current_tags:
            if _should_remove(definition, snapshot, acquires):
                transitions.append(TransitionRecord.remove(user_id, definition.id))
            continue

        if not acquires:
            continue
        if definition.removal is not None and definition.removal.is_satisfied(snapshot):
            logger.warning(
                "catalog.inconsistent",
                tag_id=definition.id,
                tag=definition.name,
                user_id=user_id,
                detail="acquisition and removal both satisfied; not added",
            )
            continue
        transitions.append(TransitionRecord.add(user_id, definition.id))

    return transitions


__all__ = ["evaluate"]
