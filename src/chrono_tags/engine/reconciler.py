"""
Reconciler: commit one user's transitions against persisted tag state.

Each transition is its own atomic unit (insert-or-ignore for Add,
delete-if-exists for Remove). The store reports whether a row actually
changed, and only those transitions are returned as committed, so applying
the same list twice commits nothing the second time.

Failure model:
    A storage error stops the user's remaining transitions and raises
    :class:`PersistenceFailure` carrying the transitions already committed.
    There is no rollback (each committed transition stands on its own) and
    no retry (that is the scheduler's call).

Tags:
    reconciler, idempotent, persistence, chrono-tags
"""

from __future__ import annotations

from collections.abc import Sequence

from chrono_tags.core.enums import TransitionKind
from chrono_tags.core.errors import PersistenceFailure
from chrono_tags.core.logging import get_logger
from chrono_tags.core.protocols import TagStore
from chrono_tags.engine.transitions import TransitionRecord

logger = get_logger(__name__)


class Reconciler:
    """Apply transitions through a :class:`TagStore`."""

    def __init__(self, store: TagStore):
        self.store = store

    async def apply(
        self, user_id: str, transitions: Sequence[TransitionRecord]
    ) -> list[TransitionRecord]:
        """Commit ``transitions`` for ``user_id``.

        Returns:
            The transitions that changed persisted state, in input order.

        Raises:
            PersistenceFailure: If a write fails; ``committed`` on the error
                lists what was applied before it.
            ValueError: If a transition belongs to another user.
        """
        committed: list[TransitionRecord] = []

        for transition in transitions:
            if transition.user_id != user_id:
                raise ValueError(
                    f"Transition for user {transition.user_id!r} passed to apply({user_id!r})"
                )
            try:
                if transition.kind is TransitionKind.ADD:
                    changed = await self.store.insert_assignment(user_id, transition.tag_id)
                else:
                    changed = await self.store.delete_assignment(user_id, transition.tag_id)
            except PersistenceFailure as exc:
                exc.committed = list(committed)
                exc.with_context(user_id=user_id, tag_id=transition.tag_id)
                raise
            except Exception as exc:
                raise PersistenceFailure(
                    f"Failed to {transition.kind.value} tag {transition.tag_id}",
                    committed=committed,
                    cause=exc,
                ).with_context(user_id=user_id, tag_id=transition.tag_id) from exc

            if changed:
                committed.append(transition)
            else:
                logger.debug(
                    "reconcile.noop",
                    user_id=user_id,
                    tag_id=transition.tag_id,
                    kind=transition.kind.value,
                )

        return committed


__all__ = ["Reconciler"]
