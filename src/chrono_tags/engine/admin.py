"""
Administrative grant and revoke.

The only path by which manual tags (``Verificado``, ``Advertido``) are
acquired, and by which tags with a manual removal rule are cleared. Writes
go through the same :class:`Reconciler` as scheduled runs, so granting a
tag the user already holds commits nothing and sends no notification.

Tags:
    admin, manual-tags, grant, revoke, chrono-tags
"""

from __future__ import annotations

from chrono_tags.catalog.catalog import RuleCatalog
from chrono_tags.core.logging import get_logger
from chrono_tags.engine.notifications import NotificationDispatcher
from chrono_tags.engine.reconciler import Reconciler
from chrono_tags.engine.transitions import TransitionRecord

logger = get_logger(__name__)


class TagAdministration:
    """Explicit, operator-initiated tag transitions."""

    def __init__(
        self,
        catalog: RuleCatalog,
        reconciler: Reconciler,
        dispatcher: NotificationDispatcher,
    ):
        self.catalog = catalog
        self.reconciler = reconciler
        self.dispatcher = dispatcher

    async def grant(self, user_id: str, tag_id: str) -> list[TransitionRecord]:
        """Add ``tag_id`` to ``user_id``.

        Raises:
            UnknownTagError: If the tag is not in the catalog.
            PersistenceFailure: If the write fails.
        """
        return await self._apply(TransitionRecord.add(user_id, tag_id))

    async def revoke(self, user_id: str, tag_id: str) -> list[TransitionRecord]:
        """Remove ``tag_id`` from ``user_id``.

        Raises:
            UnknownTagError: If the tag is not in the catalog.
            PersistenceFailure: If the write fails.
        """
        return await self._apply(TransitionRecord.remove(user_id, tag_id))

    async def _apply(self, transition: TransitionRecord) -> list[TransitionRecord]:
        definition = self.catalog.get(transition.tag_id)
        committed = await self.reconciler.apply(transition.user_id, [transition])
        self.dispatcher.dispatch(committed)
        logger.info(
            f"admin.{transition.kind.value}",
            user_id=transition.user_id,
            tag_id=definition.id,
            tag=definition.name,
            changed=bool(committed),
        )
        return committed


__all__ = ["TagAdministration"]
