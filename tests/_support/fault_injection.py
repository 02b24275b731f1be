"""
Fault injection wrappers for deterministic per-user failures.

Usage in test code::

    from tests._support.fault_injection import FaultyTagStore

    store = FaultyTagStore(InMemoryTagStore())
    store.install_fault("u5", "insert")

Unlike a monkeypatched method, the wrapper keeps the real store behaviour
for every call that is not listed, so partial commits are observable.
"""

from __future__ import annotations

from dataclasses import dataclass

from chrono_tags.core.errors import PersistenceFailure
from chrono_tags.metrics.snapshot import UserMetricsSnapshot


@dataclass
class FaultSpec:
    """A fault to inject for one user and operation."""

    user_id: str
    operation: str
    message: str = "Injected test fault"
    driver_error: bool = False


class FaultInjectedError(Exception):
    """Stand-in for a raw driver error (not an engine error type)."""


class FaultyTagStore:
    """Delegate to ``inner`` except for installed (user, operation) faults.

    ``operation`` is ``list``, ``insert`` or ``delete``. An insert/delete
    fault can be narrowed to one tag with ``tag_id``.
    """

    def __init__(self, inner):
        self.inner = inner
        self._faults: dict[tuple[str, str, str | None], FaultSpec] = {}

    def install_fault(
        self,
        user_id: str,
        operation: str,
        *,
        tag_id: str | None = None,
        message: str = "Injected test fault",
        driver_error: bool = False,
    ) -> None:
        self._faults[(user_id, operation, tag_id)] = FaultSpec(
            user_id=user_id, operation=operation, message=message, driver_error=driver_error
        )

    def clear_faults(self) -> None:
        self._faults.clear()

    def _maybe_fail(self, user_id: str, operation: str, tag_id: str | None = None) -> None:
        spec = self._faults.get((user_id, operation, tag_id)) or self._faults.get(
            (user_id, operation, None)
        )
        if spec is None:
            return
        if spec.driver_error:
            raise FaultInjectedError(spec.message)
        raise PersistenceFailure(spec.message).with_context(user_id=user_id, tag_id=tag_id)

    async def list_assignments(self, user_id: str) -> set[str]:
        self._maybe_fail(user_id, "list")
        return await self.inner.list_assignments(user_id)

    async def insert_assignment(self, user_id: str, tag_id: str) -> bool:
        self._maybe_fail(user_id, "insert", tag_id)
        return await self.inner.insert_assignment(user_id, tag_id)

    async def delete_assignment(self, user_id: str, tag_id: str) -> bool:
        self._maybe_fail(user_id, "delete", tag_id)
        return await self.inner.delete_assignment(user_id, tag_id)


class ExplodingMetricsProvider:
    """Raises a non-engine exception for selected users (a bug, not an outage)."""

    def __init__(self, inner, explode_for: set[str]):
        self.inner = inner
        self.explode_for = explode_for

    async def get_snapshot(self, user_id: str) -> UserMetricsSnapshot:
        if user_id in self.explode_for:
            raise ZeroDivisionError("division by zero in metrics mapper")
        return await self.inner.get_snapshot(user_id)
