"""Transition records produced by the evaluator and committed by the reconciler."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from chrono_tags.core.enums import TransitionKind


@dataclass(frozen=True)
class TransitionRecord:
    """A proposed Add or Remove of one tag for one user."""

    user_id: str
    tag_id: str
    kind: TransitionKind

    @classmethod
    def add(cls, user_id: str, tag_id: str) -> TransitionRecord:
        return cls(user_id, tag_id, TransitionKind.ADD)

    @classmethod
    def remove(cls, user_id: str, tag_id: str) -> TransitionRecord:
        return cls(user_id, tag_id, TransitionKind.REMOVE)

    def to_dict(self) -> dict[str, Any]:
        return {"user_id": self.user_id, "tag_id": self.tag_id, "kind": self.kind.value}


__all__ = ["TransitionRecord"]
