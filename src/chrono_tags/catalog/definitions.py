"""Immutable tag definitions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from chrono_tags.catalog.predicates import Predicate
from chrono_tags.core.enums import TagCategory, Visibility


@dataclass(frozen=True)
class TagDefinition:
    """One catalog entry.

    Attributes:
        id: Stable identifier, referenced by persisted assignments
        name: Display name
        category: Catalog grouping
        visibility: Who may see the tag
        acquisition: When the tag is added
        removal: Extra removal rule; ``None`` means the tag lapses when
            ``acquisition`` stops holding. A manual removal predicate
            means the tag is only ever removed administratively.
        notify_on_acquire: Emit a notification on a committed Add
        notify_on_remove: Emit a notification on a committed Remove
        description: Public description (data only, not rendered here)
        display_priority: Ordering hint for display consumers
    """

    id: str
    name: str
    category: TagCategory
    visibility: Visibility
    acquisition: Predicate
    removal: Predicate | None = None
    notify_on_acquire: bool = False
    notify_on_remove: bool = False
    description: str = ""
    display_priority: int = 0

    @property
    def manual_acquisition(self) -> bool:
        return self.acquisition.manual

    @property
    def manual_removal(self) -> bool:
        return self.removal is not None and self.removal.manual

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category.value,
            "visibility": self.visibility.value,
            "acquisition": self.acquisition.describe(),
            "removal": self.removal.describe() if self.removal else None,
            "notify_on_acquire": self.notify_on_acquire,
            "notify_on_remove": self.notify_on_remove,
            "display_priority": self.display_priority,
        }


__all__ = ["TagDefinition"]
