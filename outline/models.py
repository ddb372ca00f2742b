from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ScopeKind(Enum):
    MODULES = "modules"  # modules of a course
    CHAPTERS = "chapters"  # chapters of a module
    CONTENT = "content"  # content items of a chapter


@dataclass(frozen=True)
class Scope:
    """The parent owning one independently ordered sequence."""

    kind: ScopeKind
    parent_id: int

    def __str__(self) -> str:
        return f"{self.kind.value}:{self.parent_id}"


@dataclass(frozen=True)
class OrderedItem:
    """A module, chapter or content item. Its position is its index in the sequence."""

    id: int
    title: str = ""
    description: str | None = None
    data: dict[str, Any] = field(default_factory=dict, hash=False)

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> OrderedItem:
        extra = {k: v for k, v in row.items() if k not in ("id", "title", "description")}
        return cls(
            id=int(row["id"]),
            title=row.get("title") or "",
            description=row.get("description"),
            data=extra,
        )


@dataclass(frozen=True)
class ReorderSnapshot:
    """Read-only view of a controller handed to the presentation layer."""

    items: tuple[OrderedItem, ...]
    status: Any
    pending_changes: bool
    is_reorder_mode: bool

    @property
    def item_ids(self) -> list[int]:
        return ids_of(self.items)


def ids_of(items) -> list[int]:
    return [item.id for item in items]
