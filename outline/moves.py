"""Array-move permutations over ordered sequences.

Every helper returns a new list; the input sequence is never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, TypeVar

T = TypeVar("T")


def is_valid_move(items: Sequence, from_index: int, to_index: int) -> bool:
    """True when both indices address the sequence and differ."""
    for index in (from_index, to_index):
        if isinstance(index, bool) or not isinstance(index, int):
            return False
        if not 0 <= index < len(items):
            return False
    return from_index != to_index


def move_item(items: Sequence[T], from_index: int, to_index: int) -> list[T]:
    """Remove the item at ``from_index`` and reinsert it at ``to_index``.

    Items between the two positions shift by one slot. Invalid or equal
    indices return an unchanged copy.
    """
    result = list(items)
    if not is_valid_move(result, from_index, to_index):
        return result
    result.insert(to_index, result.pop(from_index))
    return result


@dataclass(frozen=True)
class ReorderOperation:
    """A requested transition from one permutation of a scope to another."""

    moved_item_id: int
    from_index: int
    to_index: int
    ordered_ids: tuple[int, ...]

    @classmethod
    def build(cls, items: Sequence, moved_item_id: int, from_index: int, to_index: int) -> ReorderOperation | None:
        """Return the operation, or ``None`` for a no-op or invalid request."""
        if not is_valid_move(items, from_index, to_index):
            return None
        if items[from_index].id != moved_item_id:
            return None
        moved = move_item(items, from_index, to_index)
        return cls(moved_item_id, from_index, to_index, tuple(item.id for item in moved))

    def apply(self, items: Sequence[T]) -> list[T]:
        return move_item(items, self.from_index, self.to_index)


def reconcile_order(committed: Sequence[T], incoming: Sequence[T]) -> list[T]:
    """Merge a refreshed sequence into a just-committed order.

    Items present in both keep the committed order and take the refreshed
    payload; items only in ``incoming`` are appended in their refreshed
    order; items missing from ``incoming`` are dropped.
    """
    fresh = {item.id: item for item in incoming}
    merged = [fresh[item.id] for item in committed if item.id in fresh]
    kept = {item.id for item in merged}
    merged.extend(item for item in incoming if item.id not in kept)
    return merged
