"""Input sources that yield reordering intents.

A drag gesture and the keyboard fallback both resolve to the same
``(moved_id, from_index, to_index)`` triple, looked up against the
controller's current working copy.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence


@dataclass(frozen=True)
class DragEndEvent:
    active_id: int
    over_id: int | None = None  # None when dropped outside any target


def _index_of(items: Sequence, item_id) -> int:
    for index, item in enumerate(items):
        if item.id == item_id:
            return index
    return -1


def resolve_drag(items: Sequence, event: DragEndEvent | None) -> tuple[int, int, int] | None:
    if event is None or event.over_id is None or event.active_id == event.over_id:
        return None
    from_index = _index_of(items, event.active_id)
    to_index = _index_of(items, event.over_id)
    if from_index == -1 or to_index == -1:
        return None
    return event.active_id, from_index, to_index


def interpret_key_command(command: str) -> str:
    """Map an abstract key command to one of: up, down, top, bottom.

    Unknown commands return an empty string.
    """
    cmd = command.strip().lower()
    if cmd in {"up", "arrowup"}:
        return "up"
    if cmd in {"down", "arrowdown"}:
        return "down"
    if cmd in {"home", "ctrl+home", "top"}:
        return "top"
    if cmd in {"end", "ctrl+end", "bottom"}:
        return "bottom"
    return ""


def resolve_key(items: Sequence, item_id: int, command: str) -> tuple[int, int, int] | None:
    verb = interpret_key_command(command)
    from_index = _index_of(items, item_id)
    if not verb or from_index == -1:
        return None
    last = len(items) - 1
    to_index = {
        "up": max(from_index - 1, 0),
        "down": min(from_index + 1, last),
        "top": 0,
        "bottom": last,
    }[verb]
    if to_index == from_index:
        return None
    return item_id, from_index, to_index
