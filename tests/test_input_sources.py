import pytest

from conftest import items
from outline.input_sources import DragEndEvent, interpret_key_command, resolve_drag, resolve_key


def test_drag_resolves_indices_from_current_positions() -> None:
    assert resolve_drag(items(1, 2, 3), DragEndEvent(3, 1)) == (3, 2, 0)
    assert resolve_drag(items(1, 2, 3), DragEndEvent(1, 3)) == (1, 0, 2)


@pytest.mark.parametrize("event", [None, DragEndEvent(1, None), DragEndEvent(2, 2), DragEndEvent(9, 1), DragEndEvent(1, 9)])
def test_drag_without_valid_target_yields_nothing(event) -> None:
    assert resolve_drag(items(1, 2, 3), event) is None


@pytest.mark.parametrize(
    "command, verb",
    [("ArrowUp", "up"), ("down", "down"), ("Ctrl+Home", "top"), ("end", "bottom"), ("tab", "")],
)
def test_interpret_key_command(command, verb) -> None:
    assert interpret_key_command(command) == verb


def test_keyboard_moves() -> None:
    sequence = items(1, 2, 3, 4)
    assert resolve_key(sequence, 2, "up") == (2, 1, 0)
    assert resolve_key(sequence, 2, "down") == (2, 1, 2)
    assert resolve_key(sequence, 3, "home") == (3, 2, 0)
    assert resolve_key(sequence, 1, "bottom") == (1, 0, 3)


def test_keyboard_moves_at_the_edges_are_ignored() -> None:
    sequence = items(1, 2, 3)
    assert resolve_key(sequence, 1, "up") is None
    assert resolve_key(sequence, 3, "end") is None
    assert resolve_key(sequence, 7, "up") is None
    assert resolve_key(sequence, 2, "space") is None
