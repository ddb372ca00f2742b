from __future__ import annotations

import heapq
import itertools
import json
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from outline.errors import ReorderError, ReorderErrorType  # noqa: E402
from outline.models import OrderedItem, Scope, ScopeKind  # noqa: E402
from outline.notifications import Notifier  # noqa: E402


class ManualHandle:
    def __init__(self) -> None:
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Deterministic stand-in for ThreadingScheduler driven by ``advance``."""

    def __init__(self) -> None:
        self.now = 0.0
        self._tasks: list = []
        self._seq = itertools.count()

    def call_later(self, delay, callback) -> ManualHandle:
        handle = ManualHandle()
        heapq.heappush(self._tasks, (self.now + delay, next(self._seq), callback, handle))
        return handle

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while self._tasks and self._tasks[0][0] <= target + 1e-9:
            due, _, callback, handle = heapq.heappop(self._tasks)
            self.now = max(self.now, due)
            if not handle.cancelled:
                callback()
        self.now = max(self.now, target)

    @property
    def pending(self) -> int:
        return sum(1 for task in self._tasks if not task[3].cancelled)


class FakeStore:
    """In-memory item store recording every call."""

    def __init__(self) -> None:
        self.sequences: dict[Scope, list[OrderedItem]] = {}
        self.calls: list[tuple[Scope, list[int]]] = []
        self.failing: set[Scope] = set()
        self.fail_fetch = False
        self.on_reorder = None

    def seed(self, scope: Scope, ids: list[int]) -> list[OrderedItem]:
        self.sequences[scope] = [OrderedItem(i, f"{scope.kind.value}-{i}") for i in ids]
        return list(self.sequences[scope])

    def reorder(self, scope: Scope, ordered_ids: list[int]) -> None:
        self.calls.append((scope, list(ordered_ids)))
        hook, self.on_reorder = self.on_reorder, None
        if hook is not None:
            hook()
        if scope in self.failing:
            raise ReorderError("Database error", ReorderErrorType.SERVER, status_code=500)
        current = {item.id: item for item in self.sequences.get(scope, [])}
        if current and set(current) != set(ordered_ids):
            raise ReorderError("Item ids do not match the current sequence", ReorderErrorType.VALIDATION,
                               status_code=400)
        self.sequences[scope] = [current.get(i, OrderedItem(i)) for i in ordered_ids]

    def fetch(self, scope: Scope) -> list[OrderedItem]:
        if self.fail_fetch:
            raise ReorderError("Connection error", ReorderErrorType.NETWORK)
        if scope not in self.sequences:
            raise ReorderError("Not found", ReorderErrorType.NOT_FOUND, status_code=404)
        return list(self.sequences[scope])

    def move_chapter(self, chapter_id: int, target_module_id: int, target_index: int | None = None) -> dict:
        target_scope = Scope(ScopeKind.CHAPTERS, target_module_id)
        if target_scope not in self.sequences:
            raise ReorderError("Target module not found", ReorderErrorType.NOT_FOUND, status_code=404)
        moved = None
        for scope, items in self.sequences.items():
            if scope.kind is ScopeKind.CHAPTERS and any(item.id == chapter_id for item in items):
                moved = next(item for item in items if item.id == chapter_id)
                self.sequences[scope] = [item for item in items if item.id != chapter_id]
                break
        if moved is None:
            raise ReorderError("Chapter not found", ReorderErrorType.NOT_FOUND, status_code=404)
        target = self.sequences[target_scope]
        position = len(target) if target_index is None else min(target_index, len(target))
        target.insert(position, moved)
        return {"id": chapter_id, "module_id": target_module_id, "order_index": position}


class FlaskResponse:
    def __init__(self, response) -> None:
        self.status_code = response.status_code
        self._data = response.get_data(as_text=True)

    def json(self):
        return json.loads(self._data)


class FlaskSession:
    """Routes ApiItemStore requests into a Flask test client."""

    def __init__(self, client) -> None:
        self.client = client

    def request(self, method, url, json=None, timeout=None) -> FlaskResponse:
        path = url.split("://", 1)[-1]
        path = path[path.index("/"):]
        return FlaskResponse(self.client.open(path, method=method, json=json))


def items(*ids: int) -> list[OrderedItem]:
    return [OrderedItem(i, f"item-{i}") for i in ids]


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def notifier() -> Notifier:
    return Notifier()


def seed_outline(cursor) -> None:
    cursor.execute("INSERT INTO courses (id, title) VALUES (1, 'Web Development')")
    cursor.execute("INSERT INTO courses (id, title) VALUES (2, 'Graphic Design')")
    for module_id, course_id, index in ((10, 1, 0), (11, 1, 1), (12, 1, 2), (20, 2, 0)):
        cursor.execute(
            "INSERT INTO modules (id, course_id, title, order_index) VALUES (?, ?, ?, ?)",
            (module_id, course_id, f"Module {module_id}", index)
        )
    for chapter_id, module_id, index in ((100, 10, 0), (101, 10, 1), (102, 10, 2), (110, 11, 0), (200, 20, 0)):
        cursor.execute(
            "INSERT INTO chapters (id, module_id, title, order_index) VALUES (?, ?, ?, ?)",
            (chapter_id, module_id, f"Chapter {chapter_id}", index)
        )
    for item_id, chapter_id, index in ((1000, 100, 0), (1001, 100, 1), (1002, 100, 2), (1010, 101, 0), (1011, 101, 1)):
        cursor.execute(
            "INSERT INTO content_items (id, chapter_id, title, content_type, content_data, order_index) "
            "VALUES (?, ?, ?, 'text', ?, ?)",
            (item_id, chapter_id, f"Item {item_id}", json.dumps({"body": f"text {item_id}"}), index)
        )


@pytest.fixture
def app(tmp_path):
    from app import create_app
    from utils.db_utils import db_manager, get_db_cursor
    from utils.rate_limiter import rate_limiter

    flask_app = create_app(db_path=str(tmp_path / "outline.db"), testing=True)
    with get_db_cursor() as (conn, cursor):
        seed_outline(cursor)
    rate_limiter.reset()
    yield flask_app
    rate_limiter.reset()
    db_manager.close_all_connections()


@pytest.fixture
def client(app):
    return app.test_client()
