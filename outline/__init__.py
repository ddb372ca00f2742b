"""Optimistic drag-and-drop ordering of course modules, chapters and content items."""

from outline.controller import ReorderController
from outline.editor import CourseOutlineEditor
from outline.errors import ReorderError, ReorderErrorType
from outline.input_sources import DragEndEvent
from outline.models import OrderedItem, ReorderSnapshot, Scope, ScopeKind
from outline.status import ReorderStatus
from outline.store import ApiItemStore

__all__ = [
    "ApiItemStore",
    "CourseOutlineEditor",
    "DragEndEvent",
    "OrderedItem",
    "ReorderController",
    "ReorderError",
    "ReorderErrorType",
    "ReorderSnapshot",
    "ReorderStatus",
    "Scope",
    "ScopeKind",
]
