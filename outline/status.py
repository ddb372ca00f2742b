from __future__ import annotations

from contextlib import nullcontext
from enum import Enum

from utils.logging_utils import reorder_logger, log_debug


class ReorderStatus(Enum):
    IDLE = "idle"
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"


ALLOWED_TRANSITIONS = {
    ReorderStatus.IDLE: {ReorderStatus.PENDING},
    ReorderStatus.PENDING: {ReorderStatus.SUCCESS, ReorderStatus.ERROR},
    ReorderStatus.SUCCESS: {ReorderStatus.IDLE, ReorderStatus.PENDING},
    ReorderStatus.ERROR: {ReorderStatus.IDLE, ReorderStatus.PENDING},
}


class InvalidStatusTransition(RuntimeError):
    pass


class StatusTracker:
    """Owns a ReorderStatus and its timed reversion to idle."""

    def __init__(self, scheduler, on_change=None, name: str = "", lock=None):
        self._scheduler = scheduler
        self._lock = lock if lock is not None else nullcontext()
        self._on_change = on_change
        self._revert_handle = None
        self._generation = 0
        self.name = name
        self.status = ReorderStatus.IDLE

    def set(self, status: ReorderStatus, revert_after: float | None = None) -> None:
        if status is not self.status and status not in ALLOWED_TRANSITIONS[self.status]:
            raise InvalidStatusTransition(f"{self.status.value} -> {status.value}")
        self._cancel_revert()
        self._generation += 1
        previous, self.status = self.status, status
        log_debug(reorder_logger, "Status changed", scope=self.name, previous=previous.value, status=status.value)
        if revert_after is not None:
            generation = self._generation
            self._revert_handle = self._scheduler.call_later(revert_after, lambda: self._revert(generation))
        if self._on_change is not None and previous is not status:
            self._on_change(status)

    def _revert(self, generation: int) -> None:
        with self._lock:
            # A timer that lost the race against a newer status is stale
            if generation != self._generation:
                return
            self._revert_handle = None
            if self.status in (ReorderStatus.SUCCESS, ReorderStatus.ERROR):
                self.set(ReorderStatus.IDLE)

    def _cancel_revert(self) -> None:
        if self._revert_handle is not None:
            self._revert_handle.cancel()
            self._revert_handle = None


def status_label(status: ReorderStatus, pending_changes: bool, manual: bool) -> str:
    """Text for the save button (manual mode) or the status badge (auto-save)."""
    if manual:
        return {
            ReorderStatus.PENDING: "Saving...",
            ReorderStatus.SUCCESS: "Saved!",
            ReorderStatus.ERROR: "Error - Retry",
        }.get(status, "Save changes" if pending_changes else "No changes")
    return {
        ReorderStatus.PENDING: "Saving...",
        ReorderStatus.SUCCESS: "Order saved",
        ReorderStatus.ERROR: "Save failed",
    }.get(status, "")
