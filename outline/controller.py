"""Optimistic reordering of one ordered sequence (one scope).

The controller keeps two copies of the sequence: the local working copy the
presentation layer renders, and the last order the item store confirmed.
Moves are applied to the local copy at once, persisted either after a quiet
period (auto-save) or on an explicit commit (manual reorder mode), and rolled
back to the confirmed order when the store rejects them.

Store failures never leave the controller: they end up as the ``error``
status and an error notification.
"""

from __future__ import annotations

import threading

from outline.config import ReorderSettings
from outline.errors import ReorderError, ReorderErrorType, friendly_message
from outline.input_sources import resolve_drag, resolve_key
from outline.models import ReorderSnapshot, ScopeKind, ids_of
from outline.moves import ReorderOperation, reconcile_order
from outline.notifications import Notifier
from outline.scheduling import ThreadingScheduler
from outline.status import ReorderStatus, StatusTracker
from utils.logging_utils import reorder_logger, log_debug, log_info, log_error, log_warning

LABELS = {
    ScopeKind.MODULES: "modules",
    ScopeKind.CHAPTERS: "chapters",
    ScopeKind.CONTENT: "content",
}


class ReorderController:
    def __init__(self, scope, store, items=(), scheduler=None, notifier=None, settings=None):
        self.scope = scope
        self.store = store
        self.settings = settings or ReorderSettings()
        self.scheduler = scheduler or ThreadingScheduler()
        self.notifier = notifier or Notifier()
        self.label = LABELS[scope.kind]

        self._lock = threading.RLock()
        self._local = list(items)
        self._original = list(items)
        self._pending_changes = False
        self._reorder_mode = False
        self._in_flight = False
        self._resave = False
        self._resave_manual = False
        self._deferred_refresh = None
        self._debounce_handle = None
        self._debounce_generation = 0
        self._listeners = []
        self._status = StatusTracker(self.scheduler, on_change=self._on_status_change,
                                     name=str(scope), lock=self._lock)

    # --- Read side ---

    @property
    def items(self):
        with self._lock:
            return tuple(self._local)

    @property
    def committed_items(self):
        with self._lock:
            return tuple(self._original)

    @property
    def status(self) -> ReorderStatus:
        return self._status.status

    @property
    def pending_changes(self) -> bool:
        return self._pending_changes

    @property
    def is_reorder_mode(self) -> bool:
        return self._reorder_mode

    @property
    def is_saving(self) -> bool:
        return self._in_flight

    def snapshot(self) -> ReorderSnapshot:
        with self._lock:
            return ReorderSnapshot(
                items=tuple(self._local),
                status=self._status.status,
                pending_changes=self._pending_changes,
                is_reorder_mode=self._reorder_mode,
            )

    def subscribe(self, listener):
        """Call ``listener(snapshot)`` after every state change. Returns an unsubscribe callable."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)
        return unsubscribe

    # --- Authoritative sequence ---

    def initialize(self, items) -> bool:
        """Take the order supplied by the store.

        While local edits are unsaved or a save is in flight the refresh is
        parked and applied once the controller is at rest. Returns False when
        the refresh was deferred.
        """
        items = list(items)
        with self._lock:
            if self._is_busy():
                self._deferred_refresh = items
                log_info(reorder_logger, "Refresh deferred until pending reorder settles",
                         scope=str(self.scope), pending_changes=self._pending_changes, saving=self._in_flight)
                return False
            self._deferred_refresh = None
            if items == self._local and items == self._original:
                return True
            self._local = list(items)
            self._original = list(items)
            self._emit()
            return True

    # --- Input ---

    def request_reorder(self, moved_item_id, from_index, to_index):
        """Apply a move to the local copy and schedule its persistence.

        No-op and invalid moves are ignored silently and return None.
        """
        with self._lock:
            operation = ReorderOperation.build(self._local, moved_item_id, from_index, to_index)
            if operation is None:
                log_debug(reorder_logger, "Ignored reorder request", scope=str(self.scope),
                          moved_item_id=moved_item_id, from_index=from_index, to_index=to_index)
                return None
            self._local = operation.apply(self._local)
            self._pending_changes = True
            if not self._reorder_mode:
                self._schedule_save()
            self._emit()
            return operation

    def handle_drag_end(self, event):
        with self._lock:
            resolved = resolve_drag(self._local, event)
            if resolved is None:
                return None
            return self.request_reorder(*resolved)

    def handle_key(self, item_id, command):
        with self._lock:
            resolved = resolve_key(self._local, item_id, command)
            if resolved is None:
                return None
            return self.request_reorder(*resolved)

    # --- Reorder mode ---

    def enter_manual_reorder_mode(self) -> None:
        with self._lock:
            if self._reorder_mode:
                return
            self._reorder_mode = True
            # Unsaved auto-mode moves join the manual batch
            self._cancel_debounce()
            self._emit()

    def exit_manual_reorder_mode(self) -> None:
        """Switch back to auto-save; unsaved moves go through the debounce."""
        with self._lock:
            if not self._reorder_mode:
                return
            self._reorder_mode = False
            if self._pending_changes and not self._in_flight:
                self._schedule_save()
            self._emit()

    def commit(self) -> bool:
        """Persist the local order now.

        Returns True when the store accepted it or there was nothing to save.
        A commit made while a save is in flight returns False and is sent
        once that save succeeds.
        """
        with self._lock:
            if not self._pending_changes:
                if self._reorder_mode:
                    self._reorder_mode = False
                    self._emit()
                return True
            manual = self._reorder_mode
        return self._save(manual)

    def cancel(self) -> bool:
        """Drop the manual batch and restore the confirmed order without calling the store."""
        with self._lock:
            if not self._reorder_mode or self._in_flight:
                return False
            self._cancel_debounce()
            self._local = list(self._original)
            self._pending_changes = False
            self._reorder_mode = False
            if self._status.status is not ReorderStatus.IDLE:
                self._status.set(ReorderStatus.IDLE)
            self._apply_deferred_refresh(reconcile=False)
            self._emit()
            return True

    def close(self) -> None:
        """Stop the debounce timer; an unsaved local order is left as is."""
        with self._lock:
            self._cancel_debounce()

    # --- Persistence ---

    def _schedule_save(self) -> None:
        self._cancel_debounce()
        generation = self._debounce_generation
        self._debounce_handle = self.scheduler.call_later(
            self.settings.debounce_delay, lambda: self._on_debounce(generation))

    def _cancel_debounce(self) -> None:
        self._debounce_generation += 1
        if self._debounce_handle is not None:
            self._debounce_handle.cancel()
            self._debounce_handle = None

    def _on_debounce(self, generation) -> None:
        with self._lock:
            if generation != self._debounce_generation:
                return
            self._debounce_handle = None
            if not self._pending_changes or self._reorder_mode:
                return
        self._save(manual=False)

    def _save(self, manual) -> bool:
        while True:
            with self._lock:
                if self._in_flight:
                    # Sent once the current request settles
                    self._resave = True
                    self._resave_manual = self._resave_manual or manual
                    return False
                if not manual and (self._reorder_mode or not self._pending_changes):
                    # Manual mode was entered after the debounce fired
                    return False
                self._cancel_debounce()
                order = list(self._local)
                self._in_flight = True
                self._status.set(ReorderStatus.PENDING)

            error = None
            try:
                self.store.reorder(self.scope, ids_of(order))
            except ReorderError as e:
                error = e
            except Exception as e:
                log_error(reorder_logger, "Unexpected item store failure", scope=str(self.scope),
                          error=str(e), error_type=type(e).__name__)
                error = ReorderError(str(e) or "Unexpected error", ReorderErrorType.UNKNOWN)

            with self._lock:
                self._in_flight = False
                if error is not None:
                    self._on_failed(error)
                    return False
                self._on_saved(order, manual)
                manual = self._resave_manual
                again = self._resave and self._pending_changes and (manual or not self._reorder_mode)
                self._resave = False
                self._resave_manual = False
                if not again:
                    return True

    def _on_saved(self, order, manual) -> None:
        self._original = list(order)
        if ids_of(self._local) == ids_of(order):
            self._pending_changes = False
        if manual:
            self._reorder_mode = False
            if self._pending_changes:
                self._schedule_save()
            self._status.set(ReorderStatus.SUCCESS, revert_after=self.settings.manual_success_display)
            self.notifier.success(f"{self.label.capitalize()} order updated")
        else:
            self._status.set(ReorderStatus.SUCCESS, revert_after=self.settings.success_display)
            log_info(reorder_logger, "Order saved", scope=str(self.scope), ordered_ids=ids_of(order))
        self._apply_deferred_refresh(reconcile=True)
        self._emit()

    def _on_failed(self, error) -> None:
        self._cancel_debounce()
        self._resave = False
        self._resave_manual = False
        self._local = list(self._original)
        self._pending_changes = False
        self._status.set(ReorderStatus.ERROR, revert_after=self.settings.error_display)
        log_warning(reorder_logger, "Reorder failed, local order rolled back", scope=str(self.scope),
                    error=error.message, error_type=error.error_type.value)
        self.notifier.error(f"Failed to reorder {self.label}, order reverted", friendly_message(error))
        self._apply_deferred_refresh(reconcile=False)
        self._emit()

    # --- Internals ---

    def _is_busy(self) -> bool:
        return self._pending_changes or self._in_flight

    def _apply_deferred_refresh(self, reconcile) -> None:
        if self._deferred_refresh is None or self._is_busy():
            return
        refresh, self._deferred_refresh = self._deferred_refresh, None
        items = reconcile_order(self._original, refresh) if reconcile else refresh
        self._local = list(items)
        self._original = list(items)
        log_info(reorder_logger, "Deferred refresh applied", scope=str(self.scope),
                 reconciled=reconcile, ordered_ids=ids_of(items))

    def _on_status_change(self, status) -> None:
        self._emit()

    def _emit(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                log_warning(reorder_logger, "Reorder listener failed", scope=str(self.scope), error=str(e))
