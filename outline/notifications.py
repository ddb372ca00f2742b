from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime

from utils.logging_utils import reorder_logger, log_info, log_warning


@dataclass(frozen=True)
class Notification:
    level: str  # "success" or "error"
    message: str
    description: str | None = None
    created_at: datetime = field(default_factory=datetime.now)


class Notifier:
    """Transient, non-blocking notifications shown next to the outline.

    Listeners are called synchronously; a listener raising is logged and
    skipped so one broken view does not stop the others.
    """

    def __init__(self, max_history: int = 50):
        self.history: deque[Notification] = deque(maxlen=max_history)
        self._listeners = []
        self._lock = threading.Lock()

    def subscribe(self, listener):
        """Returns an unsubscribe callable; calling it again is a no-op."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)
        return unsubscribe

    def success(self, message: str) -> Notification:
        log_info(reorder_logger, message)
        return self._push(Notification("success", message))

    def error(self, message: str, description: str | None = None) -> Notification:
        log_warning(reorder_logger, message, description=description)
        return self._push(Notification("error", message, description))

    def _push(self, notification: Notification) -> Notification:
        with self._lock:
            self.history.append(notification)
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(notification)
            except Exception as e:
                log_warning(reorder_logger, "Notification listener failed", error=str(e))
        return notification
