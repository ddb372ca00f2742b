"""Timer primitive used for the debounce and the status revert timers."""

from __future__ import annotations

import threading

from utils.logging_utils import reorder_logger, log_error


class TimerHandle:
    def __init__(self, timer: threading.Timer):
        self._timer = timer

    def cancel(self) -> None:
        self._timer.cancel()


class ThreadingScheduler:
    """Run callbacks after a delay on daemon timer threads.

    Anything exposing ``call_later(delay, callback) -> handle`` with a
    ``handle.cancel()`` can stand in for it.
    """

    def call_later(self, delay: float, callback) -> TimerHandle:
        timer = threading.Timer(delay, self._run, args=(callback,))
        timer.daemon = True
        timer.start()
        return TimerHandle(timer)

    @staticmethod
    def _run(callback) -> None:
        try:
            callback()
        except Exception as e:
            # Nothing above a timer thread can handle it
            log_error(reorder_logger, "Scheduled callback failed", error=str(e), error_type=type(e).__name__)
