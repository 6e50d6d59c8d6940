# lighter/timers.py
"""
Timer back-ends for animation phases and deferred scrolling.

The engine only needs two operations: schedule a callback after a delay and
cancel a pending one. ``QtScheduler`` runs on the Qt event loop the way the
rest of a desktop app does; ``ManualScheduler`` is a virtual clock for
headless rendering and tests.
"""

import heapq
import itertools
from typing import Any, Callable, List, Optional, Tuple

from PySide6.QtCore import QTimer


class Scheduler:
    """Interface every timer back-end implements."""

    def call_later(self, delay_ms: float, fn: Callable[[], None]) -> Any:
        raise NotImplementedError

    def cancel(self, handle: Any) -> None:
        raise NotImplementedError


class QtScheduler(Scheduler):
    """
    Single-shot ``QTimer`` per callback.

    Requires a running ``QCoreApplication`` (or ``QApplication``) event loop
    for the callbacks to fire.
    """

    def __init__(self):
        self._timers = set()

    def call_later(self, delay_ms: float, fn: Callable[[], None]) -> QTimer:
        timer = QTimer()
        timer.setSingleShot(True)

        def fire():
            self._timers.discard(timer)
            fn()

        timer.timeout.connect(fire)
        # Keep a reference until it fires; Qt does not own a parentless QTimer.
        self._timers.add(timer)
        timer.start(max(0, int(delay_ms)))
        return timer

    def cancel(self, handle: Optional[QTimer]) -> None:
        if handle is None:
            return
        handle.stop()
        self._timers.discard(handle)

    @property
    def pending(self) -> int:
        return len(self._timers)


class ManualScheduler(Scheduler):
    """
    Virtual clock. Nothing fires until ``advance`` or ``run_pending`` is called.

    Callbacks due at the same time run in the order they were scheduled.
    """

    def __init__(self):
        self.now = 0.0
        self._queue: List[Tuple[float, int, Callable[[], None]]] = []
        self._cancelled = set()
        self._counter = itertools.count()

    def call_later(self, delay_ms: float, fn: Callable[[], None]) -> int:
        handle = next(self._counter)
        heapq.heappush(self._queue, (self.now + max(0.0, float(delay_ms)), handle, fn))
        return handle

    def cancel(self, handle: Optional[int]) -> None:
        if handle is not None:
            self._cancelled.add(handle)

    @property
    def pending(self) -> int:
        return sum(1 for _, handle, _ in self._queue if handle not in self._cancelled)

    def advance(self, ms: float) -> int:
        """Moves the clock forward by ``ms``, running every callback that becomes due."""
        deadline = self.now + ms
        fired = 0
        while self._queue and self._queue[0][0] <= deadline:
            due, handle, fn = heapq.heappop(self._queue)
            if handle in self._cancelled:
                self._cancelled.discard(handle)
                continue
            self.now = due
            fn()
            fired += 1
        self.now = deadline
        return fired

    def run_pending(self) -> int:
        """Runs callbacks that are already due without moving the clock."""
        return self.advance(0)
