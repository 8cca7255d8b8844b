"""Periodic tick sources.

``TimerCore`` never owns a clock loop.  It asks a :class:`TickScheduler`
for a handle that fires a callback every *interval_ms* and cancels that
handle when ticking must stop.  :class:`QtTickScheduler` is the
production implementation, backed by ``QTimer``; tests substitute a
manual scheduler they can fire by hand.
"""

from __future__ import annotations

from typing import Callable, Protocol

from PyQt6.QtCore import QObject, QTimer

TICK_INTERVAL_MS = 1000


class TickHandle(Protocol):
    def cancel(self) -> None:
        """Stop firing.  Calling it more than once is harmless."""


class TickScheduler(Protocol):
    def schedule(self, callback: Callable[[], None], interval_ms: int) -> TickHandle:
        ...


class QtTickHandle:
    """A running ``QTimer`` bound to one callback."""

    def __init__(self, timer: QTimer) -> None:
        self._timer: QTimer | None = timer

    @property
    def active(self) -> bool:
        return self._timer is not None and self._timer.isActive()

    def cancel(self) -> None:
        if self._timer is None:
            return
        self._timer.stop()
        self._timer.deleteLater()
        self._timer = None


class QtTickScheduler:
    """Hands out ``QTimer``-backed tick handles.

    Needs a running Qt event loop (``QCoreApplication`` is enough) for the
    callbacks to actually fire.
    """

    def __init__(self, parent: QObject | None = None) -> None:
        self._parent = parent

    def schedule(
        self, callback: Callable[[], None], interval_ms: int = TICK_INTERVAL_MS
    ) -> QtTickHandle:
        timer = QTimer(self._parent)
        timer.setInterval(interval_ms)
        timer.timeout.connect(callback)
        timer.start()
        return QtTickHandle(timer)
