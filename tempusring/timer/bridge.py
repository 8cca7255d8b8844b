"""Qt signal bridge for :class:`TimerCore`.

Widgets connect to ``pyqtSignal``s; the core speaks plain listeners.
``TimerSignals`` registers one listener per event and re-emits it as a
signal, so UI code can keep writing ``signals.tick.connect(slot)``.
"""

from __future__ import annotations

from PyQt6.QtCore import QObject, pyqtSignal

from .engine import TimerCore
from .events import StateChange, TimerEvent


class TimerSignals(QObject):
    """Signals
    -------
    tick(data: TimerData)
    state_changed(from_state: TimerState, to_state: TimerState)
    session_started(session: TimerSession)
    session_completed(session: TimerSession)
    paused()
    resumed()
    reset()
    """

    tick = pyqtSignal(object)
    state_changed = pyqtSignal(object, object)
    session_started = pyqtSignal(object)
    session_completed = pyqtSignal(object)
    paused = pyqtSignal()
    resumed = pyqtSignal()
    reset = pyqtSignal()

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._core: TimerCore | None = None
        self._listeners = {
            TimerEvent.TICK: self.tick.emit,
            TimerEvent.STATE_CHANGE: self._relay_state_change,
            TimerEvent.SESSION_START: self.session_started.emit,
            TimerEvent.SESSION_COMPLETE: self.session_completed.emit,
            TimerEvent.PAUSE: self.paused.emit,
            TimerEvent.RESUME: self.resumed.emit,
            TimerEvent.RESET: self.reset.emit,
        }

    @property
    def core(self) -> TimerCore | None:
        return self._core

    def attach(self, core: TimerCore) -> None:
        """Start relaying *core*'s events.  Detaches from any previous core."""
        self.detach()
        for event, listener in self._listeners.items():
            core.on(event, listener)
        self._core = core

    def detach(self) -> None:
        if self._core is None:
            return
        for event, listener in self._listeners.items():
            self._core.off(event, listener)
        self._core = None

    def _relay_state_change(self, change: StateChange) -> None:
        self.state_changed.emit(change.from_state, change.to_state)
