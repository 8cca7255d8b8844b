"""Outbound event names and the listener registry used by ``TimerCore``.

Emission is synchronous.  A listener that raises is logged and skipped;
it never reaches the command that triggered the emission and never stops
the remaining listeners from being called.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, NamedTuple

if TYPE_CHECKING:
    from .engine import TimerState

logger = logging.getLogger(__name__)

Listener = Callable[..., None]


class TimerEvent(Enum):
    TICK = "tick"
    STATE_CHANGE = "stateChange"
    SESSION_START = "sessionStart"
    SESSION_COMPLETE = "sessionComplete"
    PAUSE = "pause"
    RESUME = "resume"
    RESET = "reset"


# Events that carry no payload; their listeners are called with no arguments.
PAYLOADLESS_EVENTS = frozenset({TimerEvent.PAUSE, TimerEvent.RESUME, TimerEvent.RESET})


class StateChange(NamedTuple):
    """Payload of ``stateChange``."""

    from_state: TimerState
    to_state: TimerState


class EventEmitter:
    """One ordered listener list per :class:`TimerEvent`."""

    def __init__(self) -> None:
        self._listeners: dict[TimerEvent, list[Listener]] = {}

    def on(self, event: TimerEvent, listener: Listener) -> None:
        self._listeners.setdefault(TimerEvent(event), []).append(listener)

    def off(self, event: TimerEvent, listener: Listener) -> None:
        """Remove the first registration of *listener*; unknown ones are ignored."""
        listeners = self._listeners.get(TimerEvent(event))
        if not listeners:
            return
        try:
            listeners.remove(listener)
        except ValueError:
            pass

    def listener_count(self, event: TimerEvent) -> int:
        return len(self._listeners.get(TimerEvent(event), ()))

    def clear(self) -> None:
        self._listeners.clear()

    def emit(self, event: TimerEvent, payload: Any = None) -> None:
        event = TimerEvent(event)
        # Snapshot so listeners may (un)register while we iterate.
        for listener in list(self._listeners.get(event, ())):
            try:
                if event in PAYLOADLESS_EVENTS:
                    listener()
                else:
                    listener(payload)
            except Exception:
                logger.exception(
                    "Listener %r failed while handling %s", listener, event.value
                )
