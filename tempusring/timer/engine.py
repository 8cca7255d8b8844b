"""Timer state machine for Tempus Ring.

States
------
IDLE          Nothing running — waiting for ``start()``.
WORK          Work phase counting down.
SHORT_BREAK   Short break counting down.
LONG_BREAK    Long break counting down.
PAUSED        Frozen; the current session remembers which phase it was.

Transitions
-----------
IDLE → WORK                                  (start)
WORK | SHORT_BREAK | LONG_BREAK → PAUSED     (pause)
PAUSED → {phase of the paused session}       (resume, or start)
WORK → SHORT_BREAK | LONG_BREAK | IDLE       (remaining time reaches 0)
SHORT_BREAK | LONG_BREAK → WORK | IDLE       (remaining time reaches 0)
{running or paused} → IDLE                   (reset)

Commands called from a state where they have no effect return ``False``
and emit nothing.  The counters and the current session live in one
frozen record that is replaced on every transition, so a snapshot taken
at any point is internally consistent.
"""

from __future__ import annotations

import logging
import random
import string
import time
from dataclasses import dataclass, fields, replace
from datetime import datetime
from enum import Enum
from typing import Any, Callable

from .events import EventEmitter, Listener, StateChange, TimerEvent
from .scheduler import TICK_INTERVAL_MS, QtTickScheduler, TickHandle, TickScheduler

logger = logging.getLogger(__name__)


# ── enums ─────────────────────────────────────────────────────────────────


class TimerState(Enum):
    IDLE = "idle"
    WORK = "work"
    SHORT_BREAK = "short_break"
    LONG_BREAK = "long_break"
    PAUSED = "paused"


PHASE_STATES: frozenset[TimerState] = frozenset({
    TimerState.WORK,
    TimerState.SHORT_BREAK,
    TimerState.LONG_BREAK,
})


# ── constants ─────────────────────────────────────────────────────────────

DEFAULT_WORK_DURATION = 25 * 60
DEFAULT_SHORT_BREAK_DURATION = 5 * 60
DEFAULT_LONG_BREAK_DURATION = 15 * 60
DEFAULT_SESSIONS_UNTIL_LONG_BREAK = 4

_COUNT_FIELDS = (
    "work_duration",
    "short_break_duration",
    "long_break_duration",
    "sessions_until_long_break",
)
_FLAG_FIELDS = ("auto_start_breaks", "auto_start_pomodoros")

_ID_ALPHABET = string.ascii_lowercase + string.digits


class InvalidConfigError(ValueError):
    """A duration or session count that is not a positive integer."""


# ── value types ───────────────────────────────────────────────────────────


@dataclass(frozen=True)
class TimerConfig:
    """Durations are whole seconds."""

    work_duration: int = DEFAULT_WORK_DURATION
    short_break_duration: int = DEFAULT_SHORT_BREAK_DURATION
    long_break_duration: int = DEFAULT_LONG_BREAK_DURATION
    sessions_until_long_break: int = DEFAULT_SESSIONS_UNTIL_LONG_BREAK
    auto_start_breaks: bool = False
    auto_start_pomodoros: bool = False

    def __post_init__(self) -> None:
        for name in _COUNT_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidConfigError(f"{name} must be an integer, got {value!r}")
            if value <= 0:
                raise InvalidConfigError(f"{name} must be greater than zero, got {value}")
        for name in _FLAG_FIELDS:
            value = getattr(self, name)
            if not isinstance(value, bool):
                raise InvalidConfigError(f"{name} must be a bool, got {value!r}")

    def duration_for(self, state: TimerState) -> int:
        """Configured length of *state*; 0 for IDLE and PAUSED."""
        if state == TimerState.WORK:
            return self.work_duration
        if state == TimerState.SHORT_BREAK:
            return self.short_break_duration
        if state == TimerState.LONG_BREAK:
            return self.long_break_duration
        return 0

    def as_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class TimerSession:
    """One phase's execution.  ``type`` is always a phase state."""

    id: str
    start_time: datetime
    type: TimerState
    completed: bool = False
    end_time: datetime | None = None

    def finalize(self, end_time: datetime, completed: bool) -> TimerSession:
        return replace(self, end_time=end_time, completed=completed)


@dataclass(frozen=True)
class TimerData:
    """Read-model snapshot returned by :meth:`TimerCore.get_state`."""

    state: TimerState
    current_session: TimerSession | None
    remaining_time: int
    progress: float
    completed_sessions: int
    sessions_until_long_break: int


@dataclass(frozen=True)
class _Cycle:
    state: TimerState
    session: TimerSession | None
    remaining_time: int
    completed_sessions: int
    sessions_until_long_break: int


def generate_session_id() -> str:
    """``session-<epoch millis>-<9 random base-36 chars>``."""
    millis = int(time.time() * 1000)
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"session-{millis}-{suffix}"


# ── engine ────────────────────────────────────────────────────────────────


class TimerCore:
    """Pomodoro state machine driven by an external 1-second tick source.

    Events
    ------
    tick(TimerData)
        Every second while a phase runs, except the tick that completes it.
    stateChange(StateChange)
        Every transition, including into and out of PAUSED and IDLE.
    sessionStart(TimerSession)
        A new phase began (``start()`` or auto-continuation).
    sessionComplete(TimerSession)
        A phase ran to zero.  Never emitted for ``reset()``.
    pause() / resume() / reset()
        Successful transitions of those kinds.
    """

    def __init__(
        self,
        config: TimerConfig | None = None,
        *,
        scheduler: TickScheduler | None = None,
        clock: Callable[[], datetime] = datetime.now,
        id_factory: Callable[[], str] = generate_session_id,
    ) -> None:
        self._config: TimerConfig = config if config is not None else TimerConfig()
        self._scheduler: TickScheduler = (
            scheduler if scheduler is not None else QtTickScheduler()
        )
        self._clock = clock
        self._new_session_id = id_factory
        self._events = EventEmitter()

        self._cycle = _Cycle(
            state=TimerState.IDLE,
            session=None,
            remaining_time=0,
            completed_sessions=0,
            sessions_until_long_break=self._config.sessions_until_long_break,
        )
        self._last_finished: TimerSession | None = None
        self._tick_handle: TickHandle | None = None

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def state(self) -> TimerState:
        return self._cycle.state

    @property
    def current_session(self) -> TimerSession | None:
        return self._cycle.session

    @property
    def last_finished_session(self) -> TimerSession | None:
        """The most recently finalized session, completed or abandoned."""
        return self._last_finished

    @property
    def remaining_time(self) -> int:
        return self._cycle.remaining_time

    @property
    def completed_sessions(self) -> int:
        return self._cycle.completed_sessions

    @property
    def sessions_until_long_break(self) -> int:
        return self._cycle.sessions_until_long_break

    @property
    def progress(self) -> float:
        """0.0 → 1.0 through the current phase; 0.0 when idle."""
        session = self._cycle.session
        if self._cycle.state == TimerState.IDLE or session is None:
            return 0.0
        total = self._config.duration_for(session.type)
        if total <= 0:
            return 0.0
        elapsed = total - self._cycle.remaining_time
        return max(0.0, min(1.0, elapsed / total))

    @property
    def is_running(self) -> bool:
        """True when actively counting down (not IDLE, not PAUSED)."""
        return self._cycle.state in PHASE_STATES

    @property
    def is_ticking(self) -> bool:
        return self._tick_handle is not None

    def get_state(self) -> TimerData:
        cycle = self._cycle
        return TimerData(
            state=cycle.state,
            current_session=cycle.session,
            remaining_time=cycle.remaining_time,
            progress=self.progress,
            completed_sessions=cycle.completed_sessions,
            sessions_until_long_break=cycle.sessions_until_long_break,
        )

    def get_config(self) -> TimerConfig:
        return self._config

    def update_config(self, **changes: Any) -> TimerConfig:
        """Merge *changes* into the configuration.

        Raises :class:`InvalidConfigError` (stored config untouched) for
        non-positive durations or counts, ``TypeError`` for unknown keys.
        While IDLE a new ``sessions_until_long_break`` also resets the
        remaining-session counter; mid-cycle it only applies from the
        next long break on.
        """
        self._config = replace(self._config, **changes)
        if (
            "sessions_until_long_break" in changes
            and self._cycle.state == TimerState.IDLE
        ):
            self._cycle = replace(
                self._cycle,
                sessions_until_long_break=self._config.sessions_until_long_break,
            )
        logger.debug("Timer config updated: %s", changes)
        return self._config

    # ══════════════════════════════════════════════════════════════════
    #  LISTENERS
    # ══════════════════════════════════════════════════════════════════

    def on(self, event: TimerEvent, listener: Listener) -> None:
        self._events.on(event, listener)

    def off(self, event: TimerEvent, listener: Listener) -> None:
        self._events.off(event, listener)

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def start(self) -> bool:
        """Begin a work phase from IDLE, or resume from PAUSED."""
        if self._cycle.state == TimerState.PAUSED:
            return self.resume()
        if self._cycle.state != TimerState.IDLE:
            logger.debug("start() ignored in state %s", self._cycle.state.value)
            return False
        self._begin_phase(TimerState.WORK)
        return True

    def pause(self) -> bool:
        if self._cycle.state not in PHASE_STATES or self._phase_finished():
            logger.debug("pause() ignored in state %s", self._cycle.state.value)
            return False
        self._stop_ticks()
        previous = self._cycle.state
        self._cycle = replace(self._cycle, state=TimerState.PAUSED)
        logger.info("Timer paused: remaining=%ss", self._cycle.remaining_time)
        self._emit_state_change(previous, TimerState.PAUSED)
        self._events.emit(TimerEvent.PAUSE)
        return True

    def resume(self) -> bool:
        session = self._cycle.session
        if self._cycle.state != TimerState.PAUSED or session is None:
            logger.debug("resume() ignored in state %s", self._cycle.state.value)
            return False
        self._cycle = replace(self._cycle, state=session.type)
        self._start_ticks()
        logger.info("Timer resumed: phase=%s", session.type.value)
        self._emit_state_change(TimerState.PAUSED, session.type)
        self._events.emit(TimerEvent.RESUME)
        return True

    def reset(self) -> bool:
        """Abandon the current phase (not completed) and return to IDLE."""
        if self._cycle.state == TimerState.IDLE:
            logger.debug("reset() ignored in state idle")
            return False
        self._stop_ticks()
        previous = self._cycle.state
        session = self._cycle.session
        if session is not None and session.end_time is None:
            self._last_finished = session.finalize(self._clock(), completed=False)
        self._cycle = replace(
            self._cycle, state=TimerState.IDLE, session=None, remaining_time=0
        )
        logger.info("Timer reset from %s", previous.value)
        self._emit_state_change(previous, TimerState.IDLE)
        self._events.emit(TimerEvent.RESET)
        return True

    def destroy(self) -> None:
        """Cancel the tick handle and drop every listener."""
        self._stop_ticks()
        self._events.clear()

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL — timer mechanics
    # ══════════════════════════════════════════════════════════════════

    def _on_tick(self) -> None:
        if self._cycle.state not in PHASE_STATES or self._phase_finished():
            # A handle that outlived its phase; nothing to count down.
            return
        remaining = self._cycle.remaining_time - 1
        if remaining <= 0:
            self._cycle = replace(self._cycle, remaining_time=0)
            self._finish_phase()
            return
        self._cycle = replace(self._cycle, remaining_time=remaining)
        self._events.emit(TimerEvent.TICK, self.get_state())

    def _finish_phase(self) -> None:
        self._stop_ticks()
        phase = self._cycle.state
        finished = self._cycle.session.finalize(self._clock(), completed=True)
        self._last_finished = finished
        self._cycle = replace(self._cycle, session=finished)
        logger.info("Phase completed: %s (session %s)", phase.value, finished.id)
        self._events.emit(TimerEvent.SESSION_COMPLETE, finished)

        # Counters move after the event. A finished work phase counts even
        # if a listener reset() the timer.
        if phase == TimerState.WORK:
            until_long = self._cycle.sessions_until_long_break - 1
            long_break_due = until_long <= 0
            if long_break_due:
                until_long = self._config.sessions_until_long_break
            self._cycle = replace(
                self._cycle,
                completed_sessions=self._cycle.completed_sessions + 1,
                sessions_until_long_break=until_long,
            )
            next_phase = TimerState.LONG_BREAK if long_break_due else TimerState.SHORT_BREAK
            auto_start = self._config.auto_start_breaks
        else:
            next_phase = TimerState.WORK
            auto_start = self._config.auto_start_pomodoros

        if self._cycle.state != phase or self._cycle.session is not finished:
            # A listener already moved the machine on (e.g. reset()).
            return

        if auto_start:
            self._begin_phase(next_phase)
            return

        # No auto-start: the pending phase is dropped and the user starts
        # a fresh work phase from IDLE.
        self._cycle = replace(
            self._cycle, state=TimerState.IDLE, session=None, remaining_time=0
        )
        logger.info("Waiting for start; next phase would have been %s", next_phase.value)
        self._emit_state_change(phase, TimerState.IDLE)

    def _begin_phase(self, phase: TimerState) -> None:
        previous = self._cycle.state
        session = TimerSession(
            id=self._new_session_id(),
            start_time=self._clock(),
            type=phase,
        )
        self._cycle = replace(
            self._cycle,
            state=phase,
            session=session,
            remaining_time=self._config.duration_for(phase),
        )
        self._start_ticks()
        logger.info(
            "Timer started: phase=%s duration=%ss session=%s",
            phase.value,
            self._cycle.remaining_time,
            session.id,
        )
        self._emit_state_change(previous, phase)
        self._events.emit(TimerEvent.SESSION_START, session)

    def _phase_finished(self) -> bool:
        """True while the current phase is being completed."""
        session = self._cycle.session
        return session is not None and session.end_time is not None

    def _start_ticks(self) -> None:
        self._stop_ticks()
        self._tick_handle = self._scheduler.schedule(self._on_tick, TICK_INTERVAL_MS)

    def _stop_ticks(self) -> None:
        handle, self._tick_handle = self._tick_handle, None
        if handle is not None:
            handle.cancel()

    def _emit_state_change(self, from_state: TimerState, to_state: TimerState) -> None:
        self._events.emit(TimerEvent.STATE_CHANGE, StateChange(from_state, to_state))
