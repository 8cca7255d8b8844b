"""Timer package."""

from .engine import (
    TimerCore,
    TimerState,
    TimerConfig,
    TimerSession,
    TimerData,
    InvalidConfigError,
    PHASE_STATES,
    generate_session_id,
)
from .events import EventEmitter, StateChange, TimerEvent
from .scheduler import QtTickScheduler, TickHandle, TickScheduler, TICK_INTERVAL_MS

__all__ = [
    "TimerCore",
    "TimerState",
    "TimerConfig",
    "TimerSession",
    "TimerData",
    "InvalidConfigError",
    "PHASE_STATES",
    "generate_session_id",
    "EventEmitter",
    "StateChange",
    "TimerEvent",
    "QtTickScheduler",
    "TickHandle",
    "TickScheduler",
    "TICK_INTERVAL_MS",
]
