"""Tests for the listener registry: ordering, removal, and isolation."""

import logging

from tempusring.timer.engine import TimerState
from tempusring.timer.events import EventEmitter, StateChange, TimerEvent

from helpers import SignalCollector


class TestEventEmitter:

    def test_listeners_called_in_registration_order(self):
        emitter = EventEmitter()
        order = []
        emitter.on(TimerEvent.TICK, lambda data: order.append("first"))
        emitter.on(TimerEvent.TICK, lambda data: order.append("second"))
        emitter.emit(TimerEvent.TICK, object())
        assert order == ["first", "second"]

    def test_payload_delivered(self):
        emitter = EventEmitter()
        c = SignalCollector()
        emitter.on(TimerEvent.STATE_CHANGE, c)
        emitter.emit(TimerEvent.STATE_CHANGE, StateChange("idle", "work"))
        assert c.last == StateChange("idle", "work")

    def test_payloadless_events_call_without_arguments(self):
        emitter = EventEmitter()
        calls = []
        emitter.on(TimerEvent.RESET, lambda: calls.append("reset"))
        emitter.emit(TimerEvent.RESET)
        assert calls == ["reset"]

    def test_other_events_not_notified(self):
        emitter = EventEmitter()
        c = SignalCollector()
        emitter.on(TimerEvent.PAUSE, c)
        emitter.emit(TimerEvent.RESUME)
        assert len(c) == 0

    def test_event_accepts_string_name(self):
        emitter = EventEmitter()
        c = SignalCollector()
        emitter.on("sessionStart", c)
        emitter.emit(TimerEvent.SESSION_START, "payload")
        assert c.last == "payload"
        assert emitter.listener_count("sessionStart") == 1

    def test_off_removes_one_registration(self):
        emitter = EventEmitter()
        c = SignalCollector()
        emitter.on(TimerEvent.TICK, c)
        emitter.on(TimerEvent.TICK, c)
        emitter.off(TimerEvent.TICK, c)
        emitter.emit(TimerEvent.TICK, 1)
        assert c.items == [1]

    def test_off_unknown_listener_is_ignored(self):
        emitter = EventEmitter()
        emitter.off(TimerEvent.TICK, lambda data: None)
        emitter.on(TimerEvent.TICK, lambda data: None)
        emitter.off(TimerEvent.TICK, lambda data: None)
        assert emitter.listener_count(TimerEvent.TICK) == 1

    def test_clear(self):
        emitter = EventEmitter()
        emitter.on(TimerEvent.TICK, lambda data: None)
        emitter.clear()
        assert emitter.listener_count(TimerEvent.TICK) == 0

    def test_failing_listener_logged_and_skipped(self, caplog):
        emitter = EventEmitter()
        c = SignalCollector()

        def broken(data):
            raise KeyError("nope")

        emitter.on(TimerEvent.TICK, broken)
        emitter.on(TimerEvent.TICK, c)

        with caplog.at_level(logging.ERROR, logger="tempusring.timer.events"):
            emitter.emit(TimerEvent.TICK, 5)

        assert c.items == [5]
        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert len(errors) == 1
        assert errors[0].exc_info is not None
        assert "tick" in errors[0].getMessage()

    def test_listener_may_unsubscribe_during_emit(self):
        emitter = EventEmitter()
        c = SignalCollector()

        def once(data):
            emitter.off(TimerEvent.TICK, once)

        emitter.on(TimerEvent.TICK, once)
        emitter.on(TimerEvent.TICK, c)
        emitter.emit(TimerEvent.TICK, 1)
        emitter.emit(TimerEvent.TICK, 2)

        assert c.items == [1, 2]
        assert emitter.listener_count(TimerEvent.TICK) == 1

    def test_emit_accepts_string_name(self):
        emitter = EventEmitter()
        c = SignalCollector()
        emitter.on(TimerEvent.TICK, c)
        emitter.emit("tick", 3)
        assert c.items == [3]

    def test_state_change_fields(self):
        change = StateChange(TimerState.IDLE, TimerState.WORK)
        assert change.from_state is TimerState.IDLE
        assert change.to_state is TimerState.WORK
