"""Shared test helpers for Tempus Ring."""

from datetime import datetime, timedelta

from tempusring.timer.engine import TimerCore


class SignalCollector:
    """Utility to capture listener / pyqtSignal payloads into a list."""

    def __init__(self):
        self.items: list = []

    def slot(self, *args):
        self.items.append(args if len(args) > 1 else args[0] if args else None)

    def __call__(self, *args):
        self.slot(*args)

    def __len__(self):
        return len(self.items)

    def __getitem__(self, idx):
        return self.items[idx]

    @property
    def last(self):
        return self.items[-1] if self.items else None

    def clear(self):
        self.items.clear()


class ManualHandle:
    def __init__(self, callback, interval_ms):
        self.callback = callback
        self.interval_ms = interval_ms
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ManualScheduler:
    """Tick source fired by hand.  Keeps every handle it ever issued."""

    def __init__(self):
        self.handles: list[ManualHandle] = []

    def schedule(self, callback, interval_ms):
        handle = ManualHandle(callback, interval_ms)
        self.handles.append(handle)
        return handle

    @property
    def live(self) -> list[ManualHandle]:
        return [h for h in self.handles if not h.cancelled]

    def fire(self, times: int = 1) -> None:
        for _ in range(times):
            for handle in self.live:
                handle.callback()


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime = datetime(2024, 3, 4, 9, 0, 0)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += timedelta(seconds=seconds)


def complete_phase(core: TimerCore, scheduler: ManualScheduler) -> None:
    """Run the current phase down to zero."""
    scheduler.fire(core.remaining_time)
