"""Session statistics for Tempus Ring.

Recording
---------
``StatisticsService.attach(core)`` listens to the timer:

* ``sessionComplete`` — the finished session is stored as completed.
* ``reset``           — the abandoned session (``core.last_finished_session``)
  is stored with ``completed=False``.

The timer itself keeps no history; this table is the only log.
Recording the same session id twice overwrites the earlier row.

Aggregates
----------
Work and break time only count *completed* sessions.  ``efficiency`` and
``completion_rate`` are completed / total sessions as a percentage.
Weeks start on Sunday.  All durations are seconds except
``productive_hours``.
"""

from __future__ import annotations

import calendar
from collections import defaultdict
from dataclasses import dataclass, asdict
from datetime import date, datetime, timedelta
from typing import Any, Callable, Iterable

from ..database.db import get_session
from ..database.models import SessionRecord
from ..timer.engine import TimerCore, TimerSession, TimerState
from ..timer.events import TimerEvent

BREAK_TYPES = frozenset({TimerState.SHORT_BREAK.value, TimerState.LONG_BREAK.value})


# ── result types ─────────────────────────────────────────────────────────


@dataclass(frozen=True)
class DailyStatistics:
    date: date
    completed_pomodoros: int
    total_work_time: int
    total_break_time: int
    total_sessions: int
    efficiency: float


@dataclass(frozen=True)
class WeeklyStatistics:
    week_start: date
    week_end: date
    total_pomodoros: int
    total_work_time: int
    total_break_time: int
    average_pomodoros_per_day: float
    daily_breakdown: list[DailyStatistics]


@dataclass(frozen=True)
class MonthlyStatistics:
    month: str
    year: int
    total_pomodoros: int
    total_work_time: int
    total_break_time: int
    completion_rate: float
    productive_hours: float
    weekly_breakdown: list[WeeklyStatistics]


@dataclass(frozen=True)
class TotalStatistics:
    total_pomodoros: int
    total_work_time: int
    total_break_time: int
    total_days: int
    average_pomodoros_per_day: float


# ── helpers ──────────────────────────────────────────────────────────────


def week_start_for(day: date) -> date:
    """The Sunday on or before *day*."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def _percent(part: int, whole: int) -> float:
    return part / whole * 100 if whole > 0 else 0.0


def _summarize_day(day: date, records: Iterable[SessionRecord]) -> DailyStatistics:
    records = list(records)
    completed = [r for r in records if r.completed]
    return DailyStatistics(
        date=day,
        completed_pomodoros=sum(1 for r in completed if r.session_type == "work"),
        total_work_time=sum(
            r.duration_seconds for r in completed if r.session_type == "work"
        ),
        total_break_time=sum(
            r.duration_seconds for r in completed if r.session_type in BREAK_TYPES
        ),
        total_sessions=len(records),
        efficiency=_percent(len(completed), len(records)),
    )


def _check_range(from_date: date, to_date: date) -> None:
    if from_date > to_date:
        raise ValueError(f"from_date {from_date} is after to_date {to_date}")


# ── service ──────────────────────────────────────────────────────────────


class StatisticsService:
    """Stores finished sessions and answers aggregate queries."""

    def __init__(self, *, clock: Callable[[], datetime] = datetime.now) -> None:
        self._clock = clock
        self._core: TimerCore | None = None

    # ── wiring ────────────────────────────────────────────────────────

    def attach(self, core: TimerCore) -> None:
        self.detach()
        core.on(TimerEvent.SESSION_COMPLETE, self._on_session_complete)
        core.on(TimerEvent.RESET, self._on_reset)
        self._core = core

    def detach(self) -> None:
        if self._core is None:
            return
        self._core.off(TimerEvent.SESSION_COMPLETE, self._on_session_complete)
        self._core.off(TimerEvent.RESET, self._on_reset)
        self._core = None

    def _on_session_complete(self, session: TimerSession) -> None:
        self.record_session(session)

    def _on_reset(self) -> None:
        session = self._core.last_finished_session if self._core else None
        if session is not None and not session.completed:
            self.record_session(session)

    # ── recording ─────────────────────────────────────────────────────

    def record_session(self, session: TimerSession) -> None:
        """Persist a finalized session.  Raises ``ValueError`` if unfinished."""
        if session.end_time is None:
            raise ValueError(f"session {session.id} has not finished")
        duration = int((session.end_time - session.start_time).total_seconds())
        with get_session() as db:
            record = db.get(SessionRecord, session.id)
            if record is None:
                record = SessionRecord(id=session.id)
                db.add(record)
            record.date = session.start_time.date()
            record.start_time = session.start_time
            record.end_time = session.end_time
            record.session_type = session.type.value
            record.completed = session.completed
            record.duration_seconds = max(0, duration)

    def clear_all_statistics(self) -> None:
        with get_session() as db:
            db.query(SessionRecord).delete()

    # ── queries ───────────────────────────────────────────────────────

    def _load_by_day(
        self, from_date: date | None = None, to_date: date | None = None
    ) -> dict[date, list[SessionRecord]]:
        with get_session() as db:
            query = db.query(SessionRecord)
            if from_date is not None:
                query = query.filter(SessionRecord.date >= from_date)
            if to_date is not None:
                query = query.filter(SessionRecord.date <= to_date)
            records = query.order_by(SessionRecord.start_time).all()
        by_day: dict[date, list[SessionRecord]] = defaultdict(list)
        for record in records:
            by_day[record.date].append(record)
        return dict(sorted(by_day.items()))

    def get_daily_statistics(self, day: date) -> DailyStatistics | None:
        """``None`` when nothing was recorded that day."""
        records = self._load_by_day(day, day).get(day)
        if not records:
            return None
        return _summarize_day(day, records)

    def get_weekly_statistics(self, week_start: date) -> WeeklyStatistics:
        week_end = week_start + timedelta(days=6)
        by_day = self._load_by_day(week_start, week_end)
        breakdown = [
            _summarize_day(day, by_day.get(day, ()))
            for day in (week_start + timedelta(days=i) for i in range(7))
        ]
        total_pomodoros = sum(d.completed_pomodoros for d in breakdown)
        return WeeklyStatistics(
            week_start=week_start,
            week_end=week_end,
            total_pomodoros=total_pomodoros,
            total_work_time=sum(d.total_work_time for d in breakdown),
            total_break_time=sum(d.total_break_time for d in breakdown),
            average_pomodoros_per_day=total_pomodoros / 7,
            daily_breakdown=breakdown,
        )

    def get_monthly_statistics(self, year: int, month: int) -> MonthlyStatistics:
        if not 1 <= month <= 12:
            raise ValueError(f"month must be in 1..12, got {month}")
        month_start = date(year, month, 1)
        month_end = date(year, month, calendar.monthrange(year, month)[1])
        days = list(self._load_by_day(month_start, month_end).items())
        summaries = [_summarize_day(day, records) for day, records in days]

        total_sessions = sum(s.total_sessions for s in summaries)
        completed_sessions = sum(
            1 for _, records in days for r in records if r.completed
        )
        total_work_time = sum(s.total_work_time for s in summaries)

        weeks = []
        current = week_start_for(month_start)
        while current <= month_end:
            weeks.append(self.get_weekly_statistics(current))
            current += timedelta(days=7)

        return MonthlyStatistics(
            month=calendar.month_name[month],
            year=year,
            total_pomodoros=sum(s.completed_pomodoros for s in summaries),
            total_work_time=total_work_time,
            total_break_time=sum(s.total_break_time for s in summaries),
            completion_rate=_percent(completed_sessions, total_sessions),
            productive_hours=round(total_work_time / 3600, 2),
            weekly_breakdown=weeks,
        )

    def get_statistics_range(
        self, from_date: date, to_date: date
    ) -> list[DailyStatistics]:
        """Daily summaries for days in the range that have any sessions."""
        _check_range(from_date, to_date)
        return [
            _summarize_day(day, records)
            for day, records in self._load_by_day(from_date, to_date).items()
        ]

    def get_total_statistics(self) -> TotalStatistics:
        summaries = [
            _summarize_day(day, records)
            for day, records in self._load_by_day().items()
        ]
        total_pomodoros = sum(s.completed_pomodoros for s in summaries)
        total_days = len(summaries)
        return TotalStatistics(
            total_pomodoros=total_pomodoros,
            total_work_time=sum(s.total_work_time for s in summaries),
            total_break_time=sum(s.total_break_time for s in summaries),
            total_days=total_days,
            average_pomodoros_per_day=(
                total_pomodoros / total_days if total_days > 0 else 0.0
            ),
        )

    def export_statistics(self, from_date: date, to_date: date) -> dict[str, Any]:
        """JSON-ready export of the range: summary, per-day stats, and
        every completed session."""
        _check_range(from_date, to_date)
        by_day = self._load_by_day(from_date, to_date)
        daily = [_summarize_day(day, records) for day, records in by_day.items()]

        completed = [
            {
                "id": r.id,
                "date": r.date.isoformat(),
                "start_time": r.start_time.isoformat(),
                "end_time": r.end_time.isoformat(),
                "type": r.session_type,
                "duration": r.duration_seconds,
                "completed": r.completed,
            }
            for records in by_day.values()
            for r in records
            if r.completed
        ]

        return {
            "export_date": self._clock().isoformat(),
            "date_range": {
                "from": from_date.isoformat(),
                "to": to_date.isoformat(),
            },
            "summary": {
                "total_pomodoros": sum(d.completed_pomodoros for d in daily),
                "total_work_time": sum(d.total_work_time for d in daily),
                "total_break_time": sum(d.total_break_time for d in daily),
                "total_sessions": sum(d.total_sessions for d in daily),
            },
            "daily_stats": [
                {**asdict(d), "date": d.date.isoformat()} for d in daily
            ],
            "completed_sessions": completed,
        }
