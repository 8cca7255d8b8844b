"""Tests for the console runner: argument parsing, overrides, and one
short headless cycle on a real Qt event loop."""

import pytest

from tempusring.__main__ import _format_clock, apply_overrides, build_parser, main
from tempusring.settings import Settings
from tempusring.statistics import StatisticsService


class TestArguments:

    def test_no_flags_leave_settings_untouched(self):
        args = build_parser().parse_args([])
        assert apply_overrides(Settings(), args) == Settings()

    def test_durations_override(self):
        args = build_parser().parse_args(
            ["--work", "60", "--short-break", "10", "--long-break", "20", "--sessions", "3"]
        )
        settings = apply_overrides(Settings(), args)
        assert settings.work_duration == 60
        assert settings.short_break_duration == 10
        assert settings.long_break_duration == 20
        assert settings.sessions_until_long_break == 3

    def test_boolean_flags(self):
        args = build_parser().parse_args(["--auto-breaks", "--no-auto-pomodoros"])
        settings = apply_overrides(Settings(auto_start_pomodoros=True), args)
        assert settings.auto_start_breaks is True
        assert settings.auto_start_pomodoros is False

    def test_format_clock(self):
        assert _format_clock(1500) == "25:00"
        assert _format_clock(61) == "01:01"
        assert _format_clock(-3) == "00:00"


class TestMain:

    @pytest.fixture(autouse=True)
    def _isolate(self, monkeypatch):
        monkeypatch.setattr("tempusring.__main__.load_settings", Settings)
        monkeypatch.setattr("signal.signal", lambda *args: None)

    def test_invalid_duration_exits_with_usage_error(self, qapp):
        with pytest.raises(SystemExit) as excinfo:
            main(["--work", "0"])
        assert excinfo.value.code == 2

    def test_runs_one_work_phase_and_records_it(self, qapp):
        exit_code = main(["--work", "1", "--no-auto-breaks", "--db", "sqlite:///:memory:"])
        assert exit_code == 0
        totals = StatisticsService().get_total_statistics()
        assert totals.total_pomodoros == 1
        assert totals.total_days == 1
