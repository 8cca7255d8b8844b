"""Shared pytest fixtures for Tempus Ring tests."""

import sys
import pytest

from PyQt6.QtCore import QCoreApplication

from tempusring.database.db import configure_engine, init_db
from tempusring.timer.engine import TimerConfig, TimerCore

from helpers import FakeClock, ManualScheduler


@pytest.fixture(scope="session")
def qapp():
    """A single QCoreApplication instance shared across the entire test run."""
    app = QCoreApplication.instance() or QCoreApplication(sys.argv)
    yield app


@pytest.fixture(autouse=True)
def test_db():
    """Point every test at a fresh in-memory SQLite database."""
    configure_engine("sqlite:///:memory:")
    init_db()
    yield


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def short_config():
    """work 5s, short break 2s, long break 3s, long break every 2 sessions."""
    return TimerConfig(
        work_duration=5,
        short_break_duration=2,
        long_break_duration=3,
        sessions_until_long_break=2,
    )


@pytest.fixture
def core(short_config, scheduler, clock):
    """TimerCore with auto-start OFF."""
    return TimerCore(short_config, scheduler=scheduler, clock=clock)


@pytest.fixture
def core_auto(short_config, scheduler, clock):
    """TimerCore with both auto-start flags ON."""
    config = TimerConfig(
        **{**short_config.as_dict(), "auto_start_breaks": True, "auto_start_pomodoros": True}
    )
    return TimerCore(config, scheduler=scheduler, clock=clock)
