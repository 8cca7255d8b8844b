"""Allow running Tempus Ring as a module: python -m tempusring.

Runs one headless pomodoro cycle on a Qt event loop, logging every tick
and transition.  Stops when the timer goes back to IDLE or on Ctrl-C.
"""

from __future__ import annotations

import argparse
import logging
import signal
import sys

from PyQt6.QtCore import QCoreApplication

from .database.db import configure_engine, init_db
from .settings import Settings, load_settings
from .statistics import StatisticsService
from .timer import InvalidConfigError, QtTickScheduler, TimerCore, TimerState
from .timer.bridge import TimerSignals

logger = logging.getLogger("tempusring")


def setup_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tempusring",
        description="Headless pomodoro timer.",
    )
    parser.add_argument("--work", type=int, metavar="SECONDS",
                        help="work phase length")
    parser.add_argument("--short-break", type=int, metavar="SECONDS",
                        help="short break length")
    parser.add_argument("--long-break", type=int, metavar="SECONDS",
                        help="long break length")
    parser.add_argument("--sessions", type=int, metavar="N",
                        help="work sessions until a long break")
    parser.add_argument("--auto-breaks", action=argparse.BooleanOptionalAction,
                        default=None, help="start breaks automatically")
    parser.add_argument("--auto-pomodoros", action=argparse.BooleanOptionalAction,
                        default=None, help="start work after a break automatically")
    parser.add_argument("--db", metavar="URL",
                        help="SQLAlchemy URL for the statistics database")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="debug logging")
    return parser


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Copy command-line values that were given onto *settings*."""
    overrides = {
        "work_duration": args.work,
        "short_break_duration": args.short_break,
        "long_break_duration": args.long_break,
        "sessions_until_long_break": args.sessions,
        "auto_start_breaks": args.auto_breaks,
        "auto_start_pomodoros": args.auto_pomodoros,
    }
    for name, value in overrides.items():
        if value is not None:
            setattr(settings, name, value)
    return settings


def _format_clock(seconds: int) -> str:
    minutes, seconds = divmod(max(0, seconds), 60)
    return f"{minutes:02d}:{seconds:02d}"


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    settings = apply_overrides(load_settings(), args)
    try:
        config = settings.to_timer_config()
    except InvalidConfigError as error:
        parser.error(str(error))

    if args.db:
        configure_engine(args.db)
    init_db()

    app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])
    app.setApplicationName("TempusRing")

    core = TimerCore(config, scheduler=QtTickScheduler(app))
    statistics = StatisticsService()
    statistics.attach(core)
    signals = TimerSignals()
    signals.attach(core)

    signals.tick.connect(
        lambda data: logger.info(
            "%s %s (%.0f%%)",
            data.state.value,
            _format_clock(data.remaining_time),
            data.progress * 100,
        )
    )
    signals.session_completed.connect(
        lambda session: logger.info("Finished %s session", session.type.value)
    )

    def _on_state_changed(from_state: TimerState, to_state: TimerState) -> None:
        if to_state == TimerState.IDLE:
            app.quit()

    signals.state_changed.connect(_on_state_changed)
    signal.signal(signal.SIGINT, lambda *_: app.quit())

    core.start()
    exit_code = app.exec()

    core.reset()
    logger.info(
        "Completed %d work session(s); %d until long break",
        core.completed_sessions,
        core.sessions_until_long_break,
    )
    signals.detach()
    statistics.detach()
    core.destroy()
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
