"""Application settings with JSON persistence.

Settings are stored at:
    ~/Library/Application Support/TempusRing/settings.json

Usage::

    settings = load_settings()
    settings.work_duration = 50 * 60
    save_settings(settings)
    core = TimerCore(settings.to_timer_config())
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, asdict, fields
from pathlib import Path

from .timer.engine import (
    DEFAULT_LONG_BREAK_DURATION,
    DEFAULT_SESSIONS_UNTIL_LONG_BREAK,
    DEFAULT_SHORT_BREAK_DURATION,
    DEFAULT_WORK_DURATION,
    TimerConfig,
)

logger = logging.getLogger(__name__)

# Shared with database/db.py
APP_SUPPORT_DIR = Path.home() / "Library" / "Application Support" / "TempusRing"
SETTINGS_PATH = APP_SUPPORT_DIR / "settings.json"


@dataclass
class Settings:
    """All user-configurable timer preferences."""

    work_duration: int = DEFAULT_WORK_DURATION           # seconds
    short_break_duration: int = DEFAULT_SHORT_BREAK_DURATION
    long_break_duration: int = DEFAULT_LONG_BREAK_DURATION
    sessions_until_long_break: int = DEFAULT_SESSIONS_UNTIL_LONG_BREAK
    auto_start_breaks: bool = False
    auto_start_pomodoros: bool = False

    def to_timer_config(self) -> TimerConfig:
        """Validated timer config; raises ``InvalidConfigError``."""
        return TimerConfig(**asdict(self))

    @classmethod
    def from_timer_config(cls, config: TimerConfig) -> Settings:
        return cls(**config.as_dict())


def load_settings(path: Path = SETTINGS_PATH) -> Settings:
    """Load settings from disk, falling back to defaults."""
    if not path.exists():
        return Settings()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as error:
        logger.warning("Ignoring unreadable settings file %s: %s", path, error)
        return Settings()
    if not isinstance(data, dict):
        logger.warning("Ignoring settings file %s: expected a JSON object", path)
        return Settings()
    # Only use keys that exist in the dataclass
    valid_keys = {f.name for f in fields(Settings)}
    filtered = {k: v for k, v in data.items() if k in valid_keys}
    return Settings(**filtered)


def save_settings(settings: Settings, path: Path = SETTINGS_PATH) -> None:
    """Write settings to disk as JSON."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(asdict(settings), indent=2) + "\n",
        encoding="utf-8",
    )
