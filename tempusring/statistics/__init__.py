"""Statistics package."""

from .service import (
    StatisticsService,
    DailyStatistics,
    WeeklyStatistics,
    MonthlyStatistics,
    TotalStatistics,
    week_start_for,
)

__all__ = [
    "StatisticsService",
    "DailyStatistics",
    "WeeklyStatistics",
    "MonthlyStatistics",
    "TotalStatistics",
    "week_start_for",
]
