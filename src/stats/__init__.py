from .calculator import (
    StreakData,
    TodayMetrics,
    TotalMetrics,
    WeeklyTrend,
    calculate_streak,
    calculate_today_metrics,
    calculate_total_metrics,
    calculate_weekly_trend,
)
from .records import ActivityRecord, SessionRecord
from .recorder import StatisticsRecorder

__all__ = [
    "ActivityRecord",
    "SessionRecord",
    "StatisticsRecorder",
    "StreakData",
    "TodayMetrics",
    "TotalMetrics",
    "WeeklyTrend",
    "calculate_streak",
    "calculate_today_metrics",
    "calculate_total_metrics",
    "calculate_weekly_trend",
]
