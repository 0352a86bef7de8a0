from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Iterable, Sequence

from activity import available_kinds

from .records import ActivityRecord, SessionRecord

TREND_DAYS = 7


@dataclass(frozen=True)
class TodayMetrics:
    session_count: int
    work_seconds: float
    activity_count: int
    break_rate: int
    activity_breakdown: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "session_count": self.session_count,
            "work_seconds": self.work_seconds,
            "activity_count": self.activity_count,
            "break_rate": self.break_rate,
            "activity_breakdown": dict(self.activity_breakdown),
        }


@dataclass(frozen=True)
class StreakData:
    current: int
    longest: int
    last_active_date: str


@dataclass(frozen=True)
class TotalMetrics:
    total_sessions: int
    total_hours: float
    total_activities: int
    activity_breakdown: dict[str, int]
    longest_streak: int
    current_streak: int
    average_sessions_per_day: float
    total_days_active: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_sessions": self.total_sessions,
            "total_hours": self.total_hours,
            "total_activities": self.total_activities,
            "activity_breakdown": dict(self.activity_breakdown),
            "longest_streak": self.longest_streak,
            "current_streak": self.current_streak,
            "average_sessions_per_day": self.average_sessions_per_day,
            "total_days_active": self.total_days_active,
        }


@dataclass(frozen=True)
class WeeklyTrend:
    """Per-day series, oldest first, ending today."""
    dates: tuple[str, ...]
    session_counts: tuple[int, ...]
    durations: tuple[float, ...]
    activity_counts: tuple[int, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "dates": list(self.dates),
            "session_counts": list(self.session_counts),
            "durations": list(self.durations),
            "activity_counts": list(self.activity_counts),
        }


def calculate_today_metrics(
    sessions: Sequence[SessionRecord],
    activities: Sequence[ActivityRecord],
    *,
    today: date,
) -> TodayMetrics:
    """Aggregate the completed work sessions and activities of one day."""
    day = today.isoformat()
    work_sessions = [record for record in _work_sessions(sessions) if record.date == day]
    day_activities = [record for record in activities if record.date == day]
    breakdown = _activity_breakdown(day_activities)

    session_count = len(work_sessions)
    rate = (len(day_activities) / session_count) * 100 if session_count else 0.0
    return TodayMetrics(
        session_count=session_count,
        work_seconds=sum(record.duration_seconds for record in work_sessions),
        activity_count=len(day_activities),
        break_rate=min(100, round(rate)),
        activity_breakdown=breakdown,
    )


def calculate_streak(active_dates: Iterable[str], *, today: date) -> StreakData:
    """Count consecutive active days.

    The current streak only counts when its last day is today or yesterday.
    """
    days = sorted({date.fromisoformat(item) for item in active_dates})
    if not days:
        return StreakData(current=0, longest=0, last_active_date="")

    longest = run = 1
    for previous, current in zip(days, days[1:]):
        if current - previous == timedelta(days=1):
            run += 1
        else:
            run = 1
        longest = max(longest, run)

    last = days[-1]
    current_streak = 0
    if today - last <= timedelta(days=1):
        current_streak = 1
        cursor = last
        active = set(days)
        while cursor - timedelta(days=1) in active:
            current_streak += 1
            cursor -= timedelta(days=1)

    return StreakData(
        current=current_streak,
        longest=longest,
        last_active_date=last.isoformat(),
    )


def calculate_total_metrics(
    sessions: Sequence[SessionRecord],
    activities: Sequence[ActivityRecord],
    *,
    today: date,
) -> TotalMetrics:
    """Aggregate every retained record; averages cover active days only."""
    work_sessions = _work_sessions(sessions)
    active_dates = {record.date for record in work_sessions}
    streak = calculate_streak(active_dates, today=today)

    total_sessions = len(work_sessions)
    total_seconds = sum(record.duration_seconds for record in work_sessions)
    days_active = len(active_dates)
    average = total_sessions / days_active if days_active else 0.0
    return TotalMetrics(
        total_sessions=total_sessions,
        total_hours=round(total_seconds / 3600, 2),
        total_activities=len(activities),
        activity_breakdown=_activity_breakdown(activities),
        longest_streak=streak.longest,
        current_streak=streak.current,
        average_sessions_per_day=round(average, 2),
        total_days_active=days_active,
    )


def calculate_weekly_trend(
    sessions: Sequence[SessionRecord],
    activities: Sequence[ActivityRecord],
    *,
    today: date,
) -> WeeklyTrend:
    """Build the last seven days including today; missing days read as zero."""
    dates = [
        (today - timedelta(days=offset)).isoformat()
        for offset in range(TREND_DAYS - 1, -1, -1)
    ]

    session_counts = dict.fromkeys(dates, 0)
    durations = dict.fromkeys(dates, 0.0)
    activity_counts = dict.fromkeys(dates, 0)
    for record in _work_sessions(sessions):
        if record.date in session_counts:
            session_counts[record.date] += 1
            durations[record.date] += record.duration_seconds
    for record in activities:
        if record.date in activity_counts:
            activity_counts[record.date] += 1

    return WeeklyTrend(
        dates=tuple(dates),
        session_counts=tuple(session_counts[day] for day in dates),
        durations=tuple(durations[day] for day in dates),
        activity_counts=tuple(activity_counts[day] for day in dates),
    )


def _work_sessions(sessions: Iterable[SessionRecord]) -> list[SessionRecord]:
    return [
        record
        for record in sessions
        if record.completed and record.session_type == "work"
    ]


def _activity_breakdown(activities: Iterable[ActivityRecord]) -> dict[str, int]:
    breakdown = {kind.value: 0 for kind in available_kinds()}
    for record in activities:
        breakdown[record.activity_kind] = breakdown.get(record.activity_kind, 0) + 1
    return breakdown
