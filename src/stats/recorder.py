from __future__ import annotations

import json
import logging
import os
from collections import deque
from datetime import datetime, timezone
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any, Callable, Optional

from cycle import CycleEvent, EventBus, EventKind

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
from .records import (
    ActivityRecord,
    SessionRecord,
    SessionType,
    activity_record_from,
    session_record_from,
)

EXPORT_VERSION = "1.0"
DEFAULT_MAX_RECORDS = 100


class StatisticsRecorder:
    """Bus subscriber that keeps a bounded history of completed intervals."""

    def __init__(
        self,
        bus: EventBus,
        *,
        max_records: int = DEFAULT_MAX_RECORDS,
        now_fn: Callable[[], datetime] | None = None,
        logger: Optional[logging.Logger] = None,
    ):
        if max_records < 1:
            raise ValueError("max_records must be >= 1")
        self._logger = logger or logging.getLogger("stats")
        self._now_fn = now_fn or (lambda: datetime.now(timezone.utc))
        self._sessions: deque[SessionRecord] = deque(maxlen=max_records)
        self._activities: deque[ActivityRecord] = deque(maxlen=max_records)
        self._unsubscribers = [
            bus.subscribe(EventKind.WORK_COMPLETE, self._on_work_complete),
            bus.subscribe(EventKind.BREAK_COMPLETE, self._on_break_complete),
            bus.subscribe(EventKind.ACTIVITY_COMPLETE, self._on_activity_complete),
        ]

    @property
    def sessions(self) -> tuple[SessionRecord, ...]:
        return tuple(self._sessions)

    @property
    def activities(self) -> tuple[ActivityRecord, ...]:
        return tuple(self._activities)

    def close(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []

    def today_metrics(self) -> TodayMetrics:
        return calculate_today_metrics(
            self.sessions,
            self.activities,
            today=self._now_fn().date(),
        )

    def streak(self) -> StreakData:
        active_dates = [
            record.date
            for record in self._sessions
            if record.completed and record.session_type == "work"
        ]
        return calculate_streak(active_dates, today=self._now_fn().date())

    def total_metrics(self) -> TotalMetrics:
        return calculate_total_metrics(
            self.sessions,
            self.activities,
            today=self._now_fn().date(),
        )

    def weekly_trend(self) -> WeeklyTrend:
        return calculate_weekly_trend(
            self.sessions,
            self.activities,
            today=self._now_fn().date(),
        )

    def summary(self) -> dict[str, Any]:
        """Statistics payload pushed to UI clients after each completion."""
        streak = self.streak()
        return {
            "today": self.today_metrics().to_dict(),
            "streak": {
                "current": streak.current,
                "longest": streak.longest,
                "last_active_date": streak.last_active_date,
            },
            "totals": self.total_metrics().to_dict(),
            "weekly_trend": self.weekly_trend().to_dict(),
            "total_sessions": len(self._sessions),
            "total_activities": len(self._activities),
        }

    def export_payload(self) -> dict[str, Any]:
        return {
            "sessions": [record.to_dict() for record in self._sessions],
            "activities": [record.to_dict() for record in self._activities],
            "metadata": {
                "exported_at": self._now_fn().isoformat(),
                "version": EXPORT_VERSION,
                "total_records": len(self._sessions) + len(self._activities),
            },
        }

    def export_to_file(self, path: str | Path) -> Path:
        """Write the export payload atomically and return the target path."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(self.export_payload(), ensure_ascii=True, indent=2)
        with NamedTemporaryFile(
            "w", delete=False, encoding="utf-8", dir=str(target.parent)
        ) as handle:
            handle.write(payload)
            handle.flush()
            os.fsync(handle.fileno())
            tmp_path = Path(handle.name)
        os.replace(tmp_path, target)
        self._logger.info("Statistics exported to %s", target)
        return target

    def _on_work_complete(self, event: CycleEvent) -> None:
        self._record_session("work", event)

    def _on_break_complete(self, event: CycleEvent) -> None:
        self._record_session("break", event)

    def _record_session(self, session_type: SessionType, event: CycleEvent) -> None:
        record = session_record_from(
            session_type=session_type,
            session_number=event.session_id,
            ended_at=event.timestamp,
            duration_seconds=event.duration_seconds,
        )
        self._sessions.append(record)
        self._logger.debug("Recorded %s session %s", session_type, record.session_id)

    def _on_activity_complete(self, event: CycleEvent) -> None:
        kind = event.metadata.get("activity_kind")
        if not kind:
            self._logger.warning("Activity completion without activity_kind ignored")
            return
        record = activity_record_from(
            activity_kind=str(kind),
            session_number=event.session_id,
            completed_at=event.timestamp,
            duration_seconds=event.duration_seconds,
        )
        self._activities.append(record)
        self._logger.debug("Recorded activity %s (%s)", record.activity_id, kind)
