"""Record types derived from cycle events."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime, timedelta
from typing import Any, Literal

SessionType = Literal["work", "break"]


@dataclass(frozen=True)
class SessionRecord:
    """A completed work or break interval."""
    session_id: str
    session_type: SessionType
    start_time: str
    end_time: str
    duration_seconds: float
    completed: bool
    date: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ActivityRecord:
    """A break activity that ran to completion."""
    activity_id: str
    session_id: str
    activity_kind: str
    completed_at: str
    duration_seconds: float
    date: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def session_record_from(
    *,
    session_type: SessionType,
    session_number: int,
    ended_at: datetime,
    duration_seconds: float,
) -> SessionRecord:
    started_at = ended_at - timedelta(seconds=duration_seconds)
    return SessionRecord(
        session_id=f"{session_type}-{session_number}-{int(ended_at.timestamp() * 1000)}",
        session_type=session_type,
        start_time=started_at.isoformat(),
        end_time=ended_at.isoformat(),
        duration_seconds=float(duration_seconds),
        completed=True,
        date=started_at.date().isoformat(),
    )


def activity_record_from(
    *,
    activity_kind: str,
    session_number: int,
    completed_at: datetime,
    duration_seconds: float,
) -> ActivityRecord:
    return ActivityRecord(
        activity_id=f"activity-{session_number}-{int(completed_at.timestamp() * 1000)}",
        session_id=f"work-{session_number}",
        activity_kind=activity_kind,
        completed_at=completed_at.isoformat(),
        duration_seconds=float(duration_seconds),
        date=completed_at.date().isoformat(),
    )
