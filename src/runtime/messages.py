"""Alert and status text builders for cycle transitions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from activity import get_metadata, parse_kind
from cycle import CycleEvent, EventKind
from cycle.constants import MODE_BREAK_REMINDER, MODE_PAUSED, MODE_WORKING, PHASE_WORK

from .orchestrator import CycleSnapshot


@dataclass(frozen=True)
class AlertText:
    title: str
    body: str


def format_duration(seconds: float) -> str:
    """Format a duration in seconds as `MM:SS`."""
    minutes, remainder = divmod(max(0, int(seconds)), 60)
    return f"{minutes:02d}:{remainder:02d}"


def status_message(snapshot: CycleSnapshot) -> str:
    """Build a one-line status for the current cycle snapshot."""
    remaining = format_duration(snapshot.remaining_seconds)
    if snapshot.mode == MODE_WORKING:
        return f"Working ({remaining} remaining)"
    if snapshot.mode == MODE_BREAK_REMINDER:
        return f"Break ({remaining} remaining)"
    if snapshot.mode == MODE_PAUSED:
        label = "Work" if snapshot.phase == PHASE_WORK else "Break"
        return f"{label} paused ({remaining} remaining)"
    return "Ready"


def alert_for_event(
    event: CycleEvent,
    *,
    break_duration_seconds: Optional[float] = None,
) -> Optional[AlertText]:
    """Return the alert for an event, or None when it warrants no alert."""
    if event.kind == EventKind.WORK_COMPLETE:
        lead = (
            f"Time for a {int(break_duration_seconds)}-second eye care break."
            if break_duration_seconds
            else "Time for an eye care break."
        )
        return AlertText(
            title="Work Period Complete!",
            body=f"{lead} Look at something 20 feet away.",
        )
    if event.kind == EventKind.BREAK_COMPLETE:
        return AlertText(
            title="Break Complete!",
            body="Great job! Ready to continue working?",
        )
    if event.kind == EventKind.ACTIVITY_COMPLETE:
        kind = parse_kind(event.metadata.get("activity_kind"))
        name = get_metadata(kind).name if kind is not None else "Activity"
        return AlertText(title=f"{name} done", body="Nice work, keep your eyes relaxed.")
    return None
