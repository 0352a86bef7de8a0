"""Built-in micro-activities offered during breaks."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ActivityKind(str, Enum):
    BALL_TRACKING = "ball_tracking"
    NEAR_FAR_FOCUS = "near_far_focus"
    BLINK_EXERCISE = "blink_exercise"


@dataclass(frozen=True)
class ActivityMetadata:
    """Display data for an activity; rendering itself lives elsewhere."""
    kind: ActivityKind
    name: str
    description: str
    duration_seconds: int


ACTIVITY_CATALOG: dict[ActivityKind, ActivityMetadata] = {
    ActivityKind.BALL_TRACKING: ActivityMetadata(
        kind=ActivityKind.BALL_TRACKING,
        name="Ball Tracking",
        description="Follow the moving ball with your eyes to exercise the eye muscles.",
        duration_seconds=20,
    ),
    ActivityKind.NEAR_FAR_FOCUS: ActivityMetadata(
        kind=ActivityKind.NEAR_FAR_FOCUS,
        name="Near-Far Focus",
        description="Alternate focus between near and far targets to train accommodation.",
        duration_seconds=18,
    ),
    ActivityKind.BLINK_EXERCISE: ActivityMetadata(
        kind=ActivityKind.BLINK_EXERCISE,
        name="Blink Exercise",
        description="Blink consciously to refresh the tear film and prevent dry eyes.",
        duration_seconds=20,
    ),
}


def available_kinds() -> tuple[ActivityKind, ...]:
    return tuple(ActivityKind)


def get_metadata(kind: ActivityKind) -> ActivityMetadata:
    return ACTIVITY_CATALOG[kind]


def parse_kind(raw: object) -> Optional[ActivityKind]:
    """Return the matching kind for a user supplied value, or None."""
    if isinstance(raw, ActivityKind):
        return raw
    if not isinstance(raw, str):
        return None
    text = raw.strip().lower().replace("-", "_")
    if not text:
        return None
    try:
        return ActivityKind(text)
    except ValueError:
        return None
