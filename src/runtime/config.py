"""Validated cycle configuration derived from app settings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from activity import ActivityKind, parse_kind
from activity.constants import (
    DEFAULT_COMPLETED_GRACE_SECONDS,
    DEFAULT_COMPLETION_DELAY_SECONDS,
    DEFAULT_HISTORY_DEPTH,
    DEFAULT_LAUNCH_DELAY_SECONDS,
    DEFAULT_MANUAL_SELECTION_WINDOW_MS,
)
from cycle.constants import (
    DEFAULT_BREAK_DURATION_SECONDS,
    DEFAULT_TICK_INTERVAL_SECONDS,
    DEFAULT_WORK_DURATION_SECONDS,
)


class CycleConfigurationError(Exception):
    """Raised when cycle timing or activity settings are invalid."""


@dataclass(frozen=True)
class CycleConfig:
    work_duration_seconds: float = DEFAULT_WORK_DURATION_SECONDS
    break_duration_seconds: float = DEFAULT_BREAK_DURATION_SECONDS
    tick_interval_seconds: float = DEFAULT_TICK_INTERVAL_SECONDS
    manual_selection_window_ms: float = DEFAULT_MANUAL_SELECTION_WINDOW_MS
    history_depth: int = DEFAULT_HISTORY_DEPTH
    preferred_kind: Optional[ActivityKind] = None
    auto_launch: bool = True
    enable_manual_selection: bool = True
    launch_delay_seconds: float = DEFAULT_LAUNCH_DELAY_SECONDS
    completion_delay_seconds: float = DEFAULT_COMPLETION_DELAY_SECONDS
    completed_grace_seconds: float = DEFAULT_COMPLETED_GRACE_SECONDS

    def __post_init__(self) -> None:
        if self.work_duration_seconds <= 0:
            raise CycleConfigurationError("timer.work_duration_seconds must be > 0")
        if self.break_duration_seconds <= 0:
            raise CycleConfigurationError("timer.break_duration_seconds must be > 0")
        if self.tick_interval_seconds <= 0:
            raise CycleConfigurationError("timer.tick_interval_seconds must be > 0")
        if self.manual_selection_window_ms < 0:
            raise CycleConfigurationError(
                "activities.manual_selection_window_ms must be >= 0"
            )
        if self.history_depth < 1:
            raise CycleConfigurationError("activities.history_depth must be >= 1")
        for name in (
            "launch_delay_seconds",
            "completion_delay_seconds",
            "completed_grace_seconds",
        ):
            if getattr(self, name) < 0:
                raise CycleConfigurationError(f"activities.{name} must be >= 0")

    @classmethod
    def from_settings(cls, timer, activities) -> "CycleConfig":
        preferred_raw = activities.preferred_kind
        preferred_kind = None
        if preferred_raw:
            preferred_kind = parse_kind(preferred_raw)
            if preferred_kind is None:
                allowed = ", ".join(kind.value for kind in ActivityKind)
                raise CycleConfigurationError(
                    f"activities.preferred_kind must be one of: {allowed}"
                )
        return cls(
            work_duration_seconds=float(timer.work_duration_seconds),
            break_duration_seconds=float(timer.break_duration_seconds),
            tick_interval_seconds=float(timer.tick_interval_seconds),
            manual_selection_window_ms=float(activities.manual_selection_window_ms),
            history_depth=int(activities.history_depth),
            preferred_kind=preferred_kind,
            auto_launch=bool(activities.auto_launch),
            enable_manual_selection=bool(activities.enable_manual_selection),
            launch_delay_seconds=float(activities.launch_delay_seconds),
            completion_delay_seconds=float(activities.completion_delay_seconds),
            completed_grace_seconds=float(activities.completed_grace_seconds),
        )
