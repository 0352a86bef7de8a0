"""Tick and event handlers that forward cycle progress to the UI."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

from cycle import CycleEvent, EventKind

from .messages import alert_for_event
from .orchestrator import CycleSnapshot
from .ui import RuntimeUIPublisher


@dataclass(frozen=True)
class TickDependencies:
    """Dependencies required for processing ticks and bus events."""
    logger: logging.Logger
    ui: RuntimeUIPublisher
    statistics_summary: Optional[Callable[[], Mapping[str, Any]]] = None
    break_duration_seconds: Optional[float] = None


class TickProcessor:
    """Publishes snapshots at most once per visible change plus alerts per event."""
    def __init__(self, dependencies: TickDependencies):
        self._dependencies = dependencies
        self._last_published: Optional[tuple[Any, ...]] = None

    def handle_snapshot(self, snapshot: CycleSnapshot) -> bool:
        key = (
            snapshot.mode,
            snapshot.phase,
            snapshot.remaining_seconds,
            snapshot.session_count,
            snapshot.activity_state,
            snapshot.activity_kind,
            snapshot.manual_window_open,
        )
        if key == self._last_published:
            return False
        self._last_published = key
        self._dependencies.ui.publish_snapshot(snapshot)
        return True

    def handle_event(self, event: CycleEvent) -> None:
        deps = self._dependencies
        deps.ui.publish_cycle_event(event)

        alert = alert_for_event(
            event,
            break_duration_seconds=deps.break_duration_seconds,
        )
        if alert is not None:
            deps.ui.publish_alert(alert, kind=event.kind.value)

        if deps.statistics_summary is not None and event.kind in (
            EventKind.WORK_COMPLETE,
            EventKind.BREAK_COMPLETE,
            EventKind.ACTIVITY_COMPLETE,
        ):
            try:
                deps.ui.publish_statistics(deps.statistics_summary())
            except Exception as error:
                deps.logger.error("Failed to build statistics summary: %s", error)
