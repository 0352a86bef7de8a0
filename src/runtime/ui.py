from __future__ import annotations

from typing import Any, Mapping, Optional

from contracts.ui_protocol import (
    EVENT_ALERT,
    EVENT_COMMAND_RESULT,
    EVENT_CYCLE,
    EVENT_SNAPSHOT,
    EVENT_STATISTICS,
)
from cycle import CycleEvent

from .contracts import UIServerLike
from .messages import AlertText, status_message
from .orchestrator import CycleActionResult, CycleSnapshot


class RuntimeUIPublisher:
    def __init__(self, ui_server: Optional[UIServerLike]):
        self._ui_server = ui_server

    def publish(self, event_type: str, **payload: Any) -> None:
        if self._ui_server:
            self._ui_server.publish(event_type, **payload)

    def publish_snapshot(self, snapshot: CycleSnapshot, *, reason: str = "") -> None:
        payload: dict[str, Any] = {
            "mode": snapshot.mode,
            "phase": snapshot.phase,
            "remaining_seconds": snapshot.remaining_seconds,
            "progress": round(snapshot.progress_fraction, 4),
            "session_count": snapshot.session_count,
            "activity_state": snapshot.activity_state,
            "activity_kind": snapshot.activity_kind,
            "manual_window_open": snapshot.manual_window_open,
            "message": status_message(snapshot),
        }
        if reason:
            payload["reason"] = reason
        self.publish(EVENT_SNAPSHOT, **payload)

    def publish_command_result(self, result: CycleActionResult) -> None:
        self.publish(
            EVENT_COMMAND_RESULT,
            action=result.action,
            accepted=result.accepted,
            reason=result.reason,
        )
        self.publish_snapshot(result.snapshot, reason=result.reason)

    def publish_cycle_event(self, event: CycleEvent) -> None:
        self.publish(EVENT_CYCLE, **event.to_payload())

    def publish_alert(self, alert: AlertText, *, kind: str) -> None:
        self.publish(EVENT_ALERT, kind=kind, title=alert.title, body=alert.body)

    def publish_statistics(self, metrics: Mapping[str, Any]) -> None:
        self.publish(EVENT_STATISTICS, **dict(metrics))
