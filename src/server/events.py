"""Utilities for serializing UI events, parsing client commands and sticky state."""

from __future__ import annotations

import json
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from contracts.ui_protocol import (
    COMMAND_MANUAL_SELECT,
    COMMAND_NAMES,
    STICKY_EVENT_ORDER,
    STICKY_EVENT_TYPES,
)


class CommandParseError(ValueError):
    """Raised when a client message is not a valid command."""


@dataclass(frozen=True)
class ClientCommand:
    name: str
    kind: Optional[str] = None


def make_event(
    event_type: str,
    *,
    now_fn: Callable[[], datetime] | None = None,
    **payload: Any,
) -> str:
    """Serialize an event payload with type and timestamp for websocket delivery."""
    now = now_fn() if now_fn is not None else datetime.now(timezone.utc)
    return json.dumps(
        {
            "type": event_type,
            "timestamp": now.isoformat(),
            **payload,
        }
    )


def parse_client_command(raw: str | bytes) -> ClientCommand:
    """Parse `{"command": ..., "kind": ...}` sent by a UI client."""
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as error:
            raise CommandParseError("message is not valid UTF-8") from error

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as error:
        raise CommandParseError(f"message is not valid JSON: {error.msg}") from error

    if not isinstance(data, dict):
        raise CommandParseError("message must be a JSON object")

    name = data.get("command")
    if not isinstance(name, str) or name not in COMMAND_NAMES:
        allowed = ", ".join(sorted(COMMAND_NAMES))
        raise CommandParseError(f"command must be one of: {allowed}")

    kind = data.get("kind")
    if name == COMMAND_MANUAL_SELECT:
        if not isinstance(kind, str) or not kind.strip():
            raise CommandParseError("manual_select requires a non-empty 'kind'")
        return ClientCommand(name=name, kind=kind.strip())
    return ClientCommand(name=name)


class StickyEventStore:
    """Thread-safe cache of sticky events replayed to new websocket clients."""
    def __init__(self):
        self._events: dict[str, str] = {}
        self._lock = threading.Lock()

    def remember(self, event_type: str, message: str) -> None:
        if event_type not in STICKY_EVENT_TYPES:
            return
        with self._lock:
            self._events[event_type] = message

    def snapshot(self) -> list[str]:
        with self._lock:
            return [self._events[key] for key in STICKY_EVENT_ORDER if key in self._events]
