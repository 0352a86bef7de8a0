"""Web UI websocket event, command, and state constants."""

from __future__ import annotations

# Websocket event types
EVENT_HELLO = "hello"
EVENT_SNAPSHOT = "snapshot"
EVENT_CYCLE = "cycle_event"
EVENT_ALERT = "alert"
EVENT_STATISTICS = "statistics"
EVENT_COMMAND_RESULT = "command_result"
EVENT_ERROR = "error"

# Commands accepted from UI clients
COMMAND_START = "start"
COMMAND_PAUSE = "pause"
COMMAND_RESUME = "resume"
COMMAND_RESET = "reset"
COMMAND_MANUAL_SELECT = "manual_select"
COMMAND_ACTIVITY_COMPLETE = "activity_complete"

COMMAND_NAMES: frozenset[str] = frozenset(
    {
        COMMAND_START,
        COMMAND_PAUSE,
        COMMAND_RESUME,
        COMMAND_RESET,
        COMMAND_MANUAL_SELECT,
        COMMAND_ACTIVITY_COMPLETE,
    }
)

STICKY_EVENT_TYPES: frozenset[str] = frozenset(
    {
        EVENT_SNAPSHOT,
        EVENT_CYCLE,
        EVENT_ALERT,
        EVENT_STATISTICS,
        EVENT_ERROR,
    }
)

STICKY_EVENT_ORDER: tuple[str, ...] = (
    EVENT_STATISTICS,
    EVENT_CYCLE,
    EVENT_ALERT,
    EVENT_ERROR,
    EVENT_SNAPSHOT,
)
