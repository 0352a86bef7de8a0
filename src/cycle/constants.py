"""Mode, phase, action, and reason constants used by the phase clock."""

from __future__ import annotations

DEFAULT_WORK_DURATION_SECONDS = 20 * 60
DEFAULT_BREAK_DURATION_SECONDS = 20
DEFAULT_TICK_INTERVAL_SECONDS = 0.1

MODE_IDLE = "idle"
MODE_WORKING = "working"
MODE_BREAK_REMINDER = "break_reminder"
MODE_PAUSED = "paused"

RUNNING_MODES: frozenset[str] = frozenset({MODE_WORKING, MODE_BREAK_REMINDER})

PHASE_WORK = "work"
PHASE_BREAK = "break"
PHASE_ACTIVITY = "activity"

ACTION_START = "start"
ACTION_PAUSE = "pause"
ACTION_RESUME = "resume"
ACTION_RESET = "reset"
ACTION_MANUAL_SELECT = "manual_select"
ACTION_ACTIVITY_COMPLETE = "activity_complete"

REASON_STARTED = "started"
REASON_PAUSED = "paused"
REASON_RESUMED = "resumed"
REASON_RESET = "reset"
REASON_SELECTED = "selected"
REASON_COMPLETING = "completing"
REASON_NOT_IDLE = "not_idle"
REASON_NOT_RUNNING = "not_running"
REASON_NOT_PAUSED = "not_paused"
REASON_WINDOW_CLOSED = "window_closed"
REASON_UNKNOWN_KIND = "unknown_kind"
