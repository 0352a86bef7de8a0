"""Activity life-cycle states and selection defaults."""

from __future__ import annotations

STATE_IDLE = "idle"
STATE_LAUNCHING = "launching"
STATE_RUNNING = "running"
STATE_PAUSED = "paused"
STATE_COMPLETING = "completing"
STATE_COMPLETED = "completed"

ACTIVE_STATES: frozenset[str] = frozenset({STATE_LAUNCHING, STATE_RUNNING, STATE_PAUSED})

DEFAULT_LAUNCH_DELAY_SECONDS = 0.3
DEFAULT_COMPLETION_DELAY_SECONDS = 0.5
DEFAULT_COMPLETED_GRACE_SECONDS = 1.5

DEFAULT_MANUAL_SELECTION_WINDOW_MS = 3000
DEFAULT_HISTORY_DEPTH = 2
