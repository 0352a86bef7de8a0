"""Life cycle of a single break activity with generation-guarded delays."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Literal, Optional

from cycle.deferred import DeferredScheduler

from .catalog import ActivityKind
from .constants import (
    ACTIVE_STATES,
    DEFAULT_COMPLETION_DELAY_SECONDS,
    DEFAULT_LAUNCH_DELAY_SECONDS,
    STATE_COMPLETED,
    STATE_COMPLETING,
    STATE_IDLE,
    STATE_LAUNCHING,
    STATE_PAUSED,
    STATE_RUNNING,
)

ActivityState = Literal["idle", "launching", "running", "paused", "completing", "completed"]
StateListener = Callable[[str, str], None]


@dataclass(frozen=True)
class ActivitySnapshot:
    state: ActivityState
    selected: Optional[ActivityKind]
    started_at: Optional[float]
    generation: int

    @property
    def is_active(self) -> bool:
        return self.state in ACTIVE_STATES


class ActivityMachine:
    """State machine for one micro-activity instance.

    ``launching -> running`` and ``completing -> completed`` are delayed
    transitions. Each is tagged with the generation it was scheduled under;
    ``reset`` bumps the generation so a late callback finds itself stale and
    does nothing.
    """

    def __init__(
        self,
        *,
        scheduler: DeferredScheduler,
        launch_delay_seconds: float = DEFAULT_LAUNCH_DELAY_SECONDS,
        completion_delay_seconds: float = DEFAULT_COMPLETION_DELAY_SECONDS,
        monotonic_fn: Optional[Callable[[], float]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._scheduler = scheduler
        self._launch_delay = max(0.0, float(launch_delay_seconds))
        self._completion_delay = max(0.0, float(completion_delay_seconds))
        self._monotonic = monotonic_fn or time.monotonic
        self._logger = logger or logging.getLogger("activity.machine")
        self._listeners: list[StateListener] = []

        self._state: ActivityState = STATE_IDLE
        self._selected: Optional[ActivityKind] = None
        self._started_at: Optional[float] = None
        self._generation = 0

    @property
    def state(self) -> ActivityState:
        return self._state

    @property
    def selected(self) -> Optional[ActivityKind]:
        return self._selected

    @property
    def started_at(self) -> Optional[float]:
        return self._started_at

    @property
    def generation(self) -> int:
        return self._generation

    def snapshot(self) -> ActivitySnapshot:
        return ActivitySnapshot(
            state=self._state,
            selected=self._selected,
            started_at=self._started_at,
            generation=self._generation,
        )

    def add_listener(self, listener: StateListener) -> None:
        """Call ``listener(previous, current)`` after every state change."""
        self._listeners.append(listener)

    def launch(self, kind: ActivityKind) -> bool:
        if self._state != STATE_IDLE:
            self._logger.debug("Ignored launch(%s) while %s", kind.value, self._state)
            return False

        self._generation += 1
        self._selected = kind
        self._started_at = None
        self._logger.info("Launching activity: %s", kind.value)
        self._set_state(STATE_LAUNCHING)
        self._schedule(self._launch_delay, STATE_LAUNCHING, STATE_RUNNING)
        return True

    def pause(self) -> bool:
        if self._state != STATE_RUNNING:
            return False
        self._set_state(STATE_PAUSED)
        return True

    def resume(self) -> bool:
        if self._state != STATE_PAUSED:
            return False
        self._set_state(STATE_RUNNING)
        return True

    def signal_completion(self) -> bool:
        """Accept the activity's own completion signal while running."""
        if self._state != STATE_RUNNING:
            self._logger.debug("Ignored completion signal while %s", self._state)
            return False
        self._set_state(STATE_COMPLETING)
        self._schedule(self._completion_delay, STATE_COMPLETING, STATE_COMPLETED)
        return True

    def reset(self) -> None:
        """Return to idle from any state and invalidate pending delays."""
        self._generation += 1
        had_selection = self._selected is not None
        self._selected = None
        self._started_at = None
        if self._state != STATE_IDLE or had_selection:
            self._logger.info("Activity reset")
        self._set_state(STATE_IDLE)

    def reset_after(self, delay_seconds: float) -> None:
        """Reset once ``delay_seconds`` pass, unless something resets first."""
        generation = self._generation

        def delayed_reset() -> None:
            if generation != self._generation:
                return
            self.reset()

        self._scheduler.call_later(delay_seconds, delayed_reset, name="activity.reset")

    def _schedule(self, delay_seconds: float, expected: str, target: ActivityState) -> None:
        generation = self._generation

        def transition() -> None:
            if generation != self._generation or self._state != expected:
                self._logger.debug(
                    "Discarded stale transition %s -> %s (generation %d, now %d)",
                    expected,
                    target,
                    generation,
                    self._generation,
                )
                return
            if target == STATE_RUNNING and self._started_at is None:
                self._started_at = self._monotonic()
            self._set_state(target)

        self._scheduler.call_later(delay_seconds, transition, name=f"activity.{target}")

    def _set_state(self, state: ActivityState) -> None:
        previous = self._state
        if previous == state:
            return
        self._state = state
        self._logger.debug("Activity state %s -> %s", previous, state)
        for listener in tuple(self._listeners):
            listener(previous, state)
