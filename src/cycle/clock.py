"""Drift-compensated work/break phase clock."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Literal, Optional

from .constants import (
    ACTION_PAUSE,
    ACTION_RESET,
    ACTION_RESUME,
    ACTION_START,
    DEFAULT_BREAK_DURATION_SECONDS,
    DEFAULT_WORK_DURATION_SECONDS,
    MODE_BREAK_REMINDER,
    MODE_IDLE,
    MODE_PAUSED,
    MODE_WORKING,
    PHASE_BREAK,
    PHASE_WORK,
    REASON_NOT_IDLE,
    REASON_NOT_PAUSED,
    REASON_NOT_RUNNING,
    REASON_PAUSED,
    REASON_RESET,
    REASON_RESUMED,
    REASON_STARTED,
    RUNNING_MODES,
)
from .events import CycleEvent, EventBus, EventKind, make_cycle_event

ClockMode = Literal["idle", "working", "break_reminder", "paused"]
ClockPhase = Optional[Literal["work", "break"]]


@dataclass(frozen=True)
class ClockSnapshot:
    """Immutable view of the clock for presentation layers."""
    mode: ClockMode
    phase: ClockPhase
    elapsed_seconds: float
    target_seconds: float
    session_count: int

    @property
    def remaining_seconds(self) -> float:
        return max(0.0, self.target_seconds - self.elapsed_seconds)

    @property
    def progress_fraction(self) -> float:
        if self.target_seconds <= 0:
            return 0.0
        return min(1.0, max(0.0, self.elapsed_seconds / self.target_seconds))


@dataclass(frozen=True)
class ClockActionResult:
    action: str
    accepted: bool
    reason: str
    snapshot: ClockSnapshot


class PhaseClock:
    """Work/break state machine advanced by irregular host ticks.

    Every tick measures the real interval since the previous anchor instead
    of adding a nominal step, so late or skipped ticks never accumulate
    drift. Commands issued from a state that does not allow them are
    rejected without side effects.

    With ``auto_publish=False`` events are held back until the owner calls
    ``publish_pending()``, so it can finish its own reactions first.
    """

    def __init__(
        self,
        *,
        bus: EventBus,
        work_duration_seconds: float = DEFAULT_WORK_DURATION_SECONDS,
        break_duration_seconds: float = DEFAULT_BREAK_DURATION_SECONDS,
        monotonic_fn: Optional[Callable[[], float]] = None,
        now_fn: Optional[Callable[[], datetime]] = None,
        logger: Optional[logging.Logger] = None,
        auto_publish: bool = True,
    ):
        if work_duration_seconds <= 0:
            raise ValueError("work_duration_seconds must be greater than zero")
        if break_duration_seconds <= 0:
            raise ValueError("break_duration_seconds must be greater than zero")

        self._bus = bus
        self._work_duration = float(work_duration_seconds)
        self._break_duration = float(break_duration_seconds)
        self._monotonic = monotonic_fn or time.monotonic
        self._now_fn = now_fn
        self._logger = logger or logging.getLogger("cycle.clock")
        self._auto_publish = auto_publish
        self._pending: list[CycleEvent] = []

        self._mode: ClockMode = MODE_IDLE
        self._phase: ClockPhase = None
        self._elapsed: float = 0.0
        self._reference: Optional[float] = None
        self._session_count: int = 0

    @property
    def mode(self) -> ClockMode:
        return self._mode

    @property
    def phase(self) -> ClockPhase:
        return self._phase

    @property
    def elapsed(self) -> float:
        return self._elapsed

    @property
    def reference_timestamp(self) -> Optional[float]:
        return self._reference

    @property
    def session_count(self) -> int:
        return self._session_count

    def target_duration(self, phase: ClockPhase = None) -> float:
        resolved = phase or self._phase
        if resolved == PHASE_BREAK:
            return self._break_duration
        # Idle reports the upcoming work interval.
        return self._work_duration

    def remaining_seconds(self) -> float:
        return self.snapshot().remaining_seconds

    def progress_fraction(self) -> float:
        return self.snapshot().progress_fraction

    def snapshot(self) -> ClockSnapshot:
        return ClockSnapshot(
            mode=self._mode,
            phase=self._phase,
            elapsed_seconds=self._elapsed,
            target_seconds=self.target_duration(),
            session_count=self._session_count,
        )

    def start(self) -> ClockActionResult:
        if self._mode != MODE_IDLE:
            return self._result(ACTION_START, False, REASON_NOT_IDLE)

        self._enter_phase(PHASE_WORK)
        self._logger.info(
            "Work started: session=%d duration=%ss",
            self._session_count,
            self._work_duration,
        )
        self._publish(
            self._event(EventKind.WORK_START, self._work_duration, PHASE_WORK)
        )
        return self._result(ACTION_START, True, REASON_STARTED)

    def pause(self) -> ClockActionResult:
        if self._mode not in RUNNING_MODES:
            return self._result(ACTION_PAUSE, False, REASON_NOT_RUNNING)

        self._mode = MODE_PAUSED
        self._reference = None
        self._logger.info(
            "Clock paused: phase=%s elapsed=%.2fs",
            self._phase,
            self._elapsed,
        )
        return self._result(ACTION_PAUSE, True, REASON_PAUSED)

    def resume(self) -> ClockActionResult:
        if self._mode != MODE_PAUSED:
            return self._result(ACTION_RESUME, False, REASON_NOT_PAUSED)

        self._mode = MODE_WORKING if self._phase == PHASE_WORK else MODE_BREAK_REMINDER
        self._reference = self._monotonic()
        self._logger.info(
            "Clock resumed: phase=%s elapsed=%.2fs",
            self._phase,
            self._elapsed,
        )
        return self._result(ACTION_RESUME, True, REASON_RESUMED)

    def reset(self) -> ClockActionResult:
        self._enter_idle()
        self._logger.info("Clock reset: sessions=%d", self._session_count)
        return self._result(ACTION_RESET, True, REASON_RESET)

    def tick(self) -> tuple[CycleEvent, ...]:
        """Advance elapsed time and apply any phase boundary that was crossed."""
        if self._mode not in RUNNING_MODES or self._reference is None:
            return ()

        now = self._monotonic()
        self._elapsed += max(0.0, now - self._reference)
        self._reference = now

        if self._elapsed < self.target_duration():
            return ()

        if self._phase == PHASE_WORK:
            session_id = self._session_count
            self._enter_phase(PHASE_BREAK)
            events = (
                self._event(
                    EventKind.WORK_COMPLETE,
                    self._work_duration,
                    PHASE_WORK,
                    session_id=session_id,
                ),
                self._event(
                    EventKind.BREAK_START,
                    self._break_duration,
                    PHASE_BREAK,
                    session_id=session_id,
                ),
            )
            self._logger.info("Work completed, break started: session=%d", session_id)
        else:
            self._session_count += 1
            self._enter_idle()
            events = (
                self._event(EventKind.BREAK_COMPLETE, self._break_duration, PHASE_BREAK),
            )
            self._logger.info("Break completed: sessions=%d", self._session_count)

        for event in events:
            self._publish(event)
        return events

    def _enter_phase(self, phase: Literal["work", "break"]) -> None:
        self._phase = phase
        self._mode = MODE_WORKING if phase == PHASE_WORK else MODE_BREAK_REMINDER
        self._elapsed = 0.0
        self._reference = self._monotonic()

    def _enter_idle(self) -> None:
        self._mode = MODE_IDLE
        self._phase = None
        self._elapsed = 0.0
        self._reference = None

    def _event(
        self,
        kind: EventKind,
        duration_seconds: float,
        phase: str,
        *,
        session_id: Optional[int] = None,
    ) -> CycleEvent:
        return make_cycle_event(
            kind,
            duration_seconds=duration_seconds,
            session_id=self._session_count if session_id is None else session_id,
            phase=phase,
            now_fn=self._now_fn,
        )

    def publish_pending(self) -> tuple[CycleEvent, ...]:
        """Publish held-back events in transition order and return them."""
        pending, self._pending = tuple(self._pending), []
        for event in pending:
            self._bus.publish(event)
        return pending

    def _publish(self, event: CycleEvent) -> None:
        if self._auto_publish:
            self._bus.publish(event)
        else:
            self._pending.append(event)

    def _result(self, action: str, accepted: bool, reason: str) -> ClockActionResult:
        if not accepted:
            self._logger.debug("Ignored %s while %s (%s)", action, self._mode, reason)
        return ClockActionResult(
            action=action,
            accepted=accepted,
            reason=reason,
            snapshot=self.snapshot(),
        )
