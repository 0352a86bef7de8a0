"""Binds the phase clock to the break activity and owns both."""

from __future__ import annotations

import logging
import math
import random
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from activity import ActivityKind, ActivityMachine, ActivitySelector, parse_kind
from activity.constants import (
    STATE_COMPLETED,
    STATE_COMPLETING,
    STATE_IDLE,
    STATE_PAUSED,
    STATE_RUNNING,
)
from activity.machine import ActivitySnapshot
from cycle import CycleEvent, DeferredScheduler, EventBus, EventKind, PhaseClock
from cycle.clock import ClockMode, ClockPhase
from cycle.constants import (
    ACTION_ACTIVITY_COMPLETE,
    ACTION_MANUAL_SELECT,
    MODE_BREAK_REMINDER,
    MODE_IDLE,
    MODE_PAUSED,
    PHASE_ACTIVITY,
    REASON_COMPLETING,
    REASON_NOT_RUNNING,
    REASON_SELECTED,
    REASON_UNKNOWN_KIND,
    REASON_WINDOW_CLOSED,
    RUNNING_MODES,
)
from cycle.events import make_cycle_event

from .config import CycleConfig


@dataclass(frozen=True)
class CycleSnapshot:
    """Combined clock and activity view for presentation layers."""
    mode: ClockMode
    phase: ClockPhase
    remaining_seconds: int
    progress_fraction: float
    session_count: int
    activity_state: str
    activity_kind: Optional[str]
    manual_window_open: bool

    @property
    def is_active(self) -> bool:
        return self.mode != MODE_IDLE


@dataclass(frozen=True)
class CycleActionResult:
    """Result envelope returned after applying a command."""
    action: str
    accepted: bool
    reason: str
    snapshot: CycleSnapshot


class Orchestrator:
    """Sole mutator of the phase clock and the activity machine.

    Reactions are keyed on the edge of a clock transition, never on the
    level, so duplicate ticks or repeated commands cannot launch or record
    an activity twice.
    """

    def __init__(
        self,
        config: Optional[CycleConfig] = None,
        *,
        bus: Optional[EventBus] = None,
        monotonic_fn: Optional[Callable[[], float]] = None,
        now_fn: Optional[Callable[[], datetime]] = None,
        rng: Optional[random.Random] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._config = config or CycleConfig()
        self._monotonic = monotonic_fn or time.monotonic
        self._now_fn = now_fn
        self._logger = logger or logging.getLogger("runtime.orchestrator")

        self._bus = bus or EventBus()
        self._scheduler = DeferredScheduler(monotonic_fn=self._monotonic)
        self._clock = PhaseClock(
            bus=self._bus,
            work_duration_seconds=self._config.work_duration_seconds,
            break_duration_seconds=self._config.break_duration_seconds,
            monotonic_fn=self._monotonic,
            now_fn=now_fn,
            auto_publish=False,
        )
        self._selector = ActivitySelector(
            history_depth=self._config.history_depth,
            preferred_kind=self._config.preferred_kind,
            rng=rng,
            monotonic_fn=self._monotonic,
        )
        self._activity = ActivityMachine(
            scheduler=self._scheduler,
            launch_delay_seconds=self._config.launch_delay_seconds,
            completion_delay_seconds=self._config.completion_delay_seconds,
            monotonic_fn=self._monotonic,
        )
        self._activity.add_listener(self._on_activity_state)

        self._break_latched = False
        self._break_generation = 0
        self._paused_by_clock = False
        self._recorded_generation: Optional[int] = None

    @property
    def bus(self) -> EventBus:
        return self._bus

    @property
    def config(self) -> CycleConfig:
        return self._config

    # Commands

    def start(self) -> CycleActionResult:
        return self._apply_clock(self._clock.start)

    def pause(self) -> CycleActionResult:
        return self._apply_clock(self._clock.pause)

    def resume(self) -> CycleActionResult:
        return self._apply_clock(self._clock.resume)

    def reset(self) -> CycleActionResult:
        def reset_all():
            result = self._clock.reset()
            # Also covers a completed activity whose grace reset is still pending.
            self._activity.reset()
            self._selector.close_manual_window()
            return result

        return self._apply_clock(reset_all)

    def manual_select(self, kind: ActivityKind | str) -> CycleActionResult:
        parsed = parse_kind(kind)
        if parsed is None:
            return self._result(ACTION_MANUAL_SELECT, False, REASON_UNKNOWN_KIND)
        if not self._break_latched or not self._selector.claim_manual_pick(parsed):
            return self._result(ACTION_MANUAL_SELECT, False, REASON_WINDOW_CLOSED)

        if self._activity.selected != parsed:
            self._logger.info(
                "Manual selection overrides %s with %s",
                self._activity.selected.value if self._activity.selected else "none",
                parsed.value,
            )
            self._activity.reset()
            self._paused_by_clock = False
            self._activity.launch(parsed)
        return self._result(ACTION_MANUAL_SELECT, True, REASON_SELECTED)

    def signal_activity_completion(self) -> CycleActionResult:
        if not self._activity.signal_completion():
            return self._result(ACTION_ACTIVITY_COMPLETE, False, REASON_NOT_RUNNING)
        return self._result(ACTION_ACTIVITY_COMPLETE, True, REASON_COMPLETING)

    def tick(self) -> tuple[CycleEvent, ...]:
        """Advance the clock, react to its edges, then run due deferred work.

        Clock events are published only after the reactions have run, so
        subscribers always see the activity side already updated.
        """
        previous = self._clock.mode
        self._clock.tick()
        self._observe_clock(previous)
        events = self._clock.publish_pending()
        self._scheduler.run_due()
        return events

    def close(self) -> None:
        """Drop deferred work so nothing fires once the host stops ticking."""
        dropped = self._scheduler.pending()
        self._scheduler.clear()
        self._selector.close_manual_window()
        if dropped:
            self._logger.info("Dropped %d pending deferred task(s)", dropped)

    # Queries

    def remaining_seconds(self) -> float:
        return self._clock.remaining_seconds()

    def progress_fraction(self) -> float:
        return self._clock.progress_fraction()

    def session_count(self) -> int:
        return self._clock.session_count

    def current_phase_mode(self) -> tuple[ClockMode, ClockPhase]:
        return self._clock.mode, self._clock.phase

    def activity_state(self) -> ActivitySnapshot:
        return self._activity.snapshot()

    def activity_history(self) -> tuple[ActivityKind, ...]:
        return self._selector.history

    def snapshot(self) -> CycleSnapshot:
        clock = self._clock.snapshot()
        activity = self._activity.snapshot()
        return CycleSnapshot(
            mode=clock.mode,
            phase=clock.phase,
            remaining_seconds=int(math.ceil(clock.remaining_seconds)),
            progress_fraction=clock.progress_fraction,
            session_count=clock.session_count,
            activity_state=activity.state,
            activity_kind=activity.selected.value if activity.selected else None,
            manual_window_open=self._selector.is_manual_window_open(),
        )

    # Edge reactions

    def _apply_clock(self, command) -> CycleActionResult:
        previous = self._clock.mode
        result = command()
        self._observe_clock(previous)
        self._clock.publish_pending()
        return CycleActionResult(
            action=result.action,
            accepted=result.accepted,
            reason=result.reason,
            snapshot=self.snapshot(),
        )

    def _observe_clock(self, previous: ClockMode) -> None:
        current = self._clock.mode
        if current == previous:
            return

        if current == MODE_BREAK_REMINDER and not self._break_latched:
            self._on_break_start()
        if current == MODE_PAUSED:
            self._on_clock_paused()
        if previous == MODE_PAUSED and current in RUNNING_MODES:
            self._on_clock_resumed()
        if current == MODE_IDLE:
            self._on_clock_idle(previous)

    def _on_break_start(self) -> None:
        self._break_latched = True
        self._break_generation += 1
        if not self._config.auto_launch:
            self._logger.info("Break started without activity (auto launch disabled)")
            return

        if self._config.enable_manual_selection:
            self._selector.open_manual_window(self._config.manual_selection_window_ms)
            generation = self._break_generation
            self._scheduler.call_later(
                self._config.manual_selection_window_ms / 1000.0,
                lambda: self._on_manual_window_expired(generation),
                name="selector.window",
            )

        kind = self._selector.pick_automatic()
        if self._activity.state != STATE_IDLE:
            self._activity.reset()
        self._paused_by_clock = False
        self._activity.launch(kind)

    def _on_manual_window_expired(self, generation: int) -> None:
        if generation != self._break_generation:
            return
        self._selector.close_manual_window()
        selected = self._activity.selected
        self._logger.info(
            "Manual selection window closed: activity=%s",
            selected.value if selected else "none",
        )

    def _on_clock_paused(self) -> None:
        if self._activity.pause():
            self._paused_by_clock = True

    def _on_clock_resumed(self) -> None:
        if self._paused_by_clock and self._activity.state == STATE_PAUSED:
            self._activity.resume()
        self._paused_by_clock = False

    def _on_clock_idle(self, previous: ClockMode) -> None:
        was_break = self._break_latched
        self._break_latched = False
        self._break_generation += 1
        self._paused_by_clock = False
        self._selector.close_manual_window()

        if self._activity.state == STATE_COMPLETED:
            return
        if was_break and self._activity.selected is not None:
            # Break ran out first: abandoned, not a tracked completion.
            self._logger.info(
                "Break ended before activity completed (from %s); resetting",
                previous,
            )
        self._activity.reset()

    def _on_activity_state(self, previous: str, current: str) -> None:
        if current == STATE_RUNNING and self._clock.mode == MODE_PAUSED:
            # Launch delay elapsed while the clock was paused.
            if self._activity.pause():
                self._paused_by_clock = True
            return

        if current == STATE_COMPLETING:
            # The break's activity is settled; no late override.
            self._selector.close_manual_window()
        elif current == STATE_COMPLETED:
            self._on_activity_completed()

    def _on_activity_completed(self) -> None:
        generation = self._activity.generation
        if self._recorded_generation == generation:
            return
        self._recorded_generation = generation

        kind = self._activity.selected
        if kind is None:
            return
        started_at = self._activity.started_at
        duration = 0.0 if started_at is None else max(0.0, self._monotonic() - started_at)

        self._selector.record_completion(kind)
        self._activity.reset_after(self._config.completed_grace_seconds)
        self._logger.info("Activity completed: %s (%.1fs)", kind.value, duration)
        self._bus.publish(
            make_cycle_event(
                EventKind.ACTIVITY_COMPLETE,
                duration_seconds=round(duration, 1),
                session_id=self._clock.session_count,
                phase=PHASE_ACTIVITY,
                metadata={"activity_kind": kind.value},
                now_fn=self._now_fn,
            )
        )

    def _result(self, action: str, accepted: bool, reason: str) -> CycleActionResult:
        if not accepted:
            self._logger.debug("Ignored %s (%s)", action, reason)
        return CycleActionResult(
            action=action,
            accepted=accepted,
            reason=reason,
            snapshot=self.snapshot(),
        )
