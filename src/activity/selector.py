"""Random-with-recency activity selection and the manual override window."""

from __future__ import annotations

import logging
import random
import time
from collections import deque
from typing import Callable, Optional, Sequence

from .catalog import ActivityKind, available_kinds
from .constants import DEFAULT_HISTORY_DEPTH


def pick_automatic(
    kinds: Sequence[ActivityKind],
    history: Sequence[ActivityKind],
    *,
    history_depth: int,
    preferred_kind: Optional[ActivityKind] = None,
    rng: Optional[random.Random] = None,
) -> ActivityKind:
    """Choose an activity, avoiding the most recent completions.

    Only the trailing ``min(history_depth, len(kinds) - 1)`` entries are
    excluded, so repeats are bounded rather than forbidden. An exhausted
    pool falls back to every kind.
    """
    if preferred_kind is not None:
        return preferred_kind
    if not kinds:
        raise ValueError("kinds must not be empty")

    exclude_count = max(0, min(history_depth, len(kinds) - 1))
    recent = set(history[-exclude_count:]) if exclude_count else set()
    pool = [kind for kind in kinds if kind not in recent] or list(kinds)
    return (rng or random).choice(pool)


class ActivitySelector:
    """Owns the completion history and the one-shot manual selection window."""

    def __init__(
        self,
        *,
        kinds: Optional[Sequence[ActivityKind]] = None,
        history_depth: int = DEFAULT_HISTORY_DEPTH,
        preferred_kind: Optional[ActivityKind] = None,
        rng: Optional[random.Random] = None,
        monotonic_fn: Optional[Callable[[], float]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        if history_depth < 1:
            raise ValueError("history_depth must be at least 1")

        self._kinds = tuple(kinds) if kinds else available_kinds()
        self._history_depth = int(history_depth)
        self._preferred_kind = preferred_kind
        self._rng = rng or random.Random()
        self._monotonic = monotonic_fn or time.monotonic
        self._logger = logger or logging.getLogger("activity.selector")

        self._history: deque[ActivityKind] = deque(maxlen=self._history_depth)
        self._manual_deadline: Optional[float] = None
        self._manual_used = False

    @property
    def history(self) -> tuple[ActivityKind, ...]:
        return tuple(self._history)

    @property
    def manual_window_deadline(self) -> Optional[float]:
        return self._manual_deadline

    @property
    def preferred_kind(self) -> Optional[ActivityKind]:
        return self._preferred_kind

    def pick_automatic(
        self,
        history: Optional[Sequence[ActivityKind]] = None,
        preferred_kind: Optional[ActivityKind] = None,
    ) -> ActivityKind:
        return pick_automatic(
            self._kinds,
            tuple(self._history) if history is None else tuple(history),
            history_depth=self._history_depth,
            preferred_kind=preferred_kind or self._preferred_kind,
            rng=self._rng,
        )

    def open_manual_window(self, duration_ms: float) -> float:
        deadline = self._monotonic() + max(0.0, float(duration_ms)) / 1000.0
        self._manual_deadline = deadline
        self._manual_used = False
        self._logger.debug("Manual selection window open for %sms", duration_ms)
        return deadline

    def is_manual_window_open(self) -> bool:
        if self._manual_deadline is None or self._manual_used:
            return False
        return self._monotonic() < self._manual_deadline

    def claim_manual_pick(self, kind: ActivityKind) -> bool:
        """Consume the window for ``kind``; False once expired or already used."""
        if kind not in self._kinds or not self.is_manual_window_open():
            return False
        self._manual_used = True
        self._logger.info("Manual selection: %s", kind.value)
        return True

    def close_manual_window(self) -> None:
        self._manual_deadline = None
        self._manual_used = False

    def record_completion(self, kind: ActivityKind) -> None:
        self._history.append(kind)
        self._logger.debug(
            "History updated: %s",
            ", ".join(item.value for item in self._history),
        )
