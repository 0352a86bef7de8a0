"""One-shot deferred callbacks pumped from the host tick."""

from __future__ import annotations

import heapq
import itertools
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Optional


@dataclass(order=True)
class DeferredTask:
    due_at: float
    sequence: int
    name: str = field(compare=False)
    callback: Callable[[], None] = field(compare=False, repr=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True


class DeferredScheduler:
    """Timer heap without threads.

    Nothing fires on its own: ``run_due`` executes every task whose due time
    has passed, in due order. Staleness checks are the caller's concern.
    """

    def __init__(
        self,
        *,
        monotonic_fn: Optional[Callable[[], float]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._monotonic = monotonic_fn or time.monotonic
        self._logger = logger or logging.getLogger("cycle.deferred")
        self._heap: list[DeferredTask] = []
        self._sequence = itertools.count()

    def call_later(
        self,
        delay_seconds: float,
        callback: Callable[[], None],
        *,
        name: str = "",
    ) -> DeferredTask:
        task = DeferredTask(
            due_at=self._monotonic() + max(0.0, float(delay_seconds)),
            sequence=next(self._sequence),
            name=name or getattr(callback, "__qualname__", "deferred"),
            callback=callback,
        )
        heapq.heappush(self._heap, task)
        return task

    def pending(self) -> int:
        return sum(1 for task in self._heap if not task.cancelled)

    def run_due(self, now: Optional[float] = None) -> int:
        """Run due tasks and return how many callbacks were invoked."""
        current = self._monotonic() if now is None else now
        fired = 0
        while self._heap and self._heap[0].due_at <= current:
            task = heapq.heappop(self._heap)
            if task.cancelled:
                continue
            fired += 1
            try:
                task.callback()
            except Exception as error:
                self._logger.error(
                    "Deferred task %s failed: %s",
                    task.name,
                    error,
                    exc_info=True,
                )
        return fired

    def clear(self) -> None:
        self._heap.clear()
