"""Immutable cycle events and the isolated publish/subscribe bus."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional


class EventKind(str, Enum):
    """Semantic transitions announced to downstream consumers."""
    WORK_START = "WORK_START"
    WORK_COMPLETE = "WORK_COMPLETE"
    BREAK_START = "BREAK_START"
    BREAK_COMPLETE = "BREAK_COMPLETE"
    ACTIVITY_COMPLETE = "ACTIVITY_COMPLETE"


@dataclass(frozen=True)
class CycleEvent:
    """Value object handed to every subscriber; metadata is read-only."""
    kind: EventKind
    timestamp: datetime
    duration_seconds: float
    session_id: int
    phase: str
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    def to_payload(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "timestamp": self.timestamp.isoformat(),
            "duration_seconds": self.duration_seconds,
            "session_id": self.session_id,
            "phase": self.phase,
            "metadata": dict(self.metadata),
        }


EventListener = Callable[[CycleEvent], None]


@dataclass(frozen=True)
class DeliveryResult:
    listener: str
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class PublishReport:
    """Per-subscriber outcome of a single publish call."""
    event: CycleEvent
    results: tuple[DeliveryResult, ...] = ()

    @property
    def delivered(self) -> int:
        return sum(1 for result in self.results if result.ok)

    @property
    def failures(self) -> tuple[DeliveryResult, ...]:
        return tuple(result for result in self.results if not result.ok)


def make_cycle_event(
    kind: EventKind,
    *,
    duration_seconds: float,
    session_id: int,
    phase: str,
    metadata: Optional[Mapping[str, Any]] = None,
    now_fn: Callable[[], datetime] | None = None,
) -> CycleEvent:
    now = now_fn() if now_fn is not None else datetime.now(timezone.utc)
    return CycleEvent(
        kind=kind,
        timestamp=now,
        duration_seconds=float(duration_seconds),
        session_id=int(session_id),
        phase=phase,
        metadata=metadata or {},
    )


class EventBus:
    """Typed fan-out channel.

    Listeners subscribe to one kind, or to every kind with ``kind=None``.
    Delivery follows subscription order and one failing listener never
    prevents the remaining ones from receiving the event.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger("cycle.events")
        self._listeners: dict[Optional[EventKind], list[EventListener]] = {}
        self._order: list[tuple[Optional[EventKind], EventListener]] = []

    def subscribe(
        self,
        kind: Optional[EventKind],
        listener: EventListener,
    ) -> Callable[[], None]:
        """Register a listener and return a callable that removes it again."""
        self._listeners.setdefault(kind, []).append(listener)
        self._order.append((kind, listener))

        def unsubscribe() -> None:
            self.unsubscribe(kind, listener)

        return unsubscribe

    def subscribe_all(self, listener: EventListener) -> Callable[[], None]:
        return self.subscribe(None, listener)

    def unsubscribe(self, kind: Optional[EventKind], listener: EventListener) -> None:
        listeners = self._listeners.get(kind)
        if not listeners or listener not in listeners:
            return
        listeners.remove(listener)
        self._order.remove((kind, listener))

    def listener_count(self, kind: Optional[EventKind] = None) -> int:
        return len(self._listeners.get(kind, ()))

    def publish(self, event: CycleEvent) -> PublishReport:
        # Snapshot so listeners may (un)subscribe while being notified.
        targets = [
            listener
            for kind, listener in tuple(self._order)
            if kind is None or kind == event.kind
        ]
        results: list[DeliveryResult] = []
        for listener in targets:
            name = _listener_name(listener)
            try:
                listener(event)
            except Exception as error:
                self._logger.error(
                    "Listener %s failed for %s: %s",
                    name,
                    event.kind.value,
                    error,
                    exc_info=True,
                )
                results.append(DeliveryResult(listener=name, error=error))
            else:
                results.append(DeliveryResult(listener=name))

        self._logger.debug(
            "Published %s to %d listener(s)",
            event.kind.value,
            len(results),
        )
        return PublishReport(event=event, results=tuple(results))


def _listener_name(listener: EventListener) -> str:
    return getattr(listener, "__qualname__", None) or repr(listener)
