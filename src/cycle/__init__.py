from .clock import ClockActionResult, ClockSnapshot, PhaseClock
from .deferred import DeferredScheduler, DeferredTask
from .events import (
    CycleEvent,
    DeliveryResult,
    EventBus,
    EventKind,
    PublishReport,
    make_cycle_event,
)

__all__ = [
    "ClockActionResult",
    "ClockSnapshot",
    "CycleEvent",
    "DeferredScheduler",
    "DeferredTask",
    "DeliveryResult",
    "EventBus",
    "EventKind",
    "PhaseClock",
    "PublishReport",
    "make_cycle_event",
]
