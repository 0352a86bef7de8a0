from .catalog import (
    ACTIVITY_CATALOG,
    ActivityKind,
    ActivityMetadata,
    available_kinds,
    get_metadata,
    parse_kind,
)
from .machine import ActivityMachine, ActivitySnapshot
from .selector import ActivitySelector, pick_automatic

__all__ = [
    "ACTIVITY_CATALOG",
    "ActivityKind",
    "ActivityMachine",
    "ActivityMetadata",
    "ActivitySelector",
    "ActivitySnapshot",
    "available_kinds",
    "get_metadata",
    "parse_kind",
    "pick_automatic",
]
