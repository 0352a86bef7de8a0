"""Protocols describing runtime-facing server and statistics capabilities."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Protocol


class UIServerLike(Protocol):
    """Websocket server interface used by the runtime publisher and shutdown."""
    def publish(self, event_type: str, **payload: Any) -> None:
        ...

    def stop(self, timeout_seconds: float = 5.0) -> None:
        ...


class StatisticsLike(Protocol):
    """Statistics recorder interface required by the runtime engine."""
    def summary(self) -> Mapping[str, Any]:
        ...

    def export_to_file(self, path: str | Path) -> Path:
        ...
