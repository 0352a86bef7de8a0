"""Runtime loop that drains UI commands and ticks the cycle orchestrator."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from queue import Empty, Queue
from typing import Callable, Optional

from contracts.ui_protocol import (
    COMMAND_ACTIVITY_COMPLETE,
    COMMAND_MANUAL_SELECT,
    COMMAND_PAUSE,
    COMMAND_RESET,
    COMMAND_RESUME,
    COMMAND_START,
)
from cycle import CycleEvent
from server import ClientCommand

from .contracts import StatisticsLike, UIServerLike
from .orchestrator import CycleActionResult, Orchestrator
from .ticks import TickDependencies, TickProcessor
from .ui import RuntimeUIPublisher


@dataclass(frozen=True)
class RuntimeHooks:
    """Injectable lifecycle hooks used by runtime startup and shutdown flow."""
    setup_signal_handlers: Callable[["RuntimeEngine"], None]


@dataclass(frozen=True)
class RuntimeBootstrap:
    """Dependency bundle required to construct the runtime engine."""
    logger: logging.Logger
    orchestrator: Orchestrator
    ui_server: Optional[UIServerLike] = None
    statistics: Optional[StatisticsLike] = None
    statistics_export_file: str = ""
    hooks: Optional[RuntimeHooks] = None


class RuntimeEngine:
    """Single-threaded driver: every orchestrator call happens on the loop thread.

    Other threads hand commands over through `submit`, which only enqueues.
    """

    def __init__(self, bootstrap: RuntimeBootstrap):
        self._bootstrap = bootstrap
        self._logger = bootstrap.logger
        self._orchestrator = bootstrap.orchestrator
        self._tick_interval = self._orchestrator.config.tick_interval_seconds
        self._commands: Queue[ClientCommand] = Queue()
        self._stop_requested = threading.Event()

        self._ui = RuntimeUIPublisher(bootstrap.ui_server)
        statistics = bootstrap.statistics
        self._tick_processor = TickProcessor(
            TickDependencies(
                logger=self._logger,
                ui=self._ui,
                statistics_summary=statistics.summary if statistics is not None else None,
                break_duration_seconds=self._orchestrator.config.break_duration_seconds,
            )
        )
        self._unsubscribe = self._orchestrator.bus.subscribe_all(self._on_cycle_event)

    @property
    def orchestrator(self) -> Orchestrator:
        return self._orchestrator

    def submit(self, command: ClientCommand) -> None:
        """Queue a command for the loop thread. Safe to call from any thread."""
        self._commands.put(command)

    def stop(self) -> None:
        self._stop_requested.set()

    @property
    def stop_requested(self) -> bool:
        return self._stop_requested.is_set()

    def run(self) -> int:
        hooks = self._bootstrap.hooks
        if hooks is not None:
            hooks.setup_signal_handlers(self)

        self._logger.info(
            "Cycle runtime ready (work=%ss, break=%ss)",
            self._orchestrator.config.work_duration_seconds,
            self._orchestrator.config.break_duration_seconds,
        )
        self._publish_statistics()
        self._tick_processor.handle_snapshot(self._orchestrator.snapshot())

        try:
            while not self._stop_requested.is_set():
                self.step(timeout=self._tick_interval)
            return 0
        except KeyboardInterrupt:
            self._logger.info("Shutdown requested by keyboard interrupt.")
            return 0
        except Exception as error:
            self._logger.error("Unexpected error: %s", error, exc_info=True)
            return 1
        finally:
            self._shutdown()

    def step(self, timeout: float = 0.0) -> None:
        """Drain queued commands, then advance the orchestrator by one tick."""
        self._drain_commands(timeout)
        self._orchestrator.tick()
        self._tick_processor.handle_snapshot(self._orchestrator.snapshot())

    def _drain_commands(self, timeout: float) -> None:
        try:
            command = (
                self._commands.get(timeout=timeout)
                if timeout > 0
                else self._commands.get_nowait()
            )
        except Empty:
            return

        while True:
            self._handle_command(command)
            try:
                command = self._commands.get_nowait()
            except Empty:
                return

    def _handle_command(self, command: ClientCommand) -> None:
        result = self._dispatch(command)
        if result is None:
            self._logger.warning("Ignoring unknown command: %s", command.name)
            return

        self._logger.info(
            "Command %s -> accepted=%s reason=%s",
            result.action,
            result.accepted,
            result.reason,
        )
        self._ui.publish_command_result(result)

    def _dispatch(self, command: ClientCommand) -> Optional[CycleActionResult]:
        orchestrator = self._orchestrator
        if command.name == COMMAND_START:
            return orchestrator.start()
        if command.name == COMMAND_PAUSE:
            return orchestrator.pause()
        if command.name == COMMAND_RESUME:
            return orchestrator.resume()
        if command.name == COMMAND_RESET:
            return orchestrator.reset()
        if command.name == COMMAND_MANUAL_SELECT:
            return orchestrator.manual_select(command.kind or "")
        if command.name == COMMAND_ACTIVITY_COMPLETE:
            return orchestrator.signal_activity_completion()
        return None

    def _on_cycle_event(self, event: CycleEvent) -> None:
        self._logger.info(
            "%s (session=%d, duration=%.1fs)",
            event.kind.value,
            event.session_id,
            event.duration_seconds,
        )
        self._tick_processor.handle_event(event)

    def _publish_statistics(self) -> None:
        statistics = self._bootstrap.statistics
        if statistics is None:
            return
        self._ui.publish_statistics(statistics.summary())

    def _shutdown(self) -> None:
        self._unsubscribe()
        self._orchestrator.close()

        statistics = self._bootstrap.statistics
        export_file = self._bootstrap.statistics_export_file
        if statistics is not None and export_file:
            self._logger.info("Exporting statistics...")
            try:
                statistics.export_to_file(Path(export_file))
            except OSError as error:
                self._logger.error("Failed to export statistics: %s", error, exc_info=True)

        ui_server = self._bootstrap.ui_server
        if ui_server is not None:
            self._logger.info("Stopping UI server...")
            try:
                ui_server.stop(timeout_seconds=5.0)
            except Exception as error:
                self._logger.error("Error stopping UI server: %s", error, exc_info=True)
