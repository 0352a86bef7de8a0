from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from typing import Callable, Optional
from urllib.parse import urlsplit

import websockets
from websockets.asyncio.server import ServerConnection, broadcast
from websockets.datastructures import Headers
from websockets.http11 import Request, Response

from contracts.ui_protocol import EVENT_ERROR, EVENT_HELLO

from .config import HEALTHZ_PATH, INDEX_PATH, ROOT_PATH, UIServerConfig
from .events import (
    ClientCommand,
    CommandParseError,
    StickyEventStore,
    make_event,
    parse_client_command,
)

CommandSink = Callable[[ClientCommand], None]

_TEXT = "text/plain; charset=utf-8"
_HTML = "text/html; charset=utf-8"


class UIServer:
    """Cycle status server: events out to every client, commands in to the engine.

    The asyncio loop lives on its own thread. ``publish`` may be called from
    any thread; incoming commands are handed to ``command_sink`` unchanged,
    so the sink must be thread-safe (the runtime engine only enqueues).
    """

    def __init__(
        self,
        config: UIServerConfig,
        logger: Optional[logging.Logger] = None,
        *,
        command_sink: Optional[CommandSink] = None,
    ):
        self._config = config
        self._logger = logger or logging.getLogger("ui_server")
        self._command_sink = command_sink
        self._thread: Optional[threading.Thread] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._stop_async: Optional[asyncio.Event] = None
        self._started = threading.Event()
        self._startup_error: Optional[Exception] = None
        self._clients: set[ServerConnection] = set()
        self._sticky_events = StickyEventStore()
        self._routes = self._build_routes()

    @property
    def host(self) -> str:
        return self._config.host

    @property
    def port(self) -> int:
        return self._config.port

    @property
    def is_running(self) -> bool:
        return (
            self._thread is not None
            and self._thread.is_alive()
            and self._startup_error is None
        )

    def set_command_sink(self, sink: Optional[CommandSink]) -> None:
        self._command_sink = sink

    def start(self, timeout_seconds: float = 5.0) -> None:
        if self.is_running:
            self._logger.warning("UI server is already running")
            return

        self._startup_error = None
        self._started.clear()
        self._thread = threading.Thread(
            target=self._run_loop,
            daemon=True,
            name="ui-server",
        )
        self._thread.start()

        if not self._started.wait(timeout_seconds):
            raise RuntimeError(
                f"UI server did not start within {timeout_seconds:.1f}s"
            )
        if self._startup_error is not None:
            raise RuntimeError(f"UI server startup failed: {self._startup_error}")

    def stop(self, timeout_seconds: float = 5.0) -> None:
        if self._thread is None:
            return

        if self._loop and self._stop_async:
            self._loop.call_soon_threadsafe(self._stop_async.set)

        self._thread.join(timeout=timeout_seconds)
        if self._thread.is_alive():
            self._logger.error(
                "UI server thread did not stop within %.1fs",
                timeout_seconds,
            )

        self._thread = None
        self._loop = None
        self._stop_async = None

    def publish(self, event_type: str, **payload) -> None:
        """Remember sticky events and fan the message out to live clients."""
        message = make_event(event_type, **payload)
        self._sticky_events.remember(event_type, message)

        loop = self._loop
        if not self.is_running or loop is None:
            return
        with contextlib.suppress(RuntimeError):
            # Loop may be shutting down.
            loop.call_soon_threadsafe(self._send_to_clients, message)

    def sticky_events(self) -> list[str]:
        return self._sticky_events.snapshot()

    def handle_client_message(self, raw: str | bytes) -> Optional[str]:
        """Forward one client command to the sink; returns an error event for bad input."""
        try:
            command = parse_client_command(raw)
        except CommandParseError as error:
            self._logger.warning("Rejected UI command: %s", error)
            return make_event(EVENT_ERROR, message=str(error))

        if self._command_sink is None:
            self._logger.debug("No command sink attached; dropping %s", command.name)
            return None

        self._logger.debug("UI command: %s", command.name)
        self._command_sink(command)
        return None

    def http_response_for(self, path: str) -> Optional[Response]:
        """Plain HTTP answer for ``path``; None hands the request to the websocket."""
        if path == self._config.websocket_path:
            return None
        status, body, content_type = self._routes.get(
            path, (404, b"not found\n", _TEXT)
        )
        headers = Headers()
        headers["Content-Type"] = content_type
        headers["Content-Length"] = str(len(body))
        headers["Cache-Control"] = "no-store"
        return Response(status, "OK" if status == 200 else "Not Found", headers, body)

    def _build_routes(self) -> dict[str, tuple[int, bytes, str]]:
        routes = {HEALTHZ_PATH: (200, b"ok\n", _TEXT)}
        index_path = self._config.index_path
        if index_path is not None:
            page = (200, index_path.read_bytes(), _HTML)
            routes[ROOT_PATH] = page
            routes[INDEX_PATH] = page
        return routes

    def _send_to_clients(self, message: str) -> None:
        # Closed or failing connections are skipped; their handlers clean up.
        broadcast(self._clients, message)

    def _run_loop(self) -> None:
        self._loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self._loop)
        self._stop_async = asyncio.Event()

        try:
            self._loop.run_until_complete(self._serve())
        except Exception as error:  # pragma: no cover - needs a bound socket
            self._startup_error = error
            self._logger.error("UI server failed: %s", error, exc_info=True)
            self._started.set()
        finally:
            if self._loop is not None:
                pending = asyncio.all_tasks(self._loop)
                for task in pending:
                    task.cancel()
                with contextlib.suppress(Exception):
                    self._loop.run_until_complete(
                        asyncio.gather(*pending, return_exceptions=True)
                    )
                self._loop.close()

    async def _serve(self) -> None:
        # Leaving the context closes every open connection with 1001.
        async with websockets.serve(
            self._handler,
            host=self._config.host,
            port=self._config.port,
            process_request=self._process_request,
            logger=self._logger,
        ):
            self._logger.info(
                "UI server running at http://%s:%d (websocket: %s)",
                self._config.host,
                self._config.port,
                self._config.websocket_path,
            )
            self._started.set()
            await self._stop_async.wait()

    async def _handler(self, websocket: ServerConnection) -> None:
        self._clients.add(websocket)
        self._logger.info("Client connected: %s", websocket.remote_address)
        try:
            await websocket.send(make_event(EVENT_HELLO, message="UI websocket connected"))
            for message in self._sticky_events.snapshot():
                await websocket.send(message)

            async for raw in websocket:
                error_reply = self.handle_client_message(raw)
                if error_reply is not None:
                    await websocket.send(error_reply)
        except websockets.exceptions.ConnectionClosed as closed:
            self._logger.debug("Connection closed: %s", closed)
        finally:
            self._clients.discard(websocket)
            self._logger.info("Client disconnected: %s", websocket.remote_address)

    async def _process_request(
        self,
        connection: ServerConnection,
        request: Request,
    ) -> Response | None:
        del connection
        return self.http_response_for(urlsplit(request.path).path)
