from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import threading
from http import HTTPStatus
from typing import Any, Optional
from urllib.parse import urlsplit

import websockets
from websockets.asyncio.server import ServerConnection
from websockets.datastructures import Headers
from websockets.http11 import Request, Response

from contracts.ws_protocol import EVENT_ERROR, EVENT_HELLO, EVENT_POMODORO
from pomodoro import SessionRegistry, status_code_for
from pomodoro.constants import ACTION_READ

from .commands import CommandError, handle_command, result_payload
from .config import HEALTHZ_PATH, POMODORO_PATH, ROOT_PATH, ServerConfig
from .events import StickyEventStore, make_event


class SessionServer:
    """Threaded asyncio server exposing the session registry over HTTP + websocket."""

    def __init__(
        self,
        config: ServerConfig,
        registry: SessionRegistry,
        logger: Optional[logging.Logger] = None,
    ):
        self._config = config
        self._registry = registry
        self._logger = logger or logging.getLogger("server")
        self._thread: Optional[threading.Thread] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._stop_async: Optional[asyncio.Event] = None
        self._started = threading.Event()
        self._startup_error: Optional[Exception] = None
        self._connected_clients: set[ServerConnection] = set()
        self._sticky_events = StickyEventStore()

    @property
    def host(self) -> str:
        return self._config.host

    @property
    def port(self) -> int:
        return self._config.port

    @property
    def websocket_path(self) -> str:
        return self._config.websocket_path

    @property
    def is_running(self) -> bool:
        return (
            self._thread is not None
            and self._thread.is_alive()
            and self._startup_error is None
        )

    def start(self, timeout_seconds: float = 5.0) -> None:
        if self.is_running:
            self._logger.warning("Server is already running")
            return

        self._startup_error = None
        self._started.clear()
        self._thread = threading.Thread(
            target=self._run_loop,
            daemon=True,
            name="session-server",
        )
        self._thread.start()

        if not self._started.wait(timeout_seconds):
            raise RuntimeError(
                f"Server did not start within {timeout_seconds:.1f}s"
            )

        if self._startup_error is not None:
            raise RuntimeError(f"Server startup failed: {self._startup_error}")

    def stop(self, timeout_seconds: float = 5.0) -> None:
        if self._thread is None:
            return

        if self._loop and self._stop_async:
            self._loop.call_soon_threadsafe(self._stop_async.set)

        self._thread.join(timeout=timeout_seconds)
        if self._thread.is_alive():
            self._logger.error(
                "Server thread did not stop within %.1fs",
                timeout_seconds,
            )

        self._thread = None
        self._loop = None
        self._stop_async = None

    def publish(self, event_type: str, **payload: Any) -> None:
        """Broadcast an event to every client; safe to call from any thread."""
        message = make_event(event_type, **payload)
        self._sticky_events.remember(event_type, message, action=payload.get("action"))
        if not self.is_running or self._loop is None:
            return

        try:
            future = asyncio.run_coroutine_threadsafe(
                self._broadcast(message),
                self._loop,
            )
            future.add_done_callback(self._consume_future_exception)
        except RuntimeError:
            # Loop may be shutting down.
            return

    @staticmethod
    def _consume_future_exception(future) -> None:
        with contextlib.suppress(Exception):
            future.result()

    def _run_loop(self) -> None:
        self._loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self._loop)
        self._stop_async = asyncio.Event()

        try:
            self._loop.run_until_complete(self._serve())
        except Exception as error:  # pragma: no cover - exercised manually
            self._startup_error = error
            self._logger.error("Server failed: %s", error, exc_info=True)
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
        async with websockets.serve(
            self._handler,
            host=self._config.host,
            port=self._config.port,
            process_request=self._process_request,
            logger=self._logger,
        ):
            self._logger.info(
                "Server running at http://%s:%d (websocket: %s)",
                self._config.host,
                self._config.port,
                self._config.websocket_path,
            )
            self._started.set()
            await self._stop_async.wait()
            await self._close_clients()

    async def _handler(self, websocket: ServerConnection) -> None:
        request_path = (
            urlsplit(websocket.request.path).path
            if websocket.request is not None
            else ""
        )
        if request_path != self._config.websocket_path:
            await websocket.close(code=1008, reason="Invalid websocket path")
            return

        self._connected_clients.add(websocket)
        self._logger.info("Client connected: %s", websocket.remote_address)
        try:
            await websocket.send(
                make_event(EVENT_HELLO, message="Session websocket connected")
            )
            for sticky in self._sticky_events.snapshot():
                await websocket.send(sticky)
            async for message in websocket:
                self._logger.debug("Received from client: %s", message)
                await self._apply_command(websocket, message)
        except websockets.exceptions.ConnectionClosed:
            self._logger.info("Client disconnected: %s", websocket.remote_address)
        finally:
            self._connected_clients.discard(websocket)

    async def _apply_command(
        self,
        websocket: ServerConnection,
        message: str | bytes,
    ) -> None:
        try:
            # Registry calls take threading locks; keep them off the event loop.
            result = await asyncio.to_thread(handle_command, self._registry, message)
        except CommandError as error:
            self._logger.warning("Rejected command: %s", error)
            await websocket.send(make_event(EVENT_ERROR, message=str(error)))
            return

        event = make_event(EVENT_POMODORO, **result_payload(result))
        await websocket.send(event)
        if result.accepted and result.action != ACTION_READ:
            self._sticky_events.remember(EVENT_POMODORO, event, action=result.action)
            await self._broadcast(event, exclude=websocket)

    async def _process_request(
        self,
        connection: ServerConnection,
        request: Request,
    ) -> Response | None:
        del connection  # Unused in HTTP routing.
        path = urlsplit(request.path).path

        if path == self._config.websocket_path:
            return None

        if path == ROOT_PATH:
            return self._json_response(200, "pong")

        if path == POMODORO_PATH:
            result = await asyncio.to_thread(self._registry.read)
            return self._json_response(status_code_for(result), result_payload(result))

        if path == HEALTHZ_PATH:
            return self._response(200, b"ok\n", "text/plain; charset=utf-8")

        return self._response(404, b"not found\n", "text/plain; charset=utf-8")

    def _json_response(self, status_code: int, payload: Any) -> Response:
        body = json.dumps(payload).encode("utf-8")
        return self._response(status_code, body, "application/json")

    def _response(
        self,
        status_code: int,
        body: bytes,
        content_type: str,
    ) -> Response:
        headers = Headers()
        headers["Content-Type"] = content_type
        headers["Content-Length"] = str(len(body))
        headers["Cache-Control"] = "no-store"
        return Response(status_code, HTTPStatus(status_code).phrase, headers, body)

    async def _close_clients(self) -> None:
        if not self._connected_clients:
            return

        tasks = [
            client.close(code=1001, reason="Server shutting down")
            for client in tuple(self._connected_clients)
        ]
        await asyncio.gather(*tasks, return_exceptions=True)
        self._connected_clients.clear()

    async def _broadcast(
        self,
        message: str,
        *,
        exclude: Optional[ServerConnection] = None,
    ) -> None:
        clients = tuple(
            client for client in self._connected_clients if client is not exclude
        )
        if not clients:
            return

        disconnected = []
        tasks = [client.send(message) for client in clients]
        results = await asyncio.gather(*tasks, return_exceptions=True)
        for client, result in zip(clients, results):
            if isinstance(result, Exception):
                disconnected.append(client)
                self._logger.warning("Failed to send message to client: %s", result)

        for client in disconnected:
            self._connected_clients.discard(client)
