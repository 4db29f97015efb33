"""Configuration model for the session websocket/HTTP server."""

from __future__ import annotations

from dataclasses import dataclass


class ServerConfigurationError(Exception):
    """Raised when server configuration is invalid."""


ROOT_PATH = "/"
HEALTHZ_PATH = "/healthz"
POMODORO_PATH = "/pomodoro"
DEFAULT_WEBSOCKET_PATH = "/ws"
_RESERVED_PATHS = frozenset({ROOT_PATH, HEALTHZ_PATH, POMODORO_PATH})


@dataclass(frozen=True)
class ServerConfig:
    """Validated server configuration derived from app settings."""
    host: str = "127.0.0.1"
    port: int = 8080
    websocket_path: str = DEFAULT_WEBSOCKET_PATH

    def __post_init__(self) -> None:
        if not self.host.strip():
            raise ServerConfigurationError("server.host cannot be empty")

        if not 1 <= self.port <= 65535:
            raise ServerConfigurationError(
                f"server.port must be in [1, 65535], got: {self.port}"
            )

        if not self.websocket_path.startswith("/"):
            raise ServerConfigurationError(
                f"server.ws_path must start with '/', got: {self.websocket_path}"
            )

        if self.websocket_path in _RESERVED_PATHS:
            raise ServerConfigurationError(
                f"server.ws_path collides with an HTTP route: {self.websocket_path}"
            )

    @classmethod
    def from_settings(cls, settings) -> "ServerConfig":
        ws_path = settings.ws_path.strip() if settings.ws_path else ""
        return cls(
            host=settings.host,
            port=settings.port,
            websocket_path=ws_path or DEFAULT_WEBSOCKET_PATH,
        )
