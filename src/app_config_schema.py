"""Dataclass schema objects used by runtime configuration loading."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_CONFIG_FILE = "config.toml"


class AppConfigurationError(Exception):
    """Raised when application configuration fails."""


@dataclass(frozen=True)
class LoggingSettings:
    """Root logger settings from `[logging]`."""
    level: str = "INFO"


@dataclass(frozen=True)
class ServerSettings:
    """Websocket/HTTP server settings from `[server]`."""
    host: str = "127.0.0.1"
    port: int = 8080
    ws_path: str = "/ws"


@dataclass(frozen=True)
class AppConfig:
    """Complete typed runtime configuration loaded from `config.toml`."""
    logging: LoggingSettings
    server: ServerSettings
    source_file: str
