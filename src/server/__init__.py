"""Websocket and HTTP front end for the pomodoro session registry."""

from .commands import CommandError, handle_command
from .config import ServerConfigurationError, ServerConfig
from .service import SessionServer

__all__ = [
    "CommandError",
    "ServerConfigurationError",
    "ServerConfig",
    "SessionServer",
    "handle_command",
]
