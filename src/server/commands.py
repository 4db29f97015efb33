"""Parsing and dispatch of websocket session commands."""

from __future__ import annotations

import json
from typing import Any, Callable

from contracts.ws_protocol import COMMAND_ACTION_FIELD
from pomodoro import SessionActionResult, SessionRegistry, status_code_for
from pomodoro.constants import (
    ACTION_CREATE,
    ACTION_DELETE,
    ACTION_READ,
    ACTION_TOGGLE,
    SESSION_ACTIONS,
)


class CommandError(Exception):
    """Raised when an inbound command cannot be parsed or is not supported."""


def parse_command(raw: str | bytes) -> str:
    """Return the session action named by a JSON command message."""
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as error:
            raise CommandError("Command must be UTF-8 JSON") from error

    try:
        message = json.loads(raw)
    except json.JSONDecodeError as error:
        raise CommandError(f"Command is not valid JSON: {error.msg}") from error

    if not isinstance(message, dict):
        raise CommandError("Command must be a JSON object")

    action = message.get(COMMAND_ACTION_FIELD)
    if not isinstance(action, str):
        raise CommandError(f"Command field '{COMMAND_ACTION_FIELD}' must be a string")

    action = action.strip().lower()
    if action not in SESSION_ACTIONS:
        allowed = ", ".join(sorted(SESSION_ACTIONS))
        raise CommandError(f"Unsupported action '{action}', expected one of: {allowed}")
    return action


def dispatch_action(registry: SessionRegistry, action: str) -> SessionActionResult:
    handlers: dict[str, Callable[[], SessionActionResult]] = {
        ACTION_CREATE: registry.create,
        ACTION_READ: registry.read,
        ACTION_TOGGLE: registry.toggle,
        ACTION_DELETE: registry.delete,
    }
    handler = handlers.get(action)
    if handler is None:
        raise CommandError(f"Unsupported action '{action}'")
    return handler()


def handle_command(registry: SessionRegistry, raw: str | bytes) -> SessionActionResult:
    return dispatch_action(registry, parse_command(raw))


def result_payload(result: SessionActionResult) -> dict[str, Any]:
    """Event payload describing an action result, shared by HTTP and websocket."""
    return {
        "action": result.action,
        "accepted": result.accepted,
        "reason": result.reason,
        "status": status_code_for(result),
        "session": result.snapshot.to_dict() if result.snapshot is not None else None,
    }
