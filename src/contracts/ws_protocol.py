"""Websocket event names and command fields shared by server and runtime."""

from __future__ import annotations

# Websocket event types
EVENT_HELLO = "hello"
EVENT_POMODORO = "pomodoro"
EVENT_POMODORO_TICK = "pomodoro_tick"
EVENT_ERROR = "error"

# Inbound command payload
COMMAND_ACTION_FIELD = "action"

STICKY_EVENT_TYPES: frozenset[str] = frozenset({EVENT_POMODORO, EVENT_POMODORO_TICK})

STICKY_EVENT_ORDER: tuple[str, ...] = (
    EVENT_POMODORO,
    EVENT_POMODORO_TICK,
)

# Pomodoro actions after which the session's last tick is stale.
SESSION_ENDING_ACTIONS: frozenset[str] = frozenset({"delete", "completed"})
