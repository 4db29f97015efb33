"""Phase, action, and reason constants used by the session state machine."""

from __future__ import annotations

DEFAULT_TICK_INTERVAL_SECONDS = 1.0
LONG_BREAK_MULTIPLIER = 4

PHASE_WORKING = "working"
PHASE_BREAK = "break"

ACTION_CREATE = "create"
ACTION_READ = "read"
ACTION_TOGGLE = "toggle"
ACTION_DELETE = "delete"

ACTION_TICK = "tick"
ACTION_PHASE_CHANGED = "phase_changed"
ACTION_COMPLETED = "completed"

SESSION_ACTIONS: frozenset[str] = frozenset(
    {ACTION_CREATE, ACTION_READ, ACTION_TOGGLE, ACTION_DELETE}
)

REASON_CREATED = "created"
REASON_FOUND = "found"
REASON_PAUSED = "paused"
REASON_RESUMED = "resumed"
REASON_DELETED = "deleted"
REASON_NOT_FOUND = "not_found"
REASON_SESSION_ACTIVE = "session_active"

REASON_TICK = "tick"
REASON_COMPLETED = "completed"
