"""Owner of the single current session and its advancement thread."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional

from .constants import (
    ACTION_CREATE,
    ACTION_DELETE,
    ACTION_READ,
    ACTION_TOGGLE,
    DEFAULT_TICK_INTERVAL_SECONDS,
    REASON_CREATED,
    REASON_DELETED,
    REASON_FOUND,
    REASON_NOT_FOUND,
    REASON_PAUSED,
    REASON_RESUMED,
    REASON_SESSION_ACTIVE,
)
from .rules import RuleSet
from .service import SessionMachine, SessionSnapshot, TickListener

_STATUS_BY_REASON = {
    REASON_NOT_FOUND: 404,
    REASON_SESSION_ACTIVE: 409,
}


@dataclass(frozen=True)
class SessionActionResult:
    """Result envelope returned after applying a session action."""
    action: str
    accepted: bool
    reason: str
    snapshot: Optional[SessionSnapshot] = None


def status_code_for(result: SessionActionResult) -> int:
    """Map a result onto the HTTP-style status reported to network callers."""
    if result.accepted:
        return 200
    return _STATUS_BY_REASON.get(result.reason, 400)


class SessionRegistry:
    """Holds the current `SessionMachine` and applies caller actions to it.

    The registry lock only serializes swaps of the current machine; session
    state itself stays behind the machine's own reader/writer lock.
    """

    def __init__(
        self,
        *,
        rules_factory: Callable[[], RuleSet] = RuleSet.default,
        tick_interval_seconds: float = DEFAULT_TICK_INTERVAL_SECONDS,
        on_tick: Optional[TickListener] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._rules_factory = rules_factory
        self._tick_interval_seconds = tick_interval_seconds
        self._on_tick = on_tick
        self._logger = logger or logging.getLogger("pomodoro.registry")
        self._lock = threading.Lock()
        self._machine = self._new_machine()
        self._thread: Optional[threading.Thread] = None

    @property
    def current(self) -> SessionMachine:
        with self._lock:
            return self._machine

    def create(self) -> SessionActionResult:
        with self._lock:
            if self._machine.is_started:
                return self._declined(ACTION_CREATE, REASON_SESSION_ACTIVE)

            machine = self._new_machine()
            machine.start()
            thread = threading.Thread(
                target=machine.run,
                daemon=True,
                name="pomodoro-session",
            )
            self._machine = machine
            self._thread = thread
            thread.start()
            self._logger.info("Session created")
            return SessionActionResult(
                action=ACTION_CREATE,
                accepted=True,
                reason=REASON_CREATED,
                snapshot=machine.snapshot(),
            )

    def read(self) -> SessionActionResult:
        with self._lock:
            snapshot = self._machine.snapshot()
        if not snapshot.started:
            return self._declined(ACTION_READ, REASON_NOT_FOUND)
        return SessionActionResult(
            action=ACTION_READ,
            accepted=True,
            reason=REASON_FOUND,
            snapshot=snapshot,
        )

    def toggle(self) -> SessionActionResult:
        with self._lock:
            machine = self._machine
            if not machine.is_started:
                return self._declined(ACTION_TOGGLE, REASON_NOT_FOUND)
            running = machine.toggle()
            snapshot = machine.snapshot()
        return SessionActionResult(
            action=ACTION_TOGGLE,
            accepted=True,
            reason=REASON_RESUMED if running else REASON_PAUSED,
            snapshot=snapshot,
        )

    def delete(self) -> SessionActionResult:
        with self._lock:
            machine = self._machine
            if not machine.is_started:
                return self._declined(ACTION_DELETE, REASON_NOT_FOUND)
            machine.cancel()
            snapshot = machine.snapshot()
            self._machine = self._new_machine()
            self._thread = None
            self._logger.info("Session deleted")
        return SessionActionResult(
            action=ACTION_DELETE,
            accepted=True,
            reason=REASON_DELETED,
            snapshot=snapshot,
        )

    def shutdown(self, timeout_seconds: float = 5.0) -> None:
        with self._lock:
            machine = self._machine
            thread = self._thread
            self._thread = None
        machine.cancel()
        if thread is None:
            return
        thread.join(timeout=timeout_seconds)
        if thread.is_alive():
            self._logger.error(
                "Session thread did not stop within %.1fs",
                timeout_seconds,
            )

    def _new_machine(self) -> SessionMachine:
        return SessionMachine(
            self._rules_factory(),
            tick_interval_seconds=self._tick_interval_seconds,
            on_tick=self._on_tick,
            logger=logging.getLogger("pomodoro"),
        )

    @staticmethod
    def _declined(action: str, reason: str) -> SessionActionResult:
        return SessionActionResult(action=action, accepted=False, reason=reason)
