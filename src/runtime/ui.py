from __future__ import annotations

from typing import Any, Optional, Protocol

from contracts.ws_protocol import EVENT_POMODORO, EVENT_POMODORO_TICK
from pomodoro import SessionSnapshot


class EventServerLike(Protocol):
    def publish(self, event_type: str, **payload: Any) -> None:
        ...


class RuntimeEventPublisher:
    def __init__(self, server: Optional[EventServerLike]):
        self._server = server

    def attach(self, server: Optional[EventServerLike]) -> None:
        self._server = server

    def publish(self, event_type: str, **payload: Any) -> None:
        if self._server:
            self._server.publish(event_type, **payload)

    def publish_session_update(
        self,
        snapshot: Optional[SessionSnapshot],
        *,
        action: str,
        accepted: Optional[bool] = None,
        reason: str = "",
        status: Optional[int] = None,
    ) -> None:
        payload: dict[str, Any] = {
            "action": action,
            "session": snapshot.to_dict() if snapshot is not None else None,
        }
        if accepted is not None:
            payload["accepted"] = accepted
        if reason:
            payload["reason"] = reason
        if status is not None:
            payload["status"] = status
        self.publish(EVENT_POMODORO, **payload)

    def publish_tick(self, snapshot: SessionSnapshot) -> None:
        self.publish(EVENT_POMODORO_TICK, session=snapshot.to_dict())
