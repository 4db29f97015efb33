"""Tick handlers that publish session progress to connected clients."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from pomodoro import SessionTick
from pomodoro.constants import (
    ACTION_COMPLETED,
    ACTION_PHASE_CHANGED,
    REASON_COMPLETED,
    REASON_TICK,
)

from .ui import RuntimeEventPublisher


@dataclass(frozen=True)
class TickDependencies:
    """Dependencies required for processing session tick events."""
    logger: logging.Logger
    ui: RuntimeEventPublisher


class TickProcessor:
    """Turns ticks from the advancement thread into websocket events."""
    def __init__(self, dependencies: TickDependencies):
        self._dependencies = dependencies

    def handle_tick(self, tick: SessionTick) -> None:
        deps = self._dependencies
        snapshot = tick.snapshot
        if tick.done:
            deps.logger.info(
                "Session completed after %s work rounds",
                snapshot.work_count,
            )
            deps.ui.publish_session_update(
                snapshot,
                action=ACTION_COMPLETED,
                accepted=True,
                reason=REASON_COMPLETED,
            )
            return

        if tick.phase_changed:
            deps.logger.info(
                "Session phase changed: phase=%s work=%s breaks=%s long_break=%s",
                snapshot.phase,
                snapshot.work_count,
                snapshot.break_count,
                snapshot.long_break,
            )
            deps.ui.publish_session_update(
                snapshot,
                action=ACTION_PHASE_CHANGED,
                accepted=True,
                reason=REASON_TICK,
            )

        deps.ui.publish_tick(snapshot)
