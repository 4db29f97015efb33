"""Thread-safe in-memory pomodoro session state machine."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Literal, Optional

from .cancellation import CancellationToken
from .constants import (
    DEFAULT_TICK_INTERVAL_SECONDS,
    LONG_BREAK_MULTIPLIER,
    PHASE_BREAK,
    PHASE_WORKING,
)
from .locking import ReadWriteLock
from .rules import RuleSet

SessionPhase = Literal["working", "break"]


@dataclass(frozen=True)
class SessionSnapshot:
    """Immutable copy of every session field, taken under the read lock."""
    phase: SessionPhase
    elapsed_seconds: int
    remaining_seconds: int
    started_at: Optional[datetime]
    finished_at: Optional[datetime]
    running: bool
    started: bool
    finished: bool
    cancelled: bool
    work_count: int
    break_count: int
    long_break: bool
    rules: RuleSet

    def to_dict(self) -> dict[str, Any]:
        return {
            "phase": self.phase,
            "elapsed_seconds": self.elapsed_seconds,
            "remaining_seconds": self.remaining_seconds,
            "started_at": _isoformat(self.started_at),
            "finished_at": _isoformat(self.finished_at),
            "running": self.running,
            "started": self.started,
            "finished": self.finished,
            "cancelled": self.cancelled,
            "work_count": self.work_count,
            "break_count": self.break_count,
            "long_break": self.long_break,
            "rules": self.rules.to_dict(),
        }


@dataclass(frozen=True)
class SessionTick:
    """Tick payload emitted by the advancement thread after each applied update."""
    snapshot: SessionSnapshot
    done: bool = False
    phase_changed: bool = False


TickListener = Callable[[SessionTick], None]


class SessionMachine:
    """Work/break cycle advanced once per tick by `run()` on a background thread.

    Every read-modify-write of session state happens under one reader/writer
    lock; helpers suffixed `_locked` expect the caller to hold it.
    """

    def __init__(
        self,
        rules: Optional[RuleSet] = None,
        *,
        tick_interval_seconds: float = DEFAULT_TICK_INTERVAL_SECONDS,
        on_tick: Optional[TickListener] = None,
        now_fn: Optional[Callable[[], datetime]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        if tick_interval_seconds <= 0:
            raise ValueError("tick_interval_seconds must be greater than zero")

        self._rules = rules or RuleSet.default()
        self._tick_interval_seconds = float(tick_interval_seconds)
        self._on_tick = on_tick
        self._now_fn = now_fn or _utc_now
        self._logger = logger or logging.getLogger("pomodoro")
        self._lock = ReadWriteLock()
        self._cancel = CancellationToken()

        self._elapsed_seconds = 0
        self._remaining_seconds = 0
        self._started_at: Optional[datetime] = None
        self._finished_at: Optional[datetime] = None
        self._running = False
        self._started = False
        self._finished = False
        self._phase: SessionPhase = PHASE_WORKING
        self._work_count = 0
        self._break_count = 0
        self._long_break = False

    @property
    def rules(self) -> RuleSet:
        return self._rules

    @property
    def is_started(self) -> bool:
        with self._lock.read():
            return self._started

    @property
    def is_finished(self) -> bool:
        with self._lock.read():
            return self._finished

    @property
    def is_running(self) -> bool:
        with self._lock.read():
            return self._running

    @property
    def is_cancelled(self) -> bool:
        return self._cancel.is_cancelled

    def snapshot(self) -> SessionSnapshot:
        with self._lock.read():
            return self._snapshot_locked()

    def start(self) -> None:
        with self._lock.write():
            self._started_at = self._now_fn()
            self._started = True
            self._phase = PHASE_WORKING
        self._logger.info(
            "Pomodoro session started: work=%sx%ss breaks=%sx%ss",
            self._rules.work.rounds,
            self._rules.work.duration_seconds,
            self._rules.breaks.rounds,
            self._rules.breaks.duration_seconds,
        )

    def toggle(self) -> bool:
        """Flip between running and paused; returns the new running flag."""
        with self._lock.write():
            self._running = not self._running
            running = self._running
        self._logger.info("Pomodoro session %s", "resumed" if running else "paused")
        return running

    def terminate(self) -> None:
        with self._lock.write():
            self._terminate_locked()

    def cancel(self) -> bool:
        """Ask the advancement thread to stop; later calls are no-ops.

        Only `running` is cleared; `started` and `finished` keep their values.
        """
        with self._lock.write():
            cancelled = self._cancel.cancel()
            if cancelled:
                self._running = False
        if cancelled:
            self._logger.info("Pomodoro session cancellation requested")
        return cancelled

    def update(self) -> bool:
        """Advance the session by one tick. Returns True once the session is done."""
        with self._lock.write():
            if not self._running:
                return False

            self._elapsed_seconds += 1
            work = self._rules.work
            breaks = self._rules.breaks

            if self._phase == PHASE_WORKING:
                self._remaining_seconds = work.duration_seconds - self._elapsed_seconds
                if self._elapsed_seconds >= work.duration_seconds:
                    self._work_count += 1
                    if self._work_count == work.rounds:
                        self._long_break = True
                        self._logger.info(
                            "Work round %s complete, take a long break",
                            self._work_count,
                        )
                    else:
                        self._logger.info(
                            "Work round %s complete, take a short break",
                            self._work_count,
                        )
                    self._phase = PHASE_BREAK
                    self._elapsed_seconds = 0
                return False

            if self._long_break:
                # Long-break remaining counts down from the work duration.
                self._remaining_seconds = (
                    work.duration_seconds * LONG_BREAK_MULTIPLIER - self._elapsed_seconds
                )
                if self._elapsed_seconds >= breaks.duration_seconds * LONG_BREAK_MULTIPLIER:
                    self._terminate_locked()
                    return True
            elif self._elapsed_seconds >= breaks.duration_seconds:
                self._break_count += 1
                self._logger.info(
                    "Break %s complete, back to work",
                    self._break_count,
                )
                self._phase = PHASE_WORKING
                self._elapsed_seconds = 0
                self._remaining_seconds = breaks.duration_seconds - self._elapsed_seconds

            return False

    def run(self) -> None:
        """Advancement loop; exits on completion or cancellation."""
        with self._lock.write():
            self._running = True
            phase = self._phase

        self._logger.info("Pomodoro session running")
        next_deadline = time.monotonic() + self._tick_interval_seconds
        while True:
            timeout = max(0.0, next_deadline - time.monotonic())
            self._cancel.wait(timeout)
            if self._cancel.is_cancelled:
                self._logger.info("Pomodoro session cancelled")
                return

            done = self.update()
            snapshot = self.snapshot()
            tick = SessionTick(
                snapshot=snapshot,
                done=done,
                phase_changed=snapshot.phase != phase,
            )
            phase = snapshot.phase
            self._logger.debug(
                "Tick: phase=%s elapsed=%ss remaining=%ss running=%s",
                snapshot.phase,
                snapshot.elapsed_seconds,
                snapshot.remaining_seconds,
                snapshot.running,
            )
            self._publish_tick(tick)
            if done:
                return

            # Missed ticks are dropped after a stall.
            now = time.monotonic()
            next_deadline += self._tick_interval_seconds
            if next_deadline <= now:
                next_deadline = now + self._tick_interval_seconds

    def _publish_tick(self, tick: SessionTick) -> None:
        if self._on_tick is None:
            return
        try:
            self._on_tick(tick)
        except Exception:
            self._logger.exception("Tick listener failed")

    def _terminate_locked(self) -> None:
        self._running = False
        self._started = False
        self._finished = True
        self._finished_at = self._now_fn()
        self._logger.info(
            "Pomodoro session finished: work_rounds=%s breaks=%s",
            self._work_count,
            self._break_count,
        )

    def _snapshot_locked(self) -> SessionSnapshot:
        return SessionSnapshot(
            phase=self._phase,
            elapsed_seconds=self._elapsed_seconds,
            remaining_seconds=self._remaining_seconds,
            started_at=self._started_at,
            finished_at=self._finished_at,
            running=self._running,
            started=self._started,
            finished=self._finished,
            cancelled=self._cancel.is_cancelled,
            work_count=self._work_count,
            break_count=self._break_count,
            long_break=self._long_break,
            rules=self._rules,
        )


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None
