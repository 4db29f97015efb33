from .cancellation import CancellationToken
from .locking import ReadWriteLock
from .registry import SessionActionResult, SessionRegistry, status_code_for
from .rules import PhaseRule, RuleSet
from .service import (
    SessionMachine,
    SessionPhase,
    SessionSnapshot,
    SessionTick,
    TickListener,
)

__all__ = [
    "CancellationToken",
    "PhaseRule",
    "ReadWriteLock",
    "RuleSet",
    "SessionActionResult",
    "SessionMachine",
    "SessionPhase",
    "SessionRegistry",
    "SessionSnapshot",
    "SessionTick",
    "TickListener",
    "status_code_for",
]
