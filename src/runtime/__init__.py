"""Runtime wiring between the session thread and event publishers."""

from .ticks import TickDependencies, TickProcessor
from .ui import EventServerLike, RuntimeEventPublisher

__all__ = [
    "EventServerLike",
    "RuntimeEventPublisher",
    "TickDependencies",
    "TickProcessor",
]
