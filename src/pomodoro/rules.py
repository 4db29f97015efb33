"""Immutable work/break rules bound to a session at creation time."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class PhaseRule:
    """Round count and per-round duration for one kind of phase."""
    rounds: int
    duration_seconds: int

    def __post_init__(self) -> None:
        if self.rounds < 1:
            raise ValueError("rounds must be at least one")
        if self.duration_seconds <= 0:
            raise ValueError("duration_seconds must be greater than zero")

    def to_dict(self) -> dict[str, int]:
        return {"rounds": self.rounds, "duration_seconds": self.duration_seconds}


@dataclass(frozen=True)
class RuleSet:
    """Work and break rules shared by reference with the session that owns them."""
    work: PhaseRule
    breaks: PhaseRule

    @classmethod
    def default(cls) -> "RuleSet":
        """Short fixed rules: four 5s work rounds and three 5s breaks."""
        return cls(
            work=PhaseRule(rounds=4, duration_seconds=5),
            breaks=PhaseRule(rounds=3, duration_seconds=5),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"work": self.work.to_dict(), "breaks": self.breaks.to_dict()}
