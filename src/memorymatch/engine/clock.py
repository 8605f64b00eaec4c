from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Literal

ClockPhase = Literal["idle", "running", "expired", "completed"]

TICK_MS = 1000


@dataclass(frozen=True)
class RoundClock:
    seconds_remaining: int
    phase: ClockPhase = "idle"

    @property
    def is_running(self) -> bool:
        return self.phase == "running"

    @property
    def is_terminal(self) -> bool:
        return self.phase in ("expired", "completed")


def new_clock(budget_seconds: int) -> RoundClock:
    return RoundClock(seconds_remaining=budget_seconds, phase="idle")


def start(clock: RoundClock) -> RoundClock:
    if clock.phase != "idle":
        return clock
    return replace(clock, phase="running")


def tick(clock: RoundClock) -> RoundClock:
    """One whole second elapses. Only a running clock moves."""
    if not clock.is_running:
        return clock
    remaining = max(0, clock.seconds_remaining - 1)
    phase: ClockPhase = "expired" if remaining == 0 else "running"
    return RoundClock(seconds_remaining=remaining, phase=phase)


def complete(clock: RoundClock) -> RoundClock:
    # An expired clock stays expired: only one terminal cause per round.
    if clock.is_terminal:
        return clock
    return replace(clock, phase="completed")
