from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

Difficulty = Literal["easy", "medium", "hard"]
RoundPhase = Literal["not_started", "running", "ended"]
EndReason = Literal["completed", "expired"]

DIFFICULTIES: tuple[Difficulty, ...] = ("easy", "medium", "hard")


class ConfigurationError(ValueError):
    """Unsupported difficulty or a table the engine can't build a deck from."""


@dataclass(frozen=True)
class DifficultyParams:
    pair_count: int
    grid_columns: int
    mismatch_delay_ms: int
    time_budget_seconds: int


@dataclass(frozen=True)
class Symbol:
    name: str
    color: tuple[int, int, int] = (240, 240, 240)


@dataclass(frozen=True)
class Card:
    id: int
    symbol: str
    matched: bool = False


Deck = tuple[Card, ...]
