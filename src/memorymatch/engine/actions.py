from __future__ import annotations

from dataclasses import dataclass

from .types import Difficulty


@dataclass(frozen=True)
class SelectCardAction:
    index: int


@dataclass(frozen=True)
class ResolvePairAction:
    """Fired by the reveal/mismatch timer; token must match the pending pair."""

    token: int


@dataclass(frozen=True)
class TickAction:
    """One clock second for the round identified by epoch."""

    epoch: int


@dataclass(frozen=True)
class ResetAction:
    pass


@dataclass(frozen=True)
class SetDifficultyAction:
    difficulty: Difficulty


Action = SelectCardAction | ResolvePairAction | TickAction | ResetAction | SetDifficultyAction
