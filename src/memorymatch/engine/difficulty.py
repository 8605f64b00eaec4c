from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from .types import DIFFICULTIES, ConfigurationError, Difficulty, DifficultyParams

# Easy keeps a 999s budget on purpose: it plays as untimed practice.
DEFAULT_PARAMETERS: dict[Difficulty, DifficultyParams] = {
    "easy": DifficultyParams(pair_count=6, grid_columns=3, mismatch_delay_ms=1000, time_budget_seconds=999),
    "medium": DifficultyParams(pair_count=8, grid_columns=4, mismatch_delay_ms=800, time_budget_seconds=120),
    "hard": DifficultyParams(pair_count=12, grid_columns=4, mismatch_delay_ms=600, time_budget_seconds=60),
}


def validate_difficulty(value: object) -> Difficulty:
    if value not in DIFFICULTIES:
        raise ConfigurationError(f"Unknown difficulty: {value!r}")
    return value  # type: ignore[return-value]


@dataclass(frozen=True)
class DifficultyPolicy:
    """Maps each difficulty level to the parameters a round is built from."""

    table: Mapping[Difficulty, DifficultyParams] = field(default_factory=lambda: dict(DEFAULT_PARAMETERS))

    def __post_init__(self) -> None:
        missing = [d for d in DIFFICULTIES if d not in self.table]
        if missing:
            raise ConfigurationError(f"Difficulty table is missing: {', '.join(missing)}")
        for d, p in self.table.items():
            validate_difficulty(d)
            if p.pair_count <= 0 or p.grid_columns <= 0:
                raise ConfigurationError(f"{d}: pair_count and grid_columns must be positive")
            if p.mismatch_delay_ms < 0 or p.time_budget_seconds <= 0:
                raise ConfigurationError(f"{d}: invalid timing parameters")

    def parameters_for(self, difficulty: Difficulty) -> DifficultyParams:
        return self.table[validate_difficulty(difficulty)]

    def max_pair_count(self) -> int:
        return max(p.pair_count for p in self.table.values())


DEFAULT_POLICY = DifficultyPolicy()


def parameters_for(difficulty: Difficulty) -> DifficultyParams:
    return DEFAULT_POLICY.parameters_for(difficulty)
