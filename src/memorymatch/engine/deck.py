from __future__ import annotations

import random
from collections.abc import Sequence
from dataclasses import dataclass

from .types import Card, ConfigurationError, Deck, DifficultyParams, Symbol

DEFAULT_SYMBOLS: tuple[Symbol, ...] = (
    Symbol("heart", (251, 113, 133)),
    Symbol("star", (251, 191, 36)),
    Symbol("sun", (250, 204, 21)),
    Symbol("moon", (192, 132, 252)),
    Symbol("cloud", (56, 189, 248)),
    Symbol("flower", (52, 211, 153)),
    Symbol("zap", (251, 146, 60)),
    Symbol("music", (96, 165, 250)),
    Symbol("umbrella", (244, 114, 182)),
    Symbol("palette", (129, 140, 248)),
    Symbol("leaf", (74, 222, 128)),
    Symbol("snowflake", (34, 211, 238)),
)


@dataclass(frozen=True)
class SymbolCatalog:
    """Ordered, immutable catalog of the symbols a deck can draw from."""

    symbols: tuple[Symbol, ...] = DEFAULT_SYMBOLS

    def __post_init__(self) -> None:
        names = [s.name for s in self.symbols]
        if len(set(names)) != len(names):
            raise ConfigurationError("Symbol catalog contains duplicate names.")

    def __len__(self) -> int:
        return len(self.symbols)

    def get(self, name: str) -> Symbol:
        for s in self.symbols:
            if s.name == name:
                return s
        raise KeyError(name)

    def first(self, count: int) -> Sequence[Symbol]:
        if count > len(self.symbols):
            raise ConfigurationError(
                f"pair_count {count} exceeds catalog size {len(self.symbols)}."
            )
        return self.symbols[:count]


DEFAULT_CATALOG = SymbolCatalog()


def build_deck(params: DifficultyParams, catalog: SymbolCatalog, rng: random.Random) -> Deck:
    """Two cards per symbol (ids 2i and 2i+1) in uniformly shuffled order."""
    cards: list[Card] = []
    for i, sym in enumerate(catalog.first(params.pair_count)):
        cards.append(Card(id=i * 2, symbol=sym.name))
        cards.append(Card(id=i * 2 + 1, symbol=sym.name))
    # random.shuffle is Fisher-Yates; a random-comparator sort would bias positions.
    rng.shuffle(cards)
    return tuple(cards)
