"""Deterministic, headless game engine for MemoryMatch.

IMPORTANT: This package must never import pygame.
"""

from .actions import ResetAction, ResolvePairAction, SelectCardAction, SetDifficultyAction, TickAction
from .deck import DEFAULT_CATALOG, SymbolCatalog, build_deck
from .difficulty import DEFAULT_POLICY, DifficultyPolicy, parameters_for
from .game import GameState, StepResult, new_game, replay, replay_round, round_start, step
from .scoring import score
from .types import Card, ConfigurationError, Difficulty, DifficultyParams, Symbol

__all__ = [
    "Card",
    "ConfigurationError",
    "DEFAULT_CATALOG",
    "DEFAULT_POLICY",
    "Difficulty",
    "DifficultyParams",
    "DifficultyPolicy",
    "GameState",
    "ResetAction",
    "ResolvePairAction",
    "SelectCardAction",
    "SetDifficultyAction",
    "StepResult",
    "Symbol",
    "SymbolCatalog",
    "TickAction",
    "build_deck",
    "new_game",
    "parameters_for",
    "replay",
    "replay_round",
    "round_start",
    "score",
    "step",
]
