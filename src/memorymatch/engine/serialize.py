from __future__ import annotations

from .actions import (
    Action,
    ResetAction,
    ResolvePairAction,
    SelectCardAction,
    SetDifficultyAction,
    TickAction,
)
from .game import GameState


def action_to_dict(a: Action) -> dict[str, object]:
    if isinstance(a, SelectCardAction):
        return {"type": "select", "index": a.index}
    if isinstance(a, ResolvePairAction):
        return {"type": "resolve", "token": a.token}
    if isinstance(a, TickAction):
        return {"type": "tick", "epoch": a.epoch}
    if isinstance(a, ResetAction):
        return {"type": "reset"}
    if isinstance(a, SetDifficultyAction):
        return {"type": "set_difficulty", "difficulty": a.difficulty}
    # should be unreachable
    return {"type": "unknown"}


def _cards_to_list(state: GameState) -> list[dict[str, object]]:
    return [
        {
            "id": c.id,
            "symbol": c.symbol,
            "matched": c.matched,
            "face_up": state.is_face_up(i),
        }
        for i, c in enumerate(state.deck)
    ]


def snapshot(state: GameState) -> dict[str, object]:
    """Return a JSON-serializable, read-only view of the round for presentation."""
    return {
        "difficulty": state.difficulty,
        "grid_columns": state.params.grid_columns,
        "phase": state.phase,
        "end_reason": state.end_reason,
        "seconds_remaining": state.clock.seconds_remaining,
        "moves": state.moves,
        "matches": state.matches,
        "pair_count": state.pair_count,
        "final_score": state.final_score,
        "checking": state.checking,
        "cards": _cards_to_list(state),
    }

