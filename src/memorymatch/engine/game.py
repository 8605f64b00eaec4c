from __future__ import annotations

import random
from dataclasses import dataclass, field, replace
from typing import Iterable

from . import clock as round_clock
from .actions import (
    Action,
    ResetAction,
    ResolvePairAction,
    SelectCardAction,
    SetDifficultyAction,
    TickAction,
)
from .clock import RoundClock
from .deck import DEFAULT_CATALOG, SymbolCatalog, build_deck
from .difficulty import DEFAULT_POLICY, DifficultyPolicy, validate_difficulty
from .scoring import score
from .types import Deck, Difficulty, DifficultyParams, EndReason, RoundPhase

Event = dict[str, object]

# Matched pairs stay visible this long before they are marked matched.
MATCH_REVEAL_DELAY_MS = 500


@dataclass(frozen=True)
class PendingResolution:
    """A revealed pair waiting for its delay to elapse (the "checking" window)."""

    token: int
    first: int
    second: int
    is_match: bool
    delay_ms: int


@dataclass(frozen=True)
class GameState:
    difficulty: Difficulty
    params: DifficultyParams
    deck: Deck
    clock: RoundClock
    seed: int
    rng_state: tuple[object, ...]
    policy: DifficultyPolicy = DEFAULT_POLICY
    catalog: SymbolCatalog = DEFAULT_CATALOG
    phase: RoundPhase = "not_started"
    selection: tuple[int, ...] = ()
    moves: int = 0
    matches: int = 0
    final_score: int | None = None
    end_reason: EndReason | None = None
    pending: PendingResolution | None = None
    epoch: int = 0
    next_token: int = 1
    # Where this round began; replay_round rebuilds the round from these.
    round_rng_state: tuple[object, ...] = ()
    round_start_token: int = 1
    action_log: tuple[Action, ...] = field(default=(), compare=False)

    @property
    def pair_count(self) -> int:
        return len(self.deck) // 2

    @property
    def seconds_remaining(self) -> int:
        return self.clock.seconds_remaining

    @property
    def checking(self) -> bool:
        return self.pending is not None

    def is_face_up(self, index: int) -> bool:
        return index in self.selection


@dataclass(frozen=True)
class StepResult:
    ok: bool
    state: GameState
    events: list[Event]
    error: str | None = None


def _ignored(state: GameState, error: str, events: list[Event] | None = None) -> StepResult:
    return StepResult(ok=False, state=state, events=events or [], error=error)


def _fresh_round(state: GameState, difficulty: Difficulty, epoch: int) -> GameState:
    params = state.policy.parameters_for(difficulty)
    rng = random.Random()
    rng.setstate(state.rng_state)  # type: ignore[arg-type]
    deck = build_deck(params, state.catalog, rng)
    return replace(
        state,
        difficulty=difficulty,
        params=params,
        deck=deck,
        clock=round_clock.new_clock(params.time_budget_seconds),
        rng_state=rng.getstate(),
        phase="not_started",
        selection=(),
        moves=0,
        matches=0,
        final_score=None,
        end_reason=None,
        pending=None,
        epoch=epoch,
        round_rng_state=state.rng_state,
        round_start_token=state.next_token,
        action_log=(),
    )


def _check_completion(state: GameState, events: list[Event]) -> GameState:
    if state.phase != "running" or state.pair_count == 0 or state.matches != state.pair_count:
        return state
    final = score(state.clock.seconds_remaining, state.moves)
    events.append(
        {
            "type": "ROUND_COMPLETED",
            "score": final,
            "moves": state.moves,
            "seconds_remaining": state.clock.seconds_remaining,
        }
    )
    return replace(
        state,
        phase="ended",
        end_reason="completed",
        final_score=final,
        clock=round_clock.complete(state.clock),
    )


def _select_card(state: GameState, action: SelectCardAction) -> StepResult:
    index = action.index
    if index < 0 or index >= len(state.deck):
        return _ignored(state, "Invalid card index.")

    events: list[Event] = []
    if state.phase == "not_started":
        # The first click starts the round, whatever happens to the selection.
        state = replace(state, phase="running", clock=round_clock.start(state.clock))
        events.append(
            {"type": "ROUND_STARTED", "epoch": state.epoch, "seconds_remaining": state.clock.seconds_remaining}
        )

    if state.phase == "ended":
        return _ignored(state, "Round already ended.")
    if state.pending is not None:
        return _ignored(state, "Pair is still being checked.", events)
    if state.deck[index].matched:
        return _ignored(state, "Card already matched.", events)
    if index in state.selection:
        return _ignored(state, "Card already face-up.", events)
    if len(state.selection) >= 2:
        return _ignored(state, "Two cards already face-up.", events)

    selection = state.selection + (index,)
    events.append({"type": "CARD_REVEALED", "index": index, "card_id": state.deck[index].id})
    state = replace(state, selection=selection)

    if len(selection) == 2:
        first, second = selection
        is_match = state.deck[first].symbol == state.deck[second].symbol
        pending = PendingResolution(
            token=state.next_token,
            first=first,
            second=second,
            is_match=is_match,
            delay_ms=MATCH_REVEAL_DELAY_MS if is_match else state.params.mismatch_delay_ms,
        )
        state = replace(state, moves=state.moves + 1, pending=pending, next_token=state.next_token + 1)
        events.append(
            {
                "type": "PAIR_PENDING",
                "token": pending.token,
                "is_match": is_match,
                "delay_ms": pending.delay_ms,
                "moves": state.moves,
            }
        )
    return StepResult(ok=True, state=state, events=events)


def _resolve_pair(state: GameState, action: ResolvePairAction) -> StepResult:
    pending = state.pending
    if state.phase != "running" or pending is None or pending.token != action.token:
        return _ignored(state, "Stale resolution.")

    events: list[Event] = []
    if pending.is_match:
        hit = (pending.first, pending.second)
        deck = tuple(replace(c, matched=True) if i in hit else c for i, c in enumerate(state.deck))
        state = replace(state, deck=deck, selection=(), pending=None, matches=state.matches + 1)
        events.append(
            {
                "type": "MATCH_FOUND",
                "indexes": list(hit),
                "symbol": deck[pending.first].symbol,
                "matches": state.matches,
            }
        )
        state = _check_completion(state, events)
    else:
        state = replace(state, selection=(), pending=None)
        events.append({"type": "MISMATCH_RESOLVED", "indexes": [pending.first, pending.second]})
    return StepResult(ok=True, state=state, events=events)


def _tick(state: GameState, action: TickAction) -> StepResult:
    if action.epoch != state.epoch:
        return _ignored(state, "Stale tick.")
    if state.phase != "running" or not state.clock.is_running:
        return _ignored(state, "Round is not running.")

    clk = round_clock.tick(state.clock)
    events: list[Event] = [{"type": "CLOCK_TICKED", "seconds_remaining": clk.seconds_remaining}]
    state = replace(state, clock=clk)
    if clk.phase == "expired":
        # Whatever pair was still on display is dropped with the round.
        state = replace(state, phase="ended", end_reason="expired", pending=None, selection=())
        events.append({"type": "ROUND_EXPIRED", "moves": state.moves, "matches": state.matches})
    return StepResult(ok=True, state=state, events=events)


def _reset(state: GameState, difficulty: Difficulty) -> StepResult:
    state = _fresh_round(state, difficulty, epoch=state.epoch + 1)
    return StepResult(
        ok=True,
        state=state,
        events=[
            {
                "type": "ROUND_RESET",
                "difficulty": difficulty,
                "epoch": state.epoch,
                "seconds_remaining": state.clock.seconds_remaining,
            }
        ],
    )


def step(state: GameState, action: Action) -> StepResult:
    """Apply one action and return the next snapshot.

    Pure: `state` is never mutated. Deterministic for a given
    (seed, difficulty, action sequence). Ignored input returns the same
    state object with ok=False.
    """
    if isinstance(action, SelectCardAction):
        result = _select_card(state, action)
    elif isinstance(action, ResolvePairAction):
        result = _resolve_pair(state, action)
    elif isinstance(action, TickAction):
        result = _tick(state, action)
    elif isinstance(action, ResetAction):
        result = _reset(state, state.difficulty)
    elif isinstance(action, SetDifficultyAction):
        result = _reset(state, validate_difficulty(action.difficulty))
    else:
        return _ignored(state, "Unknown action.")

    if result.state is state and not result.events:
        return result
    if isinstance(action, (ResetAction, SetDifficultyAction)):
        # A new round starts with an empty log.
        return result
    # Log attempted actions that changed something so replay reproduces them.
    logged = replace(result.state, action_log=state.action_log + (action,))
    return replace(result, state=logged)


def new_game(
    difficulty: Difficulty = "easy",
    seed: int | None = None,
    policy: DifficultyPolicy | None = None,
    catalog: SymbolCatalog | None = None,
) -> GameState:
    pol = policy or DEFAULT_POLICY
    cat = catalog or DEFAULT_CATALOG
    validate_difficulty(difficulty)
    if seed is None:
        seed = random.randrange(2**32)
    params = pol.parameters_for(difficulty)
    # Fail early if any level asks for more pairs than the catalog holds.
    cat.first(pol.max_pair_count())

    rng = random.Random(seed)
    start_rng_state = rng.getstate()
    deck = build_deck(params, cat, rng)
    return GameState(
        difficulty=difficulty,
        params=params,
        deck=deck,
        clock=round_clock.new_clock(params.time_budget_seconds),
        seed=seed,
        rng_state=rng.getstate(),
        policy=pol,
        catalog=cat,
        round_rng_state=start_rng_state,
    )


def replay(
    actions: Iterable[Action],
    difficulty: Difficulty = "easy",
    seed: int = 0,
    policy: DifficultyPolicy | None = None,
    catalog: SymbolCatalog | None = None,
) -> GameState:
    state = new_game(difficulty=difficulty, seed=seed, policy=policy, catalog=catalog)
    for a in actions:
        state = step(state, a).state
    return state


def round_start(state: GameState) -> GameState:
    """The current round as it was before its first action."""
    seed_state = replace(state, rng_state=state.round_rng_state, next_token=state.round_start_token)
    return _fresh_round(seed_state, state.difficulty, epoch=state.epoch)


def replay_round(state: GameState, actions: Iterable[Action] | None = None) -> GameState:
    """Re-apply `actions` (default: the round's own log) from the round's start."""
    replayed = round_start(state)
    for a in state.action_log if actions is None else actions:
        replayed = step(replayed, a).state
    return replayed
