from __future__ import annotations

import pytest

from memorymatch.engine.actions import (
    ResetAction,
    ResolvePairAction,
    SelectCardAction,
    SetDifficultyAction,
    TickAction,
)
from memorymatch.engine.game import (
    MATCH_REVEAL_DELAY_MS,
    GameState,
    new_game,
    replay,
    replay_round,
    round_start,
    step,
)
from memorymatch.engine.serialize import snapshot
from memorymatch.engine.types import ConfigurationError


def _pairs(state: GameState) -> list[tuple[int, int]]:
    seen: dict[str, int] = {}
    pairs = []
    for i, c in enumerate(state.deck):
        if c.symbol in seen:
            pairs.append((seen[c.symbol], i))
        else:
            seen[c.symbol] = i
    return pairs


def _mismatch(state: GameState) -> tuple[int, int]:
    first = state.deck[0].symbol
    for i, c in enumerate(state.deck):
        if c.symbol != first:
            return 0, i
    raise AssertionError("deck has a single symbol")


def _select(state: GameState, *indexes: int) -> GameState:
    for i in indexes:
        state = step(state, SelectCardAction(i)).state
    return state


def _resolve(state: GameState) -> GameState:
    assert state.pending is not None
    return step(state, ResolvePairAction(state.pending.token)).state


def test_new_game_is_not_started() -> None:
    state = new_game("medium", seed=1)
    assert state.phase == "not_started"
    assert state.clock.phase == "idle"
    assert state.seconds_remaining == 120
    assert len(state.deck) == 16


def test_first_selection_starts_round() -> None:
    state = new_game("easy", seed=1)
    res = step(state, SelectCardAction(3))
    assert res.ok
    assert [e["type"] for e in res.events] == ["ROUND_STARTED", "CARD_REVEALED"]
    assert res.state.phase == "running"
    assert res.state.clock.phase == "running"
    assert res.state.selection == (3,)


def test_out_of_range_index_is_ignored_without_starting() -> None:
    state = new_game("easy", seed=1)
    res = step(state, SelectCardAction(12))
    assert not res.ok
    assert res.state is state
    assert res.events == []


def test_face_up_card_is_a_no_op() -> None:
    state = _select(new_game("easy", seed=2), 0)
    res = step(state, SelectCardAction(0))
    assert not res.ok
    assert res.state is state
    assert res.state.selection == (0,)
    assert res.state.moves == 0


def test_matched_card_is_a_no_op() -> None:
    state = new_game("easy", seed=3)
    a, b = _pairs(state)[0]
    state = _resolve(_select(state, a, b))
    res = step(state, SelectCardAction(a))
    assert not res.ok
    assert res.state.selection == ()
    assert res.state.moves == 1


def test_match_marks_both_cards_after_reveal() -> None:
    state = new_game("easy", seed=4)
    a, b = _pairs(state)[0]
    state = _select(state, a, b)
    assert state.moves == 1
    assert state.checking
    assert state.pending is not None and state.pending.is_match
    assert state.pending.delay_ms == MATCH_REVEAL_DELAY_MS
    assert not state.deck[a].matched

    res = step(state, ResolvePairAction(state.pending.token))
    assert res.ok
    assert [e["type"] for e in res.events] == ["MATCH_FOUND"]
    state = res.state
    assert state.deck[a].matched and state.deck[b].matched
    assert state.matches == 1
    assert state.moves == 1
    assert state.selection == ()
    assert not state.checking


def test_mismatch_clears_selection_after_difficulty_delay() -> None:
    state = new_game("hard", seed=5)
    a, b = _mismatch(state)
    state = _select(state, a, b)
    assert state.pending is not None
    assert not state.pending.is_match
    assert state.pending.delay_ms == 600

    res = step(state, ResolvePairAction(state.pending.token))
    assert [e["type"] for e in res.events] == ["MISMATCH_RESOLVED"]
    state = res.state
    assert state.selection == ()
    assert not state.deck[a].matched and not state.deck[b].matched
    assert state.moves == 1
    assert state.matches == 0


def test_selection_blocked_while_checking() -> None:
    state = new_game("easy", seed=6)
    a, b = _mismatch(state)
    state = _select(state, a, b)
    other = next(i for i in range(len(state.deck)) if i not in (a, b))
    res = step(state, SelectCardAction(other))
    assert not res.ok
    assert res.error == "Pair is still being checked."
    assert res.state.selection == (a, b)


def test_stale_resolution_token_is_ignored() -> None:
    state = new_game("easy", seed=7)
    a, b = _mismatch(state)
    state = _select(state, a, b)
    assert state.pending is not None
    res = step(state, ResolvePairAction(state.pending.token + 1))
    assert not res.ok
    assert res.state.selection == (a, b)


def test_ticks_only_count_for_current_round() -> None:
    state = _select(new_game("hard", seed=8), 0)
    state = step(state, TickAction(epoch=state.epoch)).state
    assert state.seconds_remaining == 59

    res = step(state, TickAction(epoch=state.epoch - 1))
    assert not res.ok
    assert res.state.seconds_remaining == 59


def test_tick_before_start_is_ignored() -> None:
    state = new_game("hard", seed=8)
    res = step(state, TickAction(epoch=state.epoch))
    assert not res.ok
    assert res.state.seconds_remaining == 60


def test_expiry_ends_round_without_score() -> None:
    state = new_game("hard", seed=9)
    a, b = _mismatch(state)
    state = _select(state, a, b)
    token = state.pending.token if state.pending else -1

    events = []
    for _ in range(60):
        res = step(state, TickAction(epoch=state.epoch))
        state = res.state
        events.extend(e["type"] for e in res.events)

    assert events[-1] == "ROUND_EXPIRED"
    assert state.phase == "ended"
    assert state.end_reason == "expired"
    assert state.clock.phase == "expired"
    assert state.final_score is None
    assert state.selection == ()

    # The pair on display when time ran out never resolves.
    assert not step(state, ResolvePairAction(token)).ok
    assert not step(state, SelectCardAction(a)).ok
    assert not step(state, TickAction(epoch=state.epoch)).ok


def test_completed_round_scores_once_and_stops() -> None:
    state = new_game("easy", seed=10)
    pairs = _pairs(state)
    state = _select(state, pairs[0][0])
    for _ in range(949):
        state = step(state, TickAction(epoch=state.epoch)).state
    assert state.seconds_remaining == 50

    for n, (a, b) in enumerate(pairs):
        if n > 0:
            state = _select(state, a)
        state = _resolve(_select(state, b))

    assert state.matches == 6 == state.pair_count
    assert state.moves == 6
    assert state.phase == "ended"
    assert state.end_reason == "completed"
    assert state.clock.phase == "completed"
    assert state.final_score == 1470

    # No expiry after completion.
    res = step(state, TickAction(epoch=state.epoch))
    assert not res.ok
    assert res.state.final_score == 1470


def test_reset_restores_budget_and_counters() -> None:
    state = new_game("medium", seed=11)
    a, b = _pairs(state)[0]
    state = _resolve(_select(state, a, b))
    state = step(state, TickAction(epoch=state.epoch)).state
    old_epoch = state.epoch

    res = step(state, ResetAction())
    assert [e["type"] for e in res.events] == ["ROUND_RESET"]
    state = res.state
    assert state.phase == "not_started"
    assert state.seconds_remaining == 120
    assert (state.moves, state.matches) == (0, 0)
    assert state.final_score is None
    assert state.selection == ()
    assert state.pending is None
    assert state.epoch == old_epoch + 1
    assert not any(c.matched for c in state.deck)


def test_resolution_from_previous_round_is_ignored_after_reset() -> None:
    state = new_game("easy", seed=12)
    a, b = _mismatch(state)
    state = _select(state, a, b)
    assert state.pending is not None
    token = state.pending.token

    state = step(state, ResetAction()).state
    state = _select(state, 0)
    res = step(state, ResolvePairAction(token))
    assert not res.ok
    assert res.state.selection == (0,)


def test_set_difficulty_rebuilds_deck() -> None:
    state = new_game("easy", seed=13)
    state = step(state, SetDifficultyAction("hard")).state
    assert state.difficulty == "hard"
    assert len(state.deck) == 24
    assert state.seconds_remaining == 60
    assert state.params.grid_columns == 4


def test_set_unknown_difficulty_raises() -> None:
    state = new_game("easy", seed=13)
    with pytest.raises(ConfigurationError):
        step(state, SetDifficultyAction("impossible"))  # type: ignore[arg-type]


def test_step_never_mutates_input_state() -> None:
    state = new_game("easy", seed=14)
    before = snapshot(state)
    a, b = _pairs(state)[0]
    _resolve(_select(state, a, b))
    assert snapshot(state) == before


def test_replay_is_deterministic() -> None:
    seed = 424242
    state = new_game("medium", seed=seed)
    pairs = _pairs(state)
    for a, b in pairs[:3]:
        state = _resolve(_select(state, a, b))
        state = step(state, TickAction(epoch=state.epoch)).state
    a, b = _mismatch(state)
    state = _resolve(_select(state, a, b))

    replayed = replay(state.action_log, difficulty="medium", seed=seed)
    assert snapshot(replayed) == snapshot(state)
    assert replayed == state


def test_reset_starts_an_empty_action_log() -> None:
    state = _select(new_game("medium", seed=15), 0)
    for _ in range(120):
        state = step(state, TickAction(epoch=state.epoch)).state
    assert state.end_reason == "expired"
    assert len(state.action_log) == 121

    for _ in range(5):
        state = step(state, ResetAction()).state
        assert state.action_log == ()
        state = _select(state, 0)
        state = step(state, TickAction(epoch=state.epoch)).state
        assert len(state.action_log) == 2

    state = step(state, SetDifficultyAction("hard")).state
    assert state.action_log == ()


def test_round_start_rebuilds_the_current_round() -> None:
    state = new_game("easy", seed=16)
    a, b = _pairs(state)[0]
    state = _resolve(_select(state, a, b))
    state = step(state, SetDifficultyAction("hard")).state
    fresh = state

    a, b = _mismatch(state)
    state = _resolve(_select(state, a, b))
    state = step(state, TickAction(epoch=state.epoch)).state

    assert round_start(state) == fresh
    assert round_start(state).action_log == ()


def test_replay_round_after_reset() -> None:
    state = new_game("medium", seed=17)
    state = _resolve(_select(state, *_pairs(state)[0]))
    state = step(state, ResetAction()).state

    pairs = _pairs(state)
    for a, b in pairs[:2]:
        state = _resolve(_select(state, a, b))
        state = step(state, TickAction(epoch=state.epoch)).state
    a, b = _mismatch(state)
    state = _select(state, a, b)

    replayed = replay_round(state)
    assert replayed == state
    assert snapshot(replayed) == snapshot(state)
    assert replayed.action_log == state.action_log
