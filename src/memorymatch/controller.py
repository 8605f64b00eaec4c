from __future__ import annotations

from typing import Callable

from memorymatch.engine.actions import (
    Action,
    ResetAction,
    ResolvePairAction,
    SelectCardAction,
    SetDifficultyAction,
    TickAction,
)
from memorymatch.engine.clock import TICK_MS
from memorymatch.engine.deck import SymbolCatalog
from memorymatch.engine.difficulty import DifficultyPolicy, validate_difficulty
from memorymatch.engine.game import Event, GameState, StepResult, new_game, step
from memorymatch.engine.serialize import action_to_dict, snapshot
from memorymatch.engine.timers import Scheduler, TimerHandle
from memorymatch.engine.types import Difficulty
from memorymatch.services.telemetry import TelemetrySink

Listener = Callable[[Event], None]

# Too chatty for the telemetry file; listeners still get them.
_UNLOGGED_EVENTS = frozenset({"CLOCK_TICKED", "CARD_REVEALED"})


class GameController:
    """Owns one game session and the timers that drive it.

    All state lives in an immutable GameState replaced on every accepted
    action. Timers are cancellable handles kept here; reset and difficulty
    changes cancel them before the round is replaced, and each timer also
    carries the epoch/token of the round it was scheduled for.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        difficulty: Difficulty = "easy",
        seed: int | None = None,
        policy: DifficultyPolicy | None = None,
        catalog: SymbolCatalog | None = None,
        telemetry: TelemetrySink | None = None,
    ) -> None:
        self._scheduler = scheduler
        self._telemetry = telemetry
        self._listeners: list[Listener] = []
        self._tick_handle: TimerHandle | None = None
        self._resolve_handle: TimerHandle | None = None
        self._state = new_game(
            difficulty=validate_difficulty(difficulty),
            seed=seed,
            policy=policy,
            catalog=catalog,
        )

    @property
    def state(self) -> GameState:
        return self._state

    def snapshot(self) -> dict[str, object]:
        return snapshot(self._state)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # Presentation-facing commands

    def select_card(self, index: int) -> StepResult:
        return self._apply(SelectCardAction(index=index))

    def set_difficulty(self, difficulty: Difficulty) -> StepResult:
        d = validate_difficulty(difficulty)
        self._cancel_timers()
        return self._apply(SetDifficultyAction(difficulty=d))

    def reset(self) -> StepResult:
        self._cancel_timers()
        return self._apply(ResetAction())

    # Internals

    def _apply(self, action: Action) -> StepResult:
        res = step(self._state, action)
        if not res.ok:
            if self._telemetry is not None and isinstance(action, SelectCardAction):
                self._telemetry.log("input_ignored", {**action_to_dict(action), "reason": res.error})
            return res
        self._state = res.state
        for ev in res.events:
            self._on_event(ev)
        return res

    def _on_event(self, ev: Event) -> None:
        kind = ev.get("type")
        if kind == "ROUND_STARTED":
            self._schedule_tick()
        elif kind == "PAIR_PENDING":
            pending = self._state.pending
            if pending is not None:
                self._schedule_resolution(pending.token, pending.delay_ms)
        elif kind in ("ROUND_COMPLETED", "ROUND_EXPIRED"):
            self._cancel_timers()

        if self._telemetry is not None and kind not in _UNLOGGED_EVENTS:
            payload = {k: v for k, v in ev.items() if k != "type"}
            payload["difficulty"] = self._state.difficulty
            self._telemetry.log(str(kind).lower(), payload)

        for listener in list(self._listeners):
            listener(ev)

    def _schedule_tick(self) -> None:
        epoch = self._state.epoch

        def fire() -> None:
            self._tick_handle = None
            res = self._apply(TickAction(epoch=epoch))
            if res.ok and self._state.epoch == epoch and self._state.phase == "running":
                self._schedule_tick()

        self._tick_handle = self._scheduler.call_later(TICK_MS, fire)

    def _schedule_resolution(self, token: int, delay_ms: int) -> None:
        def fire() -> None:
            self._resolve_handle = None
            self._apply(ResolvePairAction(token=token))

        self._resolve_handle = self._scheduler.call_later(delay_ms, fire)

    def _cancel_timers(self) -> None:
        for handle in (self._tick_handle, self._resolve_handle):
            if handle is not None:
                handle.cancel()
        self._tick_handle = None
        self._resolve_handle = None
