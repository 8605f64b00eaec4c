from __future__ import annotations

import math

import pygame  # type: ignore[import-not-found]

from memorymatch.controller import GameController
from memorymatch.engine.game import Event
from memorymatch.engine.types import DIFFICULTIES, Difficulty

from ..app import GameContext, SceneTransition
from ..ui import GOLD, MUTED, WARN, Button, draw_text, draw_text_centered

GRID_TOP = 200
GAP = 12
BANNER_SECONDS = 4.0


class BoardScene:
    def __init__(self, ctx: GameContext) -> None:
        self.ctx = ctx
        self.controller = GameController(
            scheduler=ctx.scheduler,
            difficulty=ctx.difficulty,
            seed=ctx.seed,
            policy=ctx.policy,
            catalog=ctx.catalog,
            telemetry=ctx.telemetry,
        )
        self.controller.subscribe(self._on_engine_event)

        self._banner: tuple[str, tuple[int, int, int]] | None = None
        self._banner_left = 0.0

        width = ctx.screen.get_width()
        tab_w = 110
        x0 = (width - tab_w * len(DIFFICULTIES)) // 2
        self.tabs = [
            Button(
                rect=pygame.Rect(x0 + i * tab_w, 70, tab_w, 36),
                text=d.capitalize(),
                on_click=lambda d=d: self._on_difficulty(d),
            )
            for i, d in enumerate(DIFFICULTIES)
        ]
        self.btn_reset = Button(
            rect=pygame.Rect((width - 200) // 2, ctx.screen.get_height() - 64, 200, 44),
            text="Start Game",
            on_click=self._on_reset,
        )

    def _on_difficulty(self, difficulty: Difficulty) -> None:
        self.ctx.difficulty = difficulty
        self._banner = None
        self.controller.set_difficulty(difficulty)

    def _on_reset(self) -> None:
        self._banner = None
        self.controller.reset()

    def _on_engine_event(self, ev: Event) -> None:
        kind = ev.get("type")
        if kind == "ROUND_COMPLETED":
            self._show_banner(f"You found all the matches! Score: {ev.get('score')}", GOLD)
        elif kind == "ROUND_EXPIRED":
            self._show_banner("Time's up! Game over!", WARN)

    def _show_banner(self, text: str, color: tuple[int, int, int]) -> None:
        self._banner = (text, color)
        self._banner_left = BANNER_SECONDS

    def _card_rects(self) -> list[pygame.Rect]:
        state = self.controller.state
        cols = state.params.grid_columns
        count = len(state.deck)
        rows = math.ceil(count / cols)
        width, height = self.ctx.screen.get_size()
        avail_h = height - GRID_TOP - 90
        size = min((width - 80 - GAP * (cols - 1)) // cols, (avail_h - GAP * (rows - 1)) // rows, 110)
        x0 = (width - (size * cols + GAP * (cols - 1))) // 2
        rects = []
        for i in range(count):
            r, c = divmod(i, cols)
            rects.append(pygame.Rect(x0 + c * (size + GAP), GRID_TOP + r * (size + GAP), size, size))
        return rects

    def handle_event(self, event: pygame.event.Event) -> None:
        for tab in self.tabs:
            tab.handle_event(event)
        self.btn_reset.handle_event(event)

        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            for i, rect in enumerate(self._card_rects()):
                if rect.collidepoint(event.pos):
                    self.controller.select_card(i)
                    return

    def update(self, dt: float) -> SceneTransition | None:
        if self._banner is not None:
            self._banner_left -= dt
            if self._banner_left <= 0:
                self._banner = None
        return None

    def render(self, screen: pygame.Surface) -> None:
        screen.fill((15, 12, 41))
        fonts = self.ctx.assets.fonts
        snap = self.controller.snapshot()
        width = screen.get_width()

        draw_text_centered(screen, fonts.big, "Memory Match Challenge", (width // 2, 36))
        for tab, d in zip(self.tabs, DIFFICULTIES):
            tab.selected = d == snap["difficulty"]
            tab.draw(screen, fonts.ui)

        seconds = snap["seconds_remaining"]
        time_color = WARN if isinstance(seconds, int) and seconds < 10 else MUTED
        draw_text(screen, fonts.ui, f"Time: {seconds}s", (width // 2 - 230, 124), color=time_color)
        draw_text(screen, fonts.ui, f"Moves: {snap['moves']}", (width // 2 - 60, 124), color=MUTED)
        draw_text(screen, fonts.ui, f"Matches: {snap['matches']}/{snap['pair_count']}", (width // 2 + 90, 124), color=MUTED)
        if snap["phase"] == "ended":
            final = snap["final_score"] if snap["final_score"] is not None else 0
            draw_text_centered(screen, fonts.ui, f"Final Score: {final}", (width // 2, 168), color=GOLD)

        cards = snap["cards"]
        assert isinstance(cards, list)
        for rect, card in zip(self._card_rects(), cards):
            self._draw_card(screen, rect, card)

        self.btn_reset.text = "Start Game" if snap["phase"] == "not_started" else "Restart Game"
        self.btn_reset.draw(screen, fonts.ui)

        if self._banner is not None:
            text, color = self._banner
            draw_text_centered(screen, fonts.ui, text, (width // 2, screen.get_height() - 90), color=color)

    def _draw_card(self, screen: pygame.Surface, rect: pygame.Rect, card: dict[str, object]) -> None:
        if card["matched"]:
            bg, border = (49, 46, 129), (129, 140, 248)
        elif card["face_up"]:
            bg, border = (55, 48, 163), (99, 102, 241)
        else:
            bg, border = (30, 27, 75), (55, 48, 163)
        pygame.draw.rect(screen, bg, rect, border_radius=10)
        pygame.draw.rect(screen, border, rect, width=2, border_radius=10)
        if not (card["matched"] or card["face_up"]):
            return
        name = str(card["symbol"])
        color = self.controller.state.catalog.get(name).color
        draw_text_centered(screen, self.ctx.assets.fonts.card, name, rect.center, color=color)
