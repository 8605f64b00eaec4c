from __future__ import annotations

import traceback

import pygame  # type: ignore[import-not-found]

from ..app import GameContext, SceneTransition
from ..ui import Button, WARN, draw_text
from .board import BoardScene


class BootScene:
    """Validates content, then hands over to the board."""

    def __init__(self, ctx: GameContext) -> None:
        self.ctx = ctx
        self._did_boot = False
        self._error: str | None = None
        self._quit_button: Button | None = None

    def handle_event(self, event: pygame.event.Event) -> None:
        if self._quit_button is not None:
            self._quit_button.handle_event(event)

    def update(self, dt: float) -> SceneTransition | None:
        if self._did_boot:
            return None
        self._did_boot = True
        try:
            self.ctx.content.validate_all()
            self.ctx.policy = self.ctx.content.load_difficulties()
            self.ctx.catalog = self.ctx.content.load_symbols()
            self.ctx.telemetry.log("boot", {"ok": True, "symbols": len(self.ctx.catalog)})
            return SceneTransition(BoardScene(self.ctx))
        except Exception as e:
            tb = traceback.format_exc(limit=8)
            self._error = f"{e}\n\n{tb}"
            self.ctx.telemetry.log("boot", {"ok": False, "error": str(e)})
            self._quit_button = Button(
                rect=pygame.Rect(20, self.ctx.screen.get_height() - 64, 140, 44),
                text="Quit",
                on_click=lambda: pygame.event.post(pygame.event.Event(pygame.QUIT)),
            )
            return None

    def render(self, screen: pygame.Surface) -> None:
        screen.fill((15, 12, 41))
        fonts = self.ctx.assets.fonts
        draw_text(screen, fonts.big, "Memory Match", (20, 20))
        if self._error is None:
            draw_text(screen, fonts.ui, "Loading difficulty table and symbols...", (20, 80))
            return
        draw_text(screen, fonts.ui, "BOOT ERROR", (20, 80), color=WARN)
        y = 120
        for line in self._error.splitlines()[:28]:
            draw_text(screen, fonts.small, line[:100], (20, y))
            y += 18
        if self._quit_button is not None:
            self._quit_button.draw(screen, fonts.ui)
