from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

import pygame  # type: ignore[import-not-found]

from memorymatch.engine.deck import SymbolCatalog
from memorymatch.engine.difficulty import DifficultyPolicy
from memorymatch.engine.timers import FrameScheduler
from memorymatch.engine.types import Difficulty
from memorymatch.paths import Paths
from memorymatch.services.content import ContentService
from memorymatch.services.telemetry import TelemetryService

from .asset_manager import AssetManager


@dataclass
class SceneTransition:
    next_scene: "Scene"


class Scene(Protocol):
    def handle_event(self, event: pygame.event.Event) -> None: ...
    def update(self, dt: float) -> SceneTransition | None: ...
    def render(self, screen: pygame.Surface) -> None: ...


@dataclass
class GameContext:
    screen: pygame.Surface
    clock: pygame.time.Clock
    paths: Paths
    assets: AssetManager
    content: ContentService
    telemetry: TelemetryService
    scheduler: FrameScheduler
    difficulty: Difficulty = "easy"
    seed: Optional[int] = None

    # Loaded at boot
    policy: Optional[DifficultyPolicy] = None
    catalog: Optional[SymbolCatalog] = None


class App:
    def __init__(self, ctx: GameContext, initial_scene: Scene) -> None:
        self.ctx = ctx
        self.scene: Scene = initial_scene
        self.running = True

    def run(self) -> int:
        while self.running:
            elapsed_ms = self.ctx.clock.tick(60)
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    self.running = False
                    break
                self.scene.handle_event(event)

            # Engine timers (reveal delays, clock seconds) run off frame time.
            self.ctx.scheduler.advance(elapsed_ms)

            tr = self.scene.update(elapsed_ms / 1000.0)
            if tr is not None:
                self.scene = tr.next_scene

            self.scene.render(self.ctx.screen)
            pygame.display.flip()

        return 0
