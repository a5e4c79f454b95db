"""In-game scene driving the simulation tick."""
from __future__ import annotations

from typing import Optional

import pygame

from dinostroids.assets.content import DEFAULT_DIFFICULTY, DifficultyDatabase
from dinostroids.engine.clock import MAX_TICK_DELTA, Arena
from dinostroids.engine.input import InputMapper, NullInput
from dinostroids.engine.logger import ChannelLogger, GameLogger
from dinostroids.engine.scene import Scene
from dinostroids.render.renderer import VectorRenderer
from dinostroids.world.events import BonusLife, GameOver, LevelStarted
from dinostroids.world.session import (
    SessionCorrupted,
    SessionState,
    end_session,
    resize_arena,
    set_paused,
    start_session,
    tick,
)


class PlayScene(Scene):
    def __init__(self, manager) -> None:
        super().__init__(manager)
        self.session: Optional[SessionState] = None
        self.input: Optional[InputMapper] = None
        self.renderer: Optional[VectorRenderer] = None
        self.paused = False
        self.banner = ""
        self.banner_time = 0.0
        self._log: Optional[ChannelLogger] = None

    def on_enter(self, **kwargs) -> None:
        self.input = kwargs.get("input")
        self.renderer = kwargs.get("renderer") or VectorRenderer()
        logger: Optional[GameLogger] = kwargs.get("logger")
        self._log = logger.channel("session") if logger else None
        difficulties: DifficultyDatabase = kwargs.get("difficulties") or DifficultyDatabase()
        profile = difficulties.get(kwargs.get("difficulty") or DEFAULT_DIFFICULTY)
        surface = pygame.display.get_surface()
        width, height = surface.get_size() if surface else (800, 600)
        settings = kwargs.get("settings")
        self.session = start_session(
            profile,
            Arena.for_profile(width, height, profile),
            logger=logger,
            max_dt=settings.max_delta if settings else MAX_TICK_DELTA,
        )

    def on_exit(self) -> None:
        if self.session and not self.session.ended:
            end_session(self.session, reason="scene_exit")

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.VIDEORESIZE and self.session and not self.session.ended:
            profile = self.session.difficulty
            resized = Arena.for_profile(event.w, event.h, profile)
            resize_arena(self.session, resized.width, resized.height)

    def update(self, dt: float) -> None:
        if self.session is None:
            return
        controls = self.input or NullInput()
        if self.input:
            if self.input.consume_command("escape"):
                end_session(self.session, reason="quit")
                self.manager.activate("title")
                return
            if self.input.consume_command("pause"):
                self.paused = not self.paused
                set_paused(self.session, self.paused)
        if self.paused:
            return
        self.banner_time = max(0.0, self.banner_time - dt)

        try:
            events = tick(self.session, dt, controls)
        except SessionCorrupted as exc:
            if self._log:
                self._log.error("Session corrupted, returning to title: %s", exc)
            end_session(self.session, reason="corrupted")
            self.manager.activate("title")
            return

        for event in events:
            if isinstance(event, LevelStarted):
                self._show_banner(f"LEVEL {event.level}")
            elif isinstance(event, BonusLife):
                self._show_banner("BONUS LIFE")
            elif isinstance(event, GameOver):
                self.manager.activate("game_over", summary=event.summary)
                return

    def _show_banner(self, text: str) -> None:
        self.banner = text
        self.banner_time = 2.0

    def render(self, surface: pygame.Surface) -> None:
        if self.session is None or self.renderer is None:
            return
        self.renderer.render(surface, self.session, paused=self.paused)
        if self.banner_time > 0.0 and self.renderer.font_hud is not None:
            label = self.renderer.font_hud.render(self.banner, True, (255, 255, 255))
            surface.blit(label, (surface.get_width() / 2 - label.get_width() / 2, surface.get_height() * 0.2))


__all__ = ["PlayScene"]
