"""Game over scene with initials entry and score submission."""
from __future__ import annotations

from concurrent.futures import Future
from typing import Optional

import pygame

from dinostroids.engine.input import InputMapper
from dinostroids.engine.scene import Scene
from dinostroids.services.leaderboard import (
    MAX_INITIALS,
    LeaderboardClient,
    qualifies_for_leaderboard,
    sanitize_initials,
)
from dinostroids.services.tasks import BackgroundTaskRunner, completed_result
from dinostroids.world.events import SessionSummary

TITLE_COLOR = (255, 80, 80)
TEXT_COLOR = (220, 230, 240)
SUBDUED_COLOR = (130, 150, 170)


class GameOverScene(Scene):
    def __init__(self, manager) -> None:
        super().__init__(manager)
        self.font_large: Optional[pygame.font.Font] = None
        self.font: Optional[pygame.font.Font] = None
        self.summary = SessionSummary(score=0, level=1, time_ms=0, difficulty="")
        self.input: Optional[InputMapper] = None
        self.initials = ""
        self._tasks: Optional[BackgroundTaskRunner] = None
        self._client: Optional[LeaderboardClient] = None
        self._leaderboard_future: Optional[Future] = None
        self._submit_future: Optional[Future] = None

    def on_enter(self, **kwargs) -> None:
        self.font_large = pygame.font.SysFont("consolas", 56)
        self.font = pygame.font.SysFont("consolas", 26)
        self.summary = kwargs.get("summary") or self.summary
        self.input = kwargs.get("input")
        self._tasks = kwargs.get("tasks")
        self._client = kwargs.get("leaderboard")
        if self._online:
            self._leaderboard_future = self._tasks.submit(self._client.fetch_leaderboard())

    @property
    def _online(self) -> bool:
        return bool(self._tasks and self._client and self._tasks.running)

    @property
    def leaderboard_loaded(self) -> bool:
        return self._leaderboard_future is not None and self._leaderboard_future.done()

    @property
    def accepts_initials(self) -> bool:
        if not self.leaderboard_loaded or self._submit_future is not None or self.summary.score <= 0:
            return False
        return qualifies_for_leaderboard(completed_result(self._leaderboard_future, []), self.summary.score)

    @property
    def status(self) -> str:
        if not self._online:
            return "Leaderboard offline"
        if self._submit_future is None:
            return "" if self.leaderboard_loaded else "Loading leaderboard..."
        if not self._submit_future.done():
            return "Submitting score..."
        if completed_result(self._submit_future, False):
            return "Score submitted!"
        return "Score submission failed"

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.KEYDOWN and event.key == pygame.K_BACKSPACE and self.accepts_initials:
            self.initials = self.initials[:-1]

    def update(self, dt: float) -> None:
        if not self.input:
            return
        if self.accepts_initials and self.input.text_input:
            self.initials = sanitize_initials(self.initials + self.input.text_input)
            self.input.clear_commands()
            if len(self.initials) >= MAX_INITIALS:
                self._submit()
            return
        if self.input.consume_command("start"):
            if self.accepts_initials and self.initials:
                self._submit()
            elif not self.accepts_initials:
                self.manager.activate("title")
            return
        if self.input.consume_command("escape"):
            self.manager.activate("title")

    def _submit(self) -> None:
        if not self._online or self._submit_future is not None:
            return
        summary = self.summary
        self._submit_future = self._tasks.submit(
            self._client.submit_score(self.initials, summary.score, summary.time_ms, summary.level, summary.difficulty)
        )

    def render(self, surface: pygame.Surface) -> None:
        surface.fill((0, 0, 0))
        center_x = surface.get_width() / 2
        y = surface.get_height() * 0.2
        title = self.font_large.render("GAME OVER", True, TITLE_COLOR)
        surface.blit(title, (center_x - title.get_width() / 2, y))
        y += title.get_height() + 30
        seconds = self.summary.time_ms // 1000
        lines = [
            f"SCORE {self.summary.score}",
            f"LEVEL {self.summary.level}   TIME {seconds // 60}:{seconds % 60:02d}",
            f"DIFFICULTY {self.summary.difficulty.upper()}",
        ]
        for line in lines:
            text = self.font.render(line, True, TEXT_COLOR)
            surface.blit(text, (center_x - text.get_width() / 2, y))
            y += text.get_height() + 8
        y += 20
        if self.accepts_initials:
            prompt = self.font.render("NEW HIGH SCORE! Enter your initials:", True, TEXT_COLOR)
            surface.blit(prompt, (center_x - prompt.get_width() / 2, y))
            y += prompt.get_height() + 12
            boxes = " ".join((self.initials + "___")[:MAX_INITIALS])
            text = self.font_large.render(boxes, True, TEXT_COLOR)
            surface.blit(text, (center_x - text.get_width() / 2, y))
            y += text.get_height() + 12
        if self.status:
            status = self.font.render(self.status, True, SUBDUED_COLOR)
            surface.blit(status, (center_x - status.get_width() / 2, y))
            y += status.get_height() + 12
        if not self.accepts_initials:
            prompt = self.font.render("Press ENTER to return to title", True, SUBDUED_COLOR)
            surface.blit(prompt, (center_x - prompt.get_width() / 2, y))


__all__ = ["GameOverScene"]
