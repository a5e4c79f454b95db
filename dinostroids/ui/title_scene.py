"""Title screen scene."""
from __future__ import annotations

from concurrent.futures import Future
from typing import List, Optional

import pygame

from dinostroids.assets.content import DEFAULT_DIFFICULTY, DifficultyDatabase
from dinostroids.engine.input import InputMapper
from dinostroids.engine.scene import Scene
from dinostroids.services.leaderboard import LeaderboardClient, LeaderboardEntry
from dinostroids.services.tasks import BackgroundTaskRunner, completed_result

TITLE_COLOR = (255, 255, 255)
TEXT_COLOR = (200, 215, 230)
SELECTED_COLOR = (255, 210, 90)
SUBDUED_COLOR = (120, 140, 160)

DIFFICULTY_COMMANDS = {
    "difficulty_easy": "easy",
    "difficulty_medium": "medium",
    "difficulty_difficult": "difficult",
}

HELP_LINES = (
    "LEFT / RIGHT  rotate",
    "UP            thrust",
    "SPACE         fire",
    "H             hyperspace",
    "P             pause",
    "ESC           quit to title",
)


class TitleScene(Scene):
    def __init__(self, manager) -> None:
        super().__init__(manager)
        self.font_large: Optional[pygame.font.Font] = None
        self.font: Optional[pygame.font.Font] = None
        self.input: Optional[InputMapper] = None
        self.difficulties: Optional[DifficultyDatabase] = None
        self.difficulty = DEFAULT_DIFFICULTY
        self.show_help = False
        self._leaderboard_future: Optional[Future] = None
        self._count_future: Optional[Future] = None
        self._tasks: Optional[BackgroundTaskRunner] = None
        self._client: Optional[LeaderboardClient] = None

    def on_enter(self, **kwargs) -> None:
        self.font_large = pygame.font.SysFont("consolas", 56)
        self.font = pygame.font.SysFont("consolas", 24)
        self.input = kwargs.get("input")
        self.difficulties = kwargs.get("difficulties") or DifficultyDatabase()
        self.difficulty = kwargs.get("difficulty") or self.difficulty
        if self.difficulty not in self.difficulties.profiles:
            self.difficulty = DEFAULT_DIFFICULTY
        self._tasks = kwargs.get("tasks")
        self._client = kwargs.get("leaderboard")
        if self._tasks and self._client and self._tasks.running:
            self._leaderboard_future = self._tasks.submit(self._client.fetch_leaderboard())
            self._count_future = self._tasks.submit(self._client.fetch_play_count())

    @property
    def leaderboard(self) -> List[LeaderboardEntry]:
        return completed_result(self._leaderboard_future, [])

    @property
    def play_count(self) -> int:
        return completed_result(self._count_future, 0)

    def update(self, dt: float) -> None:
        if not self.input:
            return
        for command, name in DIFFICULTY_COMMANDS.items():
            if self.input.consume_command(command) and self.difficulties and name in self.difficulties.profiles:
                self.difficulty = name
        if self.input.consume_command("help"):
            self.show_help = not self.show_help
        if self.input.consume_command("escape"):
            if self.show_help:
                self.show_help = False
            else:
                pygame.event.post(pygame.event.Event(pygame.QUIT))
            return
        if self.input.consume_command("start"):
            if self._tasks and self._client and self._tasks.running:
                self._tasks.submit(self._client.increment_play_count())
            self.manager.set_context(difficulty=self.difficulty)
            self.manager.activate("play", difficulty=self.difficulty)

    def render(self, surface: pygame.Surface) -> None:
        surface.fill((0, 0, 0))
        center_x = surface.get_width() / 2
        title = self.font_large.render("DINOSTROIDS", True, TITLE_COLOR)
        surface.blit(title, (center_x - title.get_width() / 2, surface.get_height() * 0.12))

        y = surface.get_height() * 0.12 + title.get_height() + 24
        if self.show_help:
            for line in HELP_LINES:
                text = self.font.render(line, True, TEXT_COLOR)
                surface.blit(text, (center_x - text.get_width() / 2, y))
                y += text.get_height() + 6
        else:
            y = self._render_leaderboard(surface, center_x, y)

        x = center_x - 220
        y = surface.get_height() * 0.78
        for command, name in DIFFICULTY_COMMANDS.items():
            color = SELECTED_COLOR if name == self.difficulty else SUBDUED_COLOR
            label = self.font.render(f"[{name[0].upper()}] {name.upper()}", True, color)
            surface.blit(label, (x, y))
            x += label.get_width() + 30
        prompt = self.font.render("ENTER to start   ? for help   ESC to quit", True, TEXT_COLOR)
        surface.blit(prompt, (center_x - prompt.get_width() / 2, y + 40))
        if self.play_count > 0:
            count = self.font.render(f"Games Played: {self.play_count}", True, SUBDUED_COLOR)
            surface.blit(count, (center_x - count.get_width() / 2, surface.get_height() - 50))

    def _render_leaderboard(self, surface: pygame.Surface, center_x: float, y: float) -> float:
        header = self.font.render("LEADERBOARD", True, TITLE_COLOR)
        surface.blit(header, (center_x - header.get_width() / 2, y))
        y += header.get_height() + 10
        entries = self.leaderboard
        if not entries:
            empty = self.font.render("No scores yet", True, SUBDUED_COLOR)
            surface.blit(empty, (center_x - empty.get_width() / 2, y))
            return y + empty.get_height()
        for rank, entry in enumerate(entries[:10], start=1):
            level = f"L{entry.level}" if entry.level else "L-"
            line = f"{rank:>2}. {entry.initials:<3} {entry.score:>7} {level:>4} {entry.duration_label:>6}"
            text = self.font.render(line, True, TEXT_COLOR)
            surface.blit(text, (center_x - text.get_width() / 2, y))
            y += text.get_height() + 4
        return y


__all__ = ["TitleScene"]
