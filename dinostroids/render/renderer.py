"""Vector line renderer for session state."""
from __future__ import annotations

import math
import random
from typing import Dict, List, Optional, Sequence, Tuple

import pygame
from pygame.math import Vector2

from dinostroids.world.obstacles import ObstacleActor
from dinostroids.world.player import PlayerActor, PlayerState
from dinostroids.world.session import SessionState

BACKGROUND_COLOR = (0, 0, 0)
LINE_COLOR = (255, 255, 255)
FIELD_BORDER_COLOR = (60, 90, 120)
PROJECTILE_COLOR = (255, 255, 255)
THRUST_COLOR = (255, 165, 0)
HUD_COLOR = (220, 230, 240)
HUD_SUBDUED = (140, 160, 180)

# Unit-radius silhouettes facing +x, traced as closed polylines.
DINO_OUTLINES: Dict[str, Tuple[Tuple[float, float], ...]] = {
    "bront": (
        (0.95, -0.85), (1.0, -0.7), (0.75, -0.65), (0.55, -0.1), (0.3, -0.2),
        (-0.3, -0.25), (-0.75, 0.0), (-1.0, 0.3), (-0.7, 0.2), (-0.55, 0.55),
        (-0.4, 0.55), (-0.35, 0.3), (0.15, 0.3), (0.2, 0.55), (0.35, 0.55),
        (0.45, 0.05), (0.7, -0.7),
    ),
    "steg": (
        (1.0, 0.05), (0.8, -0.2), (0.5, -0.3), (0.35, -0.6), (0.15, -0.4),
        (0.0, -0.75), (-0.2, -0.45), (-0.4, -0.65), (-0.55, -0.3), (-1.0, 0.0),
        (-0.8, 0.1), (-0.55, 0.15), (-0.5, 0.5), (-0.35, 0.5), (-0.3, 0.2),
        (0.3, 0.2), (0.35, 0.5), (0.5, 0.5), (0.55, 0.1),
    ),
    "trex": (
        (1.0, -0.6), (0.95, -0.35), (0.6, -0.35), (0.45, -0.05), (0.6, 0.05),
        (0.3, 0.1), (0.15, 0.45), (0.25, 0.95), (0.0, 0.95), (-0.1, 0.4),
        (-0.5, 0.3), (-1.0, 0.45), (-0.45, -0.05), (0.1, -0.5), (0.4, -0.8),
        (0.85, -0.8),
    ),
}
OUTLINE_JITTER = 0.08
SHIP_OUTLINE = ((1.0, 0.0), (-0.7, -0.65), (-0.4, 0.0), (-0.7, 0.65))
INVINCIBLE_BLINK_HZ = 8.0


def outline_for(obstacle: ObstacleActor) -> List[Tuple[float, float]]:
    """Kind silhouette with a stable per-obstacle wobble."""

    base = DINO_OUTLINES.get(obstacle.kind, DINO_OUTLINES["bront"])
    rng = random.Random(obstacle.id)
    return [
        (x * (1.0 + rng.uniform(-OUTLINE_JITTER, OUTLINE_JITTER)), y * (1.0 + rng.uniform(-OUTLINE_JITTER, OUTLINE_JITTER)))
        for x, y in base
    ]


def transform(points: Sequence[Tuple[float, float]], origin: Vector2, angle: float, scale: float) -> List[Vector2]:
    cos_a = math.cos(angle)
    sin_a = math.sin(angle)
    return [
        Vector2(
            origin.x + (x * cos_a - y * sin_a) * scale,
            origin.y + (x * sin_a + y * cos_a) * scale,
        )
        for x, y in points
    ]


class VectorRenderer:
    """Draws a session onto a pygame surface with line primitives."""

    def __init__(self) -> None:
        self.font_hud: Optional[pygame.font.Font] = None
        self._outlines: Dict[int, List[Tuple[float, float]]] = {}

    def _ensure_fonts(self) -> None:
        if self.font_hud is None:
            self.font_hud = pygame.font.SysFont("consolas", 22)

    def field_rect(self, surface: pygame.Surface, state: SessionState) -> pygame.Rect:
        width = int(state.arena.width)
        height = int(state.arena.height)
        rect = pygame.Rect(0, 0, width, height)
        rect.center = surface.get_rect().center
        return rect

    def render(self, surface: pygame.Surface, state: SessionState, *, paused: bool = False) -> None:
        self._ensure_fonts()
        surface.fill(BACKGROUND_COLOR)
        field = self.field_rect(surface, state)
        if field.size != surface.get_size():
            pygame.draw.rect(surface, FIELD_BORDER_COLOR, field.inflate(4, 4), 1)
        origin = Vector2(field.topleft)

        self._prune_outlines(state.obstacles)
        for obstacle in state.obstacles:
            self.draw_obstacle(surface, obstacle, origin)
        for projectile in state.projectiles:
            if projectile.alive:
                center = origin + projectile.position
                pygame.draw.circle(surface, PROJECTILE_COLOR, (int(center.x), int(center.y)), max(1, int(projectile.collision_radius)))
        if state.player is not None:
            self.draw_player(surface, state.player, origin, state.clock.now)
        self.draw_hud(surface, state, paused)

    def _prune_outlines(self, obstacles: Sequence[ObstacleActor]) -> None:
        if len(self._outlines) > len(obstacles) * 2 + 32:
            live = {obstacle.id for obstacle in obstacles}
            self._outlines = {key: value for key, value in self._outlines.items() if key in live}

    def draw_obstacle(self, surface: pygame.Surface, obstacle: ObstacleActor, origin: Vector2) -> None:
        outline = self._outlines.get(obstacle.id)
        if outline is None:
            outline = outline_for(obstacle)
            self._outlines[obstacle.id] = outline
        points = transform(outline, origin + obstacle.position, obstacle.rotation, obstacle.collision_radius)
        pygame.draw.lines(surface, LINE_COLOR, True, points, 2)

    def draw_player(self, surface: pygame.Surface, player: PlayerActor, origin: Vector2, now: float) -> None:
        for particle in player.debris:
            color = tuple(int(channel * particle.alpha) for channel in particle.color)
            center = origin + particle.position
            if particle.is_debris:
                start = center + Vector2(particle.size * 2.0, 0).rotate_rad(particle.rotation)
                end = center - Vector2(particle.size * 2.0, 0).rotate_rad(particle.rotation)
                pygame.draw.line(surface, color, start, end, 1)
            else:
                pygame.draw.circle(surface, color, (int(center.x), int(center.y)), max(1, int(particle.size)))

        if player.state in (PlayerState.EXPLODING, PlayerState.DESTROYED):
            return
        if player.is_invincible and int(now * INVINCIBLE_BLINK_HZ) % 2:
            return
        center = origin + player.position
        points = transform(SHIP_OUTLINE, center, player.heading, player.collision_radius)
        pygame.draw.lines(surface, LINE_COLOR, True, points, 2)
        if player.thrusting:
            flame = transform(((-0.5, -0.3), (-1.1, 0.0), (-0.5, 0.3)), center, player.heading, player.collision_radius)
            pygame.draw.lines(surface, THRUST_COLOR, False, flame, 2)

    def draw_hud(self, surface: pygame.Surface, state: SessionState, paused: bool) -> None:
        assert self.font_hud is not None
        score = self.font_hud.render(f"SCORE {state.score}", True, HUD_COLOR)
        lives = self.font_hud.render(f"LIVES {state.lives}", True, HUD_COLOR)
        level = self.font_hud.render(f"LEVEL {state.level}  {state.difficulty.name.upper()}", True, HUD_SUBDUED)
        surface.blit(score, (20, 16))
        surface.blit(lives, (20, 16 + score.get_height() + 4))
        surface.blit(level, (surface.get_width() - level.get_width() - 20, 16))
        if state.player is not None and state.player.hyperspace_ready_at > state.clock.now:
            remaining = state.player.hyperspace_ready_at - state.clock.now
            cooldown = self.font_hud.render(f"HYPERSPACE {remaining:.1f}s", True, HUD_SUBDUED)
            surface.blit(cooldown, (surface.get_width() - cooldown.get_width() - 20, 16 + level.get_height() + 4))
        if paused:
            label = self.font_hud.render("PAUSED - press P to resume", True, HUD_COLOR)
            surface.blit(label, (surface.get_width() / 2 - label.get_width() / 2, surface.get_height() / 2))


__all__ = ["DINO_OUTLINES", "VectorRenderer", "outline_for", "transform"]
