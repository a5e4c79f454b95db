"""Events produced by a tick and drained by the presentation layer."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pygame.math import Vector2

from dinostroids.world.obstacles import ObstacleTier


@dataclass(frozen=True)
class SessionSummary:
    score: int
    level: int
    time_ms: int
    difficulty: str


@dataclass(frozen=True)
class GameEvent:
    """Base class for tick events."""


@dataclass(frozen=True)
class ProjectileFired(GameEvent):
    position: Vector2
    heading: float


@dataclass(frozen=True)
class ObstacleDestroyed(GameEvent):
    obstacle_id: int
    tier: ObstacleTier
    kind: str
    position: Vector2
    points: int
    fragments: int
    by_player: bool = False


@dataclass(frozen=True)
class PlayerHit(GameEvent):
    position: Vector2
    lives_remaining: int


@dataclass(frozen=True)
class PlayerRespawned(GameEvent):
    position: Vector2


@dataclass(frozen=True)
class HyperspaceJump(GameEvent):
    origin: Vector2
    destination: Vector2


@dataclass(frozen=True)
class BonusLife(GameEvent):
    score: int
    lives: int


@dataclass(frozen=True)
class LevelStarted(GameEvent):
    level: int
    speed_multiplier: float
    obstacles: int


@dataclass(frozen=True)
class GameOver(GameEvent):
    summary: SessionSummary
    reason: Optional[str] = None


__all__ = [
    "BonusLife",
    "GameEvent",
    "GameOver",
    "HyperspaceJump",
    "LevelStarted",
    "ObstacleDestroyed",
    "PlayerHit",
    "PlayerRespawned",
    "ProjectileFired",
    "SessionSummary",
]
