"""Level progression, spawn scheduling and the live actor collections."""
from __future__ import annotations

import itertools
import random
from dataclasses import dataclass
from typing import Iterable, List, Optional

from pygame.math import Vector2

from dinostroids.assets.content import DifficultyProfile
from dinostroids.engine.clock import Arena
from dinostroids.engine.logger import ChannelLogger
from dinostroids.world.obstacles import ObstacleActor, ObstacleTier, spawn_obstacle
from dinostroids.world.projectiles import ProjectileActor


LEVEL_SPEED_GROWTH = 1.05
SPAWN_GROWTH_PER_LEVEL = 1
MAX_SPAWN_COUNT = 12
SPAWN_BUFFER = 100.0
SAFE_SPAWN_ATTEMPTS = 50


@dataclass
class LevelState:
    level: int
    speed_multiplier: float
    difficulty: DifficultyProfile


class LevelDirector:
    """Owns obstacles and projectiles and escalates difficulty per level."""

    def __init__(
        self,
        difficulty: DifficultyProfile,
        arena: Arena,
        rng: random.Random,
        *,
        speed_growth: float = LEVEL_SPEED_GROWTH,
        spawn_growth: int = SPAWN_GROWTH_PER_LEVEL,
        max_spawn: int = MAX_SPAWN_COUNT,
        logger: Optional[ChannelLogger] = None,
        physics_logger: Optional[ChannelLogger] = None,
    ) -> None:
        if speed_growth < 1.0:
            raise ValueError("Level speed growth must not shrink obstacle speeds")
        self.arena = arena
        self.rng = rng
        self.speed_growth = speed_growth
        self.spawn_growth = spawn_growth
        self.max_spawn = max_spawn
        self.state = LevelState(level=1, speed_multiplier=1.0, difficulty=difficulty)
        self.obstacles: List[ObstacleActor] = []
        self.projectiles: List[ProjectileActor] = []
        self.ids = itertools.count(1)
        self._logger = logger
        self._physics_logger = physics_logger

    @property
    def level(self) -> int:
        return self.state.level

    @property
    def speed_multiplier(self) -> float:
        return self.state.speed_multiplier

    @property
    def difficulty(self) -> DifficultyProfile:
        return self.state.difficulty

    @property
    def active_obstacles(self) -> int:
        return len(self.obstacles)

    def spawn_count(self, level: Optional[int] = None) -> int:
        level = self.state.level if level is None else level
        count = self.difficulty.initial_obstacles + self.spawn_growth * (level - 1)
        return max(0, min(count, self.max_spawn))

    def start(self, player_position: Optional[Vector2] = None, player_radius: float = 0.0) -> List[ObstacleActor]:
        """Populate level 1 for a fresh session."""

        self.state.level = 1
        self.state.speed_multiplier = 1.0
        self.clear()
        return self._spawn_wave(player_position, player_radius)

    def advance_level(self, player_position: Optional[Vector2] = None, player_radius: float = 0.0) -> List[ObstacleActor]:
        self.state.level += 1
        self.state.speed_multiplier *= self.speed_growth
        self.projectiles.clear()
        return self._spawn_wave(player_position, player_radius)

    def _spawn_wave(self, player_position: Optional[Vector2], player_radius: float) -> List[ObstacleActor]:
        count = self.spawn_count()
        radius = ObstacleTier.LARGE.radius
        spawned: List[ObstacleActor] = []
        for _ in range(count):
            position = self.safe_position(
                [player_position] if player_position is not None else [],
                clearance=SPAWN_BUFFER + radius + player_radius,
                margin=radius,
            )
            obstacle = spawn_obstacle(
                position,
                ObstacleTier.LARGE,
                self.difficulty,
                self.rng,
                speed_multiplier=self.state.speed_multiplier,
                obstacle_id=next(self.ids),
            )
            spawned.append(obstacle)
        self.obstacles.extend(spawned)
        if self._logger:
            self._logger.info(
                "Level %d started with %d obstacles (speed x%.3f, %s)",
                self.state.level,
                len(spawned),
                self.state.speed_multiplier,
                self.difficulty.name,
            )
        return spawned

    def safe_position(
        self,
        avoid: Iterable[Vector2],
        *,
        clearance: float,
        margin: float = 0.0,
        attempts: int = SAFE_SPAWN_ATTEMPTS,
    ) -> Vector2:
        """Pick a random point at least ``clearance`` from every ``avoid`` point.

        The search is bounded; when it runs out the last candidate is used so
        spawning always makes progress.
        """

        points = list(avoid)
        clearance_sq = clearance * clearance
        candidate = self.arena.center
        for _ in range(max(1, attempts)):
            candidate = self.arena.random_point(self.rng, margin)
            if all(candidate.distance_squared_to(point) >= clearance_sq for point in points):
                return candidate
        if self._logger:
            self._logger.warning(
                "No safe position after %d attempts (clearance %.1f); using %s",
                attempts,
                clearance,
                candidate,
            )
        return candidate

    def hyperspace_destination(self, player_radius: float) -> Vector2:
        """Random arena point clear of every live obstacle."""

        clearance = player_radius + ObstacleTier.LARGE.radius + SPAWN_BUFFER / 2.0
        return self.safe_position(
            [obstacle.position for obstacle in self.obstacles],
            clearance=clearance,
            margin=player_radius,
        )

    def add_projectile(self, projectile: ProjectileActor) -> None:
        self.projectiles.append(projectile)

    def replace_obstacle(self, obstacle: ObstacleActor, fragments: List[ObstacleActor]) -> None:
        self.obstacles.remove(obstacle)
        self.obstacles.extend(fragments)

    def update(self, dt: float) -> None:
        for obstacle in self.obstacles:
            obstacle.update(dt, self.arena)
        for projectile in self.projectiles:
            projectile.update(dt, self.arena, self._physics_logger)

    def prune(self) -> None:
        if any(not projectile.alive for projectile in self.projectiles):
            self.projectiles[:] = [projectile for projectile in self.projectiles if projectile.alive]

    def clear(self) -> None:
        self.obstacles.clear()
        self.projectiles.clear()

    def is_cleared(self) -> bool:
        return not self.obstacles


__all__ = [
    "LEVEL_SPEED_GROWTH",
    "LevelDirector",
    "LevelState",
    "MAX_SPAWN_COUNT",
    "SAFE_SPAWN_ATTEMPTS",
    "SPAWN_BUFFER",
    "SPAWN_GROWTH_PER_LEVEL",
]
