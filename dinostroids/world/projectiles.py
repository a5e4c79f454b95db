"""Straight-line projectiles fired by the ship."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pygame.math import Vector2

from dinostroids.engine.clock import Arena, from_heading
from dinostroids.engine.logger import ChannelLogger


PROJECTILE_RADIUS = 2.0
PROJECTILE_SPEED = 500.0
PROJECTILE_LIFESPAN = 1.0


@dataclass
class ProjectileSpawn:
    """Request to launch a projectile, emitted by the ship's fire check."""

    position: Vector2
    heading: float


class ProjectileActor:
    """Projectile with a fixed heading and a time-to-live in seconds.

    Projectiles wrap at the arena edges like every other actor; they leave
    play only when their lifespan runs out or they hit an obstacle.
    """

    def __init__(
        self,
        position: Vector2,
        heading: float,
        *,
        speed: float = PROJECTILE_SPEED,
        ttl: float = PROJECTILE_LIFESPAN,
        radius: float = PROJECTILE_RADIUS,
    ) -> None:
        self.position = Vector2(position)
        self.heading = heading
        self.velocity = from_heading(heading, speed)
        self.ttl = ttl
        self.collision_radius = radius
        self.alive = ttl > 0.0

    @classmethod
    def from_spawn(cls, spawn: ProjectileSpawn) -> "ProjectileActor":
        return cls(spawn.position, spawn.heading)

    def update(self, dt: float, arena: Arena, logger: Optional[ChannelLogger] = None) -> None:
        if not self.alive:
            return
        self.position += self.velocity * dt
        arena.wrap(self.position, self.collision_radius)
        self.ttl -= dt
        if self.ttl <= 0.0:
            self.ttl = 0.0
            self.alive = False
        if logger and logger.enabled:
            logger.debug(
                "Projectile update pos=%s ttl=%.2f alive=%s",
                self.position,
                self.ttl,
                self.alive,
            )

    def deactivate(self) -> None:
        self.alive = False


__all__ = [
    "PROJECTILE_LIFESPAN",
    "PROJECTILE_RADIUS",
    "PROJECTILE_SPEED",
    "ProjectileActor",
    "ProjectileSpawn",
]
