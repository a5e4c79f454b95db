"""Drifting dino obstacles and their fragmentation table."""
from __future__ import annotations

import math
import random
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

from pygame.math import Vector2

from dinostroids.assets.content import DifficultyProfile
from dinostroids.engine.clock import Arena, from_heading, heading_of


class ObstacleTier(Enum):
    LARGE = "large"
    MEDIUM = "medium"
    SMALL = "small"

    @property
    def radius(self) -> float:
        return TIER_RADII[self]

    @property
    def score(self) -> int:
        return TIER_SCORES[self]


TIER_RADII: Dict[ObstacleTier, float] = {
    ObstacleTier.LARGE: 45.0,
    ObstacleTier.MEDIUM: 25.0,
    ObstacleTier.SMALL: 15.0,
}

# Smaller targets are harder to hit and pay more.
TIER_SCORES: Dict[ObstacleTier, int] = {
    ObstacleTier.LARGE: 20,
    ObstacleTier.MEDIUM: 50,
    ObstacleTier.SMALL: 100,
}

OBSTACLE_TYPES: Tuple[str, ...] = ("bront", "steg", "trex")

MAX_ROTATION_SPEED = 1.0
FRAGMENT_JITTER = 10.0
FRAGMENT_SPREAD = math.pi / 4.0

# Cumulative thresholds on one uniform draw; the last row catches the rest.
MEDIUM_FRAGMENT_TABLE: Tuple[Tuple[float, Tuple[ObstacleTier, ...]], ...] = (
    (0.70, (ObstacleTier.SMALL, ObstacleTier.SMALL)),
    (1.00, (ObstacleTier.SMALL,)),
)
LARGE_FRAGMENT_TABLE: Tuple[Tuple[float, Tuple[ObstacleTier, ...]], ...] = (
    (0.25, (ObstacleTier.MEDIUM, ObstacleTier.MEDIUM)),
    (0.45, (ObstacleTier.SMALL, ObstacleTier.SMALL)),
    (0.75, (ObstacleTier.MEDIUM, ObstacleTier.SMALL)),
    (0.90, (ObstacleTier.MEDIUM,)),
    (1.00, (ObstacleTier.SMALL,)),
)
FRAGMENT_TABLES = {
    ObstacleTier.LARGE: LARGE_FRAGMENT_TABLE,
    ObstacleTier.MEDIUM: MEDIUM_FRAGMENT_TABLE,
}

def fragment_tiers(tier: ObstacleTier, roll: float) -> Tuple[ObstacleTier, ...]:
    """Map a uniform draw in [0, 1) to the fragment tiers for ``tier``."""

    table = FRAGMENT_TABLES.get(tier)
    if table is None:
        return ()
    for threshold, tiers in table:
        if roll < threshold:
            return tiers
    return table[-1][1]


@dataclass(eq=False)
class ObstacleActor:
    """Single drifting obstacle.

    ``speed_multiplier`` is the level multiplier in force when the obstacle
    (or its ancestor) was spawned; fragments carry it along with the
    difficulty profile so they stay as fast as the level that produced them.
    """

    position: Vector2
    velocity: Vector2
    tier: ObstacleTier
    kind: str
    difficulty: DifficultyProfile
    speed_multiplier: float = 1.0
    rotation: float = 0.0
    rotation_speed: float = 0.0
    id: int = 0

    @property
    def collision_radius(self) -> float:
        return self.tier.radius

    @property
    def score_value(self) -> int:
        return self.tier.score

    @property
    def speed(self) -> float:
        return self.velocity.length()

    @property
    def heading(self) -> float:
        return heading_of(self.velocity, default=0.0)

    @property
    def is_terminal(self) -> bool:
        return self.tier is ObstacleTier.SMALL

    def update(self, dt: float, arena: Arena) -> None:
        self.position += self.velocity * dt
        self.rotation = (self.rotation + self.rotation_speed * dt) % (2.0 * math.pi)
        arena.wrap(self.position, self.collision_radius)

    def fragment(self, rng: random.Random, ids: Optional[Iterator[int]] = None) -> List["ObstacleActor"]:
        """Split into smaller obstacles; the caller removes ``self``.

        Fragment ids are drawn from ``ids``, the owning director's counter.
        """

        if self.is_terminal:
            return []
        tiers = fragment_tiers(self.tier, rng.random())
        base_heading = self.heading if self.velocity.length_squared() > 1e-12 else None
        fragments: List[ObstacleActor] = []
        for tier in tiers:
            offset = Vector2(
                rng.uniform(-FRAGMENT_JITTER, FRAGMENT_JITTER),
                rng.uniform(-FRAGMENT_JITTER, FRAGMENT_JITTER),
            )
            if base_heading is None:
                heading = rng.uniform(0.0, 2.0 * math.pi)
            else:
                heading = base_heading + rng.uniform(-FRAGMENT_SPREAD, FRAGMENT_SPREAD)
            speed = self.difficulty.speed_range(tier.value).sample(rng) * self.speed_multiplier
            fragments.append(
                ObstacleActor(
                    position=self.position + offset,
                    velocity=from_heading(heading, speed),
                    tier=tier,
                    kind=self.kind,
                    difficulty=self.difficulty,
                    speed_multiplier=self.speed_multiplier,
                    rotation=rng.uniform(0.0, 2.0 * math.pi),
                    rotation_speed=rng.uniform(-MAX_ROTATION_SPEED, MAX_ROTATION_SPEED),
                    id=next(ids) if ids is not None else 0,
                )
            )
        return fragments


def spawn_obstacle(
    position: Vector2,
    tier: ObstacleTier,
    difficulty: DifficultyProfile,
    rng: random.Random,
    *,
    speed_multiplier: float = 1.0,
    kind: Optional[str] = None,
    obstacle_id: int = 0,
) -> ObstacleActor:
    """Create an obstacle with a random heading at the tier's difficulty speed."""

    heading = rng.uniform(0.0, 2.0 * math.pi)
    speed = difficulty.speed_range(tier.value).sample(rng) * speed_multiplier
    return ObstacleActor(
        position=Vector2(position),
        velocity=from_heading(heading, speed),
        tier=tier,
        kind=kind or rng.choice(OBSTACLE_TYPES),
        difficulty=difficulty,
        speed_multiplier=speed_multiplier,
        rotation=rng.uniform(0.0, 2.0 * math.pi),
        rotation_speed=rng.uniform(-MAX_ROTATION_SPEED, MAX_ROTATION_SPEED),
        id=obstacle_id,
    )


__all__ = [
    "FRAGMENT_JITTER",
    "FRAGMENT_SPREAD",
    "LARGE_FRAGMENT_TABLE",
    "MEDIUM_FRAGMENT_TABLE",
    "OBSTACLE_TYPES",
    "ObstacleActor",
    "ObstacleTier",
    "TIER_RADII",
    "TIER_SCORES",
    "fragment_tiers",
    "spawn_obstacle",
]
