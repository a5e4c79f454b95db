"""Circle-overlap detection between live actors and outcome resolution."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Protocol, Sequence, Set, TYPE_CHECKING

from pygame.math import Vector2

from dinostroids.world.events import BonusLife, ObstacleDestroyed, PlayerHit
from dinostroids.world.obstacles import ObstacleActor
from dinostroids.world.player import PlayerActor
from dinostroids.world.projectiles import ProjectileActor

if TYPE_CHECKING:  # pragma: no cover - only used for typing
    from dinostroids.world.session import SessionState


class Collidable(Protocol):
    position: Vector2

    @property
    def collision_radius(self) -> float:
        ...


def circles_overlap(a: Collidable, b: Collidable) -> bool:
    reach = a.collision_radius + b.collision_radius
    return a.position.distance_squared_to(b.position) < reach * reach


class CollisionKind(Enum):
    PROJECTILE_HIT = "projectile_hit"
    PLAYER_HIT = "player_hit"
    PLAYER_SHIELDED = "player_shielded"


@dataclass
class Collision:
    kind: CollisionKind
    obstacle: ObstacleActor
    projectile: Optional[ProjectileActor] = None


def detect_collisions(
    player: Optional[PlayerActor],
    obstacles: Sequence[ObstacleActor],
    projectiles: Sequence[ProjectileActor],
) -> List[Collision]:
    """Return the collisions for this tick without touching any actor.

    Each obstacle appears at most once. A projectile is spent on the first
    obstacle it overlaps and the ship takes at most one damaging hit, so
    applying the list in order never touches an actor twice.
    """

    collisions: List[Collision] = []
    spent: Set[int] = set()
    player_hit = False
    player_testable = player is not None and player.is_collidable
    for obstacle in obstacles:
        if player_testable and not player_hit and circles_overlap(player, obstacle):
            if player.is_vulnerable:
                collisions.append(Collision(CollisionKind.PLAYER_HIT, obstacle))
                player_hit = True
                continue
            collisions.append(Collision(CollisionKind.PLAYER_SHIELDED, obstacle))
        for projectile in projectiles:
            if not projectile.alive or id(projectile) in spent:
                continue
            if circles_overlap(projectile, obstacle):
                spent.add(id(projectile))
                collisions.append(Collision(CollisionKind.PROJECTILE_HIT, obstacle, projectile))
                break
    return collisions


def _destroy_obstacle(state: "SessionState", obstacle: ObstacleActor, *, by_player: bool) -> None:
    ledger = state.ledger
    score = ledger.add_score(obstacle.tier)
    fragments = obstacle.fragment(state.rng, state.director.ids)
    state.director.replace_obstacle(obstacle, fragments)
    state.events.append(
        ObstacleDestroyed(
            obstacle_id=obstacle.id,
            tier=obstacle.tier,
            kind=obstacle.kind,
            position=Vector2(obstacle.position),
            points=obstacle.score_value,
            fragments=len(fragments),
            by_player=by_player,
        )
    )
    if ledger.check_bonus_life(score):
        state.events.append(BonusLife(score=score, lives=ledger.lives))


def resolve_collisions(state: "SessionState", collisions: Sequence[Collision]) -> None:
    """Apply collision outcomes in order as one mutation phase."""

    logger = state.channel("combat")
    removed: Set[int] = set()
    for collision in collisions:
        obstacle = collision.obstacle
        if id(obstacle) in removed:
            continue
        if collision.kind is CollisionKind.PROJECTILE_HIT:
            projectile = collision.projectile
            if projectile is None or not projectile.alive:
                continue
            projectile.deactivate()
            _destroy_obstacle(state, obstacle, by_player=False)
            removed.add(id(obstacle))
            if logger:
                logger.debug("Projectile destroyed %s %s", obstacle.tier.value, obstacle.kind)
        elif collision.kind is CollisionKind.PLAYER_HIT:
            player = state.player
            if player is None or not player.is_vulnerable:
                continue
            _destroy_obstacle(state, obstacle, by_player=True)
            removed.add(id(obstacle))
            lives = state.ledger.lose_life()
            player.damage(state.clock.now, lives, state.rng)
            state.events.append(PlayerHit(position=Vector2(player.position), lives_remaining=lives))
            if logger:
                logger.info("Ship hit by %s %s, lives=%d", obstacle.tier.value, obstacle.kind, lives)


__all__ = [
    "Collidable",
    "Collision",
    "CollisionKind",
    "circles_overlap",
    "detect_collisions",
    "resolve_collisions",
]
