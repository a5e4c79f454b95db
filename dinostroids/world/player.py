"""Player ship physics and lifecycle state machine."""
from __future__ import annotations

import math
import random
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Tuple

from pygame.math import Vector2

from dinostroids.assets.content import DifficultyProfile
from dinostroids.engine.clock import Arena, from_heading
from dinostroids.engine.input import Action, InputState
from dinostroids.engine.logger import ChannelLogger
from dinostroids.world.projectiles import ProjectileSpawn


PLAYER_RADIUS = 15.0
ROTATION_RATE = 4.0
MAX_SPEED = 300.0
FRICTION = 0.98
FRICTION_RESPONSE = 5.0
RESPAWN_HEADING = -math.pi / 2.0

EXPLOSION_DURATION = 2.0
EXPLOSION_PARTICLES = 40
DEBRIS_SPEED_RANGE = (20.0, 100.0)
DEBRIS_CHANCE = 0.3
DEBRIS_COLORS: Tuple[Tuple[int, int, int], ...] = (
    (255, 255, 255),
    (255, 255, 0),
    (255, 165, 0),
    (255, 69, 0),
    (255, 0, 0),
)

INVINCIBILITY_TIME = 3.0
INVINCIBILITY_WATCHDOG_GRACE = 2.0
HYPERSPACE_COOLDOWN = 5.0


class PlayerState(Enum):
    ALIVE = "alive"
    EXPLODING = "exploding"
    INVINCIBLE = "invincible"
    DESTROYED = "destroyed"


@dataclass
class DebrisParticle:
    """Decorative explosion fragment; never collides."""

    position: Vector2
    velocity: Vector2
    size: float
    color: Tuple[int, int, int]
    is_debris: bool
    rotation: float
    rotation_speed: float
    alpha: float = 1.0


@dataclass
class PlayerIntents:
    """Requests produced by one ship update for the session to carry out."""

    fire: Optional[ProjectileSpawn] = None
    hyperspace: bool = False
    respawned: bool = False


def friction_factor(dt: float) -> float:
    return 1.0 - (1.0 - FRICTION) * min(1.0, dt * FRICTION_RESPONSE)


class PlayerActor:
    """The single ship of a session.

    Timers are deadlines against the simulation timestamp passed to
    :meth:`update`; nothing here schedules callbacks. ``wall_clock`` feeds
    only the invincibility watchdog, which force-clears the shield if the
    simulation clock stalls while the window is open.
    """

    def __init__(
        self,
        position: Vector2,
        *,
        acceleration: float,
        fire_cooldown: float,
        radius: float = PLAYER_RADIUS,
        max_speed: float = MAX_SPEED,
        rotation_rate: float = ROTATION_RATE,
        hyperspace_cooldown: float = HYPERSPACE_COOLDOWN,
        invincibility_time: float = INVINCIBILITY_TIME,
        wall_clock: Callable[[], float] = time.monotonic,
        logger: Optional[ChannelLogger] = None,
    ) -> None:
        self.position = Vector2(position)
        self.velocity = Vector2()
        self.heading = RESPAWN_HEADING
        self._radius = radius
        self.acceleration = acceleration
        self.fire_cooldown = fire_cooldown
        self.max_speed = max_speed
        self.rotation_rate = rotation_rate
        self.hyperspace_cooldown = hyperspace_cooldown
        self.invincibility_time = invincibility_time
        self.state = PlayerState.ALIVE
        self.thrusting = False
        self.now = 0.0
        self.next_fire_time = 0.0
        self.hyperspace_ready_at = 0.0
        self.invincible_until: Optional[float] = None
        self.explosion_started_at: Optional[float] = None
        self.explosion_ends_at: Optional[float] = None
        self.debris: List[DebrisParticle] = []
        self._wall_clock = wall_clock
        self._invincible_wall_start: Optional[float] = None
        self._invincible_window = 0.0
        self._watchdog_paused_at: Optional[float] = None
        self._logger = logger

    @classmethod
    def spawn(
        cls,
        arena: Arena,
        profile: DifficultyProfile,
        *,
        wall_clock: Callable[[], float] = time.monotonic,
        logger: Optional[ChannelLogger] = None,
    ) -> "PlayerActor":
        return cls(
            arena.center,
            acceleration=profile.player_acceleration,
            fire_cooldown=profile.fire_cooldown,
            wall_clock=wall_clock,
            logger=logger,
        )

    @property
    def collision_radius(self) -> float:
        return self._radius

    @property
    def nose(self) -> Vector2:
        return self.position + from_heading(self.heading, self._radius)

    @property
    def is_vulnerable(self) -> bool:
        return self.state is PlayerState.ALIVE

    @property
    def is_invincible(self) -> bool:
        return self.state is PlayerState.INVINCIBLE

    @property
    def is_collidable(self) -> bool:
        return self.state in (PlayerState.ALIVE, PlayerState.INVINCIBLE)

    @property
    def can_act(self) -> bool:
        return self.is_collidable

    @property
    def invincibility_remaining(self) -> float:
        if self.invincible_until is None:
            return 0.0
        return max(0.0, self.invincible_until - self.now)

    def update(self, dt: float, now: float, controls: InputState, arena: Arena) -> PlayerIntents:
        self.now = now
        intents = PlayerIntents()
        self._update_debris(dt, arena)

        if self.state is PlayerState.EXPLODING:
            if self.explosion_ends_at is not None and now >= self.explosion_ends_at:
                self.respawn(arena, now)
                intents.respawned = True
            return intents
        if self.state is PlayerState.DESTROYED:
            self.thrusting = False
            return intents
        if self.state is PlayerState.INVINCIBLE:
            self._tick_invincibility(now)

        self._integrate(dt, controls, arena)

        if controls.is_action_engaged(Action.FIRE) and now >= self.next_fire_time:
            intents.fire = ProjectileSpawn(self.nose, self.heading)
            self.next_fire_time = now + self.fire_cooldown
        if controls.is_action_engaged(Action.HYPERSPACE) and now >= self.hyperspace_ready_at:
            intents.hyperspace = True
        return intents

    def _integrate(self, dt: float, controls: InputState, arena: Arena) -> None:
        if controls.is_action_engaged(Action.ROTATE_LEFT):
            self.heading -= self.rotation_rate * dt
        if controls.is_action_engaged(Action.ROTATE_RIGHT):
            self.heading += self.rotation_rate * dt
        self.heading %= 2.0 * math.pi

        self.thrusting = controls.is_action_engaged(Action.THRUST)
        if self.thrusting:
            self.velocity += from_heading(self.heading, self.acceleration * dt)

        self.velocity *= friction_factor(dt)
        speed = self.velocity.length()
        if speed > self.max_speed:
            self.velocity.scale_to_length(self.max_speed)

        self.position += self.velocity * dt
        arena.wrap(self.position, self._radius)

    def _tick_invincibility(self, now: float) -> None:
        if self.invincible_until is None or now >= self.invincible_until:
            self._clear_invincibility()
            return
        if self._invincible_wall_start is None or self._watchdog_paused_at is not None:
            return
        stalled_for = self._wall_clock() - self._invincible_wall_start
        if stalled_for > self._invincible_window + INVINCIBILITY_WATCHDOG_GRACE:
            if self._logger:
                self._logger.warning(
                    "Invincibility watchdog fired after %.2fs wall time (%.2fs simulated remaining)",
                    stalled_for,
                    self.invincibility_remaining,
                )
            self._clear_invincibility()

    def suspend_watchdog(self, paused: bool) -> None:
        """Hold the invincibility watchdog while the session is paused.

        On resume the armed wall-clock start moves forward by the paused
        wall time, so a pause never counts as a stalled clock.
        """

        if paused:
            if self._watchdog_paused_at is None:
                self._watchdog_paused_at = self._wall_clock()
            return
        if self._watchdog_paused_at is None:
            return
        if self._invincible_wall_start is not None:
            self._invincible_wall_start += self._wall_clock() - self._watchdog_paused_at
        self._watchdog_paused_at = None

    def _clear_invincibility(self) -> None:
        self.invincible_until = None
        self._invincible_wall_start = None
        self._invincible_window = 0.0
        if self.state is PlayerState.INVINCIBLE:
            self.state = PlayerState.ALIVE

    def arm_invincibility(self, now: float, duration: Optional[float] = None) -> None:
        window = self.invincibility_time if duration is None else duration
        self.state = PlayerState.INVINCIBLE
        self.now = now
        self.invincible_until = now + window
        self._invincible_window = window
        if self._watchdog_paused_at is not None:
            self._invincible_wall_start = self._watchdog_paused_at
        else:
            self._invincible_wall_start = self._wall_clock()

    def hyperspace(self, destination: Vector2, now: float) -> bool:
        """Teleport to ``destination`` and open an invincibility window."""

        if not self.can_act or now < self.hyperspace_ready_at:
            return False
        self.position = Vector2(destination)
        self.velocity *= 0.5
        self.hyperspace_ready_at = now + self.hyperspace_cooldown
        self.arm_invincibility(now)
        return True

    def damage(self, now: float, lives_remaining: int, rng: random.Random) -> bool:
        """Apply an obstacle hit; returns False when the hit has no effect."""

        if not self.is_vulnerable:
            return False
        self.now = now
        self._create_explosion(rng)
        self.thrusting = False
        self.explosion_started_at = now
        if lives_remaining > 0:
            self.state = PlayerState.EXPLODING
            self.explosion_ends_at = now + EXPLOSION_DURATION
        else:
            self.state = PlayerState.DESTROYED
            self.explosion_ends_at = None
        self.velocity = Vector2()
        return True

    def respawn(self, arena: Arena, now: float) -> None:
        self.position = arena.center
        self.velocity = Vector2()
        self.heading = RESPAWN_HEADING
        self.debris = []
        self.explosion_started_at = None
        self.explosion_ends_at = None
        self.arm_invincibility(now)

    def _create_explosion(self, rng: random.Random) -> None:
        self.debris = []
        for _ in range(EXPLOSION_PARTICLES):
            angle = rng.uniform(0.0, 2.0 * math.pi)
            speed = rng.uniform(*DEBRIS_SPEED_RANGE)
            self.debris.append(
                DebrisParticle(
                    position=Vector2(self.position),
                    velocity=from_heading(angle, speed),
                    size=rng.uniform(1.0, 4.0),
                    color=rng.choice(DEBRIS_COLORS),
                    is_debris=rng.random() < DEBRIS_CHANCE,
                    rotation=rng.uniform(0.0, 2.0 * math.pi),
                    rotation_speed=rng.uniform(-2.5, 2.5),
                )
            )

    def _update_debris(self, dt: float, arena: Arena) -> None:
        if not self.debris:
            return
        started = self.explosion_started_at if self.explosion_started_at is not None else self.now
        alpha = max(0.0, 1.0 - (self.now - started) / EXPLOSION_DURATION)
        if alpha <= 0.0:
            self.debris = []
            return
        for particle in self.debris:
            particle.position += particle.velocity * dt
            arena.wrap(particle.position)
            if particle.is_debris:
                particle.rotation += particle.rotation_speed * dt
            particle.alpha = alpha


__all__ = [
    "EXPLOSION_DURATION",
    "EXPLOSION_PARTICLES",
    "HYPERSPACE_COOLDOWN",
    "INVINCIBILITY_TIME",
    "INVINCIBILITY_WATCHDOG_GRACE",
    "MAX_SPEED",
    "PLAYER_RADIUS",
    "DebrisParticle",
    "PlayerActor",
    "PlayerIntents",
    "PlayerState",
    "friction_factor",
]
