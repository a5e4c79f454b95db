"""Session state and the per-tick simulation step."""
from __future__ import annotations

import math
import random
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional

from pygame.math import Vector2

from dinostroids.assets.content import DifficultyProfile
from dinostroids.engine.clock import MAX_TICK_DELTA, Arena, SimulationClock
from dinostroids.engine.input import InputState
from dinostroids.engine.logger import ChannelLogger, GameLogger
from dinostroids.world.collisions import detect_collisions, resolve_collisions
from dinostroids.world.events import (
    GameEvent,
    GameOver,
    HyperspaceJump,
    LevelStarted,
    PlayerRespawned,
    ProjectileFired,
    SessionSummary,
)
from dinostroids.world.level import LevelDirector
from dinostroids.world.obstacles import ObstacleActor
from dinostroids.world.player import PlayerActor, PlayerState
from dinostroids.world.projectiles import ProjectileActor
from dinostroids.world.score import ScoreLedger


class SessionCorrupted(RuntimeError):
    """An actor invariant no longer holds; the session cannot continue."""


@dataclass
class SessionState:
    """Everything one game session owns, passed explicitly into :func:`tick`."""

    difficulty: DifficultyProfile
    clock: SimulationClock
    arena: Arena
    player: Optional[PlayerActor]
    director: LevelDirector
    ledger: ScoreLedger
    rng: random.Random
    logger: Optional[GameLogger] = None
    events: List[GameEvent] = field(default_factory=list)
    ended: bool = False
    paused: bool = False
    summary: Optional[SessionSummary] = None

    def channel(self, name: str) -> Optional[ChannelLogger]:
        if self.logger is None:
            return None
        return self.logger.channel(name)

    @property
    def obstacles(self) -> List[ObstacleActor]:
        return self.director.obstacles

    @property
    def projectiles(self) -> List[ProjectileActor]:
        return self.director.projectiles

    @property
    def score(self) -> int:
        return self.ledger.score

    @property
    def lives(self) -> int:
        return self.ledger.lives

    @property
    def level(self) -> int:
        return self.director.level

    @property
    def elapsed_ms(self) -> int:
        return int(round(self.clock.now * 1000.0))


def start_session(
    difficulty: DifficultyProfile,
    arena: Arena,
    *,
    rng: Optional[random.Random] = None,
    logger: Optional[GameLogger] = None,
    wall_clock: Callable[[], float] = time.monotonic,
    max_dt: float = MAX_TICK_DELTA,
) -> SessionState:
    rng = rng or random.Random()
    channel = logger.channel if logger else (lambda name: None)
    player = PlayerActor.spawn(arena, difficulty, wall_clock=wall_clock, logger=channel("physics"))
    director = LevelDirector(
        difficulty,
        arena,
        rng,
        logger=channel("level"),
        physics_logger=channel("physics"),
    )
    ledger = ScoreLedger(difficulty.starting_lives, logger=channel("score"))
    state = SessionState(
        difficulty=difficulty,
        clock=SimulationClock(max_dt=max_dt),
        arena=arena,
        player=player,
        director=director,
        ledger=ledger,
        rng=rng,
        logger=logger,
    )
    spawned = director.start(player.position, player.collision_radius)
    state.events.append(
        LevelStarted(level=director.level, speed_multiplier=director.speed_multiplier, obstacles=len(spawned))
    )
    session_log = state.channel("session")
    if session_log:
        session_log.info(
            "Session started: %s, %d lives, arena %dx%d",
            difficulty.name,
            ledger.lives,
            arena.width,
            arena.height,
        )
    return state


def drain_events(state: SessionState) -> List[GameEvent]:
    events = state.events
    state.events = []
    return events


def tick(state: SessionState, raw_dt: float, controls: InputState) -> List[GameEvent]:
    """Advance the session by one frame and return the events it produced.

    Phases run in a fixed order: ship input and physics, obstacle and
    projectile motion, collision detection and resolution, then level
    bookkeeping. Nothing outside this function mutates session actors.
    """

    if state.ended or state.paused:
        return drain_events(state)
    player = state.player
    if player is None:
        raise SessionCorrupted("Active session has no player")

    dt = state.clock.advance(raw_dt)
    now = state.clock.now
    director = state.director

    intents = player.update(dt, now, controls, state.arena)
    if intents.respawned:
        state.events.append(PlayerRespawned(position=Vector2(player.position)))
    if intents.fire is not None:
        director.add_projectile(ProjectileActor.from_spawn(intents.fire))
        state.events.append(ProjectileFired(position=Vector2(intents.fire.position), heading=intents.fire.heading))
    if intents.hyperspace:
        origin = Vector2(player.position)
        destination = director.hyperspace_destination(player.collision_radius)
        if player.hyperspace(destination, now):
            state.events.append(HyperspaceJump(origin=origin, destination=Vector2(destination)))

    director.update(dt)
    director.prune()

    collisions = detect_collisions(player, director.obstacles, director.projectiles)
    if collisions:
        resolve_collisions(state, collisions)
        director.prune()

    if player.state is PlayerState.DESTROYED:
        end_session(state, reason="destroyed")
        return drain_events(state)

    if director.is_cleared():
        spawned = director.advance_level(player.position, player.collision_radius)
        state.events.append(
            LevelStarted(level=director.level, speed_multiplier=director.speed_multiplier, obstacles=len(spawned))
        )

    validate_session(state)
    return drain_events(state)


def set_paused(state: SessionState, paused: bool) -> None:
    """Freeze or resume the session; paused ticks advance nothing."""

    if state.paused == paused:
        return
    state.paused = paused
    if state.player is not None:
        state.player.suspend_watchdog(paused)
    session_log = state.channel("session")
    if session_log:
        session_log.debug("Session %s at %.3fs", "paused" if paused else "resumed", state.clock.now)


def end_session(state: SessionState, reason: str = "quit") -> SessionSummary:
    """Stop the session and discard every actor collection.

    Later ticks return immediately, so nothing observes the torn-down state.
    """

    if state.ended and state.summary is not None:
        return state.summary
    summary = SessionSummary(
        score=state.ledger.score,
        level=state.director.level,
        time_ms=state.elapsed_ms,
        difficulty=state.difficulty.name,
    )
    state.ended = True
    state.summary = summary
    state.player = None
    state.director.clear()
    state.ledger.reset(state.difficulty.starting_lives)
    state.events.append(GameOver(summary=summary, reason=reason))
    session_log = state.channel("session")
    if session_log:
        session_log.info(
            "Session ended (%s): score=%d level=%d time=%dms",
            reason,
            summary.score,
            summary.level,
            summary.time_ms,
        )
    return summary


def _finite(position: Vector2) -> bool:
    return math.isfinite(position.x) and math.isfinite(position.y)


def _check_positions(label: str, actors: Iterable) -> None:
    for actor in actors:
        if not _finite(actor.position) or not _finite(actor.velocity):
            raise SessionCorrupted(f"{label} has a non-finite position or velocity: {actor.position}")


def validate_session(state: SessionState) -> None:
    """Raise :class:`SessionCorrupted` when a session invariant is broken."""

    if state.ended:
        return
    if state.ledger.lives < 0:
        raise SessionCorrupted(f"Negative lives: {state.ledger.lives}")
    if state.ledger.score < 0:
        raise SessionCorrupted(f"Negative score: {state.ledger.score}")
    if state.director.level < 1:
        raise SessionCorrupted(f"Invalid level: {state.director.level}")
    if not state.director.speed_multiplier >= 1.0:
        raise SessionCorrupted(f"Invalid speed multiplier: {state.director.speed_multiplier}")
    if state.player is not None:
        _check_positions("Player", [state.player])
        if state.player.velocity.length() > state.player.max_speed + 1e-6:
            raise SessionCorrupted(f"Player speed above cap: {state.player.velocity.length():.2f}")
    _check_positions("Obstacle", state.director.obstacles)
    _check_positions("Projectile", state.director.projectiles)


def resize_arena(state: SessionState, width: float, height: float) -> None:
    state.arena.resize(width, height)
    if state.player is not None:
        state.arena.clamp(state.player.position, state.player.collision_radius)


__all__ = [
    "SessionCorrupted",
    "SessionState",
    "drain_events",
    "end_session",
    "resize_arena",
    "set_paused",
    "start_session",
    "tick",
    "validate_session",
]
