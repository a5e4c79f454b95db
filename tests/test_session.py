from __future__ import annotations

import logging
import random
import sys
from pathlib import Path

import pytest
from pygame.math import Vector2

sys.path.append(str(Path(__file__).resolve().parents[1]))

from dinostroids.assets.content import DEFAULT_DIFFICULTIES, DifficultyDatabase, DifficultyProfile
from dinostroids.engine.clock import Arena
from dinostroids.engine.input import Action, NullInput
from dinostroids.engine.logger import DEFAULT_CHANNELS, GameLogger, LoggerConfig
from dinostroids.world.events import (
    GameOver,
    HyperspaceJump,
    LevelStarted,
    PlayerHit,
    PlayerRespawned,
    ProjectileFired,
)
from dinostroids.world.obstacles import ObstacleActor, ObstacleTier
from dinostroids.world.player import PlayerState
from dinostroids.world.session import (
    SessionCorrupted,
    SessionState,
    end_session,
    resize_arena,
    set_paused,
    start_session,
    tick,
    validate_session,
)


class HeldInput:
    def __init__(self, *actions: Action) -> None:
        self.actions = set(actions)

    def is_action_engaged(self, action: Action) -> bool:
        return action in self.actions


def _quiet_logger() -> GameLogger:
    channels = {name: False for name in DEFAULT_CHANNELS}
    return GameLogger(LoggerConfig(level=logging.CRITICAL, channels=channels))


def _session(profile: DifficultyProfile = None, seed: int = 17) -> SessionState:
    return start_session(
        profile or DEFAULT_DIFFICULTIES["medium"],
        Arena(800, 600),
        rng=random.Random(seed),
        logger=_quiet_logger(),
        wall_clock=lambda: 0.0,
    )


def _resting(x: float, y: float, tier: ObstacleTier, profile: DifficultyProfile) -> ObstacleActor:
    return ObstacleActor(position=Vector2(x, y), velocity=Vector2(), tier=tier, kind="bront", difficulty=profile)


def test_start_session_spawns_first_wave() -> None:
    state = _session()

    assert state.level == 1
    assert state.lives == 3
    assert state.score == 0
    assert len(state.obstacles) == 3
    assert state.player.position == Vector2(400, 300)
    assert state.player.state is PlayerState.ALIVE

    events = tick(state, 0.016, NullInput())
    assert [event for event in events if isinstance(event, LevelStarted)] == [
        LevelStarted(level=1, speed_multiplier=1.0, obstacles=3)
    ]
    assert tick(state, 0.016, NullInput()) == []


def test_tick_clamps_delta_and_fires_projectiles() -> None:
    state = _session()
    tick(state, 0.016, NullInput())

    events = tick(state, 5.0, HeldInput(Action.FIRE))

    assert state.clock.now == pytest.approx(0.116)
    fired = [event for event in events if isinstance(event, ProjectileFired)]
    assert len(fired) == 1
    assert len(state.projectiles) == 1
    assert tick(state, 0.01, HeldInput(Action.FIRE)) == []
    assert len(state.projectiles) == 1


def test_tick_performs_hyperspace_to_safe_spot() -> None:
    state = _session()
    state.director.obstacles[:] = [_resting(100.0, 100.0, ObstacleTier.LARGE, state.difficulty)]

    events = tick(state, 0.016, HeldInput(Action.HYPERSPACE))

    jumps = [event for event in events if isinstance(event, HyperspaceJump)]
    assert len(jumps) == 1
    assert jumps[0].destination == state.player.position
    assert state.player.state is PlayerState.INVINCIBLE
    assert state.player.position.distance_to(Vector2(100.0, 100.0)) > 60.0


def test_clearing_obstacles_starts_next_level() -> None:
    state = _session()
    tick(state, 0.016, NullInput())
    state.director.obstacles.clear()

    events = tick(state, 0.016, NullInput())

    started = [event for event in events if isinstance(event, LevelStarted)]
    assert len(started) == 1
    assert started[0].level == 2
    assert started[0].speed_multiplier == pytest.approx(1.05)
    assert len(state.obstacles) == 4


def test_last_life_lost_ends_session() -> None:
    profile = DifficultyDatabase().with_overrides("medium", starting_lives=1)
    state = _session(profile)
    state.director.obstacles[:] = [
        _resting(400.0, 300.0, ObstacleTier.SMALL, profile),
        _resting(60.0, 60.0, ObstacleTier.LARGE, profile),
    ]

    events = tick(state, 0.1, NullInput())

    hits = [event for event in events if isinstance(event, PlayerHit)]
    overs = [event for event in events if isinstance(event, GameOver)]
    assert hits[0].lives_remaining == 0
    assert len(overs) == 1
    assert overs[0].reason == "destroyed"
    summary = overs[0].summary
    assert (summary.score, summary.level, summary.time_ms, summary.difficulty) == (100, 1, 100, "medium")
    assert state.ended
    assert state.player is None
    assert state.obstacles == []
    assert state.projectiles == []

    assert tick(state, 0.1, NullInput()) == []
    assert state.clock.now == pytest.approx(0.1)


def test_hit_with_spare_life_respawns_then_recovers() -> None:
    profile = DifficultyDatabase().with_overrides("medium", starting_lives=2)
    state = _session(profile)
    state.director.obstacles[:] = [_resting(400.0, 300.0, ObstacleTier.SMALL, profile)]

    tick(state, 0.1, NullInput())
    assert state.player.state is PlayerState.EXPLODING
    assert state.lives == 1
    state.director.obstacles[:] = [_resting(60.0, 60.0, ObstacleTier.LARGE, profile)]

    seen = []
    states = []
    for _ in range(60):
        seen.extend(type(event) for event in tick(state, 0.1, NullInput()))
        states.append(state.player.state)

    assert PlayerRespawned in seen
    assert GameOver not in seen
    assert PlayerState.INVINCIBLE in states
    assert states[-1] is PlayerState.ALIVE
    assert state.lives == 1
    assert not state.ended


def test_end_session_is_idempotent_and_reports_quit() -> None:
    state = _session()
    tick(state, 0.05, NullInput())

    summary = end_session(state, reason="quit")
    again = end_session(state, reason="other")

    assert again is summary
    assert summary.time_ms == 50
    assert state.ended
    overs = [event for event in state.events if isinstance(event, GameOver)]
    assert len(overs) == 1
    assert overs[0].reason == "quit"


@pytest.mark.parametrize("breakage", ["lives", "score", "level", "multiplier", "position"])
def test_validate_session_detects_corruption(breakage: str) -> None:
    state = _session()
    validate_session(state)
    if breakage == "lives":
        state.ledger.state.lives = -1
    elif breakage == "score":
        state.ledger.state.score = -5
    elif breakage == "level":
        state.director.state.level = 0
    elif breakage == "multiplier":
        state.director.state.speed_multiplier = 0.5
    else:
        state.obstacles[0].position = Vector2(float("nan"), 0.0)
    with pytest.raises(SessionCorrupted):
        validate_session(state)


def test_tick_raises_on_non_finite_actor() -> None:
    state = _session()
    state.obstacles[0].velocity = Vector2(float("inf"), 0.0)
    with pytest.raises(SessionCorrupted):
        tick(state, 0.016, NullInput())


def test_resize_keeps_player_inside() -> None:
    state = _session()
    state.player.position = Vector2(700.0, 500.0)

    resize_arena(state, 300, 200)

    assert state.arena.width == 300
    assert state.player.position == Vector2(285.0, 185.0)


def test_pause_freezes_clock_and_keeps_shield() -> None:
    wall = [0.0]
    state = start_session(
        DEFAULT_DIFFICULTIES["medium"],
        Arena(800, 600),
        rng=random.Random(17),
        logger=_quiet_logger(),
        wall_clock=lambda: wall[0],
    )
    state.director.obstacles[:] = [_resting(60.0, 60.0, ObstacleTier.LARGE, state.difficulty)]
    tick(state, 0.016, NullInput())
    state.player.arm_invincibility(state.clock.now)

    set_paused(state, True)
    wall[0] = 6.0
    assert tick(state, 0.016, NullInput()) == []
    assert state.clock.now == pytest.approx(0.016)

    set_paused(state, False)
    tick(state, 0.016, NullInput())

    assert state.player.state is PlayerState.INVINCIBLE
    assert state.clock.now == pytest.approx(0.032)
