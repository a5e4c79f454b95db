from __future__ import annotations

import math
import random
import sys
from pathlib import Path

import pytest
from pygame.math import Vector2

sys.path.append(str(Path(__file__).resolve().parents[1]))

from dinostroids.assets.content import DEFAULT_DIFFICULTIES
from dinostroids.engine.clock import Arena, SimulationClock, from_heading, heading_of


def test_clock_caps_large_deltas_and_ignores_bad_ones() -> None:
    clock = SimulationClock(max_dt=0.1)

    assert clock.advance(0.016) == pytest.approx(0.016)
    assert clock.advance(5.0) == pytest.approx(0.1)
    assert clock.advance(-1.0) == 0.0
    assert clock.advance(float("nan")) == 0.0
    assert clock.now == pytest.approx(0.116)
    assert clock.ticks == 4

    clock.reset()
    assert clock.now == 0.0
    assert clock.ticks == 0


def test_wrap_moves_actor_to_opposite_edge_past_radius() -> None:
    arena = Arena(800, 600)
    radius = 45.0

    left = Vector2(-radius - 1.0, 100.0)
    arena.wrap(left, radius)
    assert left.x == pytest.approx(800 + radius)

    right = Vector2(800 + radius + 1.0, 100.0)
    arena.wrap(right, radius)
    assert right.x == pytest.approx(-radius)

    top = Vector2(100.0, -radius - 0.5)
    arena.wrap(top, radius)
    assert top.y == pytest.approx(600 + radius)

    bottom = Vector2(100.0, 600 + radius + 0.5)
    arena.wrap(bottom, radius)
    assert bottom.y == pytest.approx(-radius)


def test_wrap_leaves_partially_visible_actor_alone() -> None:
    arena = Arena(800, 600)
    edge = Vector2(-45.0, 645.0)
    arena.wrap(edge, 45.0)
    assert edge == Vector2(-45.0, 645.0)


def test_wrap_keeps_positions_in_band_for_many_sizes() -> None:
    rng = random.Random(5)
    for _ in range(200):
        arena = Arena(rng.uniform(50, 2000), rng.uniform(50, 2000))
        radius = rng.uniform(0, 50)
        overshoot = rng.uniform(0.01, 1.0)
        position = Vector2(
            rng.choice((-radius - overshoot, arena.width + radius + overshoot)),
            rng.choice((-radius - overshoot, arena.height + radius + overshoot)),
        )
        arena.wrap(position, radius)
        assert -radius <= position.x <= arena.width + radius
        assert -radius <= position.y <= arena.height + radius


def test_arena_for_profile_uses_field_percentage() -> None:
    medium = DEFAULT_DIFFICULTIES["medium"]
    easy = DEFAULT_DIFFICULTIES["easy"]

    arena = Arena.for_profile(1000, 800, medium)
    assert (arena.width, arena.height) == (670, 536)

    full = Arena.for_profile(1000, 800, easy)
    assert (full.width, full.height) == (1000, 800)


def test_arena_rejects_empty_size() -> None:
    with pytest.raises(ValueError):
        Arena(0, 100)
    arena = Arena(10, 10)
    with pytest.raises(ValueError):
        arena.resize(100, -1)


def test_clamp_and_random_point_respect_margin() -> None:
    arena = Arena(300, 200)
    position = Vector2(700, -50)
    arena.clamp(position, 15.0)
    assert position == Vector2(285, 15)

    rng = random.Random(9)
    for _ in range(100):
        point = arena.random_point(rng, 45.0)
        assert arena.contains(point, 45.0)


def test_heading_helpers_guard_zero_vector() -> None:
    assert heading_of(Vector2()) == pytest.approx(-math.pi / 2)
    assert heading_of(Vector2(), default=0.0) == 0.0
    assert heading_of(Vector2(0, 10)) == pytest.approx(math.pi / 2)

    vector = from_heading(math.pi, 5.0)
    assert vector.x == pytest.approx(-5.0)
    assert vector.y == pytest.approx(0.0, abs=1e-9)
