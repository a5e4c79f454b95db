"""Simulation time and toroidal arena geometry."""
from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import TYPE_CHECKING

from pygame.math import Vector2

if TYPE_CHECKING:  # pragma: no cover - only used for typing
    from dinostroids.assets.content import DifficultyProfile


MAX_TICK_DELTA = 0.1


@dataclass
class SimulationClock:
    """Accumulates a capped per-tick delta into a simulation timestamp.

    Every timer in the simulation is a deadline compared against ``now``.
    A stalled host (backgrounded window, debugger pause) therefore costs at
    most ``max_dt`` of simulated time per tick instead of a large jump.
    """

    max_dt: float = MAX_TICK_DELTA
    now: float = 0.0
    ticks: int = 0
    last_dt: float = 0.0

    def advance(self, raw_dt: float) -> float:
        if not math.isfinite(raw_dt) or raw_dt <= 0.0:
            dt = 0.0
        else:
            dt = min(raw_dt, self.max_dt)
        self.now += dt
        self.ticks += 1
        self.last_dt = dt
        return dt

    def reset(self) -> None:
        self.now = 0.0
        self.ticks = 0
        self.last_dt = 0.0


class Arena:
    """Wrap-around playfield whose size can change mid-session."""

    def __init__(self, width: float, height: float) -> None:
        self.width = float(width)
        self.height = float(height)
        self._validate()

    @classmethod
    def for_profile(cls, display_width: float, display_height: float, profile: "DifficultyProfile") -> "Arena":
        """Size the arena to the difficulty's share of the display."""

        percent = max(1.0, min(100.0, profile.field_size_percent)) / 100.0
        return cls(math.floor(display_width * percent), math.floor(display_height * percent))

    def _validate(self) -> None:
        if self.width <= 0.0 or self.height <= 0.0:
            raise ValueError(f"Arena size must be positive, got {self.width}x{self.height}")

    def resize(self, width: float, height: float) -> None:
        self.width = float(width)
        self.height = float(height)
        self._validate()

    @property
    def center(self) -> Vector2:
        return Vector2(self.width / 2.0, self.height / 2.0)

    def wrap(self, position: Vector2, radius: float = 0.0) -> None:
        """Re-enter from the opposite edge once fully past one edge."""

        if position.x < -radius:
            position.x = self.width + radius
        elif position.x > self.width + radius:
            position.x = -radius
        if position.y < -radius:
            position.y = self.height + radius
        elif position.y > self.height + radius:
            position.y = -radius

    def contains(self, position: Vector2, margin: float = 0.0) -> bool:
        return (
            margin <= position.x <= self.width - margin
            and margin <= position.y <= self.height - margin
        )

    def clamp(self, position: Vector2, margin: float = 0.0) -> None:
        margin_x = min(margin, self.width / 2.0)
        margin_y = min(margin, self.height / 2.0)
        position.x = max(margin_x, min(self.width - margin_x, position.x))
        position.y = max(margin_y, min(self.height - margin_y, position.y))

    def random_point(self, rng: random.Random, margin: float = 0.0) -> Vector2:
        margin_x = min(margin, self.width / 2.0)
        margin_y = min(margin, self.height / 2.0)
        return Vector2(
            rng.uniform(margin_x, self.width - margin_x),
            rng.uniform(margin_y, self.height - margin_y),
        )


def heading_of(vector: Vector2, default: float = -math.pi / 2.0) -> float:
    """Return the angle of ``vector`` or ``default`` for a zero vector."""

    if vector.length_squared() <= 1e-12:
        return default
    return math.atan2(vector.y, vector.x)


def from_heading(heading: float, magnitude: float = 1.0) -> Vector2:
    return Vector2(math.cos(heading) * magnitude, math.sin(heading) * magnitude)


__all__ = ["MAX_TICK_DELTA", "SimulationClock", "Arena", "heading_of", "from_heading"]
