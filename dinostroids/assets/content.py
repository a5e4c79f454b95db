"""Difficulty configuration table."""
from __future__ import annotations

import json
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Iterable, Optional

TIER_KEYS = ("large", "medium", "small")


@dataclass(frozen=True)
class SpeedRange:
    minimum: float
    maximum: float

    @classmethod
    def from_dict(cls, data: Dict) -> "SpeedRange":
        minimum = float(data.get("min", 0.0))
        maximum = float(data.get("max", minimum))
        if maximum < minimum:
            minimum, maximum = maximum, minimum
        return cls(minimum, maximum)

    def sample(self, rng) -> float:
        return rng.uniform(self.minimum, self.maximum)


@dataclass(frozen=True)
class DifficultyProfile:
    """Named tuning profile consumed by the simulation as an opaque lookup."""

    name: str
    initial_obstacles: int
    speed_ranges: Dict[str, SpeedRange]
    player_acceleration: float
    fire_cooldown: float
    starting_lives: int
    field_size_percent: float = 100.0

    def speed_range(self, tier_key: str) -> SpeedRange:
        return self.speed_ranges[tier_key]

    @classmethod
    def from_dict(cls, data: Dict, base: Optional["DifficultyProfile"] = None) -> "DifficultyProfile":
        name = str(data.get("name") or (base.name if base else ""))
        if not name:
            raise ValueError("Difficulty profile requires a name")
        speeds = dict(base.speed_ranges) if base else {}
        for key, value in data.get("asteroidSpeed", {}).items():
            if key in TIER_KEYS:
                speeds[key] = SpeedRange.from_dict(value)
        missing = [key for key in TIER_KEYS if key not in speeds]
        if missing:
            raise ValueError(f"Difficulty '{name}' is missing speed ranges for {', '.join(missing)}")
        defaults = base or _EMPTY_PROFILE
        return cls(
            name=name,
            initial_obstacles=int(data.get("initialAsteroids", defaults.initial_obstacles)),
            speed_ranges=speeds,
            player_acceleration=float(data.get("playerAcceleration", defaults.player_acceleration)),
            fire_cooldown=float(data.get("shootCooldown", defaults.fire_cooldown)),
            starting_lives=int(data.get("lives", defaults.starting_lives)),
            field_size_percent=float(data.get("fieldSizePercent", defaults.field_size_percent)),
        )


_EMPTY_PROFILE = DifficultyProfile(
    name="",
    initial_obstacles=3,
    speed_ranges={},
    player_acceleration=200.0,
    fire_cooldown=0.12,
    starting_lives=3,
)


def _ranges(large: tuple, medium: tuple, small: tuple) -> Dict[str, SpeedRange]:
    return {
        "large": SpeedRange(*large),
        "medium": SpeedRange(*medium),
        "small": SpeedRange(*small),
    }


DEFAULT_DIFFICULTIES: Dict[str, DifficultyProfile] = {
    "easy": DifficultyProfile(
        name="easy",
        initial_obstacles=2,
        speed_ranges=_ranges((30.0, 60.0), (48.0, 90.0), (72.0, 120.0)),
        player_acceleration=200.0,
        fire_cooldown=0.120,
        starting_lives=5,
        field_size_percent=100.0,
    ),
    "medium": DifficultyProfile(
        name="medium",
        initial_obstacles=3,
        speed_ranges=_ranges((48.0, 90.0), (72.0, 120.0), (108.0, 150.0)),
        player_acceleration=300.0,
        fire_cooldown=0.084,
        starting_lives=3,
        field_size_percent=67.0,
    ),
    "difficult": DifficultyProfile(
        name="difficult",
        initial_obstacles=4,
        speed_ranges=_ranges((72.0, 120.0), (108.0, 150.0), (150.0, 210.0)),
        player_acceleration=400.0,
        fire_cooldown=0.060,
        starting_lives=2,
        field_size_percent=50.0,
    ),
}

DEFAULT_DIFFICULTY = "medium"


class DifficultyDatabase:
    """Difficulty profiles keyed by name, seeded with the built-in table."""

    def __init__(self, profiles: Optional[Dict[str, DifficultyProfile]] = None) -> None:
        self.profiles: Dict[str, DifficultyProfile] = dict(
            DEFAULT_DIFFICULTIES if profiles is None else profiles
        )

    def load_entries(self, entries: Iterable[Dict]) -> None:
        for entry in entries:
            if not isinstance(entry, dict):
                continue
            base = self.profiles.get(str(entry.get("name", "")))
            profile = DifficultyProfile.from_dict(entry, base)
            self.profiles[profile.name] = profile

    def load_directory(self, directory: Path) -> None:
        if not directory.exists():
            return
        for path in sorted(directory.glob("*.json")):
            try:
                data = json.loads(path.read_text())
            except json.JSONDecodeError:
                continue
            if isinstance(data, dict):
                data = [data]
            self.load_entries(data)

    def get(self, name: str) -> DifficultyProfile:
        return self.profiles[name]

    def names(self) -> list[str]:
        return list(self.profiles)

    def with_overrides(self, name: str, **changes) -> DifficultyProfile:
        """Return a copy of a profile with attribute overrides applied."""

        return replace(self.profiles[name], **changes)


__all__ = [
    "DEFAULT_DIFFICULTIES",
    "DEFAULT_DIFFICULTY",
    "DifficultyDatabase",
    "DifficultyProfile",
    "SpeedRange",
    "TIER_KEYS",
]
