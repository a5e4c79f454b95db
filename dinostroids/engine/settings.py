"""settings.json loading."""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from dinostroids.assets.content import DEFAULT_DIFFICULTY, DifficultyDatabase
from dinostroids.engine.clock import MAX_TICK_DELTA

SETTINGS_PATH = Path("settings.json")
DEFAULT_API_BASE_URL = "http://localhost:3000/api"
DIFFICULTIES_DIR = Path("difficulties")


@dataclass
class GameSettings:
    resolution: Tuple[int, int] = (0, 0)
    fullscreen: bool = False
    max_fps: int = 60
    max_delta: float = MAX_TICK_DELTA
    api_base_url: str = DEFAULT_API_BASE_URL
    difficulty: str = DEFAULT_DIFFICULTY
    difficulties: List[Dict[str, Any]] = field(default_factory=list)
    difficulties_dir: Path = DIFFICULTIES_DIR
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "GameSettings":
        path = path or SETTINGS_PATH
        if not path.exists():
            return cls()
        try:
            data = json.loads(path.read_text())
        except json.JSONDecodeError:
            return cls()
        if not isinstance(data, dict):
            return cls()
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameSettings":
        defaults = cls()
        resolution = data.get("resolution", defaults.resolution)
        try:
            width, height = (int(value) for value in resolution)
        except (TypeError, ValueError):
            width, height = defaults.resolution
        try:
            max_delta = float(data.get("maxDelta", defaults.max_delta))
        except (TypeError, ValueError):
            max_delta = defaults.max_delta
        if max_delta <= 0.0:
            max_delta = defaults.max_delta
        difficulties = data.get("difficulties", [])
        if isinstance(difficulties, dict):
            difficulties = [difficulties]
        return cls(
            resolution=(max(0, width), max(0, height)),
            fullscreen=bool(data.get("fullscreen", defaults.fullscreen)),
            max_fps=int(data.get("maxFps", defaults.max_fps)),
            max_delta=max_delta,
            api_base_url=str(data.get("apiBaseUrl", defaults.api_base_url)).rstrip("/"),
            difficulty=str(data.get("difficulty", defaults.difficulty)),
            difficulties=list(difficulties) if isinstance(difficulties, list) else [],
            difficulties_dir=Path(str(data.get("difficultiesDir", defaults.difficulties_dir))),
            raw=data,
        )

    def difficulty_database(self) -> DifficultyDatabase:
        """Built-in difficulty table, then profile files, then inline overrides."""

        database = DifficultyDatabase()
        database.load_directory(self.difficulties_dir)
        database.load_entries(self.difficulties)
        return database


__all__ = ["DEFAULT_API_BASE_URL", "DIFFICULTIES_DIR", "GameSettings", "SETTINGS_PATH"]
