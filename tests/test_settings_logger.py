from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from dinostroids.assets.content import DEFAULT_DIFFICULTIES, DifficultyDatabase, DifficultyProfile
from dinostroids.engine.input import InputBindings
from dinostroids.engine.logger import DEFAULT_CHANNELS, GameLogger, LoggerConfig, init_logger
from dinostroids.engine.settings import DEFAULT_API_BASE_URL, DIFFICULTIES_DIR, GameSettings


def test_settings_defaults_when_missing_or_malformed(tmp_path: Path) -> None:
    assert GameSettings.load(tmp_path / "missing.json") == GameSettings()
    broken = tmp_path / "settings.json"
    broken.write_text("[1, 2")
    settings = GameSettings.load(broken)
    assert settings.api_base_url == DEFAULT_API_BASE_URL
    assert settings.difficulty == "medium"


@pytest.mark.parametrize("payload", ["[1, 2]", "42", "\"text\"", "null"])
def test_non_object_settings_fall_back_for_every_loader(tmp_path: Path, payload: str) -> None:
    path = tmp_path / "settings.json"
    path.write_text(payload)

    assert GameSettings.load(path) == GameSettings()
    assert InputBindings.load(path) == InputBindings()
    config = LoggerConfig.from_settings(path)
    assert config.level == logging.INFO
    assert config.channels == DEFAULT_CHANNELS
    assert init_logger(path).channel("combat").enabled


def test_non_object_sections_are_ignored(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"bindings": ["K_f"], "logChannels": "all"}))

    assert InputBindings.load(path) == InputBindings()
    assert LoggerConfig.from_settings(path).channels == DEFAULT_CHANNELS


def test_settings_parse_values_and_difficulty_overrides(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(
        json.dumps(
            {
                "resolution": [1280, 720],
                "fullscreen": True,
                "maxFps": 144,
                "maxDelta": 0.05,
                "apiBaseUrl": "http://scores.test/api/",
                "difficulty": "easy",
                "difficulties": [{"name": "easy", "lives": 9}],
            }
        )
    )

    settings = GameSettings.load(path)

    assert settings.resolution == (1280, 720)
    assert settings.fullscreen
    assert settings.max_fps == 144
    assert settings.max_delta == pytest.approx(0.05)
    assert settings.api_base_url == "http://scores.test/api"
    easy = settings.difficulty_database().get("easy")
    assert easy.starting_lives == 9
    assert easy.initial_obstacles == 2
    assert easy.speed_range("large") == DEFAULT_DIFFICULTIES["easy"].speed_range("large")


def test_difficulty_files_load_before_inline_overrides(tmp_path: Path) -> None:
    profiles = tmp_path / "profiles"
    profiles.mkdir()
    (profiles / "medium.json").write_text(json.dumps({"name": "medium", "lives": 7, "shootCooldown": 0.2}))
    (profiles / "broken.json").write_text("{nope")
    settings = GameSettings.from_dict(
        {"difficultiesDir": str(profiles), "difficulties": [{"name": "medium", "lives": 4}]}
    )

    medium = settings.difficulty_database().get("medium")

    assert settings.difficulties_dir == profiles
    assert medium.starting_lives == 4
    assert medium.fire_cooldown == pytest.approx(0.2)
    assert GameSettings().difficulties_dir == DIFFICULTIES_DIR


def test_bad_max_delta_keeps_default() -> None:
    settings = GameSettings.from_dict({"maxDelta": -1, "resolution": "wide"})
    assert settings.max_delta == pytest.approx(0.1)
    assert settings.resolution == (0, 0)


def test_default_difficulty_table() -> None:
    database = DifficultyDatabase()
    assert database.names() == ["easy", "medium", "difficult"]
    medium = database.get("medium")
    assert medium.initial_obstacles == 3
    assert medium.player_acceleration == 300.0
    assert medium.fire_cooldown == pytest.approx(0.084)
    assert medium.starting_lives == 3
    assert medium.field_size_percent == 67.0
    assert (medium.speed_range("small").minimum, medium.speed_range("small").maximum) == (108.0, 150.0)
    with pytest.raises(KeyError):
        database.get("nightmare")


def test_new_profile_requires_every_speed_range() -> None:
    with pytest.raises(ValueError):
        DifficultyProfile.from_dict({"name": "nightmare", "asteroidSpeed": {"large": {"min": 100, "max": 200}}})

    profile = DifficultyProfile.from_dict(
        {
            "name": "nightmare",
            "initialAsteroids": 6,
            "asteroidSpeed": {
                "large": {"min": 100, "max": 150},
                "medium": {"min": 150, "max": 200},
                "small": {"max": 250, "min": 300},
            },
        }
    )
    assert profile.initial_obstacles == 6
    assert profile.speed_range("small").minimum == 250.0


def test_difficulty_directory_skips_bad_files(tmp_path: Path) -> None:
    (tmp_path / "a_bad.json").write_text("{oops")
    (tmp_path / "b_hard.json").write_text(json.dumps({"name": "difficult", "shootCooldown": 0.5}))
    database = DifficultyDatabase()
    database.load_directory(tmp_path)
    assert database.get("difficult").fire_cooldown == pytest.approx(0.5)
    assert database.get("difficult").starting_lives == 2


def test_logger_config_reads_level_and_channels() -> None:
    config = LoggerConfig.from_dict({"logLevel": "debug", "logChannels": {"physics": True, "net": False}})
    assert config.level == logging.DEBUG
    assert config.channels["physics"] is True
    assert config.channels["net"] is False
    assert config.channels["combat"] is True
    assert set(config.channels) == set(DEFAULT_CHANNELS)


def test_channel_toggle_gates_records_but_not_errors(caplog: pytest.LogCaptureFixture) -> None:
    logger = GameLogger(LoggerConfig(level=logging.INFO, channels={"score": False}))
    channel = logger.channel("score")

    with caplog.at_level(logging.INFO, logger="dinostroids.score"):
        channel.info("hidden record")
        channel.error("visible failure")
        logger.set_enabled("score", True)
        channel.info("shown record")

    assert "hidden record" not in caplog.text
    assert "visible failure" in caplog.text
    assert "shown record" in caplog.text


def test_unknown_channels_start_disabled(tmp_path: Path) -> None:
    logger = init_logger(tmp_path / "missing.json")
    assert not logger.channel("mystery").enabled
    assert logger.channel("combat").enabled
    assert not logger.channel("physics").enabled
    assert "mystery" in logger.channels()
