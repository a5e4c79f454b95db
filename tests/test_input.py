from __future__ import annotations

import json
import sys
from pathlib import Path

import pygame

sys.path.append(str(Path(__file__).resolve().parents[1]))

from dinostroids.engine.input import Action, InputBindings, InputMapper, NullInput


def _down(key: int, text: str = "") -> pygame.event.Event:
    return pygame.event.Event(pygame.KEYDOWN, key=key, unicode=text, mod=0)


def _up(key: int) -> pygame.event.Event:
    return pygame.event.Event(pygame.KEYUP, key=key, mod=0)


def test_action_stays_engaged_while_any_bound_key_is_held() -> None:
    mapper = InputMapper()

    mapper.handle_event(_down(pygame.K_LEFT))
    mapper.handle_event(_down(pygame.K_a, "a"))
    mapper.handle_event(_up(pygame.K_LEFT))
    assert mapper.is_action_engaged(Action.ROTATE_LEFT)

    mapper.handle_event(_up(pygame.K_a))
    assert not mapper.is_action_engaged(Action.ROTATE_LEFT)


def test_default_bindings_cover_every_action() -> None:
    mapper = InputMapper()
    keys = {
        Action.ROTATE_RIGHT: pygame.K_RIGHT,
        Action.THRUST: pygame.K_UP,
        Action.FIRE: pygame.K_SPACE,
        Action.HYPERSPACE: pygame.K_h,
    }
    for action, key in keys.items():
        mapper.handle_event(_down(key))
        assert mapper.is_action_engaged(action)


def test_commands_are_consumed_once() -> None:
    mapper = InputMapper()
    mapper.handle_event(_down(pygame.K_RETURN))

    assert mapper.consume_command("start")
    assert not mapper.consume_command("start")

    mapper.handle_event(_down(pygame.K_p, "p"))
    mapper.clear_commands()
    assert not mapper.consume_command("pause")


def test_text_input_collects_printable_characters_per_frame() -> None:
    mapper = InputMapper()
    mapper.begin_frame()
    mapper.handle_event(_down(pygame.K_a, "a"))
    mapper.handle_event(_down(pygame.K_RETURN, "\r"))
    mapper.handle_event(_down(pygame.K_b, "b"))
    assert mapper.text_input == "ab"

    mapper.begin_frame()
    assert mapper.text_input == ""


def test_focus_loss_releases_held_actions() -> None:
    mapper = InputMapper()
    mapper.handle_event(_down(pygame.K_UP))
    mapper.handle_event(pygame.event.Event(pygame.WINDOWFOCUSLOST))
    assert not mapper.is_action_engaged(Action.THRUST)


def test_bindings_load_overrides_from_settings(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"bindings": {"fire": ["K_f"], "pause": ["K_TAB"], "unknown": ["K_z"]}}))

    mapper = InputMapper(InputBindings.load(path))
    mapper.handle_event(_down(pygame.K_SPACE, " "))
    assert not mapper.is_action_engaged(Action.FIRE)
    mapper.handle_event(_down(pygame.K_f, "f"))
    assert mapper.is_action_engaged(Action.FIRE)
    mapper.handle_event(_down(pygame.K_TAB))
    assert mapper.consume_command("pause")


def test_bindings_fall_back_on_missing_or_malformed_file(tmp_path: Path) -> None:
    assert InputBindings.load(tmp_path / "missing.json") == InputBindings()
    broken = tmp_path / "broken.json"
    broken.write_text("{not json")
    assert InputBindings.load(broken) == InputBindings()


def test_bindings_round_trip_through_save(tmp_path: Path) -> None:
    bindings = InputBindings()
    bindings.actions["hyperspace"] = ["K_LSHIFT"]
    path = tmp_path / "bindings.json"
    bindings.save(path)
    assert InputBindings.load(path).actions["hyperspace"] == ["K_LSHIFT"]


def test_null_input_engages_nothing() -> None:
    assert not any(NullInput().is_action_engaged(action) for action in Action)
