"""Input mapping and rebind support."""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Optional, Protocol, Set

import pygame


class Action(Enum):
    """Logical ship actions the simulation asks about each tick."""

    ROTATE_LEFT = "rotate_left"
    ROTATE_RIGHT = "rotate_right"
    THRUST = "thrust"
    FIRE = "fire"
    HYPERSPACE = "hyperspace"


class InputState(Protocol):
    def is_action_engaged(self, action: Action) -> bool:
        ...


DEFAULT_BINDINGS = {
    "rotate_left": ["K_LEFT", "K_a"],
    "rotate_right": ["K_RIGHT", "K_d"],
    "thrust": ["K_UP", "K_w"],
    "fire": ["K_SPACE"],
    "hyperspace": ["K_h"],
}

# One-shot commands for the presentation layer, never seen by the simulation.
DEFAULT_COMMANDS = {
    "start": ["K_RETURN", "K_KP_ENTER"],
    "help": ["K_SLASH", "K_QUESTION"],
    "pause": ["K_p"],
    "escape": ["K_ESCAPE"],
    "difficulty_easy": ["K_e"],
    "difficulty_medium": ["K_m"],
    "difficulty_difficult": ["K_d"],
}


def _resolve_key(name: str) -> Optional[int]:
    value = getattr(pygame, name, None)
    return value if isinstance(value, int) else None


@dataclass
class InputBindings:
    """Runtime structure representing current bindings."""

    actions: Dict[str, list[str]] = field(default_factory=lambda: {k: list(v) for k, v in DEFAULT_BINDINGS.items()})
    commands: Dict[str, list[str]] = field(default_factory=lambda: {k: list(v) for k, v in DEFAULT_COMMANDS.items()})

    @classmethod
    def load(cls, path: Path) -> "InputBindings":
        if not path.exists():
            return cls()
        try:
            data = json.loads(path.read_text())
        except json.JSONDecodeError:
            return cls()
        if not isinstance(data, dict):
            return cls()
        bindings = cls()
        overrides = data.get("bindings", {})
        if not isinstance(overrides, dict):
            return bindings
        for name, keys in overrides.items():
            if name in bindings.actions:
                bindings.actions[name] = list(keys)
            elif name in bindings.commands:
                bindings.commands[name] = list(keys)
        return bindings

    def save(self, path: Path) -> None:
        path.write_text(json.dumps({"bindings": {**self.actions, **self.commands}}, indent=2))

    def key_map(self, table: Dict[str, list[str]]) -> Dict[int, Set[str]]:
        mapping: Dict[int, Set[str]] = {}
        for name, keys in table.items():
            for key_name in keys:
                key = _resolve_key(key_name)
                if key is not None:
                    mapping.setdefault(key, set()).add(name)
        return mapping


class InputMapper:
    """Tracks held keys from pygame events and answers action queries."""

    def __init__(self, bindings: Optional[InputBindings] = None) -> None:
        self.bindings = bindings or InputBindings()
        self._action_keys = self.bindings.key_map(self.bindings.actions)
        self._command_keys = self.bindings.key_map(self.bindings.commands)
        self.action_state: Dict[Action, bool] = {action: False for action in Action}
        self._held: Dict[Action, Set[int]] = {action: set() for action in Action}
        self._pending_commands: Set[str] = set()
        self.text_input = ""

    def begin_frame(self) -> None:
        self.text_input = ""

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.KEYDOWN:
            for name in self._action_keys.get(event.key, ()):
                action = Action(name)
                self._held[action].add(event.key)
                self.action_state[action] = True
            self._pending_commands.update(self._command_keys.get(event.key, ()))
            text = getattr(event, "unicode", "")
            if text and text.isprintable():
                self.text_input += text
        elif event.type == pygame.KEYUP:
            for name in self._action_keys.get(event.key, ()):
                action = Action(name)
                self._held[action].discard(event.key)
                self.action_state[action] = bool(self._held[action])
        elif event.type == pygame.WINDOWFOCUSLOST:
            self.release_all()

    def release_all(self) -> None:
        for action in Action:
            self._held[action].clear()
            self.action_state[action] = False

    def is_action_engaged(self, action: Action) -> bool:
        return self.action_state.get(action, False)

    def consume_command(self, name: str) -> bool:
        if name in self._pending_commands:
            self._pending_commands.discard(name)
            return True
        return False

    def clear_commands(self) -> None:
        self._pending_commands.clear()


class NullInput:
    """Input source with nothing engaged."""

    def is_action_engaged(self, action: Action) -> bool:
        return False


__all__ = [
    "Action",
    "DEFAULT_BINDINGS",
    "DEFAULT_COMMANDS",
    "InputBindings",
    "InputMapper",
    "InputState",
    "NullInput",
]
