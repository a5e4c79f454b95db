"""Screen flow: title, play and game-over scenes behind one manager."""
from __future__ import annotations

from typing import Any, Dict, Optional, Type

import pygame


class Scene:
    """One screen of the game. Subclasses override the hooks they need."""

    def __init__(self, manager: "SceneManager") -> None:
        self.manager = manager

    def on_enter(self, **kwargs) -> None:  # pragma: no cover - hooks
        pass

    def on_exit(self) -> None:  # pragma: no cover - hooks
        pass

    def handle_event(self, event: pygame.event.Event) -> None:
        pass

    def update(self, dt: float) -> None:
        pass

    def render(self, surface: pygame.Surface) -> None:
        pass


class SceneManager:
    """Owns the active scene and the shared context handed to each new one.

    Switching scenes drops any one-shot commands and held keys left on the
    shared ``input`` so a keypress never carries over into the next screen.
    """

    def __init__(self) -> None:
        self._registry: Dict[str, Type[Scene]] = {}
        self._current: Optional[Scene] = None
        self._current_name: Optional[str] = None
        self.context: Dict[str, Any] = {}

    def register(self, name: str, scene_cls: Type[Scene]) -> None:
        self._registry[name] = scene_cls

    def set_context(self, **kwargs) -> None:
        self.context.update(kwargs)

    def activate(self, name: str, **kwargs) -> None:
        scene_cls = self._registry.get(name)
        if scene_cls is None:
            raise KeyError(f"Scene '{name}' is not registered")
        previous = self._current_name
        if self._current is not None:
            self._current.on_exit()
        self._reset_input()
        self._current = scene_cls(self)
        self._current_name = name
        logger = self.context.get("logger")
        if logger is not None:
            logger.channel("session").debug("Scene %s -> %s", previous or "-", name)
        self._current.on_enter(**{**self.context, **kwargs})

    def _reset_input(self) -> None:
        mapper = self.context.get("input")
        if mapper is None:
            return
        mapper.clear_commands()
        mapper.release_all()

    def active(self) -> Optional[Scene]:
        return self._current

    @property
    def active_name(self) -> Optional[str]:
        return self._current_name

    def handle_event(self, event: pygame.event.Event) -> None:
        if self._current is not None:
            self._current.handle_event(event)

    def update(self, dt: float) -> None:
        if self._current is not None:
            self._current.update(dt)

    def render(self, surface: pygame.Surface) -> None:
        if self._current is not None:
            self._current.render(surface)


__all__ = ["Scene", "SceneManager"]
