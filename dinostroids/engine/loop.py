"""Variable timestep frame loop."""
from __future__ import annotations

import time
from typing import Callable


class FrameLoop:
    """Runs one update per rendered frame with the measured frame delta.

    The delta handed to ``update`` is only bounded by ``max_frame_time``; the
    simulation clock applies its own tighter cap.
    """

    def __init__(
        self,
        update: Callable[[float], None],
        render: Callable[[], None],
        process_events: Callable[[], None],
        max_frame_time: float = 0.25,
        timer: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.update = update
        self.render = render
        self.process_events = process_events
        self.max_frame_time = max_frame_time
        self.timer = timer
        self.frames = 0
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def stop(self) -> None:
        self._running = False

    def run(self) -> None:
        self._running = True
        last_time = self.timer()
        while self._running:
            now = self.timer()
            frame_time = min(max(0.0, now - last_time), self.max_frame_time)
            last_time = now
            self.process_events()
            if not self._running:
                break
            self.update(frame_time)
            self.render()
            self.frames += 1


__all__ = ["FrameLoop"]
