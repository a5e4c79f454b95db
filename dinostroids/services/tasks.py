"""Asyncio event loop running beside the frame loop."""
from __future__ import annotations

import asyncio
import threading
from concurrent.futures import Future
from typing import Any, Coroutine, Optional, TypeVar

from dinostroids.engine.logger import ChannelLogger

T = TypeVar("T")


class BackgroundTaskRunner:
    """Owns an event loop on a daemon thread for network calls.

    Coroutines are submitted from the game thread and their results polled
    through the returned futures; nothing on the loop touches session state.
    """

    def __init__(self, logger: Optional[ChannelLogger] = None) -> None:
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._logger = logger

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._run, name="dinostroids-net", daemon=True)
        self._thread.start()

    def _run(self) -> None:
        assert self._loop is not None
        asyncio.set_event_loop(self._loop)
        self._loop.run_forever()

    def submit(self, coro: Coroutine[Any, Any, T]) -> "Future[T]":
        if not self.running or self._loop is None:
            coro.close()
            raise RuntimeError("Background task runner is not running")
        return asyncio.run_coroutine_threadsafe(coro, self._loop)

    def stop(self, timeout: float = 2.0) -> None:
        if self._loop is None:
            return
        loop = self._loop
        if self.running:
            loop.call_soon_threadsafe(loop.stop)
            assert self._thread is not None
            self._thread.join(timeout)
        if not loop.is_running():
            loop.close()
        elif self._logger:
            self._logger.warning("Background loop did not stop within %.1fs", timeout)
        self._loop = None
        self._thread = None


def completed_result(future: Optional["Future[T]"], default: T) -> T:
    """Return a finished future's value, or ``default`` while pending or failed."""

    if future is None or not future.done() or future.cancelled():
        return default
    if future.exception() is not None:
        return default
    return future.result()


__all__ = ["BackgroundTaskRunner", "completed_result"]
