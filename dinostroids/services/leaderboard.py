"""Leaderboard and play-count persistence over HTTP.

Every call is asynchronous and failure-tolerant: network errors, bad status
codes and malformed payloads are logged on the ``net`` channel and mapped to
an empty result instead of raising, so the caller only ever shows a status
message.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

import httpx

from dinostroids.engine.logger import ChannelLogger

LEADERBOARD_SIZE = 10
MAX_INITIALS = 3
PLACEHOLDER_INITIALS = "???"
FALLBACK_PLAY_COUNT = 50
COUNT_TIMEOUT = 3.0
LEADERBOARD_TIMEOUT = 5.0


@dataclass(frozen=True)
class LeaderboardEntry:
    initials: str
    score: int
    level: Optional[int] = None
    time_ms: Optional[int] = None
    created_at: Optional[str] = None
    difficulty: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LeaderboardEntry":
        """Build an entry from a server row, substituting placeholders for bad fields."""

        initials = str(data.get("initials") or "").strip().upper()[:MAX_INITIALS] or PLACEHOLDER_INITIALS
        return cls(
            initials=initials,
            score=_as_int(data.get("score")) or 0,
            level=_as_int(data.get("level")),
            time_ms=_as_int(data.get("time", data.get("timeMs"))),
            created_at=data.get("createdAt") or data.get("date") or data.get("timestamp"),
            difficulty=data.get("difficulty"),
        )

    @property
    def duration_label(self) -> str:
        if not self.time_ms:
            return "--:--"
        minutes, remainder = divmod(self.time_ms, 60000)
        return f"{minutes}:{remainder // 1000:02d}"


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    return None


def sanitize_initials(text: str) -> str:
    letters = "".join(char for char in str(text).strip() if char.isalpha())
    return letters.upper()[:MAX_INITIALS]


def qualifies_for_leaderboard(
    entries: Iterable[LeaderboardEntry],
    score: int,
    size: int = LEADERBOARD_SIZE,
) -> bool:
    """True when ``score`` would place within the top ``size`` entries."""

    ranked = sorted((entry.score for entry in entries), reverse=True)
    if len(ranked) < size:
        return True
    return score > ranked[size - 1]


class LeaderboardClient:
    """Async client for the leaderboard service."""

    def __init__(
        self,
        base_url: str,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: Optional[ChannelLogger] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            transport=transport,
            timeout=LEADERBOARD_TIMEOUT,
            headers={"Accept": "application/json", "Cache-Control": "no-store"},
        )
        self._logger = logger

    async def __aenter__(self) -> "LeaderboardClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _log_failure(self, action: str, error: Exception) -> None:
        if self._logger:
            if isinstance(error, httpx.TimeoutException):
                self._logger.warning("%s timed out", action)
            else:
                self._logger.warning("%s failed: %s", action, error)

    async def fetch_leaderboard(self) -> List[LeaderboardEntry]:
        try:
            response = await self._client.get("/leaderboard", timeout=LEADERBOARD_TIMEOUT)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            self._log_failure("Leaderboard fetch", exc)
            return []
        if not isinstance(data, list):
            if self._logger:
                self._logger.warning("Leaderboard payload was not a list: %r", type(data).__name__)
            return []
        entries = [LeaderboardEntry.from_dict(row) for row in data if isinstance(row, dict)]
        entries.sort(key=lambda entry: entry.score, reverse=True)
        if self._logger:
            self._logger.info("Leaderboard fetched: %d entries", len(entries))
        return entries

    async def submit_score(
        self,
        initials: str,
        score: int,
        time_ms: int,
        level: int,
        difficulty: str,
    ) -> bool:
        payload = {
            "initials": sanitize_initials(initials) or PLACEHOLDER_INITIALS,
            "score": int(score),
            "time": int(time_ms),
            "level": int(level),
            "difficulty": difficulty,
        }
        try:
            response = await self._client.post("/leaderboard", json=payload, timeout=LEADERBOARD_TIMEOUT)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            self._log_failure("Score submission", exc)
            return False
        if self._logger:
            self._logger.info("Score submitted: %s %d (%s)", payload["initials"], payload["score"], difficulty)
        return True

    async def fetch_play_count(self) -> int:
        try:
            response = await self._client.get("/gamesPlayed", timeout=COUNT_TIMEOUT)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            self._log_failure("Play count fetch", exc)
            return FALLBACK_PLAY_COUNT
        count = data.get("count") if isinstance(data, dict) else None
        if isinstance(count, bool) or not isinstance(count, int):
            if self._logger:
                self._logger.warning("Invalid play count payload, using %d", FALLBACK_PLAY_COUNT)
            return FALLBACK_PLAY_COUNT
        return count

    async def increment_play_count(self) -> bool:
        try:
            response = await self._client.post("/incrementGamesPlayed", timeout=COUNT_TIMEOUT)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            self._log_failure("Play count increment", exc)
            return False
        return True


__all__ = [
    "FALLBACK_PLAY_COUNT",
    "LEADERBOARD_SIZE",
    "MAX_INITIALS",
    "LeaderboardClient",
    "LeaderboardEntry",
    "qualifies_for_leaderboard",
    "sanitize_initials",
]
