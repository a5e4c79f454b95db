"""Score, lives and bonus-life bookkeeping."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from dinostroids.engine.logger import ChannelLogger
from dinostroids.world.obstacles import ObstacleTier


BONUS_LIFE_THRESHOLD = 10000


@dataclass
class ScoreState:
    score: int = 0
    lives: int = 0
    last_bonus_score: int = 0


class ScoreLedger:
    """Accumulates score and awards a life per threshold crossed."""

    def __init__(
        self,
        lives: int,
        *,
        threshold: int = BONUS_LIFE_THRESHOLD,
        logger: Optional[ChannelLogger] = None,
    ) -> None:
        if threshold <= 0:
            raise ValueError("Bonus life threshold must be positive")
        self.threshold = threshold
        self.state = ScoreState(score=0, lives=max(0, lives), last_bonus_score=0)
        self._logger = logger

    @property
    def score(self) -> int:
        return self.state.score

    @property
    def lives(self) -> int:
        return self.state.lives

    def add_score(self, tier: ObstacleTier) -> int:
        self.state.score += tier.score
        return self.state.score

    def check_bonus_life(self, new_score: int) -> bool:
        """Grant one life the first time ``new_score`` reaches a new threshold.

        Several thresholds crossed at once still grant a single life; the
        crossing is recorded so later calls inside the same band do nothing.
        """

        if new_score // self.threshold <= self.state.last_bonus_score // self.threshold:
            return False
        self.state.last_bonus_score = new_score
        self.state.lives += 1
        if self._logger:
            self._logger.info("Bonus life at %d points, lives=%d", new_score, self.state.lives)
        return True

    def lose_life(self) -> int:
        self.state.lives = max(0, self.state.lives - 1)
        return self.state.lives

    def reset(self, lives: int) -> None:
        self.state = ScoreState(score=0, lives=max(0, lives), last_bonus_score=0)


__all__ = ["BONUS_LIFE_THRESHOLD", "ScoreLedger", "ScoreState"]
