"""Networking helpers for the leaderboard service."""

from .leaderboard import LeaderboardClient, LeaderboardEntry, qualifies_for_leaderboard, sanitize_initials
from .tasks import BackgroundTaskRunner, completed_result

__all__ = [
    "BackgroundTaskRunner",
    "LeaderboardClient",
    "LeaderboardEntry",
    "completed_result",
    "qualifies_for_leaderboard",
    "sanitize_initials",
]
