"""
Services Module
Re-exports the leaderboard service
"""

from typing import Optional

from ..data import get_score_store
from .leaderboard_service import (
    LeaderboardEngine,
    SubmitResult,
    player_key,
    ranking_key,
)

_engine: Optional[LeaderboardEngine] = None


def get_leaderboard_engine() -> LeaderboardEngine:
    """Get the LeaderboardEngine singleton over the process-wide store."""
    global _engine
    if _engine is None:
        _engine = LeaderboardEngine(get_score_store())
    return _engine


__all__ = [
    "LeaderboardEngine",
    "SubmitResult",
    "get_leaderboard_engine",
    "player_key",
    "ranking_key",
]
