from __future__ import annotations

BASE_SCORE = 1000
TIME_BONUS_PER_SECOND = 10
MOVE_PENALTY = 5


def score(seconds_remaining: int, moves: int) -> int:
    """Final score for a completed round. Never negative."""
    return max(BASE_SCORE + TIME_BONUS_PER_SECOND * seconds_remaining - MOVE_PENALTY * moves, 0)
