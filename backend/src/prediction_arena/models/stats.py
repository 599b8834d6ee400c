"""Warrior arena record and rating models."""

from dataclasses import dataclass
from typing import Optional

DEFAULT_RATING = 1000
RATING_FLOOR = 100


@dataclass(frozen=True)
class RatingChange:
    """Ratings for both sides after one battle."""

    warrior1_new_rating: int
    warrior2_new_rating: int


@dataclass
class WarriorArenaStats:
    """Arena record for one warrior."""

    warrior_id: int
    total_battles: int = 0
    wins: int = 0
    losses: int = 0
    draws: int = 0
    # Positive for a run of wins; reset on a loss or draw
    current_streak: int = 0
    longest_streak: int = 0
    arena_rating: int = DEFAULT_RATING
    peak_rating: int = DEFAULT_RATING
    avg_score: Optional[float] = None

    @property
    def win_rate(self) -> float:
        """Fraction of battles won (0.0 when unplayed)."""
        if self.total_battles == 0:
            return 0.0
        return self.wins / self.total_battles
