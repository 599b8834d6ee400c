"""Applies completed battle results to warrior arena records."""

import logging
from typing import Optional

from prediction_arena.config import settings
from prediction_arena.models.battle import BattleOutcome, TOTAL_ROUNDS
from prediction_arena.models.stats import RatingChange, WarriorArenaStats
from prediction_arena.services.scorers.elo_rating import EloRatingUpdater

logger = logging.getLogger(__name__)


class WarriorStatsService:
    """Updates win/loss records, streaks and Elo ratings after a battle.

    Callers must invoke record_battle exactly once per completed battle;
    this service does not guard against duplicate submissions.
    """

    def __init__(self, rating_updater: Optional[EloRatingUpdater] = None):
        self.rating_updater = rating_updater or EloRatingUpdater()

    @staticmethod
    def new_stats(warrior_id: int) -> WarriorArenaStats:
        """Fresh record seeded with the configured default rating."""
        return WarriorArenaStats(
            warrior_id=warrior_id,
            arena_rating=settings.default_rating,
            peak_rating=settings.default_rating,
        )

    def compute_rating_change(
        self,
        warrior1_rating: int,
        warrior2_rating: int,
        outcome: BattleOutcome,
    ) -> RatingChange:
        """Elo update for both warriors given the battle winner."""
        if outcome.final_winner == "warrior1":
            result = self.rating_updater.update_ratings(warrior1_rating, warrior2_rating)
            return RatingChange(result["winner_new_rating"], result["loser_new_rating"])
        if outcome.final_winner == "warrior2":
            result = self.rating_updater.update_ratings(warrior2_rating, warrior1_rating)
            return RatingChange(result["loser_new_rating"], result["winner_new_rating"])
        result = self.rating_updater.update_ratings_draw(warrior1_rating, warrior2_rating)
        return RatingChange(result["new_rating1"], result["new_rating2"])

    def record_battle(
        self,
        warrior1_stats: WarriorArenaStats,
        warrior2_stats: WarriorArenaStats,
        outcome: BattleOutcome,
    ) -> RatingChange:
        """Update both records in place for one completed battle.

        Args:
            warrior1_stats: Record of the YES warrior
            warrior2_stats: Record of the NO warrior
            outcome: Finalized battle outcome

        Returns:
            The rating change that was applied
        """
        change = self.compute_rating_change(
            warrior1_stats.arena_rating, warrior2_stats.arena_rating, outcome
        )

        w1_result = {"warrior1": "win", "warrior2": "loss", "draw": "draw"}[outcome.final_winner]
        w2_result = {"warrior1": "loss", "warrior2": "win", "draw": "draw"}[outcome.final_winner]

        self._apply(warrior1_stats, w1_result, change.warrior1_new_rating, outcome.warrior1_total_score)
        self._apply(warrior2_stats, w2_result, change.warrior2_new_rating, outcome.warrior2_total_score)

        logger.info(
            f"Ratings updated: warrior {warrior1_stats.warrior_id} -> {change.warrior1_new_rating}, "
            f"warrior {warrior2_stats.warrior_id} -> {change.warrior2_new_rating}"
        )
        return change

    @staticmethod
    def _apply(stats: WarriorArenaStats, result: str, new_rating: int, total_score: int) -> None:
        previous_battles = stats.total_battles
        stats.total_battles += 1

        if result == "win":
            stats.wins += 1
            stats.current_streak = max(stats.current_streak, 0) + 1
            stats.longest_streak = max(stats.longest_streak, stats.current_streak)
        elif result == "loss":
            stats.losses += 1
            stats.current_streak = 0
        else:
            stats.draws += 1
            stats.current_streak = 0

        stats.arena_rating = new_rating
        stats.peak_rating = max(stats.peak_rating, new_rating)

        # Running mean of per-round score across battles
        avg_round_score = total_score / TOTAL_ROUNDS
        if stats.avg_score is None or previous_battles == 0:
            stats.avg_score = avg_round_score
        else:
            stats.avg_score = (stats.avg_score * previous_battles + avg_round_score) / stats.total_battles
