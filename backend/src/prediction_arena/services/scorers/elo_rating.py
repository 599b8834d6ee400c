"""Elo rating updates applied after a completed battle."""
from prediction_arena.models.stats import RATING_FLOOR


class EloRatingUpdater:
    """Standard logistic Elo with a fixed K-factor and a rating floor.

    There is no ceiling. Both the win/loss and the draw variant floor each
    new rating at RATING_FLOOR.
    """

    K_FACTOR = 32
    SCALE = 400

    def expected_score(self, rating: int, opponent_rating: int) -> float:
        """Probability-like expectation that `rating` beats `opponent_rating`."""
        return 1 / (1 + 10 ** ((opponent_rating - rating) / self.SCALE))

    def _adjust(self, rating: int, actual: float, expected: float) -> int:
        return max(RATING_FLOOR, round(rating + self.K_FACTOR * (actual - expected)))

    def update_ratings(self, winner_rating: int, loser_rating: int) -> dict[str, int]:
        """New ratings after a decisive battle.

        Returns:
            {"winner_new_rating": int, "loser_new_rating": int}
        """
        expected_winner = self.expected_score(winner_rating, loser_rating)
        expected_loser = 1 - expected_winner
        return {
            "winner_new_rating": self._adjust(winner_rating, 1.0, expected_winner),
            "loser_new_rating": self._adjust(loser_rating, 0.0, expected_loser),
        }

    def update_ratings_draw(self, rating1: int, rating2: int) -> dict[str, int]:
        """New ratings after a drawn battle.

        Returns:
            {"new_rating1": int, "new_rating2": int}
        """
        expected1 = self.expected_score(rating1, rating2)
        expected2 = 1 - expected1
        return {
            "new_rating1": self._adjust(rating1, 0.5, expected1),
            "new_rating2": self._adjust(rating2, 0.5, expected2),
        }
