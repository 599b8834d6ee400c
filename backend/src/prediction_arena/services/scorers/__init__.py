"""Core scoring components for the battle engine."""
from prediction_arena.services.scorers.move_selector import MoveSelector
from prediction_arena.services.scorers.round_scorer import RoundScorer
from prediction_arena.services.scorers.confidence_estimator import ConfidenceEstimator
from prediction_arena.services.scorers.elo_rating import EloRatingUpdater

__all__ = [
    "MoveSelector",
    "RoundScorer",
    "ConfidenceEstimator",
    "EloRatingUpdater",
]
