"""Display confidence for a warrior's argument."""
from typing import Sequence

from prediction_arena.models.battle import RoundResult, Side
from prediction_arena.models.moves import AGGRESSIVE_MOVES, DEFENSIVE_MOVES, DebateMove
from prediction_arena.models.traits import WarriorTraits


class ConfidenceEstimator:
    """Derives a 10-95 confidence from traits, move and battle position."""

    BASE_CONFIDENCE = 50
    CHARISMA_WEIGHT = 20
    STRENGTH_WEIGHT = 15  # Aggressive moves only
    DEFENCE_WEIGHT = 10  # Defensive moves only
    LUCK_VARIANCE = 10
    WINNING_BONUS = 10
    FINAL_ROUND_SWING = 5

    MIN_CONFIDENCE = 10
    MAX_CONFIDENCE = 95

    FINAL_ROUND = 5

    def estimate_confidence(
        self,
        traits: WarriorTraits,
        move: DebateMove,
        round_number: int,
        is_winning: bool,
    ) -> int:
        """Estimate how confident a warrior sounds this round.

        Args:
            traits: Warrior's traits
            move: Move being played
            round_number: Current round (1-5)
            is_winning: Whether the warrior leads on cumulative score from prior rounds

        Returns:
            Integer confidence clamped to 10-95
        """
        confidence = self.BASE_CONFIDENCE
        confidence += traits.fraction("charisma") * self.CHARISMA_WEIGHT

        if move in AGGRESSIVE_MOVES:
            confidence += traits.fraction("strength") * self.STRENGTH_WEIGHT
        if move in DEFENSIVE_MOVES:
            confidence += traits.fraction("defence") * self.DEFENCE_WEIGHT

        # Luck below 50% lowers confidence
        confidence += (traits.fraction("luck") - 0.5) * self.LUCK_VARIANCE

        if is_winning:
            confidence += self.WINNING_BONUS

        if round_number == self.FINAL_ROUND:
            confidence += self.FINAL_ROUND_SWING if is_winning else -self.FINAL_ROUND_SWING

        return round(min(max(confidence, self.MIN_CONFIDENCE), self.MAX_CONFIDENCE))

    @staticmethod
    def is_winning(previous_rounds: Sequence[RoundResult], side: Side) -> bool:
        """True if the side's cumulative score margin over prior rounds is positive."""
        margin = 0
        for r in previous_rounds:
            if side == "yes":
                margin += r.warrior1_score - r.warrior2_score
            else:
                margin += r.warrior2_score - r.warrior1_score
        return margin > 0
