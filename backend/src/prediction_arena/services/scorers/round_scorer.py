"""Round score calculation with trait bonuses and move effectiveness."""
import random
from typing import Optional

from prediction_arena.models.battle import ScoreBreakdown
from prediction_arena.models.moves import MOVE_RELATIONS, DebateMove
from prediction_arena.models.traits import MAX_TRAIT_VALUE, WarriorTraits


class RoundScorer:
    """Turns a base argument-quality score into a bounded round score.

    Pipeline per side:
        base * (1 + trait_bonus) * move_multiplier * (1 - opponent_defence_reduction)

    The trait bonus uses one flat cap for every move. The opponent's defence
    can shave off at most 20% and never nullifies a score.
    """

    TRAIT_BONUS_CAP = 0.20
    DEFENCE_REDUCTION_CAP = 0.20

    COUNTER_BONUS = 1.3
    COUNTERED_PENALTY = 0.7
    NEUTRAL = 1.0

    MIN_FINAL_SCORE = 0
    MAX_FINAL_SCORE = 1000

    MIN_BASE_SCORE = 40
    MAX_BASE_SCORE = 100
    LUCK_FLOOR_RANGE = 20  # Max luck lifts the floor from 40 to 60

    def trait_bonus(self, move: DebateMove, traits: WarriorTraits) -> float:
        """Bonus fraction (0.0-0.20) from the traits that scale the move."""
        return traits.move_affinity(move) * self.TRAIT_BONUS_CAP

    def move_multiplier(self, my_move: DebateMove, opponent_move: DebateMove) -> float:
        """1.3 if my move counters theirs, 0.7 if theirs counters mine, else 1.0.

        Only my move's own relation row is consulted.
        """
        relation = MOVE_RELATIONS[my_move]
        if relation.counters == opponent_move:
            return self.COUNTER_BONUS
        if relation.countered_by == opponent_move:
            return self.COUNTERED_PENALTY
        return self.NEUTRAL

    def defence_reduction(self, opponent_traits: WarriorTraits) -> float:
        return opponent_traits.fraction("defence") * self.DEFENCE_REDUCTION_CAP

    def score_round(
        self,
        base_score: int,
        traits: WarriorTraits,
        my_move: DebateMove,
        opponent_move: DebateMove,
        opponent_traits: Optional[WarriorTraits] = None,
    ) -> ScoreBreakdown:
        """Score one side's round.

        Args:
            base_score: Argument quality (0-100)
            traits: Scoring warrior's traits
            my_move: Scoring warrior's move
            opponent_move: Opponent's move this round
            opponent_traits: Opponent's traits, for defence mitigation

        Returns:
            Breakdown with final_score clamped to 0-1000
        """
        trait_bonus = self.trait_bonus(my_move, traits)
        score = base_score * (1 + trait_bonus)

        multiplier = self.move_multiplier(my_move, opponent_move)
        score *= multiplier

        if opponent_traits is not None:
            score *= 1 - self.defence_reduction(opponent_traits)

        counter_bonus = (multiplier - 1) * base_score if multiplier > 1 else 0.0

        final_score = round(min(max(score, self.MIN_FINAL_SCORE), self.MAX_FINAL_SCORE))

        return ScoreBreakdown(
            base_score=base_score,
            trait_bonus=trait_bonus,
            move_multiplier=multiplier,
            counter_bonus=round(counter_bonus),
            final_score=int(final_score),
        )

    def base_score_range(self, luck: int) -> tuple[float, float]:
        """Luck raises the floor; the ceiling stays at 100."""
        luck_factor = luck / MAX_TRAIT_VALUE
        floor = self.MIN_BASE_SCORE + luck_factor * self.LUCK_FLOOR_RANGE
        return floor, float(self.MAX_BASE_SCORE)

    def generate_base_score(self, luck: int, rng: random.Random) -> int:
        """Sample a 0-100 argument-quality score biased by luck.

        Consumes exactly one rng.random() draw.
        """
        floor, ceiling = self.base_score_range(luck)
        return round(floor + rng.random() * (ceiling - floor))
