"""Trait-weighted move selection for one side of a round."""
import random
from collections import Counter
from typing import Optional, Sequence

from prediction_arena.models.moves import AGGRESSIVE_MOVES, MOVE_RELATIONS, DebateMove
from prediction_arena.models.traits import WarriorTraits


class MoveSelector:
    """Picks a warrior's move from trait affinities plus situational biases.

    The selector only ever sees the opponent's move from the PREVIOUS round.
    Both sides pick blind to each other's current-round move, so the counter
    boost is a guess that the opponent repeats, not knowledge of their choice.
    """

    COUNTER_BOOST = 1.5

    OPENING_BIAS = {DebateMove.STRIKE: 1.3, DebateMove.SPECIAL: 1.2}
    FINAL_ROUND_BIAS = {DebateMove.SPECIAL: 1.5}
    FATIGUE_BIAS = {DebateMove.RECOVER: 1.4, DebateMove.DODGE: 1.3}
    FATIGUE_THRESHOLD = 2  # Aggressive moves played before pivoting to defense

    REPEAT_THRESHOLD = 2
    REPEAT_PENALTY = 0.5

    FINAL_ROUND = 5

    def compute_weights(
        self,
        traits: WarriorTraits,
        round_number: int,
        opponent_last_move: Optional[DebateMove] = None,
        previous_moves: Sequence[DebateMove] = (),
    ) -> dict[DebateMove, float]:
        """Compute the unnormalized draw weight of every move.

        Args:
            traits: Selecting warrior's traits
            round_number: Current round (1-5)
            opponent_last_move: Opponent's move in the previous round, if any
            previous_moves: This warrior's moves in earlier rounds, oldest first

        Returns:
            Weights keyed by move, in DebateMove declaration order
        """
        weights = {move: traits.move_affinity(move) for move in DebateMove}

        if opponent_last_move is not None:
            for move, relation in MOVE_RELATIONS.items():
                if relation.counters == opponent_last_move:
                    weights[move] *= self.COUNTER_BOOST

        if round_number == 1:
            self._apply(weights, self.OPENING_BIAS)
        elif round_number == self.FINAL_ROUND:
            self._apply(weights, self.FINAL_ROUND_BIAS)
        elif round_number >= 3:
            aggressive = sum(1 for m in previous_moves if m in AGGRESSIVE_MOVES)
            if aggressive >= self.FATIGUE_THRESHOLD:
                self._apply(weights, self.FATIGUE_BIAS)

        move_counts = Counter(previous_moves)
        for move, count in move_counts.items():
            if count >= self.REPEAT_THRESHOLD:
                weights[move] *= self.REPEAT_PENALTY

        return weights

    def select_move(
        self,
        traits: WarriorTraits,
        round_number: int,
        rng: random.Random,
        opponent_last_move: Optional[DebateMove] = None,
        previous_moves: Sequence[DebateMove] = (),
    ) -> DebateMove:
        """Draw a move with probability proportional to its weight.

        Consumes exactly one rng.random() draw.
        """
        weights = self.compute_weights(traits, round_number, opponent_last_move, previous_moves)

        remaining = rng.random() * sum(weights.values())
        for move, weight in weights.items():
            remaining -= weight
            if remaining <= 0:
                return move

        # Only reachable through float rounding
        return DebateMove.STRIKE

    @staticmethod
    def _apply(weights: dict[DebateMove, float], bias: dict[DebateMove, float]) -> None:
        for move, factor in bias.items():
            weights[move] *= factor
