"""Round and battle orchestration for prediction arena debates."""

import logging
import random
import secrets
import uuid
from typing import Optional

from prediction_arena.models.battle import (
    BattleOutcome,
    BattleState,
    DebateContext,
    GeneratedArgument,
    MarketSource,
    RealMarketData,
    RoundResult,
    ScoreBreakdown,
    Side,
    Winner,
    resolve_winner,
)
from prediction_arena.models.moves import DebateMove
from prediction_arena.models.traits import WarriorTraits
from prediction_arena.services.battle_logger import BattleLogger
from prediction_arena.services.narrative_generator import NarrativeGenerator, TemplateNarrator
from prediction_arena.services.scorers.move_selector import MoveSelector
from prediction_arena.services.scorers.round_scorer import RoundScorer

logger = logging.getLogger(__name__)

EVIDENCE_GAP_THRESHOLD = 10


class BattleEngine:
    """Drives five-round debate battles between a YES and a NO warrior.

    Randomness comes only from the injected ``rng``. Per round the draws are
    consumed in a fixed order (warrior1 move, warrior2 move, warrior1 base
    score, warrior2 base score), so a seeded engine replays a battle exactly,
    whether rounds are run one at a time or all at once.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        narrator: Optional[NarrativeGenerator] = None,
        move_selector: Optional[MoveSelector] = None,
        round_scorer: Optional[RoundScorer] = None,
        battle_logger: Optional[BattleLogger] = None,
    ):
        self.rng = rng or random.Random(secrets.randbits(64))
        self.narrator = narrator or TemplateNarrator()
        self.move_selector = move_selector or MoveSelector()
        self.round_scorer = round_scorer or RoundScorer()
        self.battle_logger = battle_logger

    @classmethod
    def from_seed(cls, seed: int, **kwargs) -> "BattleEngine":
        """Engine whose scoring and narrative draws are both reproducible."""
        kwargs.setdefault("narrator", TemplateNarrator(rng=random.Random(f"{seed}:narrative")))
        return cls(rng=random.Random(seed), **kwargs)

    def start_battle(
        self,
        question: str,
        warrior1_traits: WarriorTraits,
        warrior2_traits: WarriorTraits,
        source: MarketSource = "polymarket",
        market_data: Optional[RealMarketData] = None,
        battle_id: Optional[str] = None,
    ) -> BattleState:
        """Create an empty battle. Warrior 1 argues YES, warrior 2 argues NO."""
        state = BattleState(
            battle_id=battle_id or f"battle_{uuid.uuid4().hex[:12]}",
            question=question,
            warrior1_traits=warrior1_traits,
            warrior2_traits=warrior2_traits,
            source=source,
            market_data=market_data,
        )
        if self.battle_logger is not None:
            self.battle_logger.start_session(
                state.battle_id,
                question=question,
                warrior1_traits=warrior1_traits,
                warrior2_traits=warrior2_traits,
            )
        return state

    def execute_round(self, state: BattleState) -> RoundResult:
        """Play the next round of a battle and record it.

        If the narrative generator fails, nothing is recorded and the engine RNG
        is rewound, so a retry replays the same draws.

        Raises:
            ValueError: If the battle is already completed, or the narrative
                generator returns a different move than the one selected
        """
        if state.is_complete:
            raise ValueError(f"Battle {state.battle_id} is already completed")

        round_number = state.current_round
        previous_rounds = tuple(state.rounds)
        w1_history = state.warrior1_moves
        w2_history = state.warrior2_moves

        # Each side sees only the opponent's move from the previous round
        w1_opponent_last = w2_history[-1] if w2_history else None
        w2_opponent_last = w1_history[-1] if w1_history else None

        rng_state = self.rng.getstate()

        w1_move = self.move_selector.select_move(
            state.warrior1_traits, round_number, self.rng, w1_opponent_last, w1_history
        )
        w2_move = self.move_selector.select_move(
            state.warrior2_traits, round_number, self.rng, w2_opponent_last, w2_history
        )

        try:
            w1_arg = self._argue(state, "yes", w1_move, w1_opponent_last, w1_history, previous_rounds)
            w2_arg = self._argue(state, "no", w2_move, w2_opponent_last, w2_history, previous_rounds)
        except ValueError:
            self.rng.setstate(rng_state)
            raise

        w1_base = self.round_scorer.generate_base_score(state.warrior1_traits.luck, self.rng)
        w2_base = self.round_scorer.generate_base_score(state.warrior2_traits.luck, self.rng)

        w1_breakdown = self.round_scorer.score_round(
            w1_base, state.warrior1_traits, w1_move, w2_move, state.warrior2_traits
        )
        w2_breakdown = self.round_scorer.score_round(
            w2_base, state.warrior2_traits, w2_move, w1_move, state.warrior1_traits
        )

        winner = resolve_winner(w1_breakdown.final_score, w2_breakdown.final_score)

        result = RoundResult(
            round_number=round_number,
            warrior1=w1_arg,
            warrior2=w2_arg,
            warrior1_breakdown=w1_breakdown,
            warrior2_breakdown=w2_breakdown,
            round_winner=winner,
            judge_reasoning=self.judge_reasoning(
                w1_arg, w2_arg, w1_breakdown, w2_breakdown, winner, state.market_data
            ),
        )
        state.record_round(result)

        logger.debug(
            f"Battle {state.battle_id} round {round_number}: "
            f"{w1_move.value} {w1_breakdown.final_score} vs "
            f"{w2_move.value} {w2_breakdown.final_score} -> {winner}"
        )
        if self.battle_logger is not None:
            self.battle_logger.log_round(result)
        if state.is_complete:
            self._log_completion(state)

        return result

    def execute_full_battle(self, state: BattleState) -> BattleOutcome:
        """Play every remaining round and return the finalized outcome.

        Raises:
            ValueError: If the battle is already completed
        """
        if state.is_complete:
            raise ValueError(f"Battle {state.battle_id} is already completed")
        while not state.is_complete:
            self.execute_round(state)
        return state.outcome()

    def run_battle(
        self,
        question: str,
        warrior1_traits: WarriorTraits,
        warrior2_traits: WarriorTraits,
        source: MarketSource = "polymarket",
        market_data: Optional[RealMarketData] = None,
    ) -> BattleOutcome:
        """Start a battle and play all five rounds in one call."""
        state = self.start_battle(question, warrior1_traits, warrior2_traits, source, market_data)
        return self.execute_full_battle(state)

    def _argue(
        self,
        state: BattleState,
        side: Side,
        move: DebateMove,
        opponent_last_move: Optional[DebateMove],
        history: list[DebateMove],
        previous_rounds: tuple[RoundResult, ...],
    ) -> GeneratedArgument:
        traits = state.warrior1_traits if side == "yes" else state.warrior2_traits
        context = DebateContext(
            market_question=state.question,
            market_source=state.source,
            side=side,
            round_number=state.current_round,
            previous_rounds=previous_rounds,
            opponent_last_move=opponent_last_move,
            market_data=state.market_data,
        )
        argument = self.narrator.generate_argument(traits, context, move, history)
        if argument.move != move:
            raise ValueError(
                f"Narrative generator returned {argument.move.value} for the {side.upper()} side, "
                f"but the engine selected {move.value}"
            )
        return argument

    def judge_reasoning(
        self,
        w1_arg: GeneratedArgument,
        w2_arg: GeneratedArgument,
        w1_score: ScoreBreakdown,
        w2_score: ScoreBreakdown,
        winner: Winner,
        market_data: Optional[RealMarketData] = None,
    ) -> str:
        """Judge commentary for a round. Has no effect on scoring."""
        w1_move, w2_move = w1_arg.move.value, w2_arg.move.value
        parts = [f"YES used {w1_move} while NO used {w2_move}."]

        if w1_score.move_multiplier > 1:
            parts.append(f"YES's {w1_move} effectively countered NO's {w2_move}.")
        elif w2_score.move_multiplier > 1:
            parts.append(f"NO's {w2_move} effectively countered YES's {w1_move}.")

        w1_quality = w1_arg.evidence_quality
        w2_quality = w2_arg.evidence_quality
        if abs(w1_quality - w2_quality) > EVIDENCE_GAP_THRESHOLD:
            stronger = "YES" if w1_quality > w2_quality else "NO"
            parts.append(f"{stronger} presented stronger supporting evidence.")

        if market_data is not None:
            favored = "YES" if market_data.yes_price >= market_data.no_price else "NO"
            parts.append(
                f"The market currently prices YES at {market_data.yes_price:.1f}%, "
                f"leaning {favored}."
            )

        w1_final, w2_final = w1_score.final_score, w2_score.final_score
        if winner == "warrior1":
            parts.append(f"Round goes to YES ({w1_final} vs {w2_final}).")
        elif winner == "warrior2":
            parts.append(f"Round goes to NO ({w2_final} vs {w1_final}).")
        else:
            parts.append(f"Round is a draw ({w1_final} vs {w2_final}).")

        return " ".join(parts)

    def _log_completion(self, state: BattleState) -> None:
        outcome = state.outcome()
        logger.info(
            f"Battle {state.battle_id} completed: {outcome.final_winner} "
            f"({outcome.warrior1_total_score} vs {outcome.warrior2_total_score})"
        )
        if self.battle_logger is not None:
            self.battle_logger.log_outcome(outcome)
