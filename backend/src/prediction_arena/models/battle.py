"""Battle, round and scoring models."""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Literal, Optional

from prediction_arena.models.moves import DebateMove
from prediction_arena.models.traits import WarriorTraits

TOTAL_ROUNDS = 5

Side = Literal["yes", "no"]
Winner = Literal["warrior1", "warrior2", "draw"]
MarketSource = Literal["polymarket", "kalshi"]
EvidenceType = Literal["news", "data", "expert", "historical", "market"]


def resolve_winner(warrior1_score: int, warrior2_score: int) -> Winner:
    """Higher score wins; equal scores draw."""
    if warrior1_score > warrior2_score:
        return "warrior1"
    if warrior2_score > warrior1_score:
        return "warrior2"
    return "draw"


class BattlePhase(str, Enum):
    """Lifecycle of a battle."""

    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"  # Rounds 1-5
    COMPLETED = "COMPLETED"


@dataclass(frozen=True)
class RealMarketData:
    """Live pricing for the market being debated (prices 0-100)."""

    yes_price: float
    no_price: float
    volume: str
    end_time: str  # ISO timestamp
    source: MarketSource = "polymarket"
    liquidity: Optional[str] = None
    category: Optional[str] = None
    # Cross-platform data, present for arbitrage battles
    cross_platform_price: Optional[float] = None
    cross_platform_source: Optional[MarketSource] = None
    spread: Optional[float] = None


@dataclass(frozen=True)
class ScoreBreakdown:
    """How one side's round score was built."""

    base_score: int  # 0-100
    trait_bonus: float  # Fraction applied to base score, 0.0-0.20
    move_multiplier: float  # 0.7, 1.0 or 1.3
    counter_bonus: int  # Informational only
    final_score: int  # 0-1000


@dataclass(frozen=True)
class DebateEvidence:
    """A piece of evidence cited in an argument."""

    type: EvidenceType
    source: str
    title: str
    snippet: str
    relevance: int  # 0-100
    simulated: bool = True


@dataclass(frozen=True)
class GeneratedArgument:
    """Narrative output for one side in one round."""

    argument: str
    evidence: list[DebateEvidence]
    confidence: int  # 10-95
    move: DebateMove
    reasoning: str

    @property
    def evidence_quality(self) -> int:
        """Relevance of the strongest piece of evidence."""
        return self.evidence[0].relevance if self.evidence else 0


@dataclass(frozen=True)
class RoundResult:
    """Resolved round. Never mutated once produced."""

    round_number: int
    warrior1: GeneratedArgument
    warrior2: GeneratedArgument
    warrior1_breakdown: ScoreBreakdown
    warrior2_breakdown: ScoreBreakdown
    round_winner: Winner
    judge_reasoning: str

    @property
    def warrior1_score(self) -> int:
        return self.warrior1_breakdown.final_score

    @property
    def warrior2_score(self) -> int:
        return self.warrior2_breakdown.final_score

    def to_dict(self) -> dict:
        """Serialize to dictionary for JSON response."""
        return {
            "round_number": self.round_number,
            "warrior1": asdict(self.warrior1),
            "warrior2": asdict(self.warrior2),
            "warrior1_score": self.warrior1_score,
            "warrior2_score": self.warrior2_score,
            "warrior1_breakdown": asdict(self.warrior1_breakdown),
            "warrior2_breakdown": asdict(self.warrior2_breakdown),
            "round_winner": self.round_winner,
            "judge_reasoning": self.judge_reasoning,
        }


@dataclass(frozen=True)
class DebateContext:
    """What a narrative generator knows when writing one side's argument."""

    market_question: str
    market_source: MarketSource
    side: Side
    round_number: int
    previous_rounds: tuple[RoundResult, ...] = ()
    opponent_last_move: Optional[DebateMove] = None
    market_data: Optional[RealMarketData] = None


@dataclass(frozen=True)
class BattleOutcome:
    """Finalized result of a five-round battle."""

    rounds: tuple[RoundResult, ...]
    final_winner: Winner
    warrior1_total_score: int
    warrior2_total_score: int

    def to_dict(self) -> dict:
        return {
            "rounds": [r.to_dict() for r in self.rounds],
            "final_winner": self.final_winner,
            "warrior1_total_score": self.warrior1_total_score,
            "warrior2_total_score": self.warrior2_total_score,
        }


@dataclass
class BattleState:
    """Mutable state of one battle while its rounds are played.

    Warrior 1 argues YES, warrior 2 argues NO. The round history is the only
    thing that changes; it grows by one RoundResult per round until
    TOTAL_ROUNDS have been recorded, after which the battle is terminal.
    """

    battle_id: str
    question: str
    warrior1_traits: WarriorTraits
    warrior2_traits: WarriorTraits
    source: MarketSource = "polymarket"
    market_data: Optional[RealMarketData] = None
    rounds: list[RoundResult] = field(default_factory=list)

    @property
    def phase(self) -> BattlePhase:
        if not self.rounds:
            return BattlePhase.NOT_STARTED
        if len(self.rounds) >= TOTAL_ROUNDS:
            return BattlePhase.COMPLETED
        return BattlePhase.IN_PROGRESS

    @property
    def is_complete(self) -> bool:
        return self.phase == BattlePhase.COMPLETED

    @property
    def current_round(self) -> int:
        """Number of the next round to play (TOTAL_ROUNDS + 1 once complete)."""
        return len(self.rounds) + 1

    @property
    def warrior1_total_score(self) -> int:
        return sum(r.warrior1_score for r in self.rounds)

    @property
    def warrior2_total_score(self) -> int:
        return sum(r.warrior2_score for r in self.rounds)

    @property
    def warrior1_moves(self) -> list[DebateMove]:
        return [r.warrior1.move for r in self.rounds]

    @property
    def warrior2_moves(self) -> list[DebateMove]:
        return [r.warrior2.move for r in self.rounds]

    def record_round(self, result: RoundResult) -> None:
        """Append a resolved round.

        Raises:
            ValueError: If the battle is already complete or the round is out of order
        """
        if self.is_complete:
            raise ValueError(f"Battle {self.battle_id} is already completed")
        if result.round_number != self.current_round:
            raise ValueError(
                f"Expected round {self.current_round}, got round {result.round_number}"
            )
        self.rounds.append(result)

    def outcome(self) -> BattleOutcome:
        """Finalize totals and winner.

        Raises:
            ValueError: If fewer than TOTAL_ROUNDS rounds have been played
        """
        if not self.is_complete:
            raise ValueError(
                f"Battle {self.battle_id} has only {len(self.rounds)}/{TOTAL_ROUNDS} rounds"
            )
        w1_total = self.warrior1_total_score
        w2_total = self.warrior2_total_score
        return BattleOutcome(
            rounds=tuple(self.rounds),
            final_winner=resolve_winner(w1_total, w2_total),
            warrior1_total_score=w1_total,
            warrior2_total_score=w2_total,
        )

    def to_dict(self) -> dict:
        return {
            "battle_id": self.battle_id,
            "question": self.question,
            "source": self.source,
            "phase": self.phase.value,
            "current_round": self.current_round,
            "warrior1_traits": asdict(self.warrior1_traits),
            "warrior2_traits": asdict(self.warrior2_traits),
            "warrior1_total_score": self.warrior1_total_score,
            "warrior2_total_score": self.warrior2_total_score,
            "rounds": [r.to_dict() for r in self.rounds],
        }
