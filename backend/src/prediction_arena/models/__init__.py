"""Data models for the Prediction Arena battle engine."""

from prediction_arena.models.moves import (
    DebateMove,
    MoveRelation,
    MOVE_RELATIONS,
    MOVE_TRAIT_SCALING,
    does_counter,
)
from prediction_arena.models.traits import WarriorTraits, MAX_TRAIT_VALUE
from prediction_arena.models.battle import (
    BattleOutcome,
    BattlePhase,
    BattleState,
    DebateContext,
    DebateEvidence,
    GeneratedArgument,
    RealMarketData,
    RoundResult,
    ScoreBreakdown,
    TOTAL_ROUNDS,
)
from prediction_arena.models.stats import RatingChange, WarriorArenaStats

__all__ = [
    "DebateMove",
    "MoveRelation",
    "MOVE_RELATIONS",
    "MOVE_TRAIT_SCALING",
    "does_counter",
    "WarriorTraits",
    "MAX_TRAIT_VALUE",
    "BattleOutcome",
    "BattlePhase",
    "BattleState",
    "DebateContext",
    "DebateEvidence",
    "GeneratedArgument",
    "RealMarketData",
    "RoundResult",
    "ScoreBreakdown",
    "TOTAL_ROUNDS",
    "RatingChange",
    "WarriorArenaStats",
]
