"""Debate moves and their static relation tables."""

from dataclasses import dataclass
from enum import Enum


class DebateMove(str, Enum):
    """Debate tactics a warrior can play in a round.

    Declaration order matters: the weighted move draw walks moves in this order.
    """

    STRIKE = "STRIKE"  # Direct factual attack
    TAUNT = "TAUNT"  # Challenge credibility
    DODGE = "DODGE"  # Reframe/deflect
    SPECIAL = "SPECIAL"  # Novel insight
    RECOVER = "RECOVER"  # Acknowledge weakness, pivot


@dataclass(frozen=True)
class MoveRelation:
    """Which move this move beats, and which move beats it."""

    counters: DebateMove
    countered_by: DebateMove


# Each row is declared on its own. "A counters B" does NOT imply that B's
# countered_by is A (e.g. STRIKE counters DODGE, but DODGE is countered by RECOVER).
MOVE_RELATIONS: dict[DebateMove, MoveRelation] = {
    DebateMove.STRIKE: MoveRelation(counters=DebateMove.DODGE, countered_by=DebateMove.TAUNT),
    DebateMove.TAUNT: MoveRelation(counters=DebateMove.STRIKE, countered_by=DebateMove.SPECIAL),
    DebateMove.DODGE: MoveRelation(counters=DebateMove.SPECIAL, countered_by=DebateMove.RECOVER),
    DebateMove.SPECIAL: MoveRelation(counters=DebateMove.TAUNT, countered_by=DebateMove.STRIKE),
    DebateMove.RECOVER: MoveRelation(counters=DebateMove.DODGE, countered_by=DebateMove.TAUNT),
}

# Traits averaged to scale each move
MOVE_TRAIT_SCALING: dict[DebateMove, tuple[str, ...]] = {
    DebateMove.STRIKE: ("strength",),
    DebateMove.TAUNT: ("charisma", "wit"),
    DebateMove.DODGE: ("defence",),
    DebateMove.SPECIAL: ("strength", "charisma", "wit"),
    DebateMove.RECOVER: ("defence", "charisma"),
}

AGGRESSIVE_MOVES = frozenset({DebateMove.STRIKE, DebateMove.SPECIAL})
DEFENSIVE_MOVES = frozenset({DebateMove.DODGE, DebateMove.RECOVER})


def does_counter(move_a: DebateMove, move_b: DebateMove) -> bool:
    """True if move_a counters move_b."""
    return MOVE_RELATIONS[move_a].counters == move_b
