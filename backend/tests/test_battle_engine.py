"""Tests for round and battle orchestration."""

import random

import pytest

from prediction_arena.models.battle import (
    BattlePhase,
    DebateEvidence,
    GeneratedArgument,
    RealMarketData,
    ScoreBreakdown,
)
from prediction_arena.models.moves import DebateMove
from prediction_arena.models.traits import WarriorTraits
from prediction_arena.services.battle_engine import BattleEngine
from prediction_arena.services.narrative_generator import TemplateNarrator
from prediction_arena.services.scorers.move_selector import MoveSelector
from prediction_arena.services.scorers.round_scorer import RoundScorer

QUESTION = "Will the central bank cut interest rates before December?"


@pytest.fixture
def yes_traits():
    return WarriorTraits(strength=8200, wit=6100, charisma=7300, defence=4000, luck=5500)


@pytest.fixture
def no_traits():
    return WarriorTraits(strength=4500, wit=8800, charisma=5200, defence=7600, luck=3900)


class RecordingSelector(MoveSelector):
    """Move selector that records what each call could see."""

    def __init__(self):
        self.calls = []

    def select_move(self, traits, round_number, rng, opponent_last_move=None, previous_moves=()):
        move = super().select_move(traits, round_number, rng, opponent_last_move, previous_moves)
        self.calls.append((round_number, opponent_last_move, list(previous_moves), move))
        return move


class FixedScorer(RoundScorer):
    """Warrior 1 always scores 100, warrior 2 always scores 0."""

    def __init__(self, warrior1_traits):
        self.warrior1_traits = warrior1_traits

    def score_round(self, base_score, traits, my_move, opponent_move, opponent_traits=None):
        final = 100 if traits == self.warrior1_traits else 0
        return ScoreBreakdown(
            base_score=base_score,
            trait_bonus=0.0,
            move_multiplier=self.move_multiplier(my_move, opponent_move),
            counter_bonus=0,
            final_score=final,
        )


class WrongMoveNarrator:
    """Narrator that ignores the move it was given."""

    def generate_argument(self, traits, context, move, previous_moves=()):
        wrong = DebateMove.TAUNT if move != DebateMove.TAUNT else DebateMove.STRIKE
        return GeneratedArgument(argument="", evidence=[], confidence=50, move=wrong, reasoning="")


def test_full_battle_plays_five_rounds(yes_traits, no_traits):
    engine = BattleEngine.from_seed(1)
    outcome = engine.run_battle(QUESTION, yes_traits, no_traits)

    assert len(outcome.rounds) == 5
    assert [r.round_number for r in outcome.rounds] == [1, 2, 3, 4, 5]
    assert outcome.warrior1_total_score == sum(r.warrior1_score for r in outcome.rounds)
    assert outcome.warrior2_total_score == sum(r.warrior2_score for r in outcome.rounds)


def test_final_winner_follows_totals(yes_traits, no_traits):
    for seed in range(20):
        outcome = BattleEngine.from_seed(seed).run_battle(QUESTION, yes_traits, no_traits)
        if outcome.warrior1_total_score > outcome.warrior2_total_score:
            assert outcome.final_winner == "warrior1"
        elif outcome.warrior2_total_score > outcome.warrior1_total_score:
            assert outcome.final_winner == "warrior2"
        else:
            assert outcome.final_winner == "draw"


def test_round_winner_follows_scores(yes_traits, no_traits):
    outcome = BattleEngine.from_seed(8).run_battle(QUESTION, yes_traits, no_traits)
    for r in outcome.rounds:
        if r.warrior1_score > r.warrior2_score:
            assert r.round_winner == "warrior1"
        elif r.warrior2_score > r.warrior1_score:
            assert r.round_winner == "warrior2"
        else:
            assert r.round_winner == "draw"


def test_same_seed_replays_identically(yes_traits, no_traits):
    first = BattleEngine.from_seed(42).run_battle(QUESTION, yes_traits, no_traits)
    second = BattleEngine.from_seed(42).run_battle(QUESTION, yes_traits, no_traits)
    assert first.to_dict() == second.to_dict()


def test_single_round_mode_matches_full_mode(yes_traits, no_traits):
    full_engine = BattleEngine.from_seed(2025)
    full = full_engine.run_battle(QUESTION, yes_traits, no_traits)

    round_engine = BattleEngine.from_seed(2025)
    state = round_engine.start_battle(QUESTION, yes_traits, no_traits)
    singles = [round_engine.execute_round(state) for _ in range(5)]

    assert [r.to_dict() for r in singles] == [r.to_dict() for r in full.rounds]
    assert state.outcome() == full


def test_scores_independent_of_narrator_randomness(yes_traits, no_traits):
    """Text generation has its own RNG, so it never shifts score draws."""
    first = BattleEngine(rng=random.Random(9)).run_battle(QUESTION, yes_traits, no_traits)
    second = BattleEngine(rng=random.Random(9)).run_battle(QUESTION, yes_traits, no_traits)
    assert [(r.warrior1_score, r.warrior2_score) for r in first.rounds] == [
        (r.warrior1_score, r.warrior2_score) for r in second.rounds
    ]
    assert [(r.warrior1.move, r.warrior2.move) for r in first.rounds] == [
        (r.warrior1.move, r.warrior2.move) for r in second.rounds
    ]


def test_moves_chosen_blind_to_current_round(yes_traits, no_traits):
    selector = RecordingSelector()
    engine = BattleEngine(rng=random.Random(4), move_selector=selector)
    engine.run_battle(QUESTION, yes_traits, no_traits)

    # Calls alternate warrior1, warrior2 per round
    w1_calls = selector.calls[0::2]
    w2_calls = selector.calls[1::2]

    assert w1_calls[0][1] is None
    assert w2_calls[0][1] is None
    for i in range(1, 5):
        # Only the opponent's previous-round move is visible
        assert w1_calls[i][1] == w2_calls[i - 1][3]
        assert w2_calls[i][1] == w1_calls[i - 1][3]
        assert w1_calls[i][2] == [call[3] for call in w1_calls[:i]]
        assert w2_calls[i][2] == [call[3] for call in w2_calls[:i]]


def test_argument_move_matches_selected_move(yes_traits, no_traits):
    selector = RecordingSelector()
    engine = BattleEngine(rng=random.Random(12), move_selector=selector)
    outcome = engine.run_battle(QUESTION, yes_traits, no_traits)
    selected = [call[3] for call in selector.calls]
    played = [m for r in outcome.rounds for m in (r.warrior1.move, r.warrior2.move)]
    assert played == selected


def test_scores_use_opponent_move_and_traits(yes_traits, no_traits):
    engine = BattleEngine.from_seed(77)
    outcome = engine.run_battle(QUESTION, yes_traits, no_traits)
    scorer = RoundScorer()
    for r in outcome.rounds:
        expected = scorer.score_round(
            r.warrior1_breakdown.base_score, yes_traits, r.warrior1.move, r.warrior2.move, no_traits
        )
        assert r.warrior1_breakdown == expected
        expected = scorer.score_round(
            r.warrior2_breakdown.base_score, no_traits, r.warrior2.move, r.warrior1.move, yes_traits
        )
        assert r.warrior2_breakdown == expected


def test_warrior1_sweep_through_engine(yes_traits, no_traits):
    engine = BattleEngine.from_seed(3, round_scorer=FixedScorer(yes_traits))
    outcome = engine.run_battle(QUESTION, yes_traits, no_traits)
    assert outcome.final_winner == "warrior1"
    assert outcome.warrior1_total_score == 500
    assert outcome.warrior2_total_score == 0


def test_completed_battle_rejects_rounds(yes_traits, no_traits):
    engine = BattleEngine.from_seed(5)
    state = engine.start_battle(QUESTION, yes_traits, no_traits)
    engine.execute_full_battle(state)
    assert state.phase == BattlePhase.COMPLETED
    with pytest.raises(ValueError, match="already completed"):
        engine.execute_round(state)
    with pytest.raises(ValueError, match="already completed"):
        engine.execute_full_battle(state)
    assert len(state.rounds) == 5


def test_full_mode_finishes_partially_played_battle(yes_traits, no_traits):
    engine = BattleEngine.from_seed(6)
    state = engine.start_battle(QUESTION, yes_traits, no_traits)
    engine.execute_round(state)
    engine.execute_round(state)
    outcome = engine.execute_full_battle(state)
    assert len(outcome.rounds) == 5


def test_narrator_move_mismatch_raises(yes_traits, no_traits):
    engine = BattleEngine(rng=random.Random(1), narrator=WrongMoveNarrator())
    state = engine.start_battle(QUESTION, yes_traits, no_traits)
    with pytest.raises(ValueError, match="engine selected"):
        engine.execute_round(state)
    assert state.rounds == []


def test_narrator_failure_rewinds_rng(yes_traits, no_traits):
    engine = BattleEngine(rng=random.Random(21), narrator=WrongMoveNarrator())
    state = engine.start_battle(QUESTION, yes_traits, no_traits)
    with pytest.raises(ValueError):
        engine.execute_round(state)

    engine.narrator = TemplateNarrator()
    retried = engine.execute_round(state)

    fresh = BattleEngine(rng=random.Random(21)).run_battle(QUESTION, yes_traits, no_traits).rounds[0]
    assert (retried.warrior1.move, retried.warrior2.move) == (fresh.warrior1.move, fresh.warrior2.move)
    assert retried.warrior1_breakdown == fresh.warrior1_breakdown
    assert retried.warrior2_breakdown == fresh.warrior2_breakdown


def test_confidences_within_bounds(yes_traits, no_traits):
    outcome = BattleEngine.from_seed(10).run_battle(QUESTION, yes_traits, no_traits)
    for r in outcome.rounds:
        assert 10 <= r.warrior1.confidence <= 95
        assert 10 <= r.warrior2.confidence <= 95


# ======================================================================
# Judge reasoning
# ======================================================================


def _arg(move, relevance):
    evidence = [DebateEvidence(type="data", source="s", title="t", snippet="x", relevance=relevance)]
    return GeneratedArgument(argument="", evidence=evidence, confidence=50, move=move, reasoning="")


def _score(final, multiplier=1.0):
    return ScoreBreakdown(
        base_score=70, trait_bonus=0.1, move_multiplier=multiplier, counter_bonus=0, final_score=final
    )


def test_judge_reasoning_counter_and_verdict():
    engine = BattleEngine(rng=random.Random(0))
    text = engine.judge_reasoning(
        _arg(DebateMove.STRIKE, 70),
        _arg(DebateMove.DODGE, 72),
        _score(95, 1.3),
        _score(60),
        "warrior1",
    )
    assert text.startswith("YES used STRIKE while NO used DODGE.")
    assert "YES's STRIKE effectively countered NO's DODGE." in text
    assert "stronger supporting evidence" not in text
    assert text.endswith("Round goes to YES (95 vs 60).")


def test_judge_reasoning_evidence_gap_and_draw():
    engine = BattleEngine(rng=random.Random(0))
    text = engine.judge_reasoning(
        _arg(DebateMove.TAUNT, 60),
        _arg(DebateMove.TAUNT, 85),
        _score(70),
        _score(70),
        "draw",
    )
    assert "NO presented stronger supporting evidence." in text
    assert "countered" not in text
    assert text.endswith("Round is a draw (70 vs 70).")


def test_judge_reasoning_market_context():
    engine = BattleEngine(rng=random.Random(0))
    market = RealMarketData(yes_price=32.5, no_price=67.5, volume="250000", end_time="2030-01-01T00:00:00Z")
    text = engine.judge_reasoning(
        _arg(DebateMove.SPECIAL, 70),
        _arg(DebateMove.STRIKE, 70),
        _score(40, 0.7),
        _score(90, 1.3),
        "warrior2",
        market,
    )
    assert "NO's STRIKE effectively countered YES's SPECIAL." in text
    assert "prices YES at 32.5%, leaning NO." in text
    assert text.endswith("Round goes to NO (90 vs 40).")


def test_battle_with_market_data(yes_traits, no_traits):
    market = RealMarketData(
        yes_price=61.0,
        no_price=39.0,
        volume="1500000",
        end_time="2030-06-30T00:00:00Z",
        source="kalshi",
        category="Economics",
    )
    outcome = BattleEngine.from_seed(31).run_battle(QUESTION, yes_traits, no_traits, "kalshi", market)
    assert all("prices YES at 61.0%" in r.judge_reasoning for r in outcome.rounds)
    assert all(any(e.type == "market" for e in r.warrior1.evidence) for r in outcome.rounds)
