"""Tests for the template narrative generator."""

import random

import pytest

from prediction_arena.models.battle import DebateContext, RealMarketData
from prediction_arena.models.moves import DebateMove
from prediction_arena.models.traits import WarriorTraits
from prediction_arena.services.narrative_generator import TemplateNarrator, format_volume
from prediction_arena.services.scorers.confidence_estimator import ConfidenceEstimator

QUESTION = "Will the spacecraft complete its lunar landing this year?"


@pytest.fixture
def narrator():
    return TemplateNarrator(rng=random.Random(99))


@pytest.fixture
def market_data():
    return RealMarketData(
        yes_price=64.0,
        no_price=36.0,
        volume="1500000",
        end_time="2031-01-01T00:00:00Z",
        source="polymarket",
        category="Science",
    )


def _context(side="yes", round_number=1, market_data=None, opponent_last_move=None):
    return DebateContext(
        market_question=QUESTION,
        market_source="polymarket",
        side=side,
        round_number=round_number,
        opponent_last_move=opponent_last_move,
        market_data=market_data,
    )


@pytest.mark.parametrize("move", list(DebateMove))
def test_argument_keeps_engine_move(narrator, move):
    argument = narrator.generate_argument(WarriorTraits.neutral(), _context(), move)
    assert argument.move == move
    assert argument.argument


def test_confidence_matches_estimator(narrator):
    traits = WarriorTraits(strength=9000, wit=3000, charisma=6000, defence=2000, luck=7000)
    argument = narrator.generate_argument(traits, _context(round_number=5), DebateMove.STRIKE)
    expected = ConfidenceEstimator().estimate_confidence(traits, DebateMove.STRIKE, 5, False)
    assert argument.confidence == expected


def test_reasoning_mentions_history(narrator):
    argument = narrator.generate_argument(
        WarriorTraits.neutral(),
        _context(round_number=3, opponent_last_move=DebateMove.DODGE),
        DebateMove.TAUNT,
        [DebateMove.STRIKE, DebateMove.SPECIAL],
    )
    assert "Selected TAUNT" in argument.reasoning
    assert "Opponent used DODGE last round." in argument.reasoning
    assert "History: STRIKE, SPECIAL." in argument.reasoning
    assert argument.reasoning.endswith("Round 3/5.")


# ======================================================================
# Evidence
# ======================================================================


def test_evidence_sorted_strongest_first(narrator):
    for side in ("yes", "no"):
        evidence = narrator.generate_evidence(WarriorTraits.neutral(), _context(side=side))
        relevances = [e.relevance for e in evidence]
        assert relevances == sorted(relevances, reverse=True)


def test_fallback_evidence_is_simulated(narrator):
    evidence = narrator.generate_evidence(WarriorTraits.neutral(), _context())
    assert len(evidence) == 2
    assert all(e.simulated for e in evidence)
    assert all(e.type != "market" for e in evidence)


def test_luck_raises_fallback_relevance():
    lucky = WarriorTraits(strength=5000, wit=5000, charisma=5000, defence=5000, luck=10000)
    narrator = TemplateNarrator(rng=random.Random(3))
    for _ in range(20):
        for e in narrator.generate_evidence(lucky, _context()):
            assert 80 <= e.relevance <= 100


def test_market_evidence_uses_live_prices(narrator, market_data):
    evidence = narrator.generate_evidence(WarriorTraits.neutral(), _context(market_data=market_data))
    price = next(e for e in evidence if e.type == "market")
    assert not price.simulated
    assert "64.0% YES" in price.title
    assert price.source == "Polymarket Live Data"

    volume = next(e for e in evidence if e.type == "data")
    assert "$1.5M" in volume.title


def test_market_evidence_for_no_side(narrator, market_data):
    evidence = narrator.generate_evidence(
        WarriorTraits.neutral(), _context(side="no", market_data=market_data)
    )
    price = next(e for e in evidence if e.type == "market")
    assert "36.0% NO" in price.title


def test_cross_platform_spread_evidence(narrator):
    md = RealMarketData(
        yes_price=55.0,
        no_price=45.0,
        volume="5000",
        end_time="2031-01-01T00:00:00Z",
        cross_platform_price=49.0,
        cross_platform_source="kalshi",
        spread=6.0,
    )
    evidence = narrator.generate_evidence(WarriorTraits.neutral(), _context(market_data=md))
    titles = [e.title for e in evidence]
    assert any("6.0% price spread between Polymarket and Kalshi" in t for t in titles)
    price = next(e for e in evidence if e.type == "market")
    assert "Cross-platform: Kalshi prices this at 49.0% YES." in price.snippet


def test_extra_evidence_count(market_data):
    narrator = TemplateNarrator(rng=random.Random(5), evidence_count=3)
    evidence = narrator.generate_evidence(WarriorTraits.neutral(), _context(market_data=market_data))
    assert len(evidence) == 3
    assert any(e.type == "expert" and e.source == "Science Domain Analysis" for e in evidence)


def test_same_seed_same_text(market_data):
    traits = WarriorTraits.neutral()
    first = TemplateNarrator(rng=random.Random(11)).generate_argument(
        traits, _context(market_data=market_data), DebateMove.SPECIAL
    )
    second = TemplateNarrator(rng=random.Random(11)).generate_argument(
        traits, _context(market_data=market_data), DebateMove.SPECIAL
    )
    assert first == second


@pytest.mark.parametrize(
    "volume,expected",
    [
        ("1500000", "1.5M"),
        ("150000", "150K"),
        ("999", "999"),
        ("n/a", "n/a"),
    ],
)
def test_format_volume(volume, expected):
    assert format_volume(volume) == expected


def test_market_relevance_capped_at_100(market_data):
    lucky = WarriorTraits(strength=5000, wit=5000, charisma=5000, defence=5000, luck=10000)
    narrator = TemplateNarrator(rng=random.Random(8), evidence_count=3)
    for _ in range(50):
        for e in narrator.generate_evidence(lucky, _context(market_data=market_data)):
            assert e.relevance <= 100
