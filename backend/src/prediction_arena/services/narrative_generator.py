"""Template-based argument and evidence text for debate rounds.

The battle engine decides the move; a narrative generator only dresses it
up as text. Any object satisfying ``NarrativeGenerator`` can be plugged in
(e.g. an LLM-backed writer), as long as it reports back the move it was given.
"""

import random
from datetime import datetime, timezone
from typing import Optional, Protocol, Sequence

from prediction_arena.models.battle import (
    DebateContext,
    DebateEvidence,
    EvidenceType,
    GeneratedArgument,
    RealMarketData,
    Side,
)
from prediction_arena.models.moves import DebateMove
from prediction_arena.models.traits import WarriorTraits
from prediction_arena.services.scorers.confidence_estimator import ConfidenceEstimator


class NarrativeGenerator(Protocol):
    """Produces one side's argument for an already-chosen move."""

    def generate_argument(
        self,
        traits: WarriorTraits,
        context: DebateContext,
        move: DebateMove,
        previous_moves: Sequence[DebateMove] = (),
    ) -> GeneratedArgument: ...


ARGUMENT_TEMPLATES: dict[Side, dict[DebateMove, list[str]]] = {
    "yes": {
        DebateMove.STRIKE: [
            "The evidence points squarely at YES. {evidence} The trajectory is clear.",
            "Here are the hard facts: {evidence} They lead to YES.",
        ],
        DebateMove.TAUNT: [
            "My opponent ignores the obvious. {evidence} Their NO is wishful thinking.",
            "The NO case falls apart under scrutiny. {evidence} Face the reality.",
        ],
        DebateMove.DODGE: [
            "Interesting point, but let's focus on what matters: {evidence}",
            "That concern misses the bigger picture. Consider: {evidence}",
        ],
        DebateMove.SPECIAL: [
            "Here's what everyone is missing: {evidence} It changes everything for YES.",
            "A deeper look reveals: {evidence} The YES case is stronger than it appears.",
        ],
        DebateMove.RECOVER: [
            "Fair point on that weakness, yet the overall picture still says YES: {evidence}",
            "I'll concede that aspect and pivot to the stronger argument: {evidence}",
        ],
    },
    "no": {
        DebateMove.STRIKE: [
            "The data says NO. {evidence} The conclusion is unavoidable.",
            "These are the facts that matter: {evidence} They lead to NO.",
        ],
        DebateMove.TAUNT: [
            "The YES position runs on hope. {evidence} Reality disagrees.",
            "My opponent's optimism ignores this: {evidence} NO holds.",
        ],
        DebateMove.DODGE: [
            "That's one perspective, but consider: {evidence} The NO thesis stands.",
            "An interesting angle, yet the fundamentals point elsewhere: {evidence}",
        ],
        DebateMove.SPECIAL: [
            "Here's the insight others miss: {evidence} It seals the NO case.",
            "Looking deeper: {evidence} NO is underappreciated.",
        ],
        DebateMove.RECOVER: [
            "A fair critique, but the NO thesis is intact: {evidence}",
            "Valid concern, yet the weight of evidence still says NO: {evidence}",
        ],
    },
}

FALLBACK_SOURCES: dict[EvidenceType, list[str]] = {
    "news": ["Reuters", "Bloomberg", "AP News", "Financial Times"],
    "data": ["Federal Reserve", "Bureau of Labor Statistics", "World Bank"],
    "expert": ["Sector Research Desk", "University Study", "Industry Analysts"],
    "historical": ["Historical Records", "Past Events Database"],
    "market": ["Prediction Market Data", "Trading Volume Analysis"],
}

FALLBACK_SNIPPETS: dict[Side, list[str]] = {
    "yes": [
        "Recent trends strongly support this outcome.",
        "Multiple indicators point to a positive resolution.",
        "Historical precedent favors this result.",
    ],
    "no": [
        "Current data suggests significant headwinds.",
        "Several factors make this outcome unlikely.",
        "Similar situations have historically failed.",
    ],
}

SOURCE_NAMES = {"polymarket": "Polymarket", "kalshi": "Kalshi"}

EVIDENCE_LUCK_BONUS = 20  # Max relevance added by luck
MAX_RELEVANCE = 100
HIGH_VOLUME_THRESHOLD = 100_000


def format_volume(volume: str) -> str:
    """Format a volume string for display (e.g. "1500000" -> "1.5M")."""
    try:
        num = float(volume)
    except ValueError:
        return volume
    if num >= 1_000_000:
        return f"{num / 1_000_000:.1f}M"
    if num >= 1_000:
        return f"{num / 1_000:.0f}K"
    return f"{num:.0f}"


def _keywords(question: str) -> str:
    return " ".join([w for w in question.split() if len(w) > 4][:3])


class TemplateNarrator:
    """Default narrative generator built from canned templates.

    Uses its own RNG so text choices never shift the scoring draws.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        confidence_estimator: Optional[ConfidenceEstimator] = None,
        evidence_count: int = 2,
    ):
        self.rng = rng or random.Random()
        self.confidence_estimator = confidence_estimator or ConfidenceEstimator()
        self.evidence_count = evidence_count

    def generate_argument(
        self,
        traits: WarriorTraits,
        context: DebateContext,
        move: DebateMove,
        previous_moves: Sequence[DebateMove] = (),
    ) -> GeneratedArgument:
        """Write the argument for a move the engine already selected."""
        evidence = self.generate_evidence(traits, context)

        template = self.rng.choice(ARGUMENT_TEMPLATES[context.side][move])
        argument = template.format(evidence=" Furthermore, ".join(e.snippet for e in evidence))

        is_winning = self.confidence_estimator.is_winning(context.previous_rounds, context.side)
        confidence = self.confidence_estimator.estimate_confidence(
            traits, move, context.round_number, is_winning
        )

        reasoning = (
            f"Selected {move.value} based on traits "
            f"(STR:{traits.strength}, WIT:{traits.wit}, CHA:{traits.charisma}). "
            f"Evidence quality: {evidence[0].relevance if evidence else 0}. "
        )
        if context.opponent_last_move is not None:
            reasoning += f"Opponent used {context.opponent_last_move.value} last round. "
        if previous_moves:
            reasoning += f"History: {', '.join(m.value for m in previous_moves)}. "
        reasoning += f"Round {context.round_number}/5."

        return GeneratedArgument(
            argument=argument,
            evidence=evidence,
            confidence=confidence,
            move=move,
            reasoning=reasoning,
        )

    def generate_evidence(self, traits: WarriorTraits, context: DebateContext) -> list[DebateEvidence]:
        """Evidence sorted by relevance, strongest first."""
        if context.market_data is not None:
            evidence = self._market_evidence(traits, context, context.market_data)
        else:
            evidence = self._fallback_evidence(traits, context)
        return sorted(evidence, key=lambda e: e.relevance, reverse=True)

    def _relevance(self, floor: int, spread: int, traits: WarriorTraits) -> int:
        quality_bonus = traits.fraction("luck") * EVIDENCE_LUCK_BONUS
        return min(MAX_RELEVANCE, round(floor + quality_bonus + self.rng.random() * spread))

    def _fallback_evidence(self, traits: WarriorTraits, context: DebateContext) -> list[DebateEvidence]:
        evidence = []
        keywords = _keywords(context.market_question)
        for _ in range(self.evidence_count):
            evidence_type = self.rng.choice(list(FALLBACK_SOURCES))
            stance = "bullish" if context.side == "yes" else "bearish"
            evidence.append(
                DebateEvidence(
                    type=evidence_type,
                    source=self.rng.choice(FALLBACK_SOURCES[evidence_type]),
                    title=f"{evidence_type.title()} signals {stance} on {keywords}".strip(),
                    snippet=self.rng.choice(FALLBACK_SNIPPETS[context.side]),
                    relevance=self._relevance(60, 20, traits),
                )
            )
        return evidence

    def _market_evidence(
        self, traits: WarriorTraits, context: DebateContext, md: RealMarketData
    ) -> list[DebateEvidence]:
        side = context.side
        price = md.yes_price if side == "yes" else md.no_price
        opposing = md.no_price if side == "yes" else md.yes_price
        source_name = SOURCE_NAMES.get(md.source, md.source)

        evidence = [self._price_evidence(traits, side, price, opposing, source_name, md)]
        if self.evidence_count >= 2:
            evidence.append(self._secondary_evidence(traits, side, source_name, md))
        for _ in range(2, self.evidence_count):
            category = md.category or "General"
            evidence.append(
                DebateEvidence(
                    type="expert",
                    source=f"{category} Domain Analysis",
                    title=f"{category} sector signals on {_keywords(context.market_question)}",
                    snippet=(
                        f"Sector indicators in {category} line up with the YES outcome."
                        if side == "yes"
                        else f"{category} sector history suggests the market is overly optimistic."
                    ),
                    relevance=self._relevance(55, 15, traits),
                )
            )
        return evidence

    def _price_evidence(
        self,
        traits: WarriorTraits,
        side: Side,
        price: float,
        opposing: float,
        source_name: str,
        md: RealMarketData,
    ) -> DebateEvidence:
        label = side.upper()
        style = traits.dominant_style_trait
        if style == "wit":
            snippet = (
                f"The {price:.1f}% implied probability on {source_name} against {opposing:.1f}% "
                f"is a clear odds ratio in favor of {label}."
            )
        elif style == "charisma":
            snippet = (
                f"{source_name} traders have spoken: {price:.1f}% are backing {label}. "
                f"That is conviction backed by real money."
            )
        elif style == "strength":
            snippet = f"{price:.1f}% {label} on {source_name}. The numbers don't negotiate."
        else:
            snippet = (
                f"Even after pricing in known risks, {source_name} holds {label} at {price:.1f}%. "
                f"The probability-weighted case still supports it."
            )

        if md.cross_platform_price is not None and md.cross_platform_source:
            cross_name = SOURCE_NAMES.get(md.cross_platform_source, md.cross_platform_source)
            snippet += f" Cross-platform: {cross_name} prices this at {md.cross_platform_price:.1f}% YES."

        return DebateEvidence(
            type="market",
            source=f"{source_name} Live Data",
            title=f"{source_name} market pricing: {price:.1f}% {label}",
            snippet=snippet,
            relevance=self._relevance(75, 10, traits),
            simulated=False,
        )

    def _secondary_evidence(
        self, traits: WarriorTraits, side: Side, source_name: str, md: RealMarketData
    ) -> DebateEvidence:
        label = side.upper()
        if md.spread is not None and md.cross_platform_source:
            cross_name = SOURCE_NAMES.get(md.cross_platform_source, md.cross_platform_source)
            return DebateEvidence(
                type="data",
                source="Cross-Platform Analysis",
                title=f"{md.spread:.1f}% price spread between {source_name} and {cross_name}",
                snippet=(
                    f"A {md.spread:.1f}% spread between {source_name} and {cross_name} shows the "
                    f"market has not converged, and {label} benefits from that uncertainty."
                ),
                relevance=self._relevance(70, 15, traits),
                simulated=False,
            )

        try:
            high_volume = float(md.volume) > HIGH_VOLUME_THRESHOLD
        except ValueError:
            high_volume = False

        if high_volume:
            volume = format_volume(md.volume)
            return DebateEvidence(
                type="data",
                source=f"{source_name} Trading Data",
                title=f"${volume} in trading volume",
                snippet=(
                    f"With ${volume} traded, this market has real price discovery and the "
                    f"{label} price reflects informed conviction."
                ),
                relevance=self._relevance(65, 15, traits),
                simulated=False,
            )

        days = self._days_remaining(md.end_time)
        return DebateEvidence(
            type="data",
            source="Market Timeline Analysis",
            title=f"{days} days until resolution",
            snippet=(
                f"With {days} days remaining there is ample time for the {label} thesis to play out."
                if days > 30
                else f"Only {days} days remain; late-stage prices are highly informative for {label}."
            ),
            relevance=self._relevance(60, 15, traits),
            simulated=False,
        )

    @staticmethod
    def _days_remaining(end_time: str) -> int:
        try:
            end = datetime.fromisoformat(end_time.replace("Z", "+00:00"))
        except ValueError:
            return 0
        if end.tzinfo is None:
            end = end.replace(tzinfo=timezone.utc)
        seconds = (end - datetime.now(timezone.utc)).total_seconds()
        return max(0, round(seconds / 86400))
