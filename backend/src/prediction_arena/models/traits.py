"""Warrior trait models."""

from dataclasses import dataclass

from prediction_arena.models.moves import MOVE_TRAIT_SCALING, DebateMove

# Trait values are fixed-point with 2 implied decimals (10000 = 100.00%)
MAX_TRAIT_VALUE = 10000
NEUTRAL_TRAIT_VALUE = 5000


@dataclass(frozen=True)
class WarriorTraits:
    """A warrior's five trait scores, read from NFT metadata."""

    strength: int
    wit: int
    charisma: int
    defence: int
    luck: int

    def __post_init__(self):
        for name in ("strength", "wit", "charisma", "defence", "luck"):
            value = getattr(self, name)
            if not 0 <= value <= MAX_TRAIT_VALUE:
                raise ValueError(f"Trait {name}={value} outside 0-{MAX_TRAIT_VALUE}")

    @classmethod
    def neutral(cls) -> "WarriorTraits":
        """All traits at 50.00%."""
        return cls(
            strength=NEUTRAL_TRAIT_VALUE,
            wit=NEUTRAL_TRAIT_VALUE,
            charisma=NEUTRAL_TRAIT_VALUE,
            defence=NEUTRAL_TRAIT_VALUE,
            luck=NEUTRAL_TRAIT_VALUE,
        )

    def fraction(self, trait: str) -> float:
        """Trait value as a 0.0-1.0 fraction."""
        return getattr(self, trait) / MAX_TRAIT_VALUE

    def move_affinity(self, move: DebateMove) -> float:
        """Average of the traits that scale a move, as a 0.0-1.0 fraction."""
        scaling = MOVE_TRAIT_SCALING[move]
        return sum(getattr(self, trait) for trait in scaling) / (len(scaling) * MAX_TRAIT_VALUE)

    @property
    def dominant_style_trait(self) -> str:
        """Highest of wit/charisma/strength/defence; ties resolve in that order."""
        candidates = {
            "wit": self.wit,
            "charisma": self.charisma,
            "strength": self.strength,
            "defence": self.defence,
        }
        return max(candidates, key=candidates.__getitem__)
