"""Business logic services."""

from prediction_arena.services.battle_engine import BattleEngine
from prediction_arena.services.narrative_generator import NarrativeGenerator, TemplateNarrator
from prediction_arena.services.warrior_stats_service import WarriorStatsService

__all__ = [
    "BattleEngine",
    "NarrativeGenerator",
    "TemplateNarrator",
    "WarriorStatsService",
]
