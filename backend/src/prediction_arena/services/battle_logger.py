"""Diagnostic logging for battle scoring analysis.

Captures per-round score breakdowns and battle outcomes so that move
selection and scoring balance can be analyzed offline.

Usage:
    from prediction_arena.services.battle_logger import BattleLogger

    battle_logger = BattleLogger(enabled=True)
    engine = BattleEngine(battle_logger=battle_logger)
    engine.run_battle(...)

    battle_logger.save()
"""
import json
import logging
import os
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Optional

from prediction_arena.config import settings
from prediction_arena.models.battle import BattleOutcome, RoundResult
from prediction_arena.models.moves import DebateMove
from prediction_arena.models.traits import WarriorTraits

# Configure module logger
module_logger = logging.getLogger("prediction_arena.battle_diagnostics")


class BattleLogger:
    """Captures detailed battle diagnostics for analysis."""

    def __init__(self, output_dir: Optional[Path] = None, enabled: bool = False):
        """Initialize battle logger.

        Args:
            output_dir: Directory to save diagnostic files. Defaults to logs/battles/
            enabled: Whether logging is active. Can be overridden via BATTLE_DIAGNOSTICS env var.
        """
        env_enabled = os.environ.get("BATTLE_DIAGNOSTICS", "").lower()
        if env_enabled == "true":
            enabled = True
        elif env_enabled == "false":
            enabled = False

        self.enabled = enabled
        self.output_dir = output_dir or Path(__file__).parents[4] / "logs" / "battles"
        self.entries: list[dict] = []
        self.battle_id: str = ""
        self._metadata: dict = {}

        if self.enabled:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            module_logger.info(f"Battle diagnostics enabled, output dir: {self.output_dir}")

    def start_session(
        self,
        battle_id: str,
        question: str,
        warrior1_traits: WarriorTraits,
        warrior2_traits: WarriorTraits,
        extra_metadata: Optional[dict] = None,
    ):
        """Initialize a new diagnostic session for one battle."""
        if not self.enabled:
            return

        self.battle_id = battle_id
        self.entries = []
        self._metadata = {
            "battle_id": battle_id,
            "question": question,
            "warrior1_traits": asdict(warrior1_traits),
            "warrior2_traits": asdict(warrior2_traits),
            "started_at": datetime.now().isoformat(),
            **(extra_metadata or {}),
        }

        self.entries.append({
            "event": "session_start",
            "timestamp": datetime.now().isoformat(),
            **self._metadata,
        })

    def log_round(self, result: RoundResult):
        """Log both sides' moves and score breakdowns for a round."""
        if not self.enabled:
            return

        self.entries.append({
            "event": "round",
            "timestamp": datetime.now().isoformat(),
            "round_number": result.round_number,
            "warrior1": {
                "move": result.warrior1.move.value,
                "confidence": result.warrior1.confidence,
                "evidence_quality": result.warrior1.evidence_quality,
                "breakdown": asdict(result.warrior1_breakdown),
            },
            "warrior2": {
                "move": result.warrior2.move.value,
                "confidence": result.warrior2.confidence,
                "evidence_quality": result.warrior2.evidence_quality,
                "breakdown": asdict(result.warrior2_breakdown),
            },
            "round_winner": result.round_winner,
        })

    def log_outcome(self, outcome: BattleOutcome):
        """Log the finalized battle result."""
        if not self.enabled:
            return

        self.entries.append({
            "event": "outcome",
            "timestamp": datetime.now().isoformat(),
            "final_winner": outcome.final_winner,
            "warrior1_total_score": outcome.warrior1_total_score,
            "warrior2_total_score": outcome.warrior2_total_score,
        })

    def log_error(self, error_message: str):
        """Log an error that occurred during a battle."""
        if not self.enabled:
            return

        self.entries.append({
            "event": "error",
            "timestamp": datetime.now().isoformat(),
            "error": error_message,
        })
        module_logger.error(f"Battle error logged: {error_message[:200]}...")

    def save(self, suffix: str = "") -> Optional[Path]:
        """Save diagnostics to JSON file.

        Returns:
            Path to saved file, or None if disabled/empty
        """
        if not self.enabled or not self.entries:
            return None

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        battle_short = self.battle_id[:16] if self.battle_id else "unknown"
        output_path = self.output_dir / f"{battle_short}_{timestamp}{suffix}.json"

        with open(output_path, "w") as f:
            json.dump({
                "metadata": self._metadata,
                "summary": self._compute_summary(),
                "entries": self.entries,
            }, f, indent=2)

        module_logger.info(f"Battle diagnostics saved: {output_path}")
        return output_path

    def _compute_summary(self) -> dict:
        """Compute move usage and counter statistics from logged rounds."""
        rounds = [e for e in self.entries if e["event"] == "round"]

        move_usage = {move.value: 0 for move in DebateMove}
        counters_landed = 0
        countered = 0
        for entry in rounds:
            for side in ("warrior1", "warrior2"):
                move_usage[entry[side]["move"]] += 1
                multiplier = entry[side]["breakdown"]["move_multiplier"]
                if multiplier > 1:
                    counters_landed += 1
                elif multiplier < 1:
                    countered += 1

        round_wins = {"warrior1": 0, "warrior2": 0, "draw": 0}
        for entry in rounds:
            round_wins[entry["round_winner"]] += 1

        return {
            "total_rounds": len(rounds),
            "move_usage": move_usage,
            "counters_landed": counters_landed,
            "countered": countered,
            "round_wins": round_wins,
        }


def create_battle_logger() -> BattleLogger:
    """Battle logger configured from application settings.

    Disabled unless settings.battle_diagnostics or BATTLE_DIAGNOSTICS=true.
    """
    output_dir = Path(settings.diagnostics_dir) if settings.diagnostics_dir else None
    return BattleLogger(output_dir=output_dir, enabled=settings.battle_diagnostics)
