"""REST endpoints for running prediction arena battles."""

import logging
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Literal, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from prediction_arena.models.battle import BattleState, RealMarketData
from prediction_arena.models.traits import MAX_TRAIT_VALUE, NEUTRAL_TRAIT_VALUE, WarriorTraits
from prediction_arena.services.battle_engine import BattleEngine
from prediction_arena.services.battle_logger import BattleLogger, create_battle_logger

logger = logging.getLogger(__name__)

# Constants
SESSION_TTL_SECONDS = 60 * 60
SESSION_CLEANUP_INTERVAL_SECONDS = 60

router = APIRouter(prefix="/api/battles", tags=["battles"])


@dataclass
class BattleSession:
    """An in-memory battle and the seeded engine that plays it."""

    engine: BattleEngine
    state: BattleState
    seed: Optional[int] = None
    created_at: float = field(default_factory=time.time)
    last_access: float = field(default_factory=time.time)


# In-memory session storage with thread-safe access
_sessions: dict[str, BattleSession] = {}
_sessions_lock = threading.Lock()
_session_locks: dict[str, threading.Lock] = {}
_session_loggers: dict[str, BattleLogger] = {}  # Diagnostic loggers per battle
_cleanup_lock = threading.Lock()
_last_cleanup = 0.0


def _is_session_expired(session: BattleSession, now: float) -> bool:
    return (now - session.last_access) >= SESSION_TTL_SECONDS


def _touch_session(session: BattleSession, now: float) -> None:
    session.last_access = now


def _prune_expired_sessions(now: float | None = None) -> None:
    """Remove expired sessions opportunistically."""
    global _last_cleanup
    now = now or time.time()
    if now - _last_cleanup < SESSION_CLEANUP_INTERVAL_SECONDS:
        return

    with _cleanup_lock:
        if now - _last_cleanup < SESSION_CLEANUP_INTERVAL_SECONDS:
            return

        expired: list[str] = []
        with _sessions_lock:
            for battle_id, session in _sessions.items():
                lock = _session_locks.get(battle_id)
                if lock and lock.locked():
                    continue
                if _is_session_expired(session, now):
                    expired.append(battle_id)

            for battle_id in expired:
                if battle_id in _session_loggers:
                    _session_loggers[battle_id].save(suffix="_expired")
                    _session_loggers.pop(battle_id, None)
                _sessions.pop(battle_id, None)
                _session_locks.pop(battle_id, None)

        if expired:
            logger.info(f"Pruned {len(expired)} expired battle sessions")
        _last_cleanup = now


def _get_session_with_lock(battle_id: str) -> tuple[BattleSession, threading.Lock]:
    """Fetch session and its lock, creating the lock if needed."""
    _prune_expired_sessions()
    with _sessions_lock:
        session = _sessions.get(battle_id)
        if not session:
            raise HTTPException(status_code=404, detail="Battle not found")
        lock = _session_locks.get(battle_id)
        if lock is None:
            lock = threading.Lock()
            _session_locks[battle_id] = lock

    return session, lock


class TraitsPayload(BaseModel):
    strength: int = Field(NEUTRAL_TRAIT_VALUE, ge=0, le=MAX_TRAIT_VALUE)
    wit: int = Field(NEUTRAL_TRAIT_VALUE, ge=0, le=MAX_TRAIT_VALUE)
    charisma: int = Field(NEUTRAL_TRAIT_VALUE, ge=0, le=MAX_TRAIT_VALUE)
    defence: int = Field(NEUTRAL_TRAIT_VALUE, ge=0, le=MAX_TRAIT_VALUE)
    luck: int = Field(NEUTRAL_TRAIT_VALUE, ge=0, le=MAX_TRAIT_VALUE)

    def to_traits(self) -> WarriorTraits:
        return WarriorTraits(**self.model_dump())


class MarketDataPayload(BaseModel):
    yes_price: float = Field(ge=0, le=100)
    no_price: float = Field(ge=0, le=100)
    volume: str = "0"
    end_time: str
    category: Optional[str] = None
    cross_platform_price: Optional[float] = Field(None, ge=0, le=100)
    cross_platform_source: Optional[Literal["polymarket", "kalshi"]] = None
    spread: Optional[float] = None


class CreateBattleRequest(BaseModel):
    question: str = Field(min_length=1)
    source: Literal["polymarket", "kalshi"] = "polymarket"
    warrior1_traits: TraitsPayload = Field(default_factory=TraitsPayload)
    warrior2_traits: TraitsPayload = Field(default_factory=TraitsPayload)
    market_data: Optional[MarketDataPayload] = None
    seed: Optional[int] = None


class ExecuteRequest(BaseModel):
    mode: Literal["round", "full"] = "round"


@router.post("", status_code=201)
async def create_battle(body: CreateBattleRequest):
    """Create a new battle session."""
    _prune_expired_sessions()

    battle_id = f"battle_{uuid.uuid4().hex[:12]}"
    battle_logger = create_battle_logger()
    engine = (
        BattleEngine.from_seed(body.seed, battle_logger=battle_logger)
        if body.seed is not None
        else BattleEngine(battle_logger=battle_logger)
    )

    market_data = None
    if body.market_data is not None:
        market_data = RealMarketData(source=body.source, **body.market_data.model_dump())

    try:
        state = engine.start_battle(
            question=body.question,
            warrior1_traits=body.warrior1_traits.to_traits(),
            warrior2_traits=body.warrior2_traits.to_traits(),
            source=body.source,
            market_data=market_data,
            battle_id=battle_id,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    session = BattleSession(engine=engine, state=state, seed=body.seed)
    now = time.time()
    _touch_session(session, now)
    with _sessions_lock:
        _sessions[battle_id] = session
        _session_locks[battle_id] = threading.Lock()
        _session_loggers[battle_id] = battle_logger

    return {"battle": state.to_dict(), "seed": body.seed}


@router.get("/{battle_id}")
async def get_battle(battle_id: str):
    """Current state of a battle."""
    session, lock = _get_session_with_lock(battle_id)
    with lock:
        _touch_session(session, time.time())
        response = {"battle": session.state.to_dict()}
        if session.state.is_complete:
            response["outcome"] = session.state.outcome().to_dict()
        return response


@router.post("/{battle_id}/execute")
async def execute_battle(battle_id: str, body: ExecuteRequest):
    """Execute the next round, or every remaining round."""
    session, lock = _get_session_with_lock(battle_id)
    with lock:
        now = time.time()
        if _is_session_expired(session, now):
            raise HTTPException(status_code=404, detail="Battle expired")
        _touch_session(session, now)

        engine, state = session.engine, session.state
        try:
            if body.mode == "full":
                outcome = engine.execute_full_battle(state)
                response = {
                    "battle": state.to_dict(),
                    "result": outcome.to_dict(),
                    "message": "Battle completed!",
                }
            else:
                round_result = engine.execute_round(state)
                response = {
                    "battle": state.to_dict(),
                    "result": round_result.to_dict(),
                    "message": f"Round {round_result.round_number} executed",
                }
                if state.is_complete:
                    response["outcome"] = state.outcome().to_dict()
        except ValueError as e:
            logger.warning(f"Battle {battle_id} execute ({body.mode}) rejected: {e}")
            if battle_id in _session_loggers:
                _session_loggers[battle_id].log_error(str(e))
            raise HTTPException(status_code=400, detail=str(e))

        if state.is_complete and battle_id in _session_loggers:
            _session_loggers[battle_id].save()

        return response
