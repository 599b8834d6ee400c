"""REST endpoint for Elo rating updates."""

from fastapi import APIRouter
from pydantic import BaseModel, Field

from prediction_arena.services.scorers.elo_rating import EloRatingUpdater

router = APIRouter(prefix="/api/ratings", tags=["ratings"])

_updater = EloRatingUpdater()


class EloRequest(BaseModel):
    # For draws, winner/loser are simply the two sides in order
    winner_rating: int = Field(ge=0)
    loser_rating: int = Field(ge=0)
    draw: bool = False


@router.post("/elo")
async def update_elo(body: EloRequest):
    """Compute new ratings after a battle."""
    if body.draw:
        return _updater.update_ratings_draw(body.winner_rating, body.loser_rating)
    return _updater.update_ratings(body.winner_rating, body.loser_rating)
