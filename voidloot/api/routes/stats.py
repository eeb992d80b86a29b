"""
Stat aggregation API routes.
"""

from fastapi import APIRouter, Depends, HTTPException

from voidloot.core.exceptions import CatalogError
from voidloot.data.models import PlayerStats

from ..dependencies import get_game_service
from ..schemas.stats import CalculateStatsRequest
from ..services.game_service import GameService

router = APIRouter()


@router.post("/calculate", response_model=PlayerStats)
async def calculate_stats(
    request: CalculateStatsRequest,
    service: GameService = Depends(get_game_service),
):
    """Derive combat stats from attributes, gear, passives and effects."""
    try:
        return service.calculate_stats(request)
    except CatalogError as e:
        raise HTTPException(status_code=404, detail=str(e))
