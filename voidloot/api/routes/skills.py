"""
Passive skill API routes.
"""

from fastapi import APIRouter, Depends, HTTPException

from voidloot.core.exceptions import CatalogError

from ..dependencies import get_game_service
from ..schemas.monsters import SkillRollRequest, SkillRollResponse
from ..services.game_service import GameService

router = APIRouter()


@router.post("/roll", response_model=SkillRollResponse)
async def roll_skill(
    request: SkillRollRequest,
    service: GameService = Depends(get_game_service),
):
    """
    Roll a passive skill reward.

    Owned skills come back one rank higher; maxed skills are never offered.
    """
    try:
        return service.roll_skill(request)
    except CatalogError as e:
        raise HTTPException(status_code=404, detail=str(e))
