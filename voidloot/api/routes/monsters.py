"""
Monster generation API routes.
"""

from fastapi import APIRouter, Depends

from voidloot.data.models import Monster

from ..dependencies import get_game_service
from ..schemas.monsters import GenerateBossRequest, GenerateMonsterRequest
from ..services.game_service import GameService

router = APIRouter()


@router.post("/generate", response_model=Monster)
async def generate_monster(
    request: GenerateMonsterRequest,
    service: GameService = Depends(get_game_service),
):
    """Generate an encounter monster, optionally forcing its rarity."""
    return service.generate_monster(request)


@router.post("/boss", response_model=Monster)
async def generate_boss(
    request: GenerateBossRequest,
    service: GameService = Depends(get_game_service),
):
    """Generate an area boss."""
    return service.generate_boss(request)
