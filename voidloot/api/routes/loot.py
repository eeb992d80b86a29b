"""
Loot and merchant API routes.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException

from voidloot.core.exceptions import CatalogError

from ..dependencies import get_game_service
from ..schemas.loot import (
    BundleSchema,
    GenerateLootRequest,
    GenerateLootResponse,
    ItemValueRequest,
    ItemValueResponse,
    OpenBundleRequest,
    OpenBundleResponse,
)
from ..services.game_service import GameService

router = APIRouter()


@router.post("/generate", response_model=GenerateLootResponse)
async def generate_loot(
    request: GenerateLootRequest,
    service: GameService = Depends(get_game_service),
):
    """
    Roll loot drops.

    Each roll may come up empty; only actual drops are returned.
    """
    return service.generate_loot(request)


@router.post("/value", response_model=ItemValueResponse)
async def item_value(
    request: ItemValueRequest,
    service: GameService = Depends(get_game_service),
):
    """Sell value, merchant price and identification cost of an item."""
    return service.item_value(request.item)


@router.get("/bundles", response_model=List[BundleSchema])
async def list_bundles(service: GameService = Depends(get_game_service)):
    """Smuggler bundles on offer."""
    return service.list_bundles()


@router.post("/bundles/{bundle_id}/open", response_model=OpenBundleResponse)
async def open_bundle(
    bundle_id: str,
    request: OpenBundleRequest,
    service: GameService = Depends(get_game_service),
):
    """Open a smuggler bundle. An empty bundle is a valid outcome."""
    try:
        return service.open_bundle(bundle_id, request)
    except CatalogError as e:
        raise HTTPException(status_code=404, detail=str(e))
