"""
Combat simulation API routes.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException

from voidloot.core.exceptions import CatalogError

from ..dependencies import get_combat_service
from ..schemas.combat import PresetSchema, SimulateCombatRequest, SimulationResultSchema
from ..services.combat_service import CombatService

router = APIRouter()


@router.post("/simulate", response_model=SimulationResultSchema)
async def simulate_combat(
    request: SimulateCombatRequest,
    service: CombatService = Depends(get_combat_service),
):
    """
    Simulate a matchup.

    Run N headless battles and return aggregate statistics with a balance
    rating.
    """
    try:
        return service.simulate(request)
    except CatalogError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/single")
async def single_combat(
    request: SimulateCombatRequest,
    service: CombatService = Depends(get_combat_service),
) -> Dict[str, Any]:
    """Run a single battle (1 iteration) and return its event stream."""
    try:
        result = service.single_battle(request)
    except CatalogError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return result.to_dict(include_events=True)


@router.get("/presets", response_model=List[PresetSchema])
async def list_presets(service: CombatService = Depends(get_combat_service)):
    """Build presets available for balance testing."""
    return service.list_presets()
