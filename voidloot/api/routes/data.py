"""
Static data API routes.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException

from voidloot.data.loaders import (
    get_maledict_by_id,
    get_skill_by_id,
    load_maledicts,
    load_passive_skills,
    load_set_bonuses,
    load_synergies,
)
from voidloot.data.models import PassiveTheme, Rarity

router = APIRouter()


# === Passive Skills ===


@router.get("/skills")
async def get_all_skills(
    theme: Optional[PassiveTheme] = None,
    rarity: Optional[Rarity] = None,
) -> List[Dict[str, Any]]:
    """Get all passive skills, optionally filtered by theme and rarity."""
    skills = load_passive_skills()
    if theme is not None:
        skills = [s for s in skills if s.theme == theme]
    if rarity is not None:
        skills = [s for s in skills if s.rarity == rarity]
    return [s.model_dump(mode="json") for s in skills]


@router.get("/skills/{skill_id}")
async def get_skill(skill_id: str) -> Dict[str, Any]:
    """Get specific passive skill by ID."""
    skill = get_skill_by_id(skill_id)
    if skill is None:
        raise HTTPException(status_code=404, detail="Skill not found")
    return skill.model_dump(mode="json")


# === Set Bonuses & Synergies ===


@router.get("/set-bonuses")
async def get_set_bonuses() -> List[Dict[str, Any]]:
    return [b.model_dump(mode="json") for b in load_set_bonuses()]


@router.get("/synergies")
async def get_synergies() -> List[Dict[str, Any]]:
    return [s.model_dump(mode="json") for s in load_synergies()]


# === Maledicts ===


@router.get("/maledicts")
async def get_all_maledicts() -> List[Dict[str, Any]]:
    """Get all monster affixes."""
    return [m.model_dump(mode="json") for m in load_maledicts()]


@router.get("/maledicts/{affix_id}")
async def get_maledict(affix_id: str) -> Dict[str, Any]:
    affix = get_maledict_by_id(affix_id)
    if affix is None:
        raise HTTPException(status_code=404, detail="Maledict not found")
    return affix.model_dump(mode="json")
