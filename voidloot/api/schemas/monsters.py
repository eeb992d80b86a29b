"""
Monster and skill roll API schemas.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from voidloot.data.models import MonsterRarity, PassiveSkill, Rarity

from .common import SeededRequest, SkillRef


class GenerateMonsterRequest(SeededRequest):
    """Monster generation request."""

    level: int = Field(default=1, ge=1)
    difficulty: float = Field(default=1.0, gt=0)
    rarity: Optional[MonsterRarity] = None


class GenerateBossRequest(SeededRequest):
    level: int = Field(default=1, ge=1)
    difficulty: float = Field(default=1.0, gt=0)
    area_name: str = "the Wastes"


class SkillRollRequest(SeededRequest):
    """Passive skill reward roll."""

    owned: List[SkillRef] = Field(default_factory=list)
    exact_rarity: Optional[Rarity] = None
    min_rarity: Optional[Rarity] = None
    exclude_rarities: List[Rarity] = Field(default_factory=list)


class SkillRollResponse(BaseModel):
    skill: PassiveSkill
    is_new: bool
