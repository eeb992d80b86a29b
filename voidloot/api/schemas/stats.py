"""
Stat aggregation API schemas.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from voidloot.data.models import ActiveEffect, BaseAttributes, Item, ItemSlot

from .common import SkillRef


class CalculateStatsRequest(BaseModel):
    """Everything the stat pipeline reads."""

    base_attributes: BaseAttributes = Field(default_factory=BaseAttributes)
    equipment: Dict[ItemSlot, Optional[Item]] = Field(default_factory=dict)
    passive_skills: List[SkillRef] = Field(default_factory=list)
    level: int = Field(default=1, ge=1)
    stat_points: int = Field(default=0, ge=0)
    active_effects: List[ActiveEffect] = Field(default_factory=list)
    equipped_skill_ids: List[str] = Field(default_factory=list, max_length=6)
