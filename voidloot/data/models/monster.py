"""Monster and maledict affix data models for Voidloot."""

from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, Field

from .enums import CombatTrigger, MonsterRarity, StatType


class MaledictEffectType(StrEnum):
    """What a maledict does when its trigger fires."""
    REFLECT_SHIELD = "reflect_shield"  # shields the monster for one turn
    BURN_ON_HIT = "burn_on_hit"  # burns the player
    SHUFFLE_TURN = "shuffle_turn"  # shuffles the turn queue
    GROUND_HAZARD = "ground_hazard"  # poisons the player


class MaledictEffect(BaseModel):
    """Triggered behavior attached to a maledict."""
    type: MaledictEffectType
    chance: float = Field(default=1.0, ge=0.0, le=1.0)
    value: float = Field(default=0.0, description="Effect strength (fraction of max HP for DoTs)")
    duration: int = Field(default=3, ge=1, description="Turns the applied status lasts")


class MaledictAffix(BaseModel):
    """Elite monster modifier."""
    id: str = Field(..., description="Unique identifier (lowercase)")
    name: str = Field(..., description="Display name")
    description: str = ""
    icon: str = ""
    stat_modifiers: dict[StatType, float] = Field(
        default_factory=dict,
        description="Percent bonus for attributes/damage/armor, flat points for chance stats",
    )
    trigger: Optional[CombatTrigger] = None
    trigger_effect: Optional[MaledictEffect] = None


class Monster(BaseModel):
    """A generated enemy."""
    id: str
    name: str
    level: int = Field(..., ge=1)
    rarity: MonsterRarity = MonsterRarity.COMMON

    strength: int = 0
    dexterity: int = 0
    intelligence: int = 0
    vitality: int = 0

    max_hp: int = Field(..., ge=1)
    current_hp: int
    damage: int = 0
    armor: int = 0
    crit_chance: float = Field(default=0.0, description="Percent")
    dodge_chance: float = Field(default=0.0, description="Percent")
    life_steal: float = Field(default=0.0, description="Percent")
    thorns: float = Field(default=0.0, description="Percent")

    icon: str = ""
    image_url: Optional[str] = None
    maledicts: list[MaledictAffix] = Field(default_factory=list, max_length=5)

    @property
    def is_alive(self) -> bool:
        return self.current_hp > 0

    def has_maledict(self, affix_id: str) -> bool:
        """Check if the monster carries a given affix."""
        return any(m.id == affix_id for m in self.maledicts)
