"""Character, derived stats and persisted state models for Voidloot."""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field

from .enums import ItemSlot, PassiveTheme, StatType, Terrain
from .item import Item
from .skill import PassiveSkill


class BaseAttributes(BaseModel):
    """The four allocatable attributes."""
    strength: int = 10
    dexterity: int = 10
    intelligence: int = 10
    vitality: int = 10


class ActiveEffect(BaseModel):
    """Cross-battle buff or debuff (shrines, traps, curses)."""
    id: str
    name: str
    description: str = ""
    stat_type: StatType
    value: float = Field(..., description="Signed stat contribution")
    duration: int = Field(..., ge=0, description="Battles remaining")
    is_debuff: bool = False
    icon: str = ""


class BuildLoadout(BaseModel):
    """A saved set of equipped skill ids."""
    id: str
    name: str
    skill_ids: list[str] = Field(default_factory=list, max_length=6)


class PlayerStats(BaseModel):
    """Derived snapshot produced by the stat pipeline."""
    strength: float
    dexterity: float
    intelligence: float
    vitality: float
    damage: float
    armor: float
    magic_find: float
    life_steal: float = 0.0
    crit_chance: float = Field(default=0.0, description="Percent, capped at 100")
    dodge_chance: float = Field(default=0.0, description="Percent, capped at 75")
    attack_speed: float = 0.0
    thorns: float = 0.0
    max_hp: float = 100.0
    level: int = 1
    stat_points: int = 0
    active_set_bonuses: list[PassiveTheme] = Field(default_factory=list)
    active_synergies: list[str] = Field(default_factory=list)
    equipped_skill_ids: list[str] = Field(default_factory=list)
    active_skill_ids: list[str] = Field(default_factory=list, description="Skills that contributed, after legacy fallback")


class BattleEnvironment(BaseModel):
    """Where and when a battle is fought."""
    terrain: Optional[Terrain] = None
    is_night: bool = False


class MapNodeState(BaseModel):
    """Persisted progress of one world map node."""
    id: str
    is_unlocked: bool = False
    is_cleared: bool = False
    connections: list[str] = Field(default_factory=list)


class CharacterState(BaseModel):
    """Everything a save slot persists."""
    level: int = Field(default=1, ge=1)
    xp: int = Field(default=0, ge=0)
    gold: int = Field(default=0, ge=0)
    base_attributes: BaseAttributes = Field(default_factory=BaseAttributes)
    stat_points: int = Field(default=0, ge=0)
    skill_points: int = Field(default=0, ge=0)
    passive_skills: list[PassiveSkill] = Field(default_factory=list)
    equipped_skill_ids: list[str] = Field(default_factory=list, max_length=6)
    loadouts: list[BuildLoadout] = Field(default_factory=list)
    active_effects: list[ActiveEffect] = Field(default_factory=list)
    inventory: list[Optional[Item]] = Field(default_factory=lambda: [None] * 40)
    equipment: dict[ItemSlot, Optional[Item]] = Field(default_factory=dict)
    map_nodes: list[MapNodeState] = Field(default_factory=list)
    current_area_id: str = "town"
    area_progress: int = Field(default=0, ge=0, le=100)
    world_difficulty: float = 1.0
    merchant_stock: list[Item] = Field(default_factory=list)
    ground_items: list[Item] = Field(default_factory=list)
    hero_image_url: Optional[str] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def get_passive(self, skill_id: str) -> Optional[PassiveSkill]:
        """Owned passive by id."""
        for skill in self.passive_skills:
            if skill.id == skill_id:
                return skill
        return None

    def equipped_items(self) -> list[Item]:
        return [item for item in self.equipment.values() if item is not None]
