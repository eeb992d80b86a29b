"""Passive skill, set bonus and synergy data models for Voidloot."""

from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, Field, computed_field

from .enums import CombatTrigger, PassiveTheme, Rarity, StatType, StatusType
from .item import ItemStat


class ProcEffectType(StrEnum):
    """What a skill proc does when it fires."""
    DAMAGE = "damage"  # value x player damage
    MULTI_HIT = "multi_hit"  # value x damage just dealt
    HEAL = "heal"  # value x max HP
    CLEANSE = "cleanse"
    SHIELD = "shield"
    BUFF = "buff"
    DEBUFF = "debuff"


class ProcConditionType(StrEnum):
    """Preconditions a proc checks before firing."""
    HP_BELOW = "hp_below"
    HP_ABOVE = "hp_above"
    ENEMY_HP_BELOW = "enemy_hp_below"
    TURN_COUNT_MULTIPLE = "turn_count_multiple"


class ProcCostType(StrEnum):
    """Resources a proc consumes."""
    HP_PERCENT = "hp_percent"
    HP_FLAT = "hp_flat"


class ProcCondition(BaseModel):
    type: ProcConditionType
    value: float


class ProcCost(BaseModel):
    type: ProcCostType
    value: float = Field(..., ge=0.0)


class ProcEffect(BaseModel):
    """Outcome of a skill proc."""
    type: ProcEffectType
    value: float = 0.0
    status: Optional[StatusType] = Field(default=None, description="Status applied by buff/debuff procs")
    duration: Optional[int] = Field(default=None, ge=1)


class ProcDefinition(BaseModel):
    """Triggered behavior of a passive skill."""
    trigger: CombatTrigger
    chance: float = Field(default=1.0, ge=0.0, le=1.0)
    cooldown: int = Field(default=0, ge=0, description="Player turns between activations")
    conditions: list[ProcCondition] = Field(default_factory=list)
    cost: Optional[ProcCost] = None
    effect: ProcEffect
    description: str = ""


class PassiveSkillDefinition(BaseModel):
    """Catalog entry for a passive skill."""
    id: str = Field(..., description="Unique identifier (lowercase, underscores)")
    name: str = Field(..., description="Display name")
    description: str = Field(default="", description="Template, '{value}' is replaced by the current value")
    theme: PassiveTheme
    rarity: Rarity = Rarity.COMMON
    tier: int = Field(default=1, ge=0)
    max_rank: int = Field(default=5, ge=1)
    prerequisite_id: Optional[str] = None
    tree_x: int = Field(default=2, ge=0, le=4, description="Column in the skill tree")
    stat_type: Optional[StatType] = None
    base_value: float = 0.0
    value_per_level: float = 0.0
    proc: Optional[ProcDefinition] = None

    def value_at(self, level: int) -> float:
        """Stat contribution at a given rank."""
        return self.base_value + (level - 1) * self.value_per_level


class PassiveSkill(PassiveSkillDefinition):
    """A passive skill owned by the player, at some rank."""
    level: int = Field(default=1, ge=1)

    @computed_field
    @property
    def value(self) -> float:
        return self.value_at(self.level)

    @property
    def is_maxed(self) -> bool:
        return self.level >= self.max_rank

    @property
    def rendered_description(self) -> str:
        return self.description.replace("{value}", f"{self.value:g}")

    @classmethod
    def from_definition(cls, definition: PassiveSkillDefinition, level: int = 1) -> "PassiveSkill":
        """Create an owned skill from its catalog entry."""
        return cls(**definition.model_dump(), level=level)


class SetBonusProc(BaseModel):
    """Status applied when a set bonus procs."""
    type: StatusType
    duration: int = Field(..., ge=1)
    value: float


class PassiveSetBonus(BaseModel):
    """Bonus granted for equipping enough distinct skills of one theme."""
    theme: PassiveTheme
    name: str
    description: str = ""
    required_count: int = Field(..., ge=1)
    static_stats: list[ItemStat] = Field(default_factory=list)
    trigger: CombatTrigger
    proc_chance: float = Field(default=1.0, ge=0.0, le=1.0)
    proc_effect: SetBonusProc


class SynergyKind(StrEnum):
    """Combat behavior of a two-theme synergy."""
    BURST = "burst"
    DEBUFF = "debuff"
    BUFF = "buff"


class SynergyDefinition(BaseModel):
    """Combination unlocked by two active set bonuses."""
    id: str
    name: str
    themes: tuple[PassiveTheme, PassiveTheme]
    description: str = ""
    trigger: CombatTrigger
    kind: SynergyKind
    value: float
