# Data Models
from .enums import (
    CombatStance,
    CombatTrigger,
    ItemSlot,
    MonsterRarity,
    PassiveTheme,
    Rarity,
    Side,
    StatType,
    StatusType,
    Terrain,
)
from .item import Item, ItemStat
from .monster import MaledictAffix, MaledictEffect, MaledictEffectType, Monster
from .skill import (
    PassiveSetBonus,
    PassiveSkill,
    PassiveSkillDefinition,
    ProcCondition,
    ProcConditionType,
    ProcCost,
    ProcCostType,
    ProcDefinition,
    ProcEffect,
    ProcEffectType,
    SetBonusProc,
    SynergyDefinition,
    SynergyKind,
)
from .character import (
    ActiveEffect,
    BaseAttributes,
    BattleEnvironment,
    BuildLoadout,
    CharacterState,
    MapNodeState,
    PlayerStats,
)

__all__ = [
    "CombatStance",
    "CombatTrigger",
    "ItemSlot",
    "MonsterRarity",
    "PassiveTheme",
    "Rarity",
    "Side",
    "StatType",
    "StatusType",
    "Terrain",
    "Item",
    "ItemStat",
    "MaledictAffix",
    "MaledictEffect",
    "MaledictEffectType",
    "Monster",
    "PassiveSetBonus",
    "PassiveSkill",
    "PassiveSkillDefinition",
    "ProcCondition",
    "ProcConditionType",
    "ProcCost",
    "ProcCostType",
    "ProcDefinition",
    "ProcEffect",
    "ProcEffectType",
    "SetBonusProc",
    "SynergyDefinition",
    "SynergyKind",
    "ActiveEffect",
    "BaseAttributes",
    "BattleEnvironment",
    "BuildLoadout",
    "CharacterState",
    "MapNodeState",
    "PlayerStats",
]
