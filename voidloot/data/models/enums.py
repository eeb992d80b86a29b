"""Shared enumerations for Voidloot data models."""

from enum import StrEnum


class Rarity(StrEnum):
    """Item and passive skill rarity."""
    COMMON = "Common"
    MAGIC = "Magic"
    RARE = "Rare"
    UNIQUE = "Unique"

    @property
    def rank(self) -> int:
        """Position in the rarity ladder (Common = 0)."""
        return list(Rarity).index(self)


class MonsterRarity(StrEnum):
    """Monster rarity tier, from trash mob to boss."""
    COMMON = "Common"
    UNCOMMON = "Uncommon"
    RARE = "Rare"
    EPIC = "Epic"
    MYTHIC = "Mythic"
    UNIQUE = "Unique"


class ItemSlot(StrEnum):
    """Equipment slots."""
    HEAD = "Head"
    CHEST = "Chest"
    GLOVES = "Gloves"
    MAIN_HAND = "Main Hand"
    OFF_HAND = "Off Hand"
    LEGS = "Legs"
    BOOTS = "Boots"
    AMULET = "Amulet"
    RING = "Ring"


class StatType(StrEnum):
    """Stats that items, passives, set bonuses and effects can grant."""
    STRENGTH = "Strength"
    DEXTERITY = "Dexterity"
    INTELLIGENCE = "Intelligence"
    VITALITY = "Vitality"
    DAMAGE = "Damage"
    ARMOR = "Armor"
    CRIT_CHANCE = "Crit Chance"
    ATTACK_SPEED = "Attack Speed"
    MAGIC_FIND = "Magic Find"
    LIFE_STEAL = "Life Steal"
    THORNS = "Thorns"
    DODGE_CHANCE = "Dodge Chance"


class CombatStance(StrEnum):
    """Player stance, trading damage for mitigation."""
    BALANCED = "Balanced"
    AGGRESSIVE = "Aggressive"
    DEFENSIVE = "Defensive"


class PassiveTheme(StrEnum):
    """Passive skill schools."""
    PYROMANCY = "Pyromancy"
    CRYOMANCY = "Cryomancy"
    SHADOW = "Shadow"
    SENTINEL = "Sentinel"
    FORTUNE = "Fortune"
    WARFARE = "Warfare"
    NATURE = "Nature"
    ARCANE = "Arcane"
    SCOUTING = "Scouting"


class CombatTrigger(StrEnum):
    """Combat moments at which procs are evaluated."""
    ON_BATTLE_START = "on_battle_start"
    ON_START_TURN = "on_start_turn"
    ON_END_TURN = "on_end_turn"
    ON_ATTACK = "on_attack"
    ON_HIT = "on_hit"
    ON_CRIT = "on_crit"
    ON_TAKE_DAMAGE = "on_take_damage"
    ON_KILL = "on_kill"


class StatusType(StrEnum):
    """Intra-battle status effect kinds."""
    BURN = "burn"
    POISON = "poison"
    FREEZE = "freeze"
    STUN = "stun"
    CHILL = "chill"
    BLIND = "blind"
    REGEN = "regen"
    CRIT_BOOST = "crit_boost"
    SHIELD = "shield"
    DODGE_BOOST = "dodge_boost"
    SCALING_STRENGTH = "scaling_strength"


class Terrain(StrEnum):
    """World map terrain, read by environment-dependent passives."""
    RUINS = "Ruins"
    CRYPT = "Crypt"
    PLAINS = "Plains"
    FOREST = "Forest"
    SWAMP = "Swamp"
    VOID = "Void"


class Side(StrEnum):
    """A combatant's side of the battle."""
    PLAYER = "player"
    ENEMY = "enemy"

    @property
    def opponent(self) -> "Side":
        return Side.ENEMY if self is Side.PLAYER else Side.PLAYER
