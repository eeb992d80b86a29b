"""Voidloot balance tables.

Every number the generators, the stat pipeline and the combat engine share
lives here so the live battle and the headless simulator can never drift
apart.
"""

import math
from typing import Final, NamedTuple

from voidloot.data.models.enums import (
    CombatStance,
    ItemSlot,
    MonsterRarity,
    Rarity,
)

# =============================================================================
# ATTRIBUTES & LEVELING
# =============================================================================
BASE_ATTRIBUTE_VALUE: Final[int] = 10

BASE_DAMAGE: Final[float] = 5.0
BASE_ARMOR: Final[float] = 0.0
BASE_MAGIC_FIND: Final[float] = 0.0

HP_PER_LEVEL: Final[int] = 10
STAT_POINTS_PER_LEVEL: Final[int] = 3
SKILL_POINTS_PER_LEVEL: Final[int] = 1
XP_PER_LEVEL: Final[int] = 100  # XP to next level = level * XP_PER_LEVEL

# Derived-stat coefficients (per attribute point)
HP_PER_VITALITY: Final[int] = 5
DAMAGE_PER_STRENGTH: Final[float] = 0.5
ARMOR_PER_DEXTERITY: Final[float] = 0.5
CRIT_PER_INTELLIGENCE: Final[float] = 0.2
DODGE_PER_DEXTERITY: Final[float] = 0.2

CRIT_CHANCE_CAP: Final[float] = 100.0
DODGE_CHANCE_CAP: Final[float] = 75.0

# =============================================================================
# ITEM ECONOMY
# =============================================================================
ITEM_VALUE_BASE_MULTIPLIER: Final[int] = 15
ITEM_VALUE_RARITY_MULTIPLIERS: Final[dict[Rarity, float]] = {
    Rarity.COMMON: 1.0,
    Rarity.MAGIC: 2.5,
    Rarity.RARE: 6.0,
    Rarity.UNIQUE: 15.0,
}
ITEM_VALUE_STAT_BONUS: Final[float] = 0.5  # gold per point of rolled stats
UNIDENTIFIED_VALUE_PENALTY: Final[float] = 0.5
BUY_MARKUP: Final[int] = 3

IDENTIFY_COSTS: Final[dict[Rarity, int]] = {
    Rarity.COMMON: 10,
    Rarity.MAGIC: 50,
    Rarity.RARE: 150,
    Rarity.UNIQUE: 500,
}

MAX_INVENTORY_SIZE: Final[int] = 40
MAX_MERCHANT_STOCK: Final[int] = 8
MERCHANT_RESTOCK_COUNT: Final[int] = 2

# =============================================================================
# COMBAT
# =============================================================================
CRIT_MULTIPLIER: Final[float] = 1.5
BASE_CRIT_CHANCE: Final[float] = 5.0
BASE_DODGE_CHANCE: Final[float] = 0.0

ARMOR_MITIGATION: Final[float] = 0.5  # flat damage removed per point of armor
DAMAGE_VARIANCE: Final[tuple[float, float]] = (0.8, 1.2)
FROZEN_DAMAGE_BONUS: Final[float] = 1.5
EXECUTE_THRESHOLD: Final[float] = 0.3
EXECUTE_MULTIPLIER: Final[float] = 2.0
CHILL_AGILITY_FACTOR: Final[float] = 0.8  # per chill stack
FLEE_CHANCE: Final[float] = 0.5
DEFAULT_PROC_DURATION: Final[int] = 3
DEFAULT_SHIELD_DURATION: Final[int] = 1
TURN_QUEUE_REFILL_AT: Final[int] = 2

# Synergy tuning
BIOHAZARD_DAMAGE_BONUS: Final[float] = 1.2
BIOHAZARD_POISON_DURATION: Final[int] = 3
DARK_MOMENTUM_DODGE: Final[float] = 50.0
DARK_MOMENTUM_DURATION: Final[int] = 1

# Terrain and time-of-day bonuses, keyed by the passive that unlocks them
FOREST_FIRE_DAMAGE_BONUS: Final[float] = 1.2
WILDFIRE_CHANCE: Final[float] = 0.4
WILDFIRE_BURN: Final[float] = 0.1
WILDFIRE_DURATION: Final[int] = 3
NIGHT_PROWLER_CRIT_BONUS: Final[float] = 25.0
GRAVE_BORN_LIFE_STEAL_BONUS: Final[float] = 15.0
TIDAL_REGEN: Final[float] = 0.05
TIDAL_REGEN_DURATION: Final[int] = 10


class StanceModifiers(NamedTuple):
    """Damage and mitigation multipliers for a stance."""

    damage: float
    mitigation: float


STANCE_MODIFIERS: Final[dict[CombatStance, StanceModifiers]] = {
    CombatStance.AGGRESSIVE: StanceModifiers(damage=1.3, mitigation=0.7),
    CombatStance.BALANCED: StanceModifiers(damage=1.0, mitigation=1.0),
    CombatStance.DEFENSIVE: StanceModifiers(damage=0.7, mitigation=1.5),
}

# =============================================================================
# LOOT
# =============================================================================
BASE_DROP_CHANCE: Final[float] = 0.4
DROP_DIFFICULTY_SCALING: Final[float] = 0.1
MAGIC_FIND_FACTOR: Final[float] = 0.01

RARITY_BASE_CHANCES: Final[dict[Rarity, float]] = {
    Rarity.UNIQUE: 0.01,
    Rarity.RARE: 0.05,
    Rarity.MAGIC: 0.20,
}
RARITY_CHANCE_CAPS: Final[dict[Rarity, float]] = {
    Rarity.UNIQUE: 0.25,
    Rarity.RARE: 0.50,
    Rarity.MAGIC: 0.90,
}

# Number of stat rolls and value multiplier per item rarity
ITEM_STAT_COUNT: Final[dict[Rarity, int]] = {
    Rarity.COMMON: 1,
    Rarity.MAGIC: 2,
    Rarity.RARE: 4,
    Rarity.UNIQUE: 6,
}
ITEM_STAT_MULTIPLIER: Final[dict[Rarity, float]] = {
    Rarity.COMMON: 1.0,
    Rarity.MAGIC: 1.2,
    Rarity.RARE: 1.5,
    Rarity.UNIQUE: 2.0,
}
UNIQUE_MAGIC_FIND_BONUS: Final[float] = 1.5

ITEM_BASE_NAMES: Final[dict[ItemSlot, list[str]]] = {
    ItemSlot.HEAD: ["Cap", "Helm", "Casque", "Basinet", "Crown"],
    ItemSlot.CHEST: ["Tunic", "Armor", "Plate", "Cuirass", "Mail"],
    ItemSlot.GLOVES: ["Gloves", "Gauntlets", "Mitts", "Grips"],
    ItemSlot.MAIN_HAND: ["Sword", "Axe", "Mace", "Dagger", "Wand"],
    ItemSlot.OFF_HAND: ["Shield", "Buckler", "Orb", "Tome"],
    ItemSlot.LEGS: ["Pants", "Greaves", "Leggings", "Skirt"],
    ItemSlot.BOOTS: ["Boots", "Greaves", "Sandals", "Treads"],
    ItemSlot.AMULET: ["Amulet", "Necklace", "Talisman", "Choker"],
    ItemSlot.RING: ["Ring", "Band", "Loop", "Signet"],
}

ITEM_SLOT_ICONS: Final[dict[ItemSlot, list[str]]] = {
    ItemSlot.HEAD: ["helm", "hood", "crown"],
    ItemSlot.CHEST: ["armor", "robe"],
    ItemSlot.GLOVES: ["gloves"],
    ItemSlot.MAIN_HAND: ["sword", "axe", "mace", "dagger", "staff"],
    ItemSlot.OFF_HAND: ["shield", "orb", "tome"],
    ItemSlot.LEGS: ["legs", "skirt"],
    ItemSlot.BOOTS: ["boots"],
    ItemSlot.AMULET: ["amulet"],
    ItemSlot.RING: ["ring"],
}

# Base-name substring -> icon, checked in order
WEAPON_ICON_OVERRIDES: Final[list[tuple[str, str]]] = [
    ("sword", "sword"),
    ("axe", "axe"),
    ("mace", "mace"),
    ("dagger", "dagger"),
    ("wand", "staff"),
    ("orb", "orb"),
    ("tome", "tome"),
]

# =============================================================================
# MONSTERS
# =============================================================================


class MonsterRarityConfig(NamedTuple):
    """Scaling applied to a monster of a given rarity tier."""

    stat_mult: float
    xp_mult: float
    gold_mult: float
    maledict_count: int


MONSTER_RARITY_CONFIG: Final[dict[MonsterRarity, MonsterRarityConfig]] = {
    MonsterRarity.COMMON: MonsterRarityConfig(1.0, 1.0, 1.0, 0),
    MonsterRarity.UNCOMMON: MonsterRarityConfig(1.3, 1.5, 1.5, 1),
    MonsterRarity.RARE: MonsterRarityConfig(1.8, 2.5, 2.5, 2),
    MonsterRarity.EPIC: MonsterRarityConfig(2.5, 5.0, 4.0, 3),
    MonsterRarity.MYTHIC: MonsterRarityConfig(3.5, 10.0, 8.0, 4),
    MonsterRarity.UNIQUE: MonsterRarityConfig(5.0, 25.0, 15.0, 5),
}

# Roll thresholds, rarest first. A roll above (threshold - boost) selects the tier.
MONSTER_RARITY_THRESHOLDS: Final[list[tuple[MonsterRarity, float]]] = [
    (MonsterRarity.UNIQUE, 0.98),
    (MonsterRarity.MYTHIC, 0.95),
    (MonsterRarity.EPIC, 0.90),
    (MonsterRarity.RARE, 0.80),
    (MonsterRarity.UNCOMMON, 0.60),
]
MONSTER_RARITY_BOOST_PER_DIFFICULTY: Final[float] = 0.1

MONSTER_NAMES: Final[list[str]] = [
    "Fallen", "Zombie", "Skeleton", "Scavenger", "Goatman",
    "Spider", "Gargoyle", "Demon", "Cultist", "Ghost",
]
ELITE_PREFIXES: Final[list[str]] = [
    "Vile", "Cursed", "Stone", "Night", "Blood", "Flame", "Void", "Ancient", "Shadow",
]
UNIQUE_EPITHETS: Final[list[str]] = ["Destroyer", "Undying", "Conqueror", "Vile", "Ender"]
MONSTER_ICON_OVERRIDES: Final[dict[str, str]] = {
    "scavenger": "beast",
    "goatman": "beast",
    "gargoyle": "beast",
    "fallen": "zombie",
}

MONSTER_STAT_CAP: Final[float] = 50.0
MONSTER_DEX_AFFIX_DODGE: Final[float] = 10.0
BOSS_HP_MULTIPLIER: Final[int] = 2

# Rewards
VICTORY_XP_BASE: Final[int] = 20
VICTORY_XP_PER_LEVEL: Final[int] = 5
VICTORY_GOLD_RANDOM: Final[int] = 50
VICTORY_GOLD_PER_LEVEL: Final[int] = 10
DEFEAT_GOLD_KEPT: Final[float] = 0.8
DEFEAT_XP_KEPT: Final[float] = 0.5

LOOT_ROLLS: Final[dict[MonsterRarity, int]] = {
    MonsterRarity.UNIQUE: 5,
    MonsterRarity.RARE: 2,
}

# World difficulty drift
DIFFICULTY_GAIN: Final[float] = 0.02
DIFFICULTY_GAIN_UNIQUE: Final[float] = 0.05
DIFFICULTY_LOSS: Final[float] = 0.15
MAX_WORLD_DIFFICULTY: Final[float] = 3.5
MIN_WORLD_DIFFICULTY: Final[float] = 0.6

AREA_PROGRESS_PER_WIN: Final[int] = 10
AREA_PROGRESS_MYTHIC: Final[int] = 40

# =============================================================================
# SKILLS
# =============================================================================
DEFAULT_MAX_RANK: Final[int] = 5
MAX_EQUIPPED_SKILLS: Final[int] = 6

# =============================================================================
# SMUGGLER BUNDLES
# =============================================================================
BUNDLE_MAX_ATTEMPTS: Final[int] = 10
BUNDLE_DIFFICULTY_STEP: Final[float] = 0.5

# =============================================================================
# SIMULATION
# =============================================================================
MAX_SIMULATION_TURNS: Final[int] = 100
BOSS_DIFFICULTY_MULTIPLIER: Final[float] = 1.5

# Balance rating thresholds (percent win rate)
RATING_IMPOSSIBLE_BELOW: Final[float] = 10.0
RATING_HARD_BELOW: Final[float] = 40.0
RATING_BROKEN_ABOVE: Final[float] = 95.0
RATING_BROKEN_MAX_TURNS: Final[float] = 3.0
RATING_EASY_ABOVE: Final[float] = 90.0


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(math.floor(value + 0.5))


class TurnSplit(NamedTuple):
    """How many attacks each side gets in one turn batch."""

    player_attacks: int
    enemy_attacks: int
    player_goes_first: bool


def calculate_turns(player_agility: float, enemy_agility: float) -> TurnSplit:
    """
    Split a turn batch between player and enemy by agility ratio.

    Both agilities are floored at 1, each side gets at least one attack and
    the player wins ties.
    """
    p_agi = max(1.0, player_agility)
    e_agi = max(1.0, enemy_agility)

    return TurnSplit(
        player_attacks=max(1, round_half_up(p_agi / e_agi)),
        enemy_attacks=max(1, round_half_up(e_agi / p_agi)),
        player_goes_first=p_agi >= e_agi,
    )


def get_xp_to_next_level(level: int) -> int:
    """XP needed to advance from the given level."""
    return level * XP_PER_LEVEL


def get_max_hp(vitality: float, level: int) -> float:
    """Max HP from final vitality and character level."""
    return vitality * HP_PER_VITALITY + level * HP_PER_LEVEL
