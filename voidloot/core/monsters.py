"""Monster generation for Voidloot.

Monsters are rebuilt from scratch for every encounter: rarity roll, base
attributes, maledict affixes and derived combat stats are all a pure
function of level, difficulty and the random source.
"""

import math
import random
import uuid
from collections import defaultdict
from dataclasses import dataclass
from typing import Optional, Sequence

from voidloot.core.constants import (
    BASE_CRIT_CHANCE,
    BASE_DODGE_CHANCE,
    BOSS_HP_MULTIPLIER,
    ELITE_PREFIXES,
    MONSTER_DEX_AFFIX_DODGE,
    MONSTER_ICON_OVERRIDES,
    MONSTER_NAMES,
    MONSTER_RARITY_BOOST_PER_DIFFICULTY,
    MONSTER_RARITY_CONFIG,
    MONSTER_RARITY_THRESHOLDS,
    MONSTER_STAT_CAP,
    UNIQUE_EPITHETS,
    VICTORY_GOLD_PER_LEVEL,
    VICTORY_GOLD_RANDOM,
    VICTORY_XP_BASE,
    VICTORY_XP_PER_LEVEL,
)
from voidloot.data.loaders import load_maledicts
from voidloot.data.models import MaledictAffix, Monster, MonsterRarity, StatType


def roll_monster_rarity(difficulty_modifier: float = 1.0, rng: Optional[random.Random] = None) -> MonsterRarity:
    """
    Roll a monster rarity tier.

    Thresholds are checked rarest first; higher difficulty lowers every
    threshold by the same amount.
    """
    rng = rng or random.Random()
    roll = rng.random()
    boost = (difficulty_modifier - 1) * MONSTER_RARITY_BOOST_PER_DIFFICULTY

    for rarity, threshold in MONSTER_RARITY_THRESHOLDS:
        if roll > threshold - boost:
            return rarity
    return MonsterRarity.COMMON


def draw_maledicts(count: int, rng: random.Random, pool: Optional[Sequence[MaledictAffix]] = None) -> list[MaledictAffix]:
    """Draw up to ``count`` distinct affixes; a short pool yields fewer."""
    if count <= 0:
        return []
    shuffled = list(pool if pool is not None else load_maledicts())
    rng.shuffle(shuffled)
    return shuffled[:count]


def sum_affix_modifiers(maledicts: Sequence[MaledictAffix]) -> dict[StatType, float]:
    totals: dict[StatType, float] = defaultdict(float)
    for affix in maledicts:
        for stat_type, value in affix.stat_modifiers.items():
            totals[stat_type] += value
    return totals


def monster_icon(base_name: str) -> str:
    key = base_name.lower()
    return MONSTER_ICON_OVERRIDES.get(key, key)


def generate_monster(
    level: int,
    difficulty_modifier: float = 1.0,
    rng: Optional[random.Random] = None,
    rarity: Optional[MonsterRarity] = None,
) -> Monster:
    """
    Generate a monster for an encounter.

    Args:
        level: Encounter level.
        difficulty_modifier: World difficulty; scales attributes and rarity odds.
        rng: Random source; an unseeded generator when omitted.
        rarity: Force a rarity tier instead of rolling one.

    Returns:
        A full-HP monster.
    """
    rng = rng or random.Random()

    base_name = rng.choice(MONSTER_NAMES)
    if rarity is None:
        rarity = roll_monster_rarity(difficulty_modifier, rng)
    config = MONSTER_RARITY_CONFIG[rarity]

    base_attr = math.floor(10 + level * 2)
    attr = math.floor(base_attr * config.stat_mult * difficulty_modifier)

    maledicts = draw_maledicts(config.maledict_count, rng)
    bonus = sum_affix_modifiers(maledicts)

    strength = attr * (1 + bonus[StatType.STRENGTH] / 100)
    dexterity = attr * (1 + bonus[StatType.DEXTERITY] / 100)
    intelligence = attr * (1 + bonus[StatType.INTELLIGENCE] / 100)
    vitality = attr * (1 + bonus[StatType.VITALITY] / 100)

    max_hp = math.floor(vitality * 8 + level * 20)
    damage = math.floor(strength * 0.6 + level * 3) * (1 + bonus[StatType.DAMAGE] / 100)
    armor = math.floor(dexterity * 0.5 + level * 2) * (1 + bonus[StatType.ARMOR] / 100)
    crit_chance = min(MONSTER_STAT_CAP, intelligence * 0.1 + bonus[StatType.CRIT_CHANCE] + BASE_CRIT_CHANCE)
    dex_affix_dodge = MONSTER_DEX_AFFIX_DODGE if bonus[StatType.DEXTERITY] > 0 else 0.0
    dodge_chance = min(MONSTER_STAT_CAP, dexterity * 0.1 + dex_affix_dodge + BASE_DODGE_CHANCE)

    name = base_name
    icon = monster_icon(base_name)
    if rarity != MonsterRarity.COMMON:
        name = f"{rng.choice(ELITE_PREFIXES)} {base_name}"
    if rarity == MonsterRarity.UNIQUE:
        name = f"{base_name} the {rng.choice(UNIQUE_EPITHETS)}"
        icon = "boss"

    return Monster(
        id=uuid.uuid4().hex[:8],
        name=name,
        level=max(1, level),
        rarity=rarity,
        strength=math.floor(strength),
        dexterity=math.floor(dexterity),
        intelligence=math.floor(intelligence),
        vitality=math.floor(vitality),
        max_hp=max_hp,
        current_hp=max_hp,
        damage=math.floor(damage),
        armor=math.floor(armor),
        crit_chance=crit_chance,
        dodge_chance=dodge_chance,
        life_steal=bonus[StatType.LIFE_STEAL],
        thorns=bonus[StatType.THORNS],
        icon=icon,
        maledicts=maledicts,
    )


def generate_boss(
    level: int,
    difficulty_modifier: float,
    area_name: str,
    rng: Optional[random.Random] = None,
) -> Monster:
    """Area guardian: a Unique monster with doubled HP."""
    monster = generate_monster(level, difficulty_modifier, rng, rarity=MonsterRarity.UNIQUE)
    max_hp = monster.max_hp * BOSS_HP_MULTIPLIER
    return monster.model_copy(update={
        "name": f"Overlord of {area_name}",
        "max_hp": max_hp,
        "current_hp": max_hp,
        "icon": "boss",
    })


@dataclass(frozen=True)
class MonsterRewards:
    """XP and gold granted for a kill."""

    xp: int
    gold: int


def rarity_rewards(monster: Monster, level: int, rng: Optional[random.Random] = None) -> MonsterRewards:
    """Kill rewards scaled by the monster's rarity multipliers."""
    rng = rng or random.Random()
    config = MONSTER_RARITY_CONFIG[monster.rarity]
    xp = math.floor((VICTORY_XP_BASE + level * VICTORY_XP_PER_LEVEL) * config.xp_mult)
    gold = math.floor((rng.random() * VICTORY_GOLD_RANDOM + level * VICTORY_GOLD_PER_LEVEL) * config.gold_mult)
    return MonsterRewards(xp=xp, gold=gold)
