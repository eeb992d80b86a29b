"""Loot generation and item economy.

Handles:
- Drop rolls scaled by difficulty and magic find
- Rarity rolls with hard caps per tier
- Slot-appropriate stat rolls
- Item value, merchant buy price and identification
- Smuggler bundles with bounded retries
"""

import math
import random
import uuid
from dataclasses import dataclass
from typing import Optional

from voidloot.core.constants import (
    BASE_DROP_CHANCE,
    BUNDLE_DIFFICULTY_STEP,
    BUNDLE_MAX_ATTEMPTS,
    BUY_MARKUP,
    DROP_DIFFICULTY_SCALING,
    IDENTIFY_COSTS,
    ITEM_BASE_NAMES,
    ITEM_SLOT_ICONS,
    ITEM_STAT_COUNT,
    ITEM_STAT_MULTIPLIER,
    ITEM_VALUE_BASE_MULTIPLIER,
    ITEM_VALUE_RARITY_MULTIPLIERS,
    ITEM_VALUE_STAT_BONUS,
    MAGIC_FIND_FACTOR,
    RARITY_BASE_CHANCES,
    RARITY_CHANCE_CAPS,
    UNIDENTIFIED_VALUE_PENALTY,
    UNIQUE_MAGIC_FIND_BONUS,
    WEAPON_ICON_OVERRIDES,
)
from voidloot.core.exceptions import CatalogError
from voidloot.core.flavor import UNIDENTIFIED_PREFIX, FlavorDispatcher
from voidloot.data.models import Item, ItemSlot, ItemStat, Rarity, StatType

ATTRIBUTE_STATS = (StatType.STRENGTH, StatType.DEXTERITY, StatType.INTELLIGENCE, StatType.VITALITY)

ARMOR_SLOTS = {ItemSlot.OFF_HAND, ItemSlot.HEAD, ItemSlot.CHEST, ItemSlot.GLOVES, ItemSlot.BOOTS}
CRIT_SLOTS = {ItemSlot.RING, ItemSlot.AMULET, ItemSlot.GLOVES}
DODGE_SLOTS = {ItemSlot.BOOTS, ItemSlot.LEGS, ItemSlot.RING, ItemSlot.AMULET}
MAGIC_FIND_SLOTS = {ItemSlot.RING, ItemSlot.AMULET, ItemSlot.HEAD, ItemSlot.GLOVES, ItemSlot.BOOTS}


def _new_id() -> str:
    return uuid.uuid4().hex[:8]


@dataclass(frozen=True)
class RarityChances:
    """Capped per-tier chances for one loot roll."""

    unique: float
    rare: float
    magic: float

    def pick(self, roll: float) -> Rarity:
        """Map a uniform roll in [0, 1) to a rarity using cumulative windows."""
        if roll < self.unique:
            return Rarity.UNIQUE
        if roll < self.unique + self.rare:
            return Rarity.RARE
        if roll < self.unique + self.rare + self.magic:
            return Rarity.MAGIC
        return Rarity.COMMON


def drop_chance(difficulty: float) -> float:
    """Chance that a loot roll produces an item at all."""
    return BASE_DROP_CHANCE + (difficulty - 1) * DROP_DIFFICULTY_SCALING


def rarity_chances(difficulty: float = 1.0, magic_find: float = 0.0) -> RarityChances:
    """
    Rarity chances for a roll, each clamped to its cap.

    Unique scales as difficulty^2.2, rare linearly with a 1.5 factor and magic
    additively; magic find multiplies all three.
    """
    mf_mult = 1 + magic_find * MAGIC_FIND_FACTOR
    unique = RARITY_BASE_CHANCES[Rarity.UNIQUE] * difficulty * (difficulty ** 1.2) * mf_mult
    rare = RARITY_BASE_CHANCES[Rarity.RARE] * difficulty * 1.5 * mf_mult
    magic = (RARITY_BASE_CHANCES[Rarity.MAGIC] + difficulty * DROP_DIFFICULTY_SCALING) * mf_mult

    return RarityChances(
        unique=min(unique, RARITY_CHANCE_CAPS[Rarity.UNIQUE]),
        rare=min(rare, RARITY_CHANCE_CAPS[Rarity.RARE]),
        magic=min(magic, RARITY_CHANCE_CAPS[Rarity.MAGIC]),
    )


def possible_stats(slot: ItemSlot) -> list[StatType]:
    """
    Candidate stat pool for a slot.

    Repeated entries weight the draw; armor appears twice on armor slots.
    """
    stats = list(ATTRIBUTE_STATS) + [StatType.ARMOR]
    if slot == ItemSlot.MAIN_HAND:
        stats += [StatType.DAMAGE, StatType.ATTACK_SPEED]
    if slot in ARMOR_SLOTS:
        stats.append(StatType.ARMOR)
    if slot in CRIT_SLOTS:
        stats.append(StatType.CRIT_CHANCE)
    if slot in DODGE_SLOTS:
        stats.append(StatType.DODGE_CHANCE)
    if slot in MAGIC_FIND_SLOTS:
        stats.append(StatType.MAGIC_FIND)
    return stats


def roll_stat_value(stat_type: StatType, level: int, rng: random.Random) -> int:
    """Base (pre-multiplier) roll for one stat."""
    if stat_type in ATTRIBUTE_STATS:
        return rng.randint(2, 5) * level
    if stat_type == StatType.DAMAGE:
        return rng.randint(2, 4) * level
    if stat_type == StatType.ARMOR:
        return rng.randint(5, 10) * level
    if stat_type == StatType.MAGIC_FIND:
        return rng.randint(5, 15)
    # Crit, dodge and attack speed are flat percentages
    return rng.randint(1, 5)


def item_display_name(base_name: str, rarity: Rarity) -> str:
    if rarity == Rarity.MAGIC:
        return f"Apprentice's {base_name}"
    if rarity == Rarity.RARE:
        return f"Forgotten {base_name} of Power"
    if rarity == Rarity.UNIQUE:
        return f"{UNIDENTIFIED_PREFIX}{base_name}"
    return base_name


def item_icon(slot: ItemSlot, base_name: str, rng: random.Random) -> str:
    icon = rng.choice(ITEM_SLOT_ICONS[slot])
    lowered = base_name.lower()
    for fragment, override in WEAPON_ICON_OVERRIDES:
        if fragment in lowered:
            return override
    return icon


def generate_loot(
    level: int,
    difficulty: float = 1.0,
    magic_find: float = 0.0,
    rng: Optional[random.Random] = None,
) -> Optional[Item]:
    """
    Roll a loot drop.

    Args:
        level: Item level; scales attribute, damage and armor rolls.
        difficulty: World difficulty multiplier (1.0 = baseline).
        magic_find: Player magic find in percent.
        rng: Random source; an unseeded generator when omitted.

    Returns:
        The generated item, or None when nothing dropped.
    """
    rng = rng or random.Random()

    if rng.random() > drop_chance(difficulty):
        return None

    slot = rng.choice(list(ItemSlot))
    base_name = rng.choice(ITEM_BASE_NAMES[slot])

    rarity = rarity_chances(difficulty, magic_find).pick(rng.random())
    stat_count = ITEM_STAT_COUNT[rarity]
    multiplier = ITEM_STAT_MULTIPLIER[rarity]

    candidates = possible_stats(slot)
    stats: list[ItemStat] = []
    seen: set[StatType] = set()
    for _ in range(stat_count):
        stat_type = rng.choice(candidates)
        if stat_type in seen:
            continue
        seen.add(stat_type)

        value = math.floor(roll_stat_value(stat_type, level, rng) * multiplier) or 1
        if rarity == Rarity.UNIQUE and stat_type == StatType.MAGIC_FIND:
            value = math.floor(value * UNIQUE_MAGIC_FIND_BONUS)
        stats.append(ItemStat(type=stat_type, value=value))

    return Item(
        id=_new_id(),
        name=item_display_name(base_name, rarity),
        slot=slot,
        rarity=rarity,
        stats=stats,
        level=max(1, level),
        is_identified=rarity != Rarity.UNIQUE,
        icon=item_icon(slot, base_name, rng),
    )


# =============================================================================
# ECONOMY
# =============================================================================


def calculate_item_value(item: Item) -> int:
    """Sell value of an item."""
    base = item.level * ITEM_VALUE_BASE_MULTIPLIER
    rarity_mult = ITEM_VALUE_RARITY_MULTIPLIERS.get(item.rarity, 1.0)
    stat_bonus = item.total_stat_value * ITEM_VALUE_STAT_BONUS
    identified_mult = 1.0 if item.is_identified else UNIDENTIFIED_VALUE_PENALTY
    return math.floor((base * rarity_mult + stat_bonus) * identified_mult)


def calculate_buy_price(item: Item) -> int:
    """Merchant asking price."""
    return calculate_item_value(item) * BUY_MARKUP


def identification_cost(item: Item) -> int:
    return IDENTIFY_COSTS[item.rarity]


def identify_item(item: Item, flavor: Optional[FlavorDispatcher] = None) -> Item:
    """
    Return an identified copy of the item.

    Already identified items are returned unchanged.
    """
    if item.is_identified:
        return item
    flavor = flavor or FlavorDispatcher()
    revealed = flavor.identify(item.name, str(item.slot), str(item.rarity))
    return item.model_copy(update={
        "name": revealed.name,
        "flavor_text": revealed.flavor_text,
        "is_identified": True,
    })


# =============================================================================
# SMUGGLER BUNDLES
# =============================================================================


@dataclass(frozen=True)
class SmugglingBundle:
    """A blind box sold by the smuggler."""

    id: str
    name: str
    description: str
    cost: int
    difficulty: float
    icon: str


SMUGGLING_BUNDLES: tuple[SmugglingBundle, ...] = (
    SmugglingBundle(
        id="sack",
        name="Thief's Sack",
        description="A dusty sack collected from the roadside. Cheap and mostly worthless, but sometimes...",
        cost=250,
        difficulty=1.0,
        icon="sack",
    ),
    SmugglingBundle(
        id="crate",
        name="Smuggler's Crate",
        description="A reinforced crate smuggled past the guards. Contains decent gear.",
        cost=1000,
        difficulty=4.0,
        icon="crate",
    ),
    SmugglingBundle(
        id="chest",
        name="Void-Touched Chest",
        description="A chest radiating dark energy. High risk, high reward.",
        cost=5000,
        difficulty=8.0,
        icon="chest",
    ),
)


def get_bundle(bundle_id: str) -> SmugglingBundle:
    for bundle in SMUGGLING_BUNDLES:
        if bundle.id == bundle_id:
            return bundle
    raise CatalogError("bundle", bundle_id)


def open_bundle(
    bundle: SmugglingBundle,
    level: int,
    magic_find: float = 0.0,
    rng: Optional[random.Random] = None,
) -> Optional[Item]:
    """
    Open a bundle: retry the loot roll with rising difficulty, then fall
    back to one baseline roll. A None result is a valid empty bundle.
    """
    rng = rng or random.Random()

    for attempt in range(BUNDLE_MAX_ATTEMPTS):
        difficulty = bundle.difficulty + attempt * BUNDLE_DIFFICULTY_STEP
        item = generate_loot(level, difficulty, magic_find, rng)
        if item is not None:
            return item

    return generate_loot(level, 1.0, magic_find, rng)
