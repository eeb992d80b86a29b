"""Character progression for Voidloot.

Inventory and merchant actions, experience and level-ups, battle outcome
bookkeeping (rewards, world difficulty drift, area progress, loot drops),
the world map and exploration events. Every operation mutates the given
``CharacterState`` in place; rejected requests are logged and leave the
state untouched.
"""

import math
import random
import uuid
from dataclasses import dataclass, field
from typing import Optional, Sequence, Union

from voidloot.core.constants import (
    AREA_PROGRESS_MYTHIC,
    AREA_PROGRESS_PER_WIN,
    BOSS_DIFFICULTY_MULTIPLIER,
    DEFEAT_GOLD_KEPT,
    DEFEAT_XP_KEPT,
    DIFFICULTY_GAIN,
    DIFFICULTY_GAIN_UNIQUE,
    DIFFICULTY_LOSS,
    LOOT_ROLLS,
    MAX_INVENTORY_SIZE,
    MAX_MERCHANT_STOCK,
    MAX_WORLD_DIFFICULTY,
    MERCHANT_RESTOCK_COUNT,
    MIN_WORLD_DIFFICULTY,
    MONSTER_RARITY_CONFIG,
    SKILL_POINTS_PER_LEVEL,
    STAT_POINTS_PER_LEVEL,
    get_xp_to_next_level,
)
from voidloot.core.flavor import LORE_FALLBACK, FlavorDispatcher
from voidloot.core.logging import get_logger
from voidloot.core.loot import (
    calculate_buy_price,
    calculate_item_value,
    generate_loot,
    identification_cost,
    identify_item,
)
from voidloot.core.monsters import generate_boss, generate_monster, rarity_rewards
from voidloot.core.skills import SkillRoll, SkillRollFilters, generate_passive_skill, merge_skill
from voidloot.data.models import (
    ActiveEffect,
    BattleEnvironment,
    CharacterState,
    Item,
    ItemSlot,
    MapNodeState,
    Monster,
    MonsterRarity,
    PlayerStats,
    Rarity,
    StatType,
    Terrain,
)

logger = get_logger(__name__)

MERCHANT_RESTOCK_DIFFICULTY: float = 1.2
STARTING_MERCHANT_STOCK: int = 4
EVENT_CHANCE: float = 0.20
EVENT_ITEM_MAGIC_FIND_BONUS: float = 20.0
EVENT_XP_FACTOR: float = 0.1
ATTRIBUTES = ("strength", "dexterity", "intelligence", "vitality")


# =============================================================================
# WORLD MAP
# =============================================================================


@dataclass(frozen=True)
class Area:
    """Static definition of a world map node."""

    id: str
    name: str
    level: int
    terrain: Terrain
    description: str
    connections: tuple[str, ...]


WORLD_MAP: tuple[Area, ...] = (
    Area("town", "Tristram Ruins", 1, Terrain.RUINS,
         "The remains of a once-great town, now infested with the undead.", ("graveyard", "fields")),
    Area("graveyard", "Old Graveyard", 5, Terrain.CRYPT,
         "Restless spirits and shambling corpses guard this sacred ground.", ("town", "crypt")),
    Area("fields", "Blighted Fields", 3, Terrain.PLAINS,
         "Overgrown farmlands where scavengers roam.", ("town", "forest")),
    Area("crypt", "Royal Crypts", 10, Terrain.CRYPT,
         "Ancient tombs holding the bones of kings and darker things.", ("graveyard", "ruins")),
    Area("forest", "Dark Wood", 8, Terrain.FOREST,
         "The trees whisper madness to those who enter.", ("fields", "ruins", "swamp")),
    Area("swamp", "Festering Swamp", 12, Terrain.SWAMP,
         "Thick fog and poisonous waters.", ("forest", "ruins")),
    Area("ruins", "Temple Ruins", 15, Terrain.RUINS,
         "A fallen temple, the source of the corruption.", ("crypt", "forest", "swamp", "void")),
    Area("void", "The Void Rift", 25, Terrain.VOID,
         "The tear in reality where the Void Lords await.", ("ruins",)),
)

STARTING_AREA_ID = "town"


def get_area(area_id: str) -> Optional[Area]:
    for area in WORLD_MAP:
        if area.id == area_id:
            return area
    return None


def initial_map_nodes() -> list[MapNodeState]:
    return [
        MapNodeState(
            id=area.id,
            is_unlocked=area.id == STARTING_AREA_ID,
            connections=list(area.connections),
        )
        for area in WORLD_MAP
    ]


def _find_node(character: CharacterState, area_id: str) -> Optional[MapNodeState]:
    for node in character.map_nodes:
        if node.id == area_id:
            return node
    return None


def new_character(rng: Optional[random.Random] = None) -> CharacterState:
    """Fresh save: level 1, starting map, a few identified merchant items."""
    rng = rng or random.Random()
    character = CharacterState(map_nodes=initial_map_nodes(), current_area_id=STARTING_AREA_ID)
    for _ in range(STARTING_MERCHANT_STOCK):
        item = generate_loot(1, rng=rng)
        if item is not None:
            character.merchant_stock.append(item.model_copy(update={"is_identified": True}))
    return character


def travel(character: CharacterState, area_id: str) -> bool:
    """Move to an unlocked area; progress is 100 for cleared areas, else 0."""
    node = _find_node(character, area_id)
    if node is None or not node.is_unlocked:
        logger.info("travel_rejected", area_id=area_id, reason="locked" if node else "unknown_area")
        return False
    character.current_area_id = area_id
    character.area_progress = 100 if node.is_cleared else 0
    return True


# =============================================================================
# INVENTORY & MERCHANT
# =============================================================================


def free_inventory_slot(character: CharacterState) -> Optional[int]:
    for index, item in enumerate(character.inventory):
        if item is None:
            return index
    if len(character.inventory) < MAX_INVENTORY_SIZE:
        character.inventory.append(None)
        return len(character.inventory) - 1
    return None


def add_to_inventory(character: CharacterState, item: Item) -> bool:
    """Place an item in the first empty inventory slot."""
    index = free_inventory_slot(character)
    if index is None:
        logger.info("inventory_full", item_id=item.id)
        return False
    character.inventory[index] = item
    return True


def equip_item(character: CharacterState, index: int) -> bool:
    """
    Equip the inventory item at ``index``.

    Only identified items can be worn. A previously worn item in the same
    slot takes the vacated inventory position.
    """
    if not 0 <= index < len(character.inventory):
        return False
    item = character.inventory[index]
    if item is None:
        return False
    if not item.is_identified:
        logger.info("equip_rejected", item_id=item.id, reason="unidentified")
        return False

    character.inventory[index] = character.equipment.get(item.slot)
    character.equipment[item.slot] = item
    return True


def unequip_item(character: CharacterState, slot: ItemSlot) -> bool:
    item = character.equipment.get(slot)
    if item is None:
        return False
    if not add_to_inventory(character, item):
        return False
    character.equipment.pop(slot, None)
    return True


def sell_items(character: CharacterState, indices: Sequence[int]) -> int:
    """
    Sell inventory items to the merchant.

    Returns:
        Gold received.
    """
    total = 0
    for index in sorted(set(indices)):
        if not 0 <= index < len(character.inventory):
            continue
        item = character.inventory[index]
        if item is None:
            continue
        total += calculate_item_value(item)
        character.inventory[index] = None
    character.gold += total
    return total


def buy_item(character: CharacterState, stock_index: int) -> bool:
    """Buy a merchant item at the marked-up price."""
    if not 0 <= stock_index < len(character.merchant_stock):
        return False
    item = character.merchant_stock[stock_index]
    price = calculate_buy_price(item)
    if character.gold < price:
        logger.info("buy_rejected", item_id=item.id, price=price, gold=character.gold, reason="gold")
        return False
    if not add_to_inventory(character, item):
        return False
    character.gold -= price
    del character.merchant_stock[stock_index]
    return True


def identify_all(character: CharacterState, flavor: Optional[FlavorDispatcher] = None) -> int:
    """
    Identify every unidentified inventory item at once.

    Nothing happens unless the whole batch is affordable.

    Returns:
        Number of items identified.
    """
    pending = [i for i, item in enumerate(character.inventory) if item is not None and not item.is_identified]
    if not pending:
        return 0

    cost = sum(identification_cost(character.inventory[i]) for i in pending)
    if character.gold < cost:
        logger.info("identify_rejected", cost=cost, gold=character.gold, reason="gold")
        return 0

    for i in pending:
        character.inventory[i] = identify_item(character.inventory[i], flavor)
    character.gold -= cost
    return len(pending)


def pick_up_ground_items(character: CharacterState) -> int:
    """Move ground drops into the inventory until it is full."""
    picked = 0
    while character.ground_items:
        if not add_to_inventory(character, character.ground_items[0]):
            break
        character.ground_items.pop(0)
        picked += 1
    return picked


def allocate_stat_point(character: CharacterState, attribute: str) -> bool:
    if attribute not in ATTRIBUTES:
        logger.warning("allocate_rejected", attribute=attribute, reason="unknown_attribute")
        return False
    if character.stat_points <= 0:
        return False
    setattr(character.base_attributes, attribute, getattr(character.base_attributes, attribute) + 1)
    character.stat_points -= 1
    return True


# =============================================================================
# EXPERIENCE
# =============================================================================


@dataclass
class LevelUp:
    """One level gained and the passive it granted."""

    level: int
    skill_roll: SkillRoll
    lore: str = LORE_FALLBACK


def _set_lore(level_up: LevelUp):
    def apply(text: str) -> None:
        level_up.lore = text
    return apply


def gain_xp(
    character: CharacterState,
    amount: int,
    rng: Optional[random.Random] = None,
    filters: Optional[SkillRollFilters] = None,
    flavor: Optional[FlavorDispatcher] = None,
) -> list[LevelUp]:
    """
    Add experience, levelling up as many times as it covers.

    Each level grants stat points, a skill point and a rolled passive merged
    into the owned list; overflow XP carries over. With a flavor dispatcher each
    level-up also receives lore for its skill when the provider answers.
    """
    rng = rng or random.Random()
    character.xp += max(0, amount)
    gained: list[LevelUp] = []

    while character.xp >= get_xp_to_next_level(character.level):
        character.xp -= get_xp_to_next_level(character.level)
        character.level += 1
        character.stat_points += STAT_POINTS_PER_LEVEL
        character.skill_points += SKILL_POINTS_PER_LEVEL

        roll = generate_passive_skill(character.passive_skills, filters, rng)
        merge_skill(character.passive_skills, roll.skill)
        level_up = LevelUp(level=character.level, skill_roll=roll)
        gained.append(level_up)
        if flavor is not None:
            flavor.lore(roll.skill.name, roll.skill.rendered_description, _set_lore(level_up))
        logger.info("level_up", level=character.level, skill_id=roll.skill.id, is_new=roll.is_new)

    return gained


# =============================================================================
# ACTIVE EFFECTS
# =============================================================================


def add_active_effect(character: CharacterState, effect: ActiveEffect) -> ActiveEffect:
    """Apply a cross-battle effect; reapplying a same-named one extends it."""
    for i, existing in enumerate(character.active_effects):
        if existing.name == effect.name:
            extended = existing.model_copy(update={"duration": existing.duration + effect.duration})
            character.active_effects[i] = extended
            return extended
    character.active_effects.append(effect)
    return effect


def tick_active_effects(character: CharacterState) -> list[ActiveEffect]:
    """
    Count one battle off every active effect.

    Returns:
        Effects that faded.
    """
    remaining: list[ActiveEffect] = []
    faded: list[ActiveEffect] = []
    for effect in character.active_effects:
        if effect.duration > 1:
            remaining.append(effect.model_copy(update={"duration": effect.duration - 1}))
        else:
            faded.append(effect)
    character.active_effects = remaining
    return faded


# =============================================================================
# BATTLE OUTCOMES
# =============================================================================


@dataclass
class VictoryOutcome:
    """Everything a victory granted."""

    xp: int
    gold: int
    drops: list[Item] = field(default_factory=list)
    restocked: list[Item] = field(default_factory=list)
    level_ups: list[LevelUp] = field(default_factory=list)
    faded_effects: list[ActiveEffect] = field(default_factory=list)
    area_cleared: bool = False


@dataclass
class DefeatOutcome:
    """What a defeat cost."""

    gold_lost: int
    xp_lost: int
    faded_effects: list[ActiveEffect] = field(default_factory=list)


def apply_victory(
    character: CharacterState,
    monster: Monster,
    player_stats: PlayerStats,
    is_boss: bool = False,
    rng: Optional[random.Random] = None,
) -> VictoryOutcome:
    """
    Book a won battle.

    Drops and merchant restock roll against the world difficulty as it was
    before this win raised it.
    """
    rng = rng or random.Random()
    difficulty = character.world_difficulty
    level = character.level
    rewards = rarity_rewards(monster, level, rng)

    gain = DIFFICULTY_GAIN_UNIQUE if monster.rarity == MonsterRarity.UNIQUE else DIFFICULTY_GAIN
    character.world_difficulty = min(MAX_WORLD_DIFFICULTY, difficulty + gain)
    character.gold += rewards.gold

    outcome = VictoryOutcome(xp=rewards.xp, gold=rewards.gold)
    outcome.faded_effects = tick_active_effects(character)

    for _ in range(MERCHANT_RESTOCK_COUNT):
        item = generate_loot(level, difficulty * MERCHANT_RESTOCK_DIFFICULTY, rng=rng)
        if item is not None:
            outcome.restocked.append(item.model_copy(update={"is_identified": True}))
    character.merchant_stock = (character.merchant_stock + outcome.restocked)[-MAX_MERCHANT_STOCK:]

    node = _find_node(character, character.current_area_id)
    if node is not None and not node.is_cleared:
        if is_boss:
            node.is_cleared = True
            for other in character.map_nodes:
                if other.id in node.connections:
                    other.is_unlocked = True
            outcome.area_cleared = True
        else:
            step = AREA_PROGRESS_MYTHIC if monster.rarity == MonsterRarity.MYTHIC else AREA_PROGRESS_PER_WIN
            character.area_progress = min(100, character.area_progress + step)

    outcome.level_ups = gain_xp(character, rewards.xp, rng)

    stat_mult = MONSTER_RARITY_CONFIG[monster.rarity].stat_mult
    for _ in range(LOOT_ROLLS.get(monster.rarity, 1)):
        drop = generate_loot(level, difficulty * stat_mult, player_stats.magic_find, rng)
        if drop is not None:
            outcome.drops.append(drop)
    character.ground_items.extend(outcome.drops)

    logger.info(
        "victory",
        monster=monster.name,
        rarity=str(monster.rarity),
        xp=rewards.xp,
        gold=rewards.gold,
        drops=len(outcome.drops),
        world_difficulty=round(character.world_difficulty, 2),
    )
    return outcome


def apply_defeat(character: CharacterState) -> DefeatOutcome:
    """Book a lost battle: lose part of gold and XP, ease the world."""
    gold = math.floor(character.gold * DEFEAT_GOLD_KEPT)
    xp = math.floor(character.xp * DEFEAT_XP_KEPT)
    outcome = DefeatOutcome(gold_lost=character.gold - gold, xp_lost=character.xp - xp)

    character.gold = gold
    character.xp = xp
    character.world_difficulty = max(MIN_WORLD_DIFFICULTY, character.world_difficulty - DIFFICULTY_LOSS)
    outcome.faded_effects = tick_active_effects(character)

    logger.info("defeat", gold_lost=outcome.gold_lost, xp_lost=outcome.xp_lost)
    return outcome


# =============================================================================
# EXPLORATION
# =============================================================================


@dataclass(frozen=True)
class ExplorationEvent:
    """A non-combat encounter."""

    id: str
    title: str
    description: str
    icon: str = ""
    stat_type: Optional[StatType] = None
    value: float = 0.0
    duration: int = 0
    gold_range: Optional[tuple[int, int]] = None
    item_chance: float = 0.0
    hp_loss_percent: float = 0.0
    xp_multiplier: float = 0.0
    grant_skill_rarity: Optional[Rarity] = None


EXPLORATION_EVENTS: tuple[ExplorationEvent, ...] = (
    ExplorationEvent("shrine_might", "Shrine of Might",
                     "You find a glowing red obelisk. You feel power coursing through your veins.",
                     icon="fire", stat_type=StatType.DAMAGE, value=20, duration=5),
    ExplorationEvent("shrine_protection", "Shrine of Stone",
                     "An ancient statue hums with defensive energy. Your skin hardens.",
                     icon="shield", stat_type=StatType.ARMOR, value=50, duration=5),
    ExplorationEvent("shrine_fortune", "Shrine of Fortune",
                     "A golden aura surrounds this shrine. You feel lucky.",
                     icon="clover", stat_type=StatType.MAGIC_FIND, value=50, duration=5),
    ExplorationEvent("chest_common", "Rotting Chest",
                     "You kick open an old wooden chest found in the mud.",
                     icon="box", gold_range=(10, 50), item_chance=0.3),
    ExplorationEvent("chest_rare", "Gilded Chest",
                     "A beautifully crafted chest sits untouched in the shadows.",
                     icon="urn", gold_range=(100, 300), item_chance=1.0),
    ExplorationEvent("trap_spikes", "Spike Trap",
                     "You step on a pressure plate! Spikes shoot up from the ground.",
                     icon="blood", hp_loss_percent=0.15),
    ExplorationEvent("trap_poison", "Poison Gas",
                     "A vent releases a cloud of green gas. You cough violently.",
                     icon="nausea", stat_type=StatType.VITALITY, value=-5, duration=3, hp_loss_percent=0.05),
    ExplorationEvent("curse_weakness", "Cursed Idol",
                     "You disturb a small idol. A feeling of crushing weakness washes over you.",
                     icon="skull", stat_type=StatType.DAMAGE, value=-5, duration=4),
    ExplorationEvent("encounter_tome", "Ancient Tome",
                     "You find a dusty tome containing forgotten combat techniques.",
                     icon="book", xp_multiplier=0.5),
    ExplorationEvent("ancient_obelisk", "Ancient Obelisk",
                     "A monolith etched with glowing runes pulses with knowledge. It offers a secret technique.",
                     icon="scroll", grant_skill_rarity=Rarity.RARE),
)


@dataclass
class EventOutcome:
    """Resolved effects of an exploration event."""

    event: ExplorationEvent
    gold: int = 0
    item: Optional[Item] = None
    hp_loss: int = 0
    xp: int = 0
    effect: Optional[ActiveEffect] = None
    skill_roll: Optional[SkillRoll] = None
    level_ups: list[LevelUp] = field(default_factory=list)


def resolve_event(
    character: CharacterState,
    event: ExplorationEvent,
    player_stats: PlayerStats,
    rng: Optional[random.Random] = None,
) -> EventOutcome:
    """
    Apply an exploration event.

    HP loss is reported, not applied; the caller owns between-battle HP
    and never lets it drop below 1.
    """
    rng = rng or random.Random()
    outcome = EventOutcome(event=event)

    if event.gold_range is not None:
        outcome.gold = rng.randint(*event.gold_range)
        character.gold += outcome.gold

    if event.item_chance and rng.random() < event.item_chance:
        item = generate_loot(character.level, 1.0, player_stats.magic_find + EVENT_ITEM_MAGIC_FIND_BONUS, rng)
        if item is not None and add_to_inventory(character, item):
            outcome.item = item

    if event.hp_loss_percent:
        outcome.hp_loss = math.floor(player_stats.max_hp * event.hp_loss_percent)

    if event.xp_multiplier:
        outcome.xp = math.floor(get_xp_to_next_level(character.level) * event.xp_multiplier * EVENT_XP_FACTOR)
        outcome.level_ups = gain_xp(character, outcome.xp, rng)

    if event.stat_type is not None:
        outcome.effect = add_active_effect(character, ActiveEffect(
            id=uuid.uuid4().hex[:8],
            name=event.title,
            description=event.description,
            stat_type=event.stat_type,
            value=event.value,
            duration=event.duration,
            is_debuff=event.value < 0,
            icon=event.icon,
        ))

    if event.grant_skill_rarity is not None:
        roll = generate_passive_skill(
            character.passive_skills, SkillRollFilters(exact_rarity=event.grant_skill_rarity), rng
        )
        merge_skill(character.passive_skills, roll.skill)
        outcome.skill_roll = roll

    return outcome


@dataclass
class Encounter:
    """A monster to fight, with the context needed to book the outcome."""

    monster: Monster
    level: int
    is_boss: bool
    terrain: Optional[Terrain] = None

    def environment(self, is_night: bool = False) -> BattleEnvironment:
        return BattleEnvironment(terrain=self.terrain, is_night=is_night)


def encounter_level(character: CharacterState, area: Area) -> int:
    return max(area.level, (character.level + area.level) // 2)


def explore(
    character: CharacterState,
    player_stats: PlayerStats,
    rng: Optional[random.Random] = None,
) -> Union[Encounter, EventOutcome, None]:
    """
    Take one exploration step in the current area.

    A full progress bar on an uncleared area summons its boss at raised
    difficulty. Otherwise a random event may fire instead of a fight.
    """
    rng = rng or random.Random()
    area = get_area(character.current_area_id)
    node = _find_node(character, character.current_area_id)
    if area is None:
        logger.warning("explore_rejected", area_id=character.current_area_id, reason="unknown_area")
        return None

    character.ground_items = []
    is_boss = character.area_progress >= 100 and node is not None and not node.is_cleared

    if not is_boss and rng.random() < EVENT_CHANCE:
        return resolve_event(character, rng.choice(EXPLORATION_EVENTS), player_stats, rng)

    level = encounter_level(character, area)
    if is_boss:
        monster = generate_boss(level, character.world_difficulty * BOSS_DIFFICULTY_MULTIPLIER, area.name, rng)
    else:
        monster = generate_monster(level, character.world_difficulty, rng)
    return Encounter(monster=monster, level=level, is_boss=is_boss, terrain=area.terrain)
