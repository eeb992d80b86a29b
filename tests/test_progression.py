"""Tests for character progression: inventory, XP, battle outcomes, exploration."""

import random

import pytest

from voidloot.core.flavor import LORE_FALLBACK, FlavorDispatcher, StaticFlavorProvider
from voidloot.core.progression import (
    EXPLORATION_EVENTS,
    WORLD_MAP,
    Encounter,
    EventOutcome,
    add_active_effect,
    add_to_inventory,
    allocate_stat_point,
    apply_defeat,
    apply_victory,
    buy_item,
    encounter_level,
    equip_item,
    explore,
    gain_xp,
    get_area,
    identify_all,
    new_character,
    pick_up_ground_items,
    resolve_event,
    sell_items,
    tick_active_effects,
    travel,
    unequip_item,
)
from voidloot.data.models import (
    ActiveEffect,
    CharacterState,
    Item,
    ItemSlot,
    ItemStat,
    Monster,
    MonsterRarity,
    PlayerStats,
    Rarity,
    StatType,
    Terrain,
)


def create_test_item(name: str = "Sword", identified: bool = True, slot: ItemSlot = ItemSlot.MAIN_HAND) -> Item:
    """Create a rare level 2 item worth 185 gold when identified."""
    return Item(
        id=f"item-{name}-{identified}",
        name=name if identified else f"Unidentified {name}",
        slot=slot,
        rarity=Rarity.RARE,
        level=2,
        stats=[ItemStat(type=StatType.DAMAGE, value=6), ItemStat(type=StatType.STRENGTH, value=4)],
        is_identified=identified,
    )


def create_player_stats(max_hp: float = 100) -> PlayerStats:
    return PlayerStats(strength=10, dexterity=10, intelligence=10, vitality=10,
                       damage=10, armor=5, magic_find=0, max_hp=max_hp)


def create_monster(rarity: MonsterRarity = MonsterRarity.COMMON) -> Monster:
    return Monster(id="ghoul", name="Ghoul", level=1, rarity=rarity, max_hp=50, current_hp=0, damage=5)


def get_event(event_id: str):
    return next(e for e in EXPLORATION_EVENTS if e.id == event_id)


def create_effect(name: str = "Shrine of Might", duration: int = 3, value: float = 20) -> ActiveEffect:
    return ActiveEffect(id=name, name=name, stat_type=StatType.DAMAGE, value=value, duration=duration)


class TestNewCharacter:
    """Fresh save tests."""

    def test_starting_state(self):
        character = new_character(random.Random(1))

        assert character.level == 1
        assert character.current_area_id == "town"
        assert len(character.map_nodes) == len(WORLD_MAP)
        assert [n.id for n in character.map_nodes if n.is_unlocked] == ["town"]
        assert len(character.merchant_stock) <= 4
        assert all(item.is_identified for item in character.merchant_stock)


class TestTravel:
    """World map travel tests."""

    def test_locked_area_rejected(self):
        character = new_character(random.Random(1))
        assert not travel(character, "void")
        assert character.current_area_id == "town"

    def test_unknown_area_rejected(self):
        assert not travel(new_character(random.Random(1)), "atlantis")

    def test_progress_resets_and_cleared_areas_are_full(self):
        character = new_character(random.Random(1))
        character.area_progress = 50
        graveyard = next(n for n in character.map_nodes if n.id == "graveyard")
        graveyard.is_unlocked = True

        assert travel(character, "graveyard")
        assert character.area_progress == 0

        graveyard.is_cleared = True
        assert travel(character, "graveyard")
        assert character.area_progress == 100


class TestInventory:
    """Inventory and merchant tests."""

    def test_add_uses_first_empty_slot(self):
        character = CharacterState()
        character.inventory[0] = create_test_item("Axe")

        assert add_to_inventory(character, create_test_item())
        assert character.inventory[1].name == "Sword"

    def test_full_inventory_rejects(self):
        character = CharacterState(inventory=[create_test_item(f"Blade{i}") for i in range(40)])
        assert not add_to_inventory(character, create_test_item())

    def test_equip_requires_identification(self):
        character = CharacterState()
        character.inventory[0] = create_test_item(identified=False)

        assert not equip_item(character, 0)
        assert character.equipment == {}

    def test_equip_swaps_previous_item(self):
        character = CharacterState()
        old = create_test_item("Club")
        character.equipment[ItemSlot.MAIN_HAND] = old
        character.inventory[3] = create_test_item("Sword")

        assert equip_item(character, 3)
        assert character.equipment[ItemSlot.MAIN_HAND].name == "Sword"
        assert character.inventory[3] == old

    def test_unequip(self):
        character = CharacterState()
        character.equipment[ItemSlot.MAIN_HAND] = create_test_item()

        assert unequip_item(character, ItemSlot.MAIN_HAND)
        assert ItemSlot.MAIN_HAND not in character.equipment
        assert character.inventory[0].name == "Sword"
        assert not unequip_item(character, ItemSlot.HEAD)

    def test_sell_identified_and_unidentified(self):
        character = CharacterState()
        character.inventory[0] = create_test_item()
        character.inventory[1] = create_test_item(identified=False)

        assert sell_items(character, [0, 1, 1, 25]) == 185 + 92
        assert character.gold == 277
        assert character.inventory[0] is None
        assert character.inventory[1] is None

    def test_buy(self):
        character = CharacterState(gold=600, merchant_stock=[create_test_item()])

        assert buy_item(character, 0)
        assert character.gold == 45
        assert character.merchant_stock == []
        assert character.inventory[0].name == "Sword"

    def test_buy_without_gold(self):
        character = CharacterState(gold=554, merchant_stock=[create_test_item()])
        assert not buy_item(character, 0)
        assert character.gold == 554
        assert len(character.merchant_stock) == 1

    def test_identify_all_is_all_or_nothing(self):
        """Test a batch costing more than the purse identifies nothing."""
        character = CharacterState(gold=299)
        character.inventory[0] = create_test_item("Sword", identified=False)
        character.inventory[5] = create_test_item("Shield", identified=False, slot=ItemSlot.OFF_HAND)

        assert identify_all(character) == 0
        assert character.gold == 299

        character.gold = 300
        assert identify_all(character) == 2
        assert character.gold == 0
        assert character.inventory[0].is_identified
        assert character.inventory[0].name == "Ancient Sword"
        assert character.inventory[5].name == "Ancient Shield"

    def test_pick_up_ground_items(self):
        character = CharacterState(inventory=[create_test_item(f"Blade{i}") for i in range(39)] + [None])
        character.ground_items = [create_test_item("Axe"), create_test_item("Mace")]

        assert pick_up_ground_items(character) == 1
        assert [i.name for i in character.ground_items] == ["Mace"]

    def test_allocate_stat_point(self):
        character = CharacterState(stat_points=1)

        assert not allocate_stat_point(character, "charisma")
        assert allocate_stat_point(character, "vitality")
        assert character.base_attributes.vitality == 11
        assert not allocate_stat_point(character, "vitality")


class LoreProvider(StaticFlavorProvider):
    def passive_lore(self, skill_name, description):
        return f"{skill_name} remembers."


class SilentProvider(StaticFlavorProvider):
    def passive_lore(self, skill_name, description):
        return ""


class TestExperience:
    """XP and level-up tests."""

    def test_single_level_carries_overflow(self):
        character = CharacterState()
        level_ups = gain_xp(character, 250, random.Random(5))

        assert [lu.level for lu in level_ups] == [2]
        assert character.level == 2
        assert character.xp == 150
        assert character.stat_points == 3
        assert character.skill_points == 1
        assert len(character.passive_skills) == 1
        assert level_ups[0].lore == LORE_FALLBACK

    def test_multiple_levels(self):
        character = CharacterState()
        level_ups = gain_xp(character, 300, random.Random(5))

        assert len(level_ups) == 2
        assert character.level == 3
        assert character.xp == 0
        assert character.stat_points == 6

    def test_not_enough_xp(self):
        character = CharacterState()
        assert gain_xp(character, 99, random.Random(5)) == []
        assert character.level == 1

    def test_lore_from_provider(self):
        character = CharacterState()
        level_ups = gain_xp(character, 100, random.Random(5), flavor=FlavorDispatcher(LoreProvider()))
        assert level_ups[0].lore == f"{level_ups[0].skill_roll.skill.name} remembers."

    def test_empty_lore_falls_back(self):
        character = CharacterState()
        level_ups = gain_xp(character, 100, random.Random(5), flavor=FlavorDispatcher(SilentProvider()))
        assert level_ups[0].lore == LORE_FALLBACK


class TestActiveEffects:
    """Cross-battle effect tests."""

    def test_same_name_extends(self):
        character = CharacterState()
        add_active_effect(character, create_effect(duration=3))
        add_active_effect(character, create_effect(duration=5))

        assert len(character.active_effects) == 1
        assert character.active_effects[0].duration == 8

    def test_tick_drops_expiring(self):
        character = CharacterState()
        add_active_effect(character, create_effect("Shrine of Might", duration=1))
        add_active_effect(character, create_effect("Shrine of Stone", duration=2))

        faded = tick_active_effects(character)

        assert [e.name for e in faded] == ["Shrine of Might"]
        assert [(e.name, e.duration) for e in character.active_effects] == [("Shrine of Stone", 1)]


class TestBattleOutcomes:
    """Victory and defeat bookkeeping tests."""

    def test_victory_rewards(self):
        character = new_character(random.Random(2))
        add_active_effect(character, create_effect(duration=2))

        outcome = apply_victory(character, create_monster(), create_player_stats(), rng=random.Random(8))

        assert character.gold == outcome.gold
        assert outcome.xp > 0
        assert character.world_difficulty == pytest.approx(1.02)
        assert character.area_progress == 10
        assert character.ground_items == outcome.drops
        assert len(character.merchant_stock) <= 8
        assert character.active_effects[0].duration == 1

    def test_unique_raises_difficulty_more(self):
        character = new_character(random.Random(2))
        apply_victory(character, create_monster(MonsterRarity.UNIQUE), create_player_stats(), rng=random.Random(8))
        assert character.world_difficulty == pytest.approx(1.05)

    def test_difficulty_capped(self):
        character = new_character(random.Random(2))
        character.world_difficulty = 3.49
        apply_victory(character, create_monster(), create_player_stats(), rng=random.Random(8))
        assert character.world_difficulty == 3.5

    def test_mythic_advances_area_faster(self):
        character = new_character(random.Random(2))
        character.area_progress = 80
        apply_victory(character, create_monster(MonsterRarity.MYTHIC), create_player_stats(), rng=random.Random(8))
        assert character.area_progress == 100

    def test_boss_clears_and_unlocks(self):
        """Test a boss kill clears the area and unlocks its neighbours."""
        character = new_character(random.Random(2))
        character.area_progress = 100

        outcome = apply_victory(character, create_monster(MonsterRarity.UNIQUE), create_player_stats(),
                                is_boss=True, rng=random.Random(8))

        unlocked = {n.id for n in character.map_nodes if n.is_unlocked}
        assert outcome.area_cleared
        assert unlocked == {"town", "graveyard", "fields"}
        assert next(n for n in character.map_nodes if n.id == "town").is_cleared

    def test_defeat_penalty(self):
        character = CharacterState(gold=101, xp=75)
        add_active_effect(character, create_effect(duration=1))

        outcome = apply_defeat(character)

        assert character.gold == 80
        assert character.xp == 37
        assert outcome.gold_lost == 21
        assert outcome.xp_lost == 38
        assert character.world_difficulty == pytest.approx(0.85)
        assert [e.name for e in outcome.faded_effects] == ["Shrine of Might"]

    def test_defeat_difficulty_floor(self):
        character = CharacterState(world_difficulty=0.7)
        apply_defeat(character)
        assert character.world_difficulty == 0.6


class TestExplorationEvents:
    """Exploration event tests."""

    def test_chest_gold(self):
        character = CharacterState()
        outcome = resolve_event(character, get_event("chest_common"), create_player_stats(), random.Random(4))
        assert 10 <= outcome.gold <= 50
        assert character.gold == outcome.gold

    def test_gilded_chest_always_drops(self):
        character = CharacterState()
        outcome = resolve_event(character, get_event("chest_rare"), create_player_stats(), random.Random(4))
        assert 100 <= outcome.gold <= 300
        if outcome.item is not None:
            assert outcome.item in character.inventory

    def test_trap_reports_hp_loss(self):
        character = CharacterState()
        outcome = resolve_event(character, get_event("trap_spikes"), create_player_stats(max_hp=100), random.Random(4))
        assert outcome.hp_loss == 15
        assert character.active_effects == []

    def test_shrine_adds_effect(self):
        character = CharacterState()
        outcome = resolve_event(character, get_event("shrine_might"), create_player_stats(), random.Random(4))

        assert outcome.effect.stat_type == StatType.DAMAGE
        assert outcome.effect.value == 20
        assert outcome.effect.duration == 5
        assert not outcome.effect.is_debuff

        resolve_event(character, get_event("shrine_might"), create_player_stats(), random.Random(4))
        assert len(character.active_effects) == 1
        assert character.active_effects[0].duration == 10

    def test_curse_is_debuff(self):
        character = CharacterState()
        outcome = resolve_event(character, get_event("curse_weakness"), create_player_stats(), random.Random(4))
        assert outcome.effect.is_debuff

    def test_poison_gas_has_both(self):
        character = CharacterState()
        outcome = resolve_event(character, get_event("trap_poison"), create_player_stats(), random.Random(4))
        assert outcome.hp_loss == 5
        assert outcome.effect.stat_type == StatType.VITALITY

    def test_tome_grants_xp(self):
        character = CharacterState()
        outcome = resolve_event(character, get_event("encounter_tome"), create_player_stats(), random.Random(4))
        assert outcome.xp == 5
        assert character.xp == 5

    def test_obelisk_grants_rare_skill(self):
        character = CharacterState()
        outcome = resolve_event(character, get_event("ancient_obelisk"), create_player_stats(), random.Random(4))
        assert outcome.skill_roll.skill.rarity == Rarity.RARE
        assert character.get_passive(outcome.skill_roll.skill.id) is not None


class TestExplore:
    """Exploration step tests."""

    def test_full_progress_summons_boss(self):
        character = new_character(random.Random(2))
        character.area_progress = 100
        character.ground_items = [create_test_item()]

        encounter = explore(character, create_player_stats(), random.Random(6))

        assert isinstance(encounter, Encounter)
        assert encounter.is_boss
        assert encounter.monster.name == "Overlord of Tristram Ruins"
        assert encounter.monster.rarity == MonsterRarity.UNIQUE
        assert character.ground_items == []

    def test_steps_mix_fights_and_events(self):
        character = new_character(random.Random(2))
        rng = random.Random(10)
        results = [explore(character, create_player_stats(), rng) for _ in range(60)]

        fights = [r for r in results if isinstance(r, Encounter)]
        events = [r for r in results if isinstance(r, EventOutcome)]
        assert len(fights) + len(events) == 60
        assert fights and events
        assert all(not f.is_boss and f.level == 1 for f in fights)

    def test_unknown_area(self):
        character = CharacterState(current_area_id="atlantis")
        assert explore(character, create_player_stats(), random.Random(1)) is None

    def test_encounter_level(self):
        crypt = get_area("crypt")
        assert encounter_level(CharacterState(level=1), crypt) == 10
        assert encounter_level(CharacterState(level=20), crypt) == 15

    def test_encounter_carries_area_terrain(self):
        character = new_character(random.Random(2))
        character.area_progress = 100

        encounter = explore(character, create_player_stats(), random.Random(6))

        assert encounter.terrain == Terrain.RUINS
        environment = encounter.environment(is_night=True)
        assert environment.terrain == Terrain.RUINS
        assert environment.is_night

    def test_every_area_has_terrain(self):
        terrains = {area.id: area.terrain for area in WORLD_MAP}
        assert terrains["forest"] == Terrain.FOREST
        assert terrains["swamp"] == Terrain.SWAMP
        assert terrains["graveyard"] == terrains["crypt"] == Terrain.CRYPT
