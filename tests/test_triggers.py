"""Tests for proc, set bonus, synergy and maledict dispatch."""

import random

import pytest

from voidloot.combat.combat_unit import Combatant
from voidloot.combat.status_effects import StatusEffect, StatusEffectSystem
from voidloot.combat.triggers import (
    TriggerContext,
    TriggerDispatcher,
    resolve_proc_skills,
    resolve_set_bonuses,
    resolve_synergies,
)
from voidloot.data.loaders import (
    get_maledict_by_id,
    get_synergy_by_id,
    load_passive_skills,
    load_set_bonuses,
    load_synergies,
)
from voidloot.data.models import (
    CombatTrigger,
    PassiveSetBonus,
    PassiveSkillDefinition,
    PassiveTheme,
    ProcCondition,
    ProcConditionType,
    ProcCost,
    ProcCostType,
    ProcDefinition,
    ProcEffect,
    ProcEffectType,
    SetBonusProc,
    Side,
    StatusType,
)


def create_combatant(side: Side, hp: float = 100, damage: float = 20) -> Combatant:
    return Combatant(side=side, name=str(side), max_hp=hp, current_hp=hp, damage=damage,
                     armor=0, crit_chance=0, dodge_chance=0, dexterity=10)


def proc_skill(effect: ProcEffect, trigger=CombatTrigger.ON_HIT, **proc_fields) -> PassiveSkillDefinition:
    """Create a test skill whose proc always fires."""
    return PassiveSkillDefinition(
        id="test_proc",
        name="Test Proc",
        theme=PassiveTheme.ARCANE,
        proc=ProcDefinition(trigger=trigger, chance=1.0, effect=effect, **proc_fields),
    )


@pytest.fixture
def context():
    events = []
    ctx = TriggerContext(
        player=create_combatant(Side.PLAYER),
        enemy=create_combatant(Side.ENEMY, hp=500),
        status_effects=StatusEffectSystem(),
        rng=random.Random(1),
        turn_queue=[Side.PLAYER, Side.ENEMY, Side.ENEMY],
        log_event=lambda event_type, data: events.append((event_type, data)),
    )
    ctx.events = events
    return ctx


class TestSkillProcs:
    """Passive skill proc tests."""

    def test_damage_proc(self, context):
        skill = proc_skill(ProcEffect(type=ProcEffectType.DAMAGE, value=2.0), CombatTrigger.ON_START_TURN)
        dispatcher = TriggerDispatcher(context, skills=[skill])

        dealt = dispatcher.process(CombatTrigger.ON_START_TURN, Side.PLAYER)

        assert dealt == 40
        assert context.enemy.current_hp == 460
        assert context.player.total_damage_dealt == 40

    def test_multi_hit_uses_damage_dealt(self, context):
        skill = proc_skill(ProcEffect(type=ProcEffectType.MULTI_HIT, value=0.5), CombatTrigger.ON_CRIT)
        dispatcher = TriggerDispatcher(context, skills=[skill])
        assert dispatcher.process(CombatTrigger.ON_CRIT, Side.PLAYER, damage_dealt=31) == 15

    def test_heal_proc(self, context):
        context.player.current_hp = 10
        skill = proc_skill(ProcEffect(type=ProcEffectType.HEAL, value=0.3), CombatTrigger.ON_KILL)
        TriggerDispatcher(context, skills=[skill]).process(CombatTrigger.ON_KILL, Side.PLAYER)
        assert context.player.current_hp == 40

    def test_debuff_lands_on_enemy(self, context):
        skill = proc_skill(ProcEffect(type=ProcEffectType.DEBUFF, status=StatusType.STUN, value=1, duration=1))
        TriggerDispatcher(context, skills=[skill]).process(CombatTrigger.ON_HIT, Side.PLAYER)
        assert not context.status_effects.can_act(Side.ENEMY)

    def test_damaging_buff_still_targets_enemy(self, context):
        skill = proc_skill(ProcEffect(type=ProcEffectType.BUFF, status=StatusType.BURN, value=0.1))
        TriggerDispatcher(context, skills=[skill]).process(CombatTrigger.ON_HIT, Side.PLAYER)
        burn = context.status_effects.get_effect(Side.ENEMY, StatusType.BURN)
        assert burn is not None
        assert burn.duration == 3

    def test_shield_proc(self, context):
        skill = proc_skill(ProcEffect(type=ProcEffectType.SHIELD, value=1), CombatTrigger.ON_TAKE_DAMAGE)
        TriggerDispatcher(context, skills=[skill]).process(CombatTrigger.ON_TAKE_DAMAGE, Side.PLAYER)
        assert context.status_effects.has_effect(Side.PLAYER, StatusType.SHIELD)

    def test_cleanse_proc(self, context):
        context.status_effects.apply_effect(StatusEffect(type=StatusType.POISON, name="Plague",
                                                         target=Side.PLAYER, duration=3, value=0.03))
        skill = proc_skill(ProcEffect(type=ProcEffectType.CLEANSE))
        TriggerDispatcher(context, skills=[skill]).process(CombatTrigger.ON_HIT, Side.PLAYER)
        assert context.status_effects.get_effects(Side.PLAYER) == []

    def test_cooldown(self, context):
        """Test a proc on cooldown waits the given number of player turns."""
        skill = proc_skill(ProcEffect(type=ProcEffectType.DAMAGE, value=1.0), cooldown=2)
        dispatcher = TriggerDispatcher(context, skills=[skill])

        assert dispatcher.process(CombatTrigger.ON_HIT, Side.PLAYER) == 20
        dispatcher.start_player_turn()
        assert dispatcher.process(CombatTrigger.ON_HIT, Side.PLAYER) == 0
        dispatcher.start_player_turn()
        assert dispatcher.process(CombatTrigger.ON_HIT, Side.PLAYER) == 20

        procs = [e for e in context.events if e[0] == "skill_proc"]
        assert len(procs) == 2

    def test_condition_blocks(self, context):
        skill = proc_skill(
            ProcEffect(type=ProcEffectType.DAMAGE, value=1.0),
            conditions=[ProcCondition(type=ProcConditionType.HP_BELOW, value=0.3)],
        )
        dispatcher = TriggerDispatcher(context, skills=[skill])
        assert dispatcher.process(CombatTrigger.ON_HIT, Side.PLAYER) == 0

        context.player.current_hp = 25
        assert dispatcher.process(CombatTrigger.ON_HIT, Side.PLAYER) == 20

    def test_turn_multiple_condition(self, context):
        skill = proc_skill(
            ProcEffect(type=ProcEffectType.DAMAGE, value=1.0),
            CombatTrigger.ON_START_TURN,
            conditions=[ProcCondition(type=ProcConditionType.TURN_COUNT_MULTIPLE, value=3)],
        )
        dispatcher = TriggerDispatcher(context, skills=[skill])
        fired = []
        for _ in range(6):
            dispatcher.start_player_turn()
            fired.append(dispatcher.process(CombatTrigger.ON_START_TURN, Side.PLAYER) > 0)
        assert fired == [False, False, True, False, False, True]

    def test_hp_cost_paid(self, context):
        skill = proc_skill(
            ProcEffect(type=ProcEffectType.BUFF, status=StatusType.SCALING_STRENGTH, value=5, duration=99),
            CombatTrigger.ON_START_TURN,
            cost=ProcCost(type=ProcCostType.HP_PERCENT, value=0.05),
        )
        TriggerDispatcher(context, skills=[skill]).process(CombatTrigger.ON_START_TURN, Side.PLAYER)

        assert context.player.current_hp == 95
        assert context.status_effects.effect_value(Side.PLAYER, StatusType.SCALING_STRENGTH) == 5

    def test_unaffordable_cost_skips(self, context):
        context.player.current_hp = 5
        skill = proc_skill(
            ProcEffect(type=ProcEffectType.DAMAGE, value=1.0),
            cost=ProcCost(type=ProcCostType.HP_FLAT, value=5),
        )
        assert TriggerDispatcher(context, skills=[skill]).process(CombatTrigger.ON_HIT, Side.PLAYER) == 0
        assert context.player.current_hp == 5

    def test_trigger_mismatch(self, context):
        skill = proc_skill(ProcEffect(type=ProcEffectType.DAMAGE, value=1.0), CombatTrigger.ON_CRIT)
        assert TriggerDispatcher(context, skills=[skill]).process(CombatTrigger.ON_HIT, Side.PLAYER) == 0


class TestSetBonusesAndSynergies:
    """Set bonus and synergy tests."""

    def test_set_bonus_burn_stacks(self, context):
        bonus = PassiveSetBonus(
            theme=PassiveTheme.PYROMANCY, name="Avatar of Flame", required_count=3,
            trigger=CombatTrigger.ON_HIT, proc_chance=1.0,
            proc_effect=SetBonusProc(type=StatusType.BURN, duration=3, value=0.1),
        )
        dispatcher = TriggerDispatcher(context, set_bonuses=[bonus])
        dispatcher.process(CombatTrigger.ON_HIT, Side.PLAYER)
        dispatcher.process(CombatTrigger.ON_HIT, Side.PLAYER)

        assert context.status_effects.total_stacks(Side.ENEMY, StatusType.BURN) == 2

    def test_regen_bonus_lands_on_player(self, context):
        bonus = PassiveSetBonus(
            theme=PassiveTheme.SENTINEL, name="Iron Fortress", required_count=3,
            trigger=CombatTrigger.ON_TAKE_DAMAGE, proc_chance=1.0,
            proc_effect=SetBonusProc(type=StatusType.REGEN, duration=2, value=0.05),
        )
        TriggerDispatcher(context, set_bonuses=[bonus]).process(CombatTrigger.ON_TAKE_DAMAGE, Side.PLAYER)
        assert context.status_effects.has_effect(Side.PLAYER, StatusType.REGEN)

    def test_frostburn_needs_chill(self, context):
        """Test frostburn bursts for damage x 2 only against a chilled enemy."""
        dispatcher = TriggerDispatcher(context, synergies=[get_synergy_by_id("frostburn")])
        assert dispatcher.process(CombatTrigger.ON_HIT, Side.PLAYER, 10) == 0

        context.status_effects.apply_effect(StatusEffect(type=StatusType.CHILL, name="Absolute Zero",
                                                         target=Side.ENEMY, duration=3, value=0.2))
        assert dispatcher.process(CombatTrigger.ON_HIT, Side.PLAYER, 10) == 40
        assert context.enemy.current_hp == 460

    def test_biohazard_poisons_attacker(self, context):
        dispatcher = TriggerDispatcher(context, synergies=[get_synergy_by_id("biohazard")])
        assert dispatcher.has_synergy("biohazard")

        dispatcher.process(CombatTrigger.ON_TAKE_DAMAGE, Side.PLAYER)
        poison = context.status_effects.get_effect(Side.ENEMY, StatusType.POISON)
        assert poison.value == 0.1

    def test_dark_momentum_grants_dodge(self, context):
        dispatcher = TriggerDispatcher(context, synergies=[get_synergy_by_id("dark_momentum")])
        dispatcher.process(CombatTrigger.ON_CRIT, Side.PLAYER)
        assert context.status_effects.effect_value(Side.PLAYER, StatusType.DODGE_BOOST) == 50


class TestMaledicts:
    """Monster affix tests."""

    def test_plague_poisons_player(self, context):
        context.maledicts = [get_maledict_by_id("plague")]
        TriggerDispatcher(context).process(CombatTrigger.ON_START_TURN, Side.ENEMY)
        assert context.status_effects.has_effect(Side.PLAYER, StatusType.POISON)

    def test_arcane_shields_monster(self, context):
        context.maledicts = [get_maledict_by_id("arcane")]
        TriggerDispatcher(context).process(CombatTrigger.ON_START_TURN, Side.ENEMY)
        assert context.status_effects.has_effect(Side.ENEMY, StatusType.SHIELD)

    def test_shuffle_keeps_tokens(self, context, monkeypatch):
        context.maledicts = [get_maledict_by_id("timewarp")]
        monkeypatch.setattr(context.rng, "random", lambda: 0.0)
        before = sorted(context.turn_queue)

        TriggerDispatcher(context).process(CombatTrigger.ON_ATTACK, Side.ENEMY)

        assert sorted(context.turn_queue) == before
        assert any(e[0] == "maledict_proc" for e in context.events)

    def test_molten_reacts_to_player_hits(self, context, monkeypatch):
        context.maledicts = [get_maledict_by_id("molten")]
        monkeypatch.setattr(context.rng, "random", lambda: 0.0)

        TriggerDispatcher(context).process(CombatTrigger.ON_HIT, Side.PLAYER, 10)
        assert context.status_effects.has_effect(Side.PLAYER, StatusType.BURN)

    def test_player_sources_ignored_on_enemy_turn(self, context):
        skill = proc_skill(ProcEffect(type=ProcEffectType.DAMAGE, value=1.0))
        assert TriggerDispatcher(context, skills=[skill]).process(CombatTrigger.ON_HIT, Side.ENEMY) == 0


class TestResolvers:
    """Catalog filtering helpers."""

    def test_proc_skills_only(self):
        skills = resolve_proc_skills(load_passive_skills(), ["magma_veins", "echo_strike", "mana_shield"])
        assert [s.id for s in skills] == ["echo_strike", "mana_shield"]

    def test_set_bonuses_by_theme(self):
        bonuses = resolve_set_bonuses(load_set_bonuses(), [PassiveTheme.SHADOW])
        assert [b.name for b in bonuses] == ["Assassin's Creed"]

    def test_synergies_by_id(self):
        assert [s.id for s in resolve_synergies(load_synergies(), ["biohazard"])] == ["biohazard"]
