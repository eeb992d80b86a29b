"""Tests for Status Effects System."""

import pytest

from voidloot.combat.combat_unit import Combatant
from voidloot.combat.status_effects import (
    StatusEffect,
    StatusEffectSystem,
    create_burn,
    create_poison,
    create_shield,
    create_stun,
)
from voidloot.data.models import Side, StatusType


def create_test_combatant(side: Side = Side.ENEMY, hp: float = 100) -> Combatant:
    """Create a test combatant."""
    return Combatant(
        side=side,
        name=f"Unit_{side}",
        max_hp=hp,
        current_hp=hp,
        damage=10,
        armor=0,
        crit_chance=0,
        dodge_chance=0,
        dexterity=10,
    )


class TestStatusEffectSystem:
    """StatusEffectSystem tests."""

    @pytest.fixture
    def system(self):
        """Create status effect system."""
        return StatusEffectSystem()

    def test_burn_stacks_and_refreshes(self, system):
        """Test a second same-named burn adds a stack and refreshes duration."""
        first = system.apply_effect(create_burn(Side.ENEMY, "Avatar of Flame", 0.1, 3))
        first.duration = 1

        merged = system.apply_effect(create_burn(Side.ENEMY, "Avatar of Flame", 0.1, 3))

        assert merged is first
        assert merged.stacks == 2
        assert merged.duration == 3
        assert len(system.get_effects(Side.ENEMY)) == 1

    def test_stun_does_not_stack(self, system):
        """Test a second stun only refreshes duration."""
        first = system.apply_effect(create_stun(Side.ENEMY, "Titan's Gaze", 1))
        system.apply_effect(create_stun(Side.ENEMY, "Titan's Gaze", 2))

        assert first.stacks == 1
        assert first.duration == 2

    def test_differently_named_effects_coexist(self, system):
        system.apply_effect(create_burn(Side.ENEMY, "Avatar of Flame", 0.1, 3))
        system.apply_effect(create_burn(Side.ENEMY, "Molten", 0.05, 2))
        assert len(system.get_effects(Side.ENEMY)) == 2
        assert system.total_stacks(Side.ENEMY, StatusType.BURN) == 2

    def test_scaling_strength_accumulates_value(self, system):
        system.apply_effect(StatusEffect(type=StatusType.SCALING_STRENGTH, name="Blood Rite",
                                         target=Side.PLAYER, duration=99, value=5))
        merged = system.apply_effect(StatusEffect(type=StatusType.SCALING_STRENGTH, name="Blood Rite",
                                                  target=Side.PLAYER, duration=99, value=5))
        assert merged.value == 10

    def test_stacking_keeps_larger_value(self, system):
        system.apply_effect(create_poison(Side.ENEMY, "Venom", 0.15, 4))
        merged = system.apply_effect(create_poison(Side.ENEMY, "Venom", 0.05, 4))
        assert merged.value == 0.15

    def test_dot_damage_scales_with_stacks(self, system):
        """Test DoT deals floor(maxHp * value * stacks)."""
        enemy = create_test_combatant()
        effect = system.apply_effect(create_burn(Side.ENEMY, "Avatar of Flame", 0.1, 3))
        effect.stacks = 2
        system.current_action = 1

        events = system.process_effects(enemy)

        dot = [e for e in events if e["type"] == "dot_damage"]
        assert dot == [{"type": "dot_damage", "target": "enemy", "effect": "burn", "damage": 20, "stacks": 2}]
        assert enemy.current_hp == 80
        assert effect.duration == 2

    def test_regen_capped_at_max(self, system):
        player = create_test_combatant(Side.PLAYER)
        player.current_hp = 95
        system.apply_effect(StatusEffect(type=StatusType.REGEN, name="Iron Fortress",
                                         target=Side.PLAYER, duration=2, value=0.2))
        system.current_action = 1

        events = system.process_effects(player)

        assert player.current_hp == 100
        assert events[0]["healing"] == 5

    def test_only_holder_effects_tick(self, system):
        """Test processing one side leaves the other side's durations alone."""
        enemy = create_test_combatant(Side.ENEMY)
        on_player = system.apply_effect(create_shield(Side.PLAYER, "Mana Shield", 2))
        system.current_action = 1

        system.process_effects(enemy)
        assert on_player.duration == 2

    def test_fresh_effect_not_aged_same_action(self, system):
        """Test an effect applied during this action is not aged by it."""
        enemy = create_test_combatant()
        system.current_action = 4
        effect = system.apply_effect(create_burn(Side.ENEMY, "Avatar of Flame", 0.1, 3))

        system.process_effects(enemy)
        assert effect.duration == 3

    def test_expiry(self, system):
        enemy = create_test_combatant()
        system.apply_effect(create_stun(Side.ENEMY, "Static Field", 1))
        system.current_action = 1

        events = system.process_effects(enemy)

        assert not system.has_effect(Side.ENEMY, StatusType.STUN)
        assert any(e["type"] == "effect_expired" for e in events)

    def test_stun_and_freeze_prevent_actions(self, system):
        assert system.can_act(Side.ENEMY)
        system.apply_effect(create_stun(Side.ENEMY, "Bribe Fate"))
        assert not system.can_act(Side.ENEMY)
        assert system.can_act(Side.PLAYER)

        system.apply_effect(StatusEffect(type=StatusType.FREEZE, name="Ice", target=Side.PLAYER, duration=1))
        assert not system.can_act(Side.PLAYER)

    def test_cleanse_removes_debuffs_only(self, system):
        system.apply_effect(create_poison(Side.PLAYER, "Plaguebearer", 0.03, 3))
        system.apply_effect(create_burn(Side.PLAYER, "Molten", 0.05, 2))
        system.apply_effect(create_shield(Side.PLAYER, "Mana Shield"))
        system.apply_effect(create_poison(Side.ENEMY, "Biohazard", 0.1, 3))

        removed = system.cleanse(Side.PLAYER)

        assert removed == 2
        assert system.has_effect(Side.PLAYER, StatusType.SHIELD)
        assert system.has_effect(Side.ENEMY, StatusType.POISON)

    def test_consume_shield(self, system):
        system.apply_effect(create_shield(Side.ENEMY, "Arcane Shield"))
        assert system.consume_shield(Side.ENEMY)
        assert not system.consume_shield(Side.ENEMY)

    def test_clear_all(self, system):
        system.apply_effect(create_burn(Side.ENEMY, "Avatar of Flame", 0.1, 3))
        system.current_action = 7
        system.clear_all()
        assert system.get_effects() == []
        assert system.current_action == 0
