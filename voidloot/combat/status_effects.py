"""Status Effects System for Voidloot combat.

Handles intra-battle buffs, debuffs and crowd control:
- Stun and freeze (skip the holder's action)
- Burn and poison damage over time, regen healing over time
- Chill (agility reduction per stack)
- Shields, crit/dodge boosts and scaling strength
"""

import math
import uuid
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from voidloot.data.models import Side, StatusType

if TYPE_CHECKING:
    from .combat_unit import Combatant


class EffectSource(StrEnum):
    """Where a status effect came from."""

    SKILL = "skill"
    SET_BONUS = "set_bonus"
    SYNERGY = "synergy"
    MALEDICT = "maledict"
    ENVIRONMENT = "environment"


# Refresh duration only, never gain intensity
NON_STACKING = frozenset({StatusType.STUN, StatusType.FREEZE, StatusType.SHIELD})

ACTION_PREVENTING = frozenset({StatusType.STUN, StatusType.FREEZE})

DEBUFF_TYPES = frozenset({
    StatusType.BURN,
    StatusType.POISON,
    StatusType.FREEZE,
    StatusType.BLIND,
    StatusType.CHILL,
    StatusType.STUN,
})

DOT_TYPES = frozenset({StatusType.BURN, StatusType.POISON})


@dataclass
class StatusEffect:
    """
    An active status effect on one side of the battle.

    Attributes:
        type: Effect kind.
        name: Display name; together with type and target it identifies the effect.
        target: Side carrying the effect.
        duration: Remaining status steps of the holder.
        value: Effect strength (fraction of max HP for DoT/regen, flat for boosts).
        stacks: Intensity multiplier for stacking effects.
        source: What applied it.
        applied_on: Engine action index of the last application.
    """

    type: StatusType
    name: str
    target: Side
    duration: int
    value: float = 0.0
    stacks: int = 1
    source: EffectSource = EffectSource.SKILL
    description: str = ""
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    applied_on: int = -1

    @property
    def is_expired(self) -> bool:
        return self.duration <= 0

    @property
    def prevents_actions(self) -> bool:
        return self.type in ACTION_PREVENTING

    @property
    def is_debuff(self) -> bool:
        return self.type in DEBUFF_TYPES


class StatusEffectSystem:
    """
    Manages status effects for both sides of a battle.

    Usage:
        effects = StatusEffectSystem()
        effects.apply_effect(create_burn(Side.ENEMY, "Avatar of Flame", 0.1, 3))
        events = effects.process_effects(enemy)
    """

    def __init__(self):
        self._effects: List[StatusEffect] = []

        # Action index stamped on applications; set by the engine each action
        self.current_action: int = 0

    def apply_effect(self, effect: StatusEffect) -> StatusEffect:
        """
        Apply an effect, merging into an existing one with the same
        (type, target, name).

        A merge refreshes the duration; stun, freeze and shield stay at one
        stack while everything else gains a stack. Scaling strength adds the
        incoming value, other types keep the larger value.

        Returns:
            The effect now stored in the system.
        """
        existing = self._find_effect(effect.type, effect.target, effect.name)

        if existing is None:
            effect.applied_on = self.current_action
            self._effects.append(effect)
            return effect

        existing.duration = effect.duration
        existing.stacks = 1 if effect.type in NON_STACKING else existing.stacks + 1
        if effect.type == StatusType.SCALING_STRENGTH:
            existing.value += effect.value
        else:
            existing.value = max(existing.value, effect.value)
        existing.applied_on = self.current_action
        return existing

    def apply_effects(self, effects: List[StatusEffect]) -> None:
        for effect in effects:
            self.apply_effect(effect)

    def remove_effect(self, side: Side, effect_type: StatusType) -> bool:
        """
        Remove every effect of a type from one side.

        Returns:
            True if anything was removed.
        """
        before = len(self._effects)
        self._effects = [
            e for e in self._effects
            if not (e.target == side and e.type == effect_type)
        ]
        return len(self._effects) < before

    def consume_shield(self, side: Side) -> bool:
        """Spend the side's shield against one hit."""
        return self.remove_effect(side, StatusType.SHIELD)

    def cleanse(self, side: Side) -> int:
        """
        Remove all debuffs from a side.

        Returns:
            Number of effects removed.
        """
        before = len(self._effects)
        self._effects = [
            e for e in self._effects
            if not (e.target == side and e.is_debuff)
        ]
        return before - len(self._effects)

    def process_effects(self, combatant: "Combatant") -> List[Dict[str, Any]]:
        """
        Resolve the status step of one side.

        Every effect on the side deals its DoT or regen
        (``floor(maxHp * value * stacks)``), then durations tick down by one
        and expired effects are dropped. Effects applied during the current
        action are not aged until the holder's next step.

        Args:
            combatant: The side being processed.

        Returns:
            List of effect events (dot_damage, hot_healing, effect_expired).
        """
        side = combatant.side
        events: List[Dict[str, Any]] = []

        for effect in self.get_effects(side):
            amount = math.floor(combatant.max_hp * effect.value * effect.stacks)

            if effect.type in DOT_TYPES:
                combatant.take_damage(amount)
                events.append({
                    "type": "dot_damage",
                    "target": side.value,
                    "effect": effect.type.value,
                    "damage": amount,
                    "stacks": effect.stacks,
                })
            elif effect.type == StatusType.REGEN:
                healed = combatant.heal(amount)
                events.append({
                    "type": "hot_healing",
                    "target": side.value,
                    "healing": healed,
                })

        kept = []
        for effect in self._effects:
            if effect.target == side and effect.applied_on != self.current_action:
                effect.duration -= 1
            if effect.is_expired:
                events.append({
                    "type": "effect_expired",
                    "target": effect.target.value,
                    "effect": effect.type.value,
                    "name": effect.name,
                })
                continue
            kept.append(effect)
        self._effects = kept

        return events

    def has_effect(self, side: Side, effect_type: StatusType) -> bool:
        """Check if a side carries a specific effect."""
        return any(e.target == side and e.type == effect_type for e in self._effects)

    def get_effect(self, side: Side, effect_type: StatusType) -> Optional[StatusEffect]:
        """First effect of a type on a side."""
        for effect in self._effects:
            if effect.target == side and effect.type == effect_type:
                return effect
        return None

    def get_effects(self, side: Optional[Side] = None) -> List[StatusEffect]:
        """Get all effects, optionally for one side."""
        if side is None:
            return list(self._effects)
        return [e for e in self._effects if e.target == side]

    def total_stacks(self, side: Side, effect_type: StatusType) -> int:
        return sum(e.stacks for e in self._effects if e.target == side and e.type == effect_type)

    def effect_value(self, side: Side, effect_type: StatusType) -> float:
        """Value of the first matching effect, 0 when absent."""
        effect = self.get_effect(side, effect_type)
        return effect.value if effect else 0.0

    def can_act(self, side: Side) -> bool:
        """Check if a side can take its action (not stunned or frozen)."""
        return not any(e.target == side and e.prevents_actions for e in self._effects)

    def clear_all(self) -> None:
        """Clear all effects from both sides."""
        self._effects.clear()
        self.current_action = 0

    def _find_effect(
        self,
        effect_type: StatusType,
        side: Side,
        name: str,
    ) -> Optional[StatusEffect]:
        for effect in self._effects:
            if effect.type == effect_type and effect.target == side and effect.name == name:
                return effect
        return None


# Helper functions for creating common effects

def create_burn(
    target: Side,
    name: str,
    value: float,
    duration: int,
    source: EffectSource = EffectSource.SKILL,
) -> StatusEffect:
    """Create a burn effect dealing ``value`` x max HP per stack each step."""
    return StatusEffect(
        type=StatusType.BURN,
        name=name,
        target=target,
        duration=duration,
        value=value,
        source=source,
        description="Burned.",
    )


def create_poison(
    target: Side,
    name: str,
    value: float,
    duration: int,
    source: EffectSource = EffectSource.SKILL,
) -> StatusEffect:
    """Create a poison effect dealing ``value`` x max HP per stack each step."""
    return StatusEffect(
        type=StatusType.POISON,
        name=name,
        target=target,
        duration=duration,
        value=value,
        source=source,
        description="Poisoned.",
    )


def create_regen(
    target: Side,
    name: str,
    value: float,
    duration: int,
    source: EffectSource = EffectSource.SKILL,
) -> StatusEffect:
    """Create a regen effect healing ``value`` x max HP per stack each step."""
    return StatusEffect(
        type=StatusType.REGEN,
        name=name,
        target=target,
        duration=duration,
        value=value,
        source=source,
        description="Regenerating.",
    )


def create_stun(target: Side, name: str, duration: int = 1) -> StatusEffect:
    """Create a stun effect."""
    return StatusEffect(
        type=StatusType.STUN,
        name=name,
        target=target,
        duration=duration,
        value=1,
        description="Cannot act.",
    )


def create_shield(
    target: Side,
    name: str,
    duration: int = 1,
    source: EffectSource = EffectSource.SKILL,
) -> StatusEffect:
    """Create a shield that negates the next hit."""
    return StatusEffect(
        type=StatusType.SHIELD,
        name=name,
        target=target,
        duration=duration,
        value=1,
        source=source,
        description="Nullifies next hit.",
    )
