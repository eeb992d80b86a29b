"""Trigger dispatch for Voidloot combat.

Handles everything that fires on a combat moment:
- Passive skill procs (cooldown, chance, conditions, costs, typed effects)
- Theme set bonus procs
- Synergies (frostburn, biohazard, dark momentum)
- Monster maledicts, including reactive ones fired by the hero's hits
"""

import math
import random
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Sequence

from voidloot.core.constants import (
    BIOHAZARD_POISON_DURATION,
    DARK_MOMENTUM_DODGE,
    DARK_MOMENTUM_DURATION,
    DEFAULT_PROC_DURATION,
    DEFAULT_SHIELD_DURATION,
)
from voidloot.data.models import (
    CombatTrigger,
    MaledictAffix,
    MaledictEffectType,
    PassiveSetBonus,
    PassiveSkillDefinition,
    ProcConditionType,
    ProcCostType,
    ProcDefinition,
    ProcEffectType,
    Side,
    StatusType,
    SynergyDefinition,
)

from .combat_unit import Combatant
from .status_effects import (
    EffectSource,
    StatusEffect,
    StatusEffectSystem,
    create_burn,
    create_poison,
    create_shield,
)

# Set bonus procs of these types land on the hero, the rest on the monster
SELF_TARGETED_SET_EFFECTS = frozenset({StatusType.REGEN, StatusType.CRIT_BOOST})

# Buff/debuff procs carrying these statuses always hit the monster
DAMAGING_STATUSES = frozenset({StatusType.BURN, StatusType.POISON})

FROSTBURN = "frostburn"
BIOHAZARD = "biohazard"
DARK_MOMENTUM = "dark_momentum"


@dataclass
class TriggerContext:
    """Battle state a trigger may read or mutate."""

    player: Combatant
    enemy: Combatant
    status_effects: StatusEffectSystem
    rng: random.Random
    turn_queue: List[Side]
    maledicts: Sequence[MaledictAffix] = ()
    log: Callable[[str], None] = lambda message: None
    log_event: Callable[[str, Dict[str, Any]], None] = lambda event_type, data: None


@dataclass
class TriggerDispatcher:
    """
    Evaluates proc sources for a combat trigger.

    Owns the skill cooldowns and the player turn counter used by
    ``turn_count_multiple`` conditions.

    Usage:
        dispatcher = TriggerDispatcher(context, skills, set_bonuses, synergies)
        dispatcher.start_player_turn()
        bonus_damage = dispatcher.process(CombatTrigger.ON_HIT, Side.PLAYER, damage_dealt=42)
    """

    context: TriggerContext
    skills: Sequence[PassiveSkillDefinition] = ()
    set_bonuses: Sequence[PassiveSetBonus] = ()
    synergies: Sequence[SynergyDefinition] = ()
    cooldowns: Dict[str, int] = field(default_factory=dict)
    turn_count: int = 0

    def start_player_turn(self) -> None:
        """Advance the turn counter and tick cooldowns down."""
        self.turn_count += 1
        for skill_id in list(self.cooldowns):
            self.cooldowns[skill_id] -= 1
            if self.cooldowns[skill_id] <= 0:
                del self.cooldowns[skill_id]

    def has_synergy(self, synergy_id: str) -> bool:
        return any(s.id == synergy_id for s in self.synergies)

    def process(self, trigger: CombatTrigger, actor: Side, damage_dealt: float = 0) -> float:
        """
        Fire every proc source of ``actor`` matching ``trigger``.

        Args:
            trigger: The combat moment.
            actor: Side whose sources are evaluated.
            damage_dealt: Damage of the hit that caused the trigger.

        Returns:
            Bonus damage dealt to the monster by the procs.
        """
        new_effects: List[StatusEffect] = []
        trigger_damage = 0.0

        if actor == Side.PLAYER:
            new_effects.extend(self._process_set_bonuses(trigger))
            for skill in self.skills:
                if skill.proc is not None and skill.proc.trigger == trigger:
                    trigger_damage += self._process_skill_proc(skill, skill.proc, damage_dealt, new_effects)
            trigger_damage += self._process_synergies(trigger, new_effects)

            if trigger == CombatTrigger.ON_HIT:
                new_effects.extend(self._process_reactive_maledicts())
        else:
            new_effects.extend(self._process_maledicts(trigger))

        self.context.status_effects.apply_effects(new_effects)
        return trigger_damage

    # -------------------------------------------------------------------------
    # Player sources
    # -------------------------------------------------------------------------

    def _process_set_bonuses(self, trigger: CombatTrigger) -> List[StatusEffect]:
        effects = []
        for bonus in self.set_bonuses:
            if bonus.trigger != trigger:
                continue
            if self.context.rng.random() >= bonus.proc_chance:
                continue

            proc = bonus.proc_effect
            target = Side.PLAYER if proc.type in SELF_TARGETED_SET_EFFECTS else Side.ENEMY
            effects.append(StatusEffect(
                type=proc.type,
                name=bonus.name,
                target=target,
                duration=proc.duration,
                value=proc.value,
                source=EffectSource.SET_BONUS,
                description=f"Proc from {bonus.name}",
            ))
            self.context.log(f">> {bonus.name} Triggered!")
        return effects

    def _conditions_met(self, proc: ProcDefinition) -> bool:
        player, enemy = self.context.player, self.context.enemy
        for condition in proc.conditions:
            if condition.type == ProcConditionType.HP_BELOW:
                met = player.hp_ratio < condition.value
            elif condition.type == ProcConditionType.HP_ABOVE:
                met = player.hp_ratio > condition.value
            elif condition.type == ProcConditionType.ENEMY_HP_BELOW:
                met = enemy.hp_ratio < condition.value
            elif condition.type == ProcConditionType.TURN_COUNT_MULTIPLE:
                met = condition.value > 0 and self.turn_count % int(condition.value) == 0
            else:
                met = True
            if not met:
                return False
        return True

    def _pay_cost(self, skill: PassiveSkillDefinition, proc: ProcDefinition) -> bool:
        """Deduct the proc's HP cost; False when the hero cannot afford it."""
        if proc.cost is None:
            return True

        player = self.context.player
        if proc.cost.type == ProcCostType.HP_PERCENT:
            cost = math.floor(player.max_hp * proc.cost.value)
        else:
            cost = proc.cost.value

        if player.current_hp <= cost:
            return False

        player.current_hp = max(1, player.current_hp - cost)
        self.context.log(f"{skill.name} sacrifices {cost:g} HP!")
        return True

    def _process_skill_proc(
        self,
        skill: PassiveSkillDefinition,
        proc: ProcDefinition,
        damage_dealt: float,
        new_effects: List[StatusEffect],
    ) -> float:
        ctx = self.context

        if self.cooldowns.get(skill.id, 0) > 0:
            return 0.0
        if ctx.rng.random() > proc.chance:
            return 0.0
        if not self._conditions_met(proc):
            return 0.0
        if not self._pay_cost(skill, proc):
            return 0.0

        effect = proc.effect
        damage = 0.0

        if effect.type == ProcEffectType.MULTI_HIT:
            damage = math.floor(damage_dealt * effect.value)
            self._damage_enemy(damage)
            ctx.log(f"{skill.name}: Echo strike for {damage}!")
        elif effect.type == ProcEffectType.DAMAGE:
            damage = math.floor(ctx.player.damage * effect.value)
            self._damage_enemy(damage)
            ctx.log(f"{skill.name} triggers for {damage} damage!")
        elif effect.type == ProcEffectType.HEAL:
            amount = math.floor(ctx.player.max_hp * effect.value)
            ctx.player.heal(amount)
            ctx.log(f"{skill.name} heals you for {amount}!")
        elif effect.type == ProcEffectType.CLEANSE:
            ctx.status_effects.cleanse(Side.PLAYER)
            ctx.log(f"{skill.name} purifies you!")
        elif effect.type in (ProcEffectType.BUFF, ProcEffectType.DEBUFF):
            if effect.status is not None:
                target = Side.ENEMY if effect.type == ProcEffectType.DEBUFF else Side.PLAYER
                if effect.status in DAMAGING_STATUSES:
                    target = Side.ENEMY
                new_effects.append(StatusEffect(
                    type=effect.status,
                    name=skill.name,
                    target=target,
                    duration=effect.duration or DEFAULT_PROC_DURATION,
                    value=effect.value,
                    source=EffectSource.SKILL,
                    description=proc.description,
                ))
                ctx.log(f"{skill.name} activates!")
        elif effect.type == ProcEffectType.SHIELD:
            new_effects.append(create_shield(
                Side.PLAYER, skill.name, effect.duration or DEFAULT_SHIELD_DURATION
            ))
            ctx.log(f"{skill.name} shields you!")

        if proc.cooldown > 0:
            self.cooldowns[skill.id] = proc.cooldown

        ctx.log_event("skill_proc", {"skill_id": skill.id, "effect": effect.type.value, "damage": damage})
        return damage

    def _process_synergies(self, trigger: CombatTrigger, new_effects: List[StatusEffect]) -> float:
        ctx = self.context
        damage = 0.0

        for synergy in self.synergies:
            if synergy.trigger != trigger:
                continue

            if synergy.id == FROSTBURN:
                if ctx.status_effects.has_effect(Side.ENEMY, StatusType.CHILL):
                    burst = math.floor(ctx.player.damage * synergy.value)
                    self._damage_enemy(burst)
                    damage += burst
                    ctx.log(f"FROSTBURN! Steam explosion deals {burst} dmg!")
            elif synergy.id == BIOHAZARD:
                new_effects.append(create_poison(
                    Side.ENEMY, synergy.name, synergy.value, BIOHAZARD_POISON_DURATION, EffectSource.SYNERGY
                ))
                ctx.log(f"{synergy.name}: Poison spreads to the attacker!")
            elif synergy.id == DARK_MOMENTUM:
                new_effects.append(StatusEffect(
                    type=StatusType.DODGE_BOOST,
                    name=synergy.name,
                    target=Side.PLAYER,
                    duration=DARK_MOMENTUM_DURATION,
                    value=DARK_MOMENTUM_DODGE,
                    source=EffectSource.SYNERGY,
                    description="Evasive speed.",
                ))
                ctx.log(f"{synergy.name}: Speed increased!")

        return damage

    def _damage_enemy(self, amount: float) -> None:
        dealt = self.context.enemy.take_damage(amount)
        self.context.player.total_damage_dealt += dealt

    # -------------------------------------------------------------------------
    # Monster sources
    # -------------------------------------------------------------------------

    def _process_maledicts(self, trigger: CombatTrigger) -> List[StatusEffect]:
        ctx = self.context
        effects = []

        for affix in ctx.maledicts:
            if affix.trigger != trigger or affix.trigger_effect is None:
                continue
            effect = affix.trigger_effect
            if ctx.rng.random() >= effect.chance:
                continue

            if effect.type == MaledictEffectType.REFLECT_SHIELD:
                effects.append(create_shield(Side.ENEMY, affix.name, effect.duration, EffectSource.MALEDICT))
                ctx.log(f"{affix.name} activates!")
            elif effect.type == MaledictEffectType.GROUND_HAZARD:
                effects.append(create_poison(
                    Side.PLAYER, affix.name, effect.value, effect.duration, EffectSource.MALEDICT
                ))
                ctx.log(f"{affix.name} surrounds you!")
            elif effect.type == MaledictEffectType.BURN_ON_HIT:
                effects.append(create_burn(
                    Side.PLAYER, affix.name, effect.value, effect.duration, EffectSource.MALEDICT
                ))
                ctx.log(f"{affix.name} burns you!")
            elif effect.type == MaledictEffectType.SHUFFLE_TURN:
                ctx.rng.shuffle(ctx.turn_queue)
                ctx.log(f"{affix.name}: Turn queue shuffled.")

            ctx.log_event("maledict_proc", {"affix_id": affix.id, "effect": effect.type.value})

        return effects

    def _process_reactive_maledicts(self) -> List[StatusEffect]:
        """Affixes that answer the hero's hits."""
        ctx = self.context
        effects = []

        for affix in ctx.maledicts:
            if affix.trigger != CombatTrigger.ON_TAKE_DAMAGE or affix.trigger_effect is None:
                continue
            effect = affix.trigger_effect
            if ctx.rng.random() >= effect.chance:
                continue
            if effect.type == MaledictEffectType.BURN_ON_HIT:
                effects.append(create_burn(
                    Side.PLAYER, affix.name, effect.value, effect.duration, EffectSource.MALEDICT
                ))
                ctx.log(f"{affix.name} reacts!")
                ctx.log_event("maledict_proc", {"affix_id": affix.id, "effect": effect.type.value})

        return effects


def resolve_proc_skills(
    catalog: Sequence[PassiveSkillDefinition],
    active_skill_ids: Sequence[str],
) -> List[PassiveSkillDefinition]:
    """Active skills that carry a proc, in catalog order."""
    active = set(active_skill_ids)
    return [s for s in catalog if s.id in active and s.proc is not None]


def resolve_set_bonuses(
    catalog: Sequence[PassiveSetBonus],
    active_themes: Sequence[Any],
) -> List[PassiveSetBonus]:
    themes = set(active_themes)
    return [b for b in catalog if b.theme in themes]


def resolve_synergies(
    catalog: Sequence[SynergyDefinition],
    active_ids: Sequence[str],
) -> List[SynergyDefinition]:
    ids = set(active_ids)
    return [s for s in catalog if s.id in ids]
