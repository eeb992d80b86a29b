"""Stat Calculator for Voidloot.

Aggregate a player's derived combat stats from base attributes, equipped
passives, set bonuses, equipment and cross-battle effects. The pipeline is
pure and order-sensitive; the live engine and the simulator both feed on its
output, so identical inputs must always give identical stats.
"""

import math
from collections import defaultdict
from typing import Iterable, Optional, Sequence

from voidloot.core.constants import (
    ARMOR_PER_DEXTERITY,
    BASE_ARMOR,
    BASE_CRIT_CHANCE,
    BASE_DAMAGE,
    BASE_DODGE_CHANCE,
    BASE_MAGIC_FIND,
    CRIT_CHANCE_CAP,
    CRIT_PER_INTELLIGENCE,
    DAMAGE_PER_STRENGTH,
    DODGE_CHANCE_CAP,
    DODGE_PER_DEXTERITY,
    get_max_hp,
)
from voidloot.data.loaders import load_set_bonuses, load_synergies
from voidloot.data.models import (
    ActiveEffect,
    BaseAttributes,
    Item,
    ItemSlot,
    PassiveSetBonus,
    PassiveSkill,
    PassiveTheme,
    PlayerStats,
    StatType,
    SynergyDefinition,
)

EquipmentMap = dict[ItemSlot, Optional[Item]]


def resolve_active_skills(
    owned_passives: Sequence[PassiveSkill],
    equipped_skill_ids: Sequence[str],
) -> list[PassiveSkill]:
    """
    Skills whose stats and procs are live.

    An empty equipped list is the legacy save format, where every owned
    passive applies.
    """
    if not equipped_skill_ids:
        return list(owned_passives)
    equipped = set(equipped_skill_ids)
    return [p for p in owned_passives if p.id in equipped]


class StatCalculator:
    """
    Calculate derived player stats from:
    - Base attributes and balance-table bases
    - Equipped passive skills
    - Theme set bonuses and synergies
    - Equipment
    - Active cross-battle effects
    """

    def __init__(
        self,
        set_bonuses: Optional[Sequence[PassiveSetBonus]] = None,
        synergies: Optional[Sequence[SynergyDefinition]] = None,
    ):
        self.set_bonuses = tuple(set_bonuses) if set_bonuses is not None else load_set_bonuses()
        self.synergies = tuple(synergies) if synergies is not None else load_synergies()

    def calculate(
        self,
        base_attributes: BaseAttributes,
        equipment: EquipmentMap,
        owned_passives: Sequence[PassiveSkill],
        level: int,
        stat_points: int,
        active_effects: Sequence[ActiveEffect] = (),
        equipped_skill_ids: Sequence[str] = (),
    ) -> PlayerStats:
        """
        Run the full aggregation pipeline.

        Returns:
            PlayerStats snapshot with crit/dodge clamped and rounded.
        """
        totals: dict[StatType, float] = defaultdict(float)

        # 1. Seed
        totals[StatType.STRENGTH] = base_attributes.strength
        totals[StatType.DEXTERITY] = base_attributes.dexterity
        totals[StatType.INTELLIGENCE] = base_attributes.intelligence
        totals[StatType.VITALITY] = base_attributes.vitality
        totals[StatType.DAMAGE] = BASE_DAMAGE
        totals[StatType.ARMOR] = BASE_ARMOR
        totals[StatType.MAGIC_FIND] = BASE_MAGIC_FIND
        totals[StatType.CRIT_CHANCE] = BASE_CRIT_CHANCE
        totals[StatType.DODGE_CHANCE] = BASE_DODGE_CHANCE

        # 2. Passives
        active_skills = resolve_active_skills(owned_passives, equipped_skill_ids)
        for skill in active_skills:
            if skill.stat_type is not None:
                totals[skill.stat_type] += skill.value

        # 3. Set bonuses
        active_themes = self._apply_set_bonuses(totals, active_skills)

        # 4. Synergies
        active_synergies = self._find_synergies(active_themes)

        # 5. Equipment
        self._apply_item_stats(totals, equipment.values())

        # 6. Active effects
        for effect in active_effects:
            totals[effect.stat_type] += effect.value

        # 7. Cross-derived stats
        strength = totals[StatType.STRENGTH]
        dexterity = totals[StatType.DEXTERITY]
        intelligence = totals[StatType.INTELLIGENCE]
        vitality = totals[StatType.VITALITY]

        damage = totals[StatType.DAMAGE] + math.floor(strength * DAMAGE_PER_STRENGTH)
        armor = totals[StatType.ARMOR] + math.floor(dexterity * ARMOR_PER_DEXTERITY)
        dodge = totals[StatType.DODGE_CHANCE] + dexterity * DODGE_PER_DEXTERITY
        crit = totals[StatType.CRIT_CHANCE] + intelligence * CRIT_PER_INTELLIGENCE

        # 8. Clamp
        return PlayerStats(
            strength=strength,
            dexterity=dexterity,
            intelligence=intelligence,
            vitality=vitality,
            damage=damage,
            armor=armor,
            magic_find=totals[StatType.MAGIC_FIND],
            life_steal=totals[StatType.LIFE_STEAL],
            crit_chance=min(CRIT_CHANCE_CAP, round(crit, 1)),
            dodge_chance=min(DODGE_CHANCE_CAP, round(dodge, 1)),
            attack_speed=totals[StatType.ATTACK_SPEED],
            thorns=totals[StatType.THORNS],
            max_hp=get_max_hp(vitality, level),
            level=level,
            stat_points=stat_points,
            active_set_bonuses=active_themes,
            active_synergies=active_synergies,
            equipped_skill_ids=list(equipped_skill_ids),
            active_skill_ids=[s.id for s in active_skills],
        )

    def _apply_set_bonuses(
        self,
        totals: dict[StatType, float],
        active_skills: Sequence[PassiveSkill],
    ) -> list[PassiveTheme]:
        """Activate themes with enough distinct skills and add their static stats."""
        skills_by_theme: dict[PassiveTheme, set[str]] = defaultdict(set)
        for skill in active_skills:
            skills_by_theme[skill.theme].add(skill.id)

        active_themes = []
        for bonus in self.set_bonuses:
            if len(skills_by_theme.get(bonus.theme, ())) >= bonus.required_count:
                active_themes.append(bonus.theme)
                for stat in bonus.static_stats:
                    totals[stat.type] += stat.value
        return active_themes

    def _find_synergies(self, active_themes: Sequence[PassiveTheme]) -> list[str]:
        themes = set(active_themes)
        return [
            synergy.id
            for synergy in self.synergies
            if synergy.themes[0] in themes and synergy.themes[1] in themes
        ]

    def _apply_item_stats(self, totals: dict[StatType, float], items: Iterable[Optional[Item]]) -> None:
        for item in items:
            if item is None:
                continue
            for stat in item.stats:
                totals[stat.type] += stat.value


_default_calculator: Optional[StatCalculator] = None


def calculate_player_stats(
    base_attributes: BaseAttributes,
    equipment: EquipmentMap,
    owned_passives: Sequence[PassiveSkill],
    level: int,
    stat_points: int = 0,
    active_effects: Sequence[ActiveEffect] = (),
    equipped_skill_ids: Sequence[str] = (),
) -> PlayerStats:
    """Aggregate player stats using the catalog set bonuses and synergies."""
    global _default_calculator
    if _default_calculator is None:
        _default_calculator = StatCalculator()
    return _default_calculator.calculate(
        base_attributes,
        equipment,
        owned_passives,
        level,
        stat_points,
        active_effects,
        equipped_skill_ids,
    )
