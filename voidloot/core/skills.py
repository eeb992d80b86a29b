"""Passive skill rolls, skill points and equipped loadouts.

Handles:
- Weighted reward rolls with rarity filters (new grant or rank upgrade)
- Spending skill points on the skill tree
- Equipping skills into the active set and saving/loading loadouts

Rejected requests are logged. A refused skill point is still spent.
"""

import random
import uuid
from dataclasses import dataclass, field
from typing import Optional, Sequence

from voidloot.core.constants import MAX_EQUIPPED_SKILLS
from voidloot.core.exceptions import CatalogError
from voidloot.core.logging import get_logger
from voidloot.data.loaders import get_skill_by_id, load_passive_skills
from voidloot.data.models import (
    BuildLoadout,
    CharacterState,
    PassiveSkill,
    PassiveSkillDefinition,
    Rarity,
)

logger = get_logger(__name__)


@dataclass
class SkillRollFilters:
    """Narrow the reward pool by rarity."""

    exact_rarity: Optional[Rarity] = None
    min_rarity: Optional[Rarity] = None
    exclude_rarities: list[Rarity] = field(default_factory=list)

    def apply(self, pool: Sequence[PassiveSkillDefinition]) -> list[PassiveSkillDefinition]:
        if self.exact_rarity is not None:
            return [s for s in pool if s.rarity == self.exact_rarity]
        result = list(pool)
        if self.min_rarity is not None:
            result = [s for s in result if s.rarity.rank >= self.min_rarity.rank]
        if self.exclude_rarities:
            result = [s for s in result if s.rarity not in self.exclude_rarities]
        return result


@dataclass
class SkillRoll:
    """Outcome of a passive skill roll."""

    skill: PassiveSkill
    is_new: bool


def _find_owned(owned: Sequence[PassiveSkill], skill_id: str) -> Optional[PassiveSkill]:
    for skill in owned:
        if skill.id == skill_id:
            return skill
    return None


def generate_passive_skill(
    owned: Sequence[PassiveSkill],
    filters: Optional[SkillRollFilters] = None,
    rng: Optional[random.Random] = None,
    catalog: Optional[Sequence[PassiveSkillDefinition]] = None,
) -> SkillRoll:
    """
    Roll a passive skill reward.

    An owned id comes back one rank higher instead of as a duplicate;
    skills already at their rank cap are not offered. An empty filtered
    pool falls back to the Common tier.

    Args:
        owned: Skills the player already has.
        filters: Optional rarity filters.
        rng: Random source; an unseeded generator when omitted.
        catalog: Skill pool; defaults to the packaged catalog.

    Returns:
        SkillRoll with the new or upgraded skill.

    Raises:
        CatalogError: If the catalog offers nothing and nothing is owned.
    """
    rng = rng or random.Random()
    catalog = catalog if catalog is not None else load_passive_skills()

    def not_maxed(definition: PassiveSkillDefinition) -> bool:
        existing = _find_owned(owned, definition.id)
        return existing is None or not existing.is_maxed

    pool = filters.apply(catalog) if filters else list(catalog)
    pool = [s for s in pool if not_maxed(s)]
    if not pool:
        pool = [s for s in catalog if s.rarity == Rarity.COMMON and not_maxed(s)]

    if not pool:
        # Every candidate is already at its rank cap
        if not owned:
            raise CatalogError("skill pool", "empty")
        return SkillRoll(skill=rng.choice(list(owned)), is_new=False)

    choice = rng.choice(pool)
    existing = _find_owned(owned, choice.id)
    if existing is not None:
        return SkillRoll(skill=existing.model_copy(update={"level": existing.level + 1}), is_new=False)

    return SkillRoll(skill=PassiveSkill.from_definition(choice, level=1), is_new=True)


def merge_skill(owned: list[PassiveSkill], skill: PassiveSkill) -> list[PassiveSkill]:
    """Replace the owned entry with the same id, or append a new one."""
    for i, existing in enumerate(owned):
        if existing.id == skill.id:
            owned[i] = skill
            return owned
    owned.append(skill)
    return owned


def spend_skill_point(character: CharacterState, skill_id: str) -> bool:
    """
    Spend one skill point to unlock or upgrade a skill.

    Unlocking requires the prerequisite to be owned. A newly unlocked skill
    is equipped automatically while the active set has room. Every call made
    with points available costs exactly one point, even when the unlock or
    upgrade is refused.

    Returns:
        True if the skill was unlocked or upgraded.
    """
    if character.skill_points <= 0:
        logger.info("skill_point_rejected", reason="no_points", skill_id=skill_id)
        return False

    character.skill_points -= 1

    definition = get_skill_by_id(skill_id)
    if definition is None:
        logger.warning("skill_point_rejected", reason="unknown_skill", skill_id=skill_id)
        return False

    existing = character.get_passive(skill_id)
    if existing is not None:
        if existing.is_maxed:
            logger.info("skill_point_rejected", reason="max_rank", skill_id=skill_id)
            return False
        merge_skill(character.passive_skills, existing.model_copy(update={"level": existing.level + 1}))
        logger.info("skill_upgraded", skill_id=skill_id, level=existing.level + 1)
        return True

    if definition.prerequisite_id and character.get_passive(definition.prerequisite_id) is None:
        logger.info("skill_point_rejected", reason="missing_prerequisite", skill_id=skill_id,
                    prerequisite_id=definition.prerequisite_id)
        return False

    character.passive_skills.append(PassiveSkill.from_definition(definition, level=1))
    if len(character.equipped_skill_ids) < MAX_EQUIPPED_SKILLS:
        character.equipped_skill_ids.append(skill_id)
    logger.info("skill_unlocked", skill_id=skill_id)
    return True


def equip_skill(character: CharacterState, skill_id: str) -> bool:
    """Add an owned skill to the active set."""
    if character.get_passive(skill_id) is None:
        logger.info("equip_skill_rejected", reason="not_owned", skill_id=skill_id)
        return False
    if skill_id in character.equipped_skill_ids:
        return False
    if len(character.equipped_skill_ids) >= MAX_EQUIPPED_SKILLS:
        logger.info("equip_skill_rejected", reason="slots_full", skill_id=skill_id)
        return False
    character.equipped_skill_ids.append(skill_id)
    return True


def unequip_skill(character: CharacterState, skill_id: str) -> bool:
    if skill_id not in character.equipped_skill_ids:
        return False
    character.equipped_skill_ids.remove(skill_id)
    return True


def save_loadout(character: CharacterState, name: str) -> BuildLoadout:
    """Store the current active set under a name."""
    loadout = BuildLoadout(
        id=uuid.uuid4().hex[:8],
        name=name,
        skill_ids=list(character.equipped_skill_ids),
    )
    character.loadouts.append(loadout)
    return loadout


def load_loadout(character: CharacterState, loadout_id: str) -> bool:
    """Equip a saved loadout, keeping only skills still owned."""
    loadout = next((l for l in character.loadouts if l.id == loadout_id), None)
    if loadout is None:
        logger.info("load_loadout_rejected", reason="unknown_loadout", loadout_id=loadout_id)
        return False
    owned_ids = {s.id for s in character.passive_skills}
    character.equipped_skill_ids = [sid for sid in loadout.skill_ids if sid in owned_ids][:MAX_EQUIPPED_SKILLS]
    return True
