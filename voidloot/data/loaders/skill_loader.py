"""Passive skill, set bonus and synergy catalog loader."""

import json
from functools import lru_cache
from pathlib import Path
from typing import Optional

from ..models.enums import PassiveTheme, Rarity
from ..models.skill import PassiveSetBonus, PassiveSkillDefinition, SynergyDefinition


# Get the catalog directory path
CATALOG_DIR = Path(__file__).parent.parent / "catalog"
PASSIVES_FILE = CATALOG_DIR / "passives.json"
SET_BONUSES_FILE = CATALOG_DIR / "set_bonuses.json"
SYNERGIES_FILE = CATALOG_DIR / "synergies.json"


def _read_catalog(path: Path) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _parse_passive(skill_data: dict) -> PassiveSkillDefinition:
    """Parse a passive skill from JSON data.

    Args:
        skill_data: Dictionary containing skill data.

    Returns:
        PassiveSkillDefinition object.
    """
    return PassiveSkillDefinition.model_validate(skill_data)


@lru_cache(maxsize=1)
def load_passive_skills() -> tuple[PassiveSkillDefinition, ...]:
    """Load the passive skill pool from JSON file.

    Returns:
        Tuple of skill definitions in catalog order.
    """
    data = _read_catalog(PASSIVES_FILE)
    return tuple(_parse_passive(s) for s in data["passives"])


@lru_cache(maxsize=1)
def load_set_bonuses() -> tuple[PassiveSetBonus, ...]:
    """Load theme set bonuses from JSON file."""
    data = _read_catalog(SET_BONUSES_FILE)
    return tuple(PassiveSetBonus.model_validate(b) for b in data["set_bonuses"])


@lru_cache(maxsize=1)
def load_synergies() -> tuple[SynergyDefinition, ...]:
    """Load two-theme synergies from JSON file."""
    data = _read_catalog(SYNERGIES_FILE)
    return tuple(SynergyDefinition.model_validate(s) for s in data["synergies"])


def get_skill_by_id(skill_id: str) -> Optional[PassiveSkillDefinition]:
    """Get a passive skill definition by its ID.

    Args:
        skill_id: The unique skill identifier.

    Returns:
        PassiveSkillDefinition if found, None otherwise.
    """
    for skill in load_passive_skills():
        if skill.id == skill_id:
            return skill
    return None


def get_skills_by_theme(theme: PassiveTheme) -> list[PassiveSkillDefinition]:
    """Get all skills of a theme, ordered by tier."""
    skills = [s for s in load_passive_skills() if s.theme == theme]
    return sorted(skills, key=lambda s: s.tier)


def get_skills_by_rarity(rarity: Rarity) -> list[PassiveSkillDefinition]:
    """Get all skills of an exact rarity."""
    return [s for s in load_passive_skills() if s.rarity == rarity]


def get_set_bonus(theme: PassiveTheme) -> Optional[PassiveSetBonus]:
    """Get the set bonus for a theme, if it has one."""
    for bonus in load_set_bonuses():
        if bonus.theme == theme:
            return bonus
    return None


def get_synergy_by_id(synergy_id: str) -> Optional[SynergyDefinition]:
    """Get a synergy definition by its ID."""
    for synergy in load_synergies():
        if synergy.id == synergy_id:
            return synergy
    return None
