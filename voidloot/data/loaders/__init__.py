# Data Loaders
from .skill_loader import (
    load_passive_skills,
    load_set_bonuses,
    load_synergies,
    get_skill_by_id,
    get_skills_by_theme,
    get_skills_by_rarity,
    get_set_bonus,
    get_synergy_by_id,
)
from .monster_loader import (
    load_maledicts,
    get_maledict_by_id,
)

__all__ = [
    # Skill loaders
    "load_passive_skills",
    "load_set_bonuses",
    "load_synergies",
    "get_skill_by_id",
    "get_skills_by_theme",
    "get_skills_by_rarity",
    "get_set_bonus",
    "get_synergy_by_id",
    # Monster loaders
    "load_maledicts",
    "get_maledict_by_id",
]
