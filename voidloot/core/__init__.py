# Core game modules
from .constants import (
    MAX_EQUIPPED_SKILLS,
    MAX_INVENTORY_SIZE,
    MAX_SIMULATION_TURNS,
    MONSTER_RARITY_CONFIG,
    STANCE_MODIFIERS,
    calculate_turns,
    get_max_hp,
    get_xp_to_next_level,
)
from .exceptions import CatalogError, SaveSlotError, VoidlootError
from .loot import (
    SMUGGLING_BUNDLES,
    calculate_buy_price,
    calculate_item_value,
    generate_loot,
    identify_item,
    open_bundle,
    rarity_chances,
)
from .monsters import generate_boss, generate_monster, rarity_rewards, roll_monster_rarity
from .skills import SkillRoll, SkillRollFilters, generate_passive_skill, merge_skill
from .stat_calculator import StatCalculator, calculate_player_stats
from .progression import (
    WORLD_MAP,
    add_active_effect,
    add_to_inventory,
    apply_defeat,
    apply_victory,
    buy_item,
    equip_item,
    explore,
    gain_xp,
    identify_all,
    new_character,
    sell_items,
    travel,
    unequip_item,
)
from .storage import SaveSlotMetadata, SaveSlotStore

__all__ = [
    # Constants
    "MAX_EQUIPPED_SKILLS",
    "MAX_INVENTORY_SIZE",
    "MAX_SIMULATION_TURNS",
    "MONSTER_RARITY_CONFIG",
    "STANCE_MODIFIERS",
    "calculate_turns",
    "get_max_hp",
    "get_xp_to_next_level",
    # Errors
    "CatalogError",
    "SaveSlotError",
    "VoidlootError",
    # Loot
    "SMUGGLING_BUNDLES",
    "calculate_buy_price",
    "calculate_item_value",
    "generate_loot",
    "identify_item",
    "open_bundle",
    "rarity_chances",
    # Monsters
    "generate_boss",
    "generate_monster",
    "rarity_rewards",
    "roll_monster_rarity",
    # Skills
    "SkillRoll",
    "SkillRollFilters",
    "generate_passive_skill",
    "merge_skill",
    # Stats
    "StatCalculator",
    "calculate_player_stats",
    # Progression
    "WORLD_MAP",
    "add_active_effect",
    "add_to_inventory",
    "apply_defeat",
    "apply_victory",
    "buy_item",
    "equip_item",
    "explore",
    "gain_xp",
    "identify_all",
    "new_character",
    "sell_items",
    "travel",
    "unequip_item",
    # Storage
    "SaveSlotMetadata",
    "SaveSlotStore",
]
