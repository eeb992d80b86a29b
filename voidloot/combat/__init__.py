"""Combat module for Voidloot.

This module provides the battle rules shared by live play and balance runs:
- Intra-battle status effects (DoT, regen, crowd control, shields)
- Agility-based turn queue
- Skill procs, set bonuses, synergies and monster maledicts
- Battle state machine and paced asyncio driver
- Monte Carlo win rate simulation
"""

# Status Effects
from .status_effects import (
    EffectSource,
    StatusEffect,
    StatusEffectSystem,
    create_burn,
    create_poison,
    create_regen,
    create_shield,
    create_stun,
)

# Combatants
from .combat_unit import BattleResult, Combatant, snapshot_monster

# Turn Order
from .turn_order import effective_agility, generate_turn_batch

# Triggers
from .triggers import (
    TriggerContext,
    TriggerDispatcher,
    resolve_proc_skills,
    resolve_set_bonuses,
    resolve_synergies,
)

# Engine
from .combat_engine import CombatEngine, CombatPhase, CombatState

# Live Play
from .live_driver import LiveBattleDriver

# Simulation
from .simulation import (
    SIMULATION_PRESETS,
    BuildPreset,
    CombatSimulator,
    SimulationResult,
    build_preset_player,
    build_test_monster,
    get_preset,
    quick_simulate,
    rate_balance,
)

__all__ = [
    # Status Effects
    "EffectSource",
    "StatusEffect",
    "StatusEffectSystem",
    "create_burn",
    "create_poison",
    "create_regen",
    "create_shield",
    "create_stun",
    # Combatants
    "BattleResult",
    "Combatant",
    "snapshot_monster",
    # Turn Order
    "effective_agility",
    "generate_turn_batch",
    # Triggers
    "TriggerContext",
    "TriggerDispatcher",
    "resolve_proc_skills",
    "resolve_set_bonuses",
    "resolve_synergies",
    # Engine
    "CombatEngine",
    "CombatPhase",
    "CombatState",
    # Live Play
    "LiveBattleDriver",
    # Simulation
    "SIMULATION_PRESETS",
    "BuildPreset",
    "CombatSimulator",
    "SimulationResult",
    "build_preset_player",
    "build_test_monster",
    "get_preset",
    "quick_simulate",
    "rate_balance",
]
