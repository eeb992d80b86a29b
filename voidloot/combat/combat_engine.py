"""Combat Engine for Voidloot.

Turn-based state machine for one hero-versus-monster battle:
- Battle start (HP reset, turn queue, battle-start procs)
- Token-by-token turn resolution for the hero and the monster
- Status effect steps, trigger dispatch and termination checks
- Terrain and time-of-day modifiers from equipped passives
- Flee, stance changes and cancellation
"""

import math
import random
import threading
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable, Dict, List, Optional

from voidloot.core.constants import (
    ARMOR_MITIGATION,
    BIOHAZARD_DAMAGE_BONUS,
    CRIT_MULTIPLIER,
    DAMAGE_VARIANCE,
    EXECUTE_MULTIPLIER,
    EXECUTE_THRESHOLD,
    FLEE_CHANCE,
    FOREST_FIRE_DAMAGE_BONUS,
    FROZEN_DAMAGE_BONUS,
    GRAVE_BORN_LIFE_STEAL_BONUS,
    MAX_SIMULATION_TURNS,
    NIGHT_PROWLER_CRIT_BONUS,
    STANCE_MODIFIERS,
    TIDAL_REGEN,
    TIDAL_REGEN_DURATION,
    TURN_QUEUE_REFILL_AT,
    WILDFIRE_BURN,
    WILDFIRE_CHANCE,
    WILDFIRE_DURATION,
)
from voidloot.core.flavor import FlavorDispatcher
from voidloot.core.logging import get_logger
from voidloot.data.loaders import load_passive_skills, load_set_bonuses, load_synergies
from voidloot.data.models import (
    BattleEnvironment,
    CombatStance,
    CombatTrigger,
    Monster,
    PlayerStats,
    Side,
    StatusType,
    Terrain,
)

from .combat_unit import BattleResult, Combatant, snapshot_monster
from .status_effects import EffectSource, StatusEffectSystem, create_burn, create_regen
from .triggers import (
    BIOHAZARD,
    TriggerContext,
    TriggerDispatcher,
    resolve_proc_skills,
    resolve_set_bonuses,
    resolve_synergies,
)
from .turn_order import effective_agility, generate_turn_batch

logger = get_logger(__name__)

EXECUTIONER_AFFIX = "executioner"

FOREST_FIRE = "forest_fire"
NIGHT_PROWLER = "night_prowler"
GRAVE_BORN = "grave_born"
TIDAL_AFFINITY = "tidal_affinity"
GRAVE_TERRAINS = frozenset({Terrain.CRYPT, Terrain.RUINS})


class CombatPhase(Enum):
    """Battle phases."""

    IDLE = auto()  # No battle
    FIGHTING = auto()  # Battle in progress
    VICTORY = auto()  # Monster died
    DEFEAT = auto()  # Hero died or timed out
    FLED = auto()  # Hero escaped


@dataclass(frozen=True)
class EnvironmentModifiers:
    """Terrain and time-of-day bonuses unlocked by the hero's active skills."""

    damage_multiplier: float = 1.0
    crit_bonus: float = 0.0
    life_steal_bonus: float = 0.0
    wildfire: bool = False
    tidal_regen: bool = False

    @classmethod
    def resolve(
        cls,
        environment: Optional[BattleEnvironment],
        skill_ids: List[str],
    ) -> "EnvironmentModifiers":
        if environment is None:
            return cls()
        terrain = environment.terrain
        forest_fire = FOREST_FIRE in skill_ids and terrain == Terrain.FOREST
        return cls(
            damage_multiplier=FOREST_FIRE_DAMAGE_BONUS if forest_fire else 1.0,
            crit_bonus=NIGHT_PROWLER_CRIT_BONUS if NIGHT_PROWLER in skill_ids and environment.is_night else 0.0,
            life_steal_bonus=GRAVE_BORN_LIFE_STEAL_BONUS if GRAVE_BORN in skill_ids and terrain in GRAVE_TERRAINS else 0.0,
            wildfire=forest_fire,
            tidal_regen=TIDAL_AFFINITY in skill_ids and terrain == Terrain.SWAMP,
        )


@dataclass
class CombatState:
    """
    Current state of a battle.

    A finished battle returns to ``IDLE``; ``outcome`` keeps how it ended
    (``VICTORY``, ``DEFEAT`` or ``FLED``) until the next battle starts.
    A cancelled battle has no outcome.
    """

    phase: CombatPhase = CombatPhase.IDLE
    outcome: Optional[CombatPhase] = None
    battle_id: int = 0
    actions_taken: int = 0
    stance: CombatStance = CombatStance.BALANCED
    timed_out: bool = False

    turn_queue: List[Side] = field(default_factory=list)

    # Player-facing combat log lines
    combat_log: List[str] = field(default_factory=list)

    # Combat events log
    events: List[Dict[str, Any]] = field(default_factory=list)


class CombatEngine:
    """
    Voidloot battle engine.

    Usage:
        engine = CombatEngine(seed=7)
        engine.start_battle(monster, level, player_stats)
        result = engine.run_combat()

    Or step-by-step (the live driver):
        engine.start_battle(...)
        while engine.resolve_turn():
            ...
        result = engine.get_result()
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        on_victory: Optional[Callable[[Monster], None]] = None,
        on_defeat: Optional[Callable[[], None]] = None,
        add_log: Optional[Callable[[str, str], None]] = None,
        flavor: Optional[FlavorDispatcher] = None,
    ):
        """
        Initialize combat engine.

        Args:
            seed: Random seed for deterministic battles.
            on_victory: Called once with the final monster when the hero wins.
            on_defeat: Called once when the hero dies.
            add_log: Receives ``(message, category)`` for every log line.
            flavor: Optional narration source; headless runs leave it out.
        """
        self.rng = random.Random(seed)
        self.on_victory = on_victory
        self.on_defeat = on_defeat
        self.add_log = add_log
        self.flavor = flavor

        self.status_effects = StatusEffectSystem()
        self.state = CombatState()

        # Background flavor callbacks write the log from worker threads
        self._log_lock = threading.Lock()

        self.player_stats: Optional[PlayerStats] = None
        self.monster: Optional[Monster] = None
        self.player: Optional[Combatant] = None
        self.enemy: Optional[Combatant] = None
        self.triggers: Optional[TriggerDispatcher] = None
        self.environment: Optional[BattleEnvironment] = None
        self.modifiers = EnvironmentModifiers()

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def start_battle(
        self,
        monster: Monster,
        level: int,
        player_stats: PlayerStats,
        environment: Optional[BattleEnvironment] = None,
    ) -> None:
        """
        Begin a battle.

        The hero starts at full HP in Balanced stance with no status effects;
        the first turn batch comes from the two sides' dexterity. Inputs are
        copied, so the caller's models are never mutated. An optional
        environment (terrain, night) switches on the matching passives.
        """
        self._clear()

        self.player_stats = player_stats.model_copy(deep=True)
        self.monster = monster.model_copy(deep=True)
        self.player = Combatant.from_player_stats(self.player_stats)
        self.enemy = Combatant.from_monster(self.monster)
        self.environment = environment
        self.modifiers = EnvironmentModifiers.resolve(environment, self.player_stats.active_skill_ids)

        self.state.battle_id += 1
        self.state.phase = CombatPhase.FIGHTING
        self.state.turn_queue = generate_turn_batch(self.player.dexterity, self.enemy.dexterity)

        context = TriggerContext(
            player=self.player,
            enemy=self.enemy,
            status_effects=self.status_effects,
            rng=self.rng,
            turn_queue=self.state.turn_queue,
            maledicts=self.monster.maledicts,
            log=self._log,
            log_event=self._log_event,
        )
        self.triggers = TriggerDispatcher(
            context=context,
            skills=resolve_proc_skills(load_passive_skills(), self.player_stats.active_skill_ids),
            set_bonuses=resolve_set_bonuses(load_set_bonuses(), self.player_stats.active_set_bonuses),
            synergies=resolve_synergies(load_synergies(), self.player_stats.active_synergies),
        )

        self._log(f"Encountered {self.monster.name} ({self.monster.rarity})!")
        self._log_event("battle_start", {
            "monster": self.monster.name,
            "rarity": str(self.monster.rarity),
            "level": level,
            "queue": [s.value for s in self.state.turn_queue],
            "terrain": str(environment.terrain) if environment and environment.terrain else None,
        })
        logger.debug("battle_started", monster=self.monster.name, level=level)

        self._apply_environment()
        self.triggers.process(CombatTrigger.ON_BATTLE_START, Side.PLAYER)
        self._refill_queue()

        if self.flavor is not None:
            battle_id = self.state.battle_id
            self.flavor.describe_encounter(
                self.monster.name,
                level,
                self.monster.icon == "boss",
                lambda text: self._log_flavor(battle_id, text),
            )

    def resolve_turn(self) -> bool:
        """
        Consume one token from the turn queue.

        Returns:
            True if the battle is still running, False if finished.
        """
        if self.state.phase != CombatPhase.FIGHTING:
            return False

        if not self.state.turn_queue:
            self._refill_queue()

        actor = self.state.turn_queue.pop(0)
        self.state.actions_taken += 1
        self.status_effects.current_action = self.state.actions_taken

        if actor == Side.PLAYER:
            self.triggers.start_player_turn()
            self._player_turn()
        else:
            self._enemy_turn()

        if self.is_fighting():
            self._refill_queue()
        return self.is_fighting()

    def flee(self) -> bool:
        """
        Try to escape.

        Returns:
            True if the hero escaped. A failed attempt costs the next queued action.
        """
        if self.state.phase != CombatPhase.FIGHTING:
            return False

        if self.rng.random() < FLEE_CHANCE:
            self._log_event("fled", {"turn": self.triggers.turn_count})
            self._emit("Escaped!", "combat")
            self._finish(CombatPhase.FLED)
            return True

        self._log("Failed to escape!")
        if self.state.turn_queue:
            self.state.turn_queue.pop(0)
        self._refill_queue()
        return False

    def set_stance(self, stance: CombatStance) -> None:
        self.state.stance = stance
        self._log_event("stance", {"stance": str(stance)})

    def cancel(self) -> None:
        """Abandon the battle. No further procs or DoT are applied."""
        if self.state.phase == CombatPhase.FIGHTING:
            self._log_event("cancelled", {})
        self._clear_battle()
        self.state.phase = CombatPhase.IDLE

    def run_combat(self, max_turns: int = MAX_SIMULATION_TURNS) -> BattleResult:
        """
        Run the battle to completion without pacing.

        A battle still running after ``max_turns`` hero turns ends as a
        timed-out loss.
        """
        while self.resolve_turn():
            if self.triggers.turn_count >= max_turns:
                self._end_combat_timeout()
                break

        return self.get_result()

    # =========================================================================
    # Queries
    # =========================================================================

    def is_fighting(self) -> bool:
        return self.state.phase == CombatPhase.FIGHTING

    def is_finished(self) -> bool:
        return self.state.outcome is not None

    def get_result(self) -> BattleResult:
        """Get the battle result. ``phase`` reports the outcome once there is one."""
        player = self.player
        enemy = self.enemy
        return BattleResult(
            win=self.state.outcome == CombatPhase.VICTORY,
            timed_out=self.state.timed_out,
            turns=self.triggers.turn_count if self.triggers else 0,
            actions=self.state.actions_taken,
            final_player_hp=max(0.0, player.current_hp) if player else 0.0,
            player_max_hp=player.max_hp if player else 0.0,
            final_enemy_hp=max(0.0, enemy.current_hp) if enemy else 0.0,
            enemy_max_hp=enemy.max_hp if enemy else 0.0,
            damage_dealt=player.total_damage_dealt if player else 0.0,
            damage_taken=player.total_damage_taken if player else 0.0,
            phase=(self.state.outcome or self.state.phase).name.lower(),
            events=list(self.state.events),
        )

    def get_events(self) -> List[Dict[str, Any]]:
        return list(self.state.events)

    # =========================================================================
    # Turn resolution
    # =========================================================================

    def _player_turn(self) -> None:
        player, enemy = self.player, self.enemy
        effects = self.status_effects

        if not effects.can_act(Side.PLAYER):
            self._log("You are Frozen/Stunned and cannot act!")
            self.triggers.process(CombatTrigger.ON_START_TURN, Side.PLAYER)
            if self._check_termination(victory_first=True):
                return
            self._process_effects(player)
            self._check_termination(victory_first=True)
            return

        self.triggers.process(CombatTrigger.ON_START_TURN, Side.PLAYER)
        if self._check_termination(victory_first=True):
            return
        self._process_effects(player)
        if self._check_termination(victory_first=True):
            return

        scaling = effects.effect_value(Side.PLAYER, StatusType.SCALING_STRENGTH)
        raw = (player.damage + scaling) * self.rng.uniform(*DAMAGE_VARIANCE)
        raw *= STANCE_MODIFIERS[self.state.stance].damage

        if effects.has_effect(Side.ENEMY, StatusType.POISON) and self.triggers.has_synergy(BIOHAZARD):
            raw *= BIOHAZARD_DAMAGE_BONUS
        if effects.has_effect(Side.ENEMY, StatusType.FREEZE):
            raw *= FROZEN_DAMAGE_BONUS
            self._log("Shattering strike!")

        raw *= self.modifiers.damage_multiplier

        crit_boost = effects.effect_value(Side.PLAYER, StatusType.CRIT_BOOST)
        is_crit = self.rng.random() * 100 < player.crit_chance + crit_boost + self.modifiers.crit_bonus
        if is_crit:
            raw *= CRIT_MULTIPLIER + crit_boost / 100

        self.triggers.process(CombatTrigger.ON_ATTACK, Side.PLAYER)
        if self._check_termination(victory_first=True):
            return

        shielded = effects.has_effect(Side.ENEMY, StatusType.SHIELD)
        damage = max(1, math.floor(raw - enemy.armor * ARMOR_MITIGATION))

        if shielded:
            effects.consume_shield(Side.ENEMY)
            self._log(f"Blocked by {enemy.name}'s Shield!")
            self._log_event("attack", {"actor": "player", "damage": 0, "blocked": True, "crit": is_crit})
        else:
            enemy.take_damage(damage)
            player.total_damage_dealt += damage
            self._log_event("attack", {"actor": "player", "damage": damage, "blocked": False, "crit": is_crit})

            if self.modifiers.wildfire and self.rng.random() < WILDFIRE_CHANCE:
                effects.apply_effect(create_burn(
                    Side.ENEMY, "Wildfire", WILDFIRE_BURN, WILDFIRE_DURATION, EffectSource.ENVIRONMENT
                ))
                self._log("Wildfire spreads in the forest!")
            self.triggers.process(CombatTrigger.ON_HIT, Side.PLAYER, damage)
            if is_crit:
                self._log(f"CRITICAL! {damage} DMG!")
                self.triggers.process(CombatTrigger.ON_CRIT, Side.PLAYER, damage)
                self._narrate(enemy.name, "crit")
            else:
                self._log(f"Hit for {damage}.")

            life_steal = player.life_steal + self.modifiers.life_steal_bonus
            if life_steal > 0:
                player.heal(math.floor(damage * life_steal / 100))

            if enemy.thorns > 0:
                thorns = math.floor(player.damage * enemy.thorns / 100)
                player.take_damage(thorns)
                self._log(f"Thorns: Took {thorns} dmg.")

        self._check_termination(victory_first=True)

    def _enemy_turn(self) -> None:
        player, enemy = self.player, self.enemy
        effects = self.status_effects

        if not effects.can_act(Side.ENEMY):
            self._log(f"{enemy.name} is stunned!")
            self.triggers.process(CombatTrigger.ON_START_TURN, Side.ENEMY)
            self._process_effects(enemy)
            self._check_termination(victory_first=False)
            return

        self.triggers.process(CombatTrigger.ON_START_TURN, Side.ENEMY)
        self._process_effects(enemy)
        if self._check_termination(victory_first=False):
            return

        self.triggers.process(CombatTrigger.ON_ATTACK, Side.ENEMY)

        dodge = player.dodge_chance + effects.effect_value(Side.PLAYER, StatusType.DODGE_BOOST)
        if self.rng.random() * 100 < dodge:
            self._log("DODGED!")
            self._log_event("dodge", {"actor": "enemy"})
            return

        raw = enemy.damage * self.rng.uniform(*DAMAGE_VARIANCE)
        if self.monster.has_maledict(EXECUTIONER_AFFIX) and player.current_hp < player.max_hp * EXECUTE_THRESHOLD:
            raw *= EXECUTE_MULTIPLIER
            self._log("Executioner: DOUBLE DAMAGE!")
        self._log_event("raw_damage", {"actor": "enemy", "amount": raw})

        if self.rng.random() * 100 < enemy.crit_chance:
            raw *= CRIT_MULTIPLIER
            self._log("Enemy Crit!")

        mitigation = player.armor * ARMOR_MITIGATION * STANCE_MODIFIERS[self.state.stance].mitigation
        final = max(1, math.floor(raw - mitigation))

        taken = 0
        if effects.has_effect(Side.PLAYER, StatusType.SHIELD):
            effects.consume_shield(Side.PLAYER)
            self._log("Your shield absorbs the hit!")
        else:
            taken = final
            player.take_damage(taken)
            enemy.total_damage_dealt += taken
            self.triggers.process(CombatTrigger.ON_HIT, Side.ENEMY, taken)
            self.triggers.process(CombatTrigger.ON_TAKE_DAMAGE, Side.PLAYER, taken)
            self._log(f"{enemy.name} hits for {taken}.")
        self._log_event("attack", {"actor": "enemy", "damage": taken, "blocked": taken == 0})

        if enemy.life_steal > 0 and taken > 0:
            enemy.heal(math.floor(taken * enemy.life_steal / 100))

        self._check_termination(victory_first=False)

    def _process_effects(self, combatant: Combatant) -> None:
        """Status step for one side, with log lines for each tick."""
        for event in self.status_effects.process_effects(combatant):
            if event["type"] == "dot_damage":
                self._log(
                    f"{combatant.name} takes {event['damage']} {event['effect']} dmg ({event['stacks']} stacks)"
                )
            elif event["type"] == "hot_healing":
                self._log(f"{combatant.name} heals {event['healing']:g}.")
            self._log_event(event.pop("type"), event)

    def _apply_environment(self) -> None:
        """Battle-start effects of the terrain and time of day."""
        if self.modifiers.crit_bonus:
            self._log("Nightstalker active! Crit Chance increased.")
        if self.modifiers.tidal_regen:
            self._log("Tidal Affinity: Regenerating in the swamp.")
            self.status_effects.apply_effect(create_regen(
                Side.PLAYER, "Tidal Ward", TIDAL_REGEN, TIDAL_REGEN_DURATION, EffectSource.ENVIRONMENT
            ))

    def _refill_queue(self) -> None:
        """Append a batch when fewer than two tokens remain, using chilled agility."""
        if len(self.state.turn_queue) >= TURN_QUEUE_REFILL_AT:
            return
        player_agility = effective_agility(
            self.player.dexterity, self.status_effects.total_stacks(Side.PLAYER, StatusType.CHILL)
        )
        enemy_agility = effective_agility(
            self.enemy.dexterity, self.status_effects.total_stacks(Side.ENEMY, StatusType.CHILL)
        )
        self.state.turn_queue.extend(generate_turn_batch(player_agility, enemy_agility))

    # =========================================================================
    # Termination
    # =========================================================================

    def _check_termination(self, victory_first: bool) -> bool:
        """
        End the battle if either side is down.

        After a hero action a dead monster wins the battle even if the hero
        also fell; after a monster action a dead hero loses it.

        Returns:
            True if the battle ended.
        """
        enemy_dead = not self.enemy.is_alive
        player_dead = not self.player.is_alive

        if victory_first:
            if enemy_dead:
                self._end_combat_victory()
                return True
            if player_dead:
                self._end_combat_defeat()
                return True
        else:
            if player_dead:
                self._end_combat_defeat()
                return True
            if enemy_dead:
                self._end_combat_victory()
                return True
        return False

    def _end_combat_victory(self) -> None:
        self.triggers.process(CombatTrigger.ON_KILL, Side.PLAYER)
        self._log_event("combat_end", {"winner": "player", "turns": self.triggers.turn_count})

        final_monster = snapshot_monster(self.monster, self.enemy)
        self._finish(CombatPhase.VICTORY)
        self._narrate(self.enemy.name, "kill")
        if self.on_victory is not None:
            self.on_victory(final_monster)

    def _end_combat_defeat(self) -> None:
        self._log_event("combat_end", {"winner": "enemy", "turns": self.triggers.turn_count})
        self._finish(CombatPhase.DEFEAT)
        if self.on_defeat is not None:
            self.on_defeat()

    def _end_combat_timeout(self) -> None:
        """End combat as a loss after the turn cap."""
        self.state.timed_out = True
        self._log_event("combat_timeout", {"turns": self.triggers.turn_count})
        self._finish(CombatPhase.DEFEAT)

    def _finish(self, outcome: CombatPhase) -> None:
        """Record how the battle ended and return to idle."""
        self.state.outcome = outcome
        self._clear_battle()
        self.state.phase = CombatPhase.IDLE

    # =========================================================================
    # Logging
    # =========================================================================

    def _log(self, message: str) -> None:
        with self._log_lock:
            self.state.combat_log.append(message)
            self._emit(message, "combat")

    def _emit(self, message: str, category: str) -> None:
        if self.add_log is not None:
            self.add_log(message, category)

    def _log_event(self, event_type: str, data: Dict[str, Any]) -> None:
        """Log a combat event."""
        self.state.events.append({
            "action": self.state.actions_taken,
            "type": event_type,
            **data,
        })

    def _log_flavor(self, battle_id: int, text: str) -> None:
        """
        Append late-arriving flavor text unless the battle is gone.

        Text for a replaced or cancelled battle is dropped; text for a
        battle that ended normally is still appended.
        """
        with self._log_lock:
            if battle_id != self.state.battle_id:
                return
            if self.state.phase == CombatPhase.IDLE and self.state.outcome is None:
                return
            self.state.combat_log.append(text)
            self._emit(text, "narrative")

    def _narrate(self, defender: str, action: str) -> None:
        if self.flavor is None:
            return
        battle_id = self.state.battle_id
        self.flavor.narrate("Hero", defender, action, lambda text: self._log_flavor(battle_id, f"> {text}"))

    # =========================================================================
    # State
    # =========================================================================

    def _clear_battle(self) -> None:
        """Drop battle-local state: queue, status effects and cooldowns."""
        self.state.turn_queue.clear()
        self.status_effects.clear_all()
        if self.triggers is not None:
            self.triggers.cooldowns.clear()

    def _clear(self) -> None:
        """Clear all combat state."""
        self._clear_battle()
        with self._log_lock:
            self.state = CombatState(battle_id=self.state.battle_id)
        self.player_stats = None
        self.monster = None
        self.player = None
        self.enemy = None
        self.triggers = None
        self.environment = None
        self.modifiers = EnvironmentModifiers()
