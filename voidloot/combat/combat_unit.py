"""Combatants for Voidloot battles.

Battle-local HP and combat stats for the hero and the monster. A combatant
is built from a stats snapshot at battle start and never writes back to it.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from voidloot.data.models import Monster, PlayerStats, Side

PLAYER_NAME = "Hero"


@dataclass
class Combatant:
    """
    One side of a battle.

    HP may go below zero; the engine reads ``is_alive`` after every
    HP-mutating step.
    """

    side: Side
    name: str
    max_hp: float
    current_hp: float

    damage: float
    armor: float
    crit_chance: float  # Percent
    dodge_chance: float  # Percent
    dexterity: float
    life_steal: float = 0.0  # Percent of damage dealt
    thorns: float = 0.0  # Percent of attacker damage reflected

    # Tracking
    total_damage_dealt: float = 0.0
    total_damage_taken: float = 0.0
    total_healing_done: float = 0.0

    @classmethod
    def from_player_stats(cls, stats: PlayerStats) -> "Combatant":
        """Hero at full HP."""
        return cls(
            side=Side.PLAYER,
            name=PLAYER_NAME,
            max_hp=stats.max_hp,
            current_hp=stats.max_hp,
            damage=stats.damage,
            armor=stats.armor,
            crit_chance=stats.crit_chance,
            dodge_chance=stats.dodge_chance,
            dexterity=stats.dexterity,
            life_steal=stats.life_steal,
            thorns=stats.thorns,
        )

    @classmethod
    def from_monster(cls, monster: Monster) -> "Combatant":
        return cls(
            side=Side.ENEMY,
            name=monster.name,
            max_hp=monster.max_hp,
            current_hp=monster.current_hp,
            damage=monster.damage,
            armor=monster.armor,
            crit_chance=monster.crit_chance,
            dodge_chance=monster.dodge_chance,
            dexterity=monster.dexterity,
            life_steal=monster.life_steal,
            thorns=monster.thorns,
        )

    @property
    def is_alive(self) -> bool:
        return self.current_hp > 0

    @property
    def hp_ratio(self) -> float:
        if self.max_hp <= 0:
            return 0.0
        return self.current_hp / self.max_hp

    def take_damage(self, amount: float) -> float:
        """
        Lose HP.

        Args:
            amount: Already-mitigated damage.

        Returns:
            Damage taken.
        """
        if amount <= 0:
            return 0.0
        self.current_hp -= amount
        self.total_damage_taken += amount
        return amount

    def heal(self, amount: float) -> float:
        """
        Heal up to max HP.

        Returns:
            Actual amount healed.
        """
        if amount <= 0:
            return 0.0
        old_hp = self.current_hp
        self.current_hp = min(self.current_hp + amount, self.max_hp)
        healed = self.current_hp - old_hp
        self.total_healing_done += healed
        return healed


@dataclass
class BattleResult:
    """Result of a finished (or abandoned) battle."""

    win: bool
    timed_out: bool
    turns: int  # Player turns taken
    actions: int  # Queue tokens consumed
    final_player_hp: float
    player_max_hp: float
    final_enemy_hp: float
    enemy_max_hp: float
    damage_dealt: float
    damage_taken: float
    phase: str

    # Raw event stream for detailed analysis
    events: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def player_hp_ratio(self) -> float:
        if self.player_max_hp <= 0:
            return 0.0
        return self.final_player_hp / self.player_max_hp

    def to_dict(self, include_events: bool = False) -> Dict[str, Any]:
        data = {
            "win": self.win,
            "timed_out": self.timed_out,
            "turns": self.turns,
            "actions": self.actions,
            "final_player_hp": self.final_player_hp,
            "final_enemy_hp": self.final_enemy_hp,
            "damage_dealt": self.damage_dealt,
            "damage_taken": self.damage_taken,
            "phase": self.phase,
        }
        if include_events:
            data["events"] = list(self.events)
        return data


def snapshot_monster(monster: Monster, combatant: Optional[Combatant]) -> Monster:
    """Copy of the monster carrying the combatant's final HP."""
    if combatant is None:
        return monster.model_copy(deep=True)
    return monster.model_copy(update={"current_hp": int(combatant.current_hp)}, deep=True)
