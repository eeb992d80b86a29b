"""
Combat-related API schemas.
"""

from typing import List, Optional, Tuple

from pydantic import BaseModel, Field, model_validator

from voidloot.data.models import BattleEnvironment, CombatStance, Monster, MonsterRarity, PlayerStats


class SimulateCombatRequest(BaseModel):
    """
    Balance simulation request.

    The hero is either a full stats snapshot or a preset at a level; the
    opponent is either a full monster or a test mob of a rarity.
    """

    player_stats: Optional[PlayerStats] = None
    preset_id: Optional[str] = None
    level: int = Field(default=1, ge=1)

    monster: Optional[Monster] = None
    monster_rarity: MonsterRarity = MonsterRarity.COMMON

    iterations: int = Field(default=100, ge=1, le=1000)
    seed: Optional[int] = None
    parallel: bool = False


class SimulationResultSchema(BaseModel):
    """Simulation result schema."""

    iterations: int
    wins: int
    losses: int
    timeouts: int
    win_rate: float
    avg_turns: float
    min_turns: int
    max_turns: int
    avg_damage_dealt: float
    avg_damage_taken: float
    avg_hp_remaining: float
    rating: str
    win_rate_confidence: Tuple[float, float]

    # Opponent actually fought, for reference
    monster: Monster


class PresetSchema(BaseModel):
    id: str
    name: str
    theme: str
    skill_ids: List[str]


class LiveBattleSetup(BaseModel):
    """First message of a live battle websocket."""

    player_stats: Optional[PlayerStats] = None
    preset_id: Optional[str] = None
    level: int = Field(default=1, ge=1)
    monster: Optional[Monster] = None
    monster_rarity: MonsterRarity = MonsterRarity.COMMON
    stance: CombatStance = CombatStance.BALANCED
    action_delay: Optional[float] = Field(default=None, ge=0)
    seed: Optional[int] = None
    environment: Optional[BattleEnvironment] = None


class LiveBattleCommand(BaseModel):
    """Player input during a live battle."""

    action: str  # "flee", "stance" or "cancel"
    stance: Optional[CombatStance] = None

    @model_validator(mode="after")
    def _stance_required(self) -> "LiveBattleCommand":
        if self.action == "stance" and self.stance is None:
            raise ValueError("stance command needs a stance")
        return self
