"""
Combat simulation service.
"""

import random
from typing import List, Optional

from voidloot.combat import (
    SIMULATION_PRESETS,
    CombatEngine,
    CombatSimulator,
    build_preset_player,
    build_test_monster,
    get_preset,
)
from voidloot.core.config import settings
from voidloot.core.logging import get_logger
from voidloot.data.models import Monster, MonsterRarity, PlayerStats

from ..schemas.combat import PresetSchema, SimulateCombatRequest, SimulationResultSchema
from .game_service import GameService

logger = get_logger(__name__)


class CombatService:
    """Balance simulation and battle setup."""

    def __init__(self, game_service: GameService):
        self.game_service = game_service

    def list_presets(self) -> List[PresetSchema]:
        return [
            PresetSchema(id=p.id, name=p.name, theme=str(p.theme), skill_ids=list(p.skill_ids))
            for p in SIMULATION_PRESETS
        ]

    def resolve_player(
        self,
        player_stats: Optional[PlayerStats],
        preset_id: Optional[str],
        level: int,
    ) -> PlayerStats:
        """Explicit stats win; otherwise a preset (or skill-less) hero."""
        if player_stats is not None:
            return player_stats
        preset = get_preset(preset_id) if preset_id else None
        return build_preset_player(preset, level)

    def resolve_monster(
        self,
        monster: Optional[Monster],
        level: int,
        rarity: MonsterRarity,
        seed: Optional[int],
    ) -> Monster:
        if monster is not None:
            return monster
        return build_test_monster(level, rarity, random.Random(seed))

    def simulate(self, request: SimulateCombatRequest) -> SimulationResultSchema:
        """
        Run a Monte Carlo balance simulation.

        Args:
            request: Hero, opponent and run settings.

        Returns:
            Aggregate statistics.
        """
        player = self.resolve_player(request.player_stats, request.preset_id, request.level)
        monster = self.resolve_monster(request.monster, request.level, request.monster_rarity, request.seed)
        iterations = min(request.iterations, settings.MAX_SIMULATION_COUNT)

        simulator = CombatSimulator(base_seed=request.seed)
        result = simulator.simulate(
            player,
            monster,
            iterations=iterations,
            parallel=request.parallel,
            max_workers=settings.SIMULATION_WORKERS,
        )
        logger.info(
            "simulation_complete",
            iterations=iterations,
            win_rate=round(result.win_rate, 3),
            rating=result.rating,
        )

        return SimulationResultSchema(
            iterations=result.iterations,
            wins=result.wins,
            losses=result.losses,
            timeouts=result.timeouts,
            win_rate=result.win_rate,
            avg_turns=result.avg_turns,
            min_turns=result.min_turns,
            max_turns=result.max_turns,
            avg_damage_dealt=result.avg_damage_dealt,
            avg_damage_taken=result.avg_damage_taken,
            avg_hp_remaining=result.avg_hp_remaining,
            rating=result.rating,
            win_rate_confidence=result.win_rate_confidence,
            monster=monster,
        )

    def single_battle(self, request: SimulateCombatRequest):
        """One headless battle with its full event list."""
        player = self.resolve_player(request.player_stats, request.preset_id, request.level)
        monster = self.resolve_monster(request.monster, request.level, request.monster_rarity, request.seed)
        return CombatSimulator(base_seed=request.seed).run_single(player, monster, request.seed)

    def create_engine(self, seed: Optional[int], add_log=None) -> CombatEngine:
        return CombatEngine(seed=seed, add_log=add_log)
