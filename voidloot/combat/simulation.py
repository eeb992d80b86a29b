"""Monte Carlo Combat Simulation for Voidloot.

Runs many headless battles with the live rule set to estimate win rates,
battle length and remaining HP, and rates the matchup's balance.
"""

import math
import random
import statistics
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from voidloot.core.constants import (
    BASE_ATTRIBUTE_VALUE,
    MAX_SIMULATION_TURNS,
    MONSTER_RARITY_CONFIG,
    RATING_BROKEN_ABOVE,
    RATING_BROKEN_MAX_TURNS,
    RATING_EASY_ABOVE,
    RATING_HARD_BELOW,
    RATING_IMPOSSIBLE_BELOW,
)
from voidloot.core.exceptions import CatalogError
from voidloot.core.monsters import generate_monster
from voidloot.core.stat_calculator import calculate_player_stats
from voidloot.data.loaders import get_skill_by_id
from voidloot.data.models import (
    BaseAttributes,
    Monster,
    MonsterRarity,
    PassiveSkill,
    PassiveTheme,
    PlayerStats,
)

from .combat_engine import CombatEngine
from .combat_unit import BattleResult


@dataclass
class SimulationResult:
    """
    Result of a Monte Carlo battle simulation.

    Timeouts count as losses in ``win_rate`` and are reported separately.
    """

    iterations: int
    wins: int
    losses: int
    timeouts: int

    win_rate: float  # 0.0 to 1.0
    avg_turns: float
    min_turns: int
    max_turns: int
    avg_damage_dealt: float
    avg_damage_taken: float
    avg_hp_remaining: float  # Over wins only

    rating: str

    # Confidence interval (95%)
    win_rate_confidence: Tuple[float, float] = (0.0, 1.0)

    # Raw results for detailed analysis
    individual_results: List[BattleResult] = field(default_factory=list)


def rate_balance(win_rate_percent: float, avg_turns: float) -> str:
    """Label a matchup from its win rate (percent) and average length."""
    if win_rate_percent < RATING_IMPOSSIBLE_BELOW:
        return "Impossible (Buff Required)"
    if win_rate_percent < RATING_HARD_BELOW:
        return "Hard / Unfair"
    if win_rate_percent > RATING_BROKEN_ABOVE and avg_turns < RATING_BROKEN_MAX_TURNS:
        return "Broken OP (Nerf Required)"
    if win_rate_percent > RATING_EASY_ABOVE:
        return "Very Easy"
    return "Balanced"


class CombatSimulator:
    """
    Monte Carlo battle simulator.

    Every iteration runs on its own copies of the inputs, so the source
    stats and monster are never touched and iterations are independent.

    Usage:
        simulator = CombatSimulator(base_seed=42)
        result = simulator.simulate(player_stats, monster, iterations=500)
        print(f"Win rate: {result.win_rate:.1%} ({result.rating})")
    """

    def __init__(self, base_seed: Optional[int] = None, max_turns: int = MAX_SIMULATION_TURNS):
        """
        Initialize simulator.

        Args:
            base_seed: Base seed for reproducibility (seeds will be derived).
            max_turns: Hero turns before a battle is called as a loss.
        """
        self.base_seed = base_seed
        self.max_turns = max_turns
        self.rng = random.Random(base_seed)

    def simulate(
        self,
        player_stats: PlayerStats,
        monster: Monster,
        iterations: int = 100,
        parallel: bool = False,
        max_workers: int = 4,
    ) -> SimulationResult:
        """
        Run Monte Carlo simulation.

        Args:
            player_stats: Hero stats snapshot.
            monster: Opponent.
            iterations: Number of battles.
            parallel: Whether to run battles in a thread pool.
            max_workers: Max parallel workers.

        Returns:
            SimulationResult with statistical analysis.
        """
        seeds = [self._get_iteration_seed(i) for i in range(iterations)]

        if parallel and iterations > 10:
            results = self._run_parallel(player_stats, monster, seeds, max_workers)
        else:
            results = self._run_sequential(player_stats, monster, seeds)

        return self._analyze_results(results, iterations)

    def run_single(self, player_stats: PlayerStats, monster: Monster, seed: Optional[int]) -> BattleResult:
        """One headless battle on copies of the inputs."""
        engine = CombatEngine(seed=seed)
        engine.start_battle(
            monster.model_copy(deep=True),
            player_stats.level,
            player_stats.model_copy(deep=True),
        )
        return engine.run_combat(max_turns=self.max_turns)

    def _run_sequential(
        self,
        player_stats: PlayerStats,
        monster: Monster,
        seeds: Sequence[int],
    ) -> List[BattleResult]:
        """Run battles sequentially."""
        return [self.run_single(player_stats, monster, seed) for seed in seeds]

    def _run_parallel(
        self,
        player_stats: PlayerStats,
        monster: Monster,
        seeds: Sequence[int],
        max_workers: int,
    ) -> List[BattleResult]:
        """Run battles in parallel, keeping iteration order."""
        results: List[Optional[BattleResult]] = [None] * len(seeds)

        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = {
                executor.submit(self.run_single, player_stats, monster, seed): i
                for i, seed in enumerate(seeds)
            }

            for future in as_completed(futures):
                results[futures[future]] = future.result()

        return results

    def _get_iteration_seed(self, iteration: int) -> int:
        """Get deterministic seed for an iteration."""
        if self.base_seed is not None:
            return self.base_seed + iteration
        return self.rng.randint(0, 2**31)

    def _analyze_results(self, results: List[BattleResult], iterations: int) -> SimulationResult:
        """Analyze simulation results."""
        wins = sum(1 for r in results if r.win)
        timeouts = sum(1 for r in results if r.timed_out)
        losses = iterations - wins

        win_rate = wins / iterations if iterations > 0 else 0

        turns = [r.turns for r in results]
        avg_turns = statistics.mean(turns) if turns else 0
        min_turns = min(turns) if turns else 0
        max_turns = max(turns) if turns else 0

        dealt = [r.damage_dealt for r in results]
        taken = [r.damage_taken for r in results]
        avg_dealt = statistics.mean(dealt) if dealt else 0
        avg_taken = statistics.mean(taken) if taken else 0

        hp_on_win = [r.final_player_hp for r in results if r.win]
        avg_hp_remaining = statistics.mean(hp_on_win) if hp_on_win else 0

        # Confidence interval (Wilson score interval approximation)
        confidence = self._calculate_confidence_interval(wins, iterations)

        return SimulationResult(
            iterations=iterations,
            wins=wins,
            losses=losses,
            timeouts=timeouts,
            win_rate=win_rate,
            avg_turns=avg_turns,
            min_turns=min_turns,
            max_turns=max_turns,
            avg_damage_dealt=avg_dealt,
            avg_damage_taken=avg_taken,
            avg_hp_remaining=avg_hp_remaining,
            rating=rate_balance(win_rate * 100, avg_turns),
            win_rate_confidence=confidence,
            individual_results=results,
        )

    def _calculate_confidence_interval(self, successes: int, n: int) -> Tuple[float, float]:
        """Calculate Wilson score confidence interval."""
        if n == 0:
            return (0.0, 1.0)

        z = 1.96  # 95% confidence
        p = successes / n

        denominator = 1 + z * z / n
        center = (p + z * z / (2 * n)) / denominator

        spread = z * ((p * (1 - p) / n + z * z / (4 * n * n)) ** 0.5) / denominator

        lower = max(0.0, center - spread)
        upper = min(1.0, center + spread)

        return (lower, upper)


# =============================================================================
# BUILD PRESETS
# =============================================================================


@dataclass(frozen=True)
class BuildPreset:
    """A themed skill set for balance testing."""

    id: str
    name: str
    theme: PassiveTheme
    skill_ids: Tuple[str, ...]


SIMULATION_PRESETS: Tuple[BuildPreset, ...] = (
    BuildPreset(
        id="pyromancer",
        name="Pyromancer (Glass Cannon)",
        theme=PassiveTheme.PYROMANCY,
        skill_ids=("magma_veins", "burning_rage", "inferno_touch", "forest_fire"),
    ),
    BuildPreset(
        id="sentinel",
        name="Sentinel (Tank)",
        theme=PassiveTheme.SENTINEL,
        skill_ids=("iron_skin", "unyielding", "thorns_aura", "titans_gaze"),
    ),
    BuildPreset(
        id="shadow",
        name="Shadow Assassin (Crit/DoT)",
        theme=PassiveTheme.SHADOW,
        skill_ids=("venom_coating", "shadow_step", "void_hunger", "blood_rite"),
    ),
    BuildPreset(
        id="cryomancer",
        name="Cryomancer (Control)",
        theme=PassiveTheme.CRYOMANCY,
        skill_ids=("glacial_ward", "crystalline_mind", "shatter_point", "static_discharge"),
    ),
)


def get_preset(preset_id: str) -> BuildPreset:
    for preset in SIMULATION_PRESETS:
        if preset.id == preset_id:
            return preset
    raise CatalogError("preset", preset_id)


def preset_attributes(level: int) -> BaseAttributes:
    """Even attribute spread for a test hero of the given level."""
    value = BASE_ATTRIBUTE_VALUE + level * 2
    return BaseAttributes(strength=value, dexterity=value, intelligence=value, vitality=value)


def build_preset_player(preset: Optional[BuildPreset], level: int) -> PlayerStats:
    """
    Stats of a test hero using a preset.

    Preset skills are ranked ``level // 2 + 1`` (capped at each skill's max
    rank) and all of them are equipped. Without a preset the hero has no
    skills.
    """
    skills: List[PassiveSkill] = []
    if preset is not None:
        rank = level // 2 + 1
        for skill_id in preset.skill_ids:
            definition = get_skill_by_id(skill_id)
            if definition is None:
                continue
            skills.append(PassiveSkill.from_definition(definition, level=min(rank, definition.max_rank)))

    return calculate_player_stats(
        preset_attributes(level),
        {},
        skills,
        level,
        0,
        (),
        [s.id for s in skills],
    )


def build_test_monster(
    level: int,
    rarity: MonsterRarity = MonsterRarity.COMMON,
    rng: Optional[random.Random] = None,
) -> Monster:
    """
    Opponent for a balance run: a baseline monster with the rarity's stat
    multiplier applied to HP and damage.
    """
    monster = generate_monster(level, 1.0, rng, rarity=MonsterRarity.COMMON)
    stat_mult = MONSTER_RARITY_CONFIG[rarity].stat_mult
    max_hp = math.floor(monster.max_hp * stat_mult)
    return monster.model_copy(update={
        "name": f"Test {rarity} Mob",
        "rarity": rarity,
        "max_hp": max_hp,
        "current_hp": max_hp,
        "damage": math.floor(monster.damage * stat_mult),
    })


def quick_simulate(
    player_stats: PlayerStats,
    monster: Monster,
    iterations: int = 100,
) -> float:
    """
    Quick simulation helper returning the hero's win rate.

    Args:
        player_stats: Hero stats.
        monster: Opponent.
        iterations: Number of battles.

    Returns:
        Win rate (0.0 to 1.0).
    """
    simulator = CombatSimulator()
    result = simulator.simulate(player_stats, monster, iterations=iterations)
    return result.win_rate
