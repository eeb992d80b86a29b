"""
Content generation and stat service.
"""

import random
from typing import List, Optional

from voidloot.core.exceptions import CatalogError
from voidloot.core.loot import (
    SMUGGLING_BUNDLES,
    calculate_buy_price,
    calculate_item_value,
    generate_loot,
    get_bundle,
    identification_cost,
    open_bundle,
)
from voidloot.core.logging import get_logger
from voidloot.core.monsters import generate_boss, generate_monster
from voidloot.core.skills import SkillRollFilters, generate_passive_skill
from voidloot.core.stat_calculator import calculate_player_stats
from voidloot.data.loaders import get_skill_by_id
from voidloot.data.models import PassiveSkill, PlayerStats

from ..schemas.common import SkillRef
from ..schemas.loot import (
    BundleSchema,
    GenerateLootRequest,
    GenerateLootResponse,
    ItemValueResponse,
    OpenBundleRequest,
    OpenBundleResponse,
)
from ..schemas.monsters import (
    GenerateBossRequest,
    GenerateMonsterRequest,
    SkillRollRequest,
    SkillRollResponse,
)
from ..schemas.stats import CalculateStatsRequest

logger = get_logger(__name__)


def resolve_skill_refs(refs: List[SkillRef]) -> List[PassiveSkill]:
    """Owned skills from catalog ids; ranks are clamped to each skill's cap."""
    skills = []
    for ref in refs:
        definition = get_skill_by_id(ref.id)
        if definition is None:
            raise CatalogError("skill", ref.id)
        skills.append(PassiveSkill.from_definition(definition, level=min(ref.level, definition.max_rank)))
    return skills


class GameService:
    """Loot, monster, skill and stat operations."""

    def _rng(self, seed: Optional[int]) -> random.Random:
        return random.Random(seed)

    # === Loot ===

    def generate_loot(self, request: GenerateLootRequest) -> GenerateLootResponse:
        rng = self._rng(request.seed)
        items = []
        for _ in range(request.count):
            item = generate_loot(request.level, request.difficulty, request.magic_find, rng)
            if item is not None:
                items.append(item)
        return GenerateLootResponse(items=items, rolls=request.count)

    def item_value(self, item) -> ItemValueResponse:
        return ItemValueResponse(
            value=calculate_item_value(item),
            buy_price=calculate_buy_price(item),
            identify_cost=identification_cost(item),
        )

    def list_bundles(self) -> List[BundleSchema]:
        return [
            BundleSchema(id=b.id, name=b.name, description=b.description, cost=b.cost, icon=b.icon)
            for b in SMUGGLING_BUNDLES
        ]

    def open_bundle(self, bundle_id: str, request: OpenBundleRequest) -> OpenBundleResponse:
        bundle = get_bundle(bundle_id)
        item = open_bundle(bundle, request.level, request.magic_find, self._rng(request.seed))
        logger.info("bundle_opened", bundle_id=bundle_id, empty=item is None)
        return OpenBundleResponse(bundle_id=bundle_id, item=item)

    # === Monsters ===

    def generate_monster(self, request: GenerateMonsterRequest):
        return generate_monster(request.level, request.difficulty, self._rng(request.seed), rarity=request.rarity)

    def generate_boss(self, request: GenerateBossRequest):
        return generate_boss(request.level, request.difficulty, request.area_name, self._rng(request.seed))

    # === Skills ===

    def roll_skill(self, request: SkillRollRequest) -> SkillRollResponse:
        owned = resolve_skill_refs(request.owned)
        filters = SkillRollFilters(
            exact_rarity=request.exact_rarity,
            min_rarity=request.min_rarity,
            exclude_rarities=list(request.exclude_rarities),
        )
        roll = generate_passive_skill(owned, filters, self._rng(request.seed))
        return SkillRollResponse(skill=roll.skill, is_new=roll.is_new)

    # === Stats ===

    def calculate_stats(self, request: CalculateStatsRequest) -> PlayerStats:
        return calculate_player_stats(
            request.base_attributes,
            request.equipment,
            resolve_skill_refs(request.passive_skills),
            request.level,
            request.stat_points,
            request.active_effects,
            request.equipped_skill_ids,
        )
