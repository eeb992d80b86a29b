"""Turn queue construction.

A battle consumes a queue of side tokens. Batches are built from the
agility ratio of the two sides, with chill stacks slowing a side down.
"""

from typing import List

from voidloot.core.constants import CHILL_AGILITY_FACTOR, calculate_turns
from voidloot.data.models import Side


def effective_agility(dexterity: float, chill_stacks: int = 0) -> float:
    """Dexterity reduced by 20% per chill stack."""
    return dexterity * (CHILL_AGILITY_FACTOR ** chill_stacks)


def generate_turn_batch(player_agility: float, enemy_agility: float) -> List[Side]:
    """
    Build one batch of turn tokens.

    All of one side's attacks are placed before the other's; the faster side
    (the player on ties) goes first.
    """
    split = calculate_turns(player_agility, enemy_agility)
    player_tokens = [Side.PLAYER] * split.player_attacks
    enemy_tokens = [Side.ENEMY] * split.enemy_attacks

    if split.player_goes_first:
        return player_tokens + enemy_tokens
    return enemy_tokens + player_tokens
