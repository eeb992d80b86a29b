"""API services."""

from .game_service import GameService
from .combat_service import CombatService

__all__ = [
    "GameService",
    "CombatService",
]
