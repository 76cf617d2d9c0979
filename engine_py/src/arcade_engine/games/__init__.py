"""
Rules engines for each supported game family.
"""

from ..constants import GAME_REVERSI, GAME_CRAZY_EIGHTS, GAME_GO_FISH, GAME_BACCARAT
from .base import GameRules
from .baccarat import BaccaratRules
from .crazy_eights import CrazyEightsRules
from .go_fish import GoFishRules
from .reversi import ReversiRules

RULES_REGISTRY = {
    GAME_REVERSI: ReversiRules,
    GAME_CRAZY_EIGHTS: CrazyEightsRules,
    GAME_GO_FISH: GoFishRules,
    GAME_BACCARAT: BaccaratRules,
}


def get_rules(game_type: str, config=None) -> GameRules:
    """Build the rules engine for ``game_type``."""
    try:
        rules_class = RULES_REGISTRY[game_type]
    except KeyError:
        raise ValueError(f"Unknown game type: {game_type}")
    return rules_class(config)


__all__ = [
    "GameRules", "ReversiRules", "CrazyEightsRules", "GoFishRules",
    "BaccaratRules", "RULES_REGISTRY", "get_rules",
]
