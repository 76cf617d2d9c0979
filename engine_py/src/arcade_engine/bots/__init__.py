"""Bot selection for AI seats"""

import logging
import random
from typing import Any, Optional

from ..constants import (
    GAME_REVERSI, GAME_CRAZY_EIGHTS, GAME_GO_FISH, GAME_BACCARAT,
    DIFFICULTY_EASY, DIFFICULTY_MEDIUM, DIFFICULTY_HARD, DIFFICULTY_MASTER, DIFFICULTIES,
)
from ..games.base import GameRules
from .base import BaseBot
from .baccarat import FlatBettorBot
from .cards import CrazyEightsBot, GoFishBot
from .random_bot import RandomBot
from .reversi import HeuristicReversiBot, MinimaxReversiBot

logger = logging.getLogger(__name__)


def get_bot(rules: GameRules, difficulty: str) -> BaseBot:
    """
    Build the bot for a game and difficulty tier.

    Easy is uniform random everywhere; the higher tiers are game specific.
    """
    if difficulty not in DIFFICULTIES:
        raise ValueError(f"Unknown difficulty: {difficulty}")
    if difficulty == DIFFICULTY_EASY:
        return RandomBot(rules, difficulty)

    game_type = rules.game_type
    if game_type == GAME_REVERSI:
        if difficulty == DIFFICULTY_MEDIUM:
            return HeuristicReversiBot(rules, difficulty)
        depth = rules.config.master_depth if difficulty == DIFFICULTY_MASTER else rules.config.hard_depth
        return MinimaxReversiBot(rules, difficulty, depth=depth)
    if game_type == GAME_CRAZY_EIGHTS:
        return CrazyEightsBot(rules, difficulty)
    if game_type == GAME_GO_FISH:
        return GoFishBot(rules, difficulty, use_memory=difficulty in (DIFFICULTY_HARD, DIFFICULTY_MASTER))
    if game_type == GAME_BACCARAT:
        return FlatBettorBot(rules, difficulty)
    raise ValueError(f"No bot for game type: {game_type}")


def choose_move(rules: GameRules, state, seat: int, difficulty: str, rng: random.Random) -> Optional[Any]:
    """
    Pick a move for an AI seat.

    Returns None when the seat has no legal move or it is not its turn.
    """
    bot = get_bot(rules, difficulty)
    if not bot.is_my_turn(state, seat):
        return None
    move = bot.choose_move(state, seat, rng)
    logger.debug("AI seat %s (%s, %s) chose %r", seat, rules.game_type, difficulty, move)
    return move


__all__ = [
    'BaseBot', 'RandomBot', 'HeuristicReversiBot', 'MinimaxReversiBot',
    'CrazyEightsBot', 'GoFishBot', 'FlatBettorBot', 'get_bot', 'choose_move',
]
