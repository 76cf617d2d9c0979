"""
Base bot interface and utilities.
"""

import random
from abc import ABC, abstractmethod
from typing import Any, List, Optional

from ..constants import DIFFICULTY_MEDIUM
from ..games.base import GameRules


class BaseBot(ABC):
    """
    Abstract base class for AI seats.

    Bots never mutate the state they are given and draw randomness only from
    the ``rng`` passed in, so a seeded rng reproduces the same choice.
    """

    def __init__(self, rules: GameRules, difficulty: str = DIFFICULTY_MEDIUM):
        self.rules = rules
        self.difficulty = difficulty

    @abstractmethod
    def choose_move(self, state, seat: int, rng: random.Random) -> Optional[Any]:
        """
        Choose a move for ``seat``.

        Args:
            state: Current game state
            seat: Seat the bot is playing
            rng: Seeded random generator

        Returns:
            A legal move, or None when the seat has nothing to do but pass
        """
        pass

    def get_legal_moves(self, state, seat: int) -> List[Any]:
        return self.rules.legal_moves(state, seat)

    def is_my_turn(self, state, seat: int) -> bool:
        return self.rules.current_seat(state) == seat
