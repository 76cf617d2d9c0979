"""
Uniform random bot (the easiest tier for every game).
"""

import random
from typing import Any, Optional

from .base import BaseBot


class RandomBot(BaseBot):
    """Picks uniformly among the legal moves."""

    def choose_move(self, state, seat: int, rng: random.Random) -> Optional[Any]:
        moves = self.get_legal_moves(state, seat)
        if not moves:
            return None
        return rng.choice(moves)
