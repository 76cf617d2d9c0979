"""
Baccarat bettor bot.
"""

import random
from typing import Optional

from ..constants import BACCARAT_BETTING, BACCARAT_RESULT, BET_BANKER
from ..games.baccarat import BaccaratMove, BaccaratState, Deal, NextRound, PlaceBet
from .base import BaseBot


class FlatBettorBot(BaseBot):
    """
    Flat bettor: the minimum stake on the bank every coup.
    """

    def choose_move(self, state: BaccaratState, seat: int, rng: random.Random) -> Optional[BaccaratMove]:
        if seat != 0:
            return None
        if state.phase == BACCARAT_RESULT:
            return NextRound(seat)
        if state.phase != BACCARAT_BETTING:
            return None
        if state.bet_type is None:
            if state.chips < state.min_bet:
                return None
            return PlaceBet(seat, BET_BANKER, state.min_bet)
        return Deal(seat)
