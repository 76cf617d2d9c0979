"""
Card game bots for Crazy Eights and Go Fish.
"""

import random
from collections import Counter
from typing import List, Optional

from ..constants import DIFFICULTY_MEDIUM, SUITS
from ..games.crazy_eights import (
    ChooseSuit, CrazyEightsMove, CrazyEightsState, DrawCard, PassTurn, PlayCard,
)
from ..games.go_fish import Ask, GoFishState
from ..models import Card
from ..shuffle import count_suits, find_card
from .base import BaseBot


def most_common_suit(hand: List[Card]) -> str:
    """Suit held most often; ties go to the earlier suit in SUITS."""
    counts = count_suits(hand)
    best = SUITS[0]
    for suit in SUITS:
        if counts[suit] > counts[best]:
            best = suit
    return best


class CrazyEightsBot(BaseBot):
    """
    Crazy Eights player for medium and above.

    Strategy:
    - Keep eights as a last resort
    - Medium plays any natural card; hard and master play the one that
      matches the most cards still in hand
    - After an eight, name the suit held most often
    - Draw when nothing plays, pass when drawing is capped
    """

    def choose_move(self, state: CrazyEightsState, seat: int, rng: random.Random) -> Optional[CrazyEightsMove]:
        moves = self.get_legal_moves(state, seat)
        if not moves:
            return None

        hand = state.hands[seat]
        if state.pending_suit_seat == seat:
            return ChooseSuit(seat, most_common_suit(hand))

        wild_rank = self.rules.config.wild_rank
        plays = [move for move in moves if isinstance(move, PlayCard)]
        naturals = [play for play in plays if find_card(hand, play.card_id).rank != wild_rank]

        if naturals:
            if self.difficulty == DIFFICULTY_MEDIUM:
                return rng.choice(naturals)
            return self._best_natural(hand, naturals)

        if plays:
            return plays[0]

        for move in moves:
            if isinstance(move, DrawCard):
                return move
        return PassTurn(seat)

    def _best_natural(self, hand: List[Card], naturals: List[PlayCard]) -> PlayCard:
        """The play leaving the most follow-ups: cards sharing its suit or rank."""
        best_play = naturals[0]
        best_score = -1
        for play in naturals:
            card = find_card(hand, play.card_id)
            score = sum(
                1 for other in hand
                if other.id != card.id and (other.suit == card.suit or other.rank == card.rank)
            )
            if score > best_score:
                best_score = score
                best_play = play
        return best_play


class GoFishBot(BaseBot):
    """
    Go Fish player for medium and above.

    Asks for the rank it holds most of. With ``use_memory`` it also reads the
    public ask log and targets whoever last asked for that rank.
    """

    def __init__(self, rules, difficulty: str = DIFFICULTY_MEDIUM, use_memory: bool = False):
        super().__init__(rules, difficulty)
        self.use_memory = use_memory

    def choose_move(self, state: GoFishState, seat: int, rng: random.Random) -> Optional[Ask]:
        moves = self.get_legal_moves(state, seat)
        if not moves:
            return None

        counts = Counter(card.rank for card in state.hands[seat])
        most = max(counts.values())
        ranks = sorted(rank for rank, count in counts.items() if count == most)
        targets = sorted({move.target for move in moves})

        if self.use_memory:
            for rank in ranks:
                holder = self._remembered_holder(state, seat, rank, targets)
                if holder is not None:
                    return Ask(seat, holder, rank)

        return Ask(seat, rng.choice(targets), rng.choice(ranks))

    def _remembered_holder(self, state: GoFishState, seat: int, rank: int, targets: List[int]) -> Optional[int]:
        # Whoever asked for a rank most recently still holds it: they either
        # kept their own copy or received more.
        for entry in reversed(state.ask_log):
            if entry['rank'] != rank:
                continue
            asker = entry['seat']
            if asker != seat and asker in targets:
                return asker
            return None
        return None
