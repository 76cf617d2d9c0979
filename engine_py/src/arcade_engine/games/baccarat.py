"""
Baccarat (punto banco) rules.

The coup itself is fully table-driven; the only decision the bettor makes is
the stake. Shoe reshuffles are seeded from the state so replaying the same
moves always deals the same cards.
"""

import random
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Tuple, Union

from ..constants import (
    GAME_BACCARAT, BANK_SEAT, BET_PLAYER, BET_BANKER, BET_TIE, BET_TYPES,
    BACCARAT_BETTING, BACCARAT_RESULT, BACCARAT_FINISHED, DIFFICULTY_MEDIUM,
)
from ..errors import ExhaustedDeck, IllegalMove
from ..models import Card, Outcome, Player
from ..shuffle import create_shoe, shuffle_deck, draw_card
from .base import GameRules

BET_MULTIPLES = [1, 2, 5, 10]  # offered stakes, in units of the minimum bet


@dataclass(frozen=True)
class PlaceBet:
    seat: int
    bet_type: str
    amount: int


@dataclass(frozen=True)
class Deal:
    seat: int


@dataclass(frozen=True)
class NextRound:
    seat: int


@dataclass(frozen=True)
class CashOut:
    seat: int


BaccaratMove = Union[PlaceBet, Deal, NextRound, CashOut]


@dataclass
class BaccaratState:
    players: List[Player]
    shoe: List[Card]
    chips: int
    starting_chips: int
    min_bet: int
    rng_seed: int
    shuffle_count: int = 0
    phase: str = BACCARAT_BETTING
    bet_type: Optional[str] = None
    bet_amount: int = 0
    player_hand: List[Card] = field(default_factory=list)
    banker_hand: List[Card] = field(default_factory=list)
    result: Optional[str] = None  # player|banker|tie for the last coup
    payout: int = 0  # chips returned to the bettor by the last coup
    history: List[Dict] = field(default_factory=list)


def card_value(card: Card) -> int:
    """A=1, 2-9 pip value, 10/J/Q/K=0."""
    return 0 if card.rank >= 10 else card.rank


def hand_score(hand: List[Card]) -> int:
    return sum(card_value(card) for card in hand) % 10


def is_natural(score: int) -> bool:
    return score in (8, 9)


def player_draws_third(player_score: int) -> bool:
    return player_score <= 5


def banker_draws_third(banker_score: int, player_third_value: Optional[int]) -> bool:
    """
    Bank drawing rule.

    Args:
        banker_score: Bank's two-card total
        player_third_value: Value of the player's third card, or None if the player stood
    """
    if player_third_value is None:
        return banker_score <= 5
    if banker_score <= 2:
        return True
    if banker_score == 3:
        return player_third_value != 8
    if banker_score == 4:
        return 2 <= player_third_value <= 7
    if banker_score == 5:
        return 4 <= player_third_value <= 7
    if banker_score == 6:
        return player_third_value in (6, 7)
    return False


def play_coup(draw: Callable[[], Card]) -> Tuple[List[Card], List[Card]]:
    """Deal one coup with ``draw`` and return (player_hand, banker_hand)."""
    player_hand = [draw()]
    banker_hand = [draw()]
    player_hand.append(draw())
    banker_hand.append(draw())

    player_score = hand_score(player_hand)
    banker_score = hand_score(banker_hand)
    if is_natural(player_score) or is_natural(banker_score):
        return player_hand, banker_hand

    player_third_value = None
    if player_draws_third(player_score):
        third = draw()
        player_hand.append(third)
        player_third_value = card_value(third)

    if banker_draws_third(banker_score, player_third_value):
        banker_hand.append(draw())
    return player_hand, banker_hand


def coup_result(player_hand: List[Card], banker_hand: List[Card]) -> str:
    player_score = hand_score(player_hand)
    banker_score = hand_score(banker_hand)
    if player_score > banker_score:
        return BET_PLAYER
    if banker_score > player_score:
        return BET_BANKER
    return BET_TIE


def settle_bet(bet_type: str, amount: int, result: str, commission: float = 0.05,
               tie_payout: int = 8, push_on_tie: bool = False) -> int:
    """Chips handed back to the bettor (stake included); 0 when the bet loses."""
    if bet_type == result:
        if result == BET_PLAYER:
            return amount * 2
        if result == BET_BANKER:
            winnings = Decimal(amount) * (Decimal(1) - Decimal(str(commission)))
            return amount + int(winnings)
        return amount * (tie_payout + 1)
    if result == BET_TIE and push_on_tie:
        return amount
    return 0


class BaccaratRules(GameRules):
    game_type = GAME_BACCARAT

    def new_game(self, players: List[Player], rng: random.Random) -> BaccaratState:
        if not self.config.validate_player_count(len(players)):
            raise ValueError("Baccarat is played by a single bettor")
        difficulty = players[0].difficulty or DIFFICULTY_MEDIUM
        chips = self.config.bankroll_for(difficulty)
        state = BaccaratState(
            players=list(players),
            shoe=[],
            chips=chips,
            starting_chips=chips,
            min_bet=self.config.min_bet_for(difficulty),
            rng_seed=rng.randrange(2 ** 31),
        )
        self._reshuffle(state)
        return state

    def _reshuffle(self, state: BaccaratState):
        shoe_rng = random.Random(state.rng_seed + state.shuffle_count)
        state.shoe = shuffle_deck(create_shoe(self.config.shoe_decks), shoe_rng)
        state.shuffle_count += 1

    def _draw(self, state: BaccaratState) -> Card:
        try:
            card, state.shoe = draw_card(state.shoe)
        except ExhaustedDeck:
            self._reshuffle(state)
            card, state.shoe = draw_card(state.shoe)
        return card

    def current_seat(self, state: BaccaratState) -> Optional[int]:
        return None if state.phase == BACCARAT_FINISHED else 0

    def legal_moves(self, state: BaccaratState, seat: int) -> List[BaccaratMove]:
        if seat != 0 or state.phase == BACCARAT_FINISHED:
            return []
        if state.phase == BACCARAT_RESULT:
            return [NextRound(seat), CashOut(seat)]
        if state.bet_type is not None:
            return [Deal(seat)]
        moves: List[BaccaratMove] = [
            PlaceBet(seat, bet_type, state.min_bet * multiple)
            for bet_type in BET_TYPES
            for multiple in BET_MULTIPLES
            if state.min_bet * multiple <= state.chips
        ]
        moves.append(CashOut(seat))
        return moves

    def is_legal(self, state: BaccaratState, move: BaccaratMove) -> bool:
        if isinstance(move, PlaceBet):
            return (
                state.phase == BACCARAT_BETTING
                and state.bet_type is None
                and move.bet_type in BET_TYPES
                and state.min_bet <= move.amount <= state.chips
            )
        return super().is_legal(state, move)

    def apply_move(self, state: BaccaratState, move: BaccaratMove) -> BaccaratState:
        self.require_legal(state, move)
        new_state = BaccaratState(
            players=list(state.players),
            shoe=list(state.shoe),
            chips=state.chips,
            starting_chips=state.starting_chips,
            min_bet=state.min_bet,
            rng_seed=state.rng_seed,
            shuffle_count=state.shuffle_count,
            phase=state.phase,
            bet_type=state.bet_type,
            bet_amount=state.bet_amount,
            player_hand=list(state.player_hand),
            banker_hand=list(state.banker_hand),
            result=state.result,
            payout=state.payout,
            history=list(state.history),
        )

        if isinstance(move, PlaceBet):
            new_state.bet_type = move.bet_type
            new_state.bet_amount = move.amount
            new_state.chips -= move.amount

        elif isinstance(move, Deal):
            player_hand, banker_hand = play_coup(lambda: self._draw(new_state))
            result = coup_result(player_hand, banker_hand)
            payout = settle_bet(
                new_state.bet_type, new_state.bet_amount, result,
                commission=self.config.commission,
                tie_payout=self.config.tie_payout,
                push_on_tie=self.config.push_on_tie,
            )
            new_state.player_hand = player_hand
            new_state.banker_hand = banker_hand
            new_state.result = result
            new_state.payout = payout
            new_state.chips += payout
            new_state.phase = BACCARAT_RESULT
            new_state.history = (new_state.history + [{
                'result': result,
                'player_score': hand_score(player_hand),
                'banker_score': hand_score(banker_hand),
            }])[-self.config.history_limit:]

        elif isinstance(move, NextRound):
            new_state.player_hand = []
            new_state.banker_hand = []
            new_state.bet_type = None
            new_state.bet_amount = 0
            new_state.result = None
            new_state.payout = 0
            if new_state.chips < new_state.min_bet:
                new_state.phase = BACCARAT_FINISHED
            else:
                if len(new_state.shoe) < self.config.reshuffle_threshold:
                    self._reshuffle(new_state)
                new_state.phase = BACCARAT_BETTING

        elif isinstance(move, CashOut):
            new_state.phase = BACCARAT_FINISHED

        else:
            raise IllegalMove(f"Unknown move: {move!r}")

        return new_state

    def is_terminal(self, state: BaccaratState) -> bool:
        return state.phase == BACCARAT_FINISHED

    def round_over(self, state: BaccaratState) -> bool:
        return state.phase == BACCARAT_RESULT

    def winner(self, state: BaccaratState) -> Outcome:
        """The bettor wins by leaving with more chips than they sat down with."""
        if not self.is_terminal(state):
            return Outcome.none()
        if state.chips > state.starting_chips:
            return Outcome.win(0)
        if state.chips < state.starting_chips:
            return Outcome.win(BANK_SEAT)
        return Outcome.draw([0, BANK_SEAT])
