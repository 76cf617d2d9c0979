"""
Crazy Eights rules.

Playing the wild rank is a two-phase move: the card goes down with
``PlayCard`` and the same seat then declares the suit with ``ChooseSuit``.
"""

import random
from dataclasses import dataclass
from typing import List, Optional, Union

from ..constants import SUITS, GAME_CRAZY_EIGHTS
from ..errors import IllegalMove
from ..models import Card, Outcome, Player
from ..shuffle import create_deck, shuffle_deck, deal_hands, draw_card, find_card
from .base import GameRules


@dataclass(frozen=True)
class PlayCard:
    seat: int
    card_id: str


@dataclass(frozen=True)
class ChooseSuit:
    seat: int
    suit: str


@dataclass(frozen=True)
class DrawCard:
    seat: int


@dataclass(frozen=True)
class PassTurn:
    seat: int


CrazyEightsMove = Union[PlayCard, ChooseSuit, DrawCard, PassTurn]


@dataclass
class CrazyEightsState:
    players: List[Player]
    hands: List[List[Card]]
    deck: List[Card]
    discard: List[Card]  # last card is the top of the pile
    current_suit: str
    turn: Optional[int] = 0
    draw_count: int = 0  # cards drawn by the active seat this turn
    pending_suit_seat: Optional[int] = None
    passes_in_row: int = 0  # consecutive passes while the deck is empty
    finished: bool = False

    @property
    def top_card(self) -> Card:
        return self.discard[-1]


def can_play(card: Card, top_card: Card, current_suit: str, wild_rank: int = 8) -> bool:
    """Wild rank always plays; otherwise match the current suit or the top card's rank."""
    if card.rank == wild_rank:
        return True
    return card.suit == current_suit or card.rank == top_card.rank


class CrazyEightsRules(GameRules):
    game_type = GAME_CRAZY_EIGHTS

    def new_game(self, players: List[Player], rng: random.Random) -> CrazyEightsState:
        if not self.config.validate_player_count(len(players)):
            raise ValueError(f"Crazy Eights supports {self.config.min_players}-{self.config.max_players} players")

        deck = shuffle_deck(create_deck(), rng)
        hands, deck = deal_hands(deck, len(players), self.config.cards_per_player(len(players)))

        # The starter card is never wild: put it back and reshuffle
        start_card, deck = draw_card(deck)
        while start_card.rank == self.config.wild_rank:
            deck = shuffle_deck(deck + [start_card], rng)
            start_card, deck = draw_card(deck)

        return CrazyEightsState(
            players=list(players),
            hands=hands,
            deck=deck,
            discard=[start_card],
            current_suit=start_card.suit,
            turn=0,
        )

    def current_seat(self, state: CrazyEightsState) -> Optional[int]:
        return None if state.finished else state.turn

    def playable_cards(self, state: CrazyEightsState, seat: int) -> List[Card]:
        return [
            card for card in state.hands[seat]
            if can_play(card, state.top_card, state.current_suit, self.config.wild_rank)
        ]

    def can_draw(self, state: CrazyEightsState) -> bool:
        return state.draw_count < self.config.draw_cap and bool(state.deck)

    def legal_moves(self, state: CrazyEightsState, seat: int) -> List[CrazyEightsMove]:
        if state.finished or state.turn != seat:
            return []
        if state.pending_suit_seat == seat:
            return [ChooseSuit(seat, suit) for suit in SUITS]

        moves: List[CrazyEightsMove] = [PlayCard(seat, card.id) for card in self.playable_cards(state, seat)]
        if not moves and self.can_draw(state):
            moves.append(DrawCard(seat))
        if not moves and not self.can_draw(state):
            moves.append(PassTurn(seat))
        return moves

    def apply_move(self, state: CrazyEightsState, move: CrazyEightsMove) -> CrazyEightsState:
        self.require_legal(state, move)

        hands = [list(hand) for hand in state.hands]
        new_state = CrazyEightsState(
            players=list(state.players),
            hands=hands,
            deck=list(state.deck),
            discard=list(state.discard),
            current_suit=state.current_suit,
            turn=state.turn,
            draw_count=state.draw_count,
            pending_suit_seat=state.pending_suit_seat,
            passes_in_row=state.passes_in_row,
        )
        seat = move.seat

        if isinstance(move, PlayCard):
            card = find_card(hands[seat], move.card_id)
            hands[seat].remove(card)
            new_state.discard.append(card)
            new_state.current_suit = card.suit
            new_state.draw_count = 0
            new_state.passes_in_row = 0
            if not hands[seat]:
                new_state.finished = True
                new_state.turn = None
            elif card.rank == self.config.wild_rank:
                new_state.pending_suit_seat = seat
            else:
                new_state.turn = self._next_seat(new_state, seat)

        elif isinstance(move, ChooseSuit):
            new_state.current_suit = move.suit
            new_state.pending_suit_seat = None
            new_state.turn = self._next_seat(new_state, seat)

        elif isinstance(move, DrawCard):
            card, new_state.deck = draw_card(new_state.deck)
            hands[seat].append(card)
            new_state.draw_count += 1

        elif isinstance(move, PassTurn):
            new_state.draw_count = 0
            new_state.passes_in_row = state.passes_in_row + 1 if not state.deck else 0
            if new_state.passes_in_row >= len(state.players):
                # Nobody can draw and nobody will play
                new_state.finished = True
                new_state.turn = None
            else:
                new_state.turn = self._next_seat(new_state, seat)

        else:
            raise IllegalMove(f"Unknown move: {move!r}")

        return new_state

    def _next_seat(self, state: CrazyEightsState, seat: int) -> int:
        return (seat + 1) % len(state.players)

    def is_terminal(self, state: CrazyEightsState) -> bool:
        return state.finished

    def winner(self, state: CrazyEightsState) -> Outcome:
        if not state.finished:
            return Outcome.none()
        fewest = min(len(hand) for hand in state.hands)
        return Outcome.from_leaders([seat for seat, hand in enumerate(state.hands) if len(hand) == fewest])
