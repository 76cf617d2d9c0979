"""
Go Fish rules.
"""

import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..constants import GAME_GO_FISH, RANKS, rank_label, seat_order
from ..models import Card, Outcome, Player
from ..shuffle import create_deck, shuffle_deck, deal_hands, draw_card, draw_cards, group_by_rank
from .base import GameRules

BOOK_SIZE = 4
TOTAL_BOOKS = len(RANKS)
ASK_LOG_LIMIT = 20


@dataclass(frozen=True)
class Ask:
    seat: int
    target: int
    rank: int


@dataclass
class GoFishState:
    players: List[Player]
    hands: List[List[Card]]
    deck: List[Card]
    books: List[List[int]]  # completed ranks per seat
    turn: Optional[int] = 0
    ask_log: List[Dict] = field(default_factory=list)  # public history of asks
    last_action: str = ''

    @property
    def total_books(self) -> int:
        return sum(len(seat_books) for seat_books in self.books)


def collect_books(hands: List[List[Card]], books: List[List[int]]) -> List[int]:
    """
    Move every four-of-a-kind from ``hands`` into ``books`` in place.

    Returns the ranks booked by this call; a second call finds nothing.
    """
    booked = []
    for seat, hand in enumerate(hands):
        for rank, cards in group_by_rank(hand).items():
            if len(cards) >= BOOK_SIZE:
                hands[seat] = [card for card in hands[seat] if card.rank != rank]
                books[seat].append(rank)
                booked.append(rank)
    return booked


def extract_books(state: GoFishState) -> GoFishState:
    """Return a copy of ``state`` with all completed books moved out of the hands."""
    new_state = _copy_state(state)
    collect_books(new_state.hands, new_state.books)
    return new_state


def _copy_state(state: GoFishState) -> GoFishState:
    return GoFishState(
        players=list(state.players),
        hands=[list(hand) for hand in state.hands],
        deck=list(state.deck),
        books=[list(seat_books) for seat_books in state.books],
        turn=state.turn,
        ask_log=list(state.ask_log),
        last_action=state.last_action,
    )


class GoFishRules(GameRules):
    game_type = GAME_GO_FISH

    def new_game(self, players: List[Player], rng: random.Random) -> GoFishState:
        if not self.config.validate_player_count(len(players)):
            raise ValueError(f"Go Fish supports {self.config.min_players}-{self.config.max_players} players")

        deck = shuffle_deck(create_deck(), rng)
        hands, deck = deal_hands(deck, len(players), self.config.cards_per_player(len(players)))
        state = GoFishState(
            players=list(players),
            hands=hands,
            deck=deck,
            books=[[] for _ in players],
        )
        collect_books(state.hands, state.books)
        self._settle_turn(state, 0)
        return state

    def current_seat(self, state: GoFishState) -> Optional[int]:
        return None if self.is_terminal(state) else state.turn

    def legal_moves(self, state: GoFishState, seat: int) -> List[Ask]:
        if self.is_terminal(state) or state.turn != seat:
            return []
        ranks = sorted({card.rank for card in state.hands[seat]})
        targets = [other for other in range(len(state.players)) if other != seat and state.hands[other]]
        return [Ask(seat, target, rank) for target in targets for rank in ranks]

    def is_legal(self, state: GoFishState, move: Ask) -> bool:
        if not (0 <= move.target < len(state.players)) or move.target == move.seat:
            return False
        if not state.hands[move.target]:
            return False
        return any(card.rank == move.rank for card in state.hands[move.seat])

    def apply_move(self, state: GoFishState, move: Ask) -> GoFishState:
        self.require_legal(state, move)

        new_state = _copy_state(state)
        hands = new_state.hands
        asker = state.players[move.seat].name
        target = state.players[move.target].name
        label = rank_label(move.rank)

        matching = [card for card in hands[move.target] if card.rank == move.rank]
        entry = {'seat': move.seat, 'target': move.target, 'rank': move.rank, 'received': len(matching)}

        if matching:
            hands[move.target] = [card for card in hands[move.target] if card.rank != move.rank]
            hands[move.seat].extend(matching)
            new_state.last_action = f"{asker} got {len(matching)} {label}(s) from {target}"
            next_seat = move.seat
        elif new_state.deck:
            card, new_state.deck = draw_card(new_state.deck)
            hands[move.seat].append(card)
            # Only a draw of the asked rank earns another ask
            entry['drew_match'] = card.rank == move.rank
            if card.rank == move.rank:
                new_state.last_action = f"{target} said Go Fish; {asker} drew the {label}!"
                next_seat = move.seat
            else:
                new_state.last_action = f"{target} said Go Fish; {asker} drew a card"
                next_seat = self._next_seat(state, move.seat)
        else:
            new_state.last_action = f"{target} said Go Fish; the pond is empty"
            next_seat = self._next_seat(state, move.seat)

        new_state.ask_log = (new_state.ask_log + [entry])[-ASK_LOG_LIMIT:]
        collect_books(hands, new_state.books)
        self._settle_turn(new_state, next_seat)
        return new_state

    def _next_seat(self, state: GoFishState, seat: int) -> int:
        return (seat + 1) % len(state.players)

    def _settle_turn(self, state: GoFishState, preferred: int):
        """
        Hand the turn to the first seat (starting at ``preferred``) that holds
        cards and has someone to ask. A seat coming up with an empty hand draws
        a fresh one first; other empty hands wait for their own turn.
        """
        for seat in seat_order(len(state.players), preferred - 1):
            if not state.hands[seat] and state.deck:
                refill = min(self.config.cards_per_player(len(state.players)), len(state.deck))
                state.hands[seat], state.deck = draw_cards(state.deck, refill)
                collect_books(state.hands, state.books)
            others_hold_cards = any(state.hands[other] for other in range(len(state.players)) if other != seat)
            if state.hands[seat] and others_hold_cards:
                state.turn = seat
                return
        state.turn = None

    def is_terminal(self, state: GoFishState) -> bool:
        return state.total_books >= TOTAL_BOOKS or state.turn is None

    def winner(self, state: GoFishState) -> Outcome:
        if not self.is_terminal(state):
            return Outcome.none()
        most = max(len(seat_books) for seat_books in state.books)
        return Outcome.from_leaders([seat for seat, seat_books in enumerate(state.books) if len(seat_books) == most])
