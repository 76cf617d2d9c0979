"""
Card shuffling and dealing utilities.
"""

import random
from typing import Dict, List, Optional, Tuple

from .constants import SUITS, RANKS
from .errors import ExhaustedDeck
from .models import Card


def create_card(suit: str, rank: int, deck_index: Optional[int] = None) -> Card:
    """Create a card; ``deck_index`` keeps ids unique across a multi-deck shoe."""
    card_id = f"{rank}{suit}" if deck_index is None else f"{rank}{suit}#{deck_index}"
    return Card(id=card_id, suit=suit, rank=rank)


def create_deck() -> List[Card]:
    """Create a standard 52-card deck."""
    return [create_card(suit, rank) for suit in SUITS for rank in RANKS]


def create_shoe(deck_count: int) -> List[Card]:
    """Create several decks combined, each card with a distinct id."""
    if deck_count == 1:
        return create_deck()
    return [
        create_card(suit, rank, index)
        for index in range(deck_count)
        for suit in SUITS
        for rank in RANKS
    ]


def shuffle_deck(deck: List[Card], rng: Optional[random.Random] = None) -> List[Card]:
    """
    Shuffle a deck deterministically if an rng is provided.

    Args:
        deck: Cards to shuffle
        rng: Seeded random generator; system random is used when omitted

    Returns:
        Shuffled copy of the deck
    """
    deck_copy = list(deck)
    if rng is not None:
        rng.shuffle(deck_copy)
    else:
        random.shuffle(deck_copy)
    return deck_copy


def draw_cards(deck: List[Card], count: int) -> Tuple[List[Card], List[Card]]:
    """
    Draw cards from the head of a deck.

    Returns:
        (drawn, remaining); raises ExhaustedDeck when fewer than ``count`` cards remain
    """
    if count > len(deck):
        raise ExhaustedDeck(f"Cannot draw {count} card(s) from a deck of {len(deck)}")
    return list(deck[:count]), list(deck[count:])


def draw_card(deck: List[Card]) -> Tuple[Card, List[Card]]:
    drawn, remaining = draw_cards(deck, 1)
    return drawn[0], remaining


def deal_hands(deck: List[Card], player_count: int, cards_per_player: int) -> Tuple[List[List[Card]], List[Card]]:
    """
    Deal ``cards_per_player`` cards to each seat, one seat at a time.

    Returns:
        (hands by seat, remaining deck)
    """
    hands: List[List[Card]] = []
    remaining = list(deck)
    for _ in range(player_count):
        hand, remaining = draw_cards(remaining, cards_per_player)
        hands.append(hand)
    return hands, remaining


def group_by_rank(hand: List[Card]) -> Dict[int, List[Card]]:
    groups: Dict[int, List[Card]] = {}
    for card in hand:
        groups.setdefault(card.rank, []).append(card)
    return groups


def count_suits(hand: List[Card]) -> Dict[str, int]:
    counts = {suit: 0 for suit in SUITS}
    for card in hand:
        counts[card.suit] += 1
    return counts


def find_card(cards: List[Card], card_id: str) -> Optional[Card]:
    for card in cards:
        if card.id == card_id:
            return card
    return None
