"""
Tests for Go Fish rules and bots.
"""

import random

import pytest
from arcade_engine.bots.cards import GoFishBot
from arcade_engine.errors import IllegalMove, NotYourTurn
from arcade_engine.games.go_fish import (
    Ask, GoFishRules, GoFishState, collect_books, extract_books,
)
from arcade_engine.models import Outcome, Player
from arcade_engine.shuffle import create_card


def make_players(count=2):
    return [Player.human(f"p{i}", f"Player {i}") for i in range(count)]


def cards(*specs):
    return [create_card(suit, rank) for rank, suit in specs]


def make_state(hands, deck=(), books=None, turn=0, ask_log=None):
    return GoFishState(
        players=make_players(len(hands)),
        hands=[cards(*hand) for hand in hands],
        deck=cards(*deck),
        books=books or [[] for _ in hands],
        turn=turn,
        ask_log=ask_log or [],
    )


def ranks(hand):
    return sorted(card.rank for card in hand)


def test_deal_sizes():
    """Seven cards for two players, six for three, five for more."""
    rules = GoFishRules()
    for count, size in [(2, 7), (3, 6), (4, 5), (6, 5)]:
        state = rules.new_game(make_players(count), random.Random(count))
        dealt = sum(len(hand) for hand in state.hands) + 4 * state.total_books
        assert dealt == count * size
        assert len(state.deck) == 52 - count * size


def test_collect_books_is_idempotent():
    """A second extraction finds nothing new."""
    hands = [cards((7, 'S'), (7, 'H'), (7, 'D'), (7, 'C'), (2, 'H')), cards((3, 'S'))]
    books = [[], []]
    assert collect_books(hands, books) == [7]
    assert books == [[7], []]
    assert ranks(hands[0]) == [2]

    assert collect_books(hands, books) == []
    assert books == [[7], []]


def test_extract_books_is_pure():
    """The input state keeps its cards."""
    state = make_state(hands=[[(7, 'S'), (7, 'H'), (7, 'D'), (7, 'C')], [(3, 'S')]])
    booked = extract_books(state)
    assert booked.books[0] == [7]
    assert len(state.hands[0]) == 4
    assert state.books == [[], []]


def test_successful_ask_transfers_all_and_continues():
    """The target hands over every card of the rank; the asker goes again."""
    rules = GoFishRules()
    state = make_state(
        hands=[[(7, 'S'), (2, 'H')], [(7, 'H'), (7, 'D'), (9, 'C')]],
        deck=[(3, 'C'), (4, 'C')],
    )
    state = rules.apply_move(state, Ask(0, 1, 7))
    assert ranks(state.hands[0]) == [2, 7, 7, 7]
    assert ranks(state.hands[1]) == [9]
    assert state.turn == 0
    assert len(state.deck) == 2
    assert state.ask_log[-1] == {'seat': 0, 'target': 1, 'rank': 7, 'received': 2}


def test_transfer_completes_book():
    """Receiving the fourth card books the rank immediately."""
    rules = GoFishRules()
    state = make_state(
        hands=[[(7, 'S'), (7, 'C'), (2, 'H')], [(7, 'H'), (7, 'D'), (9, 'C')]],
        deck=[(3, 'C')],
    )
    state = rules.apply_move(state, Ask(0, 1, 7))
    assert state.books[0] == [7]
    assert ranks(state.hands[0]) == [2]


def test_go_fish_draw_of_asked_rank_continues():
    """Drawing the asked rank keeps the turn (the draw must match exactly)."""
    rules = GoFishRules()
    state = make_state(hands=[[(2, 'S')], [(9, 'C')]], deck=[(2, 'C'), (5, 'D')])
    state = rules.apply_move(state, Ask(0, 1, 2))
    assert ranks(state.hands[0]) == [2, 2]
    assert state.turn == 0
    assert state.ask_log[-1]['drew_match'] is True


def test_go_fish_other_draw_passes_turn():
    """Any other draw passes the turn on."""
    rules = GoFishRules()
    state = make_state(hands=[[(2, 'S')], [(9, 'C')]], deck=[(3, 'C'), (5, 'D')])
    state = rules.apply_move(state, Ask(0, 1, 2))
    assert ranks(state.hands[0]) == [2, 3]
    assert state.turn == 1
    assert state.ask_log[-1]['drew_match'] is False


def test_empty_pond_passes_turn():
    """With no deck a failed ask simply ends the turn."""
    rules = GoFishRules()
    state = make_state(hands=[[(2, 'S')], [(9, 'C')]])
    state = rules.apply_move(state, Ask(0, 1, 2))
    assert state.turn == 1
    assert "pond is empty" in state.last_action


def test_empty_hand_waits_for_its_turn():
    """A seat emptied by an ask draws a new hand only when its turn comes."""
    rules = GoFishRules()
    state = make_state(
        hands=[[(7, 'S'), (2, 'H')], [(7, 'H')], [(9, 'C')]],
        deck=[(3, 'C'), (4, 'C'), (5, 'C')],
    )
    state = rules.apply_move(state, Ask(0, 1, 7))
    assert state.hands[1] == []
    assert len(state.deck) == 3
    assert state.turn == 0
    assert Ask(0, 1, 7) not in rules.legal_moves(state, 0)

    state = rules.apply_move(state, Ask(0, 2, 2))
    assert state.turn == 1
    assert ranks(state.hands[1]) == [4, 5]
    assert state.deck == []


def test_empty_hand_is_refilled():
    """With nobody else to ask, the emptied seat takes the turn and draws, capped by the deck."""
    rules = GoFishRules()
    state = make_state(
        hands=[[(7, 'S'), (2, 'H')], [(7, 'H')]],
        deck=[(3, 'C'), (4, 'C'), (5, 'C')],
    )
    state = rules.apply_move(state, Ask(0, 1, 7))
    assert ranks(state.hands[1]) == [3, 4, 5]
    assert state.deck == []
    assert state.turn == 1


def test_seat_without_cards_is_skipped():
    """Seats with no cards and no deck to refill from lose their turns."""
    rules = GoFishRules()
    state = make_state(hands=[[(2, 'S')], [(9, 'C')], []])
    state = rules.apply_move(state, Ask(0, 1, 2))
    assert state.turn == 1

    state = rules.apply_move(state, Ask(1, 0, 9))
    assert state.turn == 0


def test_ask_must_hold_rank():
    """Asking for a rank not in hand, or asking yourself, is illegal."""
    rules = GoFishRules()
    state = make_state(hands=[[(2, 'S')], [(9, 'C')]])
    with pytest.raises(IllegalMove):
        rules.apply_move(state, Ask(0, 1, 9))
    with pytest.raises(IllegalMove):
        rules.apply_move(state, Ask(0, 0, 2))
    with pytest.raises(NotYourTurn):
        rules.apply_move(state, Ask(1, 0, 9))


def test_legal_moves_cover_targets_and_ranks():
    """Every opponent holding cards times every rank in hand."""
    rules = GoFishRules()
    state = make_state(hands=[[(2, 'S'), (5, 'H'), (5, 'D')], [(9, 'C')], [(4, 'C')]])
    moves = rules.legal_moves(state, 0)
    assert moves == [Ask(0, 1, 2), Ask(0, 1, 5), Ask(0, 2, 2), Ask(0, 2, 5)]
    assert rules.legal_moves(state, 1) == []


def test_game_ends_with_all_books():
    """Thirteen books end the game; most books wins."""
    rules = GoFishRules()
    state = make_state(
        hands=[[], []],
        books=[[1, 2, 3, 4, 5, 6, 7], [8, 9, 10, 11, 12, 13]],
        turn=None,
    )
    assert rules.is_terminal(state)
    assert rules.winner(state) == Outcome.win(0)


def test_bot_asks_for_largest_group():
    """The rank held most often is asked for first."""
    rules = GoFishRules()
    state = make_state(hands=[[(5, 'S'), (5, 'H'), (5, 'D'), (2, 'C')], [(9, 'C')]])
    move = GoFishBot(rules).choose_move(state, 0, random.Random(0))
    assert move == Ask(0, 1, 5)


def test_hard_bot_remembers_public_asks():
    """Hard targets whoever last asked for a rank it holds."""
    rules = GoFishRules()
    state = make_state(
        hands=[[(9, 'S'), (4, 'H')], [(9, 'C')], [(6, 'D')]],
        ask_log=[{'seat': 1, 'target': 0, 'rank': 9, 'received': 0}],
    )
    move = GoFishBot(rules, 'hard', use_memory=True).choose_move(state, 0, random.Random(0))
    assert move == Ask(0, 1, 9)
