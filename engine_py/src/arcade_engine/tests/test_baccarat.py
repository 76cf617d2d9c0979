"""
Tests for Baccarat rules and the bettor bot.
"""

import random

import pytest
from arcade_engine.bots import choose_move
from arcade_engine.constants import (
    BANK_SEAT, BET_BANKER, BET_PLAYER, BET_TIE, BACCARAT_BETTING, BACCARAT_FINISHED,
    BACCARAT_RESULT,
)
from arcade_engine.errors import IllegalMove
from arcade_engine.games.baccarat import (
    BaccaratRules, CashOut, Deal, NextRound, PlaceBet, banker_draws_third,
    coup_result, hand_score, is_natural, play_coup, player_draws_third, settle_bet,
)
from arcade_engine.models import Outcome, Player
from arcade_engine.rules import create_rules
from arcade_engine.shuffle import create_card


def cards(*specs):
    return [create_card(suit, rank) for rank, suit in specs]


def scripted(*ranks):
    """A draw function that deals the given ranks in order."""
    deck = iter(cards(*[(rank, 'S') for rank in ranks]))
    return lambda: next(deck)


def new_state(difficulty=None, seed=1):
    player = Player.ai("p1", "Bettor", difficulty) if difficulty else Player.human("p1", "Bettor")
    return BaccaratRules().new_game([player], random.Random(seed))


def test_hand_scores():
    """Totals are taken modulo ten; tens and faces count zero."""
    assert hand_score(cards((7, 'S'), (8, 'H'))) == 5
    assert hand_score(cards((13, 'S'), (9, 'H'))) == 9
    assert hand_score(cards((1, 'S'), (10, 'H'), (12, 'D'))) == 1
    assert is_natural(hand_score(cards((13, 'S'), (9, 'H'))))
    assert not is_natural(7)


def test_player_third_card_rule():
    """The player draws on 0-5 and stands on 6-7."""
    assert player_draws_third(5)
    assert player_draws_third(0)
    assert not player_draws_third(6)


@pytest.mark.parametrize("banker, third, draws", [
    (2, 9, True),
    (3, 8, False),
    (3, 7, True),
    (4, 1, False),
    (4, 2, True),
    (4, 6, True),
    (4, 7, True),
    (5, 3, False),
    (5, 4, True),
    (6, 5, False),
    (6, 6, True),
    (7, 6, False),
    (5, None, True),
    (6, None, False),
])
def test_banker_drawing_table(banker, third, draws):
    """The bank's third card depends on its total and the player's third card."""
    assert banker_draws_third(banker, third) is draws


def test_coup_deals_alternately_and_applies_third_cards():
    """Cards go player, bank, player, bank, then the third-card rules."""
    # player 2+3=5 draws a 4; bank 10+6=6 stands on a player third of 4
    player_hand, banker_hand = play_coup(scripted(2, 10, 3, 6, 4, 9))
    assert [card.rank for card in player_hand] == [2, 3, 4]
    assert [card.rank for card in banker_hand] == [10, 6]
    assert coup_result(player_hand, banker_hand) == BET_PLAYER


def test_natural_stops_the_coup():
    """A natural on either side ends the coup after two cards each."""
    player_hand, banker_hand = play_coup(scripted(13, 2, 9, 3, 5, 5))
    assert len(player_hand) == 2
    assert len(banker_hand) == 2
    assert hand_score(player_hand) == 9


def test_settle_bet():
    """Player pays 1:1, bank 1:1 less commission, tie 8:1."""
    assert settle_bet(BET_PLAYER, 100, BET_PLAYER) == 200
    assert settle_bet(BET_BANKER, 100, BET_BANKER) == 195
    assert settle_bet(BET_BANKER, 25, BET_BANKER) == 48
    assert settle_bet(BET_TIE, 10, BET_TIE) == 90
    assert settle_bet(BET_PLAYER, 100, BET_BANKER) == 0


def test_tie_loses_unless_push_configured():
    """Player and bank bets lose on a tie by default."""
    assert settle_bet(BET_PLAYER, 50, BET_TIE) == 0
    assert settle_bet(BET_BANKER, 50, BET_TIE, push_on_tie=True) == 50


def test_bankroll_by_difficulty():
    """Chips and minimum bet follow the difficulty tier."""
    assert (new_state().chips, new_state().min_bet) == (2500, 25)
    assert (new_state('easy').chips, new_state('easy').min_bet) == (5000, 10)
    assert (new_state('master').chips, new_state('master').min_bet) == (500, 100)


def test_bet_validation():
    """Bets must be at least the minimum and at most the chips held."""
    rules = BaccaratRules()
    state = new_state()
    with pytest.raises(IllegalMove):
        rules.apply_move(state, PlaceBet(0, BET_PLAYER, 10))
    with pytest.raises(IllegalMove):
        rules.apply_move(state, PlaceBet(0, BET_PLAYER, 999999))
    with pytest.raises(IllegalMove):
        rules.apply_move(state, PlaceBet(0, 'dragon', 25))
    with pytest.raises(IllegalMove):
        rules.apply_move(state, Deal(0))

    state = rules.apply_move(state, PlaceBet(0, BET_PLAYER, 30))
    assert state.chips == 2470
    assert rules.legal_moves(state, 0) == [Deal(0)]


def test_full_coup():
    """Dealing settles the bet and records the coup."""
    rules = BaccaratRules()
    state = new_state()
    state = rules.apply_move(state, PlaceBet(0, BET_BANKER, 100))
    state = rules.apply_move(state, Deal(0))

    assert state.phase == BACCARAT_RESULT
    assert rules.round_over(state)
    assert not rules.is_terminal(state)
    assert 2 <= len(state.player_hand) <= 3
    assert 2 <= len(state.banker_hand) <= 3
    assert state.result == coup_result(state.player_hand, state.banker_hand)
    assert state.payout == settle_bet(BET_BANKER, 100, state.result)
    assert state.chips == 2500 - 100 + state.payout
    assert state.history[-1]['result'] == state.result

    state = rules.apply_move(state, NextRound(0))
    assert state.phase == BACCARAT_BETTING
    assert state.bet_type is None
    assert state.player_hand == []


def test_reshuffle_below_threshold():
    """A short shoe is replaced before the next coup."""
    rules = BaccaratRules()
    state = new_state()
    state = rules.apply_move(state, PlaceBet(0, BET_PLAYER, 25))
    state = rules.apply_move(state, Deal(0))
    state.shoe = state.shoe[:10]
    shuffles = state.shuffle_count

    state = rules.apply_move(state, NextRound(0))
    assert len(state.shoe) == 52
    assert state.shuffle_count == shuffles + 1


def test_reshuffle_threshold_is_configurable():
    """The threshold comes from the rule config."""
    rules = BaccaratRules(create_rules('baccarat', reshuffle_threshold=6))
    state = rules.new_game([Player.human("p1", "Bettor")], random.Random(1))
    state = rules.apply_move(state, PlaceBet(0, BET_PLAYER, 25))
    state = rules.apply_move(state, Deal(0))
    state.shoe = state.shoe[:10]
    state = rules.apply_move(state, NextRound(0))
    assert len(state.shoe) == 10


def test_exhausted_shoe_mid_coup_reshuffles():
    """Running dry during a coup draws from a fresh shoe."""
    rules = BaccaratRules()
    state = new_state()
    state.shoe = state.shoe[:2]
    state = rules.apply_move(state, PlaceBet(0, BET_PLAYER, 25))
    state = rules.apply_move(state, Deal(0))
    assert len(state.player_hand) >= 2
    assert state.shuffle_count == 2


def test_deals_are_deterministic():
    """The same seed deals the same coups."""
    rules = BaccaratRules()
    results = []
    for _ in range(2):
        state = new_state(seed=11)
        coups = []
        for _ in range(5):
            state = rules.apply_move(state, PlaceBet(0, BET_TIE, 25))
            state = rules.apply_move(state, Deal(0))
            coups.append([card.id for card in state.player_hand + state.banker_hand])
            state = rules.apply_move(state, NextRound(0))
        results.append(coups)
    assert results[0] == results[1]


def test_out_of_chips_ends_game():
    """Below the minimum bet the bank wins."""
    rules = BaccaratRules()
    state = new_state()
    state = rules.apply_move(state, PlaceBet(0, BET_PLAYER, 2500))
    state = rules.apply_move(state, Deal(0))
    state.chips = 0
    state = rules.apply_move(state, NextRound(0))
    assert state.phase == BACCARAT_FINISHED
    assert rules.is_terminal(state)
    assert rules.winner(state) == Outcome.win(BANK_SEAT)


def test_cash_out():
    """Cashing out ends the game; leaving even is a draw."""
    rules = BaccaratRules()
    state = rules.apply_move(new_state(), CashOut(0))
    assert rules.is_terminal(state)
    assert rules.legal_moves(state, 0) == []
    assert rules.winner(state) == Outcome.draw([0, BANK_SEAT])


def test_history_is_capped():
    """Only the most recent twenty coups are kept."""
    rules = BaccaratRules()
    state = new_state('easy')
    for _ in range(25):
        state = rules.apply_move(state, PlaceBet(0, BET_BANKER, 10))
        state = rules.apply_move(state, Deal(0))
        state = rules.apply_move(state, NextRound(0))
    assert len(state.history) == 20


def test_bot_bets_minimum_on_bank():
    """Medium bets the minimum on the bank, deals, then moves on."""
    rules = BaccaratRules()
    state = new_state('medium')
    rng = random.Random(0)

    move = choose_move(rules, state, 0, 'medium', rng)
    assert move == PlaceBet(0, BET_BANKER, 25)
    state = rules.apply_move(state, move)
    assert choose_move(rules, state, 0, 'medium', rng) == Deal(0)
    state = rules.apply_move(state, Deal(0))
    assert choose_move(rules, state, 0, 'medium', rng) == NextRound(0)
