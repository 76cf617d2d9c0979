"""
Base rules interface shared by every game family.
"""

import random
from abc import ABC, abstractmethod
from typing import Any, List, Optional

from ..errors import IllegalMove, NotYourTurn
from ..models import Outcome, Player
from ..rules import create_rules


class GameRules(ABC):
    """
    Rules engine for one game family.

    Implementations are stateless apart from their config: every method takes
    a state and returns a new one, so the same instance can serve any number
    of sessions and the AI can simulate moves freely.
    """

    game_type: str = ''

    def __init__(self, config=None):
        self.config = config if config is not None else create_rules(self.game_type)

    @abstractmethod
    def new_game(self, players: List[Player], rng: random.Random) -> Any:
        """Shuffle, deal and seed the opening state for ``players`` (seat = index)."""

    @abstractmethod
    def current_seat(self, state) -> Optional[int]:
        """Seat expected to move next, or None once the state is terminal."""

    @abstractmethod
    def legal_moves(self, state, seat: int) -> List[Any]:
        """All moves ``seat`` may make right now (empty when it is not their turn)."""

    @abstractmethod
    def apply_move(self, state, move) -> Any:
        """Return the state after ``move``; raises IllegalMove and leaves ``state`` untouched."""

    @abstractmethod
    def is_terminal(self, state) -> bool:
        pass

    @abstractmethod
    def winner(self, state) -> Outcome:
        pass

    def round_over(self, state) -> bool:
        """True when play is paused between rounds without the game being over."""
        return False

    def seat_count(self, state) -> int:
        return len(state.players)

    def is_legal(self, state, move) -> bool:
        return move in self.legal_moves(state, move.seat)

    def require_turn(self, state, seat: int):
        if self.is_terminal(state):
            raise IllegalMove("Game is over")
        if self.current_seat(state) != seat:
            raise NotYourTurn(f"It's not your turn (current turn: seat {self.current_seat(state)})")

    def require_legal(self, state, move):
        self.require_turn(state, move.seat)
        if not self.is_legal(state, move):
            raise IllegalMove(f"Illegal move: {move}")
