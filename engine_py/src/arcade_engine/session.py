"""
Single-table game session controller.

Drives one game through ``idle -> setup -> playing -> round_end | game_end``,
running AI seats synchronously after every human move.
"""

import logging
import random
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from .bots import choose_move
from .constants import (
    GAME_BACCARAT, GAME_CRAZY_EIGHTS, PHASE_IDLE, PHASE_SETUP, PHASE_PLAYING,
    PHASE_ROUND_END, PHASE_GAME_END, DIFFICULTY_MEDIUM, OUTCOME_WIN,
)
from .errors import GameError, ActionNotAllowed, NotYourTurn, INTERNAL_ERROR
from .games.base import GameRules
from .games.baccarat import NextRound
from .models import Outcome, Player

logger = logging.getLogger(__name__)

# Games whose finished deal is a round of a longer match
ROUND_BASED_GAMES = {GAME_CRAZY_EIGHTS}


class ActionResult:
    """Result of a session action."""

    def __init__(
        self,
        success: bool,
        state: Any = None,
        error_code: Optional[str] = None,
        error_message: Optional[str] = None,
        moves: Optional[List[Any]] = None,
    ):
        self.success = success
        self.state = state
        self.error_code = error_code
        self.error_message = error_message
        self.moves = moves or []

    @classmethod
    def ok(cls, state: Any, moves: Optional[List[Any]] = None) -> 'ActionResult':
        return cls(success=True, state=state, moves=moves)

    @classmethod
    def error(cls, error_code: str, error_message: str, state: Any = None) -> 'ActionResult':
        return cls(success=False, state=state, error_code=error_code, error_message=error_message)


@dataclass
class HistoryEntry:
    move: Any
    by_ai: bool


class GameSession:
    """
    Owns the state of one game against AI opponents (or hot-seat humans).

    Args:
        rules: Rules engine for the game
        players: Seated players; the session starts in ``setup`` when given
        seed: Seed for dealing and AI choices

    Undo lives here only; shared rooms are played through
    ``MultiplayerManager``, which has no way to take a move back.
    """

    def __init__(self, rules: GameRules, players: Optional[List[Player]] = None,
                 seed: Optional[int] = None):
        self.rules = rules
        self.rng = random.Random(seed)
        self.players: List[Player] = []
        self.phase = PHASE_IDLE
        self.state = None
        self.initial_state = None
        self.history: List[HistoryEntry] = []
        self.round_number = 0
        self.scoreboard: List[int] = []
        if players:
            self.setup(players)

    @property
    def game_type(self) -> str:
        return self.rules.game_type

    def setup(self, players: List[Player]) -> ActionResult:
        if self.phase == PHASE_PLAYING:
            return ActionResult.error(ActionNotAllowed.code, "A game is in progress")
        if not self.rules.config.validate_player_count(len(players)):
            return ActionResult.error(
                ActionNotAllowed.code,
                f"{self.game_type} needs {self.rules.config.min_players}-{self.rules.config.max_players} players",
            )
        self.players = list(players)
        self.scoreboard = [0] * len(players)
        self.round_number = 0
        self.state = None
        self.phase = PHASE_SETUP
        return ActionResult.ok(None)

    def start(self) -> ActionResult:
        """Deal a new game and let AI seats move until a human is up."""
        if self.phase not in (PHASE_SETUP, PHASE_GAME_END):
            return ActionResult.error(ActionNotAllowed.code, f"Cannot start from phase {self.phase}")
        if self.phase == PHASE_GAME_END:
            self.scoreboard = [0] * len(self.players)
            self.round_number = 0
        return self._deal()

    def _deal(self) -> ActionResult:
        self.state = self.rules.new_game(self.players, self.rng)
        self.initial_state = self.state
        self.history = []
        self.round_number += 1
        self.phase = PHASE_PLAYING
        logger.info("Started %s round %d with %d players", self.game_type, self.round_number, len(self.players))
        try:
            ai_moves = self._run_ai()
        except GameError as exc:
            logger.error("AI failed during deal: %s", exc)
            return ActionResult.error(exc.code, exc.message, self.state)
        return ActionResult.ok(self.state, ai_moves)

    def submit(self, move: Any) -> ActionResult:
        """
        Apply a human move, then run AI seats.

        Returns:
            ActionResult with the new state and every move applied, the
            human move first
        """
        if not self._accepts_moves():
            return ActionResult.error(ActionNotAllowed.code, f"No moves accepted in phase {self.phase}", self.state)

        seat = self.rules.current_seat(self.state)
        try:
            if seat is None or move.seat != seat:
                raise NotYourTurn("It is not your turn")
            if self.players[seat].is_ai:
                raise ActionNotAllowed("Seat is played by the computer")
            self._apply(move, by_ai=False)
            ai_moves = self._run_ai()
        except GameError as exc:
            logger.info("Rejected move %r: %s", move, exc)
            return ActionResult.error(exc.code, exc.message, self.state)

        return ActionResult.ok(self.state, [move] + ai_moves)

    def next_round(self) -> ActionResult:
        """Continue after a round: the next coup in Baccarat, a fresh deal otherwise."""
        if self.phase != PHASE_ROUND_END:
            return ActionResult.error(ActionNotAllowed.code, "The round is not over", self.state)
        if self.game_type == GAME_BACCARAT:
            return self.submit(NextRound(0))
        return self._deal()

    def undo(self) -> ActionResult:
        """Take back the last human move and the AI replies that followed it."""
        if self.phase not in (PHASE_PLAYING, PHASE_ROUND_END, PHASE_GAME_END) or self.initial_state is None:
            return ActionResult.error(ActionNotAllowed.code, "Nothing to undo", self.state)

        human_indexes = [index for index, entry in enumerate(self.history) if not entry.by_ai]
        if not human_indexes:
            return ActionResult.error(ActionNotAllowed.code, "Nothing to undo", self.state)

        if self.phase == PHASE_ROUND_END and self.game_type in ROUND_BASED_GAMES:
            outcome = self.rules.winner(self.state)
            if outcome.status == OUTCOME_WIN:
                self.scoreboard[outcome.seats[0]] -= 1

        kept = self.history[:human_indexes[-1]]
        state = self.initial_state
        for entry in kept:
            state = self.rules.apply_move(state, entry.move)
        self.state = state
        self.history = kept
        self.phase = self._phase_for(state)
        logger.info("Undid %s move, %d moves remain", self.game_type, len(kept))
        return ActionResult.ok(self.state)

    @property
    def outcome(self) -> Outcome:
        if self.state is None:
            return Outcome.none()
        return self.rules.winner(self.state)

    @property
    def current_seat(self) -> Optional[int]:
        if self.state is None or self.phase not in (PHASE_PLAYING, PHASE_ROUND_END):
            return None
        return self.rules.current_seat(self.state)

    def legal_moves(self) -> List[Any]:
        seat = self.current_seat
        if seat is None:
            return []
        return self.rules.legal_moves(self.state, seat)

    def moves_played(self) -> List[Tuple[Any, bool]]:
        return [(entry.move, entry.by_ai) for entry in self.history]

    def _accepts_moves(self) -> bool:
        if self.state is None:
            return False
        if self.phase == PHASE_PLAYING:
            return True
        # Baccarat stays live between coups: the bettor may continue or cash out
        return self.phase == PHASE_ROUND_END and not self.rules.is_terminal(self.state)

    def _apply(self, move: Any, by_ai: bool):
        self.state = self.rules.apply_move(self.state, move)
        self.history.append(HistoryEntry(move=move, by_ai=by_ai))
        previous = self.phase
        self.phase = self._phase_for(self.state)
        if self.phase != previous:
            self._on_phase_change(self.phase)

    def _phase_for(self, state) -> str:
        if self.rules.is_terminal(state):
            return PHASE_ROUND_END if self.game_type in ROUND_BASED_GAMES else PHASE_GAME_END
        if self.rules.round_over(state):
            return PHASE_ROUND_END
        return PHASE_PLAYING

    def _on_phase_change(self, phase: str):
        if phase == PHASE_ROUND_END and self.game_type in ROUND_BASED_GAMES:
            outcome = self.rules.winner(self.state)
            if outcome.status == OUTCOME_WIN:
                self.scoreboard[outcome.seats[0]] += 1
            logger.info("%s round %d over: %s", self.game_type, self.round_number, outcome)
        elif phase == PHASE_GAME_END:
            logger.info("%s game over: %s", self.game_type, self.outcome)

    def _run_ai(self) -> List[Any]:
        """Let consecutive AI seats move; stops at a human seat or a round/game end."""
        moves = []
        while self.phase == PHASE_PLAYING:
            seat = self.rules.current_seat(self.state)
            if seat is None or not self.players[seat].is_ai:
                break
            difficulty = self.players[seat].difficulty or DIFFICULTY_MEDIUM
            move = choose_move(self.rules, self.state, seat, difficulty, self.rng)
            if move is None:
                raise GameError(f"AI seat {seat} found no move", INTERNAL_ERROR)
            self._apply(move, by_ai=True)
            moves.append(move)
        return moves
