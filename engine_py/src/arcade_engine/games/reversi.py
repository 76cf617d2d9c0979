"""
Reversi (Othello) rules.

Board-level helpers work on a plain 8x8 list of lists so the AI search can
reuse them without building full states.
"""

import random
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..constants import BOARD_SIZE, BLACK, WHITE, DIRECTIONS, GAME_REVERSI, other_seat
from ..errors import IllegalMove
from ..models import Outcome, Player
from .base import GameRules

Board = List[List[Optional[int]]]


@dataclass(frozen=True)
class ReversiMove:
    seat: int
    row: int
    col: int


@dataclass
class ReversiState:
    players: List[Player]
    board: Board
    turn: Optional[int] = BLACK
    last_move: Optional[Tuple[int, int]] = None
    move_count: int = 0


def create_board() -> Board:
    board: Board = [[None] * BOARD_SIZE for _ in range(BOARD_SIZE)]
    mid = BOARD_SIZE // 2
    board[mid - 1][mid - 1] = WHITE
    board[mid - 1][mid] = BLACK
    board[mid][mid - 1] = BLACK
    board[mid][mid] = WHITE
    return board


def copy_board(board: Board) -> Board:
    return [row[:] for row in board]


def on_board(row: int, col: int) -> bool:
    return 0 <= row < BOARD_SIZE and 0 <= col < BOARD_SIZE


def flips_for(board: Board, row: int, col: int, seat: int) -> List[Tuple[int, int]]:
    """Cells that would flip if ``seat`` placed at (row, col); empty means illegal."""
    if not on_board(row, col) or board[row][col] is not None:
        return []

    opponent = other_seat(seat)
    flipped: List[Tuple[int, int]] = []
    for dr, dc in DIRECTIONS:
        run: List[Tuple[int, int]] = []
        r, c = row + dr, col + dc
        while on_board(r, c) and board[r][c] == opponent:
            run.append((r, c))
            r += dr
            c += dc
        if run and on_board(r, c) and board[r][c] == seat:
            flipped.extend(run)
    return flipped


def valid_moves(board: Board, seat: int) -> List[Tuple[int, int]]:
    """Legal cells for ``seat`` in row-major order."""
    return [
        (row, col)
        for row in range(BOARD_SIZE)
        for col in range(BOARD_SIZE)
        if flips_for(board, row, col, seat)
    ]


def place(board: Board, row: int, col: int, seat: int) -> Board:
    """Return a new board with the piece placed and captures flipped."""
    flipped = flips_for(board, row, col, seat)
    if not flipped:
        raise IllegalMove(f"No captures from ({row}, {col})")
    new_board = copy_board(board)
    new_board[row][col] = seat
    for r, c in flipped:
        new_board[r][c] = seat
    return new_board


def count_pieces(board: Board) -> Tuple[int, int]:
    """Return (black, white) piece counts."""
    black = white = 0
    for row in board:
        for cell in row:
            if cell == BLACK:
                black += 1
            elif cell == WHITE:
                white += 1
    return black, white


def next_turn(board: Board, mover: int) -> Optional[int]:
    """Opponent if they can move, else the mover again, else None (game over)."""
    opponent = other_seat(mover)
    if valid_moves(board, opponent):
        return opponent
    if valid_moves(board, mover):
        return mover
    return None


def outcome_for_board(board: Board) -> Outcome:
    black, white = count_pieces(board)
    if black > white:
        return Outcome.win(BLACK)
    if white > black:
        return Outcome.win(WHITE)
    return Outcome.draw([BLACK, WHITE])


class ReversiRules(GameRules):
    game_type = GAME_REVERSI

    def new_game(self, players: List[Player], rng: random.Random = None) -> ReversiState:
        if len(players) != 2:
            raise ValueError("Reversi needs exactly two players")
        return ReversiState(players=list(players), board=create_board(), turn=BLACK)

    def current_seat(self, state: ReversiState) -> Optional[int]:
        return state.turn

    def legal_moves(self, state: ReversiState, seat: int) -> List[ReversiMove]:
        if state.turn != seat:
            return []
        return [ReversiMove(seat, row, col) for row, col in valid_moves(state.board, seat)]

    def is_legal(self, state: ReversiState, move: ReversiMove) -> bool:
        return state.turn == move.seat and bool(flips_for(state.board, move.row, move.col, move.seat))

    def apply_move(self, state: ReversiState, move: ReversiMove) -> ReversiState:
        self.require_legal(state, move)
        board = place(state.board, move.row, move.col, move.seat)
        return ReversiState(
            players=list(state.players),
            board=board,
            turn=next_turn(board, move.seat),
            last_move=(move.row, move.col),
            move_count=state.move_count + 1,
        )

    def is_terminal(self, state: ReversiState) -> bool:
        return state.turn is None

    def winner(self, state: ReversiState) -> Outcome:
        if not self.is_terminal(state):
            return Outcome.none()
        return outcome_for_board(state.board)
