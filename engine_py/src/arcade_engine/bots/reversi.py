"""
Reversi bots: a positional heuristic and a depth-limited alpha-beta search.
"""

import random
from typing import List, Optional, Tuple

from ..constants import CORNERS, other_seat
from ..games.reversi import Board, ReversiMove, ReversiState, count_pieces, place, valid_moves
from .base import BaseBot

# Corners are worth the most; the cells next to them give the corner away.
POSITION_WEIGHTS: List[List[int]] = [
    [100, -20, 10, 5, 5, 10, -20, 100],
    [-20, -50, -2, -2, -2, -2, -50, -20],
    [10, -2, 1, 1, 1, 1, -2, 10],
    [5, -2, 1, 0, 0, 1, -2, 5],
    [5, -2, 1, 0, 0, 1, -2, 5],
    [10, -2, 1, 1, 1, 1, -2, 10],
    [-20, -50, -2, -2, -2, -2, -50, -20],
    [100, -20, 10, 5, 5, 10, -20, 100],
]

WIN_SCORE = 10000


def evaluate(board: Board, seat: int, mobility_weight: int = 5) -> int:
    """
    Static evaluation from ``seat``'s point of view.

    Positional weights of own pieces minus the opponent's, plus the mobility
    difference scaled by ``mobility_weight``.
    """
    opponent = other_seat(seat)
    score = 0
    for row, cells in enumerate(board):
        for col, cell in enumerate(cells):
            if cell == seat:
                score += POSITION_WEIGHTS[row][col]
            elif cell == opponent:
                score -= POSITION_WEIGHTS[row][col]

    mobility = len(valid_moves(board, seat)) - len(valid_moves(board, opponent))
    return score + mobility * mobility_weight


def terminal_score(board: Board, seat: int) -> int:
    """Final score once neither side can move: decided by piece count alone."""
    counts = count_pieces(board)
    mine, theirs = counts[seat], counts[other_seat(seat)]
    if mine > theirs:
        return WIN_SCORE
    if mine < theirs:
        return -WIN_SCORE
    return 0


def minimax(
    board: Board,
    depth: int,
    alpha: float,
    beta: float,
    maximizing: bool,
    seat: int,
    mobility_weight: int = 5,
) -> Tuple[float, Optional[Tuple[int, int]]]:
    """
    Alpha-beta search.

    Args:
        board: Position to search
        depth: Remaining plies
        alpha: Best score the maximizer can guarantee so far
        beta: Best score the minimizer can guarantee so far
        maximizing: True when ``seat`` is to move
        seat: Seat the score is computed for

    Returns:
        (score, best cell); the cell is None when the side to move has no move
    """
    mover = seat if maximizing else other_seat(seat)
    moves = valid_moves(board, mover)

    if not moves:
        if not valid_moves(board, other_seat(mover)):
            return terminal_score(board, seat), None
        if depth <= 0:
            return evaluate(board, seat, mobility_weight), None
        # Forced pass: the other side moves on the next ply
        score, _ = minimax(board, depth - 1, alpha, beta, not maximizing, seat, mobility_weight)
        return score, None

    if depth <= 0:
        return evaluate(board, seat, mobility_weight), None

    best_move = moves[0]
    if maximizing:
        best_score = float('-inf')
        for row, col in moves:
            score, _ = minimax(place(board, row, col, mover), depth - 1, alpha, beta, False, seat, mobility_weight)
            if score > best_score:
                best_score = score
                best_move = (row, col)
            alpha = max(alpha, score)
            if beta <= alpha:
                break
    else:
        best_score = float('inf')
        for row, col in moves:
            score, _ = minimax(place(board, row, col, mover), depth - 1, alpha, beta, True, seat, mobility_weight)
            if score < best_score:
                best_score = score
                best_move = (row, col)
            beta = min(beta, score)
            if beta <= alpha:
                break

    return best_score, best_move


class HeuristicReversiBot(BaseBot):
    """
    One-ply greedy player.

    Takes a corner as soon as one is available, otherwise the move whose
    resulting board evaluates best. Ties keep the first move in row-major order.
    """

    def __init__(self, rules, difficulty: str = 'medium'):
        super().__init__(rules, difficulty)
        self.mobility_weight = getattr(rules.config, 'mobility_weight', 5)

    def choose_move(self, state: ReversiState, seat: int, rng: random.Random) -> Optional[ReversiMove]:
        cells = valid_moves(state.board, seat) if state.turn == seat else []
        if not cells:
            return None

        for row, col in cells:
            if (row, col) in CORNERS:
                return ReversiMove(seat, row, col)

        best_cell = cells[0]
        best_score = float('-inf')
        for row, col in cells:
            score = evaluate(place(state.board, row, col, seat), seat, self.mobility_weight)
            if score > best_score:
                best_score = score
                best_cell = (row, col)
        return ReversiMove(seat, best_cell[0], best_cell[1])


class MinimaxReversiBot(BaseBot):
    """Alpha-beta search to a fixed depth."""

    def __init__(self, rules, difficulty: str = 'hard', depth: int = 4):
        super().__init__(rules, difficulty)
        self.depth = depth
        self.mobility_weight = getattr(rules.config, 'mobility_weight', 5)

    def choose_move(self, state: ReversiState, seat: int, rng: random.Random) -> Optional[ReversiMove]:
        if state.turn != seat or not valid_moves(state.board, seat):
            return None
        _, cell = minimax(
            state.board, self.depth, float('-inf'), float('inf'), True, seat, self.mobility_weight,
        )
        if cell is None:
            return None
        return ReversiMove(seat, cell[0], cell[1])
