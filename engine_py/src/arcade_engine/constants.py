"""Game constants and utilities"""

from typing import Dict, List

# Game families
GAME_REVERSI = 'reversi'
GAME_CRAZY_EIGHTS = 'crazy_eights'
GAME_GO_FISH = 'go_fish'
GAME_BACCARAT = 'baccarat'
GAME_TYPES = [GAME_REVERSI, GAME_CRAZY_EIGHTS, GAME_GO_FISH, GAME_BACCARAT]

# Cards
SUITS = ['S', 'H', 'D', 'C']
SUIT_SYMBOLS: Dict[str, str] = {'S': '♠', 'H': '♥', 'D': '♦', 'C': '♣'}
RANKS = list(range(1, 14))  # A=1 .. K=13
RANK_LABELS: Dict[int, str] = {1: 'A', 11: 'J', 12: 'Q', 13: 'K'}

# Reversi
BOARD_SIZE = 8
BLACK = 0
WHITE = 1
DIRECTIONS = [
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1),           (0, 1),
    (1, -1),  (1, 0),  (1, 1),
]
CORNERS = [(0, 0), (0, BOARD_SIZE - 1), (BOARD_SIZE - 1, 0), (BOARD_SIZE - 1, BOARD_SIZE - 1)]

# Baccarat
BANK_SEAT = -1
BET_PLAYER = 'player'
BET_BANKER = 'banker'
BET_TIE = 'tie'
BET_TYPES = [BET_PLAYER, BET_BANKER, BET_TIE]
BACCARAT_BETTING = 'betting'
BACCARAT_RESULT = 'result'
BACCARAT_FINISHED = 'finished'

# Player kinds and AI difficulty tiers
KIND_HUMAN = 'human'
KIND_AI = 'ai'
DIFFICULTY_EASY = 'easy'
DIFFICULTY_MEDIUM = 'medium'
DIFFICULTY_HARD = 'hard'
DIFFICULTY_MASTER = 'master'
DIFFICULTIES = [DIFFICULTY_EASY, DIFFICULTY_MEDIUM, DIFFICULTY_HARD, DIFFICULTY_MASTER]

# Session phases
PHASE_IDLE = 'idle'
PHASE_SETUP = 'setup'
PHASE_PLAYING = 'playing'
PHASE_ROUND_END = 'round_end'
PHASE_GAME_END = 'game_end'

# Outcomes
OUTCOME_NONE = 'none'
OUTCOME_WIN = 'win'
OUTCOME_DRAW = 'draw'

# Rooms
ROOM_WAITING = 'waiting'
ROOM_PLAYING = 'playing'
ROOM_FINISHED = 'finished'
VISIBILITY_PUBLIC = 'public'
VISIBILITY_PRIVATE = 'private'
ROOM_CODE_ALPHABET = 'ABCDEFGHJKLMNPQRSTUVWXYZ23456789'  # no 0/O/1/I
ROOM_CODE_LENGTH = 6
DEFAULT_MAX_PLAYERS = 4
PUBLIC_ROOM_LIMIT = 50


def rank_label(rank: int) -> str:
    return RANK_LABELS.get(rank, str(rank))


def format_card_label(rank: int, suit: str) -> str:
    return f"{rank_label(rank)}{SUIT_SYMBOLS.get(suit, suit)}"


def other_seat(seat: int) -> int:
    """Opponent seat in a two-seat game."""
    return 1 - seat


def seat_order(seat_count: int, start: int) -> List[int]:
    """Seats in turn order beginning after ``start``."""
    return [(start + offset) % seat_count for offset in range(1, seat_count + 1)]
