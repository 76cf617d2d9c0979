"""Game models and data structures"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from .constants import (
    KIND_HUMAN, KIND_AI, DIFFICULTY_MEDIUM, OUTCOME_NONE, OUTCOME_WIN,
    OUTCOME_DRAW, ROOM_WAITING, VISIBILITY_PUBLIC, DEFAULT_MAX_PLAYERS,
    format_card_label,
)


@dataclass(frozen=True)
class Card:
    id: str
    suit: str  # S, H, D, C
    rank: int  # 1..13

    @property
    def label(self) -> str:
        return format_card_label(self.rank, self.suit)


@dataclass
class Player:
    id: str
    name: str
    kind: str = KIND_HUMAN
    difficulty: Optional[str] = None  # only read for AI seats

    @property
    def is_ai(self) -> bool:
        return self.kind == KIND_AI

    @classmethod
    def human(cls, player_id: str, name: str) -> 'Player':
        return cls(id=player_id, name=name)

    @classmethod
    def ai(cls, player_id: str, name: str, difficulty: str = DIFFICULTY_MEDIUM) -> 'Player':
        return cls(id=player_id, name=name, kind=KIND_AI, difficulty=difficulty)


@dataclass(frozen=True)
class Outcome:
    """Result of a finished game: who won, or who tied."""
    status: str = OUTCOME_NONE
    seats: Tuple[int, ...] = ()

    @classmethod
    def none(cls) -> 'Outcome':
        return cls()

    @classmethod
    def win(cls, seat: int) -> 'Outcome':
        return cls(OUTCOME_WIN, (seat,))

    @classmethod
    def draw(cls, seats) -> 'Outcome':
        return cls(OUTCOME_DRAW, tuple(seats))

    @classmethod
    def from_leaders(cls, leaders: List[int]) -> 'Outcome':
        if len(leaders) == 1:
            return cls.win(leaders[0])
        return cls.draw(leaders)

    @property
    def is_decided(self) -> bool:
        return self.status != OUTCOME_NONE


@dataclass
class RoomPlayer:
    id: str
    name: str
    joined_at: datetime
    is_host: bool = False
    is_ready: bool = False
    is_connected: bool = True


@dataclass
class GameRoom:
    id: str
    code: str
    game_type: str
    host_id: str
    host_name: str
    created_at: datetime
    updated_at: datetime
    visibility: str = VISIBILITY_PUBLIC
    status: str = ROOM_WAITING  # waiting|playing|finished
    max_players: int = DEFAULT_MAX_PLAYERS
    players: List[RoomPlayer] = field(default_factory=list)  # join order
    game_state: Optional[Dict[str, Any]] = None  # opaque to the coordinator
    settings: Dict[str, Any] = field(default_factory=dict)
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    def get_player(self, player_id: str) -> Optional[RoomPlayer]:
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    @property
    def is_full(self) -> bool:
        return len(self.players) >= self.max_players
