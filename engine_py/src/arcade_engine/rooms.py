"""
Multiplayer room coordinator.

Owns room membership and lifecycle (``waiting -> playing -> finished``).
Game state is stored as an opaque dict; this module never looks inside it.
"""

import logging
import random
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from .constants import (
    GAME_TYPES, ROOM_CODE_ALPHABET, ROOM_CODE_LENGTH, ROOM_WAITING, ROOM_PLAYING,
    ROOM_FINISHED, VISIBILITY_PUBLIC, VISIBILITY_PRIVATE, DEFAULT_MAX_PLAYERS,
    PUBLIC_ROOM_LIMIT,
)
from .errors import (
    ActionNotAllowed, GameAlreadyStarted, InvalidGameState, NotHost, RoomFinished,
    RoomFull, RoomNotFound,
)
from .models import GameRoom, RoomPlayer
from .rules import create_rules
from .store import RoomStore, InMemoryRoomStore

logger = logging.getLogger(__name__)


def generate_room_code(rng: Optional[random.Random] = None) -> str:
    """Six symbols from an alphabet without 0/O or 1/I."""
    rng = rng or random.SystemRandom()
    return ''.join(rng.choice(ROOM_CODE_ALPHABET) for _ in range(ROOM_CODE_LENGTH))


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RoomCoordinator:
    """
    Room lifecycle on top of a ``RoomStore``.

    Args:
        store: Persistence backend; an in-memory store when omitted
        clock: Returns the current time (injectable for tests)
        rng: Random source for room codes
    """

    def __init__(self, store: Optional[RoomStore] = None,
                 clock: Optional[Callable[[], datetime]] = None,
                 rng: Optional[random.Random] = None):
        self.store = store if store is not None else InMemoryRoomStore()
        self.clock = clock or utc_now
        self.rng = rng

    def require_room(self, room_id: str) -> GameRoom:
        room = self.store.get(room_id)
        if room is None:
            raise RoomNotFound(f"Room {room_id} not found")
        return room

    def require_open_room(self, room_id: str) -> GameRoom:
        room = self.require_room(room_id)
        if room.status == ROOM_FINISHED:
            raise RoomFinished()
        return room

    def _save(self, room: GameRoom) -> GameRoom:
        room.updated_at = self.clock()
        return self.store.update(room)

    def create_room(self, host_id: str, host_name: str, game_type: str,
                    visibility: str = VISIBILITY_PUBLIC, max_players: Optional[int] = None,
                    settings: Optional[Dict[str, Any]] = None) -> GameRoom:
        """
        Create a waiting room with the host seated.

        Raises DuplicateRoomCode (from the store) when the generated code is
        taken; callers retry.
        """
        if game_type not in GAME_TYPES:
            raise ActionNotAllowed(f"Unknown game type: {game_type}")
        if visibility not in (VISIBILITY_PUBLIC, VISIBILITY_PRIVATE):
            raise ActionNotAllowed(f"Unknown visibility: {visibility}")

        config = create_rules(game_type)
        if max_players is None:
            max_players = min(DEFAULT_MAX_PLAYERS, config.max_players)
        if not 1 <= max_players <= config.max_players:
            raise ActionNotAllowed(f"{game_type} allows at most {config.max_players} players")

        now = self.clock()
        room = GameRoom(
            id=str(uuid.uuid4()),
            code=generate_room_code(self.rng),
            game_type=game_type,
            host_id=host_id,
            host_name=host_name,
            created_at=now,
            updated_at=now,
            visibility=visibility,
            max_players=max_players,
            players=[RoomPlayer(id=host_id, name=host_name, joined_at=now, is_host=True)],
            settings=dict(settings or {}),
        )
        room = self.store.insert(room)
        logger.info("Created %s room %s (%s) for host %s", game_type, room.code, room.id, host_id)
        return room

    def get_room(self, room_id: str) -> Optional[GameRoom]:
        return self.store.get(room_id)

    def get_room_by_code(self, code: str) -> Optional[GameRoom]:
        return self.store.get_by_code(code.strip().upper())

    def join_room(self, room_id: str, player_id: str, player_name: str) -> GameRoom:
        """Seat a player, or mark a returning player connected again."""
        room = self.require_open_room(room_id)

        player = room.get_player(player_id)
        if player is not None:
            player.is_connected = True
            logger.info("Player %s reconnected to room %s", player_id, room.code)
            return self._save(room)

        if room.status != ROOM_WAITING:
            raise GameAlreadyStarted()
        if room.is_full:
            raise RoomFull()

        room.players.append(RoomPlayer(id=player_id, name=player_name, joined_at=self.clock()))
        logger.info("Player %s joined room %s (%d/%d)", player_id, room.code, len(room.players), room.max_players)
        return self._save(room)

    def leave_room(self, room_id: str, player_id: str) -> Optional[GameRoom]:
        """
        Remove a player.

        The host role passes to the earliest remaining joiner. Returns None
        when the last player left and the room was deleted.
        """
        room = self.require_open_room(room_id)
        player = room.get_player(player_id)
        if player is None:
            return room

        room.players = [p for p in room.players if p.id != player_id]
        if not room.players:
            self.store.delete(room.id)
            logger.info("Room %s deleted: last player left", room.code)
            return None

        if player.is_host:
            new_host = min(room.players, key=lambda p: p.joined_at)
            new_host.is_host = True
            room.host_id = new_host.id
            room.host_name = new_host.name
            logger.info("Host of room %s passed from %s to %s", room.code, player_id, new_host.id)

        return self._save(room)

    def set_player_ready(self, room_id: str, player_id: str, ready: bool = True) -> GameRoom:
        room = self.require_open_room(room_id)
        player = room.get_player(player_id)
        if player is None:
            raise ActionNotAllowed(f"Player {player_id} is not in this room")
        player.is_ready = ready
        return self._save(room)

    def set_player_connected(self, room_id: str, player_id: str, connected: bool) -> GameRoom:
        room = self.require_open_room(room_id)
        player = room.get_player(player_id)
        if player is None:
            raise ActionNotAllowed(f"Player {player_id} is not in this room")
        player.is_connected = connected
        return self._save(room)

    def start_game(self, room_id: str, player_id: str, game_state: Dict[str, Any]) -> GameRoom:
        """Move a waiting room to playing with its initial game state. Host only."""
        room = self.require_open_room(room_id)
        if room.host_id != player_id:
            raise NotHost()
        if room.status != ROOM_WAITING:
            raise GameAlreadyStarted()
        if not game_state:
            raise InvalidGameState("An initial game state is required to start")

        room.status = ROOM_PLAYING
        room.game_state = game_state
        room.started_at = self.clock()
        logger.info("Room %s started with %d players", room.code, len(room.players))
        return self._save(room)

    def update_game_state(self, room_id: str, game_state: Dict[str, Any]) -> GameRoom:
        """Replace the stored game state; the last write wins."""
        room = self.require_open_room(room_id)
        if room.status != ROOM_PLAYING:
            raise ActionNotAllowed("Game has not started")
        room.game_state = game_state
        return self._save(room)

    def end_game(self, room_id: str, game_state: Optional[Dict[str, Any]] = None) -> GameRoom:
        room = self.require_open_room(room_id)
        if game_state is not None:
            room.game_state = game_state
        room.status = ROOM_FINISHED
        room.finished_at = self.clock()
        logger.info("Room %s finished", room.code)
        return self._save(room)

    def delete_room(self, room_id: str) -> bool:
        deleted = self.store.delete(room_id)
        if deleted:
            logger.info("Room %s deleted", room_id)
        return deleted

    def list_public_rooms(self, game_type: Optional[str] = None, limit: int = PUBLIC_ROOM_LIMIT,
                          offset: int = 0) -> List[GameRoom]:
        limit = max(0, min(limit, PUBLIC_ROOM_LIMIT))
        return self.store.query_public_waiting(game_type, limit=limit, offset=max(0, offset))
