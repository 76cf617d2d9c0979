"""
Shared-room game play.

Moves for one room are applied under that room's lock, so the coordinator's
last-write-wins ``update_game_state`` only ever sees one writer at a time.
"""

import logging
import random
import threading
from collections import defaultdict
from contextlib import contextmanager
from typing import Any, Dict, Optional, Tuple

from .constants import ROOM_FINISHED, ROOM_PLAYING
from .errors import ActionNotAllowed, InvalidGameState, NotHost, RoomFinished, RoomNotFound
from .games import GameRules, get_rules
from .models import GameRoom, Player
from .rooms import RoomCoordinator
from .rules import create_rules
from .serialization import dump_state, load_state, move_from_dict

logger = logging.getLogger(__name__)


def rules_for_room(room: GameRoom) -> GameRules:
    """Rules engine for a room, with any rule overrides from ``settings['rules']``."""
    overrides = room.settings.get('rules') or {}
    return get_rules(room.game_type, create_rules(room.game_type, **overrides))


def seat_of(state, player_id: str) -> Optional[int]:
    for seat, player in enumerate(state.players):
        if player.id == player_id:
            return seat
    return None


class MultiplayerManager:
    def __init__(self, coordinator: RoomCoordinator):
        self.coordinator = coordinator
        self.room_locks = defaultdict(threading.Lock)

    @contextmanager
    def locked(self, room_id: str):
        """Hold a room's lock; a room found finished or gone loses its lock."""
        try:
            with self.room_locks[room_id]:
                yield
        except (RoomFinished, RoomNotFound):
            self.release_room(room_id)
            raise

    def start_room_game(self, room_id: str, player_id: str, seed: Optional[int] = None) -> GameRoom:
        """Deal the room's game (seats in join order) and move the room to playing."""
        with self.locked(room_id):
            room = self.coordinator.require_open_room(room_id)
            if room.host_id != player_id:
                raise NotHost()
            rules = rules_for_room(room)
            if not rules.config.validate_player_count(len(room.players)):
                raise ActionNotAllowed(
                    f"{room.game_type} needs {rules.config.min_players}-{rules.config.max_players} players"
                )
            players = [Player.human(member.id, member.name) for member in room.players]
            state = rules.new_game(players, random.Random(seed))
            return self.coordinator.start_game(room_id, player_id, dump_state(state))

    def load_room_state(self, room: GameRoom):
        if room.game_state is None:
            raise InvalidGameState("Room has no game state")
        return load_state(room.game_state)

    def submit_move(self, room_id: str, player_id: str, move_data: Dict[str, Any]) -> Tuple[GameRoom, Any]:
        """
        Apply one player's move to a shared room.

        Args:
            room_id: Room to play in
            player_id: Player making the move; their seat is filled in for them
            move_data: Move as sent by the client, e.g. ``{"type": "ask", "target": 1, "rank": 7}``

        Returns:
            (updated room, new game state); the room is finished when the game ended
        """
        with self.locked(room_id):
            room = self.coordinator.require_open_room(room_id)
            if room.status != ROOM_PLAYING:
                raise ActionNotAllowed("Game has not started")

            rules = rules_for_room(room)
            state = self.load_room_state(room)
            seat = seat_of(state, player_id)
            if seat is None:
                raise ActionNotAllowed(f"Player {player_id} has no seat in this game")

            move = move_from_dict(room.game_type, {**move_data, 'seat': seat})
            new_state = rules.apply_move(state, move)

            if rules.is_terminal(new_state):
                room = self.coordinator.end_game(room_id, dump_state(new_state))
                logger.info("Room %s game over: %s", room.code, rules.winner(new_state))
            else:
                room = self.coordinator.update_game_state(room_id, dump_state(new_state))

        if room.status == ROOM_FINISHED:
            self.release_room(room_id)
        return room, new_state

    def leave_room(self, room_id: str, player_id: str) -> Optional[GameRoom]:
        """Remove a player; the room's lock goes with the room when it is deleted."""
        with self.locked(room_id):
            room = self.coordinator.leave_room(room_id, player_id)
        if room is None:
            self.release_room(room_id)
        return room

    def release_room(self, room_id: str):
        """Forget the lock of a finished or deleted room."""
        self.room_locks.pop(room_id, None)
