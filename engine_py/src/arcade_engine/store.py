"""
Room persistence.

``RoomStore`` is the document-store contract the coordinator talks to;
``InMemoryRoomStore`` is the bundled implementation. Rooms are copied on the
way in and out so callers never share mutable state with the store.
"""

import copy
import threading
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from .errors import DuplicateRoomCode, PersistenceUnavailable, RoomNotFound
from .models import GameRoom
from .constants import ROOM_WAITING, VISIBILITY_PUBLIC


class RoomStore(ABC):
    """Storage backend for rooms. Implementations raise PersistenceUnavailable on I/O failure."""

    @abstractmethod
    def get(self, room_id: str) -> Optional[GameRoom]:
        pass

    @abstractmethod
    def get_by_code(self, code: str) -> Optional[GameRoom]:
        pass

    @abstractmethod
    def insert(self, room: GameRoom) -> GameRoom:
        """Insert a new room; raises DuplicateRoomCode when the code is taken."""
        pass

    @abstractmethod
    def update(self, room: GameRoom) -> GameRoom:
        pass

    @abstractmethod
    def delete(self, room_id: str) -> bool:
        pass

    @abstractmethod
    def query_public_waiting(self, game_type: Optional[str] = None, limit: int = 50, offset: int = 0) -> List[GameRoom]:
        """Public rooms still waiting for players, newest first."""
        pass


class InMemoryRoomStore(RoomStore):
    def __init__(self):
        self._rooms: Dict[str, GameRoom] = {}
        self._codes: Dict[str, str] = {}
        self._lock = threading.Lock()
        self.available = True

    def _check_available(self):
        if not self.available:
            raise PersistenceUnavailable()

    def get(self, room_id: str) -> Optional[GameRoom]:
        with self._lock:
            self._check_available()
            room = self._rooms.get(room_id)
            return copy.deepcopy(room) if room else None

    def get_by_code(self, code: str) -> Optional[GameRoom]:
        with self._lock:
            self._check_available()
            room_id = self._codes.get(code.upper())
            if room_id is None:
                return None
            return copy.deepcopy(self._rooms[room_id])

    def insert(self, room: GameRoom) -> GameRoom:
        with self._lock:
            self._check_available()
            if room.code in self._codes:
                raise DuplicateRoomCode(f"Room code {room.code} is already in use")
            self._rooms[room.id] = copy.deepcopy(room)
            self._codes[room.code] = room.id
            return copy.deepcopy(room)

    def update(self, room: GameRoom) -> GameRoom:
        with self._lock:
            self._check_available()
            if room.id not in self._rooms:
                raise RoomNotFound()
            self._rooms[room.id] = copy.deepcopy(room)
            return copy.deepcopy(room)

    def delete(self, room_id: str) -> bool:
        with self._lock:
            self._check_available()
            room = self._rooms.pop(room_id, None)
            if room is None:
                return False
            self._codes.pop(room.code, None)
            return True

    def query_public_waiting(self, game_type: Optional[str] = None, limit: int = 50, offset: int = 0) -> List[GameRoom]:
        with self._lock:
            self._check_available()
            rooms = [
                room for room in self._rooms.values()
                if room.visibility == VISIBILITY_PUBLIC
                and room.status == ROOM_WAITING
                and (game_type is None or room.game_type == game_type)
            ]
            rooms.sort(key=lambda room: room.created_at, reverse=True)
            return [copy.deepcopy(room) for room in rooms[offset:offset + limit]]

    def __len__(self) -> int:
        return len(self._rooms)
