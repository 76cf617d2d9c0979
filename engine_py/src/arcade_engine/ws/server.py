"""
FastAPI server for multiplayer arcade rooms.

REST endpoints create and list rooms; the ``/ws`` WebSocket carries lobby
and game events for one room per connection.
"""

import logging
import uuid
from collections import defaultdict
from typing import Any, Dict, Optional, Set

import orjson
from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from ..constants import GAME_TYPES, PUBLIC_ROOM_LIMIT, ROOM_FINISHED, VISIBILITY_PUBLIC
from ..errors import (
    DuplicateRoomCode, GameError, PersistenceUnavailable, RoomNotFound, ActionNotAllowed,
)
from ..models import GameRoom
from ..multiplayer import MultiplayerManager, seat_of
from ..rooms import RoomCoordinator
from ..serialization import get_public_room_info, load_state, sanitize_state
from .events import (
    parse_inbound_event, create_error_event, create_join_success_event,
    create_room_update_event, create_state_full_event, create_chat_event,
    error_code_for, ErrorCode, JoinEvent, LeaveEvent, ReadyEvent, StartEvent,
    MoveEvent, RequestStateEvent, ChatEvent, OutboundEvent,
)

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

ROOM_CODE_ATTEMPTS = 5


class CreateRoomRequest(BaseModel):
    host_name: str = Field(..., min_length=1, max_length=30)
    game_type: str
    host_id: Optional[str] = Field(default=None, max_length=64)
    visibility: str = VISIBILITY_PUBLIC
    max_players: Optional[int] = Field(default=None, ge=1)
    settings: Dict[str, Any] = Field(default_factory=dict)


class ConnectionManager:
    """Manages WebSocket connections and broadcasting."""

    def __init__(self):
        self.room_connections: Dict[str, Set[WebSocket]] = defaultdict(set)
        self.connection_players: Dict[WebSocket, str] = {}
        self.connection_rooms: Dict[WebSocket, str] = {}

    def connect(self, websocket: WebSocket, room_id: str, player_id: str):
        """Attach an accepted connection to a room."""
        self.room_connections[room_id].add(websocket)
        self.connection_players[websocket] = player_id
        self.connection_rooms[websocket] = room_id
        logger.info(f"Player {player_id} connected to room {room_id}")

    def disconnect(self, websocket: WebSocket):
        """Detach a connection; returns the (player_id, room_id) it belonged to."""
        player_id = self.connection_players.pop(websocket, None)
        room_id = self.connection_rooms.pop(websocket, None)

        if room_id is not None:
            self.room_connections[room_id].discard(websocket)
            if not self.room_connections[room_id]:
                del self.room_connections[room_id]

        if player_id:
            logger.info(f"Player {player_id} disconnected from room {room_id}")
        return player_id, room_id

    @property
    def connection_count(self) -> int:
        return sum(len(conns) for conns in self.room_connections.values())

    async def send(self, websocket: WebSocket, event: OutboundEvent):
        await websocket.send_text(event.model_dump_json())

    async def broadcast_to_room(self, room_id: str, event: OutboundEvent, exclude: Optional[WebSocket] = None):
        """Broadcast the same event to every connection in a room."""
        for websocket in list(self.room_connections.get(room_id, ())):
            if websocket is exclude:
                continue
            try:
                await self.send(websocket, event)
            except Exception as e:
                logger.error(f"Error broadcasting to room {room_id}: {e}")
                self.disconnect(websocket)

    async def broadcast_state(self, room: GameRoom):
        """Send every player the game state sanitized for their own seat."""
        if room.game_state is None:
            return
        state = load_state(room.game_state)
        for websocket in list(self.room_connections.get(room.id, ())):
            player_id = self.connection_players.get(websocket)
            try:
                event = create_state_full_event(sanitize_state(state, seat_of(state, player_id)), room.status)
                await self.send(websocket, event)
            except Exception as e:
                logger.error(f"Error sending state to {player_id}: {e}")
                self.disconnect(websocket)


def _http_error(error: GameError) -> HTTPException:
    if isinstance(error, RoomNotFound):
        status = 404
    elif isinstance(error, PersistenceUnavailable):
        status = 503
    else:
        status = 400
    return HTTPException(status_code=status, detail={"code": error.code, "message": error.message})


def create_app(coordinator: Optional[RoomCoordinator] = None) -> FastAPI:
    """
    Build the FastAPI app.

    Args:
        coordinator: Room coordinator to serve; one over an in-memory store when omitted
    """
    coordinator = coordinator or RoomCoordinator()
    multiplayer = MultiplayerManager(coordinator)
    manager = ConnectionManager()

    app = FastAPI(title="Arcade Game Engine", version="1.0.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.coordinator = coordinator
    app.state.multiplayer = multiplayer
    app.state.connections = manager

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "games": GAME_TYPES,
            "connections": manager.connection_count,
        }

    @app.post("/rooms", status_code=201)
    async def create_room(request: CreateRoomRequest):
        host_id = request.host_id or str(uuid.uuid4())
        for attempt in range(ROOM_CODE_ATTEMPTS):
            try:
                room = coordinator.create_room(
                    host_id, request.host_name, request.game_type,
                    visibility=request.visibility,
                    max_players=request.max_players,
                    settings=request.settings,
                )
                return get_public_room_info(room)
            except DuplicateRoomCode:
                logger.warning(f"Room code collision (attempt {attempt + 1}), retrying")
            except GameError as e:
                raise _http_error(e)
        raise _http_error(DuplicateRoomCode("Could not allocate a free room code"))

    @app.get("/rooms")
    async def list_rooms(game_type: Optional[str] = None, limit: int = PUBLIC_ROOM_LIMIT, offset: int = 0):
        try:
            rooms = coordinator.list_public_rooms(game_type, limit=limit, offset=offset)
        except GameError as e:
            raise _http_error(e)
        return [get_public_room_info(room) for room in rooms]

    @app.get("/rooms/{code}")
    async def get_room(code: str):
        try:
            room = coordinator.get_room_by_code(code)
        except GameError as e:
            raise _http_error(e)
        if room is None:
            raise _http_error(RoomNotFound(f"No room with code {code.upper()}"))
        return get_public_room_info(room)

    async def broadcast_room(room: GameRoom):
        await manager.broadcast_to_room(room.id, create_room_update_event(get_public_room_info(room)))

    def require_membership(websocket: WebSocket):
        player_id = manager.connection_players.get(websocket)
        room_id = manager.connection_rooms.get(websocket)
        if not player_id or not room_id:
            raise ActionNotAllowed("Not in a room")
        return player_id, room_id

    async def handle_join(websocket: WebSocket, event: JoinEvent):
        if manager.connection_rooms.get(websocket):
            raise ActionNotAllowed("Already in a room; leave first")
        room = coordinator.get_room_by_code(event.code)
        if room is None:
            raise RoomNotFound(f"No room with code {event.code}")

        player_id = event.player_id or str(uuid.uuid4())
        room = coordinator.join_room(room.id, player_id, event.name)
        manager.connect(websocket, room.id, player_id)

        await manager.send(websocket, create_join_success_event(player_id, room.id, room.code))
        await broadcast_room(room)
        if room.game_state is not None:
            # Reconnects get the whole state; nothing is replayed
            state = load_state(room.game_state)
            await manager.send(
                websocket,
                create_state_full_event(sanitize_state(state, seat_of(state, player_id)), room.status),
            )

    async def handle_leave(websocket: WebSocket, event: LeaveEvent):
        player_id, room_id = require_membership(websocket)
        manager.disconnect(websocket)
        room = multiplayer.leave_room(room_id, player_id)
        if room is not None:
            await broadcast_room(room)

    async def handle_ready(websocket: WebSocket, event: ReadyEvent):
        player_id, room_id = require_membership(websocket)
        room = coordinator.set_player_ready(room_id, player_id, event.ready)
        await broadcast_room(room)

    async def handle_start(websocket: WebSocket, event: StartEvent):
        player_id, room_id = require_membership(websocket)
        room = multiplayer.start_room_game(room_id, player_id, event.seed)
        logger.info(f"Game started for room {room.code}")
        await broadcast_room(room)
        await manager.broadcast_state(room)

    async def handle_move(websocket: WebSocket, event: MoveEvent):
        player_id, room_id = require_membership(websocket)
        room, _ = multiplayer.submit_move(room_id, player_id, event.move)
        await manager.broadcast_state(room)
        if room.status == ROOM_FINISHED:
            await broadcast_room(room)

    async def handle_request_state(websocket: WebSocket, event: RequestStateEvent):
        player_id, room_id = require_membership(websocket)
        room = coordinator.require_room(room_id)
        await manager.send(websocket, create_room_update_event(get_public_room_info(room)))
        if room.game_state is not None:
            state = load_state(room.game_state)
            await manager.send(
                websocket,
                create_state_full_event(sanitize_state(state, seat_of(state, player_id)), room.status),
            )

    async def handle_chat(websocket: WebSocket, event: ChatEvent):
        player_id, room_id = require_membership(websocket)
        room = coordinator.require_room(room_id)
        player = room.get_player(player_id)
        if player is None:
            raise ActionNotAllowed("Not in this room")
        await manager.broadcast_to_room(room_id, create_chat_event(player_id, player.name, event.text))

    handlers = {
        JoinEvent: handle_join,
        LeaveEvent: handle_leave,
        ReadyEvent: handle_ready,
        StartEvent: handle_start,
        MoveEvent: handle_move,
        RequestStateEvent: handle_request_state,
        ChatEvent: handle_chat,
    }

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        """Main WebSocket endpoint."""
        await websocket.accept()
        logger.info("WebSocket connection accepted")

        try:
            while True:
                raw_data = await websocket.receive_text()
                try:
                    event = parse_inbound_event(orjson.loads(raw_data))
                    await handlers[type(event)](websocket, event)
                except GameError as e:
                    logger.info(f"Rejected {raw_data[:80]}: {e}")
                    await manager.send(websocket, create_error_event(error_code_for(e), e.message))
                except ValueError as e:
                    await manager.send(websocket, create_error_event(ErrorCode.INVALID_EVENT, str(e)))
                except Exception as e:
                    logger.exception(f"Error handling event: {e}")
                    await manager.send(websocket, create_error_event(ErrorCode.INTERNAL, "Internal server error"))

        except WebSocketDisconnect:
            logger.info("WebSocket disconnected")
        finally:
            player_id, room_id = manager.disconnect(websocket)
            if player_id and room_id:
                try:
                    room = coordinator.set_player_connected(room_id, player_id, False)
                    await broadcast_room(room)
                except GameError as e:
                    logger.info(f"Could not mark {player_id} disconnected: {e}")

    return app


app = create_app()
