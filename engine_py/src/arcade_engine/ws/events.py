"""
WebSocket event models and validation.
"""

import time
from enum import Enum
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from ..errors import GameError


class EventType(str, Enum):
    """Inbound event types."""
    JOIN = "join"
    LEAVE = "leave"
    READY = "ready"
    START = "start"
    MOVE = "move"
    REQUEST_STATE = "request_state"
    CHAT = "chat"


class OutboundEventType(str, Enum):
    """Outbound event types."""
    JOIN_SUCCESS = "join_success"
    ROOM_UPDATE = "room_update"
    STATE_FULL = "state_full"
    ERROR = "error"
    CHAT = "chat"


class ErrorCode(str, Enum):
    """Error codes for client events."""
    INVALID_EVENT = "INVALID_EVENT"
    ILLEGAL_MOVE = "ILLEGAL_MOVE"
    NOT_YOUR_TURN = "NOT_YOUR_TURN"
    ACTION_NOT_ALLOWED = "ACTION_NOT_ALLOWED"
    ROOM_FULL = "ROOM_FULL"
    GAME_ALREADY_STARTED = "GAME_ALREADY_STARTED"
    ROOM_NOT_FOUND = "ROOM_NOT_FOUND"
    ROOM_FINISHED = "ROOM_FINISHED"
    NOT_HOST = "NOT_HOST"
    DUPLICATE_ROOM_CODE = "DUPLICATE_ROOM_CODE"
    PERSISTENCE_UNAVAILABLE = "PERSISTENCE_UNAVAILABLE"
    EXHAUSTED_DECK = "EXHAUSTED_DECK"
    INVALID_GAME_STATE = "INVALID_GAME_STATE"
    INTERNAL = "INTERNAL"


def error_code_for(error: GameError) -> ErrorCode:
    try:
        return ErrorCode(error.code)
    except ValueError:
        return ErrorCode.INTERNAL


# Inbound event models
class BaseEvent(BaseModel):
    """Base event model."""
    type: EventType


class JoinEvent(BaseEvent):
    """Join (or rejoin) a room by its code."""
    type: EventType = EventType.JOIN
    code: str = Field(..., min_length=1, max_length=10)
    name: str = Field(..., min_length=1, max_length=30)
    player_id: Optional[str] = Field(default=None, max_length=64)

    @field_validator('code')
    @classmethod
    def normalize_code(cls, v):
        return v.strip().upper()


class LeaveEvent(BaseEvent):
    type: EventType = EventType.LEAVE


class ReadyEvent(BaseEvent):
    type: EventType = EventType.READY
    ready: bool = True


class StartEvent(BaseEvent):
    """Start game event (host only)."""
    type: EventType = EventType.START
    seed: Optional[int] = None


class MoveEvent(BaseEvent):
    """A game move; ``move`` carries its ``type`` plus the move's fields."""
    type: EventType = EventType.MOVE
    move: Dict[str, Any]

    @field_validator('move')
    @classmethod
    def validate_move(cls, v):
        if not isinstance(v.get('type'), str):
            raise ValueError("move needs a type")
        return v


class RequestStateEvent(BaseEvent):
    """Request full state event."""
    type: EventType = EventType.REQUEST_STATE


class ChatEvent(BaseEvent):
    """Chat message event."""
    type: EventType = EventType.CHAT
    text: str = Field(..., min_length=1, max_length=200)


InboundEvent = Union[
    JoinEvent,
    LeaveEvent,
    ReadyEvent,
    StartEvent,
    MoveEvent,
    RequestStateEvent,
    ChatEvent,
]


# Outbound event models
class JoinSuccessEvent(BaseModel):
    type: OutboundEventType = OutboundEventType.JOIN_SUCCESS
    player_id: str
    room_id: str
    code: str
    timestamp: float


class RoomUpdateEvent(BaseModel):
    """Room membership and status, sent whenever they change."""
    type: OutboundEventType = OutboundEventType.ROOM_UPDATE
    room: Dict[str, Any]
    timestamp: float


class StateFullEvent(BaseModel):
    """Full game state, sanitized for the receiving player."""
    type: OutboundEventType = OutboundEventType.STATE_FULL
    state: Dict[str, Any]
    status: str
    timestamp: float


class ErrorEvent(BaseModel):
    type: OutboundEventType = OutboundEventType.ERROR
    code: ErrorCode
    message: str
    timestamp: float


class ChatMessageEvent(BaseModel):
    type: OutboundEventType = OutboundEventType.CHAT
    player_id: str
    player_name: str
    text: str
    timestamp: float


OutboundEvent = Union[
    JoinSuccessEvent,
    RoomUpdateEvent,
    StateFullEvent,
    ErrorEvent,
    ChatMessageEvent,
]

EVENT_MAP = {
    EventType.JOIN: JoinEvent,
    EventType.LEAVE: LeaveEvent,
    EventType.READY: ReadyEvent,
    EventType.START: StartEvent,
    EventType.MOVE: MoveEvent,
    EventType.REQUEST_STATE: RequestStateEvent,
    EventType.CHAT: ChatEvent,
}


def parse_inbound_event(data: Dict[str, Any]) -> InboundEvent:
    """
    Parse raw event data into the matching event model.

    Args:
        data: Raw event data from WebSocket

    Returns:
        Parsed event model

    Raises:
        ValueError: If event type is invalid or data is malformed
    """
    if not isinstance(data, dict):
        raise ValueError("Event must be a JSON object")

    event_type = data.get("type")
    if not event_type:
        raise ValueError("Missing event type")

    try:
        event_type = EventType(event_type)
    except ValueError:
        raise ValueError(f"Invalid event type: {event_type}")

    try:
        return EVENT_MAP[event_type](**data)
    except ValidationError as e:
        raise ValueError(f"Invalid event data: {e.error_count()} error(s)")


def create_error_event(code: ErrorCode, message: str) -> ErrorEvent:
    return ErrorEvent(code=code, message=message, timestamp=time.time())


def create_join_success_event(player_id: str, room_id: str, code: str) -> JoinSuccessEvent:
    return JoinSuccessEvent(player_id=player_id, room_id=room_id, code=code, timestamp=time.time())


def create_room_update_event(room: Dict[str, Any]) -> RoomUpdateEvent:
    return RoomUpdateEvent(room=room, timestamp=time.time())


def create_state_full_event(state: Dict[str, Any], status: str) -> StateFullEvent:
    return StateFullEvent(state=state, status=status, timestamp=time.time())


def create_chat_event(player_id: str, player_name: str, text: str) -> ChatMessageEvent:
    return ChatMessageEvent(player_id=player_id, player_name=player_name, text=text, timestamp=time.time())
