# engine_py/src/arcade_engine/errors.py

# Specific error codes
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
INTERNAL_ERROR = "INTERNAL_ERROR"


class GameError(Exception):
    """Base exception for game-related errors."""
    code = INTERNAL_ERROR

    def __init__(self, message: str, code: str = None):
        if code is not None:
            self.code = code
        self.message = message
        super().__init__(f"[{self.code}] {message}")


class IllegalMove(GameError):
    code = ILLEGAL_MOVE


class NotYourTurn(GameError):
    code = NOT_YOUR_TURN


class ActionNotAllowed(GameError):
    code = ACTION_NOT_ALLOWED


class RoomFull(GameError):
    code = ROOM_FULL

    def __init__(self, message: str = "Room is full"):
        super().__init__(message)


class GameAlreadyStarted(GameError):
    code = GAME_ALREADY_STARTED

    def __init__(self, message: str = "Game has already started"):
        super().__init__(message)


class RoomNotFound(GameError):
    code = ROOM_NOT_FOUND

    def __init__(self, message: str = "Room not found"):
        super().__init__(message)


class RoomFinished(GameError):
    code = ROOM_FINISHED

    def __init__(self, message: str = "Game has already finished"):
        super().__init__(message)


class NotHost(GameError):
    code = NOT_HOST

    def __init__(self, message: str = "Only the host can do that"):
        super().__init__(message)


class DuplicateRoomCode(GameError):
    code = DUPLICATE_ROOM_CODE


class PersistenceUnavailable(GameError):
    code = PERSISTENCE_UNAVAILABLE

    def __init__(self, message: str = "Room storage is unavailable"):
        super().__init__(message)


class ExhaustedDeck(GameError):
    code = EXHAUSTED_DECK

    def __init__(self, message: str = "No cards left to draw"):
        super().__init__(message)


class InvalidGameState(GameError):
    code = INVALID_GAME_STATE
