"""
State serialization and sanitization utilities.

Game states travel as a tagged union keyed by ``game``. Loading validates the
payload with pydantic and raises InvalidGameState on a malformed blob.
"""

from dataclasses import asdict, fields
from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Union

import orjson
from pydantic import BaseModel, Field, TypeAdapter, ValidationError, field_validator

from .constants import (
    BOARD_SIZE, GAME_REVERSI, GAME_CRAZY_EIGHTS, GAME_GO_FISH, GAME_BACCARAT,
    KIND_HUMAN, SUITS,
)
from .errors import IllegalMove, InvalidGameState
from .games.baccarat import BaccaratState, CashOut, Deal, NextRound, PlaceBet
from .games.crazy_eights import ChooseSuit, CrazyEightsState, DrawCard, PassTurn, PlayCard
from .games.go_fish import Ask, GoFishState
from .games.reversi import ReversiMove, ReversiState
from .models import Card, Player


class CardPayload(BaseModel):
    id: str
    suit: str
    rank: int = Field(ge=1, le=13)

    @field_validator('suit')
    @classmethod
    def validate_suit(cls, v):
        if v not in SUITS:
            raise ValueError(f"unknown suit {v!r}")
        return v


class PlayerPayload(BaseModel):
    id: str
    name: str
    kind: str = KIND_HUMAN
    difficulty: Optional[str] = None


class ReversiPayload(BaseModel):
    game: Literal['reversi']
    players: List[PlayerPayload]
    board: List[List[Optional[int]]]
    turn: Optional[int] = None
    last_move: Optional[Tuple[int, int]] = None
    move_count: int = Field(default=0, ge=0)

    @field_validator('board')
    @classmethod
    def validate_board(cls, v):
        if len(v) != BOARD_SIZE or any(len(row) != BOARD_SIZE for row in v):
            raise ValueError(f"board must be {BOARD_SIZE}x{BOARD_SIZE}")
        return v


class CrazyEightsPayload(BaseModel):
    game: Literal['crazy_eights']
    players: List[PlayerPayload]
    hands: List[List[CardPayload]]
    deck: List[CardPayload]
    discard: List[CardPayload] = Field(min_length=1)
    current_suit: str
    turn: Optional[int] = 0
    draw_count: int = Field(default=0, ge=0)
    pending_suit_seat: Optional[int] = None
    passes_in_row: int = Field(default=0, ge=0)
    finished: bool = False


class GoFishPayload(BaseModel):
    game: Literal['go_fish']
    players: List[PlayerPayload]
    hands: List[List[CardPayload]]
    deck: List[CardPayload]
    books: List[List[int]]
    turn: Optional[int] = 0
    ask_log: List[Dict[str, Any]] = Field(default_factory=list)
    last_action: str = ''


class BaccaratPayload(BaseModel):
    game: Literal['baccarat']
    players: List[PlayerPayload]
    shoe: List[CardPayload]
    chips: int = Field(ge=0)
    starting_chips: int = Field(ge=0)
    min_bet: int = Field(gt=0)
    rng_seed: int
    shuffle_count: int = Field(default=0, ge=0)
    phase: str
    bet_type: Optional[str] = None
    bet_amount: int = Field(default=0, ge=0)
    player_hand: List[CardPayload] = Field(default_factory=list)
    banker_hand: List[CardPayload] = Field(default_factory=list)
    result: Optional[str] = None
    payout: int = 0
    history: List[Dict[str, Any]] = Field(default_factory=list)


GamePayload = Annotated[
    Union[ReversiPayload, CrazyEightsPayload, GoFishPayload, BaccaratPayload],
    Field(discriminator='game'),
]
_payload_adapter = TypeAdapter(GamePayload)

STATE_TYPES = {
    ReversiState: GAME_REVERSI,
    CrazyEightsState: GAME_CRAZY_EIGHTS,
    GoFishState: GAME_GO_FISH,
    BaccaratState: GAME_BACCARAT,
}

MOVE_TYPES: Dict[str, Dict[str, type]] = {
    GAME_REVERSI: {'place': ReversiMove},
    GAME_CRAZY_EIGHTS: {
        'play_card': PlayCard,
        'choose_suit': ChooseSuit,
        'draw_card': DrawCard,
        'pass_turn': PassTurn,
    },
    GAME_GO_FISH: {'ask': Ask},
    GAME_BACCARAT: {
        'place_bet': PlaceBet,
        'deal': Deal,
        'next_round': NextRound,
        'cash_out': CashOut,
    },
}


def game_type_of(state) -> str:
    try:
        return STATE_TYPES[type(state)]
    except KeyError:
        raise InvalidGameState(f"Not a game state: {type(state).__name__}")


def dump_state(state) -> Dict[str, Any]:
    """Full (unsanitized) state as plain JSON-ready data, tagged with ``game``."""
    data = asdict(state)
    data['game'] = game_type_of(state)
    return data


def _cards(payloads: List[CardPayload]) -> List[Card]:
    return [Card(id=card.id, suit=card.suit, rank=card.rank) for card in payloads]


def _players(payloads: List[PlayerPayload]) -> List[Player]:
    return [Player(**player.model_dump()) for player in payloads]


def load_state(data: Dict[str, Any]):
    """
    Rebuild a game state from ``dump_state`` output.

    Raises:
        InvalidGameState: the payload is missing, untagged or malformed
    """
    if not isinstance(data, dict):
        raise InvalidGameState("Game state must be an object")
    try:
        payload = _payload_adapter.validate_python(data)
    except ValidationError as exc:
        raise InvalidGameState(f"Malformed game state: {exc.error_count()} error(s)") from exc

    players = _players(payload.players)
    if isinstance(payload, ReversiPayload):
        return ReversiState(
            players=players,
            board=[list(row) for row in payload.board],
            turn=payload.turn,
            last_move=payload.last_move,
            move_count=payload.move_count,
        )
    if isinstance(payload, CrazyEightsPayload):
        return CrazyEightsState(
            players=players,
            hands=[_cards(hand) for hand in payload.hands],
            deck=_cards(payload.deck),
            discard=_cards(payload.discard),
            current_suit=payload.current_suit,
            turn=payload.turn,
            draw_count=payload.draw_count,
            pending_suit_seat=payload.pending_suit_seat,
            passes_in_row=payload.passes_in_row,
            finished=payload.finished,
        )
    if isinstance(payload, GoFishPayload):
        return GoFishState(
            players=players,
            hands=[_cards(hand) for hand in payload.hands],
            deck=_cards(payload.deck),
            books=[list(seat_books) for seat_books in payload.books],
            turn=payload.turn,
            ask_log=[dict(entry) for entry in payload.ask_log],
            last_action=payload.last_action,
        )
    return BaccaratState(
        players=players,
        shoe=_cards(payload.shoe),
        chips=payload.chips,
        starting_chips=payload.starting_chips,
        min_bet=payload.min_bet,
        rng_seed=payload.rng_seed,
        shuffle_count=payload.shuffle_count,
        phase=payload.phase,
        bet_type=payload.bet_type,
        bet_amount=payload.bet_amount,
        player_hand=_cards(payload.player_hand),
        banker_hand=_cards(payload.banker_hand),
        result=payload.result,
        payout=payload.payout,
        history=[dict(entry) for entry in payload.history],
    )


def state_to_json(state) -> bytes:
    return orjson.dumps(dump_state(state))


def state_from_json(data: Union[bytes, str]):
    try:
        decoded = orjson.loads(data)
    except orjson.JSONDecodeError as exc:
        raise InvalidGameState("Game state is not valid JSON") from exc
    return load_state(decoded)


def sanitize_state(state, viewer_seat: Optional[int] = None) -> Dict[str, Any]:
    """
    Sanitize a game state for transmission to one viewer.

    Args:
        state: Game state to sanitize
        viewer_seat: Seat of the player viewing the state (to show their cards);
            None for spectators

    Returns:
        State dictionary with other players' hands and the draw order hidden
    """
    data = dump_state(state)
    game = data['game']

    if game in (GAME_CRAZY_EIGHTS, GAME_GO_FISH):
        hands = data.pop('hands')
        data['hand_counts'] = [len(hand) for hand in hands]
        data['hands'] = [hand if seat == viewer_seat else None for seat, hand in enumerate(hands)]
        data['deck_count'] = len(data.pop('deck'))
    elif game == GAME_BACCARAT:
        data['shoe_count'] = len(data.pop('shoe'))
        data.pop('rng_seed')

    data['viewer_seat'] = viewer_seat
    return data


def move_to_dict(move) -> Dict[str, Any]:
    for moves in MOVE_TYPES.values():
        for move_type, move_class in moves.items():
            if type(move) is move_class:
                data = {field.name: getattr(move, field.name) for field in fields(move)}
                data['type'] = move_type
                return data
    raise IllegalMove(f"Unknown move: {move!r}")


def move_from_dict(game_type: str, data: Dict[str, Any]):
    """
    Build a move for ``game_type`` from client data such as
    ``{"type": "place", "seat": 0, "row": 2, "col": 3}``.

    Raises:
        IllegalMove: unknown move type or bad fields
    """
    moves = MOVE_TYPES.get(game_type)
    if moves is None:
        raise IllegalMove(f"Unknown game type: {game_type}")
    move_class = moves.get(data.get('type'))
    if move_class is None:
        raise IllegalMove(f"Unknown move type {data.get('type')!r} for {game_type}")

    values = {key: value for key, value in data.items() if key != 'type'}
    try:
        return TypeAdapter(move_class).validate_python(values)
    except ValidationError as exc:
        raise IllegalMove(f"Invalid {data['type']} move: {exc.error_count()} error(s)") from exc


def _iso(value) -> Optional[str]:
    return value.isoformat() if value is not None else None


def serialize_player_for_list(player) -> Dict[str, Any]:
    """Serialize a room member for lobby player lists."""
    return {
        "id": player.id,
        "name": player.name,
        "is_host": player.is_host,
        "is_ready": player.is_ready,
        "is_connected": player.is_connected,
        "joined_at": _iso(player.joined_at),
    }


def get_public_room_info(room) -> Dict[str, Any]:
    """Public information about a room for listings; never includes the game state."""
    return {
        "id": room.id,
        "code": room.code,
        "game_type": room.game_type,
        "visibility": room.visibility,
        "status": room.status,
        "host_id": room.host_id,
        "host_name": room.host_name,
        "max_players": room.max_players,
        "player_count": len(room.players),
        "players": [serialize_player_for_list(player) for player in room.players],
        "settings": dict(room.settings),
        "created_at": _iso(room.created_at),
        "updated_at": _iso(room.updated_at),
        "started_at": _iso(room.started_at),
        "finished_at": _iso(room.finished_at),
    }
