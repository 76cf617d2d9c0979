"""
Tests for the REST endpoints and the room WebSocket.
"""

from typing import get_args

import pytest
from fastapi.testclient import TestClient

from arcade_engine.rooms import RoomCoordinator
from arcade_engine.store import InMemoryRoomStore
from arcade_engine.ws.events import (
    ErrorCode, OutboundEvent, OutboundEventType, create_chat_event, create_error_event,
    create_join_success_event, create_room_update_event, create_state_full_event,
)
from arcade_engine.ws.server import create_app


@pytest.fixture
def store():
    return InMemoryRoomStore()


@pytest.fixture
def client(store):
    with TestClient(create_app(RoomCoordinator(store=store))) as test_client:
        yield test_client


def create_room(client, game_type="reversi", **extra):
    response = client.post("/rooms", json={"host_name": "Hana", "host_id": "host", "game_type": game_type, **extra})
    assert response.status_code == 201
    return response.json()


def receive_until(websocket, event_type):
    """Read events until one of the given type arrives."""
    while True:
        message = websocket.receive_json()
        if message["type"] == event_type:
            return message


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert "baccarat" in data["games"]
    assert data["connections"] == 0


def test_create_and_find_room(client):
    """A created room can be looked up by code and appears in the lobby."""
    room = create_room(client)
    assert room["host_id"] == "host"
    assert room["status"] == "waiting"
    assert room["player_count"] == 1
    assert "game_state" not in room

    response = client.get(f"/rooms/{room['code'].lower()}")
    assert response.status_code == 200
    assert response.json()["id"] == room["id"]

    listed = client.get("/rooms", params={"game_type": "reversi"}).json()
    assert [entry["id"] for entry in listed] == [room["id"]]
    assert client.get("/rooms", params={"game_type": "go_fish"}).json() == []


def test_private_rooms_not_listed(client):
    create_room(client, visibility="private")
    assert client.get("/rooms").json() == []


def test_unknown_room_is_404(client):
    response = client.get("/rooms/ZZZZZZ")
    assert response.status_code == 404
    assert response.json()["detail"]["code"] == "ROOM_NOT_FOUND"


def test_bad_room_request(client):
    """Unknown games are refused; missing fields fail validation."""
    response = client.post("/rooms", json={"host_name": "Hana", "game_type": "chess"})
    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "ACTION_NOT_ALLOWED"

    response = client.post("/rooms", json={"game_type": "reversi"})
    assert response.status_code == 422


def test_storage_outage_is_503(client, store):
    store.available = False
    response = client.get("/rooms")
    assert response.status_code == 503
    assert response.json()["detail"]["code"] == "PERSISTENCE_UNAVAILABLE"


def test_invalid_events(client):
    """Malformed frames are answered with INVALID_EVENT and the socket stays open."""
    with client.websocket_connect("/ws") as websocket:
        websocket.send_text("{not json")
        assert websocket.receive_json()["code"] == "INVALID_EVENT"

        websocket.send_json({"type": "dance"})
        assert websocket.receive_json()["code"] == "INVALID_EVENT"

        websocket.send_json({"type": "join", "code": "ABCDEF"})
        assert websocket.receive_json()["code"] == "INVALID_EVENT"

        websocket.send_json({"type": "ready"})
        assert websocket.receive_json()["code"] == "ACTION_NOT_ALLOWED"

        websocket.send_json({"type": "join", "code": "ZZZZZZ", "name": "Gus"})
        assert websocket.receive_json()["code"] == "ROOM_NOT_FOUND"


def test_reversi_over_websocket(client):
    """Join, start, move; each player sees the state from their own seat."""
    room = create_room(client)

    with client.websocket_connect("/ws") as host, client.websocket_connect("/ws") as guest:
        host.send_json({"type": "join", "code": room["code"], "name": "Hana", "player_id": "host"})
        joined = host.receive_json()
        assert joined["type"] == "join_success"
        assert joined["room_id"] == room["id"]

        guest.send_json({"type": "join", "code": room["code"].lower(), "name": "Gus", "player_id": "guest"})
        assert guest.receive_json()["player_id"] == "guest"
        assert receive_until(host, "room_update")["room"]["player_count"] == 1
        assert receive_until(host, "room_update")["room"]["player_count"] == 2

        guest.send_json({"type": "start"})
        assert receive_until(guest, "error")["code"] == "NOT_HOST"

        host.send_json({"type": "start", "seed": 1})
        host_state = receive_until(host, "state_full")
        guest_state = receive_until(guest, "state_full")
        assert host_state["status"] == "playing"
        assert host_state["state"]["viewer_seat"] == 0
        assert guest_state["state"]["viewer_seat"] == 1
        assert host_state["state"]["turn"] == 0

        guest.send_json({"type": "move", "move": {"type": "place", "row": 2, "col": 4}})
        assert receive_until(guest, "error")["code"] == "NOT_YOUR_TURN"

        host.send_json({"type": "move", "move": {"type": "place", "row": 0, "col": 0}})
        assert receive_until(host, "error")["code"] == "ILLEGAL_MOVE"

        host.send_json({"type": "move", "move": {"type": "place", "row": 2, "col": 3}})
        after = receive_until(guest, "state_full")
        assert after["state"]["turn"] == 1
        assert after["state"]["board"][2][3] == 0
        assert receive_until(host, "state_full")["state"]["move_count"] == 1

        guest.send_json({"type": "chat", "text": "nice"})
        chat = receive_until(host, "chat")
        assert chat["player_name"] == "Gus"
        assert chat["text"] == "nice"


def test_card_state_is_hidden_per_seat(client):
    """Go Fish players only ever receive their own hand."""
    room = create_room(client, game_type="go_fish")

    with client.websocket_connect("/ws") as host, client.websocket_connect("/ws") as guest:
        host.send_json({"type": "join", "code": room["code"], "name": "Hana", "player_id": "host"})
        receive_until(host, "join_success")
        guest.send_json({"type": "join", "code": room["code"], "name": "Gus", "player_id": "guest"})
        receive_until(guest, "join_success")

        host.send_json({"type": "start", "seed": 5})
        view = receive_until(guest, "state_full")["state"]
        assert view["hands"][0] is None
        assert len(view["hands"][1]) == view["hand_counts"][1]
        assert "deck" not in view

        guest.send_json({"type": "request_state"})
        assert receive_until(guest, "state_full")["state"]["viewer_seat"] == 1


def test_rooms_cannot_undo(client):
    """Shared rooms have no undo; the request is refused and the board stands."""
    room = create_room(client)

    with client.websocket_connect("/ws") as host, client.websocket_connect("/ws") as guest:
        host.send_json({"type": "join", "code": room["code"], "name": "Hana", "player_id": "host"})
        receive_until(host, "join_success")
        guest.send_json({"type": "join", "code": room["code"], "name": "Gus", "player_id": "guest"})
        receive_until(guest, "join_success")

        host.send_json({"type": "start", "seed": 1})
        receive_until(host, "state_full")
        host.send_json({"type": "move", "move": {"type": "place", "row": 2, "col": 3}})
        receive_until(host, "state_full")

        host.send_json({"type": "undo"})
        assert receive_until(host, "error")["code"] == "INVALID_EVENT"

        host.send_json({"type": "request_state"})
        state = receive_until(host, "state_full")["state"]
        assert state["move_count"] == 1
        assert state["board"][2][3] == 0


def test_outbound_events_cover_every_type():
    """Every event the server sends is one of the outbound models, one model per type."""
    models = get_args(OutboundEvent)
    assert sorted(model.model_fields["type"].default.value for model in models) == sorted(
        event_type.value for event_type in OutboundEventType
    )

    events = [
        create_join_success_event("p1", "room-1", "ABCDEF"),
        create_room_update_event({"id": "room-1"}),
        create_state_full_event({"turn": 0}, "playing"),
        create_error_event(ErrorCode.INTERNAL, "boom"),
        create_chat_event("p1", "Hana", "hi"),
    ]
    assert all(isinstance(event, models) for event in events)
