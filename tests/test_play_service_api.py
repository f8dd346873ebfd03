from fastapi.testclient import TestClient

from queens.service import GameService
from server.app import create_app


def make_client(seed: int = 4) -> TestClient:
    return TestClient(create_app(GameService(seed=seed), run_reaper=False))


def own_hand(payload):
    return payload["players"][payload["player_index"]]["hand"]


def seated_client():
    client = make_client()
    room_id = client.post("/create_room", json={}).json()["room_id"]
    alice = client.post("/join", json={"room_id": room_id, "player_id": "alice"}).json()
    bob = client.post("/join", json={"room_id": room_id, "player_id": "bob"}).json()
    return client, room_id, alice, bob


def test_create_join_and_list_rooms():
    client, room_id, alice, bob = seated_client()

    assert alice["player_index"] == 0
    assert bob["player_index"] == 1
    assert bob["initial_selection_mode"] is True
    assert bob["current_turn_index"] == -1
    assert bob["room_full"] is True

    rooms = client.get("/rooms").json()["rooms"]
    assert rooms == [{"id": room_id, "players": 2, "max_players": 2, "is_full": True, "phase": "initial_selection"}]


def test_full_room_and_unknown_room_errors():
    client, room_id, _, _ = seated_client()

    response = client.post("/join", json={"room_id": room_id, "player_id": "carol"})
    assert response.status_code == 400
    assert response.json()["kind"] == "ROOM_FULL"

    response = client.get("/state", params={"room_id": "missing"})
    assert response.status_code == 404
    assert response.json() == {"status": "error", "kind": "ROOM_NOT_FOUND", "message": "Room missing not found."}


def test_rejoin_returns_the_same_seat():
    client, room_id, alice, _ = seated_client()

    again = client.post("/join", json={"room_id": room_id, "player_id": "alice"}).json()
    assert again["player_index"] == 0
    assert [c["card_id"] for c in own_hand(again)] == [c["card_id"] for c in own_hand(alice)]


def test_selection_starts_the_game_and_state_hides_opponent_cards():
    client, room_id, alice, bob = seated_client()

    bad = client.post(
        "/select_initial_cards",
        json={"room_id": room_id, "player_id": "alice", "selected_card_ids": [own_hand(alice)[0]["card_id"]]},
    )
    assert bad.status_code == 400
    assert bad.json()["kind"] == "INVALID_SELECTION_COUNT"

    for payload, player in ((alice, "alice"), (bob, "bob")):
        ids = [card["card_id"] for card in own_hand(payload)[:2]]
        response = client.post(
            "/select_initial_cards",
            json={"room_id": room_id, "player_id": player, "selected_card_ids": ids},
        )
        assert response.status_code == 200

    state = client.get("/state", params={"room_id": room_id, "player_id": "bob"}).json()
    assert state["phase"] == "active"
    assert state["current_turn_index"] == 0
    assert state["center_card"]["is_face_up"] is True
    assert all(set(card) == {"card_id", "is_face_up"} for card in state["players"][0]["hand"])

    wrong_turn = client.post("/draw_card", json={"room_id": room_id, "player_id": "bob"})
    assert wrong_turn.status_code == 409
    assert wrong_turn.json()["kind"] == "NOT_YOUR_TURN"

    drawn = client.post("/draw_card", json={"room_id": room_id, "player_id": "alice"}).json()
    assert len(own_hand(drawn)) == 5

    missing_card = client.post("/play_card", json={"room_id": room_id, "player_id": "alice", "card_id": "nope"})
    assert missing_card.status_code == 400
    assert missing_card.json()["kind"] == "CARD_NOT_IN_HAND"


def test_unknown_player_and_reset():
    client, room_id, _, _ = seated_client()

    response = client.post("/call_queens", json={"room_id": room_id, "player_id": "mallory"})
    assert response.status_code == 404
    assert response.json()["kind"] == "PLAYER_NOT_FOUND"

    reset = client.post("/reset", json={"room_id": room_id}).json()
    assert reset["phase"] == "waiting"
    assert reset["total_players"] == 0
    assert reset["deck_count"] == 52


def test_create_room_without_a_body_and_duplicate_ids():
    client = make_client()

    response = client.post("/create_room")
    assert response.status_code == 200
    assert response.json()["phase"] == "waiting"

    first = client.post("/create_room", json={"room_id": "table"})
    assert first.status_code == 200
    duplicate = client.post("/create_room", json={"room_id": "table"})
    assert duplicate.status_code == 409
    assert duplicate.json() == {"status": "error", "kind": "ROOM_EXISTS", "message": "Room table already exists."}
