import json

import pytest
import requests
import responses

from titanvanguard.client.api import BulletInfo, ClientError, GameClient, GameStatus

BASE = "http://game.test"


@pytest.fixture
def mocked():
    with responses.RequestsMock() as rsps:
        yield rsps


@pytest.fixture
def client():
    return GameClient(BASE + "/")


def sent_json(mocked, index=0):
    return json.loads(mocked.calls[index].request.body)


def test_login_success(mocked, client):
    mocked.get(f"{BASE}/login/alice", json={"username": "alice", "score": 7})
    assert client.login("alice") == ("alice", 7)


def test_login_user_not_found(mocked, client):
    mocked.get(f"{BASE}/login/bob", json={"error": "User not found", "username": "bob"}, status=404)
    with pytest.raises(ClientError) as info:
        client.login("bob")
    assert info.value.message == "User not found"
    assert info.value.status == 404


def test_login_invalid_response(mocked, client):
    mocked.get(f"{BASE}/login/alice", json={"username": "alice"})
    with pytest.raises(ClientError, match="Invalid server response"):
        client.login("alice")


def test_register_sends_username(mocked, client):
    mocked.post(f"{BASE}/register", body="User registered successfully\n")
    assert client.register("carol") is None
    assert len(mocked.calls) == 1
    assert sent_json(mocked) == {"username": "carol"}


def test_register_conflict(mocked, client):
    mocked.post(f"{BASE}/register", body="Username Already Exists\n", status=409)
    with pytest.raises(ClientError, match="Username already exists"):
        client.register("carol")


def test_register_other_error_uses_body(mocked, client):
    mocked.post(f"{BASE}/register", body="Invalid JSON\n", status=400)
    with pytest.raises(ClientError, match="Invalid JSON"):
        client.register("carol")


def test_create_game(mocked, client):
    mocked.post(f"{BASE}/game/create", json={"sessionId": "42", "requiredPlayers": 2})
    status = client.create_game(2)
    assert status == GameStatus("42", "waiting", 1, 2)
    assert client.current_session_id == "42"
    assert sent_json(mocked) == {"requiredPlayers": 2}


def test_create_game_without_session_id(mocked, client):
    mocked.post(f"{BASE}/game/create", json={"requiredPlayers": 2})
    with pytest.raises(ClientError):
        client.create_game(2)


def test_join_game(mocked, client):
    mocked.post(
        f"{BASE}/game/join",
        json={"message": "Player joined successfully", "sessionId": "9", "username": "dan"},
    )
    status = client.join_game("9", "dan", "car")
    assert status.session_id == "9"
    assert client.current_session_id == "9"
    assert sent_json(mocked) == {"sessionId": "9", "username": "dan", "mapType": "car"}


def test_join_game_failure(mocked, client):
    mocked.post(f"{BASE}/game/join", body="Failed to join session", status=400)
    with pytest.raises(ClientError, match="Failed to join session"):
        client.join_game("9", "dan", "boat")


def test_check_game_status_ready(mocked, client):
    mocked.get(
        f"{BASE}/game/status/5",
        json={
            "sessionId": "5",
            "requiredPlayers": 2,
            "currentPlayers": 2,
            "status": "ready",
            "players": ["a", "b"],
            "lastJoined": "b",
        },
    )
    status = client.check_game_status("5")
    assert status.is_ready
    assert status.players == ("a", "b")
    assert status.last_joined == "b"
    assert status.last_left is None


def test_check_game_status_waiting_with_leaver(mocked, client):
    mocked.get(
        f"{BASE}/game/status/5",
        json={"sessionId": "5", "requiredPlayers": 2, "currentPlayers": 1,
              "status": "waiting", "players": ["a"], "lastLeft": "b"},
    )
    status = client.check_game_status("5")
    assert not status.is_ready
    assert status.current_players == 1
    assert status.last_left == "b"


def test_check_game_status_empty_id(client):
    with pytest.raises(ValueError):
        client.check_game_status("")


def test_check_game_status_not_found(mocked, client):
    mocked.get(f"{BASE}/game/status/77", body="Session not found", status=404)
    with pytest.raises(ClientError) as info:
        client.check_game_status("77")
    assert info.value.status == 404


def test_leave_game(mocked, client):
    mocked.post(f"{BASE}/game/leave", json={"message": "Player left successfully"})
    assert client.leave_game("5") is None
    assert len(mocked.calls) == 1
    assert sent_json(mocked) == {"sessionId": "5"}


def test_leave_game_error(mocked, client):
    mocked.post(f"{BASE}/game/leave", body="Invalid JSON", status=400)
    with pytest.raises(ClientError):
        client.leave_game("5")


def test_request_map(mocked, client):
    matrix = [[0, 1, 2], [3, 4, 1]]
    mocked.post(f"{BASE}/generateMap", json={"map": matrix})
    assert client.request_map("5", 2) == matrix
    assert sent_json(mocked) == {"sessionId": "5", "numPlayers": 2}


def test_request_map_without_map(mocked, client):
    mocked.post(f"{BASE}/generateMap", json={})
    assert client.request_map("5", 2) == []


def test_add_to_queue(mocked, client):
    mocked.post(f"{BASE}/matchmaking/queue", json={"status": "success", "sessionId": "3"})
    assert client.add_to_queue("eve", 100) is None
    assert len(mocked.calls) == 1
    assert sent_json(mocked) == {"username": "eve", "score": 100}


def test_join_queue_returns_session(mocked, client):
    mocked.post(f"{BASE}/matchmaking/queue", json={"status": "success", "sessionId": "3"})
    assert client.join_queue("eve", 100) == "3"


def test_check_match_status(mocked, client):
    mocked.get(
        f"{BASE}/matchmaking/status/3",
        json={"status": "waiting", "sessionId": "3", "currentPlayers": 1,
              "requiredPlayers": 2, "players": ["eve"]},
    )
    status = client.check_match_status("3")
    assert status == GameStatus("3", "waiting", 1, 2, ("eve",))


def test_check_match_status_empty_id(client):
    with pytest.raises(ValueError):
        client.check_match_status("")


def test_shoot(mocked, client):
    mocked.post(f"{BASE}/game/shoot", json={"startX": 4, "startY": 6, "direction": "w"})
    assert client.shoot("3", "eve", "w") == (4, 6)
    assert sent_json(mocked) == {"sessionId": "3", "username": "eve", "direction": "w"}


def test_shoot_invalid_response(mocked, client):
    mocked.post(f"{BASE}/game/shoot", json={"direction": "w"})
    with pytest.raises(ClientError, match="shootBullet"):
        client.shoot("3", "eve", "w")


def test_shoot_requires_username(client):
    with pytest.raises(ValueError):
        client.shoot("3", "", "w")


def test_sync_bullets(mocked, client):
    mocked.post(
        f"{BASE}/game/syncBullets",
        json={"bullets": [{"x": 1, "y": 2, "direction": "d"}, {"x": 3, "y": 0, "direction": "s"}]},
    )
    assert client.sync_bullets("3") == [BulletInfo(1, 2, "d"), BulletInfo(3, 0, "s")]


def test_sync_bullets_missing_key(mocked, client):
    mocked.post(f"{BASE}/game/syncBullets", json={})
    with pytest.raises(ClientError, match="bullets"):
        client.sync_bullets("3")


def test_update_walls(mocked, client):
    mocked.post(f"{BASE}/game/updateWalls", json={"updatedCells": [{"x": 2, "y": 5}]})
    assert client.update_walls("3") == [(2, 5)]


def test_update_walls_empty_body(mocked, client):
    mocked.post(f"{BASE}/game/updateWalls", body="")
    assert client.update_walls("3") == []


def test_update_walls_missing_key(mocked, client):
    mocked.post(f"{BASE}/game/updateWalls", json={"other": 1})
    with pytest.raises(ClientError, match="updatedCells"):
        client.update_walls("3")


def test_sync_players_skips_malformed(mocked, client):
    mocked.post(
        f"{BASE}/game/syncPlayers",
        json={"players": [
            {"username": "a", "x": 0, "y": 0, "score": 100},
            {"username": "b", "x": 1},
        ]},
    )
    assert client.sync_players("3") == [{"username": "a", "x": 0, "y": 0, "score": 100}]


def test_sync_players_missing_key(mocked, client):
    mocked.post(f"{BASE}/game/syncPlayers", json={})
    with pytest.raises(ClientError, match="players"):
        client.sync_players("3")


def test_move(mocked, client):
    mocked.post(
        f"{BASE}/game/move",
        json={"players": [{"username": "a", "x": 1, "y": 0}, {"username": "b", "x": 12, "y": 19}]},
    )
    assert client.move("3", "a", "s") == {"a": (1, 0), "b": (12, 19)}
    assert sent_json(mocked) == {"sessionId": "3", "username": "a", "direction": "s"}


def test_move_not_found(mocked, client):
    mocked.post(f"{BASE}/game/move", body="Player not found.", status=404)
    with pytest.raises(ClientError, match="Player not found."):
        client.move("3", "zed", "s")


def test_connection_error_becomes_client_error(mocked, client):
    mocked.post(f"{BASE}/game/leave", body=requests.ConnectionError("refused"))
    with pytest.raises(ClientError):
        client.leave_game("5")