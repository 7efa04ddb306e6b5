"""HTTP game server: accounts, lobbies, matchmaking and in-game actions."""

from __future__ import annotations

import argparse
import logging
import sqlite3
import threading
from collections.abc import Callable, Sequence
from functools import wraps
from typing import Any

from flask import Flask, Response, jsonify, request

from .player import Player
from .sessions import GameSession, SessionManager
from .storage import DEFAULT_PATH, DataUser, UserDatabase
from .weapon import Weapon

log = logging.getLogger(__name__)

DEFAULT_PORT = 8080
MATCHMAKING_INTERVAL = 1.0


def _text(message: str, status: int) -> Response:
    return Response(message, status=status, mimetype="text/plain")


def _json_body() -> dict[str, Any] | None:
    data = request.get_json(silent=True, force=True)
    return data if isinstance(data, dict) else None


def _has_strings(data: dict[str, Any] | None, *keys: str) -> bool:
    return data is not None and all(isinstance(data.get(key), str) for key in keys)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _player_json(name: str, player: Player) -> dict[str, Any]:
    x, y = player.position
    return {"username": name, "x": x, "y": y}


def _guarded(label: str, prefix: str) -> Callable[[Callable[..., Response]], Callable[..., Response]]:
    """Turn unexpected failures of a route into a 500 answer."""

    def decorate(view: Callable[..., Response]) -> Callable[..., Response]:
        @wraps(view)
        def wrapper(*args: Any, **kwargs: Any) -> Response:
            try:
                return view(*args, **kwargs)
            except Exception as exc:  # noqa: BLE001 - reported to the caller
                log.exception("Error in %s", label)
                return _text(f"{prefix}{exc}", 500)

        return wrapper

    return decorate


def create_app(database: UserDatabase, sessions: SessionManager | None = None) -> Flask:
    """Build the Flask application serving the game API."""
    manager = sessions if sessions is not None else SessionManager()
    app = Flask(__name__)

    def _session_from_body(data: dict[str, Any] | None) -> GameSession | Response:
        if not _has_strings(data, "sessionId"):
            return _text("Invalid request: Missing sessionId.", 400)
        session = manager.get_session(data["sessionId"])
        if session is None:
            return _text("Session not found.", 404)
        return session

    @app.get("/login/<username>")
    def login(username: str) -> Response:
        try:
            user = database.get_user(username)
        except sqlite3.Error as exc:
            return jsonify(error="Internal Server Error", details=str(exc)), 500
        if user is None:
            return jsonify(error="User not found", username=username), 404
        return jsonify(username=user.username, score=user.score)

    @app.post("/register")
    def register() -> Response:
        data = _json_body()
        if not _has_strings(data, "username"):
            log.info("Invalid JSON received.")
            return _text("Invalid JSON\n", 400)
        username = data["username"]
        log.info("Attempting to register username: %s", username)
        if database.get_user(username) is not None:
            log.info("Username already exists: %s", username)
            return _text("Username Already Exists\n", 409)
        database.add_user(DataUser(username))
        log.info("User registered successfully: %s", username)
        return _text("User registered successfully\n", 200)

    @app.post("/game/create")
    def create_game() -> Response:
        data = _json_body()
        if data is None or not _is_int(data.get("requiredPlayers")):
            return _text("Invalid JSON", 400)
        required = data["requiredPlayers"]
        session_id = manager.create_session(required)
        return jsonify(sessionId=session_id, requiredPlayers=required)

    @app.post("/game/join")
    def join_game() -> Response:
        data = _json_body()
        if data is None:
            log.error("Invalid JSON format")
            return _text("Invalid JSON format", 400)
        if not _has_strings(data, "username", "sessionId"):
            log.error("Missing required parameters: username or sessionId")
            return _text("Missing required parameters", 400)
        username, session_id = data["username"], data["sessionId"]
        log.info("Join session called for username: %s, sessionId: %s", username, session_id)
        if manager.join_session(session_id, username):
            return jsonify(
                message="Player joined successfully", sessionId=session_id, username=username
            )
        log.error("Failed to join session for username: %s", username)
        return _text("Failed to join session", 400)

    @app.post("/game/leave")
    def leave_game() -> Response:
        data = _json_body()
        if not _has_strings(data, "sessionId"):
            return _text("Invalid JSON", 400)
        session_id = data["sessionId"]
        username = data.get("username") if isinstance(data.get("username"), str) else ""
        manager.leave_session(session_id, username)
        return jsonify(message="Player left successfully", sessionId=session_id, username=username)

    @app.get("/game/status/<session_id>")
    def game_status(session_id: str) -> Response:
        try:
            session = manager.session_status(session_id)
        except KeyError:
            return _text("Session not found", 404)
        body: dict[str, Any] = {
            "sessionId": session.session_id,
            "requiredPlayers": session.required_players,
            "currentPlayers": len(session.players),
            "status": "ready" if session.is_ready else "waiting",
            "players": sorted(session.players),
        }
        if session.last_joined:
            body["lastJoined"] = session.last_joined
        if session.last_left:
            body["lastLeft"] = session.last_left
        return jsonify(body)

    @app.post("/generateMap")
    def generate_map() -> Response:
        data = _json_body()
        if data is None:
            return _text("Invalid JSON", 400)
        if not _has_strings(data, "sessionId"):
            return _text("Missing required key: 'sessionId'", 400)
        session = manager.get_session(data["sessionId"])
        if session is None:
            return _text("Session not found", 404)

        game_map = session.game_map
        matrix = [list(row) for row in game_map.matrix]
        starts = game_map.player_start_positions()
        for (name, player), start in zip(sorted(session.players.items()), starts):
            player.position = start
            log.info("Player %s placed at %s", name, start)
        return jsonify(map=matrix)

    @app.post("/game/move")
    def move_player() -> Response:
        data = _json_body()
        if not _has_strings(data, "sessionId", "username", "direction"):
            return _text("Invalid request: Missing required fields.", 400)
        session = manager.get_session(data["sessionId"])
        if session is None:
            return _text("Session not found.", 404)
        username = data["username"]
        player = session.player(username)
        if player is None:
            return _text("Player not found.", 404)

        player.move(session.game_map, data["direction"][:1])
        x, y = player.position
        session.game.update_player_position(username, x, y)
        players = [_player_json(name, p) for name, p in sorted(session.players.items())]
        return jsonify(players=players)

    @app.post("/game/syncBullets")
    @_guarded("/game/syncBullets", "Error in /game/syncBullets: ")
    def sync_bullets() -> Response:
        found = _session_from_body(_json_body())
        if isinstance(found, Response):
            return found
        found.game.update_bullets()
        bullets = [
            {"x": b.position[0], "y": b.position[1], "direction": b.direction[:1]}
            for b in found.game.bullets
        ]
        return jsonify(bullets=bullets)

    @app.post("/game/shoot")
    @_guarded("/game/shoot", "Error: ")
    def shoot() -> Response:
        data = _json_body()
        if not _has_strings(data, "sessionId", "username", "direction"):
            return _text("Invalid request: Missing required fields.", 400)
        direction = data["direction"]
        if not direction:
            return _text("Invalid request: Direction is empty.", 400)
        session = manager.get_session(data["sessionId"])
        if session is None:
            return _text("Session not found.", 404)
        player = session.player(data["username"])
        if player is None:
            return _text("Player not found.", 404)

        start_x, start_y = player.position
        session.game.shoot_bullet(player)
        return jsonify(startX=start_x, startY=start_y, direction=direction[0])

    @app.post("/game/updateWalls")
    @_guarded("/game/updateWalls", "Error: ")
    def update_walls() -> Response:
        found = _session_from_body(_json_body())
        if isinstance(found, Response):
            return found
        cells = [{"x": x, "y": y} for x, y in found.game.updated_cells]
        log.info("Updated walls: %s", found.game.updated_cells)
        found.game.clear_updated_cells()
        return jsonify(updatedCells=cells)

    @app.post("/game/joinQueue")
    @_guarded("/game/joinQueue", "Error: ")
    def join_queue() -> Response:
        data = _json_body()
        if not _has_strings(data, "username") or not _is_int(data.get("score")):
            return _text("Invalid request: Missing username or score.", 400)
        log.info("Received joinQueue request. Username: %s, Score: %d", data["username"], data["score"])
        manager.add_to_queue(data["username"], data["score"])
        return _text("Player added to queue.", 200)

    @app.post("/matchmaking/queue")
    @_guarded("/matchmaking/queue", "Error: ")
    def matchmaking_queue() -> Response:
        data = _json_body()
        if not _has_strings(data, "username") or not _is_int(data.get("score")):
            return _text("Invalid request: Missing username or score.", 400)
        session_id = manager.find_or_create_session(data["username"], data["score"])
        log.info("Player %s added to session %s", data["username"], session_id)
        return jsonify(status="success", sessionId=session_id)

    @app.get("/matchmaking/status/<session_id>")
    def matchmaking_status(session_id: str) -> Response:
        session = manager.get_session(session_id)
        if session is None:
            log.error("Session not found: %s", session_id)
            return _text("Session not found.", 404)
        return jsonify(
            status="ready" if session.is_ready else "waiting",
            sessionId=session_id,
            currentPlayers=len(session.players),
            requiredPlayers=session.required_players,
            players=sorted(session.players),
        )

    @app.post("/game/syncPlayers")
    @_guarded("/game/syncPlayers", "Error: ")
    def sync_players() -> Response:
        found = _session_from_body(_json_body())
        if isinstance(found, Response):
            return found
        game_players = found.game.players
        for slot, (_, source) in enumerate(sorted(found.players.items())):
            if slot >= len(game_players):
                break
            if game_players[slot] is None:
                game_players[slot] = Player(source.name, Weapon(), source.position)
                log.debug("Player added to Game: %s", source.name)
            else:
                game_players[slot].position = source.position
                log.debug("Player updated in Game: %s", source.name)

        for game_player in game_players:
            if game_player is not None and game_player.eliminated:
                found.players.pop(game_player.name, None)
                log.debug("Removed eliminated player from session: %s", game_player.name)

        players = [
            {**_player_json(name, p), "score": p.points}
            for name, p in sorted(found.players.items())
        ]
        return jsonify(players=players)

    return app


def start_matchmaking(sessions: SessionManager, interval: float = MATCHMAKING_INTERVAL) -> threading.Event:
    """Match queued players in a background thread; set the returned event to stop it."""
    stop = threading.Event()

    def run() -> None:
        while not stop.is_set():
            sessions.match_players()
            stop.wait(interval)

    threading.Thread(target=run, name="matchmaking", daemon=True).start()
    return stop


def main(argv: Sequence[str] | None = None) -> int:
    """Run the game server."""
    parser = argparse.ArgumentParser(prog="titanvanguard-server", description="Run the game server.")
    parser.add_argument("--host", default="0.0.0.0", help="address to listen on")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="port to listen on")
    parser.add_argument("--database", default=DEFAULT_PATH, help="path of the user database")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    with UserDatabase(args.database) as database:
        sessions = SessionManager()
        stop = start_matchmaking(sessions)
        try:
            create_app(database, sessions).run(host=args.host, port=args.port, threaded=True)
        finally:
            stop.set()
    return 0