"""HTTP client for the game server's account, lobby and in-game endpoints."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import requests

log = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8080"
DEFAULT_TIMEOUT = 10.0


class ClientError(Exception):
    """A request to the game server failed or got an unusable answer."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status


@dataclass(frozen=True)
class BulletInfo:
    """A bullet as the server reports it: map row, column and direction."""

    x: int
    y: int
    direction: str


@dataclass(frozen=True)
class GameStatus:
    """What the server says about a session's lobby."""

    session_id: str
    status: str
    current_players: int
    required_players: int
    players: tuple[str, ...] = ()
    last_joined: str | None = None
    last_left: str | None = None

    @property
    def is_ready(self) -> bool:
        return self.status == "ready"


def _int(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return int(value)
    return 0


def _str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _object(response: requests.Response) -> dict[str, Any]:
    """The response body as a JSON object, or an empty one if it is not."""
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _names(value: Any) -> tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(name for name in value if isinstance(name, str))


def _optional_str(data: dict[str, Any], key: str) -> str | None:
    return _str(data[key]) if key in data else None


class GameClient:
    """Synchronous client for one game server."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.timeout = DEFAULT_TIMEOUT
        self.current_session_id = ""

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _send(self, method: str, path: str, payload: dict[str, Any] | None = None) -> requests.Response:
        try:
            return self.session.request(
                method, self._url(path), json=payload, timeout=self.timeout
            )
        except requests.RequestException as exc:
            raise ClientError(str(exc)) from exc

    def _post(self, path: str, payload: dict[str, Any]) -> requests.Response:
        return self._send("POST", path, payload)

    def _get(self, path: str) -> requests.Response:
        return self._send("GET", path)

    @staticmethod
    def _check(response: requests.Response, messages: dict[int, str] | None = None) -> None:
        if response.ok:
            return
        status = response.status_code
        message = (
            (messages or {}).get(status)
            or response.text.strip()
            or response.reason
            or f"HTTP {status}"
        )
        raise ClientError(message, status)

    @staticmethod
    def _require(value: str, what: str) -> None:
        if not value:
            raise ValueError(f"{what} must not be empty")

    def login(self, username: str) -> tuple[str, int]:
        """Log in and return the stored username and score."""
        response = self._get(f"/login/{quote(username, safe='')}")
        self._check(response, {404: "User not found"})
        data = _object(response)
        if "username" not in data or "score" not in data:
            raise ClientError("Invalid server response", response.status_code)
        return _str(data["username"]), _int(data["score"])

    def register(self, username: str) -> None:
        """Register a new user name."""
        response = self._post("/register", {"username": username})
        self._check(response, {409: "Username already exists"})

    def create_game(self, required_players: int) -> GameStatus:
        """Open a new session; its creator counts as the first player."""
        response = self._post("/game/create", {"requiredPlayers": required_players})
        self._check(response)
        data = _object(response)
        if "sessionId" not in data:
            raise ClientError("sessionId missing in createGame response", response.status_code)
        self.current_session_id = _str(data["sessionId"])
        log.debug("Game created successfully, session ID: %s", self.current_session_id)
        return GameStatus(
            self.current_session_id, "waiting", 1, _int(data.get("requiredPlayers"))
        )

    def join_game(self, session_id: str, username: str, map_type: str) -> GameStatus:
        """Join a session with the chosen map type."""
        payload = {"sessionId": session_id, "username": username, "mapType": map_type}
        response = self._post("/game/join", payload)
        self._check(response)
        data = _object(response)
        if "sessionId" not in data:
            raise ClientError("sessionId missing in server response", response.status_code)
        self.current_session_id = _str(data["sessionId"])
        return GameStatus(
            self.current_session_id,
            _str(data.get("status")) or "waiting",
            _int(data.get("currentPlayers")),
            _int(data.get("requiredPlayers")),
        )

    def check_game_status(self, session_id: str) -> GameStatus:
        """The lobby state of a session."""
        self._require(session_id, "session id")
        response = self._get(f"/game/status/{quote(session_id, safe='')}")
        self._check(response)
        data = _object(response)
        log.debug("Game status: %s", data.get("status"))
        return GameStatus(
            _str(data.get("sessionId")) or session_id,
            _str(data.get("status")),
            _int(data.get("currentPlayers")),
            _int(data.get("requiredPlayers")),
            _names(data.get("players")),
            _optional_str(data, "lastJoined"),
            _optional_str(data, "lastLeft"),
        )

    def leave_game(self, session_id: str) -> None:
        response = self._post("/game/leave", {"sessionId": session_id})
        self._check(response)

    def request_map(self, session_id: str, num_players: int) -> list[list[int]]:
        """The session's tile matrix; empty if the server sent none."""
        response = self._post("/generateMap", {"sessionId": session_id, "numPlayers": num_players})
        self._check(response)
        rows = _object(response).get("map")
        if not isinstance(rows, list):
            return []
        return [[_int(cell) for cell in row] if isinstance(row, list) else [] for row in rows]

    def add_to_queue(self, username: str, score: int) -> None:
        response = self._post("/matchmaking/queue", {"username": username, "score": score})
        self._check(response)

    def check_match_status(self, session_id: str) -> GameStatus:
        """The matchmaking state of a session."""
        self._require(session_id, "session id")
        response = self._get(f"/matchmaking/status/{quote(session_id, safe='')}")
        self._check(response)
        data = _object(response)
        return GameStatus(
            _str(data.get("sessionId")) or session_id,
            _str(data.get("status")),
            _int(data.get("currentPlayers")),
            _int(data.get("requiredPlayers")),
            _names(data.get("players")),
        )

    def join_queue(self, username: str, score: int) -> str:
        """Enter matchmaking and return the session id the server placed us in."""
        response = self._post("/matchmaking/queue", {"username": username, "score": score})
        self._check(response)
        session_id = _str(_object(response).get("sessionId"))
        log.debug("Joined matchmaking queue. Session ID: %s", session_id)
        return session_id

    def shoot(self, session_id: str, username: str, direction: str) -> tuple[int, int]:
        """Fire a bullet and return the cell it starts from."""
        self._require(session_id, "session id")
        self._require(username, "username")
        payload = {"sessionId": session_id, "username": username, "direction": direction}
        response = self._post("/game/shoot", payload)
        self._check(response)
        data = _object(response)
        if "startX" not in data or "startY" not in data:
            raise ClientError("Invalid response from server for shootBullet", response.status_code)
        return _int(data["startX"]), _int(data["startY"])

    def sync_bullets(self, session_id: str) -> list[BulletInfo]:
        """Advance the session's bullets and return where they are."""
        self._require(session_id, "session id")
        response = self._post("/game/syncBullets", {"sessionId": session_id})
        self._check(response)
        data = _object(response)
        if "bullets" not in data:
            raise ClientError("Server response does not contain 'bullets'", response.status_code)
        entries = data["bullets"] if isinstance(data["bullets"], list) else []
        bullets = []
        for entry in entries:
            item = entry if isinstance(entry, dict) else {}
            bullets.append(
                BulletInfo(_int(item.get("x")), _int(item.get("y")), _str(item.get("direction"))[:1])
            )
        return bullets

    def update_walls(self, session_id: str) -> list[tuple[int, int]]:
        """Cells whose walls were destroyed since the last call."""
        self._require(session_id, "session id")
        response = self._post("/game/updateWalls", {"sessionId": session_id})
        self._check(response)
        if not response.content:
            return []
        data = _object(response)
        if "updatedCells" not in data:
            raise ClientError("No 'updatedCells' in server response", response.status_code)
        cells = data["updatedCells"] if isinstance(data["updatedCells"], list) else []
        return [
            (_int(cell.get("x")), _int(cell.get("y")))
            for cell in cells
            if isinstance(cell, dict)
        ]

    def sync_players(self, session_id: str) -> list[dict[str, Any]]:
        """Players still in the game: username, x, y and score; malformed entries are skipped."""
        self._require(session_id, "session id")
        response = self._post("/game/syncPlayers", {"sessionId": session_id})
        self._check(response)
        data = _object(response)
        if "players" not in data:
            raise ClientError("'players' field missing in server response", response.status_code)
        entries = data["players"] if isinstance(data["players"], list) else []
        players = []
        for entry in entries:
            if not isinstance(entry, dict) or not {"username", "x", "y"} <= entry.keys():
                log.warning("Malformed player object: %r", entry)
                continue
            players.append(
                {
                    "username": _str(entry["username"]),
                    "x": _int(entry["x"]),
                    "y": _int(entry["y"]),
                    "score": _int(entry.get("score")),
                }
            )
        return players

    def move(self, session_id: str, username: str, direction: str) -> dict[str, tuple[int, int]]:
        """Move a player and return every player's position by name."""
        payload = {"sessionId": session_id, "username": username, "direction": direction}
        response = self._post("/game/move", payload)
        self._check(response)
        data = _object(response)
        if "players" not in data:
            raise ClientError("No 'players' data in server response", response.status_code)
        entries = data["players"] if isinstance(data["players"], list) else []
        return {
            _str(entry.get("username")): (_int(entry.get("x")), _int(entry.get("y")))
            for entry in entries
            if isinstance(entry, dict)
        }