"""Game sessions, the matchmaking queue and the manager that owns them."""

from __future__ import annotations

import logging
import random
import threading
import time
from collections import deque
from collections.abc import Iterable
from dataclasses import InitVar, dataclass, field

from .game import Game
from .gamemap import GameMap
from .player import Player
from .weapon import Weapon

log = logging.getLogger(__name__)

SESSION_REQUIRED_PLAYERS = 2
MAX_SESSION_ID = 1_000_000
MATCH_SIZE = 4
MIN_MATCH_SIZE = 2


@dataclass(eq=False)
class GameSession:
    """A lobby of players waiting for, or playing, one game."""

    session_id: str
    required_players: int
    players: dict[str, Player] = field(default_factory=dict)
    is_ready: bool = False
    last_joined: str = ""
    last_left: str = ""
    game: Game = field(init=False)
    rng: InitVar[random.Random | None] = None

    def __post_init__(self, rng: random.Random | None) -> None:
        self.game = Game()
        self.game.generate_map(self.required_players, rng)

    @property
    def game_map(self) -> GameMap:
        return self.game.game_map

    def player(self, username: str) -> Player | None:
        """The session's player of that name, or None."""
        found = self.players.get(username)
        if found is None:
            log.debug("Player not found: %s", username)
        else:
            log.debug("Player found: %s", username)
        return found


@dataclass
class WaitingPlayer:
    """A user waiting in the matchmaking queue."""

    username: str
    score: int
    join_time: float = field(default_factory=time.monotonic)


class SessionManager:
    """Creates sessions, lets players join and leave, and matches queued players."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng if rng is not None else random.Random()
        self.sessions: dict[str, GameSession] = {}
        self.waiting_queue: deque[WaitingPlayer] = deque()
        self._lock = threading.RLock()

    def create_session(self, required_players: int) -> str:
        """Open a new session and return its id.

        Every session needs exactly two players; the requested number is
        only logged.
        """
        with self._lock:
            log.debug("Session requested for %d players", required_players)
            session_id = str(self._rng.randint(1, MAX_SESSION_ID))
            session = GameSession(session_id, SESSION_REQUIRED_PLAYERS, rng=self._rng)
            self.sessions[session_id] = session
            log.info(
                "Created session with ID: %s and %d required players.",
                session_id,
                SESSION_REQUIRED_PLAYERS,
            )
            return session_id

    def join_session(self, session_id: str, username: str) -> bool:
        """Add a player to a session that is not yet full; return whether it worked."""
        with self._lock:
            session = self.sessions.get(session_id)
            if session is None or session.is_ready:
                log.warning("Session %s not found or already full.", session_id)
                return False
            if username in session.players:
                log.warning("Player %s is already in the session.", username)
                return False

            session.players[username] = Player(username, Weapon(), (0, 0))
            session.last_joined = username
            session.last_left = ""
            log.info("Player %s joined session %s", username, session_id)

            if len(session.players) >= session.required_players:
                session.is_ready = True
            return True

    def leave_session(self, session_id: str, username: str) -> None:
        """Remove a player from a session; unknown sessions are ignored."""
        with self._lock:
            session = self.sessions.get(session_id)
            if session is None:
                return
            session.players.pop(username, None)
            session.last_left = username
            session.last_joined = ""
            log.info("Player %s left session %s", username, session_id)
            if len(session.players) < session.required_players:
                session.is_ready = False

    def get_session(self, session_id: str) -> GameSession | None:
        with self._lock:
            return self.sessions.get(session_id)

    def session_status(self, session_id: str) -> GameSession:
        """The session with that id; raises KeyError if there is none."""
        with self._lock:
            try:
                return self.sessions[session_id]
            except KeyError:
                raise KeyError(f"Session not found: {session_id}") from None

    def add_to_queue(self, username: str, score: int) -> WaitingPlayer:
        with self._lock:
            waiting = WaitingPlayer(username, score)
            self.waiting_queue.append(waiting)
            log.info("Player %s added to queue with score: %d", username, score)
            return waiting

    def match_players(self) -> list[str]:
        """Group queued players into matches of up to four; return the new session ids."""
        created: list[str] = []
        with self._lock:
            while len(self.waiting_queue) >= MIN_MATCH_SIZE:
                selected = [
                    self.waiting_queue.popleft()
                    for _ in range(min(MATCH_SIZE, len(self.waiting_queue)))
                ]
                for waiting in selected:
                    log.info("Adding player to session: %s", waiting.username)
                created.append(self.create_match(selected))
        return created

    def create_match(self, players: Iterable[WaitingPlayer | None]) -> str:
        """Start a ready session for the given queued players and return its id."""
        with self._lock:
            present = [waiting for waiting in players if waiting is not None]
            session_id = self.create_session(MATCH_SIZE)
            session = self.sessions[session_id]
            for waiting in present:
                self.join_session(session_id, waiting.username)

            session.game = Game(GameMap(), session.players)
            session.is_ready = True
            log.info(
                "Game session %s created with players: %s",
                session_id,
                " ".join(waiting.username for waiting in present),
            )
            return session_id

    def manage_session(self, session_id: str) -> list[Player]:
        """Finish a session: rank its game's players and remove the session."""
        with self._lock:
            session = self.sessions.get(session_id)
            if session is None:
                raise KeyError(f"Session not found: {session_id}")

        log.info("Game session %s started.", session_id)
        ranking = session.game.determine_winner()

        with self._lock:
            self.sessions.pop(session_id, None)
        log.info("Game session %s ended.", session_id)
        return ranking

    def find_or_create_session(self, username: str, score: int) -> str:
        """Put the user in the first open session, or in a new one; return its id."""
        with self._lock:
            for session_id in sorted(self.sessions):
                session = self.sessions[session_id]
                if not session.is_ready and len(session.players) < session.required_players:
                    self.join_session(session_id, username)
                    return session_id

            session_id = self.create_session(MATCH_SIZE)
            self.join_session(session_id, username)
            return session_id