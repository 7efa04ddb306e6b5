"""Client-side view of a running game: the tile map, players and bullets."""

from __future__ import annotations

import logging
from typing import Protocol

from ..mapgen import MapTile
from .api import BulletInfo, ClientError

log = logging.getLogger(__name__)

MAP_PLAYERS = 2
PLAYER_GLYPHS = ("1", "2", "3", "4")
BULLET_GLYPH = "o"
UNKNOWN_GLYPH = " "
TILE_GLYPHS = {
    MapTile.FREE_SPACE.value: ".",
    MapTile.DESTRUCTIBLE_WALL.value: "#",
    MapTile.DESTRUCTIBLE_WALL_WITH_BOMB.value: "*",
    MapTile.NON_DESTRUCTIBLE_WALL.value: "@",
}

# Facing of the player's sprite for each movement key: (rotation in degrees, mirrored).
FACINGS = {
    "w": (270, False),
    "s": (90, False),
    "a": (0, True),
    "d": (0, False),
}
SHOOT_KEYS = (" ", "space")

_PLAYER = MapTile.PLAYER_POSITION.value
_FREE = MapTile.FREE_SPACE.value


class _Client(Protocol):
    def request_map(self, session_id: str, num_players: int) -> list[list[int]]: ...

    def shoot(self, session_id: str, username: str, direction: str) -> tuple[int, int]: ...

    def sync_bullets(self, session_id: str) -> list[BulletInfo]: ...

    def update_walls(self, session_id: str) -> list[tuple[int, int]]: ...

    def sync_players(self, session_id: str) -> list[dict]: ...

    def move(self, session_id: str, username: str, direction: str) -> dict[str, tuple[int, int]]: ...


class BoardView:
    """The local copy of a session's board, kept in step with the server."""

    def __init__(self, client: _Client, session_id: str, username: str) -> None:
        self.client = client
        self.session_id = session_id
        self.username = username
        self.map_data: list[list[int]] = []
        self.bullets: list[BulletInfo] = []
        self.player_positions: dict[str, tuple[int, int]] = {}
        self.player_scores: dict[str, int] = {}
        self.current_direction = ""
        self.rotation = 0
        self.mirrored = False
        self.is_updating = False

    def _in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < len(self.map_data) and 0 <= y < len(self.map_data[x])

    def _clear_players(self) -> None:
        for row in self.map_data:
            row[:] = [_FREE if value == _PLAYER else value for value in row]

    def _place_player(self, x: int, y: int) -> None:
        if self._in_bounds(x, y):
            self.map_data[x][y] = _PLAYER
        else:
            log.warning("Player position (%d, %d) is outside the map", x, y)

    def load_map(self) -> list[list[int]]:
        """Fetch the session's map from the server and keep it."""
        log.debug("Fetching map data...")
        self.map_data = [list(row) for row in self.client.request_map(self.session_id, MAP_PLAYERS)]
        return self.map_data

    def update_player_position(self, x: int, y: int) -> None:
        """Show a single player at the cell, clearing every other player tile."""
        if not self._in_bounds(x, y):
            raise IndexError(f"position ({x}, {y}) is outside the map")
        self._clear_players()
        self.map_data[x][y] = _PLAYER

    def press_key(self, key: str) -> bool:
        """Handle a key: w/a/s/d move and turn, space shoots; return whether it was used."""
        key = key.lower() if key not in SHOOT_KEYS else key
        if key in FACINGS:
            self.current_direction = key
            self.rotation, self.mirrored = FACINGS[key]
            self.move(key)
            return True
        if key in SHOOT_KEYS:
            if self.current_direction and not self.is_updating:
                self.shoot(self.current_direction)
            return True
        return False

    def shoot(self, direction: str) -> tuple[int, int]:
        """Fire a bullet and return the cell the server says it starts from."""
        if not self.session_id or not self.username:
            raise ValueError("session id and username must not be empty")
        start = self.client.shoot(self.session_id, self.username, direction)
        log.debug("Bullet shot from %s", start)
        return start

    def sync_bullets(self) -> list[BulletInfo]:
        """Replace the local bullets with the server's."""
        if not self.session_id:
            raise ValueError("session id must not be empty")
        self.bullets = list(self.client.sync_bullets(self.session_id))
        return self.bullets

    def update_walls(self) -> list[tuple[int, int]]:
        """Clear the cells whose walls the server reports destroyed."""
        if not self.session_id:
            raise ValueError("session id must not be empty")
        cells = self.client.update_walls(self.session_id)
        for x, y in cells:
            if self._in_bounds(x, y):
                self.map_data[x][y] = _FREE
            else:
                log.warning("Updated cell (%d, %d) is outside the map", x, y)
        return cells

    def sync_players(self) -> dict[str, tuple[int, int]]:
        """Replace player positions and scores with the server's."""
        if not self.session_id:
            raise ValueError("session id must not be empty")
        players = self.client.sync_players(self.session_id)
        self._clear_players()
        self.player_positions = {}
        for player in players:
            name = player["username"]
            x, y = player["x"], player["y"]
            self.player_scores[name] = player.get("score", 0)
            self.player_positions[name] = (x, y)
            self._place_player(x, y)
        return self.player_positions

    def move(self, direction: str) -> dict[str, tuple[int, int]]:
        """Ask the server to move our player and redraw every player it reports."""
        positions = self.client.move(self.session_id, self.username, direction)
        self._clear_players()
        for name, (x, y) in positions.items():
            self.player_positions[name] = (x, y)
            self._place_player(x, y)
        return positions

    def tick(self) -> list[ClientError]:
        """Run one refresh: bullets, walls, then players; return the failures met."""
        errors: list[ClientError] = []
        for step in (self.sync_bullets, self.update_walls, self.sync_players):
            try:
                step()
            except ClientError as exc:
                log.warning("Refresh step %s failed: %s", step.__name__, exc)
                errors.append(exc)
        log.debug("Player positions: %s", self.player_positions)
        log.debug("Current map state:\n%s", self.render())
        return errors

    def render(self) -> str:
        """The board as text, one row per line, with bullets drawn over the tiles."""
        if not self.map_data:
            return ""
        bullet_cells = {(bullet.x, bullet.y) for bullet in self.bullets}
        player_index = 0
        lines = []
        for r, row in enumerate(self.map_data):
            glyphs = []
            for c, value in enumerate(row):
                if value == _PLAYER:
                    glyph = PLAYER_GLYPHS[player_index]
                    player_index = (player_index + 1) % len(PLAYER_GLYPHS)
                else:
                    glyph = TILE_GLYPHS.get(value, UNKNOWN_GLYPH)
                if (r, c) in bullet_cells:
                    glyph = BULLET_GLYPH
                glyphs.append(glyph)
            lines.append("".join(glyphs))
        return "\n".join(lines)