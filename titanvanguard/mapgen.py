"""Random generation of game maps."""

from __future__ import annotations

import logging
import random
from enum import IntEnum

from .wall import Bomb, Position, Wall, WallType

log = logging.getLogger(__name__)

MIN_HEIGHT = 13
MAX_HEIGHT = 25
MIN_WIDTH = 20
MAX_WIDTH = 40
MAX_PLAYERS = 4
INDESTRUCTIBLE_DURABILITY = 99999


class MapTile(IntEnum):
    """Values stored in a map matrix cell."""

    PLAYER_POSITION = 0
    FREE_SPACE = 1
    DESTRUCTIBLE_WALL = 2
    DESTRUCTIBLE_WALL_WITH_BOMB = 3
    NON_DESTRUCTIBLE_WALL = 4


_FREE = MapTile.FREE_SPACE.value
_PLAYER = MapTile.PLAYER_POSITION.value
_DESTRUCTIBLE = MapTile.DESTRUCTIBLE_WALL.value
_BOMB = MapTile.DESTRUCTIBLE_WALL_WITH_BOMB.value
_SOLID = MapTile.NON_DESTRUCTIBLE_WALL.value


class MapGenerator:
    """Builds a random map: wall clusters, connectors, bombs and start corners.

    The dimensions are drawn when the generator is created; ``generate``
    fills ``matrix``, ``walls`` and ``bombs``.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng if rng is not None else random.Random()
        self.height: int = self._rng.randint(MIN_HEIGHT, MAX_HEIGHT)
        self.width: int = self._rng.randint(MIN_WIDTH, MAX_WIDTH)
        self.matrix: list[list[int]] = []
        self.walls: list[Wall] = []
        self.bombs: list[Bomb] = []

    def generate(self, num_players: int) -> list[list[int]]:
        """Generate a fresh map for ``num_players`` players and return its matrix."""
        if not 0 <= num_players <= MAX_PLAYERS:
            raise ValueError(f"number of players must be between 0 and {MAX_PLAYERS}, got {num_players}")
        log.debug("Initialising map matrix of size (%d, %d)", self.height, self.width)
        self.matrix = [[_FREE] * self.width for _ in range(self.height)]
        self.walls = []
        self.bombs = []
        self._generate_clusters()
        self._place_connector_walls()
        self._set_player_start_positions(num_players)
        self._place_bombs()
        log.debug("Map generated with size (%d, %d).\n%s", self.height, self.width, self.render())
        self._generate_non_destructible_walls()
        return self.matrix

    def render(self) -> str:
        """Return the matrix as text, one row per line."""
        return "\n".join(" ".join(str(int(cell)) for cell in row) for row in self.matrix)

    def _add_wall(self, position: Position, durability: int, destructible: bool) -> None:
        wall_type = WallType.DESTRUCTIBLE_WALL if destructible else WallType.NON_DESTRUCTIBLE_WALL
        self.walls.append(Wall(position, wall_type, durability, destructible))

    def _in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.height and 0 <= col < self.width

    def _area_is_free(self, rows: range, cols: range) -> bool:
        return all(
            self.matrix[r][c] == _FREE
            for r in rows
            for c in cols
            if self._in_bounds(r, c)
        )

    def _generate_clusters(self) -> None:
        rng = self._rng
        for _ in range(rng.randint(6, 12)):
            start_y = rng.randint(2, self.height - 4)
            start_x = rng.randint(2, self.width - 4)
            cluster_height = rng.randint(3, 5)
            cluster_width = rng.randint(3, 5)

            rows = range(start_x - 1, start_x + cluster_width + 1)
            cols = range(start_y - 1, start_y + cluster_height + 1)
            if not self._area_is_free(rows, cols):
                continue

            hollow = rng.randint(0, 1) == 1
            last_x = start_x + cluster_width - 1
            last_y = start_y + cluster_height - 1
            for x in range(start_x, min(start_x + cluster_width, self.height - 1)):
                for y in range(start_y, min(start_y + cluster_height, self.width - 1)):
                    on_edge = x in (start_x, last_x) or y in (start_y, last_y)
                    if (not hollow or on_edge) and rng.randint(0, 100) < 90:
                        self.matrix[x][y] = _DESTRUCTIBLE
                        self._add_wall((x, y), 1, True)

    def _near_destructible(self, x: int, y: int) -> bool:
        return any(
            self.matrix[x + dx][y + dy] == _DESTRUCTIBLE
            for dx in (-1, 0, 1)
            for dy in (-1, 0, 1)
            if self._in_bounds(x + dx, y + dy)
        )

    def _place_connector_walls(self) -> None:
        rng = self._rng
        for x in range(1, self.height - 1):
            for y in range(1, self.width - 1):
                if self.matrix[x][y] != _FREE or not self._near_destructible(x, y):
                    continue
                if rng.randint(0, 2) != 0:
                    continue
                # The connector tile lands on the mirrored cell, while the
                # wall itself is recorded at (x, y).
                if self._in_bounds(y, x):
                    self.matrix[y][x] = _DESTRUCTIBLE
                destructible = rng.randint(0, 80) == 1
                self._add_wall((x, y), 1, destructible)

    def _set_player_start_positions(self, num_players: int) -> None:
        corners = [
            (0, 0),
            (self.height - 1, 0),
            (0, self.width - 1),
            (self.height - 1, self.width - 1),
        ]
        self._rng.shuffle(corners)
        for row, col in corners[:num_players]:
            self.matrix[row][col] = _PLAYER

    def _place_bombs(self) -> None:
        bomb_count = self._rng.randint(0, 3)
        eligible = [wall for wall in self.walls if wall.destructible]
        if not eligible:
            return
        self._rng.shuffle(eligible)
        for wall in eligible[:bomb_count]:
            row, col = wall.position
            self.bombs.append(Bomb(wall.position))
            self.matrix[row][col] = _BOMB

    def _generate_non_destructible_walls(self) -> None:
        rng = self._rng
        for row in range(1, self.height - 1):
            for col in range(1, self.width - 1):
                if rng.randint(0, 100) < 10:
                    self.matrix[row][col] = _SOLID
                    self._add_wall((row, col), INDESTRUCTIBLE_DURABILITY, False)