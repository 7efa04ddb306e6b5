"""The playing field: a tile matrix with its walls and bombs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .mapgen import MapTile
from .wall import Bomb, Position, Wall, WallType

if TYPE_CHECKING:
    from .mapgen import MapGenerator

MAX_BOMBS = 3
OUT_OF_BOUNDS = -1


@dataclass
class GameMap:
    """A rectangular map of tiles indexed as ``matrix[row][col]``."""

    matrix: list[list[int]] = field(default_factory=list)
    walls: list[Wall] = field(default_factory=list)
    bombs: list[Bomb] = field(default_factory=list)

    @classmethod
    def from_generator(cls, generator: MapGenerator) -> GameMap:
        """Build a map from a generator that has already generated its matrix."""
        matrix = [list(row) for row in generator.matrix]
        walls = [
            Wall(
                wall.position,
                WallType.DESTRUCTIBLE_WALL if wall.destructible else WallType.NON_DESTRUCTIBLE_WALL,
                wall.durability,
                wall.destructible,
            )
            for wall in generator.walls
        ]
        bombs = [Bomb(bomb.position) for bomb in generator.bombs if bomb.active][:MAX_BOMBS]
        return cls(matrix, walls, bombs)

    @property
    def height(self) -> int:
        return len(self.matrix)

    @property
    def width(self) -> int:
        return len(self.matrix[0]) if self.matrix else 0

    def _in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.height and 0 <= y < self.width

    def player_start_positions(self) -> list[Position]:
        """Every player tile, in row-major order."""
        return [
            (row, col)
            for row, cells in enumerate(self.matrix)
            for col, value in enumerate(cells)
            if value == MapTile.PLAYER_POSITION
        ]

    def is_position_free(self, position: Position) -> bool:
        """False only where a wall with negative durability stands."""
        return not any(
            wall.position == tuple(position) and wall.durability < 0 for wall in self.walls
        )

    def is_movable(self, x: int, y: int) -> bool:
        """Whether a player may step onto the cell."""
        if not self._in_bounds(x, y):
            return False
        if not self.is_position_free((x, y)):
            return False
        return self.matrix[x][y] == MapTile.FREE_SPACE

    def wall_at(self, x: int, y: int) -> Wall | None:
        return next((wall for wall in self.walls if wall.position == (x, y)), None)

    def bomb_at(self, x: int, y: int) -> Bomb | None:
        return next((bomb for bomb in self.bombs if bomb.position == (x, y)), None)

    def set_free_position(self, x: int, y: int) -> None:
        if not self._in_bounds(x, y):
            raise IndexError(f"position ({x}, {y}) is outside the map")
        self.matrix[x][y] = MapTile.FREE_SPACE.value

    def cell(self, x: int, y: int) -> int:
        """The tile value at the cell, or -1 outside the map."""
        if not self._in_bounds(x, y):
            return OUT_OF_BOUNDS
        return self.matrix[x][y]

    def set_cell(self, x: int, y: int, value: int) -> None:
        """Set a tile value; cells outside the map are ignored."""
        if self._in_bounds(x, y):
            self.matrix[x][y] = int(value)