"""Walls and the bombs hidden in some of them."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

Position = tuple[int, int]


class WallType(IntEnum):
    """Kinds of wall, numbered as the map tiles that show them."""

    DESTRUCTIBLE_WALL = 2
    DESTRUCTIBLE_WALL_WITH_BOMB = 3
    NON_DESTRUCTIBLE_WALL = 4


@dataclass
class Bomb:
    """A bomb at a fixed map position."""

    position: Position
    active: bool = True


@dataclass
class Wall:
    """A wall cell with its durability and an optional bomb."""

    position: Position
    type: WallType
    durability: int
    destructible: bool
    bomb: Bomb | None = None

    def reduce_durability(self) -> None:
        """Take one point of durability from a destructible wall."""
        if self.destructible and self.durability > 0:
            self.durability -= 1

    def destroy(self) -> None:
        """Bring a destructible wall's durability down to zero."""
        if self.destructible:
            self.durability = 0

    def has_bomb(self) -> bool:
        return self.bomb is not None