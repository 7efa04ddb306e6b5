"""Players moving on the map."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .wall import Position
from .weapon import Weapon

if TYPE_CHECKING:
    from .gamemap import GameMap

log = logging.getLogger(__name__)

_STEPS = {
    "w": (-1, 0),
    "s": (1, 0),
    "a": (0, -1),
    "d": (0, 1),
}


@dataclass(eq=False)
class Player:
    """A player with a weapon, lives, points and a score."""

    name: str
    weapon: Weapon = field(default_factory=Weapon)
    position: Position = (0, 0)
    initial_position: Position | None = None
    points: int = 0
    lives: int = 3
    score: int = 0
    speed_boost_used: bool = False
    eliminated: bool = False
    direction: str = " "

    def __post_init__(self) -> None:
        self.position = tuple(self.position)
        if self.initial_position is None:
            self.initial_position = self.position

    def move(self, game_map: GameMap, direction: str) -> bool:
        """Face ``direction`` and step one cell if possible; return whether it moved."""
        self.direction = direction
        step = _STEPS.get(direction)
        if step is None:
            log.warning("Invalid direction %r", direction)
            return False

        row, col = self.position[0] + step[0], self.position[1] + step[1]
        if not (0 <= row < game_map.height and 0 <= col < game_map.width):
            log.info("Cannot move outside map boundaries!")
            return False
        if not game_map.is_movable(row, col):
            log.info("Cannot move to wall or occupied space!")
            return False

        self.position = (row, col)
        log.info("Player %s moved to position %s", self.name, self.position)
        return True

    def reset_position(self) -> None:
        log.debug("Resetting player %s to %s", self.name, self.initial_position)
        self.position = self.initial_position

    def hit(self) -> None:
        """Lose a life, or be eliminated when none are left."""
        if self.lives > 0:
            self.lives -= 1
            log.info("Player %s was hit; lives remaining: %d", self.name, self.lives)
        else:
            log.info("Game over for player %s: no more lives", self.name)
            self.eliminate()

    def eliminate(self) -> None:
        self.eliminated = True
        log.info("Player %s has been eliminated.", self.name)

    def add_points(self, points: int) -> None:
        self.points += points
        log.debug("Player %s gained %d points. Total: %d", self.name, points, self.points)