"""Bullets travelling across the map."""

from __future__ import annotations

import logging
from dataclasses import dataclass

log = logging.getLogger(__name__)

_STEPS = {
    "w": (-1, 0),
    "s": (1, 0),
    "a": (0, -1),
    "d": (0, 1),
}


@dataclass
class Bullet:
    """A bullet at a map position heading in one of the directions w, a, s, d."""

    position: tuple[int, int] = (0, 0)
    direction: str = " "
    speed: float = 0.25
    active: bool = True

    def double_speed(self) -> None:
        self.speed *= 2

    def move(self, max_height: int, max_width: int) -> None:
        """Advance one cell and deactivate the bullet once it leaves the map."""
        if self.active:
            d_row, d_col = _STEPS.get(self.direction, (0, 0))
            row, col = self.position
            self.position = (row + d_row, col + d_col)
        log.debug("New coordinates: %s", self.position)

        row, col = self.position
        if row < 0 or col < 0 or row >= max_height or col >= max_width:
            self.active = False
            log.debug("Bullet is out of bounds")