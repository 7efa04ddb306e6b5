"""A player's weapon and its reload timing."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable

log = logging.getLogger(__name__)

MIN_WAITING_TIME = 1.0


@dataclass
class Weapon:
    """A weapon that must wait ``waiting_time`` seconds between shots."""

    waiting_time: float = 4.0
    last_shot: float = 0.0
    clock: Callable[[], float] = field(default=time.time, repr=False, compare=False)

    def _now(self) -> float:
        return float(int(self.clock()))

    def can_shoot(self) -> bool:
        return self.last_shot + self.waiting_time <= self._now()

    def shoot(self) -> bool:
        """Fire if the weapon has reloaded; return whether it fired."""
        if not self.can_shoot():
            return False
        self.last_shot = self._now()
        return True

    def upgrade_waiting_time(self, reduction: float) -> None:
        """Shorten the reload time, never below one second."""
        self.waiting_time = max(MIN_WAITING_TIME, self.waiting_time - reduction)
        log.info("Waiting time upgraded. New waiting time: %.2f seconds", self.waiting_time)