"""A running game: players, bullets and the map they share."""

from __future__ import annotations

import logging
import random
from collections.abc import Mapping

from .bullet import Bullet
from .gamemap import GameMap
from .mapgen import MapGenerator, MapTile
from .player import Player
from .wall import Position
from .weapon import Weapon

log = logging.getLogger(__name__)

MAX_PLAYERS = 4
HIT_REWARD = 100
WIN_POINTS = 200
WIN_SCORE = 2
SECOND_SCORE = 1
UPGRADE_SCORE = 10
UPGRADE_REDUCTION = 0.5
EXPLOSION_RADIUS = 10


def _score_less(a: Player | None, b: Player | None) -> bool:
    return a is not None and a.score < (b.score if b is not None else 0)


def _max_element(players, less) -> Player | None:
    largest = players[0]
    for candidate in players[1:]:
        if less(largest, candidate):
            largest = candidate
    return largest


class Game:
    """The state of one match: up to four player slots, live bullets and the map."""

    def __init__(
        self,
        game_map: GameMap | None = None,
        session_players: Mapping[str, Player] | None = None,
    ) -> None:
        self.game_map = game_map if game_map is not None else GameMap()
        self.players: list[Player | None] = [None] * MAX_PLAYERS
        self.bullets: list[Bullet] = []
        self.updated_cells: list[Position] = []
        self._bullet_owners: dict[int, str] = {}
        self._bullet_counter = 0

        slots = iter(range(MAX_PLAYERS))
        for username in sorted(session_players or {}):
            source = session_players[username]
            slot = next(slots, None)
            if slot is None:
                log.warning("Too many players in session. Ignoring player: %s", username)
                continue
            self.players[slot] = Player(source.name, Weapon(), source.position)
            log.debug("Player added to Game: %s", source.name)

    def _present_players(self) -> list[Player]:
        return [player for player in self.players if player is not None]

    def _player_named(self, name: str) -> Player | None:
        return next((p for p in self._present_players() if p.name == name), None)

    def determine_winner(self) -> list[Player]:
        """Award the winner and runner-up; return the players ranked by points."""
        present = self._present_players()
        if not present:
            log.info("No players in the game.")
            return []
        ranking = sorted(present, key=lambda player: player.points, reverse=True)
        self.win_game()
        if len(ranking) > 1:
            self.finish_second()
        for player in ranking:
            log.info("Player %s: Points = %d, Score = %d", player.name, player.points, player.score)
        return ranking

    def win_game(self) -> Player | None:
        """Give the top scorer the winner's bonus and return them."""
        winner = _max_element(self.players, _score_less)
        if winner is not None:
            winner.points += WIN_POINTS
            winner.score += WIN_SCORE
            log.info("Player %s won the game", winner.name)
        return winner

    def finish_second(self) -> Player | None:
        """Give the second best scorer one score point and return them."""
        first = _max_element(self.players, _score_less)

        def less(a: Player | None, b: Player | None) -> bool:
            if a is first:
                return True
            if b is first:
                return False
            return _score_less(a, b)

        second = _max_element(self.players, less)
        if second is None or second is first:
            return None
        second.score += SECOND_SCORE
        log.info("Player %s finished second", second.name)
        return second

    def check_and_apply_weapon_upgrade(self) -> None:
        """Shorten the reload of every player who reached the upgrade score."""
        for player in self._present_players():
            if player.score >= UPGRADE_SCORE and not player.speed_boost_used:
                player.weapon.upgrade_waiting_time(UPGRADE_REDUCTION)
                player.speed_boost_used = True
                log.info("Player %s upgraded their weapon", player.name)

    def generate_map(self, num_players: int, rng: random.Random | None = None) -> None:
        """Generate a new map and place the players on its start positions."""
        generator = MapGenerator(rng)
        generator.generate(num_players)
        self.game_map = GameMap.from_generator(generator)

        starts = iter(self.game_map.player_start_positions())
        for player in self._present_players():
            start = next(starts, None)
            if start is None:
                break
            player.position = start
            player.initial_position = start
            log.info("Player %s placed at %s", player.name, start)

    def shoot_bullet(self, player: Player) -> Bullet:
        """Fire a bullet from the player's cell in the direction they face."""
        bullet = Bullet(tuple(player.position), player.direction)
        self.bullets.append(bullet)
        self._bullet_counter += 1
        self._bullet_owners[self._bullet_counter] = player.name
        log.info("Player %s shot a bullet at %s", player.name, bullet.position)
        return bullet

    def clear_updated_cells(self) -> None:
        self.updated_cells.clear()

    def player_positions(self) -> dict[str, Position]:
        """Positions of the players, keyed and ordered by name."""
        return {
            player.name: player.position
            for player in sorted(self._present_players(), key=lambda p: p.name)
        }

    def update_player_position(self, username: str, x: int, y: int) -> None:
        player = self._player_named(username)
        if player is None:
            return
        old_x, old_y = player.position
        self.game_map.set_cell(old_x, old_y, MapTile.FREE_SPACE)
        self.game_map.set_cell(x, y, MapTile.PLAYER_POSITION)
        player.position = (x, y)

    def _hit_player(self, victim: Player, bullet_id: int) -> None:
        victim.hit()
        shooter_name = self._bullet_owners.pop(bullet_id, None)
        if shooter_name is not None:
            shooter = self._player_named(shooter_name)
            if shooter is not None:
                shooter.add_points(HIT_REWARD)
        if victim.eliminated:
            self.game_map.set_cell(*victim.position, MapTile.FREE_SPACE)
        else:
            victim.reset_position()

    def _explode(self, x: int, y: int) -> None:
        for row in range(x - EXPLOSION_RADIUS, x + EXPLOSION_RADIUS + 1):
            for col in range(y - EXPLOSION_RADIUS, y + EXPLOSION_RADIUS + 1):
                if self.game_map.cell(row, col) == MapTile.DESTRUCTIBLE_WALL:
                    self.game_map.set_cell(row, col, MapTile.FREE_SPACE)
                    self.updated_cells.append((row, col))

    def update_bullets(self) -> None:
        """Advance every bullet one cell and resolve what it runs into."""
        height, width = self.game_map.height, self.game_map.width
        # Bullets are removed while walking the list, so an explicit cursor is kept.
        i = 0
        while i < len(self.bullets):
            bullet = self.bullets[i]
            bullet.move(height, width)
            x, y = bullet.position
            if not bullet.active or not (0 <= x < height and 0 <= y < width):
                log.debug("Bullet out of bounds at %s", bullet.position)
                del self.bullets[i]
                continue

            cell = self.game_map.cell(x, y)
            victim = next(
                (p for p in self._present_players() if tuple(p.position) == (x, y)), None
            )
            if victim is not None:
                log.info("Bullet hit player %s at (%d, %d)", victim.name, x, y)
                self._hit_player(victim, i + 1)
                del self.bullets[i]
                continue

            if cell == MapTile.DESTRUCTIBLE_WALL:
                self.game_map.set_cell(x, y, MapTile.FREE_SPACE)
                self.updated_cells.append((x, y))
                del self.bullets[i]
                continue
            if cell == MapTile.NON_DESTRUCTIBLE_WALL:
                del self.bullets[i]
                continue
            if cell == MapTile.DESTRUCTIBLE_WALL_WITH_BOMB:
                self.game_map.set_cell(x, y, MapTile.FREE_SPACE)
                self.updated_cells.append((x, y))
                self._explode(x, y)
                del self.bullets[i]
                continue

            other = next(
                (j for j, o in enumerate(self.bullets) if j != i and o.position == (x, y)),
                None,
            )
            if other is not None:
                log.debug("Bullet collided with another bullet at (%d, %d)", x, y)
                del self.bullets[max(i, other)]
                del self.bullets[min(i, other)]
                if other < i:
                    i -= 1
                continue

            i += 1