import random

import pytest

from titanvanguard.gamemap import GameMap
from titanvanguard.mapgen import MapGenerator, MapTile
from titanvanguard.wall import Bomb, Wall, WallType


def grid(rows):
    return GameMap([list(row) for row in rows])


def test_dimensions_follow_matrix():
    game_map = grid([[1, 1, 1], [1, 1, 1]])
    assert (game_map.height, game_map.width) == (2, 3)


def test_empty_map():
    game_map = GameMap()
    assert (game_map.height, game_map.width) == (0, 0)
    assert game_map.player_start_positions() == []


def test_start_positions_in_row_major_order():
    game_map = grid([[0, 1, 1], [1, 2, 0], [0, 1, 1]])
    assert game_map.player_start_positions() == [(0, 0), (1, 2), (2, 0)]


def test_is_movable():
    game_map = grid([[1, 2], [0, 1]])
    assert game_map.is_movable(0, 0)
    assert game_map.is_movable(1, 1)
    assert not game_map.is_movable(0, 1)
    assert not game_map.is_movable(1, 0)
    assert not game_map.is_movable(2, 0)
    assert not game_map.is_movable(-1, 0)
    assert not game_map.is_movable(0, -1)


def test_wall_with_negative_durability_blocks():
    game_map = grid([[1, 1]])
    game_map.walls.append(Wall((0, 1), WallType.DESTRUCTIBLE_WALL, -1, True))
    assert not game_map.is_position_free((0, 1))
    assert not game_map.is_movable(0, 1)
    assert game_map.is_position_free((0, 0))


def test_regular_wall_does_not_block_free_check():
    game_map = grid([[1, 2]])
    game_map.walls.append(Wall((0, 1), WallType.DESTRUCTIBLE_WALL, 1, True))
    assert game_map.is_position_free((0, 1))


def test_cell_out_of_bounds_is_minus_one():
    game_map = grid([[1, 4]])
    assert game_map.cell(0, 1) == MapTile.NON_DESTRUCTIBLE_WALL
    assert game_map.cell(5, 0) == -1
    assert game_map.cell(0, -1) == -1


def test_set_cell():
    game_map = grid([[1, 1], [1, 1]])
    game_map.set_cell(1, 0, MapTile.DESTRUCTIBLE_WALL)
    assert game_map.cell(1, 0) == MapTile.DESTRUCTIBLE_WALL


def test_set_cell_out_of_bounds_is_ignored():
    game_map = grid([[1, 1], [1, 1]])
    before = [list(row) for row in game_map.matrix]
    game_map.set_cell(9, 9, MapTile.NON_DESTRUCTIBLE_WALL)
    game_map.set_cell(-1, 0, MapTile.NON_DESTRUCTIBLE_WALL)
    assert game_map.matrix == before


def test_set_free_position():
    game_map = grid([[2, 4]])
    game_map.set_free_position(0, 1)
    assert game_map.cell(0, 1) == MapTile.FREE_SPACE
    with pytest.raises(IndexError):
        game_map.set_free_position(3, 3)


def test_wall_and_bomb_lookup():
    wall = Wall((1, 0), WallType.NON_DESTRUCTIBLE_WALL, 5, False)
    bomb = Bomb((0, 1))
    game_map = GameMap([[1, 3], [4, 1]], [wall], [bomb])
    assert game_map.wall_at(1, 0) is wall
    assert game_map.wall_at(0, 0) is None
    assert game_map.bomb_at(0, 1) is bomb
    assert game_map.bomb_at(1, 1) is None


def test_from_generator_copies_generated_map():
    generator = MapGenerator(random.Random(7))
    generator.generate(2)
    game_map = GameMap.from_generator(generator)
    assert game_map.matrix == generator.matrix
    assert game_map.matrix[0] is not generator.matrix[0]
    assert (game_map.height, game_map.width) == (generator.height, generator.width)
    assert [w.position for w in game_map.walls] == [w.position for w in generator.walls]
    assert [b.position for b in game_map.bombs] == [b.position for b in generator.bombs][:3]
    assert len(game_map.player_start_positions()) == 2
    game_map.set_cell(0, 0, MapTile.NON_DESTRUCTIBLE_WALL)
    assert generator.matrix[0][0] == MapTile.PLAYER_POSITION