"""Tests for the tile rule table, world model and layout helpers."""

import pytest

from robologic.environment import (
    HAZARD_COLORS,
    PICK_EFFECTS,
    USE_EFFECTS,
    Direction,
    TileClass,
    TileEffect,
    TileKind,
    WorldState,
    classify,
    find_start,
    goal_cells,
    grid_shortest_path,
    hazard_color,
    parse_layout,
    render_ascii,
)


def test_classify_covers_every_tile_kind():
    assert classify(TileKind.WALL) is TileClass.BLOCKING
    assert classify(None) is TileClass.BLOCKING
    assert classify(TileKind.DOOR_LOCKED) is TileClass.LOCKED
    assert classify(TileKind.GOAL) is TileClass.WINNING
    for tile in (
        TileKind.FLOOR,
        TileKind.START,
        TileKind.HAZARD_A,
        TileKind.HAZARD_B,
        TileKind.HAZARD_C,
        TileKind.DOOR_OPEN,
    ):
        assert classify(tile) is TileClass.PASSABLE


def test_locked_door_blocks_like_a_wall():
    assert TileClass.LOCKED.is_blocking
    assert TileClass.BLOCKING.is_blocking
    assert not TileClass.PASSABLE.is_blocking
    assert not TileClass.WINNING.is_blocking


def test_classify_accepts_raw_level_codes():
    assert classify(1) is TileClass.BLOCKING
    assert classify(9) is TileClass.WINNING
    assert classify(0) is TileClass.PASSABLE


def test_hazard_effect_tables():
    assert PICK_EFFECTS[TileKind.HAZARD_C] is TileEffect.KEY
    assert PICK_EFFECTS[TileKind.HAZARD_A] is TileEffect.FIRE
    assert USE_EFFECTS[TileKind.DOOR_LOCKED] is TileEffect.DOOR
    assert USE_EFFECTS[TileKind.HAZARD_B] is TileEffect.WATER
    assert TileKind.HAZARD_B not in PICK_EFFECTS


def test_hazard_colors():
    assert set(HAZARD_COLORS) == {"red", "blue", "yellow"}
    assert hazard_color(TileKind.HAZARD_A) == "red"
    assert hazard_color(TileKind.HAZARD_B) == "blue"
    assert hazard_color(TileKind.HAZARD_C) == "yellow"
    assert hazard_color(TileKind.FLOOR) is None


def test_direction_rotation_wraps():
    assert Direction.UP.rotate(1) is Direction.RIGHT
    assert Direction.UP.rotate(-1) is Direction.LEFT
    assert Direction.LEFT.rotate(1) is Direction.UP
    assert Direction.RIGHT.rotate(2) is Direction.LEFT
    assert Direction.DOWN.offset == (0, 1)
    assert Direction.UP.offset == (0, -1)


def test_world_from_grid_places_robot_on_start():
    grid = parse_layout([".....", "..S..", "....F"])
    world = WorldState.from_grid(grid, Direction.RIGHT, starting_resource=5)

    assert world.robot.position == (2, 1)
    assert world.robot.facing is Direction.RIGHT
    assert world.robot.inventory is None
    assert world.robot.resource == 5
    assert world.width == 5
    assert world.height == 3


def test_world_from_grid_copies_level_data():
    grid = parse_layout(["S.F"])
    world = WorldState.from_grid(grid)
    world.set_tile(1, 0, TileKind.WALL)
    assert grid[0][1] == TileKind.FLOOR


def test_world_from_grid_requires_start():
    with pytest.raises(ValueError):
        WorldState.from_grid(parse_layout(["..F"]))


def test_tile_lookups_and_bounds():
    world = WorldState.from_grid(parse_layout(["S.W", "..F"]), Direction.RIGHT)
    assert world.tile_ahead() == TileKind.FLOOR
    assert world.cell_ahead() == (1, 0)
    assert world.tile_at(2, 0) == TileKind.WALL
    assert world.tile_at(3, 0) is None
    assert world.tile_at(0, -1) is None
    assert world.tile_under_robot() == TileKind.START

    world.robot.facing = Direction.UP
    assert world.classify_ahead() is TileClass.BLOCKING


def test_snapshot_is_independent():
    world = WorldState.from_grid(parse_layout(["S.F"]), Direction.RIGHT)
    copy = world.snapshot()
    world.robot.x = 1
    world.set_tile(2, 0, TileKind.WALL)
    assert copy.robot.x == 0
    assert copy.grid[0][2] == TileKind.GOAL


def test_parse_layout_rejects_unknown_characters():
    with pytest.raises(ValueError):
        parse_layout(["S.X"])


def test_parse_layout_legend():
    grid = parse_layout(["SWFRBYDO."])
    assert grid[0] == [
        TileKind.START,
        TileKind.WALL,
        TileKind.GOAL,
        TileKind.HAZARD_A,
        TileKind.HAZARD_B,
        TileKind.HAZARD_C,
        TileKind.DOOR_LOCKED,
        TileKind.DOOR_OPEN,
        TileKind.FLOOR,
    ]


def test_find_start_and_goal_cells():
    grid = parse_layout(["..F", "S..", "F.."])
    assert find_start(grid) == (0, 1)
    assert goal_cells(grid) == [(2, 0), (0, 2)]


def test_grid_shortest_path_avoids_walls():
    grid = parse_layout(["S.W", "..W", "..F"])
    path = grid_shortest_path(grid, (0, 0), (2, 2))
    assert path is not None
    assert path[0] == (0, 0)
    assert path[-1] == (2, 2)
    assert len(path) == 5
    assert all(grid[y][x] != TileKind.WALL for x, y in path)


def test_grid_shortest_path_respects_locked_doors_when_asked():
    grid = parse_layout(["SDF"])
    assert grid_shortest_path(grid, (0, 0), (2, 0)) == [(0, 0), (1, 0), (2, 0)]
    assert grid_shortest_path(grid, (0, 0), (2, 0), doors_open=False) is None


def test_render_ascii_draws_robot_facing():
    world = WorldState.from_grid(parse_layout(["S.W", "..F"]), Direction.RIGHT)
    assert render_ascii(world) == "> . ██\n. . F"

    world.robot.facing = Direction.DOWN
    assert render_ascii(world).splitlines()[0].startswith("v ")
