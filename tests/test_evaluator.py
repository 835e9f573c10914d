"""Tests for the single-primitive step evaluator."""

import pytest

from robologic.environment import Direction, TileKind, WorldState, parse_layout
from robologic.evaluator import evaluate, evaluate_unit, pick, step_forward, turn, use
from robologic.schemas import BoundedRepeat, Move, Outcome, Pick, StepEvent, TurnLeft, TurnRight, Use


def make_world(*rows: str, facing: Direction = Direction.RIGHT) -> WorldState:
    return WorldState.from_grid(parse_layout(rows), facing)


@pytest.mark.parametrize("blocker", ["W", "D"])
def test_blocked_move_crashes_without_moving(blocker):
    world = make_world(f"S{blocker}F")
    outcome, event = step_forward(world)
    assert outcome is Outcome.CRASH
    assert event is StepEvent.BLOCKED
    assert world.robot.position == (0, 0)


@pytest.mark.parametrize("facing", list(Direction))
def test_leaving_the_grid_crashes(facing):
    world = make_world("S", facing=facing)
    outcome, _ = step_forward(world)
    assert outcome is Outcome.CRASH
    assert world.robot.position == (0, 0)


def test_entering_goal_commits_and_wins():
    world = make_world("S.F")
    assert step_forward(world) == (Outcome.CONTINUE, StepEvent.MOVED)
    assert step_forward(world) == (Outcome.WIN, StepEvent.REACHED_GOAL)
    assert world.robot.position == (2, 0)


def test_hazards_and_open_doors_are_passable():
    world = make_world("SRBYOF")
    for expected_x in range(1, 5):
        outcome, _ = step_forward(world)
        assert outcome is Outcome.CONTINUE
        assert world.robot.position == (expected_x, 0)


def test_turns_rotate_in_place():
    world = make_world("S.F", facing=Direction.UP)
    assert evaluate_unit(TurnRight(), world) == (Outcome.CONTINUE, StepEvent.TURNED)
    assert world.robot.facing is Direction.RIGHT
    evaluate_unit(TurnLeft(), world)
    evaluate_unit(TurnLeft(), world)
    assert world.robot.facing is Direction.LEFT
    turn(world, 2)
    assert world.robot.facing is Direction.RIGHT
    assert world.robot.position == (0, 0)


def test_pick_collects_key_and_clears_tile():
    world = make_world("SYF")
    step_forward(world)
    assert pick(world) == (Outcome.CONTINUE, StepEvent.PICKED_KEY)
    assert world.robot.inventory == "key"
    assert world.tile_under_robot() == TileKind.FLOOR


def test_pick_extinguishes_fire_without_spending_water():
    world = make_world("SRF")
    step_forward(world)
    assert pick(world) == (Outcome.CONTINUE, StepEvent.EXTINGUISHED)
    assert world.tile_under_robot() == TileKind.FLOOR
    assert world.robot.resource == 3
    assert world.robot.inventory is None


def test_pick_on_plain_floor_is_idle():
    world = make_world("S.F")
    step_forward(world)
    assert pick(world) == (Outcome.CONTINUE, StepEvent.IDLE)
    assert world.robot.inventory is None


def test_use_door_without_key_is_a_no_op():
    world = make_world("SDF")
    before = world.snapshot()
    assert use(world) == (Outcome.CONTINUE, StepEvent.IDLE)
    assert world == before
    assert world.tile_at(1, 0) == TileKind.DOOR_LOCKED


def test_use_door_with_key_opens_it_and_keeps_key():
    world = make_world("SDF")
    world.robot.inventory = "key"
    assert use(world) == (Outcome.CONTINUE, StepEvent.OPENED_DOOR)
    assert world.tile_at(1, 0) == TileKind.DOOR_OPEN
    assert world.robot.inventory == "key"
    assert step_forward(world) == (Outcome.CONTINUE, StepEvent.MOVED)


def test_use_water_refills_to_starting_resource():
    world = make_world("SBF")
    world.robot.resource = 0
    assert use(world) == (Outcome.CONTINUE, StepEvent.REFILLED)
    assert world.robot.resource == world.starting_resource == 3
    assert world.tile_at(1, 0) == TileKind.HAZARD_B


def test_use_facing_outside_the_grid_is_idle():
    world = make_world("S.F", facing=Direction.LEFT)
    assert use(world) == (Outcome.CONTINUE, StepEvent.IDLE)


def test_evaluate_expands_move_distance():
    world = make_world("S...F")
    assert evaluate(Move(distance=3), world) is Outcome.CONTINUE
    assert world.robot.position == (3, 0)
    assert evaluate(Move(distance=5), world) is Outcome.WIN
    assert world.robot.position == (4, 0)


def test_evaluate_stops_move_at_first_blocked_unit():
    world = make_world("S.W.F")
    assert evaluate(Move(distance=3), world) is Outcome.CRASH
    assert world.robot.position == (1, 0)


def test_evaluate_single_unit_primitives():
    world = make_world("SYF")
    assert evaluate(Pick(), world) is Outcome.CONTINUE
    assert evaluate(Use(), world) is Outcome.CONTINUE


def test_evaluate_unit_rejects_control_flow_nodes():
    world = make_world("S.F")
    with pytest.raises(ValueError):
        evaluate_unit(BoundedRepeat(count=1, body=[Move()]), world)
