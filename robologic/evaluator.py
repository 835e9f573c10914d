"""Step evaluator: executes exactly one primitive command against the world.

Primitives are ``turn_left``, ``turn_right``, one unit of ``move``, ``pick`` and
``use``. The world is mutated in place and only once the step is known to be
legal, so an illegal move leaves the robot where it stood. Every primitive
reports an ``Outcome`` plus a ``StepEvent`` describing what visibly happened.
"""

from __future__ import annotations

from typing import Callable, Dict, Tuple

from robologic.environment import (
    HOLDING_KEY,
    PICK_EFFECTS,
    USE_EFFECTS,
    TileClass,
    TileEffect,
    TileKind,
    WorldState,
    classify,
)
from robologic.schemas import Command, Move, Outcome, StepEvent

StepResult = Tuple[Outcome, StepEvent]


def turn(world: WorldState, quarter_turns: int) -> StepResult:
    """Rotate the robot; always succeeds."""
    world.robot.facing = world.robot.facing.rotate(quarter_turns)
    return Outcome.CONTINUE, StepEvent.TURNED


def step_forward(world: WorldState) -> StepResult:
    """Attempt a single-cell move in the current facing.

    Blocking cells (walls, locked doors, outside the grid) crash without moving.
    Entering the goal commits the move and wins.
    """
    x, y = world.cell_ahead()
    tile_class = classify(world.tile_at(x, y))
    if tile_class.is_blocking:
        return Outcome.CRASH, StepEvent.BLOCKED

    world.robot.x = x
    world.robot.y = y
    if tile_class is TileClass.WINNING:
        return Outcome.WIN, StepEvent.REACHED_GOAL
    return Outcome.CONTINUE, StepEvent.MOVED


def pick(world: WorldState) -> StepResult:
    """Collect a key or extinguish a fire on the robot's own tile."""
    x, y = world.robot.position
    effect = PICK_EFFECTS.get(world.grid[y][x])
    if effect is TileEffect.KEY:
        world.set_tile(x, y, TileKind.FLOOR)
        world.robot.inventory = HOLDING_KEY
        return Outcome.CONTINUE, StepEvent.PICKED_KEY
    if effect is TileEffect.FIRE:
        world.set_tile(x, y, TileKind.FLOOR)
        return Outcome.CONTINUE, StepEvent.EXTINGUISHED
    return Outcome.CONTINUE, StepEvent.IDLE


def use(world: WorldState) -> StepResult:
    """Unlock the door ahead (key is kept) or refill water from the tile ahead."""
    x, y = world.cell_ahead()
    tile = world.tile_at(x, y)
    if tile is None:
        return Outcome.CONTINUE, StepEvent.IDLE

    effect = USE_EFFECTS.get(tile)
    if effect is TileEffect.DOOR and world.robot.has_key:
        world.set_tile(x, y, TileKind.DOOR_OPEN)
        return Outcome.CONTINUE, StepEvent.OPENED_DOOR
    if effect is TileEffect.WATER:
        world.robot.resource = world.starting_resource
        return Outcome.CONTINUE, StepEvent.REFILLED
    return Outcome.CONTINUE, StepEvent.IDLE


_PRIMITIVES: Dict[str, Callable[[WorldState], StepResult]] = {
    "move": step_forward,
    "turn_left": lambda world: turn(world, -1),
    "turn_right": lambda world: turn(world, 1),
    "pick": pick,
    "use": use,
}


def evaluate_unit(command: Command, world: WorldState) -> StepResult:
    """Evaluate one primitive; a ``move`` counts as a single unit here.

    Raises:
        ValueError: If ``command`` is a control-flow node.
    """
    handler = _PRIMITIVES.get(command.type)
    if handler is None:
        raise ValueError(f"'{command.type}' is not a primitive command")
    return handler(world)


def evaluate(command: Command, world: WorldState) -> Outcome:
    """Evaluate a primitive, expanding ``move`` into ``distance`` unit moves.

    Stops at the first unit that does not continue and reports its outcome for
    the whole move.
    """
    units = command.distance if isinstance(command, Move) else 1
    outcome = Outcome.CONTINUE
    for _ in range(units):
        outcome, _event = evaluate_unit(command, world)
        if outcome.is_terminal:
            break
    return outcome
