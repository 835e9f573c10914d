"""Command tree interpreter.

Walks a player-authored command tree (sequences, pattern calls, counted loops
and wall-sensor loops), delegating primitives to the step evaluator. The walk is
a generator: every primitive step is yielded as it happens and the outcome of
each subtree is the generator's return value, so ``yield from`` threads
``win`` / ``crash`` up through every enclosing loop and pattern call while the
caller decides how fast to consume the steps.

The program supports exactly one subroutine, the shared pattern buffer. The
buffer may not call itself, which keeps every walk finite together with the
sensor-loop safety bound.
"""

from __future__ import annotations

from typing import Generator, List, Optional, Sequence

from robologic.environment import WorldState
from robologic.evaluator import evaluate_unit
from robologic.schemas import (
    BoundedRepeat,
    CallPattern,
    Command,
    Move,
    Outcome,
    Path,
    RunResult,
    SensorRepeat,
    validate_pattern,
)
from robologic.stepper import Step, StepRun

DEFAULT_SENSOR_LOOP_LIMIT = 30

Walk = Generator[Step, None, Outcome]


class Interpreter:
    """Deterministic tree-walk over a command program.

    Args:
        pattern: Contents of the subroutine buffer; ``None`` or empty makes
            ``call_pattern`` a no-op.
        sensor_loop_limit: Max iterations of a ``sensor_repeat`` loop that has no
            ``limit`` of its own.

    Raises:
        PatternRecursionError: If the pattern contains ``call_pattern``.
    """

    def __init__(
        self,
        pattern: Optional[Sequence[Command]] = None,
        *,
        sensor_loop_limit: int = DEFAULT_SENSOR_LOOP_LIMIT,
    ):
        if sensor_loop_limit < 1:
            raise ValueError("sensor_loop_limit must be at least 1")
        self.pattern: List[Command] = validate_pattern(pattern)
        self.sensor_loop_limit = sensor_loop_limit

    def walk(self, program: Sequence[Command], world: WorldState, path: Path = ()) -> Walk:
        """Walk ``program`` in order, stopping at the first terminal outcome."""
        for index, command in enumerate(program):
            here = path + (index,)
            if isinstance(command, CallPattern):
                outcome = yield from self.walk(self.pattern, world, here)
            elif isinstance(command, BoundedRepeat):
                outcome = yield from self._repeat(command, world, here)
            elif isinstance(command, SensorRepeat):
                outcome = yield from self._sensor_repeat(command, world, here)
            else:
                outcome = yield from self._primitive(command, world, here)
            if outcome.is_terminal:
                return outcome
        return Outcome.CONTINUE

    def _primitive(self, command: Command, world: WorldState, path: Path) -> Walk:
        units = command.distance if isinstance(command, Move) else 1
        for unit in range(units):
            outcome, event = evaluate_unit(command, world)
            yield Step(path=path, command=command.type, outcome=outcome, event=event, unit=unit)
            if outcome.is_terminal:
                return outcome
        return Outcome.CONTINUE

    def _repeat(self, command: BoundedRepeat, world: WorldState, path: Path) -> Walk:
        for _ in range(command.count):
            outcome = yield from self.walk(command.body, world, path)
            if outcome.is_terminal:
                return outcome
        return Outcome.CONTINUE

    def _sensor_repeat(self, command: SensorRepeat, world: WorldState, path: Path) -> Walk:
        limit = command.limit or self.sensor_loop_limit
        for _ in range(limit):
            # Probe before each iteration; a wall ahead ends the loop normally.
            if world.classify_ahead().is_blocking:
                break
            outcome = yield from self.walk(command.body, world, path)
            if outcome.is_terminal:
                return outcome
        return Outcome.CONTINUE

    def run(self, program: Sequence[Command], world: WorldState) -> Outcome:
        """Run ``program`` to completion against ``world`` (mutated in place)."""
        walker = self.walk(program, world)
        while True:
            try:
                next(walker)
            except StopIteration as stop:
                return stop.value

    def execute(self, program: Sequence[Command], world: WorldState) -> RunResult:
        """Run from a copy of ``world`` and return the verdict with all snapshots."""
        return ProgramRun(program, world, interpreter=self).collect()


class ProgramRun(StepRun):
    """Restartable stepper over one command program."""

    def __init__(
        self,
        program: Sequence[Command],
        initial_world: WorldState,
        *,
        pattern: Optional[Sequence[Command]] = None,
        sensor_loop_limit: int = DEFAULT_SENSOR_LOOP_LIMIT,
        interpreter: Optional[Interpreter] = None,
    ):
        super().__init__(initial_world)
        self.program: List[Command] = list(program)
        self.interpreter = interpreter or Interpreter(pattern, sensor_loop_limit=sensor_loop_limit)

    def _walk(self, world: WorldState) -> Walk:
        return self.interpreter.walk(self.program, world)


def command_at(
    program: Sequence[Command],
    pattern: Optional[Sequence[Command]],
    path: Path,
) -> Command:
    """Resolve a snapshot ``path`` to the command node it highlights.

    Raises:
        IndexError: If the path does not exist in the program.
    """
    if not path:
        raise IndexError("Empty command path")
    node: Command = program[path[0]]
    for index in path[1:]:
        if isinstance(node, CallPattern):
            children = pattern or []
        elif isinstance(node, (BoundedRepeat, SensorRepeat)):
            children = node.body
        else:
            raise IndexError(f"Command '{node.type}' has no children")
        node = children[index]
    return node
