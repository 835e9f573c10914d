"""
Pydantic schemas for the RoboLogic program execution engine.

All data structures passed between the engine and its collaborators live here:

- Command nodes (the player-authored command tree), tagged by ``type`` so a
  program round-trips through JSON without extra glue
- Outcome / Verdict tags threaded through the interpreter
- Step snapshots and run results handed to the presentation layer
- The per-color rule table of the tile-rule simulation

World-level models (tiles, robot, grid) live in ``robologic.environment``.
"""

from enum import Enum
from typing import Annotated, Any, Iterable, List, Literal, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, Field, TypeAdapter

from robologic.environment import TileKind, WorldState, hazard_color


# ============================================================================
# Command tree
# ============================================================================


class Move(BaseModel):
    """Move forward ``distance`` cells, one unit at a time."""

    type: Literal["move"] = "move"
    distance: int = Field(1, ge=1, description="Number of single-cell moves")


class TurnLeft(BaseModel):
    type: Literal["turn_left"] = "turn_left"


class TurnRight(BaseModel):
    type: Literal["turn_right"] = "turn_right"


class Pick(BaseModel):
    """Pick up a key, or put out a fire, on the robot's own tile."""

    type: Literal["pick"] = "pick"


class Use(BaseModel):
    """Unlock the door ahead, or refill water from the tile ahead."""

    type: Literal["use"] = "use"


class CallPattern(BaseModel):
    """Run the single shared subroutine buffer ("Pattern A")."""

    type: Literal["call_pattern"] = "call_pattern"


class BoundedRepeat(BaseModel):
    """Run ``body`` exactly ``count`` times unless a step ends the run."""

    type: Literal["repeat"] = "repeat"
    count: int = Field(..., ge=0)
    body: List["Command"] = Field(default_factory=list)


class SensorRepeat(BaseModel):
    """Run ``body`` while the cell ahead is not blocking.

    ``limit`` overrides the interpreter's safety bound for this loop only.
    """

    type: Literal["sensor_repeat"] = "sensor_repeat"
    body: List["Command"] = Field(default_factory=list)
    limit: Optional[int] = Field(None, ge=1, description="Max iterations override")


Command = Annotated[
    Union[Move, TurnLeft, TurnRight, Pick, Use, CallPattern, BoundedRepeat, SensorRepeat],
    Field(discriminator="type"),
]

BoundedRepeat.model_rebuild()
SensorRepeat.model_rebuild()

PRIMITIVE_TYPES = frozenset({"move", "turn_left", "turn_right", "pick", "use"})
COMMAND_TYPES = frozenset(PRIMITIVE_TYPES | {"call_pattern", "repeat", "sensor_repeat"})

_program_adapter = TypeAdapter(List[Command])
_command_adapter = TypeAdapter(Command)


def parse_program(data: Any) -> List[Command]:
    """Validate a JSON-compatible list of command dicts into command nodes.

    Raises:
        pydantic.ValidationError: On unknown types or out-of-range values.
    """
    if data is None:
        return []
    return _program_adapter.validate_python(data)


def parse_command(data: Any) -> Command:
    return _command_adapter.validate_python(data)


def dump_program(program: Sequence[Command]) -> List[dict]:
    return _program_adapter.dump_python(list(program), mode="json")


def iter_commands(program: Iterable[Command]) -> Iterable[Command]:
    """Yield every node of a command tree, depth first."""
    for command in program:
        yield command
        if isinstance(command, (BoundedRepeat, SensorRepeat)):
            yield from iter_commands(command.body)


class PatternRecursionError(ValueError):
    """Raised when the subroutine buffer itself calls the pattern."""

    def __init__(self) -> None:
        super().__init__(
            "The pattern buffer cannot contain 'call_pattern'.\n"
            "Only the main program may call the pattern; remove the nested call."
        )


def validate_pattern(pattern: Optional[Sequence[Command]]) -> List[Command]:
    """Return the pattern as a list, rejecting nested ``call_pattern`` nodes."""
    if not pattern:
        return []
    if any(isinstance(node, CallPattern) for node in iter_commands(pattern)):
        raise PatternRecursionError()
    return list(pattern)


# ============================================================================
# Outcomes
# ============================================================================


class Outcome(str, Enum):
    """Result of evaluating any command node."""

    CONTINUE = "continue"
    WIN = "win"
    CRASH = "crash"

    @property
    def is_terminal(self) -> bool:
        return self is not Outcome.CONTINUE


class Verdict(str, Enum):
    """Terminal verdict of a whole run."""

    WIN = "win"
    CRASH = "crash"
    EXHAUSTED = "exhausted"

    @classmethod
    def from_outcome(cls, outcome: Outcome) -> "Verdict":
        if outcome is Outcome.WIN:
            return cls.WIN
        if outcome is Outcome.CRASH:
            return cls.CRASH
        return cls.EXHAUSTED


class StepEvent(str, Enum):
    """Visible effect of one primitive step (drives sounds and messages)."""

    MOVED = "moved"
    TURNED = "turned"
    PICKED_KEY = "picked_key"
    EXTINGUISHED = "extinguished"
    OPENED_DOOR = "opened_door"
    REFILLED = "refilled"
    BLOCKED = "blocked"
    REACHED_GOAL = "reached_goal"
    IDLE = "idle"


Path = Tuple[int, ...]


class StepSnapshot(BaseModel):
    """World state after one primitive step (or one simulation tick)."""

    index: int = Field(..., description="0-based primitive step number in the run")
    path: Path = Field(
        default_factory=tuple,
        description="Indices from the top-level program down to the primitive",
    )
    command: str = Field(..., description="Primitive type tag (or 'tick')")
    unit: int = Field(0, description="Unit index within a multi-cell move")
    outcome: Outcome
    event: StepEvent
    world: WorldState


class RunResult(BaseModel):
    """Terminal verdict and final world of one run."""

    verdict: Verdict
    steps: int = Field(0, description="Number of primitive steps or ticks taken")
    crash_step: Optional[int] = None
    crash_path: Optional[Path] = None
    world: WorldState
    snapshots: List[StepSnapshot] = Field(
        default_factory=list,
        description="Populated when the run is drained with collect()",
    )


# ============================================================================
# Tile-rule simulation
# ============================================================================


class RuleAction(str, Enum):
    """What the robot does when it stands on a rule-colored tile."""

    IGNORE = "ignore"
    TURN_RIGHT = "right"
    TURN_LEFT = "left"
    U_TURN = "u-turn"

    @property
    def quarter_turns(self) -> int:
        return _QUARTER_TURNS[self]


_QUARTER_TURNS = {
    RuleAction.IGNORE: 0,
    RuleAction.TURN_RIGHT: 1,
    RuleAction.TURN_LEFT: -1,
    RuleAction.U_TURN: 2,
}


class TileRules(BaseModel):
    """Player-configured action for each of the three hazard colors."""

    red: RuleAction = RuleAction.IGNORE
    blue: RuleAction = RuleAction.IGNORE
    yellow: RuleAction = RuleAction.IGNORE

    def action_for(self, tile: TileKind) -> RuleAction:
        color = hazard_color(tile)
        if color is None:
            return RuleAction.IGNORE
        return getattr(self, color)
