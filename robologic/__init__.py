"""
RoboLogic - program execution engine for a grid-based robot puzzle.

Players author small command trees (moves, turns, a shared pattern, counted and
wall-sensor loops) and the engine executes them deterministically, one
primitive step at a time, against a mutable grid world.

The engine itself does no I/O and reads no global config; the session
controller and CLI wire in levels, limits and pacing.
"""

__version__ = "0.1.0"

# Engine
from .evaluator import evaluate, evaluate_unit
from .interpreter import DEFAULT_SENSOR_LOOP_LIMIT, Interpreter, ProgramRun, command_at
from .simulation import DEFAULT_TICK_LIMIT, TileRuleRun, TileRuleSimulation
from .stepper import Step, StepRun, drain

# World model
from .environment import (
    Direction,
    Robot,
    TileClass,
    TileKind,
    WorldState,
    classify,
    parse_layout,
    render_ascii,
)

# Core schemas
from .schemas import (
    BoundedRepeat,
    CallPattern,
    Command,
    Move,
    Outcome,
    PatternRecursionError,
    Pick,
    RuleAction,
    RunResult,
    SensorRepeat,
    StepEvent,
    StepSnapshot,
    TileRules,
    TurnLeft,
    TurnRight,
    Use,
    Verdict,
    dump_program,
    parse_program,
)

# Levels and sessions
from .levels import Level, LevelLoader
from .session import (
    PaletteError,
    ProgramLimitError,
    SessionBusyError,
    SessionController,
)
from .config import Config

__all__ = [
    # Engine
    "evaluate",
    "evaluate_unit",
    "Interpreter",
    "ProgramRun",
    "command_at",
    "DEFAULT_SENSOR_LOOP_LIMIT",
    "TileRuleSimulation",
    "TileRuleRun",
    "DEFAULT_TICK_LIMIT",
    "Step",
    "StepRun",
    "drain",
    # World model
    "Direction",
    "Robot",
    "TileClass",
    "TileKind",
    "WorldState",
    "classify",
    "parse_layout",
    "render_ascii",
    # Schemas
    "Command",
    "Move",
    "TurnLeft",
    "TurnRight",
    "Pick",
    "Use",
    "CallPattern",
    "BoundedRepeat",
    "SensorRepeat",
    "Outcome",
    "Verdict",
    "StepEvent",
    "StepSnapshot",
    "RunResult",
    "RuleAction",
    "TileRules",
    "PatternRecursionError",
    "parse_program",
    "dump_program",
    # Levels and sessions
    "Level",
    "LevelLoader",
    "SessionController",
    "SessionBusyError",
    "PaletteError",
    "ProgramLimitError",
    "Config",
]
