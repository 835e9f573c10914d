"""
Session controller for one level.

Owns everything the player edits between runs (main program, pattern buffer,
loop recording buffer, color rules) and drives the engine over a live
``WorldState`` that the presentation layer can poll at any time.

Run lifecycle:
1. ``start()`` rebuilds the world from the level and opens a step generator
2. ``advance()`` pulls one primitive step (or simulation tick) at a time
3. ``play()`` paces the steps with ``asyncio.sleep`` for animation
4. ``reset()`` aborts the active run between steps and restores the level

At most one run is active per session. While it is active every editing
operation raises ``SessionBusyError``; reset is the only way to cancel.
"""

import asyncio
from typing import Callable, List, Literal, Optional, Sequence, Union

from .config import Config
from .environment import HAZARD_COLORS
from .interpreter import ProgramRun, command_at
from .levels import Level
from .logging_utils import log_error, log_info, log_step, log_success, log_warning
from .schemas import (
    BoundedRepeat,
    CallPattern,
    Command,
    Move,
    Path,
    PatternRecursionError,
    RuleAction,
    RunResult,
    SensorRepeat,
    StepEvent,
    StepSnapshot,
    TileRules,
    dump_program,
    Verdict,
    iter_commands,
    parse_command,
)
from .simulation import TileRuleRun
from .stepper import StepGenerator, StepRun

Target = Literal["main", "pattern"]
StepListener = Callable[[StepSnapshot], None]


# =============================
# Module-level Exceptions
# =============================

class SessionBusyError(Exception):
    """Raised when the session is edited or started while a run is active."""

    def __init__(self, action: str) -> None:
        self.action = action
        super().__init__(
            f"Cannot {action} while a run is active.\n"
            "Wait for the run to finish or call reset() to abort it."
        )


class PaletteError(ValueError):
    """Raised when a command type is not offered by the level's palette."""

    def __init__(self, command_type: str, level: Level) -> None:
        self.command_type = command_type
        palette = ", ".join(level.palette) or "(none)"
        super().__init__(
            f"Command '{command_type}' is not available in level '{level.id}'.\n"
            f"Available commands: {palette}"
        )


class ProgramLimitError(ValueError):
    """Raised when the main program would exceed the level's command limit."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        super().__init__(
            f"This level allows at most {limit} command(s) in the main program.\n"
            "Try a longer move, a loop, or the pattern buffer instead."
        )


_EVENT_MESSAGES = {
    StepEvent.PICKED_KEY: "Key picked up!",
    StepEvent.EXTINGUISHED: "Fire extinguished!",
    StepEvent.OPENED_DOOR: "Door opened!",
    StepEvent.REFILLED: "Water refilled!",
}

_VERDICT_MESSAGES = {
    Verdict.WIN: "MISSION COMPLETE!",
    Verdict.CRASH: "ROBOT CRASHED!",
    Verdict.EXHAUSTED: "Program finished. The goal was not reached yet.",
}


class SessionController:
    """Editing state and run driver for one level.

    Args:
        level: The level being played
        sensor_loop_limit: Safety bound for ``sensor_repeat`` loops
        tick_limit: Tick ceiling for tile-rule levels
        starting_water: Resource counter value at start and after a refill
        step_delay: Default pause between steps in ``play()`` (seconds)
        step_listeners: Callables invoked with every ``StepSnapshot``
        verbose: Print each step and the verdict to the console

    Unset limits fall back to ``Config``.
    """

    def __init__(
        self,
        level: Level,
        *,
        sensor_loop_limit: Optional[int] = None,
        tick_limit: Optional[int] = None,
        starting_water: Optional[int] = None,
        step_delay: Optional[float] = None,
        step_listeners: Optional[List[StepListener]] = None,
        verbose: Optional[bool] = None,
    ):
        self.level = level
        self.sensor_loop_limit = sensor_loop_limit or Config.SENSOR_LOOP_LIMIT
        self.tick_limit = tick_limit or Config.TICK_LIMIT
        self.starting_water = Config.STARTING_WATER if starting_water is None else starting_water
        self.step_delay = Config.STEP_DELAY_SECONDS if step_delay is None else step_delay
        self.step_listeners: List[StepListener] = list(step_listeners or [])
        self.verbose = Config.VERBOSE if verbose is None else verbose

        self.program: List[Command] = level.initial_program()
        self.pattern: List[Command] = []
        self.rules = TileRules()
        self.world = level.build_world(self.starting_water)
        self.last_result: Optional[RunResult] = None
        self.active_path: Optional[Path] = None
        self.message = level.hint

        self._active: Optional[StepGenerator] = None
        self._loop_buffer: Optional[List[Command]] = None
        # Bumped by reset() so an in-flight play() notices it was aborted.
        self._generation = 0

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def running(self) -> bool:
        return self._active is not None

    @property
    def recording_loop(self) -> bool:
        return self._loop_buffer is not None

    @property
    def loop_buffer(self) -> List[Command]:
        return list(self._loop_buffer or [])

    def _ensure_idle(self, action: str) -> None:
        if self.running:
            raise SessionBusyError(action)

    def _buffer(self, target: Target) -> List[Command]:
        if target == "main":
            return self.program
        if target == "pattern":
            return self.pattern
        raise ValueError(f"Unknown program target '{target}' (expected 'main' or 'pattern')")

    def _check_palette(self, command: Command) -> None:
        for node in iter_commands([command]):
            if node.type not in self.level.palette:
                raise PaletteError(node.type, self.level)

    def _check_length(self) -> None:
        limit = self.level.max_commands
        if limit is not None and len(self.program) >= limit:
            raise ProgramLimitError(limit)

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def add_command(self, command: Union[Command, dict], target: Target = "main") -> Command:
        """Append a command to the main program, the pattern, or the loop being recorded.

        Raises:
            SessionBusyError: While a run is active
            PaletteError: If the level does not offer the command
            PatternRecursionError: If a pattern call is added to the pattern buffer
            ProgramLimitError: If the main program is already at the level's limit
        """
        self._ensure_idle("edit the program")
        if isinstance(command, dict):
            command = parse_command(command)
        else:
            command = command.model_copy(deep=True)
        self._check_palette(command)

        if self._loop_buffer is not None:
            self._loop_buffer.append(command)
            return command

        buffer = self._buffer(target)
        if target == "pattern" and any(isinstance(node, CallPattern) for node in iter_commands([command])):
            raise PatternRecursionError()
        if target == "main":
            self._check_length()
        buffer.append(command)
        return command

    def remove_command(self, index: int, target: Target = "main") -> Command:
        """Remove and return the top-level command at ``index``."""
        self._ensure_idle("edit the program")
        return self._buffer(target).pop(index)

    def clear(self, target: Target = "main") -> None:
        self._ensure_idle("edit the program")
        self._buffer(target).clear()

    def command_at(self, path: Sequence[int], target: Target = "main") -> Command:
        """Resolve a path (as carried by snapshots) to its command node."""
        if target == "pattern":
            return command_at(self.pattern, None, tuple(path))
        return command_at(self.program, self.pattern, tuple(path))

    def set_move_distance(self, path: Sequence[int], distance: int, target: Target = "main") -> None:
        self._ensure_idle("change a move distance")
        node = self.command_at(path, target)
        if not isinstance(node, Move):
            raise ValueError(f"Command at {tuple(path)} is '{node.type}', not 'move'")
        if distance < 1:
            raise ValueError("Move distance must be at least 1")
        node.distance = distance

    def set_loop_count(self, path: Sequence[int], count: int, target: Target = "main") -> None:
        self._ensure_idle("change a loop count")
        node = self.command_at(path, target)
        if not isinstance(node, BoundedRepeat):
            raise ValueError(f"Command at {tuple(path)} is '{node.type}', not 'repeat'")
        if count < 0:
            raise ValueError("Loop count cannot be negative")
        node.count = count

    def begin_loop(self) -> None:
        """Start recording: subsequent ``add_command`` calls fill the loop body."""
        self._ensure_idle("record a loop")
        self._loop_buffer = []

    def end_loop(self, kind: Literal["repeat", "sensor_repeat"] = "repeat", count: int = 3) -> Command:
        """Wrap the recorded commands in a loop and append it to the main program."""
        self._ensure_idle("record a loop")
        if self._loop_buffer is None:
            raise ValueError("No loop is being recorded; call begin_loop() first")
        if kind == "repeat":
            loop: Command = BoundedRepeat(count=count, body=self._loop_buffer)
        elif kind == "sensor_repeat":
            loop = SensorRepeat(body=self._loop_buffer)
        else:
            raise ValueError(f"Unknown loop kind '{kind}'")
        if kind not in self.level.palette:
            raise PaletteError(kind, self.level)
        self._check_length()
        self._loop_buffer = None
        self.program.append(loop)
        return loop

    def cancel_loop(self) -> None:
        self._ensure_idle("record a loop")
        self._loop_buffer = None

    def set_rule(self, color: str, action: Union[RuleAction, str]) -> None:
        """Map a hazard color ('red', 'blue', 'yellow') to a rule action."""
        self._ensure_idle("change a color rule")
        if color not in HAZARD_COLORS:
            raise ValueError(f"Unknown rule color '{color}' (expected one of {sorted(HAZARD_COLORS)})")
        setattr(self.rules, color, RuleAction(action))

    # ------------------------------------------------------------------
    # Running
    # ------------------------------------------------------------------

    def _make_run(self) -> StepRun:
        if self.level.uses_tile_rules:
            return TileRuleRun(
                self.world,
                self.rules.model_copy(),
                tick_limit=self.tick_limit,
            )
        return ProgramRun(
            [command.model_copy(deep=True) for command in self.program],
            self.world,
            pattern=[command.model_copy(deep=True) for command in self.pattern],
            sensor_loop_limit=self.sensor_loop_limit,
        )

    def start(self) -> None:
        """Begin a run from a freshly built world.

        Raises:
            SessionBusyError: If a run is already active.
        """
        self._ensure_idle("start a run")
        self.world = self.level.build_world(self.starting_water)
        run = self._make_run()
        self._active = run.iter_on(self.world)
        self.last_result = None
        self.active_path = None
        self.message = "Program running..."
        if self.verbose:
            log_info(f"[{self.level.id}] Run started ({'tile rules' if self.level.uses_tile_rules else 'program'})")

    def advance(self) -> Optional[StepSnapshot]:
        """Execute one step; returns None once the run has finished (or none is active)."""
        if self._active is None:
            return None
        try:
            snapshot = next(self._active)
        except StopIteration as stop:
            self._finish(stop.value)
            return None

        self.active_path = snapshot.path
        if snapshot.event in _EVENT_MESSAGES:
            self.message = _EVENT_MESSAGES[snapshot.event]
        if self.verbose:
            robot = snapshot.world.robot
            log_step(
                f"[Step {snapshot.index}] {snapshot.command} -> {snapshot.event.value} "
                f"at ({robot.x}, {robot.y}) facing {robot.facing.name.lower()}"
            )
        self._notify(snapshot)
        return snapshot

    def run(self) -> Optional[RunResult]:
        """Run to completion without pauses.

        Returns the ``RunResult``, or None if a step listener called ``reset()``.
        """
        self.start()
        while self.advance() is not None:
            pass
        return self.last_result

    async def play(self, delay: Optional[float] = None) -> Optional[RunResult]:
        """Run with a pause after every step so the presentation can animate.

        Returns the ``RunResult``, or None if ``reset()`` aborted the run.
        """
        pause = self.step_delay if delay is None else delay
        self.start()
        generation = self._generation
        while self.advance() is not None:
            await asyncio.sleep(pause)
            if self._generation != generation:
                return None
        if self._generation != generation:
            return None
        return self.last_result

    def _finish(self, result: RunResult) -> None:
        self._active = None
        self.active_path = None
        self.last_result = result
        self.message = _VERDICT_MESSAGES[result.verdict]
        if not self.verbose:
            return
        if result.verdict is Verdict.WIN:
            log_success(f"[{self.level.id}] {self.message} ({result.steps} steps)")
        elif result.verdict is Verdict.CRASH:
            log_error(f"[{self.level.id}] {self.message} (step {result.crash_step}, command {result.crash_path})")
        else:
            log_warning(f"[{self.level.id}] {self.message} ({result.steps} steps)")

    def _notify(self, snapshot: StepSnapshot) -> None:
        # Listener failures are reported but don't stop the run.
        for listener in self.step_listeners:
            try:
                listener(snapshot)
            except Exception as exc:  # noqa: BLE001 - presentation hooks must not break a run
                log_error(f"[Listener] Step listener failed: {exc}")

    def reset(self, clear_program: bool = False) -> None:
        """Abort any active run and restore the level's starting world.

        With ``clear_program`` the editing state goes back to the level defaults
        too: starter code, empty pattern and loop buffer, all rules ``ignore``.
        """
        if self._active is not None:
            self._active.close()
            self._active = None
        self._generation += 1
        self.world = self.level.build_world(self.starting_water)
        self.last_result = None
        self.active_path = None
        self.message = self.level.hint
        if clear_program:
            self.program = self.level.initial_program()
            self.pattern = []
            self._loop_buffer = None
            self.rules = TileRules()

    def describe(self) -> dict:
        """JSON-friendly summary of the editing state."""
        return {
            "level": self.level.id,
            "program": dump_program(self.program),
            "pattern": dump_program(self.pattern),
            "rules": self.rules.model_dump(mode="json"),
            "running": self.running,
            "message": self.message,
        }
