"""
Tile-rule simulation: the robot drives itself by per-color rules.

Used by the logic-lab levels instead of a command program. The player maps each
hazard color (red / blue / yellow) to a ``RuleAction`` before the run; every tick
the robot

1. reads the tile it stands on and looks up the configured action
   (tiles without a color, or colors left unset, mean ``ignore``),
2. rotates by the action (none, right, left, or a u-turn),
3. attempts exactly one forward move with the same legality rules as a
   ``move`` command.

``crash`` and ``win`` stop the simulation at once. A hard tick ceiling stops a
robot that circles forever and reports ``exhausted``.
"""

from __future__ import annotations

from typing import Generator, Optional

from robologic.environment import WorldState
from robologic.evaluator import step_forward, turn
from robologic.schemas import Outcome, RuleAction, TileRules
from robologic.stepper import Step, StepRun

DEFAULT_TICK_LIMIT = 50


class TileRuleSimulation:
    """Deterministic per-tick rules for the self-driving robot."""

    def __init__(self, rules: Optional[TileRules] = None, *, tick_limit: int = DEFAULT_TICK_LIMIT):
        if tick_limit < 1:
            raise ValueError("tick_limit must be at least 1")
        self.rules = rules or TileRules()
        self.tick_limit = tick_limit

    def apply_tick(self, world: WorldState, tick: int) -> Step:
        """Apply one tick to ``world`` in place and report what happened."""
        action = self.rules.action_for(world.tile_under_robot())
        if action is not RuleAction.IGNORE:
            turn(world, action.quarter_turns)
        outcome, event = step_forward(world)
        return Step(path=(), command="tick", outcome=outcome, event=event)

    def should_stop(self, outcome: Outcome, tick: int) -> bool:
        """Stop on a terminal outcome or once the tick ceiling is reached."""
        return outcome.is_terminal or tick + 1 >= self.tick_limit


class TileRuleRun(StepRun):
    """Restartable stepper over the tile-rule simulation."""

    def __init__(
        self,
        initial_world: WorldState,
        rules: Optional[TileRules] = None,
        *,
        tick_limit: int = DEFAULT_TICK_LIMIT,
    ):
        super().__init__(initial_world)
        self.simulation = TileRuleSimulation(rules, tick_limit=tick_limit)

    def _walk(self, world: WorldState) -> Generator[Step, None, Outcome]:
        tick = 0
        while True:
            step = self.simulation.apply_tick(world, tick)
            yield step
            if self.simulation.should_stop(step.outcome, tick):
                return step.outcome
            tick += 1
