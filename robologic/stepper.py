"""Lazy, finite, restartable step sequences.

A ``StepRun`` turns an engine walk into a stream of ``StepSnapshot`` objects.
Callers choose the pacing: iterate with real-time delays for animation, drain
everything at once with ``collect()`` (tests, headless runs), or pull single
steps from ``iter_on()`` while polling the live world.

Each ``iter()`` starts again from a deep copy of the initial world, so the same
run can be replayed any number of times with identical results.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Generator, List, Tuple

from robologic.environment import WorldState
from robologic.schemas import Outcome, Path, RunResult, StepEvent, StepSnapshot, Verdict


@dataclass(frozen=True)
class Step:
    """One primitive step as reported by an engine walk (before snapshotting)."""

    path: Path
    command: str
    outcome: Outcome
    event: StepEvent
    unit: int = 0


StepGenerator = Generator[StepSnapshot, None, RunResult]


class StepRun(ABC):
    """Base class for the command-tree and tile-rule steppers."""

    def __init__(self, initial_world: WorldState):
        self.initial_world = initial_world.snapshot()

    @abstractmethod
    def _walk(self, world: WorldState) -> Generator[Step, None, Outcome]:
        """Mutate ``world`` step by step, yielding each step; return the final outcome."""

    def __iter__(self) -> StepGenerator:
        return self.iter_on(self.initial_world.snapshot())

    def iter_on(self, world: WorldState) -> StepGenerator:
        """Run against a caller-owned ``world`` (mutated in place).

        Yields one snapshot per primitive step; the generator's return value
        (``StopIteration.value``) is the ``RunResult``.
        """
        walker = self._walk(world)
        steps = 0
        crash_step = None
        crash_path = None
        while True:
            try:
                step = next(walker)
            except StopIteration as stop:
                outcome = stop.value if stop.value is not None else Outcome.CONTINUE
                break
            if step.outcome is Outcome.CRASH:
                crash_step = steps
                crash_path = step.path
            snapshot = StepSnapshot(
                index=steps,
                path=step.path,
                command=step.command,
                unit=step.unit,
                outcome=step.outcome,
                event=step.event,
                world=world.snapshot(),
            )
            steps += 1
            yield snapshot

        return RunResult(
            verdict=Verdict.from_outcome(outcome),
            steps=steps,
            crash_step=crash_step,
            crash_path=crash_path,
            world=world.snapshot(),
        )

    def collect(self) -> RunResult:
        """Evaluate the whole run at once and keep every snapshot."""
        snapshots, result = drain(iter(self))
        result.snapshots = snapshots
        return result


def drain(steps: StepGenerator) -> Tuple[List[StepSnapshot], RunResult]:
    """Exhaust a step generator, returning its snapshots and final result."""
    snapshots: List[StepSnapshot] = []
    while True:
        try:
            snapshots.append(next(steps))
        except StopIteration as stop:
            return snapshots, stop.value
