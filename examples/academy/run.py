"""
Example: Animated Level Run
===========================

WHAT THIS SHOWS:
- Loading a level from the bundled catalog
- Building a program through the session controller (palette checks included)
- Playing it with a pause between steps and redrawing the board each step
- Tile-rule levels, where the robot drives itself by color rules

RUN:
    python examples/academy/run.py data-1 --program examples/academy/programs/data-1.json
    python examples/academy/run.py logic-3 --rule yellow=u-turn --rule blue=right
    python examples/academy/run.py cave-5 --delay 0.1
"""

from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path

from robologic import LevelLoader, SessionController, StepSnapshot, Verdict, parse_program, render_ascii

PROGRAMS_DIR = Path(__file__).parent / "programs"


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Animated RoboLogic level run")
    parser.add_argument("level", help="Level id, e.g. data-1")
    parser.add_argument(
        "--program",
        type=Path,
        default=None,
        help="Program JSON ({'main': [...], 'pattern': [...]}); defaults to programs/<level>.json",
    )
    parser.add_argument("--rule", action="append", default=[], help="Tile rule COLOR=ACTION")
    parser.add_argument("--delay", type=float, default=0.3, help="Seconds between steps")
    return parser.parse_args()


def draw(snapshot: StepSnapshot) -> None:
    # Clear the terminal and redraw the board for this step
    print("\033[2J\033[H", end="")
    print(render_ascii(snapshot.world))
    robot = snapshot.world.robot
    print(f"\nstep {snapshot.index}: {snapshot.command} -> {snapshot.event.value}")
    print(f"inventory: {robot.inventory or '-'}   water: {robot.resource}")


def load_program(session: SessionController, path: Path) -> None:
    data = json.loads(path.read_text(encoding="utf-8"))
    session.clear("main")
    for command in parse_program(data.get("main")):
        session.add_command(command)
    for command in parse_program(data.get("pattern")):
        session.add_command(command, target="pattern")


async def main(args: argparse.Namespace) -> None:
    level = LevelLoader().get(args.level)
    session = SessionController(level, step_listeners=[draw], verbose=False)

    program_path = args.program or PROGRAMS_DIR / f"{level.id}.json"
    if not level.uses_tile_rules and program_path.exists():
        load_program(session, program_path)
    for rule in args.rule:
        color, _, action = rule.partition("=")
        session.set_rule(color, action)

    print(render_ascii(session.world))
    print(f"\n{level.title}\n{level.description}")
    await asyncio.sleep(args.delay)

    result = await session.play(delay=args.delay)
    print(f"\n{session.message}")
    if result is not None and result.verdict is Verdict.CRASH:
        print(f"Crashed at step {result.crash_step} (command path {result.crash_path})")


if __name__ == "__main__":
    asyncio.run(main(parse_args()))
