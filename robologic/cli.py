"""Headless command-line driver.

    python -m robologic levels
    python -m robologic show data-1
    python -m robologic run data-1 --program solution.json
    python -m robologic run logic-2 --rule red=right --rule blue=left --delay 0.2

Exit status: 0 when the robot reaches the goal, 1 on a crash or when the
program ends early, 2 for usage and configuration errors.
"""

from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path
from typing import Optional, Sequence, Tuple

from .config import Config
from .environment import render_ascii
from .levels import Level, LevelLoader
from .logging_utils import Color, colored, log_error, log_info
from .schemas import Verdict, parse_program
from .session import SessionController

EXIT_WIN = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="robologic", description="RoboLogic program runner")
    parser.add_argument(
        "--levels-path",
        type=Path,
        default=None,
        help="Level catalog JSON file or directory (default: bundled catalog)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("levels", help="List available levels")
    sub.add_parser("config", help="Show the active configuration")

    show = sub.add_parser("show", help="Render a level as ASCII")
    show.add_argument("level", help="Level id, e.g. mars-1")

    run = sub.add_parser("run", help="Run a program (or the tile rules) on a level")
    run.add_argument("level", help="Level id, e.g. mars-1")
    run.add_argument("--program", type=Path, help="JSON file with the main program (default: level starter code)")
    run.add_argument("--pattern", type=Path, help="JSON file with the Pattern A subroutine")
    run.add_argument(
        "--rule",
        action="append",
        default=[],
        metavar="COLOR=ACTION",
        help="Tile rule such as red=right (actions: ignore, right, left, u-turn)",
    )
    run.add_argument("--delay", type=float, default=0.0, help="Seconds to pause between steps")
    run.add_argument("--quiet", action="store_true", help="Only print the verdict")
    return parser


def parse_rule(text: str) -> Tuple[str, str]:
    color, sep, action = text.partition("=")
    if not sep or not color or not action:
        raise ValueError(f"Invalid rule '{text}' (expected COLOR=ACTION, e.g. red=right)")
    return color.strip().lower(), action.strip().lower()


def _read_program(path: Path) -> list:
    if not path.exists():
        raise FileNotFoundError(f"Program file not found: {path}")
    with path.open("r", encoding="utf-8") as handle:
        return parse_program(json.load(handle))


def _print_level(level: Level) -> None:
    print(colored(f"{level.id}: {level.title}", Color.CYAN, bold=True))
    if level.description:
        print(level.description)
    print(render_ascii(level.build_world(Config.STARTING_WATER)))


def _list_levels(loader: LevelLoader) -> int:
    for category, levels in loader.categories().items():
        print(colored(category, Color.CYAN, bold=True))
        for level in levels:
            mode = " [tile rules]" if level.uses_tile_rules else ""
            print(f"  {level.id:<12} {level.title}{mode}")
    return EXIT_WIN


def _prepare_session(level: Level, args: argparse.Namespace) -> SessionController:
    session = SessionController(level, step_delay=args.delay, verbose=not args.quiet)
    if args.program is not None:
        session.clear("main")
        for command in _read_program(args.program):
            session.add_command(command, "main")
    if args.pattern is not None:
        for command in _read_program(args.pattern):
            session.add_command(command, "pattern")
    for text in args.rule:
        color, action = parse_rule(text)
        session.set_rule(color, action)
    return session


def _run_level(level: Level, args: argparse.Namespace) -> int:
    session = _prepare_session(level, args)
    if not args.quiet:
        _print_level(level)
        log_info(f"[{level.id}] Program: {json.dumps(session.describe()['program'])}")

    if args.delay > 0:
        result = asyncio.run(session.play(args.delay))
    else:
        result = session.run()

    if not args.quiet:
        print(render_ascii(result.world))
    print(f"{level.id}: {result.verdict.value} after {result.steps} step(s)")
    return EXIT_WIN if result.verdict is Verdict.WIN else EXIT_FAILED


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        Config.validate()
        if args.command == "config":
            print(Config.display())
            return EXIT_WIN

        loader = LevelLoader(args.levels_path)
        if args.command == "levels":
            return _list_levels(loader)

        level = loader.get(args.level)
        if args.command == "show":
            _print_level(level)
            return EXIT_WIN
        return _run_level(level, args)
    except (FileNotFoundError, KeyError, ValueError) as exc:
        log_error(exc.args[0] if exc.args else str(exc))
        return EXIT_USAGE


def run() -> None:
    """Console-script entry point."""
    raise SystemExit(main())
