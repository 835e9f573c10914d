"""Utilities for level layouts and robot grids."""

from __future__ import annotations

from collections import deque
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .schemas import Cell, Direction, WorldState
from .tiles import TileKind


LAYOUT_LEGEND: Dict[str, TileKind] = {
    ".": TileKind.FLOOR,
    "W": TileKind.WALL,
    "S": TileKind.START,
    "F": TileKind.GOAL,
    "R": TileKind.HAZARD_A,
    "B": TileKind.HAZARD_B,
    "Y": TileKind.HAZARD_C,
    "D": TileKind.DOOR_LOCKED,
    "O": TileKind.DOOR_OPEN,
}


def parse_layout(layout: Sequence[str]) -> List[List[TileKind]]:
    """Convert legend rows (``"S.W.F"``) into a grid of ``TileKind``.

    Raises:
        ValueError: On characters outside ``LAYOUT_LEGEND``.
    """
    grid: List[List[TileKind]] = []
    for y, row in enumerate(layout):
        tiles: List[TileKind] = []
        for x, char in enumerate(row):
            if char not in LAYOUT_LEGEND:
                raise ValueError(f"Unknown tile character {char!r} at ({x}, {y})")
            tiles.append(LAYOUT_LEGEND[char])
        grid.append(tiles)
    return grid


def grid_shortest_path(
    grid: Sequence[Sequence[TileKind]],
    start: Cell,
    goal: Cell,
    *,
    doors_open: bool = True,
) -> Optional[List[Cell]]:
    """Return a 4-neighbour path of ``(x, y)`` cells from start to goal, or None.

    Walls are never crossed. Locked doors count as open unless ``doors_open`` is
    False, since a key can unlock them during a run.
    """

    if start == goal:
        return [start]

    blocked = {TileKind.WALL}
    if not doors_open:
        blocked.add(TileKind.DOOR_LOCKED)

    height = len(grid)
    visited = {start}
    queue: deque[Tuple[Cell, List[Cell]]] = deque([(start, [start])])

    def neighbors(cell: Cell) -> Iterable[Cell]:
        x, y = cell
        for direction in Direction:
            dx, dy = direction.offset
            nx, ny = x + dx, y + dy
            if 0 <= ny < height and 0 <= nx < len(grid[ny]) and grid[ny][nx] not in blocked:
                yield nx, ny

    while queue:
        cell, path = queue.popleft()
        for nb in neighbors(cell):
            if nb in visited:
                continue
            visited.add(nb)
            new_path = path + [nb]
            if nb == goal:
                return new_path
            queue.append((nb, new_path))
    return None


def goal_cells(grid: Sequence[Sequence[TileKind]]) -> List[Cell]:
    return [
        (x, y)
        for y, row in enumerate(grid)
        for x, tile in enumerate(row)
        if tile == TileKind.GOAL
    ]


_TILE_SYMBOLS: Dict[TileKind, str] = {
    TileKind.FLOOR: ". ",
    TileKind.WALL: "██",
    TileKind.START: "s ",
    TileKind.GOAL: "F ",
    TileKind.HAZARD_A: "R ",
    TileKind.HAZARD_B: "B ",
    TileKind.HAZARD_C: "Y ",
    TileKind.DOOR_LOCKED: "D ",
    TileKind.DOOR_OPEN: "O ",
}

_ROBOT_SYMBOLS: Dict[Direction, str] = {
    Direction.UP: "^ ",
    Direction.RIGHT: "> ",
    Direction.DOWN: "v ",
    Direction.LEFT: "< ",
}


def render_ascii(world: WorldState, *, symbols: Optional[Dict[TileKind, str]] = None) -> str:
    """Render the grid top row first, with the robot drawn as an arrow."""

    mapping = {**_TILE_SYMBOLS}
    if symbols:
        mapping.update(symbols)

    lines: List[str] = []
    for y, row in enumerate(world.grid):
        chars: List[str] = []
        for x, tile in enumerate(row):
            if (x, y) == world.robot.position:
                chars.append(_ROBOT_SYMBOLS[world.robot.facing])
            else:
                chars.append(mapping.get(tile, "??"))
        lines.append("".join(chars).rstrip())
    return "\n".join(lines)
