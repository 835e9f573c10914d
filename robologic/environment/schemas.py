"""Pydantic schemas for the robot world.

``WorldState`` is the mutable world model a run works on: a rectangular grid of
``TileKind`` values plus the robot pose. The interpreter mutates it in place one
primitive step at a time; snapshots for the presentation layer are deep copies
(``model_copy(deep=True)``) so later steps never rewrite history.
"""

from __future__ import annotations

from enum import IntEnum
from typing import List, Literal, Optional, Sequence, Tuple

from pydantic import BaseModel, Field

from .tiles import TileKind, TileClass, classify

Cell = Tuple[int, int]

HOLDING_KEY = "key"


class Direction(IntEnum):
    """Cardinal facing, encoded the way level data stores ``start_dir``."""

    UP = 0
    RIGHT = 1
    DOWN = 2
    LEFT = 3

    @property
    def offset(self) -> Cell:
        return _OFFSETS[self]

    def rotate(self, quarter_turns: int) -> "Direction":
        """Rotate clockwise by ``quarter_turns`` (negative turns counter-clockwise)."""
        return Direction((self.value + quarter_turns) % 4)


_OFFSETS = {
    Direction.UP: (0, -1),
    Direction.RIGHT: (1, 0),
    Direction.DOWN: (0, 1),
    Direction.LEFT: (-1, 0),
}


class Robot(BaseModel):
    """Robot pose plus its single-slot inventory and resource counter."""

    x: int
    y: int
    facing: Direction = Direction.UP
    inventory: Optional[Literal["key"]] = Field(
        None, description="Empty or holding exactly one key",
    )
    resource: int = Field(0, description="Remaining water charges")

    @property
    def position(self) -> Cell:
        return (self.x, self.y)

    @property
    def has_key(self) -> bool:
        return self.inventory == HOLDING_KEY


class WorldState(BaseModel):
    """Grid of tiles (indexed ``grid[y][x]``) and the robot standing on it."""

    grid: List[List[TileKind]]
    robot: Robot
    starting_resource: int = Field(
        3, description="Value the resource counter is refilled to",
    )

    @classmethod
    def from_grid(
        cls,
        grid: Sequence[Sequence[int]],
        facing: int = Direction.UP,
        *,
        starting_resource: int = 3,
    ) -> "WorldState":
        """Build a fresh world, placing the robot on the grid's ``Start`` cell.

        The grid is copied, so level data is never mutated by a run.

        Raises:
            ValueError: If the grid has no ``Start`` cell.
        """
        rows = [[TileKind(code) for code in row] for row in grid]
        start = find_start(rows)
        if start is None:
            raise ValueError("Grid has no Start cell")
        robot = Robot(
            x=start[0],
            y=start[1],
            facing=Direction(facing),
            resource=starting_resource,
        )
        return cls(grid=rows, robot=robot, starting_resource=starting_resource)

    @property
    def height(self) -> int:
        return len(self.grid)

    @property
    def width(self) -> int:
        return len(self.grid[0]) if self.grid else 0

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= y < self.height and 0 <= x < len(self.grid[y])

    def tile_at(self, x: int, y: int) -> Optional[TileKind]:
        """Return the tile at ``(x, y)`` or None when outside the grid."""
        if not self.in_bounds(x, y):
            return None
        return self.grid[y][x]

    def set_tile(self, x: int, y: int, tile: TileKind) -> None:
        self.grid[y][x] = tile

    def cell_ahead(self) -> Cell:
        """Cell the robot would enter with a single forward move."""
        dx, dy = self.robot.facing.offset
        return (self.robot.x + dx, self.robot.y + dy)

    def tile_ahead(self) -> Optional[TileKind]:
        return self.tile_at(*self.cell_ahead())

    def classify_ahead(self) -> TileClass:
        return classify(self.tile_ahead())

    def tile_under_robot(self) -> TileKind:
        return self.grid[self.robot.y][self.robot.x]

    def snapshot(self) -> "WorldState":
        return self.model_copy(deep=True)


def find_start(grid: Sequence[Sequence[int]]) -> Optional[Cell]:
    """Return ``(x, y)`` of the first ``Start`` cell in row-major order."""
    for y, row in enumerate(grid):
        for x, code in enumerate(row):
            if code == TileKind.START:
                return (x, y)
    return None
