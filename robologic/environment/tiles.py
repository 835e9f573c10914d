"""Tile kinds and the tile rule table.

Every grid cell holds one ``TileKind``. The integer values are the codes used by
level data, so a level layout can be stored either as legend characters or as
raw integers.

The rule table is pure lookup: ``classify()`` answers "what happens if the robot
tries to step here", while ``PICK_EFFECTS`` / ``USE_EFFECTS`` describe what the
``pick`` and ``use`` primitives do with the three overloaded hazard tiles.
"""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import Dict


class TileKind(IntEnum):
    """Semantic category of a grid cell (values match level-data codes)."""

    FLOOR = 0
    WALL = 1
    START = 2
    HAZARD_A = 3  # red: fire in rescue levels
    HAZARD_B = 4  # blue: water in rescue levels
    HAZARD_C = 5  # yellow: key in storage levels
    DOOR_LOCKED = 6
    DOOR_OPEN = 7
    GOAL = 9


class TileClass(str, Enum):
    """Movement classification returned by :func:`classify`."""

    BLOCKING = "blocking"
    WINNING = "winning"
    LOCKED = "locked"
    PASSABLE = "passable"

    @property
    def is_blocking(self) -> bool:
        """Locked doors block raw movement just like walls."""
        return self in (TileClass.BLOCKING, TileClass.LOCKED)


class TileEffect(str, Enum):
    """Interaction effect a hazard tile has for ``pick`` / ``use``."""

    KEY = "key"
    FIRE = "fire"
    WATER = "water"
    DOOR = "door"


# Hazard colors as they are named in tile-rule levels.
HAZARD_COLORS: Dict[str, TileKind] = {
    "red": TileKind.HAZARD_A,
    "blue": TileKind.HAZARD_B,
    "yellow": TileKind.HAZARD_C,
}

# ``pick`` acts on the tile under the robot.
PICK_EFFECTS: Dict[TileKind, TileEffect] = {
    TileKind.HAZARD_C: TileEffect.KEY,
    TileKind.HAZARD_A: TileEffect.FIRE,
}

# ``use`` acts on the tile one step ahead.
USE_EFFECTS: Dict[TileKind, TileEffect] = {
    TileKind.DOOR_LOCKED: TileEffect.DOOR,
    TileKind.HAZARD_B: TileEffect.WATER,
}

_CLASSES: Dict[TileKind, TileClass] = {
    TileKind.WALL: TileClass.BLOCKING,
    TileKind.DOOR_LOCKED: TileClass.LOCKED,
    TileKind.GOAL: TileClass.WINNING,
}


def classify(tile: TileKind | None) -> TileClass:
    """Classify a tile for movement; ``None`` stands for "outside the grid"."""
    if tile is None:
        return TileClass.BLOCKING
    return _CLASSES.get(TileKind(tile), TileClass.PASSABLE)


def hazard_color(tile: TileKind) -> str | None:
    """Return the rule color name of a hazard tile, or None for other tiles."""
    for color, kind in HAZARD_COLORS.items():
        if kind == tile:
            return color
    return None
