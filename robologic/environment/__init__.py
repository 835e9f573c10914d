"""Grid world for the robot: tiles, world state, and layout helpers."""

from .tiles import (
    HAZARD_COLORS,
    PICK_EFFECTS,
    USE_EFFECTS,
    TileClass,
    TileEffect,
    TileKind,
    classify,
    hazard_color,
)
from .schemas import HOLDING_KEY, Direction, Robot, WorldState, find_start
from .helpers import (
    LAYOUT_LEGEND,
    goal_cells,
    grid_shortest_path,
    parse_layout,
    render_ascii,
)

__all__ = [
    "HAZARD_COLORS",
    "PICK_EFFECTS",
    "USE_EFFECTS",
    "TileClass",
    "TileEffect",
    "TileKind",
    "classify",
    "hazard_color",
    "HOLDING_KEY",
    "Direction",
    "Robot",
    "WorldState",
    "find_start",
    "LAYOUT_LEGEND",
    "goal_cells",
    "grid_shortest_path",
    "parse_layout",
    "render_ascii",
]
