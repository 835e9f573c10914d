"""
Level catalog loading for RoboLogic.

Levels are declarative data: a grid layout, the robot's start facing, which
commands the palette offers, optional starter code for debugging levels and a
hint. ``LevelLoader`` turns a JSON catalog into validated ``Level`` models and
``Level.build_world()`` produces the fresh ``WorldState`` a run starts from.

Catalog file structure:
```json
{
  "name": "RoboLogic Academy",
  "levels": [
    {
      "id": "mars-1",
      "category": "Mars Robot Mission",
      "title": "Level 1: First Steps",
      "start_dir": 1,
      "palette": ["move"],
      "hint": "...",
      "layout": [".....", ".....", "S.F..", ".....", "....."]
    }
  ]
}
```

Malformed levels (jagged rows, no or several ``S`` cells, no goal) are
configuration errors and are rejected here, never inside the engine.

Usage:
    loader = LevelLoader()
    level = loader.get("mars-1")
    world = level.build_world()
"""

import json
from pathlib import Path
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .config import Config
from .environment import Direction, TileKind, WorldState, parse_layout
from .schemas import COMMAND_TYPES, Command


class Level(BaseModel):
    """One playable level."""

    id: str
    category: str
    title: str
    subtitle: str = ""
    description: str = ""
    layout: List[str] = Field(..., description="Grid rows in legend characters, top row first")
    start_dir: Direction = Direction.UP
    mode: Literal["program", "tile_rules"] = Field(
        "program",
        description="'tile_rules' levels run the color-rule simulation instead of a program",
    )
    palette: List[str] = Field(default_factory=list, description="Command types offered")
    max_commands: Optional[int] = Field(None, ge=1, description="Top-level program length cap")
    initial_code: List[Command] = Field(default_factory=list, description="Starter program")
    hint: str = ""
    theme: str = "mars"

    @field_validator("palette")
    @classmethod
    def _known_command_types(cls, palette: List[str]) -> List[str]:
        unknown = [name for name in palette if name not in COMMAND_TYPES]
        if unknown:
            raise ValueError(f"Unknown command types in palette: {unknown}")
        return palette

    @model_validator(mode="after")
    def _check_layout(self) -> "Level":
        if not self.layout:
            raise ValueError(f"Level '{self.id}' has an empty layout")
        widths = {len(row) for row in self.layout}
        if len(widths) != 1:
            raise ValueError(f"Level '{self.id}' layout is not rectangular (row widths {sorted(widths)})")

        grid = parse_layout(self.layout)
        starts = sum(row.count(TileKind.START) for row in grid)
        if starts != 1:
            raise ValueError(f"Level '{self.id}' must have exactly one start cell, found {starts}")
        if not any(TileKind.GOAL in row for row in grid):
            raise ValueError(f"Level '{self.id}' has no goal cell")
        return self

    @property
    def grid(self) -> List[List[TileKind]]:
        return parse_layout(self.layout)

    @property
    def uses_tile_rules(self) -> bool:
        return self.mode == "tile_rules"

    def build_world(self, starting_resource: int = 3) -> WorldState:
        """Return a fresh world for this level (never shared between runs)."""
        return WorldState.from_grid(
            self.grid,
            self.start_dir,
            starting_resource=starting_resource,
        )

    def initial_program(self) -> List[Command]:
        """Deep copy of the starter program so edits never touch level data."""
        return [command.model_copy(deep=True) for command in self.initial_code]


class LevelLoader:
    """Load and validate a JSON level catalog.

    ``levels_path`` may point at a catalog file or at a directory containing
    ``levels.json``; it defaults to ``Config.LEVELS_PATH`` (the bundled catalog).
    The catalog is read lazily on first access and cached.
    """

    def __init__(self, levels_path: Optional[Path] = None):
        path = Path(levels_path) if levels_path is not None else Config.LEVELS_PATH
        if path.is_dir():
            path = path / "levels.json"
        self.levels_path = path
        self._levels: Optional[Dict[str, Level]] = None

    def load(self) -> List[Level]:
        """Read the catalog and return its levels in file order.

        Raises:
            FileNotFoundError: If the catalog file doesn't exist
            ValueError: If the catalog or any level is malformed
            json.JSONDecodeError: If the file contains invalid JSON
        """
        if not self.levels_path.exists():
            raise FileNotFoundError(f"Level catalog not found at {self.levels_path}")

        data = json.loads(self.levels_path.read_text(encoding="utf-8"))
        self._validate_catalog(data)

        levels: Dict[str, Level] = {}
        for entry in data["levels"]:
            level = Level(**entry)
            if level.id in levels:
                raise ValueError(f"Duplicate level id '{level.id}' in {self.levels_path}")
            levels[level.id] = level

        self._levels = levels
        return list(levels.values())

    def _validate_catalog(self, data: Dict) -> None:
        if not isinstance(data, dict) or "levels" not in data:
            raise ValueError("Level catalog must be an object with a 'levels' list")
        if not data["levels"]:
            raise ValueError("Level catalog must contain at least one level")

        required = ["id", "category", "title", "layout"]
        for index, entry in enumerate(data["levels"]):
            missing = [field for field in required if field not in entry]
            if missing:
                raise ValueError(f"Level #{index} missing required fields: {missing}")

    def _catalog(self) -> Dict[str, Level]:
        if self._levels is None:
            self.load()
        return self._levels

    def list_levels(self) -> List[Level]:
        return list(self._catalog().values())

    def get(self, level_id: str) -> Level:
        """Return a level by id.

        Raises:
            KeyError: If no level has that id.
        """
        catalog = self._catalog()
        if level_id not in catalog:
            raise KeyError(f"Unknown level id: {level_id}")
        return catalog[level_id]

    def next_level(self, level_id: str) -> Optional[Level]:
        """Level following ``level_id`` in catalog order, or None after the last one."""
        ids = list(self._catalog())
        position = ids.index(self.get(level_id).id)
        if position + 1 < len(ids):
            return self._catalog()[ids[position + 1]]
        return None

    def categories(self) -> Dict[str, List[Level]]:
        grouped: Dict[str, List[Level]] = {}
        for level in self.list_levels():
            grouped.setdefault(level.category, []).append(level)
        return grouped
