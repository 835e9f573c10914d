"""
RoboLogic Configuration

Loads configuration from environment variables with sensible defaults.
The engine modules never read this class; the session controller and the CLI
pass these values in explicitly.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()


def _flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in {"1", "true", "yes", "on"}


class Config:
    """Application configuration loaded from environment variables."""

    # Engine limits
    SENSOR_LOOP_LIMIT: int = int(os.getenv("ROBOLOGIC_SENSOR_LOOP_LIMIT", "30"))
    TICK_LIMIT: int = int(os.getenv("ROBOLOGIC_TICK_LIMIT", "50"))
    STARTING_WATER: int = int(os.getenv("ROBOLOGIC_STARTING_WATER", "3"))

    # Pacing between animated steps (seconds)
    STEP_DELAY_SECONDS: float = float(os.getenv("ROBOLOGIC_STEP_DELAY", "0.5"))

    # Level catalog: a JSON file or a directory holding levels.json
    PACKAGE_ROOT: Path = Path(__file__).parent
    LEVELS_PATH: Path = Path(
        os.getenv("ROBOLOGIC_LEVELS_PATH", str(PACKAGE_ROOT / "data" / "levels.json"))
    )

    # Logging
    VERBOSE: bool = _flag("ROBOLOGIC_VERBOSE")

    @classmethod
    def validate(cls) -> None:
        """Validate configuration and raise errors for unusable values."""
        if cls.SENSOR_LOOP_LIMIT < 1:
            raise ValueError(
                "ROBOLOGIC_SENSOR_LOOP_LIMIT must be at least 1 "
                "(it guarantees that sensor loops terminate)"
            )
        if cls.TICK_LIMIT < 1:
            raise ValueError("ROBOLOGIC_TICK_LIMIT must be at least 1")
        if cls.STARTING_WATER < 0:
            raise ValueError("ROBOLOGIC_STARTING_WATER cannot be negative")
        if cls.STEP_DELAY_SECONDS < 0:
            raise ValueError("ROBOLOGIC_STEP_DELAY cannot be negative")

    @classmethod
    def display(cls) -> str:
        """Return a formatted string showing current configuration."""
        lines = [
            "RoboLogic Configuration:",
            f"  Sensor Loop Limit: {cls.SENSOR_LOOP_LIMIT}",
            f"  Tick Limit: {cls.TICK_LIMIT}",
            f"  Starting Water: {cls.STARTING_WATER}",
            f"  Step Delay: {cls.STEP_DELAY_SECONDS}s",
            f"  Levels: {cls.LEVELS_PATH}",
        ]
        return "\n".join(lines)
