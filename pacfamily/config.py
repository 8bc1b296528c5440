"""
PacFamily Configuration

Loads tuning values from environment variables with the classic game's defaults.
"""

import os
from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()


def _optional_int(name: str) -> int | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    return int(raw)


class Config:
    """Game tuning loaded from environment variables."""

    # Speeds in tiles per second
    CHASER_SPEED_NORMAL: float = float(os.getenv("CHASER_SPEED_NORMAL", "5.0"))
    CHASER_SPEED_FRIGHTENED: float = float(os.getenv("CHASER_SPEED_FRIGHTENED", "3.0"))
    CHASER_SPEED_EATEN: float = float(os.getenv("CHASER_SPEED_EATEN", "12.0"))
    CHASER_SPEED_HOUSED: float = float(os.getenv("CHASER_SPEED_HOUSED", "4.0"))
    PEDESTRIAN_SPEED: float = float(os.getenv("PEDESTRIAN_SPEED", "6.5"))

    # Timers in milliseconds
    FRIGHTEN_MS: float = float(os.getenv("FRIGHTEN_MS", "8000"))
    SCATTER_MS: float = float(os.getenv("SCATTER_MS", "7000"))
    CHASE_MS: float = float(os.getenv("CHASE_MS", "20000"))
    # Frame deltas are clamped so a resumed tab does not teleport agents
    MAX_FRAME_MS: float = float(os.getenv("MAX_FRAME_MS", "50"))

    # Distance in tiles at which a chaser touches the pedestrian
    COLLISION_RADIUS: float = float(os.getenv("COLLISION_RADIUS", "0.72"))

    # Scoring
    DOT_SCORE: int = int(os.getenv("DOT_SCORE", "10"))
    POWER_SCORE: int = int(os.getenv("POWER_SCORE", "50"))
    CHASER_SCORE: int = int(os.getenv("CHASER_SCORE", "200"))
    FRUIT_SCORE: int = int(os.getenv("FRUIT_SCORE", "150"))

    # Bonus fruit appears once this many tiles have been eaten in a life
    FRUIT_SPAWN_DOTS: int = int(os.getenv("FRUIT_SPAWN_DOTS", "70"))
    FRUIT_MS: float = float(os.getenv("FRUIT_MS", "9000"))

    # Lives, and the pause between being caught and the next life
    INITIAL_LIVES: int = int(os.getenv("INITIAL_LIVES", "3"))
    DYING_MS: float = float(os.getenv("DYING_MS", "1200"))

    # Seed for the random wander fallback; unset means nondeterministic
    RANDOM_SEED: int | None = _optional_int("PACFAMILY_SEED")

    # Logging
    VERBOSE: bool = bool(os.getenv("PACFAMILY_VERBOSE"))
    DEBUG_PATHFINDING: bool = bool(os.getenv("DEBUG_PATHFINDING"))

    @classmethod
    def validate(cls) -> None:
        """Validate configuration and raise errors for unusable values."""
        speeds = {
            "CHASER_SPEED_NORMAL": cls.CHASER_SPEED_NORMAL,
            "CHASER_SPEED_FRIGHTENED": cls.CHASER_SPEED_FRIGHTENED,
            "CHASER_SPEED_EATEN": cls.CHASER_SPEED_EATEN,
            "CHASER_SPEED_HOUSED": cls.CHASER_SPEED_HOUSED,
            "PEDESTRIAN_SPEED": cls.PEDESTRIAN_SPEED,
        }
        for name, value in speeds.items():
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")

        durations = {
            "FRIGHTEN_MS": cls.FRIGHTEN_MS,
            "SCATTER_MS": cls.SCATTER_MS,
            "CHASE_MS": cls.CHASE_MS,
            "MAX_FRAME_MS": cls.MAX_FRAME_MS,
            "FRUIT_MS": cls.FRUIT_MS,
            "DYING_MS": cls.DYING_MS,
        }
        for name, value in durations.items():
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")

        if cls.INITIAL_LIVES < 1:
            raise ValueError(f"INITIAL_LIVES must be at least 1, got {cls.INITIAL_LIVES}")

        if cls.COLLISION_RADIUS <= 0:
            raise ValueError(
                f"COLLISION_RADIUS must be positive, got {cls.COLLISION_RADIUS}"
            )

    @classmethod
    def display(cls) -> str:
        """Return a formatted string showing current configuration."""
        lines = [
            "PacFamily Configuration:",
            f"  Chaser speeds: normal={cls.CHASER_SPEED_NORMAL} "
            f"frightened={cls.CHASER_SPEED_FRIGHTENED} eaten={cls.CHASER_SPEED_EATEN} "
            f"housed={cls.CHASER_SPEED_HOUSED}",
            f"  Pedestrian speed: {cls.PEDESTRIAN_SPEED}",
            f"  Phases: scatter={cls.SCATTER_MS:.0f}ms chase={cls.CHASE_MS:.0f}ms",
            f"  Frighten: {cls.FRIGHTEN_MS:.0f}ms",
            f"  Lives: {cls.INITIAL_LIVES} (dying pause {cls.DYING_MS:.0f}ms)",
            f"  Fruit: after {cls.FRUIT_SPAWN_DOTS} dots for {cls.FRUIT_MS:.0f}ms",
            f"  Max frame: {cls.MAX_FRAME_MS:.0f}ms",
            f"  Seed: {cls.RANDOM_SEED if cls.RANDOM_SEED is not None else 'random'}",
        ]
        return "\n".join(lines)
