"""
PacFamily - chaser navigation and mode scheduling for a Pac-Man-style maze.

Tile grid with a wraparound tunnel, breadth-first first-step search,
scatter/chase phase scheduling with frightened/eaten overrides, and a
frame-driven round orchestrator.

No rendering, no input handling, no score persistence.
All collaborators injected by the caller.
"""

__version__ = "0.1.0"

# Main round driver
from .orchestrator import (
    Orchestrator,
    ChaseRoundOver,
    build_default_chasers,
    build_default_pedestrian,
)

# Agents and scheduling
from .chaser import ChaserAgent, ChaserMode, ChaserSpeeds
from .pedestrian import Pedestrian
from .scheduler import ModeScheduler, Phase, default_schedule
from .config import Config

# Maze model and search
from .environment import (
    AgentClass,
    Direction,
    Tile,
    TileGrid,
    TileGridState,
    build_default_grid,
    first_step_toward,
    is_passable,
    parse_layout,
    random_direction,
    render_ascii,
)

# Schemas
from .schemas import (
    ChaserStatus,
    EventKind,
    PedestrianStatus,
    RoundEvent,
    RoundSnapshot,
)

__all__ = [
    # Main class
    "Orchestrator",
    "ChaseRoundOver",
    "build_default_chasers",
    "build_default_pedestrian",
    # Agents and scheduling
    "ChaserAgent",
    "ChaserMode",
    "ChaserSpeeds",
    "Pedestrian",
    "ModeScheduler",
    "Phase",
    "default_schedule",
    "Config",
    # Maze model
    "AgentClass",
    "Direction",
    "Tile",
    "TileGrid",
    "TileGridState",
    "build_default_grid",
    "first_step_toward",
    "is_passable",
    "parse_layout",
    "random_direction",
    "render_ascii",
    # Schemas
    "ChaserStatus",
    "EventKind",
    "PedestrianStatus",
    "RoundEvent",
    "RoundSnapshot",
]
