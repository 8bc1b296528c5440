"""Maze model, passability and path search."""

from .grid import AgentClass, Direction, Tile, TileGrid, TilePos
from .schemas import TileGridState
from .helpers import (
    first_step_toward,
    is_passable,
    passable_directions,
    random_direction,
    render_ascii,
    shortest_distances,
)
from .maze import (
    DEFAULT_LAYOUT,
    DEFAULT_TUNNEL_ROW,
    build_default_grid,
    parse_layout,
)

__all__ = [
    "AgentClass",
    "Direction",
    "Tile",
    "TileGrid",
    "TilePos",
    "TileGridState",
    "first_step_toward",
    "is_passable",
    "passable_directions",
    "random_direction",
    "render_ascii",
    "shortest_distances",
    "DEFAULT_LAYOUT",
    "DEFAULT_TUNNEL_ROW",
    "build_default_grid",
    "parse_layout",
]
