"""Passability, path search and debug rendering for the tile grid."""

from __future__ import annotations

import random
from collections import deque
from typing import Dict, Iterable, List, Optional, Tuple

from .grid import AgentClass, Direction, Tile, TileGrid, TilePos


def is_passable(grid: TileGrid, col: int, row: int, agent_class: AgentClass) -> bool:
    """Return whether ``agent_class`` may enter tile ``(col, row)``.

    ``col`` may lie one step outside the grid; on the tunnel row it is wrapped
    before the lookup, on any other row it is simply out of bounds.
    """

    col = grid.wrap_col(col, row)
    if not grid.in_bounds(col, row):
        return False
    tile = grid.tiles[row][col]
    if tile == Tile.WALL:
        return False
    if tile == Tile.RESTRICTED:
        # Chasers roam the enclosure; pedestrians only use the outer tunnel.
        return agent_class == AgentClass.CHASER or grid.is_tunnel_tile(col, row)
    return True


def passable_directions(
    grid: TileGrid, source: TilePos, agent_class: AgentClass
) -> List[Direction]:
    """Directions out of ``source`` that lead to an enterable tile, in search order."""

    col, row = source
    return [
        direction
        for direction in Direction
        if is_passable(grid, col + direction.dx, row + direction.dy, agent_class)
    ]


def first_step_toward(
    source: TilePos,
    target: TilePos,
    agent_class: AgentClass,
    grid: TileGrid,
) -> Optional[Direction]:
    """Return the first move of a shortest path from ``source`` to ``target``.

    Breadth-first search that carries only the initiating direction through the
    frontier, so no path is ever reconstructed. Returns ``None`` when the agent
    is already on the target or when the target cannot be reached.
    """

    if source == target:
        return None

    visited = {source}
    # Frontier entries are (tile, first direction taken from the source).
    queue: deque[Tuple[TilePos, Direction]] = deque()

    col, row = source
    for direction in Direction:
        if not is_passable(grid, col + direction.dx, row + direction.dy, agent_class):
            continue
        neighbour = grid.step(col, row, direction)
        if neighbour in visited:
            continue
        visited.add(neighbour)
        queue.append((neighbour, direction))

    while queue:
        tile, first = queue.popleft()
        if tile == target:
            return first
        col, row = tile
        for direction in Direction:
            if not is_passable(grid, col + direction.dx, row + direction.dy, agent_class):
                continue
            neighbour = grid.step(col, row, direction)
            if neighbour in visited:
                continue
            visited.add(neighbour)
            queue.append((neighbour, first))
    return None


def random_direction(
    grid: TileGrid,
    source: TilePos,
    facing: Direction,
    agent_class: AgentClass,
    rng: random.Random,
) -> Direction:
    """Pick a uniformly random passable direction, avoiding a U-turn.

    The reverse of ``facing`` is only returned when it is the sole way out.
    With no way out at all the current facing is kept.
    """

    options = passable_directions(grid, source, agent_class)
    forward = [direction for direction in options if direction != facing.reverse]
    if forward:
        return rng.choice(forward)
    if options:
        return options[0]
    return facing


def shortest_distances(
    grid: TileGrid, source: TilePos, agent_class: AgentClass
) -> Dict[TilePos, int]:
    """Map every tile reachable from ``source`` to its move count."""

    distances = {source: 0}
    queue: deque[TilePos] = deque([source])
    while queue:
        col, row = queue.popleft()
        for direction in Direction:
            if not is_passable(grid, col + direction.dx, row + direction.dy, agent_class):
                continue
            neighbour = grid.step(col, row, direction)
            if neighbour in distances:
                continue
            distances[neighbour] = distances[(col, row)] + 1
            queue.append(neighbour)
    return distances


_DEFAULT_TILE_SYMBOLS: Dict[Tile, str] = {
    Tile.WALL: "██",
    Tile.OPEN: " ·",
    Tile.POWER: " ●",
    Tile.RESTRICTED: "  ",
    Tile.CONSUMED: "  ",
}


def render_ascii(
    grid: TileGrid,
    markers: Optional[Iterable[Tuple[TilePos, str]]] = None,
) -> str:
    """Render the grid as text, two characters per tile.

    ``markers`` overlays ``((col, row), symbol)`` pairs, e.g. agent positions.
    Later markers win when two share a tile. Symbols are padded to two
    characters.
    """

    overlay: Dict[TilePos, str] = {}
    for pos, symbol in markers or ():
        overlay[pos] = symbol[:2].rjust(2)

    lines: List[str] = []
    for row in range(grid.height):
        chars = []
        for col in range(grid.width):
            chars.append(overlay.get((col, row), _DEFAULT_TILE_SYMBOLS[grid.tiles[row][col]]))
        lines.append("".join(chars))
    return "\n".join(lines)
