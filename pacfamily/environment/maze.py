"""Maze layouts.

Layouts are written as text, one character per tile:

    ``#`` wall, ``.`` dot, ``o`` power tile, ``=`` restricted floor,
    space for an already consumed tile.

``DEFAULT_LAYOUT`` is the classic PacFamily board: 19 columns by 21 rows with
the chaser enclosure in the middle and the tunnel on row 8.
"""

from __future__ import annotations

from typing import Dict, Sequence, Tuple

from .grid import Tile, TileGrid, TilePos

LAYOUT_SYMBOLS: Dict[str, Tile] = {
    "#": Tile.WALL,
    ".": Tile.OPEN,
    "o": Tile.POWER,
    "=": Tile.RESTRICTED,
    " ": Tile.CONSUMED,
}

DEFAULT_LAYOUT: Tuple[str, ...] = (
    "###################",
    "#........#........#",
    "#o##.##.###.##.##o#",
    "#.................#",
    "#.##.#.#####.#.##.#",
    "#....#...#...#....#",
    "####..##=#=##..####",
    "####..=======..####",
    "====..=#===#=..====",
    "####..=======..####",
    "####..###=###..####",
    "#........#........#",
    "#.##.##..#..##.##.#",
    "#o.#...........#.o#",
    "##.#.#.#####.#.#.##",
    "#....#...#...#....#",
    "#.######.#.######.#",
    "#.................#",
    "#.#.##.#####.##.#.#",
    "#.................#",
    "###################",
)
DEFAULT_TUNNEL_ROW = 8

# Key positions on the default board, as (col, row).
HOUSE_TILES: Tuple[TilePos, ...] = ((8, 8), (10, 8))
EXIT_TILES: Tuple[TilePos, ...] = ((8, 5), (10, 5))
SCATTER_CORNERS: Tuple[TilePos, ...] = ((17, 1), (1, 19))
PEDESTRIAN_START: TilePos = (9, 17)
FRUIT_TILE: TilePos = (9, 13)
EXIT_DELAYS_MS: Tuple[float, ...] = (0.0, 3000.0)


def parse_layout(lines: Sequence[str], tunnel_row: int) -> TileGrid:
    """Parse a text layout into a :class:`TileGrid`.

    Raises:
        ValueError: on unknown symbols, ragged rows or a bad tunnel row.
    """

    tiles = []
    for row_index, line in enumerate(lines):
        row = []
        for col_index, symbol in enumerate(line):
            if symbol not in LAYOUT_SYMBOLS:
                raise ValueError(
                    f"unknown layout symbol {symbol!r} at ({col_index}, {row_index})"
                )
            row.append(LAYOUT_SYMBOLS[symbol])
        tiles.append(row)
    return TileGrid(tiles=tiles, tunnel_row=tunnel_row)


def build_default_grid() -> TileGrid:
    """Fresh copy of the default board."""

    return parse_layout(DEFAULT_LAYOUT, DEFAULT_TUNNEL_ROW)
