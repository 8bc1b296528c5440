"""Tile grid for the chase maze.

The grid is a fixed-size array of tile classes addressed by ``(col, row)``.
Exactly one row is the tunnel row: stepping off its left edge lands on the
last column and vice versa. Every other row is bounded.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import FrozenSet, List, Sequence, Tuple

TilePos = Tuple[int, int]
"""Tile coordinate as ``(col, row)``."""


class Tile(IntEnum):
    """Tile classes. Integer values match the numeric maze codes."""

    OPEN = 0
    WALL = 1
    POWER = 2
    RESTRICTED = 3
    CONSUMED = 4


class Direction(IntEnum):
    """Cardinal directions in search expansion order."""

    LEFT = 0
    UP = 1
    RIGHT = 2
    DOWN = 3

    @property
    def dx(self) -> int:
        return _DELTAS[self][0]

    @property
    def dy(self) -> int:
        return _DELTAS[self][1]

    @property
    def reverse(self) -> "Direction":
        return Direction((self.value + 2) % 4)


_DELTAS = {
    Direction.LEFT: (-1, 0),
    Direction.UP: (0, -1),
    Direction.RIGHT: (1, 0),
    Direction.DOWN: (0, 1),
}


class AgentClass(str, Enum):
    """Which passability rules apply to an entity."""

    PEDESTRIAN = "pedestrian"
    CHASER = "chaser"


@dataclass
class TileGrid:
    """Fixed-size tile grid with one wraparound tunnel row.

    ``tiles`` is indexed ``tiles[row][col]``. The outer tunnel segments are
    the runs of restricted tiles touching the left and right edges of the
    tunnel row; pedestrians may walk those but not the enclosure interior.
    """

    tiles: List[List[Tile]]
    tunnel_row: int
    tunnel_cols: FrozenSet[int] = field(init=False)

    def __post_init__(self) -> None:
        if not self.tiles or not self.tiles[0]:
            raise ValueError("grid must have at least one row and one column")
        width = len(self.tiles[0])
        for index, row in enumerate(self.tiles):
            if len(row) != width:
                raise ValueError(
                    f"row {index} has {len(row)} tiles, expected {width}"
                )
        if not 0 <= self.tunnel_row < len(self.tiles):
            raise ValueError(
                f"tunnel_row {self.tunnel_row} outside 0..{len(self.tiles) - 1}"
            )
        self.tiles = [[Tile(value) for value in row] for row in self.tiles]
        self.tunnel_cols = self._outer_tunnel_cols()

    @property
    def width(self) -> int:
        return len(self.tiles[0])

    @property
    def height(self) -> int:
        return len(self.tiles)

    def _outer_tunnel_cols(self) -> FrozenSet[int]:
        row = self.tiles[self.tunnel_row]
        cols = set()
        for col in range(self.width):
            if row[col] != Tile.RESTRICTED:
                break
            cols.add(col)
        for col in range(self.width - 1, -1, -1):
            if row[col] != Tile.RESTRICTED:
                break
            cols.add(col)
        return frozenset(cols)

    def wrap_col(self, col: int, row: int) -> int:
        """Resolve a column through the tunnel. Other rows pass through unchanged."""

        if row != self.tunnel_row:
            return col
        if col < 0:
            return self.width - 1
        if col >= self.width:
            return 0
        return col

    def in_bounds(self, col: int, row: int) -> bool:
        return 0 <= col < self.width and 0 <= row < self.height

    def is_tunnel_tile(self, col: int, row: int) -> bool:
        return row == self.tunnel_row and col in self.tunnel_cols

    def tile_at(self, col: int, row: int) -> Tile:
        assert self.in_bounds(col, row), f"tile ({col}, {row}) outside {self.width}x{self.height} grid"
        return self.tiles[row][col]

    def step(self, col: int, row: int, direction: Direction) -> TilePos:
        """Return the neighbour of ``(col, row)`` in ``direction``, wrapped on the tunnel row."""

        new_row = row + direction.dy
        return self.wrap_col(col + direction.dx, new_row), new_row

    def consume(self, col: int, row: int) -> Tile:
        """Mark a dot or power tile as consumed and return its previous class.

        Tiles that hold nothing edible are left untouched.
        """

        previous = self.tile_at(col, row)
        if previous in (Tile.OPEN, Tile.POWER):
            self.tiles[row][col] = Tile.CONSUMED
        return previous

    def remaining_dots(self) -> int:
        return sum(
            1 for row in self.tiles for tile in row if tile in (Tile.OPEN, Tile.POWER)
        )

    @classmethod
    def from_codes(cls, codes: Sequence[Sequence[int]], tunnel_row: int) -> "TileGrid":
        """Build a grid from numeric tile codes (0 open, 1 wall, 2 power, 3 restricted, 4 consumed)."""

        try:
            tiles = [[Tile(code) for code in row] for row in codes]
        except ValueError as exc:
            raise ValueError(f"unknown tile code: {exc}") from exc
        return cls(tiles=tiles, tunnel_row=tunnel_row)
