"""Pydantic snapshot of the tile grid.

Mirrors the :class:`~pacfamily.environment.grid.TileGrid` dataclass so round
snapshots stay serializable.
"""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field

from .grid import TileGrid


class TileGridState(BaseModel):
    """Dense representation of the maze at one instant."""

    width: int
    height: int
    tunnel_row: int = Field(..., description="Row with horizontal wraparound")
    codes: List[List[int]] = Field(
        default_factory=list,
        description="Tile codes indexed [row][col] (0 open, 1 wall, 2 power, 3 restricted, 4 consumed)",
    )

    @classmethod
    def from_grid(cls, grid: TileGrid) -> "TileGridState":
        return cls(
            width=grid.width,
            height=grid.height,
            tunnel_row=grid.tunnel_row,
            codes=[[int(tile) for tile in row] for row in grid.tiles],
        )

    def to_grid(self) -> TileGrid:
        return TileGrid.from_codes(self.codes, self.tunnel_row)
