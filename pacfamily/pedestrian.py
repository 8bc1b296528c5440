"""The pedestrian: the player-steered entity the chasers track."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from .config import Config
from .environment import AgentClass, Direction, TileGrid, TilePos, is_passable


@dataclass
class Pedestrian:
    """Steered entity with a queued turn.

    ``steer()`` only records the wish; the turn is taken at the next tile
    where it is possible. The pedestrian stops when it runs into a wall and
    restarts as soon as the queued direction opens up.
    """

    col: int
    row: int
    speed: float = Config.PEDESTRIAN_SPEED
    facing: Direction = Direction.RIGHT
    queued: Direction = Direction.RIGHT
    fraction: float = 0.0
    moving: bool = False

    @property
    def tile(self) -> TilePos:
        return self.col, self.row

    def steer(self, direction: Direction) -> None:
        self.queued = direction

    def position(self) -> Tuple[float, float]:
        if not self.moving:
            return float(self.col), float(self.row)
        return (
            self.col + self.facing.dx * self.fraction,
            self.row + self.facing.dy * self.fraction,
        )

    def _can_go(self, direction: Direction, grid: TileGrid) -> bool:
        return is_passable(
            grid, self.col + direction.dx, self.row + direction.dy, AgentClass.PEDESTRIAN
        )

    def update(self, elapsed_ms: float, grid: TileGrid) -> None:
        if not self.moving:
            if self._can_go(self.queued, grid):
                self.facing = self.queued
                self.moving = True
            return

        self.fraction += self.speed * elapsed_ms / 1000.0
        while self.fraction >= 1.0:
            self.fraction -= 1.0
            self.col, self.row = grid.step(self.col, self.row, self.facing)
            if self._can_go(self.queued, grid):
                self.facing = self.queued
            if not self._can_go(self.facing, grid):
                self.moving = False
                self.fraction = 0.0
