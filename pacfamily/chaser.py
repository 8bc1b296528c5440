"""Chaser agents: mode overrides, target selection and tile-by-tile motion."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from .config import Config
from .environment import (
    AgentClass,
    Direction,
    TileGrid,
    TilePos,
    first_step_toward,
    is_passable,
    random_direction,
)
from .logging_utils import log_debug
from .scheduler import Phase


class ChaserMode(str, Enum):
    HOUSED = "housed"
    SCATTER = "scatter"
    CHASE = "chase"
    FRIGHTENED = "frightened"
    EATEN = "eaten"


# Modes that ignore global phase changes until their condition resolves.
OVERRIDE_MODES = frozenset({ChaserMode.HOUSED, ChaserMode.FRIGHTENED, ChaserMode.EATEN})


def _baseline_mode(phase: Phase) -> ChaserMode:
    return ChaserMode.CHASE if phase == Phase.CHASE else ChaserMode.SCATTER


@dataclass(frozen=True)
class ChaserSpeeds:
    """Speeds in tiles per second for each movement regime."""

    normal: float = Config.CHASER_SPEED_NORMAL
    frightened: float = Config.CHASER_SPEED_FRIGHTENED
    eaten: float = Config.CHASER_SPEED_EATEN
    housed: float = Config.CHASER_SPEED_HOUSED


@dataclass
class ChaserAgent:
    """A chaser that pursues or flees the pedestrian.

    Position is the tile ``(col, row)`` it last reached plus ``fraction`` of
    the way toward the next tile in ``facing``. Agents start housed and idle
    so their first update asks the path search for a direction.
    """

    name: str
    col: int
    row: int
    scatter_corner: TilePos
    exit_tile: TilePos
    house_tile: TilePos
    exit_delay_ms: float = 0.0
    speeds: ChaserSpeeds = field(default_factory=ChaserSpeeds)
    frighten_ms: float = Config.FRIGHTEN_MS
    rng: random.Random = field(default_factory=lambda: random.Random(Config.RANDOM_SEED))
    debug_pathfinding: bool = Config.DEBUG_PATHFINDING
    facing: Direction = Direction.UP
    fraction: float = 0.0
    moving: bool = False
    mode: ChaserMode = ChaserMode.HOUSED
    speed: float = field(init=False)
    frighten_remaining_ms: float = 0.0

    def __post_init__(self) -> None:
        self.speed = self._speed_for(self.mode)

    @property
    def tile(self) -> TilePos:
        return self.col, self.row

    @property
    def waiting_in_house(self) -> bool:
        return self.exit_delay_ms > 0

    def position(self) -> Tuple[float, float]:
        """Interpolated ``(x, y)`` in tile units, for rendering and collisions."""

        if not self.moving:
            return float(self.col), float(self.row)
        return (
            self.col + self.facing.dx * self.fraction,
            self.row + self.facing.dy * self.fraction,
        )

    # ------------------------------------------------------------------
    # Mode transitions
    # ------------------------------------------------------------------

    def _speed_for(self, mode: ChaserMode) -> float:
        if mode == ChaserMode.HOUSED:
            return self.speeds.housed
        if mode == ChaserMode.FRIGHTENED:
            return self.speeds.frightened
        if mode == ChaserMode.EATEN:
            return self.speeds.eaten
        if mode in (ChaserMode.SCATTER, ChaserMode.CHASE):
            return self.speeds.normal
        raise ValueError(f"unhandled chaser mode: {mode!r}")

    def _enter(self, mode: ChaserMode) -> None:
        self.mode = mode
        self.speed = self._speed_for(mode)
        if mode != ChaserMode.FRIGHTENED:
            self.frighten_remaining_ms = 0.0

    def frighten(self) -> bool:
        """Enter (or restart) the frightened countdown.

        Housed and eaten chasers are unaffected. Returns whether the agent is
        now frightened.
        """

        if self.mode in (ChaserMode.HOUSED, ChaserMode.EATEN):
            return False
        self._enter(ChaserMode.FRIGHTENED)
        self.frighten_remaining_ms = self.frighten_ms
        return True

    def mark_eaten(self) -> None:
        self._enter(ChaserMode.EATEN)

    def apply_phase(self, phase: Phase) -> bool:
        """Follow a global phase change unless an override is active."""

        if self.mode in OVERRIDE_MODES:
            return False
        self._enter(_baseline_mode(phase))
        return True

    def _check_arrival(self, phase: Phase) -> None:
        # Leaving the house or getting back home rejoins the global cycle.
        if self.mode == ChaserMode.HOUSED and self.tile == self.exit_tile:
            self._enter(_baseline_mode(phase))
        elif self.mode == ChaserMode.EATEN and self.tile == self.house_tile:
            self._enter(_baseline_mode(phase))

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def target_tile(self, pedestrian_tile: TilePos) -> Optional[TilePos]:
        """Tile the agent steers toward in its current mode; ``None`` means wander."""

        if self.mode == ChaserMode.HOUSED:
            return self.exit_tile
        if self.mode == ChaserMode.SCATTER:
            return self.scatter_corner
        if self.mode == ChaserMode.CHASE:
            return pedestrian_tile
        if self.mode == ChaserMode.EATEN:
            return self.house_tile
        if self.mode == ChaserMode.FRIGHTENED:
            return None
        raise ValueError(f"unhandled chaser mode: {self.mode!r}")

    def choose_direction(self, pedestrian_tile: TilePos, grid: TileGrid) -> Direction:
        target = self.target_tile(pedestrian_tile)
        if target is not None:
            direction = first_step_toward(self.tile, target, AgentClass.CHASER, grid)
            if direction is not None and self._can_go(direction, grid):
                return direction
            if direction is None and target != self.tile and self.debug_pathfinding:
                log_debug(
                    f"[{self.name}] No path from {self.tile} to {target}; wandering"
                )
        return random_direction(grid, self.tile, self.facing, AgentClass.CHASER, self.rng)

    def _can_go(self, direction: Direction, grid: TileGrid) -> bool:
        return is_passable(
            grid, self.col + direction.dx, self.row + direction.dy, AgentClass.CHASER
        )

    # ------------------------------------------------------------------
    # Per-tick update
    # ------------------------------------------------------------------

    def update(
        self,
        elapsed_ms: float,
        pedestrian_tile: TilePos,
        grid: TileGrid,
        phase: Phase,
    ) -> None:
        """Advance the agent by ``elapsed_ms`` of simulated time.

        ``phase`` is the current global phase; it decides the mode a chaser
        takes when it leaves the house or gets back home after being eaten.
        """

        if self.exit_delay_ms > 0:
            self.exit_delay_ms -= elapsed_ms
            if self.exit_delay_ms > 0:
                return
            self.exit_delay_ms = 0.0

        if self.mode == ChaserMode.FRIGHTENED:
            self.frighten_remaining_ms -= elapsed_ms
            if self.frighten_remaining_ms <= 0:
                self._enter(ChaserMode.CHASE)

        self._move(elapsed_ms, pedestrian_tile, grid, phase)

    def _move(
        self, elapsed_ms: float, pedestrian_tile: TilePos, grid: TileGrid, phase: Phase
    ) -> None:
        if not self.moving:
            self._check_arrival(phase)
            direction = self.choose_direction(pedestrian_tile, grid)
            if not self._can_go(direction, grid):
                return
            self.facing = direction
            self.moving = True
            self.fraction = 0.0

        self.fraction += self.speed * elapsed_ms / 1000.0
        while self.fraction >= 1.0:
            self.fraction -= 1.0
            self.col, self.row = grid.step(self.col, self.row, self.facing)
            self._check_arrival(phase)
            self.facing = self.choose_direction(pedestrian_tile, grid)
            if not self._can_go(self.facing, grid):
                self.moving = False
                self.fraction = 0.0
