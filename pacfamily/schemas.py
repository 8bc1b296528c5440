"""
Pydantic schemas for PacFamily round snapshots and events.

Agents and the grid are plain mutable objects updated every frame; these
models are the serializable views handed to listeners and callers.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from pacfamily.environment import TileGridState


class ChaserStatus(BaseModel):
    """Observable state of one chaser."""

    name: str = Field(..., description="Chaser identifier")
    mode: str = Field(..., description="housed, scatter, chase, frightened or eaten")
    # [col, row]; lists rather than tuples keep JSON output flat
    tile: List[int] = Field(..., min_length=2, max_length=2)
    facing: str
    fraction: float = Field(0.0, ge=0.0, lt=1.0, description="Progress toward the next tile")
    speed: float = Field(..., description="Tiles per second")
    moving: bool = True
    frighten_remaining_ms: float = 0.0
    exit_delay_ms: float = 0.0


class PedestrianStatus(BaseModel):
    """Observable state of the pedestrian."""

    tile: List[int] = Field(..., min_length=2, max_length=2)
    facing: str
    fraction: float = Field(0.0, ge=0.0, lt=1.0)
    moving: bool = True


class EventKind(str, Enum):
    DOT_CONSUMED = "dot_consumed"
    POWER_CONSUMED = "power_consumed"
    PHASE_CHANGED = "phase_changed"
    CHASER_EATEN = "chaser_eaten"
    PEDESTRIAN_CAUGHT = "pedestrian_caught"
    MAZE_CLEARED = "maze_cleared"
    FRUIT_SPAWNED = "fruit_spawned"
    FRUIT_CONSUMED = "fruit_consumed"
    FRUIT_EXPIRED = "fruit_expired"
    LIFE_LOST = "life_lost"
    GAME_OVER = "game_over"


class RoundEvent(BaseModel):
    """Something that happened during a frame and matters upstream.

    Score events carry ``points``. A caught pedestrian is followed by
    ``LIFE_LOST`` once the dying pause ends, and by ``GAME_OVER`` when that
    was the last life.
    """

    kind: EventKind
    frame: int = Field(..., description="Frame index the event occurred in")
    chaser: Optional[str] = Field(None, description="Chaser involved, if any")
    tile: Optional[List[int]] = Field(None, description="[col, row] where it happened")
    points: int = 0
    detail: Optional[str] = None


class RoundSnapshot(BaseModel):
    """Complete observable state of a round after a frame."""

    frame: int
    elapsed_ms: float = Field(0.0, description="Simulated time since the round started")
    phase: str
    phase_index: int
    score: int = 0
    lives: int = Field(..., ge=0)
    remaining_dots: int
    dying: bool = False
    fruit_remaining_ms: float = Field(0.0, ge=0.0, description="0 when no fruit is on the board")
    over: bool = False
    pedestrian: PedestrianStatus
    chasers: List[ChaserStatus] = Field(default_factory=list)
    grid: TileGridState
