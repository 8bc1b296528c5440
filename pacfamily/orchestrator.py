"""
Round orchestrator.

Owns a game of several lives and advances it frame by frame:
1. Clamp the frame delta
2. While dying, count down the pause and then start the next life
3. Advance the global phase scheduler and push phase changes to chasers
4. Move the pedestrian, then every chaser in order
5. Consume the tile under the pedestrian (dots, power tiles, bonus fruit)
6. Detect chaser/pedestrian contact

The grid, scheduler and agent factories are injected so tests can build
independent games. Everything upstream (menus, sound, high scores) reacts
to the returned ``RoundEvent`` objects.
"""

import asyncio
import math
import random
from typing import Callable, Dict, List, Optional

from .chaser import ChaserAgent, ChaserMode
from .config import Config
from .environment import Tile, TileGrid, TileGridState, TilePos
from .environment.maze import (
    EXIT_DELAYS_MS,
    EXIT_TILES,
    FRUIT_TILE,
    HOUSE_TILES,
    PEDESTRIAN_START,
    SCATTER_CORNERS,
    build_default_grid,
)
from .logging_utils import (
    colored,
    Color,
    log_loss,
    log_override,
    log_routine,
    log_score,
    LOG_TAG_LOSS,
    LOG_TAG_SCORE,
)
from .pedestrian import Pedestrian
from .scheduler import ModeScheduler
from .schemas import (
    ChaserStatus,
    EventKind,
    PedestrianStatus,
    RoundEvent,
    RoundSnapshot,
)

# The pedestrian eats the tile it stands on only near the tile centre.
PICKUP_FRACTION = 0.12

TickListener = Callable[[int, RoundSnapshot, List[RoundEvent]], None]


class ChaseRoundOver(Exception):
    """Raised when a finished game is ticked."""

    def __init__(self, *, frame: int, reason: str) -> None:
        self.frame = frame
        self.reason = reason
        super().__init__(
            f"Game already over at frame {frame} ({reason}). "
            "Start a new Orchestrator to play again."
        )


def build_default_chasers(rng: Optional[random.Random] = None) -> List[ChaserAgent]:
    """The two-chaser roster of the default board; the second leaves 3s later."""

    rng = rng or random.Random(Config.RANDOM_SEED)
    chasers = []
    for index, name in enumerate(("bailey", "lilly")):
        col, row = HOUSE_TILES[index]
        chasers.append(
            ChaserAgent(
                name=name,
                col=col,
                row=row,
                scatter_corner=SCATTER_CORNERS[index],
                exit_tile=EXIT_TILES[index],
                house_tile=HOUSE_TILES[index],
                exit_delay_ms=EXIT_DELAYS_MS[index],
                rng=rng,
            )
        )
    return chasers


def build_default_pedestrian() -> Pedestrian:
    col, row = PEDESTRIAN_START
    return Pedestrian(col=col, row=row)


class Orchestrator:
    """
    Frame-driven game of play.

    Single-threaded: every ``tick()`` runs to completion, chasers update in
    roster order and read the grid and pedestrian position only.
    """

    def __init__(
        self,
        grid: Optional[TileGrid] = None,
        *,
        scheduler: Optional[ModeScheduler] = None,
        pedestrian_factory: Callable[[], Pedestrian] = build_default_pedestrian,
        chaser_factory: Callable[[], List[ChaserAgent]] = build_default_chasers,
        max_frame_ms: float = Config.MAX_FRAME_MS,
        collision_radius: float = Config.COLLISION_RADIUS,
        lives: int = Config.INITIAL_LIVES,
        dying_ms: float = Config.DYING_MS,
        fruit_tile: Optional[TilePos] = FRUIT_TILE,
        fruit_spawn_dots: int = Config.FRUIT_SPAWN_DOTS,
        fruit_ms: float = Config.FRUIT_MS,
        verbose: bool = Config.VERBOSE,
        tick_listeners: Optional[List[TickListener]] = None,
    ):
        """Initialize a game.

        Args:
            grid: Maze to play on; defaults to a fresh copy of the default board.
                Its layout at this point is restored at the start of every life.
            scheduler: Global phase scheduler; defaults to the classic cycle
            pedestrian_factory: Builds the pedestrian at the start of each life
            chaser_factory: Builds the chaser roster at the start of each life
            max_frame_ms: Clamp applied to every frame delta
            collision_radius: Tile distance counted as contact
            lives: Lives before the game is over
            dying_ms: Pause between being caught and the next life
            fruit_tile: Where the bonus fruit appears; None disables it
            fruit_spawn_dots: Tiles eaten in a life before the fruit appears
            fruit_ms: How long the fruit stays on the board
            verbose: Print every round event
            tick_listeners: Callables invoked after each frame with
                (frame, snapshot, events). Failures are reported, not raised.
        """
        if lives < 1:
            raise ValueError(f"lives must be at least 1, got {lives}")

        self.grid = grid if grid is not None else build_default_grid()
        self.scheduler = scheduler if scheduler is not None else ModeScheduler()
        self.pedestrian_factory = pedestrian_factory
        self.chaser_factory = chaser_factory
        self.max_frame_ms = max_frame_ms
        self.collision_radius = collision_radius
        self.dying_ms = dying_ms
        self.fruit_tile = fruit_tile
        self.fruit_spawn_dots = fruit_spawn_dots
        self.fruit_ms = fruit_ms
        self.verbose = verbose
        self.tick_listeners = tick_listeners or []

        self._layout = [list(row) for row in self.grid.tiles]
        self.lives = lives
        self.game_over = False
        self.frame = 0
        self.elapsed_ms = 0.0
        self.score = 0
        self.event_log: List[RoundEvent] = []
        self._pending: List[RoundEvent] = []
        self._start_round()
        # The start tile is eaten on spawn; it stays in event_log only.
        self._flush_pending()

    def _start_round(self) -> None:
        # Every life starts on the original maze; the scheduler keeps running.
        for row, original in zip(self.grid.tiles, self._layout):
            row[:] = original
        self.pedestrian = self.pedestrian_factory()
        self.chasers = self.chaser_factory()
        self.caught = False
        self.cleared = False
        self.dying_remaining_ms = 0.0
        self.dots_eaten = 0
        self.fruit_remaining_ms = 0.0
        self._consume_under_pedestrian()

    @property
    def over(self) -> bool:
        return self.game_over or self.cleared

    @property
    def dying(self) -> bool:
        return self.caught and not self.game_over

    @property
    def fruit_present(self) -> bool:
        return self.fruit_remaining_ms > 0

    def reset_round(self) -> None:
        """Restart the current life: original maze, agents back at their start.

        Lives and score are untouched.
        """
        self._start_round()
        self._flush_pending()

    # ------------------------------------------------------------------
    # External triggers
    # ------------------------------------------------------------------

    def trigger_frighten(self) -> List[str]:
        """Frighten every chaser that is not housed or eaten.

        Returns the names of the chasers now frightened.
        """
        frightened = [chaser.name for chaser in self.chasers if chaser.frighten()]
        if self.verbose and frightened:
            log_override(f"[Frighten] {', '.join(frightened)} frightened")
        return frightened

    def on_caught_while_frightened(self, chaser: ChaserAgent) -> RoundEvent:
        chaser.mark_eaten()
        self.score += Config.CHASER_SCORE
        return self._emit(
            EventKind.CHASER_EATEN,
            chaser=chaser.name,
            tile=list(chaser.tile),
            points=Config.CHASER_SCORE,
        )

    def on_collision_normal(self, chaser: ChaserAgent) -> RoundEvent:
        self.caught = True
        self.dying_remaining_ms = self.dying_ms
        return self._emit(
            EventKind.PEDESTRIAN_CAUGHT,
            chaser=chaser.name,
            tile=list(self.pedestrian.tile),
            detail=f"caught by {chaser.name} in {chaser.mode.value} mode",
        )

    # ------------------------------------------------------------------
    # Frame update
    # ------------------------------------------------------------------

    def tick(self, elapsed_ms: float) -> List[RoundEvent]:
        """Advance the game by one frame and return the events it produced."""
        if self.over:
            raise ChaseRoundOver(
                frame=self.frame,
                reason="out of lives" if self.game_over else "maze cleared",
            )

        dt = min(max(elapsed_ms, 0.0), self.max_frame_ms)
        self.frame += 1
        self.elapsed_ms += dt

        if self.caught:
            self._count_down_dying(dt)
        else:
            self._play(dt)

        events = self._flush_pending()
        if self.tick_listeners:
            snapshot = self.snapshot()
            for listener in self.tick_listeners:
                try:
                    listener(self.frame, snapshot, events)
                except Exception as exc:
                    log_loss(f"[Listener] Listener failed: {exc}")
        return events

    def _play(self, dt: float) -> None:
        phase = self.scheduler.advance(dt)
        if phase is not None:
            followers = [chaser.name for chaser in self.chasers if chaser.apply_phase(phase)]
            self._emit(
                EventKind.PHASE_CHANGED,
                detail=f"{phase.value} (followed by: {', '.join(followers) or 'none'})",
            )

        self.pedestrian.update(dt, self.grid)
        for chaser in self.chasers:
            chaser.update(dt, self.pedestrian.tile, self.grid, self.scheduler.phase)

        self._consume_under_pedestrian()
        if not self.over:
            self._update_fruit(dt)
            self._check_collisions()

    def _count_down_dying(self, dt: float) -> None:
        # Nothing moves and the phase clock stands still until the pause ends.
        self.dying_remaining_ms -= dt
        if self.dying_remaining_ms > 0:
            return
        self.lives -= 1
        self._emit(EventKind.LIFE_LOST, detail=f"{self.lives} lives left")
        if self.lives <= 0:
            self.game_over = True
            self._emit(EventKind.GAME_OVER, detail=f"score {self.score}")
            return
        self._start_round()

    def _consume_under_pedestrian(self) -> None:
        if self.pedestrian.fraction >= PICKUP_FRACTION:
            return
        col, row = self.pedestrian.tile
        previous = self.grid.consume(col, row)
        if previous == Tile.OPEN:
            self.score += Config.DOT_SCORE
            self._emit(EventKind.DOT_CONSUMED, tile=[col, row], points=Config.DOT_SCORE)
        elif previous == Tile.POWER:
            self.score += Config.POWER_SCORE
            self._emit(EventKind.POWER_CONSUMED, tile=[col, row], points=Config.POWER_SCORE)
            self.trigger_frighten()
        else:
            return

        self.dots_eaten += 1
        if (
            self.fruit_tile is not None
            and self.dots_eaten == self.fruit_spawn_dots
            and not self.fruit_present
        ):
            self.fruit_remaining_ms = self.fruit_ms
            self._emit(EventKind.FRUIT_SPAWNED, tile=list(self.fruit_tile))

        if self.grid.remaining_dots() == 0:
            self.cleared = True
            self._emit(EventKind.MAZE_CLEARED, detail=f"score {self.score}")

    def _update_fruit(self, dt: float) -> None:
        if not self.fruit_present:
            return
        self.fruit_remaining_ms -= dt
        if self.fruit_remaining_ms <= 0:
            self.fruit_remaining_ms = 0.0
            self._emit(EventKind.FRUIT_EXPIRED, tile=list(self.fruit_tile))
            return
        if self.pedestrian.tile == self.fruit_tile and self.pedestrian.fraction < PICKUP_FRACTION:
            self.fruit_remaining_ms = 0.0
            self.score += Config.FRUIT_SCORE
            self._emit(
                EventKind.FRUIT_CONSUMED,
                tile=list(self.fruit_tile),
                points=Config.FRUIT_SCORE,
            )

    def _check_collisions(self) -> None:
        px, py = self.pedestrian.position()
        for chaser in self.chasers:
            if chaser.mode in (ChaserMode.EATEN, ChaserMode.HOUSED):
                continue
            cx, cy = chaser.position()
            if math.hypot(px - cx, py - cy) >= self.collision_radius:
                continue
            if chaser.mode == ChaserMode.FRIGHTENED:
                self.on_caught_while_frightened(chaser)
            else:
                self.on_collision_normal(chaser)
                return

    # ------------------------------------------------------------------
    # Events and snapshots
    # ------------------------------------------------------------------

    def _emit(self, kind: EventKind, **fields) -> RoundEvent:
        event = RoundEvent(kind=kind, frame=self.frame, **fields)
        self._pending.append(event)
        self.event_log.append(event)
        if self.verbose:
            self._log_event(event)
        return event

    def _flush_pending(self) -> List[RoundEvent]:
        events, self._pending = self._pending, []
        return events

    def _log_event(self, event: RoundEvent) -> None:
        where = f" at {tuple(event.tile)}" if event.tile else ""
        who = f"[{event.chaser}] " if event.chaser else ""
        if event.kind == EventKind.PEDESTRIAN_CAUGHT:
            log_loss(f"{who}Pedestrian caught{where}")
        elif event.kind == EventKind.LIFE_LOST:
            log_loss(f"[Lives] Life lost, {event.detail}")
        elif event.kind == EventKind.GAME_OVER:
            log_loss(f"[Lives] Game over, {event.detail}")
        elif event.kind == EventKind.CHASER_EATEN:
            log_score(f"{who}Eaten{where} (+{event.points})")
        elif event.kind == EventKind.MAZE_CLEARED:
            log_score(f"Maze cleared, {event.detail}", bold=True)
        elif event.kind == EventKind.PHASE_CHANGED:
            log_routine(f"[Scheduler] Phase -> {event.detail}")
        elif event.kind == EventKind.POWER_CONSUMED:
            log_override(f"[Pickup] Power tile{where} (+{event.points})")
        elif event.kind == EventKind.FRUIT_CONSUMED:
            log_score(f"[Pickup] Fruit{where} (+{event.points})")
        elif event.kind == EventKind.FRUIT_SPAWNED:
            log_routine(f"[Fruit] Spawned{where}")
        elif event.kind == EventKind.FRUIT_EXPIRED:
            log_routine(f"[Fruit] Expired{where}")
        else:
            log_routine(f"[Pickup] Dot{where} (+{event.points})")

    def snapshot(self) -> RoundSnapshot:
        pedestrian = self.pedestrian
        return RoundSnapshot(
            frame=self.frame,
            elapsed_ms=self.elapsed_ms,
            phase=self.scheduler.phase.value,
            phase_index=self.scheduler.phase_index,
            score=self.score,
            lives=self.lives,
            remaining_dots=self.grid.remaining_dots(),
            dying=self.dying,
            fruit_remaining_ms=self.fruit_remaining_ms,
            over=self.over,
            pedestrian=PedestrianStatus(
                tile=list(pedestrian.tile),
                facing=pedestrian.facing.name.lower(),
                fraction=pedestrian.fraction,
                moving=pedestrian.moving,
            ),
            chasers=[
                ChaserStatus(
                    name=chaser.name,
                    mode=chaser.mode.value,
                    tile=list(chaser.tile),
                    facing=chaser.facing.name.lower(),
                    fraction=chaser.fraction,
                    speed=chaser.speed,
                    moving=chaser.moving,
                    frighten_remaining_ms=max(chaser.frighten_remaining_ms, 0.0),
                    exit_delay_ms=max(chaser.exit_delay_ms, 0.0),
                )
                for chaser in self.chasers
            ],
            grid=TileGridState.from_grid(self.grid),
        )

    # ------------------------------------------------------------------
    # Driver
    # ------------------------------------------------------------------

    async def run(
        self,
        num_frames: int,
        frame_ms: float = 1000.0 / 60.0,
        realtime: bool = False,
    ) -> Dict:
        """Drive up to ``num_frames`` frames of ``frame_ms`` each.

        Stops early when the game ends. With ``realtime`` the loop sleeps
        between frames; otherwise it only yields to the event loop.

        Returns:
            Dict with final_state, events and frames_run
        """
        print(
            f"Starting game: {len(self.chasers)} chasers, {self.lives} lives, "
            f"up to {num_frames} frames"
        )

        events: List[RoundEvent] = []
        frames_run = 0
        for _ in range(num_frames):
            if self.over:
                break
            events.extend(self.tick(frame_ms))
            frames_run += 1
            await asyncio.sleep(frame_ms / 1000.0 if realtime else 0)

        if self.game_over:
            print(colored(f"\n{LOG_TAG_LOSS} Game over: out of lives (score {self.score})", Color.RED))
        elif self.cleared:
            print(colored(f"\n{LOG_TAG_SCORE} Game over: maze cleared (score {self.score})", Color.GREEN))
        else:
            print(f"\nGame paused after {frames_run} frames (score {self.score}, lives {self.lives})")

        return {"final_state": self.snapshot(), "events": events, "frames_run": frames_run}
