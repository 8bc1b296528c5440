"""Tests for the frame-driven round orchestrator."""

import random

import pytest

from pacfamily import Config, Orchestrator
from pacfamily.chaser import ChaserAgent, ChaserMode, ChaserSpeeds
from pacfamily.environment import Tile, parse_layout
from pacfamily.orchestrator import ChaseRoundOver, build_default_chasers
from pacfamily.pedestrian import Pedestrian
from pacfamily.scheduler import ModeScheduler, Phase
from pacfamily.schemas import EventKind, RoundSnapshot

ROUND_LAYOUT = (
    "#########",
    "#.o.....#",
    "#.#####.#",
    "#.......#",
    "#########",
)

SLOW = ChaserSpeeds(normal=0.01, frightened=0.01, eaten=0.01, housed=0.01)


def make_grid():
    return parse_layout(ROUND_LAYOUT, tunnel_row=0)


def chaser_at(col, row, mode=ChaserMode.CHASE, frightened=False, speeds=SLOW):
    chaser = ChaserAgent(
        name="bailey",
        col=col,
        row=row,
        scatter_corner=(7, 3),
        exit_tile=(7, 3),
        house_tile=(7, 3),
        speeds=speeds,
        rng=random.Random(0),
        mode=mode,
    )
    if frightened:
        chaser.frighten()
    return chaser


def pedestrian_at(col, row, speed=0.01):
    return lambda: Pedestrian(col=col, row=row, speed=speed)


def test_frame_delta_is_clamped():
    orchestrator = Orchestrator(
        make_grid(),
        pedestrian_factory=pedestrian_at(1, 1),
        chaser_factory=lambda: [],
    )
    orchestrator.tick(1000)
    assert orchestrator.elapsed_ms == 50
    orchestrator.tick(-5)
    assert orchestrator.elapsed_ms == 50
    assert orchestrator.frame == 2


def test_start_tile_is_consumed_on_spawn():
    grid = make_grid()
    orchestrator = Orchestrator(
        grid,
        pedestrian_factory=pedestrian_at(1, 1),
        chaser_factory=lambda: [],
    )
    assert grid.tile_at(1, 1) == Tile.CONSUMED
    assert orchestrator.score == 10
    assert orchestrator.event_log[0].kind == EventKind.DOT_CONSUMED
    # Spawn events are not returned by the first frame
    assert orchestrator.tick(16) == []


def test_phase_change_is_pushed_to_baseline_chasers():
    scheduler = ModeScheduler(schedule=((Phase.SCATTER, 100), (Phase.CHASE, 1000)))
    chasers = [
        chaser_at(7, 3, mode=ChaserMode.SCATTER),
        chaser_at(7, 1, mode=ChaserMode.CHASE, frightened=True),
    ]
    orchestrator = Orchestrator(
        make_grid(),
        scheduler=scheduler,
        pedestrian_factory=pedestrian_at(1, 3),
        chaser_factory=lambda: chasers,
    )

    orchestrator.tick(50)
    events = orchestrator.tick(50)

    assert [event.kind for event in events] == [EventKind.PHASE_CHANGED]
    assert orchestrator.chasers[0].mode == ChaserMode.CHASE
    assert orchestrator.chasers[1].mode == ChaserMode.FRIGHTENED
    assert "followed by: bailey" in events[0].detail


def test_power_tile_frightens_chasers():
    orchestrator = Orchestrator(
        make_grid(),
        pedestrian_factory=pedestrian_at(1, 1, speed=10.0),
        chaser_factory=lambda: [chaser_at(7, 3)],
    )

    kinds = []
    for _ in range(5):
        kinds.extend(event.kind for event in orchestrator.tick(50))

    assert EventKind.POWER_CONSUMED in kinds
    assert orchestrator.chasers[0].mode == ChaserMode.FRIGHTENED
    assert orchestrator.grid.tile_at(2, 1) == Tile.CONSUMED
    assert orchestrator.score >= 10 + 50


def test_trigger_frighten_skips_housed_chasers():
    orchestrator = Orchestrator(
        make_grid(),
        pedestrian_factory=pedestrian_at(1, 1),
        chaser_factory=lambda: [chaser_at(7, 3, mode=ChaserMode.HOUSED), chaser_at(7, 1)],
    )
    assert orchestrator.trigger_frighten() == ["bailey"]
    assert orchestrator.chasers[0].mode == ChaserMode.HOUSED
    assert orchestrator.chasers[1].mode == ChaserMode.FRIGHTENED


def test_collision_with_normal_chaser_costs_a_life():
    orchestrator = Orchestrator(
        make_grid(),
        pedestrian_factory=pedestrian_at(3, 3),
        chaser_factory=lambda: [chaser_at(3, 3)],
        lives=2,
    )

    events = orchestrator.tick(16)

    assert [event.kind for event in events] == [EventKind.PEDESTRIAN_CAUGHT]
    assert events[0].chaser == "bailey"
    assert orchestrator.caught and orchestrator.dying
    assert not orchestrator.over

    # Nothing happens during the dying pause
    for _ in range(23):
        assert orchestrator.tick(50) == []
    assert orchestrator.lives == 2

    events = orchestrator.tick(50)
    assert [event.kind for event in events] == [EventKind.LIFE_LOST, EventKind.DOT_CONSUMED]
    assert orchestrator.lives == 1
    assert not orchestrator.dying
    assert orchestrator.chasers[0].tile == (3, 3)
    assert orchestrator.pedestrian.tile == (3, 3)


def test_last_life_ends_the_game():
    orchestrator = Orchestrator(
        make_grid(),
        pedestrian_factory=pedestrian_at(3, 3),
        chaser_factory=lambda: [chaser_at(3, 3)],
        lives=1,
        dying_ms=100,
    )
    orchestrator.tick(16)
    orchestrator.tick(50)
    events = orchestrator.tick(50)

    assert [event.kind for event in events] == [EventKind.LIFE_LOST, EventKind.GAME_OVER]
    assert orchestrator.lives == 0
    assert orchestrator.over and orchestrator.game_over
    assert orchestrator.snapshot().over is True

    with pytest.raises(ChaseRoundOver, match="out of lives"):
        orchestrator.tick(16)


def test_dying_pause_freezes_the_phase_clock():
    orchestrator = Orchestrator(
        make_grid(),
        scheduler=ModeScheduler(schedule=((Phase.SCATTER, 500), (Phase.CHASE, 1000))),
        pedestrian_factory=pedestrian_at(3, 3),
        chaser_factory=lambda: [chaser_at(3, 3)],
    )
    orchestrator.tick(16)
    for _ in range(20):
        orchestrator.tick(50)

    assert orchestrator.dying
    assert orchestrator.scheduler.phase == Phase.SCATTER
    assert orchestrator.scheduler.remaining_ms == pytest.approx(484)


def test_new_life_restores_the_maze():
    grid = make_grid()
    orchestrator = Orchestrator(
        grid,
        pedestrian_factory=pedestrian_at(1, 3, speed=10.0),
        chaser_factory=lambda: [],
    )
    start_dots = grid.remaining_dots()
    assert start_dots == 15

    for _ in range(10):
        orchestrator.tick(50)
    assert grid.remaining_dots() < start_dots

    orchestrator.reset_round()
    assert grid.remaining_dots() == start_dots
    assert orchestrator.pedestrian.tile == (1, 3)
    assert orchestrator.dots_eaten == 1


def test_lost_life_restores_the_maze():
    grid = make_grid()
    orchestrator = Orchestrator(
        grid,
        pedestrian_factory=pedestrian_at(1, 3, speed=10.0),
        chaser_factory=lambda: [chaser_at(7, 1)],
        dying_ms=50,
    )
    for _ in range(4):
        orchestrator.tick(50)
    eaten = 15 - grid.remaining_dots()
    assert eaten > 0

    orchestrator.on_collision_normal(orchestrator.chasers[0])
    events = orchestrator.tick(50)

    assert EventKind.LIFE_LOST in [event.kind for event in events]
    assert grid.remaining_dots() == 15
    assert orchestrator.lives == Config.INITIAL_LIVES - 1


def test_collision_with_frightened_chaser_scores():
    orchestrator = Orchestrator(
        make_grid(),
        pedestrian_factory=pedestrian_at(3, 3),
        chaser_factory=lambda: [chaser_at(3, 3, frightened=True)],
    )
    score_before = orchestrator.score

    events = orchestrator.tick(16)

    assert [event.kind for event in events] == [EventKind.CHASER_EATEN]
    assert events[0].points == 200
    assert orchestrator.score == score_before + 200
    assert orchestrator.chasers[0].mode == ChaserMode.EATEN
    assert not orchestrator.over

    # Eaten chasers no longer collide
    assert orchestrator.tick(16) == []


def test_far_chaser_does_not_collide():
    orchestrator = Orchestrator(
        make_grid(),
        pedestrian_factory=pedestrian_at(1, 3),
        chaser_factory=lambda: [chaser_at(7, 1)],
    )
    assert orchestrator.tick(16) == []
    assert not orchestrator.over


def test_clearing_the_maze_ends_round():
    grid = parse_layout(("#####", "#.. #", "#####"), tunnel_row=0)
    orchestrator = Orchestrator(
        grid,
        pedestrian_factory=pedestrian_at(1, 1, speed=10.0),
        chaser_factory=lambda: [],
    )

    kinds = []
    while not orchestrator.over:
        kinds.extend(event.kind for event in orchestrator.tick(50))
        assert orchestrator.frame < 20

    assert kinds[-2:] == [EventKind.DOT_CONSUMED, EventKind.MAZE_CLEARED]
    assert orchestrator.cleared
    assert grid.remaining_dots() == 0


def test_listeners_receive_snapshots_and_failures_are_reported(capsys):
    received = []

    def good(frame, snapshot, events):
        received.append((frame, snapshot))

    def bad(frame, snapshot, events):
        raise RuntimeError("boom")

    orchestrator = Orchestrator(
        make_grid(),
        pedestrian_factory=pedestrian_at(1, 3),
        chaser_factory=lambda: [chaser_at(7, 1)],
        tick_listeners=[bad, good],
    )
    orchestrator.tick(16)

    assert received[0][0] == 1
    assert isinstance(received[0][1], RoundSnapshot)
    assert received[0][1].chasers[0].name == "bailey"
    assert "Listener failed: boom" in capsys.readouterr().out


def test_verbose_logs_phase_changes(monkeypatch, capsys):
    monkeypatch.setenv("PACFAMILY_NO_COLOR", "1")
    orchestrator = Orchestrator(
        make_grid(),
        scheduler=ModeScheduler(schedule=((Phase.SCATTER, 10), (Phase.CHASE, 10))),
        pedestrian_factory=pedestrian_at(1, 3),
        chaser_factory=lambda: [],
        verbose=True,
    )
    orchestrator.tick(16)
    assert "[Scheduler] Phase -> chase" in capsys.readouterr().out


def test_default_roster_starts_housed():
    chasers = build_default_chasers(random.Random(1))
    assert [chaser.name for chaser in chasers] == ["bailey", "lilly"]
    assert all(chaser.mode == ChaserMode.HOUSED for chaser in chasers)
    assert chasers[0].exit_delay_ms == 0
    assert chasers[1].exit_delay_ms == 3000


@pytest.mark.asyncio
async def test_run_default_board():
    orchestrator = Orchestrator(
        chaser_factory=lambda: build_default_chasers(random.Random(5)),
    )
    result = await orchestrator.run(num_frames=30)

    assert result["frames_run"] == 30
    final = result["final_state"]
    assert isinstance(final, RoundSnapshot)
    assert final.frame == 30
    assert final.phase == "scatter"
    assert final.grid.width == 19 and final.grid.height == 21
    assert final.score == orchestrator.score
    # The first chaser has left the house tile; the second is still waiting
    assert final.chasers[0].tile != [8, 8]
    assert final.chasers[1].tile == [10, 8]
    assert final.chasers[1].exit_delay_ms > 0


@pytest.mark.asyncio
async def test_run_stops_when_game_ends():
    orchestrator = Orchestrator(
        make_grid(),
        pedestrian_factory=pedestrian_at(3, 3),
        chaser_factory=lambda: [chaser_at(3, 3)],
        lives=1,
        dying_ms=100,
    )
    result = await orchestrator.run(num_frames=100, frame_ms=50)

    assert result["frames_run"] == 3
    assert result["final_state"].over is True
    assert result["final_state"].lives == 0
    assert [event.kind for event in result["events"]] == [
        EventKind.PEDESTRIAN_CAUGHT,
        EventKind.LIFE_LOST,
        EventKind.GAME_OVER,
    ]


FRUIT_LAYOUT = (
    "#######",
    "#.....#",
    "#.###.#",
    "#.....#",
    "#######",
)


def test_fruit_spawns_and_is_eaten():
    orchestrator = Orchestrator(
        parse_layout(FRUIT_LAYOUT, tunnel_row=0),
        pedestrian_factory=pedestrian_at(1, 1, speed=10.0),
        chaser_factory=lambda: [],
        fruit_tile=(4, 1),
        fruit_spawn_dots=2,
        fruit_ms=5000,
    )

    kinds = []
    for _ in range(7):
        kinds.extend(event.kind for event in orchestrator.tick(50))

    assert kinds.index(EventKind.FRUIT_SPAWNED) < kinds.index(EventKind.FRUIT_CONSUMED)
    assert EventKind.FRUIT_EXPIRED not in kinds
    assert not orchestrator.fruit_present
    # Four dots along the top row plus the fruit
    assert orchestrator.score == 4 * Config.DOT_SCORE + Config.FRUIT_SCORE


def test_fruit_expires_when_not_reached():
    orchestrator = Orchestrator(
        parse_layout(FRUIT_LAYOUT, tunnel_row=0),
        pedestrian_factory=pedestrian_at(1, 1, speed=10.0),
        chaser_factory=lambda: [],
        fruit_tile=(4, 1),
        fruit_spawn_dots=2,
        fruit_ms=100,
    )

    kinds = []
    for _ in range(7):
        kinds.extend(event.kind for event in orchestrator.tick(50))

    assert EventKind.FRUIT_SPAWNED in kinds
    assert EventKind.FRUIT_EXPIRED in kinds
    assert EventKind.FRUIT_CONSUMED not in kinds
    assert orchestrator.snapshot().fruit_remaining_ms == 0.0


def test_eaten_chaser_home_during_final_chase_rejoins_chase():
    def eaten_chaser():
        chaser = chaser_at(7, 3, mode=ChaserMode.SCATTER)
        chaser.mark_eaten()
        return chaser

    orchestrator = Orchestrator(
        make_grid(),
        scheduler=ModeScheduler(schedule=((Phase.SCATTER, 10), (Phase.CHASE, 10))),
        pedestrian_factory=pedestrian_at(1, 1),
        chaser_factory=lambda: [eaten_chaser()],
    )

    events = orchestrator.tick(16)

    assert orchestrator.scheduler.is_final
    # The eaten chaser ignores the phase change itself
    assert events[0].detail == "chase (followed by: none)"
    # but picks up the current phase once it is home
    assert orchestrator.chasers[0].mode == ChaserMode.CHASE


def test_chaser_leaving_house_after_new_life_follows_chase():
    orchestrator = Orchestrator(
        make_grid(),
        scheduler=ModeScheduler(schedule=((Phase.SCATTER, 10), (Phase.CHASE, 10))),
        pedestrian_factory=pedestrian_at(1, 1),
        chaser_factory=lambda: [chaser_at(7, 3, mode=ChaserMode.HOUSED)],
    )
    orchestrator.tick(16)
    orchestrator.reset_round()
    assert orchestrator.chasers[0].mode == ChaserMode.HOUSED

    orchestrator.tick(16)
    assert orchestrator.chasers[0].mode == ChaserMode.CHASE
