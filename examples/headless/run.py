"""
Headless PacFamily round

Runs the default board with a pedestrian that turns at random and prints an
ASCII view of the maze every few frames.

Run: python examples/headless/run.py --frames 600 --seed 7 --render-every 60
"""

import argparse
import asyncio
import random

from pacfamily import (
    Config,
    Direction,
    Orchestrator,
    build_default_chasers,
    render_ascii,
)
from pacfamily.chaser import ChaserMode

CHASER_SYMBOLS = {
    ChaserMode.HOUSED: "h",
    ChaserMode.SCATTER: "s",
    ChaserMode.CHASE: "C",
    ChaserMode.FRIGHTENED: "f",
    ChaserMode.EATEN: "e",
}


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a headless PacFamily round")
    parser.add_argument("--frames", type=int, default=600, help="Maximum frames to simulate")
    parser.add_argument("--frame-ms", type=float, default=1000.0 / 60.0, help="Frame length in ms")
    parser.add_argument("--seed", type=int, default=Config.RANDOM_SEED, help="Random seed")
    parser.add_argument("--render-every", type=int, default=60, help="Frames between ASCII views (0 = never)")
    parser.add_argument("--realtime", action="store_true", help="Sleep between frames")
    parser.add_argument("--verbose", action="store_true", help="Print every round event")
    return parser.parse_args()


def render(orchestrator: Orchestrator) -> str:
    markers = [(orchestrator.pedestrian.tile, "P")]
    if orchestrator.fruit_present:
        markers.append((orchestrator.fruit_tile, "%"))
    for chaser in orchestrator.chasers:
        markers.append((chaser.tile, CHASER_SYMBOLS[chaser.mode]))
    return render_ascii(orchestrator.grid, markers)


async def main() -> None:
    args = parse_args()
    Config.validate()
    rng = random.Random(args.seed)

    def steer_and_render(frame, snapshot, events):
        if frame % 20 == 0:
            orchestrator.pedestrian.steer(rng.choice(list(Direction)))
        if args.render_every and frame % args.render_every == 0:
            print(f"\n--- frame {frame} | phase {snapshot.phase} | score {snapshot.score} | lives {snapshot.lives} ---")
            print(render(orchestrator))

    orchestrator = Orchestrator(
        chaser_factory=lambda: build_default_chasers(random.Random(args.seed)),
        verbose=args.verbose,
        tick_listeners=[steer_and_render],
    )

    print(Config.display())
    result = await orchestrator.run(args.frames, frame_ms=args.frame_ms, realtime=args.realtime)

    final = result["final_state"]
    print(render(orchestrator))
    print(f"\nFrames: {result['frames_run']} | Score: {final.score} | Lives: {final.lives} | Dots left: {final.remaining_dots}")
    for chaser in final.chasers:
        print(f"  {chaser.name}: {chaser.mode} at {tuple(chaser.tile)}")


if __name__ == "__main__":
    asyncio.run(main())
