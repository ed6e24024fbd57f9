'''
Author: Elia Savino
github: github.com/EliaSavino

Happy Hacking!

Descr: Command line entry point: open the viewer, or play moves headless.

'''
#!/usr/bin/env python3
import argparse
import logging
import math

import matplotlib

from cubeturn.config import CubeConfig
from cubeturn.logging_config import setup_logging
from cubeturn.moves import parse_sequence
from cubeturn.visualisation.scene import ManualClock, SceneContext


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser("cubeturn", description="Animated 3x3x3 cube with shuffle and reset")
    p.add_argument("--moves", type=str, default="", help="sequence to play first, e.g. \"R U R' U'\"")
    p.add_argument("--shuffle", type=int, default=0, help="random moves to play after --moves")
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--duration", type=float, default=200.0, help="animation length per move (ms)")
    p.add_argument("--dimension", type=int, default=3)
    p.add_argument("--fps", type=int, default=60)
    p.add_argument("--record", type=str, default=None, help="save the run to a .gif or .mp4")
    p.add_argument("--headless", action="store_true", help="no window, print the final net")
    p.add_argument("--log-level", type=str.upper, default="INFO", dest="log_level",
                   choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return p


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(getattr(logging, args.log_level))
    log = logging.getLogger("cubeturn")

    config = CubeConfig(
        dimension=args.dimension,
        animation_ms=args.duration,
        fps=args.fps,
        shuffle_moves=args.shuffle or CubeConfig.shuffle_moves,
    )
    tokens = parse_sequence(args.moves)
    offline = args.headless or args.record is not None
    if offline:
        matplotlib.use("Agg")

    # imported after the backend is chosen
    from cubeturn.visualisation.viewer import CubeController, CubeViewer

    clock = ManualClock() if offline else None
    context = SceneContext.create(config, clock=clock)
    controller = CubeController(context, seed=args.seed)

    def queue_moves():
        if tokens:
            done = controller.play(tokens)
            if args.shuffle:
                done.add_done_callback(lambda _f: controller.press_shuffle(args.shuffle))
        elif args.shuffle:
            controller.press_shuffle(args.shuffle)

    try:
        if args.headless:
            queue_moves()
            frames = controller.run_until_idle(1000 / config.fps)
            log.info("Done in %d frames", frames)
            controller.cube.print_net(use_color=True)
            print(controller.cube.get_history().to_string(index=False))
        elif args.record:
            viewer = CubeViewer(controller)
            queue_moves()
            n_moves = len(tokens) + args.shuffle
            # one extra frame per move for the commit, plus a second of the final state
            frames = math.ceil(n_moves * (config.animation_ms / 1000.0 * config.fps + 2) + config.fps)
            viewer.record(args.record, frames)
        else:
            viewer = CubeViewer(controller)
            queue_moves()
            viewer.show()
    finally:
        context.teardown()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
