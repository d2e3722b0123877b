import argparse
import itertools
from typing import List, Optional

import bittensor as bt

from imageaugmentor import settings
from imageaugmentor.exceptions import AugmentorError
from imageaugmentor.services.augmentation import Pipeline


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="image-augmentor",
        description="Generate augmented variants of the images in a directory.",
    )
    parser.add_argument("input_dir", help="Directory with the source images")
    parser.add_argument("output_dir", help="Directory receiving output_<index> images")
    parser.add_argument("--count", type=int, default=1, help="Number of images to generate")
    parser.add_argument("--seed", type=int, default=settings.DEFAULT_SEED, help="Seed, 0 for a time-derived one")
    parser.add_argument("--quality", type=int, default=settings.DEFAULT_QUALITY, help="Output quality (0-100)")
    parser.add_argument("--prob", type=float, default=1.0, help="Probability applied to every operation")
    parser.add_argument("--debug", action="store_true", help="Log every operation decision")

    ops = parser.add_argument_group("operations", "applied in the order listed here")
    ops.add_argument("--resize", type=int, nargs=2, metavar=("HEIGHT", "WIDTH"))
    ops.add_argument("--crop", type=int, nargs=2, metavar=("HEIGHT", "WIDTH"))
    ops.add_argument("--zoom", type=float, nargs=2, metavar=("MIN", "MAX"))
    ops.add_argument("--rotate", type=float, nargs=2, metavar=("MIN", "MAX"))
    ops.add_argument("--flip", choices=["Horizontal", "Vertical"])
    ops.add_argument("--invert", action="store_true")
    ops.add_argument("--blur", type=float, metavar="SIGMA")
    ops.add_argument("--erase", type=int, nargs=2, metavar=("HEIGHT", "WIDTH"))
    return parser


def build_pipeline(args: argparse.Namespace) -> Pipeline:
    """Creates the pipeline described by parsed command-line arguments."""
    pipeline = Pipeline(args.input_dir, args.output_dir, quality=args.quality, seed=args.seed)
    # a fixed --seed gives every operation its own fixed seed
    seeds = itertools.count(args.seed + 1) if args.seed else itertools.repeat(0)

    if args.resize:
        pipeline.resize(tuple(args.resize), prob=args.prob, seed=next(seeds))
    if args.crop:
        pipeline.crop(tuple(args.crop), prob=args.prob, seed=next(seeds))
    if args.zoom:
        pipeline.zoom(*args.zoom, prob=args.prob, seed=next(seeds))
    if args.rotate:
        pipeline.rotate(*args.rotate, prob=args.prob, seed=next(seeds))
    if args.flip:
        pipeline.flip(args.flip, prob=args.prob, seed=next(seeds))
    if args.invert:
        pipeline.invert(prob=args.prob, seed=next(seeds))
    if args.blur:
        pipeline.blur(args.blur, prob=args.prob, seed=next(seeds))
    if args.erase:
        pipeline.random_erase(tuple(args.erase), prob=args.prob, seed=next(seeds))
    return pipeline


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.debug:
        bt.logging.set_debug(True)

    try:
        records = build_pipeline(args).sample(args.count)
    except AugmentorError as e:
        bt.logging.error(f"Error: {e}")
        return 1

    bt.logging.info(f"Wrote {len(records)} augmented images to {args.output_dir}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
