import argparse
import cProfile
import logging
import os
import sys
import tracemalloc

from pydantic import ValidationError

from .Polarize import polarize
from .PolarizeConfig import PolarizeConfig

logger = logging.getLogger("PolarizeTool")


def build_parser():
    parser = argparse.ArgumentParser(
        prog="polarize",
        description="Combine photos taken through a rotating polarizer into one polarimetric image")
    parser.add_argument("photos", nargs="+", help="frames in rotation order (jpeg/png)")
    parser.add_argument("--out", default="out.jpg", help="output location (png/jpeg)")
    parser.add_argument("--saturation", type=float, default=1.0, help="saturation coefficient")
    parser.add_argument("--numcpu", type=int, default=os.cpu_count() or 1,
                        help="number of CPUs to utilize, memory usage is proportional to this flag")
    parser.add_argument("--cpuprofile", default="", help="write cpu profile to file")
    parser.add_argument("--memprofile", default="", help="write mem profile to file")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        config = PolarizeConfig(filenames=args.photos,
                                out=args.out,
                                saturation=args.saturation,
                                numcpu=args.numcpu)
    except ValidationError as e:
        logger.error("%s", e)
        return 2

    profiler = cProfile.Profile() if args.cpuprofile else None
    if args.memprofile:
        tracemalloc.start()
    if profiler:
        profiler.enable()

    try:
        polarize(config)
    except (ValueError, RuntimeError) as e:
        logger.error("%s", e, exc_info=args.verbose)
        return 1
    finally:
        if profiler:
            profiler.disable()
            profiler.dump_stats(args.cpuprofile)
        if args.memprofile:
            tracemalloc.take_snapshot().dump(args.memprofile)
            tracemalloc.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
