from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from .config import (
    DEFAULT_DITHER_ALGORITHM,
    DEFAULT_DITHER_STRENGTH,
    DEFAULT_INPUT,
    DEFAULT_LINK_SECONDS,
    DEFAULT_OUTPUT,
    DEFAULT_QUALITY,
    LOG_FORMAT,
    LOG_LEVEL,
    ProcessingOptions,
    RunConfig,
)
from .errors import InkcropError
from .pipeline import ImagePipeline, run_all_algorithms
from .scheduler import SlideshowDaemon
from .storage import ensure_output_dir, expand_inputs
from .watcher import WatchTrigger

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="inkcrop",
        description="Resize photos into letterboxed 960x540 JPEGs for small displays.",
    )
    parser.add_argument("-help", action="help", help=argparse.SUPPRESS)
    parser.add_argument("-input", "--input", dest="input", default=DEFAULT_INPUT, help="input file or glob pattern")
    parser.add_argument("-output", "--output", dest="output", default=DEFAULT_OUTPUT, help="output directory")
    parser.add_argument(
        "--dither",
        "-dither",
        dest="dither",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="dither the image",
    )
    parser.add_argument(
        "-ditherAlg",
        "--ditherAlg",
        dest="dither_alg",
        default=DEFAULT_DITHER_ALGORITHM,
        help="dithering algorithm to use",
    )
    parser.add_argument(
        "-ditherAll", "--ditherAll", dest="dither_all", action="store_true", help="dither each image with all algorithms"
    )
    parser.add_argument(
        "-ditherStrength",
        "--ditherStrength",
        dest="dither_strength",
        type=float,
        default=DEFAULT_DITHER_STRENGTH,
        help="dithering strength (0-1)",
    )
    parser.add_argument(
        "-ditherSerpentine",
        "--ditherSerpentine",
        dest="serpentine",
        action="store_true",
        help="enable serpentine dithering",
    )
    parser.add_argument(
        "-rotate", "--rotate", dest="rotate", action="store_true", help="rotate the image 90 degrees counter-clockwise"
    )
    parser.add_argument("-crop", "--crop", dest="crop", action="store_true", help="crop the image to 960x540")
    parser.add_argument(
        "-quality", "--quality", dest="quality", type=int, default=DEFAULT_QUALITY, help="JPEG quality 0-100"
    )
    parser.add_argument(
        "-daemon",
        "--daemon",
        dest="daemon",
        action="store_true",
        help="run as a daemon monitoring the input directory for new images",
    )
    parser.add_argument(
        "-link",
        "--link",
        dest="link",
        action="store_true",
        help="run as a daemon linking each input image in turn as linkedimage.jpg",
    )
    parser.add_argument(
        "-link-timer",
        "--link-timer",
        dest="link_timer",
        type=int,
        default=DEFAULT_LINK_SECONDS,
        help="time between relinking images in seconds",
    )
    parser.add_argument(
        "-on-error",
        "--on-error",
        dest="on_error",
        choices=("abort", "continue"),
        default="abort",
        help="abort the batch on the first failed file, or log it and continue",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> RunConfig:
    options = ProcessingOptions(
        dither_enabled=args.dither,
        dither_algorithm=args.dither_alg,
        dither_strength=args.dither_strength,
        serpentine=args.serpentine,
        force_rotate=args.rotate,
        force_crop=args.crop,
        quality=args.quality,
    )
    return RunConfig(
        input=args.input,
        output=Path(args.output),
        options=options,
        dither_all=args.dither_all,
        daemon=args.daemon,
        link=args.link,
        link_timer=args.link_timer,
        error_policy=args.on_error,
    )


def run(config: RunConfig) -> int:
    matches = expand_inputs(config.input)
    ensure_output_dir(config.output)

    if config.dither_all:
        results = run_all_algorithms(config.options, config.output, matches, config.error_policy)
        return 0 if all(r.ok for r in results.values()) else 1

    pipeline = ImagePipeline(config.options, config.output, config.error_policy)

    if config.daemon:
        pipeline.run_batch(matches)
        WatchTrigger(config.input, pipeline).run()
        return 0

    if config.link:
        asyncio.run(SlideshowDaemon(matches, config.output, config.link_timer).run())
        return 0

    return 0 if pipeline.run_batch(matches).ok else 1


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)

    try:
        config = config_from_args(args)
    except ValueError as exc:
        parser.error(str(exc))

    try:
        return run(config)
    except (InkcropError, OSError) as exc:
        logger.error("%s", exc)
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted, exiting")
        return 0


if __name__ == "__main__":
    sys.exit(main())
