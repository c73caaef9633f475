from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, TextIO

from wallpaper_colors import choose_two, continuous_color, discrete_color, make_rng, read_colors
from wallpaper_errors import (
    GeneratorArgumentError,
    ImageLoadError,
    InsufficientColorsError,
    UnknownGeneratorError,
    WallpaperError,
)
from gradations import REGISTRY
from wallpaper import Wallpaper, write_png

DEFAULT_WIDTH = 1366
DEFAULT_HEIGHT = 738
DEFAULT_OUTPUT = "wallpaper.png"

# exit status for bad invocations (unknown picture, bad picture arguments)
EXIT_USAGE = 2

# =============== Logging ===============
log = logging.getLogger("wallpaper")


def setup_logging(verbosity: int = 0) -> None:
    level = [logging.WARNING, logging.INFO, logging.DEBUG][min(verbosity, 2)]
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(message)s",
        datefmt="%H:%M:%S",
    )


# =============== Small CLI helpers ===============
def _positive_int(v: str) -> int:
    try:
        n = int(v)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {v!r}")
    if n <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: {n}")
    return n


def _read_palette(path: Optional[str], stdin: TextIO) -> list:
    if not path or path == "-":
        return read_colors(stdin)
    with open(path, "r", encoding="utf-8-sig") as fh:
        return read_colors(fh)


def _exit_code(err: WallpaperError) -> int:
    if isinstance(err, (UnknownGeneratorError, GeneratorArgumentError, ImageLoadError)):
        return EXIT_USAGE
    return 1


# =============== CLI ===============
def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="wallpaper",
        description="Generate a wallpaper from a palette read one #RRGGBB color per line.",
    )
    p.add_argument("-v", "--verbose", action="count", default=0, help="Increase verbosity (-v, -vv).")

    sub = p.add_subparsers(dest="cmd", required=True)

    lp = sub.add_parser("list", help="List pictures.")
    lp.set_defaults(func=cmd_list)

    rp = sub.add_parser("run", help="Render a picture to a PNG file.")
    rp.add_argument("-W", "--width", type=_positive_int, default=DEFAULT_WIDTH,
                    help="set the width of the generated image")
    rp.add_argument("-H", "--height", type=_positive_int, default=DEFAULT_HEIGHT,
                    help="set the height of the generated image")
    rp.add_argument("-o", "--output", type=Path, default=Path(DEFAULT_OUTPUT), help="set the output file")
    rp.add_argument("-d", "--discrete", action="store_true", help="use only colors from the given list")
    rp.add_argument("-p", "--palette", default=None,
                    help="palette file, one #RRGGBB color per line (default: stdin)")
    rp.add_argument("--seed", type=int, default=None, help="RNG seed for choosing colors (optional).")
    rp.add_argument("picture", help=f"picture to generate ({', '.join(REGISTRY.names())})")
    rp.add_argument("picture_args", nargs=argparse.REMAINDER, help="arguments passed to the picture")
    rp.set_defaults(func=cmd_run)

    return p


# =============== Commands ===============
def cmd_list(_args: argparse.Namespace) -> int:
    print("Available pictures:", ", ".join(REGISTRY.names()) or "(none)")
    return 0


def cmd_run(args: argparse.Namespace, stdin: Optional[TextIO] = None) -> int:
    try:
        # Resolve the picture first (so errors show early)
        picture = REGISTRY.get(args.picture)

        try:
            colors = _read_palette(args.palette, stdin or sys.stdin)
        except (OSError, UnicodeDecodeError) as e:
            log.error("could not read colors: %s", e)
            return 1
        if len(colors) < 2:
            raise InsufficientColorsError(len(colors))

        c1, c2 = choose_two(colors, make_rng(args.seed))
        log.info("Anchors %s -> %s (%s)", c1.hex(), c2.hex(), "discrete" if args.discrete else "continuous")
        color = discrete_color(c1, c2, colors) if args.discrete else continuous_color(c1, c2)

        gradation = picture.from_args(args.width, args.height, list(args.picture_args))
        log.info("Picture %s %dx%d", args.picture, args.width, args.height)

        img = Wallpaper(args.width, args.height, gradation, color).render()
        write_png(img, args.output)
        return 0

    except WallpaperError as e:
        log.error("%s", e)
        return _exit_code(e)


# =============== Entry ===============
def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)
    return args.func(args)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
