from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Tuple, Union

import numpy as np
from PIL import Image

from wallpaper_colors import Color, ColorFunc
from wallpaper_errors import OutputError
from gradations import GradationFunc

log = logging.getLogger("wallpaper.render")


@dataclass(frozen=True)
class Wallpaper:
    """An image that colors each pixel by combining a gradation function,
    producing a value between 0 and 1, with a color function turning that
    value into a color.

    Nothing is cached: every ``at`` call recomputes the pixel.
    """
    width: int
    height: int
    gradation: GradationFunc
    color: ColorFunc

    mode = "RGB"

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    @property
    def bounds(self) -> Tuple[int, int, int, int]:
        return 0, 0, self.width, self.height

    def at(self, x: int, y: int) -> Color:
        return self.color(self.gradation(x, y))

    def pixels(self) -> Iterator[Color]:
        """Every pixel in raster order (row by row, left to right)."""
        for y in range(self.height):
            for x in range(self.width):
                yield self.at(x, y)

    def render(self) -> Image.Image:
        arr = np.empty((self.height, self.width, 3), dtype=np.uint8)
        flat = arr.reshape(-1, 3)
        for i, c in enumerate(self.pixels()):
            flat[i] = c
        return Image.fromarray(arr, "RGB")


def write_png(img: Image.Image, path: Union[str, Path]) -> None:
    """Encode ``img`` as PNG at ``path``; each failing stage raises OutputError."""
    try:
        out = open(path, "wb")
    except OSError as e:
        raise OutputError(f"could not create image file: {e}") from e

    try:
        img.save(out, format="PNG", optimize=True)
    except (OSError, ValueError) as e:
        out.close()
        Path(path).unlink(missing_ok=True)
        raise OutputError(f"could not write image: {e}") from e

    try:
        out.close()
    except OSError as e:
        raise OutputError(f"could not close output: {e}") from e
    log.info("Saved %s (%dx%d)", path, *img.size)
