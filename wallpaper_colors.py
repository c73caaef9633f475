from __future__ import annotations

import math
import re
from typing import Callable, Iterable, List, NamedTuple, Optional, Sequence, Tuple

import numpy as np

from wallpaper_errors import InsufficientColorsError, PaletteParseError


class Color(NamedTuple):
    """Opaque 8-bit RGB color."""
    r: int
    g: int
    b: int

    def hex(self) -> str:
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}"


ColorFunc = Callable[[float], Color]


# =============== Palette parsing ===============
_COLOR_RE = re.compile(r"#([A-Fa-f0-9]{2})([A-Fa-f0-9]{2})([A-Fa-f0-9]{2})")


def parse_color(text: str) -> Color:
    m = _COLOR_RE.fullmatch(text)
    if m is None:
        raise PaletteParseError(text)
    r, g, b = (int(h, 16) for h in m.groups())
    return Color(r, g, b)


def read_colors(lines: Iterable[str]) -> List[Color]:
    """Parse one ``#RRGGBB`` color per line, in order.

    Blank lines are skipped. The first line that is not a color raises
    PaletteParseError and nothing is returned.
    """
    colors: List[Color] = []
    for raw in lines:
        line = raw.rstrip("\r\n")
        if not line.strip():
            continue
        colors.append(parse_color(line))
    return colors


# =============== Distance & quantization ===============
def distance(c1: Color, c2: Color) -> int:
    """Squared euclidean distance between two colors (no weighting)."""
    dr = int(c2.r) - int(c1.r)
    dg = int(c2.g) - int(c1.g)
    db = int(c2.b) - int(c1.b)
    return dr * dr + dg * dg + db * db


def closest(c: Color, colors: Sequence[Color]) -> Color:
    """Nearest color in ``colors``; the earliest entry wins ties."""
    if not colors:
        raise ValueError("no colors to choose from")
    best = colors[0]
    d = distance(c, best)
    for color in colors[1:]:
        nd = distance(c, color)
        if nd < d:
            best, d = color, nd
    return best


# =============== Gradients ===============
def _channel(v: float) -> int:
    return max(0, min(255, int(math.floor(v + 0.5))))


def gradate(c1: Color, c2: Color, value: float) -> Color:
    """Color between c1 (value 0) and c2 (value 1)."""
    return Color(
        _channel(c1.r + value * (c2.r - c1.r)),
        _channel(c1.g + value * (c2.g - c1.g)),
        _channel(c1.b + value * (c2.b - c1.b)),
    )


def continuous_color(c1: Color, c2: Color) -> ColorFunc:
    def color(grad: float) -> Color:
        return gradate(c1, c2, grad)
    return color


def discrete_color(c1: Color, c2: Color, colors: Sequence[Color]) -> ColorFunc:
    """Like continuous_color, but snapped to the nearest of ``colors``."""
    palette = tuple(colors)
    if not palette:
        raise ValueError("no colors to choose from")

    def color(grad: float) -> Color:
        return closest(gradate(c1, c2, grad), palette)
    return color


# =============== Anchor selection ===============
def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    return np.random.default_rng(seed if seed is not None else np.random.SeedSequence().entropy)


def choose_two(colors: Sequence[Color], rng: np.random.Generator) -> Tuple[Color, Color]:
    """Two distinct palette entries drawn in one sample without replacement."""
    if len(colors) < 2:
        raise InsufficientColorsError(len(colors))
    i1, i2 = rng.choice(len(colors), size=2, replace=False)
    return colors[int(i1)], colors[int(i2)]
