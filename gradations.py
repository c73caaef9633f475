from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, NoReturn, Optional, Sequence

import numpy as np

from wallpaper_errors import GeneratorArgumentError, UnknownGeneratorError
from wallpaper_sources import FileFetcher, load_gray_image

log = logging.getLogger("wallpaper.gradations")

GradationFunc = Callable[[int, int], float]


# =============== Registry ===============
class GeneratorRegistry:
    def __init__(self) -> None:
        self._by_name: Dict[str, type[BaseGradation]] = {}

    def register(self, name: str, cls: type["BaseGradation"]) -> None:
        key = name.strip()
        self._by_name[key] = cls

    def names(self) -> list[str]:
        return sorted(self._by_name.keys())

    def get(self, name: str) -> type["BaseGradation"]:
        key = name.strip()
        if key not in self._by_name:
            raise UnknownGeneratorError(name, self.names())
        return self._by_name[key]

    def create(self, name: str, width: int, height: int, args: Sequence[str] = ()) -> "BaseGradation":
        return self.get(name).from_args(width, height, list(args))


REGISTRY = GeneratorRegistry()


# =============== Argument parsing ===============
class _ArgParser(argparse.ArgumentParser):
    """argparse for generator arguments: errors raise instead of exiting."""

    def __init__(self, prog: str, **kwargs) -> None:
        super().__init__(prog=prog, add_help=False, allow_abbrev=False, **kwargs)

    def error(self, message: str) -> NoReturn:
        raise GeneratorArgumentError(f"{self.prog}: {message}", self.format_usage().strip())


# =============== Base ===============
@dataclass(frozen=True)
class BaseGradation:
    """Scalar field over a width x height canvas; ``field(x, y)`` is in [0, 1]."""
    width: int
    height: int

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise GeneratorArgumentError(f"invalid canvas size {self.width}x{self.height}")

    @classmethod
    def from_args(cls, width: int, height: int, args: List[str]) -> "BaseGradation":  # pragma: no cover
        raise NotImplementedError

    def __call__(self, x: int, y: int) -> float:  # pragma: no cover
        raise NotImplementedError


# =============== Generators ===============
@dataclass(frozen=True)
class LinearGradient(BaseGradation):
    """Horizontal gradient: 0.0 on the left edge, approaching 1.0 on the right."""

    @classmethod
    def from_args(cls, width: int, height: int, args: List[str]) -> "LinearGradient":
        return cls(width, height)

    def __call__(self, x: int, y: int) -> float:
        return x / self.width


@dataclass(frozen=True)
class MandelbrotField(BaseGradation):
    """Escape-time field of the Mandelbrot set, fitted into the canvas.

    The disk of radius 2 around the origin fills the shorter side of the
    canvas. Points that never escape within ``iterations`` steps are 1.0.
    """
    iterations: int = 50
    cx: int = field(init=False)
    cy: int = field(init=False)
    r: int = field(init=False)

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.iterations < 1:
            raise GeneratorArgumentError(f"mandelbrot: iterations must be positive, got {self.iterations}")
        object.__setattr__(self, "cx", self.width // 2)
        object.__setattr__(self, "cy", self.height // 2)
        # radius of the containing disk around the origin, in px
        object.__setattr__(self, "r", max(1, min(self.width, self.height) // 2))

    @classmethod
    def from_args(cls, width: int, height: int, args: List[str]) -> "MandelbrotField":
        p = _ArgParser("mandelbrot")
        p.add_argument("-i", "--iterations", type=int, default=50, help="set the number of iterations")
        ns = p.parse_args(args)
        if ns.iterations < 1:
            p.error(f"argument -i/--iterations: must be positive, got {ns.iterations}")
        return cls(width, height, iterations=ns.iterations)

    def __call__(self, x: int, y: int) -> float:
        c = complex(2 * (float(x) - self.cx) / self.r, 2 * (float(y) - self.cy) / self.r)
        z = 0j
        i = 0
        while i < self.iterations and abs(z) <= 2:
            z = z * z + c
            i += 1
        return i / self.iterations


@dataclass(frozen=True)
class ImageProjection(BaseGradation):
    """Grayscale projection of a source image.

    The image is scaled uniformly so it covers the whole canvas, anchored at
    the top-left corner. Canvas pixels that project past the source edge
    take the value of the nearest edge pixel.
    """
    gray: np.ndarray = field(default=None, repr=False, compare=False)  # (H, W) uint8
    scale: float = field(init=False)

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.gray is None or self.gray.ndim != 2 or 0 in self.gray.shape:
            raise GeneratorArgumentError("graphic: a non-empty grayscale image is required")
        gray = np.array(self.gray, dtype=np.uint8)
        gray.setflags(write=False)
        object.__setattr__(self, "gray", gray)
        ih, iw = gray.shape
        # Preserve aspect ratio by taking the max and using it for both axes.
        object.__setattr__(self, "scale", max(self.width / iw, self.height / ih))

    @classmethod
    def from_args(
        cls, width: int, height: int, args: List[str], fetcher: Optional[FileFetcher] = None
    ) -> "ImageProjection":
        p = _ArgParser("graphic")
        p.add_argument("filepath", help="image path or URL (PNG, JPEG, ...)")
        ns = p.parse_args(args)
        gray = load_gray_image(ns.filepath, fetcher=fetcher)
        log.info("Loaded %s (%dx%d)", ns.filepath, gray.shape[1], gray.shape[0])
        return cls(width, height, gray=gray)

    @property
    def source_size(self) -> tuple[int, int]:
        return self.gray.shape[1], self.gray.shape[0]

    def __call__(self, x: int, y: int) -> float:
        ih, iw = self.gray.shape
        px = min(max(int(x / self.scale), 0), iw - 1)
        py = min(max(int(y / self.scale), 0), ih - 1)
        return float(self.gray[py, px]) / 255.0


# ---- Register defaults at import time ----
REGISTRY.register("gradient", LinearGradient)
REGISTRY.register("mandelbrot", MandelbrotField)
REGISTRY.register("graphic", ImageProjection)
