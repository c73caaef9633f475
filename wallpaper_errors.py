"""Error types raised by the wallpaper pipeline.

Every error here ends the run; main.py maps them to exit codes.
"""
from __future__ import annotations

from typing import Optional


class WallpaperError(Exception):
    """Base class for all user-facing wallpaper failures."""


class PaletteParseError(WallpaperError, ValueError):
    def __init__(self, line: str) -> None:
        super().__init__(f"not a color: {line}")
        self.line = line


class InsufficientColorsError(WallpaperError, ValueError):
    def __init__(self, count: int) -> None:
        super().__init__(f"not enough colors (need at least 2, got {count})")
        self.count = count


class UnknownGeneratorError(WallpaperError, LookupError):
    def __init__(self, name: str, available: Optional[list] = None) -> None:
        msg = f"unknown picture {name}"
        if available:
            msg += f" (available: {', '.join(available)})"
        super().__init__(msg)
        self.name = name


class GeneratorArgumentError(WallpaperError, ValueError):
    def __init__(self, message: str, usage: str = "") -> None:
        usage = " ".join(usage.split())
        super().__init__(f"{message} ({usage})" if usage else message)
        self.usage = usage


class ImageLoadError(WallpaperError, OSError):
    pass


class OutputError(WallpaperError, OSError):
    pass
