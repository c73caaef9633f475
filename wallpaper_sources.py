from __future__ import annotations

import hashlib
import io
import logging
import mimetypes
import os
import tempfile
from pathlib import Path
from typing import Optional, Tuple
from urllib.parse import unquote, urlparse

import numpy as np
import requests
from PIL import Image, UnidentifiedImageError

from wallpaper_errors import ImageLoadError

log = logging.getLogger("wallpaper.sources")


# =============== Core: Fetcher & Loader ===============
class FileFetcher:
    """Fetch bytes from http(s) / file:// / local path with a tiny, safe cache."""

    def __init__(self, cache_dir: Optional[Path] = None, timeout: float = 20.0) -> None:
        self.timeout = timeout
        self.cache_dir = cache_dir or Path(tempfile.gettempdir()) / "wallpaper_cache"
        self._session = requests.Session()
        self._session.headers.update({"User-Agent": "wallpaper/1.0"})

    def fetch(self, src: str) -> Tuple[bytes, Optional[str]]:
        parsed = urlparse(src)
        scheme = (parsed.scheme or "").lower()
        if scheme in ("http", "https"):
            return self._fetch_http_cached(src)
        if scheme == "file":
            local_path = unquote(parsed.path)
            if os.name == "nt" and local_path.startswith("/"):
                local_path = local_path[1:]
            return self._fetch_local(local_path)
        if scheme == "" or (os.name == "nt" and len(scheme) == 1):
            return self._fetch_local(src)
        raise ImageLoadError(f"opening image: unsupported URL scheme: {scheme}")

    def _cache_key(self, url: str) -> Path:
        h = hashlib.sha256(url.encode("utf-8")).hexdigest()[:32]
        return self.cache_dir / f"{h}.bin"

    def _fetch_http_cached(self, url: str) -> Tuple[bytes, Optional[str]]:
        key = self._cache_key(url)
        if key.exists():
            log.debug("Cache hit: %s", key.name)
            return key.read_bytes(), mimetypes.guess_type(url)[0]
        log.info("Fetching: %s", url)
        try:
            r = self._session.get(url, timeout=self.timeout)
            r.raise_for_status()
        except requests.RequestException as e:
            raise ImageLoadError(f"opening image: {e}") from e
        raw = r.content
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            key.write_bytes(raw)
        except OSError as e:
            log.warning("Could not cache %s: %s", url, e)
        return raw, r.headers.get("Content-Type")

    def _fetch_local(self, path_str: str) -> Tuple[bytes, Optional[str]]:
        p = Path(path_str)
        if not p.is_file():
            raise ImageLoadError(f"opening image: file not found: {p}")
        try:
            raw = p.read_bytes()
        except OSError as e:
            raise ImageLoadError(f"opening image: {e}") from e
        return raw, mimetypes.guess_type(p.name)[0]


class ImageLoader:
    """Decode bytes → 8-bit grayscale Pillow image (alpha is dropped)."""

    def load(self, raw: bytes, content_type: Optional[str] = None) -> Image.Image:
        try:
            img = Image.open(io.BytesIO(raw))
            img.load()
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
            raise ImageLoadError(f"decoding image: {e}") from e

        if img.mode in ("RGBA", "LA", "PA") or (img.mode == "P" and "transparency" in img.info):
            img = img.convert("RGBA").convert("RGB")
        gray = img.convert("L")
        log.debug("Decoded %s image %dx%d (%s)", img.format or "?", gray.width, gray.height, content_type or "unknown type")
        return gray


def load_gray_image(src: str, fetcher: Optional[FileFetcher] = None) -> np.ndarray:
    """Fetch and decode ``src`` as a (H, W) uint8 luminance array."""
    fetcher = fetcher or FileFetcher()
    raw, ctype = fetcher.fetch(src)
    gray = ImageLoader().load(raw, ctype)
    if gray.width == 0 or gray.height == 0:
        raise ImageLoadError(f"decoding image: empty image: {src}")
    return np.asarray(gray, dtype=np.uint8).copy()
