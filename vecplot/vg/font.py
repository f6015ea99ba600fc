from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import logging
import os
from pathlib import Path

from PIL import ImageFont

from vecplot.vg.geom import Length


LOGGER = logging.getLogger(__name__)

DEFAULT_FONT_FAMILY = "DejaVu Sans"
FONT_ENV_VAR = "VECPLOT_FONT"
SANS_FONT_FALLBACK_PATTERNS = (
    "dejavusans",
    "dejavu sans",
    "liberationsans",
    "helvetica",
    "arial",
    "freesans",
)
# Fonts are loaded at this many pixels per point so metrics keep sub-point precision.
_METRIC_SCALE = 8


@dataclass(frozen=True)
class FontExtents:
    ascent: Length
    # Negative: distance below the baseline.
    descent: Length
    height: Length


@dataclass(frozen=True)
class Font:
    size: Length
    name: str = ""

    @property
    def family(self) -> str:
        return self.name or default_font_family()

    def extents(self) -> FontExtents:
        ascent, descent = _metrics(self.family, self.size)
        return FontExtents(ascent=ascent, descent=-descent, height=ascent + descent)

    def width(self, text: str) -> Length:
        if not text:
            return 0.0
        return _text_width(self.family, self.size, text)

    def with_size(self, size: Length) -> "Font":
        return Font(size=size, name=self.name)


def default_font_family() -> str:
    return os.getenv(FONT_ENV_VAR, "").strip() or DEFAULT_FONT_FAMILY


def pillow_font(family: str, size_px: float) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    """Return the Pillow font used to rasterise text at a pixel size."""
    return _load_font(family, max(1, int(round(size_px))))


@lru_cache(maxsize=256)
def _metrics(family: str, size: Length) -> tuple[float, float]:
    font = _load_font(family, max(1, int(round(size * _METRIC_SCALE))))
    if hasattr(font, "getmetrics"):
        ascent, descent = font.getmetrics()
    else:
        _, top, _, bottom = font.getbbox("Ag")
        ascent, descent = -top, bottom
    return (ascent / _METRIC_SCALE, descent / _METRIC_SCALE)


@lru_cache(maxsize=4096)
def _text_width(family: str, size: Length, text: str) -> float:
    font = _load_font(family, max(1, int(round(size * _METRIC_SCALE))))
    return float(font.getlength(text)) / _METRIC_SCALE


@lru_cache(maxsize=64)
def _load_font(family: str, size_px: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    font_path = _resolve_font_path(family)
    if font_path is None:
        LOGGER.debug("no font file matches %r, using Pillow default font", family)
        return ImageFont.load_default(size=size_px)
    try:
        return ImageFont.truetype(str(font_path), size=size_px)
    except OSError:
        LOGGER.warning("failed to load font %s, using Pillow default font", font_path)
        return ImageFont.load_default(size=size_px)


@lru_cache(maxsize=32)
def _resolve_font_path(family: str) -> Path | None:
    wanted = family.strip().lower()
    patterns = ((wanted,) if wanted else ()) + SANS_FONT_FALLBACK_PATTERNS

    font_dirs = [
        Path.home() / "Library" / "Fonts",
        Path.home() / ".fonts",
        Path("/Library/Fonts"),
        Path("/System/Library/Fonts"),
        Path("/usr/share/fonts"),
        Path("/usr/local/share/fonts"),
        Path("C:/Windows/Fonts"),
    ]

    candidates: list[Path] = []
    for base in font_dirs:
        if not base.exists():
            continue
        for ext in ("*.ttf", "*.otf"):
            candidates.extend(sorted(base.rglob(ext)))

    for pattern in patterns:
        p = pattern.replace(" ", "").replace("-", "")
        for path in candidates:
            stem = path.stem.lower().replace(" ", "").replace("-", "")
            # Prefer the regular face over bold or oblique variants.
            if stem == p or stem == p + "regular":
                return path
        for path in candidates:
            if p in path.stem.lower().replace(" ", "").replace("-", ""):
                return path
    return None
