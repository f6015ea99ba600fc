from __future__ import annotations

import logging

from vecplot.errors import UnsupportedFormat
from vecplot.vg.canvas import BLACK, DEFAULT_DPI, RGBA, TRANSPARENT, WHITE, Canvas, StateCanvas, to_rgba
from vecplot.vg.eps import EpsCanvas
from vecplot.vg.font import Font, FontExtents
from vecplot.vg.geom import (
    CENTIMETER,
    INCH,
    MILLIMETER,
    Length,
    Point,
    Rectangle,
    centimeters,
    dots,
    from_dots,
    inches,
    millimeters,
    parse_length,
    points,
)
from vecplot.vg.path import Arc, Close, Line, Move, Path
from vecplot.vg.pdf import PdfCanvas
from vecplot.vg.raster import RASTER_FORMATS, ImageCanvas
from vecplot.vg.recorder import Recorder
from vecplot.vg.svg import SvgCanvas
from vecplot.vg.tex import TexCanvas


LOGGER = logging.getLogger(__name__)

SUPPORTED_FORMATS = ("eps", "jpg", "jpeg", "pdf", "png", "svg", "tif", "tiff", "tex")

_VECTOR_BACKENDS = {
    "eps": EpsCanvas,
    "pdf": PdfCanvas,
    "svg": SvgCanvas,
    "tex": TexCanvas,
}


def new_canvas_for_format(fmt: str, width: Length, height: Length, *, dpi: float = DEFAULT_DPI):
    """Construct the back-end canvas that writes ``fmt`` (a file extension without the dot)."""
    key = fmt.lower().lstrip(".")
    if key in RASTER_FORMATS:
        background = WHITE if RASTER_FORMATS[key] == "JPEG" else TRANSPARENT
        LOGGER.debug("raster canvas %sx%s at %s dpi for %s", width, height, dpi, key)
        return ImageCanvas(width, height, dpi=dpi, background=background)
    if key in _VECTOR_BACKENDS:
        LOGGER.debug("%s canvas %sx%s", key, width, height)
        return _VECTOR_BACKENDS[key](width, height, dpi=dpi)
    raise UnsupportedFormat(f"unsupported format: {fmt!r}")


def write_canvas(canvas, sink, fmt: str) -> None:
    key = fmt.lower().lstrip(".")
    if isinstance(canvas, ImageCanvas):
        canvas.write_to(sink, key)
    else:
        canvas.write_to(sink)


__all__ = [
    "Arc",
    "BLACK",
    "CENTIMETER",
    "Canvas",
    "Close",
    "DEFAULT_DPI",
    "EpsCanvas",
    "Font",
    "FontExtents",
    "INCH",
    "ImageCanvas",
    "Length",
    "Line",
    "MILLIMETER",
    "Move",
    "Path",
    "PdfCanvas",
    "Point",
    "RGBA",
    "Recorder",
    "Rectangle",
    "SUPPORTED_FORMATS",
    "StateCanvas",
    "SvgCanvas",
    "TRANSPARENT",
    "TexCanvas",
    "WHITE",
    "centimeters",
    "dots",
    "from_dots",
    "inches",
    "millimeters",
    "new_canvas_for_format",
    "parse_length",
    "points",
    "to_rgba",
    "write_canvas",
]
