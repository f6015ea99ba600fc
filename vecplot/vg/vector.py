from __future__ import annotations

from dataclasses import dataclass, field
import logging
import math
from typing import BinaryIO

import numpy as np

from vecplot.vg.canvas import DEFAULT_DPI, RGBA, StateCanvas
from vecplot.vg.font import Font
from vecplot.vg.geom import Length, Point, Rectangle
from vecplot.vg.path import Path, flatten


LOGGER = logging.getLogger(__name__)

PagePoint = tuple[float, float]


@dataclass(frozen=True)
class StrokeOp:
    lines: tuple[tuple[PagePoint, ...], ...]
    color: RGBA
    width: float
    dashes: tuple[float, ...] = ()
    dash_offset: float = 0.0


@dataclass(frozen=True)
class FillOp:
    polygons: tuple[tuple[PagePoint, ...], ...]
    color: RGBA


@dataclass(frozen=True)
class TextOp:
    font: Font
    size: float
    origin: PagePoint
    angle: float
    text: str
    color: RGBA


@dataclass(frozen=True)
class ImageOp:
    # Page-space bounding box of the transformed image rectangle.
    box: tuple[float, float, float, float]
    image: np.ndarray = field(compare=False)


PageOp = StrokeOp | FillOp | TextOp | ImageOp


class VectorCanvas(StateCanvas):
    """Base for document back-ends.

    Drawing calls are resolved against the current transform into page
    coordinates (points, origin bottom-left) and kept as an op stream that
    the concrete writer serialises in ``write_to``.
    """

    extension = ""

    def __init__(self, width: Length, height: Length, *, dpi: float = DEFAULT_DPI) -> None:
        super().__init__(width, height, dpi=dpi)
        self.ops: list[PageOp] = []

    def _page(self, p: Point) -> PagePoint:
        q = self.transform_point(p)
        return (q.x, q.y)

    def stroke(self, path: Path) -> None:
        st = self.state
        if st.line_width <= 0:
            return
        s = self.transform_scale()
        lines = tuple(tuple(self._page(p) for p in line) for line in flatten(path))
        if lines:
            self.ops.append(
                StrokeOp(lines, st.color, st.line_width * s, tuple(d * s for d in st.dashes), st.dash_offset * s)
            )

    def fill(self, path: Path) -> None:
        polys = tuple(tuple(self._page(p) for p in poly) for poly in flatten(path))
        if polys:
            self.ops.append(FillOp(polys, self.state.color))

    def fill_string(self, font: Font, pt: Point, text: str) -> None:
        if not text:
            return
        self.ops.append(
            TextOp(font, font.size * self.transform_scale(), self._page(pt), self.transform_angle(), text, self.state.color)
        )

    def draw_image(self, rect: Rectangle, image: np.ndarray) -> None:
        corners = [
            self._page(rect.min),
            self._page(Point(rect.max.x, rect.min.y)),
            self._page(rect.max),
            self._page(Point(rect.min.x, rect.max.y)),
        ]
        xs = [c[0] for c in corners]
        ys = [c[1] for c in corners]
        self.ops.append(ImageOp((min(xs), min(ys), max(xs), max(ys)), np.asarray(image, dtype=np.uint8)))

    def write_to(self, sink: BinaryIO) -> None:
        if self.depth:
            LOGGER.warning("writing %s canvas with %d unbalanced push calls", self.extension, self.depth)
        sink.write(self.render())

    def render(self) -> bytes:
        raise NotImplementedError


def rgb_image(image: np.ndarray) -> np.ndarray:
    """Return an HxWx3 uint8 copy of an RGB or RGBA image composited over white."""
    arr = np.asarray(image, dtype=np.uint8)
    if arr.ndim == 3 and arr.shape[2] == 4:
        alpha = arr[:, :, 3:4].astype(np.float32) / 255.0
        arr = (arr[:, :, :3] * alpha + 255.0 * (1.0 - alpha)).astype(np.uint8)
    return arr


def fmt_num(v: float) -> str:
    if not math.isfinite(v):
        raise ValueError(f"non-finite coordinate {v!r}")
    out = f"{v:.4f}".rstrip("0").rstrip(".")
    return "0" if out in ("", "-0") else out
