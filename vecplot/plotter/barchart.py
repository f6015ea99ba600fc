from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from vecplot.draw.canvas import BoundedCanvas
from vecplot.draw.styles import LineStyle
from vecplot.errors import DomainError
from vecplot.glyphbox import GlyphBox
from vecplot.plotter.base import DEFAULT_LINE_STYLE, Values
from vecplot.vg.canvas import RGBA
from vecplot.vg.geom import Length, Point, Rectangle

if TYPE_CHECKING:
    from vecplot.plot import Plot


@dataclass
class BarChart:
    """One bar per value, the i-th centred at x = i plus ``offset`` points."""

    values: Values
    width: Length
    color: RGBA | None = (0, 0, 0, 255)
    line_style: LineStyle = DEFAULT_LINE_STYLE
    offset: Length = 0.0

    def __post_init__(self) -> None:
        if not isinstance(self.values, Values):
            self.values = Values(self.values)
        if np.any(self.values.data < 0):
            raise DomainError("bar chart values must not be negative")
        if self.width <= 0:
            raise ValueError(f"bar width must be positive, got {self.width!r}")

    def _outline(self, xmin: Length, xmax: Length, ymin: Length, ymax: Length) -> list[Point]:
        return [Point(xmin, ymin), Point(xmin, ymax), Point(xmax, ymax), Point(xmax, ymin)]

    def _draw(self, c: BoundedCanvas, pts: list[Point]) -> None:
        if self.color is not None:
            c.fill_polygon(self.color, c.clip_polygon_y(pts))
        pts = pts + [pts[0]]
        c.stroke_lines(self.line_style, *c.clip_lines_y(pts))

    def plot(self, c: BoundedCanvas, plt: "Plot") -> None:
        trx, try_ = plt.transforms(c)
        for i, height in enumerate(self.values.data):
            x = trx(float(i))
            if not c.contains_x(x):
                continue
            xmin = x - self.width / 2 + self.offset
            self._draw(c, self._outline(xmin, xmin + self.width, try_(0.0), try_(float(height))))

    def data_range(self) -> tuple[float, float, float, float]:
        n = len(self.values)
        ymax = float(self.values.data.max()) if n else 0.0
        return 0.0, float(max(n - 1, 0)), 0.0, ymax

    def glyph_boxes(self, plt: "Plot") -> list[GlyphBox]:
        rect = Rectangle(Point(self.offset - self.width / 2, 0.0), Point(self.offset + self.width / 2, 0.0))
        return [GlyphBox(plt.x.norm(float(i)), 0.0, rect) for i in range(len(self.values))]

    def thumbnail(self, c: BoundedCanvas) -> None:
        self._draw(c, self._outline(c.min.x, c.max.x, c.min.y, c.max.y))
