from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from vecplot.draw.canvas import BoundedCanvas
from vecplot.draw.styles import GlyphStyle
from vecplot.glyphbox import GlyphBox
from vecplot.plotter.base import DEFAULT_GLYPH_STYLE, XYs, xy_range
from vecplot.vg.geom import Point

if TYPE_CHECKING:
    from vecplot.plot import Plot


@dataclass
class Scatter:
    """Draws a glyph at every point."""

    xys: XYs
    glyph_style: GlyphStyle = DEFAULT_GLYPH_STYLE

    def plot(self, c: BoundedCanvas, plt: "Plot") -> None:
        trx, try_ = plt.transforms(c)
        for x, y in self.xys.data:
            c.draw_glyph(self.glyph_style, Point(trx(x), try_(y)))

    def data_range(self) -> tuple[float, float, float, float]:
        return xy_range(self.xys)

    def glyph_boxes(self, plt: "Plot") -> list[GlyphBox]:
        rect = self.glyph_style.rectangle()
        return [GlyphBox(plt.x.norm(x), plt.y.norm(y), rect) for x, y in self.xys.data]

    def thumbnail(self, c: BoundedCanvas) -> None:
        c.draw_glyph(self.glyph_style, c.center())
