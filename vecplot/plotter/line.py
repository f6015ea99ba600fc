from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from vecplot.draw.canvas import BoundedCanvas
from vecplot.draw.styles import LineStyle
from vecplot.plotter.base import DEFAULT_LINE_STYLE, XYs, xy_range
from vecplot.vg.geom import Point

if TYPE_CHECKING:
    from vecplot.plot import Plot


@dataclass
class Line:
    """Connects consecutive points with straight segments."""

    xys: XYs
    line_style: LineStyle = DEFAULT_LINE_STYLE

    def plot(self, c: BoundedCanvas, plt: "Plot") -> None:
        if len(self.xys) == 0:
            return
        trx, try_ = plt.transforms(c)
        pts = [Point(trx(x), try_(y)) for x, y in self.xys.data]
        c.stroke_lines(self.line_style, *c.clip_lines_xy(pts))

    def data_range(self) -> tuple[float, float, float, float]:
        return xy_range(self.xys)

    def thumbnail(self, c: BoundedCanvas) -> None:
        y = c.center().y
        c.stroke_line2(self.line_style, c.min.x, y, c.max.x, y)
