from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from typing import TYPE_CHECKING, Sequence

from vecplot.draw.canvas import BoundedCanvas
from vecplot.errors import PlotDataError
from vecplot.glyphbox import GlyphBox
from vecplot.plotter.conrec import ContourGrid
from vecplot.vg.canvas import RGBA
from vecplot.vg.geom import Point, Rectangle

if TYPE_CHECKING:
    from vecplot.plot import Plot


LOGGER = logging.getLogger(__name__)


def _half_steps(coord, n: int, k: int) -> tuple[float, float]:
    """Offsets from coordinate ``k`` to the lower and upper cell edges."""
    if n == 1:
        return -0.5, 0.5
    if k == 0:
        up = (coord(1) - coord(0)) / 2
        return -up, up
    if k == n - 1:
        down = (coord(k) - coord(k - 1)) / 2
        return -down, down
    return -(coord(k) - coord(k - 1)) / 2, (coord(k + 1) - coord(k)) / 2


def _outer_edges(coord, n: int) -> tuple[float, float]:
    if n == 1:
        return coord(0) - 0.5, coord(0) + 0.5
    return (3 * coord(0) - coord(1)) / 2, (3 * coord(n - 1) - coord(n - 2)) / 2


@dataclass
class HeatMap:
    """Fills one rectangle per grid value, colored from ``palette``.

    Cells reach halfway to their neighbours. Values below ``min`` or above
    ``max`` use ``underflow`` and ``overflow``; a ``None`` color leaves the
    cell empty, as do NaN and infinite values.
    """

    grid: ContourGrid
    palette: Sequence[RGBA]
    min: float = math.inf
    max: float = -math.inf
    underflow: RGBA | None = None
    overflow: RGBA | None = None

    def __post_init__(self) -> None:
        if not self.palette:
            raise PlotDataError("heat map palette is empty")

    @classmethod
    def from_grid(cls, grid: ContourGrid, palette: Sequence[RGBA]) -> "HeatMap":
        """Heat map whose dynamic range is the finite extent of ``grid``."""
        lo = getattr(grid, "min", None)
        hi = getattr(grid, "max", None)
        if callable(lo) and callable(hi):
            return cls(grid, palette, min=lo(), max=hi())
        lo, hi = math.inf, -math.inf
        cols, rows = grid.dims()
        for i in range(cols):
            for j in range(rows):
                v = grid.z(i, j)
                if math.isnan(v):
                    continue
                lo = min(lo, v)
                hi = max(hi, v)
        return cls(grid, palette, min=lo, max=hi)

    def color(self, v: float) -> RGBA | None:
        if v < self.min:
            return self.underflow
        if v > self.max:
            return self.overflow
        span = self.max - self.min
        if span == 0:
            return self.palette[0]
        return self.palette[int((v - self.min) * (len(self.palette) - 1) / span + 0.5)]

    def plot(self, c: BoundedCanvas, plt: "Plot") -> None:
        trx, try_ = plt.transforms(c)
        g = self.grid
        cols, rows = g.dims()
        skipped = 0
        for i in range(cols):
            left, right = _half_steps(g.x, cols, i)
            for j in range(rows):
                v = g.z(i, j)
                if not math.isfinite(v):
                    skipped += 1
                    continue
                col = self.color(v)
                if col is None:
                    continue
                down, up = _half_steps(g.y, rows, j)
                x0, x1 = trx(g.x(i) + left), trx(g.x(i) + right)
                y0, y1 = try_(g.y(j) + down), try_(g.y(j) + up)
                pts = [Point(x0, y0), Point(x1, y0), Point(x1, y1), Point(x0, y1)]
                c.fill_polygon(col, c.clip_polygon_xy(pts))
        if skipped:
            LOGGER.debug("heat map left %d non-finite cell(s) empty", skipped)

    def data_range(self) -> tuple[float, float, float, float]:
        cols, rows = self.grid.dims()
        xmin, xmax = _outer_edges(self.grid.x, cols)
        ymin, ymax = _outer_edges(self.grid.y, rows)
        return xmin, xmax, ymin, ymax

    def glyph_boxes(self, plt: "Plot") -> list[GlyphBox]:
        cols, rows = self.grid.dims()
        rect = Rectangle(Point(-5.0, -5.0), Point(5.0, 5.0))
        return [
            GlyphBox(plt.x.norm(self.grid.x(i)), plt.y.norm(self.grid.y(j)), rect)
            for i in range(cols)
            for j in range(rows)
        ]
