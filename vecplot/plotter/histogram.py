from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from typing import TYPE_CHECKING, Iterable

import numpy as np

from vecplot.draw.canvas import BoundedCanvas
from vecplot.draw.styles import LineStyle
from vecplot.errors import DomainError
from vecplot.plotter.base import DEFAULT_LINE_STYLE, Values, XYs
from vecplot.vg.canvas import RGBA
from vecplot.vg.geom import Point

if TYPE_CHECKING:
    from vecplot.plot import Plot


LOGGER = logging.getLogger(__name__)


@dataclass
class HistogramBin:
    min: float
    max: float
    weight: float = 0.0

    @property
    def width(self) -> float:
        return self.max - self.min


def bin_count(weights: np.ndarray, n: int, xmin: float, xmax: float) -> int:
    """``n`` if positive, else the square root of the summed weights (each at least 1)."""
    if n <= 0:
        n = int(math.ceil(math.sqrt(float(np.maximum(weights, 1.0).sum()))))
    if n < 1 or xmax <= xmin:
        n = 1
    return n


def bin_points(xys: XYs, n: int) -> list[HistogramBin]:
    """Sum the y weights of ``xys`` into ``n`` equal-width bins over the x range."""
    if len(xys) == 0:
        raise DomainError("histogram of no values")
    xmin, xmax = float(xys.x.min()), float(xys.x.max())
    n = bin_count(xys.y, n, xmin, xmax)
    if xmax <= xmin:
        # Every sample at one x: a unit-wide bin centred on it.
        xmin, w = xmin - 0.5, 1.0
    else:
        w = (xmax - xmin) / n
    bins = [HistogramBin(xmin + i * w, xmin + (i + 1) * w) for i in range(n)]
    idx = np.floor((xys.x - xmin) / w).astype(np.int64)
    # Samples at the top of the range fall in the last bin.
    idx = np.clip(idx, 0, n - 1)
    weights = np.bincount(idx, weights=xys.y, minlength=n)
    for b, wt in zip(bins, weights):
        b.weight = float(wt)
    LOGGER.debug("binned %d samples into %d bins of width %g", len(xys), n, w)
    return bins


@dataclass
class Histogram:
    """Bars whose heights are the summed y weights of the samples in each x bin."""

    bins: list[HistogramBin]
    fill_color: RGBA | None = (128, 128, 128, 255)
    line_style: LineStyle = DEFAULT_LINE_STYLE

    @classmethod
    def from_xys(cls, xys: XYs, n: int = 0) -> "Histogram":
        return cls(bin_points(xys, n))

    @classmethod
    def from_values(cls, values: Values | Iterable[float], n: int = 0) -> "Histogram":
        vs = values if isinstance(values, Values) else Values(values)
        return cls.from_xys(XYs.from_columns(vs.data, np.ones_like(vs.data)), n)

    def normalize(self, total: float) -> None:
        """Scale weights so the summed bar areas equal ``total``."""
        s = sum(b.weight for b in self.bins)
        if s == 0:
            return
        for b in self.bins:
            b.weight = b.weight / b.width / s * total

    def plot(self, c: BoundedCanvas, plt: "Plot") -> None:
        trx, try_ = plt.transforms(c)
        for b in self.bins:
            pts = [
                Point(trx(b.min), try_(0)),
                Point(trx(b.max), try_(0)),
                Point(trx(b.max), try_(b.weight)),
                Point(trx(b.min), try_(b.weight)),
            ]
            if self.fill_color is not None:
                c.fill_polygon(self.fill_color, c.clip_polygon_xy(pts))
            pts.append(pts[0])
            c.stroke_lines(self.line_style, *c.clip_lines_xy(pts))

    def data_range(self) -> tuple[float, float, float, float]:
        xmin = min(b.min for b in self.bins)
        xmax = max(b.max for b in self.bins)
        ymax = max(b.weight for b in self.bins)
        return xmin, xmax, 0.0, ymax

    def thumbnail(self, c: BoundedCanvas) -> None:
        pts = [
            Point(c.min.x, c.min.y),
            Point(c.max.x, c.min.y),
            Point(c.max.x, c.max.y),
            Point(c.min.x, c.max.y),
        ]
        if self.fill_color is not None:
            c.fill_polygon(self.fill_color, c.clip_polygon_xy(pts))
        pts.append(pts[0])
        c.stroke_lines(self.line_style, *c.clip_lines_xy(pts))
