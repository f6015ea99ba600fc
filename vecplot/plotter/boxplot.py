from __future__ import annotations

from dataclasses import dataclass, replace
import math
from typing import TYPE_CHECKING, Iterable, Sequence

import numpy as np

from vecplot.draw.canvas import BoundedCanvas
from vecplot.draw.styles import GlyphStyle, LineStyle
from vecplot.glyphbox import GlyphBox
from vecplot.plotter.base import DEFAULT_GLYPH_STYLE, DEFAULT_LINE_STYLE, Values
from vecplot.vg.geom import Length, Point, Rectangle

if TYPE_CHECKING:
    from vecplot.plot import Plot


DEFAULT_WHISKER_STYLE = LineStyle(width=0.5, dashes=(4.0, 2.0))


def median(sorted_values: Sequence[float]) -> float:
    n = len(sorted_values)
    if n == 1:
        return float(sorted_values[0])
    med = float(sorted_values[n // 2])
    if n % 2 == 0:
        med = (med + float(sorted_values[n // 2 - 1])) / 2
    return med


@dataclass(frozen=True)
class BoxSummary:
    """Five-number summary plus Tukey fences of a sample."""

    median: float
    quartile1: float
    quartile3: float
    adj_low: float
    adj_high: float
    min: float
    max: float
    outside: tuple[int, ...]

    @classmethod
    def of(cls, values: np.ndarray) -> "BoxSummary":
        s = np.sort(values)
        n = len(s)
        if n == 1:
            med = q1 = q3 = float(s[0])
        else:
            med = median(s)
            q1 = median(s[: n // 2])
            q3 = median(s[int(math.ceil(n / 2)) :])
        iqr = q3 - q1
        low, high = q1 - 1.5 * iqr, q3 + 1.5 * iqr
        outside = []
        adj_low, adj_high = math.inf, -math.inf
        for i, v in enumerate(values):
            if v > high or v < low:
                outside.append(i)
                continue
            adj_low = min(adj_low, float(v))
            adj_high = max(adj_high, float(v))
        return cls(med, q1, q3, adj_low, adj_high, float(s[0]), float(s[-1]), tuple(outside))


class BoxPlot:
    """Vertical box and whiskers at x = ``location``, ``width`` points wide."""

    def __init__(self, width: Length, location: float, values: Values | Iterable[float]) -> None:
        self.values = values if isinstance(values, Values) else Values(values)
        self.location = float(location)
        self.width = width
        self.cap_width = 3 * width / 4
        self.glyph_style: GlyphStyle = DEFAULT_GLYPH_STYLE
        self.box_style: LineStyle = DEFAULT_LINE_STYLE
        self.median_style: LineStyle = DEFAULT_LINE_STYLE
        self.whisker_style: LineStyle = DEFAULT_WHISKER_STYLE
        self.summary: BoxSummary | None = None
        if len(self.values) == 0:
            self.width = 0.0
            self.glyph_style = replace(self.glyph_style, radius=0.0)
            self.box_style = self.box_style.with_width(0.0)
            self.median_style = self.median_style.with_width(0.0)
            self.whisker_style = self.whisker_style.with_width(0.0)
            return
        self.summary = BoxSummary.of(self.values.data)

    def _outline(self, pos: float, lo: float, hi: float, med: float, adj_lo: float, adj_hi: float) -> tuple:
        """Box, median and whisker polylines across a position axis ``pos``.

        Returned as (u, v) pairs: u along the box width, v along the values.
        """
        hw = self.width / 2
        box = [(pos - hw, lo), (pos - hw, hi), (pos + hw, hi), (pos + hw, lo), (pos - hw - self.box_style.width / 2, lo)]
        med_line = [(pos - hw, med), (pos + hw, med)]
        cap = self.cap_width / 2
        whiskers = [
            [(pos, hi), (pos, adj_hi)],
            [(pos - cap, adj_hi), (pos + cap, adj_hi)],
            [(pos, lo), (pos, adj_lo)],
            [(pos - cap, adj_lo), (pos + cap, adj_lo)],
        ]
        return box, med_line, whiskers

    def plot(self, c: BoundedCanvas, plt: "Plot") -> None:
        s = self.summary
        if s is None:
            return
        trx, try_ = plt.transforms(c)
        x = trx(self.location)
        if not c.contains_x(x):
            return
        box, med, whiskers = self._outline(
            x, try_(s.quartile1), try_(s.quartile3), try_(s.median), try_(s.adj_low), try_(s.adj_high)
        )

        def pts(line):
            return [Point(u, v) for u, v in line]

        c.stroke_lines(self.box_style, *c.clip_lines_y(pts(box)))
        c.stroke_lines(self.median_style, *c.clip_lines_y(pts(med)))
        c.stroke_lines(self.whisker_style, *c.clip_lines_y(*(pts(w) for w in whiskers)))
        for i in s.outside:
            c.draw_glyph(self.glyph_style, Point(x, try_(self.values[i])))

    def data_range(self) -> tuple[float, float, float, float]:
        s = self.summary
        if s is None:
            return self.location, self.location, math.inf, -math.inf
        return self.location, self.location, s.min, s.max

    def glyph_boxes(self, plt: "Plot") -> list[GlyphBox]:
        s = self.summary
        if s is None:
            return []
        x = plt.x.norm(self.location)
        rect = self.glyph_style.rectangle()
        boxes = [GlyphBox(x, plt.y.norm(self.values[i]), rect) for i in s.outside]
        half = self.width / 2 + self.box_style.width / 2
        boxes.append(GlyphBox(x, plt.y.norm(s.median), Rectangle(Point(-half, 0.0), Point(half, 0.0))))
        return boxes


class HorizontalBoxPlot(BoxPlot):
    """A box plot lying along the x axis at y = ``location``."""

    def plot(self, c: BoundedCanvas, plt: "Plot") -> None:
        s = self.summary
        if s is None:
            return
        trx, try_ = plt.transforms(c)
        y = try_(self.location)
        if not c.contains_y(y):
            return
        box, med, whiskers = self._outline(
            y, trx(s.quartile1), trx(s.quartile3), trx(s.median), trx(s.adj_low), trx(s.adj_high)
        )

        def pts(line):
            return [Point(v, u) for u, v in line]

        c.stroke_lines(self.box_style, *c.clip_lines_x(pts(box)))
        c.stroke_lines(self.median_style, *c.clip_lines_x(pts(med)))
        c.stroke_lines(self.whisker_style, *c.clip_lines_x(*(pts(w) for w in whiskers)))
        for i in s.outside:
            c.draw_glyph(self.glyph_style, Point(trx(self.values[i]), y))

    def data_range(self) -> tuple[float, float, float, float]:
        s = self.summary
        if s is None:
            return math.inf, -math.inf, self.location, self.location
        return s.min, s.max, self.location, self.location

    def glyph_boxes(self, plt: "Plot") -> list[GlyphBox]:
        s = self.summary
        if s is None:
            return []
        y = plt.y.norm(self.location)
        rect = self.glyph_style.rectangle()
        boxes = [GlyphBox(plt.x.norm(self.values[i]), y, rect) for i in s.outside]
        half = self.width / 2 + self.box_style.width / 2
        boxes.append(GlyphBox(plt.x.norm(s.median), y, Rectangle(Point(0.0, -half), Point(0.0, half))))
        return boxes
