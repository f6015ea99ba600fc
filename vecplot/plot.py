from __future__ import annotations

from dataclasses import dataclass, field, replace
import logging
from pathlib import Path as FilePath
from typing import TYPE_CHECKING, Callable, Sequence

from vecplot.axis import Axis, HorizontalAxis, VerticalAxis
from vecplot.draw.canvas import BoundedCanvas, Tiles
from vecplot.draw.styles import TextStyle
from vecplot.errors import PlotError
from vecplot.glyphbox import DataRanger, GlyphBox, GlyphBoxer, Plotter
from vecplot.legend import Legend
from vecplot.ticks import ConstantTicks, Tick
from vecplot.vg import DEFAULT_DPI, RGBA, WHITE, Canvas, new_canvas_for_format, write_canvas
from vecplot.vg.font import Font
from vecplot.vg.geom import Length, Point, Rectangle

if TYPE_CHECKING:
    from vecplot.config import PlotConfig


LOGGER = logging.getLogger(__name__)


@dataclass
class Title:
    text: str = ""
    style: TextStyle = field(default_factory=lambda: TextStyle(font=Font(size=12.0)))
    padding: Length = 5.0


@dataclass
class Plot:
    """Two axes, a title, a legend and the plotters drawn in the data area."""

    title: Title = field(default_factory=Title)
    background: RGBA | None = WHITE
    x: Axis = field(default_factory=Axis)
    y: Axis = field(default_factory=Axis)
    legend: Legend = field(default_factory=Legend)
    plotters: list[Plotter] = field(default_factory=list)
    error: Exception | None = None

    @classmethod
    def from_config(cls, config: "PlotConfig") -> "Plot":
        p = cls()
        config.apply(p)
        return p

    def record_error(self, err: Exception) -> None:
        """Keep the first error; it is raised when the plot is saved."""
        if self.error is None:
            self.error = err
        else:
            LOGGER.debug("plot already holds an error, dropping %r", err)

    def add(self, *plotters: Plotter) -> "Plot":
        """Append plotters and widen the axes to their data ranges."""
        for d in plotters:
            if isinstance(d, DataRanger):
                try:
                    xmin, xmax, ymin, ymax = d.data_range()
                except PlotError as exc:
                    self.record_error(exc)
                    continue
                self.x.min = min(self.x.min, xmin)
                self.x.max = max(self.x.max, xmax)
                self.y.min = min(self.y.min, ymin)
                self.y.max = max(self.y.max, ymax)
            self.plotters.append(d)
        return self

    def _bounded(self, c: BoundedCanvas | Canvas) -> BoundedCanvas:
        return c if isinstance(c, BoundedCanvas) else BoundedCanvas.of(c)

    def _below_title(self, c: BoundedCanvas) -> BoundedCanvas:
        if not self.title.text:
            return c
        style = self.title.style
        drop = style.height(self.title.text) - style.font.extents().descent + self.title.padding
        return c.crop(0.0, 0.0, 0.0, -drop)

    def draw(self, c: BoundedCanvas | Canvas) -> None:
        c = self._bounded(c)
        if self.background is not None:
            c.set_color(self.background)
            c.fill(c.rect.path())
        if self.title.text:
            style = replace(self.title.style, xalign=-0.5, yalign=-1.0)
            c.fill_text(style, Point(c.center().x, c.max.y), self.title.text)
            c = self._below_title(c)

        self.x.sanitize()
        self.y.sanitize()
        xaxis = HorizontalAxis(self.x)
        yaxis = VerticalAxis(self.y)

        ywidth = yaxis.size()
        xaxis.draw(self.pad_x(c.crop(ywidth, 0.0, 0.0, 0.0)))
        xheight = xaxis.size()
        yaxis.draw(self.pad_y(c.crop(0.0, 0.0, xheight, 0.0)))

        data_c = self.pad_y(self.pad_x(c.crop(ywidth, 0.0, xheight, 0.0)))
        for d in self.plotters:
            d.plot(data_c, self)

        self.legend.draw(c.crop(ywidth, 0.0, 0.0, 0.0).crop(0.0, 0.0, xheight, 0.0))

    def data_canvas(self, c: BoundedCanvas | Canvas) -> BoundedCanvas:
        """Return the canvas plotters would be drawn into by :meth:`draw`."""
        c = self._below_title(self._bounded(c))
        self.x.sanitize()
        self.y.sanitize()
        ywidth = VerticalAxis(self.y).size()
        xheight = HorizontalAxis(self.x).size()
        return self.pad_y(self.pad_x(c.crop(ywidth, 0.0, xheight, 0.0)))

    def glyph_boxes(self) -> list[GlyphBox]:
        """Glyph boxes of all plotters, dropping boxes placed outside the axes."""
        boxes: list[GlyphBox] = []
        for d in self.plotters:
            if not isinstance(d, GlyphBoxer):
                continue
            for b in d.glyph_boxes(self):
                size = b.size()
                if size.x > 0 and (b.x < 0 or b.x > 1):
                    continue
                if size.y > 0 and (b.y < 0 or b.y > 1):
                    continue
                boxes.append(b)
        return boxes

    def pad_x(self, c: BoundedCanvas) -> BoundedCanvas:
        """Shrink the frame horizontally so no glyph box sticks out of it."""
        glyphs = self.glyph_boxes() + HorizontalAxis(self.x).glyph_boxes(self)
        l = _left_most(c, glyphs)
        r = _right_most(c, glyphs)
        if l.x == r.x:
            return c
        minx = c.min.x - l.rect.min.x
        maxx = c.max.x - (r.rect.min.x + r.size().x)
        lx, rx = l.x, r.x
        n = (lx * maxx - rx * minx) / (lx - rx)
        m = ((lx - 1) * maxx - rx * minx + minx) / (lx - rx)
        return c.with_rect(Rectangle(Point(n, c.min.y), Point(m, c.max.y)))

    def pad_y(self, c: BoundedCanvas) -> BoundedCanvas:
        """Shrink the frame vertically so no glyph box sticks out of it."""
        glyphs = self.glyph_boxes() + VerticalAxis(self.y).glyph_boxes(self)
        b = _bottom_most(c, glyphs)
        t = _top_most(c, glyphs)
        if b.y == t.y:
            return c
        miny = c.min.y - b.rect.min.y
        maxy = c.max.y - (t.rect.min.y + t.size().y)
        by, ty = b.y, t.y
        n = (by * maxy - ty * miny) / (by - ty)
        m = ((by - 1) * maxy - ty * miny + miny) / (by - ty)
        return c.with_rect(Rectangle(Point(c.min.x, n), Point(c.max.x, m)))

    def transforms(self, c: BoundedCanvas) -> tuple[Callable[[float], Length], Callable[[float], Length]]:
        """Functions mapping data x and y values onto ``c``."""
        return (lambda v: c.x(self.x.norm(v))), (lambda v: c.y(self.y.norm(v)))

    def nominal_x(self, *names: str) -> "Plot":
        """Label the x axis with one name per integer position 0, 1, ..."""
        self.x.tick.line = self.x.tick.line.with_width(0.0)
        self.x.tick.length = 0.0
        self.x.line = self.x.line.with_width(0.0)
        if names:
            self.y.padding = self.x.tick.label.width(names[0]) / 2
        self.x.tick.marker = ConstantTicks(tuple(Tick(float(i), name) for i, name in enumerate(names)))
        return self

    def nominal_y(self, *names: str) -> "Plot":
        self.y.tick.line = self.y.tick.line.with_width(0.0)
        self.y.tick.length = 0.0
        self.y.line = self.y.line.with_width(0.0)
        if names:
            self.x.padding = self.y.tick.label.height(names[0]) / 2
        self.y.tick.marker = ConstantTicks(tuple(Tick(float(i), name) for i, name in enumerate(names)))
        return self

    def hide_x(self) -> "Plot":
        self.x.tick.length = 0.0
        self.x.line = self.x.line.with_width(0.0)
        self.x.tick.marker = ConstantTicks()
        return self

    def hide_y(self) -> "Plot":
        self.y.tick.length = 0.0
        self.y.line = self.y.line.with_width(0.0)
        self.y.tick.marker = ConstantTicks()
        return self

    def hide_axes(self) -> "Plot":
        return self.hide_x().hide_y()

    def save(self, width: Length, height: Length, filename: str | FilePath, *, dpi: float = DEFAULT_DPI) -> None:
        """Draw the plot and write it to ``filename``; the extension selects the format."""
        if self.error is not None:
            raise self.error
        path = FilePath(filename)
        fmt = path.suffix.lower().lstrip(".")
        canvas = new_canvas_for_format(fmt, width, height, dpi=dpi)
        self.draw(BoundedCanvas.of(canvas))
        LOGGER.debug("writing %s plot to %s", fmt, path)
        with path.open("wb") as f:
            write_canvas(canvas, f, fmt)


def _left_most(c: BoundedCanvas, boxes: Sequence[GlyphBox]) -> GlyphBox:
    minx = c.min.x
    left = GlyphBox()
    for b in boxes:
        if b.size().x <= 0:
            continue
        x = c.x(b.x) + b.rect.min.x
        if x < minx and b.x >= 0:
            minx = x
            left = b
    return left


def _right_most(c: BoundedCanvas, boxes: Sequence[GlyphBox]) -> GlyphBox:
    maxx = c.max.x
    right = GlyphBox(x=1.0)
    for b in boxes:
        if b.size().x <= 0:
            continue
        x = c.x(b.x) + b.rect.min.x + b.size().x
        if x > maxx and b.x <= 1:
            maxx = x
            right = b
    return right


def _bottom_most(c: BoundedCanvas, boxes: Sequence[GlyphBox]) -> GlyphBox:
    miny = c.min.y
    bottom = GlyphBox()
    for b in boxes:
        if b.size().y <= 0:
            continue
        y = c.y(b.y) + b.rect.min.y
        if y < miny and b.y >= 0:
            miny = y
            bottom = b
    return bottom


def _top_most(c: BoundedCanvas, boxes: Sequence[GlyphBox]) -> GlyphBox:
    maxy = c.max.y
    top = GlyphBox(y=1.0)
    for b in boxes:
        if b.size().y <= 0:
            continue
        y = c.y(b.y) + b.rect.min.y + b.size().y
        if y > maxy and b.y <= 1:
            maxy = y
            top = b
    return top


def align(plots: Sequence[Sequence[Plot | None]], tiles: Tiles, c: BoundedCanvas | Canvas) -> list[list[BoundedCanvas | None]]:
    """Lay plots out on ``tiles`` so data areas line up across rows and columns.

    Every plot in a row gets the same data-area y extent and every plot in a
    column the same x extent. ``None`` cells yield ``None``.
    """
    c = c if isinstance(c, BoundedCanvas) else BoundedCanvas.of(c)
    if len(plots) != tiles.rows:
        raise ValueError(f"plots has {len(plots)} rows, tiles has {tiles.rows}")
    for row in plots:
        if len(row) != tiles.cols:
            raise ValueError(f"plots row has {len(row)} columns, tiles has {tiles.cols}")

    cells = [[tiles.at(c, i, j) for i in range(tiles.cols)] for j in range(tiles.rows)]

    # Largest space each plot needs between its tile edge and its data area.
    left = [0.0] * tiles.cols
    right = [0.0] * tiles.cols
    bottom = [0.0] * tiles.rows
    top = [0.0] * tiles.rows
    for j, row in enumerate(plots):
        for i, p in enumerate(row):
            if p is None:
                continue
            cell = cells[j][i]
            data_c = p.data_canvas(cell)
            left[i] = max(left[i], data_c.min.x - cell.min.x)
            right[i] = max(right[i], cell.max.x - data_c.max.x)
            bottom[j] = max(bottom[j], data_c.min.y - cell.min.y)
            top[j] = max(top[j], cell.max.y - data_c.max.y)

    out: list[list[BoundedCanvas | None]] = []
    for j, row in enumerate(plots):
        out_row: list[BoundedCanvas | None] = []
        for i, p in enumerate(row):
            if p is None:
                out_row.append(None)
                continue
            # Shared data area, then grown back by this plot's own margins.
            shared = cells[j][i].crop(left[i], -right[i], bottom[j], -top[j])
            own = p.data_canvas(shared)
            out_row.append(
                shared.crop(
                    -(own.min.x - shared.min.x),
                    shared.max.x - own.max.x,
                    -(own.min.y - shared.min.y),
                    shared.max.y - own.max.y,
                )
            )
        out.append(out_row)
    return out
